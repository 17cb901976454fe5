"""Re-encode the Open Graph preview images so social crawlers fetch them quickly.

Two modes:

- lossless: re-save the PNG at maximum compression, keep it only if smaller;
- aggressive: search JPEG quality downwards until the file fits a size
  target, falling back to a max-compression PNG when no quality fits.
"""
from __future__ import annotations

import io
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence

from PIL import Image

from tapsite.emit import write_bytes_atomic

logger = logging.getLogger(__name__)

DEFAULT_OG_IMAGES: tuple[str, ...] = ("og-facebook.png", "og-twitter.png", "og-whatsapp.png", "og-premium.png")
DEFAULT_TARGET_KB = 280

JPEG_START_QUALITY = 60
JPEG_QUALITY_STEP = 5
JPEG_MAX_ATTEMPTS = 10


@dataclass(frozen=True)
class OptimizeResult:
    source: Path
    path: Path                      # file actually written; differs from source after a .png -> .jpg switch
    original_size: int
    new_size: int
    replaced: bool                  # False when the re-encode was discarded
    under_target: Optional[bool] = None

    @property
    def savings_pct(self) -> float:
        if self.original_size == 0:
            return 0.0
        return (self.original_size - self.new_size) / self.original_size * 100


def _encode_png(img: Image.Image) -> bytes:
    buf = io.BytesIO()
    img.save(buf, format="PNG", optimize=True, compress_level=9)
    return buf.getvalue()


def _encode_jpeg(img: Image.Image, quality: int) -> bytes:
    buf = io.BytesIO()
    img.save(buf, format="JPEG", quality=quality, progressive=True, optimize=True)
    return buf.getvalue()


def _flatten(img: Image.Image) -> Image.Image:
    """JPEG has no alpha channel; composite transparent images onto white."""
    if img.mode in ("RGBA", "LA") or (img.mode == "P" and "transparency" in img.info):
        rgba = img.convert("RGBA")
        background = Image.new("RGB", rgba.size, (255, 255, 255))
        background.paste(rgba, mask=rgba.getchannel("A"))
        return background
    return img.convert("RGB")


def optimize_png(path: Path) -> OptimizeResult:
    """Losslessly re-encode *path*, replacing it only when the result is smaller."""
    original_size = path.stat().st_size
    with Image.open(path) as img:
        img.load()
        data = _encode_png(img)

    if len(data) < original_size:
        write_bytes_atomic(path, data)
        logger.info("%s: %d KB -> %d KB", path.name, original_size // 1024, len(data) // 1024)
        return OptimizeResult(path, path, original_size, len(data), replaced=True)

    logger.info("%s: already optimal (%d KB), left unchanged", path.name, original_size // 1024)
    return OptimizeResult(path, path, original_size, original_size, replaced=False)


def optimize_aggressive(path: Path, target_kb: int = DEFAULT_TARGET_KB) -> OptimizeResult:
    """Shrink *path* below *target_kb* kilobytes if any JPEG quality allows it.

    Quality starts at 60 and drops by 5 for at most 10 attempts.  When the
    best JPEG still misses the target the image is written as a
    max-compression PNG instead.  A ``.png`` source that meets the target is
    replaced by a ``.jpg`` sibling and removed.
    """
    target_bytes = target_kb * 1024
    original_size = path.stat().st_size
    with Image.open(path) as img:
        img.load()
        rgb = _flatten(img)
        quality = JPEG_START_QUALITY
        data = b""
        for _ in range(JPEG_MAX_ATTEMPTS):
            data = _encode_jpeg(rgb, quality)
            logger.debug("%s: quality %d -> %d KB", path.name, quality, len(data) // 1024)
            if len(data) <= target_bytes:
                break
            quality -= JPEG_QUALITY_STEP
        fmt = "JPEG"
        under_target = len(data) <= target_bytes
        if not under_target:
            data = _encode_png(img)
            fmt = "PNG"
            under_target = len(data) <= target_bytes

    final_path = path
    if under_target and fmt == "JPEG" and path.suffix.lower() == ".png":
        final_path = path.with_suffix(".jpg")

    write_bytes_atomic(final_path, data)
    if final_path != path:
        path.unlink()
        logger.info("%s: renamed to %s", path.name, final_path.name)

    if under_target:
        logger.info("%s: %d KB -> %d KB, under %d KB target",
                    final_path.name, original_size // 1024, len(data) // 1024, target_kb)
    else:
        logger.warning("%s: %d KB -> %d KB, still above %d KB target",
                       final_path.name, original_size // 1024, len(data) // 1024, target_kb)
    return OptimizeResult(path, final_path, original_size, len(data), replaced=True, under_target=under_target)


def optimize_images(
    site_dir: Path,
    names: Sequence[str] = DEFAULT_OG_IMAGES,
    aggressive: bool = False,
    target_kb: int = DEFAULT_TARGET_KB,
) -> list[OptimizeResult]:
    """Optimize every image in *names* that exists under *site_dir*.

    Missing files are skipped.  A file that cannot be decoded or written is
    logged and skipped; the remaining files are still processed.
    """
    results = []
    for name in names:
        path = site_dir / name
        if not path.exists():
            logger.debug("%s: not found, skipping", name)
            continue
        try:
            if aggressive:
                result = optimize_aggressive(path, target_kb)
            else:
                result = optimize_png(path)
        except OSError as exc:
            logger.error("%s: optimization failed: %s", name, exc)
            continue
        results.append(result)
    return results
