"""Write generated documents to their language-specific location under the site directory."""
import logging
import os
import tempfile
from pathlib import Path

from tapsite.config import SiteConfig

logger = logging.getLogger(__name__)


def output_path(site_dir: Path, lang: str, filename: str, config: SiteConfig) -> Path:
    """Return ``site_dir/filename`` for the default language, ``site_dir/<lang>/filename`` otherwise."""
    if lang == config.default_language:
        return site_dir / filename
    return site_dir / lang / filename


def write_bytes_atomic(path: Path, data: bytes) -> None:
    """Atomically write *data* to *path*, creating parent directories as needed.

    The temp file lives in the destination directory so os.replace() stays on
    one filesystem.  Readers see either the old document or the new one.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_path = tempfile.mkstemp(dir=path.parent, suffix=".tmp")
    try:
        try:
            os.write(fd, data)
            os.fsync(fd)
        finally:
            os.close(fd)
        os.replace(tmp_path, path)
    except Exception:
        Path(tmp_path).unlink(missing_ok=True)
        raise


def write_text_atomic(path: Path, text: str) -> None:
    write_bytes_atomic(path, text.encode("utf-8"))


def emit_page(site_dir: Path, lang: str, filename: str, html: str, config: SiteConfig) -> Path:
    path = output_path(site_dir, lang, filename, config)
    write_text_atomic(path, html)
    logger.info("Generated %s", path.relative_to(site_dir))
    return path
