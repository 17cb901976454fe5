"""FFmpeg encoding of captured trailer frames and raw browser recordings.

Both paths produce the same H.264 MP4 (libx264, slow preset, CRF 18,
yuv420p, faststart).  Encoder failures are translated into ``EncodeError``
with the tail of FFmpeg's stderr; raw process errors never escape.
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import Optional

from better_ffmpeg_progress import FfmpegProcess
from better_ffmpeg_progress.exceptions import FfmpegProcessError

from tapsite.errors import EncodeError, EncoderNotFoundError

logger = logging.getLogger(__name__)

FFMPEG = "ffmpeg"
FRAME_PATTERN = "frame-%06d.png"

# Shared H.264 output settings.
_X264_ARGS = [
    "-c:v", "libx264",
    "-preset", "slow",
    "-crf", "18",
    "-pix_fmt", "yuv420p",
    "-movflags", "+faststart",
]


def frame_filename(index: int) -> str:
    return FRAME_PATTERN % index


def check_encoder() -> str:
    """Return the first line of ``ffmpeg -version``.

    Raises:
        EncoderNotFoundError: If ffmpeg is not on PATH or does not run.
    """
    try:
        result = subprocess.run([FFMPEG, "-version"], capture_output=True, text=True, check=False)
    except (FileNotFoundError, PermissionError) as exc:
        raise EncoderNotFoundError(FFMPEG) from exc
    if result.returncode != 0:
        raise EncoderNotFoundError(FFMPEG)
    version = result.stdout.splitlines()[0] if result.stdout else FFMPEG
    logger.debug("Using %s", version)
    return version


def encode_frames(frames_dir: Path, fps: int, output: Path) -> Path:
    """Encode ``frames_dir/frame-%06d.png`` at *fps* into *output*.

    Raises:
        EncodeError: If FFmpeg exits non-zero or produces no file.
    """
    cmd = [
        FFMPEG, "-y",
        "-framerate", str(fps),
        "-i", str(frames_dir / FRAME_PATTERN),
        *_X264_ARGS,
        str(output),
    ]
    logger.info("Encoding %s at %d fps -> %s", frames_dir.name, fps, output.name)
    try:
        result = subprocess.run(cmd, capture_output=True, text=True, check=False)
    except FileNotFoundError as exc:
        raise EncoderNotFoundError(FFMPEG) from exc
    if result.returncode != 0:
        raise EncodeError(output, f"FFmpeg exited with code {result.returncode}:\n{result.stderr[-500:]}")
    if not output.exists():
        raise EncodeError(output, "FFmpeg exited 0 but wrote no output file.")
    return output


def transcode_recording(
    source: Path,
    fps: int,
    output: Path,
    start_ms: float = 0,
    duration_ms: Optional[int] = None,
) -> Path:
    """Re-encode a raw browser recording (WebM) to the trailer MP4 at a constant *fps*.

    *start_ms* of leading footage (page load before the trailer started) is
    cut, and the output is limited to *duration_ms* when given.

    Raises:
        EncodeError: If FFmpeg fails or produces no file.
    """
    cmd = [FFMPEG, "-y"]
    if start_ms > 0:
        cmd += ["-ss", f"{start_ms / 1000:.3f}"]
    cmd += ["-i", str(source)]
    if duration_ms is not None:
        cmd += ["-t", f"{duration_ms / 1000:.3f}"]
    cmd += [*_X264_ARGS, "-r", str(fps), str(output)]
    logger.info("Transcoding %s -> %s", source.name, output.name)
    try:
        process = FfmpegProcess(cmd)
        return_code = process.run()
    except FfmpegProcessError as exc:
        raise EncodeError(output, str(exc)[-500:]) from exc
    if return_code:
        raise EncodeError(output, f"FFmpeg exited with code {return_code}")
    if not output.exists():
        raise EncodeError(output, "FFmpeg exited 0 but wrote no output file.")
    return output
