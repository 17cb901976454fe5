from pathlib import Path


class TapSiteError(Exception):
    """Base class for all tapsite errors."""


class TranslationError(TapSiteError):
    def __init__(self, source: Path | str, detail: str) -> None:
        name = source.name if isinstance(source, Path) else source
        super().__init__(
            f"Cannot use translations from '{name}'.\n"
            f"  Cause: {detail}\n"
            f"  Check: Is the file valid JSON keyed by language code?\n"
            f"  Tip: Every language record should carry the same keys as the 'en' record."
        )
        self.source = source
        self.detail = detail


class TemplateMarkerError(TapSiteError):
    def __init__(self, template: Path | str, missing: list[str]) -> None:
        name = template.name if isinstance(template, Path) else template
        listed = "\n".join(f"    - {marker!r}" for marker in missing)
        super().__init__(
            f"Base template '{name}' is missing {len(missing)} translation marker(s):\n"
            f"{listed}\n"
            f"  Check: Has the English markup in the template changed since the marker table was written?\n"
            f"  Tip: Update the marker table in tapsite.render.trailer to match the template."
        )
        self.template = template
        self.missing = missing


class EncoderNotFoundError(TapSiteError):
    def __init__(self, binary: str = "ffmpeg") -> None:
        super().__init__(
            f"Video encoder '{binary}' was not found.\n"
            f"  Check: Is FFmpeg installed and in PATH?\n"
            f"  Tip: Install FFmpeg from https://ffmpeg.org/download.html and run `{binary} -version`."
        )
        self.binary = binary


class EncodeError(TapSiteError):
    def __init__(self, output_path: Path, detail: str) -> None:
        super().__init__(
            f"FFmpeg encode failed for '{output_path.name}'.\n"
            f"  Cause: {detail}\n"
            f"  Check: Is there enough disk space? Are the captured frames readable?\n"
            f"  Tip: Run the FFmpeg command manually with the same arguments to see full output."
        )
        self.output_path = output_path
        self.detail = detail


class CaptureError(TapSiteError):
    def __init__(self, detail: str) -> None:
        super().__init__(
            f"Trailer capture failed.\n"
            f"  Cause: {detail}\n"
            f"  Check: Is Chromium installed for Playwright? Run `playwright install chromium`."
        )
        self.detail = detail
