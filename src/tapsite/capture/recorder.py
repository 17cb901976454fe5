"""Headless-browser capture of the animated trailer page.

Three mutually exclusive strategies:

- ``virtual``: Chromium virtual time is paused and advanced one frame period
  at a time over CDP, so every screenshot lands on an exact animation time;
- ``wallclock``: the same frame schedule driven by real sleeps (subject to
  scheduling jitter);
- ``realtime``: Playwright's native video recording of the page playing
  itself with ``?autoplay=true``.

Every strategy checks for the encoder before launching a browser.
"""

from __future__ import annotations

import enum
import logging
import shutil
import time
from dataclasses import dataclass
from fractions import Fraction
from pathlib import Path
from typing import Callable, Optional, Protocol

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import sync_playwright

from tapsite.capture.encoder import check_encoder, encode_frames, frame_filename, transcode_recording
from tapsite.capture.storyboard import CaptureState, FrameStep, frame_schedule
from tapsite.config import CaptureSettings, Storyboard
from tapsite.errors import CaptureError, EncodeError

logger = logging.getLogger(__name__)

BUDGET_EXPIRED_EVENT = "Emulation.virtualTimeBudgetExpired"
NEXT_SCENE_SCRIPT = "nextScene()"
AUTOPLAY_QUERY = "?autoplay=true"
RAW_VIDEO_DIR_NAME = "trailer-video"
CHROMIUM_ARGS = ["--allow-file-access-from-files"]


class Strategy(str, enum.Enum):
    VIRTUAL = "virtual"
    REALTIME = "realtime"
    WALLCLOCK = "wallclock"


@dataclass
class CaptureResult:
    output: Path
    strategy: Strategy
    state: CaptureState
    frames: int = 0
    fallback: bool = False      # True when only the raw .webm recording could be kept


class FrameStepper(Protocol):
    def start(self) -> None: ...

    def advance(self, period_ms: Fraction) -> None: ...


class VirtualTimeStepper:
    """Advance Chromium's virtual clock over a CDP session, one budget per frame.

    ``budget`` is in milliseconds.  Each advance waits for the
    ``virtualTimeBudgetExpired`` event, bounded by *ack_timeout_ms*.
    """

    def __init__(self, cdp, page, ack_timeout_ms: int = 1000, poll_ms: int = 1) -> None:
        self.cdp = cdp
        self.page = page
        self.ack_timeout_ms = ack_timeout_ms
        self.poll_ms = poll_ms
        self._expired = False
        self.late_acks = 0

    def _on_budget_expired(self, _params=None) -> None:
        self._expired = True

    def start(self) -> None:
        self.cdp.on(BUDGET_EXPIRED_EVENT, self._on_budget_expired)
        self.cdp.send("Emulation.setVirtualTimePolicy", {"policy": "pause"})

    def advance(self, period_ms: Fraction) -> None:
        self._expired = False
        self.cdp.send("Emulation.setVirtualTimePolicy", {"policy": "advance", "budget": float(period_ms)})
        waited = 0
        # CDP events are dispatched while the sync API is waiting on the driver.
        while not self._expired and waited < self.ack_timeout_ms:
            self.page.wait_for_timeout(self.poll_ms)
            waited += self.poll_ms
        if not self._expired:
            self.late_acks += 1
            logger.warning("virtual time budget not acknowledged within %d ms", self.ack_timeout_ms)


class WallClockStepper:
    """Let real time pass between frames."""

    def __init__(self, sleep: Optional[Callable[[float], None]] = None) -> None:
        self.sleep = sleep or time.sleep

    def start(self) -> None:
        pass

    def advance(self, period_ms: Fraction) -> None:
        self.sleep(float(period_ms) / 1000)


def _enter(state: CaptureState) -> CaptureState:
    logger.info("capture state -> %s", state.value)
    return state


def _reset_dir(path: Path) -> None:
    if path.exists():
        shutil.rmtree(path)
    path.mkdir(parents=True)


def _trailer_uri(trailer_path: Path) -> str:
    if not trailer_path.exists():
        raise CaptureError(f"Trailer page not found: {trailer_path}")
    return trailer_path.resolve().as_uri()


def capture_frames(
    page,
    stepper: FrameStepper,
    storyboard: Storyboard,
    frames_dir: Path,
    on_advance: Optional[Callable[[FrameStep], None]] = None,
    on_frame: Optional[Callable[[FrameStep], None]] = None,
) -> int:
    """Screenshot every scheduled frame into *frames_dir*; return the frame count.

    After each screenshot the stepper moves time on by one frame period, and
    ``nextScene()`` runs in the page wherever the schedule crosses a scene
    boundary.
    """
    period = storyboard.frame_period_ms
    stepper.start()
    count = 0
    for step in frame_schedule(storyboard):
        page.screenshot(path=str(frames_dir / frame_filename(step.index)), type="png")
        stepper.advance(period)
        count += 1
        if step.advance:
            page.evaluate(NEXT_SCENE_SCRIPT)
            logger.debug("scene %d -> %d at %.1f ms", step.scene + 1, step.scene + 2, float(step.time_ms + period))
            if on_advance is not None:
                on_advance(step)
        if on_frame is not None:
            on_frame(step)
    return count


def record_frames(
    trailer_path: Path,
    output: Path,
    storyboard: Storyboard,
    settings: CaptureSettings,
    clock: Strategy = Strategy.VIRTUAL,
    on_frame: Optional[Callable[[FrameStep], None]] = None,
) -> CaptureResult:
    """Capture the trailer frame by frame and encode it to *output*.

    The frames directory sits next to *output* and is recreated on every run.
    It is deleted after a successful encode and left in place when the
    encode fails.

    Raises:
        EncoderNotFoundError: Before anything else, if ffmpeg is unavailable.
        CaptureError: If the trailer page is missing or the browser fails.
        EncodeError: If ffmpeg fails to encode the frames.
    """
    if clock == Strategy.REALTIME:
        raise ValueError("record_frames drives frame strategies only; use record_realtime")
    check_encoder()
    state = _enter(CaptureState.IDLE)
    uri = _trailer_uri(trailer_path)
    frames_dir = output.parent / settings.frames_dir_name

    with sync_playwright() as playwright:
        browser = playwright.chromium.launch(headless=True, args=CHROMIUM_ARGS)
        try:
            context = browser.new_context(viewport=settings.viewport)
            page = context.new_page()
            page.goto(uri, wait_until="networkidle")
            page.wait_for_timeout(settings.settle_ms)
            state = _enter(CaptureState.LOADED)

            _reset_dir(frames_dir)
            if clock == Strategy.VIRTUAL:
                stepper = VirtualTimeStepper(context.new_cdp_session(page), page, settings.ack_timeout_ms)
            else:
                stepper = WallClockStepper()
            state = _enter(CaptureState.RECORDING)
            frames = capture_frames(page, stepper, storyboard, frames_dir, on_frame=on_frame)
            context.close()
        except PlaywrightError as exc:
            raise CaptureError(str(exc)) from exc
        finally:
            browser.close()
    state = _enter(CaptureState.STOPPED)
    logger.info("captured %d frames into %s", frames, frames_dir)

    encode_frames(frames_dir, storyboard.fps, output)
    state = _enter(CaptureState.ENCODED)
    shutil.rmtree(frames_dir)
    return CaptureResult(output=output, strategy=clock, state=state, frames=frames)


def record_realtime(
    trailer_path: Path,
    output: Path,
    storyboard: Storyboard,
    settings: CaptureSettings,
    on_progress: Optional[Callable[[int, int], None]] = None,
    monotonic: Optional[Callable[[], float]] = None,
) -> CaptureResult:
    """Record the autoplaying trailer in real time and transcode it to *output*.

    The recording starts with the page, but the trailer only starts playing
    once the page has loaded.  That offset is measured and cut by the
    transcode, which also limits the MP4 to ``storyboard.total_duration_ms``
    so it runs exactly as long as the frame strategies' output.

    If the transcode fails the raw recording is kept as ``<output>.webm`` and
    the result is flagged as a fallback rather than raising.
    """
    monotonic = monotonic or time.monotonic
    check_encoder()
    state = _enter(CaptureState.IDLE)
    uri = _trailer_uri(trailer_path) + AUTOPLAY_QUERY
    video_dir = output.parent / RAW_VIDEO_DIR_NAME
    _reset_dir(video_dir)

    total = storyboard.total_duration_ms
    record_for = total + settings.realtime_tail_ms
    with sync_playwright() as playwright:
        browser = playwright.chromium.launch(headless=True, args=CHROMIUM_ARGS)
        try:
            context = browser.new_context(
                viewport=settings.viewport,
                record_video_dir=str(video_dir),
                record_video_size=settings.viewport,
            )
            video_started = monotonic()
            page = context.new_page()
            page.goto(uri, wait_until="networkidle")
            offset_ms = (monotonic() - video_started) * 1000
            state = _enter(CaptureState.LOADED)

            # The trailer is already playing; the settle delay counts toward its duration.
            state = _enter(CaptureState.RECORDING)
            elapsed = min(settings.realtime_settle_ms, record_for)
            page.wait_for_timeout(elapsed)
            while elapsed < record_for:
                step = min(settings.progress_interval_ms, record_for - elapsed)
                page.wait_for_timeout(step)
                elapsed += step
                if on_progress is not None:
                    on_progress(min(elapsed, total), total)

            video = page.video
            # Closing the page and context flushes the recording to disk.
            page.close()
            raw = Path(video.path()) if video is not None else None
            context.close()
        except PlaywrightError as exc:
            raise CaptureError(str(exc)) from exc
        finally:
            browser.close()
    state = _enter(CaptureState.STOPPED)
    logger.info("recorded %d ms, trimming %.0f ms of page load", record_for, offset_ms)

    if raw is None or not raw.exists():
        raise CaptureError("Browser closed without writing a video recording.")

    try:
        transcode_recording(raw, storyboard.fps, output, start_ms=offset_ms, duration_ms=total)
    except EncodeError as exc:
        fallback = output.with_suffix(".webm")
        shutil.move(str(raw), fallback)
        shutil.rmtree(video_dir, ignore_errors=True)
        logger.warning("transcode failed, kept raw recording as %s: %s", fallback.name, exc.detail)
        return CaptureResult(output=fallback, strategy=Strategy.REALTIME, state=state, fallback=True)

    state = _enter(CaptureState.ENCODED)
    shutil.rmtree(video_dir)
    return CaptureResult(output=output, strategy=Strategy.REALTIME, state=state)
