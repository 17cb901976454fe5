"""Pure frame timing for the trailer storyboard.

Scene boundaries are tracked in exact rational milliseconds.  Time left over
when a scene ends is carried into the next scene, so the scene changes land
on the frames closest to the storyboard's cumulative boundaries and there are
exactly ``scene_count - 1`` of them.
"""
from __future__ import annotations

import enum
from dataclasses import dataclass
from fractions import Fraction
from typing import Iterator

from tapsite.config import Storyboard


class CaptureState(str, enum.Enum):
    IDLE = "idle"
    LOADED = "loaded"
    RECORDING = "recording"
    STOPPED = "stopped"
    ENCODED = "encoded"


@dataclass(frozen=True)
class FrameStep:
    index: int              # 0-based frame number
    scene: int              # 0-based scene shown in this frame
    time_ms: Fraction       # capture timestamp from the start of the trailer
    advance: bool           # nextScene() must run after this frame is captured


def frame_schedule(storyboard: Storyboard) -> Iterator[FrameStep]:
    """Yield one FrameStep per captured frame, ``storyboard.total_frames`` in all."""
    period = storyboard.frame_period_ms
    durations = storyboard.scene_durations
    last_scene = storyboard.scene_count - 1

    scene = 0
    scene_time = Fraction(0)
    for index in range(storyboard.total_frames):
        scene_time += period
        advance = scene < last_scene and scene_time >= durations[scene]
        yield FrameStep(index=index, scene=scene, time_ms=index * period, advance=advance)
        if advance:
            scene_time -= durations[scene]
            scene += 1


def advance_times_ms(storyboard: Storyboard) -> list[Fraction]:
    """Trailer time at which each scene change takes effect."""
    period = storyboard.frame_period_ms
    return [step.time_ms + period for step in frame_schedule(storyboard) if step.advance]
