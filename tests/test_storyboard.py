"""Unit tests for the pure trailer frame schedule."""

from __future__ import annotations

from fractions import Fraction

from tapsite.capture.storyboard import advance_times_ms, frame_schedule
from tapsite.config import Storyboard, default_storyboard


class TestFrameSchedule:
    def test_three_scene_example(self) -> None:
        storyboard = Storyboard(scene_durations=(1200, 1000, 1500), fps=30)
        steps = list(frame_schedule(storyboard))

        assert len(steps) == 111
        assert [s.index for s in steps if s.advance] == [35, 65]
        assert advance_times_ms(storyboard) == [1200, 2200]

    def test_scene_numbers_follow_advances(self) -> None:
        steps = list(frame_schedule(Storyboard(scene_durations=(1200, 1000, 1500), fps=30)))
        assert steps[0].scene == 0
        assert steps[35].scene == 0
        assert steps[36].scene == 1
        assert steps[66].scene == 2
        assert steps[-1].scene == 2
        assert sum(1 for s in steps if s.scene == 0) == 36
        assert sum(1 for s in steps if s.scene == 1) == 30
        assert sum(1 for s in steps if s.scene == 2) == 45

    def test_last_scene_never_advances(self) -> None:
        steps = list(frame_schedule(Storyboard(scene_durations=(100, 100), fps=30)))
        assert sum(s.advance for s in steps) == 1
        assert not steps[-1].advance

    def test_default_storyboard_advances_once_per_boundary(self) -> None:
        storyboard = default_storyboard()
        steps = list(frame_schedule(storyboard))
        assert len(steps) == storyboard.total_frames
        assert sum(s.advance for s in steps) == storyboard.scene_count - 1

    def test_overflow_is_carried_into_next_scene(self) -> None:
        # 1010 ms is not a whole number of 33.3 ms frames; the boundary must not drift.
        storyboard = Storyboard(scene_durations=(1010, 1000, 1000), fps=30)
        times = advance_times_ms(storyboard)
        assert len(times) == 2
        assert times[0] == Fraction(3100, 3)     # first frame edge at or after 1010 ms
        assert times[1] == Fraction(6100, 3)     # first frame edge at or after 2010 ms

    def test_timestamps_are_exact(self) -> None:
        steps = list(frame_schedule(Storyboard(scene_durations=(1000,), fps=24)))
        assert len(steps) == 24
        assert steps[3].time_ms == Fraction(125)
        assert steps[-1].time_ms == Fraction(2875, 3)

    def test_single_scene(self) -> None:
        steps = list(frame_schedule(Storyboard(scene_durations=(500,), fps=30)))
        assert len(steps) == 15
        assert not any(s.advance for s in steps)
