"""Tests for the rest countdown."""
import pytest

from fitplan_api.errors import ValidationError
from fitplan_api.session.engine import RestTimer


class TestRestTimer:
    def test_runs_to_zero_in_exactly_duration_ticks(self, scheduler):
        completions = []
        timer = RestTimer(scheduler, on_complete=lambda: completions.append(True))
        timer.start(90)

        scheduler.advance(89)
        assert timer.active
        assert timer.remaining == 1

        scheduler.advance(1)
        assert timer.remaining == 0
        assert not timer.active
        assert completions == [True]
        assert scheduler.active_handles == []

    def test_extra_ticks_after_completion_do_nothing(self, scheduler):
        completions = []
        timer = RestTimer(scheduler, on_complete=lambda: completions.append(True))
        timer.start(3)
        scheduler.advance(10)
        assert timer.remaining == 0
        assert completions == [True]

    def test_pause_holds_remaining(self, scheduler):
        timer = RestTimer(scheduler)
        timer.start(90)
        scheduler.advance(20)
        timer.pause()

        scheduler.advance(45)
        assert timer.remaining == 70
        assert timer.paused
        assert scheduler.active_handles == []

        timer.resume()
        scheduler.advance(5)
        assert timer.remaining == 65
        assert not timer.paused

    def test_direct_tick_while_paused_is_ignored(self, scheduler):
        timer = RestTimer(scheduler)
        timer.start(10)
        timer.pause()
        timer.tick()
        assert timer.remaining == 10

    def test_restart_replaces_running_countdown(self, scheduler):
        timer = RestTimer(scheduler)
        timer.start(90)
        scheduler.advance(50)
        timer.start(90)
        assert timer.remaining == 90
        assert len(scheduler.active_handles) == 1

    def test_restart_while_paused_unpauses(self, scheduler):
        timer = RestTimer(scheduler)
        timer.start(90)
        timer.pause()
        timer.start(30)
        assert not timer.paused
        scheduler.advance(1)
        assert timer.remaining == 29

    def test_reset_clears_everything(self, scheduler):
        timer = RestTimer(scheduler)
        timer.start(90)
        scheduler.advance(5)
        timer.reset()
        assert not timer.active
        assert timer.remaining == 0
        assert timer.snapshot() is None
        assert scheduler.active_handles == []

    def test_resume_without_pause_is_noop(self, scheduler):
        timer = RestTimer(scheduler)
        timer.start(90)
        timer.resume()
        assert len(scheduler.active_handles) == 1

    @pytest.mark.parametrize("duration", [0, -5])
    def test_non_positive_duration_rejected(self, scheduler, duration):
        timer = RestTimer(scheduler)
        with pytest.raises(ValidationError):
            timer.start(duration)
        assert not timer.active
