import pytest

from conftest import make_dataset
from signhub.cctv import SlotMode
from signhub.errors import FetchFailure
from signhub.marquee import NoticesMetrics
from signhub.models import CANONICAL_ORDER, Phase, Screen

# Default timings: 10s dwell, 0.5s exit, entrance starts 0.2s early and
# lasts 0.8s, so a transition completes 1.1s after it starts.
DWELL = 10
TRANSITION = 1.2  # with a little slack


def two_screens(**kwargs):
    return make_dataset(birthdays=False, cctv=False, **kwargs)


class TestInitialLoad:

    def test_idle_before_first_fetch(self, make_scheduler):
        scheduler = make_scheduler(two_screens())
        assert scheduler.state.phase is Phase.IDLE
        assert scheduler.dataset is None

    def test_first_screen_revealed_without_animation(self, make_scheduler, renderer, loop):
        scheduler = make_scheduler(two_screens())
        scheduler.start()
        loop.advance(0)

        assert scheduler.state.phase is Phase.SHOWING
        assert scheduler.state.active_screens == [Screen.NOTICES, Screen.EVENTS]
        assert scheduler.state.current_index == 0
        assert scheduler.state.displayed is Screen.NOTICES
        renderer.hide_all.assert_called_once_with(CANONICAL_ORDER)
        renderer.render_notices.assert_called_once()
        renderer.reveal.assert_called_once_with(Screen.NOTICES)
        renderer.play_entrance.assert_not_called()

    def test_retries_every_five_seconds(self, make_scheduler, renderer, loop):
        scheduler = make_scheduler(FetchFailure("down"), FetchFailure("down"), two_screens())
        scheduler.start()

        loop.advance(0)
        assert scheduler.client.calls == 1
        assert scheduler.state.phase is Phase.IDLE

        loop.advance(4.8)
        assert scheduler.client.calls == 1

        loop.advance(0.3)
        assert scheduler.client.calls == 2
        assert scheduler.state.phase is Phase.IDLE
        renderer.reveal.assert_not_called()

        loop.advance(5)
        assert scheduler.client.calls == 3
        assert scheduler.state.phase is Phase.SHOWING
        renderer.reveal.assert_called_once_with(Screen.NOTICES)


class TestRotation:

    def test_wraps_around(self, make_scheduler, renderer, loop):
        scheduler = make_scheduler(two_screens())
        scheduler.start()
        loop.advance(0)

        loop.advance(DWELL)
        assert scheduler.state.phase is Phase.TRANSITIONING
        assert scheduler.state.current_index == 1
        assert scheduler.state.transition.from_screen is Screen.NOTICES
        assert scheduler.state.transition.to_screen is Screen.EVENTS

        loop.advance(TRANSITION)
        assert scheduler.state.phase is Phase.SHOWING
        assert scheduler.state.displayed is Screen.EVENTS
        assert scheduler.state.transition is None
        renderer.play_exit.assert_called_once_with(Screen.NOTICES, scheduler.exit_animation)
        renderer.play_entrance.assert_called_once_with(Screen.EVENTS, scheduler.entrance_animation)
        renderer.hide.assert_called_once_with(Screen.NOTICES)
        renderer.render_events.assert_called_once()

        loop.advance(DWELL)
        loop.advance(TRANSITION)
        assert scheduler.state.current_index == 0
        assert scheduler.state.displayed is Screen.NOTICES

    def test_entrance_overlaps_exit(self, make_scheduler, renderer, loop):
        scheduler = make_scheduler(two_screens())
        scheduler.start()
        loop.advance(0)

        loop.advance(DWELL + 0.35)
        # Entrance has started, exit not yet finished
        renderer.play_entrance.assert_called_once()
        renderer.hide.assert_not_called()
        assert scheduler.state.phase is Phase.TRANSITIONING

        loop.advance(0.2)
        renderer.hide.assert_called_once_with(Screen.NOTICES)

    def test_full_cycle_order(self, make_scheduler, renderer, loop):
        scheduler = make_scheduler(make_dataset(birthday_dates=["03-15"]))
        scheduler.start()
        loop.advance(0)
        for _ in range(4):
            loop.advance(DWELL + TRANSITION)

        entered = [c.args[0] for c in renderer.play_entrance.call_args_list]
        assert entered == [Screen.EVENTS, Screen.BIRTHDAYS, Screen.CCTV, Screen.NOTICES]

    def test_birthdays_screen_shows_only_today(self, make_scheduler, renderer, loop):
        scheduler = make_scheduler(make_dataset(notices=False, events=False, cctv=False,
                                                birthday_dates=["03-15", "07-01"]))
        scheduler.start()
        loop.advance(0)

        assert scheduler.state.displayed is Screen.BIRTHDAYS
        (shown,), _ = renderer.render_birthdays.call_args
        assert [b.date for b in shown] == ["03-15"]

    def test_cctv_screen_gets_directives(self, make_scheduler, renderer, loop):
        scheduler = make_scheduler(make_dataset(notices=False, events=False))
        scheduler.start()
        loop.advance(0)

        (directives,), _ = renderer.render_cctv.call_args
        assert len(directives) == 4
        assert directives[0].label == "Lobby"
        assert directives[0].mode is SlotMode.IMAGE

    def test_render_error_does_not_stall(self, make_scheduler, renderer, loop, capsys):
        renderer.render_events.side_effect = RuntimeError("template missing")
        scheduler = make_scheduler(two_screens())
        scheduler.start()
        loop.advance(0)
        loop.advance(DWELL + TRANSITION)

        assert scheduler.state.displayed is Screen.EVENTS
        assert scheduler.state.phase is Phase.SHOWING
        assert "template missing" in capsys.readouterr().out


class TestDwellTime:

    def test_default_dwell(self, make_scheduler, loop):
        scheduler = make_scheduler(two_screens())
        scheduler.start()
        loop.advance(0)
        assert scheduler.state.marquee_duration is None
        assert scheduler.dwell_time(Screen.NOTICES) == 10

        loop.advance(DWELL - 0.1)
        assert scheduler.state.phase is Phase.SHOWING

    def test_marquee_extends_notices_dwell(self, make_scheduler, renderer, loop):
        scheduler = make_scheduler(two_screens(), metrics=NoticesMetrics(1200, 400, 200))
        scheduler.start()
        loop.advance(0)

        assert scheduler.state.marquee_duration == pytest.approx(34.0)
        assert scheduler.dwell_time(Screen.NOTICES) == pytest.approx(34.0)
        assert scheduler.dwell_time(Screen.EVENTS) == 10
        (_, schedule), _ = renderer.render_notices.call_args
        assert schedule.steps_needed == 4

        loop.advance(33.9)
        assert scheduler.state.phase is Phase.SHOWING
        assert scheduler.state.displayed is Screen.NOTICES

        loop.advance(0.2)
        assert scheduler.state.phase is Phase.TRANSITIONING

    def test_marquee_recomputed_on_refresh(self, make_scheduler, loop):
        scheduler = make_scheduler(two_screens(), metrics=NoticesMetrics(1200, 400, 200))
        scheduler.start()
        loop.advance(0)

        scheduler.layout.measure.return_value = NoticesMetrics(300, 400, 200)
        assert scheduler.background_refresh() is True
        assert scheduler.state.marquee_duration is None
        assert scheduler.dwell_time(Screen.NOTICES) == 10

    def test_configured_screen_duration(self, make_scheduler, loop):
        scheduler = make_scheduler(two_screens())
        scheduler.screen_durations = {"events": 20}
        assert scheduler.dwell_time(Screen.EVENTS) == 20
        assert scheduler.dwell_time(Screen.NOTICES) == 10


class TestBackgroundRefresh:

    def test_polls_every_thirty_seconds(self, make_scheduler, loop):
        scheduler = make_scheduler(two_screens())
        scheduler.start()
        loop.advance(0)
        assert scheduler.client.calls == 1

        loop.advance(29.8)
        assert scheduler.client.calls == 1
        loop.advance(0.3)
        assert scheduler.client.calls == 2
        loop.advance(30)
        assert scheduler.client.calls == 3

    def test_failure_keeps_last_good_data(self, make_scheduler, loop, capsys):
        first = two_screens()
        scheduler = make_scheduler(first, FetchFailure("server gone"))
        scheduler.start()
        loop.advance(0)

        loop.advance(30)
        assert scheduler.client.calls == 2
        assert scheduler.dataset is first
        assert scheduler.state.phase is not Phase.IDLE
        assert "server gone" in capsys.readouterr().out

        # No accelerated retry, just the next regular poll
        loop.advance(29.8)
        assert scheduler.client.calls == 2
        loop.advance(0.3)
        assert scheduler.client.calls == 3

    def test_refresh_mid_transition(self, make_scheduler, renderer, loop):
        first = two_screens(notice_titles=("Old notice",))
        second = two_screens(notice_titles=("New notice",))
        scheduler = make_scheduler(first, second)
        scheduler.start()
        loop.advance(0)

        loop.advance(DWELL + 0.4)
        transition = scheduler.state.transition
        assert scheduler.state.phase is Phase.TRANSITIONING

        assert scheduler.background_refresh() is True
        assert scheduler.dataset is second
        assert scheduler.state.current_index == 1
        assert scheduler.state.transition is transition
        assert scheduler.state.phase is Phase.TRANSITIONING

        loop.advance(TRANSITION)
        assert scheduler.state.phase is Phase.SHOWING
        assert scheduler.state.displayed is Screen.EVENTS
        renderer.hide.assert_called_once_with(Screen.NOTICES)
        renderer.play_entrance.assert_called_once_with(Screen.EVENTS, scheduler.entrance_animation)

        # The next time notices are shown they carry the refreshed data
        loop.advance(DWELL + TRANSITION)
        (notices, _), _ = renderer.render_notices.call_args
        assert [n.title for n in notices] == ["New notice"]

    def test_refresh_does_not_touch_shown_content(self, make_scheduler, renderer, loop):
        scheduler = make_scheduler(two_screens(), two_screens(notice_titles=("Changed",)))
        scheduler.start()
        loop.advance(0)
        renders = renderer.render_notices.call_count

        scheduler.background_refresh()
        assert renderer.render_notices.call_count == renders
        assert scheduler.state.current_index == 0
        assert scheduler.state.displayed is Screen.NOTICES


class TestMembershipChanges:

    def test_single_screen_holds_and_refreshes(self, make_scheduler, renderer, loop):
        only_notices = make_dataset(events=False, birthdays=False, cctv=False)
        scheduler = make_scheduler(only_notices)
        scheduler.start()
        loop.advance(0)

        loop.advance(DWELL)
        assert scheduler.client.calls == 2
        assert scheduler.state.phase is Phase.SHOWING
        assert scheduler.state.displayed is Screen.NOTICES
        renderer.play_exit.assert_not_called()

        loop.advance(DWELL)
        assert scheduler.client.calls == 3
        renderer.play_exit.assert_not_called()

    def test_single_screen_gains_sibling(self, make_scheduler, renderer, loop):
        only_notices = make_dataset(events=False, birthdays=False, cctv=False)
        scheduler = make_scheduler(only_notices, only_notices, two_screens())
        scheduler.start()
        loop.advance(0)

        loop.advance(DWELL)
        assert scheduler.state.active_screens == [Screen.NOTICES]
        loop.advance(DWELL)
        assert scheduler.state.active_screens == [Screen.NOTICES, Screen.EVENTS]
        renderer.play_exit.assert_not_called()

        loop.advance(DWELL + TRANSITION)
        assert scheduler.state.displayed is Screen.EVENTS
        assert scheduler.state.current_index == 1

    def test_birthday_appears_when_date_matches(self, make_scheduler, loop):
        scheduler = make_scheduler(make_dataset(birthday_dates=["03-16"]))
        scheduler.start()
        loop.advance(0)
        assert Screen.BIRTHDAYS not in scheduler.state.active_screens

        scheduler.background_refresh()
        assert Screen.BIRTHDAYS not in scheduler.state.active_screens
        scheduler.client.queue(make_dataset(birthday_dates=["03-15"]))
        scheduler.background_refresh()
        assert Screen.BIRTHDAYS in scheduler.state.active_screens

    def test_shrunk_set_clamps_to_first(self, make_scheduler, loop):
        scheduler = make_scheduler(make_dataset())
        scheduler.state.active_screens = [Screen.NOTICES, Screen.CCTV]
        scheduler.state.current_index = 3
        assert scheduler._next_index() == 0
        scheduler.state.current_index = 1
        assert scheduler._next_index() == 0
        scheduler.state.current_index = 0
        assert scheduler._next_index() == 1

    def test_never_transitions_to_removed_screen(self, make_scheduler, renderer, loop):
        scheduler = make_scheduler(make_dataset(), make_dataset(events=False, cctv=False))
        scheduler.start()
        loop.advance(0)
        loop.advance(DWELL + TRANSITION)
        assert scheduler.state.displayed is Screen.EVENTS

        # cctv (next in line) and events disappear while events is up
        scheduler.background_refresh()
        assert scheduler.state.active_screens == [Screen.NOTICES]

        loop.advance(DWELL)
        assert scheduler.state.transition.to_screen is Screen.NOTICES
        loop.advance(TRANSITION)
        assert scheduler.state.displayed is Screen.NOTICES
        assert scheduler.state.current_index == 0
        entered = [c.args[0] for c in renderer.play_entrance.call_args_list]
        assert Screen.CCTV not in entered


class TestLifecycle:

    def test_shutdown_stops_everything(self, make_scheduler, loop, capsys):
        scheduler = make_scheduler(two_screens())
        scheduler.start()
        loop.advance(0)
        scheduler.shutdown()

        loop.advance(DWELL + TRANSITION)
        assert scheduler.state.displayed is Screen.NOTICES
        assert scheduler.state.phase is Phase.SHOWING

    def test_run_until_shutdown(self, make_scheduler, renderer, capsys):
        scheduler = make_scheduler(two_screens())
        renderer.reveal.side_effect = lambda screen: scheduler.shutdown()

        scheduler.run()

        out = capsys.readouterr().out
        assert "signhub Rotation Scheduler" in out
        assert "http://signage.test/api/data" in out
        assert scheduler.state.displayed is Screen.NOTICES

    def test_factory_rejects_unknown_mode(self, config):
        from signhub.schedulers import get_scheduler

        config.config = {"scheduler": {"mode": "shuffle"}}
        with pytest.raises(ValueError, match="Unknown scheduler mode"):
            get_scheduler(config)


def fail_once(error, result=None):
    """side_effect that raises error on the first call, then returns result."""
    errors = [error]

    def _effect(*args, **kwargs):
        if errors:
            raise errors.pop()
        return result
    return _effect


class TestErrorRecovery:

    def test_reveal_failure_retries_initial_load(self, make_scheduler, renderer, loop, capsys):
        renderer.reveal.side_effect = fail_once(OSError("read-only file system"))
        scheduler = make_scheduler(two_screens())
        scheduler.start()

        loop.advance(0)
        assert scheduler.state.phase is Phase.IDLE
        assert loop.pending() > 0
        assert "read-only file system" in capsys.readouterr().out

        loop.advance(5)
        assert scheduler.client.calls == 2
        assert scheduler.state.phase is Phase.SHOWING
        assert scheduler.state.displayed is Screen.NOTICES

        loop.advance(120)
        assert scheduler.client.calls >= 5
        renderer.play_exit.assert_called()

    def test_poll_survives_a_failed_refresh(self, make_scheduler, loop, capsys):
        scheduler = make_scheduler(two_screens())
        scheduler.start()
        loop.advance(0)

        scheduler.layout.measure.side_effect = fail_once(
            ValueError("bad glyph"), NoticesMetrics(300, 400))
        loop.advance(30.1)
        assert scheduler.client.calls == 2
        assert "bad glyph" in capsys.readouterr().out

        loop.advance(60)
        assert scheduler.client.calls == 4

    def test_single_screen_hold_survives_a_failed_refresh(self, make_scheduler, loop):
        only_notices = make_dataset(events=False, birthdays=False, cctv=False)
        scheduler = make_scheduler(only_notices)
        scheduler.start()
        loop.advance(0)

        scheduler.layout.measure.side_effect = fail_once(
            ValueError("bad glyph"), NoticesMetrics(300, 400))
        loop.advance(DWELL)
        assert scheduler.client.calls == 2
        assert scheduler.state.phase is Phase.SHOWING

        loop.advance(DWELL)
        assert scheduler.client.calls == 3
        assert scheduler.state.displayed is Screen.NOTICES

    def test_exit_animation_failure_still_completes(self, make_scheduler, renderer, loop):
        renderer.play_exit.side_effect = fail_once(RuntimeError("surface gone"))
        scheduler = make_scheduler(two_screens())
        scheduler.start()
        loop.advance(0)

        loop.advance(DWELL + TRANSITION)
        assert scheduler.state.phase is Phase.SHOWING
        assert scheduler.state.displayed is Screen.EVENTS


class TestMarqueeDriving:

    def test_steps_run_during_notices_dwell(self, make_scheduler, renderer, loop):
        scheduler = make_scheduler(two_screens(), metrics=NoticesMetrics(1200, 400, 200))
        scheduler.start()
        loop.advance(0)
        schedule = scheduler.marquee_schedule

        loop.advance(6.1)
        applied = [c.args[0] for c in renderer.scroll_notices.call_args_list]
        assert [s.kind for s in applied] == ["pause", "scroll"]
        assert applied[1].offset == -200

        loop.advance(34 - 6.1 - 0.05)
        applied = [c.args[0] for c in renderer.scroll_notices.call_args_list]
        assert applied == list(schedule.steps)
        assert [s.offset for s in applied if s.kind == "scroll"] == [-200, -400, -600, -800]
        assert applied[-1].opacity == 1.0
        assert scheduler.state.phase is Phase.SHOWING

        # Events has no marquee
        loop.advance(TRANSITION + DWELL - 0.5)
        assert scheduler.state.displayed is Screen.EVENTS
        assert renderer.scroll_notices.call_count == len(schedule.steps)

    def test_no_steps_when_notices_fit(self, make_scheduler, renderer, loop):
        scheduler = make_scheduler(two_screens())
        scheduler.start()
        loop.advance(0)
        loop.advance(DWELL - 0.5)
        renderer.scroll_notices.assert_not_called()

    def test_marquee_restarts_when_notices_return(self, make_scheduler, renderer, loop):
        scheduler = make_scheduler(two_screens(), metrics=NoticesMetrics(1200, 400, 200))
        scheduler.start()
        loop.advance(0)
        steps = len(scheduler.marquee_schedule.steps)

        loop.advance(34 + TRANSITION + DWELL + TRANSITION)
        assert scheduler.state.displayed is Screen.NOTICES
        loop.advance(6.1)
        assert renderer.scroll_notices.call_count == steps + 2

    def test_held_screen_rerendered_after_refresh(self, make_scheduler, renderer, loop):
        only_notices = make_dataset(events=False, birthdays=False, cctv=False)
        changed = make_dataset(events=False, birthdays=False, cctv=False,
                               notice_titles=("Updated",))
        scheduler = make_scheduler(only_notices, changed)
        scheduler.start()
        loop.advance(0)

        loop.advance(DWELL)
        assert renderer.render_notices.call_count == 2
        (notices, _), _ = renderer.render_notices.call_args
        assert [n.title for n in notices] == ["Updated"]
