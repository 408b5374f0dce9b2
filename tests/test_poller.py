import contextvars
import threading
import time

from gridmon.models import FetchError, FetchErrorKind, League
from gridmon.poller import Poller, fetch_timeout
from gridmon.state import ScoreboardState


class ScriptedSource:
    """Returns or raises the queued results in order."""

    def __init__(self, *results):
        self.results = list(results)
        self.leagues = []

    def fetch(self, league):
        self.leagues.append(league)
        result = self.results.pop(0)
        if isinstance(result, Exception):
            raise result
        return result


def test_fetch_timeout_is_half_the_interval():
    assert fetch_timeout(10) == 5
    assert fetch_timeout(1) == 0.5


def test_success_then_failure_keeps_stale_data(make_snapshot):
    snapshot = make_snapshot(2)
    source = ScriptedSource(snapshot, FetchError(FetchErrorKind.TIMEOUT))
    state = ScoreboardState(League.NCAA, 15)
    changes = []
    poller = Poller(source, state, on_change=lambda: changes.append(state.view()))

    assert poller.poll_once()
    assert poller.poll_once()

    assert source.leagues == [League.NCAA, League.NCAA]
    assert changes[0].snapshot is snapshot and changes[0].last_error is None
    assert changes[1].snapshot is snapshot
    assert changes[1].last_error is FetchErrorKind.TIMEOUT


def test_first_poll_failure_leaves_state_loading():
    state = ScoreboardState(League.NFL, 15)
    poller = Poller(ScriptedSource(FetchError(FetchErrorKind.TIMEOUT)), state)

    poller.poll_once()

    view = state.view()
    assert view.snapshot is None
    assert view.last_error is FetchErrorKind.TIMEOUT


def test_unexpected_source_error_is_recorded_as_network():
    state = ScoreboardState(League.NFL, 15)
    poller = Poller(ScriptedSource(RuntimeError("boom")), state)

    poller.poll_once()

    assert state.view().last_error is FetchErrorKind.NETWORK


def test_result_arriving_after_stop_is_discarded(make_snapshot):
    state = ScoreboardState(League.NFL, 15)
    poller = Poller(None, state)

    class StoppingSource:
        def fetch(self, league):
            poller.stop()
            return make_snapshot(3)

    poller.source = StoppingSource()

    assert poller.poll_once() is False
    assert state.view().snapshot is None


def test_thread_polls_immediately_and_stops(make_snapshot):
    merged = threading.Event()
    state = ScoreboardState(League.NFL, 60)

    class Source:
        def fetch(self, league):
            return make_snapshot(1)

    poller = Poller(Source(), state, on_change=merged.set)
    poller.start()
    assert merged.wait(5)

    poller.stop()
    poller.join(5)

    assert not poller.running
    assert len(state.view().snapshot) == 1


def test_stop_does_not_wait_for_in_flight_fetch(make_snapshot):
    release = threading.Event()
    started = threading.Event()
    state = ScoreboardState(League.NFL, 60)

    class SlowSource:
        def fetch(self, league):
            started.set()
            release.wait(5)
            return make_snapshot(2)

    poller = Poller(SlowSource(), state)
    poller.start()
    assert started.wait(5)

    poller.stop()
    assert poller.running
    release.set()
    poller.join(5)

    assert state.view().snapshot is None


def test_slow_fetch_delays_the_next_tick_instead_of_stacking(make_snapshot):
    interval = 0.2
    state = ScoreboardState(League.NFL, interval)
    calls = []
    third = threading.Event()

    class SlowFirstSource:
        def fetch(self, league):
            started = time.monotonic()
            if not calls:
                time.sleep(0.5)
            calls.append((started, time.monotonic()))
            if len(calls) == 3:
                third.set()
            return make_snapshot(1)

    poller = Poller(SlowFirstSource(), state)
    poller.start()
    assert third.wait(5)
    poller.stop()
    poller.join(5)

    (first_start, first_end), (second_start, second_end), (third_start, _) = calls[:3]
    assert first_end - first_start > interval
    # exactly one follow-up, an interval after the slow fetch finished
    assert interval * 0.75 <= second_start - first_end < interval + 1.0
    assert interval * 0.75 <= third_start - second_end < interval + 1.0


def test_poll_thread_runs_in_the_starting_context(make_snapshot):
    current_app = contextvars.ContextVar("current_app", default=None)
    seen = []
    merged = threading.Event()

    class Source:
        def fetch(self, league):
            seen.append(current_app.get())
            return make_snapshot(1)

    poller = Poller(Source(), ScoreboardState(League.NFL, 60), on_change=merged.set)
    token = current_app.set("scoreboard")
    try:
        poller.start()
    finally:
        current_app.reset(token)

    assert merged.wait(5)
    poller.stop()
    poller.join(5)
    assert seen[0] == "scoreboard"


def test_logos_load_after_the_snapshot_is_merged(make_snapshot, make_logo):
    logo = make_logo()

    class Loader:
        def __init__(self):
            self.loaded = []

        def pending(self, snapshot):
            return [] if self.loaded else [snapshot.games[0].home]

        def load(self, team):
            self.loaded.append(team.abbreviation)
            return logo

    loader = Loader()
    state = ScoreboardState(League.NFL, 15)
    changes = []
    poller = Poller(
        ScriptedSource(make_snapshot(1), make_snapshot(2)),
        state,
        on_change=lambda: changes.append(state.view()),
        logos=loader,
    )

    poller.poll_once()
    poller.poll_once()

    assert changes[0].logos == {}
    assert changes[1].logos == {"KC": logo}
    assert len(changes[2].snapshot) == 2
    assert loader.loaded == ["KC"]


def test_failed_fetch_loads_no_logos():
    class Loader:
        def pending(self, snapshot):
            raise AssertionError("no snapshot to take logos from")

    poller = Poller(ScriptedSource(FetchError(FetchErrorKind.NETWORK)), ScoreboardState(League.NFL, 15), logos=Loader())

    assert poller.poll_once()
