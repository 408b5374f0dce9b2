"""Background poll loop feeding ScoreboardState from the scoreboard source."""

from __future__ import annotations

import contextvars
import logging
import threading
from typing import Callable, Optional

from gridmon.models import FetchError, FetchErrorKind, Snapshot
from gridmon.state import ScoreboardState

log = logging.getLogger(__name__)


def fetch_timeout(interval: float) -> float:
    """A single fetch may use at most half the poll interval."""
    return max(0.5, interval / 2)


class Poller:
    """Polls `source.fetch(league)` every `interval` seconds on a daemon thread.

    The wait between ticks starts when the previous fetch finishes, so a slow
    fetch delays the next tick instead of stacking ticks up. `on_change` runs
    on the poll thread after each merge. With a `logos` loader, logos of teams
    new to the board are downloaded after the snapshot is merged.
    """

    def __init__(
        self,
        source,
        state: ScoreboardState,
        on_change: Optional[Callable[[], None]] = None,
        logos=None,
    ):
        self.source = source
        self.state = state
        self.on_change = on_change
        self.logos = logos
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running:
            return
        # Threads do not inherit context variables; textual's log routing needs them.
        context = contextvars.copy_context()
        self._thread = threading.Thread(
            target=context.run, args=(self._run,), name="gridmon-poller", daemon=True
        )
        self._thread.start()

    def stop(self) -> None:
        """Stop scheduling ticks. Does not wait for an in-flight fetch."""
        self._stop.set()

    def join(self, timeout: Optional[float] = None) -> None:
        if self._thread is not None:
            self._thread.join(timeout)

    def _run(self) -> None:
        log.info(f"Polling {self.state.league.label} every {self.state.interval}s")
        while not self._stop.is_set():
            self.poll_once()
            if self._stop.wait(self.state.interval):
                break
        log.info("Poller stopped")

    def poll_once(self) -> bool:
        """Run one fetch and merge it. Returns True if the state changed."""
        league = self.state.league
        snapshot = None
        try:
            snapshot = self.source.fetch(league)
        except FetchError as e:
            if self._stop.is_set():
                return False
            log.warning(f"Fetch failed: {e}")
            changed = self.state.apply_error(e.kind)
        except Exception:
            if self._stop.is_set():
                return False
            log.exception("Unexpected error while fetching scoreboard")
            changed = self.state.apply_error(FetchErrorKind.NETWORK)
        else:
            if self._stop.is_set():
                log.debug("Dropping fetch result that finished after stop")
                return False
            changed = self.state.apply_snapshot(snapshot)

        if changed and self.on_change is not None:
            self.on_change()
        if changed and snapshot is not None and self.logos is not None:
            self._load_logos(snapshot)
        return changed

    def _load_logos(self, snapshot: Snapshot) -> None:
        for team in self.logos.pending(snapshot):
            if self._stop.is_set():
                return
            logo = self.logos.load(team)
            if logo is None or self._stop.is_set():
                continue
            if self.state.add_logo(team.abbreviation, logo) and self.on_change is not None:
                self.on_change()
