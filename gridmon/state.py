"""The single authoritative scoreboard model shared by the poller and key input.

Every mutator takes the lock for an assignment-sized step only. Readers copy
out an immutable StateView and render from that, never from live state.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime
from typing import Mapping, Optional

from gridmon.models import FetchErrorKind, Game, League, Snapshot, TeamLogo

log = logging.getLogger(__name__)


def clamp_index(index: int, length: int) -> int:
    if length <= 0:
        return 0
    return max(0, min(index, length - 1))


@dataclass(frozen=True)
class StateView:
    league: League
    interval: int
    snapshot: Optional[Snapshot]
    selected: int
    scroll_offset: int
    show_logos: bool
    live_only: bool
    last_error: Optional[FetchErrorKind]
    updated_at: Optional[datetime]
    logos: Mapping[str, TeamLogo] = field(default_factory=dict)

    @property
    def games(self) -> tuple[Game, ...]:
        """Games currently on screen (all, or only live ones with the filter on)."""
        if self.snapshot is None:
            return ()
        return self.snapshot.live_games() if self.live_only else self.snapshot.games

    @property
    def selected_game(self) -> Optional[Game]:
        games = self.games
        return games[self.selected] if games else None


class ScoreboardState:
    def __init__(self, league: League, interval: int, show_logos: bool = True):
        self.league = league
        self.interval = interval
        self._lock = threading.Lock()
        self._snapshot: Optional[Snapshot] = None
        self._selected = 0
        self._scroll_offset = 0
        self._show_logos = show_logos
        self._live_only = False
        self._last_error: Optional[FetchErrorKind] = None
        self._updated_at: Optional[datetime] = None
        self._logos: dict[str, TeamLogo] = {}
        self._quit = False

    def _visible_count(self) -> int:
        if self._snapshot is None:
            return 0
        if self._live_only:
            return len(self._snapshot.live_games())
        return len(self._snapshot)

    # --- poll results -----------------------------------------------------

    def apply_snapshot(self, snapshot: Snapshot) -> bool:
        """Replace the held snapshot wholesale. Returns False if discarded after quit."""
        with self._lock:
            if self._quit:
                log.debug("Discarding snapshot that arrived after quit")
                return False
            self._snapshot = snapshot
            self._selected = clamp_index(self._selected, self._visible_count())
            self._last_error = None
            self._updated_at = snapshot.fetched_at
        return True

    def apply_error(self, kind: FetchErrorKind) -> bool:
        """Record a failed fetch; the previous snapshot stays as it was."""
        with self._lock:
            if self._quit:
                return False
            self._last_error = kind
        return True

    def add_logo(self, abbreviation: str, logo: TeamLogo) -> bool:
        """Keep a downloaded logo; logos outlive snapshots."""
        with self._lock:
            if self._quit:
                return False
            self._logos[abbreviation] = logo
        return True

    # --- user commands ----------------------------------------------------

    def next_game(self) -> bool:
        with self._lock:
            count = self._visible_count()
            if count == 0 or self._selected >= count - 1:
                return False
            self._selected += 1
        return True

    def previous_game(self) -> bool:
        with self._lock:
            if self._visible_count() == 0 or self._selected <= 0:
                return False
            self._selected -= 1
        return True

    def toggle_logos(self) -> bool:
        with self._lock:
            self._show_logos = not self._show_logos
            return self._show_logos

    def toggle_live_filter(self) -> bool:
        with self._lock:
            self._live_only = not self._live_only
            self._selected = 0
            self._scroll_offset = 0
            return self._live_only

    def request_quit(self) -> None:
        with self._lock:
            self._quit = True

    @property
    def quit_requested(self) -> bool:
        with self._lock:
            return self._quit

    def set_scroll_offset(self, offset: int) -> None:
        with self._lock:
            self._scroll_offset = max(0, offset)

    # --- readers ----------------------------------------------------------

    def view(self) -> StateView:
        with self._lock:
            return StateView(
                league=self.league,
                interval=self.interval,
                snapshot=self._snapshot,
                selected=self._selected,
                scroll_offset=self._scroll_offset,
                show_logos=self._show_logos,
                live_only=self._live_only,
                last_error=self._last_error,
                updated_at=self._updated_at,
                logos=dict(self._logos),
            )
