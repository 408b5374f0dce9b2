"""Game, team and snapshot types shared by the source, state and renderer."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional


class League(Enum):
    NFL = "nfl"
    NCAA = "ncaa"

    @property
    def path(self) -> str:
        """ESPN sport path segment for this league."""
        return "nfl" if self is League.NFL else "college-football"

    @property
    def label(self) -> str:
        return "NFL" if self is League.NFL else "NCAA Football"


class GameStatus(Enum):
    SCHEDULED = "scheduled"
    IN_PROGRESS = "in_progress"
    HALFTIME = "halftime"
    FINAL = "final"


class FetchErrorKind(Enum):
    NETWORK = "network"
    MALFORMED = "malformed"
    TIMEOUT = "timeout"

    @property
    def message(self) -> str:
        return {
            FetchErrorKind.NETWORK: "network unreachable",
            FetchErrorKind.MALFORMED: "malformed response",
            FetchErrorKind.TIMEOUT: "request timed out",
        }[self]


class FetchError(Exception):
    """A scoreboard fetch failed; `kind` says how."""

    def __init__(self, kind: FetchErrorKind, detail: str = ""):
        super().__init__(f"{kind.message}: {detail}" if detail else kind.message)
        self.kind = kind
        self.detail = detail


@dataclass(frozen=True)
class Team:
    id: str
    name: str
    abbreviation: str
    color: Optional[str] = None  # "RRGGBB", no leading '#'
    alternate_color: Optional[str] = None
    logo: Optional[str] = None  # image URL


Pixel = Optional[str]  # "#rrggbb", None when transparent


@dataclass(frozen=True)
class LogoArt:
    """An image scaled to terminal cells. Each cell holds a (top, bottom) pixel pair."""

    rows: tuple[tuple[tuple[Pixel, Pixel], ...], ...]

    @property
    def width(self) -> int:
        return len(self.rows[0]) if self.rows else 0


@dataclass(frozen=True)
class TeamLogo:
    card: LogoArt  # expanded cards
    badge: LogoArt  # one row, compact cards


@dataclass(frozen=True)
class FieldPosition:
    # yards to go to the opponent's goal line: 100 = own goal line, 0 = opponent's
    yard_line: int
    down: int
    distance: int
    down_distance_text: str = ""
    red_zone: bool = False


@dataclass(frozen=True)
class Game:
    """One contest on the board.

    A field position is only kept for an in-progress game with possession;
    anything else passed in is dropped. The reverse does not hold: between
    plays (kickoffs, PATs) ESPN reports possession without a usable down, and
    such a game carries possession with no field position.
    """

    id: str
    short_name: str
    home: Team
    away: Team
    home_score: int = 0
    away_score: int = 0
    status: GameStatus = GameStatus.SCHEDULED
    period: int = 0
    clock: str = ""
    detail: str = ""
    possession: Optional[str] = None  # "home" | "away"
    field_position: Optional[FieldPosition] = None
    broadcast: Optional[str] = None
    last_play: Optional[str] = None

    def __post_init__(self):
        if self.home_score < 0 or self.away_score < 0:
            raise ValueError(f"negative score in game {self.id}")
        if self.possession not in (None, "home", "away"):
            raise ValueError(f"bad possession value {self.possession!r}")
        # Field position only makes sense for a live game with the ball assigned.
        if self.field_position is not None and (
            self.status is not GameStatus.IN_PROGRESS or self.possession is None
        ):
            object.__setattr__(self, "field_position", None)

    @property
    def is_live(self) -> bool:
        return self.status in (GameStatus.IN_PROGRESS, GameStatus.HALFTIME)

    def team(self, side: str) -> Team:
        return self.home if side == "home" else self.away

    def opponent(self, side: str) -> Team:
        return self.away if side == "home" else self.home


@dataclass(frozen=True)
class Snapshot:
    league: League
    games: tuple[Game, ...] = ()
    fetched_at: datetime = field(default_factory=datetime.now)

    def __post_init__(self):
        object.__setattr__(self, "games", tuple(self.games))

    def __len__(self) -> int:
        return len(self.games)

    def live_games(self) -> tuple[Game, ...]:
        return tuple(g for g in self.games if g.is_live)
