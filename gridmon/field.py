"""Field geometry: where the ball sits on a fixed home-left / away-right field.

Yard lines arrive as yards to go for the team with the ball (100 is its own
goal line, 0 the opponent's). The drawn field never flips, so the home
offense moves left to right and the away offense right to left.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from gridmon.models import Game, GameStatus

TOWARD_HOME = "toward_home"
TOWARD_AWAY = "toward_away"

# The strip is 120 logical yards: a 10 yard end zone on each side of the field.
END_ZONE_YARDS = 10
STRIP_YARDS = 100 + 2 * END_ZONE_YARDS

BALL = "●"
FIRST_DOWN = "┃"
YARD_TICK = "│"
TURF = "─"


@dataclass(frozen=True)
class FieldMarker:
    x: float  # 0.0 = home goal line, 1.0 = away goal line
    direction: str


def position(game: Game) -> Optional[FieldMarker]:
    if game.status is not GameStatus.IN_PROGRESS or game.possession is None:
        return None
    fp = game.field_position
    if fp is None:
        return None

    if fp.yard_line == 50:
        x = 0.5
    elif game.possession == "home":
        x = 1 - fp.yard_line / 100
    else:
        x = fp.yard_line / 100

    direction = TOWARD_AWAY if game.possession == "home" else TOWARD_HOME
    return FieldMarker(x=x, direction=direction)


def first_down_x(game: Game) -> Optional[float]:
    """Normalized position of the line to gain, clamped to the goal lines."""
    marker = position(game)
    if marker is None:
        return None
    step = game.field_position.distance / 100
    x = marker.x + step if marker.direction == TOWARD_AWAY else marker.x - step
    return min(1.0, max(0.0, x))


def spot_text(game: Game) -> str:
    """Line of scrimmage the way broadcasts say it, e.g. "KC 25" or "50"."""
    fp = game.field_position
    if fp is None or game.possession is None:
        return ""
    if fp.yard_line == 50:
        return "50"
    if fp.yard_line > 50:
        return f"{game.team(game.possession).abbreviation} {100 - fp.yard_line}"
    return f"{game.opponent(game.possession).abbreviation} {fp.yard_line}"


def down_distance_text(game: Game) -> str:
    fp = game.field_position
    if fp is None:
        return ""
    if fp.down_distance_text:
        return fp.down_distance_text
    ordinal = {1: "1st", 2: "2nd", 3: "3rd"}.get(fp.down, f"{fp.down}th")
    to_go = "Goal" if fp.distance >= fp.yard_line else str(fp.distance)
    return f"{ordinal} & {to_go}"


def _column(x: float, width: int) -> int:
    """Map a normalized field position onto a strip column (end zones included)."""
    yards = END_ZONE_YARDS + round(x * 100, 6)
    return min(width - 1, int(yards * width / STRIP_YARDS))


def field_cells(game: Game, width: int) -> list[tuple[str, str]]:
    """Lay out a one-row field strip as (char, role) cells.

    Roles are "home_zone", "away_zone", "turf", "tick", "first_down" and
    "ball"; the renderer turns them into colors.
    """
    if width <= 0:
        return []

    cells = []
    for col in range(width):
        yard = col * STRIP_YARDS / width
        if yard < END_ZONE_YARDS:
            cells.append((" ", "home_zone"))
        elif yard >= STRIP_YARDS - END_ZONE_YARDS:
            cells.append((" ", "away_zone"))
        else:
            cells.append((TURF, "turf"))

    for yard in range(10, 100, 10):
        col = _column(yard / 100, width)
        if cells[col][1] == "turf":
            cells[col] = (YARD_TICK, "tick")

    marker = position(game)
    if marker is not None:
        fd = first_down_x(game)
        if fd is not None:
            cells[_column(fd, width)] = (FIRST_DOWN, "first_down")
        cells[_column(marker.x, width)] = (BALL, "ball")

    return cells
