"""Pure rendering of a StateView into a rich renderable sized for the terminal."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Mapping, Optional

from rich import box
from rich.align import Align
from rich.console import Group, RenderableType
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from gridmon import field
from gridmon.keys import HELP
from gridmon.logos import CARD_COLUMNS
from gridmon.models import Game, GameStatus, LogoArt, Team, TeamLogo
from gridmon.state import StateView, clamp_index

# Below this width logos are never drawn, whatever the toggle says.
LOGO_MIN_WIDTH = 60
# Below this width cards use the two-line compact format.
EXPANDED_MIN_WIDTH = 80

COMPACT_CARD_HEIGHT = 4
EXPANDED_CARD_HEIGHT = 7

# Half blocks: the glyph color is the top pixel, the cell background the bottom one.
HALF_UPPER = "▀"
HALF_LOWER = "▄"
LOGO_SIDE = CARD_COLUMNS + 1
POSSESSION = "🏈"
NEUTRAL_COLOR = "grey35"

SELECTED_BORDER = "bold bright_yellow"

_HEX_COLOR = re.compile(r"^#?([0-9a-fA-F]{6})$")

FIELD_STYLES = {
    "turf": "green on dark_green",
    "tick": "white on dark_green",
    "first_down": "bold yellow on dark_green",
    "ball": "bold bright_white on dark_green",
}


@dataclass(frozen=True)
class Frame:
    renderable: RenderableType
    scroll_offset: int
    compact: bool
    logos_visible: bool


def team_color(team: Team) -> str:
    """Rich color for a team: primary, then alternate, then a neutral grey."""
    for color in (team.color, team.alternate_color):
        match = _HEX_COLOR.match(color or "")
        if match:
            return f"#{match.group(1).lower()}"
    return NEUTRAL_COLOR


def format_period(period: int) -> str:
    if period <= 0:
        return ""
    if period <= 4:
        return f"Q{period}"
    return "OT" if period == 5 else f"{period - 4}OT"


def status_text(game: Game) -> str:
    if game.status is GameStatus.IN_PROGRESS:
        return " ".join(p for p in (format_period(game.period), game.clock) if p)
    if game.status is GameStatus.HALFTIME:
        return "Halftime"
    if game.status is GameStatus.FINAL:
        return game.detail or "Final"
    return game.detail or "Scheduled"


def scroll_for(selected: int, offset: int, per_page: int, total: int) -> int:
    """Smallest change to `offset` that keeps the selected card fully visible."""
    if total <= per_page:
        return 0
    if selected < offset:
        offset = selected
    elif selected >= offset + per_page:
        offset = selected - per_page + 1
    return max(0, min(offset, total - per_page))


def logo_lines(art: LogoArt) -> list[Text]:
    lines = []
    for row in art.rows:
        line = Text(no_wrap=True)
        for top, bottom in row:
            if top and bottom:
                line.append(HALF_UPPER, style=f"{top} on {bottom}")
            elif top:
                line.append(HALF_UPPER, style=top)
            elif bottom:
                line.append(HALF_LOWER, style=bottom)
            else:
                line.append(" ")
        lines.append(line)
    return lines


def _badge(team: Team, logos: Optional[Mapping[str, TeamLogo]]) -> Text:
    text = Text()
    logo = logos.get(team.abbreviation) if logos is not None else None
    if logo is not None:
        for line in logo_lines(logo.badge):
            text.append_text(line)
        text.append(" ")
    text.append(f" {team.abbreviation} ", style=f"bold white on {team_color(team)}")
    return text


def _situation_line(game: Game) -> Text:
    line = Text(no_wrap=True, overflow="ellipsis")
    if game.field_position is not None:
        line.append(f" {field.down_distance_text(game)} ", style="bold black on white")
        line.append(f"  at {field.spot_text(game)}")
        if game.field_position.red_zone:
            line.append("  RED ZONE", style="bold red")
    elif game.status is GameStatus.IN_PROGRESS:
        line.append(game.detail or status_text(game), style="dim")
    else:
        line.append(status_text(game), style="bold" if game.status is GameStatus.FINAL else "yellow")
    if game.broadcast:
        line.append(f"  [TV: {game.broadcast}]", style="cyan")
    return line


def field_strip(game: Game, width: int) -> Text:
    home, away = team_color(game.home), team_color(game.away)
    cells = field.field_cells(game, width)

    # Team abbreviations sit in their own end zones when there is room.
    if width > 20:
        zone = max(1, width * field.END_ZONE_YARDS // field.STRIP_YARDS)
        for i, char in enumerate(game.home.abbreviation[:zone]):
            cells[i] = (char, "home_zone")
        label = game.away.abbreviation[:zone]
        for i, char in enumerate(label):
            cells[width - len(label) + i] = (char, "away_zone")

    strip = Text(no_wrap=True, overflow="crop")
    for char, role in cells:
        if role == "home_zone":
            strip.append(char, style=f"bold white on {home}")
        elif role == "away_zone":
            strip.append(char, style=f"bold white on {away}")
        else:
            strip.append(char, style=FIELD_STYLES[role])
    return strip


def _score_row(game: Game, side: str) -> Table:
    team = game.team(side)
    score = game.home_score if side == "home" else game.away_score
    row = Table.grid(expand=True)
    row.add_column(ratio=1, no_wrap=True, overflow="ellipsis")
    row.add_column(justify="right", no_wrap=True)
    name = _badge(team, None)
    name.append(f" {team.name}")
    if game.possession == side:
        name.append(f" {POSSESSION}")
    row.add_row(name, Text(str(score), style="bold"))
    return row


def _compact_body(game: Game, logos: Optional[Mapping[str, TeamLogo]]) -> Group:
    top = Table.grid(expand=True)
    top.add_column(ratio=1, no_wrap=True, overflow="ellipsis")
    top.add_column(justify="right", no_wrap=True)

    matchup = _badge(game.away, logos)
    matchup.append(f" {game.away_score}", style="bold")
    if game.possession == "away":
        matchup.append(f" {POSSESSION}")
    matchup.append("  @  ")
    matchup.append_text(_badge(game.home, logos))
    matchup.append(f" {game.home_score}", style="bold")
    if game.possession == "home":
        matchup.append(f" {POSSESSION}")

    clock_style = "bold red" if game.status is GameStatus.IN_PROGRESS else "grey70"
    top.add_row(matchup, Text(status_text(game), style=clock_style))
    return Group(top, _situation_line(game))


def _logo_block(team: Team, logos: Mapping[str, TeamLogo]) -> RenderableType:
    logo = logos.get(team.abbreviation)
    if logo is None:
        return Text("")
    return Group(*logo_lines(logo.card))


def _expanded_body(game: Game, logos: Optional[Mapping[str, TeamLogo]], inner_width: int) -> RenderableType:
    center_width = inner_width - 2 * LOGO_SIDE if logos is not None else inner_width
    rows = [_score_row(game, "away"), _score_row(game, "home")]
    if game.status is GameStatus.IN_PROGRESS:
        clock = Text(status_text(game), style="bold red", no_wrap=True)
        rows.append(field_strip(game, max(1, center_width - clock.cell_len - 1)) + Text(" ") + clock)
    else:
        rows.append(Text(""))
    rows.append(_situation_line(game))
    rows.append(Text(game.last_play or "", style="dim italic", no_wrap=True, overflow="ellipsis"))
    center = Group(*rows)
    if logos is None:
        return center

    # Home logo on the left, away logo on the right, matching the field strip.
    layout = Table.grid(expand=True)
    layout.add_column(width=LOGO_SIDE, no_wrap=True)
    layout.add_column(ratio=1)
    layout.add_column(width=LOGO_SIDE, no_wrap=True, justify="right")
    layout.add_row(_logo_block(game.home, logos), center, _logo_block(game.away, logos))
    return layout


def game_card(
    game: Game,
    selected: bool,
    compact: bool,
    logos: Optional[Mapping[str, TeamLogo]],
    width: int,
) -> Panel:
    """One game as a bordered card. `logos` is None when logos are hidden."""
    accent = team_color(game.home)
    body = _compact_body(game, logos) if compact else _expanded_body(game, logos, width - 4)
    return Panel(
        body,
        title=game.short_name,
        title_align="left",
        box=box.HEAVY if selected else box.ROUNDED,
        border_style=SELECTED_BORDER if selected else accent,
        height=COMPACT_CARD_HEIGHT if compact else EXPANDED_CARD_HEIGHT,
        width=width,
    )


def _header(view: StateView) -> Table:
    left = Text(f" GRIDMON · {view.league.label}", style="bold bright_white")
    if view.snapshot is not None:
        left.append(f" · {len(view.games)} games", style="white")
    if view.live_only:
        left.append("  [LIVE ONLY]", style="bold red")
    right = Text(f"every {view.interval}s ", style="dim")
    grid = Table.grid(expand=True)
    grid.add_column(ratio=1, no_wrap=True, overflow="ellipsis")
    grid.add_column(justify="right", no_wrap=True)
    grid.add_row(left, right)
    return grid


def _error_line(view: StateView) -> Optional[Text]:
    if view.last_error is None:
        return None
    line = Text(f" ! Update failed: {view.last_error.message}", style="bold yellow", no_wrap=True, overflow="ellipsis")
    if view.snapshot is not None and view.updated_at is not None:
        line.append(f" · showing data from {view.updated_at:%H:%M:%S}", style="yellow")
    else:
        line.append(f" · retrying in {view.interval}s", style="yellow")
    return line


def _footer(view: StateView) -> Table:
    updated = view.updated_at.strftime("%H:%M:%S") if view.updated_at else "-"
    grid = Table.grid(expand=True)
    grid.add_column(ratio=1, no_wrap=True, overflow="ellipsis")
    grid.add_column(justify="right", no_wrap=True)
    grid.add_row(Text(f" {HELP}", style="dim"), Text(f"Updated: {updated} ", style="dim"))
    return grid


def _placeholder(message: str, height: int, style: str) -> Panel:
    return Panel(
        Align.center(Text(message, style=style), vertical="middle"),
        box=box.ROUNDED,
        border_style="grey50",
        height=max(3, height),
    )


def render(view: StateView, width: int, height: int) -> Frame:
    """Build the whole screen for `view` at the given terminal size."""
    width = max(1, width)
    compact = width < EXPANDED_MIN_WIDTH
    logos_visible = view.show_logos and width >= LOGO_MIN_WIDTH
    logos = view.logos if logos_visible else None

    error = _error_line(view)
    body_height = height - 2 - (1 if error is not None else 0)

    parts: list[RenderableType] = [_header(view)]
    if error is not None:
        parts.append(error)

    games = view.games
    offset = 0
    if view.snapshot is None:
        parts.append(_placeholder(f"Loading {view.league.label} scoreboard...", body_height, "bold cyan"))
    elif not games:
        message = "No live games right now (f shows all games)" if view.live_only else "No games today"
        parts.append(_placeholder(message, body_height, "bold yellow"))
    else:
        card_height = COMPACT_CARD_HEIGHT if compact else EXPANDED_CARD_HEIGHT
        per_page = max(1, body_height // card_height)
        selected = clamp_index(view.selected, len(games))
        offset = scroll_for(selected, view.scroll_offset, per_page, len(games))
        for index in range(offset, min(len(games), offset + per_page)):
            parts.append(game_card(games[index], index == selected, compact, logos, width))

    parts.append(_footer(view))
    return Frame(renderable=Group(*parts), scroll_offset=offset, compact=compact, logos_visible=logos_visible)
