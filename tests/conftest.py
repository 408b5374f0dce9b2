import io
from datetime import datetime

import pytest
from rich.console import Console

from gridmon.models import FieldPosition, Game, GameStatus, League, LogoArt, Snapshot, Team, TeamLogo

KC = Team(id="12", name="Kansas City Chiefs", abbreviation="KC", color="e31837", logo="https://a.espncdn.com/kc.png")
BUF = Team(id="2", name="Buffalo Bills", abbreviation="BUF", color="00338d")
NE = Team(id="17", name="New England Patriots", abbreviation="NE")


def _game(game_id="1", status=GameStatus.IN_PROGRESS, possession="home", yard_line=75, down=1, distance=10, **kw):
    field_position = None
    if yard_line is not None and possession is not None:
        field_position = FieldPosition(yard_line=yard_line, down=down, distance=distance)
    defaults = dict(
        id=game_id,
        short_name="BUF @ KC",
        home=KC,
        away=BUF,
        home_score=14,
        away_score=10,
        status=status,
        period=3,
        clock="5:32",
        possession=possession,
        field_position=field_position,
        broadcast="CBS",
    )
    defaults.update(kw)
    return Game(**defaults)


@pytest.fixture
def make_game():
    return _game


@pytest.fixture
def make_snapshot():
    def make(count=3, league=League.NFL, **kw):
        games = tuple(_game(game_id=str(i), **kw) for i in range(count))
        return Snapshot(league=league, games=games, fetched_at=datetime(2026, 10, 18, 13, 5, 0))

    return make


def _competitor(team_id, abbr, home_away, score="0", color="000000"):
    return {
        "id": team_id,
        "homeAway": home_away,
        "score": score,
        "team": {
            "id": team_id,
            "abbreviation": abbr,
            "displayName": f"{abbr} Team",
            "shortDisplayName": abbr,
            "color": color,
            "alternateColor": "ffffff",
            "logo": f"https://a.espncdn.com/i/teamlogos/nfl/500/{abbr.lower()}.png",
        },
    }


@pytest.fixture
def espn_event():
    def make(event_id="401", state="in", name="STATUS_IN_PROGRESS", situation=None, home_score="21", away_score="17"):
        status = {
            "period": 2,
            "displayClock": "7:45",
            "type": {"state": state, "name": name, "detail": "7:45 - 2nd Quarter", "shortDetail": "7:45 - 2nd"},
        }
        competition = {
            "competitors": [
                _competitor("12", "KC", "home", home_score, "e31837"),
                _competitor("2", "BUF", "away", away_score, "00338d"),
            ],
            "status": status,
            "broadcasts": [{"market": "national", "names": ["CBS"]}],
        }
        if situation is not None:
            competition["situation"] = situation
        return {"id": event_id, "shortName": "BUF @ KC", "status": status, "competitions": [competition]}

    return make


@pytest.fixture
def render_text():
    """Render a rich renderable to plain text at a fixed width."""

    def render(renderable, width):
        out = io.StringIO()
        console = Console(file=out, width=width, color_system=None, legacy_windows=False)
        console.print(renderable)
        return out.getvalue()

    return render


@pytest.fixture
def make_logo():
    """A solid-color logo, already scaled to cells."""

    def make(color="#e31837"):
        def art(columns, rows):
            return LogoArt(rows=tuple(tuple((color, color) for _ in range(columns)) for _ in range(rows)))

        return TeamLogo(card=art(8, 4), badge=art(2, 1))

    return make
