"""ESPN scoreboard source: fetch today's games for a league as a Snapshot."""

from __future__ import annotations

import http.client
import json
import logging
import socket
import time
import urllib.error
import urllib.request
from datetime import datetime
from typing import Callable, Optional

from gridmon.models import (
    FetchError,
    FetchErrorKind,
    FieldPosition,
    Game,
    GameStatus,
    League,
    Snapshot,
    Team,
)

log = logging.getLogger(__name__)

SCOREBOARD_URL = "https://site.api.espn.com/apis/site/v2/sports/football/{}/scoreboard"

USER_AGENT = "gridmon/0.1"

CHUNK_SIZE = 16 * 1024


def scoreboard_url(league: League) -> str:
    return SCOREBOARD_URL.format(league.path)


def fetch_bytes(url: str, timeout: float, opener: Callable = urllib.request.urlopen) -> bytes:
    """Fetch URL, giving up once `timeout` seconds have passed in total.

    urllib's timeout bounds each socket operation only, so the body is read
    in chunks against a deadline.
    """
    deadline = time.monotonic() + timeout
    request = urllib.request.Request(url, headers={"User-Agent": USER_AGENT})
    chunks = []
    try:
        with opener(request, timeout=timeout) as response:
            while True:
                if time.monotonic() > deadline:
                    raise FetchError(FetchErrorKind.TIMEOUT, f"no complete response within {timeout:.1f}s")
                chunk = response.read1(CHUNK_SIZE)
                if not chunk:
                    break
                chunks.append(chunk)
    except (socket.timeout, TimeoutError) as e:
        raise FetchError(FetchErrorKind.TIMEOUT, str(e)) from e
    except urllib.error.URLError as e:
        # urlopen wraps connect timeouts in URLError
        if isinstance(e.reason, (socket.timeout, TimeoutError)):
            raise FetchError(FetchErrorKind.TIMEOUT, str(e.reason)) from e
        raise FetchError(FetchErrorKind.NETWORK, str(e)) from e
    except (OSError, http.client.HTTPException) as e:
        raise FetchError(FetchErrorKind.NETWORK, str(e)) from e
    return b"".join(chunks)


def fetch_json(url: str, timeout: float, opener: Callable = urllib.request.urlopen) -> dict:
    """Fetch JSON from URL, raising FetchError instead of returning partial data."""
    body = fetch_bytes(url, timeout, opener=opener)
    try:
        data = json.loads(body.decode("utf-8"))
    except (UnicodeDecodeError, ValueError) as e:
        raise FetchError(FetchErrorKind.MALFORMED, f"invalid JSON: {e}") from e

    if not isinstance(data, dict):
        raise FetchError(FetchErrorKind.MALFORMED, "top-level JSON is not an object")
    return data


def _status_of(status: dict) -> GameStatus:
    stype = status.get("type", {}) or {}
    state = stype.get("state", "pre")
    if state == "in":
        if stype.get("name") == "STATUS_HALFTIME":
            return GameStatus.HALFTIME
        return GameStatus.IN_PROGRESS
    if state == "post":
        return GameStatus.FINAL
    return GameStatus.SCHEDULED


def _team_of(competitor: dict) -> Team:
    team = competitor.get("team", {}) or {}
    abbr = team.get("abbreviation")
    if not abbr:
        raise ValueError("competitor without team abbreviation")
    return Team(
        id=str(team.get("id") or competitor.get("id") or ""),
        name=team.get("displayName") or team.get("shortDisplayName") or abbr,
        abbreviation=abbr,
        color=team.get("color") or None,
        alternate_color=team.get("alternateColor") or None,
        logo=team.get("logo") or None,
    )


def _score_of(competitor: dict) -> int:
    raw = competitor.get("score")
    if raw in (None, ""):
        return 0
    score = int(raw)
    if score < 0:
        raise ValueError(f"negative score {raw!r}")
    return score


def _possession_of(situation: dict, home: Team, away: Team) -> Optional[str]:
    poss_id = situation.get("possession")
    if not poss_id:
        return None
    if str(poss_id) == home.id:
        return "home"
    if str(poss_id) == away.id:
        return "away"
    return None


def _field_position_of(situation: dict) -> Optional[FieldPosition]:
    yard_line = situation.get("yardLine")
    down = situation.get("down")
    if yard_line is None or down is None:
        return None
    yard_line = int(yard_line)
    down = int(down)
    # ESPN reports down -1 between plays (kickoffs, PATs)
    if not 0 <= yard_line <= 100 or not 1 <= down <= 4:
        return None
    return FieldPosition(
        yard_line=yard_line,
        down=down,
        distance=max(0, int(situation.get("distance") or 0)),
        down_distance_text=situation.get("shortDownDistanceText") or situation.get("downDistanceText") or "",
        red_zone=bool(situation.get("isRedZone", False)),
    )


def _broadcast_of(competition: dict) -> Optional[str]:
    names = []
    for broadcast in competition.get("broadcasts", []) or []:
        for name in broadcast.get("names", []) or []:
            if name and name not in names:
                names.append(name)
    return ", ".join(names) if names else None


def parse_event(event: dict) -> Game:
    """Build a Game from one ESPN event. Raises on records missing required parts."""
    competition = (event.get("competitions") or [None])[0]
    if not competition:
        raise ValueError("event without competition")

    competitors = competition.get("competitors", [])
    home = next((c for c in competitors if c.get("homeAway") == "home"), None)
    away = next((c for c in competitors if c.get("homeAway") == "away"), None)
    if home is None or away is None:
        raise ValueError("event without home/away competitors")

    status_data = competition.get("status") or event.get("status") or {}
    status = _status_of(status_data)
    home_team = _team_of(home)
    away_team = _team_of(away)

    situation = competition.get("situation", {}) or {}
    possession = None
    field_position = None
    if status is GameStatus.IN_PROGRESS and situation:
        possession = _possession_of(situation, home_team, away_team)
        if possession:
            field_position = _field_position_of(situation)

    last_play = (situation.get("lastPlay") or {}).get("text") or None

    return Game(
        id=str(event.get("id", "")),
        short_name=event.get("shortName") or f"{away_team.abbreviation} @ {home_team.abbreviation}",
        home=home_team,
        away=away_team,
        home_score=_score_of(home),
        away_score=_score_of(away),
        status=status,
        period=int(status_data.get("period") or 0),
        clock=status_data.get("displayClock", "") if status is GameStatus.IN_PROGRESS else "",
        detail=(status_data.get("type", {}) or {}).get("shortDetail")
        or (status_data.get("type", {}) or {}).get("detail", ""),
        possession=possession,
        field_position=field_position,
        broadcast=_broadcast_of(competition),
        last_play=last_play,
    )


def parse_scoreboard(data: dict, league: League, fetched_at: Optional[datetime] = None) -> Snapshot:
    """Turn a scoreboard payload into a Snapshot, skipping unusable events."""
    events = data.get("events")
    if not isinstance(events, list):
        raise FetchError(FetchErrorKind.MALFORMED, "response has no events list")

    games = []
    for event in events:
        try:
            games.append(parse_event(event))
        except (AttributeError, KeyError, TypeError, ValueError, IndexError) as e:
            event_id = event.get("id") if isinstance(event, dict) else None
            log.debug(f"Skipping malformed event {event_id}: {e}")
            continue

    return Snapshot(league=league, games=tuple(games), fetched_at=fetched_at or datetime.now())


class ScoreboardSource:
    """Fetches whole-league snapshots from ESPN. Holds no state between calls."""

    def __init__(self, timeout: float = 5.0, opener: Callable = urllib.request.urlopen):
        self.timeout = timeout
        self.opener = opener

    def fetch(self, league: League) -> Snapshot:
        url = scoreboard_url(league)
        log.debug(f"Fetching {url} (timeout {self.timeout:.1f}s)")
        data = fetch_json(url, self.timeout, opener=self.opener)
        snapshot = parse_scoreboard(data, league)
        log.info(f"Fetched {len(snapshot)} {league.label} games")
        return snapshot
