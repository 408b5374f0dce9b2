"""Team logos: downloaded once per team on the poll thread, kept as terminal cells."""

from __future__ import annotations

import io
import logging
import urllib.request
from typing import Callable, Optional

from PIL import Image

from gridmon.espn import fetch_bytes
from gridmon.models import FetchError, LogoArt, Snapshot, Team, TeamLogo

log = logging.getLogger(__name__)

# Expanded cards: 8 columns by 4 rows, two pixels per row.
CARD_COLUMNS = 8
CARD_ROWS = 4
# Compact cards: a single two-column cell pair next to the abbreviation.
BADGE_COLUMNS = 2
BADGE_ROWS = 1

ALPHA_THRESHOLD = 128


def _pixel(rgba) -> Optional[str]:
    r, g, b, a = rgba
    if a <= ALPHA_THRESHOLD:
        return None
    return f"#{r:02x}{g:02x}{b:02x}"


def logo_art(image: Image.Image, columns: int, rows: int) -> LogoArt:
    """Scale `image` into columns x rows half-block cells, centered, aspect kept."""
    size = (columns, rows * 2)
    scaled = image.convert("RGBA")
    scaled.thumbnail(size, Image.LANCZOS)
    canvas = Image.new("RGBA", size, (0, 0, 0, 0))
    canvas.paste(scaled, ((size[0] - scaled.width) // 2, (size[1] - scaled.height) // 2))

    return LogoArt(rows=tuple(
        tuple(
            (_pixel(canvas.getpixel((x, 2 * y))), _pixel(canvas.getpixel((x, 2 * y + 1))))
            for x in range(columns)
        )
        for y in range(rows)
    ))


def team_logo(data: bytes) -> TeamLogo:
    image = Image.open(io.BytesIO(data))
    image.load()
    return TeamLogo(
        card=logo_art(image, CARD_COLUMNS, CARD_ROWS),
        badge=logo_art(image, BADGE_COLUMNS, BADGE_ROWS),
    )


class LogoLoader:
    """Fetches each team's logo until one download succeeds.

    A failed download is retried on the next snapshot that lists the team.
    """

    def __init__(self, timeout: float = 5.0, opener: Callable = urllib.request.urlopen):
        self.timeout = timeout
        self.opener = opener
        self._loaded: set[str] = set()

    def pending(self, snapshot: Snapshot) -> list[Team]:
        teams = {}
        for game in snapshot.games:
            for team in (game.away, game.home):
                if team.logo and team.abbreviation not in self._loaded:
                    teams.setdefault(team.abbreviation, team)
        return list(teams.values())

    def load(self, team: Team) -> Optional[TeamLogo]:
        try:
            logo = team_logo(fetch_bytes(team.logo, self.timeout, opener=self.opener))
        except FetchError as e:
            log.debug(f"Logo for {team.abbreviation} not fetched: {e}")
            return None
        except (OSError, ValueError) as e:
            # PIL raises UnidentifiedImageError (an OSError) for non-image bodies
            log.debug(f"Logo for {team.abbreviation} is not a readable image: {e}")
            return None
        self._loaded.add(team.abbreviation)
        return logo
