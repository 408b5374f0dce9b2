"""Optional JSON configuration and the resolved runtime Settings."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from gridmon.models import League

log = logging.getLogger(__name__)

DEFAULT_INTERVAL = 15
MIN_INTERVAL = 1
THEMES = ("dark", "light")


class ConfigError(Exception):
    pass


def config_paths() -> list[Path]:
    return [
        Path.cwd() / "gridmon_config.json",
        Path(os.path.expanduser("~/.config/gridmon/config.json")),
    ]


def load_config(path: Optional[Path] = None) -> dict:
    """Load config from `path`, or the first of ./gridmon_config.json and ~/.config/gridmon/config.json.

    An explicit path must exist and parse; the default locations are optional
    and a broken file there is logged and ignored.
    """
    if path is not None:
        try:
            data = json.loads(Path(path).read_text(encoding="utf-8")) or {}
        except (OSError, ValueError) as e:
            raise ConfigError(f"cannot read config {path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"config {path} must be a JSON object")
        return data

    for p in config_paths():
        try:
            if p.is_file():
                data = json.loads(p.read_text(encoding="utf-8")) or {}
                if isinstance(data, dict):
                    return data
                log.warning(f"Ignoring {p}: not a JSON object")
        except (OSError, ValueError) as e:
            log.warning(f"Ignoring unreadable config {p}: {e}")
            continue

    return {}


@dataclass(frozen=True)
class Settings:
    league: League = League.NFL
    interval: int = DEFAULT_INTERVAL
    show_logos: bool = True
    theme: str = "dark"

    @classmethod
    def resolve(cls, config: dict, ncaa: bool = False, interval: Optional[int] = None) -> "Settings":
        """Merge file config with command-line overrides."""
        league = League.NCAA if ncaa else League.NFL
        if not ncaa and str(config.get("league", "nfl")).lower() == "ncaa":
            league = League.NCAA

        if interval is None:
            try:
                interval = int(config.get("interval", DEFAULT_INTERVAL))
            except (TypeError, ValueError):
                log.warning(f"Bad interval {config.get('interval')!r} in config, using {DEFAULT_INTERVAL}")
                interval = DEFAULT_INTERVAL
        interval = max(MIN_INTERVAL, interval)

        theme = str(config.get("theme", "dark")).lower()
        if theme not in THEMES:
            theme = "dark"

        return cls(
            league=league,
            interval=interval,
            show_logos=bool(config.get("show_logos", True)),
            theme=theme,
        )
