"""gridmon - live NFL and college football scoreboard for the terminal."""

__version__ = "0.1.0"
