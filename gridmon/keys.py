"""Key bindings and the actions they apply to ScoreboardState."""

from __future__ import annotations

from enum import Enum
from typing import Optional

from gridmon.state import ScoreboardState


class Action(Enum):
    NEXT = "next"
    PREVIOUS = "previous"
    TOGGLE_LOGOS = "toggle_logos"
    TOGGLE_LIVE = "toggle_live"
    QUIT = "quit"


# Key names as textual reports them.
BINDINGS = {
    "j": Action.NEXT,
    "down": Action.NEXT,
    "k": Action.PREVIOUS,
    "up": Action.PREVIOUS,
    "l": Action.TOGGLE_LOGOS,
    "f": Action.TOGGLE_LIVE,
    "q": Action.QUIT,
}

HELP = "j/↓ next  k/↑ prev  l logos  f live only  q quit"


def action_for(key: str) -> Optional[Action]:
    return BINDINGS.get(key)


def apply_action(state: ScoreboardState, action: Action) -> None:
    if action is Action.NEXT:
        state.next_game()
    elif action is Action.PREVIOUS:
        state.previous_game()
    elif action is Action.TOGGLE_LOGOS:
        state.toggle_logos()
    elif action is Action.TOGGLE_LIVE:
        state.toggle_live_filter()
    elif action is Action.QUIT:
        state.request_quit()


def handle_key(state: ScoreboardState, key: str) -> Optional[Action]:
    """Apply the action bound to `key`, if any, and return it."""
    action = action_for(key)
    if action is not None:
        apply_action(state, action)
    return action
