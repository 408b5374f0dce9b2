"""Textual app hosting the scoreboard: key input, resize and redraw."""

from __future__ import annotations

import logging

from textual import events, on
from textual.app import App, ComposeResult
from textual.message import Message
from textual.widgets import Static

from gridmon.keys import Action, handle_key
from gridmon.poller import Poller
from gridmon.render import render
from gridmon.state import ScoreboardState

log = logging.getLogger(__name__)


BOARD_CSS = """
Screen { background: $background; }
Screen.light { background: white; color: black; }
#board { width: 1fr; height: 1fr; padding: 0; }
"""


class Board(Static):
    """Screen-filling widget the rendered frame is drawn into."""

    def on_resize(self, event: events.Resize) -> None:
        self.app.redraw()


class ScoreboardApp(App):
    """Full-screen scoreboard. textual owns raw mode and restores the terminal on exit."""

    CSS = BOARD_CSS

    class StateChanged(Message):
        """Posted from the poll thread after a merge."""

    def __init__(self, state: ScoreboardState, source, theme: str = "dark", poll: bool = True, logos=None):
        super().__init__()
        self.theme_name = theme
        self.scoreboard = state
        self.poller = Poller(source, state, on_change=self._state_changed, logos=logos)
        self.auto_poll = poll
        self.last_frame = None

    def compose(self) -> ComposeResult:
        yield Board("", id="board")

    def on_mount(self) -> None:
        self.title = f"gridmon - {self.scoreboard.league.label}"
        log.info(f"Starting {self.scoreboard.league.label} scoreboard, {self.theme_name} theme")
        if self.theme_name == "light":
            self.screen.add_class("light")
        self.redraw()
        if self.auto_poll:
            self.poller.start()

    def on_unmount(self) -> None:
        self.poller.stop()

    def _state_changed(self) -> None:
        # post_message is thread safe and never blocks the poll thread
        self.post_message(self.StateChanged())

    @on(StateChanged)
    def _redraw_on_change(self, event: StateChanged) -> None:
        self.redraw()

    def on_key(self, event: events.Key) -> None:
        action = handle_key(self.scoreboard, event.key)
        if action is None:
            return
        event.stop()
        if action is Action.QUIT:
            log.info("Quit requested")
            self.poller.stop()
            self.exit(return_code=0)
            return
        self.redraw()

    def redraw(self) -> None:
        view = self.scoreboard.view()
        frame = render(view, self.size.width, self.size.height)
        if frame.scroll_offset != view.scroll_offset:
            self.scoreboard.set_scroll_offset(frame.scroll_offset)
        self.last_frame = frame
        self.query_one("#board", Board).update(frame.renderable)
