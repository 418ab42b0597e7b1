"""@brief Textual application wiring for the Peka TUI."""

from __future__ import annotations

import asyncio
import inspect
import logging
from typing import Any, Callable, Optional

from textual.app import App
from textual.screen import ModalScreen

from peka.backend import Backend, LocalBackend
from peka.screens import InvalidTransition, Screen
from peka.session import SessionController
from peka.tui.base import ControllerBound
from peka.tui.modals import PinModal
from peka.tui.theme import MONOKAI_THEME, build_css
from peka.tui.views import VIEWS

logger = logging.getLogger(__name__)


class PekaApp(App[None]):
    """@brief Render the controller's screen and forward user intents to it."""

    CSS = build_css(MONOKAI_THEME)
    TITLE = "Peka"

    BINDINGS = [
        ("ctrl+c", "quit", "Quit"),
    ]

    def __init__(
        self,
        backend: Optional[Backend] = None,
        controller: Optional[SessionController] = None,
    ) -> None:
        super().__init__()
        self.controller = controller or SessionController(backend or LocalBackend())
        self._shown: Optional[Screen] = None
        self._sync_lock: Optional[asyncio.Lock] = None

    def on_mount(self) -> None:
        """@brief Show the loading view and discover vaults."""

        self._sync_lock = asyncio.Lock()
        self.perform(self.controller.start)

    def perform(self, intent: Callable[[], Any]) -> None:
        """@brief Run a controller intent in a worker, then re-render.

        Workers belong to the app so that a view switch never cancels an
        intent that is still waiting on the backend.
        """

        self.run_worker(self._perform(intent), group="intents")

    async def _perform(self, intent: Callable[[], Any]) -> None:
        try:
            outcome = intent()
            if inspect.isawaitable(outcome):
                task = asyncio.ensure_future(outcome)
                # Let the intent reach the backend so busy state renders
                await asyncio.sleep(0)
                await self.sync()
                await task
        except InvalidTransition as e:
            logger.warning("Ignored intent: %s", e)
        await self.sync()

    async def sync(self) -> None:
        """@brief Bring the screen stack in line with the controller."""

        async with self._sync_lock:
            target = self.controller.screen
            if target != self._shown:
                while isinstance(self.screen, ModalScreen):
                    await self.pop_screen()
                view = VIEWS[target]()
                if self._shown is None:
                    await self.push_screen(view)
                else:
                    await self.switch_screen(view)
                self._shown = target

            await self._sync_pin_modal()

            for screen in list(self.screen_stack):
                if isinstance(screen, ControllerBound) and screen.is_attached:
                    await screen.refresh_view()

    async def _sync_pin_modal(self) -> None:
        gate_open = self.controller.gate.is_open
        pin_modal = next((s for s in self.screen_stack if isinstance(s, PinModal)), None)
        if gate_open and pin_modal is None and self.controller.screen == Screen.FOLDER_LIST:
            await self.push_screen(PinModal())
        elif not gate_open and pin_modal is not None and self.screen is pin_modal:
            await self.pop_screen()

    def action_quit(self) -> None:
        self.controller.close()
        self.exit()


def run(backend: Optional[Backend] = None) -> None:
    """@brief Launch the Textual application."""

    PekaApp(backend).run()
