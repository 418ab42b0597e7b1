"""@brief Shared plumbing between Textual screens and the session controller."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from textual.screen import ModalScreen, Screen
from textual.widgets import Static

if TYPE_CHECKING:
    from peka.session import SessionController
    from peka.tui.app import PekaApp


def show_message(widget: Static, text: Optional[str]) -> None:
    """@brief Update a message line and hide it when there is nothing to say."""

    widget.update(text or "")
    widget.display = bool(text)


class ControllerBound:
    """@brief Give screens typed access to the app and its controller."""

    @property
    def peka(self) -> "PekaApp":
        return self.app  # type: ignore[attr-defined, return-value]

    @property
    def controller(self) -> "SessionController":
        return self.peka.controller

    async def refresh_view(self) -> None:
        """@brief Re-read controller state. Called after every intent settles."""


class PekaView(ControllerBound, Screen):
    """@brief Full-screen view mirroring one controller screen."""


class PekaModal(ControllerBound, ModalScreen[None]):
    """@brief Dialog layered over a view."""

    BINDINGS = [("escape", "close", "Close")]

    def action_close(self) -> None:
        self.dismiss()

    async def close_if_current(self) -> None:
        """@brief Dismiss from a worker, unless another dialog took over."""

        if self.is_current:
            await self.dismiss()
