"""PIN challenge guarding entry into secure folders.

The gate is single-use per entry: a grant hands the folder id back and the
gate returns to IDLE, so leaving and re-selecting a secure folder always
challenges again.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, Optional

from . import messages
from .validation import is_valid_pin, sanitize_pin_input

logger = logging.getLogger(__name__)


class GateState(str, Enum):
    IDLE = "idle"
    CHALLENGING = "challenging"
    VERIFYING = "verifying"
    DENIED = "denied"


class GateOutcome(str, Enum):
    GRANTED = "granted"
    DENIED = "denied"  # backend answered False
    FAILED = "failed"  # backend raised
    REJECTED = "rejected"  # input not 4 digits, nothing sent
    IGNORED = "ignored"  # no open challenge, or a verification already running


@dataclass(frozen=True)
class GateResult:
    outcome: GateOutcome
    folder_id: Optional[str] = None
    error: Optional[str] = None


class FolderAccessGate:
    """State machine for a single secure-folder PIN challenge.

    Args:
        verify: Coroutine function ``(folder_id, pin) -> bool``
    """

    def __init__(self, verify: Callable[[str, str], Awaitable[bool]]) -> None:
        self._verify = verify
        self.state = GateState.IDLE
        self.folder_id: Optional[str] = None
        self.pin = ""
        self.error: Optional[str] = None

    @property
    def is_open(self) -> bool:
        return self.state != GateState.IDLE

    def challenge(self, folder_id: str) -> bool:
        """Open a challenge for ``folder_id``, replacing any idle or open one."""
        if self.state == GateState.VERIFYING:
            return False
        self.state = GateState.CHALLENGING
        self.folder_id = folder_id
        self.pin = ""
        self.error = None
        return True

    def enter_pin(self, value: str) -> str:
        """Record typed input, keeping only up to four digits."""
        if self.state in (GateState.CHALLENGING, GateState.DENIED):
            self.pin = sanitize_pin_input(value)
            self.error = None
        return self.pin

    async def submit(self, pin: Optional[str] = None) -> GateResult:
        """Verify the entered PIN with the backend."""
        if pin is not None:
            self.enter_pin(pin)
        if self.state not in (GateState.CHALLENGING, GateState.DENIED):
            return GateResult(GateOutcome.IGNORED)
        folder_id = self.folder_id
        if folder_id is None:
            return GateResult(GateOutcome.IGNORED)

        if not is_valid_pin(self.pin):
            self.error = messages.PIN_SHAPE
            return GateResult(GateOutcome.REJECTED, folder_id, self.error)

        self.state = GateState.VERIFYING
        self.error = None
        try:
            granted = await self._verify(folder_id, self.pin)
            outcome = GateOutcome.GRANTED if granted else GateOutcome.DENIED
        except Exception as e:
            logger.warning("PIN verification for folder %s failed: %s", folder_id, e)
            outcome = GateOutcome.FAILED

        if self.state != GateState.VERIFYING or self.folder_id != folder_id:
            # Reset while the answer was pending; it belongs to nobody now
            return GateResult(GateOutcome.IGNORED, folder_id)

        if outcome == GateOutcome.GRANTED:
            logger.info("PIN accepted for folder %s", folder_id)
            self._reset()
            return GateResult(outcome, folder_id)

        if outcome == GateOutcome.DENIED:
            logger.info("Incorrect PIN for folder %s", folder_id)
            error = messages.PIN_INCORRECT
        else:
            error = messages.PIN_VERIFY_FAILED
        self.state = GateState.DENIED
        self.pin = ""
        self.error = error
        return GateResult(outcome, folder_id, error)

    def cancel(self) -> bool:
        """Drop the challenge. Refused while a verification is running."""
        if self.state == GateState.VERIFYING:
            return False
        self._reset()
        return True

    def reset(self) -> None:
        """Drop any challenge unconditionally, used when the session ends."""
        self._reset()

    def _reset(self) -> None:
        self.state = GateState.IDLE
        self.folder_id = None
        self.pin = ""
        self.error = None
