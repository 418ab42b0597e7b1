"""Screen state machine.

`transition` is a pure function from (screen, event) to the next screen.
Pairs that are not listed in the table are programming errors and raise
`InvalidTransition`.
"""

from dataclasses import dataclass
from enum import Enum


class Screen(str, Enum):
    """Screens the session controller can be on."""

    DISCOVERING = "discovering"
    WELCOME = "welcome"
    WELCOME_BACK = "welcome_back"
    MASTER_PASSWORD_SETUP = "master_password_setup"
    IMPORT_VAULT = "import_vault"
    FOLDER_LIST = "folder_list"
    FOLDER_DETAIL = "folder_detail"

    @property
    def in_vault(self) -> bool:
        return self in (Screen.FOLDER_LIST, Screen.FOLDER_DETAIL)

    @property
    def is_landing(self) -> bool:
        return self in (Screen.WELCOME, Screen.WELCOME_BACK)


class EventKind(str, Enum):
    DISCOVERED = "discovered"
    DISCOVERY_FAILED = "discovery_failed"
    GET_STARTED = "get_started"
    START_IMPORT = "start_import"
    SESSION_STARTED = "session_started"
    FOLDER_OPENED = "folder_opened"
    FOLDER_CLOSED = "folder_closed"
    BACK_TO_LANDING = "back_to_landing"
    VAULT_DELETED = "vault_deleted"
    VAULT_RECORDED = "vault_recorded"


@dataclass(frozen=True)
class Event:
    """A screen event. ``vault_count`` matters only for events that land."""

    kind: EventKind
    vault_count: int = 0


class InvalidTransition(ValueError):
    """Raised when an event or intent is not accepted on the current screen."""

    def __init__(self, screen: Screen, action: str):
        super().__init__(f"'{action}' not allowed on '{screen.value}'")
        self.screen = screen
        self.action = action


def landing_for(vault_count: int) -> Screen:
    return Screen.WELCOME_BACK if vault_count > 0 else Screen.WELCOME


_FIXED = {
    (Screen.DISCOVERING, EventKind.DISCOVERY_FAILED): Screen.WELCOME,
    (Screen.WELCOME, EventKind.GET_STARTED): Screen.MASTER_PASSWORD_SETUP,
    (Screen.WELCOME, EventKind.START_IMPORT): Screen.IMPORT_VAULT,
    (Screen.MASTER_PASSWORD_SETUP, EventKind.SESSION_STARTED): Screen.FOLDER_LIST,
    (Screen.WELCOME_BACK, EventKind.SESSION_STARTED): Screen.FOLDER_LIST,
    (Screen.IMPORT_VAULT, EventKind.SESSION_STARTED): Screen.FOLDER_LIST,
    (Screen.FOLDER_LIST, EventKind.FOLDER_OPENED): Screen.FOLDER_DETAIL,
    (Screen.FOLDER_DETAIL, EventKind.FOLDER_CLOSED): Screen.FOLDER_LIST,
}

_LANDING_EVENTS = {
    EventKind.DISCOVERED: {Screen.DISCOVERING},
    EventKind.BACK_TO_LANDING: {
        Screen.MASTER_PASSWORD_SETUP,
        Screen.IMPORT_VAULT,
        Screen.FOLDER_LIST,
        Screen.FOLDER_DETAIL,
    },
    # Deletion lands regardless of which sub-state was active
    EventKind.VAULT_DELETED: {
        Screen.WELCOME,
        Screen.WELCOME_BACK,
        Screen.FOLDER_LIST,
        Screen.FOLDER_DETAIL,
    },
    # A creation or import that finishes after the user went back
    EventKind.VAULT_RECORDED: {Screen.WELCOME, Screen.WELCOME_BACK},
}


def transition(screen: Screen, event: Event) -> Screen:
    """Return the screen reached from ``screen`` on ``event``."""
    allowed_from = _LANDING_EVENTS.get(event.kind)
    if allowed_from is not None:
        if screen not in allowed_from:
            raise InvalidTransition(screen, event.kind.value)
        return landing_for(event.vault_count)

    try:
        return _FIXED[(screen, event.kind)]
    except KeyError:
        raise InvalidTransition(screen, event.kind.value) from None
