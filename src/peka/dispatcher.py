"""Mutation dispatch with per-target in-flight guards.

Each state-changing backend call goes through `MutationDispatcher.dispatch`.
The dispatcher refuses duplicate calls for the same (kind, target), converts
every backend failure into a displayable message, and hands successful
snapshots to the session, unless the session that issued the call has
ended in the meantime.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Generic, Optional, Set, Tuple, TypeVar

from . import messages
from .backend import BackendError
from .models import Vault

logger = logging.getLogger(__name__)

T = TypeVar("T")


class MutationKind(str, Enum):
    """Operations routed through the dispatcher."""

    CREATE_VAULT = "create_vault"
    OPEN_VAULT = "open_vault"
    IMPORT_VAULT = "import_vault"
    DELETE_VAULT = "delete_vault"
    EXPORT_VAULT = "export_vault"
    CREATE_FOLDER = "create_folder"
    DELETE_FOLDER = "delete_folder"
    ADD_CREDENTIAL = "add_credential"
    DELETE_CREDENTIAL = "delete_credential"

    @property
    def replaces_snapshot(self) -> bool:
        """True when a successful result is a snapshot for the live session."""
        return self in _SNAPSHOT_KINDS


_SNAPSHOT_KINDS = {
    MutationKind.CREATE_FOLDER,
    MutationKind.DELETE_FOLDER,
    MutationKind.ADD_CREDENTIAL,
    MutationKind.DELETE_CREDENTIAL,
}


class DispatchStatus(str, Enum):
    APPLIED = "applied"  # snapshot adopted by the session
    COMPLETED = "completed"  # non-snapshot operation succeeded
    FAILED = "failed"
    SKIPPED = "skipped"  # same (kind, target) already in flight
    STALE = "stale"  # issuing session ended before the response arrived


@dataclass(frozen=True)
class DispatchResult(Generic[T]):
    kind: MutationKind
    target: Optional[str]
    status: DispatchStatus
    value: Optional[T] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status in (DispatchStatus.APPLIED, DispatchStatus.COMPLETED)


GuardKey = Tuple[MutationKind, Optional[str]]


class MutationDispatcher:
    """Guarded gateway between session intents and the backend.

    Args:
        adopt: Called with each successful snapshot of a snapshot-replacing kind
        generation: Returns the id of the live session; compared before adopting
    """

    def __init__(
        self,
        adopt: Callable[[Vault], None],
        generation: Callable[[], int],
    ) -> None:
        self._adopt = adopt
        self._generation = generation
        self._in_flight: Set[GuardKey] = set()

    def is_in_flight(self, kind: MutationKind, target: Optional[str] = None) -> bool:
        return (kind, target) in self._in_flight

    @property
    def in_flight(self) -> frozenset:
        return frozenset(self._in_flight)

    async def dispatch(
        self,
        kind: MutationKind,
        target: Optional[str],
        call: Callable[[], Awaitable[Any]],
        fallback_error: str = messages.FALLBACK_GENERIC,
    ) -> DispatchResult:
        """Run ``call`` unless the same (kind, target) is already running."""
        key = (kind, target)
        if key in self._in_flight:
            logger.debug("Skipping %s for %s: already in flight", kind.value, target)
            return DispatchResult(kind, target, DispatchStatus.SKIPPED)

        issued_in = self._generation()
        self._in_flight.add(key)
        logger.debug("Dispatching %s for %s", kind.value, target)
        try:
            value = await call()
        except BackendError as e:
            logger.warning("%s for %s failed: %s", kind.value, target, e.message)
            return DispatchResult(
                kind, target, DispatchStatus.FAILED, error=e.message or fallback_error
            )
        except Exception as e:
            logger.exception("%s for %s raised unexpectedly", kind.value, target)
            return DispatchResult(
                kind, target, DispatchStatus.FAILED, error=str(e) or fallback_error
            )
        finally:
            self._in_flight.discard(key)

        if not kind.replaces_snapshot:
            logger.info("%s for %s completed", kind.value, target)
            return DispatchResult(kind, target, DispatchStatus.COMPLETED, value=value)

        if self._generation() != issued_in:
            logger.info("Discarding %s result for %s: session ended", kind.value, target)
            return DispatchResult(kind, target, DispatchStatus.STALE, value=value)

        self._adopt(value)
        logger.info("%s for %s applied", kind.value, target)
        return DispatchResult(kind, target, DispatchStatus.APPLIED, value=value)
