"""Re-resolve held references against a freshly adopted snapshot."""

from dataclasses import dataclass, replace
from typing import Optional

from .models import Credential, Folder, Vault


@dataclass(frozen=True)
class Selection:
    """Id-based references into the current snapshot.

    ``credential`` is the last resolved value of ``credential_id`` so a
    details view can render without another lookup; it is refreshed on
    every reconciliation.
    """

    folder_id: Optional[str] = None
    credential_id: Optional[str] = None
    credential: Optional[Credential] = None

    def resolve_folder(self, snapshot: Vault) -> Optional[Folder]:
        if self.folder_id is None:
            return None
        return snapshot.find_folder(self.folder_id)


EMPTY_SELECTION = Selection()


def reconcile(snapshot: Vault, selection: Selection) -> Selection:
    """Return ``selection`` with every reference valid for ``snapshot``."""
    if selection.folder_id is None:
        return EMPTY_SELECTION

    folder = snapshot.find_folder(selection.folder_id)
    if folder is None:
        return EMPTY_SELECTION

    if selection.credential_id is None:
        if selection.credential is None:
            return selection
        return replace(selection, credential=None)

    fresh = folder.find_credential(selection.credential_id)
    if fresh is None:
        return Selection(folder_id=folder.id)
    if fresh != selection.credential:
        return replace(selection, credential=fresh)
    return selection
