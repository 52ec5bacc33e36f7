"""File ownership for created folders and delivered messages."""

from __future__ import annotations

import os
from dataclasses import dataclass

DO_NOT_SET_OWNER = -1


@dataclass(frozen=True)
class Owner:
    uid: int = DO_NOT_SET_OWNER
    gid: int = DO_NOT_SET_OWNER

    @property
    def enabled(self) -> bool:
        return self.uid != DO_NOT_SET_OWNER and self.gid != DO_NOT_SET_OWNER


def change_owner(path: str | os.PathLike[str], owner: Owner | None) -> None:
    """chown ``path`` unless ownership is left alone (``None`` or a -1 id)."""
    if owner is None or not owner.enabled:
        return
    os.chown(path, owner.uid, owner.gid)
