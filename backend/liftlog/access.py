from __future__ import annotations

from liftlog.models.enums import Visibility

SHARED = (Visibility.public, Visibility.unlisted)


def can_access(user_id: int | None, owner_id: int, visibility: Visibility | str) -> bool:
    """Owners always see their own resources; anyone sees PUBLIC/UNLISTED ones."""
    if user_id is not None and user_id == owner_id:
        return True
    return Visibility(visibility) in SHARED


def can_modify(user_id: int, owner_id: int) -> bool:
    return user_id == owner_id
