"""Soft-delete lifecycle — ACTIVE, TRASHED, and the terminal PURGED state.

Rows persist the state as an ``is_deleted`` flag. ``PURGED`` has no row;
it exists so that transitions out of it can be rejected explicitly.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

from .exceptions import IntegrityError

if TYPE_CHECKING:
    from cloudvault.models.files import FileBase
    from cloudvault.models.folders import FolderBase


class LifecycleState(str, Enum):
    """Lifecycle of a file or folder row."""

    ACTIVE = "active"
    TRASHED = "trashed"
    PURGED = "purged"


_TRANSITIONS: dict[LifecycleState, frozenset[LifecycleState]] = {
    LifecycleState.ACTIVE: frozenset({LifecycleState.TRASHED, LifecycleState.PURGED}),
    LifecycleState.TRASHED: frozenset({LifecycleState.ACTIVE, LifecycleState.PURGED}),
    LifecycleState.PURGED: frozenset(),
}


def state_of(row: FileBase | FolderBase) -> LifecycleState:
    """Read the lifecycle state of a persisted row."""
    return LifecycleState.TRASHED if row.is_deleted else LifecycleState.ACTIVE


def can_transition(current: LifecycleState, target: LifecycleState) -> bool:
    return target in _TRANSITIONS[current]


def transition(row: FileBase | FolderBase, target: LifecycleState) -> bool:
    """Move *row* to *target*. Returns False when it is already there.

    Only ACTIVE and TRASHED can be applied to a row; PURGED is reached by
    deleting the row, which the repository does.
    """
    current = state_of(row)
    if current == target:
        return False
    if target == LifecycleState.PURGED or not can_transition(current, target):
        msg = f"Invalid lifecycle transition: {current.value} -> {target.value}"
        raise IntegrityError(msg)
    row.is_deleted = target == LifecycleState.TRASHED
    return True
