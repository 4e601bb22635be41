"""Tests for the ACTIVE/TRASHED/PURGED lifecycle and the ownership guard."""

from __future__ import annotations

import pytest

from cloudvault.fs.exceptions import IntegrityError, NotFoundError
from cloudvault.fs.guard import Access, AccessGuard
from cloudvault.fs.lifecycle import LifecycleState, can_transition, state_of, transition
from cloudvault.models import File, Folder


class TestLifecycle:
    def test_state_of(self):
        folder = Folder(owner_id="a", name="x")
        assert state_of(folder) is LifecycleState.ACTIVE
        folder.is_deleted = True
        assert state_of(folder) is LifecycleState.TRASHED

    def test_trash_and_restore(self):
        f = File(owner_id="a", name="x", storage_key="a/x")
        assert transition(f, LifecycleState.TRASHED) is True
        assert f.is_deleted is True
        assert transition(f, LifecycleState.ACTIVE) is True
        assert f.is_deleted is False

    def test_same_state_is_noop(self):
        f = File(owner_id="a", name="x", storage_key="a/x")
        assert transition(f, LifecycleState.ACTIVE) is False
        f.is_deleted = True
        assert transition(f, LifecycleState.TRASHED) is False
        assert f.is_deleted is True

    def test_purged_is_terminal(self):
        assert can_transition(LifecycleState.PURGED, LifecycleState.ACTIVE) is False
        assert can_transition(LifecycleState.PURGED, LifecycleState.TRASHED) is False

    def test_purge_not_applied_to_rows(self):
        f = File(owner_id="a", name="x", storage_key="a/x")
        with pytest.raises(IntegrityError, match="Invalid lifecycle transition"):
            transition(f, LifecycleState.PURGED)

    def test_both_live_states_can_purge(self):
        assert can_transition(LifecycleState.ACTIVE, LifecycleState.PURGED)
        assert can_transition(LifecycleState.TRASHED, LifecycleState.PURGED)


class TestAccessGuard:
    def test_owner_allowed(self):
        assert AccessGuard.authorize("alice", "alice") is Access.ALLOWED

    def test_other_user_denied(self):
        assert AccessGuard.authorize("bob", "alice") is Access.DENIED

    @pytest.mark.parametrize("caller", ["", None])
    def test_anonymous_denied(self, caller):
        assert AccessGuard.authorize(caller, "alice") is Access.DENIED

    def test_require_owned_returns_resource(self):
        folder = Folder(owner_id="alice", name="Docs")
        assert AccessGuard().require_owned(folder, "alice", kind="Folder") is folder

    def test_missing_and_foreign_look_the_same(self):
        guard = AccessGuard()
        folder = Folder(owner_id="alice", name="Docs")
        with pytest.raises(NotFoundError) as missing:
            guard.require_owned(None, "bob", kind="Folder")
        with pytest.raises(NotFoundError) as foreign:
            guard.require_owned(folder, "bob", kind="Folder")
        assert str(missing.value) == str(foreign.value)
