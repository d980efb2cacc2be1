"""Unit tests for stores.py."""

import json
import os

import pytest

from rscmp_client.core.models import Notification
from rscmp_client.core.stores import (
    AuthStore,
    JsonStorage,
    MemoryStorage,
    NotificationStore,
    SessionHints,
    UIStore,
)

from conftest import make_user


class TestAuthStore:
    """Test the session store."""

    def test_login_sets_session(self):
        """Test login stores user and tokens."""
        store = AuthStore()
        store.login(make_user(["Reviewer"]), "access", "refresh")
        assert store.is_authenticated
        assert store.user.id == "u1"
        assert store.access_token == "access"
        assert store.refresh_token == "refresh"

    def test_selected_role_must_be_held(self):
        """Test selecting a role the user lacks is refused."""
        store = AuthStore()
        store.login(make_user(["Reviewer"]), "a", "r")
        with pytest.raises(ValueError):
            store.set_selected_role("Admin")
        assert store.selected_role is None

    def test_public_is_always_selectable(self):
        """Test every authenticated user may act as Public."""
        store = AuthStore()
        store.login(make_user([]), "a", "r")
        store.set_selected_role("Public")
        assert store.selected_role == "Public"

    def test_needs_role_selection(self):
        """Test re-prompting when no valid role is active."""
        store = AuthStore()
        assert not store.needs_role_selection
        store.login(make_user(["Reviewer", "Chairman"]), "a", "r")
        assert store.needs_role_selection
        store.set_selected_role("Chairman")
        assert not store.needs_role_selection
        store.clear_selected_role()
        assert store.needs_role_selection

    def test_login_drops_role_not_held(self):
        """Test a persisted role the new user lacks is cleared."""
        storage = MemoryStorage()
        storage.set("rscmp-auth", {"accessToken": "old", "refreshToken": "r", "selectedRole": "Admin"})
        store = AuthStore(storage)
        store.login(make_user(["Reviewer"]), "a", "r")
        assert store.selected_role is None

    def test_logout_clears_everything(self):
        """Test logout resets the session and persisted state."""
        storage = MemoryStorage()
        store = AuthStore(storage)
        store.login(make_user(["Reviewer"]), "a", "r")
        store.set_selected_role("Reviewer")
        store.logout()
        assert not store.is_authenticated
        assert store.user is None
        assert store.selected_role is None
        assert storage.get("rscmp-auth")["accessToken"] is None

    def test_persists_tokens_and_role_only(self):
        """Test only tokens and the selected role are persisted."""
        storage = MemoryStorage()
        store = AuthStore(storage)
        store.login(make_user(["Reviewer"]), "a", "r")
        store.set_selected_role("Reviewer")
        assert storage.get("rscmp-auth") == {
            "accessToken": "a",
            "refreshToken": "r",
            "selectedRole": "Reviewer",
        }

    def test_rehydrates_from_storage(self):
        """Test a persisted token resumes the session."""
        storage = MemoryStorage()
        storage.set("rscmp-auth", {"accessToken": "a", "refreshToken": "r", "selectedRole": "Reviewer"})
        store = AuthStore(storage)
        assert store.is_authenticated
        assert store.selected_role == "Reviewer"
        assert store.user is None

    def test_update_user(self):
        """Test profile updates replace fields on the stored user."""
        store = AuthStore()
        store.update_user(full_name_en="Nobody")
        assert store.user is None
        store.login(make_user(["Reviewer"]), "a", "r")
        store.update_user(full_name_en="Renamed")
        assert store.user.full_name_en == "Renamed"

    def test_subscribe_and_unsubscribe(self):
        """Test listeners are notified until they unsubscribe."""
        store = AuthStore()
        seen = []
        unsubscribe = store.subscribe(lambda s: seen.append(s.is_authenticated))
        store.login(make_user(["Reviewer"]), "a", "r")
        unsubscribe()
        store.logout()
        assert seen == [True]


class TestUIStore:
    """Test UI preference store."""

    def test_defaults(self):
        """Test light mode and open sidebar by default."""
        store = UIStore()
        assert not store.is_dark_mode
        assert store.is_sidebar_open

    def test_toggles_persist(self):
        """Test preferences survive a new store on the same storage."""
        storage = MemoryStorage()
        store = UIStore(storage)
        store.toggle_dark_mode()
        store.toggle_sidebar()
        restored = UIStore(storage)
        assert restored.is_dark_mode
        assert not restored.is_sidebar_open
        restored.set_sidebar_open(True)
        assert storage.get("rscmp-ui") == {"isDarkMode": True, "isSidebarOpen": True}


class TestNotificationStore:
    """Test the unread counter."""

    def make_notification(self, is_read):
        return Notification(id="n1", title_en="t", is_read=is_read)

    def test_set_unread_count_clamps(self):
        """Test negative counts clamp to zero."""
        store = NotificationStore()
        assert store.is_stale
        store.set_unread_count(-3)
        assert store.unread_count == 0
        assert not store.is_stale

    def test_mark_read_decrements_once_for_unread(self):
        """Test marking an unread item decreases the count by exactly one."""
        store = NotificationStore()
        store.set_unread_count(3)
        store.mark_read(self.make_notification(is_read=False))
        assert store.unread_count == 2

    def test_mark_read_ignores_read_items(self):
        """Test marking an already read item leaves the count alone."""
        store = NotificationStore()
        store.set_unread_count(3)
        store.mark_read(self.make_notification(is_read=True))
        assert store.unread_count == 3

    def test_decrement_floors_at_zero(self):
        """Test the counter never goes negative."""
        store = NotificationStore()
        store.set_unread_count(0)
        store.decrement_unread_count()
        assert store.unread_count == 0

    def test_clear_and_invalidate(self):
        """Test clearing zeroes the count and invalidate marks it stale."""
        store = NotificationStore()
        store.set_unread_count(5)
        store.clear_unread_count()
        assert store.unread_count == 0
        store.invalidate()
        assert store.is_stale


class TestStorage:
    """Test storage backends and session hints."""

    def test_json_storage_round_trip(self, tmp_path):
        """Test values are written as one JSON file per key."""
        storage = JsonStorage(str(tmp_path / "state"))
        assert storage.get("rscmp-auth") is None
        storage.set("rscmp-auth", {"accessToken": "a"})
        path = tmp_path / "state" / "rscmp-auth.json"
        assert json.loads(path.read_text(encoding="utf-8")) == {"accessToken": "a"}
        assert storage.get("rscmp-auth") == {"accessToken": "a"}
        storage.remove("rscmp-auth")
        assert not os.path.exists(path)

    def test_json_storage_ignores_corrupt_file(self, tmp_path):
        """Test unreadable files behave like missing keys."""
        (tmp_path / "rscmp-ui.json").write_text("{not json", encoding="utf-8")
        assert JsonStorage(str(tmp_path)).get("rscmp-ui") is None

    def test_memory_storage_copies(self):
        """Test stored dicts are isolated from caller mutation."""
        storage = MemoryStorage()
        value = {"a": 1}
        storage.set("k", value)
        value["a"] = 2
        assert storage.get("k") == {"a": 1}

    def test_session_hints_are_one_shot(self):
        """Test a hint can be consumed only once."""
        hints = SessionHints()
        hints.set("intendedRole", "reviewer")
        assert hints.pop("intendedRole") == "reviewer"
        assert hints.pop("intendedRole") is None
