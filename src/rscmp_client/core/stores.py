"""Observable client-side stores: session, UI preferences and unread notifications.

Each store is single-writer by convention: only its own actions mutate its fields.
The auth and UI stores persist a subset of their state through a storage backend,
the equivalent of browser local storage.
"""

import json
import os
from typing import Any, Callable, Dict, List, Optional

from rscmp_client.config.constants import (
    AUTH_STORAGE_KEY,
    ROLE_PUBLIC,
    UI_STORAGE_KEY,
)
from rscmp_client.core.models import Notification, User
from rscmp_client.utils.logging_config import get_logger

logger = get_logger(__name__)


class MemoryStorage:
    """Key/value storage that lives only as long as the process."""

    def __init__(self):
        self._data: Dict[str, Dict[str, Any]] = {}

    def get(self, key: str) -> Optional[Dict[str, Any]]:
        value = self._data.get(key)
        return dict(value) if value is not None else None

    def set(self, key: str, value: Dict[str, Any]) -> None:
        self._data[key] = dict(value)

    def remove(self, key: str) -> None:
        self._data.pop(key, None)


class JsonStorage:
    """File-backed key/value storage, one JSON document per key."""

    def __init__(self, directory: str):
        self.directory = directory

    def _path(self, key: str) -> str:
        return os.path.join(self.directory, f"{key}.json")

    def get(self, key: str) -> Optional[Dict[str, Any]]:
        path = self._path(key)
        if not os.path.exists(path):
            return None
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning("Ignoring unreadable client storage", key=key, error=str(e))
            return None
        return data if isinstance(data, dict) else None

    def set(self, key: str, value: Dict[str, Any]) -> None:
        os.makedirs(self.directory, exist_ok=True)
        with open(self._path(key), "w", encoding="utf-8") as f:
            json.dump(value, f, indent=2, ensure_ascii=False)

    def remove(self, key: str) -> None:
        path = self._path(key)
        if os.path.exists(path):
            os.remove(path)


class SessionHints:
    """One-shot hints that survive a single navigation (e.g. ``intendedRole``)."""

    def __init__(self):
        self._hints: Dict[str, str] = {}

    def set(self, key: str, value: str) -> None:
        self._hints[key] = value

    def pop(self, key: str) -> Optional[str]:
        return self._hints.pop(key, None)


class Store:
    """Base class providing change subscriptions."""

    def __init__(self):
        self._listeners: List[Callable[["Store"], None]] = []

    def subscribe(self, listener: Callable[["Store"], None]) -> Callable[[], None]:
        """Register a change listener; returns a function that removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)


class AuthStore(Store):
    """Authenticated user, token pair and the client-chosen active role."""

    def __init__(self, storage=None):
        super().__init__()
        self.storage = storage if storage is not None else MemoryStorage()
        self.user: Optional[User] = None
        self.access_token: Optional[str] = None
        self.refresh_token: Optional[str] = None
        self.selected_role: Optional[str] = None
        self.is_authenticated = False
        self._rehydrate()

    def _rehydrate(self) -> None:
        saved = self.storage.get(AUTH_STORAGE_KEY) or {}
        self.access_token = saved.get("accessToken")
        self.refresh_token = saved.get("refreshToken")
        self.selected_role = saved.get("selectedRole")
        # A persisted token means the session is resumed; the user is refetched later
        self.is_authenticated = bool(self.access_token)

    def _persist(self) -> None:
        self.storage.set(
            AUTH_STORAGE_KEY,
            {
                "accessToken": self.access_token,
                "refreshToken": self.refresh_token,
                "selectedRole": self.selected_role,
            },
        )

    def _commit(self) -> None:
        self._persist()
        self._notify()

    def set_user(self, user: User) -> None:
        self.user = user
        logger.debug("Session user set", user_id=user.id, roles=user.roles)
        self._commit()

    def set_tokens(self, access_token: str, refresh_token: str) -> None:
        self.access_token = access_token
        self.refresh_token = refresh_token
        self._commit()

    def can_act_as(self, role: str) -> bool:
        if self.user is None:
            return False
        return role == ROLE_PUBLIC or self.user.has_role(role)

    def set_selected_role(self, role: str) -> None:
        """Choose the active role; it must be one the user holds (Public is implicit)."""
        if not self.can_act_as(role):
            raise ValueError(f"User does not hold role '{role}'")
        self.selected_role = role
        logger.debug("Active role selected", role=role)
        self._commit()

    def clear_selected_role(self) -> None:
        """Forget the active role so the user is asked to pick again."""
        self.selected_role = None
        self._commit()

    def login(self, user: User, access_token: str, refresh_token: str) -> None:
        self.user = user
        self.access_token = access_token
        self.refresh_token = refresh_token
        self.is_authenticated = True
        if self.selected_role is not None and not self.can_act_as(self.selected_role):
            self.selected_role = None
        logger.debug("Logged in", user_id=user.id)
        self._commit()

    def logout(self) -> None:
        self.user = None
        self.access_token = None
        self.refresh_token = None
        self.selected_role = None
        self.is_authenticated = False
        logger.debug("Session cleared")
        self._commit()

    def update_user(self, **updates: Any) -> None:
        if self.user is None:
            return
        self.user = self.user.model_copy(update=updates)
        self._commit()

    @property
    def needs_role_selection(self) -> bool:
        """True when the active role is missing or no longer held by the user."""
        if not self.is_authenticated or self.user is None:
            return False
        return self.selected_role is None or not self.can_act_as(self.selected_role)


class UIStore(Store):
    """Dark mode and sidebar preferences; no server meaning."""

    def __init__(self, storage=None):
        super().__init__()
        self.storage = storage if storage is not None else MemoryStorage()
        saved = self.storage.get(UI_STORAGE_KEY) or {}
        self.is_dark_mode = bool(saved.get("isDarkMode", False))
        self.is_sidebar_open = bool(saved.get("isSidebarOpen", True))

    def _commit(self) -> None:
        self.storage.set(
            UI_STORAGE_KEY,
            {"isDarkMode": self.is_dark_mode, "isSidebarOpen": self.is_sidebar_open},
        )
        self._notify()

    def toggle_dark_mode(self) -> None:
        self.is_dark_mode = not self.is_dark_mode
        self._commit()

    def toggle_sidebar(self) -> None:
        self.is_sidebar_open = not self.is_sidebar_open
        self._commit()

    def set_sidebar_open(self, is_open: bool) -> None:
        self.is_sidebar_open = is_open
        self._commit()


class NotificationStore(Store):
    """Cached unread-notification counter; server truth wins on every fetch."""

    def __init__(self):
        super().__init__()
        self.unread_count = 0
        self.is_stale = True

    def set_unread_count(self, count: int) -> None:
        self.unread_count = max(0, int(count))
        self.is_stale = False
        self._notify()

    def decrement_unread_count(self) -> None:
        self.unread_count = max(0, self.unread_count - 1)
        self._notify()

    def clear_unread_count(self) -> None:
        self.unread_count = 0
        self._notify()

    def mark_read(self, notification: Notification) -> None:
        """Optimistically account for one notification being read."""
        if not notification.is_read:
            self.decrement_unread_count()

    def invalidate(self) -> None:
        self.is_stale = True
        self._notify()
