"""Post-login routing and route guards for the role-based dashboards."""

from dataclasses import dataclass
from typing import Iterable, List, Optional

from rscmp_client.config.constants import (
    HOME_ROUTE,
    INTENDED_ROLE_MAP,
    LOGIN_ROUTE,
    ROLE_DASHBOARDS,
    ROLE_PUBLIC,
    ROLE_SELECTION_ORDER,
    ROLE_SELECTION_ROUTE,
    SELECT_ROLE_ROUTE,
)
from rscmp_client.core.models import User
from rscmp_client.core.stores import AuthStore
from rscmp_client.utils.logging_config import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class LoginRoute:
    """Where to go after login, and the role to activate (None = let the user pick)."""

    path: str
    role: Optional[str] = None


def dashboard_for(role: str) -> str:
    return ROLE_DASHBOARDS.get(role, ROLE_DASHBOARDS[ROLE_PUBLIC])


def normalize_intended_role(hint: Optional[str]) -> Optional[str]:
    """Translate an ``intendedRole`` hint (e.g. ``researcher``) to a role name."""
    if not hint:
        return None
    if hint in INTENDED_ROLE_MAP:
        return INTENDED_ROLE_MAP[hint]
    if hint.lower() in INTENDED_ROLE_MAP:
        return INTENDED_ROLE_MAP[hint.lower()]
    return hint if hint in ROLE_DASHBOARDS else None


def resolve_login_route(user: User, intended_role: Optional[str] = None) -> LoginRoute:
    """Decide the landing page after a successful login.

    A held intended role wins; otherwise several roles lead to role selection
    and a single role (Public when none) goes straight to its dashboard.
    """
    role = normalize_intended_role(intended_role)
    if role is not None and user.has_role(role):
        logger.debug("Routing to intended role", role=role)
        return LoginRoute(path=dashboard_for(role), role=role)

    if len(user.roles) > 1:
        return LoginRoute(path=ROLE_SELECTION_ROUTE)

    role = user.roles[0] if user.roles else ROLE_PUBLIC
    return LoginRoute(path=dashboard_for(role), role=role)


def available_roles(user: User) -> List[str]:
    """Roles offered on the selection screen: held roles plus Public."""
    return [
        role
        for role in ROLE_SELECTION_ORDER
        if role == ROLE_PUBLIC or user.has_role(role)
    ]


def guard_protected(store: AuthStore, roles: Optional[Iterable[str]] = None) -> Optional[str]:
    """Return a redirect path, or None when the page may render."""
    if not store.is_authenticated:
        return LOGIN_ROUTE
    if roles is not None:
        user = store.user
        if user is None or not any(user.has_role(role) for role in roles):
            return HOME_ROUTE
    return None


def guard_role(store: AuthStore, role: str) -> Optional[str]:
    """Gate a dashboard shell on the active role."""
    if not store.is_authenticated:
        return LOGIN_ROUTE
    if store.selected_role != role:
        return SELECT_ROLE_ROUTE
    return None
