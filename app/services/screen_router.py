"""
Screen router — decides which screen the current AuthState may see.

resolve_screen() is a pure function of (AuthState, requested screen id) and
is re-run on every navigation:

  1. While loading, every request gets the loading indicator.
  2. Unknown ids (and "not-found") go to the landing page.
  3. Anonymous users asking for a role screen go to login.
  4. Signed-in users asking for landing/login/signup go to their dashboard.
  5. Signed-in users asking for the other role's dashboard go to their own.
  6. Everything else renders.

Signed-in users are always sent somewhere they are allowed, never to login
or an error page.

The admin screen renders for anyone, signed in or not. That is how the
screen has always been wired; whether it should require an administrator
is an open decision, so anonymous access is logged rather than blocked.
"""

import enum
import logging

from app.models.profile import UserType
from app.schemas.screen import RouteDecision
from app.schemas.session import AuthState, User

logger = logging.getLogger(__name__)


class Screen(str, enum.Enum):
    LANDING = "landing"
    FEATURES = "features"
    ABOUT = "about"
    LOGIN = "login"
    SIGNUP = "signup"
    CLIENT_DASHBOARD = "client-dashboard"
    BANK_DASHBOARD = "bank-dashboard"
    ADMIN = "admin"
    NOT_FOUND = "not-found"


class Access(str, enum.Enum):
    PUBLIC = "public"
    ANONYMOUS_ONLY = "anonymous-only"
    ROLE_CLIENT = "role:client"
    ROLE_BANK = "role:bank"
    UNRESTRICTED_ADMIN = "unrestricted-admin"


SCREEN_ACCESS: dict[Screen, Access] = {
    Screen.LANDING: Access.ANONYMOUS_ONLY,
    Screen.FEATURES: Access.PUBLIC,
    Screen.ABOUT: Access.PUBLIC,
    Screen.LOGIN: Access.ANONYMOUS_ONLY,
    Screen.SIGNUP: Access.ANONYMOUS_ONLY,
    Screen.CLIENT_DASHBOARD: Access.ROLE_CLIENT,
    Screen.BANK_DASHBOARD: Access.ROLE_BANK,
    Screen.ADMIN: Access.UNRESTRICTED_ADMIN,
    Screen.NOT_FOUND: Access.PUBLIC,
}

REQUIRED_ROLE: dict[Access, UserType] = {
    Access.ROLE_CLIENT: UserType.CLIENT,
    Access.ROLE_BANK: UserType.BANK,
}

DASHBOARDS: dict[UserType, Screen] = {
    UserType.CLIENT: Screen.CLIENT_DASHBOARD,
    UserType.BANK: Screen.BANK_DASHBOARD,
}


def dashboard_for(user: User) -> Screen:
    return DASHBOARDS[user.type]


def _render(screen: Screen) -> RouteDecision:
    return RouteDecision(action="render", screen=screen.value)


def _redirect(screen: Screen) -> RouteDecision:
    return RouteDecision(action="redirect", screen=screen.value)


def resolve_screen(state: AuthState, requested: str) -> RouteDecision:
    if state.is_loading:
        return RouteDecision(action="loading")

    try:
        screen = Screen(requested)
    except ValueError:
        return _redirect(Screen.LANDING)
    if screen is Screen.NOT_FOUND:
        return _redirect(Screen.LANDING)

    access = SCREEN_ACCESS[screen]
    user = state.user

    if user is None:
        if access in REQUIRED_ROLE:
            return _redirect(Screen.LOGIN)
        if access is Access.UNRESTRICTED_ADMIN:
            logger.warning("Admin screen opened without authentication")
        return _render(screen)

    if access is Access.ANONYMOUS_ONLY:
        return _redirect(dashboard_for(user))
    if access in REQUIRED_ROLE and REQUIRED_ROLE[access] != user.type:
        return _redirect(dashboard_for(user))
    return _render(screen)
