"""
Route guard — redirect policy evaluated on every render.

Pure functions of (route, session view); no navigation side effects here.
The UI layer performs the actual page switch.
"""

from enum import StrEnum
from typing import Protocol

from src.core.models import UserIdentity


class Route(StrEnum):
    """Pages of the client."""

    home = "/"
    login = "/login"
    register = "/register"
    transcribe = "/transcribe"
    history = "/history"
    result = "/result"


PROTECTED_ROUTES = frozenset({Route.transcribe, Route.history, Route.result})
ANONYMOUS_ONLY_ROUTES = frozenset({Route.login, Route.register})
LANDING_ROUTE = Route.transcribe


class SessionView(Protocol):
    """Read-only view of the session the guard needs."""

    @property
    def identity(self) -> UserIdentity | None: ...

    @property
    def is_loading(self) -> bool: ...


def resolve_redirect(route: Route, session: SessionView) -> Route | None:
    """Return where ``route`` must redirect to, or ``None`` to stay.

    Never redirects while the session probe is still running.
    """
    if session.is_loading:
        return None
    if route in PROTECTED_ROUTES and session.identity is None:
        return Route.login
    if route in ANONYMOUS_ONLY_ROUTES and session.identity is not None:
        return LANDING_ROUTE
    return None


def can_render(route: Route, session: SessionView) -> bool:
    """Whether the page body may be drawn right now.

    Protected pages wait for a resolved session with an identity, so that no
    protected content flashes before the probe completes.
    """
    if route in PROTECTED_ROUTES:
        return not session.is_loading and session.identity is not None
    if route in ANONYMOUS_ONLY_ROUTES:
        return not session.is_loading and session.identity is None
    return True
