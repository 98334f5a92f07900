"""Unit tests for the route guard."""

from dataclasses import dataclass

import pytest

from src.core.models import UserIdentity
from src.services.navigation import (
    ANONYMOUS_ONLY_ROUTES,
    LANDING_ROUTE,
    PROTECTED_ROUTES,
    Route,
    can_render,
    resolve_redirect,
)


@dataclass
class FakeSession:
    identity: UserIdentity | None = None
    is_loading: bool = False


LOADING = FakeSession(is_loading=True)
ANONYMOUS = FakeSession()
SIGNED_IN = FakeSession(identity=UserIdentity(id=1, email="ada@example.com"))


class TestResolveRedirect:
    @pytest.mark.parametrize("route", list(Route))
    def test_never_redirects_while_loading(self, route):
        assert resolve_redirect(route, LOADING) is None

    @pytest.mark.parametrize("route", sorted(PROTECTED_ROUTES))
    def test_protected_routes_send_anonymous_users_to_login(self, route):
        assert resolve_redirect(route, ANONYMOUS) is Route.login

    @pytest.mark.parametrize("route", sorted(ANONYMOUS_ONLY_ROUTES))
    def test_anonymous_only_routes_send_signed_in_users_to_landing(self, route):
        assert resolve_redirect(route, SIGNED_IN) is LANDING_ROUTE

    @pytest.mark.parametrize("route", sorted(PROTECTED_ROUTES))
    def test_signed_in_users_stay_on_protected_routes(self, route):
        assert resolve_redirect(route, SIGNED_IN) is None

    @pytest.mark.parametrize("session", [ANONYMOUS, SIGNED_IN])
    def test_home_is_public(self, session):
        assert resolve_redirect(Route.home, session) is None

    def test_landing_is_protected(self):
        assert LANDING_ROUTE in PROTECTED_ROUTES


class TestCanRender:
    @pytest.mark.parametrize("route", sorted(PROTECTED_ROUTES))
    def test_protected_content_waits_for_probe(self, route):
        assert can_render(route, LOADING) is False
        assert can_render(route, ANONYMOUS) is False
        assert can_render(route, SIGNED_IN) is True

    @pytest.mark.parametrize("route", sorted(ANONYMOUS_ONLY_ROUTES))
    def test_login_forms_hidden_from_signed_in_users(self, route):
        assert can_render(route, LOADING) is False
        assert can_render(route, ANONYMOUS) is True
        assert can_render(route, SIGNED_IN) is False

    def test_home_always_renders(self):
        assert all(can_render(Route.home, s) for s in (LOADING, ANONYMOUS, SIGNED_IN))
