"""
Tests for screen resolution.

These tests verify:
  - Loading always yields the loading decision
  - Unknown screen ids land on the landing page
  - Anonymous users are sent to login for role screens
  - Signed-in users never see login/signup/landing or the other role's dashboard
  - The admin screen renders for everyone
"""

import uuid

import pytest

from app.models.profile import UserType
from app.schemas.session import AuthState, User
from app.services.screen_router import Screen, resolve_screen


def make_state(user_type: UserType | None, is_loading: bool = False) -> AuthState:
    if user_type is None:
        return AuthState(user=None, is_loading=is_loading)
    user = User(
        id=uuid.uuid4(),
        name="Test User",
        email="test@example.com",
        type=user_type,
    )
    return AuthState(user=user, is_loading=is_loading)


ALL_SCREENS = [s.value for s in Screen]


class TestLoading:

    @pytest.mark.parametrize("screen_id", ALL_SCREENS + ["no-such-screen"])
    def test_loading_always_shows_indicator(self, screen_id):
        decision = resolve_screen(AuthState.bootstrapping(), screen_id)
        assert decision.action == "loading"
        assert decision.screen is None

    def test_loading_while_signed_in(self):
        decision = resolve_screen(make_state(UserType.CLIENT, is_loading=True), "bank-dashboard")
        assert decision.action == "loading"


class TestAnonymous:

    @pytest.mark.parametrize("screen_id", ["landing", "features", "about", "login", "signup"])
    def test_public_screens_render(self, screen_id):
        decision = resolve_screen(AuthState.anonymous(), screen_id)
        assert decision.action == "render"
        assert decision.screen == screen_id

    @pytest.mark.parametrize("screen_id", ["client-dashboard", "bank-dashboard"])
    def test_role_screens_redirect_to_login(self, screen_id):
        decision = resolve_screen(AuthState.anonymous(), screen_id)
        assert decision.action == "redirect"
        assert decision.screen == "login"

    def test_admin_renders_without_authentication(self, caplog):
        decision = resolve_screen(AuthState.anonymous(), "admin")
        assert decision.action == "render"
        assert decision.screen == "admin"
        assert "Admin screen opened without authentication" in caplog.text

    @pytest.mark.parametrize("screen_id", ["not-found", "no-such-screen", ""])
    def test_unknown_screens_land_on_landing(self, screen_id):
        decision = resolve_screen(AuthState.anonymous(), screen_id)
        assert decision.action == "redirect"
        assert decision.screen == "landing"


class TestSignedIn:

    @pytest.mark.parametrize("user_type, dashboard", [
        (UserType.CLIENT, "client-dashboard"),
        (UserType.BANK, "bank-dashboard"),
    ])
    @pytest.mark.parametrize("screen_id", ["landing", "login", "signup"])
    def test_anonymous_only_screens_redirect_to_dashboard(self, user_type, dashboard, screen_id):
        decision = resolve_screen(make_state(user_type), screen_id)
        assert decision.action == "redirect"
        assert decision.screen == dashboard

    def test_client_cannot_see_bank_dashboard(self):
        decision = resolve_screen(make_state(UserType.CLIENT), "bank-dashboard")
        assert decision.action == "redirect"
        assert decision.screen == "client-dashboard"

    def test_bank_cannot_see_client_dashboard(self):
        decision = resolve_screen(make_state(UserType.BANK), "client-dashboard")
        assert decision.action == "redirect"
        assert decision.screen == "bank-dashboard"

    @pytest.mark.parametrize("user_type, dashboard", [
        (UserType.CLIENT, "client-dashboard"),
        (UserType.BANK, "bank-dashboard"),
    ])
    def test_own_dashboard_renders(self, user_type, dashboard):
        decision = resolve_screen(make_state(user_type), dashboard)
        assert decision.action == "render"
        assert decision.screen == dashboard

    @pytest.mark.parametrize("user_type", [UserType.CLIENT, UserType.BANK])
    @pytest.mark.parametrize("screen_id", ALL_SCREENS + ["no-such-screen"])
    def test_never_sent_to_login_or_not_found(self, user_type, screen_id):
        decision = resolve_screen(make_state(user_type), screen_id)
        if decision.action == "redirect":
            assert decision.screen not in ("login", "signup", "not-found")

    @pytest.mark.parametrize("user_type", [UserType.CLIENT, UserType.BANK])
    def test_admin_renders_when_signed_in(self, user_type):
        decision = resolve_screen(make_state(user_type), "admin")
        assert decision.action == "render"
        assert decision.screen == "admin"
