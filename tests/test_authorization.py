"""
Tests for role-based access across the HTTP surface.

These tests verify:
  - Client lookup is restricted to bank representatives
  - Client summaries carry no bank fields
  - Screen decisions follow the session's role
  - The admin screen and verification-code endpoints stay open
"""

from conftest import (
    CLIENT_ACCOUNT,
    SECOND_BANK_EMAIL,
    SECOND_BANK_PASSWORD,
    login_bank,
    login_client,
)


class TestClientLookup:

    async def test_bank_can_look_up_client(self, client, client_user, bank_user):
        await login_bank(client)

        response = await client.get(f"/clients/{CLIENT_ACCOUNT}")
        assert response.status_code == 200
        data = response.json()
        assert data["id"] == str(client_user)
        assert data["name"] == "Tendai Moyo"
        assert data["credit_score"] == 712
        assert "bank_id" not in data
        assert "bank" not in data

    async def test_unknown_account_number(self, client, bank_user):
        await login_bank(client)

        response = await client.get("/clients/ACC000000000")
        assert response.status_code == 404

    async def test_client_cannot_look_up_clients(self, client, client_user):
        await login_client(client)

        response = await client.get(f"/clients/{CLIENT_ACCOUNT}")
        assert response.status_code == 403
        assert response.json()["detail"] == "Bank access required"

    async def test_anonymous_cannot_look_up_clients(self, client, client_user):
        response = await client.get(f"/clients/{CLIENT_ACCOUNT}")
        assert response.status_code == 401


class TestScreens:

    async def test_anonymous_dashboard_redirects_to_login(self, client):
        response = await client.get("/screens/client-dashboard")
        assert response.status_code == 200
        assert response.json() == {"action": "redirect", "screen": "login"}

    async def test_client_sees_own_dashboard(self, client, client_user):
        await login_client(client)

        response = await client.get("/screens/client-dashboard")
        assert response.json() == {"action": "render", "screen": "client-dashboard"}

    async def test_client_redirected_from_bank_dashboard(self, client, client_user):
        await login_client(client)

        response = await client.get("/screens/bank-dashboard")
        assert response.json() == {"action": "redirect", "screen": "client-dashboard"}

    async def test_bank_redirected_from_login(self, client, bank_user):
        await login_bank(client)

        response = await client.get("/screens/login")
        assert response.json() == {"action": "redirect", "screen": "bank-dashboard"}

    async def test_unknown_screen_lands_on_landing(self, client):
        response = await client.get("/screens/settings")
        assert response.json() == {"action": "redirect", "screen": "landing"}

    async def test_admin_is_open(self, client):
        response = await client.get("/screens/admin")
        assert response.json() == {"action": "render", "screen": "admin"}

    async def test_after_logout_dashboard_redirects_to_login(self, client, second_bank_user):
        await login_bank(
            client,
            email=SECOND_BANK_EMAIL,
            password=SECOND_BANK_PASSWORD,
            bank="Steward Bank",
            code="STEW-VERIFY-2024",
        )
        await client.post("/session/logout")

        response = await client.get("/screens/bank-dashboard")
        assert response.json() == {"action": "redirect", "screen": "login"}
