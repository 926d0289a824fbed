"""
Tests for loan application endpoints.

These tests verify:
  - Clients can apply to an active bank and see only their own applications
  - Bank representatives see applications addressed to their bank
  - Only the addressed bank may review an application
  - Unverified bank representatives see nothing
"""

import uuid

from app.models import UserType

from conftest import (
    SECOND_BANK_EMAIL,
    SECOND_BANK_PASSWORD,
    login_bank,
    login_client,
    register_user,
)


def application_body(bank_id, **overrides) -> dict:
    body = {
        "bank_id": str(bank_id),
        "amount_cents": 500000,
        "purpose": "Business expansion",
        "term_months": 24,
        "monthly_income_cents": 120000,
        "employment_status": "self-employed",
    }
    body.update(overrides)
    return body


async def apply_as_client(client, bank_id) -> dict:
    await login_client(client)
    response = await client.post("/loan-applications", json=application_body(bank_id))
    assert response.status_code == 201, response.text
    await client.post("/session/logout")
    return response.json()


class TestCreateApplication:

    async def test_client_applies(self, client, client_user, banks):
        await login_client(client)

        response = await client.post("/loan-applications", json=application_body(banks["CBZ Bank"]))
        assert response.status_code == 201
        data = response.json()
        assert data["applicant_id"] == str(client_user)
        assert data["bank_name"] == "CBZ Bank"
        assert data["amount_cents"] == 500000
        assert data["status"] == "pending"
        assert data["reviewed_at"] is None

    async def test_unknown_bank(self, client, client_user):
        await login_client(client)

        response = await client.post("/loan-applications", json=application_body(uuid.uuid4()))
        assert response.status_code == 404
        assert response.json()["error_type"] == "bank_not_found"

    async def test_amount_must_be_positive(self, client, client_user, banks):
        await login_client(client)

        response = await client.post(
            "/loan-applications",
            json=application_body(banks["CBZ Bank"], amount_cents=0),
        )
        assert response.status_code == 422

    async def test_bank_cannot_apply(self, client, bank_user, banks):
        await login_bank(client)

        response = await client.post("/loan-applications", json=application_body(banks["CBZ Bank"]))
        assert response.status_code == 403

    async def test_anonymous_cannot_apply(self, client, banks):
        response = await client.post("/loan-applications", json=application_body(banks["CBZ Bank"]))
        assert response.status_code == 401


class TestListApplications:

    async def test_client_sees_own(self, client, client_user, banks):
        created = await apply_as_client(client, banks["CBZ Bank"])
        await login_client(client)

        response = await client.get("/loan-applications")
        assert response.status_code == 200
        assert [a["id"] for a in response.json()] == [created["id"]]

    async def test_bank_sees_applications_to_its_bank(self, client, client_user, bank_user, second_bank_user, banks):
        to_cbz = await apply_as_client(client, banks["CBZ Bank"])
        await apply_as_client(client, banks["Steward Bank"])

        await login_bank(client)
        response = await client.get("/loan-applications")
        assert [a["id"] for a in response.json()] == [to_cbz["id"]]

    async def test_unverified_bank_user_sees_nothing(
        self, client, client_user, manager, credential_store, session_factory, banks
    ):
        await apply_as_client(client, banks["CBZ Bank"])
        await register_user(
            session_factory, "unverified@example.com", "Unverified123!", "Unverified", UserType.BANK
        )

        # Signing in at the credential store skips the bank code check, so
        # the profile keeps no bank.
        await credential_store.sign_in_with_password("unverified@example.com", "Unverified123!")
        await manager.wait_idle()
        assert manager.state.user.bank_id is None

        response = await client.get("/loan-applications")
        assert response.status_code == 200
        assert response.json() == []


class TestReviewApplication:

    async def test_bank_approves(self, client, client_user, bank_user, banks):
        created = await apply_as_client(client, banks["CBZ Bank"])
        await login_bank(client)

        response = await client.patch(
            f"/loan-applications/{created['id']}",
            json={"status": "approved", "review_notes": "Strong repayment history"},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "approved"
        assert data["bank_reviewer_id"] == str(bank_user)
        assert data["review_notes"] == "Strong repayment history"
        assert data["reviewed_at"] is not None

    async def test_other_bank_cannot_review(self, client, client_user, second_bank_user, banks):
        created = await apply_as_client(client, banks["CBZ Bank"])
        await login_bank(
            client,
            email=SECOND_BANK_EMAIL,
            password=SECOND_BANK_PASSWORD,
            bank="Steward Bank",
            code="STEW-VERIFY-2024",
        )

        response = await client.patch(
            f"/loan-applications/{created['id']}",
            json={"status": "rejected"},
        )
        assert response.status_code == 403
        assert response.json()["error_type"] == "unauthorized_access"

    async def test_client_cannot_review(self, client, client_user, banks):
        created = await apply_as_client(client, banks["CBZ Bank"])
        await login_client(client)

        response = await client.patch(
            f"/loan-applications/{created['id']}",
            json={"status": "approved"},
        )
        assert response.status_code == 403

    async def test_invalid_status(self, client, client_user, bank_user, banks):
        created = await apply_as_client(client, banks["CBZ Bank"])
        await login_bank(client)

        response = await client.patch(
            f"/loan-applications/{created['id']}",
            json={"status": "pending"},
        )
        assert response.status_code == 422

    async def test_unknown_application(self, client, bank_user):
        await login_bank(client)

        response = await client.patch(
            f"/loan-applications/{uuid.uuid4()}",
            json={"status": "approved"},
        )
        assert response.status_code == 404
        assert response.json()["error_type"] == "loan_application_not_found"
