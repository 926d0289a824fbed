"""
Custom exception classes and FastAPI exception handlers.

The session manager and the services raise domain-specific errors without
importing HTTP concepts. The handler layer translates them into HTTP
responses with a consistent {"detail", "error_type"} body.

Exception hierarchy:
    CreditScoreError (base)
    ├── InvalidCredentialsError       — bad email/password at the credential store
    ├── ProfileNotFoundError          — authenticated subject has no profile row
    ├── RoleMismatchError             — login role differs from the stored role
    ├── AccountNumberRequiredError    — client login without an account number
    ├── InvalidAccountNumberError     — client login with the wrong account number
    ├── BankAndCodeRequiredError      — bank login without bank or code
    ├── InvalidVerificationCodeError  — bank login with an unknown/wrong code
    ├── SignupError                   — credential creation failed
    ├── ProfileLoadFailure            — reconciliation could not load a profile
    ├── CredentialStoreError          — credential store call failed
    ├── ProfileStoreError             — profile/bank table call failed
    ├── UnauthorizedAccessError       — caller's role may not do this
    ├── BankNotFoundError             — bank directory has no such bank
    └── LoanApplicationNotFoundError  — requested application doesn't exist
"""

import uuid

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse


# ---------------------------------------------------------------------------
# Base exception
# ---------------------------------------------------------------------------

class CreditScoreError(Exception):
    """Base exception for all CreditScore Pro domain errors."""

    error_type = "error"
    status_code = 400

    def __init__(self, detail: str = "An error occurred"):
        self.detail = detail
        super().__init__(self.detail)


# ---------------------------------------------------------------------------
# Login / signup errors
# ---------------------------------------------------------------------------

class InvalidCredentialsError(CreditScoreError):
    """Raised when the credential store rejects an email/password pair."""

    error_type = "invalid_credentials"
    status_code = 401

    def __init__(self, detail: str = "Invalid login credentials"):
        super().__init__(detail)


class ProfileNotFoundError(CreditScoreError):
    """Raised when an authenticated subject has no profile row."""

    error_type = "profile_not_found"
    status_code = 404

    def __init__(self):
        super().__init__("Profile not found")


class RoleMismatchError(CreditScoreError):
    """
    Raised when a login names a role other than the one stored on the profile.

    Attributes:
        stored_role: The role recorded on the profile.
        requested_role: The role the caller tried to log in as.
    """

    error_type = "role_mismatch"
    status_code = 403

    def __init__(self, stored_role: str, requested_role: str):
        self.stored_role = stored_role
        self.requested_role = requested_role
        super().__init__(
            f"Account is registered as {stored_role}, not {requested_role}"
        )


class AccountNumberRequiredError(CreditScoreError):
    """Raised when a client logs in without an account number."""

    error_type = "account_number_required"
    status_code = 422

    def __init__(self):
        super().__init__("Account number is required for client login")


class InvalidAccountNumberError(CreditScoreError):
    """Raised when a client's account number doesn't match their profile."""

    error_type = "invalid_account_number"
    status_code = 401

    def __init__(self):
        super().__init__("Invalid account number")


class BankAndCodeRequiredError(CreditScoreError):
    """Raised when a bank user logs in without a bank or verification code."""

    error_type = "bank_and_code_required"
    status_code = 422

    def __init__(self):
        super().__init__("Bank selection and verification code are required")


class InvalidVerificationCodeError(CreditScoreError):
    """Raised when the verification code is unknown or doesn't match the bank."""

    error_type = "invalid_verification_code"
    status_code = 401

    def __init__(self):
        super().__init__("Invalid verification code")


class SignupError(CreditScoreError):
    """Raised when the credential store cannot create a new credential."""

    error_type = "signup_error"
    status_code = 409


class ProfileLoadFailure(CreditScoreError):
    """
    Recorded (not raised to callers) when reconciliation cannot load a profile.

    The session manager keeps the message in its last-error slot so the UI
    can show a banner with a logout action.
    """

    error_type = "profile_load_failure"
    status_code = 500


# ---------------------------------------------------------------------------
# Store errors
# ---------------------------------------------------------------------------

class CredentialStoreError(CreditScoreError):
    """Raised when a credential store call fails for a non-credential reason."""

    error_type = "credential_store_error"
    status_code = 503


class ProfileStoreError(CreditScoreError):
    """Raised when a profile, bank or score table call fails."""

    error_type = "profile_store_error"
    status_code = 503


# ---------------------------------------------------------------------------
# Resource errors
# ---------------------------------------------------------------------------

class UnauthorizedAccessError(CreditScoreError):
    """Raised when the current user's role may not perform an action."""

    error_type = "unauthorized_access"
    status_code = 403

    def __init__(self, detail: str = "You do not have access to this resource"):
        super().__init__(detail)


class BankNotFoundError(CreditScoreError):
    """Raised when a bank name or id is not in the bank directory."""

    error_type = "bank_not_found"
    status_code = 404

    def __init__(self, bank: str | uuid.UUID):
        self.bank = bank
        super().__init__(f"Bank {bank} not found")


class LoanApplicationNotFoundError(CreditScoreError):
    """Raised when a requested loan application does not exist."""

    error_type = "loan_application_not_found"
    status_code = 404

    def __init__(self, application_id: uuid.UUID):
        self.application_id = application_id
        super().__init__(f"Loan application {application_id} not found")


# ---------------------------------------------------------------------------
# FastAPI exception handlers
# ---------------------------------------------------------------------------

def register_exception_handlers(app: FastAPI) -> None:
    """
    Register custom exception handlers with the FastAPI application.

    Every domain error carries its own status code and error_type, so one
    handler covers the hierarchy. RoleMismatchError additionally reports
    both roles so the form can point at the right toggle.

    This is called once during app startup in main.py.
    """

    @app.exception_handler(RoleMismatchError)
    async def role_mismatch_handler(
        request: Request, exc: RoleMismatchError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "detail": exc.detail,
                "error_type": exc.error_type,
                "stored_role": exc.stored_role,
                "requested_role": exc.requested_role,
            },
        )

    @app.exception_handler(CreditScoreError)
    async def credit_score_error_handler(
        request: Request, exc: CreditScoreError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail, "error_type": exc.error_type},
        )
