"""
Session router — the process-wide session, its login/signup/logout actions.

Endpoints:
  GET  /session                — Current AuthState and any profile-load error
  POST /session/login          — Log in as a client or bank representative
  POST /session/signup         — Register and log in
  POST /session/logout         — Log out (always clears the user)
  POST /session/error/dismiss  — Hide the profile-load error banner

Security audit notes:
  - Plaintext passwords exist only in memory while the credential store
    hashes or verifies them; they are never logged.
  - Verification codes are logged neither on success nor on failure; only
    the bank name is.
"""

from fastapi import APIRouter, Depends, status

from app.dependencies import get_session_manager
from app.schemas.session import LoginRequest, SessionResponse, SignupRequest
from app.services.session_manager import SessionManager

router = APIRouter()


def _snapshot(manager: SessionManager) -> SessionResponse:
    return SessionResponse(state=manager.state, profile_error=manager.profile_error)


@router.get(
    "",
    response_model=SessionResponse,
    summary="Current session state",
)
async def get_session(manager: SessionManager = Depends(get_session_manager)):
    """
    Return the current AuthState.

    While the session is still bootstrapping, `state.is_loading` is true and
    screens should show a loading indicator.
    """
    return _snapshot(manager)


@router.post(
    "/login",
    response_model=SessionResponse,
    summary="Log in",
)
async def login(
    request: LoginRequest,
    manager: SessionManager = Depends(get_session_manager),
):
    """
    Log in with email and password.

    - **client**: `account_number` must match the one on the profile
    - **bank**: `bank` and its `verification_code` are required; the first
      successful login marks the profile as verified for that bank
    """
    await manager.login(
        email=request.email,
        password=request.password,
        role=request.type,
        bank=request.bank,
        account_number=request.account_number,
        verification_code=request.verification_code,
    )
    return _snapshot(manager)


@router.post(
    "/signup",
    response_model=SessionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new user",
)
async def signup(
    request: SignupRequest,
    manager: SessionManager = Depends(get_session_manager),
):
    """
    Register a client or bank representative and log them in.

    Bank representatives must sign up with their bank's verification code.
    """
    await manager.signup(
        name=request.name,
        email=request.email,
        password=request.password,
        role=request.type,
        bank=request.bank,
        account_number=request.account_number,
        verification_code=request.verification_code,
    )
    return _snapshot(manager)


@router.post(
    "/logout",
    response_model=SessionResponse,
    summary="Log out",
)
async def logout(manager: SessionManager = Depends(get_session_manager)):
    await manager.logout()
    return _snapshot(manager)


@router.post(
    "/error/dismiss",
    response_model=SessionResponse,
    summary="Dismiss the profile error banner",
)
async def dismiss_error(manager: SessionManager = Depends(get_session_manager)):
    manager.dismiss_profile_error()
    return _snapshot(manager)
