"""
FastAPI dependencies for the session manager and role checks.

The session manager is created once in the application lifespan and kept
on app.state. Route handlers reach it through get_session_manager, and
role-restricted endpoints chain on it:

  get_session_manager (app.state -> SessionManager)
      └── get_current_user (SessionManager -> User)          [signed in]
              ├── require_client (User -> User)              [client role]
              └── require_bank (User -> User)                [bank role]

If a dependency fails (not signed in, wrong role), the request is rejected
before the route handler runs.
"""

from fastapi import Depends, HTTPException, Request, status

from app.models.profile import UserType
from app.schemas.session import User
from app.services.session_manager import SessionManager


def get_session_manager(request: Request) -> SessionManager:
    return request.app.state.session_manager


def get_current_user(
    manager: SessionManager = Depends(get_session_manager),
) -> User:
    """
    Return the signed-in user from the current AuthState.

    Raises:
        HTTPException 401: If nobody is signed in (or the session is still
            loading).
    """
    user = manager.state.user
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not signed in",
        )
    return user


def require_client(user: User = Depends(get_current_user)) -> User:
    """
    Raises:
        HTTPException 403: If the user is not a client.
    """
    if user.type is not UserType.CLIENT:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Client access required",
        )
    return user


def require_bank(user: User = Depends(get_current_user)) -> User:
    """
    Raises:
        HTTPException 403: If the user is not a bank representative.
    """
    if user.type is not UserType.BANK:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Bank access required",
        )
    return user
