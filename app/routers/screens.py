"""
Screens router — asks the screen router where a navigation should land.

Endpoints:
  GET /screens/{screen_id} — render / redirect / loading decision
"""

from fastapi import APIRouter, Depends

from app.dependencies import get_session_manager
from app.schemas.screen import RouteDecision
from app.services.screen_router import resolve_screen
from app.services.session_manager import SessionManager

router = APIRouter()


@router.get(
    "/{screen_id}",
    response_model=RouteDecision,
    summary="Resolve a screen for the current session",
)
async def get_screen(
    screen_id: str,
    manager: SessionManager = Depends(get_session_manager),
):
    """
    Decide what to show for `screen_id`.

    Unknown ids redirect to `landing`. While the session is loading the
    answer is always `loading`.
    """
    return resolve_screen(manager.state, screen_id)
