"""Admin API endpoints with simple token auth."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, Header, HTTPException, Request, status

if TYPE_CHECKING:
    from telehealth_ussd.containers import AppContainer
    from telehealth_ussd.domain.sessions import UssdSession

router = APIRouter(prefix="/admin", tags=["admin"])


def _get_admin_token(request: Request) -> str:
    container: AppContainer = request.app.state.container
    return container.settings.admin_token


async def require_admin(
    x_admin_token: str | None = Header(default=None),
    admin_token: str = Depends(_get_admin_token),
) -> None:
    """Ensure requests include a valid admin token."""
    if not x_admin_token or x_admin_token != admin_token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)


@router.get("/health", dependencies=[Depends(require_admin)])
async def admin_health() -> dict[str, str]:
    """Admin health check endpoint."""
    return {"status": "ok"}


@router.get("/ussd/sessions", dependencies=[Depends(require_admin)])
async def list_sessions(request: Request) -> dict[str, object]:
    """Return every live USSD session."""
    container: AppContainer = request.app.state.container
    sessions = container.session_store.list_all()
    return {"sessions": [_serialize_session(session) for session in sessions]}


@router.get("/ussd/sessions/{session_id}", dependencies=[Depends(require_admin)])
async def session_detail(session_id: str, request: Request) -> dict[str, object]:
    """Return a single USSD session."""
    container: AppContainer = request.app.state.container
    session = container.session_store.get(session_id)
    if session is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Session not found"
        )
    return _serialize_session(session)


@router.delete("/ussd/sessions/{session_id}", dependencies=[Depends(require_admin)])
async def clear_session(session_id: str, request: Request) -> dict[str, str]:
    """Force-delete a USSD session."""
    container: AppContainer = request.app.state.container
    if not container.session_store.delete(session_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Session not found"
        )
    return {"msg": "Session cleared"}


def _serialize_session(session: UssdSession) -> dict[str, object]:
    return {
        "session_id": session.session_id,
        "phone_number": session.phone_number,
        "service_code": session.service_code,
        "step": session.step,
        "service_context": (
            session.service_context.value if session.service_context else None
        ),
        "history": list(session.history),
        "created_at": session.created_at.isoformat(),
        "last_activity_at": session.last_activity_at.isoformat(),
    }
