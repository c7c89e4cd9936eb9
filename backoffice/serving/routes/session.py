"""
Session Endpoints
"""

from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from backoffice.container import BackOffice
from backoffice.models import User
from backoffice.presentation.badges import BadgeDescriptor, role_badge
from backoffice.serving.dependencies import get_backoffice

router = APIRouter()


class LoginRequest(BaseModel):
    email: str
    password: str


class SessionResponse(BaseModel):
    authenticated: bool
    ready: bool
    gate_state: str
    user: Optional[User] = None
    role_badge: Optional[BadgeDescriptor] = None


def _session_response(backoffice: BackOffice) -> SessionResponse:
    user = backoffice.session.user
    return SessionResponse(
        authenticated=backoffice.session.is_authenticated,
        ready=backoffice.gate.is_ready,
        gate_state=backoffice.gate.state.value,
        user=user,
        role_badge=role_badge(user.role) if user else None,
    )


@router.get("", response_model=SessionResponse)
async def get_session(backoffice: BackOffice = Depends(get_backoffice)) -> SessionResponse:
    return _session_response(backoffice)


@router.post("", response_model=SessionResponse)
async def login(body: LoginRequest, backoffice: BackOffice = Depends(get_backoffice)) -> SessionResponse:
    await backoffice.session.login(body.email, body.password)
    return _session_response(backoffice)


@router.post("/refresh", response_model=SessionResponse)
async def refresh(backoffice: BackOffice = Depends(get_backoffice)) -> SessionResponse:
    await backoffice.session.refresh()
    return _session_response(backoffice)


@router.delete("", response_model=SessionResponse)
async def logout(backoffice: BackOffice = Depends(get_backoffice)) -> SessionResponse:
    await backoffice.session.logout()
    return _session_response(backoffice)
