"""
Auth module: FastAPI dependencies exposing the process-wide contexts.

The app is a local single-user tool: one active session per process, held by
the SessionContext on ``app.state``. Routes that touch patient records depend
on ``get_current_user``, which rejects requests while nobody is logged in.
"""

from fastapi import Depends, HTTPException, Request
from medflow.contexts.patients_context import PatientsContext
from medflow.contexts.session_context import SessionContext
from medflow.schemas.account import Account


def get_session_context(request: Request) -> SessionContext:
    return request.app.state.session_context


def get_patients_context(request: Request) -> PatientsContext:
    return request.app.state.patients_context


def get_current_user(session: SessionContext = Depends(get_session_context)) -> Account:
    """FastAPI dependency. Returns the active account or raises 401."""
    if session.user is None:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return session.user
