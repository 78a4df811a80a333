from fastapi import APIRouter, Depends, HTTPException
from medflow.auth import get_session_context
from medflow.contexts.session_context import SessionContext
from medflow.exceptions import AuthenticationFailed, DuplicateUsername
from medflow.schemas.account import AccountResponse, Credentials, SessionResponse

router = APIRouter()


def _clean(body: Credentials) -> tuple[str, str]:
    username = body.username.strip()
    if not username or not body.password.strip():
        raise HTTPException(status_code=400, detail="Please fill in all fields")
    return username, body.password


@router.post("/register", response_model=AccountResponse, status_code=201)
def register(body: Credentials, session: SessionContext = Depends(get_session_context)):
    username, password = _clean(body)
    try:
        state = session.register(username, password)
    except DuplicateUsername as e:
        raise HTTPException(status_code=409, detail=str(e))
    return AccountResponse.model_validate(state.user)


@router.post("/login", response_model=AccountResponse)
def login(body: Credentials, session: SessionContext = Depends(get_session_context)):
    username, password = _clean(body)
    try:
        state = session.login(username, password)
    except AuthenticationFailed as e:
        raise HTTPException(status_code=401, detail=str(e))
    return AccountResponse.model_validate(state.user)


@router.post("/logout")
def logout(session: SessionContext = Depends(get_session_context)):
    session.logout()
    return {"logged_out": True}


@router.get("/session", response_model=SessionResponse)
def current_session(session: SessionContext = Depends(get_session_context)):
    """Return the restored or active account, if any."""
    user = session.user
    return SessionResponse(user=AccountResponse.model_validate(user) if user else None)
