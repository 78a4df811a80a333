from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware
from sqlalchemy.orm import sessionmaker
from medflow.config import Settings, get_settings
from medflow.contexts.patients_context import PatientsContext
from medflow.contexts.session_context import SessionContext
from medflow.database import create_db_engine, create_session_factory, init_db
from medflow.routers import dashboard, patients, spreadsheets
from medflow.routers import auth as auth_router
from medflow.services.identity_store import IdentityStore
from medflow.services.patient_store import PatientStore
from medflow.services.storage import KeyValueStorage
from medflow.utils.logger import get_logger

logger = get_logger(__name__)


def build_contexts(session_factory: sessionmaker, settings: Settings) -> tuple[SessionContext, PatientsContext]:
    """Wire storage, stores and contexts. The session is restored from storage."""
    storage = KeyValueStorage(session_factory, namespace=settings.storage_namespace)
    identity_store = IdentityStore(storage, hash_iterations=settings.password_hash_iterations)
    session_context = SessionContext(identity_store)
    patients_context = PatientsContext(PatientStore(storage), session_context)
    return session_context, patients_context


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: create tables then restore the persisted session
    settings = get_settings()
    engine = create_db_engine(settings.database_url)
    init_db(engine)
    session_context, patients_context = build_contexts(create_session_factory(engine), settings)
    app.state.session_context = session_context
    app.state.patients_context = patients_context
    if session_context.user:
        logger.info(f"Restored session for account {session_context.user.id}")
    yield
    # Shutdown
    engine.dispose()


app = FastAPI(
    title="MedFlow Patient Records",
    description="Local patient-record management with spreadsheet import and export",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class NoStoreMiddleware(BaseHTTPMiddleware):
    """Mark API responses as uncacheable.

    Patient lists, filters and dashboard stats depend on the process-wide
    session, so the same URL answers differently after a login or an edit.
    """
    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        if request.url.path.startswith("/api/"):
            response.headers.setdefault("Cache-Control", "no-store, max-age=0")
            response.headers.setdefault("Pragma", "no-cache")
        return response


app.add_middleware(NoStoreMiddleware)

app.include_router(auth_router.router, prefix="/api/auth", tags=["Auth"])
app.include_router(dashboard.router, prefix="/api/dashboard", tags=["Dashboard"])
app.include_router(patients.router, prefix="/api/patients", tags=["Patients"])
app.include_router(spreadsheets.router, prefix="/api/spreadsheets", tags=["Spreadsheets"])


@app.get("/api/health")
async def health_check():
    return {"status": "healthy", "service": "medflow"}
