"""Shared fixtures: every test gets its own in-memory SQLite storage."""
import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["PASSWORD_HASH_ITERATIONS"] = "1000"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from medflow.contexts.patients_context import PatientsContext  # noqa: E402
from medflow.contexts.session_context import SessionContext  # noqa: E402
from medflow.database import create_db_engine, create_session_factory, init_db  # noqa: E402
from medflow.main import app  # noqa: E402
from medflow.schemas.patient import Gender, PatientBase  # noqa: E402
from medflow.services.identity_store import IdentityStore  # noqa: E402
from medflow.services.patient_store import PatientStore  # noqa: E402
from medflow.services.storage import KeyValueStorage  # noqa: E402


@pytest.fixture
def storage():
    engine = create_db_engine("sqlite://")
    init_db(engine)
    yield KeyValueStorage(create_session_factory(engine))
    engine.dispose()


@pytest.fixture
def file_storage(tmp_path):
    engine = create_db_engine(f"sqlite:///{tmp_path / 'medflow.db'}")
    init_db(engine)
    yield KeyValueStorage(create_session_factory(engine))
    engine.dispose()


@pytest.fixture
def identity_store(storage):
    return IdentityStore(storage, hash_iterations=1000)


@pytest.fixture
def patient_store(storage):
    return PatientStore(storage)


@pytest.fixture
def session_context(identity_store):
    return SessionContext(identity_store)


@pytest.fixture
def patients_context(patient_store, session_context):
    return PatientsContext(patient_store, session_context)


@pytest.fixture
def ann():
    return PatientBase(name="Ann", age=34, gender=Gender.FEMALE,
                       diagnosis="Migraine", prescription="Sumatriptan 50mg")


@pytest.fixture
def bob():
    return PatientBase(name="Bob", age=61, gender=Gender.MALE,
                       diagnosis="Hypertension", prescription="Lisinopril 10mg daily")


@pytest.fixture
def client():
    with TestClient(app) as client:
        yield client


@pytest.fixture
def logged_in_client(client):
    response = client.post("/api/auth/register", json={"username": "dr.grey", "password": "secret"})
    assert response.status_code == 201
    return client
