import os

# Must be set before clinic_api.config is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("JWT_SECRET", "test-secret-not-for-production")
os.environ["ENVIRONMENT"] = "test"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from clinic_api import models  # noqa: E402
from clinic_api.database import Base, get_db  # noqa: E402
from clinic_api.main import app  # noqa: E402
from clinic_api.security_utils import create_user_token, hash_password_bcrypt  # noqa: E402

TEST_PASSWORD = "secret123"


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autoflush=False, bind=engine)


@pytest.fixture
def client(session_factory):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(session_factory):
    def _make_user(username="drhouse", role="doctor", name="Gregory House", is_active=True):
        db = session_factory()
        try:
            user = models.User(
                username=username,
                password_hash=hash_password_bcrypt(TEST_PASSWORD),
                role=role,
                name=name,
                is_active=is_active,
            )
            db.add(user)
            db.commit()
            db.refresh(user)
            db.expunge(user)
            return user
        finally:
            db.close()

    return _make_user


@pytest.fixture
def doctor(make_user):
    return make_user()


@pytest.fixture
def auth_headers(doctor):
    return {"Authorization": f"Bearer {create_user_token(doctor)}"}


@pytest.fixture
def esthetician_headers(make_user):
    user = make_user(username="esther", role="esthetician", name="Esther Glow")
    return {"Authorization": f"Bearer {create_user_token(user)}"}


@pytest.fixture
def make_patient(client, auth_headers):
    def _make_patient(first_name="Ana", last_name="Petrova", **extra):
        response = client.post(
            "/api/patients",
            json={"first_name": first_name, "last_name": last_name, **extra},
            headers=auth_headers,
        )
        assert response.status_code == 201, response.text
        return response.json()

    return _make_patient


@pytest.fixture
def book(client, auth_headers):
    """POST an appointment and return the raw response"""

    def _book(patient_id, start_time, end_time, date="2025-03-10", headers=None, **extra):
        payload = {
            "patient_id": patient_id,
            "date": date,
            "start_time": start_time,
            "end_time": end_time,
            "appointment_type": "consultation",
            **extra,
        }
        return client.post("/api/appointments", json=payload, headers=headers or auth_headers)

    return _book
