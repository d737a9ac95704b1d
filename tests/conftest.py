import os
from itertools import count

import pytest
from bson import ObjectId
from fastapi.testclient import TestClient

# Set testing environment before the application is imported
os.environ["TESTING"] = "1"
os.environ["TEST_DATABASE_URL"] = "sqlite://"

from clinic.main import app
from clinic.core.config import Settings, get_settings
from clinic.core.database import Base, SessionLocal, engine, get_prescription_store, get_redis
from clinic.core.documents import PrescriptionStore
from clinic.core.security import create_access_token, get_password_hash
from clinic.models import Admin, Appointment, AppointmentStatus, Doctor, Patient

TEST_PASSWORD = "Secret123"
PASSWORD_HASH = get_password_hash(TEST_PASSWORD)

test_settings = Settings(
    TESTING=True,
    SECRET_KEY="test-secret-key",
    RATE_LIMIT_ENABLED=False,
)

class FakeRedis:
    """In-memory stand-in for the few Redis commands the rate limiter uses."""

    def __init__(self):
        self.data = {}

    def get(self, key):
        return self.data.get(key)

    def setex(self, key, seconds, value):
        self.data[key] = str(value)
        return True

    def incr(self, key):
        self.data[key] = str(int(self.data.get(key, 0)) + 1)
        return int(self.data[key])

class InsertResult:
    def __init__(self, inserted_id):
        self.inserted_id = inserted_id

class FakeCollection:
    """In-memory stand-in for a pymongo collection (insert_one, find and delete_one with equality filters)."""

    def __init__(self):
        self.documents = []

    def insert_one(self, document):
        document = dict(document)
        document.setdefault("_id", ObjectId())
        self.documents.append(document)
        return InsertResult(document["_id"])

    def find(self, query):
        for document in self.documents:
            if all(document.get(key) == value for key, value in query.items()):
                yield dict(document)

    def delete_one(self, query):
        self.documents = [
            document for document in self.documents
            if not all(document.get(key) == value for key, value in query.items())
        ]

@pytest.fixture
def settings():
    return test_settings

@pytest.fixture
def db_session():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)

@pytest.fixture
def fake_redis():
    return FakeRedis()

@pytest.fixture
def prescription_collection():
    return FakeCollection()

@pytest.fixture
def client(db_session, fake_redis, prescription_collection):
    app.dependency_overrides[get_settings] = lambda: test_settings
    app.dependency_overrides[get_redis] = lambda: fake_redis
    app.dependency_overrides[get_prescription_store] = lambda: PrescriptionStore(prescription_collection)
    with TestClient(app, base_url="http://testserver") as test_client:
        yield test_client
    app.dependency_overrides.clear()

_sequence = count(1)

@pytest.fixture
def make_doctor(db_session):
    def _make_doctor(name="Dr. John Smith", specialty="Cardiology",
                     available_times=("08:00", "09:00", "14:00"), email=None):
        doctor = Doctor(
            name=name,
            email=email or f"doctor{next(_sequence)}@clinic.com",
            specialty=specialty,
            phone="5550000000",
            available_times=list(available_times),
            password_hash=PASSWORD_HASH,
        )
        db_session.add(doctor)
        db_session.commit()
        db_session.refresh(doctor)
        return doctor
    return _make_doctor

@pytest.fixture
def make_patient(db_session):
    def _make_patient(name="Jane Patient", email=None, phone=None):
        number = next(_sequence)
        patient = Patient(
            name=name,
            email=email or f"patient{number}@example.com",
            phone=phone or f"{9000000000 + number}",
            address="1 Main Street",
            password_hash=PASSWORD_HASH,
        )
        db_session.add(patient)
        db_session.commit()
        db_session.refresh(patient)
        return patient
    return _make_patient

@pytest.fixture
def make_admin(db_session):
    def _make_admin(username="admin"):
        admin = Admin(username=username, password_hash=PASSWORD_HASH)
        db_session.add(admin)
        db_session.commit()
        db_session.refresh(admin)
        return admin
    return _make_admin

@pytest.fixture
def make_appointment(db_session):
    def _make_appointment(doctor, patient, when, status=AppointmentStatus.SCHEDULED):
        appointment = Appointment(doctor_id=doctor.id, patient_id=patient.id, status=status)
        appointment.reschedule(when)
        db_session.add(appointment)
        db_session.commit()
        db_session.refresh(appointment)
        return appointment
    return _make_appointment

@pytest.fixture
def auth_headers():
    def _auth_headers(identity, issued_at=None):
        token = create_access_token(identity, test_settings, issued_at=issued_at)
        return {"Authorization": f"Bearer {token}"}
    return _auth_headers
