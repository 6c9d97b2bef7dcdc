from datetime import datetime

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from timeclock.core.clock import FrozenClock, get_clock
from timeclock.core.database import Base, get_db
from timeclock.core.security import SessionStore, get_session_store
from timeclock.main import app
from timeclock.models import CompanySettings, Employee
from timeclock.services.external_sync import ExternalSyncService, get_external_sync

# Wednesday; the week runs Sun 2025-03-09 .. Sat 2025-03-15
NOW = datetime(2025, 3, 12, 11, 0, 0)

# Office center used by geofence fixtures
OFFICE_LAT = 41.9942
OFFICE_LON = -88.3123


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def clock():
    return FrozenClock(NOW)


def make_employee(db, name, pin, **kwargs):
    employee = Employee(name=name, pin=pin, **kwargs)
    db.add(employee)
    db.commit()
    db.refresh(employee)
    return employee


@pytest.fixture
def employee(db):
    return make_employee(db, "Sarah Johnson", "2001")


@pytest.fixture
def other_employee(db):
    return make_employee(db, "Mike Davis", "2002")


@pytest.fixture
def admin(db):
    return make_employee(db, "Administrator", "0000", is_admin=True)


@pytest.fixture
def geofence(db):
    company = CompanySettings(
        id=1,
        company_name="Test Co",
        geofencing_enabled=True,
        geo_lat=OFFICE_LAT,
        geo_lon=OFFICE_LON,
        geo_radius=150.0,
    )
    db.add(company)
    db.commit()
    return company


class RecordingSync(ExternalSyncService):
    """Captures sync calls instead of posting them."""

    def __init__(self):
        super().__init__(webhook_url="http://sync.test/hook", name_map={})
        self.calls = []

    def sync_punch(self, employee_name, punch_type, timestamp):
        self.calls.append((employee_name, punch_type, timestamp))
        return {"success": True}


@pytest.fixture
def external_sync():
    return RecordingSync()


@pytest.fixture
def client(session_factory, clock, external_sync):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    store = SessionStore()
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_clock] = lambda: clock
    app.dependency_overrides[get_session_store] = lambda: store
    app.dependency_overrides[get_external_sync] = lambda: external_sync
    yield TestClient(app)
    app.dependency_overrides.clear()


def login(client, pin):
    resp = client.post("/api/auth/login", json={"pin": pin})
    assert resp.status_code == 200, resp.text
    return {"Authorization": f"Bearer {resp.json()['access_token']}"}
