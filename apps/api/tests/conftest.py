"""
Test configuration and fixtures.

Provides:
- In-memory SQLite holding both the system and the organization tables
- A seeded test organization with admin, dispatcher and driver users
- JWT token minting for authenticated tests
- HTTPX AsyncClient factories with cookie auth and the CSRF header
"""
import datetime as dt
import os
import uuid
from typing import AsyncGenerator, Callable, Generator

# Must be set before the application is imported
os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")
os.environ["TESTING"] = "1"
os.environ["ENV"] = "test"
os.environ["INTERNAL_SECRET"] = "test-internal-secret"

import jwt
import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.orm import Session

from paratransit.core.config import settings
from paratransit.core.deps import (
    COOKIE_NAME,
    CSRF_HEADER,
    CSRF_HEADER_VALUE,
    get_org_provisioner,
    get_org_session_factory,
)
from paratransit.core.rate_limit import limiter
from paratransit.core.security import SYSTEM_SCOPE
from paratransit.db.base import OrgBase, SystemBase
from paratransit.db.enums import AppointmentStatus
from paratransit.db.models import (
    Appointment,
    Client,
    Location,
    Organization,
    SystemUser,
    User,
)
from paratransit.db.session import SessionLocal, engine
from paratransit.main import app
from paratransit.services import call_log_service, org_settings_service, permission_service
from paratransit.services.email_sender import OutboxEmailSender, get_email_sender


TEST_ORG = "testorg"


# =============================================================================
# Database Fixtures
# =============================================================================

@pytest.fixture(autouse=True)
def setup_database() -> Generator[None, None, None]:
    """Fresh schema per test; system and org tables share one in-memory database."""
    SystemBase.metadata.create_all(engine)
    OrgBase.metadata.create_all(engine)
    limiter.reset()
    yield
    OrgBase.metadata.drop_all(engine)
    SystemBase.metadata.drop_all(engine)


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """System database session."""
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture
def org_db(test_org: Organization) -> Generator[Session, None, None]:
    """Organization database session (permissions, roles and settings seeded)."""
    session = SessionLocal()
    yield session
    session.close()


def org_session_factory(subdomain: str) -> Session:
    return SessionLocal()


@pytest.fixture
def test_org(db: Session) -> Organization:
    """Register the test organization and seed its database."""
    org = Organization(
        name="Test Organization",
        subdomain=TEST_ORG,
        poc_email="info@testorg.org",
    )
    db.add(org)
    db.commit()

    seed_db = SessionLocal()
    try:
        permission_service.seed_org(seed_db)
        call_log_service.seed_call_log_types(seed_db)
        org_settings_service.get_or_create_settings(seed_db)
        seed_db.commit()
    finally:
        seed_db.close()
    return org


# =============================================================================
# Factories
# =============================================================================

@pytest.fixture
def make_location(org_db: Session) -> Callable[..., Location]:
    def factory(**overrides) -> Location:
        values = {
            "address_line_1": f"{uuid.uuid4().int % 9000 + 100} Main St",
            "city": "Springfield",
            "state": "MA",
            "zip": "01103",
            "country": "USA",
        }
        values.update(overrides)
        location = Location(**values)
        org_db.add(location)
        org_db.commit()
        return location
    return factory


@pytest.fixture
def make_user(org_db: Session) -> Callable[..., User]:
    def factory(role_key: str | None = None, **overrides) -> User:
        role = permission_service.get_role_by_key(org_db, role_key) if role_key else None
        suffix = uuid.uuid4().hex[:8]
        values = {
            "first_name": "Test",
            "last_name": f"User{suffix}",
            "email": f"user-{suffix}@test.com",
            "role_id": role.id if role else None,
        }
        values.update(overrides)
        user = User(**values)
        org_db.add(user)
        org_db.commit()
        return user
    return factory


@pytest.fixture
def make_driver(make_user) -> Callable[..., User]:
    def factory(**overrides) -> User:
        overrides.setdefault("is_driver", True)
        return make_user("driver", **overrides)
    return factory


@pytest.fixture
def make_client(org_db: Session, make_location) -> Callable[..., Client]:
    def factory(**overrides) -> Client:
        suffix = uuid.uuid4().int % 10_000_000
        values = {
            "first_name": "Rider",
            "last_name": f"Client{suffix}",
            "phone": f"+1413{suffix:07d}",
            "gender": "Female",
            "lives_alone": True,
        }
        values.update(overrides)
        if "address_location" not in values:
            values["address_location"] = make_location().id
        client = Client(**values)
        org_db.add(client)
        org_db.commit()
        return client
    return factory


@pytest.fixture
def make_appointment(
    org_db: Session, make_client, make_location, admin_user
) -> Callable[..., Appointment]:
    def factory(**overrides) -> Appointment:
        values = {
            "start_date": dt.date.today() + dt.timedelta(days=1),
            "start_time": dt.time(10, 0),
            "estimated_duration_minutes": 60,
            "dispatcher_id": admin_user.id,
            "created_by_user_id": admin_user.id,
            "status": (
                AppointmentStatus.SCHEDULED.value
                if overrides.get("driver_id")
                else AppointmentStatus.UNASSIGNED.value
            ),
        }
        values.update(overrides)
        if "client_id" not in values:
            values["client_id"] = make_client().id
        if "pickup_location" not in values:
            values["pickup_location"] = make_location().id
        if "destination_location" not in values:
            values["destination_location"] = make_location(city="Holyoke").id
        appointment = Appointment(**values)
        org_db.add(appointment)
        org_db.commit()
        return appointment
    return factory


@pytest.fixture
def admin_user(make_user) -> User:
    return make_user("admin", first_name="Ada", last_name="Admin", email="admin@test.com")


@pytest.fixture
def dispatcher_user(make_user) -> User:
    return make_user("dispatcher", first_name="Dana", last_name="Dispatch", email="dispatch@test.com")


@pytest.fixture
def driver_user(make_driver) -> User:
    return make_driver(first_name="Drew", last_name="Driver", email="driver@test.com")


@pytest.fixture
def system_user(db: Session) -> SystemUser:
    user = SystemUser(
        first_name="Platform",
        last_name="Operator",
        email="ops@platform.test",
        phone="+14135550100",
    )
    db.add(user)
    db.commit()
    return user


# =============================================================================
# Auth Fixtures
# =============================================================================

def mint_token(user, org: str | None = TEST_ORG, **claims) -> str:
    """Session JWT shaped like the identity service's tokens."""
    payload = {"sub": str(user.id), "token_version": user.token_version}
    if org:
        payload["org"] = org
    payload.update(claims)
    return jwt.encode(payload, settings.JWT_SECRET, algorithm="HS256")


def system_token(user: SystemUser) -> str:
    return mint_token(user, org=None, scope=SYSTEM_SCOPE)


# =============================================================================
# Client Fixtures
# =============================================================================

@pytest.fixture
def outbox() -> OutboxEmailSender:
    return OutboxEmailSender()


@pytest.fixture(autouse=True)
def dependency_overrides(outbox: OutboxEmailSender) -> Generator[None, None, None]:
    app.dependency_overrides[get_org_session_factory] = lambda: org_session_factory
    app.dependency_overrides[get_org_provisioner] = lambda: (lambda subdomain: None)
    app.dependency_overrides[get_email_sender] = lambda: outbox
    yield
    app.dependency_overrides.clear()


@pytest.fixture
async def client() -> AsyncGenerator[AsyncClient, None]:
    """Unauthenticated AsyncClient for public endpoints."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c


@pytest.fixture
def client_for() -> Callable[..., AsyncClient]:
    """
    Build an authenticated AsyncClient with the session cookie and CSRF header.

    Use as ``async with client_for(user) as c:``.
    """
    def factory(user, token: str | None = None, csrf: bool = True) -> AsyncClient:
        headers = {CSRF_HEADER: CSRF_HEADER_VALUE} if csrf else {}
        return AsyncClient(
            transport=ASGITransport(app=app),
            base_url="http://test",
            cookies={COOKIE_NAME: token or mint_token(user)},
            headers=headers,
        )
    return factory


@pytest.fixture
async def admin_client(client_for, admin_user) -> AsyncGenerator[AsyncClient, None]:
    async with client_for(admin_user) as c:
        yield c


@pytest.fixture
async def dispatcher_client(client_for, dispatcher_user) -> AsyncGenerator[AsyncClient, None]:
    async with client_for(dispatcher_user) as c:
        yield c


@pytest.fixture
async def driver_client(client_for, driver_user) -> AsyncGenerator[AsyncClient, None]:
    async with client_for(driver_user) as c:
        yield c


@pytest.fixture
def token_for() -> Callable[..., str]:
    return mint_token


@pytest.fixture
async def system_client(system_user) -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
        headers={"Authorization": f"Bearer {system_token(system_user)}"},
    ) as c:
        yield c
