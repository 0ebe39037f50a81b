"""
Shared fixtures: an in-memory SQLite database per test, the FastAPI app with
get_db / get_current_user / get_bayarcash_client overridden, and factories for
the rows most tests need.
"""

import os

# Settings are read at import time
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["CRON_SECRET"] = "test-cron-secret"
os.environ["BAYARCASH_PORTAL_KEY"] = "test-portal-key"
os.environ["BAYARCASH_API_TOKEN"] = "test-api-token"
os.environ["BAYARCASH_API_SECRET_KEY"] = "test-secret-key"
os.environ["APP_URL"] = "https://api.example.test"
os.environ["FRONTEND_URL"] = "https://book.example.test"
os.environ["REDIS_HOST"] = "127.0.0.1"
os.environ["REDIS_PORT"] = "1"

from datetime import date, time

import httpx
import pytest
from fastapi import Depends, HTTPException
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from boatbook.auth import get_current_user
from boatbook.database import Base, get_db
from boatbook.domain.payments.bayarcash import BayarcashClient, get_bayarcash_client
from boatbook.main import app
from boatbook.models import (
    Availability,
    Booking,
    Business,
    BusinessSettings,
    Passenger,
    Service,
    ServiceAddon,
    ServiceVariant,
    User,
)

TEST_SECRET_KEY = "test-secret-key"

# Far enough ahead that slots are never in the past
TRIP_DATE = date(date.today().year + 1, 3, 15)


def make_ic(dob: date, last_digit: int = 1) -> str:
    """MyKad number for a birth date; odd last digit is male"""
    return f"{dob:%y%m%d}-14-567{last_digit}"


@pytest.fixture
def db_engine():
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
def session_factory(db_engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=db_engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


class AuthState:
    """Who the overridden get_current_user returns; None means anonymous"""

    user_id = None

    def login(self, user: User):
        self.user_id = user.id

    def logout(self):
        self.user_id = None


@pytest.fixture
def auth():
    return AuthState()


class GatewayStub:
    """Programmable Bayarcash backend behind httpx.MockTransport"""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.routes: dict[tuple[str, str], httpx.Response] = {}

    def add(self, method: str, path: str, status_code: int = 200, json=None):
        self.routes[(method, path)] = httpx.Response(status_code, json=json)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path.replace("/api/v2", "", 1)
        response = self.routes.get((request.method, path))
        if response is None:
            return httpx.Response(404, json={"message": "Not found"})
        return response


@pytest.fixture
def gateway_stub():
    return GatewayStub()


@pytest.fixture
def gateway(gateway_stub):
    return BayarcashClient(
        portal_key="test-portal-key",
        api_token="test-api-token",
        secret_key=TEST_SECRET_KEY,
        sandbox=True,
        transport=httpx.MockTransport(gateway_stub.handler),
    )


@pytest.fixture
def client(session_factory, auth, gateway):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    def override_get_current_user(db: Session = Depends(get_db)) -> User:
        if auth.user_id is None:
            raise HTTPException(status_code=401, detail="Not authenticated")
        return db.get(User, auth.user_id)

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_current_user] = override_get_current_user
    app.dependency_overrides[get_bayarcash_client] = lambda: gateway

    yield TestClient(app)

    app.dependency_overrides.clear()


# ============================================================================
# FACTORIES
# ============================================================================


def create_user(db: Session, email: str = "owner@example.com", role: str = "owner", **kwargs) -> User:
    user = User(email=email, role=role, firebase_uid=kwargs.pop("firebase_uid", email), **kwargs)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def create_business(db: Session, owner: User, slug: str = "pulau-tours", **settings) -> Business:
    business = Business(
        owner_id=owner.id,
        name="Pulau Tours",
        slug=slug,
        contact_email="hello@pulau.example",
        contact_phone="0123456789",
        address="Jeti Tok Bali, Kelantan",
        branding={"primary_color": "#168D95", "secondary_color": "#DE7F21"},
        is_published=True,
    )
    business.settings = BusinessSettings(**settings)
    db.add(business)
    db.commit()
    db.refresh(business)
    return business


def create_service(db: Session, business: Business, name: str = "Perhentian Island Transfer") -> Service:
    service = Service(
        business_id=business.id,
        name=name,
        description="Return boat transfer",
        price=0,
        duration_minutes=45,
        max_capacity=20,
        images=[],
        is_active=True,
        sort_order=1,
    )
    service.variants = [ServiceVariant(name="Adult", price=70, sort_order=1)]
    service.addons = [ServiceAddon(name="Snorkel set", price=15, is_active=True, sort_order=1)]
    db.add(service)
    db.commit()
    db.refresh(service)
    return service


def create_slot(
    db: Session,
    business: Business,
    service: Service = None,
    slot_date: date = TRIP_DATE,
    start: time = time(9, 0),
    capacity: int = 10,
    booked: int = 0,
    blocked: bool = False,
) -> Availability:
    slot = Availability(
        business_id=business.id,
        service_id=service.id if service else None,
        date=slot_date,
        start_time=start,
        end_time=time(start.hour + 1, start.minute),
        capacity=capacity,
        booked_count=booked,
        is_blocked=blocked,
    )
    db.add(slot)
    db.commit()
    db.refresh(slot)
    return slot


def create_booking(
    db: Session,
    business: Business,
    service: Service,
    slot: Availability,
    ref_code: str = "NTT-ABC123",
    status: str = "pending",
    pax: int = 2,
    total: float = 140.0,
) -> Booking:
    booking = Booking(
        ref_code=ref_code,
        business_id=business.id,
        service_id=service.id,
        availability_id=slot.id,
        customer_name="Aisyah Rahman",
        customer_email="aisyah@example.com",
        customer_phone="0198765432",
        booking_date=slot.date,
        start_time=slot.start_time,
        pax=pax,
        status=status,
        subtotal=total,
        addons_total=0,
        total_amount=total,
    )
    booking.passengers = [
        Passenger(
            full_name="Aisyah Rahman",
            ic_passport=make_ic(date(1990, 5, 20), 2),
            dob=date(1990, 5, 20),
            calculated_age=35,
            gender="P",
            nationality="MALAYSIA",
            passenger_type="adult",
            sort_order=1,
        ),
        Passenger(
            full_name="Adam Rahman",
            ic_passport=make_ic(date(2017, 8, 1), 3),
            dob=date(2017, 8, 1),
            calculated_age=8,
            gender="L",
            nationality="MALAYSIA",
            passenger_type="child",
            sort_order=2,
        ),
    ][:pax]
    db.add(booking)
    db.commit()
    db.refresh(booking)
    return booking


@pytest.fixture
def owner(db):
    return create_user(db)


@pytest.fixture
def business(db, owner):
    return create_business(db, owner)


@pytest.fixture
def service(db, business):
    return create_service(db, business)


@pytest.fixture
def slot(db, business, service):
    return create_slot(db, business, service)
