from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from sortie.core.config import Settings, get_settings
from sortie.core.constants import ROLE_ADMIN
from sortie.core.security import create_access_token, hash_password
from sortie.database.session import get_db, get_session_factory, init_db
from sortie.main import create_app
from sortie.models.coupon import Coupon
from sortie.models.trip import Trip
from sortie.models.user import User
from sortie.services.change_feed import ChangeFeed, get_change_feed
from sortie.services.storage_service import FileStorage, get_storage

ADMIN_PASSWORD = "s3cret-pass"


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def storage(tmp_path):
    return FileStorage(str(tmp_path / "uploads"), "/static/uploads")


@pytest.fixture
def feed():
    return ChangeFeed()


@pytest.fixture
def settings():
    return Settings(COUPON_REVEAL_INACTIVE=False, SHEETS_WEBHOOK_URL=None)


@pytest.fixture
def app(session_factory, storage, feed, settings):
    app = create_app(run_init_db=False)

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    app.dependency_overrides[get_storage] = lambda: storage
    app.dependency_overrides[get_change_feed] = lambda: feed
    app.dependency_overrides[get_settings] = lambda: settings
    return app


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def admin(db):
    user = User(email="admin@example.com", password_hash=hash_password(ADMIN_PASSWORD), role=ROLE_ADMIN)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def admin_client(client, admin):
    client.cookies.set("access_token", create_access_token(admin.id))
    return client


@pytest.fixture
def make_trip(db):
    def _make_trip(**overrides):
        values = {
            "title": "Sahara Expedition",
            "description": "Five nights under the desert sky",
            "destination": "Djanet",
            "region": "south",
            "duration": "5 days",
            "max_people": 8,
            "price": Decimal("15000"),
            "features": ["Camel trekking", "Desert camping"],
            "is_available": True,
        }
        values.update(overrides)
        trip = Trip(**values)
        db.add(trip)
        db.commit()
        db.refresh(trip)
        return trip

    return _make_trip


@pytest.fixture
def make_coupon(db):
    def _make_coupon(code="SAVE10", discount=10, is_active=True, expires_at=None):
        coupon = Coupon(code=code, discount=discount, is_active=is_active, expires_at=expires_at)
        db.add(coupon)
        db.commit()
        db.refresh(coupon)
        return coupon

    return _make_coupon
