"""Pytest configuration and fixtures."""

import os
import tempfile
from typing import Generator

# Settings are read at import time; point them at a scratch database first.
os.environ.setdefault("DATABASE_URL", f"sqlite:///{tempfile.gettempdir()}/sweetswirls-test.db")
os.environ["SEED_DEMO_DATA"] = "false"
os.environ["USE_LOCAL_API"] = "true"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from sweetswirls.database import Base, get_db
from sweetswirls.main import app
from sweetswirls.models.inventory import InventoryCategory, InventoryItem
from sweetswirls.models.location import Location, LocationType
from sweetswirls.models.user import User, UserRole
from sweetswirls.schemas.auth import UserOut
from sweetswirls.services.auth_service import create_access_token, hash_password

collect_ignore = ["e2e"]
if os.environ.get("E2E_BASE_URL"):
    try:
        import playwright  # noqa: F401
    except ImportError:
        pass
    else:
        collect_ignore = []


@pytest.fixture(scope="function")
def db_engine(tmp_path):
    """A file-backed SQLite database per test, so concurrent requests each get a connection."""
    engine = create_engine(
        f"sqlite:///{tmp_path / 'test.db'}",
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def session_factory(db_engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=db_engine)


@pytest.fixture(scope="function")
def db_session(session_factory) -> Generator[Session, None, None]:
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def client(session_factory) -> Generator[TestClient, None, None]:
    """Test client whose API and pages share the per-test database."""

    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def _make_user(db: Session, name: str, email: str, role: UserRole, password: str = "secret123") -> User:
    user = User(name=name, email=email, password_hash=hash_password(password), role=role, is_active=True)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def admin(db_session: Session) -> User:
    return _make_user(db_session, "Admin User", "admin@test.com", UserRole.ADMIN)


@pytest.fixture
def production_lead(db_session: Session) -> User:
    return _make_user(db_session, "Paula Lead", "production@test.com", UserRole.PRODUCTION_LEAD)


@pytest.fixture
def shift_lead(db_session: Session) -> User:
    return _make_user(db_session, "Sam Shift", "shift@test.com", UserRole.SHIFT_LEAD)


@pytest.fixture
def team_member(db_session: Session) -> User:
    return _make_user(db_session, "Terry Team", "team@test.com", UserRole.TEAM_MEMBER)


def headers_for(user: User) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user)}"}


@pytest.fixture
def auth_headers(admin: User) -> dict:
    return headers_for(admin)


def sign_in(client: TestClient, user: User) -> None:
    """Put a signed-in session into the client's cookie jar, as the login page would."""
    client.cookies.set("auth_token", create_access_token(user))
    client.cookies.set("user_data", UserOut.model_validate(user).model_dump_json(by_alias=True))


@pytest.fixture
def shop(db_session: Session) -> Location:
    location = Location(name="Main Shop", type=LocationType.SHOP)
    db_session.add(location)
    db_session.commit()
    db_session.refresh(location)
    return location


@pytest.fixture
def freezer(db_session: Session) -> Location:
    location = Location(name="Freezer A", type=LocationType.FREEZER)
    db_session.add(location)
    db_session.commit()
    db_session.refresh(location)
    return location


@pytest.fixture
def vanilla(db_session: Session, shop: Location) -> InventoryItem:
    item = InventoryItem(
        name="Vanilla Base",
        category=InventoryCategory.BASE,
        unit="gallons",
        par_stock_level=10.0,
        default_location_id=shop.id,
        sku="VAN-BASE-001",
    )
    db_session.add(item)
    db_session.commit()
    db_session.refresh(item)
    return item


@pytest.fixture
def login_as(client: TestClient):
    def _login(user: User) -> TestClient:
        sign_in(client, user)
        return client

    return _login


@pytest.fixture
def auth_for():
    return headers_for
