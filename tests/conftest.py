# tests/conftest.py
import os
import pytest

# point the app at an in-memory database before anything imports app.db
os.environ["POSTGRES_URL"] = "sqlite://"
os.environ["JWT_SECRET_KEY"] = "test-secret-key-for-the-dealership-suite"
os.environ["ADMIN_SLUG"] = "test-admin-slug"

from fastapi.testclient import TestClient

from app import crud, services, schemas
from app.cache import SessionCache, get_session_cache
from app.db import Base, engine, SessionLocal, get_db
from app.main import app

ADMIN_SLUG = os.environ["ADMIN_SLUG"]


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    yield session
    session.close()
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def cache():
    return SessionCache(ttl=60)


@pytest.fixture
def client(db, cache):
    app.dependency_overrides[get_db] = lambda: db
    app.dependency_overrides[get_session_cache] = lambda: cache
    yield TestClient(app)
    app.dependency_overrides.clear()


def make_car(db, **overrides):
    data = {
        "brand": "Toyota",
        "model": "Corolla",
        "body_type": "Hatchback",
        "transmission": "automatic",
        "price": 20000,
        "horse_power": 140,
        "fuel_type": "petrol",
        "mileage": 30000,
        "year": 2019,
        "img_url": "https://images.example.com/car.jpg",
        "sold": False,
    }
    data.update(overrides)
    return crud.create_car(db, data)


def make_user(db, email="jane@example.com", password="secret123", role="user", name="Jane"):
    payload = schemas.UserCreate(name=name, email=email, password=password)
    return services.register_account(db, payload, role=role)


@pytest.fixture
def car_factory(db):
    return lambda **overrides: make_car(db, **overrides)


@pytest.fixture
def login_as(db, cache):
    """Create an account with `role` and return a valid token for it."""
    def _login(role="user", email=None, password="secret123"):
        email = email or f"{role}@example.com"
        make_user(db, email=email, password=password, role=role, name=role.title())
        return services.login(db, email, password, cache)
    return _login
