import os

# Must be set before storefront modules build their settings and engine
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["RUN_MIGRATIONS"] = "false"
os.environ["JWT_SECRET"] = "test-access-secret"
os.environ["JWT_REFRESH_SECRET"] = "test-refresh-secret"
os.environ.pop("REDIS_URL", None)

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from fastapi.testclient import TestClient

from storefront.db.database import Base, get_db
from storefront.main import app
from storefront.api.deps import get_statistics_service
from storefront.auth.jwt_handler import jwt_handler
from storefront.models import Category, Product
from storefront.schemas.user import UserCreate
from storefront.services.registry import build_services
from storefront.statistics.backends import InMemoryCacheBackend
from storefront.statistics.cache import StatisticsCache
from storefront.statistics.service import StatisticsService


class FakeClock:
    """Monotonic clock the tests move by hand"""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def engine(tmp_path):
    engine = create_engine(
        f"sqlite:///{tmp_path / 'storefront.db'}",
        connect_args={"check_same_thread": False}
    )
    Base.metadata.create_all(engine)
    yield engine
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
def services(db):
    return build_services(db)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache_backend(clock):
    return InMemoryCacheBackend(clock=clock)


@pytest.fixture
def stats_cache(cache_backend):
    return StatisticsCache(cache_backend)


@pytest.fixture
def stats_service(session_factory, stats_cache):
    return StatisticsService(session_factory=session_factory, cache=stats_cache)


@pytest.fixture
def client(session_factory, stats_service):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_statistics_service] = lambda: stats_service
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(services):
    counter = {"n": 0}

    def _make_user(email=None, name="Test User", password="secret123"):
        counter["n"] += 1
        email = email or f"user{counter['n']}@example.com"
        return services.users.create(UserCreate(email=email, password=password, name=name))

    return _make_user


@pytest.fixture
def make_category(db):
    counter = {"n": 0}

    def _make_category(name=None, description="Things", is_active=True):
        counter["n"] += 1
        category = Category(name=name or f"Category {counter['n']}", description=description, is_active=is_active)
        db.add(category)
        db.commit()
        db.refresh(category)
        return category

    return _make_category


@pytest.fixture
def make_product(db):
    def _make_product(name="Widget", price=10.0, category=None, is_active=True, **fields):
        product = Product(
            name=name,
            description=f"{name} description",
            price=price,
            category_id=category.id if category is not None else None,
            is_active=is_active,
            **fields
        )
        db.add(product)
        db.commit()
        db.refresh(product)
        return product

    return _make_product


@pytest.fixture
def auth_headers():
    def _auth_headers(user):
        token = jwt_handler.create_access_token(user.id, user.email, user.name)
        return {"Authorization": f"Bearer {token}"}

    return _auth_headers
