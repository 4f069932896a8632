import os
from decimal import Decimal

os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from adega.database import Base, enable_sqlite_foreign_keys, get_db
from adega.main import app
from tests import factories

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
enable_sqlite_foreign_keys(engine)

TestingSessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
    expire_on_commit=False,
)


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def factory_session(db):
    """Point every factory at the test session"""
    for factory_class in factories.ALL_FACTORIES:
        factory_class._meta.sqlalchemy_session = db
    yield


@pytest.fixture
def client(db):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    # no context manager: the lifespan preflight would touch the real database
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def wine():
    return factories.ProductFactory(name="Douro Reserva", unit_price=Decimal("45.90"))


@pytest.fixture
def shop():
    return factories.ClientFactory(name="Adega Central")
