import os

# Settings are read at import time, so point them at test values first
os.environ.setdefault("DATABASE_URL_SYNC", "sqlite://")
os.environ.setdefault("RATE_LIMIT_STORAGE_URI", "memory://")
os.environ.setdefault("PARTNER_URL", "https://partner.test/pay-items/")
os.environ.setdefault("PARTNER_API_KEY", "test-partner-key")
os.environ.setdefault("INTERNAL_API_KEY", "internal-test-key-0123456789abcdefghij")

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from payitem_sync.core.database import Base
from payitem_sync.models import Business, User


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine)


@pytest.fixture
def db(session_factory):
    with session_factory() as session:
        yield session


@pytest.fixture
def business(db):
    business = Business(
        name="Testing Business",
        external_id="abcd-efg-hijk",
        deduction_percentage=40,
        enabled=True,
    )
    db.add(business)
    db.commit()
    return business


@pytest.fixture
def user(db, business):
    user = User(name="James", email="test@testing.com", external_id="abcdedfg")
    user.businesses.append(business)
    db.add(user)
    db.commit()
    return user
