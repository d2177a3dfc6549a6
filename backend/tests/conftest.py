import asyncio

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from main import app
from nftfight.core.clock import ManualClock, get_clock
from nftfight.core.config import settings
from nftfight.core.database import get_db, create_tables
from nftfight.services.ledger_service import LedgerService

MINT_PRICE = settings.MINT_PRICE_WEI
EPOCH = settings.EPOCH_DURATION


def run(coro):
    """在测试中同步执行服务协程"""
    return asyncio.run(coro)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    create_tables(engine)
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
def clock():
    return ManualClock(settings.MANUAL_CLOCK_START)


@pytest.fixture
def ledger(db, clock):
    return LedgerService(db, clock)


@pytest.fixture
def game_id(ledger):
    return run(ledger.deploy()).id


@pytest.fixture
def client(session_factory, clock):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_clock] = lambda: clock
    yield TestClient(app)
    app.dependency_overrides.clear()
