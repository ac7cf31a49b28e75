import os

# the app module creates its tables on import, keep that away from the real database
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from rumb import models  # noqa: F401
from rumb.core.config import Settings, settings
from rumb.core.database import Base, get_db
from rumb.core.resources import get_region_graph, get_rule_catalog
from rumb.engine import Region, RegionGraph

CRON_TOKEN = "test-cron-secret"
RING_IDS = ("A", "B", "C", "D", "E", "F")


def build_ring_graph() -> RegionGraph:
    regions = [Region(id=region_id, name=f"Region {region_id}") for region_id in RING_IDS]
    adjacency = {
        region_id: [RING_IDS[(index + 1) % len(RING_IDS)]]
        for index, region_id in enumerate(RING_IDS)
    }
    return RegionGraph(regions, adjacency)


@pytest.fixture
def ring_graph() -> RegionGraph:
    return build_ring_graph()


@pytest.fixture(scope="session")
def bundled_graph() -> RegionGraph:
    return get_region_graph()


@pytest.fixture(scope="session")
def bundled_catalog():
    return get_rule_catalog()


@pytest.fixture
def small_settings() -> Settings:
    return Settings(
        _env_file=None,
        CRON_SECRET=CRON_TOKEN,
        DAILY_BACKFILL_DAYS=3,
        WEEKLY_BACKFILL_WEEKS=2,
    )


@pytest.fixture
def db_session():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture
def client(db_session, bundled_graph, bundled_catalog, monkeypatch):
    from rumb.main import app

    monkeypatch.setattr(settings, "CRON_SECRET", CRON_TOKEN)
    monkeypatch.setattr(settings, "DAILY_BACKFILL_DAYS", 2)
    monkeypatch.setattr(settings, "WEEKLY_BACKFILL_WEEKS", 1)

    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_region_graph] = lambda: bundled_graph
    app.dependency_overrides[get_rule_catalog] = lambda: bundled_catalog
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
