from __future__ import annotations

import os
import sys
from pathlib import Path

# Ensure `backend/` and `scripts/` are on sys.path so `import bidtracker.*` works in tests.
BACKEND_DIR = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(BACKEND_DIR))
sys.path.insert(0, str(BACKEND_DIR.parent / "scripts"))

# The app module builds its engine at import time; never point tests at a real server.
os.environ["DATABASE_URL"] = "sqlite://"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import bidtracker.models  # noqa: F401
from bidtracker.database import get_db
from bidtracker.main import app
from bidtracker.models.base import Base
from bidtracker.schemas.bid import BidPayload


@pytest.fixture
def engine():
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
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def client(session_factory):
    def _get_test_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _get_test_db
    yield TestClient(app)
    app.dependency_overrides.clear()


def bid_fields(**overrides) -> dict:
    fields = {
        "client_name": "Acme Council",
        "bid_name": "Facilities management",
        "status": "pending",
        "opportunity_type": "single_tender",
        "current_stage": "",
        "next_stage_date": "",
        "itt_received_at": "2025-01-06",
        "itt_submission_deadline_at": "2025-02-14",
        "itt_submission_time": "12:00",
        "tcv_gbp": "1200000",
        "initial_term_months": "36",
        "extension_term_months": "12",
        "tcv_term_basis": "initial_only",
        "portal_url": "https://portal.example.com/tenders/42",
        "folder_url": "https://sharepoint.example.com/sites/bids/acme",
    }
    fields.update(overrides)
    return fields


@pytest.fixture
def make_payload():
    def _make(**overrides) -> BidPayload:
        return BidPayload(**bid_fields(**overrides))

    return _make
