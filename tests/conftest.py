"""
Pytest configuration for rental calendar tests
"""
import pytest
import sys
from datetime import date
from pathlib import Path

# Ensure rental is importable
sys.path.insert(0, str(Path(__file__).parent.parent))


@pytest.fixture
def engine():
    """Fresh in-memory SQLite database per test"""
    from rental.database import create_db_engine, init_db

    engine = create_db_engine("sqlite://")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    from rental.database import create_session_factory

    session = create_session_factory(engine)()
    yield session
    session.close()


@pytest.fixture
def client(engine):
    """TestClient with lifespan running against the in-memory database"""
    from fastapi.testclient import TestClient
    from rental.main import create_app

    app = create_app(engine)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def sample_reservation_data():
    """Sample data for reservation creation"""
    return {
        'equipment_id': 'drill-01',
        'equipment_name': 'Wiertarka udarowa',
        'customer_name': 'Jan Kowalski',
        'start_date': date(2025, 6, 10),
        'end_date': date(2025, 6, 12),
        'status': 'confirmed',
    }
