"""Shared test fixtures and configuration."""

import os
import pytest
from datetime import date

# Set up test environment variables before importing modules
os.environ.setdefault("API_KEY", "test_api_key_12345")

from payment_import.billing import SimulatedBilling
from payment_import.checkpoint import FileCheckpointStore
from payment_import.config import SyncConfig
from payment_import.database import Base, create_engine, get_session_factory
from payment_import.feed import SimulatedFeed, make_fio_record
from payment_import.sync import SyncService

START_DATE = date(2024, 1, 1)
# "yesterday" is 2024-01-05
TODAY = date(2024, 1, 6)


@pytest.fixture
def sample_records():
    """One outgoing and three incoming Fio records, in feed order."""
    return [
        make_fio_record("T0", date(2024, 1, 2), -500.0, reference="2024001"),
        make_fio_record(
            "T1", date(2024, 1, 2), 1500.0, reference="2024001",
            extra={10: "Jan Novak", 16: "Invoice 2024001"},
        ),
        make_fio_record("T2", date(2024, 1, 3), 200.0, reference="2024002"),
        make_fio_record("T3", date(2024, 1, 4), 300.0, reference="999"),
    ]


@pytest.fixture
def feed(sample_records):
    """Simulated bank feed loaded with the sample records."""
    return SimulatedFeed(sample_records)


@pytest.fixture
def billing():
    """Simulated billing system with two clients and their invoices."""
    return SimulatedBilling(
        clients=[
            {"id": 1, "userIdent": "U-1", "attributes": [{"key": "vs", "value": "777"}]},
            {"id": 2, "userIdent": "U-2", "attributes": [{"key": "vs", "value": "888"}]},
        ],
        invoices=[
            {"id": 10, "clientId": 1, "number": "2024001"},
            {"id": 11, "clientId": 2, "number": "2024002"},
        ],
    )


@pytest.fixture
def checkpoint_path(tmp_path):
    return tmp_path / "state" / "last_payment.txt"


@pytest.fixture
def store(checkpoint_path):
    """File checkpoint store in a temporary directory."""
    return FileCheckpointStore(checkpoint_path, START_DATE)


@pytest.fixture
def config(checkpoint_path):
    """Configuration using the simulated collaborators."""
    return SyncConfig(
        feed_provider="simulator",
        billing_provider="simulator",
        start_date=START_DATE,
        match_by="invoiceNumber",
        checkpoint_file=checkpoint_path,
    )


@pytest.fixture
def make_service(config, feed, billing, store):
    """Build a SyncService; keyword arguments override the defaults."""
    def _make(**overrides):
        kwargs = {
            "config": config,
            "feed": feed,
            "billing": billing,
            "store": store,
            "today": TODAY,
        }
        kwargs.update(overrides)
        return SyncService(**kwargs)
    return _make


@pytest.fixture
def db_engine():
    """Create an in-memory SQLite database for testing."""
    engine = create_engine(database_url="sqlite:///:memory:")
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return get_session_factory(db_engine)


@pytest.fixture
def db_session(session_factory):
    """Create a database session for testing."""
    with session_factory() as session:
        yield session
