"""Tests for the status API endpoints."""

import os
import pytest
from datetime import date, datetime
from fastapi.testclient import TestClient

# Set environment variables before importing app
os.environ.setdefault("API_KEY", "test_api_key_12345")

from payment_import import database
from payment_import.api import app, get_config
from payment_import.database import SyncRunRepository
from payment_import.models import SyncReport, SyncState, SyncStatus


@pytest.fixture
def client(config):
    """Create test client with the simulator configuration."""
    app.dependency_overrides[get_config] = lambda: config
    yield TestClient(app)
    app.dependency_overrides.clear()
    database.close_db()


@pytest.fixture
def auth_headers():
    """Return authenticated headers."""
    return {"Authorization": f"Bearer {os.environ['API_KEY']}"}


class TestHealth:

    def test_health(self, client):
        response = client.get("/sync/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "service": "payment-import"}


class TestCheckpointEndpoint:
    """Tests for GET /sync/checkpoint."""

    def test_requires_authentication(self, client):
        response = client.get("/sync/checkpoint")

        assert response.status_code in (401, 403)

    def test_rejects_wrong_key(self, client):
        response = client.get("/sync/checkpoint", headers={"Authorization": "Bearer wrong"})

        assert response.status_code == 401

    def test_fresh_checkpoint(self, client, auth_headers):
        response = client.get("/sync/checkpoint", headers=auth_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["fresh"] is True
        assert data["last_date"] is None
        assert data["next_window"]["start_date"] == "2024-01-01"
        assert data["next_window"]["resume_transaction_id"] is None

    def test_stored_checkpoint(self, client, auth_headers, store):
        store.save(date(2024, 1, 3), "T2")

        data = client.get("/sync/checkpoint", headers=auth_headers).json()

        assert data["fresh"] is False
        assert data["last_date"] == "2024-01-03"
        assert data["last_transaction_id"] == "T2"
        assert data["next_window"]["start_date"] == "2024-01-03"
        assert data["next_window"]["resume_transaction_id"] == "T2"

    def test_corrupt_checkpoint(self, client, auth_headers, checkpoint_path):
        checkpoint_path.parent.mkdir(parents=True)
        checkpoint_path.write_text("garbage")

        response = client.get("/sync/checkpoint", headers=auth_headers)

        assert response.status_code == 500


class TestRunsEndpoint:
    """Tests for GET /sync/runs."""

    def test_requires_database(self, client, auth_headers):
        response = client.get("/sync/runs", headers=auth_headers)

        assert response.status_code == 503

    def test_lists_recent_runs(self, config, auth_headers, tmp_path):
        database_url = f"sqlite:///{tmp_path / 'runs.db'}"
        config = config.model_copy(update={"database_url": database_url})
        app.dependency_overrides[get_config] = lambda: config
        database.init_db(database_url)
        try:
            with database.get_session_factory()() as session:
                repo = SyncRunRepository(session)
                for index, status in enumerate([SyncStatus.DONE, SyncStatus.ABORTED]):
                    repo.create_from_report(SyncReport(
                        id=f"run-{index}",
                        status=status,
                        state=SyncState.DONE if status == SyncStatus.DONE else SyncState.ABORTED,
                        started_at=datetime(2024, 1, 6, 6, index),
                        posted_transaction_ids=["T1"] if status == SyncStatus.DONE else [],
                    ))
                session.commit()

            response = TestClient(app).get("/sync/runs?limit=1", headers=auth_headers)
        finally:
            app.dependency_overrides.clear()
            database.close_db()

        assert response.status_code == 200
        runs = response.json()
        assert len(runs) == 1
        assert runs[0]["id"] == "run-1"
        assert runs[0]["status"] == "aborted"

    def test_limit_is_validated(self, client, auth_headers):
        response = client.get("/sync/runs?limit=0", headers=auth_headers)

        assert response.status_code == 422
