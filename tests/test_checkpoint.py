"""Tests for checkpoint parsing and the checkpoint stores."""

import os
import pytest
from datetime import date
from unittest.mock import patch

from payment_import.checkpoint import FileCheckpointStore, SqlCheckpointStore, get_checkpoint_store
from payment_import.config import SyncConfig
from payment_import.database import CheckpointRepository
from payment_import.exceptions import CheckpointError
from payment_import.models import Checkpoint

START = date(2024, 1, 1)


class TestCheckpointFormat:
    """Tests for the two-line checkpoint text."""

    def test_parse_date_only(self):
        checkpoint = Checkpoint.parse("2024-01-05")

        assert checkpoint.last_date == date(2024, 1, 5)
        assert checkpoint.last_transaction_id is None
        assert not checkpoint.fresh

    def test_parse_with_transaction_id(self):
        checkpoint = Checkpoint.parse("2024-01-05\n26172937771\n")

        assert checkpoint.last_date == date(2024, 1, 5)
        assert checkpoint.last_transaction_id == "26172937771"

    def test_parse_blank_second_line(self):
        assert Checkpoint.parse("2024-01-05\n\n").last_transaction_id is None

    def test_parse_invalid_date(self):
        with pytest.raises(CheckpointError, match="Invalid checkpoint date"):
            Checkpoint.parse("05.01.2024")

    def test_parse_empty(self):
        with pytest.raises(CheckpointError):
            Checkpoint.parse("")

    def test_dumps(self):
        assert Checkpoint(last_date=date(2024, 1, 5)).dumps() == "2024-01-05"
        assert Checkpoint(last_date=date(2024, 1, 5), last_transaction_id="T1").dumps() == "2024-01-05\nT1"


class TestFileCheckpointStore:
    """Tests for FileCheckpointStore."""

    def test_missing_file_is_fresh_start(self, store, checkpoint_path):
        checkpoint = store.load()

        assert checkpoint.fresh
        assert checkpoint.last_date == START
        assert checkpoint.last_transaction_id is None
        assert not checkpoint_path.exists()

    def test_empty_file_is_fresh_start(self, store, checkpoint_path):
        checkpoint_path.parent.mkdir(parents=True)
        checkpoint_path.write_text("")

        assert store.load().fresh

    def test_save_and_load(self, store, checkpoint_path):
        store.save(date(2024, 1, 3), "T2")

        assert checkpoint_path.read_text() == "2024-01-03\nT2"
        loaded = store.load()
        assert loaded.last_date == date(2024, 1, 3)
        assert loaded.last_transaction_id == "T2"
        assert not loaded.fresh

    def test_save_without_id_marks_day_complete(self, store, checkpoint_path):
        store.save(date(2024, 1, 3), "T2")
        store.save(date(2024, 1, 3))

        assert checkpoint_path.read_text() == "2024-01-03"

    def test_save_refuses_to_move_back(self, store, checkpoint_path):
        store.save(date(2024, 1, 5))

        with pytest.raises(CheckpointError, match="move checkpoint back"):
            store.save(date(2024, 1, 4), "T1")
        assert checkpoint_path.read_text() == "2024-01-05"

    def test_save_leaves_no_temporary_files(self, store, checkpoint_path):
        store.save(date(2024, 1, 3), "T2")
        store.save(date(2024, 1, 4), "T3")

        assert [p.name for p in checkpoint_path.parent.iterdir()] == [checkpoint_path.name]

    def test_save_syncs_file_and_directory(self, store, checkpoint_path):
        with patch("payment_import.checkpoint.file_store.os.fsync", wraps=os.fsync) as fsync:
            store.save(date(2024, 1, 3), "T2")

        # file contents, then the directory entry
        assert fsync.call_count == 2
        assert checkpoint_path.read_text() == "2024-01-03\nT2"

    def test_corrupt_file(self, store, checkpoint_path):
        checkpoint_path.parent.mkdir(parents=True)
        checkpoint_path.write_text("garbage\nT1")

        with pytest.raises(CheckpointError):
            store.load()

    def test_unwritable_location(self, tmp_path):
        blocker = tmp_path / "not_a_dir"
        blocker.write_text("")
        store = FileCheckpointStore(blocker / "checkpoint.txt", START)

        with pytest.raises(CheckpointError):
            store.save(date(2024, 1, 2))


class TestSqlCheckpointStore:
    """Tests for SqlCheckpointStore."""

    def test_fresh_start(self, session_factory):
        store = SqlCheckpointStore(session_factory, "fio_cz", START)

        assert store.load().fresh

    def test_save_and_load(self, session_factory):
        store = SqlCheckpointStore(session_factory, "fio_cz", START)

        store.save(date(2024, 1, 3), "T2")
        store.save(date(2024, 1, 4), "T3")

        loaded = store.load()
        assert loaded.last_date == date(2024, 1, 4)
        assert loaded.last_transaction_id == "T3"
        with session_factory() as session:
            assert CheckpointRepository(session).get("fio_cz").content == "2024-01-04\nT3"

    def test_names_are_independent(self, session_factory):
        SqlCheckpointStore(session_factory, "first", START).save(date(2024, 1, 3))

        assert SqlCheckpointStore(session_factory, "second", START).load().fresh

    def test_save_refuses_to_move_back(self, session_factory):
        store = SqlCheckpointStore(session_factory, "fio_cz", START)
        store.save(date(2024, 1, 5))

        with pytest.raises(CheckpointError):
            store.save(date(2024, 1, 1))


class TestGetCheckpointStore:
    """Tests for the store factory."""

    def test_file_backend(self, config):
        store = get_checkpoint_store(config)

        assert isinstance(store, FileCheckpointStore)
        assert store.path == config.checkpoint_file
        assert store.start_date == START

    def test_database_backend(self, session_factory):
        config = SyncConfig(
            feed_provider="simulator",
            billing_provider="simulator",
            start_date=START,
            checkpoint_backend="database",
            database_url="sqlite:///:memory:",
        )

        store = get_checkpoint_store(config, session_factory)

        assert isinstance(store, SqlCheckpointStore)
        assert store.name == "fio_cz"

    def test_database_backend_needs_session_factory(self):
        config = SyncConfig(
            feed_provider="simulator",
            billing_provider="simulator",
            start_date=START,
            checkpoint_backend="database",
            database_url="sqlite:///:memory:",
        )

        with pytest.raises(ValueError):
            get_checkpoint_store(config)
