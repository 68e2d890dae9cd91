"""Tests for ProfileDatabase: schema creation, versioning, lifecycle."""

from __future__ import annotations

import pytest

from sepsiscan.core.storage.database import SCHEMA_VERSION, DatabaseError, ProfileDatabase


class TestInitialization:
    def test_in_memory_initialize(self):
        db = ProfileDatabase(":memory:")
        db.initialize()
        assert db.connection is not None
        db.close()

    def test_double_initialize_is_idempotent(self):
        db = ProfileDatabase(":memory:")
        db.initialize()
        conn1 = db.connection
        db.initialize()
        assert db.connection is conn1
        db.close()

    def test_connection_before_init_raises(self):
        db = ProfileDatabase(":memory:")
        with pytest.raises(DatabaseError, match="not initialized"):
            _ = db.connection

    def test_context_manager(self):
        with ProfileDatabase(":memory:") as db:
            assert db.connection is not None
        with pytest.raises(DatabaseError):
            _ = db.connection


class TestSchema:
    def test_schema_version_recorded(self):
        with ProfileDatabase(":memory:") as db:
            assert db.get_schema_version() == SCHEMA_VERSION

    def test_tables_created(self):
        with ProfileDatabase(":memory:") as db:
            cursor = db.connection.execute(
                "SELECT name FROM sqlite_master WHERE type='table' AND name NOT LIKE 'sqlite_%'"
            )
            tables = {row[0] for row in cursor.fetchall()}
        assert {"profiles", "schema_version", "audit_log"} <= tables

    def test_indexes_created(self):
        expected_indexes = {
            "idx_profiles_updated",
            "idx_audit_timestamp",
            "idx_audit_action",
            "idx_audit_profile",
        }
        with ProfileDatabase(":memory:") as db:
            cursor = db.connection.execute("SELECT name FROM sqlite_master WHERE type='index'")
            indexes = {row[0] for row in cursor.fetchall()}
        for idx in expected_indexes:
            assert idx in indexes, f"Missing index: {idx}"

    def test_profile_columns(self):
        with ProfileDatabase(":memory:") as db:
            columns = {row["name"] for row in db.connection.execute("PRAGMA table_info(profiles)")}
        assert columns == {"id", "name", "profile_enc", "entry_count", "created_at", "updated_at"}

    def test_foreign_keys_enabled(self):
        with ProfileDatabase(":memory:") as db:
            assert db.connection.execute("PRAGMA foreign_keys").fetchone()[0] == 1


class TestFileDatabase:
    def test_creates_parent_directories(self, tmp_path):
        db_path = tmp_path / "nested" / "dir" / "profiles.db"
        db = ProfileDatabase(str(db_path))
        db.initialize()
        assert db_path.exists()
        assert db.path == str(db_path)
        db.close()

    def test_reopen_keeps_single_version_row(self, tmp_path):
        db_path = str(tmp_path / "profiles.db")
        with ProfileDatabase(db_path):
            pass
        with ProfileDatabase(db_path) as db:
            rows = db.connection.execute("SELECT COUNT(*) FROM schema_version").fetchone()[0]
            assert rows == 1
            assert db.get_schema_version() == SCHEMA_VERSION

    def test_unopenable_path_raises(self, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("x")
        with pytest.raises(DatabaseError, match="Cannot open database"):
            ProfileDatabase(str(blocker / "profiles.db")).initialize()


class TestClose:
    def test_close_makes_connection_unavailable(self):
        db = ProfileDatabase(":memory:")
        db.initialize()
        db.close()
        with pytest.raises(DatabaseError, match="not initialized"):
            _ = db.connection

    def test_double_close_is_safe(self):
        db = ProfileDatabase(":memory:")
        db.initialize()
        db.close()
        db.close()
