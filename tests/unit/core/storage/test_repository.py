"""Tests for ProfileRepository: CRUD with in-memory SQLite."""

from __future__ import annotations

import pytest

from conftest import make_entry, make_profile
from sepsiscan.core.storage.encryption import EncryptionError, ProfileEncryptor
from sepsiscan.core.storage.repository import (
    ProfileNotFoundError,
    ProfileRepository,
    RepositoryError,
)
from sepsiscan.domains.sepsis.domain_logic.models import (
    BaselineVitals,
    CaregiverContact,
    PersonalPatterns,
    RecoveryMode,
    RiskLevel,
    TimeOfDay,
    TimeOfDayAverage,
)


class TestUpsertAndGet:
    def test_upsert_returns_id(self, profile_repository):
        assert profile_repository.upsert(make_profile()) == "profile-1"

    def test_empty_id_gets_uuid(self, profile_repository):
        pid = profile_repository.upsert(make_profile(id="", created_at=""))
        assert len(pid) == 36
        loaded = profile_repository.get(pid)
        assert loaded.id == pid
        assert loaded.created_at

    def test_round_trip_preserves_profile(self, profile_repository):
        profile = make_profile(
            known_conditions=["Diabetes"],
            current_medications="Metformin",
            baseline=BaselineVitals(temperature=98.1, heart_rate=66, normal_symptoms="tired"),
            historical_data=[
                make_entry(1, symptoms="chills", risk_level=RiskLevel.MODERATE),
                make_entry(2, rest_hours=6.5, mood_rating=7),
            ],
            personal_patterns=PersonalPatterns(
                symptom_language=["feeling off"],
                time_of_day_patterns={TimeOfDay.MORNING: TimeOfDayAverage(70, 98.2, 3)},
                last_checkin_time="2026-03-09T14:00:00+00:00",
            ),
            recovery_mode=RecoveryMode(is_enabled=True, start_date="2026-03-01"),
            caregiver_contacts=[CaregiverContact(name="Sam", phone="555-0100")],
        )
        profile_repository.upsert(profile)
        assert profile_repository.get("profile-1") == profile

    def test_upsert_replaces_existing(self, profile_repository):
        profile_repository.upsert(make_profile())
        profile_repository.upsert(make_profile(name="Alex R.", historical_data=[make_entry()]))

        assert profile_repository.count() == 1
        loaded = profile_repository.get("profile-1")
        assert loaded.name == "Alex R."
        assert len(loaded.historical_data) == 1

    def test_entry_count_column_tracks_history(self, profile_repository, profile_db):
        profile_repository.upsert(make_profile(historical_data=[make_entry(1), make_entry(2)]))
        row = profile_db.connection.execute(
            "SELECT entry_count FROM profiles WHERE id = 'profile-1'"
        ).fetchone()
        assert row["entry_count"] == 2

    def test_history_not_stored_in_plaintext(self, profile_repository, profile_db):
        profile_repository.upsert(make_profile(historical_data=[make_entry(symptoms="confusion")]))
        row = profile_db.connection.execute("SELECT profile_enc FROM profiles").fetchone()
        assert "confusion" not in row["profile_enc"]

    def test_blank_name_rejected(self, profile_repository):
        with pytest.raises(RepositoryError, match="name"):
            profile_repository.upsert(make_profile(name="  "))

    def test_get_missing_returns_none(self, profile_repository):
        assert profile_repository.get("nope") is None

    def test_require_missing_raises(self, profile_repository):
        with pytest.raises(ProfileNotFoundError) as excinfo:
            profile_repository.require("nope")
        assert excinfo.value.profile_id == "nope"


class TestListAndCount:
    def test_empty(self, profile_repository):
        assert profile_repository.list() == []
        assert profile_repository.count() == 0

    def test_lists_every_profile(self, profile_repository):
        profile_repository.upsert(make_profile(id="a", name="Ana"))
        profile_repository.upsert(make_profile(id="b", name="Ben"))
        assert {p.id for p in profile_repository.list()} == {"a", "b"}
        assert profile_repository.count() == 2


class TestDelete:
    def test_delete_existing(self, profile_repository):
        profile_repository.upsert(make_profile())
        assert profile_repository.delete("profile-1") is True
        assert profile_repository.get("profile-1") is None

    def test_delete_missing(self, profile_repository):
        assert profile_repository.delete("profile-1") is False

    def test_delete_all(self, profile_repository):
        for pid in ("a", "b", "c"):
            profile_repository.upsert(make_profile(id=pid))
        assert profile_repository.delete_all() == 3
        assert profile_repository.count() == 0


class TestKeyMismatch:
    def test_other_key_cannot_read(self, profile_db, profile_repository):
        profile_repository.upsert(make_profile())
        other = ProfileRepository(profile_db, ProfileEncryptor(ProfileEncryptor.generate_key()))
        with pytest.raises(EncryptionError):
            other.get("profile-1")
