"""Tests for the check-in recorder (score, append, retain, store)."""

from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from conftest import FIXED_NOW, make_entry, make_inputs, make_profile
from sepsiscan.core.storage.repository import ProfileNotFoundError
from sepsiscan.domains.sepsis.domain_logic.checkin_recorder import RecoveryModeError
from sepsiscan.domains.sepsis.domain_logic.models import (
    CheckInFrequency,
    EmergencySettings,
    OverallFeeling,
    PersonalPatterns,
    PrivacySettings,
    RecoveryCheckIn,
    RecoveryMode,
    RiskLevel,
    TimeOfDay,
)
from sepsiscan.domains.sepsis.domain_logic.normalizer import VitalsValidationError


class TestSubmit:
    def test_appends_entry_with_frozen_level(self, recorder, profile_repository):
        profile_repository.upsert(make_profile(historical_data=[make_entry(2)]))

        result = recorder.submit("profile-1", make_inputs("101.5", "110", symptoms="chills"), FIXED_NOW)

        stored = profile_repository.get("profile-1")
        assert len(stored.historical_data) == 2
        newest = stored.historical_data[0]
        assert newest.risk_level is result.assessment.level
        assert newest.temperature == 101.5
        assert newest.time_of_day is TimeOfDay.AFTERNOON
        assert newest.timestamp == int(FIXED_NOW.timestamp() * 1000)
        assert stored.personal_patterns.last_checkin_time == FIXED_NOW.isoformat()

    def test_history_excludes_current_checkin_when_scoring(self, recorder, profile_repository):
        profile_repository.upsert(make_profile())
        result = recorder.submit("profile-1", make_inputs(), FIXED_NOW)
        assert result.assessment.trend_analysis.startswith("No previous data for comparison")

    def test_past_entries_untouched(self, recorder, profile_repository):
        old = make_entry(3, temperature=99.1, symptoms="fatigue", risk_level=RiskLevel.MODERATE)
        profile_repository.upsert(make_profile(historical_data=[old]))

        recorder.submit("profile-1", make_inputs(), FIXED_NOW)

        stored = profile_repository.get("profile-1")
        assert stored.historical_data[1] == old

    def test_unknown_profile(self, recorder):
        with pytest.raises(ProfileNotFoundError):
            recorder.submit("missing", make_inputs(), FIXED_NOW)

    def test_malformed_vitals_save_nothing(self, recorder, profile_repository):
        profile_repository.upsert(make_profile())
        with pytest.raises(VitalsValidationError):
            recorder.submit("profile-1", make_inputs("", "72"), FIXED_NOW)
        assert profile_repository.get("profile-1").historical_data == []

    def test_recommendations_returned_for_calm_checkin(self, recorder, profile_repository):
        profile_repository.upsert(make_profile())
        result = recorder.submit("profile-1", make_inputs(symptoms="a bit of fatigue"), FIXED_NOW)
        assert result.recommendations[0].id == "fatigue-rest"

    def test_recommendations_suppressed_for_urgent(self, recorder, profile_repository):
        profile_repository.upsert(make_profile())
        result = recorder.submit("profile-1", make_inputs("96.0", "72", sp_o2="88"), FIXED_NOW)
        assert result.recommendations == []


class TestMissedCheckinsAndBypass:
    def _profile(self, days_since_last):
        last = (FIXED_NOW - timedelta(days=days_since_last)).isoformat()
        return make_profile(
            emergency_settings=EmergencySettings(auto_alert_bypass_enabled=True),
            personal_patterns=PersonalPatterns(last_checkin_time=last),
            historical_data=[make_entry(days_since_last)],
        )

    def test_bypass_after_missed_days(self, recorder, profile_repository):
        profile_repository.upsert(self._profile(3))
        inputs = make_inputs("95.5", "72", symptoms="confusion", systolic_bp="82")

        result = recorder.submit("profile-1", inputs, FIXED_NOW)

        assert result.assessment.emergency_bypass_triggered
        stored = profile_repository.get("profile-1")
        assert stored.emergency_settings.consecutive_missed_checkins == 0

    def test_no_bypass_after_recent_checkin(self, recorder, profile_repository):
        profile_repository.upsert(self._profile(1))
        inputs = make_inputs("95.5", "72", symptoms="confusion", systolic_bp="82")
        result = recorder.submit("profile-1", inputs, FIXED_NOW)
        assert not result.assessment.emergency_bypass_triggered
        assert result.assessment.level is RiskLevel.HIGH

    def test_naive_now_accepted(self, recorder, profile_repository):
        profile_repository.upsert(self._profile(1))

        result = recorder.submit("profile-1", make_inputs(), datetime(2026, 3, 11, 14, 0))

        assert result.assessment.level is RiskLevel.LOW
        stored = profile_repository.get("profile-1")
        assert datetime.fromisoformat(stored.personal_patterns.last_checkin_time).tzinfo is not None


class TestRetention:
    def test_expired_entries_removed(self, recorder, profile_repository):
        profile_repository.upsert(make_profile(
            privacy_settings=PrivacySettings(zero_knowledge_mode=True, auto_delete_days=30),
            historical_data=[make_entry(10), make_entry(45)],
        ))

        result = recorder.submit("profile-1", make_inputs(), FIXED_NOW)

        assert result.expired_entries == 1
        assert len(profile_repository.get("profile-1").historical_data) == 2

    def test_retention_off_keeps_everything(self, recorder, profile_repository):
        profile_repository.upsert(make_profile(historical_data=[make_entry(400)]))
        result = recorder.submit("profile-1", make_inputs(), FIXED_NOW)
        assert result.expired_entries == 0
        assert len(profile_repository.get("profile-1").historical_data) == 2


class TestSubmitRecovery:
    def _recovery_profile(self, **recovery):
        values = dict(is_enabled=True, coach_enabled=True, start_date="2026-03-01")
        values.update(recovery)
        return make_profile(recovery_mode=RecoveryMode(**values))

    def _checkin(self, **overrides):
        values = dict(overall_feeling=OverallFeeling.OKAY, rest_hours=8, took_naps=True)
        values.update(overrides)
        return RecoveryCheckIn(**values)

    def test_requires_recovery_mode(self, recorder, profile_repository):
        profile_repository.upsert(make_profile())
        with pytest.raises(RecoveryModeError):
            recorder.submit_recovery("profile-1", self._checkin(), FIXED_NOW)

    def test_calm_recovery_checkin(self, recorder, profile_repository):
        profile_repository.upsert(self._recovery_profile())

        result = recorder.submit_recovery("profile-1", self._checkin(), FIXED_NOW)

        assert result.checkin_score == 95
        assert result.recovery_score == 85
        assert result.red_flags == []
        assert result.progress_message.startswith("You're in Week 2 of")

        stored = profile_repository.get("profile-1")
        recovery = stored.recovery_mode
        assert recovery.last_recovery_score == 85
        assert recovery.check_in_frequency is CheckInFrequency.FEW_TIMES_A_WEEK
        assert recovery.recovery_week == 2
        assert recovery.coach_data is not None
        assert len(stored.historical_data) == 1
        assert stored.personal_patterns.last_checkin_time == FIXED_NOW.isoformat()

    def test_red_flags_recorded(self, recorder, profile_repository):
        profile_repository.upsert(self._recovery_profile())

        result = recorder.submit_recovery(
            "profile-1", self._checkin(recovery_symptoms=["chest pain"]), FIXED_NOW
        )

        assert len(result.red_flags) == 1
        assert result.insights[0].type == "reinfection"
        stored = profile_repository.get("profile-1")
        assert stored.historical_data[0].risk_level is RiskLevel.HIGH
        assert stored.recovery_mode.coach_data.red_flag_alerts == result.red_flags

    def test_baseline_established_after_five_entries(self, recorder, profile_repository):
        history = [make_entry(d, temperature=98.4, heart_rate=76) for d in range(1, 5)]
        profile = self._recovery_profile()
        profile.historical_data = history
        profile_repository.upsert(profile)

        recorder.submit_recovery("profile-1", self._checkin(), FIXED_NOW)

        baseline = profile_repository.get("profile-1").recovery_mode.recovery_baseline
        assert baseline is not None
        assert baseline.heart_rate == round((76 * 4 + 70) / 5)
