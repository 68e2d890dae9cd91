"""Tests for low-vital detection, escalation and the emergency bypass."""

from __future__ import annotations

from conftest import make_profile
from sepsiscan.domains.sepsis.domain_logic.low_vitals import (
    MULTIPLE_LOW_VITALS_MESSAGE,
    SINGLE_LOW_VITAL_MESSAGE,
    check_emergency_bypass,
    detect_low_vitals,
    low_vital_risk_escalation,
)
from sepsiscan.domains.sepsis.domain_logic.models import EmergencySettings, Vitals


def _vitals(temperature=98.6, heart_rate=72, **optional) -> Vitals:
    return Vitals(temperature=temperature, heart_rate=heart_rate, **optional)


class TestDetectLowVitals:
    def test_normal_vitals_have_no_flags(self):
        result = detect_low_vitals(_vitals(), "")
        assert result.flags == []
        assert result.count == 0
        assert not result.is_critical

    def test_low_temperature(self):
        result = detect_low_vitals(_vitals(temperature=96.0), "")
        assert result.count == 1
        assert "96°F" in result.flags[0]

    def test_low_heart_rate_needs_symptoms(self):
        assert detect_low_vitals(_vitals(heart_rate=55), "").count == 0
        assert detect_low_vitals(_vitals(heart_rate=55), "Weak, dizzy").count == 1
        assert detect_low_vitals(_vitals(heart_rate=50), "dizziness").count == 1
        assert detect_low_vitals(_vitals(heart_rate=50), "weakness").count == 1

    def test_unmeasured_optional_vitals_skipped(self):
        result = detect_low_vitals(_vitals(sp_o2=None, systolic_bp=None), "")
        assert result.count == 0

    def test_every_low_vital_counted(self):
        result = detect_low_vitals(
            _vitals(temperature=95, heart_rate=50, sp_o2=85, systolic_bp=80, respiratory_rate=8),
            "confusion",
        )
        assert result.count == 5
        assert result.is_critical

    def test_thresholds_are_strict(self):
        result = detect_low_vitals(
            _vitals(temperature=96.8, sp_o2=92, systolic_bp=90, respiratory_rate=12), ""
        )
        assert result.count == 0


class TestEscalation:
    def test_none(self):
        assert low_vital_risk_escalation(0, True) == (0, "")

    def test_single_without_symptoms(self):
        assert low_vital_risk_escalation(1, False) == (2, SINGLE_LOW_VITAL_MESSAGE)

    def test_single_with_symptoms(self):
        assert low_vital_risk_escalation(1, True) == (3, SINGLE_LOW_VITAL_MESSAGE)

    def test_multiple(self):
        assert low_vital_risk_escalation(2, False) == (7, MULTIPLE_LOW_VITALS_MESSAGE)
        assert low_vital_risk_escalation(3, True) == (9, MULTIPLE_LOW_VITALS_MESSAGE)


class TestEmergencyBypass:
    def _profile(self, enabled=True, missed=2):
        return make_profile(
            emergency_settings=EmergencySettings(
                auto_alert_bypass_enabled=enabled, consecutive_missed_checkins=missed
            )
        )

    def test_all_conditions_met(self):
        assert check_emergency_bypass(self._profile(), "confusion", 2)

    def test_requires_opt_in(self):
        assert not check_emergency_bypass(self._profile(enabled=False), "confusion", 2)

    def test_requires_two_low_vitals(self):
        assert not check_emergency_bypass(self._profile(), "confusion", 1)

    def test_requires_serious_symptom(self):
        assert not check_emergency_bypass(self._profile(), "fatigue", 3)

    def test_requires_missed_checkins(self):
        assert not check_emergency_bypass(self._profile(missed=1), "dizzy", 2)

    def test_missing_settings_never_bypasses(self):
        assert not check_emergency_bypass(make_profile(emergency_settings=None), "confusion", 3)
