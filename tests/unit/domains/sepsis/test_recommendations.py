"""Tests for self-care recommendation generation and suppression."""

from __future__ import annotations

from datetime import datetime, timezone

from conftest import FIXED_NOW, make_entry, make_inputs, make_profile
from sepsiscan.domains.sepsis.domain_logic.models import (
    ACTIVITY_EXERCISING,
    AlertLevel,
    BaselineVitals,
    Confidence,
    RiskAssessment,
    RiskLevel,
)
from sepsiscan.domains.sepsis.domain_logic.recommendations import (
    MAX_RECOMMENDATIONS,
    generate_health_recommendations,
    should_suppress_recommendations,
)

NIGHT = datetime(2026, 3, 10, 23, 0, tzinfo=timezone.utc)


def _assessment(level=RiskLevel.LOW, alert=AlertLevel.NONE) -> RiskAssessment:
    return RiskAssessment(
        level=level,
        confidence=Confidence.MEDIUM,
        flagged_risks=[],
        recommendation="",
        reassurance="",
        alert_level=alert,
    )


def _ids(recommendations):
    return [r.id for r in recommendations]


class TestSuppression:
    def test_high_risk_suppresses(self):
        assert should_suppress_recommendations(make_inputs(), _assessment(RiskLevel.HIGH))
        assert should_suppress_recommendations(
            make_inputs(), _assessment(RiskLevel.MODERATE, AlertLevel.URGENT)
        )

    def test_extreme_vitals_suppress(self):
        assert should_suppress_recommendations(make_inputs("103.2", "80"), _assessment())
        assert should_suppress_recommendations(make_inputs("98.6", "125"), _assessment())

    def test_feeling_very_sick_suppresses(self):
        inputs = make_inputs(subjective_feedback="I feel very sick")
        assert should_suppress_recommendations(inputs, _assessment())

    def test_two_red_flags_suppress(self):
        assert should_suppress_recommendations(
            make_inputs(symptoms="chest pain and severe cough"), _assessment()
        )
        assert not should_suppress_recommendations(
            make_inputs(symptoms="severe cough"), _assessment()
        )


class TestGeneration:
    def test_none_for_high_risk(self):
        inputs = make_inputs("100.0", "80", symptoms="fatigue")
        assert generate_health_recommendations(
            inputs, make_profile(), _assessment(RiskLevel.HIGH), FIXED_NOW
        ) == []

    def test_none_for_severe_symptoms(self):
        inputs = make_inputs(symptoms="shortness of breath")
        assert generate_health_recommendations(inputs, make_profile(), _assessment(), FIXED_NOW) == []

    def test_calm_checkin_gets_nothing(self):
        assert generate_health_recommendations(
            make_inputs(), make_profile(), _assessment(), FIXED_NOW
        ) == []

    def test_fever_with_chills(self):
        inputs = make_inputs("100.2", "80", symptoms="chills")
        result = generate_health_recommendations(inputs, make_profile(), _assessment(), FIXED_NOW)
        assert _ids(result) == ["fever-chills", "hydration"]
        assert not result[0].is_personalized

    def test_capped_at_two_in_priority_order(self):
        inputs = make_inputs("100.2", "80", symptoms="chills, fatigue, wound, cough")
        result = generate_health_recommendations(inputs, make_profile(), _assessment(), FIXED_NOW)
        assert len(result) == MAX_RECOMMENDATIONS
        assert _ids(result) == ["fever-chills", "fatigue-rest"]

    def test_persistent_fatigue_personalized(self):
        profile = make_profile(
            historical_data=[make_entry(d, symptoms="fatigue") for d in (1, 2, 3)]
        )
        inputs = make_inputs(symptoms="fatigue", activity_level=ACTIVITY_EXERCISING)
        result = generate_health_recommendations(inputs, profile, _assessment(), FIXED_NOW)
        assert result[0].id == "fatigue-rest"
        assert result[0].is_personalized
        assert result[0].message.startswith("Your fatigue has persisted across multiple check-ins.")
        assert "Consider reducing exercise intensity today." in result[0].message

    def test_wound_care_mentions_diabetes(self):
        profile = make_profile(known_conditions=["Type 2 Diabetes"])
        result = generate_health_recommendations(
            make_inputs(symptoms="wound is sore"), profile, _assessment(), FIXED_NOW
        )
        assert result[0].id == "wound-care"
        assert "Since you have diabetes" in result[0].message

    def test_mild_breathing_at_night(self):
        result = generate_health_recommendations(
            make_inputs(symptoms="cough"), make_profile(), _assessment(), NIGHT
        )
        assert result[0].id == "mild-breathing"
        assert result[0].is_personalized
        assert "extra pillows" in result[0].message

    def test_antibiotic_adherence(self):
        profile = make_profile(current_medications="Antibiotics (cephalexin)")
        result = generate_health_recommendations(make_inputs(), profile, _assessment(), FIXED_NOW)
        assert _ids(result) == ["antibiotic-adherence"]

    def test_hydration_uses_baseline_heart_rate(self):
        inputs = make_inputs("98.6", "85")
        assert generate_health_recommendations(
            inputs, make_profile(), _assessment(), FIXED_NOW
        ) == []

        profile = make_profile(baseline=BaselineVitals(temperature=98.2, heart_rate=70))
        result = generate_health_recommendations(inputs, profile, _assessment(), FIXED_NOW)
        assert _ids(result) == ["hydration"]

    def test_to_dict(self):
        inputs = make_inputs(symptoms="dizzy")
        result = generate_health_recommendations(inputs, make_profile(), _assessment(), FIXED_NOW)
        data = result[0].to_dict()
        assert data["category"] == "monitoring"
        assert data["based_on_symptoms"] == ["dizziness", "lightheaded"]
