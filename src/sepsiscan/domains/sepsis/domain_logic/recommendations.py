"""Self-care recommendations for low and moderate risk check-ins.

At most two recommendations are returned, in priority order. Nothing is
offered when the assessment is High/Urgent or the symptoms are severe enough
that self-care advice would be the wrong message.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from sepsiscan.domains.sepsis.domain_logic.advisors import is_night
from sepsiscan.domains.sepsis.domain_logic.conversational_memory import (
    find_persistent_symptoms,
)
from sepsiscan.domains.sepsis.domain_logic.models import (
    ACTIVITY_EXERCISING,
    AlertLevel,
    RiskAssessment,
    RiskLevel,
    UserInputs,
    UserProfile,
)
from sepsiscan.domains.sepsis.domain_logic.normalizer import normalize_symptoms, parse_vitals

MAX_RECOMMENDATIONS = 2

SEVERE_SYMPTOMS = ("confusion", "shortness of breath", "unresponsive", "severe breathing")
SUPPRESSING_RED_FLAGS = ("confusion", "shortness", "severe", "unresponsive", "chest pain")

DEFAULT_HYDRATION_HR_BPM = 90


@dataclass
class HealthRecommendation:
    id: str
    message: str
    category: str  # hydration | rest | wound-care | breathing | medication | monitoring
    is_personalized: bool = False
    based_on_symptoms: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "message": self.message,
            "category": self.category,
            "is_personalized": self.is_personalized,
            "based_on_symptoms": list(self.based_on_symptoms),
        }


def _is_high_or_urgent(assessment: RiskAssessment) -> bool:
    return assessment.level is RiskLevel.HIGH or assessment.alert_level is AlertLevel.URGENT


def should_suppress_recommendations(inputs: UserInputs, assessment: RiskAssessment) -> bool:
    """True when the check-in is too serious for self-care suggestions."""
    if _is_high_or_urgent(assessment):
        return True

    vitals = parse_vitals(inputs)
    if vitals.temperature > 103 or vitals.heart_rate > 120:
        return True

    feedback = (inputs.subjective_feedback or "").lower()
    if "very sick" in feedback or "terrible" in feedback:
        return True

    symptoms = normalize_symptoms(inputs.symptoms)
    return sum(1 for flag in SUPPRESSING_RED_FLAGS if flag in symptoms) >= 2


def generate_health_recommendations(
    inputs: UserInputs,
    profile: UserProfile,
    assessment: RiskAssessment,
    now: datetime,
) -> list[HealthRecommendation]:
    """Build up to two self-care recommendations for this check-in.

    Args:
        inputs: The check-in's raw form values.
        profile: Profile snapshot excluding this check-in.
        assessment: The assessment already produced for ``inputs``.
        now: Check-in time; night-time wording is added between 22:00 and 06:59.

    Returns:
        Zero, one or two recommendations.
    """
    if _is_high_or_urgent(assessment):
        return []

    symptoms = normalize_symptoms(inputs.symptoms)
    if any(severe in symptoms for severe in SEVERE_SYMPTOMS):
        return []

    vitals = parse_vitals(inputs)
    night = is_night(now)
    persistent = {
        symptom for symptom, _ in find_persistent_symptoms(profile.historical_data, symptoms)
    }
    conditions = [c.lower() for c in profile.known_conditions]
    recommendations: list[HealthRecommendation] = []

    if vitals.temperature > 99.5 and ("chills" in symptoms or "cold" in symptoms):
        message = "Drink warm fluids and rest in a comfortable, warm environment."
        if "chills" in persistent:
            message = (
                "You've reported chills multiple times recently. " + message
                + " Consider layered clothing you can adjust as needed."
            )
        if night:
            message += " Since it's nighttime, focus on staying warm and getting quality rest."
        recommendations.append(HealthRecommendation(
            id="fever-chills",
            message=message,
            category="rest",
            is_personalized="chills" in persistent or night,
            based_on_symptoms=["fever", "chills"],
        ))

    if any(word in symptoms for word in ("fatigue", "tired", "weakness")):
        message = (
            "Avoid strenuous activity today and prioritize rest. Stay hydrated with water "
            "or electrolyte drinks."
        )
        if inputs.activity_level == ACTIVITY_EXERCISING:
            message = "Consider reducing exercise intensity today. " + message
        if "fatigue" in persistent:
            message = (
                "Your fatigue has persisted across multiple check-ins. " + message
                + " Monitor for any worsening symptoms."
            )
        recommendations.append(HealthRecommendation(
            id="fatigue-rest",
            message=message,
            category="rest",
            is_personalized="fatigue" in persistent,
            based_on_symptoms=["fatigue", "weakness"],
        ))

    if any(word in symptoms for word in ("wound", "cut", "surgical site")):
        message = (
            "Monitor the wound area for increased redness, swelling, or warmth. Keep it "
            "clean and dry."
        )
        if any("diabetes" in c for c in conditions):
            message += (
                " Since you have diabetes, check your blood sugar regularly and watch for "
                "slow healing."
            )
        if any("surgery" in c for c in conditions):
            message = (
                "Monitor your surgical site closely. " + message
                + " Contact your surgeon if you notice drainage or increased pain."
            )
        recommendations.append(HealthRecommendation(
            id="wound-care",
            message=message,
            category="wound-care",
            is_personalized=bool(conditions),
            based_on_symptoms=["wound"],
        ))

    if ("breathing" in symptoms or "cough" in symptoms) and "shortness" not in symptoms:
        message = "Rest in an upright position and avoid cold air or known triggers."
        if night:
            message += " Use extra pillows to elevate your head while sleeping."
        recommendations.append(HealthRecommendation(
            id="mild-breathing",
            message=message,
            category="breathing",
            is_personalized=night,
            based_on_symptoms=["breathing", "cough"],
        ))

    if any(word in symptoms for word in ("dizzy", "lightheaded", "weak")):
        message = (
            "Sit or lie down immediately. Elevate your legs if possible and recheck your "
            "vitals in 15 minutes."
        )
        if vitals.heart_rate > 100:
            message += " Your elevated heart rate may be contributing to these symptoms."
        recommendations.append(HealthRecommendation(
            id="dizziness",
            message=message,
            category="monitoring",
            is_personalized=vitals.heart_rate > 100,
            based_on_symptoms=["dizziness", "lightheaded"],
        ))

    if profile.current_medications and "antibiotic" in profile.current_medications.lower():
        recommendations.append(HealthRecommendation(
            id="antibiotic-adherence",
            message=(
                "Continue taking your antibiotics as prescribed, even if you feel better. "
                "Avoid alcohol and report any severe side effects to your provider."
            ),
            category="medication",
            is_personalized=True,
        ))

    hydration_hr = profile.baseline.heart_rate if profile.baseline else DEFAULT_HYDRATION_HR_BPM
    if vitals.temperature > 99.0 or "fatigue" in symptoms or vitals.heart_rate > hydration_hr:
        recommendations.append(HealthRecommendation(
            id="hydration",
            message=(
                "Increase fluid intake with water, clear broths, or electrolyte solutions. "
                "Avoid caffeine and alcohol."
            ),
            category="hydration",
            based_on_symptoms=["fever", "fatigue"],
        ))

    return recommendations[:MAX_RECOMMENDATIONS]
