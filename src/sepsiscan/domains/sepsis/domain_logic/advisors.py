"""Secondary advisories attached to a risk assessment.

None of these change the score; each returns a message or ``None``.
"""

from __future__ import annotations

from datetime import datetime

from sepsiscan.domains.sepsis.domain_logic.models import (
    DURATION_1_TO_3_DAYS,
    DURATION_OVER_3_DAYS,
    DURATION_UNDER_24H,
    AlertLevel,
    RiskLevel,
    UserProfile,
)
from sepsiscan.domains.sepsis.domain_logic.normalizer import normalize_symptoms

TIMELINE_SYMPTOMS = ("fever", "chills", "confusion", "breathing", "wound", "fatigue", "dizziness")

_ELEVATED_HR = 100
_ELEVATED_TEMP = 100.4


def _feels_fine(feedback: str | None) -> bool:
    text = (feedback or "").lower()
    return "normal" in text or "fine" in text


def suggest_adaptive_threshold(
    profile: UserProfile,
    heart_rate: float,
    temperature: float,
    subjective_feedback: str | None,
) -> str | None:
    """Offer to raise the personal alert threshold for people who run warm or fast.

    Needs at least three stored entries. Among the last five, three or more
    must show the elevated vital paired with "feels normal/fine" feedback,
    and the current reading must repeat that pairing.
    """
    if len(profile.historical_data) < 3:
        return None

    recent = profile.historical_data[:5]
    feels_normal_now = "normal" in (subjective_feedback or "").lower()

    elevated_hr = sum(
        1 for e in recent if e.heart_rate > _ELEVATED_HR and _feels_fine(e.subjective_feedback)
    )
    elevated_temp = sum(
        1 for e in recent if e.temperature > _ELEVATED_TEMP and _feels_fine(e.subjective_feedback)
    )

    if elevated_hr >= 3 and heart_rate > _ELEVATED_HR and feels_normal_now:
        average = round(sum(e.heart_rate for e in recent) / len(recent))
        return (
            f"We've noticed your heart rate tends to be higher than average ({average} bpm "
            "average). Would you like to update your alert threshold to better reflect "
            "your baseline?"
        )

    if elevated_temp >= 3 and temperature > _ELEVATED_TEMP and feels_normal_now:
        return (
            "Your temperature readings have been consistently elevated but you feel normal. "
            "Consider updating your personal baseline temperature threshold."
        )
    return None


def estimate_infection_timeline(
    profile: UserProfile, symptoms: str, symptom_duration: str
) -> str | None:
    text = normalize_symptoms(symptoms)
    if not text or text.strip() == "none":
        return None

    if sum(1 for word in TIMELINE_SYMPTOMS if word in text) < 2:
        return None

    recent_symptoms = any(e.symptoms for e in profile.historical_data[:3])

    if recent_symptoms and symptom_duration == DURATION_OVER_3_DAYS:
        return (
            "Your current symptoms may suggest a developing infection. Based on your "
            "entries, this could be 48+ hours into onset. We recommend early intervention "
            "— contact your provider."
        )
    if recent_symptoms and symptom_duration == DURATION_1_TO_3_DAYS:
        return (
            "Your symptom pattern suggests a possible infection 24–48 hours into onset. "
            "Early intervention is most effective now."
        )
    if symptom_duration == DURATION_UNDER_24H:
        return (
            "Multiple symptoms appearing within 24 hours warrant close monitoring. Consider "
            "contacting your provider if symptoms worsen."
        )
    return None


def is_night(now: datetime) -> bool:
    return now.hour >= 22 or now.hour <= 6


def night_mode_message(now: datetime) -> str | None:
    if not is_night(now):
        return None
    return (
        "We've enabled Night Mode for easier viewing. It looks like you're checking in "
        "late — if you're unwell, don't wait. You can contact a provider or review urgent "
        "steps here."
    )


def provider_integration_suggestion(level: RiskLevel, alert_level: AlertLevel) -> str | None:
    if level is RiskLevel.HIGH or alert_level is AlertLevel.URGENT:
        return (
            "Would you like us to share this alert with your care provider or care team? "
            "This may qualify for Remote Patient Monitoring (RPM) services covered by "
            "insurance."
        )
    return None
