"""Sepsis risk aggregation: the composition root of the scoring engine.

Runs every analyzer against one check-in, sums their weighted contributions
into a risk score, and maps the score to a leveled assessment. Low-vital
findings override the additive score.

The profile passed in is a snapshot whose history does NOT include the
check-in being scored; the caller appends the new entry afterwards.
All computation is deterministic given ``now``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime

from sepsiscan.domains.sepsis.domain_logic import advisors
from sepsiscan.domains.sepsis.domain_logic.conversational_memory import (
    analyze_conversational_memory,
    check_missed_checkins,
    detect_exercise_pattern,
    local_now,
    time_of_day_insight,
)
from sepsiscan.domains.sepsis.domain_logic.low_vitals import (
    check_emergency_bypass,
    detect_low_vitals,
    low_vital_risk_escalation,
)
from sepsiscan.domains.sepsis.domain_logic.models import (
    ACTIVITY_RESTING,
    DURATION_OVER_3_DAYS,
    FEEDBACK_NORMAL,
    FEEDBACK_VERY_SICK,
    AlertLevel,
    Confidence,
    RiskAssessment,
    RiskLevel,
    UserInputs,
    UserProfile,
)
from sepsiscan.domains.sepsis.domain_logic.normalizer import (
    format_number,
    normalize_symptoms,
    parse_vitals,
)
from sepsiscan.domains.sepsis.domain_logic.symptom_clusters import (
    analyze_symptom_clusters,
    cluster_score,
)
from sepsiscan.domains.sepsis.domain_logic.trend_analyzer import perform_trend_analysis

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

DEFAULT_TEMPERATURE_THRESHOLD_F = 100.4
DEFAULT_HEART_RATE_THRESHOLD_BPM = 100

HIGH_RISK_CONDITIONS = ("cancer", "diabetes", "surgery", "immunocompromised")
SCORED_SYMPTOMS = ("confusion", "chills", "breathing", "wound", "fatigue")

REASSURANCE = (
    "Remember, this is an early warning tool, not a diagnosis. If you feel okay, keep "
    "monitoring and follow up as advised."
)

RECOMMEND_BYPASS = (
    "Emergency protocol activated: critically low vital signs, serious symptoms and "
    "missed check-ins. Your emergency contacts should be notified now. Call 911 if you "
    "are able."
)
RECOMMEND_CALL_911 = "Call 911 or go to the nearest emergency room immediately."
RECOMMEND_LOW_VITAL = (
    "Contact your healthcare provider immediately or seek urgent care. A vital sign is "
    "below a safe range."
)
RECOMMEND_URGENT_CARE = "Seek urgent care immediately"
RECOMMEND_CALL_PROVIDER = "Call your healthcare provider today"
RECOMMEND_RECHECK_SOON = "Monitor closely - recheck in 4-6 hours"
RECOMMEND_RECHECK_LATER = "Continue monitoring - recheck in 12 hours"


@dataclass(frozen=True)
class EffectiveThresholds:
    """Elevated-vital cutoffs after applying any per-profile override."""

    temperature: float = DEFAULT_TEMPERATURE_THRESHOLD_F
    heart_rate: float = DEFAULT_HEART_RATE_THRESHOLD_BPM


def resolve_thresholds(profile: UserProfile) -> EffectiveThresholds:
    """Apply the profile's adaptive thresholds over the defaults, once."""
    adaptive = profile.adaptive_thresholds
    if adaptive is None:
        return EffectiveThresholds()
    return EffectiveThresholds(
        temperature=adaptive.temperature or DEFAULT_TEMPERATURE_THRESHOLD_F,
        heart_rate=adaptive.heart_rate or DEFAULT_HEART_RATE_THRESHOLD_BPM,
    )


def _classify(
    risk_score: int, low_vital_count: int, bypass: bool
) -> tuple[RiskLevel, Confidence, AlertLevel, str]:
    """Map score and overrides to (level, confidence, alert, recommendation)."""
    if bypass:
        return RiskLevel.HIGH, Confidence.HIGH, AlertLevel.URGENT, RECOMMEND_BYPASS
    if low_vital_count >= 2:
        return RiskLevel.HIGH, Confidence.HIGH, AlertLevel.URGENT, RECOMMEND_CALL_911
    if low_vital_count == 1:
        level = RiskLevel.HIGH if risk_score >= 4 else RiskLevel.MODERATE
        return level, Confidence.HIGH, AlertLevel.URGENT, RECOMMEND_LOW_VITAL
    if risk_score >= 6:
        return RiskLevel.HIGH, Confidence.HIGH, AlertLevel.URGENT, RECOMMEND_URGENT_CARE
    if risk_score >= 4:
        return RiskLevel.MODERATE, Confidence.HIGH, AlertLevel.MONITOR, RECOMMEND_CALL_PROVIDER
    if risk_score >= 2:
        return RiskLevel.MODERATE, Confidence.MEDIUM, AlertLevel.MONITOR, RECOMMEND_RECHECK_SOON
    return RiskLevel.LOW, Confidence.MEDIUM, AlertLevel.NONE, RECOMMEND_RECHECK_LATER


def perform_risk_analysis(
    inputs: UserInputs,
    profile: UserProfile,
    now: datetime | None = None,
) -> RiskAssessment:
    """Score one check-in against the profile's history.

    Args:
        inputs: Raw form values for the check-in.
        profile: Profile snapshot; its history must exclude this check-in.
        now: Wall-clock time used for missed-check-in, time-of-day and night
            mode advisories. Defaults to the local current time.

    Returns:
        A fresh ``RiskAssessment``.

    Raises:
        VitalsValidationError: If temperature or heart rate is not numeric.
    """
    now = local_now(now)
    vitals = parse_vitals(inputs)
    thresholds = resolve_thresholds(profile)
    symptoms = normalize_symptoms(inputs.symptoms)
    history = profile.historical_data

    risk_score = 0
    flagged_risks: list[str] = []

    # 1. Low vitals
    low_vitals = detect_low_vitals(vitals, symptoms)
    bypass = check_emergency_bypass(profile, symptoms, low_vitals.count)
    escalation, escalation_message = low_vital_risk_escalation(
        low_vitals.count, has_symptoms=bool(symptoms.strip())
    )
    risk_score += escalation
    flagged_risks.extend(low_vitals.flags)

    # 2. Exercise pattern: explained, not scored
    likely_exercise = detect_exercise_pattern(vitals.heart_rate, history, inputs.activity_level)
    if likely_exercise:
        flagged_risks.append(
            f"Heart rate jumped to {format_number(vitals.heart_rate)} bpm after a symptom-free "
            "check-in; this may reflect recent physical activity rather than illness"
        )

    # 3. Temperature
    if vitals.temperature > thresholds.temperature:
        risk_score += 2
        flagged_risks.append(
            f"Elevated temperature ({format_number(vitals.temperature)}°F) indicates "
            "potential infection"
        )

    # 4. Resting heart rate, weighted by how the person feels
    if (
        vitals.heart_rate > thresholds.heart_rate
        and inputs.activity_level == ACTIVITY_RESTING
        and not likely_exercise
    ):
        hr_risk = 2
        if inputs.subjective_feedback == FEEDBACK_NORMAL:
            hr_risk = 1
        elif inputs.subjective_feedback == FEEDBACK_VERY_SICK:
            hr_risk = 3
        risk_score += hr_risk
        flagged_risks.append(
            f"Elevated resting heart rate ({format_number(vitals.heart_rate)} bpm) with "
            f"subjective feeling: {inputs.subjective_feedback or 'not assessed'}"
        )

    # 5. Known high-risk conditions
    if any(
        risk in condition.lower()
        for condition in profile.known_conditions
        for risk in HIGH_RISK_CONDITIONS
    ):
        risk_score += 1
        flagged_risks.append(
            f"Pre-existing conditions ({', '.join(profile.known_conditions)}) increase "
            "sepsis risk"
        )

    # 6. Symptom keywords, plus the chills + tachycardia + wound triple
    symptom_count = sum(1 for word in SCORED_SYMPTOMS if word in symptoms)
    if symptom_count:
        risk_score += symptom_count
        flagged_risks.append(f"Sepsis-related symptoms detected: {inputs.symptoms}")
    if "chills" in symptoms and "wound" in symptoms and vitals.heart_rate > 100:
        risk_score += 2
        flagged_risks.append(
            "Chills with a wound and elevated heart rate is a dangerous combination"
        )

    # 7. Duration
    if inputs.symptom_duration == DURATION_OVER_3_DAYS:
        risk_score += 1
        flagged_risks.append("Persistent symptoms over 3 days increase concern")

    # 8. Symptom clusters
    pattern_analysis = analyze_symptom_clusters(
        symptoms, vitals.temperature, vitals.heart_rate, inputs.symptom_duration
    )
    risk_score += cluster_score(pattern_analysis)

    level, confidence, alert_level, recommendation = _classify(
        risk_score, low_vitals.count, bypass
    )
    logger.debug(
        "Risk score %d (low vitals=%d, bypass=%s) -> %s/%s",
        risk_score, low_vitals.count, bypass, level.value, alert_level.value,
    )

    personalized: list[str] = []
    tod_insight = time_of_day_insight(profile, now, vitals.heart_rate)
    if tod_insight:
        personalized.append(tod_insight)

    return RiskAssessment(
        level=level,
        confidence=confidence,
        flagged_risks=flagged_risks,
        recommendation=recommendation,
        reassurance=REASSURANCE,
        pattern_analysis=pattern_analysis,
        trend_analysis=perform_trend_analysis(vitals.temperature, vitals.heart_rate, profile),
        alert_level=alert_level,
        adaptive_threshold_suggestion=advisors.suggest_adaptive_threshold(
            profile, vitals.heart_rate, vitals.temperature, inputs.subjective_feedback
        ),
        infection_timeline_estimate=advisors.estimate_infection_timeline(
            profile, inputs.symptoms, inputs.symptom_duration
        ),
        night_mode_message=advisors.night_mode_message(now),
        provider_integration_suggestion=advisors.provider_integration_suggestion(
            level, alert_level
        ),
        conversational_memory=analyze_conversational_memory(
            profile, vitals, inputs.symptoms, inputs.subjective_feedback
        ),
        missed_checkin_alert=check_missed_checkins(profile, now),
        personalized_insights=personalized,
        low_vital_flags=list(low_vitals.flags),
        critical_low_vital_alert=escalation_message or None,
        emergency_bypass_triggered=bypass,
        risk_score=risk_score,
    )
