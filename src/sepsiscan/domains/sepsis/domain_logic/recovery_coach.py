"""Recovery coach: guided post-sepsis check-ins, milestones and FAQ answers.

Functions here never mutate the profile they are given; the ones that change
state return an updated copy for the caller to persist.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import datetime

from sepsiscan.domains.sepsis.domain_logic.models import (
    HistoricalData,
    InsightSeverity,
    MedicationReminders,
    OverallFeeling,
    ProgressTrends,
    RecoveryCheckIn,
    RecoveryCoachData,
    RecoveryInsight,
    RecoveryMode,
    RiskLevel,
    TimeOfDay,
    UserProfile,
    WeeklyMilestone,
)

logger = logging.getLogger(__name__)

RECOVERY_SYMPTOMS = (
    "wound pain",
    "swelling",
    "fever",
    "shortness of breath",
    "dizziness",
    "fatigue",
    "confusion",
    "nausea",
)

RED_FLAG_SYMPTOMS = (
    "persistent fever",
    "new confusion",
    "worsening wound",
    "severe breathing difficulty",
    "chest pain",
)

RED_FLAG_MESSAGE = (
    "You've reported signs that may signal infection is returning. Please call your "
    "provider or seek urgent care now."
)

DEFAULT_TEMPERATURE_F = 98.6
DEFAULT_HEART_RATE_BPM = 70
TREND_CAPACITY = 7

_BASE_GOALS = [
    "Complete prescribed medications daily",
    "Stay well hydrated (8+ glasses water)",
    "Get adequate rest (7-8 hours sleep)",
]

_WEEK_GOALS = {
    1: ["Monitor wound healing", "Track symptoms daily"],
    2: ["Light walking (5-10 minutes)", "Social interaction"],
    3: ["Increase activity gradually", "Return to light household tasks"],
    4: ["Consider return to work discussion", "Regular exercise routine"],
}


@dataclass
class CoachCheckInResult:
    profile: UserProfile
    insights: list[RecoveryInsight] = field(default_factory=list)
    red_flags: list[str] = field(default_factory=list)


def _has_red_flag(symptoms: list[str] | None) -> bool:
    return any(
        red_flag in symptom.lower()
        for symptom in symptoms or []
        for red_flag in RED_FLAG_SYMPTOMS
    )


def _medication_list(profile: UserProfile) -> list[str]:
    if not profile.current_medications:
        return []
    return [m.strip() for m in profile.current_medications.split(",") if m.strip()]


def initialize_recovery_coach(profile: UserProfile, now: datetime) -> UserProfile:
    """Attach fresh coach state to a profile that has the coach switched on.

    Profiles without recovery mode or with the coach disabled come back
    unchanged.
    """
    recovery = profile.recovery_mode
    if recovery is None or not recovery.coach_enabled:
        return profile

    coach_data = RecoveryCoachData(
        last_check_in=now.isoformat(),
        weekly_milestones=[
            WeeklyMilestone(
                week=1,
                goals=["Complete medications daily", "Stay hydrated", "Rest 8+ hours"],
                next_week=["Light walking", "Wound care routine"],
            )
        ],
        medication_reminders=MedicationReminders(medications=_medication_list(profile)),
    )
    return replace(
        profile,
        recovery_mode=replace(
            recovery,
            coach_data=coach_data,
            recovery_week=1,
            last_coach_check_in=now.isoformat(),
        ),
    )


def _insight(type_: str, message: str, severity: InsightSeverity, action: bool, now: datetime):
    return RecoveryInsight(
        type=type_,
        message=message,
        severity=severity,
        action_required=action,
        timestamp=now.isoformat(),
    )


def _coach_insights(checkin: RecoveryCheckIn, now: datetime) -> list[RecoveryInsight]:
    insights: list[RecoveryInsight] = []

    if not checkin.medication_compliance:
        insights.append(_insight(
            "medication",
            "Missed medications can slow recovery. Would you like help setting daily reminders?",
            InsightSeverity.WARNING, True, now,
        ))
    if not checkin.hydration_compliance:
        insights.append(_insight(
            "hydration",
            "Drink at least 8 oz of water every 2 hours today. Proper hydration supports "
            "healing.",
            InsightSeverity.INFO, False, now,
        ))
    if not checkin.nutrition_compliance:
        insights.append(_insight(
            "nutrition",
            "Try easy-to-digest foods like soup, rice, bananas, or toast to support recovery.",
            InsightSeverity.INFO, False, now,
        ))
    if checkin.rest_hours < 6:
        insights.append(_insight(
            "sleep",
            "Your body needs adequate rest to heal. Aim for 7-8 hours of sleep per night.",
            InsightSeverity.WARNING, False, now,
        ))
    if not checkin.took_naps and checkin.rest_hours < 7:
        insights.append(_insight(
            "sleep",
            "Short naps (20-30 min) can reduce fatigue and promote healing.",
            InsightSeverity.INFO, False, now,
        ))
    if checkin.mood_rating <= 3:
        insights.append(_insight(
            "mood",
            "Try light journaling, music, or 10 minutes of deep breathing to boost your mood.",
            InsightSeverity.INFO, False, now,
        ))
    if checkin.cognitive_issues:
        insights.append(_insight(
            "cognitive",
            "Cognitive changes after sepsis are common but should be monitored. Consider "
            "discussing with your provider.",
            InsightSeverity.WARNING, True, now,
        ))
    return insights


def _capped(values: list, value) -> list:
    return (list(values) + [value])[-TREND_CAPACITY:]


def process_recovery_checkin(
    profile: UserProfile, checkin: RecoveryCheckIn, now: datetime
) -> CoachCheckInResult:
    """Evaluate a coach check-in and fold it into the profile.

    Args:
        profile: Current profile; recovery mode should be enabled.
        checkin: The person's answers.
        now: Check-in time, used for the entry timestamp and time of day.

    Returns:
        The updated profile (new entry prepended, progress trends extended)
        together with coach insights and red-flag messages.
    """
    insights: list[RecoveryInsight] = []
    red_flags: list[str] = []

    has_red_flags = _has_red_flag(checkin.recovery_symptoms)
    if has_red_flags or checkin.overall_feeling is OverallFeeling.SICK:
        red_flags.append(RED_FLAG_MESSAGE)
        insights.append(_insight(
            "reinfection",
            "Critical symptoms detected. Contact healthcare provider immediately.",
            InsightSeverity.URGENT, True, now,
        ))

    insights.extend(_coach_insights(checkin, now))

    if has_red_flags:
        risk_level = RiskLevel.HIGH
    elif checkin.overall_feeling is OverallFeeling.OFF:
        risk_level = RiskLevel.MODERATE
    else:
        risk_level = RiskLevel.LOW

    baseline = profile.baseline
    entry = HistoricalData(
        date=now.date().isoformat(),
        timestamp=int(now.timestamp() * 1000),
        temperature=baseline.temperature if baseline else DEFAULT_TEMPERATURE_F,
        heart_rate=baseline.heart_rate if baseline else DEFAULT_HEART_RATE_BPM,
        symptoms=", ".join(checkin.recovery_symptoms),
        risk_level=risk_level,
        time_of_day=TimeOfDay.from_hour(now.hour),
        overall_feeling=checkin.overall_feeling,
        recovery_symptoms=list(checkin.recovery_symptoms),
        medication_compliance=checkin.medication_compliance,
        hydration_compliance=checkin.hydration_compliance,
        nutrition_compliance=checkin.nutrition_compliance,
        rest_hours=checkin.rest_hours,
        took_naps=checkin.took_naps,
        mood_rating=checkin.mood_rating,
        meal_logged=checkin.meal_logged,
        wound_checked=checkin.wound_checked,
        cognitive_issues=checkin.cognitive_issues,
    )

    recovery = profile.recovery_mode or RecoveryMode(is_enabled=True)
    coach_data = recovery.coach_data or RecoveryCoachData()
    trends = coach_data.progress_trends
    updated_trends = ProgressTrends(
        hydration=_capped(trends.hydration, 1 if checkin.hydration_compliance else 0),
        nutrition=_capped(trends.nutrition, 1 if checkin.nutrition_compliance else 0),
        mood=_capped(trends.mood, checkin.mood_rating),
        fatigue=_capped(trends.fatigue, checkin.rest_hours),
    )
    red_flag_log = list(coach_data.red_flag_alerts) + red_flags

    updated = replace(
        profile,
        historical_data=[entry] + list(profile.historical_data),
        recovery_mode=replace(
            recovery,
            last_coach_check_in=now.isoformat(),
            coach_data=replace(
                coach_data,
                last_check_in=now.isoformat(),
                progress_trends=updated_trends,
                red_flag_alerts=red_flag_log,
            ),
        ),
    )

    logger.debug(
        "Coach check-in processed: %d insights, %d red flags", len(insights), len(red_flags)
    )
    return CoachCheckInResult(profile=updated, insights=insights, red_flags=red_flags)


# ---------------------------------------------------------------------------
# Milestones, summaries and escalation
# ---------------------------------------------------------------------------

def weekly_milestones(week: int) -> list[str]:
    return _BASE_GOALS + _WEEK_GOALS.get(
        week, ["Maintain healthy routines", "Continue monitoring"]
    )


def coach_weekly_summary(profile: UserProfile) -> list[str]:
    """Summarize the coach's rolling hydration, nutrition and mood trends."""
    recovery = profile.recovery_mode
    if recovery is None or recovery.coach_data is None:
        return []

    trends = recovery.coach_data.progress_trends
    summary: list[str] = []

    hydration_days = sum(1 for value in trends.hydration if value == 1)
    if hydration_days >= 5:
        summary.append("Hydration improved 5+ out of 7 days this week. Excellent work!")
    elif hydration_days >= 3:
        summary.append(
            "Hydration was good 3-4 days this week. Let's aim for more consistent hydration."
        )
    else:
        summary.append("Hydration needs attention. Try setting hourly water reminders.")

    nutrition_days = sum(1 for value in trends.nutrition if value == 1)
    if nutrition_days >= 5:
        summary.append("Nutrition goals met most days. Great job fueling your recovery!")
    else:
        summary.append(
            "Nutrition could be improved. Try meal prep or simple, nutritious snacks."
        )

    if trends.mood:
        avg_mood = sum(trends.mood) / len(trends.mood)
        if avg_mood >= 7:
            summary.append("Your mood has been consistently positive this week!")
        elif avg_mood >= 5:
            summary.append(
                "Your mood has been stable. Consider activities that bring you joy."
            )
        else:
            summary.append(
                "Your mood has been low. This is normal during recovery, but consider "
                "talking to someone."
            )

    return summary


def should_escalate_to_provider(profile: UserProfile) -> bool:
    """Persistent red flags, repeated missed medication or any cognitive issue."""
    recovery = profile.recovery_mode
    if recovery is None or recovery.coach_data is None:
        return False

    recent = profile.historical_data[:3]
    persistent = sum(
        1 for e in recent
        if e.overall_feeling is OverallFeeling.SICK or _has_red_flag(e.recovery_symptoms)
    )
    missed_medications = sum(1 for e in recent if e.medication_compliance is False)
    cognitive = any(e.cognitive_issues for e in recent)

    return persistent >= 2 or missed_medications >= 2 or cognitive


_FAQ_ANSWERS = (
    (
        ("eat", "food", "nutrition"),
        "Focus on easy-to-digest, protein-rich foods like chicken soup, eggs, yogurt, "
        "bananas, and rice. Stay hydrated and eat small, frequent meals. Avoid processed "
        "foods and alcohol.",
    ),
    (
        ("work", "job"),
        "Return to work timing varies by individual. Most people need 2-4 weeks for desk "
        "jobs, longer for physical work. Start with reduced hours if possible. Fatigue is "
        "common for weeks to months.",
    ),
    (
        ("wound", "pain"),
        "Mild wound discomfort is normal during healing. Watch for increased redness, pus, "
        "warmth, or worsening pain, which could indicate infection. Keep wounds clean and "
        "dry, change dressings as directed.",
    ),
    (
        ("tired", "fatigue"),
        "Post-sepsis fatigue can last weeks to months. Rest when needed, take short naps "
        "(20-30 min), gradually increase activity, and maintain good sleep hygiene. This "
        "is a normal part of recovery.",
    ),
    (
        ("exercise", "activity"),
        "Start with gentle activities like short walks. Gradually increase duration and "
        "intensity based on how you feel. Listen to your body and rest when needed. Avoid "
        "strenuous exercise until cleared by your doctor.",
    ),
)

FAQ_FALLBACK = (
    "I understand you have questions about your recovery. For specific medical concerns, "
    "please consult with your healthcare provider. I'm here to support you with general "
    "recovery guidance and monitoring."
)


def faq_response(question: str) -> str:
    text = question.lower()
    for keywords, answer in _FAQ_ANSWERS:
        if any(keyword in text for keyword in keywords):
            return answer
    return FAQ_FALLBACK
