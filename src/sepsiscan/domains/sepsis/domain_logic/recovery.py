"""Recovery-mode scoring and insights.

Two separately weighted scores live here:

* ``score_recovery_checkin`` rates a single recovery check-in.
* ``calculate_recovery_score`` is the weekly dashboard score computed from
  the last seven stored entries.

Both start from a neutral 50 and are clamped to [0, 100]. Insight rules are
independent of each other; several can fire for the same week.
"""

from __future__ import annotations

import statistics
from datetime import datetime

from sepsiscan.domains.sepsis.domain_logic.models import (
    BaselineVitals,
    CheckInFrequency,
    HistoricalData,
    InsightSeverity,
    OverallFeeling,
    RecoveryCheckIn,
    RecoveryInsight,
    SymptomsProgression,
    UserProfile,
)
from sepsiscan.domains.sepsis.domain_logic.normalizer import normalize_symptoms

BASE_SCORE = 50
RECOVERY_WINDOW = 7
TYPICAL_RECOVERY_WEEKS = 6

# Vitals are "stable" when the 7-entry spread stays under these
TEMP_STABILITY_STDDEV = 0.5
HR_STABILITY_STDDEV = 10


def _clamp_score(score: float) -> int:
    return int(max(0, min(100, round(score))))


# ---------------------------------------------------------------------------
# Per check-in score
# ---------------------------------------------------------------------------

def score_recovery_checkin(checkin: RecoveryCheckIn) -> int:
    """Rate one recovery check-in on a 0-100 scale."""
    score = BASE_SCORE

    if checkin.symptoms_progression is SymptomsProgression.IMPROVING:
        score += 25
    elif checkin.symptoms_progression is SymptomsProgression.WORSE:
        score -= 20

    if checkin.hydration_compliance:
        score += 10
    if checkin.nutrition_compliance:
        score += 10
    if checkin.medication_compliance:
        score += 15

    if checkin.rest_hours >= 7:
        score += 10
    elif checkin.rest_hours < 4:
        score -= 10

    return _clamp_score(score)


# ---------------------------------------------------------------------------
# Weekly dashboard score
# ---------------------------------------------------------------------------

def _spread(values: list[float]) -> float:
    """Population standard deviation (0 for fewer than two values)."""
    if len(values) < 2:
        return 0.0
    return statistics.pstdev(values)


def analyze_symptom_trend(entries: list[HistoricalData]) -> str:
    """Compare symptom-text length of the newest three entries with the three before.

    Longer descriptions stand in for more symptoms. Returns ``improving``,
    ``stable`` or ``worsening``.
    """
    if len(entries) < 3:
        return "stable"

    recent = [len(e.symptoms) for e in entries[:3]]
    older = [len(e.symptoms) for e in entries[3:6]]
    if not older:
        return "stable"

    recent_avg = statistics.mean(recent)
    older_avg = statistics.mean(older)

    if recent_avg < older_avg * 0.8:
        return "improving"
    if recent_avg > older_avg * 1.2:
        return "worsening"
    return "stable"


def _sleep_of(entry: HistoricalData) -> float | None:
    return entry.sleep_hours if entry.sleep_hours is not None else entry.rest_hours


def calculate_recovery_score(profile: UserProfile) -> int:
    """Weekly recovery score; 0 when recovery mode is off or there is no history."""
    recovery = profile.recovery_mode
    if recovery is None or not recovery.is_enabled or not profile.historical_data:
        return 0

    recent = profile.historical_data[:RECOVERY_WINDOW]
    score = BASE_SCORE

    sleep_total = sum(_sleep_of(e) or 0 for e in recent)
    avg_sleep = sleep_total / len(recent)
    if avg_sleep >= 7:
        score += 20
    elif avg_sleep >= 5:
        score += 10
    else:
        score -= 10

    temp_spread = _spread([e.temperature for e in recent])
    hr_spread = _spread([e.heart_rate for e in recent])
    if temp_spread < TEMP_STABILITY_STDDEV and hr_spread < HR_STABILITY_STDDEV:
        score += 15

    trend = analyze_symptom_trend(recent)
    if trend == "improving":
        score += 15
    elif trend == "worsening":
        score -= 20

    meal_rate = sum(1 for e in recent if e.meal_logged) / len(recent)
    if meal_rate > 0.7:
        score += 10

    return _clamp_score(score)


def generate_recovery_insights(profile: UserProfile, now: datetime) -> list[RecoveryInsight]:
    recovery = profile.recovery_mode
    if recovery is None or not recovery.is_enabled:
        return []

    insights: list[RecoveryInsight] = []
    recent = profile.historical_data[:RECOVERY_WINDOW]
    timestamp = now.isoformat()

    poor_sleep_days = sum(
        1 for e in recent if _sleep_of(e) is not None and _sleep_of(e) < 5
    )
    if poor_sleep_days >= 3:
        insights.append(RecoveryInsight(
            type="sleep",
            message=(
                f"You've slept <5 hours for {poor_sleep_days} days. Sleep disruption can "
                "delay recovery. Would you like circadian rhythm tips or quiet breathing "
                "exercises?"
            ),
            severity=InsightSeverity.WARNING,
            action_required=True,
            timestamp=timestamp,
        ))

    baseline_hr = recovery.recovery_baseline.heart_rate if recovery.recovery_baseline else 100
    concerning = [
        e for e in recent
        if "chills" in normalize_symptoms(e.symptoms)
        or "pain" in normalize_symptoms(e.symptoms)
        or e.heart_rate > baseline_hr + 20
    ]
    if len(concerning) >= 2:
        insights.append(RecoveryInsight(
            type="reinfection",
            message=(
                "These signs may indicate a possible reinfection. It's best to consult your "
                "provider within 24 hours."
            ),
            severity=InsightSeverity.URGENT,
            action_required=True,
            timestamp=timestamp,
        ))

    meal_gap = sum(1 for e in recent if not e.meal_logged)
    if meal_gap >= 5:
        insights.append(RecoveryInsight(
            type="behavior",
            message=(
                "Noticed you haven't logged meals this week — eating well supports tissue "
                "healing. Need some high-protein snack ideas?"
            ),
            severity=InsightSeverity.INFO,
            action_required=False,
            timestamp=timestamp,
        ))

    return insights


# ---------------------------------------------------------------------------
# Schedule, baseline and progress messaging
# ---------------------------------------------------------------------------

def adjust_checkin_frequency(recovery_score: int) -> CheckInFrequency:
    if recovery_score >= 80:
        return CheckInFrequency.FEW_TIMES_A_WEEK
    if recovery_score >= 60:
        return CheckInFrequency.DAILY
    return CheckInFrequency.TWICE_DAILY


def establish_recovery_baseline(profile: UserProfile) -> BaselineVitals | None:
    """Average the last ten entries; needs at least five."""
    if len(profile.historical_data) < 5:
        return None

    recent = profile.historical_data[:10]
    return BaselineVitals(
        temperature=round(statistics.mean(e.temperature for e in recent), 1),
        heart_rate=round(statistics.mean(e.heart_rate for e in recent)),
        normal_symptoms="Mild fatigue, recovery-related discomfort",
    )


def calculate_recovery_week(days_since_discharge: int | None) -> int:
    if not days_since_discharge or days_since_discharge <= 0:
        return 1
    return -(-days_since_discharge // 7)


def recovery_progress_message(
    week: int,
    progression: SymptomsProgression,
    hydration_and_nutrition: bool,
    medication_compliance: bool,
) -> str:
    message = f"You're in Week {week} of a typical {TYPICAL_RECOVERY_WEEKS}-week sepsis recovery window. "

    if (
        progression is SymptomsProgression.IMPROVING
        and hydration_and_nutrition
        and medication_compliance
    ):
        return message + (
            "Based on your improving symptoms and good adherence to care routines, your "
            "recovery appears to be progressing well. Keep it up!"
        )
    if progression is SymptomsProgression.SAME and hydration_and_nutrition:
        return message + (
            "Your symptoms appear stable, which is typical during recovery. Maintaining good "
            "hydration and nutrition is helping support your healing process."
        )
    if progression is SymptomsProgression.WORSE or not medication_compliance:
        return message + (
            "Some symptoms seem to be persisting or medication adherence may need attention. "
            "That's not unusual, but it may be worth checking in with your provider to make "
            "sure everything's on track."
        )
    return message + (
        "Recovery can have ups and downs. Focus on rest, hydration, and following your care "
        "plan as your body continues to heal."
    )


def weekly_progress_summary(profile: UserProfile) -> str:
    if len(profile.historical_data) < 2:
        return "Keep logging your daily check-ins to see your weekly progress summary!"

    recent = profile.historical_data[:RECOVERY_WINDOW]
    improvements: list[str] = []
    if sum(1 for e in recent if e.hydration_compliance) >= 5:
        improvements.append("hydration was consistent")
    if sum(1 for e in recent if (e.rest_hours or 0) >= 6) >= 4:
        improvements.append("rest quality improved")
    if any((e.mood_rating or 0) > 6 for e in recent):
        improvements.append("mood showed positive signs")

    if improvements:
        return "This week: " + ", ".join(improvements) + ". Great progress!"
    return (
        "This week: focus on maintaining consistent rest, hydration, and following your "
        "care plan."
    )


def trend_feedback(profile: UserProfile) -> list[str]:
    if len(profile.historical_data) < 2:
        return []

    recent = profile.historical_data[:RECOVERY_WINDOW]
    feedback: list[str] = []

    if sum(1 for e in recent if (e.rest_hours or 0) >= 6) >= 4:
        feedback.append("Looks like your sleep improved this week — that's great!")
    if sum(1 for e in recent if e.hydration_compliance) >= 5:
        feedback.append("You've been staying hydrated consistently — keep it up!")

    fever_days = sum(1 for e in recent if "fever" in (e.recovery_symptoms or []))
    if fever_days == 0 and len(recent) >= 3:
        feedback.append("No fever for several days now — that's encouraging!")

    if any((e.mood_rating or 0) > 7 for e in recent):
        feedback.append("Your mood seems to be lifting — that's wonderful to see!")

    return feedback


_QUICK_CHECKIN_RED_FLAGS = {"fever", "confusion", "severe breathing difficulty"}


def should_offer_quick_checkin(profile: UserProfile) -> bool:
    """Three calm, red-flag-free entries in a row earn a shorter check-in."""
    if len(profile.historical_data) < 3:
        return False

    recent = profile.historical_data[:3]
    all_stable = all(
        e.overall_feeling in (OverallFeeling.GREAT, OverallFeeling.OKAY) for e in recent
    )
    no_red_flags = all(
        not _QUICK_CHECKIN_RED_FLAGS.intersection(e.recovery_symptoms or []) for e in recent
    )
    return all_stable and no_red_flags
