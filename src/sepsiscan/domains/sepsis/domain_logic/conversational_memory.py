"""Conversational memory: what the last few check-ins say about this one.

Everything here reads the profile's recent history and returns plain-language
notes. ``record_personal_patterns`` is the one writer: it builds the updated
pattern state the caller stores after a check-in has been saved.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime, timezone

from sepsiscan.domains.sepsis.domain_logic.models import (
    ACTIVITY_EXERCISING,
    HistoricalData,
    PersonalPatterns,
    TimeOfDay,
    TimeOfDayAverage,
    UserProfile,
    Vitals,
)
from sepsiscan.domains.sepsis.domain_logic.normalizer import normalize_symptoms

logger = logging.getLogger(__name__)

MEMORY_WINDOW = 7
PERSISTENCE_SYMPTOMS = ("fatigue", "chills", "confusion", "breathing", "wound", "dizziness")
PERSISTENCE_MIN_DAYS = 3
PERSONAL_WORDS = ("off", "weird", "not right", "strange", "different")
SYMPTOM_LANGUAGE_CAPACITY = 10

TIME_OF_DAY_HR_TOLERANCE = 10
EXERCISE_HR_SPIKE_BPM = 20


def _parse_iso(value: str) -> datetime:
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def local_now(now: datetime | None = None) -> datetime:
    """Return ``now`` as an aware datetime, defaulting to the local current time.

    Naive values are taken as local time so they compare with stored
    timestamps, which are always aware.
    """
    if now is None:
        return datetime.now().astimezone()
    return now.astimezone() if now.tzinfo is None else now


# ---------------------------------------------------------------------------
# Memory analysis
# ---------------------------------------------------------------------------

def find_persistent_symptoms(
    entries: list[HistoricalData], current_symptoms: str
) -> list[tuple[str, int]]:
    """Return ``(symptom, consecutive_days)`` for symptoms reported 3+ times running.

    The run starts with the current check-in and walks back through
    ``entries`` (newest first) until an entry lacks the symptom.
    """
    current = normalize_symptoms(current_symptoms)
    persistent: list[tuple[str, int]] = []

    for symptom in PERSISTENCE_SYMPTOMS:
        if symptom not in current:
            continue
        count = 1
        for entry in entries[: MEMORY_WINDOW - 1]:
            if symptom in normalize_symptoms(entry.symptoms):
                count += 1
            else:
                break
        if count >= PERSISTENCE_MIN_DAYS:
            persistent.append((symptom, min(count, MEMORY_WINDOW)))

    return persistent


def _trend(values: list[float]) -> float:
    if len(values) < 2:
        return 0.0
    return values[-1] - values[0]


def analyze_vital_trends(
    entries: list[HistoricalData], temperature: float, heart_rate: float
) -> str | None:
    """First-vs-last trend across the last three entries plus the current reading.

    The current reading is compared with the oldest of those three entries,
    not the newest, so a slow climb over four check-ins registers.
    """
    if len(entries) < 3:
        return None

    # Oldest first so the trend runs forward in time
    window = list(reversed(entries[:3]))
    temp_trend = _trend([e.temperature for e in window] + [temperature])
    hr_trend = _trend([e.heart_rate for e in window] + [heart_rate])

    if temp_trend > 0.5 and hr_trend > 5:
        return (
            "Compared to your last check-ins, your symptoms are persisting and your heart "
            "rate is trending upward. This could indicate early deterioration."
        )
    if temp_trend > 1.0:
        return "Your temperature has been gradually increasing over recent check-ins."
    if hr_trend > 10:
        return "Your heart rate has been trending higher over your last few entries."
    return None


def detect_personal_language(profile: UserProfile, current_feedback: str | None) -> str | None:
    patterns = profile.personal_patterns
    if patterns is None or not patterns.symptom_language or not current_feedback:
        return None

    current = current_feedback.lower()
    for word in PERSONAL_WORDS:
        if word not in current:
            continue
        past_usage = sum(1 for sample in patterns.symptom_language if word in sample.lower())
        if past_usage >= 2:
            return (
                f'You\'ve mentioned "feeling {word}" several times — in the past, '
                "this has correlated with elevated risk."
            )
    return None


def analyze_conversational_memory(
    profile: UserProfile,
    vitals: Vitals,
    symptoms: str,
    subjective_feedback: str | None = None,
) -> list[str]:
    """Collect memory insights in order: persistence, vital trend, personal language."""
    insights: list[str] = []
    recent = profile.historical_data[:MEMORY_WINDOW]
    if len(recent) < 2:
        return insights

    for symptom, days in find_persistent_symptoms(recent, symptoms):
        insights.append(f"You've reported {symptom} for {days} days in a row.")

    trend = analyze_vital_trends(recent, vitals.temperature, vitals.heart_rate)
    if trend:
        insights.append(trend)

    language = detect_personal_language(profile, subjective_feedback)
    if language:
        insights.append(language)

    logger.debug("Conversational memory produced %d insights", len(insights))
    return insights


# ---------------------------------------------------------------------------
# Missed check-ins
# ---------------------------------------------------------------------------

def is_emergency_escalation(entry: HistoricalData) -> bool:
    """True when at least two severe markers were present in a stored entry."""
    symptoms = normalize_symptoms(entry.symptoms)
    feedback = (entry.subjective_feedback or "").lower()
    criteria = [
        entry.temperature > 103,
        entry.heart_rate > 120,
        "confusion" in symptoms or "breathing" in symptoms,
        "very sick" in feedback or "terrible" in feedback,
    ]
    return sum(criteria) >= 2


def check_missed_checkins(profile: UserProfile, now: datetime) -> str | None:
    """Reminder (or urgent prompt) when the person has gone quiet.

    The urgent variant wins whenever more than 24 hours have passed and the
    last stored entry looked like an emergency.
    """
    patterns = profile.personal_patterns
    if patterns is None or not patterns.last_checkin_time:
        return None

    last_checkin = _parse_iso(patterns.last_checkin_time)
    hours_since = (local_now(now) - last_checkin).total_seconds() / 3600

    if hours_since > 24 and profile.historical_data:
        if is_emergency_escalation(profile.historical_data[0]):
            return (
                "SepsiScan detected concerning vitals in your last log and hasn't received "
                "a new check-in. Please respond or contact emergency services if you need help."
            )

    if 24 < hours_since < 48:
        return (
            f"Hi {profile.name}, I haven't seen a check-in since "
            f"{last_checkin.strftime('%Y-%m-%d')}. Logging your health daily helps me "
            "protect you better."
        )
    return None


def missed_checkin_days(patterns: PersonalPatterns | None, now: datetime) -> int:
    """Whole days without a check-in, counting from the last one (0 if never checked in)."""
    if patterns is None or not patterns.last_checkin_time:
        return 0
    last_checkin = _parse_iso(patterns.last_checkin_time)
    hours_since = (local_now(now) - last_checkin).total_seconds() / 3600
    return max(0, int(hours_since // 24))


# ---------------------------------------------------------------------------
# Exercise and time-of-day context
# ---------------------------------------------------------------------------

def detect_exercise_pattern(
    heart_rate: float, entries: list[HistoricalData], activity_level: str
) -> bool:
    """A sudden HR jump after a symptom-free entry, with no declared exercise."""
    if not entries or activity_level == ACTIVITY_EXERCISING:
        return False
    previous = entries[0]
    hr_spike = heart_rate - previous.heart_rate > EXERCISE_HR_SPIKE_BPM
    no_symptoms = not (previous.symptoms or "").strip()
    return hr_spike and no_symptoms


def time_of_day_insight(profile: UserProfile, now: datetime, heart_rate: float) -> str | None:
    patterns = profile.personal_patterns
    if patterns is None or not patterns.time_of_day_patterns:
        return None

    time_of_day = TimeOfDay.from_hour(now.hour)
    average = patterns.time_of_day_patterns.get(time_of_day)
    if average is not None and abs(heart_rate - average.avg_hr) < TIME_OF_DAY_HR_TOLERANCE:
        return (
            f"Your {time_of_day.value} HR tends to be in this range — this entry is within "
            "your expected pattern."
        )
    return None


def record_personal_patterns(
    patterns: PersonalPatterns | None,
    entry: HistoricalData,
    subjective_feedback: str | None,
    now: datetime,
) -> PersonalPatterns:
    """Fold a saved check-in into the person's pattern state.

    Returns a new ``PersonalPatterns``; the input is left untouched.
    """
    current = patterns or PersonalPatterns()

    language = list(current.symptom_language)
    if subjective_feedback:
        language.append(subjective_feedback.lower())
    language = language[-SYMPTOM_LANGUAGE_CAPACITY:]

    time_patterns = dict(current.time_of_day_patterns)
    time_of_day = entry.time_of_day or TimeOfDay.from_hour(now.hour)
    previous = time_patterns.get(time_of_day)
    if previous is None:
        time_patterns[time_of_day] = TimeOfDayAverage(
            avg_hr=entry.heart_rate, avg_temp=entry.temperature, samples=1
        )
    else:
        n = previous.samples
        time_patterns[time_of_day] = TimeOfDayAverage(
            avg_hr=round((previous.avg_hr * n + entry.heart_rate) / (n + 1), 1),
            avg_temp=round((previous.avg_temp * n + entry.temperature) / (n + 1), 2),
            samples=n + 1,
        )

    return replace(
        current,
        symptom_language=language,
        time_of_day_patterns=time_patterns,
        last_checkin_time=now.isoformat(),
        missed_checkin_count=0,
    )
