"""Sepsis self-assessment domain models.

Profiles, check-in history and assessment records are plain dataclasses.
Closed classifications (risk level, alert level, ...) are ``str`` enums so
they serialize as their display value.

Every record that is persisted exposes ``to_dict()`` / ``from_dict()`` so the
storage layer can round-trip it through encrypted JSON. ``from_dict`` is
lenient: missing optional keys fall back to defaults.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------

class RiskLevel(str, Enum):
    LOW = "Low"
    MODERATE = "Moderate"
    HIGH = "High"


class Confidence(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class AlertLevel(str, Enum):
    NONE = "None"
    MONITOR = "Monitor"
    URGENT = "Urgent"


class TimeOfDay(str, Enum):
    MORNING = "morning"
    AFTERNOON = "afternoon"
    EVENING = "evening"
    NIGHT = "night"

    @classmethod
    def from_hour(cls, hour: int) -> TimeOfDay:
        """Bucket a wall-clock hour (0-23)."""
        if 6 <= hour < 12:
            return cls.MORNING
        if 12 <= hour < 18:
            return cls.AFTERNOON
        if 18 <= hour < 22:
            return cls.EVENING
        return cls.NIGHT


class CheckInFrequency(str, Enum):
    DAILY = "daily"
    TWICE_DAILY = "twice-daily"
    FEW_TIMES_A_WEEK = "2-3x-week"


class OverallFeeling(str, Enum):
    GREAT = "Great"
    OKAY = "Okay"
    OFF = "Off"
    SICK = "Sick"


class SymptomsProgression(str, Enum):
    IMPROVING = "Improving"
    SAME = "Same"
    WORSE = "Worse"


class InsightSeverity(str, Enum):
    INFO = "info"
    WARNING = "warning"
    URGENT = "urgent"


# ---------------------------------------------------------------------------
# Form phrases (matched as text, not enumerated)
# ---------------------------------------------------------------------------

DURATION_UNDER_24H = "Less than 24 hours"
DURATION_1_TO_3_DAYS = "1–3 days"
DURATION_OVER_3_DAYS = "More than 3 days"

ACTIVITY_RESTING = "Resting"
ACTIVITY_EXERCISING = "Exercising"

FEEDBACK_NORMAL = "I feel normal"
FEEDBACK_A_LITTLE_OFF = "I feel a little off"
FEEDBACK_VERY_SICK = "I feel very sick"


def _enum_or_none(enum_cls, value):
    if value is None or value == "":
        return None
    return enum_cls(value)


# ---------------------------------------------------------------------------
# Profile sub-records
# ---------------------------------------------------------------------------

@dataclass
class BaselineVitals:
    """A person's own 'normal' reference readings."""

    temperature: float
    heart_rate: float
    normal_symptoms: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> BaselineVitals:
        return cls(
            temperature=float(data["temperature"]),
            heart_rate=float(data["heart_rate"]),
            normal_symptoms=data.get("normal_symptoms", ""),
        )


@dataclass
class AdaptiveThresholds:
    """Per-profile override of the default elevated-vital cutoffs."""

    temperature: float | None = None
    heart_rate: float | None = None
    last_updated: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AdaptiveThresholds:
        return cls(
            temperature=data.get("temperature"),
            heart_rate=data.get("heart_rate"),
            last_updated=data.get("last_updated", ""),
        )


@dataclass
class TimeOfDayAverage:
    avg_hr: float
    avg_temp: float
    samples: int = 1


@dataclass
class PersonalPatterns:
    """Aggregated per-person state derived from past check-ins."""

    symptom_language: list[str] = field(default_factory=list)  # newest last, max 10
    time_of_day_patterns: dict[TimeOfDay, TimeOfDayAverage] = field(default_factory=dict)
    last_checkin_time: str | None = None  # ISO 8601
    missed_checkin_count: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "symptom_language": list(self.symptom_language),
            "time_of_day_patterns": {
                tod.value: asdict(avg) for tod, avg in self.time_of_day_patterns.items()
            },
            "last_checkin_time": self.last_checkin_time,
            "missed_checkin_count": self.missed_checkin_count,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PersonalPatterns:
        patterns = {
            TimeOfDay(key): TimeOfDayAverage(**value)
            for key, value in (data.get("time_of_day_patterns") or {}).items()
        }
        return cls(
            symptom_language=list(data.get("symptom_language") or []),
            time_of_day_patterns=patterns,
            last_checkin_time=data.get("last_checkin_time"),
            missed_checkin_count=int(data.get("missed_checkin_count") or 0),
        )


@dataclass
class WeeklyMilestone:
    week: int
    goals: list[str] = field(default_factory=list)
    completed: list[str] = field(default_factory=list)
    next_week: list[str] = field(default_factory=list)


@dataclass
class MedicationReminders:
    enabled: bool = False
    times: list[str] = field(default_factory=lambda: ["09:00", "21:00"])
    medications: list[str] = field(default_factory=list)


@dataclass
class ProgressTrends:
    """Rolling per-check-in values, each capped at the last 7."""

    hydration: list[int] = field(default_factory=list)
    nutrition: list[int] = field(default_factory=list)
    mood: list[float] = field(default_factory=list)
    fatigue: list[float] = field(default_factory=list)


@dataclass
class RecoveryCoachData:
    last_check_in: str = ""
    weekly_milestones: list[WeeklyMilestone] = field(default_factory=list)
    red_flag_alerts: list[str] = field(default_factory=list)
    medication_reminders: MedicationReminders = field(default_factory=MedicationReminders)
    progress_trends: ProgressTrends = field(default_factory=ProgressTrends)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RecoveryCoachData:
        return cls(
            last_check_in=data.get("last_check_in", ""),
            weekly_milestones=[WeeklyMilestone(**m) for m in data.get("weekly_milestones") or []],
            red_flag_alerts=list(data.get("red_flag_alerts") or []),
            medication_reminders=MedicationReminders(**(data.get("medication_reminders") or {})),
            progress_trends=ProgressTrends(**(data.get("progress_trends") or {})),
        )


@dataclass
class RecoveryMode:
    is_enabled: bool = False
    start_date: str = ""
    check_in_frequency: CheckInFrequency = CheckInFrequency.DAILY
    last_recovery_score: int | None = None
    coach_enabled: bool = False
    recovery_week: int = 1
    last_coach_check_in: str | None = None
    recovery_baseline: BaselineVitals | None = None
    coach_data: RecoveryCoachData | None = None

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["check_in_frequency"] = self.check_in_frequency.value
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RecoveryMode:
        baseline = data.get("recovery_baseline")
        coach = data.get("coach_data")
        return cls(
            is_enabled=bool(data.get("is_enabled", False)),
            start_date=data.get("start_date", ""),
            check_in_frequency=CheckInFrequency(data.get("check_in_frequency") or "daily"),
            last_recovery_score=data.get("last_recovery_score"),
            coach_enabled=bool(data.get("coach_enabled", False)),
            recovery_week=int(data.get("recovery_week") or 1),
            last_coach_check_in=data.get("last_coach_check_in"),
            recovery_baseline=BaselineVitals.from_dict(baseline) if baseline else None,
            coach_data=RecoveryCoachData.from_dict(coach) if coach else None,
        )


@dataclass
class PrivacySettings:
    zero_knowledge_mode: bool = False
    auto_delete_days: int = 30
    cloud_backup_enabled: bool = False


@dataclass
class EmergencySettings:
    auto_alert_bypass_enabled: bool = False
    consecutive_missed_checkins: int = 0


@dataclass
class CaregiverContact:
    name: str
    phone: str
    relationship: str = ""


# ---------------------------------------------------------------------------
# Check-in history
# ---------------------------------------------------------------------------

@dataclass
class HistoricalData:
    """One persisted check-in. ``risk_level`` is frozen at save time."""

    date: str
    timestamp: int  # epoch milliseconds
    temperature: float
    heart_rate: float
    symptoms: str = ""
    risk_level: RiskLevel = RiskLevel.LOW
    subjective_feedback: str | None = None
    is_exercising: bool = False
    time_of_day: TimeOfDay | None = None

    # Recovery-mode fields
    overall_feeling: OverallFeeling | None = None
    recovery_symptoms: list[str] | None = None
    medication_compliance: bool | None = None
    hydration_compliance: bool | None = None
    nutrition_compliance: bool | None = None
    rest_hours: float | None = None
    sleep_hours: float | None = None
    took_naps: bool | None = None
    mood_rating: float | None = None
    meal_logged: bool | None = None
    wound_checked: bool | None = None
    cognitive_issues: bool | None = None

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["risk_level"] = self.risk_level.value
        data["time_of_day"] = self.time_of_day.value if self.time_of_day else None
        data["overall_feeling"] = self.overall_feeling.value if self.overall_feeling else None
        return {k: v for k, v in data.items() if v is not None}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> HistoricalData:
        values = dict(data)
        values["risk_level"] = RiskLevel(values.get("risk_level") or "Low")
        values["time_of_day"] = _enum_or_none(TimeOfDay, values.get("time_of_day"))
        values["overall_feeling"] = _enum_or_none(OverallFeeling, values.get("overall_feeling"))
        return cls(**values)


# ---------------------------------------------------------------------------
# Profile
# ---------------------------------------------------------------------------

@dataclass
class UserProfile:
    """One tracked individual: identity, clinical context and check-in history."""

    id: str
    name: str
    age: int
    known_conditions: list[str] = field(default_factory=list)
    current_medications: str | None = None
    baseline: BaselineVitals | None = None
    historical_data: list[HistoricalData] = field(default_factory=list)  # newest first
    created_at: str = ""
    adaptive_thresholds: AdaptiveThresholds | None = None
    personal_patterns: PersonalPatterns | None = None
    recovery_mode: RecoveryMode | None = None
    privacy_settings: PrivacySettings | None = None
    emergency_settings: EmergencySettings | None = None
    caregiver_contacts: list[CaregiverContact] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "age": self.age,
            "known_conditions": list(self.known_conditions),
            "current_medications": self.current_medications,
            "baseline": asdict(self.baseline) if self.baseline else None,
            "historical_data": [entry.to_dict() for entry in self.historical_data],
            "created_at": self.created_at,
            "adaptive_thresholds": (
                asdict(self.adaptive_thresholds) if self.adaptive_thresholds else None
            ),
            "personal_patterns": (
                self.personal_patterns.to_dict() if self.personal_patterns else None
            ),
            "recovery_mode": self.recovery_mode.to_dict() if self.recovery_mode else None,
            "privacy_settings": asdict(self.privacy_settings) if self.privacy_settings else None,
            "emergency_settings": (
                asdict(self.emergency_settings) if self.emergency_settings else None
            ),
            "caregiver_contacts": [asdict(c) for c in self.caregiver_contacts],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> UserProfile:
        baseline = data.get("baseline")
        thresholds = data.get("adaptive_thresholds")
        patterns = data.get("personal_patterns")
        recovery = data.get("recovery_mode")
        privacy = data.get("privacy_settings")
        emergency = data.get("emergency_settings")
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            age=int(data.get("age") or 0),
            known_conditions=list(data.get("known_conditions") or []),
            current_medications=data.get("current_medications"),
            baseline=BaselineVitals.from_dict(baseline) if baseline else None,
            historical_data=[
                HistoricalData.from_dict(entry) for entry in data.get("historical_data") or []
            ],
            created_at=data.get("created_at", ""),
            adaptive_thresholds=AdaptiveThresholds.from_dict(thresholds) if thresholds else None,
            personal_patterns=PersonalPatterns.from_dict(patterns) if patterns else None,
            recovery_mode=RecoveryMode.from_dict(recovery) if recovery else None,
            privacy_settings=PrivacySettings(**privacy) if privacy else None,
            emergency_settings=EmergencySettings(**emergency) if emergency else None,
            caregiver_contacts=[
                CaregiverContact(**c) for c in data.get("caregiver_contacts") or []
            ],
        )


# ---------------------------------------------------------------------------
# Engine inputs and outputs
# ---------------------------------------------------------------------------

@dataclass
class UserInputs:
    """Raw check-in form values, as typed by the user."""

    temperature: str
    heart_rate: str
    symptoms: str = ""
    symptom_duration: str = ""
    activity_level: str = ACTIVITY_RESTING
    medications: str = ""
    user_mode: str = ""
    subjective_feedback: str | None = None
    sp_o2: str | None = None
    systolic_bp: str | None = None
    respiratory_rate: str | None = None


@dataclass(frozen=True)
class Vitals:
    """Validated numeric vitals."""

    temperature: float
    heart_rate: float
    sp_o2: float | None = None
    systolic_bp: float | None = None
    respiratory_rate: float | None = None


@dataclass
class RiskAssessment:
    """Result of one check-in. Only ``level`` outlives the check-in."""

    level: RiskLevel
    confidence: Confidence
    flagged_risks: list[str]
    recommendation: str
    reassurance: str
    pattern_analysis: list[str] = field(default_factory=list)
    trend_analysis: str | None = None
    alert_level: AlertLevel = AlertLevel.NONE
    adaptive_threshold_suggestion: str | None = None
    infection_timeline_estimate: str | None = None
    night_mode_message: str | None = None
    provider_integration_suggestion: str | None = None
    conversational_memory: list[str] = field(default_factory=list)
    missed_checkin_alert: str | None = None
    personalized_insights: list[str] = field(default_factory=list)
    low_vital_flags: list[str] = field(default_factory=list)
    critical_low_vital_alert: str | None = None
    emergency_bypass_triggered: bool = False
    risk_score: int = 0

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["level"] = self.level.value
        data["confidence"] = self.confidence.value
        data["alert_level"] = self.alert_level.value
        return data


@dataclass
class RecoveryCheckIn:
    """Answers to a recovery-mode check-in."""

    overall_feeling: OverallFeeling
    recovery_symptoms: list[str] = field(default_factory=list)
    symptoms_progression: SymptomsProgression = SymptomsProgression.SAME
    medication_compliance: bool = True
    hydration_compliance: bool = True
    nutrition_compliance: bool = True
    rest_hours: float = 7.0
    took_naps: bool = False
    mood_rating: float = 5.0
    meal_logged: bool = False
    wound_checked: bool | None = None
    cognitive_issues: bool | None = None


@dataclass
class RecoveryInsight:
    type: str  # 'sleep' | 'reinfection' | 'behavior' | 'medication' | ...
    message: str
    severity: InsightSeverity
    action_required: bool
    timestamp: str

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["severity"] = self.severity.value
        return data
