"""Low-vital detection and the emergency-bypass decision.

"Low" is the opposite failure mode from the elevated readings the additive
score looks at: hypothermia, bradycardia with symptoms, hypoxia, hypotension
and respiratory depression. The thresholds are fixed and never adjusted per
profile.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from sepsiscan.domains.sepsis.domain_logic.models import UserProfile, Vitals
from sepsiscan.domains.sepsis.domain_logic.normalizer import format_number, normalize_symptoms


@dataclass(frozen=True)
class LowVitalThresholds:
    temperature: float = 96.8     # degF
    heart_rate: float = 60        # bpm, only counted when symptomatic
    sp_o2: float = 92             # %
    systolic_bp: float = 90       # mmHg
    respiratory_rate: float = 12  # breaths/min


LOW_VITAL_THRESHOLDS = LowVitalThresholds()

# Symptoms that make a low resting heart rate worth flagging
BRADYCARDIA_SYMPTOMS = ("fatigue", "confusion", "dizz", "weak")

# Symptoms that qualify for the unattended emergency path
BYPASS_SYMPTOMS = ("confusion", "unresponsive", "dizzy")

SINGLE_LOW_VITAL_MESSAGE = (
    "Your vital signs appear lower than healthy ranges. Low values like this, "
    "especially when paired with symptoms, can indicate serious health deterioration "
    "such as late-stage sepsis, cardiac complications, or medication side effects. "
    "Based on this, I'm escalating your risk level. Please contact your provider "
    "immediately or seek urgent care."
)

MULTIPLE_LOW_VITALS_MESSAGE = (
    "Multiple vital signs are critically low. This combination can indicate severe "
    "health deterioration, late-stage sepsis, shock, or life-threatening complications. "
    "IMMEDIATE medical attention is required. Please call 911 or go to the emergency "
    "room now."
)


@dataclass
class LowVitalResult:
    flags: list[str] = field(default_factory=list)
    count: int = 0

    @property
    def is_critical(self) -> bool:
        return self.count >= 2


def has_bradycardia_symptoms(symptoms: str) -> bool:
    text = normalize_symptoms(symptoms)
    return any(word in text for word in BRADYCARDIA_SYMPTOMS)


def detect_low_vitals(
    vitals: Vitals,
    symptoms: str,
    thresholds: LowVitalThresholds = LOW_VITAL_THRESHOLDS,
) -> LowVitalResult:
    """Flag every vital below its danger threshold.

    Optional vitals that were not measured are skipped.
    """
    result = LowVitalResult()

    if vitals.temperature < thresholds.temperature:
        result.flags.append(
            f"Dangerously low temperature ({format_number(vitals.temperature)}°F) - below "
            f"{format_number(thresholds.temperature)}°F indicates potential hypothermia "
            "or severe infection"
        )

    if vitals.heart_rate < thresholds.heart_rate and has_bradycardia_symptoms(symptoms):
        result.flags.append(
            f"Critically low heart rate ({format_number(vitals.heart_rate)} bpm) with "
            "symptoms - may indicate cardiac complications or severe sepsis"
        )

    if vitals.sp_o2 is not None and vitals.sp_o2 < thresholds.sp_o2:
        result.flags.append(
            f"Dangerously low oxygen saturation ({format_number(vitals.sp_o2)}%) - "
            "indicates respiratory compromise"
        )

    if vitals.systolic_bp is not None and vitals.systolic_bp < thresholds.systolic_bp:
        result.flags.append(
            f"Critically low blood pressure ({format_number(vitals.systolic_bp)} mmHg) - "
            "indicates potential shock or severe hypotension"
        )

    if vitals.respiratory_rate is not None and vitals.respiratory_rate < thresholds.respiratory_rate:
        result.flags.append(
            f"Dangerously low respiratory rate ({format_number(vitals.respiratory_rate)} "
            "breaths/min) - indicates respiratory depression"
        )

    result.count = len(result.flags)
    return result


def check_emergency_bypass(profile: UserProfile, symptoms: str, low_vital_count: int) -> bool:
    """Decide whether the unattended emergency-contact protocol should run.

    All four conditions must hold: the profile opted in, at least two vitals
    are low, the symptoms include a serious keyword, and the person has
    missed at least two consecutive check-ins. Dispatch itself is left to
    the caller.
    """
    settings = profile.emergency_settings
    if settings is None or not settings.auto_alert_bypass_enabled:
        return False

    text = normalize_symptoms(symptoms)
    has_serious_symptoms = any(word in text for word in BYPASS_SYMPTOMS)

    return (
        low_vital_count >= 2
        and has_serious_symptoms
        and settings.consecutive_missed_checkins >= 2
    )


def low_vital_risk_escalation(low_vital_count: int, has_symptoms: bool) -> tuple[int, str]:
    """Return ``(risk_increase, escalation_message)`` for the low-vital count."""
    if low_vital_count == 0:
        return 0, ""

    risk_increase = low_vital_count * 2
    if low_vital_count == 1:
        if has_symptoms:
            risk_increase += 1
        return risk_increase, SINGLE_LOW_VITAL_MESSAGE

    return risk_increase + 3, MULTIPLE_LOW_VITALS_MESSAGE
