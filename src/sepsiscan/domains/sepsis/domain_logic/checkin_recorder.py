"""Check-in recorder: the single writer of profile history.

Each submission follows the same order:

1. Load a snapshot of the profile from the repository.
2. Score the check-in against that snapshot (history excludes the new entry).
3. Build the new history entry, freezing the assessed risk level into it.
4. Fold the entry into personal patterns and apply privacy retention.
5. Upsert the updated profile.

Past entries are never rewritten except by retention, which only removes.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import TYPE_CHECKING

from sepsiscan.core.privacy.policy import apply_retention
from sepsiscan.domains.sepsis.domain_logic.conversational_memory import (
    local_now,
    missed_checkin_days,
    record_personal_patterns,
)
from sepsiscan.domains.sepsis.domain_logic.models import (
    ACTIVITY_EXERCISING,
    EmergencySettings,
    HistoricalData,
    PersonalPatterns,
    RecoveryCheckIn,
    RecoveryInsight,
    RiskAssessment,
    TimeOfDay,
    UserInputs,
    UserProfile,
)
from sepsiscan.domains.sepsis.domain_logic.normalizer import parse_vitals
from sepsiscan.domains.sepsis.domain_logic.recommendations import (
    HealthRecommendation,
    generate_health_recommendations,
    should_suppress_recommendations,
)
from sepsiscan.domains.sepsis.domain_logic.recovery import (
    adjust_checkin_frequency,
    calculate_recovery_score,
    calculate_recovery_week,
    establish_recovery_baseline,
    generate_recovery_insights,
    recovery_progress_message,
    score_recovery_checkin,
)
from sepsiscan.domains.sepsis.domain_logic.recovery_coach import (
    initialize_recovery_coach,
    process_recovery_checkin,
)
from sepsiscan.domains.sepsis.domain_logic.risk_engine import perform_risk_analysis

if TYPE_CHECKING:
    from sepsiscan.core.storage.repository import ProfileRepository

logger = logging.getLogger(__name__)


class RecoveryModeError(ValueError):
    """Raised when a recovery check-in is submitted for a profile not in recovery mode."""


@dataclass
class CheckInResult:
    assessment: RiskAssessment
    profile: UserProfile
    recommendations: list[HealthRecommendation] = field(default_factory=list)
    expired_entries: int = 0


@dataclass
class RecoveryCheckInResult:
    profile: UserProfile
    checkin_score: int
    recovery_score: int
    progress_message: str
    insights: list[RecoveryInsight] = field(default_factory=list)
    red_flags: list[str] = field(default_factory=list)
    expired_entries: int = 0


def _days_since(start_date: str, now: datetime) -> int | None:
    if not start_date:
        return None
    try:
        start = datetime.fromisoformat(start_date)
    except ValueError:
        return None
    if start.tzinfo is None and now.tzinfo is not None:
        start = start.replace(tzinfo=now.tzinfo)
    elif start.tzinfo is not None and now.tzinfo is None:
        start = start.replace(tzinfo=None)
    return (now - start).days


class CheckInRecorder:
    """Scores check-ins and persists them through a ``ProfileRepository``."""

    def __init__(self, repository: ProfileRepository) -> None:
        self._repo = repository

    def _with_missed_count(self, profile: UserProfile, now: datetime) -> UserProfile:
        """Refresh the missed-check-in counter the emergency bypass reads."""
        emergency = profile.emergency_settings
        if emergency is None:
            return profile
        missed = missed_checkin_days(profile.personal_patterns, now)
        return replace(
            profile,
            emergency_settings=replace(emergency, consecutive_missed_checkins=missed),
        )

    def _checked_in(self, profile: UserProfile) -> UserProfile:
        emergency = profile.emergency_settings or EmergencySettings()
        return replace(
            profile, emergency_settings=replace(emergency, consecutive_missed_checkins=0)
        )

    def submit(
        self, profile_id: str, inputs: UserInputs, now: datetime | None = None
    ) -> CheckInResult:
        """Score a risk check-in and append it to the profile's history.

        Args:
            profile_id: Stored profile to check in against.
            inputs: Raw form values.
            now: Check-in time. Defaults to the local current time.

        Returns:
            The assessment, self-care recommendations and the saved profile.

        Raises:
            ProfileNotFoundError: If no profile has ``profile_id``.
            VitalsValidationError: If temperature or heart rate is malformed.
                Nothing is saved in that case.
        """
        now = local_now(now)
        snapshot = self._with_missed_count(self._repo.require(profile_id), now)

        assessment = perform_risk_analysis(inputs, snapshot, now)
        recommendations: list[HealthRecommendation] = []
        if not should_suppress_recommendations(inputs, assessment):
            recommendations = generate_health_recommendations(
                inputs, snapshot, assessment, now
            )

        vitals = parse_vitals(inputs)
        entry = HistoricalData(
            date=now.date().isoformat(),
            timestamp=int(now.timestamp() * 1000),
            temperature=vitals.temperature,
            heart_rate=vitals.heart_rate,
            symptoms=inputs.symptoms,
            risk_level=assessment.level,
            subjective_feedback=inputs.subjective_feedback,
            is_exercising=inputs.activity_level == ACTIVITY_EXERCISING,
            time_of_day=TimeOfDay.from_hour(now.hour),
        )

        updated = replace(
            self._checked_in(snapshot),
            historical_data=[entry] + list(snapshot.historical_data),
            personal_patterns=record_personal_patterns(
                snapshot.personal_patterns, entry, inputs.subjective_feedback, now
            ),
        )
        updated, expired = apply_retention(updated, now)
        self._repo.upsert(updated)

        logger.info(
            "Check-in saved for profile %s: %s/%s",
            profile_id, assessment.level.value, assessment.alert_level.value,
        )
        return CheckInResult(
            assessment=assessment,
            profile=updated,
            recommendations=recommendations,
            expired_entries=expired,
        )

    def submit_recovery(
        self, profile_id: str, checkin: RecoveryCheckIn, now: datetime | None = None
    ) -> RecoveryCheckInResult:
        """Record a recovery-mode check-in and refresh the recovery schedule.

        Raises:
            ProfileNotFoundError: If no profile has ``profile_id``.
            RecoveryModeError: If recovery mode is not enabled for the profile.
        """
        now = local_now(now)
        profile = self._repo.require(profile_id)
        recovery = profile.recovery_mode
        if recovery is None or not recovery.is_enabled:
            raise RecoveryModeError(f"Recovery mode is not enabled for profile {profile_id}")

        if recovery.coach_enabled and recovery.coach_data is None:
            profile = initialize_recovery_coach(profile, now)

        coach = process_recovery_checkin(profile, checkin, now)
        updated = coach.profile

        checkin_score = score_recovery_checkin(checkin)
        recovery_score = calculate_recovery_score(updated)
        week = calculate_recovery_week(_days_since(updated.recovery_mode.start_date, now))
        baseline = updated.recovery_mode.recovery_baseline or establish_recovery_baseline(
            updated
        )
        patterns = updated.personal_patterns or PersonalPatterns()

        updated = replace(
            self._checked_in(updated),
            personal_patterns=replace(
                patterns, last_checkin_time=now.isoformat(), missed_checkin_count=0
            ),
            recovery_mode=replace(
                updated.recovery_mode,
                last_recovery_score=recovery_score,
                check_in_frequency=adjust_checkin_frequency(recovery_score),
                recovery_week=week,
                recovery_baseline=baseline,
            ),
        )

        insights = list(coach.insights) + generate_recovery_insights(updated, now)
        progress = recovery_progress_message(
            week,
            checkin.symptoms_progression,
            checkin.hydration_compliance and checkin.nutrition_compliance,
            checkin.medication_compliance,
        )

        updated, expired = apply_retention(updated, now)
        self._repo.upsert(updated)

        logger.info(
            "Recovery check-in saved for profile %s: score %d (week %d)",
            profile_id, recovery_score, week,
        )
        return RecoveryCheckInResult(
            profile=updated,
            checkin_score=checkin_score,
            recovery_score=recovery_score,
            progress_message=progress,
            insights=insights,
            red_flags=coach.red_flags,
            expired_entries=expired,
        )
