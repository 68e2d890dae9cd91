"""MCP tools for post-sepsis recovery tracking and the recovery coach."""

from __future__ import annotations

import json
import logging
from datetime import datetime
from typing import TYPE_CHECKING

from fastmcp import Context, FastMCP

from sepsiscan.core.storage.repository import ProfileNotFoundError
from sepsiscan.domains.sepsis.domain_logic.checkin_recorder import RecoveryModeError
from sepsiscan.domains.sepsis.domain_logic.models import (
    OverallFeeling,
    RecoveryCheckIn,
    SymptomsProgression,
)
from sepsiscan.domains.sepsis.domain_logic.recovery import (
    calculate_recovery_score,
    generate_recovery_insights,
    should_offer_quick_checkin,
    trend_feedback,
    weekly_progress_summary,
)
from sepsiscan.domains.sepsis.domain_logic.recovery_coach import (
    RECOVERY_SYMPTOMS,
    coach_weekly_summary,
    faq_response,
    should_escalate_to_provider,
    weekly_milestones,
)

if TYPE_CHECKING:
    from sepsiscan.core.audit.logger import AuditLogger
    from sepsiscan.core.storage.repository import ProfileRepository
    from sepsiscan.domains.sepsis.domain_logic.checkin_recorder import CheckInRecorder

logger = logging.getLogger(__name__)


def register_recovery_tools(
    mcp: FastMCP,
    repository: ProfileRepository,
    recorder: CheckInRecorder,
    audit_logger: AuditLogger | None = None,
) -> None:
    """Register recovery-mode tools on the MCP server."""

    @mcp.tool
    async def recovery_check_in(
        ctx: Context,
        profile_id: str,
        overall_feeling: str,
        recovery_symptoms: list[str] | None = None,
        symptoms_progression: str = "Same",
        medication_compliance: bool = True,
        hydration_compliance: bool = True,
        nutrition_compliance: bool = True,
        rest_hours: float = 7.0,
        took_naps: bool = False,
        mood_rating: float = 5.0,
        meal_logged: bool = False,
        wound_checked: bool | None = None,
        cognitive_issues: bool | None = None,
    ) -> str:
        """Log a daily recovery check-in and get coaching feedback.

        Args:
            profile_id: The profile's UUID (recovery mode must be on).
            overall_feeling: 'Great', 'Okay', 'Off' or 'Sick'.
            recovery_symptoms: Symptoms such as 'fatigue', 'wound pain', 'persistent fever'.
            symptoms_progression: 'Improving', 'Same' or 'Worse'.
            medication_compliance: Took all medications today.
            hydration_compliance: Met today's hydration goal.
            nutrition_compliance: Ate regular meals today.
            rest_hours: Hours of sleep or rest.
            took_naps: Took at least one nap.
            mood_rating: Mood on a 1-10 scale.
            meal_logged: Logged meals today.
            wound_checked: Checked the wound or surgical site.
            cognitive_issues: Noticed memory or concentration problems.
        """
        try:
            checkin = RecoveryCheckIn(
                overall_feeling=OverallFeeling(overall_feeling),
                recovery_symptoms=list(recovery_symptoms or []),
                symptoms_progression=SymptomsProgression(symptoms_progression),
                medication_compliance=medication_compliance,
                hydration_compliance=hydration_compliance,
                nutrition_compliance=nutrition_compliance,
                rest_hours=rest_hours,
                took_naps=took_naps,
                mood_rating=mood_rating,
                meal_logged=meal_logged,
                wound_checked=wound_checked,
                cognitive_issues=cognitive_issues,
            )
        except ValueError as exc:
            return json.dumps({"status": "error", "message": str(exc)})

        try:
            result = recorder.submit_recovery(profile_id, checkin)
        except ProfileNotFoundError as exc:
            return json.dumps({
                "status": "not_found",
                "profile_id": profile_id,
                "message": str(exc),
            })
        except RecoveryModeError as exc:
            return json.dumps({"status": "error", "message": str(exc)})

        if audit_logger is not None:
            audit_logger.log_checkin(
                "recovery_check_in",
                {"overall_feeling": overall_feeling, "symptoms": checkin.recovery_symptoms},
                profile_id=profile_id,
                risk_level=result.profile.historical_data[0].risk_level.value,
                metadata={"recovery_score": result.recovery_score},
            )
            if result.red_flags:
                audit_logger.log_emergency_flag(
                    "recovery_check_in",
                    profile_id=profile_id,
                    alert_level="Urgent",
                    bypass_triggered=False,
                )
            if result.expired_entries:
                audit_logger.log_data_delete(
                    tool_name="retention",
                    profile_id=profile_id,
                    count=result.expired_entries,
                )

        recovery = result.profile.recovery_mode
        return json.dumps({
            "status": "ok",
            "profile_id": profile_id,
            "checkin_score": result.checkin_score,
            "recovery_score": result.recovery_score,
            "recovery_week": recovery.recovery_week,
            "check_in_frequency": recovery.check_in_frequency.value,
            "progress_message": result.progress_message,
            "red_flags": result.red_flags,
            "insights": [insight.to_dict() for insight in result.insights],
        }, indent=2)

    @mcp.tool
    async def recovery_dashboard(ctx: Context, profile_id: str) -> str:
        """Weekly recovery overview: score, insights, milestones and trend feedback.

        Args:
            profile_id: The profile's UUID (recovery mode must be on).
        """
        profile = repository.get(profile_id)
        if profile is None:
            return json.dumps({
                "status": "not_found",
                "profile_id": profile_id,
                "message": "No profile found with that ID.",
            })
        recovery = profile.recovery_mode
        if recovery is None or not recovery.is_enabled:
            return json.dumps({
                "status": "error",
                "message": f"Recovery mode is not enabled for profile {profile_id}",
            })

        now = datetime.now().astimezone()
        return json.dumps({
            "status": "ok",
            "profile_id": profile_id,
            "recovery_score": calculate_recovery_score(profile),
            "recovery_week": recovery.recovery_week,
            "check_in_frequency": recovery.check_in_frequency.value,
            "insights": [i.to_dict() for i in generate_recovery_insights(profile, now)],
            "weekly_summary": weekly_progress_summary(profile),
            "coach_summary": coach_weekly_summary(profile),
            "trend_feedback": trend_feedback(profile),
            "milestones": weekly_milestones(recovery.recovery_week),
            "offer_quick_checkin": should_offer_quick_checkin(profile),
            "escalate_to_provider": should_escalate_to_provider(profile),
            "symptom_choices": list(RECOVERY_SYMPTOMS),
        }, indent=2)

    @mcp.tool
    async def recovery_faq(ctx: Context, question: str) -> str:
        """Answer a common recovery question (nutrition, work, wounds, fatigue, exercise).

        Args:
            question: The question in plain language.
        """
        return json.dumps({"status": "ok", "answer": faq_response(question)})
