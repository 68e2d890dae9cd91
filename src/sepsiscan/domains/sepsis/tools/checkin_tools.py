"""MCP tool for the sepsis risk check-in.

The tool validates the form values, scores them against the stored history,
saves the new entry and returns the full assessment. It is an early-warning
aid, not a diagnosis; the reassurance text in every response says so.
"""

from __future__ import annotations

import json
import logging
import time
from typing import TYPE_CHECKING

from fastmcp import Context, FastMCP

from sepsiscan.core.storage.repository import ProfileNotFoundError
from sepsiscan.domains.sepsis.domain_logic.models import (
    ACTIVITY_RESTING,
    AlertLevel,
    UserInputs,
)
from sepsiscan.domains.sepsis.domain_logic.normalizer import VitalsValidationError

if TYPE_CHECKING:
    from sepsiscan.core.audit.logger import AuditLogger
    from sepsiscan.domains.sepsis.domain_logic.checkin_recorder import CheckInRecorder

logger = logging.getLogger(__name__)


def _optional(value: float | str | None) -> str | None:
    return None if value is None else str(value)


def register_checkin_tools(
    mcp: FastMCP,
    recorder: CheckInRecorder,
    audit_logger: AuditLogger | None = None,
) -> None:
    """Register the risk check-in tool on the MCP server."""

    @mcp.tool
    async def sepsis_risk_check(
        ctx: Context,
        profile_id: str,
        temperature: float | str,
        heart_rate: float | str,
        symptoms: str = "",
        symptom_duration: str = "",
        activity_level: str = ACTIVITY_RESTING,
        subjective_feedback: str = "",
        sp_o2: float | str | None = None,
        systolic_bp: float | str | None = None,
        respiratory_rate: float | str | None = None,
        medications: str = "",
    ) -> str:
        """Score a check-in for early signs of sepsis and save it to the profile's history.

        Args:
            profile_id: The profile's UUID.
            temperature: Body temperature in °F.
            heart_rate: Heart rate in bpm.
            symptoms: Free-text symptoms (e.g., 'chills and confusion').
            symptom_duration: 'Less than 24 hours', '1–3 days' or 'More than 3 days'.
            activity_level: 'Resting' or 'Exercising'.
            subjective_feedback: 'I feel normal', 'I feel a little off' or 'I feel very sick'.
            sp_o2: Blood oxygen saturation in percent, if measured.
            systolic_bp: Systolic blood pressure in mmHg, if measured.
            respiratory_rate: Breaths per minute, if measured.
            medications: Medications taken for this episode.
        """
        start_time = time.monotonic()
        inputs = UserInputs(
            temperature=str(temperature),
            heart_rate=str(heart_rate),
            symptoms=symptoms,
            symptom_duration=symptom_duration,
            activity_level=activity_level or ACTIVITY_RESTING,
            medications=medications,
            subjective_feedback=subjective_feedback or None,
            sp_o2=_optional(sp_o2),
            systolic_bp=_optional(systolic_bp),
            respiratory_rate=_optional(respiratory_rate),
        )

        try:
            result = recorder.submit(profile_id, inputs)
        except ProfileNotFoundError as exc:
            return json.dumps({
                "status": "not_found",
                "profile_id": profile_id,
                "message": str(exc),
            })
        except VitalsValidationError as exc:
            if audit_logger is not None:
                audit_logger.log_checkin(
                    "sepsis_risk_check",
                    {"temperature": inputs.temperature, "heart_rate": inputs.heart_rate},
                    profile_id=profile_id,
                    status="failure",
                    error_type=type(exc).__name__,
                )
            return json.dumps({
                "status": "error",
                "field": exc.field_name,
                "message": str(exc),
            })

        elapsed_ms = (time.monotonic() - start_time) * 1000
        assessment = result.assessment

        if audit_logger is not None:
            audit_logger.log_checkin(
                "sepsis_risk_check",
                {
                    "temperature": inputs.temperature,
                    "heart_rate": inputs.heart_rate,
                    "symptoms": inputs.symptoms,
                },
                profile_id=profile_id,
                risk_level=assessment.level.value,
                alert_level=assessment.alert_level.value,
                duration_ms=round(elapsed_ms, 1),
            )
            if assessment.alert_level is AlertLevel.URGENT or assessment.emergency_bypass_triggered:
                audit_logger.log_emergency_flag(
                    "sepsis_risk_check",
                    profile_id=profile_id,
                    alert_level=assessment.alert_level.value,
                    bypass_triggered=assessment.emergency_bypass_triggered,
                )
            if result.expired_entries:
                audit_logger.log_data_delete(
                    tool_name="retention",
                    profile_id=profile_id,
                    count=result.expired_entries,
                )

        return json.dumps({
            "status": "ok",
            "profile_id": profile_id,
            "assessment": assessment.to_dict(),
            "recommendations": [r.to_dict() for r in result.recommendations],
            "checkins_stored": len(result.profile.historical_data),
            "duration_ms": round(elapsed_ms, 1),
        }, indent=2)
