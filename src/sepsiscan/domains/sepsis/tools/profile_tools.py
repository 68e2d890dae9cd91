"""MCP tools for creating and configuring tracked profiles.

A profile holds one person's baseline, clinical context, alert settings and
check-in history. Everything except the id and display name is stored
encrypted.
"""

from __future__ import annotations

import json
import logging
from dataclasses import replace
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from fastmcp import Context, FastMCP

from sepsiscan.domains.sepsis.domain_logic.models import (
    AdaptiveThresholds,
    BaselineVitals,
    CaregiverContact,
    EmergencySettings,
    PrivacySettings,
    RecoveryMode,
    UserProfile,
)
from sepsiscan.domains.sepsis.domain_logic.recovery_coach import initialize_recovery_coach

if TYPE_CHECKING:
    from sepsiscan.core.audit.logger import AuditLogger
    from sepsiscan.core.storage.repository import ProfileRepository

logger = logging.getLogger(__name__)


def _not_found(profile_id: str) -> str:
    return json.dumps({
        "status": "not_found",
        "profile_id": profile_id,
        "message": "No profile found with that ID.",
    })


def _error(message: str) -> str:
    return json.dumps({"status": "error", "message": message})


def profile_summary(profile: UserProfile) -> dict:
    """Non-sensitive overview used by list and get responses."""
    latest = profile.historical_data[0] if profile.historical_data else None
    recovery = profile.recovery_mode
    return {
        "id": profile.id,
        "name": profile.name,
        "age": profile.age,
        "checkins": len(profile.historical_data),
        "last_checkin_date": latest.date if latest else None,
        "last_risk_level": latest.risk_level.value if latest else None,
        "has_baseline": profile.baseline is not None,
        "recovery_mode": bool(recovery and recovery.is_enabled),
    }


def register_profile_tools(
    mcp: FastMCP,
    repository: ProfileRepository,
    audit_logger: AuditLogger | None = None,
    default_auto_delete_days: int = 30,
) -> None:
    """Register profile management tools on the MCP server."""

    def _audit_update(tool_name: str, profile_id: str, fields: list[str]) -> None:
        if audit_logger is not None:
            audit_logger.log_profile_update(tool_name, profile_id=profile_id, fields=fields)

    @mcp.tool
    async def create_profile(
        ctx: Context,
        name: str,
        age: int,
        known_conditions: list[str] | None = None,
        current_medications: str = "",
        baseline_temperature: float | None = None,
        baseline_heart_rate: float | None = None,
        normal_symptoms: str = "",
    ) -> str:
        """Create a new person to track.

        Args:
            name: Display name (e.g., 'Mom', 'Alex').
            age: Age in years.
            known_conditions: Conditions such as 'diabetes', 'recent surgery', 'cancer'.
            current_medications: Comma-separated list of current medications.
            baseline_temperature: The person's usual temperature in °F, if known.
            baseline_heart_rate: The person's usual resting heart rate in bpm, if known.
            normal_symptoms: Symptoms that are normal for this person.
        """
        if not name.strip():
            return _error("name must not be empty.")
        if age < 0:
            return _error("age must not be negative.")
        if (baseline_temperature is None) != (baseline_heart_rate is None):
            return _error("Provide both baseline_temperature and baseline_heart_rate, or neither.")

        baseline = None
        if baseline_temperature is not None and baseline_heart_rate is not None:
            baseline = BaselineVitals(baseline_temperature, baseline_heart_rate, normal_symptoms)

        profile = UserProfile(
            id="",
            name=name.strip(),
            age=age,
            known_conditions=list(known_conditions or []),
            current_medications=current_medications or None,
            baseline=baseline,
            privacy_settings=PrivacySettings(auto_delete_days=default_auto_delete_days),
            emergency_settings=EmergencySettings(),
        )
        profile_id = repository.upsert(profile)
        _audit_update("create_profile", profile_id, ["created"])
        logger.info("Created profile %s", profile_id)
        return json.dumps({"status": "created", "profile": profile_summary(profile)})

    @mcp.tool
    async def list_profiles(ctx: Context) -> str:
        """List every tracked person with a short summary of their latest check-in."""
        profiles = repository.list()
        return json.dumps({
            "status": "ok",
            "count": len(profiles),
            "profiles": [profile_summary(p) for p in profiles],
        }, indent=2)

    @mcp.tool
    async def get_profile(
        ctx: Context,
        profile_id: str,
        history_limit: int = 10,
    ) -> str:
        """Show a profile's settings and its most recent check-ins.

        Args:
            profile_id: The profile's UUID.
            history_limit: How many recent check-ins to include (default: 10).
        """
        profile = repository.get(profile_id)
        if profile is None:
            return _not_found(profile_id)

        data = profile.to_dict()
        data["historical_data"] = data["historical_data"][: max(0, history_limit)]
        return json.dumps({
            "status": "ok",
            "summary": profile_summary(profile),
            "profile": data,
        }, indent=2)

    @mcp.tool
    async def set_baseline(
        ctx: Context,
        profile_id: str,
        temperature: float,
        heart_rate: float,
        normal_symptoms: str = "",
    ) -> str:
        """Record a person's usual temperature and resting heart rate.

        Trend analysis compares each check-in against this baseline.

        Args:
            profile_id: The profile's UUID.
            temperature: Usual body temperature in °F.
            heart_rate: Usual resting heart rate in bpm.
            normal_symptoms: Symptoms that are normal for this person.
        """
        profile = repository.get(profile_id)
        if profile is None:
            return _not_found(profile_id)

        profile.baseline = BaselineVitals(temperature, heart_rate, normal_symptoms)
        repository.upsert(profile)
        _audit_update("set_baseline", profile_id, ["baseline"])
        return json.dumps({
            "status": "updated",
            "profile_id": profile_id,
            "baseline": {"temperature": temperature, "heart_rate": heart_rate},
        })

    @mcp.tool
    async def set_alert_thresholds(
        ctx: Context,
        profile_id: str,
        temperature: float | None = None,
        heart_rate: float | None = None,
    ) -> str:
        """Override the elevated-vital alert thresholds for one person.

        Useful when a check-in suggests the person routinely runs warm or fast
        while feeling fine. Pass neither value to reset to the defaults
        (100.4°F and 100 bpm).

        Args:
            profile_id: The profile's UUID.
            temperature: Temperature threshold in °F.
            heart_rate: Heart-rate threshold in bpm.
        """
        profile = repository.get(profile_id)
        if profile is None:
            return _not_found(profile_id)

        if temperature is None and heart_rate is None:
            profile.adaptive_thresholds = None
        else:
            profile.adaptive_thresholds = AdaptiveThresholds(
                temperature=temperature,
                heart_rate=heart_rate,
                last_updated=datetime.now(timezone.utc).isoformat(),
            )
        repository.upsert(profile)
        _audit_update("set_alert_thresholds", profile_id, ["adaptive_thresholds"])
        return json.dumps({
            "status": "updated",
            "profile_id": profile_id,
            "temperature_threshold": temperature,
            "heart_rate_threshold": heart_rate,
        })

    @mcp.tool
    async def update_emergency_settings(
        ctx: Context,
        profile_id: str,
        auto_alert_bypass_enabled: bool,
        caregiver_name: str = "",
        caregiver_phone: str = "",
        caregiver_relationship: str = "",
    ) -> str:
        """Configure the emergency bypass and an optional caregiver contact.

        With the bypass enabled, two or more critically low vitals plus serious
        symptoms after missed check-ins mark the assessment for unattended
        emergency escalation.

        Args:
            profile_id: The profile's UUID.
            auto_alert_bypass_enabled: Turn the emergency bypass on or off.
            caregiver_name: Caregiver to add (requires caregiver_phone).
            caregiver_phone: Caregiver phone number.
            caregiver_relationship: Relationship to the person (e.g., 'daughter').
        """
        profile = repository.get(profile_id)
        if profile is None:
            return _not_found(profile_id)
        if bool(caregiver_name) != bool(caregiver_phone):
            return _error("caregiver_name and caregiver_phone must be given together.")

        current = profile.emergency_settings or EmergencySettings()
        profile.emergency_settings = replace(
            current, auto_alert_bypass_enabled=auto_alert_bypass_enabled
        )
        fields = ["emergency_settings"]
        if caregiver_name:
            profile.caregiver_contacts.append(
                CaregiverContact(caregiver_name, caregiver_phone, caregiver_relationship)
            )
            fields.append("caregiver_contacts")

        repository.upsert(profile)
        _audit_update("update_emergency_settings", profile_id, fields)
        return json.dumps({
            "status": "updated",
            "profile_id": profile_id,
            "auto_alert_bypass_enabled": auto_alert_bypass_enabled,
            "caregiver_contacts": len(profile.caregiver_contacts),
        })

    @mcp.tool
    async def update_privacy_settings(
        ctx: Context,
        profile_id: str,
        zero_knowledge_mode: bool,
        auto_delete_days: int = 30,
    ) -> str:
        """Turn automatic deletion of old check-ins on or off.

        With zero-knowledge mode on, check-ins older than ``auto_delete_days``
        are removed every time the profile is saved.

        Args:
            profile_id: The profile's UUID.
            zero_knowledge_mode: Enable automatic deletion.
            auto_delete_days: Age in days after which check-ins are deleted.
        """
        if auto_delete_days < 1:
            return _error("auto_delete_days must be at least 1.")
        profile = repository.get(profile_id)
        if profile is None:
            return _not_found(profile_id)

        current = profile.privacy_settings or PrivacySettings()
        profile.privacy_settings = replace(
            current,
            zero_knowledge_mode=zero_knowledge_mode,
            auto_delete_days=auto_delete_days,
        )
        repository.upsert(profile)
        _audit_update("update_privacy_settings", profile_id, ["privacy_settings"])
        return json.dumps({
            "status": "updated",
            "profile_id": profile_id,
            "zero_knowledge_mode": zero_knowledge_mode,
            "auto_delete_days": auto_delete_days,
        })

    @mcp.tool
    async def start_recovery_mode(
        ctx: Context,
        profile_id: str,
        coach_enabled: bool = True,
        start_date: str = "",
    ) -> str:
        """Switch a profile into post-sepsis recovery tracking.

        Args:
            profile_id: The profile's UUID.
            coach_enabled: Enable the guided recovery coach.
            start_date: Hospital discharge date (ISO 8601). Defaults to now.
        """
        profile = repository.get(profile_id)
        if profile is None:
            return _not_found(profile_id)

        now = datetime.now().astimezone()
        if start_date:
            try:
                datetime.fromisoformat(start_date)
            except ValueError:
                return _error(f"start_date is not an ISO 8601 date: {start_date!r}")

        profile.recovery_mode = RecoveryMode(
            is_enabled=True,
            start_date=start_date or now.isoformat(),
            coach_enabled=coach_enabled,
        )
        profile = initialize_recovery_coach(profile, now)
        repository.upsert(profile)
        _audit_update("start_recovery_mode", profile_id, ["recovery_mode"])
        return json.dumps({
            "status": "updated",
            "profile_id": profile_id,
            "recovery_mode": profile.recovery_mode.to_dict(),
        }, indent=2)
