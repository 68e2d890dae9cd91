"""MCP tool for viewing the audit trail.

The audit log holds no health data: only which tools ran, for which profile,
the resulting risk/alert levels and hashed input references.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING

from fastmcp import Context, FastMCP

if TYPE_CHECKING:
    from sepsiscan.core.audit.logger import AuditLogger

logger = logging.getLogger(__name__)


def register_audit_tools(
    mcp: FastMCP,
    audit_logger: AuditLogger,
) -> None:
    """Register audit trail tools on the MCP server."""

    @mcp.tool
    async def audit_summary(
        ctx: Context,
        days: int = 30,
        profile_id: str = "",
    ) -> str:
        """View recent check-in, profile-change, deletion and emergency events.

        Args:
            days: Number of days to look back (default: 30).
            profile_id: Only show events for this profile.
        """
        since = (datetime.now(timezone.utc) - timedelta(days=days)).isoformat()

        recent_events = audit_logger.get_events(
            profile_id=profile_id or None, since=since, limit=20
        )
        display_events = [
            {
                "timestamp": event.get("timestamp"),
                "action": event.get("action"),
                "tool_name": event.get("tool_name"),
                "profile_id": event.get("profile_id"),
                "risk_level": event.get("risk_level"),
                "alert_level": event.get("alert_level"),
                "status": event.get("status"),
            }
            for event in recent_events
        ]

        return json.dumps({
            "status": "ok",
            "period_days": days,
            "total_events": audit_logger.count_events(since=since),
            "events_by_action": audit_logger.count_by_action(since=since),
            "recent_events": display_events,
            "note": "This audit trail contains no health data.",
        }, indent=2)
