"""MCP tools for deleting profiles and their check-in history.

These tools implement a person's right to delete their data. All deletions
are audit-logged.
"""

from __future__ import annotations

import json
import logging
import time
from typing import TYPE_CHECKING

from fastmcp import Context, FastMCP

if TYPE_CHECKING:
    from sepsiscan.core.audit.logger import AuditLogger
    from sepsiscan.core.storage.repository import ProfileRepository

logger = logging.getLogger(__name__)


def register_data_management_tools(
    mcp: FastMCP,
    repository: ProfileRepository,
    audit_logger: AuditLogger | None = None,
) -> None:
    """Register data management tools on the MCP server."""

    @mcp.tool
    async def delete_profile(
        ctx: Context,
        profile_id: str,
    ) -> str:
        """Delete a profile and its entire check-in history.

        Args:
            profile_id: The UUID of the profile to delete.
        """
        start_time = time.monotonic()
        profile = repository.get(profile_id)
        if profile is None or not repository.delete(profile_id):
            return json.dumps({
                "status": "not_found",
                "profile_id": profile_id,
                "message": "No profile found with that ID.",
            })

        elapsed_ms = (time.monotonic() - start_time) * 1000
        if audit_logger is not None:
            audit_logger.log_data_delete(
                tool_name="delete_profile",
                profile_id=profile_id,
                count=1,
                metadata={"checkins_deleted": len(profile.historical_data)},
            )
        return json.dumps({
            "status": "deleted",
            "profile_id": profile_id,
            "checkins_deleted": len(profile.historical_data),
            "duration_ms": round(elapsed_ms, 1),
        })

    @mcp.tool
    async def delete_all_profiles(
        ctx: Context,
        confirm: str = "",
    ) -> str:
        """Permanently delete ALL profiles and check-in history.

        Args:
            confirm: Must be exactly 'DELETE_ALL' to proceed. Safety gate.
        """
        if confirm != "DELETE_ALL":
            return json.dumps({
                "status": "cancelled",
                "message": (
                    "To delete all profiles, call this tool with "
                    "confirm='DELETE_ALL'. This action cannot be undone."
                ),
            })

        start_time = time.monotonic()
        count = repository.delete_all()
        elapsed_ms = (time.monotonic() - start_time) * 1000

        if audit_logger is not None:
            audit_logger.log_data_delete(
                tool_name="delete_all_profiles",
                count=count,
                metadata={"confirmed": True},
            )

        return json.dumps({
            "status": "all_deleted",
            "profiles_deleted": count,
            "duration_ms": round(elapsed_ms, 1),
            "message": "All profiles have been permanently deleted.",
        })
