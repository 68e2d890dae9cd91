"""Audit logger: PHI-free record of check-ins, profile edits and deletions.

Every event lands in the ``audit_log`` table. Nothing a person typed is
stored; tool inputs are reduced to a SHA-256 digest, and check-in events
carry only the resulting risk and alert levels.

Actions:

* ``checkin``         a risk or recovery check-in was scored and saved.
* ``profile_update``  a profile was created or its settings changed.
* ``data_delete``     profiles or history entries were removed.
* ``emergency_flag``  an assessment came back Urgent or triggered the bypass.
"""

from __future__ import annotations

import hashlib
import json
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from sepsiscan.core.storage.database import ProfileDatabase

logger = logging.getLogger(__name__)


def _hash_input(data: Any) -> str:
    """SHA-256 hash of canonical JSON, or empty string if not serializable."""
    try:
        canonical = json.dumps(data, sort_keys=True, separators=(",", ":"))
        return hashlib.sha256(canonical.encode()).hexdigest()
    except (TypeError, ValueError):
        return ""


@dataclass
class AuditEvent:
    """A single audit log entry."""

    action: str                          # 'checkin' | 'profile_update' | 'data_delete' | 'emergency_flag'
    tool_name: str = ""
    tool_input_hash: str = ""
    profile_id: str | None = None
    risk_level: str | None = None        # 'Low' | 'Moderate' | 'High'
    alert_level: str | None = None       # 'None' | 'Monitor' | 'Urgent'
    duration_ms: float | None = None
    status: str = "success"              # 'success' | 'failure'
    error_type: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)


class AuditLogger:
    """Records audit events to the ``audit_log`` SQLite table.

    Writes are committed immediately. A failed write is logged and dropped;
    auditing never breaks the operation being audited.
    """

    def __init__(self, database: ProfileDatabase) -> None:
        self._db = database

    # ---------------------------------------------------------------
    # Write
    # ---------------------------------------------------------------

    def log_event(self, event: AuditEvent) -> str:
        """Insert an audit event and return its UUID ("" if the write failed)."""
        event_id = str(uuid.uuid4())
        now = datetime.now(timezone.utc).isoformat()

        metadata_json = (
            json.dumps(event.metadata, separators=(",", ":"))
            if event.metadata
            else None
        )

        try:
            conn = self._db.connection
            conn.execute(
                """INSERT INTO audit_log
                   (id, timestamp, action, tool_name, tool_input_hash,
                    profile_id, risk_level, alert_level,
                    duration_ms, status, error_type, metadata_json)
                   VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
                (
                    event_id,
                    now,
                    event.action,
                    event.tool_name or None,
                    event.tool_input_hash or None,
                    event.profile_id,
                    event.risk_level,
                    event.alert_level,
                    event.duration_ms,
                    event.status,
                    event.error_type,
                    metadata_json,
                ),
            )
            conn.commit()
        except Exception:
            logger.exception("Failed to write audit event; event lost")
            return ""

        return event_id

    def log_checkin(
        self,
        tool_name: str,
        tool_input: Any = None,
        *,
        profile_id: str | None = None,
        risk_level: str | None = None,
        alert_level: str | None = None,
        duration_ms: float | None = None,
        status: str = "success",
        error_type: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> str:
        """Log a scored check-in.

        Args:
            tool_name: Name of the MCP tool.
            tool_input: The raw check-in values (hashed, never stored raw).
            profile_id: Profile the check-in belongs to.
            risk_level: Resulting risk level.
            alert_level: Resulting alert level.
            duration_ms: Tool execution duration in milliseconds.
            status: 'success' or 'failure'.
            error_type: Exception class name on failure.
            metadata: Additional non-PHI metadata.
        """
        return self.log_event(AuditEvent(
            action="checkin",
            tool_name=tool_name,
            tool_input_hash=_hash_input(tool_input) if tool_input else "",
            profile_id=profile_id,
            risk_level=risk_level,
            alert_level=alert_level,
            duration_ms=duration_ms,
            status=status,
            error_type=error_type,
            metadata=metadata or {},
        ))

    def log_profile_update(
        self,
        tool_name: str,
        *,
        profile_id: str,
        fields: list[str] | None = None,
    ) -> str:
        return self.log_event(AuditEvent(
            action="profile_update",
            tool_name=tool_name,
            profile_id=profile_id,
            metadata={"fields": fields} if fields else {},
        ))

    def log_emergency_flag(
        self,
        tool_name: str,
        *,
        profile_id: str,
        alert_level: str,
        bypass_triggered: bool,
    ) -> str:
        """Log an Urgent assessment or an emergency bypass decision."""
        return self.log_event(AuditEvent(
            action="emergency_flag",
            tool_name=tool_name,
            profile_id=profile_id,
            alert_level=alert_level,
            metadata={"bypass_triggered": bypass_triggered},
        ))

    def log_data_delete(
        self,
        *,
        tool_name: str = "",
        profile_id: str | None = None,
        count: int = 0,
        metadata: dict[str, Any] | None = None,
    ) -> str:
        """Log a data deletion event.

        Args:
            tool_name: Tool (or internal path) that initiated the delete.
            profile_id: Specific profile affected, if any.
            count: Number of records deleted.
            metadata: Additional context.
        """
        return self.log_event(AuditEvent(
            action="data_delete",
            tool_name=tool_name,
            profile_id=profile_id,
            metadata={**(metadata or {}), "records_deleted": count},
        ))

    # ---------------------------------------------------------------
    # Read
    # ---------------------------------------------------------------

    def get_events(
        self,
        *,
        action: str | None = None,
        profile_id: str | None = None,
        since: str | None = None,
        limit: int = 50,
    ) -> list[dict[str, Any]]:
        """Query audit events with optional filters, newest first."""
        conditions: list[str] = []
        params: list[Any] = []

        if action:
            conditions.append("action = ?")
            params.append(action)
        if profile_id:
            conditions.append("profile_id = ?")
            params.append(profile_id)
        if since:
            conditions.append("timestamp >= ?")
            params.append(since)

        where = (" WHERE " + " AND ".join(conditions)) if conditions else ""
        query = f"SELECT * FROM audit_log{where} ORDER BY timestamp DESC LIMIT ?"
        params.append(limit)

        rows = self._db.connection.execute(query, params).fetchall()
        return [dict(row) for row in rows]

    def count_events(self, *, since: str | None = None) -> int:
        """Count total audit events, optionally since a timestamp."""
        if since:
            row = self._db.connection.execute(
                "SELECT COUNT(*) FROM audit_log WHERE timestamp >= ?", (since,)
            ).fetchone()
        else:
            row = self._db.connection.execute(
                "SELECT COUNT(*) FROM audit_log"
            ).fetchone()
        return row[0]

    def count_by_action(self, *, since: str | None = None) -> dict[str, int]:
        """Event counts keyed by action, e.g. ``{"checkin": 12, "emergency_flag": 1}``."""
        query = "SELECT action, COUNT(*) FROM audit_log"
        params: list[Any] = []
        if since:
            query += " WHERE timestamp >= ?"
            params.append(since)
        query += " GROUP BY action"
        rows = self._db.connection.execute(query, params).fetchall()
        return {row[0]: row[1] for row in rows}
