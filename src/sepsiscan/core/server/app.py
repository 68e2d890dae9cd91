"""SepsiScan MCP Server: application factory.

This module provides:
- create_app() for testability (integration tests create fresh server instances)
- Module-level `mcp` variable for FastMCP discovery
"""

from __future__ import annotations

import logging

from fastmcp import FastMCP

from sepsiscan.core.audit.logger import AuditLogger
from sepsiscan.core.config.settings import get_settings
from sepsiscan.core.storage.database import ProfileDatabase
from sepsiscan.core.storage.encryption import ProfileEncryptor
from sepsiscan.core.storage.repository import ProfileRepository
from sepsiscan.domains.sepsis.domain_logic.checkin_recorder import CheckInRecorder
from sepsiscan.domains.sepsis.tools.audit_tools import register_audit_tools
from sepsiscan.domains.sepsis.tools.checkin_tools import register_checkin_tools
from sepsiscan.domains.sepsis.tools.data_management_tools import (
    register_data_management_tools,
)
from sepsiscan.domains.sepsis.tools.profile_tools import register_profile_tools
from sepsiscan.domains.sepsis.tools.recovery_tools import register_recovery_tools

logger = logging.getLogger(__name__)

SERVER_NAME = "SepsiScan"
SERVER_VERSION = "0.1.0"


def _open_storage(db_path: str, encryption_key: str) -> tuple[ProfileDatabase, ProfileEncryptor]:
    """Open the configured store, or a throwaway in-memory one when no key is set."""
    if encryption_key:
        encryptor = ProfileEncryptor(encryption_key)
        database = ProfileDatabase(db_path)
    else:
        logger.warning(
            "No ENCRYPTION_KEY configured; profiles are kept in memory only and will be "
            "lost on exit. Set ENCRYPTION_KEY to enable the encrypted profile store."
        )
        encryptor = ProfileEncryptor(ProfileEncryptor.generate_key())
        database = ProfileDatabase(":memory:")

    database.initialize()
    logger.info(
        "Profile store initialized: %s (schema v%d)",
        database.path,
        database.get_schema_version(),
    )
    return database, encryptor


def create_app(
    *,
    repository_override: ProfileRepository | None = None,
    audit_logger_override: AuditLogger | None = None,
) -> FastMCP:
    """Create and configure the SepsiScan MCP server.

    This is the main application factory. It:
    1. Creates the FastMCP server instance
    2. Opens the encrypted profile store (or uses the overrides)
    3. Wires the check-in recorder and audit logger
    4. Registers all tools

    Raises:
        EncryptionError: If ENCRYPTION_KEY is set but is not a valid Fernet key.
        DatabaseError: If the database file cannot be opened.
    """
    settings = get_settings()

    server = FastMCP(
        SERVER_NAME,
        instructions=(
            "SepsiScan: a rule-based early-warning companion for sepsis. Tracks people's "
            "self-reported vitals and symptoms, scores each check-in for sepsis risk, and "
            "coaches post-sepsis recovery. It is not a diagnostic tool; urgent results "
            "should always be escalated to a clinician or emergency services."
        ),
    )

    audit_logger = audit_logger_override
    if repository_override is not None:
        repository = repository_override
    else:
        database, encryptor = _open_storage(settings.db_path, settings.encryption_key)
        repository = ProfileRepository(database, encryptor)
        if audit_logger is None:
            audit_logger = AuditLogger(database)

    recorder = CheckInRecorder(repository)

    @server.tool
    def health_check() -> dict:
        """Check server health and return basic status information."""
        return {
            "status": "ok",
            "server": SERVER_NAME,
            "version": SERVER_VERSION,
            "profiles_stored": repository.count(),
            "audit_enabled": audit_logger is not None,
        }

    register_profile_tools(
        server,
        repository,
        audit_logger,
        default_auto_delete_days=settings.default_auto_delete_days,
    )
    register_checkin_tools(server, recorder, audit_logger)
    register_recovery_tools(server, repository, recorder, audit_logger)
    register_data_management_tools(server, repository, audit_logger)
    logger.info("Profile, check-in, recovery and data management tools registered")

    if audit_logger is not None:
        register_audit_tools(server, audit_logger)
        logger.info("Audit tools registered")

    return server


# Module-level instance for FastMCP discovery ("...app.py:mcp").
# Lazy: only created when this module is loaded directly (not when tests import create_app).
def __getattr__(name: str):
    if name == "mcp":
        global mcp  # noqa: PLW0603
        mcp = create_app()
        return mcp
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
