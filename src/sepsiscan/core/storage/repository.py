"""Profile repository: CRUD over the encrypted profile store.

The repository mediates between ``UserProfile`` domain objects and the SQLite
database, using ProfileEncryptor to encrypt/decrypt the full profile
document. Scoring code never calls into this module; callers load a snapshot,
run the engine, and upsert the result.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone

from sepsiscan.core.storage.database import ProfileDatabase
from sepsiscan.core.storage.encryption import ProfileEncryptor
from sepsiscan.domains.sepsis.domain_logic.models import UserProfile

logger = logging.getLogger(__name__)


class RepositoryError(Exception):
    """Raised when repository operations fail."""


class ProfileNotFoundError(RepositoryError):
    """Raised when an operation names a profile that is not stored."""

    def __init__(self, profile_id: str) -> None:
        super().__init__(f"No profile found with id {profile_id!r}")
        self.profile_id = profile_id


class ProfileRepository:
    """Keyed profile store: ``get``, ``list``, ``upsert``, ``delete``.

    Usage::

        db = ProfileDatabase(":memory:")
        db.initialize()
        repo = ProfileRepository(db, ProfileEncryptor(key="..."))

        repo.upsert(profile)
        snapshot = repo.get(profile.id)
    """

    def __init__(self, database: ProfileDatabase, encryptor: ProfileEncryptor) -> None:
        self._db = database
        self._enc = encryptor

    @staticmethod
    def new_id() -> str:
        return str(uuid.uuid4())

    @staticmethod
    def _now_iso() -> str:
        return datetime.now(timezone.utc).isoformat()

    def _row_to_profile(self, row) -> UserProfile:
        return self._enc.decrypt_profile(row["profile_enc"])

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def get(self, profile_id: str) -> UserProfile | None:
        """Load and decrypt one profile.

        Returns:
            The profile, or None if no profile has that ID.
        """
        row = self._db.connection.execute(
            "SELECT id, profile_enc FROM profiles WHERE id = ?", (profile_id,)
        ).fetchone()
        if row is None:
            return None
        return self._row_to_profile(row)

    def require(self, profile_id: str) -> UserProfile:
        """Like :meth:`get`, but raises ProfileNotFoundError instead of returning None."""
        profile = self.get(profile_id)
        if profile is None:
            raise ProfileNotFoundError(profile_id)
        return profile

    def list(self) -> list[UserProfile]:
        """All profiles, most recently updated first."""
        rows = self._db.connection.execute(
            "SELECT id, profile_enc FROM profiles ORDER BY updated_at DESC, name"
        ).fetchall()
        return [self._row_to_profile(row) for row in rows]

    def count(self) -> int:
        """Return total number of stored profiles."""
        row = self._db.connection.execute("SELECT COUNT(*) FROM profiles").fetchone()
        return row[0]

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    def upsert(self, profile: UserProfile) -> str:
        """Insert or replace a profile.

        Args:
            profile: The profile to store. An empty ``id`` is replaced by a
                new UUID; an empty ``created_at`` by the current time.

        Returns:
            The profile ID.
        """
        if not profile.name.strip():
            raise RepositoryError("Profile name must not be empty")

        profile.id = profile.id or self.new_id()
        now = self._now_iso()
        profile.created_at = profile.created_at or now

        conn = self._db.connection
        conn.execute(
            """INSERT INTO profiles (id, name, profile_enc, entry_count, created_at, updated_at)
               VALUES (?, ?, ?, ?, ?, ?)
               ON CONFLICT(id) DO UPDATE SET
                   name = excluded.name,
                   profile_enc = excluded.profile_enc,
                   entry_count = excluded.entry_count,
                   updated_at = excluded.updated_at""",
            (
                profile.id,
                profile.name,
                self._enc.encrypt_profile(profile),
                len(profile.historical_data),
                profile.created_at,
                now,
            ),
        )
        conn.commit()
        logger.info(
            "Saved profile %s (%d history entries)", profile.id, len(profile.historical_data)
        )
        return profile.id

    # ------------------------------------------------------------------
    # Deletion (right to deletion)
    # ------------------------------------------------------------------

    def delete(self, profile_id: str) -> bool:
        """Delete one profile and its history.

        Returns:
            True if a profile was found and deleted, False otherwise.
        """
        conn = self._db.connection
        cursor = conn.execute("DELETE FROM profiles WHERE id = ?", (profile_id,))
        conn.commit()
        if cursor.rowcount == 0:
            return False
        logger.info("Deleted profile %s", profile_id)
        return True

    def delete_all(self) -> int:
        """Delete every profile.

        Returns:
            Number of profiles deleted.
        """
        conn = self._db.connection
        count = self.count()
        conn.execute("DELETE FROM profiles")
        conn.commit()
        logger.warning("Deleted ALL profiles: %d removed", count)
        return count
