"""Privacy retention for stored check-in history.

When a profile has zero-knowledge mode switched on, check-ins older than its
``auto_delete_days`` are dropped whenever the profile is saved. Retention
runs on the storage path only; the scoring engine always sees whatever
history it is handed.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timedelta

from sepsiscan.domains.sepsis.domain_logic.models import PrivacySettings, UserProfile


def default_privacy_settings(auto_delete_days: int = 30) -> PrivacySettings:
    return PrivacySettings(auto_delete_days=auto_delete_days)


def retention_cutoff_ms(settings: PrivacySettings, now: datetime) -> int:
    """Epoch-millisecond timestamp before which entries are expired."""
    cutoff = now - timedelta(days=settings.auto_delete_days)
    return int(cutoff.timestamp() * 1000)


def apply_retention(profile: UserProfile, now: datetime) -> tuple[UserProfile, int]:
    """Drop expired history entries.

    Args:
        profile: Profile about to be stored.
        now: Current time.

    Returns:
        ``(profile, removed)``. The same profile object is returned untouched
        when nothing expires or retention is not enabled.
    """
    settings = profile.privacy_settings
    if settings is None or not settings.zero_knowledge_mode or settings.auto_delete_days <= 0:
        return profile, 0

    cutoff = retention_cutoff_ms(settings, now)
    kept = [entry for entry in profile.historical_data if entry.timestamp >= cutoff]
    removed = len(profile.historical_data) - len(kept)
    if removed == 0:
        return profile, 0
    return replace(profile, historical_data=kept), removed
