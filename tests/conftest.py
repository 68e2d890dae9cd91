"""Shared test fixtures for SepsiScan tests."""

from __future__ import annotations

import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

# ---------------------------------------------------------------------------
# Test hermeticity
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def _force_hermetic_test_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ENCRYPTION_KEY", "")
    monkeypatch.setenv("DB_PATH", ":memory:")
    monkeypatch.setenv("SEPSISCAN_ALLOW_INSECURE_BIND", "false")

# Allow running tests without `pip install -e .` by making `src/` importable.
_PROJECT_ROOT = Path(__file__).resolve().parent.parent
_SRC_DIR = _PROJECT_ROOT / "src"
if str(_SRC_DIR) not in sys.path:
    sys.path.insert(0, str(_SRC_DIR))

from sepsiscan.domains.sepsis.domain_logic.models import (  # noqa: E402
    EmergencySettings,
    HistoricalData,
    PrivacySettings,
    RiskLevel,
    TimeOfDay,
    UserInputs,
    UserProfile,
)

# Tuesday afternoon: outside night mode, inside the "afternoon" bucket.
FIXED_NOW = datetime(2026, 3, 10, 14, 0, tzinfo=timezone.utc)


def make_entry(
    days_ago: float = 1,
    *,
    temperature: float = 98.6,
    heart_rate: float = 72,
    symptoms: str = "",
    risk_level: RiskLevel = RiskLevel.LOW,
    now: datetime = FIXED_NOW,
    **extra,
) -> HistoricalData:
    """Create a stored check-in ``days_ago`` days before ``now``."""
    when = now - timedelta(days=days_ago)
    return HistoricalData(
        date=when.date().isoformat(),
        timestamp=int(when.timestamp() * 1000),
        temperature=temperature,
        heart_rate=heart_rate,
        symptoms=symptoms,
        risk_level=risk_level,
        time_of_day=TimeOfDay.from_hour(when.hour),
        **extra,
    )


def make_profile(**overrides) -> UserProfile:
    """Create a profile with sensible defaults and empty history."""
    defaults = dict(
        id="profile-1",
        name="Alex",
        age=54,
        known_conditions=[],
        created_at="2026-01-01T00:00:00+00:00",
        privacy_settings=PrivacySettings(),
        emergency_settings=EmergencySettings(),
    )
    defaults.update(overrides)
    return UserProfile(**defaults)


def make_inputs(temperature="98.6", heart_rate="72", **overrides) -> UserInputs:
    """Create check-in form values; vitals default to a calm resting reading."""
    return UserInputs(temperature=str(temperature), heart_rate=str(heart_rate), **overrides)


@pytest.fixture
def fixed_now() -> datetime:
    return FIXED_NOW


@pytest.fixture
def profile() -> UserProfile:
    return make_profile()


# ---------------------------------------------------------------------------
# In-memory storage fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def profile_db():
    """Create an in-memory ProfileDatabase for testing."""
    from sepsiscan.core.storage.database import ProfileDatabase

    db = ProfileDatabase(":memory:")
    db.initialize()
    yield db
    db.close()


@pytest.fixture
def profile_encryptor():
    """Create a ProfileEncryptor with a test key."""
    from cryptography.fernet import Fernet

    from sepsiscan.core.storage.encryption import ProfileEncryptor

    return ProfileEncryptor(Fernet.generate_key().decode())


@pytest.fixture
def profile_repository(profile_db, profile_encryptor):
    """Create a ProfileRepository backed by in-memory SQLite."""
    from sepsiscan.core.storage.repository import ProfileRepository

    return ProfileRepository(profile_db, profile_encryptor)


@pytest.fixture
def audit_logger(profile_db):
    """Create an AuditLogger backed by in-memory SQLite."""
    from sepsiscan.core.audit.logger import AuditLogger

    return AuditLogger(profile_db)


@pytest.fixture
def recorder(profile_repository):
    from sepsiscan.domains.sepsis.domain_logic.checkin_recorder import CheckInRecorder

    return CheckInRecorder(profile_repository)
