"""Check-in trend analysis against the previous entry and the personal baseline.

The profile passed in must not yet contain the check-in being scored, so the
comparison entry is always ``historical_data[0]``.
"""

from __future__ import annotations

from sepsiscan.domains.sepsis.domain_logic.models import UserProfile

FIRST_CHECKIN_MESSAGE = "No previous data for comparison. This is your first check-in!"
STABLE_MESSAGE = "Vitals are within normal range compared to recent history."

# Check-in to check-in: small drifts are worth a mention
PREVIOUS_TEMP_DELTA_F = 0.3
PREVIOUS_HR_DELTA_BPM = 5

# Against the personal baseline: looser, since baselines are coarse
BASELINE_TEMP_DELTA_F = 1.0
BASELINE_HR_DELTA_BPM = 10


def _direction(delta: float) -> str:
    return "increased" if delta > 0 else "decreased"


def _relative(delta: float) -> str:
    return "above" if delta > 0 else "below"


def perform_trend_analysis(temperature: float, heart_rate: float, profile: UserProfile) -> str:
    """Describe how the current vitals compare to history and baseline.

    Returns:
        One or more sentences, or the stable-vitals message when nothing moved
        enough to report. An empty history yields the first-check-in message,
        followed by any baseline sentences.
    """
    sentences: list[str] = []

    if profile.historical_data:
        previous = profile.historical_data[0]
        temp_diff = temperature - previous.temperature
        hr_diff = heart_rate - previous.heart_rate

        if abs(temp_diff) > PREVIOUS_TEMP_DELTA_F:
            sentences.append(
                f"Temperature {_direction(temp_diff)} by {abs(temp_diff):.1f}°F "
                "since your last check-in."
            )
        if abs(hr_diff) > PREVIOUS_HR_DELTA_BPM:
            sentences.append(
                f"Heart rate {_direction(hr_diff)} by {abs(hr_diff):.0f} bpm "
                "since your last check-in."
            )
    else:
        sentences.append(FIRST_CHECKIN_MESSAGE)

    if profile.baseline is not None:
        baseline_temp_diff = temperature - profile.baseline.temperature
        baseline_hr_diff = heart_rate - profile.baseline.heart_rate

        if abs(baseline_temp_diff) > BASELINE_TEMP_DELTA_F:
            sentences.append(
                f"Temperature is {abs(baseline_temp_diff):.1f}°F "
                f"{_relative(baseline_temp_diff)} your personal baseline."
            )
        if abs(baseline_hr_diff) > BASELINE_HR_DELTA_BPM:
            sentences.append(
                f"Heart rate is {abs(baseline_hr_diff):.0f} bpm "
                f"{_relative(baseline_hr_diff)} your personal baseline."
            )

    return " ".join(sentences) or STABLE_MESSAGE
