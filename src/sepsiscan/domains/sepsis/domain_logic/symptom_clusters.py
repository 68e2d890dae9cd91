"""Keyword co-occurrence matching for dangerous symptom combinations."""

from __future__ import annotations

from sepsiscan.domains.sepsis.domain_logic.models import DURATION_OVER_3_DAYS
from sepsiscan.domains.sepsis.domain_logic.normalizer import normalize_symptoms

FEVER_THRESHOLD_F = 100.4
TACHYCARDIA_THRESHOLD_BPM = 100

CLUSTER_SYMPTOMS = ("fatigue", "chills", "confusion", "wound", "breathing", "nausea", "dizziness")

CRITICAL_PATTERN = "Critical Pattern"
HIGH_RISK_PATTERN = "High-Risk Pattern"


def count_cluster_symptoms(symptoms: str) -> int:
    text = normalize_symptoms(symptoms)
    return sum(1 for word in CLUSTER_SYMPTOMS if word in text)


def analyze_symptom_clusters(
    symptoms: str,
    temperature: float,
    heart_rate: float,
    symptom_duration: str = "",
) -> list[str]:
    """Return every matching pattern, most severe first.

    The aggregator keys its score adjustment off the ``Critical Pattern`` /
    ``High-Risk Pattern`` prefixes, so keep them stable.
    """
    patterns: list[str] = []
    text = normalize_symptoms(symptoms)

    if temperature > FEVER_THRESHOLD_F and heart_rate > TACHYCARDIA_THRESHOLD_BPM:
        if "chills" in text or "confusion" in text:
            patterns.append(
                f"{CRITICAL_PATTERN}: Fever + Elevated HR + Systemic symptoms "
                "(chills/confusion) suggests severe infection"
            )
        if "breathing" in text or "shortness" in text:
            patterns.append(f"{HIGH_RISK_PATTERN}: Fever + Tachycardia + Respiratory symptoms")

    symptom_count = count_cluster_symptoms(text)
    if symptom_count >= 3:
        patterns.append(f"Multi-symptom cluster: {symptom_count} concerning symptoms present")

    if symptom_count >= 2 and symptom_duration == DURATION_OVER_3_DAYS:
        patterns.append("Persistent multi-symptom pattern over 3+ days")

    return patterns


def cluster_score(patterns: list[str]) -> int:
    """Score contribution of the cluster analysis (critical wins over high-risk)."""
    if any(CRITICAL_PATTERN in p for p in patterns):
        return 3
    if any(HIGH_RISK_PATTERN in p for p in patterns):
        return 2
    return 0
