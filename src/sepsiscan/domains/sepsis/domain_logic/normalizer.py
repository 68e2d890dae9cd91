"""Form input normalization: raw strings -> validated numeric vitals."""

from __future__ import annotations

import math

from sepsiscan.domains.sepsis.domain_logic.models import UserInputs, Vitals


class VitalsValidationError(ValueError):
    """Raised when a check-in carries missing or non-numeric vitals."""

    def __init__(self, field_name: str, raw: str | None) -> None:
        self.field_name = field_name
        self.raw = raw
        super().__init__(f"{field_name} must be a number (got {raw!r})")


def _parse(field_name: str, raw: str | None, *, required: bool) -> float | None:
    if raw is None or not str(raw).strip():
        if required:
            raise VitalsValidationError(field_name, raw)
        return None
    try:
        value = float(str(raw).strip())
    except ValueError as exc:
        raise VitalsValidationError(field_name, raw) from exc
    if not math.isfinite(value):
        raise VitalsValidationError(field_name, raw)
    return value


def parse_vitals(inputs: UserInputs) -> Vitals:
    """Parse the numeric form fields of a check-in.

    Temperature and heart rate are required; SpO2, systolic BP and
    respiratory rate are optional and become ``None`` when left blank.

    Raises:
        VitalsValidationError: If any supplied vital is not a finite number,
            or a required vital is blank.
    """
    return Vitals(
        temperature=_parse("temperature", inputs.temperature, required=True),
        heart_rate=_parse("heart_rate", inputs.heart_rate, required=True),
        sp_o2=_parse("sp_o2", inputs.sp_o2, required=False),
        systolic_bp=_parse("systolic_bp", inputs.systolic_bp, required=False),
        respiratory_rate=_parse("respiratory_rate", inputs.respiratory_rate, required=False),
    )


def normalize_symptoms(text: str | None) -> str:
    """Lowercase symptom text for keyword matching."""
    return (text or "").lower()


def format_number(value: float) -> str:
    """Render a reading without a trailing '.0' (``101.5`` / ``110``)."""
    return f"{value:g}"
