"""Tests for check-in vital parsing and symptom normalization."""

from __future__ import annotations

import pytest

from conftest import make_inputs
from sepsiscan.domains.sepsis.domain_logic.normalizer import (
    VitalsValidationError,
    format_number,
    normalize_symptoms,
    parse_vitals,
)


class TestParseVitals:
    def test_parses_required_vitals(self):
        vitals = parse_vitals(make_inputs("101.5", "110"))
        assert vitals.temperature == 101.5
        assert vitals.heart_rate == 110

    def test_optional_vitals_blank_become_none(self):
        vitals = parse_vitals(make_inputs(sp_o2="", systolic_bp=None, respiratory_rate="  "))
        assert vitals.sp_o2 is None
        assert vitals.systolic_bp is None
        assert vitals.respiratory_rate is None

    def test_optional_vitals_parsed(self):
        vitals = parse_vitals(make_inputs(sp_o2="88", systolic_bp="85", respiratory_rate="10"))
        assert vitals.sp_o2 == 88
        assert vitals.systolic_bp == 85
        assert vitals.respiratory_rate == 10

    def test_whitespace_is_tolerated(self):
        assert parse_vitals(make_inputs(" 99.1 ", "80\n")).temperature == 99.1

    @pytest.mark.parametrize("raw", ["", "   ", "abc", "nan", "inf"])
    def test_bad_temperature_rejected(self, raw):
        with pytest.raises(VitalsValidationError) as exc_info:
            parse_vitals(make_inputs(temperature=raw))
        assert exc_info.value.field_name == "temperature"

    def test_bad_optional_vital_rejected(self):
        with pytest.raises(VitalsValidationError) as exc_info:
            parse_vitals(make_inputs(sp_o2="ninety"))
        assert exc_info.value.field_name == "sp_o2"

    def test_error_is_a_value_error(self):
        with pytest.raises(ValueError):
            parse_vitals(make_inputs(heart_rate="fast"))


class TestSymptomText:
    def test_lowercases(self):
        assert normalize_symptoms("Chills and CONFUSION") == "chills and confusion"

    def test_none_is_empty(self):
        assert normalize_symptoms(None) == ""

    def test_format_number_drops_trailing_zero(self):
        assert format_number(110.0) == "110"
        assert format_number(101.5) == "101.5"
