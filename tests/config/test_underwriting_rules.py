"""Tests for underwriting rule sets: schema validation, YAML loading, tracing.

Rule sets are human-authored YAML parsed into the frozen
``UnderwritingRules`` dataclass. Ratios must stay exact decimals end to end.
"""
from __future__ import annotations

from decimal import Decimal

import pytest
import yaml

from insurance_config import UnderwritingRules, get_underwriting_rules
from insurance_config.loader import compute_checksum, parse_decimal, parse_rules


def _write_set(directory, name: str, data: dict) -> None:
    (directory / f"{name}.yaml").write_text(yaml.safe_dump(data))


class TestShippedRuleSet:
    """The default rule set shipped with the package."""

    def test_default_matches_schema_defaults(self):
        assert get_underwriting_rules() == UnderwritingRules()

    def test_ratios_are_exact(self):
        rules = get_underwriting_rules()
        assert rules.vehicle_min_annual_rate == Decimal("0.02")
        assert rules.total_loss_ratio == Decimal("0.7")
        assert isinstance(rules.vehicle_coverage_ratio, Decimal)

    def test_load_is_traced(self, captured_logs):
        rules = get_underwriting_rules()

        traces = [r for r in captured_logs() if r["message"] == "UNDERWRITING_CONFIG_TRACE"]
        assert len(traces) == 1
        assert traces[0]["rules_name"] == "default"
        assert traces[0]["checksum"] == compute_checksum(rules)


class TestCustomRuleSets:
    """Loading rule sets from an alternate directory."""

    def test_custom_set(self, tmp_path):
        _write_set(tmp_path, "strict", {
            "version": 3,
            "vehicle_min_annual_rate": "0.05",
            "travel_coverage_per_person": 25,
        })

        rules = get_underwriting_rules("strict", config_dir=tmp_path)

        assert rules.name == "strict"
        assert rules.version == 3
        assert rules.vehicle_min_annual_rate == Decimal("0.05")
        assert rules.travel_coverage_per_person == 25
        # Unspecified keys keep their defaults
        assert rules.total_loss_ratio == Decimal("0.7")

    def test_empty_file_gives_defaults(self, tmp_path):
        (tmp_path / "blank.yaml").write_text("")
        rules = get_underwriting_rules("blank", config_dir=tmp_path)
        assert rules == UnderwritingRules(name="blank")

    def test_missing_set(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            get_underwriting_rules("nope", config_dir=tmp_path)

    def test_float_ratio_rejected(self, tmp_path):
        (tmp_path / "floaty.yaml").write_text("vehicle_min_annual_rate: 0.02\n")
        with pytest.raises(ValueError, match="quoted decimal"):
            get_underwriting_rules("floaty", config_dir=tmp_path)

    def test_unknown_key_rejected(self, tmp_path):
        _write_set(tmp_path, "typo", {"vehicle_min_anual_rate": "0.02"})
        with pytest.raises(ValueError, match="vehicle_min_anual_rate"):
            get_underwriting_rules("typo", config_dir=tmp_path)

    def test_invalid_value_rejected(self, tmp_path):
        _write_set(tmp_path, "broken", {"total_loss_ratio": "1.5"})
        with pytest.raises(ValueError):
            get_underwriting_rules("broken", config_dir=tmp_path)


class TestParsing:
    """Loader helpers."""

    @pytest.mark.parametrize("value,expected", [("0.02", Decimal("0.02")), (1, Decimal("1"))])
    def test_parse_decimal(self, value, expected):
        assert parse_decimal("ratio", value) == expected

    @pytest.mark.parametrize("value", [0.5, True, "half"])
    def test_parse_decimal_rejects(self, value):
        with pytest.raises(ValueError):
            parse_decimal("ratio", value)

    def test_name_argument_used_when_absent(self):
        assert parse_rules({}, name="fallback").name == "fallback"

    def test_checksum_tracks_content(self):
        base = compute_checksum(UnderwritingRules())
        assert compute_checksum(UnderwritingRules()) == base
        assert compute_checksum(UnderwritingRules(travel_coverage_per_person=11)) != base


class TestUnderwritingRulesSchema:
    """Construction validation and threshold helpers."""

    def test_frozen(self):
        rules = UnderwritingRules()
        with pytest.raises(AttributeError):
            rules.version = 2

    @pytest.mark.parametrize("overrides", [
        {"vehicle_min_annual_rate": 0.02},
        {"vehicle_min_annual_rate": Decimal("-0.01")},
        {"vehicle_coverage_ratio": Decimal("1.1")},
        {"total_loss_ratio": Decimal("0")},
        {"total_loss_ratio": Decimal("1.01")},
        {"travel_min_annual_per_person": -1},
        {"travel_coverage_per_person": -1},
    ])
    def test_invalid_rules_rejected(self, overrides):
        with pytest.raises(ValueError):
            UnderwritingRules(**overrides)

    def test_vehicle_thresholds(self):
        rules = UnderwritingRules()
        assert rules.vehicle_minimum_annual_premium(10_000) == 200
        assert rules.vehicle_coverage(10_000) == 5_000
        assert rules.vehicle_coverage(15_001) == 7_500

    def test_travel_thresholds(self):
        rules = UnderwritingRules()
        assert rules.travel_minimum_annual_premium(5) == 25
        assert rules.travel_coverage(5) == 50

    @pytest.mark.parametrize("damages,expected", [(6_999, False), (7_000, True), (12_000, True)])
    def test_total_loss_boundary(self, damages, expected):
        assert UnderwritingRules().is_total_loss(damages, 10_000) is expected
