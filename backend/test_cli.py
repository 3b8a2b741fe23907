"""
Unit tests for the command line and options record

Tests cover:
- Argument parsing and defaults
- Validation messages and exit codes
- Text and JSON output
"""

import json

import pytest
from pydantic import ValidationError

from cli import main, parse_options
from config import CONFIG, PlannerConfig, Tier
from options import PlanOptions


class TestParseOptions:
    """Parsing valid arguments"""

    def test_properties_with_defaults(self):
        options = parse_options(["--properties", "100"])
        assert options.properties == 100
        assert options.data_group == "county"
        assert options.extracted_properties == 0
        assert options.max_total_workers is None
        assert options.mode == "properties"

    def test_short_flags(self):
        options = parse_options(["-p", "75", "-g", "School", "-e", "10", "-w", "8"])
        assert options.properties == 75
        assert options.data_group == "school"
        assert options.extracted_properties == 10
        assert options.max_total_workers == 8

    def test_token_and_usd_modes(self):
        assert parse_options(["-t", "1500.5"]).tokens == 1500.5
        assert parse_options(["-u", "2000"]).usd == 2000.0
        assert parse_options(["-u", "2000"]).mode == "usd"

    def test_hire_rate_override(self):
        options = parse_options(["-p", "10", "--max-hires-per-week", "12"])
        assert options.max_new_hires_per_week == 12

    def test_zero_properties_allowed(self):
        assert parse_options(["-p", "0"]).properties == 0


class TestValidationErrors:
    """Rejected input exits with status 1 and a one-line message"""

    @pytest.mark.parametrize(
        "argv, message",
        [
            ([], "is required"),
            (["-p", "10", "-t", "5"], "Only one of"),
            (["-p", "10.5"], "Properties count must be a whole number"),
            (["--properties=-5"], "Invalid properties count"),
            (["-p", "ten"], "Invalid properties count"),
            (["-t", "abc"], "Invalid token amount"),
            (["--usd=-1"], "Invalid USD amount"),
            (["-p", "10", "-g", "city"], "Unsupported data group"),
            (["-p", "10", "-e", "1.5"], "Extracted properties must be a whole number"),
            (["-p", "2", "-e", "149999999"], "Requested properties"),
            (["-p", "10", "-w", "0"], "Invalid max workers value"),
            (["-p", "10", "--max-hires-per-week", "0"], "Invalid max hires per week value"),
        ],
    )
    def test_rejected(self, capsys, argv, message):
        assert main(argv) == 1
        err = capsys.readouterr().err
        assert err.startswith("Error: ")
        assert message in err

    def test_options_model_raises_validation_error(self):
        with pytest.raises(ValidationError):
            PlanOptions(properties=5, usd=10)

    def test_options_are_frozen(self):
        options = PlanOptions(properties=5)
        with pytest.raises(ValidationError):
            options.properties = 6


class TestMain:
    """Successful runs"""

    def test_text_report(self, capsys):
        assert main(["-p", "100"]) == 0
        out = capsys.readouterr().out
        assert "Properties:" in out
        assert "Total:" in out

    def test_json_report(self, capsys):
        assert main(["-t", "1000", "--json"]) == 0
        payload = json.loads(capsys.readouterr().out)
        assert payload["mode"] == "tokens"
        assert abs(payload["tokens"]["tokens"] - 1000) <= CONFIG.tokenomics.allocation_tolerance


class TestConfigValidation:
    """Catalog invariants are enforced at construction"""

    def test_default_catalog(self):
        assert sum(t.properties for t in CONFIG.tiers) == CONFIG.total_properties
        assert CONFIG.total_counties == 2_650
        assert CONFIG.tier_offsets() == (0, 30_000_000, 100_000_000)

    def test_tiers_must_cover_universe(self):
        with pytest.raises(ValueError):
            PlannerConfig(tiers=(Tier(1, "Short", 100, 1, 1.0, 1.0),))

    def test_production_phase_required(self):
        with pytest.raises(ValueError):
            PlannerConfig(tiers=(Tier(1, "Idle", 150_000_000, 100, 1.0, 0.0),))

    def test_unknown_default_group(self):
        with pytest.raises(ValueError):
            PlannerConfig(default_data_group="city")
