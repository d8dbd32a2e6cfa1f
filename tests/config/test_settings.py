"""Tests for the settings entrypoint (charges_config.get_active_settings)."""

from decimal import Decimal

import pytest
import yaml

from charges_config import ChargesSettings, get_active_settings
from charges_config.loader import compute_checksum, parse_settings
from charges_kernel.domain.defaults import GlobalDefaults, RoundRule, TaxType
from charges_kernel.exceptions import InvalidConfigPayloadError


def _write(tmp_path, data) -> str:
    path = tmp_path / "settings.yaml"
    path.write_text(yaml.safe_dump(data))
    return str(path)


class TestPackagedSettings:
    """The settings file shipped with the package."""

    def test_loads(self):
        settings = get_active_settings()
        assert isinstance(settings, ChargesSettings)
        assert settings.database.url == "sqlite://"
        assert settings.logging.level == "INFO"
        assert settings.source_path.endswith("settings.yaml")

    def test_base_defaults_match_builtin_shape(self):
        assert get_active_settings().base_defaults == GlobalDefaults()

    def test_checksum_stable(self):
        assert get_active_settings().checksum == get_active_settings().checksum

    def test_trace_logged(self, captured_logs):
        settings = get_active_settings()
        traces = [r for r in captured_logs() if r["message"] == "CHARGES_CONFIG_TRACE"]
        assert traces and traces[-1]["checksum"] == settings.checksum
        assert traces[-1]["database_dialect"] == "sqlite"


class TestCustomSettings:
    """Settings files supplied by the caller."""

    def test_overrides_applied(self, tmp_path):
        path = _write(tmp_path, {
            "database": {"url": "postgresql://u:p@localhost/charges", "echo": True},
            "logging": {"level": "debug"},
            "base_defaults": {"deliveryFee": 25, "taxType": "IGST", "roundRule": "up"},
        })
        settings = get_active_settings(path)
        assert settings.database.echo is True
        assert settings.logging.level == "DEBUG"
        assert settings.base_defaults.delivery_fee == Decimal("25")
        assert settings.base_defaults.tax_type is TaxType.IGST
        assert settings.base_defaults.round_rule is RoundRule.UP
        assert settings.base_defaults.gst_rate == Decimal("18")

    def test_empty_file_is_all_defaults(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        settings = get_active_settings(path)
        assert settings.base_defaults == GlobalDefaults()
        assert settings.database.url == "sqlite://"

    def test_invalid_base_defaults_rejected(self, tmp_path):
        path = _write(tmp_path, {"base_defaults": {"gstRate": -5}})
        with pytest.raises(InvalidConfigPayloadError):
            get_active_settings(path)

    def test_section_must_be_mapping(self, tmp_path):
        path = _write(tmp_path, {"database": "sqlite://"})
        with pytest.raises(ValueError, match="database"):
            get_active_settings(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            get_active_settings(tmp_path / "nope.yaml")

    def test_malformed_yaml(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("database: [unclosed")
        with pytest.raises(yaml.YAMLError):
            get_active_settings(path)


class TestChecksum:
    def test_key_order_irrelevant(self):
        assert compute_checksum({"a": 1, "b": 2}) == compute_checksum({"b": 2, "a": 1})

    def test_content_sensitive(self):
        first = parse_settings({"logging": {"level": "INFO"}})
        second = parse_settings({"logging": {"level": "DEBUG"}})
        assert first.checksum != second.checksum
