"""
Tests for ledger configuration loading and the config -> kernel bridges.
"""

import logging

import pytest
import yaml

from settlement_config import DEFAULT_CONFIG_PATH, ShareTotalPolicy, get_active_config
from settlement_config.bridges import build_ledger_policy, engine_kwargs
from settlement_config.loader import load_yaml_file, parse_config
from settlement_kernel.utils.hashing import hash_payload


def _write(tmp_path, data) -> str:
    path = tmp_path / "ledger.yaml"
    path.write_text(yaml.safe_dump(data))
    return str(path)


class TestDefaultConfig:
    def test_default_set_loads(self):
        config = get_active_config()

        assert config.config_id == "default"
        assert config.share_total_policy == ShareTotalPolicy.WARN
        assert config.enforces_share_total is False
        assert config.audit.default_limit == 50
        assert config.audit.max_limit == 500
        assert config.logging.level_number == logging.INFO

    def test_checksum_is_stable(self):
        raw = load_yaml_file(DEFAULT_CONFIG_PATH)
        assert get_active_config().checksum == hash_payload(raw)
        assert get_active_config().checksum == get_active_config().checksum

    def test_checksum_tracks_content(self):
        warn = parse_config({"share_total_policy": "warn"})
        enforce = parse_config({"share_total_policy": "enforce"})
        assert warn.checksum != enforce.checksum
        assert warn.checksum == parse_config({"share_total_policy": "warn"}).checksum

    def test_load_is_logged(self, captured_logs):
        config = get_active_config()

        record = next(r for r in captured_logs() if r["message"] == "settlement_config_loaded")
        assert record["checksum"] == config.checksum
        assert record["share_total_policy"] == "warn"


class TestParseConfig:
    def test_enforce_policy(self, tmp_path):
        config = get_active_config(_write(tmp_path, {"share_total_policy": "ENFORCE"}))
        assert config.enforces_share_total is True

    def test_empty_file_uses_defaults(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        config = get_active_config(path)

        assert config.database.url == "sqlite:///settlement_ledger.db"
        assert config.version == 1

    def test_unknown_policy(self):
        with pytest.raises(ValueError, match="share_total_policy"):
            parse_config({"share_total_policy": "ignore"})

    def test_unknown_top_level_key(self):
        with pytest.raises(ValueError, match="Unknown configuration keys"):
            parse_config({"share_policy": "warn"})

    def test_default_limit_above_max(self):
        with pytest.raises(ValueError, match="exceeds"):
            parse_config({"audit": {"default_limit": 100, "max_limit": 10}})

    @pytest.mark.parametrize("value", [0, -1, True, "ten"])
    def test_limits_must_be_positive_ints(self, value):
        with pytest.raises(ValueError):
            parse_config({"audit": {"max_limit": value}})

    def test_bad_logging_level(self):
        with pytest.raises(ValueError, match="logging.level"):
            parse_config({"logging": {"level": "chatty"}})

    def test_section_must_be_mapping(self):
        with pytest.raises(ValueError, match="'database' must be a mapping"):
            parse_config({"database": "sqlite://"})

    def test_top_level_must_be_mapping(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ValueError, match="top level"):
            load_yaml_file(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            get_active_config(tmp_path / "nope.yaml")


class TestBridges:
    def test_ledger_policy(self):
        config = parse_config(
            {"share_total_policy": "enforce", "audit": {"default_limit": 5, "max_limit": 20}}
        )
        policy = build_ledger_policy(config)

        assert policy.enforce_share_total is True
        assert policy.audit_default_limit == 5
        assert policy.audit_max_limit == 20

    def test_engine_kwargs(self):
        config = parse_config({"database": {"url": "sqlite://", "pool_size": 3}})

        assert engine_kwargs(config) == {
            "database_url": "sqlite://",
            "echo": False,
            "pool_size": 3,
            "max_overflow": 10,
        }
