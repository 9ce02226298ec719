"""Tests for configuration and .env loading."""

import json
import os
from unittest.mock import patch

import pytest

from filing_buddy.config import Config, get_config, reset_config
from filing_buddy.env import load_env, parse_env_line


class TestConfig:
    """Tests for Config."""

    def test_defaults(self, config):
        assert config.tax_year == 2024
        assert config.get("filing_status") == "single"
        assert config.get("output_format") == "text"
        assert config.extractor == "stub"
        assert config.ai_provider == "anthropic"
        assert config.extraction_timeout == 60.0
        assert config.auto_redact_ssn is True
        assert config.strict_validation is False

    def test_set_persists(self, config):
        config.set("strict_validation", True)
        saved = json.loads(config.config_file.read_text())
        assert saved["strict_validation"] is True
        assert Config(config.config_dir).strict_validation is True

    def test_file_values_merge_with_defaults(self, temp_dir):
        config_dir = temp_dir / "cfg"
        config_dir.mkdir()
        (config_dir / "config.json").write_text(json.dumps({"tax_year": 2023}))

        config = Config(config_dir)
        assert config.tax_year == 2023
        assert config.extraction_timeout == 60.0

    def test_invalid_provider(self, config):
        with pytest.raises(ValueError):
            config.ai_provider = "openai"

    def test_invalid_extractor(self, config):
        with pytest.raises(ValueError):
            config.extractor = "ocr"

    def test_api_key_from_env(self, config, monkeypatch):
        monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-env")
        assert config.get_api_key() == "sk-env"

    def test_api_key_from_keyring(self, config):
        with patch("filing_buddy.config.keyring.get_password", return_value="sk-ring") as mock_get:
            assert config.get_api_key() == "sk-ring"
        mock_get.assert_called_once_with("filing-buddy", "anthropic-api-key")

    def test_set_api_key_uses_keyring(self, config):
        with patch("filing_buddy.config.keyring.set_password") as mock_set:
            config.set_api_key("sk-new")
        mock_set.assert_called_once_with("filing-buddy", "anthropic-api-key", "sk-new")

    def test_global_config_uses_env_dir(self, config):
        assert get_config().config_dir == config.config_dir
        assert get_config() is get_config()
        reset_config()


class TestEnv:
    """Tests for .env loading."""

    @pytest.mark.parametrize(
        "line, expected",
        [
            ("KEY=value", ("KEY", "value")),
            ("  KEY = 'quoted value' ", ("KEY", "quoted value")),
            ('KEY="a=b"', ("KEY", "a=b")),
            ("# comment", None),
            ("", None),
            ("no equals sign", None),
        ],
    )
    def test_parse_env_line(self, line, expected):
        assert parse_env_line(line) == expected

    def test_load_env_does_not_override(self, temp_dir, monkeypatch):
        monkeypatch.setenv("FB_EXISTING", "keep")
        monkeypatch.delenv("FB_NEW", raising=False)
        env_file = temp_dir / ".env"
        env_file.write_text("FB_EXISTING=replace\nFB_NEW=added\n")

        loaded = load_env(env_file)

        assert loaded == ["FB_NEW"]
        assert os.environ["FB_EXISTING"] == "keep"
        assert os.environ["FB_NEW"] == "added"
        monkeypatch.delenv("FB_NEW")

    def test_missing_file(self, temp_dir):
        assert load_env(temp_dir / "missing.env") == []
