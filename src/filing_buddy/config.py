"""Configuration management for the filing assistant."""

import json
import os
from pathlib import Path
from typing import Any

import keyring

APP_NAME = "filing-buddy"
DEFAULT_CONFIG_DIR = Path.home() / ".filing-buddy"

KEYRING_SERVICE = "filing-buddy"
KEYRING_API_KEY = "anthropic-api-key"

# Supported AI providers
AI_PROVIDER_ANTHROPIC = "anthropic"
AI_PROVIDER_AWS_BEDROCK = "aws_bedrock"

# Supported extraction backends
EXTRACTOR_STUB = "stub"
EXTRACTOR_CLAUDE = "claude"


class Config:
    """Manages application configuration."""

    def __init__(self, config_dir: Path | None = None):
        env_dir = os.environ.get("FILING_BUDDY_CONFIG_DIR")
        self.config_dir = config_dir or (Path(env_dir) if env_dir else DEFAULT_CONFIG_DIR)
        self.config_file = self.config_dir / "config.json"
        self._config: dict[str, Any] = {}
        self._load()

    def _load(self) -> None:
        """Load configuration from file, filling in defaults for missing keys."""
        self._config = self._default_config()
        if self.config_file.exists():
            with open(self.config_file) as f:
                self._config.update(json.load(f))

    def _save(self) -> None:
        """Save configuration to file."""
        self.config_dir.mkdir(parents=True, exist_ok=True)
        with open(self.config_file, "w") as f:
            json.dump(self._config, f, indent=2)

    def _default_config(self) -> dict[str, Any]:
        """Return default configuration."""
        return {
            "tax_year": 2024,
            "filing_status": "single",
            "output_format": "text",
            "extractor": EXTRACTOR_STUB,  # "stub" or "claude"
            "ai_provider": AI_PROVIDER_ANTHROPIC,  # "anthropic" or "aws_bedrock"
            "model": "claude-sonnet-4-5",
            "aws_region": "us-east-1",
            "extraction_timeout": 60.0,  # seconds
            "auto_redact_ssn": True,
            "strict_validation": False,
        }

    def get(self, key: str, default: Any = None) -> Any:
        """Get a configuration value."""
        return self._config.get(key, default)

    def set(self, key: str, value: Any) -> None:
        """Set a configuration value."""
        self._config[key] = value
        self._save()

    def get_api_key(self) -> str | None:
        """Get the Anthropic API key from environment or keyring."""
        env_key = os.environ.get("ANTHROPIC_API_KEY")
        if env_key:
            return env_key
        return keyring.get_password(KEYRING_SERVICE, KEYRING_API_KEY)

    def set_api_key(self, api_key: str) -> None:
        """Store the Anthropic API key in the system keyring."""
        keyring.set_password(KEYRING_SERVICE, KEYRING_API_KEY, api_key)

    @property
    def ai_provider(self) -> str:
        """Get the configured AI provider."""
        return self._config.get("ai_provider", AI_PROVIDER_ANTHROPIC)

    @ai_provider.setter
    def ai_provider(self, provider: str) -> None:
        """Set the AI provider."""
        if provider not in (AI_PROVIDER_ANTHROPIC, AI_PROVIDER_AWS_BEDROCK):
            raise ValueError(f"Invalid AI provider: {provider}")
        self.set("ai_provider", provider)

    @property
    def extractor(self) -> str:
        """Get the extraction backend name."""
        return self._config.get("extractor", EXTRACTOR_STUB)

    @extractor.setter
    def extractor(self, name: str) -> None:
        """Set the extraction backend."""
        if name not in (EXTRACTOR_STUB, EXTRACTOR_CLAUDE):
            raise ValueError(f"Invalid extractor: {name}")
        self.set("extractor", name)

    @property
    def aws_region(self) -> str:
        """Get the AWS region for Bedrock."""
        return self._config.get("aws_region", "us-east-1")

    @property
    def tax_year(self) -> int:
        """Get the default tax year."""
        return self._config.get("tax_year", 2024)

    @tax_year.setter
    def tax_year(self, year: int) -> None:
        """Set the default tax year."""
        self.set("tax_year", year)

    @property
    def extraction_timeout(self) -> float:
        """Seconds to wait for the extraction service before failing."""
        return float(self._config.get("extraction_timeout", 60.0))

    @property
    def auto_redact_ssn(self) -> bool:
        """Whether document text is redacted before it leaves the process."""
        return bool(self._config.get("auto_redact_ssn", True))

    @property
    def strict_validation(self) -> bool:
        """Whether validation errors block filing generation."""
        return bool(self._config.get("strict_validation", False))

    def to_dict(self) -> dict[str, Any]:
        """Return configuration as a dictionary (secrets live in the keyring)."""
        return dict(self._config)


# Global config instance
_config: Config | None = None


def get_config() -> Config:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = Config()
    return _config


def reset_config() -> None:
    """Drop the cached configuration so the next get_config() reloads it."""
    global _config
    _config = None
