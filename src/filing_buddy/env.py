"""Loading of ``.env`` files for API keys and config overrides."""

import os
from pathlib import Path


def get_env_path() -> Path:
    """Default .env location inside the config directory."""
    return Path.home() / ".filing-buddy" / ".env"


def parse_env_line(line: str) -> tuple[str, str] | None:
    """Parse one ``KEY=value`` line. Blank lines and comments yield None."""
    line = line.strip()
    if not line or line.startswith("#") or "=" not in line:
        return None
    key, _, value = line.partition("=")
    value = value.strip()
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ('"', "'"):
        value = value[1:-1]
    return key.strip(), value


def load_env(env_path: Path | None = None) -> list[str]:
    """Load variables from a .env file into ``os.environ``.

    Variables already present in the environment win.

    Returns:
        Names of the variables that were set
    """
    path = env_path or get_env_path()
    if not path.exists():
        return []

    loaded = []
    for line in path.read_text().splitlines():
        parsed = parse_env_line(line)
        if parsed is None:
            continue
        key, value = parsed
        if key not in os.environ:
            os.environ[key] = value
            loaded.append(key)
    return loaded
