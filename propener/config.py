"""Stored access tokens."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from propener.errors import ProError

CONFIG_ENV = "PRO_CONFIG"
CONFIG_FILENAME = "config.yml"

TOKEN_KEYS = {
    "github": "github_token",
    "gitlab": "gitlab_token",
}

TOKEN_ENV: dict[str, tuple[str, ...]] = {
    "github": ("GITHUB_TOKEN", "GH_TOKEN"),
    "gitlab": ("GITLAB_TOKEN",),
}


class ConfigError(ProError):
    """Raised when the config file cannot be read or written."""


def default_config_path() -> Path:
    """Return the config file location, honoring PRO_CONFIG and XDG_CONFIG_HOME."""
    if os.environ.get(CONFIG_ENV):
        return Path(os.environ[CONFIG_ENV]).expanduser()
    config_home = os.environ.get("XDG_CONFIG_HOME")
    base = Path(config_home).expanduser() if config_home else Path.home() / ".config"
    return base / "pro" / CONFIG_FILENAME


@dataclass
class Config:
    """Per-provider access tokens.

    Tokens from the environment take precedence over the stored ones.
    """

    path: Path
    tokens: dict[str, str] = field(default_factory=dict)

    def get_token(self, provider: str) -> str:
        """Return the token for ``provider``, or "" when not configured."""
        for env_var in TOKEN_ENV.get(provider, ()):
            if os.environ.get(env_var):
                return os.environ[env_var]
        return self.tokens.get(provider, "")

    def set_token(self, provider: str, token: str) -> None:
        if provider not in TOKEN_KEYS:
            raise ConfigError(f"Unknown provider: {provider}")
        self.tokens[provider] = token


def load_config(path: Path | None = None) -> Config:
    """Load the config file; a missing file yields an empty config."""
    if path is None:
        path = default_config_path()

    if not path.exists():
        return Config(path=path)

    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Unable to read config file {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")

    tokens = {}
    for provider, key in TOKEN_KEYS.items():
        value = data.get(key)
        if value:
            tokens[provider] = str(value)
    return Config(path=path, tokens=tokens)


def save_config(config: Config) -> None:
    """Write the config file, readable by the current user only."""
    data = {TOKEN_KEYS[p]: t for p, t in sorted(config.tokens.items()) if p in TOKEN_KEYS}
    try:
        config.path.parent.mkdir(parents=True, exist_ok=True)
        fd = os.open(config.path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            yaml.safe_dump(data, f, sort_keys=False)
    except OSError as e:
        raise ConfigError(f"Unable to write config file {config.path}: {e}") from e
