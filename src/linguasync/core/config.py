"""Configuration system for LinguaSync.

Layered config loading (lowest to highest priority):
1. config/default.toml (shipped with package)
2. ~/.config/linguasync/config.toml (user-level)
3. ./linguasync.toml (project-level)
4. Environment variables (LSYNC_RETRY__MAX_ATTEMPTS, etc.)
5. CLI flags

Provider API keys may also come from the conventional GEMINI_API_KEY
(or API_KEY) and DEEPSEEK_API_KEY variables.
"""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass
from pathlib import Path

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

_PACKAGE_ROOT = Path(__file__).resolve().parent.parent.parent.parent
_DEFAULT_CONFIG = _PACKAGE_ROOT / "config" / "default.toml"
_USER_CONFIG = Path.home() / ".config" / "linguasync" / "config.toml"
_PROJECT_CONFIG = Path("linguasync.toml")

_PRIMARY_KEY_ENV = ("GEMINI_API_KEY", "API_KEY")
_FALLBACK_KEY_ENV = ("DEEPSEEK_API_KEY",)


class RetryPolicy(BaseModel):
    max_attempts: int = Field(default=3, ge=1)
    initial_delay: float = Field(default=1.0, ge=0)  # seconds
    backoff_multiplier: float = Field(default=2.0, gt=1)
    attempt_timeout: float | None = 120.0  # seconds, forwarded to the transport


class ProvidersConfig(BaseModel):
    primary_model: str = "gemini/gemini-2.5-flash"
    tts_model: str = "gemini/gemini-2.5-flash-preview-tts"
    fallback_model: str = "deepseek/deepseek-chat"
    voice: str = "Kore"
    max_output_tokens: int = 8192
    primary_key: str | None = None
    fallback_key: str | None = None


class MergeConfig(BaseModel):
    min_words: int = 4
    max_duration: float = 2.0  # seconds


class HistoryConfig(BaseModel):
    enabled: bool = True
    base_dir: Path = Path.home() / ".local" / "share" / "linguasync" / "history"


class LinguaSyncConfig(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="LSYNC_",
        env_nested_delimiter="__",
    )

    providers: ProvidersConfig = ProvidersConfig()
    retry: RetryPolicy = RetryPolicy()
    merge: MergeConfig = MergeConfig()
    history: HistoryConfig = HistoryConfig()


@dataclass(frozen=True)
class Credentials:
    """Provider API keys, read once at startup and injected into the router."""

    primary_key: str | None = None
    fallback_key: str | None = None

    @property
    def has_fallback(self) -> bool:
        return bool(self.fallback_key)


def _first_env(names: tuple[str, ...]) -> str | None:
    for name in names:
        value = os.environ.get(name)
        if value:
            return value
    return None


def load_credentials(config: LinguaSyncConfig) -> Credentials:
    """Resolve provider keys from config, falling back to conventional env vars."""
    return Credentials(
        primary_key=config.providers.primary_key or _first_env(_PRIMARY_KEY_ENV),
        fallback_key=config.providers.fallback_key or _first_env(_FALLBACK_KEY_ENV),
    )


def _load_toml(path: Path) -> dict:
    """Load a TOML file if it exists, return empty dict otherwise."""
    if path.is_file():
        with open(path, "rb") as f:
            return tomllib.load(f)
    return {}


def _deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge override into base."""
    merged = base.copy()
    for key, value in override.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(**cli_overrides: object) -> LinguaSyncConfig:
    """Load configuration from all layers and merge.

    Args:
        **cli_overrides: Direct overrides from CLI flags. Keys can be
            dot-separated (e.g. retry.max_attempts=5).
    """
    # Layer 1-3: TOML files
    config_data: dict = {}
    for path in (_DEFAULT_CONFIG, _USER_CONFIG, _PROJECT_CONFIG):
        layer = _load_toml(path)
        config_data = _deep_merge(config_data, layer)

    # Apply CLI overrides (dot-separated keys)
    for key, value in cli_overrides.items():
        if value is None:
            continue
        parts = key.split(".")
        target = config_data
        for part in parts[:-1]:
            target = target.setdefault(part, {})
        target[parts[-1]] = value

    # Layer 4: env vars are handled by Pydantic BaseSettings
    return LinguaSyncConfig(**config_data)
