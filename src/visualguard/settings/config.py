"""Configuration loader for VisualGuard using Pydantic settings.

Config precedence (highest wins):
  1. CLI flags / explicit constructor values
  2. Environment variables (VG_* with __ for nesting)
  3. settings.local.toml
  4. settings.<VG_ENV>.toml
  5. settings.default.toml
"""

from __future__ import annotations

import os
import tomllib
from functools import lru_cache
from pathlib import Path
from typing import Any

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from visualguard.exceptions import ConfigurationError

# ---------------------------------------------------------------------------
# Path helpers
# ---------------------------------------------------------------------------

_THIS_DIR = Path(__file__).resolve().parent
PROJECT_ROOT = Path(os.getenv("VG_PROJECT_ROOT", _THIS_DIR.parents[2]))
CONFIG_DIR = PROJECT_ROOT / "config"

ENV_VAR_NAME = "VG_ENV"
DEFAULT_ENV = "local"

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)

# Value shipped in example env files; treated the same as "not set".
_PLACEHOLDER_API_KEY = "your_dashscope_api_key_here"


def _resolve_env() -> str:
    return (os.getenv(ENV_VAR_NAME) or DEFAULT_ENV).strip()


def _load_toml(path: Path) -> dict[str, Any]:
    if path.is_file():
        with open(path, "rb") as f:
            return tomllib.load(f)
    return {}


# ---------------------------------------------------------------------------
# Section models
# ---------------------------------------------------------------------------


class LLMSettings(BaseSettings):
    """Vision inference endpoint configuration (OpenAI-compatible API)."""

    model_config = SettingsConfigDict(env_prefix="VG_LLM__")

    api_key: str = ""
    base_url: str = "https://dashscope.aliyuncs.com/compatible-mode/v1"
    model: str = "qwen-vl-max"
    max_tokens: int = 1000
    temperature: float | None = None
    timeout_ms: int = 120_000
    prompt_language: str = "en"  # en | zh


class BrowserSettings(BaseSettings):
    """Headless browser settings for page capture."""

    model_config = SettingsConfigDict(env_prefix="VG_BROWSER__")

    executable_path: str = ""
    headless: bool = True
    sandbox: bool = True
    viewport_width: int = 1280
    viewport_height: int = 1080
    navigation_timeout_ms: int = 90_000
    network_idle_ms: int = 800
    settle_delay_ms: int = 1_500
    user_agent: str = DEFAULT_USER_AGENT
    blocked_resource_types: list[str] = Field(default_factory=lambda: ["media", "font"])


class APISettings(BaseSettings):
    """HTTP server configuration."""

    model_config = SettingsConfigDict(env_prefix="VG_API__")

    host: str = "0.0.0.0"
    port: int = 3000
    cors_origins: list[str] = ["*"]
    static_dir: str = ""


# ---------------------------------------------------------------------------
# Root settings
# ---------------------------------------------------------------------------


class Settings(BaseSettings):
    """Root VisualGuard settings with nested sections."""

    model_config = SettingsConfigDict(
        env_prefix="VG_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    env: str = Field(default_factory=_resolve_env)
    project_root: Path = Field(default=PROJECT_ROOT)
    log_level: str = "INFO"
    log_format: str = "text"  # text | json

    llm: LLMSettings = Field(default_factory=LLMSettings)
    browser: BrowserSettings = Field(default_factory=BrowserSettings)
    api: APISettings = Field(default_factory=APISettings)

    @model_validator(mode="before")
    @classmethod
    def _merge_toml_files(cls, values: dict[str, Any]) -> dict[str, Any]:
        """Layer TOML config files before env var overrides."""
        defaults = _load_toml(CONFIG_DIR / "settings.default.toml")
        env_name = (values.get("env") or os.getenv(ENV_VAR_NAME) or DEFAULT_ENV).strip()
        env_overrides = _load_toml(CONFIG_DIR / f"settings.{env_name}.toml")
        local_overrides = _load_toml(CONFIG_DIR / "settings.local.toml")

        # Merge: defaults < env-specific < local < explicit values
        merged: dict[str, Any] = {}
        for layer in (defaults, env_overrides, local_overrides, values):
            for key, val in layer.items():
                if isinstance(val, dict) and isinstance(merged.get(key), dict):
                    merged[key] = {**merged[key], **val}
                else:
                    merged[key] = val
        return merged

    @model_validator(mode="after")
    def _resolve_paths(self) -> "Settings":
        """Normalize a relative static directory against project_root."""
        if self.api.static_dir and not Path(self.api.static_dir).is_absolute():
            self.api.static_dir = str(self.project_root / self.api.static_dir)
        return self

    def require_inference_credentials(self) -> None:
        """Fail fast when the inference endpoint credential is not configured.

        Raises:
            ConfigurationError: If ``llm.api_key`` is empty or still the placeholder.
        """
        key = self.llm.api_key.strip()
        if not key or key == _PLACEHOLDER_API_KEY:
            raise ConfigurationError(
                "Inference API key is not configured. Set VG_LLM__API_KEY "
                "or add [llm] api_key to config/settings.local.toml."
            )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the singleton settings instance (cached)."""
    return Settings()
