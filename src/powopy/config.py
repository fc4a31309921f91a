"""Client configuration: immutable settings, merging and TOML/env loading."""

from __future__ import annotations

import os
import sys
from collections.abc import Mapping
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

if sys.version_info >= (3, 11):
    import tomllib
else:  # pragma: no cover
    import tomli as tomllib

from powopy.errors import ConfigurationError
from powopy.version import VERSION

DEFAULT_CONFIG_PATH = Path("~/.config/powopy/config.toml")
DEFAULT_BASE_URL = "https://powo.science.kew.org/api/2"
DEFAULT_USER_AGENT = f"powopy/{VERSION}"
BASE_URL_ENV = "POWOPY_BASE_URL"
USER_AGENT_ENV = "POWOPY_USER_AGENT"


class ClientConfig(BaseModel):
    """Settings shared by every request a client makes.

    Instances are frozen; derive variants with :func:`merge_config`.
    Unknown keys are rejected at construction time.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    base_url: str = DEFAULT_BASE_URL
    user_agent: str = DEFAULT_USER_AGENT
    timeout: float = Field(default=10.0, gt=0)
    open_timeout: float = Field(default=5.0, gt=0)
    max_retries: int = Field(default=3, ge=0)
    retries: bool = True
    backoff_base: float = Field(default=0.5, ge=0)
    backoff_max: float = Field(default=8.0, ge=0)
    cache_options: dict[str, object] = Field(default_factory=dict)
    cache_namespace: str | None = None
    terms_path: Path | None = None

    @field_validator("cache_namespace")
    @classmethod
    def _blank_namespace_is_none(cls, value: str | None) -> str | None:
        if value is not None and not value.strip():
            return None
        return value


CONFIG_KEYS: frozenset[str] = frozenset(ClientConfig.model_fields)


def _normalize_keys(overrides: Mapping[object, object]) -> dict[str, object]:
    return {str(key): value for key, value in overrides.items()}


def _build(values: Mapping[str, object]) -> ClientConfig:
    unknown = sorted(set(values) - CONFIG_KEYS)
    if unknown:
        raise ConfigurationError(
            f"Unknown client option keys: {', '.join(unknown)}",
            hint=f"Supported keys: {', '.join(sorted(CONFIG_KEYS))}.",
        )
    try:
        return ClientConfig(**values)
    except PydanticValidationError as exc:
        fields = sorted({".".join(str(part) for part in item["loc"]) for item in exc.errors()})
        raise ConfigurationError(
            f"Invalid client option(s): {', '.join(fields)}",
            hint=str(exc.errors()[0]["msg"]) if exc.errors() else "",
        ) from exc


def merge_config(
    base: ClientConfig | None = None,
    overrides: Mapping[object, object] | None = None,
) -> ClientConfig:
    """Return a new config with ``overrides`` applied on top of ``base``."""
    if overrides is not None and not isinstance(overrides, Mapping):
        raise ConfigurationError("Client options must be a mapping.")
    merged = (base or ClientConfig()).model_dump()
    merged.update(_normalize_keys(overrides or {}))
    return _build(merged)


def get_config_path(path: str | Path | None = None) -> Path:
    if path is None:
        return DEFAULT_CONFIG_PATH.expanduser()
    return Path(path).expanduser()


def _env_overrides() -> dict[str, object]:
    overrides: dict[str, object] = {}
    base_url = os.getenv(BASE_URL_ENV, "").strip()
    if base_url:
        overrides["base_url"] = base_url
    user_agent = os.getenv(USER_AGENT_ENV, "").strip()
    if user_agent:
        overrides["user_agent"] = user_agent
    return overrides


def load_config(path: str | Path | None = None) -> ClientConfig:
    resolved = get_config_path(path)
    raw: dict[str, object] = {}
    if resolved.exists():
        try:
            with resolved.open("rb") as handle:
                raw = tomllib.load(handle)
        except (tomllib.TOMLDecodeError, OSError):
            raw = {}

    # The config file may be shared with other tools; only our keys count.
    file_values = {key: value for key, value in raw.items() if key in CONFIG_KEYS}
    return merge_config(None, {**file_values, **_env_overrides()})
