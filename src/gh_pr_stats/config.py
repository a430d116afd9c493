"""Configuration loading and validation."""

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError


class ConfigurationError(Exception):
    """Raised when configuration is missing or invalid."""


class TargetConfig(BaseModel):
    """Repository and pull request state to fetch."""

    repo: str = Field(pattern=r"^[A-Za-z0-9_.-]+/[A-Za-z0-9_.-]+$")
    state: str = Field(default="closed", pattern=r"^(open|closed|all)$")


class AuthConfig(BaseModel):
    """GitHub authentication configuration."""

    token_env: str = "GITHUB_TOKEN"


class FetchConfig(BaseModel):
    """Paginated fetch configuration."""

    max_pages: int = Field(default=-1, ge=-1, description="-1 fetches every page")
    workers: int = Field(default=2, ge=1, le=32)
    per_page: int = Field(default=100, ge=1, le=100)
    timeout_seconds: float = Field(default=30.0, gt=0)
    api_url: str = "https://api.github.com"


class ReportConfig(BaseModel):
    """Summary output configuration."""

    top_authors: int = Field(default=3, ge=1)


class Config(BaseModel):
    """Root configuration model."""

    target: TargetConfig
    auth: AuthConfig = Field(default_factory=AuthConfig)
    fetch: FetchConfig = Field(default_factory=FetchConfig)
    report: ReportConfig = Field(default_factory=ReportConfig)


def resolve_config(path: Path | None = None, **overrides: Any) -> Config:
    """Build the effective configuration for one run.

    Values from the YAML file (if any) are used as a base. Keyword overrides
    are dotted section keys such as ``target.repo`` passed as
    ``target__repo``; None values are ignored so unset CLI options keep the
    file or default value.

    Args:
        path: Optional YAML configuration file.
        **overrides: Section overrides, ``section__field=value``.

    Returns:
        Validated Config object.

    Raises:
        ConfigurationError: If the file is unreadable or the merged
            configuration fails validation.
    """
    raw: dict[str, Any] = {}
    if path is not None:
        if not path.exists():
            raise ConfigurationError(f"Config file not found: {path}")
        try:
            raw = _read_yaml(path)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {path}: {e}") from e

    for key, value in overrides.items():
        if value is None:
            continue
        section, _, field_name = key.partition("__")
        if not field_name:
            raise ConfigurationError(f"Override must be section__field, got {key!r}")
        _section(raw, section)[field_name] = value

    if "repo" not in _section(raw, "target"):
        raise ConfigurationError(
            "No repository given. Pass OWNER/NAME or set target.repo in the config file."
        )

    try:
        return Config.model_validate(raw)
    except ValidationError as e:
        raise ConfigurationError(_format_validation_error(e)) from e


def _read_yaml(path: Path) -> dict[str, Any]:
    with path.open() as f:
        loaded = yaml.safe_load(f)
    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise ConfigurationError(f"Config file must contain a mapping: {path}")
    return {key: {} if value is None else value for key, value in loaded.items()}


def _section(raw: dict[str, Any], name: str) -> dict[str, Any]:
    section = raw.setdefault(name, {})
    if not isinstance(section, dict):
        raise ConfigurationError(
            f"Config section {name!r} must be a mapping, got {type(section).__name__}"
        )
    return section


def _format_validation_error(error: ValidationError) -> str:
    parts = []
    for item in error.errors():
        location = ".".join(str(p) for p in item["loc"])
        parts.append(f"{location}: {item['msg']}")
    return "Invalid configuration: " + "; ".join(parts)
