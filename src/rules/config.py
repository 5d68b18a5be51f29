from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Literal

import tomllib
from pydantic import BaseModel, ConfigDict, Field, field_validator

CONFIG_FILENAME = "ordergraph.toml"

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]


class OrderGraphConfig(BaseModel):
    """Configuration for unit discovery, the priority store and outputs."""

    model_config = ConfigDict(extra="forbid")

    output_dir: str = Field(
        default=".ordergraph",
        description="Output directory for the runtime order cache",
    )
    store_path: str = Field(
        default="priorities.json",
        description="JSON file holding the live priority of every unit",
    )
    include: list[str] = Field(
        default_factory=list,
        description="Glob patterns for manifests to include (empty = all *.units.toml)",
    )
    exclude: list[str] = Field(
        default_factory=list,
        description="Glob patterns for manifests to exclude",
    )
    nested_gitignore: bool = Field(
        default=False,
        description=(
            "Enable nested .gitignore composition (default: false for root-only)"
        ),
    )
    log_level: LogLevel = Field(
        default="WARNING",
        description="Level for the ordergraph loggers when run from the CLI",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.upper()
        return v

    @property
    def logging_level(self) -> int:
        return logging.getLevelName(self.log_level)


class ConfigError(Exception):
    """Raised when config file exists but cannot be parsed."""


def _resolve_within_root(root: Path, value: str, field_name: str) -> Path:
    if not value:
        msg = f"{field_name} must be a non-empty relative path"
        raise ConfigError(msg)

    if value.startswith("~"):
        msg = f"{field_name} must be a relative path within the project root"
        raise ConfigError(msg)

    relative = Path(value)
    if relative.is_absolute():
        msg = f"{field_name} must be a relative path within the project root"
        raise ConfigError(msg)

    try:
        resolved_root = root.resolve()
        resolved = (resolved_root / relative).resolve()
    except OSError as exc:
        msg = f"Failed to resolve {field_name} '{value}': {exc}"
        raise ConfigError(msg) from exc

    try:
        resolved.relative_to(resolved_root)
    except ValueError as exc:
        msg = f"{field_name} '{value}' escapes the project root"
        raise ConfigError(msg) from exc

    return resolved


def resolve_output_dir(root: Path, output_dir: str) -> Path:
    """Resolve a config-provided output_dir safely within the project root."""
    return _resolve_within_root(root, output_dir, "output_dir")


def resolve_store_path(root: Path, store_path: str) -> Path:
    """Resolve a config-provided store_path safely within the project root."""
    return _resolve_within_root(root, store_path, "store_path")


def load_config(root: Path) -> OrderGraphConfig:
    """Load configuration from ordergraph.toml if it exists."""
    config_path = Path(root) / CONFIG_FILENAME

    if not config_path.is_file():
        return OrderGraphConfig()

    try:
        with config_path.open("rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        msg = f"Invalid TOML in {config_path}: {e}"
        raise ConfigError(msg) from e

    try:
        return OrderGraphConfig.model_validate(data)
    except Exception as e:
        msg = f"Invalid config in {config_path}: {e}"
        raise ConfigError(msg) from e
