from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

DEFAULT_PLACEHOLDER = "$RESERVED$"


class ConfigError(RuntimeError):
    """Raised when a configuration file cannot be read or validated."""


def _normalize_extension(value: str) -> str:
    text = value.strip().lower()
    if text and not text.startswith("."):
        text = f".{text}"
    return text


class ExportsConfig(BaseModel):
    """Settings controlling how the exports map is generated."""

    exclude: list[str] = Field(
        default_factory=list,
        description="Module basenames dropped from the exports map regardless of location.",
    )
    placeholder: str | None = Field(
        default=DEFAULT_PLACEHOLDER,
        description="Marker string; modules whose files contain it are skipped (empty disables).",
    )
    runtime_extensions: list[str] = Field(
        default_factory=lambda: [".js"],
        description="Extensions treated as runtime entry points, in order of preference.",
    )
    declaration_extensions: list[str] = Field(
        default_factory=lambda: [".d.ts"],
        description="Extensions treated as type declarations, in order of preference.",
    )
    manifest_name: str = Field(
        default="package.json",
        description="File name searched for when no explicit manifest path is given.",
    )
    indent: int = Field(default=2, ge=0, le=8, description="JSON indentation of the rewritten manifest.")

    @field_validator("exclude", mode="before")
    def _split_names(cls, value: Any) -> list[str]:
        if value is None:
            return []
        if isinstance(value, str):
            value = value.split(",")
        names: list[str] = []
        for item in value:
            name = str(item).strip()
            if name and name not in names:
                names.append(name)
        return names

    @field_validator("placeholder", mode="before")
    def _empty_placeholder(cls, value: Any) -> str | None:
        if value is None or value == "":
            return None
        return str(value)

    @field_validator("runtime_extensions", "declaration_extensions", mode="before")
    def _normalize_extensions(cls, value: Any) -> list[str]:
        if isinstance(value, str):
            value = [value]
        extensions: list[str] = []
        for item in value or []:
            ext = _normalize_extension(str(item))
            if ext and ext not in extensions:
                extensions.append(ext)
        if not extensions:
            raise ValueError("At least one extension must be configured.")
        return extensions

    @field_validator("manifest_name")
    def _plain_file_name(cls, value: str) -> str:
        name = value.strip()
        if not name or Path(name).name != name:
            raise ValueError("manifest_name must be a bare file name.")
        return name

    def with_overrides(
        self,
        *,
        exclude: list[str] | None = None,
        placeholder: str | None = None,
    ) -> "ExportsConfig":
        """Return a copy with command-line values taking precedence."""
        updates: dict[str, Any] = {}
        if exclude is not None:
            updates["exclude"] = exclude
        if placeholder is not None:
            updates["placeholder"] = placeholder
        if not updates:
            return self
        # Re-validate so overrides go through the same normalization.
        return ExportsConfig(**{**self.model_dump(), **updates})


def load_config(path: str | Path | None) -> ExportsConfig:
    """Load generator settings from a YAML file.

    ``None`` yields the defaults. An empty file is treated the same way.
    """
    if path is None:
        return ExportsConfig()

    config_path = Path(path)
    if not config_path.is_file():
        raise ConfigError(f"Config file not found: {config_path}")

    try:
        with config_path.open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle) or {}
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigError(f"Unable to read config {config_path}: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigError(f"Config {config_path} must contain a mapping at the top level.")

    try:
        return ExportsConfig(**data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid config {config_path}: {exc}") from exc
