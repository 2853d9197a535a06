"""Configuration model and loaders for the formatter."""

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from .errors import ConfigError
from .layouts import DEFAULT_LAYOUT, KeyboardLayout, get_layout

RC_FILENAME = ".dtsfmtrc.yaml"


class Config(BaseModel):
    """Formatting options, read-only while a file is formatted."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    layout: str = Field(DEFAULT_LAYOUT, description="Keyboard layout used to align keymap bindings")
    indent_unit: str = Field("  ", description="Text for one level of indentation")
    warn_on_unhandled_tokens: bool = Field(False, description="Report node kinds the printer does not know")
    layouts: dict[str, KeyboardLayout] = Field(default_factory=dict, description="Custom layouts by id")

    @field_validator("indent_unit")
    @classmethod
    def _check_indent_unit(cls, value: str) -> str:
        if not value or value.strip(" \t"):
            raise ValueError("indent_unit must be a non-empty run of spaces or tabs")
        return value

    @field_validator("layouts")
    @classmethod
    def _name_layouts(cls, value: dict[str, KeyboardLayout]) -> dict[str, KeyboardLayout]:
        return {name: layout.model_copy(update={"name": name}) for name, layout in value.items()}

    @model_validator(mode="after")
    def _check_layout_exists(self) -> "Config":
        get_layout(self.layout, self.layouts)
        return self

    def get_layout(self) -> KeyboardLayout:
        """Return the active keyboard layout."""
        return get_layout(self.layout, self.layouts)


def load_yaml(path: Path) -> dict[str, Any]:
    """Load a YAML file and return its contents."""
    with open(path) as f:
        return yaml.safe_load(f) or {}


def find_rc_file(start: Path) -> Path | None:
    """Find the closest rc file in start or one of its parents.

    Args:
        start: File or directory to search from. For a file, the search
            begins in its directory.

    Returns:
        Path to the rc file, or None if there is none up to the root
    """
    directory = start.resolve()
    if not directory.is_dir():
        directory = directory.parent

    for candidate in (directory, *directory.parents):
        rc_file = candidate / RC_FILENAME
        if rc_file.is_file():
            return rc_file
    return None


def load_config(path: Path, overrides: dict[str, Any] | None = None) -> Config:
    """Load and validate a configuration file.

    Args:
        path: Path to a YAML configuration file
        overrides: Values that take precedence over the file (e.g. CLI flags)

    Returns:
        Validated Config

    Raises:
        ConfigError: If the file cannot be read, is not valid YAML, or fails
            validation
    """
    try:
        data = load_yaml(path)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"cannot read {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"{path}: expected a mapping at the top level")

    return build_config({**data, **(overrides or {})}, source=str(path))


def build_config(data: dict[str, Any], source: str = "<config>") -> Config:
    """Validate raw configuration values, reporting failures as ConfigError."""
    try:
        return Config.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"{source}: {e}") from e


def discover_config(start: Path, overrides: dict[str, Any] | None = None) -> Config:
    """Load the rc file closest to start, or the defaults if there is none."""
    rc_file = find_rc_file(start)
    if rc_file is None:
        return build_config(overrides or {})
    return load_config(rc_file, overrides)
