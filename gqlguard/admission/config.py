"""Pydantic models for the guard configuration file (YAML).

Example::

    plugins:
      gqlguard.basic_depth_limit:
        limit: 10
      gqlguard.basic_operation_cost:
        max_cost: 1000
        schema_path: schema.graphql
        cost_map:
          Query.search: 50

Checks run in the order they are declared under ``plugins``.
"""

from __future__ import annotations

from pathlib import Path
import re
from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    NonNegativeInt,
    ValidationError,
    field_validator,
    model_validator,
)
import yaml

from gqlguard.analysis.errors import ConfigError
from gqlguard.analysis.types import DEFAULT_MAX_NESTING, MAX_NESTING_CEILING

_COORDINATE_RE = re.compile(r"^[_A-Za-z][_0-9A-Za-z]*\.[_A-Za-z][_0-9A-Za-z]*$")


class DepthLimitConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    limit: NonNegativeInt
    max_nesting: int = Field(default=DEFAULT_MAX_NESTING, gt=0, le=MAX_NESTING_CEILING)


class OperationCostConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    max_cost: NonNegativeInt
    cost_map: dict[str, NonNegativeInt] = Field(default_factory=dict)
    schema_text: str | None = None
    schema_path: Path | None = None
    max_nesting: int = Field(default=DEFAULT_MAX_NESTING, gt=0, le=MAX_NESTING_CEILING)

    @field_validator("cost_map")
    @classmethod
    def _check_coordinates(cls, value: dict[str, int]) -> dict[str, int]:
        bad = sorted(k for k in value if not _COORDINATE_RE.match(k))
        if bad:
            raise ValueError(f"cost_map keys must be Type.field coordinates: {', '.join(bad)}")
        return value

    @model_validator(mode="after")
    def _check_schema_source(self) -> OperationCostConfig:
        if (self.schema_text is None) == (self.schema_path is None):
            raise ValueError("exactly one of schema_text or schema_path is required")
        return self

    def load_schema_text(self, base_dir: Path | None = None) -> str:
        """Return the schema SDL, reading ``schema_path`` if needed.

        A relative ``schema_path`` is resolved against ``base_dir``.
        """
        if self.schema_text is not None:
            return self.schema_text
        if self.schema_path is None:
            raise ConfigError("no schema_text or schema_path configured")
        path = self.schema_path
        if base_dir is not None and not path.is_absolute():
            path = base_dir / path
        try:
            return path.read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigError(f"cannot read schema {path}: {e}") from e


class GuardConfig(BaseModel):
    """Check name -> raw check settings, plus where the file was loaded from."""

    plugins: dict[str, dict[str, Any]] = Field(default_factory=dict)
    base_dir: Path | None = Field(default=None, exclude=True)


def validate_settings(model: type[BaseModel], name: str, settings: dict[str, Any]) -> Any:
    """Validate one check's settings, raising ``ConfigError`` on failure."""
    try:
        return model.model_validate(settings)
    except ValidationError as e:
        raise ConfigError(f"invalid settings for {name}:\n{e}") from e


def load_config(path: str | Path) -> GuardConfig:
    """Load a YAML configuration file. Raises ``ConfigError`` on any problem."""
    path = Path(path)
    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except OSError as e:
        raise ConfigError(f"cannot read config {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid YAML in {path}: {e}") from e

    if not isinstance(raw, dict):
        raise ConfigError(f"config {path} must be a mapping")
    try:
        config = GuardConfig.model_validate(raw)
    except ValidationError as e:
        raise ConfigError(f"invalid config {path}:\n{e}") from e
    return config.model_copy(update={"base_dir": path.parent})
