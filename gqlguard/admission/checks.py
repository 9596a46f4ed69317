"""Admission checks that reject expensive operations before execution.

Each check turns a ``GraphQLRequest`` into a ``CheckOutcome``:

- the measured value is within the limit: allowed;
- the value exceeds the limit: rejected with a client error (400);
- the value cannot be computed: rejected with a server error (500);
- the request names no single operation, or does not parse: allowed, so
  the gateway's own validation reports the problem.

Checks are registered by name so a configuration file can enable them.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping
from dataclasses import dataclass
import logging
from pathlib import Path
from types import MappingProxyType
from typing import Any

from gqlguard.admission.config import (
    DepthLimitConfig,
    GuardConfig,
    OperationCostConfig,
    validate_settings,
)
from gqlguard.admission.request import GraphQLRequest
from gqlguard.analysis.cost import operation_cost
from gqlguard.analysis.depth import max_depth
from gqlguard.analysis.document import Document, build_schema
from gqlguard.analysis.errors import (
    AnalysisError,
    ConfigError,
    DocumentSyntaxError,
    NestingLimitError,
    OperationNotFoundError,
    SchemaBuildError,
)
from gqlguard.analysis.operations import resolve_operation
from gqlguard.analysis.types import DEFAULT_MAX_NESTING

logger = logging.getLogger(__name__)

BAD_REQUEST = 400
INTERNAL_SERVER_ERROR = 500


@dataclass(frozen=True)
class CheckOutcome:
    """The verdict of one check on one request."""

    check: str
    allowed: bool
    value: int | None = None
    limit: int | None = None
    status: int | None = None
    message: str | None = None


class Check(ABC):
    """Base class for a named admission check."""

    name: str = "check"
    measure: str = "value"

    @classmethod
    @abstractmethod
    def from_settings(cls, settings: dict[str, Any], base_dir: Path | None = None) -> Check:
        """Build the check from its raw configuration settings."""
        ...

    @property
    @abstractmethod
    def limit(self) -> int: ...

    @abstractmethod
    def _measure(self, request: GraphQLRequest) -> int:
        """Compute the checked value for a request."""
        ...

    def check(self, request: GraphQLRequest) -> CheckOutcome:
        try:
            value = self._measure(request)
        except (OperationNotFoundError, DocumentSyntaxError) as e:
            logger.info("%s: letting request through: %s", self.name, e)
            return CheckOutcome(check=self.name, allowed=True, limit=self.limit)
        except AnalysisError:
            logger.exception("%s: could not calculate operation %s", self.name, self.measure)
            return CheckOutcome(
                check=self.name,
                allowed=False,
                limit=self.limit,
                status=INTERNAL_SERVER_ERROR,
                message=f"could not calculate operation {self.measure}",
            )

        if value > self.limit:
            logger.info(
                "%s: operation %s %d exceeds limit %d",
                self.name,
                self.measure,
                value,
                self.limit,
            )
            return CheckOutcome(
                check=self.name,
                allowed=False,
                value=value,
                limit=self.limit,
                status=BAD_REQUEST,
                message=f"operation {self.measure} exceeded limit",
            )
        return CheckOutcome(check=self.name, allowed=True, value=value, limit=self.limit)


_REGISTRY: dict[str, type[Check]] = {}


def register_check(name: str) -> Callable[[type[Check]], type[Check]]:
    """Class decorator registering a check under ``name``."""

    def decorator(cls: type[Check]) -> type[Check]:
        if name in _REGISTRY:
            raise ValueError(f"check {name} is already registered")
        cls.name = name
        _REGISTRY[name] = cls
        return cls

    return decorator


def registered_checks() -> list[str]:
    return sorted(_REGISTRY)


def build_checks(config: GuardConfig) -> list[Check]:
    """Instantiate the configured checks, in declaration order."""
    checks: list[Check] = []
    for name, settings in config.plugins.items():
        cls = _REGISTRY.get(name)
        if cls is None:
            raise ConfigError(
                f"unknown check {name} (available: {', '.join(registered_checks())})"
            )
        checks.append(cls.from_settings(settings, config.base_dir))
    return checks


@register_check("gqlguard.basic_depth_limit")
class DepthLimitCheck(Check):
    """Reject operations nested deeper than ``limit``."""

    measure = "depth"

    def __init__(self, limit: int, max_nesting: int = DEFAULT_MAX_NESTING):
        self._limit = limit
        self.max_nesting = max_nesting

    @classmethod
    def from_settings(
        cls, settings: dict[str, Any], base_dir: Path | None = None
    ) -> DepthLimitCheck:
        config: DepthLimitConfig = validate_settings(DepthLimitConfig, cls.name, settings)
        return cls(limit=config.limit, max_nesting=config.max_nesting)

    @property
    def limit(self) -> int:
        return self._limit

    def _measure(self, request: GraphQLRequest) -> int:
        document = Document.from_source(request.query)
        operation = resolve_operation(document, request.operation_name)
        try:
            return max_depth(document, operation.selection_set, max_nesting=self.max_nesting)
        except NestingLimitError as e:
            if e.max_nesting is None or self.limit > e.max_nesting:
                raise
            # deeper than the ceiling, so already past the limit
            return e.max_nesting + 1


@register_check("gqlguard.basic_operation_cost")
class OperationCostCheck(Check):
    """Reject operations whose static field cost exceeds ``max_cost``.

    The schema is built once, when the check is created.
    """

    measure = "cost"

    def __init__(
        self,
        cost_map: Mapping[str, int],
        max_cost: int,
        schema_text: str,
        max_nesting: int = DEFAULT_MAX_NESTING,
    ):
        self.cost_map = MappingProxyType(dict(cost_map))
        self.max_cost = max_cost
        try:
            self.schema = build_schema(schema_text)
        except SchemaBuildError as e:
            raise ConfigError(f"{self.name}: {e}") from e
        self.max_nesting = max_nesting

    @classmethod
    def from_settings(
        cls, settings: dict[str, Any], base_dir: Path | None = None
    ) -> OperationCostCheck:
        config: OperationCostConfig = validate_settings(OperationCostConfig, cls.name, settings)
        return cls(
            cost_map=config.cost_map,
            max_cost=config.max_cost,
            schema_text=config.load_schema_text(base_dir),
            max_nesting=config.max_nesting,
        )

    @property
    def limit(self) -> int:
        return self.max_cost

    def _measure(self, request: GraphQLRequest) -> int:
        document = Document.with_schema(self.schema, request.query)
        cost = operation_cost(
            document, request.operation_name, self.cost_map, max_nesting=self.max_nesting
        )
        return int(cost)
