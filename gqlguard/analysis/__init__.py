"""Static depth and cost analysis of GraphQL operations."""

from __future__ import annotations

from gqlguard.analysis.cost import compute_cost as compute_cost
from gqlguard.analysis.depth import compute_depth as compute_depth
from gqlguard.analysis.errors import (
    AnalysisError as AnalysisError,
    GuardError as GuardError,
    OperationNotFoundError as OperationNotFoundError,
)
from gqlguard.analysis.types import Cost as Cost

__all__ = [
    "AnalysisError",
    "Cost",
    "GuardError",
    "OperationNotFoundError",
    "compute_cost",
    "compute_depth",
]
