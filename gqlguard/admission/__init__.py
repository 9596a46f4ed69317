"""Admission control for a GraphQL gateway: depth and cost limits."""

from __future__ import annotations

from gqlguard.admission.checks import (
    CheckOutcome as CheckOutcome,
    DepthLimitCheck as DepthLimitCheck,
    OperationCostCheck as OperationCostCheck,
    build_checks as build_checks,
    register_check as register_check,
)
from gqlguard.admission.config import GuardConfig as GuardConfig, load_config as load_config
from gqlguard.admission.pipeline import (
    AdmissionPipeline as AdmissionPipeline,
    PipelineResult as PipelineResult,
)
from gqlguard.admission.request import (
    GraphQLRequest as GraphQLRequest,
    parse_request_body as parse_request_body,
)

__all__ = [
    "AdmissionPipeline",
    "CheckOutcome",
    "DepthLimitCheck",
    "GraphQLRequest",
    "GuardConfig",
    "OperationCostCheck",
    "PipelineResult",
    "build_checks",
    "load_config",
    "parse_request_body",
    "register_check",
]
