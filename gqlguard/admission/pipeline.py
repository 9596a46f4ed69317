"""Run the configured checks over a request and short-circuit on rejection."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
import logging
from typing import Any

from gqlguard.admission.checks import BAD_REQUEST, Check, CheckOutcome
from gqlguard.admission.request import GraphQLRequest

logger = logging.getLogger(__name__)

_ERROR_CODES = {
    BAD_REQUEST: "OPERATION_LIMIT_EXCEEDED",
}


@dataclass
class PipelineResult:
    """Outcomes of the checks that ran, in order."""

    outcomes: list[CheckOutcome] = field(default_factory=lambda: list[CheckOutcome]())

    @property
    def rejection(self) -> CheckOutcome | None:
        for outcome in self.outcomes:
            if not outcome.allowed:
                return outcome
        return None

    @property
    def allowed(self) -> bool:
        return self.rejection is None

    @property
    def status(self) -> int:
        rejection = self.rejection
        if rejection is None or rejection.status is None:
            return 200
        return rejection.status

    def error_response(self) -> dict[str, Any] | None:
        """Render the GraphQL error body for a rejected request."""
        rejection = self.rejection
        if rejection is None:
            return None
        code = _ERROR_CODES.get(rejection.status or 0, "INTERNAL_SERVER_ERROR")
        return {
            "errors": [
                {
                    "message": rejection.message,
                    "extensions": {"code": code, "check": rejection.check},
                }
            ]
        }


class AdmissionPipeline:
    """Evaluate checks in order until one rejects the request."""

    def __init__(self, checks: Sequence[Check]):
        self.checks = list(checks)

    def evaluate(self, request: GraphQLRequest) -> PipelineResult:
        result = PipelineResult()
        for check in self.checks:
            outcome = check.check(request)
            result.outcomes.append(outcome)
            if not outcome.allowed:
                logger.info("request rejected by %s: %s", outcome.check, outcome.message)
                break
        return result
