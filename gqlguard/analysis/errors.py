"""Exceptions raised by the operation analyzers.

Only ``OperationNotFoundError`` and ``DocumentSyntaxError`` are expected
outcomes for arbitrary client input. Everything under ``AnalysisError``
means the analysis could not be completed and the caller should fail the
request rather than let it through.
"""

from __future__ import annotations


class GuardError(Exception):
    """Base class for every gqlguard error."""


class OperationNotFoundError(GuardError):
    """No single operation matches the requested name."""

    def __init__(self, operation_name: str | None = None):
        super().__init__("missing operation")
        self.operation_name = operation_name


class DocumentSyntaxError(GuardError):
    """The request text is not a parseable GraphQL document."""


class ConfigError(GuardError):
    """A configuration file is missing or invalid."""


class AnalysisError(GuardError):
    """The analysis hit a precondition it cannot recover from."""


class SchemaBuildError(AnalysisError):
    """The schema text could not be built into a schema."""


class RootTypeNotFoundError(AnalysisError):
    """The schema has no root type for the operation kind."""

    def __init__(self, operation_kind: str):
        super().__init__(f"no root type for {operation_kind} operations")
        self.operation_kind = operation_kind


class UnknownFragmentError(AnalysisError):
    """A fragment spread names a fragment the document does not declare."""

    def __init__(self, fragment_name: str):
        super().__init__(f"unknown fragment '{fragment_name}'")
        self.fragment_name = fragment_name


class FragmentCycleError(AnalysisError):
    """A fragment spreads itself, directly or through other fragments."""

    def __init__(self, path: tuple[str, ...]):
        super().__init__(f"fragment cycle: {' -> '.join(path)}")
        self.path = path


class NestingLimitError(AnalysisError):
    """The selection tree nests deeper than the walker will follow."""

    def __init__(self, max_nesting: int | None = None):
        if max_nesting is None:
            super().__init__("document nests too deeply to analyze")
        else:
            super().__init__(f"selection nesting exceeds {max_nesting} levels")
        self.max_nesting = max_nesting


class CostMapError(AnalysisError):
    """A cost map assigns a weight outside the cost range."""


class CostOverflowError(AnalysisError):
    """An accumulated cost no longer fits the cost range."""
