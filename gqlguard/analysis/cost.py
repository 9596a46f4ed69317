"""Operation cost: the weighted sum of the fields an operation selects.

Each selected field costs the weight of its ``Type.field`` coordinate in the
cost map, or 1 when the coordinate is absent. The parent type of a
coordinate follows the selection tree: the root type of the operation, then
each field's own type, each fragment's type condition, and each inline
fragment's type condition when it has one. There are no list multipliers;
the cost is static.

Introspection fields and everything beneath them are free. Fields whose
type the schema cannot resolve are logged and contribute nothing.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
import logging

from graphql.language.ast import (
    FieldNode,
    FragmentSpreadNode,
    InlineFragmentNode,
    SelectionSetNode,
)

from gqlguard.analysis.document import Document
from gqlguard.analysis.errors import (
    CostMapError,
    FragmentCycleError,
    NestingLimitError,
    UnknownFragmentError,
)
from gqlguard.analysis.operations import resolve_operation, resolve_root_type
from gqlguard.analysis.types import (
    DEFAULT_FIELD_COST,
    DEFAULT_MAX_NESTING,
    Cost,
    FragmentPath,
)

logger = logging.getLogger(__name__)

INTROSPECTION_PREFIX = "__"


@dataclass(frozen=True)
class CostContext:
    """Inputs shared by one cost traversal.

    ``fragment_totals`` caches each walked fragment's cost and the number of
    levels it nests, keyed by fragment name. A fragment's cost only depends
    on its own type condition, not on where it is spread.
    """

    document: Document
    cost_map: Mapping[str, int] = field(default_factory=dict)
    max_nesting: int = DEFAULT_MAX_NESTING
    fragment_totals: dict[str, tuple[Cost, int]] = field(
        default_factory=dict, compare=False, repr=False
    )

    def __post_init__(self) -> None:
        negative = sorted(k for k, v in self.cost_map.items() if v < 0)
        if negative:
            raise CostMapError(f"negative weights for {', '.join(negative)}")

    def weight(self, coordinate: str) -> int:
        return self.cost_map.get(coordinate, DEFAULT_FIELD_COST)


def coordinate(parent_type_name: str, field_name: str) -> str:
    """Format the cost map key of a field."""
    return f"{parent_type_name}.{field_name}"


def compute_cost(
    schema_text: str,
    operation_text: str,
    operation_name: str | None = None,
    cost_map: Mapping[str, int] | None = None,
    max_nesting: int = DEFAULT_MAX_NESTING,
) -> Cost:
    """Return the cost of the selected operation against ``schema_text``.

    Raises ``OperationNotFoundError`` when no single operation matches.
    """
    document = Document.from_sources(schema_text, operation_text)
    return operation_cost(document, operation_name, cost_map, max_nesting=max_nesting)


def operation_cost(
    document: Document,
    operation_name: str | None = None,
    cost_map: Mapping[str, int] | None = None,
    *,
    max_nesting: int = DEFAULT_MAX_NESTING,
) -> Cost:
    """Return the cost of an operation of an already built document."""
    operation = resolve_operation(document, operation_name)
    root = resolve_root_type(document, operation)
    context = CostContext(document, cost_map or {}, max_nesting)
    return total_cost(context, operation.selection_set, root.name)


def total_cost(
    context: CostContext,
    selection_set: SelectionSetNode | None,
    parent_type_name: str,
    *,
    nesting: int = 0,
    path: FragmentPath = FragmentPath(),
) -> Cost:
    """Sum the weights of every field selected below ``selection_set``."""
    try:
        cost, _ = _walk(context, selection_set, parent_type_name, nesting, path)
    except RecursionError as e:
        raise NestingLimitError() from e
    return cost


def _walk(
    context: CostContext,
    selection_set: SelectionSetNode | None,
    parent_type_name: str,
    nesting: int,
    path: FragmentPath,
) -> tuple[Cost, int]:
    """Return the cost below ``selection_set`` and the deepest nesting reached."""
    if nesting > context.max_nesting:
        raise NestingLimitError(context.max_nesting)

    cost = Cost()
    deepest = nesting
    if selection_set is None:
        return cost, deepest

    for selection in selection_set.selections:
        if isinstance(selection, FieldNode):
            field_name = selection.name.value
            type_name = context.document.field_type_name(parent_type_name, field_name)
            if type_name is None:
                logger.warning("no type for %s", coordinate(parent_type_name, field_name))
                continue
            if _is_introspection(field_name, type_name):
                continue

            coord = coordinate(parent_type_name, field_name)
            field_cost = context.weight(coord)
            logger.debug("%s: %d", coord, field_cost)

            sub_cost, reached = _walk(
                context, selection.selection_set, type_name, nesting + 1, path
            )
            cost += field_cost
            cost += sub_cost

        elif isinstance(selection, FragmentSpreadNode):
            name = selection.name.value
            fragment = context.document.fragment(name)
            if fragment is None:
                raise UnknownFragmentError(name)
            if name in path:
                raise FragmentCycleError(path.names + (name,))
            if name in context.fragment_totals:
                sub_cost, height = context.fragment_totals[name]
                reached = nesting + 1 + height
                if reached > context.max_nesting:
                    raise NestingLimitError(context.max_nesting)
            else:
                sub_cost, reached = _walk(
                    context,
                    fragment.selection_set,
                    fragment.type_condition.name.value,
                    nesting + 1,
                    path.enter(name),
                )
                context.fragment_totals[name] = (sub_cost, reached - (nesting + 1))
            cost += sub_cost

        elif isinstance(selection, InlineFragmentNode):
            # ... on Concrete narrows the parent; ... @include(if: $x) keeps it
            narrowed = (
                selection.type_condition.name.value
                if selection.type_condition
                else parent_type_name
            )
            sub_cost, reached = _walk(
                context, selection.selection_set, narrowed, nesting + 1, path
            )
            cost += sub_cost

        else:
            raise TypeError(f"unexpected selection {type(selection).__name__}")

        deepest = max(deepest, reached)

    return cost, deepest


def _is_introspection(field_name: str, type_name: str) -> bool:
    return type_name.startswith(INTROSPECTION_PREFIX) or field_name.startswith(
        INTROSPECTION_PREFIX
    )
