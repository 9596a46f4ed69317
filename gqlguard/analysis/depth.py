"""Operation depth: how deeply nested a selection set is.

Depth is purely syntactic. Every field, inline fragment and resolved
fragment spread opens one level of nesting; the result is the height of
the selection tree, not a sum::

    { hello { world } }                              -> 2
    { a { ... on B { c d { e } } } }                 -> 4
    fragment f on B { c d { e } }  { a { ...f } }    -> 4

No schema is needed, so introspection fields count like any other field.
"""

from __future__ import annotations

import logging

from graphql.language.ast import (
    FieldNode,
    FragmentSpreadNode,
    InlineFragmentNode,
    SelectionSetNode,
)

from gqlguard.analysis.document import Document
from gqlguard.analysis.errors import FragmentCycleError, NestingLimitError
from gqlguard.analysis.operations import resolve_operation
from gqlguard.analysis.types import DEFAULT_MAX_NESTING, FragmentPath

logger = logging.getLogger(__name__)


def compute_depth(
    operation_text: str,
    operation_name: str | None = None,
    max_nesting: int = DEFAULT_MAX_NESTING,
) -> int:
    """Return the depth of the selected operation in ``operation_text``.

    Raises ``OperationNotFoundError`` when no single operation matches.
    """
    document = Document.from_source(operation_text)
    operation = resolve_operation(document, operation_name)
    return max_depth(document, operation.selection_set, max_nesting=max_nesting)


def max_depth(
    document: Document,
    selection_set: SelectionSetNode | None,
    depth: int = 0,
    *,
    max_nesting: int = DEFAULT_MAX_NESTING,
    path: FragmentPath = FragmentPath(),
) -> int:
    """Return the deepest level reached below ``selection_set``.

    An empty selection set has the depth of its parent. A spread of an
    undeclared fragment adds no depth. Each fragment is walked once; later
    spreads of it reuse its height.
    """
    try:
        return _max_depth(document, selection_set, depth, max_nesting, path, {})
    except RecursionError as e:
        raise NestingLimitError() from e


def _max_depth(
    document: Document,
    selection_set: SelectionSetNode | None,
    depth: int,
    max_nesting: int,
    path: FragmentPath,
    heights: dict[str, int],
) -> int:
    if depth > max_nesting:
        raise NestingLimitError(max_nesting)

    deepest = depth
    if selection_set is None:
        return deepest

    for selection in selection_set.selections:
        if isinstance(selection, FieldNode):
            child = selection.selection_set
        elif isinstance(selection, InlineFragmentNode):
            child = selection.selection_set
        elif isinstance(selection, FragmentSpreadNode):
            name = selection.name.value
            fragment = document.fragment(name)
            if fragment is None:
                logger.debug("ignoring spread of unknown fragment %s", name)
                continue
            if name in path:
                raise FragmentCycleError(path.names + (name,))
            if name in heights:
                reached = depth + 1 + heights[name]
                if reached > max_nesting:
                    raise NestingLimitError(max_nesting)
            else:
                reached = _max_depth(
                    document,
                    fragment.selection_set,
                    depth + 1,
                    max_nesting,
                    path.enter(name),
                    heights,
                )
                heights[name] = reached - (depth + 1)
            deepest = max(deepest, reached)
            continue
        else:
            raise TypeError(f"unexpected selection {type(selection).__name__}")

        deepest = max(
            deepest,
            _max_depth(document, child, depth + 1, max_nesting, path, heights),
        )

    return deepest
