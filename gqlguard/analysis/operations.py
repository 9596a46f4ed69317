"""Select the target operation of a document and its root type."""

from __future__ import annotations

import logging

from graphql.language.ast import OperationDefinitionNode
from graphql.type import GraphQLObjectType

from gqlguard.analysis.document import Document
from gqlguard.analysis.errors import OperationNotFoundError, RootTypeNotFoundError

logger = logging.getLogger(__name__)


def resolve_operation(
    document: Document, operation_name: str | None = None
) -> OperationDefinitionNode:
    """Return the operation named ``operation_name``.

    Without a name, the document must hold exactly one operation; zero or
    several operations are never resolved to an arbitrary pick. Anonymous
    operations are named by the empty string.
    """
    if operation_name is not None:
        for op in document.operations:
            if (op.name.value if op.name else "") == operation_name:
                return op
        raise OperationNotFoundError(operation_name)

    if len(document.operations) == 1:
        return document.operations[0]

    logger.debug(
        "cannot pick an operation without a name among %d", len(document.operations)
    )
    raise OperationNotFoundError(None)


def resolve_root_type(
    document: Document, operation: OperationDefinitionNode
) -> GraphQLObjectType:
    """Return the object type an operation's selection set starts from.

    Uses the schema's root type for the operation kind (an explicit
    ``schema { ... }`` mapping, or the conventional ``Query``, ``Mutation``
    and ``Subscription`` names), then falls back to an object type literally
    named after the operation keyword.
    """
    kind = operation.operation.value  # "query", "mutation", "subscription"
    if document.schema is not None:
        root = document.schema.get_root_type(operation.operation)
        if root is not None:
            return root

    literal = document.object_types.get(kind)
    if literal is not None:
        return literal

    raise RootTypeNotFoundError(kind)
