"""Query-only view over a parsed GraphQL document.

Schema text and operation text are parsed together with graphql-core. Type
system definitions are built into a ``GraphQLSchema``; executable
definitions (operations and fragments) are kept as AST nodes for the
walkers. A ``Document`` is never mutated after construction.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import lru_cache
import logging

from graphql import GraphQLSchema, build_ast_schema, parse as gql_parse
from graphql.error import GraphQLError, GraphQLSyntaxError
from graphql.language.ast import (
    DocumentNode,
    FragmentDefinitionNode,
    OperationDefinitionNode,
    TypeSystemDefinitionNode,
    TypeSystemExtensionNode,
)
from graphql.type import (
    GraphQLInterfaceType,
    GraphQLObjectType,
    GraphQLUnionType,
    get_named_type,
)

from gqlguard.analysis.errors import (
    DocumentSyntaxError,
    NestingLimitError,
    SchemaBuildError,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Document:
    """Operations, fragments and (optionally) the schema of one request."""

    operations: tuple[OperationDefinitionNode, ...] = ()
    fragments: dict[str, FragmentDefinitionNode] = field(default_factory=dict)
    schema: GraphQLSchema | None = None

    @classmethod
    def from_source(cls, operation_text: str) -> Document:
        """Build a schema-free document from operation text alone."""
        return cls._from_ast(_parse(operation_text), schema=None)

    @classmethod
    def from_sources(cls, schema_text: str, operation_text: str) -> Document:
        """Build a document from schema text followed by operation text."""
        ast = _parse(f"{schema_text}\n{operation_text}")
        type_defs = tuple(d for d in ast.definitions if _is_type_system(d))
        schema = _build_schema(DocumentNode(definitions=type_defs)) if type_defs else None
        return cls._from_ast(ast, schema=schema)

    @classmethod
    def with_schema(cls, schema: GraphQLSchema | None, operation_text: str) -> Document:
        """Build a document against an already built schema."""
        return cls._from_ast(_parse(operation_text), schema=schema)

    @classmethod
    def _from_ast(cls, ast: DocumentNode, schema: GraphQLSchema | None) -> Document:
        operations: list[OperationDefinitionNode] = []
        fragments: dict[str, FragmentDefinitionNode] = {}
        for defn in ast.definitions:
            if isinstance(defn, OperationDefinitionNode):
                operations.append(defn)
            elif isinstance(defn, FragmentDefinitionNode):
                # First declaration wins
                fragments.setdefault(defn.name.value, defn)
        return cls(operations=tuple(operations), fragments=fragments, schema=schema)

    @property
    def object_types(self) -> dict[str, GraphQLObjectType]:
        """Object types declared by the schema, keyed by name."""
        if self.schema is None:
            return {}
        return {
            name: type_
            for name, type_ in self.schema.type_map.items()
            if isinstance(type_, GraphQLObjectType)
        }

    def fragment(self, name: str) -> FragmentDefinitionNode | None:
        return self.fragments.get(name)

    def field_type_name(self, parent_type_name: str, field_name: str) -> str | None:
        """Return the named type of ``parent_type_name.field_name``.

        Returns None when there is no schema, the parent type is unknown or
        not composite, or the field is not declared on it.
        """
        if self.schema is None:
            return None
        parent = self.schema.get_type(parent_type_name)
        if not isinstance(parent, (GraphQLObjectType, GraphQLInterfaceType, GraphQLUnionType)):
            return None

        if field_name == "__typename":
            return "String"
        if parent is self.schema.query_type and field_name in ("__schema", "__type"):
            return "__Schema" if field_name == "__schema" else "__Type"
        if isinstance(parent, GraphQLUnionType):
            return None

        field_def = parent.fields.get(field_name)
        if field_def is None:
            return None
        return get_named_type(field_def.type).name


def _is_type_system(defn: object) -> bool:
    return isinstance(defn, (TypeSystemDefinitionNode, TypeSystemExtensionNode))


def _parse(text: str) -> DocumentNode:
    try:
        return gql_parse(text, no_location=True)
    except GraphQLSyntaxError as e:
        raise DocumentSyntaxError(e.message) from e
    except RecursionError as e:
        raise NestingLimitError() from e


def build_schema(schema_text: str) -> GraphQLSchema:
    """Build a schema from SDL text.

    Results are cached by text, so a schema supplied once as configuration
    is only built once.
    """
    return _build_schema_from_text(schema_text)


@lru_cache(maxsize=16)
def _build_schema_from_text(schema_text: str) -> GraphQLSchema:
    try:
        ast = _parse(schema_text)
    except DocumentSyntaxError as e:
        raise SchemaBuildError(f"invalid schema: {e}") from e
    return _build_schema(ast)


def _build_schema(ast: DocumentNode) -> GraphQLSchema:
    try:
        schema = build_ast_schema(ast)
    except (GraphQLError, TypeError) as e:
        raise SchemaBuildError(f"invalid schema: {e}") from e
    logger.debug("built schema with %d types", len(schema.type_map))
    return schema
