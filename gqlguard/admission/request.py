"""GraphQL-over-HTTP request bodies as seen by the admission checks."""

from __future__ import annotations

import json
from typing import Any

from pydantic import BaseModel, Field, ValidationError

from gqlguard.analysis.errors import DocumentSyntaxError


class GraphQLRequest(BaseModel):
    """The ``query`` / ``operationName`` / ``variables`` triple of a request."""

    query: str
    operation_name: str | None = Field(default=None, alias="operationName")
    variables: dict[str, Any] = Field(default_factory=dict)

    model_config = {"populate_by_name": True}


def parse_request_body(body: bytes | str) -> GraphQLRequest:
    """Parse a JSON request body into a ``GraphQLRequest``.

    Only single (non-batched) requests carrying a ``query`` string are
    accepted; anything else raises ``DocumentSyntaxError``. A null
    ``variables`` is treated as empty.
    """
    try:
        data = json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise DocumentSyntaxError(f"request body is not JSON: {e}") from e
    if not isinstance(data, dict):
        raise DocumentSyntaxError("request body must be a JSON object")
    if data.get("variables") is None:
        data["variables"] = {}
    try:
        return GraphQLRequest.model_validate(data)
    except ValidationError as e:
        raise DocumentSyntaxError(f"invalid GraphQL request: {e}") from e
