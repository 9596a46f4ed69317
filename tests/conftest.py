"""Shared test fixtures for gqlguard tests."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest
import yaml

from gqlguard.admission.request import GraphQLRequest

SHOP_SCHEMA = """
type Query {
  shop: Shop
  product(id: ID!): Product
  search(text: String!): [SearchResult!]!
  node(id: ID!): Node
}

type Mutation {
  addToCart(productId: ID!): Cart
}

interface Node {
  id: ID!
}

type Shop implements Node {
  id: ID!
  name: String
  products: [Product!]!
  owner: User
}

type Product implements Node {
  id: ID!
  title: String
  price: Int
  reviews: [Review!]!
}

type Review {
  rating: Int
  author: User
}

type User implements Node {
  id: ID!
  email: String
  friends: [User!]!
}

type Cart {
  items: [Product!]!
  total: Int
}

union SearchResult = Product | User
"""


@pytest.fixture
def shop_schema() -> str:
    return SHOP_SCHEMA


def make_request(
    query: str,
    operation_name: str | None = None,
    variables: dict[str, Any] | None = None,
) -> GraphQLRequest:
    """Build a GraphQLRequest the way a gateway would receive it."""
    body: dict[str, Any] = {"query": query}
    if operation_name is not None:
        body["operationName"] = operation_name
    if variables is not None:
        body["variables"] = variables
    return GraphQLRequest.model_validate(body)


def write_config(directory: Path, plugins: dict[str, Any], name: str = "guard.yaml") -> Path:
    """Write a guard configuration file and return its path."""
    path = directory / name
    path.write_text(yaml.safe_dump({"plugins": plugins}, sort_keys=False))
    return path


def write_request(directory: Path, query: str, operation_name: str | None = None) -> Path:
    """Write a JSON request body file and return its path."""
    body: dict[str, Any] = {"query": query}
    if operation_name is not None:
        body["operationName"] = operation_name
    path = directory / "request.json"
    path.write_text(json.dumps(body))
    return path


def fragment_chain(levels: int, spreads: int = 1) -> str:
    """Build ``{ ...f0 }`` where each fragment spreads the next ``spreads`` times.

    The last fragment selects the single field ``a`` on ``Query``.
    """
    lines = ["{ ...f0 }"]
    for i in range(levels):
        lines.append(f"fragment f{i} on Query {{ {' '.join([f'...f{i + 1}'] * spreads)} }}")
    lines.append(f"fragment f{levels} on Query {{ a }}")
    return "\n".join(lines)
