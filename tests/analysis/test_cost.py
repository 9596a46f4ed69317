"""Tests for operation cost."""

from __future__ import annotations

import logging

import pytest

from gqlguard.analysis.cost import CostContext, compute_cost, coordinate, total_cost
from gqlguard.analysis.depth import compute_depth
from gqlguard.analysis.document import Document
from gqlguard.analysis.errors import (
    CostMapError,
    CostOverflowError,
    FragmentCycleError,
    NestingLimitError,
    OperationNotFoundError,
    RootTypeNotFoundError,
    UnknownFragmentError,
)
from gqlguard.analysis.types import MAX_COST, Cost
from tests.conftest import fragment_chain


class TestComputeCost:
    def test_basic(self):
        cost = compute_cost(
            "type Query { hello: String }",
            "{ hello }",
            None,
            {"Query.hello": 10},
        )
        assert cost == Cost(10)

    def test_fragments(self):
        cost = compute_cost(
            "type Query { a: A } type A { b: String }",
            "{ a { ...f } } fragment f on A { b }",
            None,
            {"Query.a": 5, "A.b": 8},
        )
        assert int(cost) == 13

    def test_abstract_types(self):
        cost = compute_cost(
            "type Query { a: A } interface A { b: String } "
            "type A1 implements A { b: String c: String }",
            "{ a { b ... on A1 { c } } }",
            None,
            {"Query.a": 5, "A.b": 8, "A1.b": 13, "A1.c": 13},
        )
        assert int(cost) == 26

    def test_default_weight_is_one(self, shop_schema: str):
        cost = compute_cost(shop_schema, "{ shop { id name owner { email } } }")
        assert int(cost) == 5

    def test_weights_apply_per_coordinate(self, shop_schema: str):
        cost = compute_cost(
            shop_schema,
            "{ shop { products { title } owner { email } } }",
            cost_map={"Shop.products": 20, "Product.title": 3},
        )
        # shop 1 + products 20 + title 3 + owner 1 + email 1
        assert int(cost) == 26

    def test_zero_weight(self, shop_schema: str):
        cost = compute_cost(shop_schema, "{ shop { id } }", cost_map={"Query.shop": 0})
        assert int(cost) == 1

    def test_no_list_multipliers(self, shop_schema: str):
        small = compute_cost(shop_schema, '{ search(text: "a") { ... on User { id } } }')
        assert int(small) == 2

    def test_idempotent(self, shop_schema: str):
        op = "{ shop { products { reviews { rating } } } }"
        assert compute_cost(shop_schema, op) == compute_cost(shop_schema, op)


class TestTypeContext:
    def test_inline_fragment_narrows_parent(self, shop_schema: str):
        cost = compute_cost(
            shop_schema,
            '{ node(id: "1") { id ... on User { email } } }',
            cost_map={"Node.id": 2, "User.email": 7},
        )
        assert int(cost) == 1 + 2 + 7

    def test_inline_fragment_without_type_condition_keeps_parent(self, shop_schema: str):
        cost = compute_cost(
            shop_schema,
            "query ($x: Boolean!) { shop { ... @include(if: $x) { name } } }",
            cost_map={"Shop.name": 4},
        )
        assert int(cost) == 5

    def test_fragment_uses_type_condition(self, shop_schema: str):
        cost = compute_cost(
            shop_schema,
            'fragment u on User { email } { node(id: "1") { ...u } }',
            cost_map={"User.email": 9},
        )
        assert int(cost) == 10

    def test_mutation_root(self, shop_schema: str):
        cost = compute_cost(
            shop_schema,
            'mutation { addToCart(productId: "1") { total } }',
            cost_map={"Mutation.addToCart": 50},
        )
        assert int(cost) == 51

    def test_explicit_schema_root_mapping(self):
        schema = "schema { query: Root } type Root { hello: String }"
        cost = compute_cost(schema, "{ hello }", cost_map={"Root.hello": 3})
        assert int(cost) == 3

    def test_literal_keyword_root_type(self):
        cost = compute_cost("type query { hello: String }", "{ hello }", cost_map={"query.hello": 4})
        assert int(cost) == 4

    def test_missing_root_type(self, shop_schema: str):
        with pytest.raises(RootTypeNotFoundError):
            compute_cost(shop_schema, "subscription { cartChanged { total } }")


class TestIntrospection:
    def test_introspection_fields_are_free(self, shop_schema: str):
        cost = compute_cost(
            shop_schema,
            "{ shop { id } __schema { types { name fields { name } } } }",
            cost_map={"Query.__schema": 100, "__Schema.types": 100},
        )
        assert int(cost) == 2

    def test_typename_is_free(self, shop_schema: str):
        cost = compute_cost(shop_schema, "{ __typename shop { __typename id } }")
        assert int(cost) == 2

    def test_introspection_counts_for_depth_but_not_cost(self, shop_schema: str):
        op = "{ __type(name: \"Shop\") { fields { type { name } } } }"
        assert int(compute_cost(shop_schema, op)) == 0
        assert compute_depth(op) == 4


class TestUnresolvedTypes:
    def test_unknown_field_contributes_nothing(self, shop_schema: str):
        cost = compute_cost(shop_schema, "{ shop { id bogus { deeper } } }")
        assert int(cost) == 2

    def test_unknown_field_is_logged(self, shop_schema: str, caplog: pytest.LogCaptureFixture):
        with caplog.at_level(logging.WARNING, logger="gqlguard.analysis.cost"):
            compute_cost(shop_schema, "{ shop { bogus } }")
        assert "no type for Shop.bogus" in caplog.text

    def test_unknown_type_condition(self, shop_schema: str):
        cost = compute_cost(shop_schema, '{ node(id: "1") { ... on Ghost { id } } }')
        assert int(cost) == 1


class TestFragmentErrors:
    def test_unknown_fragment_is_fatal(self, shop_schema: str):
        with pytest.raises(UnknownFragmentError) as exc_info:
            compute_cost(shop_schema, "{ shop { ...missing } }")
        assert exc_info.value.fragment_name == "missing"

    def test_unknown_fragment_is_tolerated_by_depth(self):
        assert compute_depth("{ shop { ...missing } }") == 1

    def test_fragment_cycle(self, shop_schema: str):
        op = "fragment f on User { friends { ...f } } { node(id: \"1\") { ...f } }"
        with pytest.raises(FragmentCycleError):
            compute_cost(shop_schema, op)

    def test_nesting_ceiling(self, shop_schema: str):
        op = "{ shop { owner { friends { friends { id } } } } }"
        assert int(compute_cost(shop_schema, op, max_nesting=5)) == 5
        with pytest.raises(NestingLimitError):
            compute_cost(shop_schema, op, max_nesting=4)

    def test_reused_fragment_respects_ceiling(self, shop_schema: str):
        op = "fragment o on User { id } { node(id: \"1\") { ...o } shop { owner { ...o } } }"
        assert int(compute_cost(shop_schema, op, max_nesting=4)) == 5
        with pytest.raises(NestingLimitError):
            compute_cost(shop_schema, op, max_nesting=3)

    def test_doubling_fragment_chain_is_walked_once_per_fragment(self):
        cost = compute_cost("type Query { a: Int }", fragment_chain(30, spreads=2))
        assert cost == Cost(2**30)

    def test_interpreter_recursion_becomes_nesting_error(self):
        with pytest.raises(NestingLimitError):
            compute_cost("type Query { a: Int }", fragment_chain(3000), max_nesting=100_000)


class TestOperationSelection:
    def test_ambiguous_without_name(self, shop_schema: str):
        with pytest.raises(OperationNotFoundError):
            compute_cost(shop_schema, "query A { shop { id } } query B { shop { name } }")

    def test_named(self, shop_schema: str):
        op = "query A { shop { id } } query B { shop { name owner { id } } }"
        assert int(compute_cost(shop_schema, op, "B")) == 4


class TestTotalCost:
    def test_overflow_is_detected(self):
        document = Document.from_sources("type Query { a: String b: String }", "{ a b }")
        context = CostContext(document, {"Query.a": MAX_COST, "Query.b": 1})
        with pytest.raises(CostOverflowError):
            total_cost(context, document.operations[0].selection_set, "Query")

    def test_negative_weight_is_an_analysis_error(self):
        document = Document.from_sources("type Query { a: String }", "{ a }")
        with pytest.raises(CostMapError, match="Query.a"):
            CostContext(document, {"Query.a": -1})

    def test_missing_selection_set(self):
        context = CostContext(Document())
        assert total_cost(context, None, "Query") == Cost(0)

    def test_coordinate(self):
        assert coordinate("Query", "hello") == "Query.hello"


class TestMonotonicity:
    @pytest.mark.parametrize(
        "smaller, larger",
        [
            ("{ shop { id } }", "{ shop { id name } }"),
            ("{ shop { id } }", "{ shop { id ...s } } fragment s on Shop { owner { id } }"),
            ("{ shop { id } }", "{ shop { id ... on Shop { products { id } } } }"),
        ],
    )
    def test_adding_selections_never_decreases(self, shop_schema: str, smaller: str, larger: str):
        assert compute_cost(shop_schema, smaller) <= compute_cost(shop_schema, larger)
        assert compute_depth(smaller) <= compute_depth(larger)
