"""
Tests for individual line rules and the rule precedence.
"""
import pytest
from pydantic import ValidationError

from juice_bot.config import MAX_ITEM_QUANTITY
from juice_bot.parsing.constants import Format
from juice_bot.parsing.context import ParseContext
from juice_bot.parsing.outcomes import ConsumesNextLine, Continue, NoMatch, OpensNewOrder
from juice_bot.parsing.rules import (
    LINE_RULES,
    client_line,
    format_keyword_line,
    frozen_keyword_line,
    match_line,
    new_order_line,
    numeric_block_line,
    quantity_product_line,
    return_line,
)
from juice_bot.parsing.schemas import LineItem


def _ctx(**kwargs):
    return ParseContext(**kwargs)


class TestClientLine:
    def test_opens_order_with_default_format(self, resolver):
        outcome = client_line("karim", _ctx(), None, resolver)
        assert isinstance(outcome, OpensNewOrder)
        assert outcome.client.id == "C00002"
        assert outcome.format == Format.FIVE_LITRE
        assert outcome.suffix == ""
        assert not outcome.is_return

    def test_longest_prefix_and_suffix(self, resolver):
        outcome = client_line("aziz market 25cl 1 2", _ctx(), None, resolver)
        assert outcome.client.id == "C00001"
        assert outcome.suffix == "25cl 1 2"

    def test_exact_short_prefix_beats_fuzzy_long_one(self, resolver):
        outcome = client_line("krm surgelé", _ctx(), None, resolver)
        assert outcome.client.id == "C00002"
        assert outcome.suffix == "surgelé"

    def test_fuzzy_prefix_stops_at_first_integer(self, resolver):
        outcome = client_line("bgh nas 3 4", _ctx(), None, resolver)
        assert outcome.client.id == "C00003"
        assert outcome.suffix == "3 4"

    def test_declines_quantity_lines(self, resolver):
        assert isinstance(client_line("2 karim", _ctx(), None, resolver), NoMatch)

    def test_declines_keyword_lines(self, resolver):
        assert isinstance(client_line("5l surgelé", _ctx(), None, resolver), NoMatch)

    def test_declines_markers(self, resolver):
        assert isinstance(client_line("+ aziz", _ctx(), None, resolver), NoMatch)
        assert isinstance(client_line("retour aziz", _ctx(), None, resolver), NoMatch)

    def test_unknown_name(self, resolver):
        assert isinstance(client_line("bonjour", _ctx(), None, resolver), NoMatch)


def test_new_order_line(resolver):
    outcome = new_order_line("+ bghali", _ctx(), None, resolver)
    assert outcome.client.id == "C00003"
    assert outcome.format == Format.TWENTY_FIVE_CL

    assert isinstance(new_order_line("+", _ctx(), None, resolver), NoMatch)
    assert isinstance(new_order_line("+ qqqqqq", _ctx(), None, resolver), NoMatch)


class TestReturnLine:
    def test_named_client(self, resolver):
        outcome = return_line("Retour karim", _ctx(), None, resolver)
        assert outcome.is_return
        assert outcome.client.id == "C00002"
        assert outcome.format == Format.FIVE_LITRE

    def test_keeps_current_client(self, resolver):
        current = resolver.resolve_client("aziz")
        outcome = return_line("retour", _ctx(current_client=current), None, resolver)
        assert outcome.client == current

    def test_unresolvable_name_keeps_current_client(self, resolver):
        current = resolver.resolve_client("bghali")
        outcome = return_line("retour qqqqqq", _ctx(current_client=current), None, resolver)
        assert outcome.client == current
        assert outcome.format == Format.TWENTY_FIVE_CL

    def test_no_client_at_all(self, resolver):
        outcome = return_line("retour", _ctx(), None, resolver)
        assert outcome.client is None
        assert outcome.format == Format.ONE_LITRE


class TestKeywordLines:
    def test_format_keyword(self, resolver):
        outcome = format_keyword_line("25CL", _ctx(), None, resolver)
        assert isinstance(outcome, Continue)
        assert outcome.delta.format == Format.TWENTY_FIVE_CL
        assert outcome.delta.is_frozen is None

    def test_format_keyword_with_frozen_marker(self, resolver):
        outcome = format_keyword_line("5l surgelé", _ctx(), None, resolver)
        assert outcome.delta.format == Format.FIVE_LITRE
        assert outcome.delta.is_frozen is True

    def test_format_must_be_a_whole_token(self, resolver):
        assert isinstance(format_keyword_line("25cls", _ctx(), None, resolver), NoMatch)

    def test_format_keyword_declines_lines_with_numbers(self, resolver):
        assert isinstance(format_keyword_line("25cl 3 4", _ctx(), None, resolver), NoMatch)

    def test_frozen_and_fresh(self, resolver):
        assert frozen_keyword_line("Surgelés", _ctx(), None, resolver).delta.is_frozen is True
        assert frozen_keyword_line("frais", _ctx(), None, resolver).delta.is_frozen is False
        assert isinstance(frozen_keyword_line("fraise", _ctx(), None, resolver), NoMatch)
        assert frozen_keyword_line("(Frais)", _ctx(), None, resolver).delta.is_frozen is False
        assert isinstance(frozen_keyword_line("surg", _ctx(), None, resolver), NoMatch)


class TestQuantityProductLine:
    def test_uses_context_format_and_frozen(self, resolver):
        ctx = _ctx(current_format=Format.TWENTY_FIVE_CL, is_frozen=True)
        outcome = quantity_product_line("2 mj", ctx, None, resolver)
        assert [(i.product_id, i.quantity) for i in outcome.delta.items] == [("M25CLS", 2)]
        assert outcome.delta.format is None

    def test_format_override_applies_to_item_only(self, resolver):
        outcome = quantity_product_line("3 f 5l", _ctx(), None, resolver)
        assert outcome.delta.items[0].product_id == "F5L"
        assert outcome.delta.format is None

    def test_third_token_must_be_a_format(self, resolver):
        assert isinstance(quantity_product_line("2 f xyz", _ctx(), None, resolver), NoMatch)

    def test_unknown_family(self, resolver):
        assert isinstance(quantity_product_line("2 4", _ctx(), None, resolver), NoMatch)

    def test_zero_quantity_matches_without_item(self, resolver):
        outcome = quantity_product_line("0 red", _ctx(), None, resolver)
        assert isinstance(outcome, Continue)
        assert outcome.delta.is_empty

    def test_oversized_quantity_matches_without_item(self, resolver):
        outcome = quantity_product_line("99999999999999999999 mj", _ctx(), None, resolver)
        assert isinstance(outcome, Continue)
        assert outcome.delta.is_empty

    def test_line_item_rejects_oversized_quantity(self):
        with pytest.raises(ValidationError):
            LineItem(product_id="M1L", quantity=MAX_ITEM_QUANTITY + 1)


class TestNumericBlockLine:
    def test_single_line(self, resolver):
        outcome = numeric_block_line("3 4", _ctx(), None, resolver)
        assert isinstance(outcome, Continue)
        assert [i.product_id for i in outcome.delta.items] == ["C1L", "M1L"]

    def test_double_line_lookahead(self, resolver):
        outcome = numeric_block_line("3 4", _ctx(), "1 2", resolver)
        assert isinstance(outcome, ConsumesNextLine)
        assert [i.product_id for i in outcome.delta.items] == ["C1L", "M1L", "C25CL", "M25CL"]

    def test_double_line_ignores_context_format(self, resolver):
        ctx = _ctx(current_format=Format.THREE_LITRE)
        outcome = numeric_block_line("1", ctx, "1", resolver)
        assert [i.product_id for i in outcome.delta.items] == ["C1L", "C25CL"]

    def test_no_lookahead_at_five_litres(self, resolver):
        ctx = _ctx(current_format=Format.FIVE_LITRE)
        outcome = numeric_block_line("2 6", ctx, "1 3", resolver)
        assert isinstance(outcome, Continue)

    def test_next_line_must_be_pure_numeric(self, resolver):
        assert isinstance(numeric_block_line("3 4", _ctx(), "2 f", resolver), Continue)
        assert isinstance(numeric_block_line("3 4", _ctx(), "1 1 1 1 1 mg", resolver), Continue)


def test_rule_precedence(resolver):
    assert [rule.__name__ for rule in LINE_RULES] == [
        "client_line",
        "new_order_line",
        "return_line",
        "format_keyword_line",
        "frozen_keyword_line",
        "quantity_product_line",
        "numeric_block_line",
    ]
    # "2 f" is a quantity line, not a two-column block
    outcome = match_line("2 f", _ctx(), None, resolver)
    assert [i.product_id for i in outcome.delta.items] == ["F1L"]


def test_match_line_no_rule(resolver):
    assert isinstance(match_line("bonjour", _ctx(), None, resolver), NoMatch)
