"""
Numeric Block Interpretation.

A numeric block is a line of whitespace-separated quantities, optionally
followed by one word naming the family of a fifth column:

    "3 4 5 2"       -> Citron, Mojito, Fraise, Red
    "3 4 5 2 1 mg"  -> ... plus 1 Mangue
    "2 6"  (at 5L)  -> Fraise, Citron

Columns are positional; which families they map to depends on the format.
"""

import logging
from typing import Optional

from .. import config
from .constants import (
    DEFAULT_FAMILY_ORDER,
    DOUBLE_LINE_FIRST_FORMAT,
    DOUBLE_LINE_SECOND_FORMAT,
    FALLBACK_FAMILY_CODE,
    FIVE_LITRE_FAMILY_ORDER,
    Format,
    build_product_id,
    is_integer_token,
)
from .resolver import AbbreviationResolver
from .schemas import LineItem

logger = logging.getLogger(__name__)


def split_numeric_block(line: str) -> Optional[tuple[list[int], Optional[str]]]:
    """
    Split a line into (quantities, trailing_word).

    Returns None when the line is not a numeric block: no integers, or a
    non-integer token anywhere but the last position.
    """
    tokens = line.split()
    trailing_word = None
    if tokens and not is_integer_token(tokens[-1]):
        trailing_word = tokens[-1]
        tokens = tokens[:-1]

    if not tokens or not all(is_integer_token(t) for t in tokens):
        return None
    return [int(t) for t in tokens], trailing_word


def is_numeric_block(line: str) -> bool:
    return split_numeric_block(line) is not None


def is_pure_numeric_block(line: str) -> bool:
    """Integers only, no trailing word."""
    parsed = split_numeric_block(line)
    return parsed is not None and parsed[1] is None


def is_accepted_quantity(quantity: int) -> bool:
    """Zero and implausibly large quantities are dropped, never errors."""
    if quantity > config.MAX_ITEM_QUANTITY:
        logger.debug("Dropping quantity %d above %d", quantity, config.MAX_ITEM_QUANTITY)
        return False
    return quantity > 0


def _items_for_columns(
    quantities: list[int],
    families: tuple[str, ...],
    fmt: Format,
    is_frozen: bool,
) -> list[LineItem]:
    return [
        LineItem(product_id=build_product_id(family, fmt, is_frozen), quantity=qty)
        for family, qty in zip(families, quantities)
        if is_accepted_quantity(qty)
    ]


def interpret_numeric_block(
    quantities: list[int],
    trailing_word: Optional[str],
    fmt: Format,
    is_frozen: bool,
    resolver: AbbreviationResolver,
) -> list[LineItem]:
    """Map a block's quantities to line items for the given format."""
    if fmt == Format.FIVE_LITRE and len(quantities) == len(FIVE_LITRE_FAMILY_ORDER):
        return _items_for_columns(quantities, FIVE_LITRE_FAMILY_ORDER, fmt, is_frozen)

    items = _items_for_columns(quantities, DEFAULT_FAMILY_ORDER, fmt, is_frozen)

    column_count = len(DEFAULT_FAMILY_ORDER)
    if len(quantities) > column_count:
        extra_qty = quantities[column_count]
        if is_accepted_quantity(extra_qty):
            family = resolver.resolve_family(trailing_word) or FALLBACK_FAMILY_CODE
            items.append(
                LineItem(product_id=build_product_id(family, fmt, is_frozen), quantity=extra_qty)
            )
        if len(quantities) > column_count + 1:
            logger.debug("Ignoring %d extra column(s)", len(quantities) - column_count - 1)

    return items


def interpret_line(
    line: str,
    fmt: Format,
    is_frozen: bool,
    resolver: AbbreviationResolver,
) -> list[LineItem]:
    """Interpret a whole line as a numeric block; [] if it is not one."""
    parsed = split_numeric_block(line)
    if parsed is None:
        return []
    quantities, trailing_word = parsed
    return interpret_numeric_block(quantities, trailing_word, fmt, is_frozen, resolver)


def interpret_double_line(
    line: str,
    next_line: str,
    is_frozen: bool,
    resolver: AbbreviationResolver,
) -> list[LineItem]:
    """Two stacked blocks: the first line in 1L, the second in 25CL."""
    return (
        interpret_line(line, DOUBLE_LINE_FIRST_FORMAT, is_frozen, resolver)
        + interpret_line(next_line, DOUBLE_LINE_SECOND_FORMAT, is_frozen, resolver)
    )
