"""
Line Rules.

Each rule looks at one message line (plus the line after it, for lookahead)
and the current parse context, and returns a RuleOutcome. Rules never mutate
the context; the OrderAssembler applies what they return.

Line rules are tried in precedence order and the first rule that does not
return NoMatch wins:

    1. client name (optionally followed by a suffix)  "aziz 25cl 3 4"
    2. explicit new order                             "+ aziz"
    3. return                                         "retour aziz"
    4. format keyword                                 "25cl", "5l surgelé"
    5. frozen / fresh keyword                         "surgelé", "frais"
    6. quantity + product abbreviation                "2 mj", "2 f 1l"
    7. numeric block                                  "3 4 5 2"

Suffix rules are the subset re-applied to the text trailing a client name.
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING, Callable, Optional, Sequence

from .constants import (
    FALLBACK_FORMAT,
    Format,
    NEW_ORDER_MARKER,
    RETURN_KEYWORD,
    build_product_id,
    format_from_default,
    is_fresh_marker,
    is_frozen_marker,
    is_integer_token,
    is_keyword_token,
    normalize_token,
    parse_format_token,
)
from .numeric import (
    interpret_double_line,
    interpret_line,
    is_accepted_quantity,
    is_pure_numeric_block,
    split_numeric_block,
)
from .outcomes import (
    ConsumesNextLine,
    Continue,
    ContextDelta,
    NO_MATCH,
    NoMatch,
    OpensNewOrder,
    RuleOutcome,
)
from .resolver import AbbreviationResolver
from .schemas import Client, LineItem

if TYPE_CHECKING:
    from .context import ParseContext

logger = logging.getLogger(__name__)

Rule = Callable[
    [str, "ParseContext", Optional[str], AbbreviationResolver], RuleOutcome
]

# "<qty> <abbr>" or "<qty> <abbr> <format>"
_QUANTITY_PRODUCT = re.compile(r"(\d+)\s+(\S+)(?:\s+(\S+))?", re.ASCII)


def _has_integer_token(tokens: Sequence[str]) -> bool:
    return any(is_integer_token(t) for t in tokens)


def _opening_format(client: Optional[Client]) -> Format:
    if client is None:
        return FALLBACK_FORMAT
    return format_from_default(client.default_format)


def _longest_client_prefix(
    tokens: list[str], resolver: AbbreviationResolver
) -> Optional[tuple[Client, str]]:
    """
    Find the longest leading run of tokens naming a client.

    Candidates stop before the first integer token, so a misspelled name
    never absorbs a quantity. All prefix lengths are tried exactly before
    any is tried fuzzily, so an exact short name beats a fuzzy long one.
    """
    name_length = next(
        (i for i, token in enumerate(tokens) if is_integer_token(token)), len(tokens)
    )
    for allow_fuzzy in (False, True):
        for length in range(name_length, 0, -1):
            candidate = " ".join(tokens[:length])
            client = resolver.resolve_client(candidate, allow_fuzzy=allow_fuzzy)
            if client is not None:
                return client, " ".join(tokens[length:])
    return None


# =============================================================================
# Line Rules
# =============================================================================

def client_line(line, context, next_line, resolver) -> RuleOutcome:
    """A line starting with a client name opens a new order for that client."""
    tokens = line.split()
    if not tokens or line.startswith(NEW_ORDER_MARKER):
        return NO_MATCH
    if normalize_token(tokens[0]).startswith(RETURN_KEYWORD):
        return NO_MATCH
    # Quantity lines and keyword lines are never client names, however close
    if is_integer_token(tokens[0]) or all(is_keyword_token(t) for t in tokens):
        return NO_MATCH

    match = _longest_client_prefix(tokens, resolver)
    if match is None:
        return NO_MATCH

    client, suffix = match
    return OpensNewOrder(client=client, format=_opening_format(client), suffix=suffix)


def new_order_line(line, context, next_line, resolver) -> RuleOutcome:
    """"+ <client>" explicitly opens a new order."""
    if not line.startswith(NEW_ORDER_MARKER):
        return NO_MATCH
    name = line[len(NEW_ORDER_MARKER):].strip()
    if not name:
        return NO_MATCH

    client = resolver.resolve_client(name)
    if client is None:
        return NO_MATCH
    return OpensNewOrder(client=client, format=_opening_format(client))


def return_line(line, context, next_line, resolver) -> RuleOutcome:
    """
    "retour [client]" opens a return order.

    Without a resolvable client name the return is for the current client.
    """
    if not normalize_token(line).startswith(RETURN_KEYWORD):
        return NO_MATCH

    client = context.current_client
    tokens = line.split()
    trailing = " ".join(tokens[1:])
    if trailing:
        named = resolver.resolve_client(trailing)
        if named is not None:
            client = named

    return OpensNewOrder(client=client, format=_opening_format(client), is_return=True)


def format_keyword_line(line, context, next_line, resolver) -> RuleOutcome:
    """A keyword-only line naming a format; a frozen/fresh marker may ride along."""
    tokens = line.split()
    if not tokens or _has_integer_token(tokens):
        return NO_MATCH

    fmt = None
    is_frozen = None
    for token in tokens:
        parsed = parse_format_token(token)
        if parsed is not None:
            fmt = parsed
        elif is_frozen_marker(token):
            is_frozen = True
        elif is_fresh_marker(token):
            is_frozen = False

    if fmt is None:
        return NO_MATCH
    return Continue(ContextDelta(format=fmt, is_frozen=is_frozen))


def frozen_keyword_line(line, context, next_line, resolver) -> RuleOutcome:
    tokens = line.split()
    if not tokens or _has_integer_token(tokens):
        return NO_MATCH
    if is_frozen_marker(line):
        return Continue(ContextDelta(is_frozen=True))
    if any(is_fresh_marker(t) for t in tokens):
        return Continue(ContextDelta(is_frozen=False))
    return NO_MATCH


def quantity_product_line(line, context, next_line, resolver) -> RuleOutcome:
    """
    "<qty> <abbr> [format]": one item of a named family.

    A format token here applies to this item only; the context keeps its
    format.
    """
    match = _QUANTITY_PRODUCT.fullmatch(line)
    if match is None:
        return NO_MATCH

    quantity_text, abbreviation, format_text = match.groups()
    family_code = resolver.resolve_family(abbreviation)
    if family_code is None:
        return NO_MATCH

    fmt = context.current_format
    if format_text is not None:
        fmt = parse_format_token(format_text)
        if fmt is None:
            return NO_MATCH

    quantity = int(quantity_text)
    if not is_accepted_quantity(quantity):
        return Continue(ContextDelta())

    item = LineItem(
        product_id=build_product_id(family_code, fmt, context.is_frozen),
        quantity=quantity,
    )
    return Continue(ContextDelta(items=(item,)))


def numeric_block_line(line, context, next_line, resolver) -> RuleOutcome:
    """
    Positional quantities in the current format.

    Outside 5L, a numeric line followed by a pure numeric line is a
    double-line block: 1L on the first line, 25CL on the second.
    """
    if split_numeric_block(line) is None:
        return NO_MATCH

    if (
        context.current_format != Format.FIVE_LITRE
        and next_line is not None
        and is_pure_numeric_block(next_line)
    ):
        items = interpret_double_line(line, next_line, context.is_frozen, resolver)
        return ConsumesNextLine(ContextDelta(items=tuple(items)))

    items = interpret_line(line, context.current_format, context.is_frozen, resolver)
    return Continue(ContextDelta(items=tuple(items)))


LINE_RULES: tuple[Rule, ...] = (
    client_line,
    new_order_line,
    return_line,
    format_keyword_line,
    frozen_keyword_line,
    quantity_product_line,
    numeric_block_line,
)

SUFFIX_RULES: tuple[Rule, ...] = (
    format_keyword_line,
    frozen_keyword_line,
    quantity_product_line,
    numeric_block_line,
)


def match_line(
    line: str,
    context: "ParseContext",
    next_line: Optional[str],
    resolver: AbbreviationResolver,
    rules: Sequence[Rule] = LINE_RULES,
) -> RuleOutcome:
    """First non-NoMatch outcome among rules, or NO_MATCH."""
    for rule in rules:
        outcome = rule(line, context, next_line, resolver)
        if not isinstance(outcome, NoMatch):
            logger.debug("Line %r matched %s", line, rule.__name__)
            return outcome
    return NO_MATCH
