"""
Parse Context and Order Assembly.

ParseContext is the state carried from line to line while a message is
parsed: the open order's client, the active format and frozen flag, and the
items collected so far. OrderAssembler owns one context for one parse and
applies rule outcomes to it:

- OpensNewOrder closes the open order before switching clients
- Continue / ConsumesNextLine apply a ContextDelta
- the text trailing a client name is re-fed through the suffix rules

An order is emitted only when it has both a client and at least one item.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

from .. import config
from .constants import FALLBACK_FORMAT, Format, OrderType, is_keyword_token
from .outcomes import (
    ConsumesNextLine,
    ContextDelta,
    Continue,
    NoMatch,
    OpensNewOrder,
    RuleOutcome,
)
from .resolver import AbbreviationResolver
from .rules import SUFFIX_RULES, match_line
from .schemas import Client, LineItem, ParsedOrder

logger = logging.getLogger(__name__)


@dataclass
class ParseContext:
    current_client: Optional[Client] = None
    current_format: Format = FALLBACK_FORMAT
    is_frozen: bool = False
    is_return: bool = False
    items: list[LineItem] = field(default_factory=list)


class OrderAssembler:
    """Accumulates orders for a single message. Not reusable across parses."""

    def __init__(self, resolver: AbbreviationResolver, suffix_max_passes: Optional[int] = None):
        self._resolver = resolver
        self._suffix_max_passes = (
            config.SUFFIX_MAX_PASSES if suffix_max_passes is None else suffix_max_passes
        )
        self.context = ParseContext()
        self._orders: list[ParsedOrder] = []

    @property
    def orders(self) -> list[ParsedOrder]:
        return list(self._orders)

    def apply(self, outcome: RuleOutcome) -> bool:
        """
        Apply one rule outcome.

        Returns True when the caller must skip the next line.
        """
        if isinstance(outcome, NoMatch):
            return False
        if isinstance(outcome, Continue):
            self._apply_delta(outcome.delta)
            return False
        if isinstance(outcome, ConsumesNextLine):
            self._apply_delta(outcome.delta)
            return True
        if isinstance(outcome, OpensNewOrder):
            self._open_order(outcome)
            return False
        raise TypeError(f"Unknown rule outcome: {outcome!r}")

    def _apply_delta(self, delta: ContextDelta) -> None:
        if delta.format is not None:
            self.context.current_format = delta.format
        if delta.is_frozen is not None:
            self.context.is_frozen = delta.is_frozen
        self.context.items.extend(delta.items)

    def _open_order(self, outcome: OpensNewOrder) -> None:
        self.flush()
        self.context.current_client = outcome.client
        self.context.current_format = outcome.format
        self.context.is_frozen = False
        self.context.is_return = outcome.is_return
        if outcome.suffix:
            self.apply_suffix(outcome.suffix)

    def apply_suffix(self, suffix: str) -> None:
        """
        Re-parse the text after a client name within the new order.

        Each pass consumes either one leading keyword token (format, frozen,
        fresh) or the whole remainder as a quantity line or numeric block.
        Unrecognized text ends the loop. There is no lookahead here.
        """
        remainder = suffix.split()
        for _ in range(self._suffix_max_passes):
            if not remainder:
                return

            if is_keyword_token(remainder[0]):
                text, rest = remainder[0], remainder[1:]
            else:
                text, rest = " ".join(remainder), []

            outcome = match_line(text, self.context, None, self._resolver, SUFFIX_RULES)
            if isinstance(outcome, NoMatch):
                logger.debug("Unparsed client suffix: %r", " ".join(remainder))
                return
            self.apply(outcome)
            remainder = rest

        if remainder:
            logger.debug("Client suffix pass limit reached, dropped: %r", " ".join(remainder))

    def flush(self) -> None:
        """Close the open order. Items without a client are discarded."""
        ctx = self.context
        if ctx.current_client is not None and ctx.items:
            order = ParsedOrder(
                client=ctx.current_client,
                items=list(ctx.items),
                type=OrderType.RETURN if ctx.is_return else OrderType.DELIVERY,
            )
            self._orders.append(order)
            logger.info(
                "Closed %s order for %s (%d items)",
                order.type.value, order.client.id, len(order.items),
            )
        elif ctx.items:
            logger.debug("Discarding %d item(s) with no client", len(ctx.items))
        ctx.items = []

    def finish(self) -> list[ParsedOrder]:
        self.flush()
        return self.orders
