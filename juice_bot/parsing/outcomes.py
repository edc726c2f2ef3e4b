"""
Rule Outcomes.

Every parsing rule returns exactly one of these. The order assembler
dispatches on the type, so adding an outcome means adding a branch there.

- NoMatch: the rule declines; the next rule is tried.
- Continue: apply the delta to the open order.
- OpensNewOrder: close the open order, open one for a (possibly new) client.
- ConsumesNextLine: apply the delta and skip the following line.
"""

from dataclasses import dataclass
from typing import Optional, Union

from .constants import Format
from .schemas import Client, LineItem


@dataclass(frozen=True)
class ContextDelta:
    """Changes to the parse context. None means unchanged."""
    format: Optional[Format] = None
    is_frozen: Optional[bool] = None
    items: tuple[LineItem, ...] = ()

    @property
    def is_empty(self) -> bool:
        return self.format is None and self.is_frozen is None and not self.items


@dataclass(frozen=True)
class NoMatch:
    pass


@dataclass(frozen=True)
class Continue:
    delta: ContextDelta


@dataclass(frozen=True)
class OpensNewOrder:
    client: Optional[Client]
    format: Format
    is_return: bool = False
    # Trailing text after a client name, re-parsed in the new order
    suffix: str = ""


@dataclass(frozen=True)
class ConsumesNextLine:
    delta: ContextDelta


RuleOutcome = Union[NoMatch, Continue, OpensNewOrder, ConsumesNextLine]

NO_MATCH = NoMatch()
