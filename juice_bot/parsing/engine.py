"""
Message Parser.

Turns a free-text delivery message into a list of orders. Lines are
trimmed and blank lines dropped; each remaining line is matched against
LINE_RULES and the outcome applied to a fresh OrderAssembler. A parse
holds no state beyond its own assembler, so the same MessageParser can be
shared between requests.

Example:
    aziz
    3 4 5 2
    25cl
    1 1
    + karim
    5l
    2 6

yields an order for aziz (1L and 25CL items) and one for karim (5L).
"""

import logging
from typing import Optional

from .. import config
from .context import OrderAssembler
from .outcomes import NoMatch
from .resolver import AbbreviationResolver
from .rules import LINE_RULES, match_line
from .schemas import Directory, ParsedOrder

logger = logging.getLogger(__name__)


def split_lines(message: Optional[str]) -> list[str]:
    if not message:
        return []
    return [line.strip() for line in message.splitlines() if line.strip()]


class MessageParser:
    """Parses messages against one Directory snapshot."""

    def __init__(
        self,
        directory: Directory,
        max_distance: Optional[int] = None,
        suffix_max_passes: Optional[int] = None,
    ):
        self._resolver = AbbreviationResolver(directory, max_distance=max_distance)
        self._suffix_max_passes = (
            config.SUFFIX_MAX_PASSES if suffix_max_passes is None else suffix_max_passes
        )

    @property
    def resolver(self) -> AbbreviationResolver:
        return self._resolver

    def parse(self, message: Optional[str]) -> list[ParsedOrder]:
        lines = split_lines(message)
        assembler = OrderAssembler(self._resolver, self._suffix_max_passes)

        index = 0
        while index < len(lines):
            line = lines[index]
            next_line = lines[index + 1] if index + 1 < len(lines) else None

            outcome = match_line(line, assembler.context, next_line, self._resolver, LINE_RULES)
            if isinstance(outcome, NoMatch):
                logger.debug("Skipping unrecognized line %d: %r", index + 1, line)
            elif assembler.apply(outcome):
                index += 1
            index += 1

        orders = assembler.finish()
        logger.info("Parsed %d line(s) into %d order(s)", len(lines), len(orders))
        return orders


def parse_message(message: Optional[str], directory: Directory) -> list[ParsedOrder]:
    """Parse one message with a throwaway MessageParser."""
    return MessageParser(directory).parse(message)
