"""
Parsing Package.

Deterministic parser for juice delivery messages typed by drivers.

Exports:
- Constants: formats, order types, family table, normalization helpers
- Schemas: Client, LineItem, ParsedOrder, Directory
- Resolver: client and family abbreviation lookups
- Engine: MessageParser and parse_message
"""

from .constants import (
    Format,
    OrderType,
    JUICE_FAMILIES,
    build_product_id,
    normalize_token,
    parse_format_token,
    strip_accents,
)

from .schemas import (
    Client,
    ClientIdentity,
    Directory,
    JuiceFamily,
    LineItem,
    ParsedOrder,
)

from .resolver import AbbreviationResolver

from .outcomes import (
    ConsumesNextLine,
    ContextDelta,
    Continue,
    NoMatch,
    OpensNewOrder,
    RuleOutcome,
)

from .context import OrderAssembler, ParseContext

from .engine import MessageParser, parse_message

__all__ = [
    # Constants
    "Format",
    "OrderType",
    "JUICE_FAMILIES",
    "build_product_id",
    "normalize_token",
    "parse_format_token",
    "strip_accents",
    # Schemas
    "Client",
    "ClientIdentity",
    "Directory",
    "JuiceFamily",
    "LineItem",
    "ParsedOrder",
    # Resolver
    "AbbreviationResolver",
    # Outcomes
    "ConsumesNextLine",
    "ContextDelta",
    "Continue",
    "NoMatch",
    "OpensNewOrder",
    "RuleOutcome",
    # Engine
    "OrderAssembler",
    "ParseContext",
    "MessageParser",
    "parse_message",
]
