"""
Parsing Constants and Normalization Helpers.

Static tables and small pure helpers shared by the message parser:
packaging formats, juice family abbreviations, positional column orders
for numeric blocks, line markers, and token normalization.
"""

import re
import unicodedata
from enum import Enum


# =============================================================================
# Formats and Order Types
# =============================================================================

class Format(str, Enum):
    """Packaging unit size. The value is the product id fragment."""
    ONE_LITRE = "1L"
    TWENTY_FIVE_CL = "25CL"
    FIVE_LITRE = "5L"
    THREE_LITRE = "3L"


class OrderType(str, Enum):
    DELIVERY = "delivery"
    RETURN = "return"


# Format tokens as typed in messages, after normalize_token()
FORMAT_TOKENS: dict[str, Format] = {
    "1l": Format.ONE_LITRE,
    "25cl": Format.TWENTY_FIVE_CL,
    "5l": Format.FIVE_LITRE,
    "3l": Format.THREE_LITRE,
}

# Client "DEFAULT" column -> format used when an order for that client opens
DEFAULT_FORMAT_CODES: dict[str, Format] = {
    "1": Format.ONE_LITRE,
    "25": Format.TWENTY_FIVE_CL,
    "5": Format.FIVE_LITRE,
    "3": Format.THREE_LITRE,
}

FALLBACK_FORMAT = Format.ONE_LITRE

# Double-line blocks: first line is 1L, second line is 25CL
DOUBLE_LINE_FIRST_FORMAT = Format.ONE_LITRE
DOUBLE_LINE_SECOND_FORMAT = Format.TWENTY_FIVE_CL


# =============================================================================
# Juice Families
# =============================================================================

# abbreviation -> (family code, label)
JUICE_FAMILIES: dict[str, tuple[str, str]] = {
    "mj": ("M", "Mojito"),
    "m": ("M", "Mojito"),
    "f": ("F", "Fraise"),
    "fr": ("F", "Fraise"),
    "red": ("R", "Red Citrus"),
    "c": ("C", "Citron"),
    "cl": ("CL", "Cool"),
    "mg": ("MG", "Mangue"),
    "as": ("AS", "Ananas"),
    "kw": ("KW", "Kiwi"),
    "y": ("Y", "Youppi"),
    "ss": ("SS", "Sunshine"),
    "pl": ("PL", "Peach Love"),
    "gw": ("GW", "Green Wave"),
}

# Column order of a numeric block for 1L / 25CL / 3L
DEFAULT_FAMILY_ORDER: tuple[str, ...] = ("C", "M", "F", "R")

# 5L blocks carry exactly two columns, strawberry first
FIVE_LITRE_FAMILY_ORDER: tuple[str, ...] = ("F", "C")

# Fifth column with no recognizable trailing word
FALLBACK_FAMILY_CODE = "CL"

FROZEN_SUFFIX = "S"


# =============================================================================
# Line Markers
# =============================================================================

RETURN_KEYWORD = "retour"
NEW_ORDER_MARKER = "+"
# Substring after accent stripping: "surgelé", "Surgelés", "surgele"
FROZEN_MARKER = "surgel"
FRESH_MARKER = "frais"


# =============================================================================
# Normalization Utilities
# =============================================================================

_INTEGER_TOKEN = re.compile(r"\d+", re.ASCII)
_TOKEN_PUNCTUATION = re.compile(r"^\W+|\W+$")


def strip_accents(s: str) -> str:
    """Remove diacritics: "Surgelé" -> "Surgele"."""
    decomposed = unicodedata.normalize("NFD", s)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def normalize_token(s: str) -> str:
    """Lower-case, trim and strip diacritics."""
    return strip_accents(s.strip().lower())


def normalize_client_key(s: str) -> str:
    """Key used for client abbreviation lookups: trimmed, lower-cased, single-spaced."""
    return " ".join(s.lower().split())


def is_integer_token(token: str) -> bool:
    return bool(_INTEGER_TOKEN.fullmatch(token))


def parse_format_token(token: str) -> Format | None:
    """Map a typed format token ("25cl", "5L") to a Format, or None."""
    return FORMAT_TOKENS.get(normalize_token(token))


def format_from_default(code: str | None) -> Format:
    """Map a client's default format code ("1", "25", "5", "3") to a Format."""
    if code is None:
        return FALLBACK_FORMAT
    return DEFAULT_FORMAT_CODES.get(str(code).strip(), FALLBACK_FORMAT)


def is_frozen_marker(token: str) -> bool:
    return FROZEN_MARKER in normalize_token(token)


def is_fresh_marker(token: str) -> bool:
    """Whole token, ignoring surrounding punctuation: "frais", "Frais,", "(frais)"."""
    return _TOKEN_PUNCTUATION.sub("", normalize_token(token)) == FRESH_MARKER


def is_keyword_token(token: str) -> bool:
    """True for format, frozen and fresh tokens."""
    return (
        parse_format_token(token) is not None
        or is_frozen_marker(token)
        or is_fresh_marker(token)
    )


def build_product_id(family_code: str, fmt: Format, is_frozen: bool) -> str:
    """Compose a product id: "C" + "1L" (+ "S" when frozen) -> "C1LS"."""
    product_id = family_code + fmt.value.upper()
    if is_frozen:
        product_id += FROZEN_SUFFIX
    return product_id
