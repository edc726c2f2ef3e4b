"""
Parser Data Model.

Pydantic models for what the parser reads (clients, juice families) and
what it produces (line items, orders), plus the read-only Directory the
parser resolves abbreviations against.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Iterable, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field

from .. import config
from .constants import JUICE_FAMILIES, OrderType, normalize_client_key, normalize_token


class ClientIdentity(BaseModel):
    """What an abbreviation row knows about a client: its id and a raw name."""
    model_config = ConfigDict(frozen=True)

    client_id: str
    name: str


class Client(BaseModel):
    """
    A resolved client.

    Built from the full client record when one exists. When the abbreviation
    table references a client with no full record, only id and name are set
    and is_partial is True.
    """
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    zone: Optional[str] = None
    accounting_mode: Optional[str] = None
    default_format: Optional[str] = None
    abbreviation_name: Optional[str] = None
    is_partial: bool = False


class JuiceFamily(BaseModel):
    model_config = ConfigDict(frozen=True)

    family_code: str
    label: str


class LineItem(BaseModel):
    model_config = ConfigDict(frozen=True)

    product_id: str
    quantity: int = Field(gt=0, le=config.MAX_ITEM_QUANTITY)


class ParsedOrder(BaseModel):
    """An order closed by the parser. Never emitted without a client or items."""
    model_config = ConfigDict(frozen=True)

    client: Client
    items: list[LineItem] = Field(min_length=1)
    type: OrderType = OrderType.DELIVERY


def _default_families() -> Mapping[str, JuiceFamily]:
    return MappingProxyType({
        abbreviation: JuiceFamily(family_code=code, label=label)
        for abbreviation, (code, label) in JUICE_FAMILIES.items()
    })


@dataclass(frozen=True)
class Directory:
    """
    Read-only lookup tables for one or more parses.

    client_abbreviations keeps insertion order; that order is the table
    iteration order used to break fuzzy-match ties.
    """
    client_abbreviations: Mapping[str, ClientIdentity] = field(
        default_factory=lambda: MappingProxyType({})
    )
    clients: Mapping[str, Client] = field(default_factory=lambda: MappingProxyType({}))
    families: Mapping[str, JuiceFamily] = field(default_factory=_default_families)

    @classmethod
    def build(
        cls,
        abbreviations: Iterable[tuple[str, str, str]],
        clients: Iterable[Client] = (),
        families: Optional[Mapping[str, JuiceFamily]] = None,
    ) -> "Directory":
        """
        Build a directory from (abbreviation, client_id, client_name) rows.

        Rows are kept in the order given. A repeated abbreviation keeps its
        first position and takes the later row's client.
        """
        abbreviation_map: dict[str, ClientIdentity] = {}
        for abbreviation, client_id, client_name in abbreviations:
            key = normalize_client_key(abbreviation)
            if not key:
                continue
            abbreviation_map[key] = ClientIdentity(client_id=client_id, name=client_name)

        family_map = (
            {normalize_token(k): v for k, v in families.items()}
            if families is not None
            else dict(_default_families())
        )

        return cls(
            client_abbreviations=MappingProxyType(abbreviation_map),
            clients=MappingProxyType({c.id: c for c in clients}),
            families=MappingProxyType(family_map),
        )

    @property
    def is_empty(self) -> bool:
        return not self.client_abbreviations
