"""
Abbreviation Resolver.

Resolves free text typed by drivers to clients and juice families:

- Clients: exact lookup in the abbreviation table, then a Levenshtein
  fuzzy lookup (closest key wins, accepted within FUZZY_MATCH_MAX_DISTANCE).
  The hit is joined with the full client record when one exists.
- Families: exact lookup after lower-casing and stripping diacritics.
  Families are never fuzzy matched; one-letter abbreviations ("c", "m", "f")
  are all within distance 1 of each other.

Fuzzy ties are broken by the order of the abbreviation table. That order is
incidental, so two clients at equal distance from an input resolve to
whichever abbreviation was loaded first.
"""

import logging

from rapidfuzz.distance import Levenshtein

from .. import config
from .constants import normalize_client_key, normalize_token
from .schemas import Client, ClientIdentity, Directory

logger = logging.getLogger(__name__)


class AbbreviationResolver:
    """Stateless lookups over a Directory snapshot."""

    def __init__(self, directory: Directory, max_distance: int | None = None):
        self._directory = directory
        self._max_distance = (
            config.FUZZY_MATCH_MAX_DISTANCE if max_distance is None else max_distance
        )

    @property
    def directory(self) -> Directory:
        return self._directory

    @property
    def max_distance(self) -> int:
        return self._max_distance

    def find_client(self, text: str) -> ClientIdentity | None:
        """Exact abbreviation lookup."""
        return self._directory.client_abbreviations.get(normalize_client_key(text))

    def fuzzy_find_client(self, text: str) -> ClientIdentity | None:
        """
        Closest abbreviation by edit distance, if within the threshold.

        Scans the whole table; on equal distance the first key in table
        order is kept.
        """
        candidate = normalize_client_key(text)
        if not candidate:
            return None

        best_key = None
        best_distance = None
        for key in self._directory.client_abbreviations:
            distance = Levenshtein.distance(candidate, key)
            if best_distance is None or distance < best_distance:
                best_key = key
                best_distance = distance
                if distance == 0:
                    break

        if best_key is None or best_distance > self._max_distance:
            return None

        logger.debug("Fuzzy candidate %r -> %r", candidate, best_key)
        logger.info("Fuzzy client match: '%s' (distance=%d)", best_key, best_distance)
        return self._directory.client_abbreviations[best_key]

    def resolve_client(self, text: str, allow_fuzzy: bool = True) -> Client | None:
        """
        Resolve text to a full client: exact, then fuzzy, then join.

        Falls back to a partial client (id and abbreviation name only) when
        the directory has no full record for the matched id.
        """
        identity = self.find_client(text)
        if identity is None and allow_fuzzy:
            identity = self.fuzzy_find_client(text)
        if identity is None:
            return None
        return self._join(identity)

    def _join(self, identity: ClientIdentity) -> Client:
        record = self._directory.clients.get(identity.client_id)
        if record is None:
            logger.debug("No full client record for id '%s'", identity.client_id)
            return Client(id=identity.client_id, name=identity.name, is_partial=True)

        return Client(
            id=record.id,
            name=record.name,
            zone=record.zone,
            accounting_mode=record.accounting_mode,
            default_format=record.default_format or "1",
            abbreviation_name=identity.name,
        )

    def resolve_family(self, token: str | None) -> str | None:
        """Family code for a product abbreviation ("mj" -> "M"), or None."""
        if not token:
            return None
        family = self._directory.families.get(normalize_token(token))
        return family.family_code if family else None
