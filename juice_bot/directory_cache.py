"""
Directory Cache - Client Directory Loaded from the Database.

The parser resolves client abbreviations against an immutable Directory
snapshot. This module builds that snapshot from the clients and
client_abbreviations tables at server startup, and rebuilds it when an
admin asks for a refresh.

Features:
- Singleton cache shared by all requests
- Snapshot swap under a lock: a parse in flight keeps the snapshot it
  started with, and never sees a half-loaded table
- Abbreviations ordered by position, then id; this order breaks fuzzy
  match ties
- Optional fail-fast on load errors (startup), otherwise the previous
  snapshot is kept

Usage:
    from juice_bot.directory_cache import directory_cache

    directory_cache.load_from_db(db, fail_on_error=False)
    orders = parse_message(text, directory_cache.get_directory())
"""

import logging
import threading
from datetime import datetime
from typing import Any

from sqlalchemy.orm import Session

from .parsing.schemas import Client, Directory

logger = logging.getLogger(__name__)


class DirectoryCache:
    """Singleton holder for the current Directory snapshot."""

    _instance = None
    _lock = threading.Lock()

    def __new__(cls):
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super().__new__(cls)
                    cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        if self._initialized:
            return

        self._directory: Directory = Directory()
        self._last_refresh: datetime | None = None
        self._is_loaded: bool = False
        self._refresh_lock = threading.Lock()

        self._initialized = True

    @property
    def is_loaded(self) -> bool:
        """Check if the directory has been loaded from the database."""
        return self._is_loaded

    @property
    def last_refresh(self) -> datetime | None:
        return self._last_refresh

    def get_directory(self) -> Directory:
        """Current snapshot; an empty Directory before the first load."""
        return self._directory

    def load_from_db(self, db: Session, fail_on_error: bool = True) -> None:
        """
        Load clients and abbreviations and swap in a new snapshot.

        Args:
            db: SQLAlchemy database session
            fail_on_error: If True, raise on DB errors (for startup).
                          If False, log and keep the existing snapshot.

        Raises:
            RuntimeError: If fail_on_error=True and the load fails
        """
        with self._refresh_lock:
            try:
                logger.info("Loading client directory from database...")
                directory = self._build_directory(db)

                self._directory = directory
                self._last_refresh = datetime.now()
                self._is_loaded = True

                logger.info(
                    "Client directory loaded: %d abbreviations, %d clients",
                    len(directory.client_abbreviations),
                    len(directory.clients),
                )

            except Exception as e:
                logger.error("Failed to load client directory: %s", e)
                if fail_on_error:
                    raise RuntimeError(f"Failed to load client directory: {e}") from e

    def _build_directory(self, db: Session) -> Directory:
        from .models import Client as ClientRecord, ClientAbbreviation

        rows = (
            db.query(ClientAbbreviation)
            .order_by(ClientAbbreviation.position, ClientAbbreviation.id)
            .all()
        )
        clients = [
            Client(
                id=record.id,
                name=record.name,
                zone=record.zone,
                accounting_mode=record.accounting_mode,
                default_format=record.default_format,
            )
            for record in db.query(ClientRecord).all()
        ]
        return Directory.build(
            ((row.abbreviation, row.client_id, row.client_name) for row in rows),
            clients=clients,
        )

    def clear(self) -> None:
        """Drop the snapshot (used by tests)."""
        with self._refresh_lock:
            self._directory = Directory()
            self._last_refresh = None
            self._is_loaded = False

    def get_status(self) -> dict[str, Any]:
        """Get cache status information."""
        directory = self._directory
        return {
            "is_loaded": self._is_loaded,
            "last_refresh": self._last_refresh.isoformat() if self._last_refresh else None,
            "counts": {
                "abbreviations": len(directory.client_abbreviations),
                "clients": len(directory.clients),
                "families": len(directory.families),
            },
        }


# Global singleton instance
directory_cache = DirectoryCache()
