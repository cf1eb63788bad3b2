"""Key/blob persistence port for profile and usage state."""

import logging
from abc import ABC, abstractmethod
from typing import Dict, Optional

from sqlalchemy.exc import SQLAlchemyError

from property_scout.db.models import Blob
from property_scout.db.session import get_session_factory, init_db

logger = logging.getLogger(__name__)


class BlobStore(ABC):
    """Read and write text blobs by key."""

    @abstractmethod
    def read(self, key: str) -> Optional[str]:
        """Return the blob stored under key, or None if there is none."""
        pass

    @abstractmethod
    def write(self, key: str, value: str) -> None:
        """Store value under key, replacing any previous blob."""
        pass


class MemoryBlobStore(BlobStore):
    """Process-local store, used by tests and when persistence is not wanted."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._blobs: Dict[str, str] = dict(initial or {})

    def read(self, key: str) -> Optional[str]:
        return self._blobs.get(key)

    def write(self, key: str, value: str) -> None:
        self._blobs[key] = value


class SqlBlobStore(BlobStore):
    """Blob store backed by the ``blobs`` table."""

    def __init__(self, engine=None, create_tables: bool = True):
        """Initialize store.

        Args:
            engine: SQLAlchemy engine (default engine from settings if None)
            create_tables: Create the ``blobs`` table if it is missing
        """
        self._session_factory = get_session_factory(engine)
        if create_tables:
            init_db(engine)

    def read(self, key: str) -> Optional[str]:
        try:
            with self._session_factory() as session:
                blob = session.get(Blob, key)
                return blob.value if blob is not None else None
        except SQLAlchemyError as e:
            logger.error(f"Failed to read blob '{key}': {e}")
            return None

    def write(self, key: str, value: str) -> None:
        with self._session_factory() as session:
            try:
                blob = session.get(Blob, key)
                if blob is None:
                    session.add(Blob(key=key, value=value))
                else:
                    blob.value = value
                session.commit()
            except SQLAlchemyError:
                session.rollback()
                raise
