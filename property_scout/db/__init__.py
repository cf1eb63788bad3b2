"""Database layer: blob model, session management and the persistence port."""
from property_scout.db.models import Base, Blob
from property_scout.db.session import (
    get_engine,
    get_session_factory,
    init_db,
    reset_engine,
)
from property_scout.db.store import BlobStore, MemoryBlobStore, SqlBlobStore

__all__ = [
    # Models
    "Base",
    "Blob",
    # Session management
    "get_engine",
    "get_session_factory",
    "init_db",
    "reset_engine",
    # Persistence port
    "BlobStore",
    "MemoryBlobStore",
    "SqlBlobStore",
]
