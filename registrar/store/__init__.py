"""
Registrar Backend: Document Store Package
==========================================

What:  The persistence abstraction the services are written against, its two
       implementations, and the FastAPI dependency that picks one.

    base.py    DocumentCollection / DocumentStore interfaces
    query.py   Predicates (Eq, Contains, Matches, In) and Update
    memory.py  InMemoryDocumentStore
    sql.py     SqlDocumentStore (async SQLAlchemy)
"""

from typing import Optional

from registrar.config import settings
from registrar.store.base import DocumentCollection, DocumentStore
from registrar.store.memory import InMemoryDocumentStore
from registrar.store.query import Contains, Eq, In, Matches, Update

__all__ = [
    "Contains",
    "DocumentCollection",
    "DocumentStore",
    "Eq",
    "In",
    "InMemoryDocumentStore",
    "Matches",
    "Update",
    "get_document_store",
]

# Process-wide instance for STORE_BACKEND=memory
_memory_store: Optional[InMemoryDocumentStore] = None


def get_document_store() -> DocumentStore:
    """
    FastAPI dependency returning the configured DocumentStore.

    Tests replace it through `app.dependency_overrides[get_document_store]`.
    """
    global _memory_store
    if settings.store_backend == "memory":
        if _memory_store is None:
            _memory_store = InMemoryDocumentStore()
        return _memory_store

    # Imported lazily so the memory backend never touches the SQL engine
    from registrar.database import async_session_factory
    from registrar.store.sql import SqlDocumentStore

    return SqlDocumentStore(async_session_factory)
