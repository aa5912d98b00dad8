"""
Registrar Backend: Abstract Document Store Interface
=====================================================

What:  Defines the contract every persistence backend must implement.
Why:   The enrollment logic depends on six collection operations only. Coding
       against this interface keeps the services free of SQLAlchemy and lets
       tests inject an in-memory store.
How:   Abstract base classes using Python's ABC module.

Implementations:
    - InMemoryDocumentStore (store/memory.py): dicts guarded by nothing but
      the event loop; each call is atomic per document.
    - SqlDocumentStore (store/sql.py): async SQLAlchemy, one short
      transaction per call. Row locks on PostgreSQL; on SQLite the engine
      must go through database.configure_sqlite_engine() (BEGIN IMMEDIATE).

Guarantees every implementation provides:
    - Per-document atomicity of update_by_id / update_many: concurrent
      add_to_set / pull calls on one document never lose each other's write.
    - Predicates select the same documents on every backend.
    - insert() assigns `id`, `created_at`, `updated_at` and raises
      ConflictError on a uniqueness violation.
    - Returned documents are detached copies; mutating them never writes.
    - No multi-document transactions. Callers order their writes.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from registrar.store.query import Document, Predicate, Update


class DocumentCollection(ABC):
    """One named collection of documents (students or courses)."""

    #: Collection name, used in log lines and error messages
    name: str = "documents"

    @abstractmethod
    async def find_by_id(self, document_id: str) -> Optional[Document]:
        """Return the document with this id, or None."""
        ...

    @abstractmethod
    async def find_where(self, predicate: Optional[Predicate] = None) -> List[Document]:
        """Return every document matching `predicate` in creation order."""
        ...

    @abstractmethod
    async def insert(self, document: Document) -> Document:
        """
        Store a new document and return it as persisted.

        Raises:
            ConflictError: A unique field collides with an existing document.
        """
        ...

    @abstractmethod
    async def update_by_id(self, document_id: str, update: Update) -> Optional[Document]:
        """Apply `update` to one document and return it, or None if absent."""
        ...

    @abstractmethod
    async def delete_by_id(self, document_id: str) -> bool:
        """Remove one document; True if something was deleted."""
        ...

    @abstractmethod
    async def update_many(self, predicate: Optional[Predicate], update: Update) -> int:
        """Apply `update` to every matching document; return how many changed."""
        ...


class DocumentStore(ABC):
    """The pair of collections the registrar works with."""

    students: DocumentCollection
    courses: DocumentCollection

    @abstractmethod
    async def ping(self) -> bool:
        """
        Lightweight connectivity check for /health.

        Returns True when the backend can serve queries. Implementations
        should not raise.
        """
        ...
