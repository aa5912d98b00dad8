"""
Registrar Backend: In-Memory Document Store
============================================

What:  Dict-backed DocumentStore used by the test suite and STORE_BACKEND=memory.
How:   Each collection keeps an insertion-ordered dict of id → document.
       No method awaits between reading and writing a document, so on a
       single event loop every call is atomic per document, which is exactly
       the guarantee a document database gives.

Copies:
    Documents are deep-copied on the way in and on the way out. A caller that
    mutates a returned dict therefore cannot change stored state behind the
    store's back.
"""

import copy
import logging
import uuid
from datetime import datetime, timezone
from typing import Dict, List, Optional, Sequence

from registrar.exceptions import ConflictError
from registrar.store.base import DocumentCollection, DocumentStore
from registrar.store.query import Document, Predicate, Update, matches

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


class InMemoryCollection(DocumentCollection):
    """
    A single collection with optional unique fields.

    Args:
        name: Collection name ("students", "courses")
        unique_fields: Fields whose values must be distinct across documents
    """

    def __init__(self, name: str, unique_fields: Sequence[str] = ()):
        self.name = name
        self.unique_fields = tuple(unique_fields)
        self._documents: Dict[str, Document] = {}

    def __len__(self) -> int:
        return len(self._documents)

    def _check_unique(self, candidate: Document, exclude_id: Optional[str] = None) -> None:
        for field_name in self.unique_fields:
            value = candidate.get(field_name)
            if value is None:
                continue
            for doc_id, existing in self._documents.items():
                if doc_id != exclude_id and existing.get(field_name) == value:
                    raise ConflictError(
                        message=(
                            f"A document in '{self.name}' already has "
                            f"{field_name} '{value}'"
                        ),
                        field=field_name,
                        context={"collection": self.name, "value": value},
                    )

    async def find_by_id(self, document_id: str) -> Optional[Document]:
        document = self._documents.get(document_id)
        return copy.deepcopy(document) if document is not None else None

    async def find_where(self, predicate: Optional[Predicate] = None) -> List[Document]:
        return [
            copy.deepcopy(document)
            for document in self._documents.values()
            if matches(predicate, document)
        ]

    async def insert(self, document: Document) -> Document:
        stored = copy.deepcopy(document)
        stored.setdefault("id", uuid.uuid4().hex)
        if stored["id"] in self._documents:
            raise ConflictError(
                message=f"A document in '{self.name}' already has id '{stored['id']}'",
                field="id",
            )
        self._check_unique(stored)
        now = _now()
        stored["created_at"] = now
        stored["updated_at"] = now
        self._documents[stored["id"]] = stored
        return copy.deepcopy(stored)

    async def update_by_id(self, document_id: str, update: Update) -> Optional[Document]:
        current = self._documents.get(document_id)
        if current is None:
            return None
        updated = update.apply(current)
        updated["id"] = document_id  # ids are immutable
        if update.set_fields:
            self._check_unique(updated, exclude_id=document_id)
        updated["updated_at"] = _now()
        self._documents[document_id] = updated
        return copy.deepcopy(updated)

    async def delete_by_id(self, document_id: str) -> bool:
        return self._documents.pop(document_id, None) is not None

    async def update_many(self, predicate: Optional[Predicate], update: Update) -> int:
        targets = [
            doc_id for doc_id, document in self._documents.items()
            if matches(predicate, document)
        ]
        for doc_id in targets:
            await self.update_by_id(doc_id, update)
        return len(targets)


class InMemoryDocumentStore(DocumentStore):
    """Students and courses held in process memory."""

    def __init__(self) -> None:
        self.students = InMemoryCollection("students", unique_fields=("student_code",))
        self.courses = InMemoryCollection("courses", unique_fields=("name",))

    async def ping(self) -> bool:
        return True
