"""
Registrar Backend: Document Store Predicates and Updates
=========================================================

What:  Backend-neutral descriptions of "which documents" (predicates) and
       "what to change" (Update).
Why:   The services must not know whether a collection is a dict in memory or
       a SQL table. Each store implementation interprets these objects: the
       in-memory store calls `matches()` / `apply()`, the SQL store translates
       them into WHERE clauses.

Predicates:
    Eq(field, value)         field == value
    Contains(field, value)   list field holds value     (reference membership)
    Matches(field, text)     case-insensitive substring on a string field, or
                             on any element of a list-of-strings field
    In(field, values)        field value is one of values

Update operators:
    set_fields   replace whole fields
    add_to_set   set-union of a single value into a list field
    pull         remove every occurrence of a value from a list field

    add_to_set and pull are idempotent. Two concurrent enrollments of the same
    pair both issue an add_to_set and still leave exactly one reference.
"""

import copy
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Optional, Tuple, Union

Document = Dict[str, Any]


@dataclass(frozen=True)
class Eq:
    field: str
    value: Any

    def matches(self, document: Document) -> bool:
        return document.get(self.field) == self.value


@dataclass(frozen=True)
class Contains:
    field: str
    value: Any

    def matches(self, document: Document) -> bool:
        return self.value in (document.get(self.field) or [])


@dataclass(frozen=True)
class Matches:
    field: str
    text: str

    def matches(self, document: Document) -> bool:
        needle = self.text.lower()
        current = document.get(self.field)
        if current is None:
            return False
        if isinstance(current, str):
            return needle in current.lower()
        return any(needle in str(item).lower() for item in current)


@dataclass(frozen=True)
class In:
    field: str
    values: Tuple[Any, ...]

    @classmethod
    def of(cls, field_name: str, values: Iterable[Any]) -> "In":
        return cls(field_name, tuple(values))

    def matches(self, document: Document) -> bool:
        return document.get(self.field) in self.values


Predicate = Union[Eq, Contains, Matches, In]


def matches(predicate: Optional[Predicate], document: Document) -> bool:
    """None selects every document."""
    return predicate is None or predicate.matches(document)


@dataclass
class Update:
    """
    A partial update for a single document.

    Example:
        Update.add("course_refs", course_id)
        Update(set_fields={"email": "new@example.com"})
    """

    set_fields: Dict[str, Any] = field(default_factory=dict)
    add_to_set: Dict[str, Any] = field(default_factory=dict)
    pull: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def add(cls, field_name: str, value: Any) -> "Update":
        return cls(add_to_set={field_name: value})

    @classmethod
    def remove(cls, field_name: str, value: Any) -> "Update":
        return cls(pull={field_name: value})

    def is_empty(self) -> bool:
        return not (self.set_fields or self.add_to_set or self.pull)

    def touched_fields(self) -> set:
        return set(self.set_fields) | set(self.add_to_set) | set(self.pull)

    def apply(self, document: Document) -> Document:
        """
        Return a new document with this update applied.

        The input is never mutated. List fields are rebuilt rather than edited
        in place so ORM change tracking sees a new value.
        """
        updated = copy.deepcopy(document)
        for name, value in self.set_fields.items():
            updated[name] = copy.deepcopy(value)
        for name, value in self.add_to_set.items():
            current = list(updated.get(name) or [])
            if value not in current:
                current.append(value)
            updated[name] = current
        for name, value in self.pull.items():
            updated[name] = [item for item in (updated.get(name) or []) if item != value]
        return updated
