"""
Registrar Backend: Student SQLAlchemy Model
============================================

What:  ORM model for the `students` table used by SqlDocumentStore.
How:   Scalar fields are ordinary columns. Ordered lists and nested records
       (addresses, parents, course_refs) are JSON columns, so a row maps 1:1
       onto a student document.

Table Design Rationale:
    - id: opaque 32-char hex string generated in Python (uuid4().hex), so the
      same ids work for both store backends and in URLs
    - student_code: UNIQUE; a duplicate insert raises IntegrityError, which
      the store turns into ConflictError
    - course_refs: JSON array of course ids, treated as a set by the
      enrollment logic. There is no foreign key: the two sides
      of an enrollment are reconciled by the service, not by the database.
"""

import uuid
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import JSON, Date, DateTime, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from registrar.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Student(Base):
    """A student row. Converted to a plain dict with `to_document()`."""

    __tablename__ = "students"

    id: Mapped[str] = mapped_column(
        String(32),
        primary_key=True,
        default=lambda: uuid.uuid4().hex,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    date_of_birth: Mapped[date] = mapped_column(Date, nullable=False)
    gender: Mapped[str] = mapped_column(String(16), nullable=False)
    student_code: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)

    # [{type, street, city, state, zip_code}, ...] in submission order
    addresses: Mapped[List[Dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)

    email: Mapped[Optional[str]] = mapped_column(String(320), nullable=True)
    mobile: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)

    # {father_name, mother_name}
    parents: Mapped[Optional[Dict[str, Any]]] = mapped_column(JSON, nullable=True)

    # Written only by the enrollment service
    course_refs: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow
    )

    __table_args__ = (
        Index("idx_students_name", "name"),
        Index("idx_students_created_at", "created_at"),
    )

    def to_document(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "date_of_birth": self.date_of_birth,
            "gender": self.gender,
            "student_code": self.student_code,
            "addresses": list(self.addresses or []),
            "email": self.email,
            "mobile": self.mobile,
            "parents": dict(self.parents) if self.parents is not None else None,
            "course_refs": list(self.course_refs or []),
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    def __repr__(self) -> str:
        return f"<Student(id={self.id}, student_code='{self.student_code}')>"
