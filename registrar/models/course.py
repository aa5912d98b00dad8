"""
Registrar Backend: Course SQLAlchemy Model
===========================================

What:  ORM model for the `courses` table used by SqlDocumentStore.

Uniqueness:
    Courses are unique by `name` alone. There is no course code column.
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List

from sqlalchemy import JSON, DateTime, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from registrar.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Course(Base):
    """A course row. Converted to a plain dict with `to_document()`."""

    __tablename__ = "courses"

    id: Mapped[str] = mapped_column(
        String(32),
        primary_key=True,
        default=lambda: uuid.uuid4().hex,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    description: Mapped[str] = mapped_column(Text, nullable=False)

    # Technical | Non-Technical | Language | Soft Skills (validated by schemas)
    type: Mapped[str] = mapped_column(String(32), nullable=False)

    # Free text such as "3 months"
    duration: Mapped[str] = mapped_column(String(64), nullable=False)
    topics: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)

    # Written only by the enrollment service
    student_refs: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow
    )

    __table_args__ = (
        Index("idx_courses_created_at", "created_at"),
    )

    def to_document(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "type": self.type,
            "duration": self.duration,
            "topics": list(self.topics or []),
            "student_refs": list(self.student_refs or []),
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    def __repr__(self) -> str:
        return f"<Course(id={self.id}, name='{self.name}')>"
