"""
Registrar Backend: Course Schemas
==================================

What:  Pydantic models for course requests and responses.
"""

import enum
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


class CourseType(str, enum.Enum):
    TECHNICAL = "Technical"
    NON_TECHNICAL = "Non-Technical"
    LANGUAGE = "Language"
    SOFT_SKILLS = "Soft Skills"


def _not_blank(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    stripped = v.strip()
    if not stripped:
        raise ValueError("must not be empty")
    return stripped


class CourseCreate(BaseModel):
    """Body of POST /courses."""
    name: str = Field(
        min_length=1,
        description="Course name, unique across all courses",
        examples=["Introduction to Web Development"],
    )
    description: str = Field(
        min_length=1,
        examples=["A comprehensive introduction to modern web development technologies"],
    )
    type: CourseType = Field(examples=["Technical"])
    duration: str = Field(min_length=1, examples=["3 months"])
    topics: List[str] = Field(
        default_factory=list,
        examples=[["HTML", "CSS", "JavaScript", "React"]],
    )

    model_config = {"extra": "ignore"}

    @field_validator("name", "description", "duration")
    @classmethod
    def strip_text(cls, v: Optional[str]) -> Optional[str]:
        """Rejects whitespace-only text and trims the rest."""
        return _not_blank(v)


class CourseUpdate(BaseModel):
    """Body of PATCH /courses/{id}. student_refs is never accepted."""
    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = Field(default=None, min_length=1)
    type: Optional[CourseType] = None
    duration: Optional[str] = Field(default=None, min_length=1)
    topics: Optional[List[str]] = None

    model_config = {"extra": "ignore"}

    @field_validator("name", "description", "duration")
    @classmethod
    def strip_text(cls, v: Optional[str]) -> Optional[str]:
        """Rejects whitespace-only text and trims the rest."""
        return _not_blank(v)


class CourseResponse(BaseModel):
    """Full course document."""
    id: str = Field(description="Opaque course identifier")
    name: str
    description: str
    type: CourseType
    duration: str
    topics: List[str] = Field(default_factory=list)
    student_refs: List[str] = Field(
        default_factory=list,
        description="Ids of the students enrolled in this course",
    )
    created_at: datetime
    updated_at: datetime
