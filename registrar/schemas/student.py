"""
Registrar Backend: Student Schemas
===================================

What:  Pydantic models for student requests and responses.
Why:   Schemas are the only way client data reaches a student document, which
       is what keeps `course_refs` out of reach of create and update calls.

Update rules:
    StudentUpdate carries the contact fields only (email, mobile, addresses,
    parents). Name, date of birth, gender and student_code are fixed after
    creation, and course_refs is owned by the enrollment service.
"""

import enum
from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, EmailStr, Field, field_validator


class Gender(str, enum.Enum):
    MALE = "Male"
    FEMALE = "Female"
    OTHER = "Other"


class AddressType(str, enum.Enum):
    PERMANENT = "Permanent"
    CORRESPONDENCE = "Correspondence"
    CURRENT = "Current"


def _not_blank(v: str) -> str:
    stripped = v.strip()
    if not stripped:
        raise ValueError("must not be empty")
    return stripped


class Address(BaseModel):
    """One typed postal address."""
    type: AddressType = Field(description="Address type", examples=["Permanent"])
    street: str = Field(min_length=1, examples=["123 Main St"])
    city: str = Field(min_length=1, examples=["New York"])
    state: str = Field(min_length=1, examples=["NY"])
    zip_code: str = Field(min_length=1, examples=["10001"])

    @field_validator("street", "city", "state", "zip_code")
    @classmethod
    def strip_text(cls, v: str) -> str:
        return _not_blank(v)


class Parents(BaseModel):
    father_name: Optional[str] = Field(default=None, examples=["John Doe"])
    mother_name: Optional[str] = Field(default=None, examples=["Jane Doe"])


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class StudentCreate(BaseModel):
    """Body of POST /students."""
    name: str = Field(min_length=1, description="Student name", examples=["John Doe"])
    date_of_birth: date = Field(description="Date of birth", examples=["2000-01-01"])
    gender: Gender = Field(description="Gender", examples=["Male"])
    student_code: str = Field(
        min_length=1, description="Unique student code", examples=["STU001"]
    )
    addresses: List[Address] = Field(default_factory=list, description="Student addresses")
    email: Optional[EmailStr] = Field(default=None, examples=["student@example.com"])
    mobile: Optional[str] = Field(default=None, examples=["1234567890"])
    parents: Optional[Parents] = Field(default=None)

    model_config = {"extra": "ignore"}

    @field_validator("name", "student_code")
    @classmethod
    def strip_text(cls, v: str) -> str:
        """Rejects whitespace-only values; the code is also trimmed before uniqueness checks."""
        return _not_blank(v)


class StudentUpdate(BaseModel):
    """
    Body of PATCH /students/{id}. Only fields present in the body change.

    Unknown keys (including course_refs) are dropped by Pydantic before the
    service sees the payload.
    """
    email: Optional[EmailStr] = Field(default=None, examples=["student@example.com"])
    mobile: Optional[str] = Field(default=None, examples=["1234567890"])
    addresses: Optional[List[Address]] = Field(default=None)
    parents: Optional[Parents] = Field(default=None)

    model_config = {"extra": "ignore"}


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class StudentResponse(BaseModel):
    """Full student document."""
    id: str = Field(description="Opaque student identifier")
    name: str
    date_of_birth: date
    gender: Gender
    student_code: str
    addresses: List[Address] = Field(default_factory=list)
    email: Optional[str] = None
    mobile: Optional[str] = None
    parents: Optional[Parents] = None
    course_refs: List[str] = Field(
        default_factory=list,
        description="Ids of the courses this student is enrolled in",
    )
    created_at: datetime
    updated_at: datetime


class EnrolledStudent(BaseModel):
    """Reduced student view used in course rosters."""
    id: str
    name: str
    student_code: str
    email: Optional[str] = None
