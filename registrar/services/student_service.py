"""
Registrar Backend: Student Service
===================================

What:  Business logic for student CRUD and the student-side enrollment views.
How:   Builds documents from validated schemas, talks to `store.students`,
       and hands everything that touches course_refs to EnrollmentService.
Who:   Called by the /students route handlers.

Error Handling Strategy:
    RegistrarError subclasses (NotFoundError, ConflictError) propagate as-is.
    Anything else is logged with a traceback and wrapped in DatabaseError.
"""

import logging
from typing import List, Optional

from registrar.exceptions import DatabaseError, NotFoundError, RegistrarError
from registrar.schemas.course import CourseResponse
from registrar.schemas.student import StudentCreate, StudentResponse, StudentUpdate
from registrar.services.enrollment_service import enrollment_service
from registrar.store.base import DocumentStore
from registrar.store.query import Contains, Matches, Update

logger = logging.getLogger(__name__)

# Never writable through create/update payloads
PROTECTED_FIELDS = {"id", "course_refs", "created_at", "updated_at"}


class StudentService:
    """Stateless student operations; the store is passed to every call."""

    async def create_student(self, store: DocumentStore, payload: StudentCreate) -> StudentResponse:
        """
        Insert a new student with an empty course list.

        Raises:
            ConflictError: student_code already in use (→ 409)
            DatabaseError: Store failure (→ 500)
        """
        try:
            document = payload.model_dump(mode="json")
            # Keep a real date for the Date column; mode="json" turned it into text
            document["date_of_birth"] = payload.date_of_birth
            for name in PROTECTED_FIELDS:
                document.pop(name, None)
            document["course_refs"] = []

            created = await store.students.insert(document)
            logger.info("Student created: %s (%s)", created["id"], created["student_code"])
            return StudentResponse.model_validate(created)

        except RegistrarError:
            raise
        except Exception as e:
            logger.error("Database error creating student: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not create the student. Please try again.",
                context={"original_error": type(e).__name__},
            )

    async def list_students(
        self, store: DocumentStore, name: Optional[str] = None
    ) -> List[StudentResponse]:
        """
        List all students, or search by name.

        A name search is a case-insensitive substring match. When it matches
        nobody the search raises NotFoundError rather than returning [].
        """
        try:
            if name:
                documents = await store.students.find_where(Matches("name", name))
                if not documents:
                    raise NotFoundError(
                        resource="Student",
                        message=f"No students found with the name: {name}",
                        context={"name": name},
                    )
            else:
                documents = await store.students.find_where()
            return [StudentResponse.model_validate(document) for document in documents]

        except RegistrarError:
            raise
        except Exception as e:
            logger.error("Database error listing students: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve students. Please try again.",
                context={"original_error": type(e).__name__},
            )

    async def get_student(self, store: DocumentStore, student_id: str) -> StudentResponse:
        try:
            document = await store.students.find_by_id(student_id)
            if document is None:
                raise NotFoundError(resource="Student", resource_id=student_id)
            return StudentResponse.model_validate(document)

        except RegistrarError:
            raise
        except Exception as e:
            logger.error("Database error fetching student %s: %s", student_id, str(e))
            raise DatabaseError(
                message="Could not retrieve the student. Please try again.",
                context={"student_id": student_id},
            )

    async def update_student(
        self, store: DocumentStore, student_id: str, payload: StudentUpdate
    ) -> StudentResponse:
        """
        Apply a partial update of the contact fields.

        Only keys present in the request body are written. Sending null for
        email, mobile or parents clears them; null addresses become [].
        """
        try:
            changes = payload.model_dump(mode="json", exclude_unset=True)
            for name in PROTECTED_FIELDS:
                changes.pop(name, None)
            if "addresses" in changes and changes["addresses"] is None:
                changes["addresses"] = []

            if changes:
                document = await store.students.update_by_id(
                    student_id, Update(set_fields=changes)
                )
            else:
                document = await store.students.find_by_id(student_id)

            if document is None:
                raise NotFoundError(resource="Student", resource_id=student_id)

            logger.info("Student %s updated: %s", student_id, sorted(changes))
            return StudentResponse.model_validate(document)

        except RegistrarError:
            raise
        except Exception as e:
            logger.error("Database error updating student %s: %s", student_id, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not update the student. Please try again.",
                context={"student_id": student_id, "original_error": type(e).__name__},
            )

    async def delete_student(self, store: DocumentStore, student_id: str) -> None:
        """Delete a student and pull it from every course roster."""
        await enrollment_service.cascade_delete_student(store, student_id)

    async def list_students_by_course(
        self, store: DocumentStore, course_id: str
    ) -> List[StudentResponse]:
        """
        Students whose course_refs contains `course_id`.

        This reads the student side only, so it does not require the course
        to exist and may include students of a course deleted moments ago.
        """
        try:
            documents = await store.students.find_where(Contains("course_refs", course_id))
            return [StudentResponse.model_validate(document) for document in documents]

        except RegistrarError:
            raise
        except Exception as e:
            logger.error("Database error listing students of course %s: %s", course_id, str(e))
            raise DatabaseError(
                message="Could not retrieve students for the course. Please try again.",
                context={"course_id": course_id},
            )

    async def get_enrolled_courses(
        self, store: DocumentStore, student_id: str
    ) -> List[CourseResponse]:
        courses = await enrollment_service.compose_enrolled_courses(store, student_id)
        return [CourseResponse.model_validate(course) for course in courses]

    async def leave_course(self, store: DocumentStore, student_id: str, course_id: str) -> None:
        """Student-initiated withdrawal; identical to removing from the course side."""
        await enrollment_service.withdraw(store, student_id, course_id)


# ── Singleton Instance ────────────────────────────────────────────────────
student_service = StudentService()
