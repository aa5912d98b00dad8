"""
Registrar Backend: Course Service
==================================

What:  Business logic for course CRUD, topic search and the course-side
       enrollment commands.
Who:   Called by the /courses route handlers.

Uniqueness:
    Courses are unique by name only. create_course() looks the name up first
    so the 409 message can name the course; the store's unique constraint
    still catches two concurrent creates of the same name.
"""

import logging
from typing import List, Optional

from registrar.exceptions import ConflictError, DatabaseError, NotFoundError, RegistrarError
from registrar.schemas.course import CourseCreate, CourseResponse, CourseUpdate
from registrar.schemas.student import EnrolledStudent
from registrar.services.enrollment_service import enrollment_service
from registrar.store.base import DocumentStore
from registrar.store.query import Eq, Matches, Update

logger = logging.getLogger(__name__)

PROTECTED_FIELDS = {"id", "student_refs", "created_at", "updated_at"}


class CourseService:
    """Stateless course operations; the store is passed to every call."""

    async def _ensure_name_available(
        self, store: DocumentStore, name: str, exclude_id: Optional[str] = None
    ) -> None:
        for existing in await store.courses.find_where(Eq("name", name)):
            if existing["id"] != exclude_id:
                raise ConflictError(
                    message=f"Course with the same name already exists: {name}",
                    field="name",
                    context={"existing_id": existing["id"]},
                )

    async def create_course(self, store: DocumentStore, payload: CourseCreate) -> CourseResponse:
        """
        Insert a new course with an empty roster.

        Raises:
            ConflictError: A course with this name exists (→ 409)
            DatabaseError: Store failure (→ 500)
        """
        try:
            await self._ensure_name_available(store, payload.name)

            document = payload.model_dump(mode="json")
            for name in PROTECTED_FIELDS:
                document.pop(name, None)
            document["student_refs"] = []

            created = await store.courses.insert(document)
            logger.info("Course created: %s (%s)", created["id"], created["name"])
            return CourseResponse.model_validate(created)

        except RegistrarError:
            raise
        except Exception as e:
            logger.error("Database error creating course: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not create the course. Please try again.",
                context={"original_error": type(e).__name__},
            )

    async def list_courses(self, store: DocumentStore) -> List[CourseResponse]:
        try:
            documents = await store.courses.find_where()
            return [CourseResponse.model_validate(document) for document in documents]
        except RegistrarError:
            raise
        except Exception as e:
            logger.error("Database error listing courses: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve courses. Please try again.",
                context={"original_error": type(e).__name__},
            )

    async def find_by_topic(self, store: DocumentStore, topic: str) -> List[CourseResponse]:
        """Courses with at least one topic containing `topic` (case-insensitive)."""
        try:
            documents = await store.courses.find_where(Matches("topics", topic))
            return [CourseResponse.model_validate(document) for document in documents]
        except RegistrarError:
            raise
        except Exception as e:
            logger.error("Database error searching topic '%s': %s", topic, str(e))
            raise DatabaseError(
                message="Could not search courses by topic. Please try again.",
                context={"topic": topic},
            )

    async def get_course(self, store: DocumentStore, course_id: str) -> CourseResponse:
        try:
            document = await store.courses.find_by_id(course_id)
            if document is None:
                raise NotFoundError(resource="Course", resource_id=course_id)
            return CourseResponse.model_validate(document)
        except RegistrarError:
            raise
        except Exception as e:
            logger.error("Database error fetching course %s: %s", course_id, str(e))
            raise DatabaseError(
                message="Could not retrieve the course. Please try again.",
                context={"course_id": course_id},
            )

    async def update_course(
        self, store: DocumentStore, course_id: str, payload: CourseUpdate
    ) -> CourseResponse:
        """
        Partial update. Nulls are ignored: every course field is required.

        Raises:
            NotFoundError: No such course
            ConflictError: Renaming onto another course's name
        """
        try:
            changes = {
                key: value
                for key, value in payload.model_dump(mode="json", exclude_unset=True).items()
                if value is not None and key not in PROTECTED_FIELDS
            }

            if "name" in changes:
                await self._ensure_name_available(store, changes["name"], exclude_id=course_id)

            if changes:
                document = await store.courses.update_by_id(course_id, Update(set_fields=changes))
            else:
                document = await store.courses.find_by_id(course_id)

            if document is None:
                raise NotFoundError(resource="Course", resource_id=course_id)

            logger.info("Course %s updated: %s", course_id, sorted(changes))
            return CourseResponse.model_validate(document)

        except RegistrarError:
            raise
        except Exception as e:
            logger.error("Database error updating course %s: %s", course_id, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not update the course. Please try again.",
                context={"course_id": course_id, "original_error": type(e).__name__},
            )

    async def delete_course(self, store: DocumentStore, course_id: str) -> None:
        """Delete a course and pull it from every student's course list."""
        await enrollment_service.cascade_delete_course(store, course_id)

    async def assign_student(
        self, store: DocumentStore, course_id: str, student_id: str
    ) -> CourseResponse:
        course = await enrollment_service.enroll(store, student_id, course_id)
        return CourseResponse.model_validate(course)

    async def remove_student(self, store: DocumentStore, course_id: str, student_id: str) -> None:
        await enrollment_service.withdraw(store, student_id, course_id)

    async def get_enrolled_students(
        self, store: DocumentStore, course_id: str
    ) -> List[EnrolledStudent]:
        roster = await enrollment_service.compose_enrolled_students(store, course_id)
        return [EnrolledStudent.model_validate(entry) for entry in roster]


# ── Singleton Instance ────────────────────────────────────────────────────
course_service = CourseService()
