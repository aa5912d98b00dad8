"""
Registrar Backend: Enrollment Consistency Service
==================================================

What:  The only code that writes `students.course_refs` and
       `courses.student_refs`.
Why:   The two collections have no foreign keys and the store has no
       multi-document transactions. The pair of reference sets stays
       consistent only because every change goes through the ordered,
       idempotent writes below.
Who:   Called by StudentService, CourseService and the enrollment routes.

Invariant:
    for every student s and course c:
        c.id in s.course_refs  ⇔  s.id in c.student_refs

Write ordering (enroll / withdraw):
    1. student document
    2. course document

    A crash between the two leaves "student lists the course, course does not
    list the student". That state is visible from the student side, and a
    retry of the same command (every operation here is idempotent) repairs
    it. The reverse order could leave a course reference that no student-side
    read would ever reveal.

Cascades (delete student / delete course):
    1. delete the owner document
    2. pull its id from every document on the other side

    If step 2 fails the owner is already gone. The delete is still reported
    as successful and the leftover ids are dangling references, which the
    compose operations skip when they read them.

Errors:
    NotFoundError / ConflictError propagate unchanged. Any other failure is
    wrapped into DatabaseError with the original type in its context.
"""

import logging
from typing import Any, Dict, List, Optional

from registrar.exceptions import DatabaseError, NotFoundError, RegistrarError
from registrar.store.base import DocumentCollection, DocumentStore
from registrar.store.query import Contains, Document, In, Update

logger = logging.getLogger(__name__)

# Fields returned for each student in a course roster
ROSTER_FIELDS = ("id", "name", "student_code", "email")


class EnrollmentService:
    """
    Stateless enrollment operations. The store is passed to every call.

    Operations:
        enroll()                    add the pair to both reference sets
        withdraw()                  remove the pair from both reference sets
        cascade_delete_student()    delete a student and its course references
        cascade_delete_course()     delete a course and its student references
        compose_enrolled_courses()  courses a student references
        compose_enrolled_students() roster of students a course references
    """

    # ── Writes ────────────────────────────────────────────────────────────

    async def enroll(self, store: DocumentStore, student_id: str, course_id: str) -> Document:
        """
        Enroll a student in a course (set-union on both sides).

        Returns:
            The course document after the write, or unchanged when the pair
            was already enrolled on both sides.

        Raises:
            NotFoundError: The student or the course does not exist. Nothing
                has been written in that case.
            DatabaseError: A store call failed.
        """
        try:
            student = await store.students.find_by_id(student_id)
            if student is None:
                raise NotFoundError(resource="Student", resource_id=student_id)

            course = await store.courses.find_by_id(course_id)
            if course is None:
                raise NotFoundError(resource="Course", resource_id=course_id)

            if course_id in student["course_refs"] and student_id in course["student_refs"]:
                logger.debug("Student %s already enrolled in course %s", student_id, course_id)
                return course

            # Student side first. See module docstring for the crash window.
            updated_student = await store.students.update_by_id(
                student_id, Update.add("course_refs", course_id)
            )
            if updated_student is None:
                raise NotFoundError(resource="Student", resource_id=student_id)

            updated_course = await store.courses.update_by_id(
                course_id, Update.add("student_refs", student_id)
            )
            if updated_course is None:
                # Course deleted between read and write; the student side now
                # holds a dangling id that compose operations will skip.
                logger.warning(
                    "Course %s vanished while enrolling student %s; "
                    "student keeps a dangling reference",
                    course_id,
                    student_id,
                )
                raise NotFoundError(resource="Course", resource_id=course_id)

            logger.info("Enrolled student %s in course %s", student_id, course_id)
            return updated_course

        except RegistrarError:
            raise
        except Exception as e:
            raise self._store_failure("enroll", e, student_id=student_id, course_id=course_id)

    async def withdraw(self, store: DocumentStore, student_id: str, course_id: str) -> None:
        """
        Remove a student from a course (set-pull on both sides).

        No existence checks: pulling an id that is not there, or from a
        document that does not exist, is a no-op. Withdrawing twice is
        therefore harmless, and so is withdrawing a half-enrolled pair.
        """
        try:
            await store.students.update_by_id(student_id, Update.remove("course_refs", course_id))
            await store.courses.update_by_id(course_id, Update.remove("student_refs", student_id))
            logger.info("Withdrew student %s from course %s", student_id, course_id)
        except RegistrarError:
            raise
        except Exception as e:
            raise self._store_failure("withdraw", e, student_id=student_id, course_id=course_id)

    async def cascade_delete_student(self, store: DocumentStore, student_id: str) -> None:
        """
        Delete a student, then pull its id from every course roster.

        Raises:
            NotFoundError: No such student.
        """
        await self._cascade_delete(
            owner=store.students,
            others=store.courses,
            owner_id=student_id,
            resource="Student",
            ref_field="student_refs",
        )

    async def cascade_delete_course(self, store: DocumentStore, course_id: str) -> None:
        """
        Delete a course, then pull its id from every student's course list.

        Raises:
            NotFoundError: No such course.
        """
        await self._cascade_delete(
            owner=store.courses,
            others=store.students,
            owner_id=course_id,
            resource="Course",
            ref_field="course_refs",
        )

    async def _cascade_delete(
        self,
        owner: DocumentCollection,
        others: DocumentCollection,
        owner_id: str,
        resource: str,
        ref_field: str,
    ) -> None:
        try:
            if await owner.find_by_id(owner_id) is None:
                raise NotFoundError(resource=resource, resource_id=owner_id)
            if not await owner.delete_by_id(owner_id):
                # Someone else deleted it after our read
                raise NotFoundError(resource=resource, resource_id=owner_id)
        except RegistrarError:
            raise
        except Exception as e:
            raise self._store_failure(f"delete {resource.lower()}", e, resource_id=owner_id)

        logger.info("Deleted %s %s", resource.lower(), owner_id)

        try:
            pulled = await others.update_many(
                Contains(ref_field, owner_id), Update.remove(ref_field, owner_id)
            )
            logger.info(
                "Removed %s %s from %s %s document(s)",
                resource.lower(), owner_id, pulled, others.name,
            )
        except Exception as e:
            # Recoverable inconsistency: the owner is gone, references remain.
            logger.warning(
                "Cascade after deleting %s %s failed; dangling references may remain in %s: %s",
                resource.lower(),
                owner_id,
                others.name,
                str(e),
                exc_info=True,
            )

    # ── Reads ─────────────────────────────────────────────────────────────

    async def compose_enrolled_courses(self, store: DocumentStore, student_id: str) -> List[Document]:
        """
        Resolve a student's course_refs into course documents.

        Dangling ids are skipped; the result is ordered like course_refs.

        Raises:
            NotFoundError: No such student.
        """
        try:
            student = await store.students.find_by_id(student_id)
            if student is None:
                raise NotFoundError(resource="Student", resource_id=student_id)
            return await self._resolve(store.courses, student["course_refs"], owner=student_id)
        except RegistrarError:
            raise
        except Exception as e:
            raise self._store_failure("compose enrolled courses", e, student_id=student_id)

    async def compose_enrolled_students(self, store: DocumentStore, course_id: str) -> List[Document]:
        """
        Resolve a course's student_refs into a roster.

        Each entry holds only ROSTER_FIELDS. Dangling ids are skipped; the
        result is ordered like student_refs.

        Raises:
            NotFoundError: No such course.
        """
        try:
            course = await store.courses.find_by_id(course_id)
            if course is None:
                raise NotFoundError(resource="Course", resource_id=course_id)
            students = await self._resolve(store.students, course["student_refs"], owner=course_id)
            return [project(student, ROSTER_FIELDS) for student in students]
        except RegistrarError:
            raise
        except Exception as e:
            raise self._store_failure("compose enrolled students", e, course_id=course_id)

    async def _resolve(
        self,
        collection: DocumentCollection,
        refs: List[str],
        owner: str,
    ) -> List[Document]:
        if not refs:
            return []
        found = {
            document["id"]: document
            for document in await collection.find_where(In.of("id", refs))
        }
        resolved = [found[ref] for ref in dict.fromkeys(refs) if ref in found]
        dangling = len(set(refs)) - len(resolved)
        if dangling:
            logger.warning(
                "Skipped %d dangling reference(s) from %s while reading %s",
                dangling,
                owner,
                collection.name,
            )
        return resolved

    # ── Helpers ───────────────────────────────────────────────────────────

    @staticmethod
    def _store_failure(operation: str, error: Exception, **context: Any) -> DatabaseError:
        logger.error("Store failure during %s: %s", operation, str(error), exc_info=True)
        ctx: Dict[str, Any] = dict(context)
        ctx["original_error"] = type(error).__name__
        return DatabaseError(
            message=f"Could not {operation}. Please try again.",
            context=ctx,
        )


def project(document: Document, fields: Optional[tuple] = None) -> Document:
    """Keep only `fields` of a document (all fields when None)."""
    if fields is None:
        return dict(document)
    return {name: document.get(name) for name in fields}


# ── Singleton Instance ────────────────────────────────────────────────────
# Stateless: the store arrives with each call
enrollment_service = EnrollmentService()
