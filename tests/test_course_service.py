"""
Registrar Backend: Course Service Unit Tests
=============================================

What:  Tests for CourseService CRUD, topic search and the course-side
       enrollment commands.
"""

from unittest.mock import AsyncMock

import pytest

from registrar.exceptions import ConflictError, DatabaseError, NotFoundError
from registrar.schemas.course import CourseCreate, CourseType, CourseUpdate
from registrar.services.course_service import CourseService


class TestCourseCrud:
    """Tests for create, read, update and delete."""

    def setup_method(self):
        self.service = CourseService()

    @pytest.mark.asyncio
    async def test_create_course(self, memory_store, course_payload):
        created = await self.service.create_course(memory_store, CourseCreate(**course_payload()))

        assert created.name == "Intro to Web Dev"
        assert created.type is CourseType.TECHNICAL
        assert created.topics == ["HTML", "CSS", "JavaScript", "React"]
        assert created.student_refs == []

    @pytest.mark.asyncio
    async def test_duplicate_name_conflicts_with_message(self, memory_store, course_payload):
        await self.service.create_course(memory_store, CourseCreate(**course_payload()))

        with pytest.raises(ConflictError) as exc_info:
            await self.service.create_course(
                memory_store, CourseCreate(**course_payload(type="Language"))
            )

        assert exc_info.value.message == (
            "Course with the same name already exists: Intro to Web Dev"
        )
        assert exc_info.value.status_code == 409

    @pytest.mark.asyncio
    async def test_list_courses(self, memory_store, make_course):
        await make_course(name="A")
        await make_course(name="B")

        courses = await self.service.list_courses(memory_store)

        assert [c.name for c in courses] == ["A", "B"]

    @pytest.mark.asyncio
    async def test_find_by_topic(self, memory_store, make_course):
        await make_course(name="Web", topics=["HTML", "JavaScript"])
        await make_course(name="Data", topics=["Python", "Pandas"])

        found = await self.service.find_by_topic(memory_store, "java")

        assert [c.name for c in found] == ["Web"]
        assert await self.service.find_by_topic(memory_store, "Rust") == []

    @pytest.mark.asyncio
    async def test_get_missing_course(self, memory_store):
        with pytest.raises(NotFoundError) as exc_info:
            await self.service.get_course(memory_store, "ghost")

        assert exc_info.value.message == "Course with ID 'ghost' was not found"

    @pytest.mark.asyncio
    async def test_update_course(self, memory_store, make_course):
        cid = await make_course()

        updated = await self.service.update_course(
            memory_store, cid, CourseUpdate(duration="6 months", topics=["HTML"])
        )

        assert updated.duration == "6 months"
        assert updated.topics == ["HTML"]
        assert updated.name == "Intro to Web Dev"

    @pytest.mark.asyncio
    async def test_update_ignores_nulls_and_student_refs(
        self, memory_store, make_course, make_student
    ):
        cid = await make_course()
        sid = await make_student()
        await self.service.assign_student(memory_store, cid, sid)

        updated = await self.service.update_course(
            memory_store,
            cid,
            CourseUpdate(**{"description": None, "student_refs": [], "duration": "1 week"}),
        )

        assert updated.student_refs == [sid]
        assert updated.description.startswith("A comprehensive")
        assert updated.duration == "1 week"

    @pytest.mark.asyncio
    async def test_rename_onto_existing_name_conflicts(self, memory_store, make_course):
        await make_course(name="Taken")
        cid = await make_course(name="Free")

        with pytest.raises(ConflictError):
            await self.service.update_course(memory_store, cid, CourseUpdate(name="Taken"))

    @pytest.mark.asyncio
    async def test_rename_to_own_name_is_allowed(self, memory_store, make_course):
        cid = await make_course(name="Same")

        updated = await self.service.update_course(memory_store, cid, CourseUpdate(name="Same"))

        assert updated.name == "Same"

    @pytest.mark.asyncio
    async def test_update_missing_course(self, memory_store):
        with pytest.raises(NotFoundError):
            await self.service.update_course(memory_store, "ghost", CourseUpdate(duration="1d"))

    @pytest.mark.asyncio
    async def test_delete_course_cascades(self, memory_store, make_course, make_student):
        cid = await make_course()
        sid = await make_student()
        await self.service.assign_student(memory_store, cid, sid)

        await self.service.delete_course(memory_store, cid)

        assert await memory_store.courses.find_by_id(cid) is None
        assert (await memory_store.students.find_by_id(sid))["course_refs"] == []

    @pytest.mark.asyncio
    async def test_list_store_failure_becomes_database_error(self, memory_store):
        memory_store.courses.find_where = AsyncMock(side_effect=RuntimeError("gone"))

        with pytest.raises(DatabaseError):
            await self.service.list_courses(memory_store)


class TestCourseEnrollment:
    """Tests for assign_student(), remove_student() and get_enrolled_students()."""

    def setup_method(self):
        self.service = CourseService()

    @pytest.mark.asyncio
    async def test_assign_returns_updated_course(self, memory_store, make_course, make_student):
        cid = await make_course()
        sid = await make_student()

        course = await self.service.assign_student(memory_store, cid, sid)

        assert course.id == cid
        assert course.student_refs == [sid]

    @pytest.mark.asyncio
    async def test_assign_missing_student(self, memory_store, make_course):
        cid = await make_course()

        with pytest.raises(NotFoundError) as exc_info:
            await self.service.assign_student(memory_store, cid, "ghost")

        assert exc_info.value.message == "Student with ID 'ghost' was not found"

    @pytest.mark.asyncio
    async def test_remove_student(self, memory_store, make_course, make_student):
        cid = await make_course()
        sid = await make_student()
        await self.service.assign_student(memory_store, cid, sid)

        await self.service.remove_student(memory_store, cid, sid)

        assert await self.service.get_enrolled_students(memory_store, cid) == []

    @pytest.mark.asyncio
    async def test_roster(self, memory_store, make_course, make_student):
        cid = await make_course()
        first = await make_student()
        second = await make_student(student_code="STU002", name="Jane Roe", email=None)
        await self.service.assign_student(memory_store, cid, first)
        await self.service.assign_student(memory_store, cid, second)

        roster = await self.service.get_enrolled_students(memory_store, cid)

        assert [(s.id, s.student_code, s.email) for s in roster] == [
            (first, "STU001", "john.doe@example.com"),
            (second, "STU002", None),
        ]
