"""
Registrar Backend: HTTP Endpoint Tests
=======================================

What:  End-to-end tests through the FastAPI app with an in-memory store.
How:   httpx AsyncClient over ASGITransport (see conftest.test_client).

What we test:
    ✅ Status codes: 201 create, 204 delete, 400 validation, 404, 409, 500
    ✅ Error body shape: error kind, message, request_id
    ✅ Full enrollment scenario from both sides
    ✅ Health check
"""

from unittest.mock import AsyncMock, patch

import pytest

from registrar.services.student_service import student_service


async def _create_student(client, payload):
    response = await client.post("/students", json=payload)
    assert response.status_code == 201, response.text
    return response.json()["id"]


async def _create_course(client, payload):
    response = await client.post("/courses", json=payload)
    assert response.status_code == 201, response.text
    return response.json()["id"]


class TestStudentEndpoints:
    """Tests for /students."""

    @pytest.mark.asyncio
    async def test_create_and_get_student(self, test_client, student_payload):
        response = await test_client.post("/students", json=student_payload())

        assert response.status_code == 201
        body = response.json()
        assert body["student_code"] == "STU001"
        assert body["course_refs"] == []
        assert body["date_of_birth"] == "2000-01-01"

        fetched = await test_client.get(f"/students/{body['id']}")
        assert fetched.status_code == 200
        assert fetched.json()["name"] == "John Doe"

    @pytest.mark.asyncio
    async def test_duplicate_student_code_returns_409(self, test_client, student_payload):
        await _create_student(test_client, student_payload())

        response = await test_client.post("/students", json=student_payload())

        assert response.status_code == 409
        assert response.json()["error"] == "conflict"

    @pytest.mark.asyncio
    async def test_invalid_body_returns_400_with_field_messages(self, test_client, student_payload):
        body = student_payload(gender="Unknown", email="not-an-email")
        del body["date_of_birth"]

        response = await test_client.post("/students", json=body)

        assert response.status_code == 400
        payload = response.json()
        assert payload["error"] == "validation_error"
        assert payload["message"] == "Validation failed"
        fields = {message.split(":", 1)[0] for message in payload["errors"]}
        assert {"date_of_birth", "gender", "email"} <= fields

    @pytest.mark.asyncio
    async def test_missing_student_returns_404_with_request_id(self, test_client):
        response = await test_client.get("/students/ghost", headers={"X-Request-ID": "req-123"})

        assert response.status_code == 404
        body = response.json()
        assert body["error"] == "not_found"
        assert body["message"] == "Student with ID 'ghost' was not found"
        assert body["request_id"] == "req-123"
        assert response.headers["X-Request-ID"] == "req-123"

    @pytest.mark.asyncio
    async def test_name_search(self, test_client, student_payload):
        await _create_student(test_client, student_payload())
        await _create_student(test_client, student_payload(student_code="STU002", name="Jane Roe"))

        found = await test_client.get("/students", params={"name": "JANE"})
        missing = await test_client.get("/students", params={"name": "Nobody"})
        everyone = await test_client.get("/students")

        assert [s["name"] for s in found.json()] == ["Jane Roe"]
        assert missing.status_code == 404
        assert missing.json()["message"] == "No students found with the name: Nobody"
        assert len(everyone.json()) == 2

    @pytest.mark.asyncio
    async def test_patch_ignores_course_refs(self, test_client, student_payload):
        sid = await _create_student(test_client, student_payload())

        response = await test_client.patch(
            f"/students/{sid}",
            json={"mobile": "999", "course_refs": ["forged"], "student_code": "X"},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["mobile"] == "999"
        assert body["course_refs"] == []
        assert body["student_code"] == "STU001"

    @pytest.mark.asyncio
    async def test_delete_student(self, test_client, student_payload):
        sid = await _create_student(test_client, student_payload())

        response = await test_client.delete(f"/students/{sid}")

        assert response.status_code == 204
        assert response.content == b""
        assert (await test_client.get(f"/students/{sid}")).status_code == 404
        assert (await test_client.delete(f"/students/{sid}")).status_code == 404


class TestCourseEndpoints:
    """Tests for /courses."""

    @pytest.mark.asyncio
    async def test_create_list_and_topic_search(self, test_client, course_payload):
        await _create_course(test_client, course_payload())
        await _create_course(
            test_client, course_payload(name="Spanish I", type="Language", topics=["Grammar"])
        )

        listed = await test_client.get("/courses")
        by_topic = await test_client.get("/courses/topic", params={"name": "grammar"})

        assert [c["name"] for c in listed.json()] == ["Intro to Web Dev", "Spanish I"]
        assert [c["name"] for c in by_topic.json()] == ["Spanish I"]

    @pytest.mark.asyncio
    async def test_duplicate_course_name_returns_409(self, test_client, course_payload):
        await _create_course(test_client, course_payload())

        response = await test_client.post("/courses", json=course_payload())

        assert response.status_code == 409
        assert response.json()["message"] == (
            "Course with the same name already exists: Intro to Web Dev"
        )

    @pytest.mark.asyncio
    async def test_invalid_course_type_returns_400(self, test_client, course_payload):
        response = await test_client.post("/courses", json=course_payload(type="Cooking"))

        assert response.status_code == 400
        assert any(message.startswith("type:") for message in response.json()["errors"])

    @pytest.mark.asyncio
    async def test_patch_and_delete_course(self, test_client, course_payload):
        cid = await _create_course(test_client, course_payload())

        patched = await test_client.patch(f"/courses/{cid}", json={"duration": "4 weeks"})
        deleted = await test_client.delete(f"/courses/{cid}")

        assert patched.json()["duration"] == "4 weeks"
        assert deleted.status_code == 204
        assert (await test_client.get(f"/courses/{cid}")).status_code == 404

    @pytest.mark.asyncio
    async def test_enroll_unknown_student_returns_404(self, test_client, course_payload):
        cid = await _create_course(test_client, course_payload())

        response = await test_client.post(f"/courses/{cid}/students/ghost")

        assert response.status_code == 404
        assert response.json()["message"] == "Student with ID 'ghost' was not found"
        roster = await test_client.get(f"/courses/{cid}/students")
        assert roster.json() == []


class TestEnrollmentScenario:
    """Full round trip through both sides of an enrollment."""

    @pytest.mark.asyncio
    async def test_enroll_view_withdraw_and_cascade(
        self, test_client, student_payload, course_payload
    ):
        sid = await _create_student(test_client, student_payload())
        cid = await _create_course(test_client, course_payload())

        enrolled = await test_client.post(f"/courses/{cid}/students/{sid}")
        assert enrolled.status_code == 200
        assert enrolled.json()["student_refs"] == [sid]

        # Idempotent
        again = await test_client.post(f"/courses/{cid}/students/{sid}")
        assert again.json()["student_refs"] == [sid]

        student = (await test_client.get(f"/students/{sid}")).json()
        assert student["course_refs"] == [cid]

        courses = (await test_client.get(f"/students/{sid}/courses")).json()
        assert [c["name"] for c in courses] == ["Intro to Web Dev"]

        roster = (await test_client.get(f"/courses/{cid}/students")).json()
        assert roster == [
            {
                "id": sid,
                "name": "John Doe",
                "student_code": "STU001",
                "email": "john.doe@example.com",
            }
        ]

        by_course = (await test_client.get(f"/students/course/{cid}")).json()
        assert [s["id"] for s in by_course] == [sid]

        left = await test_client.delete(f"/students/{sid}/courses/{cid}")
        assert left.status_code == 204
        assert (await test_client.get(f"/students/{sid}")).json()["course_refs"] == []
        assert (await test_client.get(f"/courses/{cid}")).json()["student_refs"] == []

        # Leaving twice is still a success
        assert (await test_client.delete(f"/students/{sid}/courses/{cid}")).status_code == 204

        await test_client.post(f"/courses/{cid}/students/{sid}")
        assert (await test_client.delete(f"/courses/{cid}")).status_code == 204
        assert (await test_client.get(f"/students/{sid}")).json()["course_refs"] == []

    @pytest.mark.asyncio
    async def test_remove_student_from_course_side(
        self, test_client, student_payload, course_payload
    ):
        sid = await _create_student(test_client, student_payload())
        cid = await _create_course(test_client, course_payload())
        await test_client.post(f"/courses/{cid}/students/{sid}")

        response = await test_client.delete(f"/courses/{cid}/students/{sid}")

        assert response.status_code == 204
        assert (await test_client.get(f"/students/{sid}/courses")).json() == []


class TestErrorHandling:
    """Tests for the global exception handlers."""

    @pytest.mark.asyncio
    async def test_store_failure_returns_generic_500(self, test_client, memory_store):
        memory_store.courses.find_where = AsyncMock(
            side_effect=RuntimeError("password=hunter2 host=db")
        )

        response = await test_client.get("/courses")

        assert response.status_code == 500
        body = response.json()
        assert body["error"] == "store_failure"
        assert "hunter2" not in response.text
        assert body["message"] == "An internal error occurred. Please try again later."

    @pytest.mark.asyncio
    async def test_unexpected_error_returns_500(self, test_client):
        with patch.object(
            student_service, "get_student", AsyncMock(side_effect=KeyError("id"))
        ):
            response = await test_client.get("/students/anything")

        assert response.status_code == 500
        body = response.json()
        assert body["error"] == "internal_error"
        assert "KeyError" not in response.text


class TestHealth:
    """Tests for GET /health."""

    @pytest.mark.asyncio
    async def test_healthy(self, test_client):
        response = await test_client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["store_backend"] == "memory"
        assert body["database"] == "connected"

    @pytest.mark.asyncio
    async def test_unreachable_store_returns_503(self, test_client, memory_store):
        memory_store.ping = AsyncMock(return_value=False)

        response = await test_client.get("/health")

        assert response.status_code == 503
        assert response.json()["status"] == "unhealthy"
