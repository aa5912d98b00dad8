"""
Registrar Backend: Test Configuration (conftest.py)
====================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all
       tests. Every test gets a fresh InMemoryDocumentStore; endpoint tests
       inject it into a fresh app through dependency_overrides.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── memory_store: Empty InMemoryDocumentStore
    ├── student_payload: Factory for valid POST /students bodies
    ├── course_payload: Factory for valid POST /courses bodies
    ├── make_student / make_course: Insert through the services
    └── test_client: HTTPX AsyncClient bound to memory_store
"""

import os

# Override settings for testing BEFORE any registrar imports
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./test.db"
os.environ["STORE_BACKEND"] = "memory"
os.environ["AUTO_CREATE_SCHEMA"] = "false"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from registrar.schemas.course import CourseCreate
from registrar.schemas.student import StudentCreate
from registrar.services.course_service import course_service
from registrar.services.student_service import student_service
from registrar.store import InMemoryDocumentStore, get_document_store


# ══════════════════════════════════════════════════════════════════════════
# Payload Factories
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def student_payload():
    """
    Returns a factory for student request bodies.

    Usage:
        body = student_payload(student_code="STU002", name="Jane Roe")
    """
    def _build(**overrides):
        body = {
            "name": "John Doe",
            "date_of_birth": "2000-01-01",
            "gender": "Male",
            "student_code": "STU001",
            "addresses": [
                {
                    "type": "Permanent",
                    "street": "123 Main St",
                    "city": "New York",
                    "state": "NY",
                    "zip_code": "10001",
                }
            ],
            "email": "john.doe@example.com",
            "mobile": "1234567890",
            "parents": {"father_name": "Richard Doe", "mother_name": "Mary Doe"},
        }
        body.update(overrides)
        return body

    return _build


@pytest.fixture
def course_payload():
    """Returns a factory for course request bodies."""
    def _build(**overrides):
        body = {
            "name": "Intro to Web Dev",
            "description": "A comprehensive introduction to modern web development",
            "type": "Technical",
            "duration": "3 months",
            "topics": ["HTML", "CSS", "JavaScript", "React"],
        }
        body.update(overrides)
        return body

    return _build


# ══════════════════════════════════════════════════════════════════════════
# Store Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def memory_store():
    """A fresh, empty in-memory store per test."""
    return InMemoryDocumentStore()


@pytest.fixture
def make_student(memory_store, student_payload):
    """Creates a student in memory_store and returns its id."""
    async def _make(**overrides):
        created = await student_service.create_student(
            memory_store, StudentCreate(**student_payload(**overrides))
        )
        return created.id

    return _make


@pytest.fixture
def make_course(memory_store, course_payload):
    """Creates a course in memory_store and returns its id."""
    async def _make(**overrides):
        created = await course_service.create_course(
            memory_store, CourseCreate(**course_payload(**overrides))
        )
        return created.id

    return _make


# ══════════════════════════════════════════════════════════════════════════
# HTTP Client
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def test_client(memory_store):
    """
    Provides an async HTTP test client for endpoint testing.

    How:    A fresh app from create_app(), with get_document_store overridden
            to return this test's memory_store. ASGITransport routes requests
            directly to the app without a server.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    from registrar.main import create_app

    app = create_app()
    app.dependency_overrides[get_document_store] = lambda: memory_store
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
