"""
Registrar Backend: Student Route Handlers
==========================================

What:  /students endpoints: CRUD, name search, and the student-side
       enrollment views.
How:   Thin handlers. Each one resolves the DocumentStore dependency and
       delegates to StudentService; errors are formatted by the global
       handlers in main.py.

Route order matters: `/students/course/{course_id}` is declared before
`/students/{student_id}` so "course" is never captured as a student id.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status

from registrar.schemas.common import ErrorResponse
from registrar.schemas.course import CourseResponse
from registrar.schemas.student import StudentCreate, StudentResponse, StudentUpdate
from registrar.services.student_service import student_service
from registrar.store import DocumentStore, get_document_store


router = APIRouter(prefix="/students", tags=["Students"])

NOT_FOUND = {404: {"description": "Student not found", "model": ErrorResponse}}
SERVER_ERROR = {500: {"description": "Server error", "model": ErrorResponse}}


@router.get(
    "",
    response_model=List[StudentResponse],
    responses={**SERVER_ERROR, 404: {"description": "No student matches the name", "model": ErrorResponse}},
    summary="List all students or filter by name",
)
async def list_students(
    name: Optional[str] = Query(
        default=None,
        description="Case-insensitive substring of the student name",
    ),
    store: DocumentStore = Depends(get_document_store),
) -> List[StudentResponse]:
    return await student_service.list_students(store, name=name)


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=StudentResponse,
    responses={
        400: {"description": "Invalid student data", "model": ErrorResponse},
        409: {"description": "student_code already in use", "model": ErrorResponse},
        **SERVER_ERROR,
    },
    summary="Create a new student",
)
async def create_student(
    payload: StudentCreate,
    store: DocumentStore = Depends(get_document_store),
) -> StudentResponse:
    return await student_service.create_student(store, payload)


@router.get(
    "/course/{course_id}",
    response_model=List[StudentResponse],
    responses=SERVER_ERROR,
    summary="Get students whose course list contains the course",
)
async def list_students_by_course(
    course_id: str,
    store: DocumentStore = Depends(get_document_store),
) -> List[StudentResponse]:
    return await student_service.list_students_by_course(store, course_id)


@router.get(
    "/{student_id}",
    response_model=StudentResponse,
    responses={**NOT_FOUND, **SERVER_ERROR},
    summary="Get a student by ID",
)
async def get_student(
    student_id: str,
    store: DocumentStore = Depends(get_document_store),
) -> StudentResponse:
    return await student_service.get_student(store, student_id)


@router.patch(
    "/{student_id}",
    response_model=StudentResponse,
    responses={**NOT_FOUND, **SERVER_ERROR},
    summary="Update a student's contact details",
    description="Only email, mobile, addresses and parents can change after creation.",
)
async def update_student(
    student_id: str,
    payload: StudentUpdate,
    store: DocumentStore = Depends(get_document_store),
) -> StudentResponse:
    return await student_service.update_student(store, student_id, payload)


@router.delete(
    "/{student_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses={**NOT_FOUND, **SERVER_ERROR},
    summary="Delete a student",
    description="Also removes the student from every course roster.",
)
async def delete_student(
    student_id: str,
    store: DocumentStore = Depends(get_document_store),
) -> Response:
    await student_service.delete_student(store, student_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get(
    "/{student_id}/courses",
    response_model=List[CourseResponse],
    responses={**NOT_FOUND, **SERVER_ERROR},
    summary="Get courses a student is enrolled in",
)
async def get_enrolled_courses(
    student_id: str,
    store: DocumentStore = Depends(get_document_store),
) -> List[CourseResponse]:
    return await student_service.get_enrolled_courses(store, student_id)


@router.delete(
    "/{student_id}/courses/{course_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses=SERVER_ERROR,
    summary="Student leaves a course",
    description="Idempotent: leaving a course the student is not in succeeds.",
)
async def leave_course(
    student_id: str,
    course_id: str,
    store: DocumentStore = Depends(get_document_store),
) -> Response:
    await student_service.leave_course(store, student_id, course_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
