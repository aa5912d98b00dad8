"""
Registrar Backend: Course Route Handlers
=========================================

What:  /courses endpoints: CRUD, topic search, and the course-side
       enrollment commands (assign, remove, roster).
How:   Thin handlers delegating to CourseService.

`/courses/topic` is declared before `/courses/{course_id}` so the literal
path segment wins.
"""

from typing import List

from fastapi import APIRouter, Depends, Query, Response, status

from registrar.schemas.common import ErrorResponse
from registrar.schemas.course import CourseCreate, CourseResponse, CourseUpdate
from registrar.schemas.student import EnrolledStudent
from registrar.services.course_service import course_service
from registrar.store import DocumentStore, get_document_store

router = APIRouter(prefix="/courses", tags=["Courses"])

NOT_FOUND = {404: {"description": "Course or student not found", "model": ErrorResponse}}
SERVER_ERROR = {500: {"description": "Server error", "model": ErrorResponse}}


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=CourseResponse,
    responses={
        400: {"description": "Invalid course data", "model": ErrorResponse},
        409: {"description": "Course name already in use", "model": ErrorResponse},
        **SERVER_ERROR,
    },
    summary="Create a new course",
)
async def create_course(
    payload: CourseCreate,
    store: DocumentStore = Depends(get_document_store),
) -> CourseResponse:
    return await course_service.create_course(store, payload)


@router.get(
    "",
    response_model=List[CourseResponse],
    responses=SERVER_ERROR,
    summary="List all courses",
)
async def list_courses(
    store: DocumentStore = Depends(get_document_store),
) -> List[CourseResponse]:
    return await course_service.list_courses(store)


@router.get(
    "/topic",
    response_model=List[CourseResponse],
    responses=SERVER_ERROR,
    summary="Find courses by topic",
)
async def find_by_topic(
    name: str = Query(..., min_length=1, description="Case-insensitive topic substring"),
    store: DocumentStore = Depends(get_document_store),
) -> List[CourseResponse]:
    return await course_service.find_by_topic(store, name)


@router.get(
    "/{course_id}",
    response_model=CourseResponse,
    responses={**NOT_FOUND, **SERVER_ERROR},
    summary="Get a course by ID",
)
async def get_course(
    course_id: str,
    store: DocumentStore = Depends(get_document_store),
) -> CourseResponse:
    return await course_service.get_course(store, course_id)


@router.patch(
    "/{course_id}",
    response_model=CourseResponse,
    responses={
        **NOT_FOUND,
        409: {"description": "Course name already in use", "model": ErrorResponse},
        **SERVER_ERROR,
    },
    summary="Update a course",
)
async def update_course(
    course_id: str,
    payload: CourseUpdate,
    store: DocumentStore = Depends(get_document_store),
) -> CourseResponse:
    return await course_service.update_course(store, course_id, payload)


@router.delete(
    "/{course_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses={**NOT_FOUND, **SERVER_ERROR},
    summary="Delete a course",
    description="Also removes the course from every student's course list.",
)
async def delete_course(
    course_id: str,
    store: DocumentStore = Depends(get_document_store),
) -> Response:
    await course_service.delete_course(store, course_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/{course_id}/students/{student_id}",
    response_model=CourseResponse,
    responses={**NOT_FOUND, **SERVER_ERROR},
    summary="Enroll a student in a course",
    description="Idempotent: re-enrolling returns the course unchanged.",
)
async def assign_student(
    course_id: str,
    student_id: str,
    store: DocumentStore = Depends(get_document_store),
) -> CourseResponse:
    return await course_service.assign_student(store, course_id, student_id)


@router.delete(
    "/{course_id}/students/{student_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses=SERVER_ERROR,
    summary="Remove a student from a course",
)
async def remove_student(
    course_id: str,
    student_id: str,
    store: DocumentStore = Depends(get_document_store),
) -> Response:
    await course_service.remove_student(store, course_id, student_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get(
    "/{course_id}/students",
    response_model=List[EnrolledStudent],
    responses={**NOT_FOUND, **SERVER_ERROR},
    summary="Get the roster of a course",
)
async def get_enrolled_students(
    course_id: str,
    store: DocumentStore = Depends(get_document_store),
) -> List[EnrolledStudent]:
    return await course_service.get_enrolled_students(store, course_id)
