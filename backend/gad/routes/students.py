"""
GAD Backend — Student Route Handlers
=====================================

What:  /api/v1/students endpoints.
How:   Extracts path/query/body data, delegates to StudentService, returns JSON.

Route order matters: the fixed paths (/search/..., /active) are declared
before /{student_id} so they are not captured by the path parameter.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from gad.database import get_db_session
from gad.routes.dependencies import ERROR_RESPONSES, page_params, with_total_count
from gad.schemas.common import Page, PageParams
from gad.schemas.student import StudentCreate, StudentResponse, StudentUpdate
from gad.services.student_service import student_service

# ── Router Configuration ──────────────────────────────────────────────────
router = APIRouter(prefix="/api/v1/students", tags=["Students"], responses=ERROR_RESPONSES)


@router.post(
    "",
    response_model=StudentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a student",
    description="Creates a student. Email, CPF and enrollment number must be unique.",
)
async def create_student(
    body: StudentCreate,
    db: AsyncSession = Depends(get_db_session),
) -> StudentResponse:
    return await student_service.create(db, body)


@router.get(
    "",
    response_model=Page[StudentResponse],
    summary="List students",
    description=(
        "Paginated listing, sorted by name unless `sort` says otherwise. "
        "Optional filters are case-insensitive substring matches and combine with AND."
    ),
)
async def list_students(
    response: Response,
    name: Optional[str] = Query(default=None, description="Substring of the name"),
    email: Optional[str] = Query(default=None, description="Substring of the email"),
    course: Optional[str] = Query(default=None, description="Substring of the course"),
    active: Optional[bool] = Query(default=None, description="Filter by status"),
    params: PageParams = Depends(page_params),
    db: AsyncSession = Depends(get_db_session),
) -> Page[StudentResponse]:
    result = await student_service.list_all(
        db, params, name=name, email=email, course=course, active=active
    )
    return with_total_count(response, result)


@router.get(
    "/search/by-name",
    response_model=Page[StudentResponse],
    summary="Search students by name",
)
async def search_students_by_name(
    response: Response,
    name: str = Query(min_length=1, description="Substring of the name"),
    params: PageParams = Depends(page_params),
    db: AsyncSession = Depends(get_db_session),
) -> Page[StudentResponse]:
    return with_total_count(response, await student_service.search_by_name(db, name, params))


@router.get(
    "/search/by-email",
    response_model=StudentResponse,
    summary="Find a student by exact email",
)
async def get_student_by_email(
    email: str = Query(min_length=1),
    db: AsyncSession = Depends(get_db_session),
) -> StudentResponse:
    return await student_service.get_by_email(db, email)


@router.get(
    "/search/by-cpf",
    response_model=StudentResponse,
    summary="Find a student by exact CPF",
)
async def get_student_by_cpf(
    cpf: str = Query(min_length=1),
    db: AsyncSession = Depends(get_db_session),
) -> StudentResponse:
    return await student_service.get_by_cpf(db, cpf)


@router.get(
    "/search/by-enrollment",
    response_model=StudentResponse,
    summary="Find a student by exact enrollment number",
)
async def get_student_by_enrollment_number(
    enrollment_number: str = Query(min_length=1),
    db: AsyncSession = Depends(get_db_session),
) -> StudentResponse:
    return await student_service.get_by_enrollment_number(db, enrollment_number)


@router.get(
    "/search/by-course",
    response_model=Page[StudentResponse],
    summary="List students of a course",
)
async def list_students_by_course(
    response: Response,
    course: str = Query(min_length=1, description="Substring of the course"),
    params: PageParams = Depends(page_params),
    db: AsyncSession = Depends(get_db_session),
) -> Page[StudentResponse]:
    return with_total_count(response, await student_service.list_by_course(db, course, params))


@router.get(
    "/active",
    response_model=Page[StudentResponse],
    summary="List active students",
)
async def list_active_students(
    response: Response,
    params: PageParams = Depends(page_params),
    db: AsyncSession = Depends(get_db_session),
) -> Page[StudentResponse]:
    return with_total_count(response, await student_service.list_active(db, params))


@router.get(
    "/{student_id}",
    response_model=StudentResponse,
    summary="Get a student by ID",
)
async def get_student(
    student_id: int,
    db: AsyncSession = Depends(get_db_session),
) -> StudentResponse:
    return await student_service.get_by_id(db, student_id)


@router.put(
    "/{student_id}",
    response_model=StudentResponse,
    summary="Update a student",
    description="Partial update: omitted or null fields keep their current value.",
)
async def update_student(
    student_id: int,
    body: StudentUpdate,
    db: AsyncSession = Depends(get_db_session),
) -> StudentResponse:
    return await student_service.update(db, student_id, body)


@router.delete(
    "/{student_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Delete a student",
)
async def delete_student(
    student_id: int,
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    await student_service.delete(db, student_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.patch(
    "/{student_id}/activate",
    response_model=StudentResponse,
    summary="Activate a student",
)
async def activate_student(
    student_id: int,
    db: AsyncSession = Depends(get_db_session),
) -> StudentResponse:
    return await student_service.activate(db, student_id)


@router.patch(
    "/{student_id}/deactivate",
    response_model=StudentResponse,
    summary="Deactivate a student",
)
async def deactivate_student(
    student_id: int,
    db: AsyncSession = Depends(get_db_session),
) -> StudentResponse:
    return await student_service.deactivate(db, student_id)
