"""
GAD Backend — User Route Handlers
==================================

What:  /api/v1/users endpoints, including role assignment.

Role endpoints:
    POST   /api/v1/users/{id}/roles   {"role_tag_ids": [...], "notes": "..."}
    DELETE /api/v1/users/{id}/roles   {"role_tag_ids": [...]}
    Both answer with the updated user.
"""

from typing import List, Optional

from fastapi import APIRouter, Body, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from gad.database import get_db_session
from gad.routes.dependencies import ERROR_RESPONSES, page_params, with_total_count
from gad.schemas.common import Page, PageParams
from gad.schemas.user import (
    AssignRolesRequest,
    RevokeRolesRequest,
    UserCreate,
    UserResponse,
    UserUpdate,
)
from gad.services.user_service import user_service

router = APIRouter(prefix="/api/v1/users", tags=["Users"], responses=ERROR_RESPONSES)


@router.post(
    "",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a staff user",
    description="Email, CPF and SIAPE must be unique. `role_tag_ids` grants initial roles.",
)
async def create_user(
    body: UserCreate,
    db: AsyncSession = Depends(get_db_session),
) -> UserResponse:
    return await user_service.create(db, body)


@router.get("", response_model=Page[UserResponse], summary="List users")
async def list_users(
    response: Response,
    params: PageParams = Depends(page_params),
    db: AsyncSession = Depends(get_db_session),
) -> Page[UserResponse]:
    return with_total_count(response, await user_service.list_all(db, params))


@router.get("/active", response_model=Page[UserResponse], summary="List active users")
async def list_active_users(
    response: Response,
    params: PageParams = Depends(page_params),
    db: AsyncSession = Depends(get_db_session),
) -> Page[UserResponse]:
    return with_total_count(response, await user_service.list_active(db, params))


@router.get(
    "/search",
    response_model=Page[UserResponse],
    summary="Search users with combined filters",
)
async def search_users(
    response: Response,
    name: Optional[str] = Query(default=None),
    email: Optional[str] = Query(default=None),
    department: Optional[str] = Query(default=None),
    education: Optional[str] = Query(default=None),
    active: Optional[bool] = Query(default=None),
    params: PageParams = Depends(page_params),
    db: AsyncSession = Depends(get_db_session),
) -> Page[UserResponse]:
    result = await user_service.search(
        db,
        params,
        name=name,
        email=email,
        department=department,
        education=education,
        active=active,
    )
    return with_total_count(response, result)


@router.get("/search/by-name", response_model=Page[UserResponse], summary="Search users by name")
async def search_users_by_name(
    response: Response,
    name: str = Query(min_length=1),
    params: PageParams = Depends(page_params),
    db: AsyncSession = Depends(get_db_session),
) -> Page[UserResponse]:
    return with_total_count(response, await user_service.search_by_name(db, name, params))


@router.get(
    "/search/by-department",
    response_model=Page[UserResponse],
    summary="Search users by department",
)
async def search_users_by_department(
    response: Response,
    department: str = Query(min_length=1),
    params: PageParams = Depends(page_params),
    db: AsyncSession = Depends(get_db_session),
) -> Page[UserResponse]:
    result = await user_service.search_by_department(db, department, params)
    return with_total_count(response, result)


@router.get(
    "/search/by-education",
    response_model=Page[UserResponse],
    summary="Search users by education",
)
async def search_users_by_education(
    response: Response,
    education: str = Query(min_length=1),
    params: PageParams = Depends(page_params),
    db: AsyncSession = Depends(get_db_session),
) -> Page[UserResponse]:
    result = await user_service.search_by_education(db, education, params)
    return with_total_count(response, result)


@router.get("/search/by-email", response_model=UserResponse, summary="Find a user by exact email")
async def get_user_by_email(
    email: str = Query(min_length=1),
    db: AsyncSession = Depends(get_db_session),
) -> UserResponse:
    return await user_service.get_by_email(db, email)


@router.get("/search/by-cpf", response_model=UserResponse, summary="Find a user by exact CPF")
async def get_user_by_cpf(
    cpf: str = Query(min_length=1),
    db: AsyncSession = Depends(get_db_session),
) -> UserResponse:
    return await user_service.get_by_cpf(db, cpf)


@router.get("/search/by-siape", response_model=UserResponse, summary="Find a user by exact SIAPE")
async def get_user_by_siape(
    siape: str = Query(min_length=1),
    db: AsyncSession = Depends(get_db_session),
) -> UserResponse:
    return await user_service.get_by_siape(db, siape)


@router.get(
    "/search/by-role",
    response_model=List[UserResponse],
    summary="List active users holding a role",
    description="Users whose assignment of the tag `code` is in force. Unpaginated.",
)
async def list_users_by_role(
    code: str = Query(min_length=1, description="Exact role tag code"),
    db: AsyncSession = Depends(get_db_session),
) -> List[UserResponse]:
    return await user_service.list_by_role(db, code)


@router.get(
    "/search/by-role/paged",
    response_model=Page[UserResponse],
    summary="List active users holding a role, paginated",
)
async def list_users_by_role_paged(
    response: Response,
    code: str = Query(min_length=1, description="Exact role tag code"),
    params: PageParams = Depends(page_params),
    db: AsyncSession = Depends(get_db_session),
) -> Page[UserResponse]:
    return with_total_count(response, await user_service.list_by_role_paged(db, code, params))


@router.get("/{user_id}", response_model=UserResponse, summary="Get a user by ID")
async def get_user(
    user_id: int,
    db: AsyncSession = Depends(get_db_session),
) -> UserResponse:
    return await user_service.get_by_id(db, user_id)


@router.put(
    "/{user_id}",
    response_model=UserResponse,
    summary="Update a user",
    description=(
        "Partial update. When `role_tag_ids` is sent, the user's in-force roles "
        "become exactly that set."
    ),
)
async def update_user(
    user_id: int,
    body: UserUpdate,
    db: AsyncSession = Depends(get_db_session),
) -> UserResponse:
    return await user_service.update(db, user_id, body)


@router.delete(
    "/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Delete a user and its assignments",
)
async def delete_user(
    user_id: int,
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    await user_service.delete(db, user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.patch("/{user_id}/activate", response_model=UserResponse, summary="Activate a user")
async def activate_user(
    user_id: int,
    db: AsyncSession = Depends(get_db_session),
) -> UserResponse:
    return await user_service.activate(db, user_id)


@router.patch("/{user_id}/deactivate", response_model=UserResponse, summary="Deactivate a user")
async def deactivate_user(
    user_id: int,
    db: AsyncSession = Depends(get_db_session),
) -> UserResponse:
    return await user_service.deactivate(db, user_id)


@router.post(
    "/{user_id}/roles",
    response_model=UserResponse,
    summary="Grant role tags to a user",
    description=(
        "Tags already in force are skipped; previously revoked ones are reinstated. "
        "Every tag must exist and be active."
    ),
)
async def assign_roles(
    user_id: int,
    body: AssignRolesRequest,
    db: AsyncSession = Depends(get_db_session),
) -> UserResponse:
    return await user_service.assign_roles(db, user_id, body)


@router.delete(
    "/{user_id}/roles",
    response_model=UserResponse,
    summary="Revoke role tags from a user",
    description="Ids the user does not currently hold are ignored.",
)
async def revoke_roles(
    user_id: int,
    body: RevokeRolesRequest = Body(...),
    db: AsyncSession = Depends(get_db_session),
) -> UserResponse:
    return await user_service.revoke_roles(db, user_id, body)
