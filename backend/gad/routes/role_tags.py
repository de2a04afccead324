"""
GAD Backend — RoleTag Route Handlers
=====================================

What:  /api/v1/role-tags endpoints.
Who:   Admin UI maintaining the catalogue of staff functions.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from gad.database import get_db_session
from gad.routes.dependencies import ERROR_RESPONSES, page_params, with_total_count
from gad.schemas.common import Page, PageParams
from gad.schemas.role_tag import RoleTagCreate, RoleTagResponse, RoleTagUpdate
from gad.services.role_tag_service import role_tag_service

router = APIRouter(prefix="/api/v1/role-tags", tags=["Role Tags"], responses=ERROR_RESPONSES)


@router.post(
    "",
    response_model=RoleTagResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a role tag",
)
async def create_role_tag(
    body: RoleTagCreate,
    db: AsyncSession = Depends(get_db_session),
) -> RoleTagResponse:
    return await role_tag_service.create(db, body)


@router.get("", response_model=Page[RoleTagResponse], summary="List role tags")
async def list_role_tags(
    response: Response,
    params: PageParams = Depends(page_params),
    db: AsyncSession = Depends(get_db_session),
) -> Page[RoleTagResponse]:
    return with_total_count(response, await role_tag_service.list_all(db, params))


@router.get(
    "/by-code",
    response_model=RoleTagResponse,
    summary="Find a role tag by exact code",
)
async def get_role_tag_by_code(
    code: str = Query(min_length=1),
    db: AsyncSession = Depends(get_db_session),
) -> RoleTagResponse:
    return await role_tag_service.get_by_code(db, code)


@router.get(
    "/active",
    response_model=List[RoleTagResponse],
    summary="List every active role tag",
    description="Unpaginated, sorted by name. Intended for selection widgets.",
)
async def list_active_role_tags(
    db: AsyncSession = Depends(get_db_session),
) -> List[RoleTagResponse]:
    return await role_tag_service.list_active(db)


@router.get(
    "/active/paged",
    response_model=Page[RoleTagResponse],
    summary="List active role tags, paginated",
)
async def list_active_role_tags_paged(
    response: Response,
    params: PageParams = Depends(page_params),
    db: AsyncSession = Depends(get_db_session),
) -> Page[RoleTagResponse]:
    return with_total_count(response, await role_tag_service.list_active_paged(db, params))


@router.get(
    "/search/by-name",
    response_model=Page[RoleTagResponse],
    summary="Search role tags by name",
)
async def search_role_tags_by_name(
    response: Response,
    name: str = Query(min_length=1),
    params: PageParams = Depends(page_params),
    db: AsyncSession = Depends(get_db_session),
) -> Page[RoleTagResponse]:
    return with_total_count(response, await role_tag_service.search_by_name(db, name, params))


@router.get(
    "/search/by-code",
    response_model=Page[RoleTagResponse],
    summary="Search role tags by code substring",
)
async def search_role_tags_by_code(
    response: Response,
    code: str = Query(min_length=1),
    params: PageParams = Depends(page_params),
    db: AsyncSession = Depends(get_db_session),
) -> Page[RoleTagResponse]:
    return with_total_count(response, await role_tag_service.search_by_code(db, code, params))


@router.get(
    "/search",
    response_model=Page[RoleTagResponse],
    summary="Search role tags with combined filters",
)
async def search_role_tags(
    response: Response,
    code: Optional[str] = Query(default=None),
    name: Optional[str] = Query(default=None),
    active: Optional[bool] = Query(default=None),
    params: PageParams = Depends(page_params),
    db: AsyncSession = Depends(get_db_session),
) -> Page[RoleTagResponse]:
    result = await role_tag_service.search(db, params, code=code, name=name, active=active)
    return with_total_count(response, result)


@router.get("/{role_tag_id}", response_model=RoleTagResponse, summary="Get a role tag by ID")
async def get_role_tag(
    role_tag_id: int,
    db: AsyncSession = Depends(get_db_session),
) -> RoleTagResponse:
    return await role_tag_service.get_by_id(db, role_tag_id)


@router.put("/{role_tag_id}", response_model=RoleTagResponse, summary="Update a role tag")
async def update_role_tag(
    role_tag_id: int,
    body: RoleTagUpdate,
    db: AsyncSession = Depends(get_db_session),
) -> RoleTagResponse:
    return await role_tag_service.update(db, role_tag_id, body)


@router.delete(
    "/{role_tag_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Delete a role tag",
    description="Refused with 400 while any user assignment references the tag.",
)
async def delete_role_tag(
    role_tag_id: int,
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    await role_tag_service.delete(db, role_tag_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.patch(
    "/{role_tag_id}/activate",
    response_model=RoleTagResponse,
    summary="Activate a role tag",
)
async def activate_role_tag(
    role_tag_id: int,
    db: AsyncSession = Depends(get_db_session),
) -> RoleTagResponse:
    return await role_tag_service.activate(db, role_tag_id)


@router.patch(
    "/{role_tag_id}/deactivate",
    response_model=RoleTagResponse,
    summary="Deactivate a role tag",
)
async def deactivate_role_tag(
    role_tag_id: int,
    db: AsyncSession = Depends(get_db_session),
) -> RoleTagResponse:
    return await role_tag_service.deactivate(db, role_tag_id)
