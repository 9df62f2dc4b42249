"""Category endpoints: admin management and public listing."""

from fastapi import APIRouter, Request, Response
from starlette import status

from core.database import DbSession
from core.ratelimit import PUBLIC_LIMIT, limiter
from routes.params import Page
from schemas import CategoryDto, NewCategoryDto
from services.categories_service import (
    create_category,
    delete_category,
    get_categories,
    get_category,
    update_category,
)

admin_router = APIRouter(prefix="/admin/categories", tags=["admin: categories"])
public_router = APIRouter(prefix="/categories", tags=["public: categories"])


@admin_router.post(
    "",
    response_model=CategoryDto,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"description": "Name already taken"}},
)
async def create_category_endpoint(
    data: NewCategoryDto, db: DbSession
) -> CategoryDto:
    return await create_category(db, data)


@admin_router.patch(
    "/{cat_id}",
    response_model=CategoryDto,
    responses={
        404: {"description": "Category not found"},
        409: {"description": "Name already taken"},
    },
)
async def update_category_endpoint(
    cat_id: int, data: NewCategoryDto, db: DbSession
) -> CategoryDto:
    return await update_category(db, cat_id, data)


@admin_router.delete(
    "/{cat_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={
        404: {"description": "Category not found"},
        409: {"description": "Category still has events"},
    },
)
async def delete_category_endpoint(cat_id: int, db: DbSession) -> Response:
    await delete_category(db, cat_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@public_router.get("", response_model=list[CategoryDto])
@limiter.limit(PUBLIC_LIMIT)
async def get_categories_endpoint(
    request: Request, db: DbSession, page: Page
) -> list[CategoryDto]:
    return await get_categories(db, page.offset, page.limit)


@public_router.get(
    "/{cat_id}",
    response_model=CategoryDto,
    responses={404: {"description": "Category not found"}},
)
@limiter.limit(PUBLIC_LIMIT)
async def get_category_endpoint(
    request: Request, cat_id: int, db: DbSession
) -> CategoryDto:
    return await get_category(db, cat_id)
