"""Category service: admin management and public lookup."""

from sqlalchemy.ext.asyncio import AsyncSession

from core import get_logger
from core.errors import ConflictError, NotFoundError
from models import Category
from repositories.category_repository import CategoryRepository
from schemas import CategoryDto, NewCategoryDto

logger = get_logger(__name__)


async def require_category(db: AsyncSession, category_id: int) -> Category:
    category = await CategoryRepository(db).get_by_id(category_id)
    if category is None:
        raise NotFoundError(f"Category with id={category_id} was not found")
    return category


async def _ensure_name_free(
    repo: CategoryRepository, name: str, category_id: int | None = None
) -> None:
    existing = await repo.get_by_name(name)
    if existing is not None and existing.id != category_id:
        raise ConflictError(f"Category with name={name} already exists")


async def create_category(db: AsyncSession, data: NewCategoryDto) -> CategoryDto:
    repo = CategoryRepository(db)
    await _ensure_name_free(repo, data.name)
    category = await repo.create(data.name)
    logger.info("category.created", category_id=category.id)
    return CategoryDto.model_validate(category)


async def update_category(
    db: AsyncSession, category_id: int, data: NewCategoryDto
) -> CategoryDto:
    """Rename a category. Keeping the current name is not a conflict."""
    repo = CategoryRepository(db)
    category = await require_category(db, category_id)
    await _ensure_name_free(repo, data.name, category_id)
    category = await repo.rename(category, data.name)
    logger.info("category.updated", category_id=category_id)
    return CategoryDto.model_validate(category)


async def delete_category(db: AsyncSession, category_id: int) -> None:
    repo = CategoryRepository(db)
    await require_category(db, category_id)
    if await repo.has_events(category_id):
        raise ConflictError("The category is not empty")
    await repo.delete(category_id)
    logger.info("category.deleted", category_id=category_id)


async def get_categories(
    db: AsyncSession, offset: int, limit: int
) -> list[CategoryDto]:
    categories = await CategoryRepository(db).get_all(offset=offset, limit=limit)
    return [CategoryDto.model_validate(c) for c in categories]


async def get_category(db: AsyncSession, category_id: int) -> CategoryDto:
    return CategoryDto.model_validate(await require_category(db, category_id))
