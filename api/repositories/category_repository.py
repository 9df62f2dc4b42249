"""Category repository for database operations."""

from sqlalchemy import delete, exists, select
from sqlalchemy.ext.asyncio import AsyncSession

from models import Category, Event
from repositories.utils import paginate


class CategoryRepository:
    """Repository for Category database operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_id(self, category_id: int) -> Category | None:
        result = await self.db.execute(
            select(Category).where(Category.id == category_id)
        )
        return result.scalar_one_or_none()

    async def get_by_name(self, name: str) -> Category | None:
        result = await self.db.execute(select(Category).where(Category.name == name))
        return result.scalar_one_or_none()

    async def create(self, name: str) -> Category:
        category = Category(name=name)
        self.db.add(category)
        await self.db.flush()
        return category

    async def rename(self, category: Category, name: str) -> Category:
        category.name = name
        await self.db.flush()
        return category

    async def get_all(self, *, offset: int = 0, limit: int = 10) -> list[Category]:
        stmt = select(Category).order_by(Category.id)
        result = await self.db.execute(paginate(stmt, offset, limit))
        return list(result.scalars().all())

    async def has_events(self, category_id: int) -> bool:
        """True if any event references this category."""
        result = await self.db.execute(
            select(exists().where(Event.category_id == category_id))
        )
        return bool(result.scalar())

    async def delete(self, category_id: int) -> bool:
        result = await self.db.execute(
            delete(Category).where(Category.id == category_id)
        )
        return bool(result.rowcount)
