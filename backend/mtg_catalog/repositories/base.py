"""
Base repository class with common database operations.

Catalog writes are keyed upserts (INSERT ... ON CONFLICT DO UPDATE), so
concurrent writers of the same natural key converge on the last write
instead of racing a select against an insert.
"""
from typing import Any, Generic, Sequence, Type, TypeVar

from sqlalchemy import func, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from mtg_catalog.db.base import Base

# Type variable for generic repository
ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """
    Usage:
        class CatalogRepository(BaseRepository[CatalogEntry]):
            def __init__(self, db: AsyncSession):
                super().__init__(CatalogEntry, db)

            async def get_by_identity_key(self, key: str) -> CatalogEntry | None:
                return await self.find_one_by(identity_key=key)
    """

    def __init__(self, model: Type[ModelType], db: AsyncSession):
        self.model = model
        self.db = db

    async def get_by_id(self, id: int) -> ModelType | None:
        result = await self.db.execute(
            select(self.model).where(self.model.id == id)
        )
        return result.scalar_one_or_none()

    async def find_one_by(self, **kwargs: Any) -> ModelType | None:
        """
        Single record matching every column/value pair.

        Raises:
            AttributeError: A keyword is not a column of the model
        """
        query = select(self.model)
        for key, value in kwargs.items():
            query = query.where(getattr(self.model, key) == value)
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def count(self, **kwargs: Any) -> int:
        """Count records, optionally filtered by column values."""
        query = select(func.count()).select_from(self.model)
        for key, value in kwargs.items():
            query = query.where(getattr(self.model, key) == value)
        result = await self.db.execute(query)
        return result.scalar() or 0

    def _insert(self):
        # PostgreSQL in production, SQLite under test; both speak ON CONFLICT
        if self.db.get_bind().dialect.name == "sqlite":
            return sqlite_insert(self.model)
        return pg_insert(self.model)

    async def upsert(self, conflict_columns: Sequence[str], values: dict[str, Any]) -> ModelType:
        """
        Insert a record or overwrite the one sharing its natural key.

        Args:
            conflict_columns: Columns of the unique constraint that identify the row
            values: Full column name/value mapping to write

        Returns:
            The stored instance, reloaded so identity-mapped copies see the write
        """
        stmt = self._insert().values(**values)
        stmt = stmt.on_conflict_do_update(
            index_elements=list(conflict_columns),
            set_={
                **{
                    key: getattr(stmt.excluded, key)
                    for key in values
                    if key not in conflict_columns
                },
                "updated_at": func.now(),
            },
        )
        await self.db.execute(stmt)

        query = select(self.model).execution_options(populate_existing=True)
        for key in conflict_columns:
            query = query.where(getattr(self.model, key) == values[key])
        result = await self.db.execute(query)
        return result.scalar_one()
