"""Base repository: generic CRUD returning application DTOs."""

from collections.abc import Sequence
from typing import Any, Generic, TypeVar

from sqlalchemy import ColumnElement, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.infrastructure.persistence.database import Base

ModelType = TypeVar("ModelType", bound=Base)
ResultT = TypeVar("ResultT")
DataT = TypeVar("DataT")


class BaseRepository(Generic[ModelType, ResultT, DataT]):
    """Base repository with get_all, get_page, get_by_id, find, create, update, delete.

    Subclasses implement _to_result (ORM -> DTO), _new (DTO -> ORM) and
    _apply (copy DTO fields onto an ORM row), and may override
    _translate_integrity_error to turn constraint violations into domain
    exceptions. Writes flush only; save_changes() commits. LSP: subclasses
    are substitutable for BaseRepository.
    """

    def __init__(self, db: AsyncSession, model: type[ModelType]) -> None:
        self.db = db
        self.model = model

    # ORM-level helpers

    async def get_entity(self, entity_id: int) -> ModelType | None:
        """Return the ORM row by primary key, or None."""
        return await self.db.get(self.model, entity_id)

    async def find(self, *criteria: ColumnElement[bool]) -> list[ModelType]:
        """Return ORM rows matching all criteria, ordered by id."""
        model: Any = self.model
        result = await self.db.execute(select(self.model).where(*criteria).order_by(model.id))
        return list(result.scalars().all())

    # DTO-level CRUD

    async def get_all(self) -> list[ResultT]:
        """Return every record ordered by id."""
        return [self._to_result(obj) for obj in await self.find()]

    async def get_page(self, page: int, page_size: int) -> list[ResultT]:
        """Return one 1-based page of records ordered by id."""
        if page < 1 or page_size < 1:
            raise ValueError(f"page and page_size must be positive, got {page}, {page_size}")
        model: Any = self.model
        result = await self.db.execute(
            select(self.model)
            .order_by(model.id)
            .offset((page - 1) * page_size)
            .limit(page_size)
        )
        return [self._to_result(obj) for obj in result.scalars().all()]

    async def get_by_id(self, entity_id: int) -> ResultT | None:
        obj = await self.get_entity(entity_id)
        return self._to_result(obj) if obj is not None else None

    async def create(self, data: DataT) -> ResultT:
        """Add a new record and flush so its id is assigned."""
        await self._before_write(data)
        obj = self._new(data)
        self.db.add(obj)
        await self._flush(data)
        return self._to_result(obj)

    async def update(self, entity_id: int, data: DataT) -> ResultT | None:
        """Replace the record's fields; None if it does not exist."""
        obj = await self.get_entity(entity_id)
        if obj is None:
            return None
        await self._before_write(data)
        self._apply(obj, data)
        await self._flush(data)
        return self._to_result(obj)

    async def delete(self, entity_id: int) -> bool:
        """Delete the record; False if it does not exist."""
        obj = await self.get_entity(entity_id)
        if obj is None:
            return False
        await self.db.delete(obj)
        await self._flush(None, entity_id=entity_id)
        return True

    async def save_changes(self) -> None:
        """Commit the current unit of work."""
        await self.db.commit()

    async def _flush(self, data: DataT | None, *, entity_id: int | None = None) -> None:
        try:
            await self.db.flush()
        except IntegrityError as e:
            await self.db.rollback()
            self._translate_integrity_error(e, data, entity_id)
            raise

    # Subclass hooks

    async def _before_write(self, data: DataT) -> None:
        """Override to check references before create/update."""

    def _translate_integrity_error(
        self, error: IntegrityError, data: DataT | None, entity_id: int | None
    ) -> None:
        """Override to raise a domain exception for a known constraint violation."""

    def _to_result(self, obj: ModelType) -> ResultT:
        raise NotImplementedError

    def _new(self, data: DataT) -> ModelType:
        raise NotImplementedError

    def _apply(self, obj: ModelType, data: DataT) -> None:
        raise NotImplementedError


def missing_ids(requested: Sequence[int], found: Sequence[int]) -> list[int]:
    """Ids in requested that are not in found, in request order, without duplicates."""
    present = set(found)
    seen: set[int] = set()
    missing: list[int] = []
    for entity_id in requested:
        if entity_id not in present and entity_id not in seen:
            missing.append(entity_id)
        seen.add(entity_id)
    return missing
