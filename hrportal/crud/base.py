"""
CRUD base

Generic async CRUD over SQLModel table models
"""
from typing import Generic, TypeVar, Type, Optional, List, Any, Dict
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import SQLModel

from hrportal.models.base import utcnow

ModelType = TypeVar("ModelType", bound=SQLModel)
CreateSchemaType = TypeVar("CreateSchemaType", bound=SQLModel)
UpdateSchemaType = TypeVar("UpdateSchemaType", bound=SQLModel)


class CRUDBase(Generic[ModelType]):
    """
    CRUD base class

    Works on SQLModel objects directly. `filters` maps column names to
    values; None values are ignored so optional query params can be passed
    straight through.
    """

    def __init__(self, model: Type[ModelType]):
        self.model = model

    def _apply_filters(self, query, filters: Optional[Dict[str, Any]]):
        for field, value in (filters or {}).items():
            if value is not None:
                query = query.where(getattr(self.model, field) == value)
        return query

    async def get(self, db: AsyncSession, id: str) -> Optional[ModelType]:
        """Fetch one row by id"""
        result = await db.execute(
            select(self.model).where(self.model.id == id)
        )
        return result.scalar_one_or_none()

    async def get_multi(
        self,
        db: AsyncSession,
        *,
        skip: int = 0,
        limit: int = 100,
        filters: Optional[Dict[str, Any]] = None,
        order_by: Any = None
    ) -> List[ModelType]:
        """Fetch a page of rows"""
        query = self._apply_filters(select(self.model), filters)
        if order_by is not None:
            query = query.order_by(order_by)
        else:
            query = query.order_by(self.model.created_at.desc())
        query = query.offset(skip).limit(limit)
        result = await db.execute(query)
        return list(result.scalars().all())

    async def count(self, db: AsyncSession, *, filters: Optional[Dict[str, Any]] = None) -> int:
        """Row count"""
        query = self._apply_filters(select(func.count()).select_from(self.model), filters)
        result = await db.execute(query)
        return result.scalar() or 0

    async def create(
        self,
        db: AsyncSession,
        *,
        obj_in: CreateSchemaType | Dict[str, Any]
    ) -> ModelType:
        """
        Create a row

        Accepts a schema or a dict; both are validated into the table model.
        """
        db_obj = self.model.model_validate(obj_in)
        db.add(db_obj)
        await db.flush()
        await db.refresh(db_obj)
        return db_obj

    async def update(
        self,
        db: AsyncSession,
        *,
        db_obj: ModelType,
        obj_in: UpdateSchemaType | Dict[str, Any]
    ) -> ModelType:
        """
        Update a row

        Accepts a schema (only set fields are applied) or a dict
        """
        if isinstance(obj_in, dict):
            update_data = obj_in
        else:
            update_data = obj_in.model_dump(exclude_unset=True)

        for field, value in update_data.items():
            if value is not None:
                setattr(db_obj, field, value)
        if hasattr(db_obj, "updated_at"):
            db_obj.updated_at = utcnow()

        await db.flush()
        await db.refresh(db_obj)
        return db_obj

    async def delete(self, db: AsyncSession, *, id: str) -> bool:
        """Delete a row"""
        obj = await self.get(db, id)
        if obj:
            await db.delete(obj)
            await db.flush()
            return True
        return False
