"""
Base Data Access Object (DAO) class.

WHY: The DAO pattern keeps SQL out of services and routes. Services decide
what may be read or written; DAOs decide how.
"""

from typing import Generic, TypeVar, Type, Optional, List, Any, Tuple
from sqlalchemy import select, func, Select
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.models.base import Base

# Type variable for model class
ModelType = TypeVar("ModelType", bound=Base)


class BaseDAO(Generic[ModelType]):
    """
    Base Data Access Object providing common reads and inserts.

    There is deliberately no generic update/delete: the records managed
    here are either catalogs, soft-deleted, or append-only.

    Type Parameters:
        ModelType: The SQLAlchemy model class this DAO manages
    """

    def __init__(self, model: Type[ModelType], session: AsyncSession):
        """
        Initialize DAO with model class and database session.

        Args:
            model: The SQLAlchemy model class
            session: Async database session
        """
        self.model = model
        self.session = session

    async def create(self, **kwargs: Any) -> ModelType:
        """
        Create a new record.

        Args:
            **kwargs: Field values for the new record

        Returns:
            The created model instance with database-generated fields populated

        Raises:
            IntegrityError: If unique constraints are violated
        """
        instance = self.model(**kwargs)
        self.session.add(instance)
        await self.session.flush()
        await self.session.refresh(instance)
        return instance

    async def get_by_id(self, id: int) -> Optional[ModelType]:
        """
        Retrieve a single record by primary key.

        Returns:
            The model instance if found, None otherwise
        """
        result = await self.session.execute(select(self.model).where(self.model.id == id))
        return result.scalar_one_or_none()

    async def get_by_field(self, field_name: str, value: Any) -> Optional[ModelType]:
        """
        Retrieve a single record by any field (slug lookups in catalogs).

        Raises:
            AttributeError: If field_name doesn't exist on the model
        """
        if not hasattr(self.model, field_name):
            raise AttributeError(f"{self.model.__name__} has no field '{field_name}'")

        result = await self.session.execute(
            select(self.model).where(getattr(self.model, field_name) == value)
        )
        return result.scalar_one_or_none()

    async def get_all(self, *order_by: Any, **filters: Any) -> List[ModelType]:
        """
        Retrieve all records matching equality filters.

        Args:
            *order_by: Ordering expressions
            **filters: Field name to value filters

        Returns:
            List of model instances
        """
        query = select(self.model)
        for field, value in filters.items():
            if hasattr(self.model, field):
                query = query.where(getattr(self.model, field) == value)
        if order_by:
            query = query.order_by(*order_by)

        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def paginate(
        self,
        query: Select,
        page: int,
        limit: int,
        *options: Any,
    ) -> Tuple[List[Any], int]:
        """
        Run a filtered query for one page and count the full result.

        WHY: Counting over a subquery of the same statement keeps the total
        consistent with every filter and scope applied to the page.

        Args:
            query: Fully filtered and ordered select
            page: 1-based page number
            limit: Page size
            *options: Loader options applied to the page query only

        Returns:
            Tuple of (page items, total count)
        """
        count_query = select(func.count()).select_from(query.order_by(None).subquery())
        total = (await self.session.execute(count_query)).scalar_one()

        result = await self.session.execute(
            query.options(*options).offset((page - 1) * limit).limit(limit)
        )
        return list(result.scalars().unique().all()), total
