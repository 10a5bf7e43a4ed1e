"""Base repository with common database operations."""
from contextlib import contextmanager
from typing import Generic, TypeVar, Type, Optional, List, Dict, Any, Iterator

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy import desc, asc

from exceptions import DatabaseError
from logging_config import get_logger

logger = get_logger(__name__)

ModelType = TypeVar("ModelType")

_DEPTH_KEY = "transaction_depth"


@contextmanager
def transaction(db: Session) -> Iterator[Session]:
    """
    Run a block of repository calls as one atomic unit of work.

    Nested blocks join the outermost one; only the outermost block commits.
    Any exception rolls the whole unit back, so callers never observe a
    partially applied replace.

    Args:
        db: Database session

    Yields:
        The same session
    """
    depth = db.info.get(_DEPTH_KEY, 0)
    db.info[_DEPTH_KEY] = depth + 1
    try:
        yield db
        if depth == 0:
            db.commit()
    except SQLAlchemyError as e:
        if depth == 0:
            db.rollback()
            logger.error("Transaction rolled back", error=str(e), error_type=type(e).__name__)
            raise DatabaseError("Database operation failed", {"error": str(e)}) from e
        raise
    except Exception:
        if depth == 0:
            db.rollback()
            logger.info("Transaction rolled back")
        raise
    finally:
        db.info[_DEPTH_KEY] = depth


class BaseRepository(Generic[ModelType]):
    """
    Base repository providing common CRUD operations.

    Writes only flush; committing is the job of the surrounding
    transaction() block so multi-step mutations stay atomic.
    """

    def __init__(self, model: Type[ModelType], db: Session):
        """
        Initialize repository.

        Args:
            model: SQLAlchemy model class
            db: Database session
        """
        self.model = model
        self.db = db

    def get_by_id(self, id: int) -> Optional[ModelType]:
        """
        Get entity by ID.

        Args:
            id: Entity ID

        Returns:
            Entity or None if not found
        """
        try:
            return self.db.query(self.model).filter(
                self.model.id == id
            ).first()
        except SQLAlchemyError as e:
            logger.error(f"Error getting {self.model.__name__} by ID {id}: {e}")
            raise DatabaseError(f"Failed to get {self.model.__name__}") from e

    def get_all(
        self,
        skip: int = 0,
        limit: int = 100,
        order_by: Optional[str] = None,
        order_direction: str = "desc"
    ) -> List[ModelType]:
        """
        Get all entities with pagination.

        Args:
            skip: Number of records to skip
            limit: Maximum number of records to return
            order_by: Field to order by
            order_direction: "asc" or "desc"

        Returns:
            List of entities
        """
        try:
            query = self.db.query(self.model)

            if order_by:
                order_field = getattr(self.model, order_by, None)
                if order_field is not None:
                    if order_direction == "asc":
                        query = query.order_by(asc(order_field))
                    else:
                        query = query.order_by(desc(order_field))

            return query.offset(skip).limit(limit).all()

        except SQLAlchemyError as e:
            logger.error(f"Error getting all {self.model.__name__}: {e}")
            raise DatabaseError(f"Failed to get {self.model.__name__} list") from e

    def add(self, entity: ModelType) -> ModelType:
        """
        Stage an entity and flush so it receives an ID.

        Args:
            entity: Model instance

        Returns:
            The same entity
        """
        self.db.add(entity)
        self.db.flush()
        return entity

    def create(self, **kwargs) -> ModelType:
        """
        Create new entity.

        Args:
            **kwargs: Entity attributes

        Returns:
            Created entity
        """
        entity = self.add(self.model(**kwargs))
        logger.debug(f"Created {self.model.__name__} with ID {entity.id}")
        return entity

    def bulk_create(self, entities: List[Dict[str, Any]]) -> List[ModelType]:
        """
        Bulk create entities.

        Args:
            entities: List of entity dictionaries

        Returns:
            List of created entities
        """
        created = [self.model(**entity_data) for entity_data in entities]
        self.db.add_all(created)
        self.db.flush()
        return created

    def delete(self, entity: ModelType) -> None:
        """
        Delete an entity.

        Args:
            entity: Model instance
        """
        self.db.delete(entity)
        self.db.flush()

    def count(self, filters: Optional[Dict[str, Any]] = None) -> int:
        """
        Count entities with optional filters.

        Args:
            filters: Optional filter dictionary

        Returns:
            Count of entities
        """
        try:
            query = self.db.query(self.model)

            if filters:
                for key, value in filters.items():
                    if hasattr(self.model, key):
                        query = query.filter(getattr(self.model, key) == value)

            return query.count()

        except SQLAlchemyError as e:
            logger.error(f"Error counting {self.model.__name__}: {e}")
            raise DatabaseError(f"Failed to count {self.model.__name__}") from e

    def exists(self, id: int) -> bool:
        """
        Check if entity exists by ID.

        Args:
            id: Entity ID

        Returns:
            True if exists, False otherwise
        """
        return self.db.query(self.model.id).filter(
            self.model.id == id
        ).first() is not None
