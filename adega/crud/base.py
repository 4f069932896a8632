"""
Base CRUD operations with SQLAlchemy 2.x patterns.
Statements only: select(), insert(), update(), delete().
Nothing here commits unless asked to, so services can compose several
writes into one transaction.
"""
from sqlalchemy import select, insert, update, delete, func
from sqlalchemy.exc import SQLAlchemyError, IntegrityError
from sqlalchemy.orm import Session
import logging
from typing import TypeVar, Generic, Type, Optional, List, Dict, Any

from adega.database import Base

logger = logging.getLogger(__name__)
ModelType = TypeVar("ModelType", bound=Base)


class CRUDBase(Generic[ModelType]):
    def __init__(self, model: Type[ModelType]):
        self.model = model

    def _finish(self, db: Session, commit: bool) -> None:
        if commit:
            db.commit()
        else:
            db.flush()

    def get(self, db: Session, id: int) -> Optional[ModelType]:
        """Get record by ID"""
        stmt = select(self.model).where(self.model.id == id)
        return db.execute(stmt).scalar_one_or_none()

    def get_multi(self, db: Session, *, skip: int = 0, limit: int = 100) -> List[ModelType]:
        """Get multiple records ordered by id"""
        stmt = select(self.model).order_by(self.model.id).offset(skip).limit(limit)
        return list(db.execute(stmt).scalars().all())

    def count(self, db: Session) -> int:
        stmt = select(func.count()).select_from(self.model)
        return db.execute(stmt).scalar_one()

    def create(self, db: Session, *, obj_in: Dict[str, Any], commit: bool = True) -> ModelType:
        """Create record using insert() ... returning()"""
        try:
            stmt = insert(self.model).values(**obj_in).returning(self.model)
            obj = db.execute(stmt).scalar_one()
            self._finish(db, commit)
            return obj
        except IntegrityError as e:
            db.rollback()
            logger.error(f"Integrity error creating {self.model.__name__}: {e}")
            raise
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Error creating {self.model.__name__}: {e}")
            raise

    def update(
        self, db: Session, *, id: int, obj_in: Dict[str, Any], commit: bool = True
    ) -> Optional[ModelType]:
        """Partial update using update() ... returning(), None when the row is missing"""
        if not obj_in:
            return self.get(db, id)
        try:
            stmt = (
                update(self.model)
                .where(self.model.id == id)
                .values(**obj_in)
                .returning(self.model)
                .execution_options(populate_existing=True)
            )
            obj = db.execute(stmt).scalar_one_or_none()
            self._finish(db, commit)
            return obj
        except IntegrityError as e:
            db.rollback()
            logger.error(f"Integrity error updating {self.model.__name__} {id}: {e}")
            raise
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Error updating {self.model.__name__} {id}: {e}")
            raise

    def remove(self, db: Session, *, id: int, commit: bool = True) -> Optional[ModelType]:
        """Delete record, returning the deleted row (None when missing)"""
        try:
            obj = self.get(db, id)
            if not obj:
                return None

            db.execute(delete(self.model).where(self.model.id == id))
            self._finish(db, commit)
            return obj
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Error deleting {self.model.__name__} {id}: {e}")
            raise
