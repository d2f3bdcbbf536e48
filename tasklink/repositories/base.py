from typing import Any, Dict, Generic, Type, TypeVar

from sqlalchemy import select
from sqlalchemy.orm import Session

from tasklink.core.database import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    def __init__(self, model: Type[ModelType]):
        self.model = model

    def get(self, db: Session, id: int) -> ModelType | None:
        return db.get(self.model, id)

    def find_by(self, db: Session, **filters: Any) -> ModelType | None:
        return db.scalars(select(self.model).filter_by(**filters)).first()

    def create(self, db: Session, *, obj_in: Dict[str, Any]) -> ModelType:
        """Add a new row and flush it; committing is left to the caller"""
        db_obj = self.model(**obj_in)
        db.add(db_obj)
        db.flush()
        db.refresh(db_obj)
        return db_obj
