"""Four-operation storage contract over a SQLAlchemy session: find_unique, create, update, upsert."""

import logging
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from rampart.models.base import Base
from rampart.services.errors import PersistenceError

logger = logging.getLogger(__name__)


class RecordStore:
    """
    Keyed access to one model table.

    key_column names the unique column the duplicate key (or external id) is
    stored in. Every SQLAlchemy failure surfaces as PersistenceError; callers
    decide whether that fails a row or the whole file.
    """

    def __init__(self, session: Session, model: type[Base], key_column: str) -> None:
        if not hasattr(model, key_column):
            raise ValueError(f"{model.__name__} has no column {key_column!r}")
        self.session = session
        self.model = model
        self.key_column = key_column

    @property
    def name(self) -> str:
        return self.model.__tablename__

    def find_unique(self, key: Any) -> Base | None:
        try:
            return (
                self.session.query(self.model)
                .filter(getattr(self.model, self.key_column) == key)
                .one_or_none()
            )
        except SQLAlchemyError as e:
            raise PersistenceError(f"Database error reading {self.name}", cause=e) from e

    def create(self, key: Any, values: dict[str, Any]) -> Base:
        record = self.model(**{**values, self.key_column: key})
        try:
            self.session.add(record)
            self.session.flush()
        except SQLAlchemyError as e:
            raise PersistenceError(f"Database error creating {self.name} record", cause=e) from e
        return record

    def update(self, record: Base, values: dict[str, Any]) -> Base:
        for field_name, value in values.items():
            if field_name == self.key_column:
                continue
            setattr(record, field_name, value)
        try:
            self.session.flush()
        except SQLAlchemyError as e:
            raise PersistenceError(f"Database error updating {self.name} record", cause=e) from e
        return record

    def upsert(self, key: Any, update_values: dict[str, Any], create_values: dict[str, Any]) -> tuple[Base, bool]:
        """Update the record for key, or create it. Returns (record, created)."""
        existing = self.find_unique(key)
        if existing is not None:
            return self.update(existing, update_values), False
        return self.create(key, create_values), True

    def commit(self) -> None:
        try:
            self.session.commit()
        except SQLAlchemyError as e:
            self.rollback()
            raise PersistenceError(f"Database error committing {self.name}", cause=e) from e

    def rollback(self) -> None:
        try:
            self.session.rollback()
        except SQLAlchemyError:
            logger.exception("Rollback failed for %s", self.name)
