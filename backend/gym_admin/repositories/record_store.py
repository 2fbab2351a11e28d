"""SQLAlchemy implementation of the generic record store.

Commits per call and rolls back on failure; every SQLAlchemy error is
logged and re-raised as RepositoryError so services can surface it.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryError
from ..db.base import MODELS_BY_TABLE
from ..domain.interfaces import IRecordStore, Row

logger = logging.getLogger(__name__)


class SqlAlchemyRecordStore(IRecordStore):
    """Record store backed by a SQLAlchemy session."""

    def __init__(self, db_session: Session) -> None:
        self.db = db_session

    def _model(self, table: str):
        model = MODELS_BY_TABLE.get(table)
        if model is None:
            raise RepositoryError(f"Unknown table '{table}'", table=table)
        return model

    @staticmethod
    def _to_row(obj) -> Row:
        return {
            column.key: getattr(obj, column.key)
            for column in obj.__table__.columns
        }

    def _fail(self, table: str, operation: str, error: Exception) -> RepositoryError:
        self.db.rollback()
        logger.error(
            f"Error during {operation} on {table}",
            extra={"context": {"table": table, "operation": operation, "error": str(error)}},
            exc_info=True,
        )
        return RepositoryError(str(error), table=table, operation=operation)

    def query(
        self,
        table: str,
        filters: Optional[Dict[str, Any]] = None,
        order_by: Optional[Sequence[str]] = None,
    ) -> List[Row]:
        model = self._model(table)
        try:
            q = self.db.query(model)
            if filters:
                q = q.filter_by(**filters)
            for key in order_by or ():
                column = getattr(model, key.lstrip("-"))
                q = q.order_by(column.desc() if key.startswith("-") else column.asc())
            return [self._to_row(obj) for obj in q.all()]
        except SQLAlchemyError as e:
            raise self._fail(table, "query", e) from e

    def insert(self, table: str, rows: List[Row]) -> List[Row]:
        model = self._model(table)
        try:
            # Let the model assign ids that were left empty
            objs = [
                model(**{k: v for k, v in row.items() if not (k == "id" and v is None)})
                for row in rows
            ]
            self.db.add_all(objs)
            self.db.commit()
            for obj in objs:
                self.db.refresh(obj)
            return [self._to_row(obj) for obj in objs]
        except SQLAlchemyError as e:
            raise self._fail(table, "insert", e) from e

    def update(self, table: str, record_id: str, patch: Row) -> Row:
        model = self._model(table)
        try:
            obj = self.db.get(model, record_id)
            if obj is None:
                raise RepositoryError(
                    f"{table} row {record_id} not found", table=table, operation="update"
                )
            for key, value in patch.items():
                setattr(obj, key, value)
            self.db.commit()
            self.db.refresh(obj)
            return self._to_row(obj)
        except SQLAlchemyError as e:
            raise self._fail(table, "update", e) from e

    def delete(self, table: str, record_id: str) -> None:
        model = self._model(table)
        try:
            obj = self.db.get(model, record_id)
            if obj is None:
                raise RepositoryError(
                    f"{table} row {record_id} not found", table=table, operation="delete"
                )
            self.db.delete(obj)
            self.db.commit()
        except SQLAlchemyError as e:
            raise self._fail(table, "delete", e) from e
