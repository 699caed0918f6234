import logging
from enum import Enum
from typing import Any, Dict, List, Optional
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from kiranawala.models.store import StoreEntity
from kiranawala.models.product import ProductEntity
from kiranawala.models.cart import CartLineEntity
from kiranawala.models.order import OrderEntity, OrderItemEntity
from kiranawala.models.review import StoreReviewEntity
from kiranawala.models.address import AddressEntity

logger = logging.getLogger("cache")

TABLE_MODELS = {
    model.__tablename__: model
    for model in (
        StoreEntity,
        ProductEntity,
        CartLineEntity,
        OrderEntity,
        OrderItemEntity,
        StoreReviewEntity,
        AddressEntity,
    )
}


def _to_dict(entity) -> Dict[str, Any]:
    return {column.name: getattr(entity, column.name) for column in entity.__table__.columns}


class LocalCache:
    """Embedded table store holding the last-known-good copy of remote rows.

    Rows go in and come out as plain dicts keyed by column name; keys that are
    not columns of the target table are dropped on write.
    """

    def __init__(self, db: Session):
        self.db = db

    def _model(self, table: str):
        try:
            return TABLE_MODELS[table]
        except KeyError:
            raise ValueError(f"Unknown cache table: {table}")

    def _columns(self, table: str, row: Dict[str, Any]) -> Dict[str, Any]:
        columns = self._model(table).__table__.columns.keys()
        return {
            key: value.value if isinstance(value, Enum) else value
            for key, value in row.items()
            if key in columns
        }

    def get(self, table: str, entity_id: str) -> Optional[Dict[str, Any]]:
        """Get one row by id"""
        try:
            entity = self.db.get(self._model(table), entity_id)
            return _to_dict(entity) if entity is not None else None
        except SQLAlchemyError as e:
            logger.warning(f"Cache GET failed for {table}/{entity_id}: {e}")
            return None

    def get_all(self, table: str) -> List[Dict[str, Any]]:
        try:
            return [_to_dict(entity) for entity in self.db.query(self._model(table)).all()]
        except SQLAlchemyError as e:
            logger.warning(f"Cache GET ALL failed for {table}: {e}")
            return []

    def get_all_by_index(self, table: str, **criteria) -> List[Dict[str, Any]]:
        """Get every row whose columns equal the given criteria"""
        try:
            entities = self.db.query(self._model(table)).filter_by(**criteria).all()
            return [_to_dict(entity) for entity in entities]
        except SQLAlchemyError as e:
            logger.warning(f"Cache lookup failed for {table} {criteria}: {e}")
            return []

    def upsert(self, table: str, row: Dict[str, Any]) -> None:
        self.upsert_many(table, [row])

    def upsert_many(self, table: str, rows: List[Dict[str, Any]]) -> None:
        """Insert or overwrite rows by primary key in one transaction"""
        model = self._model(table)
        try:
            for row in rows:
                self.db.merge(model(**self._columns(table, row)))
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Cache UPSERT failed for {table}: {e}")
            raise

    def update_where(self, table: str, patch: Dict[str, Any], **criteria) -> int:
        model = self._model(table)
        try:
            count = (
                self.db.query(model)
                .filter_by(**criteria)
                .update(self._columns(table, patch), synchronize_session="fetch")
            )
            self.db.commit()
            return count
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Cache UPDATE failed for {table} {criteria}: {e}")
            raise

    def delete(self, table: str, entity_id: str) -> bool:
        return self.delete_where(table, id=entity_id) > 0

    def delete_where(self, table: str, **criteria) -> int:
        model = self._model(table)
        try:
            count = self.db.query(model).filter_by(**criteria).delete(synchronize_session="fetch")
            self.db.commit()
            return count
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Cache DELETE failed for {table} {criteria}: {e}")
            raise

    def replace_all_by_index(self, table: str, rows: List[Dict[str, Any]], **criteria) -> None:
        """Drop every row matching criteria and insert rows, atomically"""
        model = self._model(table)
        try:
            self.db.query(model).filter_by(**criteria).delete(synchronize_session="fetch")
            for row in rows:
                self.db.merge(model(**self._columns(table, row)))
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Cache REPLACE failed for {table} {criteria}: {e}")
            raise

    def mark_default_address(self, owner_id: str, address_id: str) -> None:
        """Clear the owner's previous default and flag address_id, in one transaction"""
        try:
            (
                self.db.query(AddressEntity)
                .filter(AddressEntity.owner_id == owner_id, AddressEntity.is_default.is_(True))
                .update({"is_default": False}, synchronize_session="fetch")
            )
            (
                self.db.query(AddressEntity)
                .filter(AddressEntity.id == address_id, AddressEntity.owner_id == owner_id)
                .update({"is_default": True}, synchronize_session="fetch")
            )
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Cache default-address update failed for owner {owner_id}: {e}")
            raise
