"""
Table abstraction the repositories are written against.

A filter maps a field name to a value (equality) or to a list/tuple/set of
values ("in"). MongoTable runs those filters through Beanie; tests swap in an
in-memory table with the same contract.
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Dict, Generic, List, Optional, Sequence, Type, TypeVar

from beanie import Document as BeanieDocument
from pydantic import BaseModel

R = TypeVar("R", bound=BaseModel)
Filters = Dict[str, Any]


class Table(ABC, Generic[R]):
    """Minimal typed CRUD over one collection of records."""

    @abstractmethod
    async def select(
        self,
        filters: Filters,
        order_by: Optional[str] = None,
        descending: bool = False,
    ) -> List[R]:
        ...

    @abstractmethod
    async def insert(self, records: Sequence[R]) -> List[R]:
        ...

    @abstractmethod
    async def update(self, filters: Filters, values: Dict[str, Any]) -> int:
        """Apply values to every matching record; returns the number matched."""

    @abstractmethod
    async def delete(self, filters: Filters) -> int:
        """Delete every matching record; returns the number deleted."""


def _to_bson(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    return value


def build_query(filters: Filters) -> Dict[str, Any]:
    """Translate a filter dict into a MongoDB query."""
    query: Dict[str, Any] = {}
    for field, value in filters.items():
        key = "_id" if field == "id" else field
        if isinstance(value, (list, tuple, set)):
            query[key] = {"$in": [_to_bson(v) for v in value]}
        else:
            query[key] = _to_bson(value)
    return query


class MongoTable(Table[R]):
    """Table backed by a Beanie document class that subclasses the record model."""

    def __init__(self, row_cls: Type[BeanieDocument], record_cls: Type[R]):
        self.row_cls = row_cls
        self.record_cls = record_cls
        self._fields = set(record_cls.model_fields)

    def _to_record(self, row: BeanieDocument) -> R:
        return self.record_cls.model_validate(row.model_dump(include=self._fields))

    async def select(
        self,
        filters: Filters,
        order_by: Optional[str] = None,
        descending: bool = False,
    ) -> List[R]:
        cursor = self.row_cls.find(build_query(filters))
        if order_by:
            cursor = cursor.sort(f"-{order_by}" if descending else f"+{order_by}")
        rows = await cursor.to_list()
        return [self._to_record(row) for row in rows]

    async def insert(self, records: Sequence[R]) -> List[R]:
        if not records:
            return []
        rows = [self.row_cls(**record.model_dump()) for record in records]
        await self.row_cls.insert_many(rows)
        return list(records)

    async def update(self, filters: Filters, values: Dict[str, Any]) -> int:
        result = await self.row_cls.find(build_query(filters)).update(
            {"$set": {k: _to_bson(v) for k, v in values.items()}}
        )
        return result.matched_count if result is not None else 0

    async def delete(self, filters: Filters) -> int:
        result = await self.row_cls.find(build_query(filters)).delete()
        return result.deleted_count if result is not None else 0
