"""
Typed access to one table through a record type.

Examples
    demo = Table('test_table', DemoRow)
    demo.insert(DemoRow('key002', 'one456', False, 5678, 0.01), db=engine)
    row = demo.get('key002', db=engine)
    rows = demo.find_by('field_one', 'one456', db=engine)
"""
import logging
from typing import Any, Generic, TypeVar

from sqlmapper.context import Context
from sqlmapper.fields_map import FieldsMap, new_record

__all__ = ['Table']

logger = logging.getLogger(__name__)

T = TypeVar('T')


class Table(Generic[T]):
    """Binds a table name to a record type.

    The record type is validated up front, so an unsupported field fails here
    rather than on first use.
    """

    def __init__(self, name: str, record_type: type[T]) -> None:
        self.name = name
        self.record_type = record_type
        self.columns = self.mapper(new_record(record_type)).column_names()

    def __repr__(self) -> str:
        return f'Table({self.name!r}, {self.record_type.__name__})'

    def mapper(self, record: T) -> FieldsMap:
        return FieldsMap(self.name, record)

    def _keyed(self, tag: str, value: Any) -> FieldsMap:
        fm = self.mapper(new_record(self.record_type))
        fm.fields[fm.field_index(tag)].set(value)
        return fm

    def get(self, key: Any, tx: Any = None, db: Any = None,
            ctx: Context | None = None) -> T:
        """Record with primary key ``key``; raises NoRowsError when absent.
        """
        return self._keyed(self.columns[0], key).select_by_key(tx=tx, db=db, ctx=ctx)

    def lock(self, key: Any, tx: Any = None, db: Any = None,
             ctx: Context | None = None) -> T:
        return self._keyed(self.columns[0], key).lock_by_key(tx=tx, db=db, ctx=ctx)

    def find_by(self, tag: str, value: Any, tx: Any = None, db: Any = None,
                ctx: Context | None = None) -> list[T]:
        return self._keyed(tag, value).select_by_column(tag, tx=tx, db=db, ctx=ctx)

    def all(self, tx: Any = None, db: Any = None,
            ctx: Context | None = None) -> list[T]:
        return self.mapper(new_record(self.record_type)).select_all(tx=tx, db=db, ctx=ctx)

    def insert(self, *records: T, tx: Any = None, db: Any = None,
               ctx: Context | None = None) -> int:
        """Insert each record in turn, stopping at the first failure.
        """
        rc = 0
        for record in records:
            rc += self.mapper(record).insert(tx=tx, db=db, ctx=ctx)
        logger.debug(f'Inserted {rc} rows into {self.name}')
        return rc

    def update(self, record: T, tx: Any = None, db: Any = None,
               ctx: Context | None = None) -> int:
        return self.mapper(record).update_by_key(tx=tx, db=db, ctx=ctx)

    def remove(self, key: Any, tx: Any = None, db: Any = None,
               ctx: Context | None = None) -> int:
        return self._keyed(self.columns[0], key).delete_by_key(tx=tx, db=db, ctx=ctx)
