"""
Field mapping between dataclass records and single-table SQL.

A record type is a mutable dataclass whose fields are ``int``, ``str``,
``float`` or ``bool`` and carry their column name in field metadata:

    @dataclass
    class DemoRow:
        field_key: str = column('field_key')
        field_one: str = column('field_one')
        field_two: bool = column('field_two')
        field_thr: int = column('field_thr')
        field_fou: float = column('field_fou')

The first declared field is the primary key for every by-key operation.

Binding works in two phases. Parameters are read straight from the record
(`FieldsMap.values`). Results are scanned into nullable staging holders
(`FieldsMap.save_addresses`) and then copied back into the record by
`FieldsMap.map_back`, which skips NULL columns so the record keeps whatever
it held before.
"""
import dataclasses
import logging
import typing
from dataclasses import dataclass
from typing import Any

from sqlmapper.context import Context
from sqlmapper.exceptions import NoFieldMatchError, RowNotFoundError
from sqlmapper.exceptions import ValidationError
from sqlmapper.sql import build_delete_sql, build_insert_sql, build_select_sql
from sqlmapper.sql import build_update_sql, key_clause, select_fields
from sqlmapper.sql import set_fields
from sqlmapper.statement import Statement, prepare, scan_row
from sqlmapper.types import Kind, NullValue, new_holder

__all__ = [
    'TAG',
    'Field',
    'FieldsMap',
    'column',
    'new_fields_map',
    'new_record',
]

logger = logging.getLogger(__name__)

TAG = 'sql'


def column(name: str, **kwargs: Any) -> Any:
    """Declare a dataclass field mapped to column ``name``.

    Extra keyword arguments go to `dataclasses.field`.
    """
    metadata = {**kwargs.pop('metadata', {}), TAG: name}
    return dataclasses.field(metadata=metadata, **kwargs)


@dataclass
class Field:
    """One mapped attribute of a record instance.

    ``obj`` and ``name`` together are the live address: reads and writes go
    straight to the caller's record. ``save`` is the staging holder scanned
    results land in.
    """
    name: str
    tag: str
    kind: Kind
    obj: Any = dataclasses.field(repr=False, compare=False)
    save: NullValue = dataclasses.field(repr=False, compare=False)

    def get(self) -> Any:
        return getattr(self.obj, self.name)

    def set(self, value: Any) -> None:
        setattr(self.obj, self.name, value)


def _record_fields(record_type: type) -> list[tuple[str, str, Kind]]:
    """(name, tag, kind) for each declared field, in order."""
    if not dataclasses.is_dataclass(record_type):
        raise ValidationError(f'{record_type.__name__} is not a dataclass')
    if record_type.__dataclass_params__.frozen:
        raise ValidationError(f'{record_type.__name__} is frozen and cannot receive results')

    hints = typing.get_type_hints(record_type)
    shape = []
    for f in dataclasses.fields(record_type):
        kind = Kind.of(hints.get(f.name, f.type))
        shape.append((f.name, f.metadata.get(TAG) or f.name, kind))

    if not shape:
        raise ValidationError(f'{record_type.__name__} has no fields to map')
    return shape


def new_record(record_type: type) -> Any:
    """Create a record whose fields all hold their kind's zero value.
    """
    kwargs = {}
    for name, _, kind in _record_fields(record_type):
        f = record_type.__dataclass_fields__[name]
        if f.init:
            kwargs[name] = kind.zero
    return record_type(**kwargs)


class FieldsMap:
    """Descriptor set over one record instance.

    Built fresh per record; its holders are not meant to be shared between
    threads.
    """

    def __init__(self, table: str, obj: Any) -> None:
        self.table = table
        self.obj = obj
        self.record_type = type(obj)
        self._fields = [
            Field(name=name, tag=tag, kind=kind, obj=obj, save=new_holder(kind))
            for name, tag, kind in _record_fields(self.record_type)
        ]

    def __repr__(self) -> str:
        return f'FieldsMap({self.table!r}, {self.record_type.__name__}, columns={self.column_names()})'

    @property
    def fields(self) -> list[Field]:
        return self._fields

    @property
    def key(self) -> Field:
        """The primary key field (first declared)."""
        return self._fields[0]

    def column_names(self) -> list[str]:
        """Column names in declaration order.

        DemoRow above gives
        ['field_key', 'field_one', 'field_two', 'field_thr', 'field_fou']
        """
        return [f.tag for f in self._fields]

    def field_index(self, tag: str) -> int:
        for i, f in enumerate(self._fields):
            if f.tag == tag:
                return i
        raise NoFieldMatchError(f'no field match tag: {tag}')

    # read view

    def value(self, idx: int) -> Any:
        return self._fields[idx].get()

    def values(self) -> list[Any]:
        """Current record values, used as bind parameters.
        """
        return [f.get() for f in self._fields]

    # write view

    def save_address(self, idx: int) -> NullValue:
        return self._fields[idx].save

    def save_addresses(self) -> list[NullValue]:
        """Staging holders, used as scan destinations.
        """
        return [f.save for f in self._fields]

    def map_back(self) -> Any:
        """Copy non-NULL staged values into the record and return it.
        """
        for f in self._fields:
            if f.save.valid:
                f.set(f.save.value)
        return self.obj

    # SQL fragments

    def select_fragment(self) -> str:
        """Example: " `field0`, `field1`, `field2`, `field3` "
        """
        return select_fields(self.column_names())

    def set_fragment(self) -> str:
        """Example: " `field0` = ?, `field1` = ?, `field2` = ?, `field3` = ? "
        """
        return set_fields(self.column_names())

    # statements, all must be closed after use

    def prepare(self, sql: str, tx: Any = None, db: Any = None,
                ctx: Context | None = None) -> Statement:
        return prepare(sql, tx=tx, db=db, ctx=ctx)

    def select_statement(self, suffix: str = '', tx: Any = None, db: Any = None,
                         ctx: Context | None = None) -> Statement:
        sql = build_select_sql(self.table, self.column_names(), suffix)
        return self.prepare(sql, tx=tx, db=db, ctx=ctx)

    def insert_statement(self, tx: Any = None, db: Any = None,
                         ctx: Context | None = None) -> Statement:
        sql = build_insert_sql(self.table, self.column_names())
        return self.prepare(sql, tx=tx, db=db, ctx=ctx)

    def update_statement(self, suffix: str = '', tx: Any = None, db: Any = None,
                         ctx: Context | None = None) -> Statement:
        sql = build_update_sql(self.table, self.column_names(), suffix)
        return self.prepare(sql, tx=tx, db=db, ctx=ctx)

    def delete_statement(self, suffix: str = '', tx: Any = None, db: Any = None,
                         ctx: Context | None = None) -> Statement:
        sql = build_delete_sql(self.table, suffix)
        return self.prepare(sql, tx=tx, db=db, ctx=ctx)

    # queries

    def _scan_one(self, stmt: Statement, missing: type[Exception] | None = None) -> Any:
        row = stmt.query_row(self.value(0))
        if row.values is None and missing is not None:
            raise missing('row is None')
        row.scan(*self.save_addresses())
        return self.map_back()

    def _scan_all(self, stmt: Statement, *args: Any) -> list[Any]:
        records = []
        for row in stmt.query(*args):
            fm = FieldsMap(self.table, new_record(self.record_type))
            scan_row(row, fm.save_addresses())
            records.append(fm.map_back())
        logger.debug(f'Mapped {len(records)} rows from {self.table}')
        return records

    def lock_by_key(self, tx: Any = None, db: Any = None,
                    ctx: Context | None = None) -> Any:
        """Select the record by primary key with ``for update``.
        """
        with self.select_statement(key_clause(self.key.tag, lock=True), tx=tx, db=db, ctx=ctx) as stmt:
            return self._scan_one(stmt, missing=RowNotFoundError)

    def select_by_key(self, tx: Any = None, db: Any = None,
                      ctx: Context | None = None) -> Any:
        """Load the record identified by its primary key value.
        """
        with self.select_statement(key_clause(self.key.tag), tx=tx, db=db, ctx=ctx) as stmt:
            return self._scan_one(stmt)

    def select_by_column(self, tag: str, tx: Any = None, db: Any = None,
                         ctx: Context | None = None) -> list[Any]:
        """New records whose ``tag`` column equals this record's value for it.
        """
        idx = self.field_index(tag)
        with self.select_statement(key_clause(tag), tx=tx, db=db, ctx=ctx) as stmt:
            return self._scan_all(stmt, self.value(idx))

    def select_all(self, tx: Any = None, db: Any = None,
                   ctx: Context | None = None) -> list[Any]:
        with self.select_statement(tx=tx, db=db, ctx=ctx) as stmt:
            return self._scan_all(stmt)

    # writes

    def insert(self, tx: Any = None, db: Any = None,
               ctx: Context | None = None) -> int:
        with self.insert_statement(tx=tx, db=db, ctx=ctx) as stmt:
            return stmt.execute(*self.values())

    def update_by_key(self, tx: Any = None, db: Any = None,
                      ctx: Context | None = None) -> int:
        """Write every field, matching on the primary key.
        """
        with self.update_statement(key_clause(self.key.tag), tx=tx, db=db, ctx=ctx) as stmt:
            return stmt.execute(*self.values(), self.value(0))

    def delete_by_key(self, tx: Any = None, db: Any = None,
                      ctx: Context | None = None) -> int:
        with self.delete_statement(key_clause(self.key.tag), tx=tx, db=db, ctx=ctx) as stmt:
            return stmt.execute(self.value(0))


def new_fields_map(table: str, obj: Any) -> FieldsMap:
    """Build the descriptor set for ``obj`` mapped onto ``table``.
    """
    return FieldsMap(table, obj)
