"""
Dataclass-to-row mapper generating single-table CRUD SQL.

All CRUD operations can be called either as:
- FieldsMap methods: new_fields_map(table, row).select_by_key(db=engine)
- Table methods: Table(table, RowType).get(key, db=engine)

Every call takes a transaction handle (``tx``), a pool handle (``db``) or
both, plus an optional cancellation ``ctx``.
"""
__version__ = '0.1.0'

from sqlmapper.connection import connect
from sqlmapper.context import Context
from sqlmapper.data import records_to_frame
from sqlmapper.exceptions import ConfigurationError, ContextCancelledError
from sqlmapper.exceptions import ContextError, DatabaseError
from sqlmapper.exceptions import DeadlineExceededError, IntegrityError
from sqlmapper.exceptions import NoFieldMatchError, NoRowsError
from sqlmapper.exceptions import OperationalError, ProgrammingError
from sqlmapper.exceptions import QueryError, RowNotFoundError
from sqlmapper.exceptions import TypeConversionError, UnsupportedTypeError
from sqlmapper.exceptions import ValidationError
from sqlmapper.fields_map import Field, FieldsMap, column, new_fields_map
from sqlmapper.fields_map import new_record
from sqlmapper.options import DatabaseOptions
from sqlmapper.statement import Statement, prepare
from sqlmapper.table import Table
from sqlmapper.transaction import Transaction
from sqlmapper.types import Kind, NullBool, NullFloat64, NullInt64, NullString

transaction = Transaction

__all__ = [
    'connect',
    'DatabaseOptions',
    'Context',
    'Transaction',
    'transaction',
    'Statement',
    'prepare',
    'Field',
    'FieldsMap',
    'column',
    'new_fields_map',
    'new_record',
    'Table',
    'records_to_frame',
    'Kind',
    'NullInt64',
    'NullString',
    'NullFloat64',
    'NullBool',
    'DatabaseError',
    'ConfigurationError',
    'ValidationError',
    'NoFieldMatchError',
    'TypeConversionError',
    'UnsupportedTypeError',
    'QueryError',
    'NoRowsError',
    'RowNotFoundError',
    'ContextError',
    'ContextCancelledError',
    'DeadlineExceededError',
    'IntegrityError',
    'ProgrammingError',
    'OperationalError',
]
