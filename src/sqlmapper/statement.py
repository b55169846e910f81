"""
Prepared statements over DB-API 2.0 cursors (PEP-249).

A Statement is bound to one DB-API connection taken from either a
transaction handle or a pool handle:

- transaction: the transaction's connection is used as-is; commit and
  rollback stay with the transaction owner.
- pool (SQLAlchemy Engine): one pooled connection is checked out for the
  statement's lifetime. Writes are committed right after they succeed and
  rolled back when they fail, and `close()` returns the connection.

Always release a statement, preferably with ``with``:

    with prepare(sql, db=engine) as stmt:
        stmt.execute(*args)
"""
import logging
import sys
import time
from collections.abc import Iterator, Sequence
from functools import wraps
from typing import Any, Self

from sqlmapper.context import Context
from sqlmapper.exceptions import ConfigurationError, NoRowsError, QueryError
from sqlmapper.exceptions import TypeConversionError
from sqlmapper.sql import standardize_placeholders
from sqlmapper.types import NullValue

__all__ = [
    'Statement',
    'Rows',
    'Row',
    'prepare',
    'scan_row',
    'get_raw_connection',
]

logger = logging.getLogger(__name__)


def dumpsql(func):
    """Decorator for logging statement SQL and parameters."""
    @wraps(func)
    def wrapper(self, *args: Any):
        start = time.time()
        logger.debug(f'SQL:\n{self.operation}\nargs: {args}')
        try:
            return func(self, *args)
        except Exception:
            logger.error(f'Error with query:\nSQL:\n{self.operation}\nargs: {args}')
            raise
        finally:
            elapsed = time.time() - start
            logger.debug(f'Query time: {elapsed:.4f}s')
    return wrapper


def _module_paramstyle(connection: Any) -> str:
    """Paramstyle of the DB-API module a raw connection came from."""
    root = type(connection).__module__.split('.')[0]
    module = sys.modules.get(root)
    return getattr(module, 'paramstyle', 'qmark')


def get_raw_connection(tx: Any) -> tuple[Any, str]:
    """Extract the DB-API connection and paramstyle from a transaction handle.

    Works with:
    - sqlmapper.Transaction
    - SQLAlchemy Connection
    - Raw DB-API connections

    A SQLAlchemy Connection is put into a transaction first, so the
    caller's ``conn.commit()`` commits what the statement wrote.
    """
    if hasattr(tx, 'dbapi_connection') and hasattr(tx, 'paramstyle'):
        if tx.dbapi_connection is None:
            raise ConfigurationError('transaction is not active')
        return tx.dbapi_connection, tx.paramstyle
    dialect = getattr(tx, 'dialect', None)
    if dialect is not None and hasattr(tx, 'connection'):
        if not tx.in_transaction():
            tx.begin()
        return tx.connection, dialect.paramstyle
    return tx, _module_paramstyle(tx)


def scan_row(row: Sequence[Any], dests: Sequence[NullValue]) -> None:
    """Copy each column value of ``row`` into its staging holder.
    """
    if len(row) != len(dests):
        raise QueryError(f'expected {len(row)} destination arguments in scan, not {len(dests)}')
    for i, (value, dest) in enumerate(zip(row, dests)):
        try:
            dest.scan(value)
        except TypeConversionError as err:
            raise TypeConversionError(f'converting column index {i}: {err}') from err


class Row:
    """Result of `Statement.query_row`, possibly empty."""

    def __init__(self, values: Sequence[Any] | None) -> None:
        self.values = values

    def scan(self, *dests: NullValue) -> None:
        if self.values is None:
            raise NoRowsError('no rows in result set')
        scan_row(self.values, dests)


class Rows:
    """Lazy iterator over a query's result rows.

    The context is checked before every fetch.
    """

    def __init__(self, cursor: Any, ctx: Context) -> None:
        self.cursor = cursor
        self.ctx = ctx

    def __iter__(self) -> Iterator[Sequence[Any]]:
        while True:
            self.ctx.check()
            row = self.cursor.fetchone()
            if row is None:
                return
            yield row


class Statement:
    """Parameterized statement bound to one DB-API cursor.
    """

    def __init__(self, sql: str, connection: Any, paramstyle: str = 'qmark',
                 owned: bool = False, ctx: Context | None = None) -> None:
        self.sql = sql
        self.operation = standardize_placeholders(sql, paramstyle)
        self.connection = connection
        self.owned = owned
        self.ctx = ctx or Context.background()
        self.cursor = connection.cursor()
        self.closed = False

    def __enter__(self) -> Self:
        return self

    def __exit__(self, exc_type: type | None, exc_val: Exception | None,
                 exc_tb: Any | None) -> None:
        self.close()

    def __repr__(self) -> str:
        return f'Statement({self.sql!r}, owned={self.owned}, closed={self.closed})'

    def _run(self, args: tuple) -> None:
        if self.closed:
            raise QueryError('statement is closed')
        self.ctx.check()
        self.cursor.execute(self.operation, args)

    @dumpsql
    def execute(self, *args: Any) -> int:
        """Execute the statement and return the affected row count.
        """
        try:
            self._run(args)
            if self.owned:
                self.connection.commit()
        except Exception:
            if self.owned:
                self._rollback()
            raise
        return self.cursor.rowcount

    @dumpsql
    def query(self, *args: Any) -> Rows:
        """Execute the statement and iterate over its rows.
        """
        self._run(args)
        return Rows(self.cursor, self.ctx)

    @dumpsql
    def query_row(self, *args: Any) -> Row:
        """Execute the statement and return its first row.
        """
        self._run(args)
        return Row(self.cursor.fetchone())

    def _rollback(self) -> None:
        try:
            self.connection.rollback()
        except Exception as e:
            logger.debug(f'Rollback after failed statement did not complete: {e}')

    def close(self) -> None:
        """Close the cursor and return a pooled connection.
        """
        if self.closed:
            return
        self.closed = True
        try:
            self.cursor.close()
        finally:
            if self.owned:
                self.connection.close()
                logger.debug('Returned statement connection to the pool')


def prepare(sql: str, tx: Any = None, db: Any = None,
            ctx: Context | None = None) -> Statement:
    """Prepare ``sql`` against ``tx`` when given, otherwise against ``db``.
    """
    ctx = ctx or Context.background()
    ctx.check()

    if tx is not None:
        connection, paramstyle = get_raw_connection(tx)
        return Statement(sql, connection, paramstyle, ctx=ctx)

    if db is not None:
        connection = db.raw_connection()
        try:
            return Statement(sql, connection, db.dialect.paramstyle, owned=True, ctx=ctx)
        except Exception:
            connection.close()
            raise

    raise ConfigurationError('tx & db both None')
