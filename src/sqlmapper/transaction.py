"""
Transaction handle for running several mapper calls atomically.
"""
import logging
import threading
from typing import Any, Self

from sqlmapper.context import Context
from sqlmapper.statement import Statement, prepare

logger = logging.getLogger(__name__)

_local = threading.local()


class Transaction:
    """Context manager owning one pooled DB-API connection.

    Thread-local bookkeeping rejects nesting a second transaction on the same
    engine within one thread. The connection is committed on a clean exit,
    rolled back when the block raises, and returned to the pool either way.

    Examples
        with Transaction(engine) as tx:
            fm.insert(tx=tx)
            other.update_by_key(tx=tx)
    """

    def __init__(self, engine: Any) -> None:
        self.engine = engine
        self.dbapi_connection = None
        self.paramstyle = engine.dialect.paramstyle

        if not hasattr(_local, 'active_transactions'):
            _local.active_transactions = set()

    def __enter__(self) -> Self:
        engine_id = id(self.engine)
        if engine_id in _local.active_transactions:
            raise RuntimeError('Nested transactions are not supported')

        self.dbapi_connection = self.engine.raw_connection()
        _local.active_transactions.add(engine_id)
        logger.debug(f'Started transaction for engine {engine_id}')
        return self

    def __exit__(self, exc_type: type | None, value: Exception | None, traceback: Any | None) -> None:
        try:
            if exc_type is not None:
                self.dbapi_connection.rollback()
                logger.warning('Rolling back the current transaction')
            else:
                self.dbapi_connection.commit()
                logger.debug(f'Committed transaction for engine {id(self.engine)}')
        finally:
            _local.active_transactions.discard(id(self.engine))
            self.dbapi_connection.close()
            self.dbapi_connection = None

    @property
    def active(self) -> bool:
        return self.dbapi_connection is not None

    def prepare(self, sql: str, ctx: Context | None = None) -> Statement:
        """Prepare a statement on this transaction's connection.
        """
        if not self.active:
            raise RuntimeError('Transaction is not active')
        return prepare(sql, tx=self, ctx=ctx)

    def execute(self, sql: str, *args: Any, ctx: Context | None = None) -> int:
        """Execute SQL within transaction context"""
        with self.prepare(sql, ctx=ctx) as stmt:
            return stmt.execute(*args)
