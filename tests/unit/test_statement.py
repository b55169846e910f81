"""
Tests for statement preparation, execution and release.
"""
import pytest
import sqlmapper as db
from sqlmapper.statement import Row, get_raw_connection, prepare, scan_row
from sqlmapper.types import NullInt64, NullString

SQL = 'SELECT  `a`, `b`  FROM `t`  where `a` = ? '


class TestPrepare:

    def test_both_handles_missing(self):
        with pytest.raises(db.ConfigurationError, match='tx & db both None'):
            prepare(SQL)

    def test_prefers_transaction(self, fake_connection, fake_engine):
        tx = fake_connection()
        engine = fake_engine()
        with prepare(SQL, tx=tx, db=engine) as stmt:
            assert stmt.connection is tx
            assert stmt.owned is False
        assert engine.checkouts == 0

    def test_pool_checkout(self, fake_engine):
        engine = fake_engine()
        with prepare(SQL, db=engine) as stmt:
            assert stmt.owned is True
        assert engine.checkouts == 1
        assert engine.connection.closed is True

    def test_transaction_connection_not_closed(self, fake_connection):
        tx = fake_connection()
        with prepare(SQL, tx=tx):
            pass
        assert tx.closed is False
        assert tx.cursors[0].closed is True

    def test_cancelled_context_prepares_nothing(self, fake_engine):
        engine = fake_engine()
        ctx = db.Context()
        ctx.cancel()
        with pytest.raises(db.ContextCancelledError):
            prepare(SQL, db=engine, ctx=ctx)
        assert engine.checkouts == 0

    def test_pyformat_driver_placeholders(self, fake_engine):
        engine = fake_engine(paramstyle='pyformat')
        with prepare(SQL, db=engine) as stmt:
            stmt.execute('x')
        assert engine.connection.executed == [
            ('SELECT  `a`, `b`  FROM `t`  where `a` = %s ', ('x',)),
        ]


class TestExecute:

    def test_pool_write_commits(self, fake_engine):
        engine = fake_engine(rowcount=3)
        with prepare('DELETE FROM `t` ', db=engine) as stmt:
            assert stmt.execute() == 3
        assert engine.connection.commits == 1
        assert engine.connection.rollbacks == 0

    def test_pool_write_failure_rolls_back(self, fake_engine):
        engine = fake_engine(error=RuntimeError('boom'))
        with pytest.raises(RuntimeError, match='boom'):
            with prepare('DELETE FROM `t` ', db=engine) as stmt:
                stmt.execute()
        assert engine.connection.rollbacks == 1
        assert engine.connection.commits == 0
        assert engine.connection.closed is True

    def test_transaction_write_leaves_commit_to_owner(self, fake_connection):
        tx = fake_connection()
        with prepare('DELETE FROM `t` ', tx=tx) as stmt:
            stmt.execute()
        assert tx.commits == 0

    def test_driver_error_passes_through(self, fake_connection):
        class DriverError(Exception):
            pass

        tx = fake_connection(error=DriverError('duplicate key'))
        with pytest.raises(DriverError, match='duplicate key'):
            with prepare(SQL, tx=tx) as stmt:
                stmt.query_row('x')

    def test_closed_statement_refuses(self, fake_connection):
        stmt = prepare(SQL, tx=fake_connection())
        stmt.close()
        stmt.close()
        with pytest.raises(db.QueryError, match='closed'):
            stmt.execute('x')


class TestQuery:

    def test_query_row(self, fake_connection):
        tx = fake_connection(results=[[('x', 1)]])
        a, b = NullString(), NullInt64()
        with prepare(SQL, tx=tx) as stmt:
            stmt.query_row('x').scan(a, b)
        assert (a.value, b.value) == ('x', 1)

    def test_query_row_empty(self, fake_connection):
        tx = fake_connection(results=[[]])
        with prepare(SQL, tx=tx) as stmt:
            row = stmt.query_row('x')
            with pytest.raises(db.NoRowsError):
                row.scan(NullString(), NullInt64())

    def test_query_iterates_rows(self, fake_connection):
        tx = fake_connection(results=[[('x', 1), ('y', 2)]])
        with prepare(SQL, tx=tx) as stmt:
            assert list(stmt.query('x')) == [('x', 1), ('y', 2)]

    def test_query_checks_context_between_rows(self, fake_connection):
        tx = fake_connection(results=[[('x', 1), ('y', 2)]])
        ctx = db.Context()
        seen = []
        with prepare(SQL, tx=tx, ctx=ctx) as stmt:
            with pytest.raises(db.ContextCancelledError):
                for row in stmt.query('x'):
                    seen.append(row)
                    ctx.cancel()
        assert seen == [('x', 1)]


class TestScanRow:

    def test_count_mismatch(self):
        with pytest.raises(db.QueryError, match='expected 2 destination arguments'):
            scan_row(('x', 1), [NullString()])

    def test_conversion_error_names_column(self):
        with pytest.raises(db.TypeConversionError, match='column index 1'):
            scan_row(('x', 'abc'), [NullString(), NullInt64()])

    @pytest.mark.parametrize(('row', 'index'), [
        ((b'\xff\xfe', 1), 0),
        (('x', float('inf')), 1),
    ])
    def test_driver_value_errors_name_column(self, row, index):
        with pytest.raises(db.TypeConversionError, match=f'column index {index}'):
            scan_row(row, [NullString(), NullInt64()])

    def test_row_holds_values(self):
        assert Row(None).values is None


class TestRawConnection:

    def test_transaction_object(self):
        class Tx:
            dbapi_connection = object()
            paramstyle = 'format'

        tx = Tx()
        assert get_raw_connection(tx) == (tx.dbapi_connection, 'format')

    def test_inactive_transaction(self):
        class Tx:
            dbapi_connection = None
            paramstyle = 'qmark'

        with pytest.raises(db.ConfigurationError, match='not active'):
            get_raw_connection(Tx())

    def test_sqlalchemy_connection(self, fake_connection):
        class Dialect:
            paramstyle = 'qmark'

        class SAConnection:
            dialect = Dialect()

            def __init__(self, connection, begun=False):
                self.connection = connection
                self.begins = 0
                self.begun = begun

            def in_transaction(self):
                return self.begun

            def begin(self):
                self.begins += 1
                self.begun = True

        raw = fake_connection()
        conn = SAConnection(raw)
        assert get_raw_connection(conn) == (raw, 'qmark')
        assert conn.begins == 1

        conn = SAConnection(raw, begun=True)
        get_raw_connection(conn)
        assert conn.begins == 0

    def test_raw_dbapi_connection(self):
        import sqlite3
        conn = sqlite3.connect(':memory:')
        try:
            assert get_raw_connection(conn) == (conn, 'qmark')
        finally:
            conn.close()


if __name__ == '__main__':
    __import__('pytest').main([__file__])
