"""
Typed Table access against an in-memory SQLite database.
"""
from dataclasses import dataclass

import pytest
import sqlmapper as db
from sqlmapper import Table, Transaction, column
from tests.fixtures.records import DemoRow, Item


@pytest.fixture
def demo():
    return Table('test_table', DemoRow)


@pytest.fixture
def items():
    return Table('items', Item)


def test_get(demo, sqlite_engine):
    assert demo.get('key003', db=sqlite_engine) == DemoRow('key003', 'two', True, 30, 2.5)


def test_get_missing(demo, sqlite_engine):
    with pytest.raises(db.NoRowsError):
        demo.get('key404', db=sqlite_engine)


def test_find_by(demo, sqlite_engine):
    rows = demo.find_by('field_one', 'one', db=sqlite_engine)
    assert sorted(r.field_key for r in rows) == ['key001', 'key002']


def test_find_by_unknown_column(demo, sqlite_engine):
    with pytest.raises(db.NoFieldMatchError):
        demo.find_by('field_six', 'x', db=sqlite_engine)


def test_all(demo, sqlite_engine):
    assert len(demo.all(db=sqlite_engine)) == 3


def test_insert_many(demo, sqlite_engine):
    new_rows = (
        DemoRow('key004', 'one456', False, 5678, 0.01),
        DemoRow('key005', 'one789', True, 5678, 0.02),
    )
    assert demo.insert(*new_rows, db=sqlite_engine) == 2
    assert demo.get('key005', db=sqlite_engine) == new_rows[1]
    assert len(demo.find_by('field_thr', 5678, db=sqlite_engine)) == 2


def test_update(demo, sqlite_engine):
    row = demo.get('key001', db=sqlite_engine)
    row.field_one = 'one123'
    assert demo.update(row, db=sqlite_engine) == 1
    assert demo.get('key001', db=sqlite_engine).field_one == 'one123'


def test_remove(demo, sqlite_engine):
    assert demo.remove('key001', db=sqlite_engine) == 1
    with pytest.raises(db.NoRowsError):
        demo.get('key001', db=sqlite_engine)


def test_scenario(items, sqlite_engine):
    record = Item(key='k1', name='a', flag=True, count=5, ratio=1.5)
    items.insert(record, db=sqlite_engine)
    assert items.get('k1', db=sqlite_engine) == record

    items.remove('k1', db=sqlite_engine)
    with pytest.raises(db.NoRowsError):
        items.get('k1', db=sqlite_engine)


def test_insert_inside_transaction_rolls_back(items, sqlite_engine):
    with pytest.raises(db.IntegrityError):
        with Transaction(sqlite_engine) as tx:
            items.insert(
                Item('k1', 'a', True, 5, 1.5),
                Item('k1', 'b', False, 6, 2.5),
                tx=tx,
            )
    assert items.all(db=sqlite_engine) == []


def test_unsupported_record_type_rejected_early():
    @dataclass
    class Bad:
        key: str = column('key', default='')
        blob: bytes = column('blob', default=b'')

    with pytest.raises(db.UnsupportedTypeError):
        Table('bad', Bad)


if __name__ == '__main__':
    __import__('pytest').main([__file__])
