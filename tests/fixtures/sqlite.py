import config
import pytest
import sqlmapper as db

CREATE_TEST_TABLE = """
CREATE TABLE test_table (
    field_key TEXT PRIMARY KEY,
    field_one TEXT,
    field_two BOOLEAN,
    field_thr INTEGER,
    field_fou REAL
)
"""

CREATE_ITEMS = """
CREATE TABLE items (
    item_key TEXT PRIMARY KEY,
    item_name TEXT,
    is_flagged BOOLEAN,
    item_count INTEGER,
    ratio REAL
)
"""


@pytest.fixture
def sqlite_engine():
    """In-memory SQLite pool handle with the test tables created"""
    engine = db.connect('sqlite', config=config)

    with db.Transaction(engine) as tx:
        tx.execute(CREATE_TEST_TABLE)
        tx.execute(CREATE_ITEMS)
        tx.execute("""
        INSERT INTO test_table (field_key, field_one, field_two, field_thr, field_fou) VALUES
        ('key001', 'one', 1, 10, 0.5),
        ('key002', 'one', 0, 20, 1.5),
        ('key003', 'two', 1, 30, 2.5)
        """)

    yield engine
    engine.dispose()
