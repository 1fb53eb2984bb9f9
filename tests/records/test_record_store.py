"""
Tests for catalogsync/records/component.py - record store adapters.
"""

import pytest
from decimal import Decimal
from unittest.mock import MagicMock


class TestDictRecordStore:
    """Tests for DictRecordStore (in-memory system of record)."""

    def test_import(self):
        from catalogsync.records.component import DictRecordStore
        assert DictRecordStore is not None

    def test_create_assigns_sequential_ids(self, record_store):
        from catalogsync.models import Product
        first = record_store.create(Product(name="Pen"))
        second = record_store.create(Product(name="Widget"))
        assert (first.id, second.id) == (1, 2)

    def test_get(self, record_store):
        from catalogsync.models import Product
        record_store.create(Product(name="Pen", price=1.5))
        assert record_store.get(1).name == "Pen"

    def test_get_missing(self, record_store):
        assert record_store.get(1) is None

    def test_list_ordered_by_id(self, record_store, sample_products):
        from catalogsync.models import Product
        for data in sample_products:
            record_store.create(Product(**data))
        assert [p.id for p in record_store.list()] == [1, 2, 3, 4]

    def test_returned_products_are_copies(self, record_store):
        from catalogsync.models import Product
        created = record_store.create(Product(name="Pen"))
        created.name = "Changed"
        assert record_store.get(1).name == "Pen"

    def test_update(self, record_store):
        from catalogsync.models import Product
        created = record_store.create(Product(name="Pen", stock=100))
        updated = record_store.update(created.model_copy(update={"stock": 50}))
        assert updated.stock == 50
        assert record_store.get(1).stock == 50

    def test_update_missing(self, record_store):
        from catalogsync.models import Product
        assert record_store.update(Product(id=5, name="Ghost")) is None

    def test_delete(self, record_store):
        from catalogsync.models import Product
        record_store.create(Product(name="Pen"))
        assert record_store.delete(1) is True
        assert record_store.delete(1) is False
        assert record_store.count() == 0

    def test_ids_not_reused_after_delete(self, record_store):
        from catalogsync.models import Product
        record_store.create(Product(name="Pen"))
        record_store.delete(1)
        assert record_store.create(Product(name="Widget")).id == 2


@pytest.fixture
def pg_conn():
    """Mock psycopg2 connection."""
    return MagicMock()


@pytest.fixture
def pg_store(pg_conn):
    from catalogsync.records.component import PostgresRecordStore
    from catalogsync.records.models import RecordStoreConfig
    return PostgresRecordStore(RecordStoreConfig(type="postgres"), client=pg_conn)


def pen_row(**overrides):
    row = {
        "id": 1,
        "name": "Pen",
        "description": "Blue ballpoint pen",
        "category": "office",
        "stock": 100,
        "price": Decimal("1.50"),
        "updated_at": None
    }
    row.update(overrides)
    return row


class TestPostgresRecordStore:
    """Tests for PostgresRecordStore against a mocked connection."""

    def test_uses_injected_connection(self, pg_store, pg_conn):
        assert pg_store.conn is pg_conn
        assert pg_store.table == "products"

    def test_get(self, pg_store, pg_conn):
        cursor = pg_conn.cursor.return_value
        cursor.fetchone.return_value = pen_row()

        product = pg_store.get(1)

        assert product.name == "Pen"
        assert product.price == 1.5
        sql, params = cursor.execute.call_args[0]
        assert "WHERE id = %s" in sql
        assert params == (1,)
        pg_conn.commit.assert_called_once()
        cursor.close.assert_called_once()

    def test_get_missing(self, pg_store, pg_conn):
        pg_conn.cursor.return_value.fetchone.return_value = None
        assert pg_store.get(7) is None

    def test_list(self, pg_store, pg_conn):
        pg_conn.cursor.return_value.fetchall.return_value = [pen_row(), pen_row(id=2, name="Widget")]
        assert [p.name for p in pg_store.list()] == ["Pen", "Widget"]

    def test_create_returns_assigned_id(self, pg_store, pg_conn):
        from catalogsync.models import Product
        cursor = pg_conn.cursor.return_value
        cursor.fetchone.return_value = pen_row(id=12)

        created = pg_store.create(Product(name="Pen", price=1.5, stock=100))

        assert created.id == 12
        sql, params = cursor.execute.call_args[0]
        assert "INSERT INTO products" in sql
        assert "RETURNING" in sql
        assert params[0] == "Pen"

    def test_update_missing(self, pg_store, pg_conn):
        from catalogsync.models import Product
        pg_conn.cursor.return_value.fetchone.return_value = None
        assert pg_store.update(Product(id=3, name="Ghost")) is None

    def test_delete(self, pg_store, pg_conn):
        cursor = pg_conn.cursor.return_value
        cursor.rowcount = 1
        assert pg_store.delete(1) is True
        cursor.rowcount = 0
        assert pg_store.delete(1) is False

    def test_failure_raises_and_rolls_back(self, pg_store, pg_conn):
        import psycopg2
        from catalogsync.core.errors import RecordStoreError

        cursor = pg_conn.cursor.return_value
        cursor.execute.side_effect = psycopg2.OperationalError("server closed the connection")

        with pytest.raises(RecordStoreError):
            pg_store.get(1)
        pg_conn.rollback.assert_called_once()
        pg_conn.commit.assert_not_called()
        cursor.close.assert_called_once()

    def test_is_available(self, pg_store, pg_conn):
        import psycopg2
        assert pg_store.is_available() is True
        pg_conn.cursor.return_value.execute.side_effect = psycopg2.InterfaceError("closed")
        assert pg_store.is_available() is False

    def test_failed_rollback_still_raises_record_store_error(self, pg_store, pg_conn):
        import psycopg2
        from catalogsync.core.errors import RecordStoreError

        cursor = pg_conn.cursor.return_value
        cursor.execute.side_effect = psycopg2.OperationalError("server closed the connection")
        pg_conn.rollback.side_effect = psycopg2.InterfaceError("connection already closed")

        with pytest.raises(RecordStoreError):
            pg_store.get(1)
        cursor.close.assert_called_once()

    def test_is_available_ends_transaction(self, pg_store, pg_conn):
        assert pg_store.is_available() is True
        pg_conn.rollback.assert_called_once()

    def test_is_available_with_dead_connection(self, pg_store, pg_conn):
        import psycopg2
        pg_conn.cursor.side_effect = psycopg2.InterfaceError("connection already closed")
        pg_conn.rollback.side_effect = psycopg2.InterfaceError("connection already closed")
        assert pg_store.is_available() is False
