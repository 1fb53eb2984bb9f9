from abc import abstractmethod
from threading import Lock
from typing import Dict, List, Optional, Any
import logging

import psycopg2
from psycopg2.extras import RealDictCursor

from catalogsync.core.base import BaseComponent
from catalogsync.core.errors import RecordStoreError
from catalogsync.core.registry import record_store_registry
from catalogsync.models import Product
from .models import RecordStoreConfig


logger = logging.getLogger(__name__)

PRODUCT_COLUMNS = "id, name, description, category, stock, price, updated_at"


class RecordStore(BaseComponent[RecordStoreConfig]):
    """Authoritative CRUD access to products"""

    @abstractmethod
    def get(self, product_id: int) -> Optional[Product]:
        pass

    @abstractmethod
    def list(self) -> List[Product]:
        pass

    @abstractmethod
    def create(self, product: Product) -> Product:
        """Insert product, returning it with the assigned id"""
        pass

    @abstractmethod
    def update(self, product: Product) -> Optional[Product]:
        """Replace stored row; None if the id does not exist"""
        pass

    @abstractmethod
    def delete(self, product_id: int) -> bool:
        """Remove row; False if the id does not exist"""
        pass

    def count(self) -> int:
        return len(self.list())


@record_store_registry.register("dict")
class DictRecordStore(RecordStore):
    """In-memory record store with auto-increment ids"""

    def _setup(self):
        self._storage: Dict[int, Product] = {}
        self._next_id = 1
        self._lock = Lock()

    def get(self, product_id: int) -> Optional[Product]:
        with self._lock:
            product = self._storage.get(product_id)
            return product.model_copy(deep=True) if product else None

    def list(self) -> List[Product]:
        with self._lock:
            return [self._storage[pid].model_copy(deep=True) for pid in sorted(self._storage)]

    def create(self, product: Product) -> Product:
        with self._lock:
            created = product.model_copy(update={"id": self._next_id}, deep=True)
            self._storage[created.id] = created
            self._next_id += 1
            return created.model_copy(deep=True)

    def update(self, product: Product) -> Optional[Product]:
        with self._lock:
            if product.id not in self._storage:
                return None
            self._storage[product.id] = product.model_copy(deep=True)
            return product.model_copy(deep=True)

    def delete(self, product_id: int) -> bool:
        with self._lock:
            return self._storage.pop(product_id, None) is not None

    def count(self) -> int:
        return len(self._storage)


@record_store_registry.register("postgres")
class PostgresRecordStore(RecordStore):
    """PostgreSQL system of record"""

    def _setup(self):
        if self.client is None:
            self.client = psycopg2.connect(
                host=self.config.config['host'],
                port=self.config.config.get('port', 5432),
                database=self.config.config['database'],
                user=self.config.config['user'],
                password=self.config.config['password']
            )
        self.conn = self.client
        self.table = self.config.table

    def _execute(self, sql: str, params: tuple = (), fetch: str = "none") -> Any:
        """Run one statement in its own transaction"""
        cursor = self.conn.cursor(cursor_factory=RealDictCursor)
        try:
            cursor.execute(sql, params)
            if fetch == "one":
                result = cursor.fetchone()
            elif fetch == "all":
                result = cursor.fetchall()
            else:
                result = cursor.rowcount
            self.conn.commit()
            return result
        except psycopg2.Error as e:
            logger.error(f"Postgres statement failed: {e}")
            self._rollback()
            raise RecordStoreError(str(e)) from e
        finally:
            cursor.close()

    def _rollback(self):
        """Roll back the failed transaction; a dead connection cannot"""
        try:
            self.conn.rollback()
        except psycopg2.Error as e:
            logger.warning(f"Postgres rollback failed: {e}")

    def _to_product(self, row: Optional[Dict[str, Any]]) -> Optional[Product]:
        if row is None:
            return None
        row_dict = dict(row)
        row_dict['price'] = float(row_dict['price'])
        return Product(**row_dict)

    def get(self, product_id: int) -> Optional[Product]:
        row = self._execute(
            f"SELECT {PRODUCT_COLUMNS} FROM {self.table} WHERE id = %s",
            (product_id,),
            fetch="one"
        )
        return self._to_product(row)

    def list(self) -> List[Product]:
        rows = self._execute(
            f"SELECT {PRODUCT_COLUMNS} FROM {self.table} ORDER BY id",
            fetch="all"
        )
        return [self._to_product(row) for row in rows]

    def create(self, product: Product) -> Product:
        row = self._execute(
            f"""
                INSERT INTO {self.table} (name, description, category, stock, price, updated_at)
                VALUES (%s, %s, %s, %s, %s, %s)
                RETURNING {PRODUCT_COLUMNS}
            """,
            (product.name, product.description, product.category,
             product.stock, product.price, product.updated_at),
            fetch="one"
        )
        return self._to_product(row)

    def update(self, product: Product) -> Optional[Product]:
        row = self._execute(
            f"""
                UPDATE {self.table}
                SET name = %s, description = %s, category = %s,
                    stock = %s, price = %s, updated_at = %s
                WHERE id = %s
                RETURNING {PRODUCT_COLUMNS}
            """,
            (product.name, product.description, product.category,
             product.stock, product.price, product.updated_at, product.id),
            fetch="one"
        )
        return self._to_product(row)

    def delete(self, product_id: int) -> bool:
        deleted = self._execute(
            f"DELETE FROM {self.table} WHERE id = %s",
            (product_id,)
        )
        return deleted > 0

    def count(self) -> int:
        row = self._execute(f"SELECT COUNT(*) AS total FROM {self.table}", fetch="one")
        return row['total']

    def is_available(self) -> bool:
        try:
            cursor = self.conn.cursor()
            cursor.execute("SELECT 1")
            cursor.close()
            self.conn.rollback()
            return True
        except psycopg2.Error:
            self._rollback()
            return False
