"""
Pytest configuration and shared fixtures for catalogsync tests.
"""

import pytest
import json
import threading
from typing import List, Dict, Any

from catalogsync.cache.component import DictCacheStore
from catalogsync.core.errors import CacheUnavailableError, IndexFailureError
from catalogsync.search.component import DictSearchIndex


# ============================================================
# TEST DATA FIXTURES
# ============================================================

@pytest.fixture
def sample_products() -> List[Dict[str, Any]]:
    """Sample products for testing store operations."""
    return [
        {
            "name": "Pen",
            "description": "Blue ballpoint pen",
            "category": "office",
            "stock": 100,
            "price": 1.5
        },
        {
            "name": "Widget",
            "description": "General purpose widget",
            "category": "hardware",
            "stock": 20,
            "price": 9.99
        },
        {
            "name": "Notebook",
            "description": "A5 ruled notebook",
            "category": "office",
            "stock": 40,
            "price": 3.25
        },
        {
            "name": "Gadget",
            "description": "Pocket gadget with a blue light",
            "category": "electronics",
            "stock": 5,
            "price": 24.0
        },
    ]


@pytest.fixture
def products_jsonl_file(sample_products, tmp_path) -> str:
    """Create temporary JSONL file with products."""
    filepath = tmp_path / "products.jsonl"
    with open(filepath, 'w') as f:
        for product in sample_products:
            f.write(json.dumps(product) + '\n')
    return str(filepath)


# ============================================================
# STORE FIXTURES
# ============================================================

class FlakyCacheStore(DictCacheStore):
    """DictCacheStore that raises CacheUnavailableError while ``down``."""

    down = False

    def _check(self):
        if self.down:
            raise CacheUnavailableError("cache is down")

    def get(self, product_id):
        self._check()
        return super().get(product_id)

    def get_all(self):
        self._check()
        return super().get_all()

    def set(self, product_id, product):
        self._check()
        super().set(product_id, product)

    def delete(self, product_id):
        self._check()
        super().delete(product_id)

    def increment(self, product_id, delta=1):
        self._check()
        return super().increment(product_id, delta)

    def top_k(self, k):
        self._check()
        return super().top_k(k)

    def remove_rank(self, product_id):
        self._check()
        super().remove_rank(product_id)

    def is_listing_complete(self):
        self._check()
        return super().is_listing_complete()

    def mark_listing_complete(self, ttl=None):
        self._check()
        super().mark_listing_complete(ttl)

    def invalidate_listing(self):
        self._check()
        super().invalidate_listing()

    def listing_version(self):
        self._check()
        return super().listing_version()

    def repopulate(self, products, version, ttl=None):
        self._check()
        return super().repopulate(products, version, ttl)

    def is_available(self):
        return not self.down


class FlakySearchIndex(DictSearchIndex):
    """DictSearchIndex that fails while ``down`` and blocks while ``gate`` is closed."""

    down = False
    gate = None

    def index(self, document):
        if self.gate is not None:
            self.gate.wait(5)
        if self.down:
            raise IndexFailureError("search index is down")
        super().index(document)

    def search(self, query, fields=None, size=None):
        if self.down:
            raise IndexFailureError("search index is down")
        return super().search(query, fields, size)

    def delete(self, product_id):
        if self.down:
            raise IndexFailureError("search index is down")
        super().delete(product_id)

    def is_available(self):
        return not self.down


@pytest.fixture
def record_store():
    """In-memory record store."""
    from catalogsync.records.component import DictRecordStore
    from catalogsync.records.models import RecordStoreConfig
    return DictRecordStore(RecordStoreConfig(type="dict"))


@pytest.fixture
def cache_store():
    """In-memory cache store that can be switched off."""
    from catalogsync.cache.models import CacheConfig
    return FlakyCacheStore(CacheConfig(type="dict"))


@pytest.fixture
def search_index():
    """In-memory search index that can be switched off."""
    from catalogsync.search.models import SearchConfig
    return FlakySearchIndex(SearchConfig(type="dict", index_timeout=2.0))


@pytest.fixture
def engine(record_store, cache_store, search_index):
    """CatalogEngine over in-memory stores."""
    from catalogsync.engine.component import CatalogEngine
    catalog = CatalogEngine(record_store, cache_store, search_index)
    yield catalog
    catalog.close()


@pytest.fixture
def loaded_engine(engine, sample_products):
    """Engine with the sample products created (ids 1..4)."""
    for product in sample_products:
        engine.create(product)
    return engine


@pytest.fixture
def index_gate():
    """Closed gate for holding index calls open; released on teardown."""
    gate = threading.Event()
    yield gate
    gate.set()


# ============================================================
# CONFIG FIXTURES
# ============================================================

@pytest.fixture
def in_memory_config_dict() -> Dict[str, Any]:
    """Catalog configuration with every store in-process."""
    return {
        "record_store": {"type": "dict"},
        "cache": {"type": "dict", "listing_ttl": 300},
        "search": {"type": "dict", "index_timeout": 2.0, "index_workers": 2},
        "engine": {
            "merge_policy": "sparse",
            "purge_derived_on_delete": False,
            "popular_default_count": 5
        }
    }
