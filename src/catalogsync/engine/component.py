from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Union
import json
import logging

from pydantic import ValidationError

from catalogsync.cache.component import CacheStore
from catalogsync.core.errors import CacheUnavailableError, NotFoundError
from catalogsync.models import Product, ProductPatch, SearchDocument
from catalogsync.ranking.component import PopularityTracker
from catalogsync.records.component import RecordStore
from catalogsync.search.component import SearchIndex
from catalogsync.search.sync import IndexSynchronizer
from .models import EngineConfig, WriteResult


logger = logging.getLogger(__name__)

MUTABLE_FIELDS = ("name", "description", "category", "stock", "price")


class CatalogEngine:
    """
    Cache-aside orchestration over the record store, cache and search index.

    The record store is authoritative and its failures propagate. Cache
    failures degrade to record-store reads. Search index failures on writes
    are reported in the returned ``WriteResult`` and never undo the write.
    """

    def __init__(
        self,
        record_store: RecordStore,
        cache_store: CacheStore,
        search_index: SearchIndex,
        config: EngineConfig = None,
        tracker: PopularityTracker = None,
        synchronizer: IndexSynchronizer = None
    ):
        self.record_store = record_store
        self.cache_store = cache_store
        self.search_index = search_index
        self.config = config or EngineConfig()
        self.tracker = tracker or PopularityTracker(cache_store)
        self.synchronizer = synchronizer or IndexSynchronizer(
            search_index,
            timeout=search_index.config.index_timeout,
            max_workers=search_index.config.index_workers
        )

    def _cache_call(self, operation: str, fn: Callable, *args, default: Any = None) -> Any:
        """Run a cache call; an unavailable cache yields ``default``"""
        try:
            return fn(*args)
        except CacheUnavailableError as e:
            logger.warning(f"Cache unavailable during {operation}, continuing without it: {e}")
            return default

    # Reads

    def get_all(self) -> List[Product]:
        if self._cache_call("listing check", self.cache_store.is_listing_complete, default=False):
            cached = self._cache_call("listing read", self.cache_store.get_all, default=[])
            if cached:
                logger.debug(f"Listing served from cache ({len(cached)} products)")
                return cached

        # version must be read before the record store
        version = self._cache_call("listing version", self.cache_store.listing_version)
        products = self.record_store.list()
        if version is not None:
            self._repopulate(products, version)
        return products

    def _repopulate(self, products: List[Product], version: int):
        """Write every product into the cache region and mark it complete"""
        try:
            applied = self.cache_store.repopulate(
                products, version, self.cache_store.config.listing_ttl
            )
        except CacheUnavailableError as e:
            logger.warning(f"Cache repopulation abandoned: {e}")
            return
        if not applied:
            logger.info("Catalog changed while listing; cache left unpopulated")
            return
        logger.info(f"Repopulated cache with {len(products)} products")

    def get_by_id(self, product_id: int) -> Product:
        product = self._cache_call("get", self.cache_store.get, product_id)

        if product is None:
            logger.debug(f"Cache miss for product {product_id}")
            product = self.record_store.get(product_id)
            if product is None:
                raise NotFoundError(product_id)
            self._cache_call("write-through", self.cache_store.set, product_id, product)

        self._cache_call("popularity vote", self.tracker.record_access, product_id)
        return product

    def get_popular(self, count: Optional[int] = None) -> List[Product]:
        """Most-read products still present in the cache, best first"""
        if count is None:
            count = self.config.popular_default_count

        top_ids = self._cache_call("popular ranking", self.tracker.top, count, default=[])

        products = []
        for product_id in top_ids:
            product = self._cache_call("popular lookup", self.cache_store.get, product_id)
            if product is not None:
                products.append(product)
        return products

    def search(self, query: str) -> List[SearchDocument]:
        return self.search_index.search(query, fields=self.config.search_fields)

    # Writes

    def create(self, product: Union[Product, Dict[str, Any]]) -> WriteResult:
        if isinstance(product, dict):
            product = Product(**product)

        created = self.record_store.create(
            product.model_copy(update={
                "id": None,
                "updated_at": product.updated_at or datetime.now(timezone.utc)
            })
        )
        logger.info(f"Created product {created.id}")

        self._cache_call("write-through", self.cache_store.set, created.id, created)
        self._cache_call("listing invalidation", self.cache_store.invalidate_listing)

        outcome = self.synchronizer.submit_index(SearchDocument.from_product(created))
        return WriteResult(product=created, index_status=outcome.status, index_error=outcome.error)

    def update(self, patch: Union[ProductPatch, Dict[str, Any]]) -> WriteResult:
        if isinstance(patch, dict):
            patch = ProductPatch(**patch)

        existing = self.record_store.get(patch.id)
        if existing is None:
            raise NotFoundError(patch.id)

        saved = self.record_store.update(self.merge(existing, patch))
        if saved is None:
            raise NotFoundError(patch.id)
        logger.info(f"Updated product {saved.id}")

        self._cache_call("overwrite", self.cache_store.set, saved.id, saved)
        self._cache_call("listing invalidation", self.cache_store.invalidate_listing)

        outcome = self.synchronizer.submit_index(SearchDocument.from_product(saved))
        return WriteResult(product=saved, index_status=outcome.status, index_error=outcome.error)

    def merge(self, existing: Product, patch: ProductPatch) -> Product:
        changes = {}
        for field in MUTABLE_FIELDS:
            value = getattr(patch, field)
            if self._is_supplied(value):
                changes[field] = value
        changes["updated_at"] = datetime.now(timezone.utc)
        return existing.model_copy(update=changes)

    def _is_supplied(self, value: Any) -> bool:
        if value is None:
            return False
        if self.config.merge_policy == "explicit":
            return True
        if isinstance(value, str):
            return value != ""
        return value != 0

    def delete(self, product_id: int) -> WriteResult:
        if not self.record_store.delete(product_id):
            raise NotFoundError(product_id)
        logger.info(f"Deleted product {product_id}")

        self._cache_call("eviction", self.cache_store.delete, product_id)
        self._cache_call("listing invalidation", self.cache_store.invalidate_listing)

        if not self.config.purge_derived_on_delete:
            return WriteResult()

        self._cache_call("ranking purge", self.tracker.forget, product_id)
        outcome = self.synchronizer.submit_delete(product_id)
        return WriteResult(index_status=outcome.status, index_error=outcome.error)

    # Maintenance

    def reindex(self) -> int:
        """Rebuild search documents from the record store"""
        documents = [SearchDocument.from_product(p) for p in self.record_store.list()]
        indexed = self.search_index.bulk_index(documents)
        logger.info(f"Reindexed {indexed}/{len(documents)} products")
        return indexed

    def load_products(self, filepath: str) -> Dict[str, int]:
        """
        Create products from a JSONL file.

        JSONL format (Product fields, id ignored):
            {"name": "Pen", "description": "...", "category": "office", "stock": 100, "price": 1.5}

        Returns:
            {'created': 10, 'skipped': 1, 'index_failures': 0}
        """
        logger.info(f"Loading products from {filepath}")
        results = {"created": 0, "skipped": 0, "index_failures": 0}

        with open(filepath, 'r', encoding='utf-8') as f:
            for line_num, line in enumerate(f, 1):
                line = line.strip()
                if not line:
                    continue

                try:
                    product = Product(**json.loads(line))
                except (json.JSONDecodeError, ValidationError) as e:
                    logger.warning(f"Line {line_num} parse error: {e}")
                    results["skipped"] += 1
                    continue

                result = self.create(product)
                results["created"] += 1
                if result.index_failed:
                    results["index_failures"] += 1

        logger.info(f"Loaded {results['created']} products")
        return results

    def health(self) -> Dict[str, bool]:
        return {
            "record_store": self.record_store.is_available(),
            "cache": self.cache_store.is_available(),
            "search": self.search_index.is_available()
        }

    def close(self):
        self.synchronizer.shutdown()
