from abc import abstractmethod
from threading import Lock
from typing import Dict, List, Optional, Union
import logging
import time

import redis
from pydantic import ValidationError

from catalogsync.core.base import BaseComponent
from catalogsync.core.errors import CacheUnavailableError
from catalogsync.core.registry import cache_store_registry
from catalogsync.models import Product
from .models import CacheConfig


logger = logging.getLogger(__name__)


class CacheStore(BaseComponent[CacheConfig]):
    """
    Best-effort cache over two structures: a hash region of product
    snapshots keyed by id, and a ranking region of access counts.

    Backend failures are raised as ``CacheUnavailableError``; callers
    decide whether that is fatal.
    """

    def _setup(self):
        self.region = self.config.region
        self.ranking_key = self.config.ranking_key
        self.listing_key = self.config.listing_key
        self.version_key = self.config.version_key

    def serialize(self, product: Product) -> str:
        return product.model_dump_json()

    def deserialize(self, data: Union[str, bytes]) -> Optional[Product]:
        """Decode one snapshot; an unreadable entry is treated as absent"""
        if isinstance(data, bytes):
            data = data.decode('utf-8')
        try:
            return Product.model_validate_json(data)
        except ValidationError as e:
            logger.warning(f"Dropping unreadable cache snapshot: {e}")
            return None

    # Hash region

    @abstractmethod
    def get(self, product_id: int) -> Optional[Product]:
        pass

    @abstractmethod
    def get_all(self) -> List[Product]:
        pass

    @abstractmethod
    def set(self, product_id: int, product: Product):
        pass

    @abstractmethod
    def delete(self, product_id: int):
        pass

    # Ranking region

    @abstractmethod
    def increment(self, product_id: int, delta: float = 1) -> float:
        """Add delta to the score, returning the new score"""
        pass

    @abstractmethod
    def top_k(self, k: int) -> List[int]:
        """Ids ordered by descending score"""
        pass

    @abstractmethod
    def score(self, product_id: int) -> float:
        pass

    @abstractmethod
    def remove_rank(self, product_id: int):
        pass

    # Complete-listing marker

    @abstractmethod
    def is_listing_complete(self) -> bool:
        pass

    @abstractmethod
    def mark_listing_complete(self, ttl: Optional[int] = None):
        pass

    @abstractmethod
    def invalidate_listing(self):
        """Clear the marker and bump the listing version"""
        pass

    @abstractmethod
    def listing_version(self) -> int:
        """Counter bumped by every invalidation"""
        pass

    @abstractmethod
    def repopulate(self, products: List[Product], version: int, ttl: Optional[int] = None) -> bool:
        """
        Write every snapshot and mark the listing complete, atomically and
        only if the listing version still equals ``version``.

        Returns False when a write invalidated the listing in the meantime;
        nothing is written in that case.
        """
        pass

    @abstractmethod
    def clear(self):
        """Drop every key this cache owns"""
        pass


@cache_store_registry.register("dict")
class DictCacheStore(CacheStore):
    """In-process cache for tests and single-process deployments"""

    def _setup(self):
        super()._setup()
        self._hash: Dict[int, str] = {}
        self._ranking: Dict[int, float] = {}
        self._listing_expires: Optional[float] = None
        self._listing_marked = False
        self._listing_version = 0
        self._lock = Lock()

    def get(self, product_id: int) -> Optional[Product]:
        with self._lock:
            data = self._hash.get(product_id)
        return self.deserialize(data) if data is not None else None

    def get_all(self) -> List[Product]:
        with self._lock:
            snapshots = [self._hash[pid] for pid in sorted(self._hash)]
        products = [self.deserialize(data) for data in snapshots]
        return [p for p in products if p is not None]

    def set(self, product_id: int, product: Product):
        with self._lock:
            self._hash[product_id] = self.serialize(product)

    def delete(self, product_id: int):
        with self._lock:
            self._hash.pop(product_id, None)

    def increment(self, product_id: int, delta: float = 1) -> float:
        with self._lock:
            self._ranking[product_id] = self._ranking.get(product_id, 0.0) + delta
            return self._ranking[product_id]

    def top_k(self, k: int) -> List[int]:
        if k <= 0:
            return []
        with self._lock:
            # ties broken like ZREVRANGE: higher member first
            ranked = sorted(self._ranking.items(), key=lambda x: (x[1], x[0]), reverse=True)
        return [pid for pid, _ in ranked[:k]]

    def score(self, product_id: int) -> float:
        with self._lock:
            return self._ranking.get(product_id, 0.0)

    def remove_rank(self, product_id: int):
        with self._lock:
            self._ranking.pop(product_id, None)

    def is_listing_complete(self) -> bool:
        with self._lock:
            if not self._listing_marked:
                return False
            if self._listing_expires is not None and time.monotonic() >= self._listing_expires:
                self._listing_marked = False
                return False
            return True

    def _mark_listing(self, ttl: Optional[int]):
        # caller holds self._lock
        self._listing_marked = True
        self._listing_expires = time.monotonic() + ttl if ttl else None

    def mark_listing_complete(self, ttl: Optional[int] = None):
        with self._lock:
            self._mark_listing(ttl)

    def invalidate_listing(self):
        with self._lock:
            self._listing_marked = False
            self._listing_expires = None
            self._listing_version += 1

    def listing_version(self) -> int:
        with self._lock:
            return self._listing_version

    def repopulate(self, products: List[Product], version: int, ttl: Optional[int] = None) -> bool:
        snapshots = {product.id: self.serialize(product) for product in products}
        with self._lock:
            if self._listing_version != version:
                return False
            self._hash.update(snapshots)
            self._mark_listing(ttl)
            return True

    def clear(self):
        with self._lock:
            self._hash.clear()
            self._ranking.clear()
        self.invalidate_listing()


@cache_store_registry.register("redis")
class RedisCacheStore(CacheStore):
    """Redis hash + sorted set cache"""

    def _setup(self):
        super()._setup()
        if self.client is None:
            self.client = redis.Redis(
                host=self.config.config.get('host', 'localhost'),
                port=self.config.config.get('port', 6379),
                db=self.config.config.get('db', 0),
                password=self.config.config.get('password'),
                socket_timeout=self.config.config.get('socket_timeout', 2.0),
                decode_responses=False
            )

    def _unavailable(self, operation: str, error: Exception) -> CacheUnavailableError:
        return CacheUnavailableError(f"Redis {operation} failed: {error}")

    def get(self, product_id: int) -> Optional[Product]:
        try:
            data = self.client.hget(self.region, product_id)
        except redis.RedisError as e:
            raise self._unavailable("HGET", e) from e
        return self.deserialize(data) if data is not None else None

    def get_all(self) -> List[Product]:
        try:
            entries = self.client.hgetall(self.region)
        except redis.RedisError as e:
            raise self._unavailable("HGETALL", e) from e

        products = []
        for key in sorted(entries, key=int):
            product = self.deserialize(entries[key])
            if product is not None:
                products.append(product)
        return products

    def set(self, product_id: int, product: Product):
        try:
            self.client.hset(self.region, product_id, self.serialize(product))
        except redis.RedisError as e:
            raise self._unavailable("HSET", e) from e

    def delete(self, product_id: int):
        try:
            self.client.hdel(self.region, product_id)
        except redis.RedisError as e:
            raise self._unavailable("HDEL", e) from e

    def increment(self, product_id: int, delta: float = 1) -> float:
        try:
            return float(self.client.zincrby(self.ranking_key, delta, str(product_id)))
        except redis.RedisError as e:
            raise self._unavailable("ZINCRBY", e) from e

    def top_k(self, k: int) -> List[int]:
        if k <= 0:
            return []
        try:
            members = self.client.zrevrange(self.ranking_key, 0, k - 1)
        except redis.RedisError as e:
            raise self._unavailable("ZREVRANGE", e) from e
        return [int(m) for m in members]

    def score(self, product_id: int) -> float:
        try:
            value = self.client.zscore(self.ranking_key, str(product_id))
        except redis.RedisError as e:
            raise self._unavailable("ZSCORE", e) from e
        return float(value) if value is not None else 0.0

    def remove_rank(self, product_id: int):
        try:
            self.client.zrem(self.ranking_key, str(product_id))
        except redis.RedisError as e:
            raise self._unavailable("ZREM", e) from e

    def is_listing_complete(self) -> bool:
        try:
            return bool(self.client.exists(self.listing_key))
        except redis.RedisError as e:
            raise self._unavailable("EXISTS", e) from e

    def mark_listing_complete(self, ttl: Optional[int] = None):
        try:
            if ttl:
                self.client.set(self.listing_key, 1, ex=ttl)
            else:
                self.client.set(self.listing_key, 1)
        except redis.RedisError as e:
            raise self._unavailable("SET", e) from e

    def invalidate_listing(self):
        try:
            with self.client.pipeline() as pipe:
                pipe.delete(self.listing_key)
                pipe.incr(self.version_key)
                pipe.execute()
        except redis.RedisError as e:
            raise self._unavailable("DEL/INCR", e) from e

    def listing_version(self) -> int:
        try:
            return int(self.client.get(self.version_key) or 0)
        except redis.RedisError as e:
            raise self._unavailable("GET", e) from e

    def repopulate(self, products: List[Product], version: int, ttl: Optional[int] = None) -> bool:
        snapshots = {product.id: self.serialize(product) for product in products}
        try:
            with self.client.pipeline() as pipe:
                pipe.watch(self.version_key)
                if int(pipe.get(self.version_key) or 0) != version:
                    return False
                pipe.multi()
                if snapshots:
                    pipe.hset(self.region, mapping=snapshots)
                if ttl:
                    pipe.set(self.listing_key, 1, ex=ttl)
                else:
                    pipe.set(self.listing_key, 1)
                pipe.execute()
                return True
        except redis.WatchError:
            logger.debug("Listing version changed during repopulation")
            return False
        except redis.RedisError as e:
            raise self._unavailable("MULTI/EXEC", e) from e

    def clear(self):
        try:
            self.client.delete(self.region, self.ranking_key)
        except redis.RedisError as e:
            raise self._unavailable("DEL", e) from e
        self.invalidate_listing()

    def is_available(self) -> bool:
        try:
            self.client.ping()
            return True
        except redis.RedisError:
            return False
