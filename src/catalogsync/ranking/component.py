from typing import List
import logging

from catalogsync.cache.component import CacheStore


logger = logging.getLogger(__name__)


class PopularityTracker:
    """
    Access-count ranking kept in the cache's sorted-set region.

    Scores are advisory. Every successful single-product read adds one
    vote; nothing else raises a score. Cache failures propagate as
    ``CacheUnavailableError`` so the caller chooses how to degrade.
    """

    def __init__(self, cache_store: CacheStore, vote_weight: float = 1):
        self.cache_store = cache_store
        self.vote_weight = vote_weight

    def record_access(self, product_id: int) -> float:
        score = self.cache_store.increment(product_id, self.vote_weight)
        logger.debug(f"Product {product_id} popularity now {score}")
        return score

    def top(self, count: int) -> List[int]:
        if count <= 0:
            return []
        return self.cache_store.top_k(count)

    def score(self, product_id: int) -> float:
        return self.cache_store.score(product_id)

    def forget(self, product_id: int):
        self.cache_store.remove_rank(product_id)
