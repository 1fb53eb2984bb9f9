from concurrent.futures import Future, ThreadPoolExecutor, TimeoutError as FutureTimeout
from typing import Callable, List, Optional
import logging

from catalogsync.models import SearchDocument
from .component import SearchIndex
from .models import IndexOutcome, IndexStatus


logger = logging.getLogger(__name__)


class IndexSynchronizer:
    """
    Runs index calls off the write path.

    Calls are spread over single-thread lanes keyed by product id, so calls
    for one product always run in submission order and a slow call can
    never be overtaken by a newer one for the same product.

    Each submission is awaited for at most ``timeout`` seconds. A call that
    is still running (or still queued behind one) is reported as PENDING
    and its eventual outcome is logged; a failed call is reported as
    FAILED. Nothing is raised to the caller and nothing is retried.
    """

    def __init__(
        self,
        search_index: SearchIndex,
        timeout: Optional[float] = 2.0,
        max_workers: int = 4
    ):
        self.search_index = search_index
        self.timeout = timeout
        self._lanes: List[ThreadPoolExecutor] = [
            ThreadPoolExecutor(max_workers=1, thread_name_prefix=f"catalog-index-{n}")
            for n in range(max(1, max_workers))
        ]

    def _lane(self, product_id: int) -> ThreadPoolExecutor:
        return self._lanes[product_id % len(self._lanes)]

    def submit_index(self, document: SearchDocument) -> IndexOutcome:
        future = self._lane(document.id).submit(self.search_index.index, document)
        return self._await(future, f"index product {document.id}")

    def submit_delete(self, product_id: int) -> IndexOutcome:
        future = self._lane(product_id).submit(self.search_index.delete, product_id)
        return self._await(future, f"delete product {product_id}")

    def _await(self, future: Future, description: str) -> IndexOutcome:
        try:
            future.result(timeout=self.timeout)
        except FutureTimeout:
            logger.warning(f"Search index slow to {description}; continuing without it")
            future.add_done_callback(self._log_late_outcome(description))
            return IndexOutcome(status=IndexStatus.PENDING)
        except Exception as e:
            logger.warning(f"Search index failed to {description}: {e}")
            return IndexOutcome(status=IndexStatus.FAILED, error=str(e))
        return IndexOutcome(status=IndexStatus.INDEXED)

    @staticmethod
    def _log_late_outcome(description: str) -> Callable[[Future], None]:
        def callback(future: Future):
            error = future.exception()
            if error is not None:
                logger.warning(f"Late search index failure to {description}: {error}")
            else:
                logger.info(f"Late search index success to {description}")
        return callback

    def shutdown(self, wait: bool = True):
        for lane in self._lanes:
            lane.shutdown(wait=wait)
