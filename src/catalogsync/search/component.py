from abc import abstractmethod
from threading import Lock
from typing import Dict, List, Optional
import logging
import re

from elasticsearch import Elasticsearch
from elasticsearch.exceptions import ApiError, ConflictError, NotFoundError, TransportError
from elasticsearch.helpers import bulk as es_bulk

from catalogsync.core.base import BaseComponent
from catalogsync.core.errors import IndexFailureError
from catalogsync.core.registry import search_index_registry
from catalogsync.models import SearchDocument
from .models import SearchConfig


logger = logging.getLogger(__name__)

DEFAULT_SEARCH_FIELDS = ["name", "category", "description"]


class SearchIndex(BaseComponent[SearchConfig]):
    """Full-text index of product documents"""

    @abstractmethod
    def index(self, document: SearchDocument):
        """Upsert document by id; an older ``version`` never replaces a newer one"""
        pass

    @abstractmethod
    def search(
        self,
        query: str,
        fields: List[str] = None,
        size: Optional[int] = None
    ) -> List[SearchDocument]:
        pass

    @abstractmethod
    def delete(self, product_id: int):
        pass

    def bulk_index(self, documents: List[SearchDocument]) -> int:
        for document in documents:
            self.index(document)
        return len(documents)

    @abstractmethod
    def clear(self):
        pass


@search_index_registry.register("dict")
class DictSearchIndex(SearchIndex):
    """In-memory index with case-insensitive token matching"""

    def _setup(self):
        self._documents: Dict[int, SearchDocument] = {}
        self._lock = Lock()

    @staticmethod
    def _tokens(text: str) -> set:
        return set(re.findall(r"\w+", text.lower()))

    def index(self, document: SearchDocument):
        with self._lock:
            current = self._documents.get(document.id)
            if (
                current is not None
                and current.version is not None
                and document.version is not None
                and document.version < current.version
            ):
                logger.debug(f"Skipping stale document for product {document.id}")
                return
            self._documents[document.id] = document.model_copy(deep=True)

    def search(
        self,
        query: str,
        fields: List[str] = None,
        size: Optional[int] = None
    ) -> List[SearchDocument]:
        fields = fields or DEFAULT_SEARCH_FIELDS
        size = size or self.config.max_results
        query_tokens = self._tokens(query)
        if not query_tokens:
            return []

        with self._lock:
            documents = list(self._documents.values())

        scored = []
        for document in documents:
            doc_tokens = set()
            for field in fields:
                doc_tokens |= self._tokens(str(getattr(document, field, "")))
            matched = len(query_tokens & doc_tokens)
            if matched:
                scored.append((matched, document))

        scored.sort(key=lambda x: (-x[0], x[1].id))
        return [doc for _, doc in scored[:size]]

    def delete(self, product_id: int):
        with self._lock:
            self._documents.pop(product_id, None)

    def clear(self):
        with self._lock:
            self._documents.clear()

    def count(self) -> int:
        return len(self._documents)


@search_index_registry.register("elasticsearch")
class ElasticsearchIndex(SearchIndex):
    """Elasticsearch full-text search index"""

    def _setup(self):
        if self.client is None:
            self.client = Elasticsearch(
                self.config.config.get('hosts', ["http://localhost:9200"]),
                api_key=self.config.config.get('api_key'),
                request_timeout=self.config.config.get('request_timeout', 5)
            )
        self.index_name = self.config.config.get('index_name', 'products')

    def index(self, document: SearchDocument):
        versioning = {}
        if document.version is not None:
            versioning = {"version": document.version, "version_type": "external_gte"}
        try:
            self.client.index(
                index=self.index_name,
                id=str(document.id),
                document=document.model_dump(),
                **versioning
            )
        except ConflictError:
            logger.debug(f"Index already holds a newer document for product {document.id}")
        except (ApiError, TransportError) as e:
            raise IndexFailureError(f"Indexing product {document.id} failed: {e}") from e

    def search(
        self,
        query: str,
        fields: List[str] = None,
        size: Optional[int] = None
    ) -> List[SearchDocument]:
        try:
            response = self.client.search(
                index=self.index_name,
                query={
                    "multi_match": {
                        "query": query,
                        "fields": fields or DEFAULT_SEARCH_FIELDS,
                        "type": "best_fields"
                    }
                },
                size=size or self.config.max_results
            )
        except (ApiError, TransportError) as e:
            raise IndexFailureError(f"Search failed: {e}") from e
        return self._process_hits(response['hits']['hits'])

    def _process_hits(self, hits: List[Dict]) -> List[SearchDocument]:
        documents = []
        for hit in hits:
            source = dict(hit['_source'])
            source.setdefault('id', int(hit['_id']))
            documents.append(SearchDocument(**source))
        return documents

    def delete(self, product_id: int):
        try:
            self.client.delete(index=self.index_name, id=str(product_id))
        except NotFoundError:
            logger.debug(f"Product {product_id} was not indexed")
        except (ApiError, TransportError) as e:
            raise IndexFailureError(f"Deleting product {product_id} failed: {e}") from e

    def bulk_index(self, documents: List[SearchDocument]) -> int:
        actions = []
        for document in documents:
            action = {
                "_op_type": "index",
                "_index": self.index_name,
                "_id": str(document.id),
                "_source": document.model_dump()
            }
            if document.version is not None:
                action["_version"] = document.version
                action["_version_type"] = "external_gte"
            actions.append(action)
        if not actions:
            return 0

        try:
            success, failed = es_bulk(
                self.client,
                actions,
                raise_on_error=False,
                chunk_size=self.config.config.get('bulk_chunk_size', 500)
            )
            self.client.indices.refresh(index=self.index_name)
        except (ApiError, TransportError) as e:
            raise IndexFailureError(f"Bulk indexing failed: {e}") from e

        if failed:
            logger.warning(f"{len(failed)} documents failed to index")
        return success

    def clear(self):
        try:
            self.client.delete_by_query(
                index=self.index_name,
                query={"match_all": {}}
            )
            self.client.indices.refresh(index=self.index_name)
        except (ApiError, TransportError) as e:
            raise IndexFailureError(f"Clearing index failed: {e}") from e

    def is_available(self) -> bool:
        try:
            return bool(self.client.ping())
        except (ApiError, TransportError):
            return False
