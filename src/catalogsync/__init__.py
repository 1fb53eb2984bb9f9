"""
catalogsync - Product catalog cache-aside engine
Keeps a relational system of record, a Redis cache with a popularity
ranking, and an Elasticsearch index coherent on every read and write.
"""

__version__ = "0.1.0"

# Import core first: backend modules register themselves on import
from catalogsync.core import (
    BaseConfig,
    BackendConfig,
    BaseComponent,
    CatalogError,
    NotFoundError,
    RecordStoreError,
    CacheUnavailableError,
    IndexFailureError,
    CatalogFactory,
    load_yaml,
)
from catalogsync.models import Product, ProductPatch, SearchDocument
from catalogsync.engine import CatalogEngine, CatalogConfig, EngineConfig, WriteResult
from catalogsync.search import IndexStatus, IndexSynchronizer
from catalogsync.ranking import PopularityTracker

__all__ = [
    'BaseConfig',
    'BackendConfig',
    'BaseComponent',
    'CatalogError',
    'NotFoundError',
    'RecordStoreError',
    'CacheUnavailableError',
    'IndexFailureError',
    'CatalogFactory',
    'load_yaml',
    'Product',
    'ProductPatch',
    'SearchDocument',
    'CatalogEngine',
    'CatalogConfig',
    'EngineConfig',
    'WriteResult',
    'IndexStatus',
    'IndexSynchronizer',
    'PopularityTracker',
]
