from .base import (
    BaseConfig,
    BackendConfig,
    BaseComponent,
    ConfigT
)
from .errors import (
    CatalogError,
    NotFoundError,
    RecordStoreError,
    CacheUnavailableError,
    IndexFailureError
)
from .registry import (
    BackendRegistry,
    record_store_registry,
    cache_store_registry,
    search_index_registry
)
from .factory import CatalogFactory, load_yaml

__all__ = [
    'BaseConfig',
    'BackendConfig',
    'BaseComponent',
    'ConfigT',

    'CatalogError',
    'NotFoundError',
    'RecordStoreError',
    'CacheUnavailableError',
    'IndexFailureError',

    'BackendRegistry',
    'record_store_registry',
    'cache_store_registry',
    'search_index_registry',

    'CatalogFactory',
    'load_yaml',
]
