from pathlib import Path
from typing import Any, Union
import yaml

from .registry import record_store_registry, cache_store_registry, search_index_registry
from catalogsync.cache.component import CacheStore
from catalogsync.cache.models import CacheConfig
from catalogsync.engine.component import CatalogEngine
from catalogsync.engine.models import CatalogConfig
from catalogsync.records.component import RecordStore
from catalogsync.records.models import RecordStoreConfig
from catalogsync.search.component import SearchIndex
from catalogsync.search.models import SearchConfig


def load_yaml(path: str | Path) -> dict:
    """Load YAML configuration file"""
    with open(path, 'r') as f:
        return yaml.safe_load(f)


class CatalogFactory:
    """Factory for building store adapters and the engine from configs"""

    @staticmethod
    def create_record_store(
        config: Union[RecordStoreConfig, dict],
        client: Any = None
    ) -> RecordStore:
        if isinstance(config, dict):
            config = RecordStoreConfig(**config)
        try:
            backend = record_store_registry.get(config.type)
        except KeyError as e:
            raise ValueError(f"Unknown record store type: {config.type}") from e
        return backend(config, client=client)

    @staticmethod
    def create_cache_store(
        config: Union[CacheConfig, dict],
        client: Any = None
    ) -> CacheStore:
        if isinstance(config, dict):
            config = CacheConfig(**config)
        try:
            backend = cache_store_registry.get(config.type)
        except KeyError as e:
            raise ValueError(f"Unknown cache store type: {config.type}") from e
        return backend(config, client=client)

    @staticmethod
    def create_search_index(
        config: Union[SearchConfig, dict],
        client: Any = None
    ) -> SearchIndex:
        if isinstance(config, dict):
            config = SearchConfig(**config)
        try:
            backend = search_index_registry.get(config.type)
        except KeyError as e:
            raise ValueError(f"Unknown search index type: {config.type}") from e
        return backend(config, client=client)

    @staticmethod
    def create_from_dict(
        config_dict: dict,
        record_client: Any = None,
        cache_client: Any = None,
        search_client: Any = None
    ) -> CatalogEngine:
        """
        Create engine from dict (for programmatic use)

        Client handles passed here are used as-is; their lifecycle stays
        with the caller.

        Example config:
            record_store: {type: "postgres", config: {...}}
            cache: {type: "redis", config: {...}, listing_ttl: 300}
            search: {type: "elasticsearch", config: {...}, index_timeout: 2.0}
            engine: {merge_policy: "sparse"}
        """
        config = CatalogConfig(**config_dict)

        return CatalogEngine(
            record_store=CatalogFactory.create_record_store(config.record_store, record_client),
            cache_store=CatalogFactory.create_cache_store(config.cache, cache_client),
            search_index=CatalogFactory.create_search_index(config.search, search_client),
            config=config.engine
        )

    @staticmethod
    def create_from_yaml(config_path: str | Path, **clients) -> CatalogEngine:
        """Same as create_from_dict but reads a YAML file"""
        return CatalogFactory.create_from_dict(load_yaml(config_path), **clients)
