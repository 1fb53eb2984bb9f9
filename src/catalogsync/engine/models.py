from typing import List, Literal, Optional
from pydantic import BaseModel, Field

from catalogsync.core.base import BaseConfig
from catalogsync.cache.models import CacheConfig
from catalogsync.models import Product
from catalogsync.records.models import RecordStoreConfig
from catalogsync.search.models import IndexStatus, SearchConfig


class EngineConfig(BaseConfig):
    """Cache-aside engine policy"""
    merge_policy: Literal["sparse", "explicit"] = Field(
        "sparse",
        description="sparse: empty/zero values leave fields unchanged; explicit: any supplied value overwrites"
    )
    purge_derived_on_delete: bool = Field(
        False,
        description="Also drop ranking entry and search document on delete"
    )
    popular_default_count: int = Field(5, description="Default size of the popular list")
    search_fields: List[str] = Field(
        default_factory=lambda: ["name", "category", "description"],
        description="Fields matched by free-text search"
    )


class CatalogConfig(BaseConfig):
    """Full catalog service configuration"""
    record_store: RecordStoreConfig = Field(...)
    cache: CacheConfig = Field(...)
    search: SearchConfig = Field(...)
    engine: EngineConfig = Field(default_factory=EngineConfig)


class WriteResult(BaseModel):
    """
    Outcome of a write.

    The record store write has always succeeded when a WriteResult is
    returned. ``index_status`` reports the search index step separately;
    it is None when no index call was made.
    """
    product: Optional[Product] = Field(default=None)
    index_status: Optional[IndexStatus] = Field(default=None)
    index_error: Optional[str] = Field(default=None)

    @property
    def index_failed(self) -> bool:
        return self.index_status == IndexStatus.FAILED
