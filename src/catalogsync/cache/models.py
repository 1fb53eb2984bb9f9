from typing import Optional
from pydantic import Field
from catalogsync.core.base import BackendConfig


class CacheConfig(BackendConfig):
    """Cache store configuration"""
    region: str = Field("products_list", description="Hash holding product snapshots")
    ranking_key: str = Field("popular_products", description="Sorted set holding access counts")
    listing_ttl: Optional[int] = Field(
        300,
        description="Seconds the complete-listing marker lives (None/0 = no expiry)"
    )

    @property
    def listing_key(self) -> str:
        return f"{self.region}:complete"

    @property
    def version_key(self) -> str:
        return f"{self.region}:version"
