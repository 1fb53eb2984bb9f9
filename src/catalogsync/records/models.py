from pydantic import Field
from catalogsync.core.base import BackendConfig


class RecordStoreConfig(BackendConfig):
    """System of record configuration"""
    table: str = Field("products", description="Table holding product rows")
