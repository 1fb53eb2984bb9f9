from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field
from catalogsync.core.base import BackendConfig


class SearchConfig(BackendConfig):
    """Search index configuration"""
    index_timeout: Optional[float] = Field(
        2.0,
        description="Seconds a write waits for its index call (None = wait for completion)"
    )
    index_workers: int = Field(4, description="Threads running index submissions")
    max_results: int = Field(50, description="Maximum documents returned by search")


class IndexStatus(str, Enum):
    INDEXED = "indexed"
    FAILED = "failed"
    PENDING = "pending"


class IndexOutcome(BaseModel):
    """Result of one detached index submission"""
    status: IndexStatus = Field(...)
    error: Optional[str] = Field(default=None)
