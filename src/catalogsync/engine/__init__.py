from .models import EngineConfig, CatalogConfig, WriteResult
from .component import CatalogEngine, MUTABLE_FIELDS

__all__ = [
    "EngineConfig",
    "CatalogConfig",
    "WriteResult",
    "CatalogEngine",
    "MUTABLE_FIELDS"
]
