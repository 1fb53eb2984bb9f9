from .models import RecordStoreConfig
from .component import RecordStore, DictRecordStore, PostgresRecordStore

__all__ = [
    "RecordStoreConfig",
    "RecordStore",
    "DictRecordStore",
    "PostgresRecordStore"
]
