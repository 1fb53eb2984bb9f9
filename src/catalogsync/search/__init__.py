from .models import SearchConfig, IndexStatus, IndexOutcome
from .component import SearchIndex, DictSearchIndex, ElasticsearchIndex, DEFAULT_SEARCH_FIELDS
from .sync import IndexSynchronizer

__all__ = [
    "SearchConfig",
    "IndexStatus",
    "IndexOutcome",
    "SearchIndex",
    "DictSearchIndex",
    "ElasticsearchIndex",
    "DEFAULT_SEARCH_FIELDS",
    "IndexSynchronizer"
]
