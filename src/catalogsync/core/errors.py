class CatalogError(Exception):
    """Base class for catalog engine errors"""


class NotFoundError(CatalogError):
    """Product id is absent at the record store"""

    def __init__(self, product_id: int):
        self.product_id = product_id
        super().__init__(f"Product {product_id} not found")


class RecordStoreError(CatalogError):
    """System of record failed; always fatal to the operation"""


class CacheUnavailableError(CatalogError):
    """Cache call failed; the engine treats it as a miss"""


class IndexFailureError(CatalogError):
    """Search index call failed"""
