"""
Tests for catalogsync/core/errors.py - error taxonomy.
"""

import pytest


class TestErrors:
    """Tests for catalog error classes."""

    @pytest.mark.parametrize("name", [
        "NotFoundError",
        "RecordStoreError",
        "CacheUnavailableError",
        "IndexFailureError",
    ])
    def test_all_derive_from_catalog_error(self, name):
        import catalogsync.core.errors as errors
        assert issubclass(getattr(errors, name), errors.CatalogError)

    def test_not_found_carries_id(self):
        from catalogsync.core.errors import NotFoundError
        error = NotFoundError(7)
        assert error.product_id == 7
        assert "7" in str(error)

    def test_catalog_not_found_is_not_builtin_lookup(self):
        from catalogsync.core.errors import NotFoundError
        assert not issubclass(NotFoundError, LookupError)

    def test_exported_from_package(self):
        import catalogsync
        assert catalogsync.NotFoundError is catalogsync.core.errors.NotFoundError
