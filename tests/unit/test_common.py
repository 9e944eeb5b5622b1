"""Unit tests for common utils."""
from datetime import datetime, timedelta, timezone

import pytest

from academy.errors import NotFoundError
from api.utils.common import iso_format, require_lesson, require_module


@pytest.mark.unit
class TestIsoFormat:
    def test_appends_z(self):
        dt = datetime(2025, 1, 15, 12, 30, 0)
        assert iso_format(dt) == "2025-01-15T12:30:00Z"

    def test_aware_converted_to_utc(self):
        dt = datetime(2025, 1, 15, 14, 30, 0, tzinfo=timezone(timedelta(hours=2)))
        assert iso_format(dt) == "2025-01-15T12:30:00Z"

    def test_none(self):
        assert iso_format(None) is None


@pytest.mark.unit
class TestRequireCatalogEntries:
    def test_known(self, catalog):
        assert require_module(catalog, "01-introduction").title == "Introduction"
        assert require_lesson(catalog, "01-introduction", "03-key-concepts").title == "Key Concepts"

    def test_unknown_module(self, catalog):
        with pytest.raises(NotFoundError):
            require_module(catalog, "99-nope")

    def test_lesson_of_other_module(self, catalog):
        with pytest.raises(NotFoundError):
            require_lesson(catalog, "02-core-services", "03-key-concepts")
