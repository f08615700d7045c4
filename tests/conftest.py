"""Shared fixtures built on the in-memory catalog doubles."""
from __future__ import annotations

import pytest

from unified_search.config import Settings
from unified_search.schemas import CatalogTag

from catalog_fakes import TEST_SETTINGS, FakeAdapter, make_item


@pytest.fixture
def test_settings() -> Settings:
    return TEST_SETTINGS


@pytest.fixture
def four_catalogs() -> dict[CatalogTag, FakeAdapter]:
    """Five items per catalog, all matching the query 'star'."""
    adapters: dict[CatalogTag, FakeAdapter] = {}
    for catalog in ("film", "book", "game", "music"):
        items = [
            make_item(f"Star {catalog} {n}", catalog, year=2000 + n, rating=7.0)
            for n in range(5)
        ]
        adapters[catalog] = FakeAdapter(catalog, items)
    return adapters
