import asyncio

import pytest

from apps.shopify.config.constants import LookupKey
from apps.shopify.core.lookups import (
    find_collection_by_category,
    get_all_collections,
    get_online_store_publication_id,
    get_primary_location_id,
    match_collection,
)
from apps.shopify.utils.errors import MissingPrerequisiteError
from apps.shopify.utils.lookup_cache import LookupCache
from tests.conftest import LOCATION_ID, MIDI_COLLECTION_ID, PUBLICATION_ID


MIDI = {"id": "c1", "title": "Midi", "handle": "midi-dresses"}
MINI = {"id": "c2", "title": "Mini", "handle": "mini"}
TOPS = {"id": "c3", "title": "Summer Tops", "handle": "summer-tops"}


def test_exact_title_match_is_case_insensitive():
    assert match_collection([TOPS, MIDI], "midi") == MIDI
    assert match_collection([TOPS, MIDI], "MIDI") == MIDI


def test_exact_handle_match():
    assert match_collection([{"id": "c9", "title": "Little dresses", "handle": "mini"}], "mini")["id"] == "c9"


def test_exact_match_wins_over_earlier_partial_match():
    partial = {"id": "c0", "title": "Midi & Maxi", "handle": "midi-maxi"}
    assert match_collection([partial, MIDI], "midi") == MIDI


def test_substring_match_both_directions():
    assert match_collection([MIDI, MINI], "mini-dress") == MINI
    assert match_collection([TOPS], "top") == TOPS


def test_no_match_returns_none():
    assert match_collection([MIDI, MINI], "top") is None
    assert match_collection([], "midi") is None


async def test_collections_fetched_once(shopify, cache):
    first = await find_collection_by_category(shopify, cache, "midi")
    second = await find_collection_by_category(shopify, cache, "mini")

    assert first == MIDI_COLLECTION_ID
    assert second is None
    assert len(shopify.called("collections")) == 1
    assert await get_all_collections(shopify, cache) == shopify.collections


async def test_primary_location_memoized(shopify, cache):
    assert await get_primary_location_id(shopify, cache) == LOCATION_ID
    assert await get_primary_location_id(shopify, cache) == LOCATION_ID
    assert len(shopify.called("locations")) == 1
    assert LookupKey.PRIMARY_LOCATION in cache


async def test_missing_primary_location(shopify, cache):
    shopify.handlers["locations"] = lambda v: {"locations": {"edges": []}}

    with pytest.raises(MissingPrerequisiteError, match="No primary location"):
        await get_primary_location_id(shopify, cache)
    assert LookupKey.PRIMARY_LOCATION not in cache


async def test_online_store_publication_found_by_name(shopify, cache):
    assert await get_online_store_publication_id(shopify, cache) == PUBLICATION_ID


async def test_online_store_publication_missing(shopify, cache):
    shopify.publications = [{"id": "p1", "name": "Point of Sale"}]

    with pytest.raises(MissingPrerequisiteError, match="Online Store publication not found"):
        await get_online_store_publication_id(shopify, cache)


async def test_concurrent_callers_share_one_fetch():
    cache = LookupCache()
    fetches = 0

    async def fetch():
        nonlocal fetches
        fetches += 1
        await asyncio.sleep(0.01)
        return "value"

    results = await asyncio.gather(*(cache.get_or_fetch("key", fetch) for _ in range(5)))

    assert results == ["value"] * 5
    assert fetches == 1


async def test_failed_fetch_is_not_cached():
    cache = LookupCache()
    attempts = 0

    async def flaky():
        nonlocal attempts
        attempts += 1
        if attempts == 1:
            raise RuntimeError("boom")
        return 42

    with pytest.raises(RuntimeError):
        await cache.get_or_fetch("key", flaky)
    assert await cache.get_or_fetch("key", flaky) == 42

    cache.clear()
    assert "key" not in cache
