"""Store-level lookups shared by every materialization, memoized in a LookupCache."""

from typing import Any

from apps.shopify.config.constants import (
    COLLECTIONS_PAGE_SIZE,
    ONLINE_STORE_PUBLICATION,
    PUBLICATIONS_PAGE_SIZE,
    LookupKey,
)
from apps.shopify.utils.errors import MissingPrerequisiteError
from apps.shopify.utils.lookup_cache import LookupCache
from apps.shopify.utils.shopify_client import ShopifyClient
from common.logger import logger


LOCATIONS_QUERY = """
query {
  locations(first: 1) {
    edges {
      node {
        id
        name
        isPrimary
      }
    }
  }
}
"""

COLLECTIONS_QUERY = """
query collections($first: Int!) {
  collections(first: $first) {
    edges {
      node {
        id
        title
        handle
      }
    }
  }
}
"""

PUBLICATIONS_QUERY = """
query publications($first: Int!) {
  publications(first: $first) {
    edges {
      node {
        id
        name
      }
    }
  }
}
"""


def _nodes(connection: dict[str, Any] | None) -> list[dict[str, Any]]:
    return [edge["node"] for edge in (connection or {}).get("edges", []) if edge.get("node")]


async def get_primary_location_id(client: ShopifyClient, cache: LookupCache) -> str:
    async def fetch() -> str:
        data = await client.request(LOCATIONS_QUERY)
        locations = _nodes(data.get("locations"))
        if not locations or not locations[0].get("id"):
            raise MissingPrerequisiteError("No primary location found")
        location = locations[0]
        logger.debug(f"Primary location: {location.get('name')} ({location['id']})")
        return location["id"]

    return await cache.get_or_fetch(LookupKey.PRIMARY_LOCATION, fetch)


async def get_all_collections(client: ShopifyClient, cache: LookupCache) -> list[dict[str, Any]]:
    async def fetch() -> list[dict[str, Any]]:
        data = await client.request(COLLECTIONS_QUERY, {"first": COLLECTIONS_PAGE_SIZE})
        collections = _nodes(data.get("collections"))
        logger.debug(f"Fetched {len(collections)} collections")
        return collections

    return await cache.get_or_fetch(LookupKey.COLLECTIONS, fetch)


def match_collection(collections: list[dict[str, Any]], category: str) -> dict[str, Any] | None:
    """Exact title/handle match first (case-insensitive), then containment either way."""
    category_lower = category.lower()

    for collection in collections:
        if collection.get("title", "").lower() == category_lower or collection.get("handle", "").lower() == category_lower:
            return collection

    for collection in collections:
        title = collection.get("title", "").lower()
        handle = collection.get("handle", "").lower()
        if (title and (category_lower in title or title in category_lower)) or (handle and (category_lower in handle or handle in category_lower)):
            return collection

    return None


async def find_collection_by_category(client: ShopifyClient, cache: LookupCache, category: str) -> str | None:
    collections = await get_all_collections(client, cache)
    collection = match_collection(collections, category)
    return collection["id"] if collection else None


async def get_online_store_publication_id(client: ShopifyClient, cache: LookupCache) -> str:
    async def fetch() -> str:
        data = await client.request(PUBLICATIONS_QUERY, {"first": PUBLICATIONS_PAGE_SIZE})
        for publication in _nodes(data.get("publications")):
            if publication.get("name") == ONLINE_STORE_PUBLICATION:
                return publication["id"]
        raise MissingPrerequisiteError(f"{ONLINE_STORE_PUBLICATION} publication not found")

    return await cache.get_or_fetch(LookupKey.ONLINE_STORE_PUBLICATION, fetch)
