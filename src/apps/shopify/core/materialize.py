"""Turns one approved Product into a fully provisioned Shopify listing.

1. create the product shell (fatal on failure, nothing else runs)
2. run five independent branches concurrently:
   options, variant & inventory, publication, collection, images
3. join: every branch finishes before the outcome is decided; failures are
   aggregated into one MaterializationError and nothing is rolled back
"""

import asyncio
from collections.abc import Awaitable
from typing import Any

from apps.shopify.core.inventory import SettleStrategy, update_product_variant
from apps.shopify.core.media import attach_product_images
from apps.shopify.core.products import (
    add_product_to_collection,
    create_product_options,
    create_single_product,
    publish_product_to_online_store,
)
from apps.shopify.models.product import CreatedProduct, Product
from apps.shopify.utils.errors import MaterializationError
from apps.shopify.utils.lookup_cache import LookupCache
from apps.shopify.utils.shopify_client import ShopifyClient
from common.logger import logger


OPTIONS = "options"
VARIANT_INVENTORY = "variant_inventory"
PUBLICATION = "publication"
COLLECTION = "collection"
IMAGES = "images"


async def run_branches(branches: dict[str, Awaitable[Any]]) -> tuple[dict[str, Any], dict[str, Exception]]:
    """Await every branch, never short-circuiting, and split results from failures."""
    names = list(branches)
    outcomes = await asyncio.gather(*branches.values(), return_exceptions=True)

    results: dict[str, Any] = {}
    failures: dict[str, Exception] = {}
    for name, outcome in zip(names, outcomes, strict=True):
        if isinstance(outcome, Exception):
            failures[name] = outcome
        elif isinstance(outcome, BaseException):
            raise outcome
        else:
            results[name] = outcome
    return results, failures


async def materialize(
    product: Product,
    client: ShopifyClient,
    cache: LookupCache,
    settle: SettleStrategy | None = None,
) -> CreatedProduct:
    created = await create_single_product(client, product)
    product_id = created.id
    logger.debug(f"Created product shell {product_id} ({created.handle})")

    results, failures = await run_branches(
        {
            OPTIONS: create_product_options(client, product_id),
            VARIANT_INVENTORY: update_product_variant(client, cache, product_id, product.price, settle),
            PUBLICATION: publish_product_to_online_store(client, cache, product_id),
            COLLECTION: add_product_to_collection(client, cache, product_id, product.category.value),
            IMAGES: attach_product_images(client, product, product_id),
        }
    )

    for branch, error in failures.items():
        logger.error(f"Product {product_id} '{product.title}': {branch} failed: {error}")

    if failures:
        raise MaterializationError(product_id, product.title, failures)

    logger.debug(f"Product {product_id} attached {len(results[IMAGES])} images")
    return created
