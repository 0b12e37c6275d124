import asyncio
from typing import Any, Protocol

from tenacity import RetryError, retry, retry_if_result, stop_after_delay, wait_fixed

from apps.shopify.config.constants import (
    INITIAL_STOCK_QUANTITY,
    INVENTORY_QUANTITY_NAME,
    INVENTORY_REASON,
    INVENTORY_REFERENCE_URI,
)
from apps.shopify.config.settings import settings
from apps.shopify.core.lookups import get_primary_location_id
from apps.shopify.utils.errors import InventoryTrackingTimeout, MissingPrerequisiteError
from apps.shopify.utils.lookup_cache import LookupCache
from apps.shopify.utils.shopify_client import ShopifyClient, check_user_errors
from common.logger import logger


PRODUCT_VARIANTS_QUERY = """
query productVariants($productId: ID!) {
  product(id: $productId) {
    variants(first: 1) {
      nodes {
        id
        inventoryItem {
          id
          tracked
        }
      }
    }
  }
}
"""

PRODUCT_VARIANTS_BULK_UPDATE_MUTATION = """
mutation productVariantsBulkUpdate($productId: ID!, $variants: [ProductVariantsBulkInput!]!) {
  productVariantsBulkUpdate(productId: $productId, variants: $variants) {
    productVariants {
      id
      price
      inventoryItem {
        id
        tracked
      }
    }
    userErrors {
      field
      message
    }
  }
}
"""

INVENTORY_ITEM_UPDATE_MUTATION = """
mutation inventoryItemUpdate($id: ID!, $input: InventoryItemInput!) {
  inventoryItemUpdate(id: $id, input: $input) {
    inventoryItem {
      id
      tracked
    }
    userErrors {
      field
      message
    }
  }
}
"""

INVENTORY_ITEM_QUERY = """
query inventoryItem($id: ID!) {
  inventoryItem(id: $id) {
    id
    tracked
  }
}
"""

INVENTORY_SET_QUANTITIES_MUTATION = """
mutation inventorySetQuantities($input: InventorySetQuantitiesInput!) {
  inventorySetQuantities(input: $input) {
    inventoryAdjustmentGroup {
      id
    }
    userErrors {
      field
      message
    }
  }
}
"""


class SettleStrategy(Protocol):
    async def __call__(self, client: ShopifyClient, inventory_item_id: str) -> None: ...


class SettleDelay:
    """Wait a fixed time for Shopify to finish enabling inventory tracking."""

    def __init__(self, seconds: float = 1.0):
        self.seconds = seconds

    async def __call__(self, client: ShopifyClient, inventory_item_id: str) -> None:
        await asyncio.sleep(self.seconds)


class PollTracking:
    """Poll `inventoryItem.tracked` until it reports enabled, bounded by a timeout."""

    def __init__(self, interval: float = 0.5, timeout: float = 10.0):
        self.interval = interval
        self.timeout = timeout

    async def __call__(self, client: ShopifyClient, inventory_item_id: str) -> None:
        @retry(
            retry=retry_if_result(lambda tracked: tracked is not True),
            wait=wait_fixed(self.interval),
            stop=stop_after_delay(self.timeout),
        )
        async def is_tracked() -> bool:
            data = await client.request(INVENTORY_ITEM_QUERY, {"id": inventory_item_id})
            return bool((data.get("inventoryItem") or {}).get("tracked"))

        try:
            await is_tracked()
        except RetryError as e:
            raise InventoryTrackingTimeout(f"Inventory tracking for {inventory_item_id} not enabled after {self.timeout}s") from e


def get_settle_strategy() -> SettleStrategy:
    if settings.INVENTORY_WAIT_STRATEGY == "poll":
        return PollTracking(settings.INVENTORY_POLL_INTERVAL, settings.INVENTORY_POLL_TIMEOUT)
    return SettleDelay(settings.INVENTORY_SETTLE_DELAY)


async def get_default_variant(client: ShopifyClient, product_id: str) -> dict[str, Any]:
    """The variant Shopify creates together with the product's options."""
    data = await client.request(PRODUCT_VARIANTS_QUERY, {"productId": product_id})
    variants = ((data.get("product") or {}).get("variants") or {}).get("nodes") or []

    if not variants:
        raise MissingPrerequisiteError("No existing variant found to update")
    return variants[0]


async def set_variant_price(client: ShopifyClient, product_id: str, variant_id: str, price: float) -> dict[str, Any]:
    variables = {
        "productId": product_id,
        "variants": [{"id": variant_id, "price": f"{price:.2f}", "inventoryPolicy": "DENY"}],
    }

    data = await client.request(PRODUCT_VARIANTS_BULK_UPDATE_MUTATION, variables)
    result = check_user_errors(data.get("productVariantsBulkUpdate"), "update product variant")

    variants = result.get("productVariants") or []
    return variants[0] if variants else {}


async def enable_inventory_tracking(client: ShopifyClient, inventory_item_id: str) -> dict[str, Any]:
    data = await client.request(INVENTORY_ITEM_UPDATE_MUTATION, {"id": inventory_item_id, "input": {"tracked": True}})
    result = check_user_errors(data.get("inventoryItemUpdate"), "enable inventory tracking")

    inventory_item = result.get("inventoryItem") or {}
    logger.debug(f"Inventory tracking for {inventory_item_id}: {inventory_item.get('tracked')}")
    return inventory_item


async def set_inventory_level(client: ShopifyClient, inventory_item_id: str, location_id: str, quantity: int) -> dict[str, Any]:
    variables = {
        "input": {
            "name": INVENTORY_QUANTITY_NAME,
            "reason": INVENTORY_REASON,
            "referenceDocumentUri": INVENTORY_REFERENCE_URI,
            "ignoreCompareQuantity": True,
            "quantities": [{"inventoryItemId": inventory_item_id, "locationId": location_id, "quantity": quantity}],
        }
    }

    data = await client.request(INVENTORY_SET_QUANTITIES_MUTATION, variables)
    result = check_user_errors(data.get("inventorySetQuantities"), "set inventory quantity")
    return result.get("inventoryAdjustmentGroup") or {}


async def update_product_variant(
    client: ShopifyClient,
    cache: LookupCache,
    product_id: str,
    price: float,
    settle: SettleStrategy | None = None,
) -> dict[str, Any]:
    """Price the default variant and stock one unit at the primary location.

    Each step depends on state produced by the previous one, so they run strictly in order.
    """
    settle = settle or get_settle_strategy()

    existing = await get_default_variant(client, product_id)
    variant = await set_variant_price(client, product_id, existing["id"], price)

    inventory_item = variant.get("inventoryItem") or existing.get("inventoryItem")
    if not inventory_item or not inventory_item.get("id"):
        raise MissingPrerequisiteError(f"Variant {existing['id']} has no inventory item")
    inventory_item_id = inventory_item["id"]

    await enable_inventory_tracking(client, inventory_item_id)
    await settle(client, inventory_item_id)

    location_id = await get_primary_location_id(client, cache)
    await set_inventory_level(client, inventory_item_id, location_id, INITIAL_STOCK_QUANTITY)

    logger.debug(f"Variant {existing['id']} priced at {price}, {INITIAL_STOCK_QUANTITY} on hand at {location_id}")
    return {**existing, **variant}
