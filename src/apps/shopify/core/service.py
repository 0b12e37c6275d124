"""Entry points the session and CLI drive: one inference call, one product creation."""

from apps.shopify.core.inventory import SettleStrategy
from apps.shopify.core.listing_inference import infer
from apps.shopify.core.materialize import materialize
from apps.shopify.models.product import CreatedProduct, Product, ProductDraft
from apps.shopify.utils.lookup_cache import LookupCache
from apps.shopify.utils.shopify_client import ShopifyClient
from common.binary_file import BinaryFile
from common.llm_client import LLMClient


# Lives as long as the process; shared by every product created in it
lookup_cache = LookupCache()


async def process_images(images: list[BinaryFile], llm: LLMClient | None = None) -> list[ProductDraft]:
    return await infer(images, llm)


async def create_product(
    product: Product,
    client: ShopifyClient,
    cache: LookupCache | None = None,
    settle: SettleStrategy | None = None,
) -> CreatedProduct:
    """Create one approved product. Callers sequence products one at a time."""
    return await materialize(product, client, cache if cache is not None else lookup_cache, settle)
