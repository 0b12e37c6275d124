from typing import Any

from apps.shopify.config.constants import (
    DEFAULT_OPTION_NAME,
    DEFAULT_OPTION_VALUE,
    PRODUCT_STATUS,
    PRODUCT_TAXONOMY_CATEGORY,
)
from apps.shopify.core.lookups import find_collection_by_category, get_online_store_publication_id
from apps.shopify.models.product import CreatedProduct, Product
from apps.shopify.utils.description_html import convert_markdown_to_html
from apps.shopify.utils.errors import ShopifyRequestError
from apps.shopify.utils.lookup_cache import LookupCache
from apps.shopify.utils.shopify_client import ShopifyClient, check_user_errors
from common.logger import logger


PRODUCT_CREATE_MUTATION = """
mutation productCreate($product: ProductCreateInput!) {
  productCreate(product: $product) {
    product {
      id
      title
      handle
    }
    userErrors {
      field
      message
    }
  }
}
"""

PRODUCT_OPTIONS_CREATE_MUTATION = """
mutation productOptionsCreate($productId: ID!, $options: [OptionCreateInput!]!) {
  productOptionsCreate(productId: $productId, options: $options) {
    product {
      id
      options {
        id
        name
        optionValues {
          id
          name
        }
      }
    }
    userErrors {
      field
      message
    }
  }
}
"""

PUBLISHABLE_PUBLISH_MUTATION = """
mutation publishablePublish($id: ID!, $input: [PublicationInput!]!) {
  publishablePublish(id: $id, input: $input) {
    publishable {
      availablePublicationsCount {
        count
      }
    }
    userErrors {
      field
      message
    }
  }
}
"""

COLLECTION_ADD_PRODUCTS_MUTATION = """
mutation collectionAddProducts($id: ID!, $productIds: [ID!]!) {
  collectionAddProducts(id: $id, productIds: $productIds) {
    collection {
      id
      title
    }
    userErrors {
      field
      message
    }
  }
}
"""


async def create_single_product(client: ShopifyClient, product: Product) -> CreatedProduct:
    """Create the product shell: title, sanitized HTML description, taxonomy category."""
    variables = {
        "product": {
            "title": product.title,
            "descriptionHtml": convert_markdown_to_html(product.description),
            "category": PRODUCT_TAXONOMY_CATEGORY,
            "status": PRODUCT_STATUS,
        }
    }

    data = await client.request(PRODUCT_CREATE_MUTATION, variables)
    result = check_user_errors(data.get("productCreate"), "create product")

    created = result.get("product")
    if not created or not created.get("id"):
        raise ShopifyRequestError(f"Product creation failed: {product.title}", data)
    return CreatedProduct.model_validate(created)


async def create_product_options(client: ShopifyClient, product_id: str) -> dict[str, Any]:
    variables = {
        "productId": product_id,
        "options": [{"name": DEFAULT_OPTION_NAME, "values": [{"name": DEFAULT_OPTION_VALUE}]}],
    }

    data = await client.request(PRODUCT_OPTIONS_CREATE_MUTATION, variables)
    result = check_user_errors(data.get("productOptionsCreate"), "create product options")
    return result.get("product") or {}


async def publish_product_to_online_store(client: ShopifyClient, cache: LookupCache, product_id: str) -> dict[str, Any]:
    publication_id = await get_online_store_publication_id(client, cache)

    variables = {"id": product_id, "input": [{"publicationId": publication_id}]}
    data = await client.request(PUBLISHABLE_PUBLISH_MUTATION, variables)
    result = check_user_errors(data.get("publishablePublish"), "publish product")

    logger.debug(f"Product {product_id} published to online store")
    return result.get("publishable") or {}


async def add_product_to_collection(client: ShopifyClient, cache: LookupCache, product_id: str, category: str) -> dict[str, Any] | None:
    """Returns None when no collection matches the category; that is not an error."""
    collection_id = await find_collection_by_category(client, cache, category)

    if not collection_id:
        logger.info(f"No matching collection found for category '{category}', skipping")
        return None

    variables = {"id": collection_id, "productIds": [product_id]}
    data = await client.request(COLLECTION_ADD_PRODUCTS_MUTATION, variables)
    result = check_user_errors(data.get("collectionAddProducts"), "add product to collection")

    collection = result.get("collection") or {}
    logger.debug(f"Product {product_id} added to collection {collection.get('title', collection_id)}")
    return collection
