"""Image upload through Shopify's staged-upload protocol and attachment as product media."""

import asyncio
import re
from typing import Any

from apps.shopify.models.product import Product
from apps.shopify.utils.errors import ImageAttachmentError, ListingError, MissingPrerequisiteError
from apps.shopify.utils.shopify_client import ShopifyClient, check_user_errors
from common.binary_file import BinaryFile
from common.logger import logger


STAGED_UPLOADS_CREATE_MUTATION = """
mutation stagedUploadsCreate($input: [StagedUploadInput!]!) {
  stagedUploadsCreate(input: $input) {
    stagedTargets {
      url
      resourceUrl
      parameters {
        name
        value
      }
    }
    userErrors {
      field
      message
    }
  }
}
"""

PRODUCT_UPDATE_MEDIA_MUTATION = """
mutation productUpdate($product: ProductUpdateInput!, $media: [CreateMediaInput!]!) {
  productUpdate(product: $product, media: $media) {
    product {
      id
      media(first: 10) {
        nodes {
          id
          ... on MediaImage {
            image {
              url
            }
          }
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


def image_filename(title: str, position: int) -> str:
    """`Floral Midi!` and position 1 give `Floral_Midi__1.jpg`."""
    return f"{re.sub(r'[^a-zA-Z0-9]', '_', title)}_{position}.jpg"


async def create_staged_upload(client: ShopifyClient, file: BinaryFile, filename: str) -> dict[str, Any]:
    variables = {
        "input": [
            {
                "filename": filename,
                "mimeType": file.mime_type,
                "httpMethod": "POST",
                "resource": "FILE",
            }
        ]
    }

    data = await client.request(STAGED_UPLOADS_CREATE_MUTATION, variables)
    result = check_user_errors(data.get("stagedUploadsCreate"), "create staged upload")

    targets = result.get("stagedTargets") or []
    if not targets or not targets[0].get("url"):
        raise MissingPrerequisiteError("Failed to get staged upload URL")
    return targets[0]


async def upload_to_staged_url(client: ShopifyClient, staged_target: dict[str, Any], file: BinaryFile) -> None:
    await client.post_form(staged_target["url"], staged_target.get("parameters") or [], file)


async def upload_image_file(client: ShopifyClient, file: BinaryFile, filename: str) -> str:
    """Two-phase upload; returns the resource URL Shopify can ingest as media."""
    logger.debug(f"Uploading image: {filename}")

    staged_target = await create_staged_upload(client, file, filename)
    await upload_to_staged_url(client, staged_target, file.model_copy(update={"name": filename}))

    logger.debug(f"Successfully uploaded image: {filename}")
    return staged_target["resourceUrl"]


async def attach_image_to_product(client: ShopifyClient, product_id: str, resource_url: str) -> dict[str, Any]:
    variables = {
        "product": {"id": product_id},
        "media": [{"mediaContentType": "IMAGE", "originalSource": resource_url}],
    }

    data = await client.request(PRODUCT_UPDATE_MEDIA_MUTATION, variables)
    result = check_user_errors(data.get("productUpdate"), "attach image to product")

    nodes = (((result.get("product") or {}).get("media")) or {}).get("nodes") or []
    return nodes[0] if nodes else {}


async def attach_product_images(client: ShopifyClient, product: Product, product_id: str) -> list[dict[str, Any]]:
    """Upload every image concurrently, then attach them one by one in original order.

    A failing image does not stop the others; failures are collected into one
    ImageAttachmentError once all images have been handled.
    """
    total = len(product.images)

    async def upload(position: int, image: BinaryFile) -> str:
        return await upload_image_file(client, image, image_filename(product.title, position))

    uploads = await asyncio.gather(*(upload(i, image) for i, image in enumerate(product.images, 1)), return_exceptions=True)

    media = []
    failures: dict[int, Exception] = {}
    for i, resource_url in enumerate(uploads):
        if isinstance(resource_url, BaseException):
            if not isinstance(resource_url, Exception):
                raise resource_url
            logger.error(f"Image {i + 1}/{total} for product {product_id} failed to upload: {resource_url}")
            failures[i] = resource_url
            continue

        try:
            media.append(await attach_image_to_product(client, product_id, resource_url))
        except ListingError as e:
            logger.error(f"Image {i + 1}/{total} for product {product_id} failed to attach: {e}")
            failures[i] = e

    if failures:
        raise ImageAttachmentError(failures, attached=len(media))
    return media
