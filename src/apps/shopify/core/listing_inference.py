from typing import Any

from apps.shopify.config.constants import DEFAULT_PRICE, Category
from apps.shopify.config.settings import settings
from apps.shopify.core.prompts.listing_prompts import (
    EXAMPLE_DESCRIPTION,
    EXAMPLE_TITLE,
    IMAGE_LABEL_TEMPLATE,
    USER_PROMPT,
)
from apps.shopify.models.product import ProductDraft, ProductDraftResponse
from apps.shopify.utils.errors import ImageIndexError, InferenceError
from common.binary_file import BinaryFile, to_data_url
from common.llm_client import LLMClient, LLMResponseError
from common.logger import logger


def get_llm_client() -> LLMClient:
    return LLMClient(
        settings.DEFAULT_MODEL,
        temperature=settings.MODEL_TEMPERATURE,
        max_tokens=settings.MAX_OUTPUT_TOKENS,
        api_keys={
            "OPENAI_API_KEY": settings.OPENAI_API_KEY,
            "ANTHROPIC_API_KEY": settings.ANTHROPIC_API_KEY,
            "GOOGLE_API_KEY": settings.GOOGLE_API_KEY,
            "GROQ_API_KEY": settings.GROQ_API_KEY,
        },
    )


def build_prompt(image_count: int) -> str:
    categories = [category.value for category in Category]
    return USER_PROMPT.format(
        image_count=image_count,
        categories=" | ".join(f"'{c}'" for c in categories),
        category_union=" | ".join(f'"{c}"' for c in categories),
        example_title=EXAMPLE_TITLE,
        example_description=EXAMPLE_DESCRIPTION,
        default_price=DEFAULT_PRICE,
    )


def build_messages(data_urls: list[str]) -> list[dict[str, Any]]:
    """One user message: the instructions, then an `Image <i>:` label before each image."""
    content: list[dict[str, Any]] = [{"type": "text", "text": build_prompt(len(data_urls))}]
    for index, data_url in enumerate(data_urls):
        content.append({"type": "text", "text": IMAGE_LABEL_TEMPLATE.format(index=index)})
        content.append({"type": "image", "image": data_url})
    return [{"role": "user", "content": content}]


def validate_drafts(drafts: list[ProductDraft], image_count: int) -> list[ProductDraft]:
    """Reject the whole batch on any out-of-range index; warn when images went unused."""
    used_indexes: set[int] = set()

    for draft in drafts:
        for index in draft.image_indexes:
            if index < 0 or index >= image_count:
                raise ImageIndexError(index, image_count)
            used_indexes.add(index)

    if len(used_indexes) != image_count:
        unused = sorted(set(range(image_count)) - used_indexes)
        logger.warning(f"Only {len(used_indexes)} out of {image_count} images were used in products (unused: {unused})")

    return drafts


async def infer(images: list[BinaryFile], client: LLMClient | None = None) -> list[ProductDraft]:
    """Group uploaded images into product drafts with generated copy."""
    if not images:
        raise InferenceError("At least one image is required")

    client = client or get_llm_client()
    messages = build_messages([to_data_url(image) for image in images])

    logger.start(f"Analyzing {len(images)} images with {client.model.value}...")
    try:
        response = await client.generate_json(messages, ProductDraftResponse)
        drafts = validate_drafts(response.products, len(images))
    except LLMResponseError as e:
        logger.fail("Model output could not be used")
        raise InferenceError(str(e)) from e
    except InferenceError as e:
        logger.fail(f"Model output rejected: {e}")
        raise

    logger.succeed(f"Model proposed {len(drafts)} products")
    return drafts
