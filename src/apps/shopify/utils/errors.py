"""Exception types raised by inference and by the Shopify materialization steps."""

from typing import Any


class ListingError(Exception):
    """Base class for every failure surfaced to the operator."""


class InferenceError(ListingError):
    """Model output could not be parsed or did not match the expected schema."""


class ImageIndexError(InferenceError):
    def __init__(self, index: int, image_count: int):
        self.index = index
        self.image_count = image_count
        super().__init__(f"Invalid image index: {index} (expected 0 <= index < {image_count})")


class ShopifyRequestError(ListingError):
    """Transport failure or a GraphQL `errors` array."""

    def __init__(self, message: str, payload: Any = None):
        self.payload = payload
        super().__init__(message)


class ShopifyUserError(ListingError):
    """A mutation answered with a non-empty `userErrors` list."""

    def __init__(self, action: str, user_errors: list[dict[str, Any]]):
        self.action = action
        self.user_errors = user_errors
        super().__init__(f"Failed to {action}: {format_user_errors(user_errors)}")


class MissingPrerequisiteError(ListingError):
    """A store-level resource the sequencer depends on does not exist."""


class ImageCompressionError(ListingError):
    """An uploaded file could not be decoded as an image."""


class InventoryTrackingTimeout(MissingPrerequisiteError):
    pass


class ImageAttachmentError(ListingError):
    def __init__(self, failures: dict[int, Exception], attached: int):
        self.failures = failures
        self.attached = attached
        details = "; ".join(f"image {i + 1}: {error}" for i, error in sorted(failures.items()))
        super().__init__(f"{len(failures)} of {len(failures) + attached} images failed ({details})")


class MaterializationError(ListingError):
    """One or more branches failed after the product shell was created.

    The product stays live on the store; `product_id` is what an operator
    needs to clean it up by hand.
    """

    def __init__(self, product_id: str, title: str, failures: dict[str, Exception]):
        self.product_id = product_id
        self.title = title
        self.failures = failures
        details = "; ".join(f"{branch}: {error}" for branch, error in failures.items())
        super().__init__(f"Product '{title}' ({product_id}) partially created, {len(failures)} step(s) failed: {details}")


def format_user_errors(user_errors: list[dict[str, Any]]) -> str:
    parts = []
    for error in user_errors:
        field = error.get("field")
        if isinstance(field, list):
            field = ".".join(str(f) for f in field)
        message = error.get("message", "unknown error")
        parts.append(f"{field}: {message}" if field else message)
    return ", ".join(parts)
