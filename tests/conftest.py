import asyncio
import re
from collections.abc import Callable
from typing import Any

import pytest

from apps.shopify.config.constants import Category
from apps.shopify.core.inventory import SettleDelay
from apps.shopify.models.product import Product
from apps.shopify.utils.errors import ShopifyRequestError
from apps.shopify.utils.lookup_cache import LookupCache
from common.binary_file import BinaryFile
from common.llm_client import LLMClient


PRODUCT_ID = "gid://shopify/Product/1001"
VARIANT_ID = "gid://shopify/ProductVariant/2001"
INVENTORY_ITEM_ID = "gid://shopify/InventoryItem/3001"
LOCATION_ID = "gid://shopify/Location/4001"
PUBLICATION_ID = "gid://shopify/Publication/5001"
MIDI_COLLECTION_ID = "gid://shopify/Collection/6001"


def root_field(query: str) -> str:
    """`mutation productCreate(...) { productCreate(` -> `productCreate`"""
    return re.search(r"\{\s*(\w+)", query).group(1)


def ok(field: str, **payload) -> dict[str, Any]:
    return {field: {**payload, "userErrors": []}}


def user_error(field: str, message: str, path: list[str] | None = None) -> dict[str, Any]:
    return {field: {"userErrors": [{"field": path or ["input"], "message": message}]}}


class FakeShopify:
    """In-memory stand-in for ShopifyClient, answering by GraphQL root field."""

    def __init__(self):
        self.calls: list[tuple[str, dict[str, Any]]] = []
        self.uploads: list[tuple[str, list[dict[str, str]], BinaryFile]] = []
        self.failing_uploads: set[str] = set()
        self.upload_delays: dict[str, float] = {}
        self.collections = [{"id": MIDI_COLLECTION_ID, "title": "Midi", "handle": "midi-dresses"}]
        self.publications = [
            {"id": "gid://shopify/Publication/5000", "name": "Point of Sale"},
            {"id": PUBLICATION_ID, "name": "Online Store"},
        ]
        self.tracked = True
        self.media_count = 0
        self.handlers: dict[str, Callable[[dict[str, Any]], dict[str, Any]]] = {
            "productCreate": self._product_create,
            "productOptionsCreate": lambda v: ok("productOptionsCreate", product={"id": v["productId"], "options": []}),
            "product": lambda v: {
                "product": {"variants": {"nodes": [{"id": VARIANT_ID, "inventoryItem": {"id": INVENTORY_ITEM_ID, "tracked": False}}]}}
            },
            "productVariantsBulkUpdate": lambda v: ok(
                "productVariantsBulkUpdate",
                productVariants=[{"id": VARIANT_ID, "price": v["variants"][0]["price"], "inventoryItem": {"id": INVENTORY_ITEM_ID, "tracked": False}}],
            ),
            "inventoryItemUpdate": lambda v: ok("inventoryItemUpdate", inventoryItem={"id": v["id"], "tracked": True}),
            "inventoryItem": lambda v: {"inventoryItem": {"id": v["id"], "tracked": self.tracked}},
            "locations": lambda v: {"locations": {"edges": [{"node": {"id": LOCATION_ID, "name": "Studio", "isPrimary": True}}]}},
            "inventorySetQuantities": lambda v: ok("inventorySetQuantities", inventoryAdjustmentGroup={"id": "gid://shopify/InventoryAdjustmentGroup/1"}),
            "publications": lambda v: {"publications": {"edges": [{"node": p} for p in self.publications]}},
            "publishablePublish": lambda v: ok("publishablePublish", publishable={"availablePublicationsCount": {"count": 1}}),
            "collections": lambda v: {"collections": {"edges": [{"node": c} for c in self.collections]}},
            "collectionAddProducts": lambda v: ok("collectionAddProducts", collection={"id": v["id"], "title": "Midi"}),
            "stagedUploadsCreate": self._staged_upload,
            "productUpdate": self._product_update,
        }

    def _product_create(self, variables: dict[str, Any]) -> dict[str, Any]:
        title = variables["product"]["title"]
        handle = re.sub(r"[^a-z0-9]+", "-", title.lower()).strip("-")
        return ok("productCreate", product={"id": PRODUCT_ID, "title": title, "handle": handle})

    def _staged_upload(self, variables: dict[str, Any]) -> dict[str, Any]:
        filename = variables["input"][0]["filename"]
        target = {
            "url": f"https://uploads.example.com/{filename}",
            "resourceUrl": f"https://cdn.example.com/tmp/{filename}",
            "parameters": [{"name": "key", "value": f"tmp/{filename}"}, {"name": "Content-Type", "value": "image/jpeg"}],
        }
        return ok("stagedUploadsCreate", stagedTargets=[target])

    def _product_update(self, variables: dict[str, Any]) -> dict[str, Any]:
        self.media_count += 1
        media = {"nodes": [{"id": f"gid://shopify/MediaImage/{self.media_count}"}]}
        return ok("productUpdate", product={"id": variables["product"]["id"], "media": media})

    async def request(self, query: str, variables: dict[str, Any] | None = None) -> dict[str, Any]:
        field = root_field(query)
        variables = variables or {}
        self.calls.append((field, variables))
        handler = self.handlers[field]
        result = handler(variables)
        if isinstance(result, Exception):
            raise result
        return result

    async def post_form(self, url: str, fields: list[dict[str, str]], file: BinaryFile) -> None:
        for name, delay in self.upload_delays.items():
            if name in url:
                await asyncio.sleep(delay)
        self.uploads.append((url, fields, file))
        if any(name in url for name in self.failing_uploads):
            raise ShopifyRequestError("Failed to upload file to staged URL: 403 Forbidden")

    def called(self, field: str) -> list[dict[str, Any]]:
        return [variables for name, variables in self.calls if name == field]


class FakeLLM(LLMClient):
    """Real JSON extraction and schema validation over a canned reply."""

    def __init__(self, reply: str, model: str = "gemini-2.5-flash"):
        super().__init__(model)
        self.reply = reply
        self.messages = None

    async def generate_text(self, messages, temperature=None) -> str:
        self.messages = messages
        return self.reply


@pytest.fixture
def shopify() -> FakeShopify:
    return FakeShopify()


@pytest.fixture
def cache() -> LookupCache:
    return LookupCache()


@pytest.fixture
def no_wait() -> SettleDelay:
    return SettleDelay(0)


def make_image(i: int) -> BinaryFile:
    return BinaryFile(name=f"photo_{i}.jpg", mime_type="image/jpeg", data=bytes([0xFF, 0xD8, i, 0xFF, 0xD9]))


@pytest.fixture
def images() -> list[BinaryFile]:
    return [make_image(i) for i in range(3)]


@pytest.fixture
def product(images) -> Product:
    return Product(
        title="Floral Midi Dress",
        description="**Shoulder - 38**\n\nA floral dress.\n- Tie belt\n- V-neck",
        images=tuple(images),
        category=Category.MIDI,
        price=650,
    )


@pytest.fixture
def warnings(monkeypatch) -> list[str]:
    from common.logger import logger

    recorded: list[str] = []
    monkeypatch.setattr(logger, "warning", recorded.append)
    return recorded
