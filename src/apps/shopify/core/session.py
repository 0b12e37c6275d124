"""Human-in-the-loop batch: upload -> infer -> edit -> confirm each product -> publish."""

import json
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from pydantic import BaseModel, Field

from apps.shopify.config.constants import DEFAULT_PRICE, SIZE_LINES, SLEEVES_LINE, Category
from apps.shopify.config.settings import settings
from apps.shopify.core.inventory import SettleStrategy
from apps.shopify.core.service import create_product, lookup_cache, process_images
from apps.shopify.models.product import CreatedProduct, Product, ProductDraft
from apps.shopify.utils.errors import ImageIndexError, ListingError
from apps.shopify.utils.image_compression import compress_image
from apps.shopify.utils.lookup_cache import LookupCache
from apps.shopify.utils.shopify_client import ShopifyClient
from common.binary_file import BinaryFile, from_path, write_to
from common.llm_client import LLMClient
from common.logger import logger
from common.save_to_json import save_to_json


def size_template(has_long_sleeves: bool) -> str:
    lines = SIZE_LINES + ([SLEEVES_LINE] if has_long_sleeves else [])
    return "\n".join(lines)


class ListingEdit(BaseModel):
    """Editable form of a draft; image indexes point into the session's uploads."""

    title: str
    description: str
    size: str = ""
    category: Category
    price: float = Field(default=DEFAULT_PRICE, ge=0)
    has_long_sleeves: bool = False
    image_indexes: list[int] = Field(default_factory=list)

    @classmethod
    def from_draft(cls, draft: ProductDraft) -> "ListingEdit":
        return cls(
            title=draft.title,
            description=draft.description,
            size=size_template(draft.has_long_sleeves),
            category=draft.category,
            price=draft.price,
            has_long_sleeves=draft.has_long_sleeves,
            image_indexes=list(draft.image_indexes),
        )

    def full_description(self) -> str:
        """Measurements block in bold, a blank line, then the description."""
        if not self.size.strip():
            return self.description
        return f"**{self.size.strip()}**\n\n{self.description}"


@dataclass
class BatchReport:
    total: int
    created: list[CreatedProduct] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    error: ListingError | None = None

    @property
    def halted(self) -> bool:
        return self.error is not None


class ListingSession:
    def __init__(
        self,
        llm: LLMClient | None = None,
        cache: LookupCache | None = None,
        settle: SettleStrategy | None = None,
        compress: bool = True,
    ):
        self.llm = llm
        self.cache = cache if cache is not None else lookup_cache
        self.settle = settle
        self.compress = compress
        self.images: list[BinaryFile] = []
        self.sources: list[Path | None] = []
        self.listings: list[ListingEdit] = []

    def upload(self, paths: list[str | Path]) -> list[BinaryFile]:
        files = [from_path(path) for path in paths]
        self.add_images(files, [Path(path) for path in paths])
        return files

    def add_images(self, files: list[BinaryFile], sources: list[Path | None] | None = None):
        self.images.extend(files)
        self.sources.extend(sources or [None] * len(files))

    async def infer(self) -> list[ListingEdit]:
        """Originals are kept for publishing; only the model sees compressed copies."""
        model_images = self.images
        if self.compress:
            model_images = [compress_image(image, settings.IMAGE_MAX_WIDTH, settings.IMAGE_JPEG_QUALITY) for image in self.images]

        drafts = await process_images(model_images, self.llm)
        self.listings = [ListingEdit.from_draft(draft) for draft in drafts]
        return self.listings

    def edit(self, index: int, **changes) -> ListingEdit:
        listing = self.listings[index]
        updated = ListingEdit.model_validate({**listing.model_dump(), **changes})
        self.listings[index] = updated
        return updated

    def to_product(self, listing: ListingEdit) -> Product:
        images = []
        for index in listing.image_indexes:
            if index < 0 or index >= len(self.images):
                raise ImageIndexError(index, len(self.images))
            images.append(self.images[index])

        return Product(
            title=listing.title,
            description=listing.full_description(),
            images=tuple(images),
            category=listing.category,
            price=listing.price,
        )

    async def publish(self, client: ShopifyClient, confirm: Callable[[Product], bool] | None = None) -> BatchReport:
        """Create approved products one at a time; stop at the first failure."""
        report = BatchReport(total=len(self.listings))

        for position, listing in enumerate(self.listings, 1):
            try:
                product = self.to_product(listing)
            except ImageIndexError as e:
                logger.error(f"Cannot build '{listing.title}': {e}")
                report.error = e
                break

            if confirm and not confirm(product):
                logger.info(f"Skipped '{product.title}'")
                report.skipped.append(product.title)
                continue

            logger.start(f"Creating '{product.title}' ({position}/{report.total})...")
            try:
                created = await create_product(product, client, self.cache, self.settle)
            except ListingError as e:
                logger.fail(f"Error creating product '{product.title}': {e}")
                report.error = e
                break

            report.created.append(created)
            logger.succeed(f"Created '{created.title}' ({created.handle})")
            logger.progress(len(report.created), report.total, "products created")

        if report.halted:
            logger.warning(f"Stopped after {len(report.created)} of {report.total} products; already created products stay live")
        else:
            logger.succeed(f"All {len(report.created)} approved products created in Shopify")
        return report

    def save(self, path: str | Path) -> bool:
        """Write the batch as JSON; in-memory uploads are written next to it first."""
        path = Path(path)
        image_dir = path.parent / f"{path.stem}_images"
        sources = [source or write_to(image, image_dir) for image, source in zip(self.images, self.sources, strict=True)]

        data = {
            "images": [str(Path(source).resolve()) for source in sources],
            "listings": [listing.model_dump(mode="json") for listing in self.listings],
        }
        return save_to_json(data, path)

    @classmethod
    def load(cls, path: str | Path, **kwargs) -> "ListingSession":
        path = Path(path)
        with path.open(encoding="utf-8") as f:
            data = json.load(f)

        session = cls(**kwargs)
        base = path.parent
        session.upload([p if Path(p).is_absolute() else base / p for p in data.get("images", [])])
        session.listings = [ListingEdit.model_validate(item) for item in data.get("listings", [])]
        return session
