from pydantic import BaseModel, ConfigDict, Field

from apps.shopify.config.constants import DEFAULT_PRICE, Category
from common.binary_file import BinaryFile


class ProductDraft(BaseModel):
    """One product grouping proposed by the model, before human editing."""

    model_config = ConfigDict(populate_by_name=True, use_enum_values=False)

    title: str = Field(
        description="""
            A clear, descriptive product name.
            EXAMPLE: Impressionist Floral Wrap Dress - Short Sleeve V-Neck Midi Dress with Tie Belt
        """,
    )
    description: str = Field(
        description="""
            Markdown description covering style, material hints, occasion and key features.
        """,
    )
    image_indexes: list[int] = Field(
        alias="imageIndexes",
        description="""
            Indexes (starting at 0) of the uploaded images showing this product,
            ordered full length front, zoomed front, back.
        """,
    )
    category: Category
    price: float = Field(default=DEFAULT_PRICE, ge=0)
    has_long_sleeves: bool = Field(default=False, alias="hasLongSleeves")


class ProductDraftResponse(BaseModel):
    products: list[ProductDraft]


class Product(BaseModel):
    """An approved listing, ready to be pushed to Shopify."""

    model_config = ConfigDict(frozen=True)

    title: str
    description: str
    images: tuple[BinaryFile, ...]
    category: Category
    price: float = Field(default=DEFAULT_PRICE, ge=0)


class CreatedProduct(BaseModel):
    id: str
    title: str
    handle: str
