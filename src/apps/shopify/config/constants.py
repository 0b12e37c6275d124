"""Shopify lister constants and enums."""

from enum import Enum


class Category(str, Enum):
    """Closed set of listing categories, shared by model output and edited products."""

    MIDI = "midi"
    MINI = "mini"
    TOP = "top"


class LookupKey(Enum):
    PRIMARY_LOCATION = "primary_location"
    COLLECTIONS = "collections"
    ONLINE_STORE_PUBLICATION = "online_store_publication"


DEFAULT_PRICE = 500

DEFAULT_OPTION_NAME = "Title"
DEFAULT_OPTION_VALUE = "Default Title"

ONLINE_STORE_PUBLICATION = "Online Store"

# Apparel & Accessories > Clothing > Dresses
PRODUCT_TAXONOMY_CATEGORY = "gid://shopify/TaxonomyCategory/aa-1-4"
PRODUCT_STATUS = "ACTIVE"

INITIAL_STOCK_QUANTITY = 1
INVENTORY_QUANTITY_NAME = "on_hand"
INVENTORY_REASON = "correction"
INVENTORY_REFERENCE_URI = "inventory://initial_stock_setting"

COLLECTIONS_PAGE_SIZE = 50
PUBLICATIONS_PAGE_SIZE = 10

# Measurements block prepended to every description during editing
SIZE_LINES = ["Shoulder - ", "Bust - ", "Length - "]
SLEEVES_LINE = "Sleeves - "

DRAFTS_FILENAME = "drafts.json"
