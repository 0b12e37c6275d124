from io import BytesIO

import pytest
from PIL import Image

from apps.shopify.utils.errors import ImageCompressionError, ListingError
from apps.shopify.utils.image_compression import compress_image
from common.binary_file import BinaryFile, from_bytes


def png(width: int, height: int, mode: str = "RGBA") -> BinaryFile:
    buffer = BytesIO()
    Image.new(mode, (width, height), color="red" if mode == "RGB" else (255, 0, 0, 128)).save(buffer, format="PNG")
    return from_bytes(buffer.getvalue(), "front.png")


def test_wide_image_scaled_to_max_width():
    compressed = compress_image(png(1536, 2048))

    with Image.open(BytesIO(compressed.data)) as img:
        assert img.format == "JPEG"
        assert img.size == (768, 1024)
    assert compressed.name == "front.jpg"
    assert compressed.mime_type == "image/jpeg"


def test_small_image_keeps_size():
    compressed = compress_image(png(400, 300, "RGB"), max_width=768)

    with Image.open(BytesIO(compressed.data)) as img:
        assert img.size == (400, 300)
        assert img.mode == "RGB"


def test_original_untouched():
    original = png(1000, 500)
    compress_image(original, max_width=100)
    assert original.name == "front.png"


def test_not_an_image():
    with pytest.raises(ImageCompressionError, match="Failed to compress image"):
        compress_image(from_bytes(b"not an image", "notes.jpg"))


def test_compression_error_is_a_listing_error():
    with pytest.raises(ListingError):
        compress_image(from_bytes(b"", "empty.png"))
