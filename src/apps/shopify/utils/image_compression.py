from io import BytesIO
from pathlib import Path

from PIL import Image, ImageOps

from apps.shopify.utils.errors import ImageCompressionError
from common.binary_file import BinaryFile


def compress_image(file: BinaryFile, max_width: int = 768, quality: int = 80) -> BinaryFile:
    """Re-encode as JPEG, downscaling proportionally when wider than `max_width`."""
    try:
        with Image.open(BytesIO(file.data)) as img:
            img = ImageOps.exif_transpose(img)
            if img.width > max_width:
                new_height = round(max_width * img.height / img.width)
                img = img.resize((max_width, new_height), Image.Resampling.LANCZOS)
            if img.mode != "RGB":
                img = img.convert("RGB")

            buffer = BytesIO()
            img.save(buffer, format="JPEG", quality=quality, optimize=True)
    except OSError as e:
        raise ImageCompressionError(f"Failed to compress image {file.name}: {e}") from e

    name = Path(file.name).with_suffix(".jpg").name
    return BinaryFile(name=name, mime_type="image/jpeg", data=buffer.getvalue())
