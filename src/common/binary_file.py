import base64
import mimetypes
from pathlib import Path

from pydantic import BaseModel, ConfigDict


DEFAULT_MIME_TYPE = "image/jpeg"


class BinaryFile(BaseModel):
    """An uploaded file carried in memory: name, mime type and raw bytes."""

    model_config = ConfigDict(frozen=True)

    name: str
    mime_type: str = DEFAULT_MIME_TYPE
    data: bytes

    def __repr__(self) -> str:
        return f"BinaryFile(name={self.name!r}, mime_type={self.mime_type!r}, size={len(self.data)})"


def guess_mime_type(name: str) -> str:
    mime_type, _ = mimetypes.guess_type(name)
    return mime_type or DEFAULT_MIME_TYPE


def from_bytes(data: bytes, name: str, mime_type: str | None = None) -> BinaryFile:
    return BinaryFile(name=name, mime_type=mime_type or guess_mime_type(name), data=bytes(data))


def from_path(path: str | Path) -> BinaryFile:
    path = Path(path)
    try:
        with path.open("rb") as f:
            return from_bytes(f.read(), path.name)
    except FileNotFoundError:
        raise ValueError(f"Image file not found: {path}") from None
    except IsADirectoryError:
        raise ValueError(f"Expected a file but found a directory: {path}") from None


def to_base64(file: BinaryFile) -> str:
    return base64.b64encode(file.data).decode("utf-8")


def to_data_url(file: BinaryFile) -> str:
    """Encode as `data:<mime>;base64,<payload>` for multimodal model input."""
    return f"data:{file.mime_type or DEFAULT_MIME_TYPE};base64,{to_base64(file)}"


def from_data_url(data_url: str, name: str) -> BinaryFile:
    header, _, payload = data_url.partition(",")
    if not header.startswith("data:") or not header.endswith(";base64"):
        raise ValueError(f"Not a base64 data URL: {header[:40]}")
    mime_type = header[len("data:") : -len(";base64")] or DEFAULT_MIME_TYPE
    return BinaryFile(name=name, mime_type=mime_type, data=base64.b64decode(payload))


def to_form_field(file: BinaryFile) -> tuple[str, bytes, str]:
    """(filename, payload, content type) as expected by a multipart form field."""
    return file.name, file.data, file.mime_type


def write_to(file: BinaryFile, directory: str | Path) -> Path:
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / file.name
    path.write_bytes(file.data)
    return path
