import base64

import pytest

from common.binary_file import (
    BinaryFile,
    from_bytes,
    from_data_url,
    from_path,
    to_data_url,
    to_form_field,
    write_to,
)


PNG_BYTES = b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR" + bytes(range(32))


def test_file_round_trip_keeps_bytes_and_mime_type(tmp_path):
    source = tmp_path / "front.png"
    source.write_bytes(PNG_BYTES)

    file = from_path(source)
    written = write_to(file, tmp_path / "out")

    assert file.mime_type == "image/png"
    assert written.read_bytes() == PNG_BYTES
    assert from_path(written).mime_type == file.mime_type


def test_data_url_encodes_mime_and_payload():
    file = from_bytes(b"abc", "back.jpg")
    data_url = to_data_url(file)

    assert data_url == f"data:image/jpeg;base64,{base64.b64encode(b'abc').decode()}"
    assert from_data_url(data_url, "back.jpg") == file


def test_unknown_extension_defaults_to_jpeg():
    assert from_bytes(b"x", "IMG_0001").mime_type == "image/jpeg"


def test_form_field_triple():
    file = BinaryFile(name="a.webp", mime_type="image/webp", data=b"1234")
    assert to_form_field(file) == ("a.webp", b"1234", "image/webp")


def test_binary_file_is_immutable():
    file = from_bytes(b"x", "a.jpg")
    with pytest.raises(Exception):
        file.name = "b.jpg"


def test_missing_file_raises_value_error(tmp_path):
    with pytest.raises(ValueError, match="not found"):
        from_path(tmp_path / "missing.jpg")


def test_invalid_data_url():
    with pytest.raises(ValueError):
        from_data_url("https://example.com/a.jpg", "a.jpg")
