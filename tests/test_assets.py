import asyncio
import base64
import io
import logging

import pytest
from PIL import Image

from cardstamp.assets import fetch_bytes, load_asset_safe, load_image, load_image_safe
from cardstamp.errors import AssetDecodeError


def _png_bytes(color=(1, 2, 3)) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", (4, 3), color).save(buffer, format="PNG")
    return buffer.getvalue()


def test_fetch_bytes_reads_data_url() -> None:
    payload = _png_bytes()
    url = "data:image/png;base64," + base64.b64encode(payload).decode("ascii")
    assert asyncio.run(fetch_bytes(url)) == payload


def test_load_image_reads_file_url(tmp_path) -> None:
    path = tmp_path / "logo.png"
    path.write_bytes(_png_bytes((9, 9, 9)))
    image = asyncio.run(load_image(path.as_uri()))
    assert image.mode == "RGBA"
    assert image.size == (4, 3)


def test_load_image_rejects_garbage(tmp_path) -> None:
    path = tmp_path / "broken.jpg"
    path.write_bytes(b"not an image")
    with pytest.raises(AssetDecodeError) as excinfo:
        asyncio.run(load_image(str(path)))
    assert excinfo.value.url == str(path)


def test_load_image_safe_returns_none_for_missing_file(tmp_path) -> None:
    assert asyncio.run(load_image_safe(str(tmp_path / "missing.png"))) is None
    assert asyncio.run(load_image_safe(None)) is None


@pytest.mark.parametrize("error", [KeyError, ValueError, TypeError])
def test_load_asset_safe_tolerates_resolver_errors(error, caplog) -> None:
    def resolve(key: str) -> str:
        raise error(key)

    with caplog.at_level(logging.WARNING, logger="cardstamp.assets"):
        assert asyncio.run(load_asset_safe("logos/x.png", resolve)) is None
    assert "cannot resolve asset key logos/x.png" in caplog.text


def test_unsupported_scheme_is_a_decode_error() -> None:
    with pytest.raises(AssetDecodeError):
        asyncio.run(load_image("ftp://example.com/photo.jpg"))


class _Response:
    def __init__(self, body: bytes) -> None:
        self.body = body

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info) -> None:
        return None

    def raise_for_status(self) -> None:
        return None

    async def read(self) -> bytes:
        return self.body


class _RecordingSession:
    def __init__(self, body: bytes) -> None:
        self.body = body
        self.calls = []

    def get(self, url, **kwargs):
        self.calls.append((url, kwargs))
        return _Response(self.body)


def test_fetch_bytes_leaves_caller_session_timeout_alone() -> None:
    session = _RecordingSession(b"payload")
    data = asyncio.run(fetch_bytes("https://cdn.example.com/logo.png", session=session, timeout=1))
    assert data == b"payload"
    assert session.calls == [("https://cdn.example.com/logo.png", {})]


def test_oversized_image_is_a_decode_error(tmp_path, monkeypatch) -> None:
    path = tmp_path / "huge.png"
    Image.new("RGB", (200, 200)).save(path)
    monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 1000)
    with pytest.raises(AssetDecodeError, match="pixel limit"):
        asyncio.run(load_image(str(path)))
    assert asyncio.run(load_image_safe(str(path))) is None
