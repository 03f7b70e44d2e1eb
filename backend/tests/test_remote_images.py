from unittest.mock import MagicMock, patch

import pytest
import requests
from PIL import Image

from conftest import png_bytes
from services.remote_images import (
    RemoteImageError,
    decode_image,
    fetch_bytes,
    fetch_image,
    is_allowed_media_url,
    maybe_proxy_url,
)

FIREBASE_URL = "https://firebasestorage.googleapis.com/v0/b/app/o/walks%2Fa.jpg?alt=media"


def test_allow_list():
    assert is_allowed_media_url(FIREBASE_URL)
    assert is_allowed_media_url("https://storage.googleapis.com/bucket/a.jpg")
    assert not is_allowed_media_url("https://example.com/a.jpg")
    assert not is_allowed_media_url("https://firebasestorage.googleapis.com.evil.test/a.jpg")
    assert not is_allowed_media_url("")


def test_allow_list_custom_prefixes():
    assert is_allowed_media_url("https://cdn.test/x.png", prefixes=["https://cdn.test/"])
    assert not is_allowed_media_url(FIREBASE_URL, prefixes=["https://cdn.test/"])


def test_maybe_proxy_url():
    proxied = maybe_proxy_url(FIREBASE_URL)
    assert proxied.startswith("/api/media-proxy?url=https%3A%2F%2Ffirebasestorage")
    assert maybe_proxy_url("/media/walks/w1/a.jpg") == "/media/walks/w1/a.jpg"


def test_decode_image_rejects_garbage():
    with pytest.raises(RemoteImageError):
        decode_image(b"not an image")


def test_decode_image_returns_rgb():
    img = decode_image(png_bytes(size=(10, 20)))
    assert img.mode == "RGB"
    assert img.size == (10, 20)


@patch("services.remote_images._session.get")
def test_fetch_image(mock_get):
    resp = MagicMock()
    resp.content = png_bytes(color=(0, 255, 0))
    resp.raise_for_status.return_value = None
    mock_get.return_value = resp

    img = fetch_image("https://storage.googleapis.com/b/a.png")
    assert isinstance(img, Image.Image)
    assert img.getpixel((0, 0)) == (0, 255, 0)


@patch("services.remote_images._session.get")
def test_fetch_bytes_wraps_http_errors(mock_get):
    resp = MagicMock()
    resp.raise_for_status.side_effect = requests.HTTPError("404")
    mock_get.return_value = resp
    with pytest.raises(RemoteImageError):
        fetch_bytes("https://storage.googleapis.com/b/missing.png")
