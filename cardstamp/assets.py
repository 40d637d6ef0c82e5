"""Asynchronous acquisition of photographs and branding assets.

The photograph is required: a failed fetch or decode fails the render. Logos,
icons and template overlays are optional: failures are logged and the element
is left out.
"""
from __future__ import annotations

import asyncio
import base64
import logging
from pathlib import Path
from typing import Callable
from urllib.parse import unquote, unquote_to_bytes, urlparse

import aiofiles
import aiohttp
from PIL import Image

from cardstamp.decoders.image_decoder import decode_image_bytes
from cardstamp.errors import AssetDecodeError

LOGGER = logging.getLogger(__name__)

DEFAULT_REQUEST_TIMEOUT = 30

AssetResolver = Callable[[str], str]


def _local_path(source: str) -> Path | None:
    if source.startswith("file://"):
        return Path(unquote(urlparse(source).path))
    if "://" in source or source.startswith("data:"):
        return None
    return Path(source)


async def fetch_bytes(
    source: str,
    session: aiohttp.ClientSession | None = None,
    timeout: float = DEFAULT_REQUEST_TIMEOUT,
) -> bytes:
    if source.startswith(("http://", "https://")):
        if session is None:
            client_timeout = aiohttp.ClientTimeout(total=timeout)
            async with aiohttp.ClientSession(timeout=client_timeout) as own_session:
                return await _fetch_http(source, own_session)
        # A caller-supplied session keeps its own timeout.
        return await _fetch_http(source, session)
    if source.startswith("data:"):
        header, _, payload = source.partition(",")
        if header.endswith(";base64"):
            return base64.b64decode(payload)
        return unquote_to_bytes(payload)
    path = _local_path(source)
    if path is None:
        raise ValueError(f"unsupported asset location: {source}")
    async with aiofiles.open(path, "rb") as handle:
        return await handle.read()


async def _fetch_http(url: str, session: aiohttp.ClientSession) -> bytes:
    async with session.get(url) as response:
        response.raise_for_status()
        return await response.read()


async def load_image(
    source: str,
    session: aiohttp.ClientSession | None = None,
    timeout: float = DEFAULT_REQUEST_TIMEOUT,
) -> Image.Image:
    """Fetch and decode a required image, raising AssetDecodeError on any failure."""
    try:
        data = await fetch_bytes(source, session=session, timeout=timeout)
        return await asyncio.to_thread(decode_image_bytes, data)
    except (aiohttp.ClientError, asyncio.TimeoutError, OSError, ValueError, RuntimeError) as exc:
        raise AssetDecodeError(source, f"{type(exc).__name__}: {exc}") from exc


async def load_image_safe(
    source: str | None,
    session: aiohttp.ClientSession | None = None,
    timeout: float = DEFAULT_REQUEST_TIMEOUT,
) -> Image.Image | None:
    if not source:
        return None
    try:
        return await load_image(source, session=session, timeout=timeout)
    except AssetDecodeError as exc:
        LOGGER.warning("optional asset skipped: %s", exc)
        return None


async def load_asset_safe(
    key: str | None,
    resolve_asset_url: AssetResolver,
    session: aiohttp.ClientSession | None = None,
    timeout: float = DEFAULT_REQUEST_TIMEOUT,
) -> Image.Image | None:
    if not key:
        return None
    try:
        url = resolve_asset_url(key)
    except Exception as exc:
        LOGGER.warning("cannot resolve asset key %s: %s", key, exc)
        return None
    return await load_image_safe(url, session=session, timeout=timeout)
