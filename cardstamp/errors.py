from __future__ import annotations


class CardRenderError(RuntimeError):
    """Base class for failures that abort a card render."""


class SurfaceError(CardRenderError):
    """The drawing surface could not be created."""


class AssetDecodeError(CardRenderError):
    """A required asset could not be fetched or decoded."""

    def __init__(self, url: str, reason: str) -> None:
        self.url = url
        self.reason = reason
        super().__init__(f"failed to load image {_shorten(url)}: {reason}")


def _shorten(url: str, limit: int = 96) -> str:
    if len(url) <= limit:
        return url
    return url[: limit - 3] + "..."
