"""Discard-stale bookkeeping for live previews.

Editors re-render on every crop or field change; a slow render that finishes
after a newer one started must not overwrite the newer result.
"""
from __future__ import annotations

import logging
from typing import Awaitable, Callable, TypeVar

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")


class RenderGenerations:
    def __init__(self) -> None:
        self._current = 0

    @property
    def current(self) -> int:
        return self._current

    def begin(self) -> int:
        self._current += 1
        return self._current

    def is_current(self, generation: int) -> bool:
        return generation == self._current

    async def run(self, factory: Callable[[], Awaitable[T]]) -> T | None:
        generation = self.begin()
        result = await factory()
        if not self.is_current(generation):
            LOGGER.debug("dropping preview generation %d (current is %d)", generation, self._current)
            return None
        return result
