"""
Render generations.

Every render pass gets a new generation number. Items are adopted into the
generation that created them; when a pass commits, everything adopted by an
older generation is disposed first, so the scene never mixes two passes.
"""
from __future__ import annotations

from contextlib import contextmanager
import logging
from typing import Callable, Generic, Iterator, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class GenerationArena(Generic[T]):
    def __init__(self, dispose: Callable[[T], None]) -> None:
        self._dispose = dispose
        self._generation = 0
        self._rendering = False
        self._items: list[tuple[int, T]] = []

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def is_rendering(self) -> bool:
        return self._rendering

    @property
    def items(self) -> list[T]:
        return [item for _, item in self._items]

    def begin(self) -> int:
        """Open a new generation and return its number."""
        self._generation += 1
        self._rendering = True
        return self._generation

    def adopt(self, item: T, generation: int) -> bool:
        """
        Register an item created by `generation`.

        An item from a generation that is no longer current is disposed
        immediately and False is returned.
        """
        if generation != self._generation:
            self._dispose(item)
            return False
        self._items.append((generation, item))
        return True

    def commit(self) -> int:
        """Dispose every item of older generations. Returns how many were removed."""
        stale = [item for gen, item in self._items if gen != self._generation]
        self._items = [(gen, item) for gen, item in self._items if gen == self._generation]
        for item in stale:
            self._dispose(item)
        self._rendering = False
        return len(stale)

    def teardown(self) -> None:
        for _, item in self._items:
            self._dispose(item)
        self._items = []
        self._rendering = False

    @contextmanager
    def render_pass(self) -> Iterator[int]:
        """
        `with arena.render_pass() as gen:` opens a generation, commits on
        success and closes the pass without committing on error.
        """
        generation = self.begin()
        try:
            yield generation
        except Exception:
            self._rendering = False
            logger.exception(f"Render pass {generation} failed.")
            raise
        removed = self.commit()
        logger.debug(f"Render generation {generation} committed ({removed} stale items disposed).")
