"""Scratch-board pool: reusable Board buffers for detector simulations.

Detectors and SEE need many temporary copies of a position. Rather than
allocating a fresh grid for every hypothetical, they rent one:

    with pool.rent(board) as scratch:
        scratch.push(move)
        ...

The scratch board is a copy of the source, may be mutated freely, and is
cleared and handed back when the block exits, on every exit path. The pool
is an ordinary object owned by whoever runs the analysis; rent and return
are safe from any number of threads.
"""

import logging
import threading
from collections.abc import Iterator
from contextlib import contextmanager

from explainer.analysis.board import Board

logger = logging.getLogger(__name__)

DEFAULT_MAX_SIZE = 50


class BoardPool:
    def __init__(self, max_size: int = DEFAULT_MAX_SIZE):
        if max_size < 0:
            raise ValueError(f"max_size must be >= 0, got {max_size}")
        self.max_size = max_size
        self._free: list[Board] = []
        self._lock = threading.Lock()
        self._rented = 0
        self._created = 0

    @property
    def available(self) -> int:
        """Boards currently idle in the pool."""
        with self._lock:
            return len(self._free)

    @property
    def rented(self) -> int:
        """Boards currently checked out."""
        with self._lock:
            return self._rented

    @property
    def created(self) -> int:
        """Boards allocated over the pool's lifetime."""
        with self._lock:
            return self._created

    def _acquire(self) -> Board:
        with self._lock:
            self._rented += 1
            if self._free:
                return self._free.pop()
            self._created += 1
        return Board()

    def _release(self, board: Board) -> None:
        board.clear()
        with self._lock:
            self._rented -= 1
            if len(self._free) < self.max_size:
                self._free.append(board)
                return
        logger.debug("Board pool full (%d), discarding scratch board", self.max_size)

    @contextmanager
    def rent(self, source: Board | None = None) -> Iterator[Board]:
        """Check out a scratch board holding a copy of source (empty if None)."""
        board = self._acquire()
        try:
            if source is not None:
                board.copy_from(source)
            yield board
        finally:
            self._release(board)
