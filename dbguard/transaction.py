"""
Nested transaction reference counting.

Callers may wrap work in begin()/commit() at any nesting level; the
driver only ever sees one physical BEGIN per outermost span and at most
one COMMIT or ROLLBACK to close it.

    guard.begin()        # physical BEGIN, depth 1
    guard.begin()        # depth 2
    guard.commit()       # depth 1
    guard.commit()       # physical COMMIT, depth 0

A rollback at any depth aborts the whole span; outer commits that follow
become no-ops.

A guard is private to one connection and is not safe for concurrent use.
"""

from __future__ import annotations

import logging
from typing import Callable

logger = logging.getLogger(__name__)


class TransactionGuard:
    """
    Track nesting depth and decide when to issue physical transaction calls.

    Parameters
    ----------
    begin, commit, rollback:
        Zero-argument callables issuing the physical driver calls.
        Exceptions they raise propagate unchanged.
    """

    def __init__(
        self,
        begin: Callable[[], None],
        commit: Callable[[], None],
        rollback: Callable[[], None],
    ):
        self._begin = begin
        self._commit = commit
        self._rollback = rollback

        self._active = False
        self._depth = 0

    @property
    def active(self) -> bool:
        """Whether a physical transaction is currently open."""
        return self._active

    @property
    def depth(self) -> int:
        """Number of outstanding logical begin() calls."""
        return self._depth

    def in_transaction(self) -> bool:
        return self._active

    # ------------------------------------------------------------------
    # Transaction control
    # ------------------------------------------------------------------

    def begin(self) -> None:
        if not self._active:
            self._begin()
            self._active = True
            logger.debug("Physical transaction started")

        self._depth += 1

    def commit(self) -> None:
        # Extra commits are clamped at zero instead of driving the counter negative.
        self._depth = max(self._depth - 1, 0)

        if self._active and self._depth == 0:
            # On failure the transaction stays active so rollback() still reaches the driver.
            self._commit()
            self._active = False
            logger.debug("Physical transaction committed")

    def rollback(self) -> None:
        try:
            if self._active:
                self._active = False
                self._rollback()
                logger.debug("Physical transaction rolled back")
        finally:
            self._depth = 0

    def __repr__(self) -> str:
        return f"TransactionGuard(active={self._active}, depth={self._depth})"


__all__ = ["TransactionGuard"]
