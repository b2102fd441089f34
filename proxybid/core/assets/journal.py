"""
Journal - nested undo scopes over state shared by many auctions.

Conceptual Background:
---------------------
One NativeBank (or TokenLedger) is shared by every auction created on it,
and a receive hook run during one operation may call into another auction.
Restoring a whole-balance snapshot on failure would erase the effects of
such nested calls while the other auction's own records kept them.

Instead, every write to shared state records how to undo itself:

- a store records the previous value of each balance/allowance it sets
- an auction records how to restore its own state when an operation starts

A failing scope replays the undo entries recorded since it opened, newest
first, which reverts everything done inside it, nested operations on other
auctions included. Entries of a committed inner scope stay in the log
until the outermost scope commits, so an outer failure still reverts them.

Callbacks registered with after_commit() (event publication) run once the
outermost scope commits and are dropped if their scope reverts.
"""

from contextlib import contextmanager
from typing import Callable, Iterator, List

Undo = Callable[[], None]


class Journal:
    """Undo log with nested scopes."""

    def __init__(self):
        self._undo: List[Undo] = []
        self._after_commit: List[Callable[[], None]] = []
        self._depth = 0

    @property
    def depth(self) -> int:
        """Number of open scopes."""
        return self._depth

    def record(self, undo: Undo) -> None:
        """Register how to undo a write just made. Ignored outside any scope."""
        if self._depth:
            self._undo.append(undo)

    def after_commit(self, callback: Callable[[], None]) -> None:
        """Run `callback` once the outermost open scope commits (now if none)."""
        if self._depth:
            self._after_commit.append(callback)
        else:
            callback()

    @contextmanager
    def scope(self) -> Iterator[None]:
        """
        Open a scope; any exception reverts every write made inside it.

        The exception propagates after the revert.
        """
        undo_mark = len(self._undo)
        commit_mark = len(self._after_commit)
        self._depth += 1
        try:
            yield
        except Exception:
            self._revert(undo_mark)
            del self._after_commit[commit_mark:]
            raise
        finally:
            self._depth -= 1

        if self._depth == 0:
            self._undo.clear()
            callbacks, self._after_commit = self._after_commit, []
            for callback in callbacks:
                callback()

    def _revert(self, mark: int) -> None:
        while len(self._undo) > mark:
            self._undo.pop()()

    def __repr__(self) -> str:
        return f"Journal(depth={self._depth}, pending={len(self._undo)})"
