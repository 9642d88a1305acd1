"""Three-state result of an asynchronous read and the binding that drives it."""
from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Generic, List, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


class SnapshotState(enum.Enum):
    PENDING = "pending"
    FAILED = "failed"
    SUCCEEDED = "succeeded"


@dataclass(frozen=True, slots=True)
class Snapshot(Generic[T]):
    """Immutable view of one read at a point in time.

    ``error`` is retained for diagnostics only; renderers never receive it.
    """

    state: SnapshotState
    value: Optional[T] = None
    error: Optional[BaseException] = None

    @classmethod
    def pending(cls) -> "Snapshot[Any]":
        return cls(SnapshotState.PENDING)

    @classmethod
    def failed(cls, error: BaseException) -> "Snapshot[Any]":
        return cls(SnapshotState.FAILED, error=error)

    @classmethod
    def succeeded(cls, value: Optional[T]) -> "Snapshot[T]":
        return cls(SnapshotState.SUCCEEDED, value=value)

    @property
    def is_settled(self) -> bool:
        return self.state is not SnapshotState.PENDING


def render_snapshot(
    snapshot: Snapshot[T],
    *,
    pending: Callable[[], R],
    failed: Callable[[], R],
    succeeded: Callable[[Optional[T]], R],
) -> R:
    """Map ``snapshot`` to exactly one of the three callbacks."""

    if snapshot.state is SnapshotState.PENDING:
        return pending()
    if snapshot.state is SnapshotState.FAILED:
        return failed()
    return succeeded(snapshot.value)


class ReadBinding(Generic[T]):
    """State machine for the reads issued by a single view node.

    Every call to :meth:`begin` starts a new generation.  Only the result of the
    latest generation is applied; anything that arrives for an older
    generation, or after :meth:`dispose`, is dropped.
    """

    def __init__(self, label: str = "read") -> None:
        self._label = label
        self._generation = 0
        self._disposed = False
        self._snapshot: Snapshot[T] = Snapshot.pending()
        self._listeners: List[Callable[[Snapshot[T]], None]] = []

    @property
    def snapshot(self) -> Snapshot[T]:
        return self._snapshot

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def disposed(self) -> bool:
        return self._disposed

    def subscribe(self, listener: Callable[[Snapshot[T]], None]) -> None:
        self._listeners.append(listener)

    def begin(self) -> int:
        if self._disposed:
            raise RuntimeError(f"{self._label}: binding has been disposed")
        self._generation += 1
        logger.debug("%s: starting read #%d", self._label, self._generation)
        self._set(Snapshot.pending())
        return self._generation

    def resolve(self, generation: int, value: Optional[T]) -> bool:
        if not self._accepts(generation):
            return False
        self._set(Snapshot.succeeded(value))
        return True

    def reject(self, generation: int, error: BaseException) -> bool:
        if not self._accepts(generation):
            return False
        logger.warning(
            "%s: read #%d failed", self._label, generation, exc_info=error
        )
        self._set(Snapshot.failed(error))
        return True

    async def run(self, fetch: Callable[[], Awaitable[T]]) -> Snapshot[T]:
        """Begin a read, await ``fetch`` and settle with its outcome."""

        generation = self.begin()
        try:
            value = await fetch()
        except Exception as exc:
            self.reject(generation, exc)
        else:
            self.resolve(generation, value)
        return self._snapshot

    def dispose(self) -> None:
        self._disposed = True
        self._listeners.clear()

    def _accepts(self, generation: int) -> bool:
        if self._disposed:
            logger.debug("%s: dropping result of read #%d after dispose", self._label, generation)
            return False
        if generation != self._generation:
            logger.debug(
                "%s: dropping stale read #%d (current #%d)",
                self._label,
                generation,
                self._generation,
            )
            return False
        if self._snapshot.is_settled:
            return False
        return True

    def _set(self, snapshot: Snapshot[T]) -> None:
        self._snapshot = snapshot
        for listener in list(self._listeners):
            listener(snapshot)


__all__ = ["SnapshotState", "Snapshot", "ReadBinding", "render_snapshot"]
