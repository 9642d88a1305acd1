"""The storage reader contract and an in-memory implementation."""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Mapping, Optional, Type, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class StorageReaderError(Exception):
    """Base class for errors raised by this package."""


class StorageTypeError(StorageReaderError, TypeError):
    """A stored value does not match the type requested by the caller."""

    def __init__(self, key: str, expected: type, actual: object):
        self.key = key
        self.expected = expected
        self.actual_type = type(actual)
        super().__init__(
            f"Value for {key!r} is {self.actual_type.__name__}, "
            f"expected {expected.__name__}"
        )


class ReaderNotPublishedError(StorageReaderError, LookupError):
    """No reader was published above the widget performing a lookup."""


def ensure_type(key: str, value: Any, value_type: Optional[type]) -> Any:
    """Return ``value`` unchanged or raise :class:`StorageTypeError`.

    ``None`` stands for an absent key and always passes.
    """

    if value is None or value_type is None or value_type is object:
        return value
    if not isinstance(value, value_type):
        raise StorageTypeError(key, value_type, value)
    return value


class StorageReader(ABC):
    """Read-only access to a key/value store.

    Implementations wrap a concrete backend (an in-memory mapping, an encrypted
    file, a remote service, ...).  Both methods are coroutines; a failure of the
    backend is reported by raising, while an absent key resolves to ``None``.

    Example backed by a plain dictionary::

        class DictReader(StorageReader):
            def __init__(self, data):
                self._data = data

            async def read(self, key, value_type=None):
                return ensure_type(key, self._data.get(key), value_type)

            async def read_all(self):
                return dict(self._data)
    """

    @abstractmethod
    async def read(self, key: str, value_type: Optional[Type[T]] = None) -> Optional[T]:
        """Return the value stored under ``key`` or ``None`` if it is absent."""

    @abstractmethod
    async def read_all(self) -> Mapping[str, Any]:
        """Return every key/value pair known to the backend."""


async def typed_read(
    reader: StorageReader, key: str, value_type: Optional[Type[T]] = None
) -> Optional[T]:
    """Read ``key`` through ``reader`` and check the result against ``value_type``.

    The check is repeated here so that third-party readers which ignore the
    ``value_type`` argument still produce a reportable error on mismatch.
    """

    logger.debug("Reading %r from %s", key, type(reader).__name__)
    value = await reader.read(key, value_type)
    return ensure_type(key, value, value_type)


class MappingStorageReader(StorageReader):
    """Reader over an in-memory mapping."""

    def __init__(self, data: Mapping[str, Any] | None = None):
        self._data: Dict[str, Any] = dict(data or {})

    async def read(self, key: str, value_type: Optional[Type[T]] = None) -> Optional[T]:
        return ensure_type(key, self._data.get(key), value_type)

    async def read_all(self) -> Dict[str, Any]:
        return dict(self._data)

    def __repr__(self) -> str:  # pragma: no cover - trivial
        return f"{type(self).__name__}(keys={list(self._data)!r})"


__all__ = [
    "StorageReader",
    "MappingStorageReader",
    "StorageReaderError",
    "StorageTypeError",
    "ReaderNotPublishedError",
    "ensure_type",
    "typed_read",
]
