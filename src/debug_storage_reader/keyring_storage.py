"""Storage reader over the operating system's secret store."""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Iterable, Optional, Tuple, Type, TypeVar

import keyring
from keyring.backend import KeyringBackend

from .reader import StorageReader, ensure_type

logger = logging.getLogger(__name__)

T = TypeVar("T")


class KeyringStorageReader(StorageReader):
    """Read secrets stored with :mod:`keyring` under one service name.

    Keyring backends cannot enumerate their entries, so the keys shown by
    :meth:`read_all` have to be supplied up front.  Keys without a stored
    secret are left out of the listing.

    Backend calls may block on a system service (D-Bus, the macOS keychain)
    and are therefore handed to the loop's default executor.
    """

    def __init__(
        self,
        service: str,
        keys: Iterable[str] = (),
        backend: Optional[KeyringBackend] = None,
    ):
        self._service = service
        self._keys: Tuple[str, ...] = tuple(dict.fromkeys(keys))
        self._backend = backend

    @property
    def service(self) -> str:
        return self._service

    @property
    def keys(self) -> Tuple[str, ...]:
        return self._keys

    def _get(self, key: str) -> Optional[str]:
        backend = self._backend or keyring.get_keyring()
        return backend.get_password(self._service, key)

    def _get_all(self) -> Dict[str, Any]:
        entries: Dict[str, Any] = {}
        for key in self._keys:
            value = self._get(key)
            if value is not None:
                entries[key] = value
        logger.debug("Found %d of %d keys in %r", len(entries), len(self._keys), self._service)
        return entries

    async def read(self, key: str, value_type: Optional[Type[T]] = None) -> Optional[T]:
        value = await asyncio.get_running_loop().run_in_executor(None, self._get, key)
        return ensure_type(key, value, value_type)

    async def read_all(self) -> Dict[str, Any]:
        return await asyncio.get_running_loop().run_in_executor(None, self._get_all)

    def __repr__(self) -> str:  # pragma: no cover - trivial
        return f"{type(self).__name__}(service={self._service!r}, keys={list(self._keys)!r})"


__all__ = ["KeyringStorageReader"]
