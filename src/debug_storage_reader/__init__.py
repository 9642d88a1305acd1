"""Debug views over key/value storage backends.

The Qt widgets live in :mod:`debug_storage_reader.widgets`; they are not
imported here so the reader contract can be used without a GUI.
"""
from __future__ import annotations

from .config import StyleConfig, ViewerConfig
from .context import find_reader, lookup, publish
from .keyring_storage import KeyringStorageReader
from .reader import (
    MappingStorageReader,
    ReaderNotPublishedError,
    StorageReader,
    StorageReaderError,
    StorageTypeError,
    typed_read,
)
from .runner import AsyncioReadRunner
from .snapshot import ReadBinding, Snapshot, SnapshotState, render_snapshot

__all__ = [
    "ViewerConfig",
    "StyleConfig",
    "StorageReader",
    "MappingStorageReader",
    "KeyringStorageReader",
    "StorageReaderError",
    "StorageTypeError",
    "ReaderNotPublishedError",
    "typed_read",
    "find_reader",
    "lookup",
    "publish",
    "AsyncioReadRunner",
    "ReadBinding",
    "Snapshot",
    "SnapshotState",
    "render_snapshot",
]

__version__ = "1.0"
