"""Share one :class:`StorageReader` with a whole widget subtree.

A reader is published by wrapping a subtree in a provider widget.  Descendants
find it by walking their parent chain, so the nearest provider shadows any
provider further up.  Nodes only need a ``parentWidget()`` method, which keeps
the lookup usable without a running Qt application.
"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Optional

from .reader import ReaderNotPublishedError, StorageReader

if TYPE_CHECKING:  # pragma: no cover - imported for static type checking only
    from PyQt5.QtWidgets import QWidget

    from .widgets import StorageValueProvider

logger = logging.getLogger(__name__)

PUBLISHED_READER_ATTR = "published_reader"


def published_reader_of(node: Any) -> Optional[StorageReader]:
    """Return the reader published directly by ``node``, if any."""

    return getattr(node, PUBLISHED_READER_ATTR, None)


def find_reader(node: Any) -> Optional[StorageReader]:
    """Return the reader of the nearest enclosing provider or ``None``."""

    depth = 0
    while node is not None:
        reader = published_reader_of(node)
        if reader is not None:
            logger.debug("Resolved %s at depth %d", type(reader).__name__, depth)
            return reader
        node = node.parentWidget()
        depth += 1
    return None


def lookup(node: Any) -> StorageReader:
    """Like :func:`find_reader` but raise when nothing was published."""

    reader = find_reader(node)
    if reader is None:
        raise ReaderNotPublishedError(
            f"No StorageReader published above {type(node).__name__}; "
            "wrap the subtree with publish() or pass a reader explicitly"
        )
    return reader


def publish(
    reader: StorageReader, subtree: "QWidget", parent: "QWidget | None" = None
) -> "StorageValueProvider":
    """Wrap ``subtree`` in a provider that makes ``reader`` visible to it."""

    from .widgets import StorageValueProvider

    return StorageValueProvider(reader, subtree, parent)


__all__ = [
    "PUBLISHED_READER_ATTR",
    "find_reader",
    "lookup",
    "publish",
    "published_reader_of",
]
