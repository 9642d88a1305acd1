"""PyQt5 widgets that display values obtained through a :class:`StorageReader`."""
from __future__ import annotations

import functools
import logging
from typing import Any, Awaitable, Callable, Dict, Mapping, Optional, Tuple, Type

from PyQt5 import sip
from PyQt5.QtCore import QAbstractListModel, QModelIndex, Qt
from PyQt5.QtWidgets import (
    QApplication,
    QHBoxLayout,
    QLabel,
    QListView,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from .config import StyleConfig, ViewerConfig
from .context import PUBLISHED_READER_ATTR, lookup
from .formatting import elide_text
from .reader import StorageReader, typed_read
from .runner import ReadRunner, default_runner
from .snapshot import ReadBinding, Snapshot, render_snapshot

logger = logging.getLogger(__name__)

ValueBuilder = Callable[[QWidget, Any], QWidget]
ItemBuilder = Callable[[QWidget, str, Any], QWidget]


class StorageValueProvider(QWidget):
    """Publish ``reader`` to every widget placed inside ``child``.

    Example::

        panel = QWidget()
        column = QVBoxLayout(panel)
        column.addWidget(
            StorageValue(
                "session_key",
                lambda host, value: StorageValueView("Session key", value),
            )
        )
        column.addWidget(
            StorageValue(
                "access_token",
                lambda host, value: StorageValueView("Access token", value),
            )
        )
        root = StorageValueProvider(auth_reader, panel)
    """

    def __init__(self, reader: StorageReader, child: QWidget, parent: QWidget | None = None):
        super().__init__(parent)
        setattr(self, PUBLISHED_READER_ATTR, reader)
        self._child = child

        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.addWidget(child)

    @property
    def reader(self) -> StorageReader:
        return getattr(self, PUBLISHED_READER_ATTR)

    @property
    def child(self) -> QWidget:
        return self._child


class _AsyncStorageWidget(QWidget):
    """Shared machinery for widgets that render the outcome of one read.

    A read is issued the first time the widget is shown, or whenever
    :meth:`reload` is called.  The content is swapped for a placeholder while
    the read is pending, an error label if it fails, or the output of the
    caller's builder on success.
    """

    def __init__(
        self,
        reader: StorageReader | None,
        runner: ReadRunner | None,
        config: ViewerConfig | None,
        style: StyleConfig | None,
        parent: QWidget | None,
        label: str,
    ):
        super().__init__(parent)
        self._explicit_reader = reader
        self._runner = runner
        self._config = config or ViewerConfig()
        self._style = style or StyleConfig()
        self._label = label
        self._loaded = False
        self._content: QWidget | None = None
        self._render_error: Exception | None = None

        self._layout = QVBoxLayout(self)
        self._layout.setContentsMargins(0, 0, 0, 0)

        self._binding: ReadBinding[Any] = ReadBinding(label)
        self._binding.subscribe(self._render)
        binding = self._binding
        self.destroyed.connect(lambda *_args: binding.dispose())

        self._render(self._binding.snapshot)

    @property
    def snapshot(self) -> Snapshot[Any]:
        return self._binding.snapshot

    @property
    def content(self) -> QWidget | None:
        return self._content

    @property
    def render_error(self) -> Exception | None:
        """Exception raised by the caller's builder during the last render."""

        return self._render_error

    def resolve_reader(self) -> StorageReader:
        if self._explicit_reader is not None:
            return self._explicit_reader
        return lookup(self)

    def reload(self) -> None:
        """Issue a fresh read, superseding any read still in flight."""

        reader = self.resolve_reader()
        self._loaded = True
        generation = self._binding.begin()
        runner = self._runner or default_runner()
        runner.submit(
            self._make_fetch(reader),
            functools.partial(self._binding.resolve, generation),
            functools.partial(self._binding.reject, generation),
        )

    def dispose(self) -> None:
        """Stop reacting to reads; results arriving later are discarded."""

        self._binding.dispose()

    def showEvent(self, event) -> None:  # type: ignore[override]
        super().showEvent(event)
        if not self._loaded:
            self.reload()

    def _make_fetch(self, reader: StorageReader) -> Callable[[], Awaitable[Any]]:
        raise NotImplementedError

    def _build_success(self, value: Any) -> QWidget:
        raise NotImplementedError

    def _build_pending(self) -> QWidget:
        label = QLabel(self._config.pending_text)
        label.setObjectName("PendingLabel")
        return label

    def _build_failed(self) -> QWidget:
        label = QLabel(self._config.failed_text)
        label.setObjectName("ErrorLabel")
        label.setStyleSheet(f"color: {self._style.error};")
        return label

    def _render(self, snapshot: Snapshot[Any]) -> None:
        if sip.isdeleted(self):
            self._binding.dispose()
            return

        self._render_error = None
        try:
            widget = render_snapshot(
                snapshot,
                pending=self._build_pending,
                failed=self._build_failed,
                succeeded=self._build_success,
            )
        except Exception as exc:
            logger.exception("%s: builder raised while rendering the result", self._label)
            self._render_error = exc
            widget = self._build_failed()

        if self._content is not None:
            self._layout.removeWidget(self._content)
            self._content.hide()
            self._content.deleteLater()
        self._content = widget
        self._layout.addWidget(widget)


class StorageValue(_AsyncStorageWidget):
    """Display the value stored under a single key.

    Without ``reader`` the widget must live inside a
    :class:`StorageValueProvider`.  ``builder`` receives this widget and the
    value read (``None`` when the key is absent) and returns the widget to show.
    ``value_type`` is checked against the stored value; a mismatch is rendered
    as a failed read.
    """

    def __init__(
        self,
        key: str,
        builder: ValueBuilder,
        reader: StorageReader | None = None,
        *,
        value_type: Optional[Type[Any]] = str,
        runner: ReadRunner | None = None,
        config: ViewerConfig | None = None,
        style: StyleConfig | None = None,
        parent: QWidget | None = None,
    ):
        super().__init__(reader, runner, config, style, parent, f"StorageValue[{key}]")
        self._key = key
        self._builder = builder
        self._value_type = value_type

    @property
    def key(self) -> str:
        return self._key

    def set_key(self, key: str) -> None:
        """Point the widget at another key and read it."""

        self._key = key
        self.reload()

    def _make_fetch(self, reader: StorageReader) -> Callable[[], Awaitable[Any]]:
        key, value_type = self._key, self._value_type
        return lambda: typed_read(reader, key, value_type)

    def _build_success(self, value: Any) -> QWidget:
        return self._builder(self, value)


class StorageEntryModel(QAbstractListModel):
    """Entries of one ``read_all`` result, exposed to the view in batches.

    Rows are handed out through Qt's ``canFetchMore`` / ``fetchMore`` protocol so
    the view only materialises row widgets as it scrolls towards the end.
    """

    def __init__(self, entries: Mapping[str, Any], batch_size: int = 50, parent=None):
        super().__init__(parent)
        self._entries = list(entries.items())
        self._batch_size = max(1, batch_size)
        self._loaded = 0
        self._size_hints: Dict[int, Any] = {}

    def total(self) -> int:
        return len(self._entries)

    def entry(self, row: int) -> Tuple[str, Any]:
        return self._entries[row]

    def rowCount(self, parent=QModelIndex()) -> int:  # type: ignore[override]
        return 0 if parent.isValid() else self._loaded

    def data(self, index, role=Qt.DisplayRole):  # type: ignore[override]
        if not index.isValid() or not 0 <= index.row() < self._loaded:
            return None
        if role == Qt.UserRole:
            return self._entries[index.row()][0]
        if role == Qt.SizeHintRole:
            return self._size_hints.get(index.row())
        return None

    def setData(self, index, value, role=Qt.EditRole) -> bool:  # type: ignore[override]
        if role != Qt.SizeHintRole or not index.isValid():
            return False
        self._size_hints[index.row()] = value
        self.dataChanged.emit(index, index, [role])
        return True

    def canFetchMore(self, parent=QModelIndex()) -> bool:  # type: ignore[override]
        return not parent.isValid() and self._loaded < len(self._entries)

    def fetchMore(self, parent=QModelIndex()) -> None:  # type: ignore[override]
        if parent.isValid():
            return
        count = min(self._batch_size, len(self._entries) - self._loaded)
        if count <= 0:
            return
        self.beginInsertRows(QModelIndex(), self._loaded, self._loaded + count - 1)
        self._loaded += count
        self.endInsertRows()


class ListStorageValue(_AsyncStorageWidget):
    """Display every entry of the store, one row per key."""

    def __init__(
        self,
        item_builder: ItemBuilder,
        reader: StorageReader | None = None,
        *,
        runner: ReadRunner | None = None,
        config: ViewerConfig | None = None,
        style: StyleConfig | None = None,
        parent: QWidget | None = None,
    ):
        super().__init__(reader, runner, config, style, parent, "ListStorageValue")
        self._item_builder = item_builder

    def _make_fetch(self, reader: StorageReader) -> Callable[[], Awaitable[Any]]:
        return reader.read_all

    def _build_success(self, entries: Mapping[str, Any]) -> QWidget:
        view = QListView()
        view.setObjectName("StorageList")
        view.setVerticalScrollMode(QListView.ScrollPerPixel)

        model = StorageEntryModel(entries, self._config.list_batch_size, view)
        model.rowsInserted.connect(functools.partial(self._attach_rows, view, model))
        view.setModel(model)
        if model.canFetchMore(QModelIndex()):
            model.fetchMore(QModelIndex())
        logger.debug("Listing %d entries", model.total())
        return view

    def _attach_rows(self, view: QListView, model: StorageEntryModel, _parent, first: int, last: int) -> None:
        for row in range(first, last + 1):
            key, value = model.entry(row)
            try:
                row_widget = self._item_builder(self, key, value)
            except Exception:
                logger.exception("%s: item builder raised for %r", self._label, key)
                row_widget = self._build_failed()
            index = model.index(row)
            model.setData(index, row_widget.sizeHint(), Qt.SizeHintRole)
            view.setIndexWidget(index, row_widget)


class StorageValueView(QWidget):
    """Default presentation of a value: title, clipped value and a copy button."""

    def __init__(
        self,
        title: str,
        value: Optional[str],
        *,
        config: ViewerConfig | None = None,
        parent: QWidget | None = None,
    ):
        super().__init__(parent)
        self._config = config or ViewerConfig()
        self._title = title
        self._value = value

        layout = QHBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)

        text_column = QVBoxLayout()
        self._title_label = QLabel(title)
        self._title_label.setObjectName("ValueTitle")
        self._value_label = QLabel(
            elide_text(value, self._config.value_max_lines, self._config.value_max_chars)
        )
        self._value_label.setObjectName("SubtleLabel")
        self._value_label.setTextInteractionFlags(Qt.TextSelectableByMouse)
        if value is not None:
            self._value_label.setToolTip(value)
        text_column.addWidget(self._title_label)
        text_column.addWidget(self._value_label)

        self._copy_btn = QPushButton("Copy")
        self._copy_btn.setObjectName("CopyButton")
        self._copy_btn.setToolTip("Copy value to clipboard")
        self._copy_btn.clicked.connect(self.copy_to_clipboard)

        layout.addLayout(text_column, 1)
        layout.addWidget(self._copy_btn, 0, Qt.AlignVCenter)

    @property
    def title(self) -> str:
        return self._title

    @property
    def value(self) -> Optional[str]:
        return self._value

    @property
    def value_text(self) -> str:
        return self._value_label.text()

    def copy_to_clipboard(self) -> bool:
        """Place the full value on the clipboard; absent values are ignored."""

        if self._value is None:
            return False
        QApplication.clipboard().setText(self._value)
        logger.debug("Copied %r to clipboard", self._title)
        return True


__all__ = [
    "StorageValueProvider",
    "StorageValue",
    "StorageEntryModel",
    "ListStorageValue",
    "StorageValueView",
]
