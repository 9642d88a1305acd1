from __future__ import annotations

import pytest

pytest.importorskip("PyQt5.QtWidgets")

from PyQt5.QtCore import QModelIndex, Qt  # noqa: E402
from PyQt5.QtWidgets import QApplication, QLabel, QListView, QVBoxLayout, QWidget  # noqa: E402

from debug_storage_reader.config import ViewerConfig  # noqa: E402
from debug_storage_reader.context import lookup, publish  # noqa: E402
from debug_storage_reader.reader import (  # noqa: E402
    MappingStorageReader,
    ReaderNotPublishedError,
    StorageReader,
)
from debug_storage_reader.snapshot import SnapshotState  # noqa: E402
from debug_storage_reader.widgets import (  # noqa: E402
    ListStorageValue,
    StorageValue,
    StorageValueProvider,
    StorageValueView,
)

CONFIG = ViewerConfig()


class FailingReader(StorageReader):
    async def read(self, key, value_type=None):
        raise OSError("backend unavailable")

    async def read_all(self):
        raise OSError("backend unavailable")


class RecordingBuilder:
    def __init__(self):
        self.calls = []

    def __call__(self, host, *args):
        self.calls.append(args)
        return QLabel(" ".join(str(arg) for arg in args))


@pytest.fixture()
def reader() -> MappingStorageReader:
    return MappingStorageReader({"first": "first value", "second": "second value"})


def test_pending_placeholder_is_shown_before_the_read_settles(qapp, runner, reader):
    builder = RecordingBuilder()
    widget = StorageValue("first", builder, reader, runner=runner)

    widget.reload()

    assert isinstance(widget.content, QLabel)
    assert widget.content.text() == CONFIG.pending_text
    assert builder.calls == []

    runner.complete()

    assert builder.calls == [("first value",)]
    assert widget.content.text() == "first value"
    assert widget.snapshot.state is SnapshotState.SUCCEEDED


def test_absent_key_is_passed_to_the_builder(qapp, runner, reader):
    builder = RecordingBuilder()
    widget = StorageValue("missing", builder, reader, runner=runner)

    widget.reload()
    runner.complete()

    assert builder.calls == [(None,)]


def test_failed_read_shows_error_and_skips_builder(qapp, runner):
    builder = RecordingBuilder()
    widget = StorageValue("first", builder, FailingReader(), runner=runner)

    widget.reload()
    runner.complete()

    assert builder.calls == []
    assert widget.content.objectName() == "ErrorLabel"
    assert widget.content.text() == CONFIG.failed_text
    assert isinstance(widget.snapshot.error, OSError)


def test_type_mismatch_is_rendered_as_failure(qapp, runner):
    builder = RecordingBuilder()
    widget = StorageValue("count", builder, MappingStorageReader({"count": 1}), runner=runner)

    widget.reload()
    runner.complete()

    assert builder.calls == []
    assert widget.content.objectName() == "ErrorLabel"


def test_new_key_triggers_a_new_read(qapp, runner, reader):
    builder = RecordingBuilder()
    widget = StorageValue("first", builder, reader, runner=runner)

    widget.reload()
    widget.set_key("second")

    assert len(runner.submitted) == 2
    assert widget.key == "second"

    runner.complete(0)
    assert builder.calls == []

    runner.complete(1)
    assert builder.calls == [("second value",)]


def test_show_issues_exactly_one_read(qapp, runner, reader):
    widget = StorageValue("first", RecordingBuilder(), reader, runner=runner)

    widget.show()
    widget.hide()
    widget.show()

    assert len(runner.submitted) == 1
    widget.close()


def test_results_after_dispose_are_ignored(qapp, runner, reader):
    builder = RecordingBuilder()
    widget = StorageValue("first", builder, reader, runner=runner)

    widget.reload()
    widget.dispose()
    runner.complete()

    assert builder.calls == []
    assert widget.content.text() == CONFIG.pending_text


def test_widget_uses_the_published_reader(qapp, runner, reader):
    builder = RecordingBuilder()
    widget = StorageValue("first", builder, runner=runner)
    provider = publish(reader, widget)

    assert isinstance(provider, StorageValueProvider)
    assert provider.reader is reader

    widget.reload()
    runner.complete()

    assert builder.calls == [("first value",)]


def test_nested_provider_shadows_outer_provider(qapp, runner):
    outer_reader = MappingStorageReader({"who": "outer"})
    inner_reader = MappingStorageReader({"who": "inner"})
    builder = RecordingBuilder()

    inner_value = StorageValue("who", builder, runner=runner)
    inner = StorageValueProvider(inner_reader, inner_value)
    outer_value = StorageValue("who", builder, runner=runner)

    body = QWidget()
    layout = QVBoxLayout(body)
    layout.addWidget(outer_value)
    layout.addWidget(inner)
    root = StorageValueProvider(outer_reader, body)

    assert lookup(inner_value) is inner_reader
    assert lookup(outer_value) is outer_reader

    inner_value.reload()
    outer_value.reload()
    runner.complete(0)
    runner.complete(1)

    assert builder.calls == [("inner",), ("outer",)]
    assert root.child is body


def test_explicit_reader_wins_over_published_one(qapp, runner, reader):
    explicit = MappingStorageReader({"first": "explicit"})
    builder = RecordingBuilder()
    widget = StorageValue("first", builder, explicit, runner=runner)
    provider = publish(reader, widget)

    widget.reload()
    runner.complete()

    assert builder.calls == [("explicit",)]
    assert lookup(widget) is provider.reader


def test_reload_without_reader_raises(qapp, runner):
    widget = StorageValue("first", RecordingBuilder(), runner=runner)

    with pytest.raises(ReaderNotPublishedError):
        widget.reload()
    assert runner.submitted == []


def test_list_renders_one_row_per_entry_in_order(qapp, runner, reader):
    builder = RecordingBuilder()
    widget = ListStorageValue(builder, reader, runner=runner)

    widget.reload()
    assert widget.content.text() == CONFIG.pending_text

    runner.complete()

    assert builder.calls == [("first", "first value"), ("second", "second value")]
    view = widget.content
    assert isinstance(view, QListView)
    model = view.model()
    assert [model.index(row).data(Qt.UserRole) for row in range(model.rowCount())] == [
        "first",
        "second",
    ]


def test_list_failure_shows_error(qapp, runner):
    builder = RecordingBuilder()
    widget = ListStorageValue(builder, FailingReader(), runner=runner)

    widget.reload()
    runner.complete()

    assert builder.calls == []
    assert widget.content.objectName() == "ErrorLabel"


def test_list_reload_reads_again(qapp, runner, reader):
    widget = ListStorageValue(RecordingBuilder(), reader, runner=runner)

    widget.reload()
    runner.complete()
    widget.reload()

    assert len(runner.submitted) == 2
    assert widget.snapshot.state is SnapshotState.PENDING


def test_value_view_copies_value_to_clipboard(qapp):
    view = StorageValueView("Access token", "abc123")

    assert view.copy_to_clipboard()
    assert QApplication.clipboard().text() == "abc123"


def test_value_view_ignores_copy_of_absent_value(qapp):
    QApplication.clipboard().setText("unchanged")
    view = StorageValueView("Refresh token", None)

    assert not view.copy_to_clipboard()
    assert QApplication.clipboard().text() == "unchanged"
    assert view.value_text == "None"


def test_value_view_clips_long_values(qapp):
    view = StorageValueView("Notes", "one\ntwo\nthree")

    assert view.title == "Notes"
    assert view.value == "one\ntwo\nthree"
    assert view.value_text.startswith("one\ntwo")
    assert "three" not in view.value_text


def test_list_rows_are_built_in_batches(qapp, runner):
    entries = {f"key{n}": n for n in range(5)}
    builder = RecordingBuilder()
    widget = ListStorageValue(
        builder,
        MappingStorageReader(entries),
        runner=runner,
        config=ViewerConfig(list_batch_size=2),
    )

    widget.reload()
    runner.complete()

    model = widget.content.model()
    assert model.total() == 5
    assert model.rowCount() == 2
    assert builder.calls == [("key0", 0), ("key1", 1)]

    while model.canFetchMore(QModelIndex()):
        model.fetchMore(QModelIndex())

    assert model.rowCount() == 5
    assert builder.calls == [(f"key{n}", n) for n in range(5)]


def test_builder_error_renders_failure_instead_of_crashing(qapp, runner, reader):
    widget = StorageValue("missing", lambda host, value: QLabel(value.upper()), reader, runner=runner)

    widget.reload()
    runner.complete()

    assert widget.snapshot.state is SnapshotState.SUCCEEDED
    assert widget.content.objectName() == "ErrorLabel"
    assert isinstance(widget.render_error, AttributeError)


def test_builder_error_is_cleared_by_a_later_successful_render(qapp, runner, reader):
    widget = StorageValue(
        "missing",
        lambda host, value: QLabel(value.upper()),
        reader,
        runner=runner,
    )
    widget.reload()
    runner.complete()

    widget.set_key("first")
    runner.complete()

    assert widget.render_error is None
    assert widget.content.text() == "FIRST VALUE"


def test_item_builder_error_only_affects_its_row(qapp, runner, reader):
    def item_builder(host, key, value):
        if key == "first":
            raise ValueError("cannot render")
        return QLabel(value)

    widget = ListStorageValue(item_builder, reader, runner=runner)
    widget.reload()
    runner.complete()

    view = widget.content
    model = view.model()
    assert model.rowCount() == 2
    assert view.indexWidget(model.index(0)).objectName() == "ErrorLabel"
    assert view.indexWidget(model.index(1)).text() == "second value"
