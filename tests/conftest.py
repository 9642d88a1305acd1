from __future__ import annotations

import asyncio
import os

import pytest


@pytest.fixture(scope="session")
def qapp():
    os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
    widgets = pytest.importorskip("PyQt5.QtWidgets")
    app = widgets.QApplication.instance() or widgets.QApplication(["tests"])
    yield app


class ManualRunner:
    """Read runner that only executes a read when the test asks it to."""

    def __init__(self):
        self.submitted = []

    def submit(self, fetch, on_success, on_error):
        self.submitted.append((fetch, on_success, on_error))

    def complete(self, index: int = -1) -> None:
        fetch, on_success, on_error = self.submitted[index]
        try:
            value = asyncio.run(fetch())
        except Exception as exc:
            on_error(exc)
        else:
            on_success(value)


@pytest.fixture()
def runner() -> ManualRunner:
    return ManualRunner()
