# tests/conftest.py

from __future__ import annotations

import logging
from collections.abc import Iterator
from pathlib import Path

import pytest

from tissuebox.cli.commands import CommandContext
from tissuebox.core.box import TissueBox
from tissuebox.logging_setup import _ConsoleNoiseFilter
from tissuebox.storage.store import TissueStore

from .fakes import FakePublisher

SCENARIO_TEXT = (
    '["Implement Foo"]\n'
    'tags = ["High priority"]\n'
    "\n"
    '["Upgrade Bar"]\n'
    'desc = "Relies on implementation of Foo"\n'
)


@pytest.fixture(autouse=True)
def _restore_root_logging() -> Iterator[None]:
    """cli.main calls setup_logging(), which installs root handlers; drop them per test."""
    root = logging.getLogger()
    level = root.level
    yield
    for h in list(root.handlers):
        if isinstance(h, logging.FileHandler) or any(
            isinstance(f, _ConsoleNoiseFilter) for f in h.filters
        ):
            root.removeHandler(h)
            h.close()
    root.setLevel(level)
    logging.captureWarnings(False)


@pytest.fixture()
def sample_box() -> TissueBox:
    """
    Small box with overlapping tags, used by filter/rename tests.

    Built through the public API (no parsing) so box tests don't depend on the codec.
    """
    box = TissueBox()
    box.add("Foo", tags=["bug"], desc="Depends on Bar implementation")
    box.add("Bar", tags=["good first issue", "help wanted"], desc="Implement using abc")
    box.add("Baz", tags=["bug", "help wanted"])
    return box


@pytest.fixture()
def box_path(tmp_path: Path) -> Path:
    return tmp_path / ".tissuebox"


@pytest.fixture()
def store(box_path: Path) -> TissueStore:
    box_path.write_text(SCENARIO_TEXT, encoding="utf-8")
    return TissueStore(box_path)


@pytest.fixture()
def publisher() -> FakePublisher:
    return FakePublisher()


@pytest.fixture()
def ctx(store: TissueStore, publisher: FakePublisher) -> CommandContext:
    return CommandContext(store=store, publisher=publisher)
