# tests/test_box.py

from __future__ import annotations

import pytest

from tissuebox.core.box import TissueBox
from tissuebox.core.errors import (
    DescriptionNotFoundError,
    DuplicateTitleError,
    InvalidTitleError,
    NotFoundError,
    RenameDuplicateError,
    RenameError,
    RenameNotFoundError,
    TagNotFoundError,
)
from tissuebox.core.models import Tissue, TissueFilter


def test_add_then_get() -> None:
    box = TissueBox()
    created = box.add("Baz", tags=["bug", "bug", "ui"], desc="Depends on Foo")
    assert created == Tissue("Baz", tags=("bug", "ui"), desc="Depends on Foo")
    assert box.get("Baz") == created
    assert box.get("baz") is None


def test_add_duplicate_fails_and_box_is_unchanged(sample_box: TissueBox) -> None:
    before = list(sample_box)
    with pytest.raises(DuplicateTitleError):
        sample_box.add("Foo", tags=["other"])
    assert list(sample_box) == before


@pytest.mark.parametrize("title", ["", "   ", "\t\n"])
def test_add_rejects_blank_title(title: str) -> None:
    box = TissueBox()
    with pytest.raises(InvalidTitleError):
        box.add(title)
    assert len(box) == 0


def test_titles_are_case_sensitive() -> None:
    box = TissueBox()
    box.add("foo")
    box.add("Foo")
    assert box.titles() == ["foo", "Foo"]


def test_remove_then_get_is_absent(sample_box: TissueBox) -> None:
    removed = sample_box.remove("Bar")
    assert removed.title == "Bar"
    assert sample_box.get("Bar") is None
    assert "Bar" not in sample_box
    with pytest.raises(NotFoundError):
        sample_box.remove("Bar")


def test_tag_filter_uses_and_semantics(sample_box: TissueBox) -> None:
    view = sample_box.list(tags=["bug", "help wanted"])
    assert view.titles() == ["Baz"]

    assert sample_box.list(tags=["bug"]).titles() == ["Foo", "Baz"]
    assert sample_box.list(tags=["bug", "nope"]).titles() == []


def test_text_filter_matches_title_or_desc(sample_box: TissueBox) -> None:
    assert sample_box.list(text="bar").titles() == ["Foo", "Bar"]
    assert sample_box.list(text="ABC").titles() == ["Bar"]
    assert sample_box.list(tags=["bug"], text="bar").titles() == ["Foo"]


def test_list_view_is_restartable_and_read_only(sample_box: TissueBox) -> None:
    view = sample_box.list(TissueFilter.build(tags=["help wanted"]))
    first = [t.title for t in view]
    second = [t.title for t in view]
    assert first == second == ["Bar", "Baz"]
    assert len(sample_box) == 3

    # A view is lazy: it sees later changes.
    sample_box.tag("Foo", "help wanted")
    assert view.titles() == ["Foo", "Bar", "Baz"]


def test_rename_preserves_fields_and_position(sample_box: TissueBox) -> None:
    original = sample_box.get("Bar")
    assert original is not None

    sample_box.rename("Bar", "Qux")

    assert sample_box.get("Bar") is None
    renamed = sample_box.get("Qux")
    assert renamed == original.renamed("Qux")
    assert sample_box.titles() == ["Foo", "Qux", "Baz"]


def test_rename_errors(sample_box: TissueBox) -> None:
    with pytest.raises(RenameNotFoundError) as missing:
        sample_box.rename("Nope", "Other")
    assert isinstance(missing.value, RenameError)
    assert isinstance(missing.value, NotFoundError)

    with pytest.raises(RenameDuplicateError) as dup:
        sample_box.rename("Foo", "Bar")
    assert isinstance(dup.value, RenameError)
    assert isinstance(dup.value, DuplicateTitleError)

    with pytest.raises(InvalidTitleError):
        sample_box.rename("Foo", " ")

    assert sample_box.titles() == ["Foo", "Bar", "Baz"]


def test_rename_to_same_title_is_noop(sample_box: TissueBox) -> None:
    before = list(sample_box)
    sample_box.rename("Foo", "Foo")
    assert list(sample_box) == before


def test_update_applies_mutator(sample_box: TissueBox) -> None:
    updated = sample_box.update("Foo", lambda t: t.tagged("ui").described("new"))
    assert updated.tags == ("bug", "ui")
    assert updated.desc == "new"
    assert sample_box.get("Foo") == updated


def test_update_title_change_is_a_rename(sample_box: TissueBox) -> None:
    sample_box.update("Foo", lambda t: t.renamed("Foo 2"))
    assert sample_box.titles() == ["Foo 2", "Bar", "Baz"]

    with pytest.raises(RenameDuplicateError):
        sample_box.update("Foo 2", lambda t: t.renamed("Bar"))


def test_update_missing_and_failing_mutator(sample_box: TissueBox) -> None:
    with pytest.raises(NotFoundError):
        sample_box.update("Nope", lambda t: t)

    def boom(t: Tissue) -> Tissue:
        raise ValueError("boom")

    before = list(sample_box)
    with pytest.raises(ValueError):
        sample_box.update("Foo", boom)
    assert list(sample_box) == before


def test_tag_untag_and_describe(sample_box: TissueBox) -> None:
    sample_box.tag("Baz", "ui", "bug")
    assert sample_box.require("Baz").tags == ("bug", "help wanted", "ui")

    sample_box.untag("Baz", "bug")
    assert sample_box.require("Baz").tags == ("help wanted", "ui")
    with pytest.raises(TagNotFoundError):
        sample_box.untag("Baz", "bug")

    sample_box.describe("Baz", "first")
    sample_box.describe("Baz", "second", append=True)
    assert sample_box.require("Baz").desc == "first\nsecond"

    sample_box.undescribe("Baz")
    assert sample_box.require("Baz").desc is None


def test_close_many_is_all_or_nothing(sample_box: TissueBox) -> None:
    with pytest.raises(NotFoundError):
        sample_box.close_many(["Foo", "Nope"])
    assert len(sample_box) == 3

    closed = sample_box.close_many(["Foo", "Baz", "Foo"])
    assert [t.title for t in closed] == ["Foo", "Baz"]
    assert sample_box.titles() == ["Bar"]


def test_all_tags_first_seen_order(sample_box: TissueBox) -> None:
    assert sample_box.all_tags() == ["bug", "good first issue", "help wanted"]


def test_box_equality_includes_order() -> None:
    a = TissueBox([Tissue("x"), Tissue("y")])
    b = TissueBox([Tissue("y"), Tissue("x")])
    assert a != b
    assert a == TissueBox([Tissue("x"), Tissue("y")])


def test_view_follows_box_through_rename_and_add(sample_box: TissueBox) -> None:
    view = sample_box.list()
    sample_box.rename("Bar", "Qux")
    sample_box.add("New", tags=["bug"])
    assert view.titles() == ["Foo", "Qux", "Baz", "New"]

    bugs = sample_box.list(tags=["bug"])
    sample_box.update("Foo", lambda t: t.renamed("Foo 2"))
    assert bugs.titles() == ["Foo 2", "Baz", "New"]


def test_remove_while_iterating_view(sample_box: TissueBox) -> None:
    for tissue in sample_box.list(tags=["bug"]):
        sample_box.remove(tissue.title)
    assert sample_box.titles() == ["Bar"]


@pytest.mark.parametrize(
    "kwargs",
    [
        {"desc": 5},
        {"desc": ["a", "b"]},
        {"tags": [1]},
        {"tags": ["ok", None]},
    ],
)
def test_add_rejects_values_the_file_cannot_hold(kwargs: dict) -> None:
    box = TissueBox()
    with pytest.raises(TypeError):
        box.add("Foo", **kwargs)
    assert len(box) == 0


def test_describe_rejects_non_string(sample_box: TissueBox) -> None:
    before = list(sample_box)
    with pytest.raises(TypeError):
        sample_box.describe("Foo", 42)  # type: ignore[arg-type]
    assert list(sample_box) == before


def test_unnote_drops_one_line(sample_box: TissueBox) -> None:
    sample_box.describe("Baz", "first\nsecond\nthird")

    sample_box.unnote("Baz", 1)
    assert sample_box.require("Baz").desc == "first\nthird"

    sample_box.unnote("Baz", 0)
    sample_box.unnote("Baz", 0)
    assert sample_box.require("Baz").desc is None


def test_unnote_errors_leave_box_unchanged(sample_box: TissueBox) -> None:
    before = list(sample_box)
    with pytest.raises(DescriptionNotFoundError) as ei:
        sample_box.unnote("Foo", 1)
    assert isinstance(ei.value, NotFoundError)
    assert ei.value.index == 1

    with pytest.raises(DescriptionNotFoundError):
        sample_box.unnote("Foo", -1)
    with pytest.raises(DescriptionNotFoundError):
        sample_box.unnote("Baz", 0)
    with pytest.raises(NotFoundError):
        sample_box.unnote("Nope", 0)
    assert list(sample_box) == before
