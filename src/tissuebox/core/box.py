# src/tissuebox/core/box.py

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Iterator

from .errors import (
    DescriptionNotFoundError,
    DuplicateTitleError,
    InvalidTitleError,
    NotFoundError,
    RenameDuplicateError,
    RenameNotFoundError,
    TagNotFoundError,
)
from .models import Tissue, TissueFilter, is_blank_title

logger = logging.getLogger(__name__)

Mutator = Callable[[Tissue], Tissue]


class TissueView:
    """
    Lazy, read-only selection of tissues.

    Every iteration walks the box again, so a view can be consumed any number
    of times and always reflects the box's current content in canonical order.
    Each pass works on a snapshot: removing tissues while iterating is allowed.
    """

    def __init__(self, box: TissueBox, flt: TissueFilter) -> None:
        self._box = box
        self._filter = flt

    @property
    def filter(self) -> TissueFilter:
        return self._filter

    def __iter__(self) -> Iterator[Tissue]:
        return (t for t in self._box if self._filter.matches(t))

    def titles(self) -> list[str]:
        return [t.title for t in self]

    def __repr__(self) -> str:
        return f"TissueView(filter={self._filter!r})"


class TissueBox:
    """
    Ordered collection of tissues keyed by title.

    Canonical order is insertion order: a parsed box keeps the file's order,
    add() appends, rename() keeps the tissue where it was.

    Every operation either completes or raises with the box unchanged.
    """

    def __init__(self, tissues: Iterable[Tissue] = ()) -> None:
        self._entries: dict[str, Tissue] = {}
        for tissue in tissues:
            self.insert(tissue)

    # ---- container protocol ----

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, title: object) -> bool:
        return title in self._entries

    def __iter__(self) -> Iterator[Tissue]:
        return iter(list(self._entries.values()))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TissueBox):
            return NotImplemented
        # Order is part of the value: it decides the serialized bytes.
        return list(self._entries.items()) == list(other._entries.items())

    def __repr__(self) -> str:
        return f"TissueBox({list(self._entries.values())!r})"

    def titles(self) -> list[str]:
        return list(self._entries)

    def all_tags(self) -> list[str]:
        """Distinct tags in use, in first-seen order."""
        seen: dict[str, None] = {}
        for tissue in self._entries.values():
            for tag in tissue.tags:
                seen.setdefault(tag, None)
        return list(seen)

    # ---- lookup ----

    def get(self, title: str) -> Tissue | None:
        return self._entries.get(title)

    def require(self, title: str) -> Tissue:
        tissue = self._entries.get(title)
        if tissue is None:
            raise NotFoundError(title)
        return tissue

    def list(
        self,
        flt: TissueFilter | None = None,
        *,
        tags: Iterable[str] = (),
        text: str | None = None,
    ) -> TissueView:
        if flt is None:
            flt = TissueFilter.build(tags, text)
        return TissueView(self, flt)

    # ---- creation ----

    def add(
        self,
        title: str,
        tags: Iterable[str] = (),
        desc: str | None = None,
    ) -> Tissue:
        tissue = Tissue(title=title, desc=desc).tagged(*tags)
        return self.insert(tissue)

    def insert(self, tissue: Tissue) -> Tissue:
        if is_blank_title(tissue.title):
            raise InvalidTitleError(tissue.title)
        if tissue.title in self._entries:
            raise DuplicateTitleError(tissue.title)
        self._entries[tissue.title] = tissue
        logger.debug("Tissue added title=%r tags=%s", tissue.title, list(tissue.tags))
        return tissue

    # ---- mutation ----

    def update(self, title: str, mutator: Mutator) -> Tissue:
        """
        Replace the tissue `title` with mutator(tissue).

        A mutator that changes the title renames the tissue (same checks as
        rename()). If the mutator raises, nothing is stored.
        """
        current = self.require(title)
        updated = mutator(current)
        if updated.title != title:
            self._check_rename_target(updated.title)
            self._rekey(title, updated)
        else:
            self._entries[title] = updated
        return updated

    def tag(self, title: str, *tags: str) -> Tissue:
        return self.update(title, lambda t: t.tagged(*tags))

    def untag(self, title: str, tag: str) -> Tissue:
        if tag not in self.require(title).tags:
            raise TagNotFoundError(title, tag)
        return self.update(title, lambda t: t.untagged(tag))

    def describe(self, title: str, text: str, *, append: bool = False) -> Tissue:
        return self.update(title, lambda t: t.described(text, append=append))

    def undescribe(self, title: str) -> Tissue:
        return self.update(title, lambda t: t.undescribed())

    def unnote(self, title: str, index: int) -> Tissue:
        """Drop line `index` (0-based) of the description."""
        lines = self.require(title).desc_lines()
        if not 0 <= index < len(lines):
            raise DescriptionNotFoundError(title, index)
        return self.update(title, lambda t: t.without_line(index))

    def rename(self, old: str, new: str) -> Tissue:
        current = self._entries.get(old)
        if current is None:
            raise RenameNotFoundError(old)
        if new == old:
            return current
        self._check_rename_target(new)
        renamed = current.renamed(new)
        self._rekey(old, renamed)
        logger.debug("Tissue renamed %r -> %r", old, new)
        return renamed

    def _check_rename_target(self, new: str) -> None:
        if is_blank_title(new):
            raise InvalidTitleError(new)
        if new in self._entries:
            raise RenameDuplicateError(new)

    def _rekey(self, old: str, tissue: Tissue) -> None:
        # Rebuild in place so the renamed tissue keeps its position.
        items = [
            (tissue.title, tissue) if key == old else (key, value)
            for key, value in self._entries.items()
        ]
        self._entries.clear()
        self._entries.update(items)

    # ---- removal ----

    def remove(self, title: str) -> Tissue:
        tissue = self._entries.pop(title, None)
        if tissue is None:
            raise NotFoundError(title)
        logger.debug("Tissue removed title=%r", title)
        return tissue

    def close(self, title: str) -> Tissue:
        return self.remove(title)

    def close_many(self, titles: Iterable[str]) -> list[Tissue]:
        """
        Remove several tissues at once (e.g. every title closed by a commit).

        All-or-nothing: if any title is missing, nothing is removed.
        """
        wanted = list(dict.fromkeys(titles))
        for title in wanted:
            if title not in self._entries:
                raise NotFoundError(title)
        return [self.remove(title) for title in wanted]
