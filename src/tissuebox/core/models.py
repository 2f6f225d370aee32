# src/tissuebox/core/models.py

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field, replace
from typing import Any

# Keys of a tissue table that the schema understands; everything else is "extra".
TAGS_KEY = "tags"
DESC_KEY = "desc"
KNOWN_KEYS = frozenset({TAGS_KEY, DESC_KEY})


def is_blank_title(title: str) -> bool:
    return not isinstance(title, str) or not title.strip()


@dataclass(frozen=True, slots=True)
class Tissue:
    """
    A single short-lived task.

    Notes:
    - desc=None means "no description"; "" is an (empty) description.
    - extra keeps unknown keys of the source table so they survive a rewrite.
    - Values are immutable: the helpers below return a new Tissue.
    """

    title: str
    tags: tuple[str, ...] = ()
    desc: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        # Accept any iterable of tags from callers, store a tuple.
        if not isinstance(self.tags, tuple):
            object.__setattr__(self, "tags", tuple(self.tags))
        # Only what the file format can hold; anything else would not load back.
        if not isinstance(self.title, str):
            raise TypeError(f"title must be a string, got {type(self.title).__name__}")
        bad = [t for t in self.tags if not isinstance(t, str)]
        if bad:
            raise TypeError(f"tags must be strings, got {bad!r} on {self.title!r}")
        if self.desc is not None and not isinstance(self.desc, str):
            raise TypeError(
                f"desc must be a string or None, got {type(self.desc).__name__} on {self.title!r}"
            )
        if not isinstance(self.extra, dict):
            raise TypeError(f"extra must be a dict, got {type(self.extra).__name__}")

    def tagged(self, *tags: str) -> Tissue:
        merged = list(self.tags)
        for tag in tags:
            if tag not in merged:
                merged.append(tag)
        return replace(self, tags=tuple(merged))

    def untagged(self, tag: str) -> Tissue:
        return replace(self, tags=tuple(t for t in self.tags if t != tag))

    def described(self, text: str, *, append: bool = False) -> Tissue:
        if append and self.desc:
            text = f"{self.desc}\n{text}"
        return replace(self, desc=text)

    def undescribed(self) -> Tissue:
        return replace(self, desc=None)

    def desc_lines(self) -> list[str]:
        return self.desc.splitlines() if self.desc else []

    def without_line(self, index: int) -> Tissue:
        lines = self.desc_lines()
        del lines[index]
        # Dropping the last line leaves no description, not an empty one.
        return replace(self, desc="\n".join(lines) if lines else None)

    def renamed(self, title: str) -> Tissue:
        return replace(self, title=title)

    def has_tags(self, tags: Iterable[str]) -> bool:
        return set(tags) <= set(self.tags)

    def mentions(self, text: str) -> bool:
        needle = text.casefold()
        if needle in self.title.casefold():
            return True
        return self.desc is not None and needle in self.desc.casefold()


@dataclass(frozen=True, slots=True)
class TissueFilter:
    """
    Selection used by TissueBox.list().

    tags: every tag must be present on the tissue (AND, not any-match).
    text: case-insensitive substring of the title or the description.
    """

    tags: frozenset[str] = frozenset()
    text: str | None = None

    @classmethod
    def build(cls, tags: Iterable[str] = (), text: str | None = None) -> TissueFilter:
        return cls(tags=frozenset(tags), text=text or None)

    def matches(self, tissue: Tissue) -> bool:
        if self.tags and not tissue.has_tags(self.tags):
            return False
        if self.text is not None and not tissue.mentions(self.text):
            return False
        return True
