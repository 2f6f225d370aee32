# src/tissuebox/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The core depends on Protocols instead of concrete integrations, so an issue
tracker client can be plugged in by the caller and faked in tests.
"""

from dataclasses import dataclass
from typing import Protocol

from .models import Tissue


@dataclass(frozen=True, slots=True)
class IssueDraft:
    """What an external tracker receives for a promoted tissue."""

    title: str
    body: str
    labels: tuple[str, ...]

    @classmethod
    def from_tissue(cls, tissue: Tissue) -> IssueDraft:
        # title -> title, desc -> body ("" when absent), tags -> labels
        return cls(title=tissue.title, body=tissue.desc or "", labels=tuple(tissue.tags))


@dataclass(frozen=True, slots=True)
class IssueRef:
    """Where the promoted tissue lives now."""

    url: str
    number: int | None = None


class IssuePublisher(Protocol):
    """
    Creates an issue in an external tracker.

    Implementations raise any exception on failure; the caller wraps it into
    PublishError and keeps the tissue.
    """

    def create_issue(self, draft: IssueDraft) -> IssueRef: ...
