# src/tissuebox/promotion.py

"""
Promotion: turn a local tissue into an issue in an external tracker.

Mapping:
- title -> issue title
- desc  -> issue body ("" when the tissue has no desc)
- tags  -> issue labels

Order matters: publish first, then drop the tissue and write the box back.
A failed publish leaves the file untouched. A failed write after a
successful publish is reported with the issue URL (the tissue then exists in
both places until it is closed by hand; it is never lost).
"""

from __future__ import annotations

import logging

from .core.errors import PublishError
from .core.ports import IssueDraft, IssuePublisher, IssueRef
from .storage.store import TissueStore

logger = logging.getLogger(__name__)


def promote(store: TissueStore, title: str, publisher: IssuePublisher) -> IssueRef:
    box = store.load()
    tissue = box.require(title)
    draft = IssueDraft.from_tissue(tissue)

    try:
        ref = publisher.create_issue(draft)
    except Exception as exc:
        raise PublishError(title, str(exc)) from exc

    logger.info("Tissue %r published as %s", title, ref.url)

    box.remove(title)
    try:
        store.save(box)
    except OSError:
        logger.error(
            "Tissue %r was published as %s but %s could not be updated; close it by hand.",
            title,
            ref.url,
            store.path,
        )
        raise
    return ref
