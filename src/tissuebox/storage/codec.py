# src/tissuebox/storage/codec.py

"""
Tissue box <-> TOML text.

File shape:

    ["Implement Foo"]
    tags = ["High priority"]
    desc = "Relies on Bar"

Serialization is canonical and byte-stable:
- tissues in box order, one blank line between tables,
- headers always use the quoted title,
- keys in the order tags, desc, plain extra values, extra sub-tables,
- tags omitted when empty; desc omitted only when None.
"""

from __future__ import annotations

import logging
import math
import re
import tomllib
from datetime import date, datetime, time
from typing import Any

from ..core.box import TissueBox
from ..core.errors import DuplicateTitleError, FormatError, InvalidTitleError
from ..core.models import DESC_KEY, KNOWN_KEYS, TAGS_KEY, Tissue

logger = logging.getLogger(__name__)

_BARE_KEY = re.compile(r"[A-Za-z0-9_-]+")
_DECODE_LOCATION = re.compile(r"\(at line (\d+), column (\d+)\)")

_ESCAPES = {
    "\\": "\\\\",
    '"': '\\"',
    "\b": "\\b",
    "\t": "\\t",
    "\n": "\\n",
    "\f": "\\f",
    "\r": "\\r",
}


# ---- parse ----


def parse(text: str) -> TissueBox:
    """
    Build a TissueBox from TOML text.

    Any problem aborts the whole parse with FormatError; a partially read box
    is never returned.
    """
    try:
        data = tomllib.loads(text)
    except tomllib.TOMLDecodeError as exc:
        raise _format_error_from_decode(exc) from exc

    box = TissueBox()
    for title, table in data.items():
        tissue = _tissue_from_table(title, table)
        try:
            box.insert(tissue)
        except InvalidTitleError as exc:
            raise FormatError("title must not be blank", title=title) from exc
        except DuplicateTitleError as exc:
            # tomllib already rejects redefined tables; kept for direct callers.
            raise FormatError("duplicate title", title=title) from exc

    logger.debug("Parsed tissue box tissues=%d", len(box))
    return box


def _format_error_from_decode(exc: tomllib.TOMLDecodeError) -> FormatError:
    line = getattr(exc, "lineno", None)
    column = getattr(exc, "colno", None)
    message = getattr(exc, "msg", None) or str(exc)
    if line is None:
        m = _DECODE_LOCATION.search(message)
        if m:
            line, column = int(m.group(1)), int(m.group(2))
            message = message[: m.start()].rstrip()
    return FormatError(f"invalid TOML: {message}", line=line, column=column)


def _tissue_from_table(title: str, table: Any) -> Tissue:
    if not isinstance(table, dict):
        raise FormatError(
            f"expected a table, got {_toml_type_name(table)}",
            title=title,
        )

    tags: tuple[str, ...] = ()
    if TAGS_KEY in table:
        raw_tags = table[TAGS_KEY]
        if not isinstance(raw_tags, list) or not all(isinstance(t, str) for t in raw_tags):
            raise FormatError("'tags' must be an array of strings", title=title)
        tags = tuple(raw_tags)

    desc: str | None = None
    if DESC_KEY in table:
        desc = table[DESC_KEY]
        if not isinstance(desc, str):
            raise FormatError("'desc' must be a string", title=title)

    extra = {k: v for k, v in table.items() if k not in KNOWN_KEYS}
    return Tissue(title=title, tags=tags, desc=desc, extra=extra)


def _toml_type_name(value: Any) -> str:
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, int):
        return "integer"
    if isinstance(value, float):
        return "float"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    if isinstance(value, (datetime, date, time)):
        return "date/time"
    return type(value).__name__


# ---- serialize ----


def serialize(box: TissueBox) -> str:
    chunks = [_dump_tissue(tissue) for tissue in box]
    return "\n".join(chunks)


def _dump_tissue(tissue: Tissue) -> str:
    lines: list[str] = []
    header = _quote(tissue.title)
    lines.append(f"[{header}]")

    if tissue.tags:
        lines.append(f"{TAGS_KEY} = {dumps_value(list(tissue.tags))}")
    if tissue.desc is not None:
        lines.append(f"{DESC_KEY} = {dumps_value(tissue.desc)}")

    clash = KNOWN_KEYS.intersection(tissue.extra)
    if clash:
        raise ValueError(f"extra keys {sorted(clash)} of {tissue.title!r} shadow schema keys")
    _dump_table_body(lines, [header], tissue.extra)
    return "\n".join(lines) + "\n"


def _dump_table_body(lines: list[str], path: list[str], table: dict[str, Any]) -> None:
    # TOML needs plain keys before any sub-table header.
    subtables: list[tuple[str, dict[str, Any]]] = []
    for key, value in table.items():
        if isinstance(value, dict):
            subtables.append((key, value))
        else:
            lines.append(f"{dump_key(key)} = {dumps_value(value)}")

    for key, value in subtables:
        sub_path = [*path, dump_key(key)]
        lines.append("")
        lines.append(f"[{'.'.join(sub_path)}]")
        _dump_table_body(lines, sub_path, value)


def dump_key(key: str) -> str:
    if _BARE_KEY.fullmatch(key):
        return key
    return _quote(key)


def dumps_value(value: Any) -> str:
    """Format one value as an inline TOML value."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if math.isnan(value):
            return "nan"
        if math.isinf(value):
            return "inf" if value > 0 else "-inf"
        return repr(value)
    if isinstance(value, str):
        return _quote(value)
    if isinstance(value, time) and value.tzinfo is not None:
        # TOML local times carry no offset.
        raise TypeError("cannot write a time with a UTC offset to a tissue box")
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if isinstance(value, (list, tuple)):
        return "[" + ", ".join(dumps_value(v) for v in value) + "]"
    if isinstance(value, dict):
        if not value:
            return "{}"
        items = ", ".join(f"{dump_key(k)} = {dumps_value(v)}" for k, v in value.items())
        return "{ " + items + " }"
    raise TypeError(f"cannot write value of type {type(value).__name__} to a tissue box")


def _quote(text: str) -> str:
    out: list[str] = []
    for ch in text:
        if ch in _ESCAPES:
            out.append(_ESCAPES[ch])
        elif ord(ch) < 0x20 or ord(ch) == 0x7F:
            out.append(f"\\u{ord(ch):04X}")
        else:
            out.append(ch)
    return '"' + "".join(out) + '"'
