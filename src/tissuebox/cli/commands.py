# src/tissuebox/cli/commands.py

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from ..core.models import Tissue
from ..core.ports import IssuePublisher
from ..promotion import promote
from ..storage.codec import dump_key, dumps_value
from ..storage.store import TissueStore

logger = logging.getLogger(__name__)


class UsageError(Exception):
    """Bad command line: unknown command or wrong arguments."""


@dataclass(slots=True)
class CommandContext:
    store: TissueStore
    publisher: IssuePublisher | None = None


CommandHandler = Callable[[CommandContext, list[str]], str]


class CommandRegistry:
    """Command registry used by the console entry point (list, add, close, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(self, ctx: CommandContext, argv: list[str]) -> str:
        """
        Run ["command", "arg", ...] and return the text to print.
        Raises UsageError for unknown commands or bad arguments.
        """
        if not argv:
            raise UsageError("No command given. Use 'help' to list available commands.")

        name = argv[0].lower()
        handler = self._handlers.get(name)
        if not handler:
            raise UsageError(f"Unknown command: {name}. Use 'help' to list available commands.")
        return handler(ctx, argv[1:])

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  {name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


def format_tissue(tissue: Tissue, *, full: bool = False) -> str:
    line = tissue.title
    if tissue.tags:
        line += f" ({', '.join(tissue.tags)})"
    lines = [line]
    if tissue.desc:
        lines.extend(f"  - {part}" for part in tissue.desc.splitlines())
    if full:
        for key, value in tissue.extra.items():
            lines.append(f"  {dump_key(key)} = {dumps_value(value)}")
    return "\n".join(lines)


def _need(args: list[str], count: int, usage: str) -> None:
    if len(args) < count:
        raise UsageError(f"Usage: {usage}")


def cmd_help(ctx: CommandContext, args: list[str]) -> str:
    return registry.build_help()


def cmd_list(ctx: CommandContext, args: list[str]) -> str:
    """
    list                 -> every tissue
    list bug ui          -> tissues tagged with bug AND ui
    list --grep parser   -> title or desc mentions "parser"
    """
    tags: list[str] = []
    text: str | None = None
    it = iter(args)
    for arg in it:
        if arg == "--grep":
            text = next(it, None)
            if text is None:
                raise UsageError("Usage: list [TAG ...] [--grep TEXT]")
        else:
            tags.append(arg)

    view = ctx.store.load().list(tags=tags, text=text)
    rendered = [format_tissue(t) for t in view]
    if not rendered:
        return "No tissues."
    return "\n".join(rendered)


def cmd_show(ctx: CommandContext, args: list[str]) -> str:
    _need(args, 1, "show TITLE")
    tissue = ctx.store.load().require(args[0])
    return format_tissue(tissue, full=True)


def cmd_tags(ctx: CommandContext, args: list[str]) -> str:
    tags = ctx.store.load().all_tags()
    if not tags:
        return "No tags."
    return "\n".join(tags)


def cmd_add(ctx: CommandContext, args: list[str]) -> str:
    _need(args, 1, "add TITLE [TAG ...]")
    title, tags = args[0], args[1:]
    with ctx.store.edit() as box:
        box.add(title, tags=tags)
    logger.info("Added tissue %r", title)
    return f"Added {title!r}."


def cmd_tag(ctx: CommandContext, args: list[str]) -> str:
    _need(args, 2, "tag TITLE TAG ...")
    title, tags = args[0], args[1:]
    with ctx.store.edit() as box:
        tissue = box.tag(title, *tags)
    logger.info("Tagged tissue %r with %s", title, tags)
    return format_tissue(tissue)


def cmd_untag(ctx: CommandContext, args: list[str]) -> str:
    _need(args, 2, "untag TITLE TAG")
    title, tag = args[0], args[1]
    with ctx.store.edit() as box:
        tissue = box.untag(title, tag)
    logger.info("Removed tag %r from tissue %r", tag, title)
    return format_tissue(tissue)


def cmd_describe(ctx: CommandContext, args: list[str]) -> str:
    """
    describe TITLE TEXT  -> set the description
    describe TITLE ""    -> set an empty description
    describe TITLE       -> clear it
    """
    _need(args, 1, "describe TITLE [TEXT]")
    title = args[0]
    clear = len(args) == 1
    with ctx.store.edit() as box:
        if clear:
            tissue = box.undescribe(title)
        else:
            tissue = box.describe(title, " ".join(args[1:]))
    logger.info("Description of %r %s", title, "cleared" if clear else "set")
    return format_tissue(tissue)


def cmd_note(ctx: CommandContext, args: list[str]) -> str:
    _need(args, 2, "note TITLE TEXT")
    title = args[0]
    text = " ".join(args[1:])
    with ctx.store.edit() as box:
        tissue = box.describe(title, text, append=True)
    logger.info("Appended note to %r", title)
    return format_tissue(tissue)


def cmd_unnote(ctx: CommandContext, args: list[str]) -> str:
    _need(args, 2, "unnote TITLE INDEX")
    title = args[0]
    try:
        index = int(args[1])
    except ValueError:
        raise UsageError(
            f"INDEX must be a number, got {args[1]!r}. Usage: unnote TITLE INDEX"
        ) from None
    with ctx.store.edit() as box:
        tissue = box.unnote(title, index)
    logger.info("Dropped description line %d of %r", index, title)
    return format_tissue(tissue)


def cmd_rename(ctx: CommandContext, args: list[str]) -> str:
    _need(args, 2, "rename OLD NEW")
    old, new = args[0], args[1]
    with ctx.store.edit() as box:
        box.rename(old, new)
    logger.info("Renamed tissue %r -> %r", old, new)
    return f"Renamed {old!r} to {new!r}."


def cmd_close(ctx: CommandContext, args: list[str]) -> str:
    _need(args, 1, "close TITLE ...")
    with ctx.store.edit() as box:
        closed = box.close_many(args)
    logger.info("Closed %d tissue(s)", len(closed))
    return "\n".join(f"Closed {t.title!r}." for t in closed)


def cmd_promote(ctx: CommandContext, args: list[str]) -> str:
    _need(args, 1, "promote TITLE")
    if ctx.publisher is None:
        raise UsageError("No issue publisher is configured; cannot promote.")
    ref = promote(ctx.store, args[0], ctx.publisher)
    return f"Promoted {args[0]!r} to {ref.url}"


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register(
    "list", cmd_list, help_text="List tissues: list [TAG ...] [--grep TEXT].", aliases=["ls"]
)
registry.register("show", cmd_show, help_text="Show one tissue with all fields: show TITLE.")
registry.register("tags", cmd_tags, help_text="List every tag in use.")
registry.register("add", cmd_add, help_text="Create a tissue: add TITLE [TAG ...].")
registry.register("tag", cmd_tag, help_text="Add tags: tag TITLE TAG ...")
registry.register("untag", cmd_untag, help_text="Remove a tag: untag TITLE TAG.")
registry.register(
    "describe", cmd_describe, help_text="Set or clear the description: describe TITLE [TEXT]."
)
registry.register("note", cmd_note, help_text="Append a line to the description: note TITLE TEXT.")
registry.register(
    "unnote", cmd_unnote, help_text="Drop a description line (0-based): unnote TITLE INDEX."
)
registry.register("rename", cmd_rename, help_text="Rename a tissue: rename OLD NEW.")
registry.register(
    "close", cmd_close, help_text="Remove tissues: close TITLE ...", aliases=["rm", "remove"]
)
registry.register("promote", cmd_promote, help_text="Publish to the issue tracker: promote TITLE.")
