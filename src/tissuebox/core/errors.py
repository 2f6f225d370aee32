# src/tissuebox/core/errors.py

"""
Error hierarchy for tissue box operations.

Core code raises these; only the command surface (cli/main.py) decides
whether an error ends the process.
"""

from __future__ import annotations

from pathlib import Path


class TissueError(Exception):
    """Base class for every error raised by the tissuebox core."""


class FormatError(TissueError):
    """The tissue box file is not valid, or does not follow the schema."""

    def __init__(
        self,
        message: str,
        *,
        line: int | None = None,
        column: int | None = None,
        title: str | None = None,
        path: str | Path | None = None,
    ) -> None:
        self.message = message
        self.line = line
        self.column = column
        self.title = title
        self.path = Path(path) if path is not None else None
        super().__init__(self._render())

    def _render(self) -> str:
        where: list[str] = []
        if self.path is not None:
            where.append(str(self.path))
        if self.line is not None:
            loc = f"line {self.line}"
            if self.column is not None:
                loc += f", column {self.column}"
            where.append(loc)
        if self.title is not None:
            where.append(f"tissue {self.title!r}")
        if not where:
            return self.message
        return f"{': '.join(where)}: {self.message}"

    def with_path(self, path: str | Path) -> FormatError:
        return FormatError(
            self.message,
            line=self.line,
            column=self.column,
            title=self.title,
            path=path,
        )


class DuplicateTitleError(TissueError):
    def __init__(self, title: str) -> None:
        self.title = title
        super().__init__(f"a tissue titled {title!r} already exists")


class InvalidTitleError(TissueError):
    def __init__(self, title: str) -> None:
        self.title = title
        super().__init__(f"invalid tissue title {title!r}: title must not be blank")


class NotFoundError(TissueError):
    def __init__(self, title: str, message: str | None = None) -> None:
        self.title = title
        super().__init__(message or f"no tissue titled {title!r}")


class TagNotFoundError(NotFoundError):
    def __init__(self, title: str, tag: str) -> None:
        self.tag = tag
        super().__init__(title, f"no tag {tag!r} on tissue {title!r}")


class DescriptionNotFoundError(NotFoundError):
    def __init__(self, title: str, index: int) -> None:
        self.index = index
        super().__init__(title, f"no description line {index} on tissue {title!r}")


class RenameError(TissueError):
    """Rename failed. Concrete subclasses say why."""


class RenameNotFoundError(RenameError, NotFoundError):
    pass


class RenameDuplicateError(RenameError, DuplicateTitleError):
    pass


class PublishError(TissueError):
    """The issue publisher failed; the original exception is the __cause__."""

    def __init__(self, title: str, reason: str = "") -> None:
        self.title = title
        msg = f"failed to publish tissue {title!r}"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)
