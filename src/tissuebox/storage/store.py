# src/tissuebox/storage/store.py

from __future__ import annotations

import contextlib
import logging
import os
import tempfile
from collections.abc import Iterator
from pathlib import Path

from ..core.box import TissueBox
from ..core.errors import FormatError
from .codec import parse, serialize

logger = logging.getLogger(__name__)


class TissueStore:
    """
    A tissue box file on disk.

    - load(): read + parse (a missing file is an empty box)
    - save(): serialize + atomic replace (temp file in the same dir, then rename)
    - edit(): load, let the caller mutate, save on success

    Read-then-write is last-writer-wins against other processes, but the file
    is never left half-written.
    """

    def __init__(self, path: str | Path = ".tissuebox") -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def exists(self) -> bool:
        return self._path.exists()

    def load(self) -> TissueBox:
        if not self._path.exists():
            logger.debug("No tissue box at %s, starting empty", self._path)
            return TissueBox()

        raw = self._path.read_bytes()
        try:
            text = raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            line = raw.count(b"\n", 0, exc.start) + 1
            raise FormatError(
                f"file is not valid UTF-8 (byte offset {exc.start})",
                line=line,
                path=self._path,
            ) from exc
        try:
            box = parse(text)
        except FormatError as exc:
            raise exc.with_path(self._path) from exc
        logger.debug("Loaded tissue box path=%s tissues=%d", self._path, len(box))
        return box

    def save(self, box: TissueBox) -> None:
        payload = serialize(box)
        self._path.parent.mkdir(parents=True, exist_ok=True)

        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{self._path.name}.",
            suffix=".tmp",
            dir=str(self._path.parent),
        )
        tmp = Path(tmp_name)
        try:
            with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as fh:
                fh.write(payload)
                fh.flush()
                os.fsync(fh.fileno())
            self._copy_mode(tmp)
            os.replace(tmp, self._path)
        except BaseException:
            with contextlib.suppress(OSError):
                tmp.unlink()
            raise
        logger.debug("Saved tissue box path=%s tissues=%d", self._path, len(box))

    def _copy_mode(self, tmp: Path) -> None:
        # mkstemp creates 0600 files; keep the permissions the box already had.
        try:
            mode = self._path.stat().st_mode & 0o777
        except FileNotFoundError:
            mode = 0o644
        os.chmod(tmp, mode)

    @contextlib.contextmanager
    def edit(self) -> Iterator[TissueBox]:
        """
        Read-modify-write cycle:

            with store.edit() as box:
                box.add("Implement Foo")

        Nothing is written if the block raises.
        """
        box = self.load()
        yield box
        self.save(box)
