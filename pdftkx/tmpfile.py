"""Temporary files owned by a single document."""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
import weakref
from pathlib import Path
from typing import Iterator, Optional

from .exceptions import PdftkIOError
from .utils import PathLike, ensure_parent_dir, ensure_path

LOGGER = logging.getLogger("pdftkx.tmpfile")

CHUNK_SIZE = 64 * 1024


def _remove(path: str) -> None:
    try:
        os.unlink(path)
    except FileNotFoundError:
        pass
    except OSError as exc:
        LOGGER.warning("Failed to remove temporary file %s: %s", path, exc)


def copy_file(source: PathLike, destination: PathLike) -> Path:
    """Copy *source* to *destination*, creating parent directories."""

    target = ensure_path(destination)
    try:
        ensure_parent_dir(target)
        shutil.copyfile(source, target)
    except OSError as exc:
        LOGGER.error("Failed to copy %s to %s: %s", source, target, exc)
        raise PdftkIOError(
            f"Could not copy PDF from '{source}' to '{target}'"
        ) from exc
    return target


def iter_file_chunks(path: PathLike, chunk_size: int = CHUNK_SIZE) -> Iterator[bytes]:
    try:
        with open(path, "rb") as handle:
            while True:
                chunk = handle.read(chunk_size)
                if not chunk:
                    break
                yield chunk
    except OSError as exc:
        LOGGER.error("Failed to read %s: %s", path, exc)
        raise PdftkIOError(f"Could not read file '{path}'") from exc


class TempFile:
    """A named temporary file that is removed when its owner releases it.

    The file is created empty on construction so its name is reserved.
    :meth:`delete` removes it; otherwise it is removed when the object is
    garbage collected.
    """

    def __init__(
        self,
        suffix: str = ".pdf",
        prefix: str = "tmp_pdftkx_",
        directory: Optional[PathLike] = None,
        content: Optional[bytes] = None,
    ) -> None:
        fd, name = tempfile.mkstemp(
            suffix=suffix,
            prefix=prefix,
            dir=str(directory) if directory is not None else None,
        )
        with os.fdopen(fd, "wb") as handle:
            if content:
                handle.write(content)
        self._path = Path(name)
        self._finalizer = weakref.finalize(self, _remove, name)
        LOGGER.debug("Created temporary file %s", name)

    @property
    def path(self) -> Path:
        return self._path

    @property
    def deleted(self) -> bool:
        return not self._finalizer.alive

    def __fspath__(self) -> str:
        return str(self._path)

    def __str__(self) -> str:
        return str(self._path)

    def __repr__(self) -> str:
        return f"TempFile({str(self._path)!r})"

    def read_bytes(self) -> bytes:
        return b"".join(iter_file_chunks(self._path))

    def delete(self) -> None:
        self._finalizer()

    def __enter__(self) -> "TempFile":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.delete()


__all__ = ["CHUNK_SIZE", "TempFile", "copy_file", "iter_file_chunks"]
