"""Input files of a pdftk command, each referenced by a handle."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Optional, Protocol, Union, runtime_checkable

from .exceptions import ContractViolationError, DependencyError
from .handles import HandleAllocator, validate_handle
from .options import MASK

LOGGER = logging.getLogger("pdftkx.registry")


@runtime_checkable
class Realizable(Protocol):
    """Anything that can be executed to produce a PDF file, i.e. a ``Pdf``."""

    @property
    def executed(self) -> bool: ...

    @property
    def succeeded(self) -> bool: ...

    @property
    def error(self) -> str: ...

    @property
    def output_path(self) -> Optional[Path]: ...

    def execute(self) -> bool: ...


Source = Union[str, os.PathLike, Realizable]


@dataclass(frozen=True)
class InputFile:
    path: str
    handle: str
    password: Optional[str] = None

    def to_arg(self) -> str:
        return f"{self.handle}={self.path}"


class FileRegistry:
    """Ordered mapping of handle to :class:`InputFile`.

    Documents passed as a source are executed first and kept referenced in
    :attr:`upstream`, so their temporary output outlives this registry.
    """

    def __init__(self) -> None:
        self._files: dict[str, InputFile] = {}
        self._allocator = HandleAllocator()
        self._upstream: list[Realizable] = []

    def _next_free_handle(self) -> str:
        handle = next(self._allocator)
        while handle in self._files:
            LOGGER.debug("Skipping handle %s, already used by the caller", handle)
            handle = next(self._allocator)
        return handle

    def _realize(self, document: Realizable) -> str:
        if not document.executed:
            LOGGER.debug("Executing upstream document %r", document)
            document.execute()
        path = document.output_path if document.succeeded else None
        if path is None:
            message = document.error or "no output file was produced"
            raise DependencyError(f"Input document failed: {message}")
        return str(path)

    def add(
        self,
        source: Source,
        handle: Optional[str] = None,
        password: Optional[str] = None,
    ) -> InputFile:
        if handle is not None:
            validate_handle(handle)
            if handle in self._files:
                raise ContractViolationError(f"Handle {handle!r} is already in use.")

        if isinstance(source, (str, os.PathLike)):
            path = os.fspath(source)
        elif isinstance(source, Realizable):
            path = self._realize(source)
            self._upstream.append(source)
        else:
            raise ContractViolationError(
                f"Unsupported input {source!r}: expected a path or a Pdf instance."
            )

        if handle is None:
            handle = self._next_free_handle()
        entry = InputFile(path=path, handle=handle, password=password)
        self._files[handle] = entry
        LOGGER.debug("Registered %s as handle %s", path, handle)
        return entry

    @property
    def upstream(self) -> tuple[Realizable, ...]:
        return tuple(self._upstream)

    @property
    def handles(self) -> list[str]:
        return list(self._files)

    @property
    def paths(self) -> list[str]:
        return [entry.path for entry in self._files.values()]

    def get(self, handle: str) -> Optional[InputFile]:
        return self._files.get(handle)

    def only_handle(self) -> str:
        """Return the handle of the single registered file."""

        if len(self._files) != 1:
            raise ContractViolationError(
                f"A handle is required when {len(self._files)} files are registered."
            )
        return next(iter(self._files))

    def __len__(self) -> int:
        return len(self._files)

    def __iter__(self) -> Iterator[InputFile]:
        return iter(list(self._files.values()))

    def __contains__(self, handle: object) -> bool:
        return handle in self._files

    def to_args(self) -> list[str]:
        return [entry.to_arg() for entry in self._files.values()]

    def password_args(self, mask: bool = False) -> list[str]:
        """Return ``input_pw H=pw ...`` for password protected inputs."""

        pairs = [
            f"{entry.handle}={MASK if mask else entry.password}"
            for entry in self._files.values()
            if entry.password
        ]
        return ["input_pw", *pairs] if pairs else []


__all__ = ["FileRegistry", "InputFile", "Realizable", "Source"]
