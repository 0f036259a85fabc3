"""The chainable :class:`Pdf` object wrapping a pdftk command."""

from __future__ import annotations

import enum
import logging
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, BinaryIO, Iterable, Mapping, Optional, Union

from .command import Command
from .config import PdftkConfig
from .exceptions import (
    ContractViolationError,
    DependencyError,
    ExecutionError,
    PdftkError,
    PdftkIOError,
)
from .operations import OperationKind
from .options import normalize_permissions
from .ranges import PageRef, Qualifier, Rotation, build_page_ranges
from .registry import Source
from .tmpfile import CHUNK_SIZE, TempFile, copy_file, iter_file_chunks
from .utils import PathLike
from .xfdf import XfdfFile

LOGGER = logging.getLogger("pdftkx.document")

DEFAULT_BURST_PATTERN = "pg_%04d.pdf"


class OutputMode(enum.Enum):
    AUTO = "auto"
    EXPLICIT = "explicit"
    SUPPRESSED = "suppressed"


@dataclass(frozen=True)
class OutputTarget:
    """Where pdftk writes its result.

    ``AUTO`` uses a temporary file owned by the document, ``EXPLICIT`` a
    caller supplied path (or ``burst`` pattern) and ``SUPPRESSED`` adds no
    ``output`` argument at all.
    """

    mode: OutputMode = OutputMode.AUTO
    path: Optional[str] = None

    @classmethod
    def explicit(cls, path: PathLike) -> "OutputTarget":
        return cls(OutputMode.EXPLICIT, os.fspath(path))

    @classmethod
    def suppressed(cls) -> "OutputTarget":
        return cls(OutputMode.SUPPRESSED)


class ExecutionState(enum.Enum):
    NOT_STARTED = "not_started"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


PdfSource = Union[Source, Mapping[str, Any], None]


class Pdf:
    """Wrapper around pdftk.

    Configuration methods return the instance for chaining; nothing runs
    until :meth:`execute`, :meth:`save_as`, :meth:`send` or one of the
    immediate operations (:meth:`burst`, :meth:`generate_fdf_file`,
    :meth:`get_data`, :meth:`get_data_fields`) is called.

    Example::

        pdf = Pdf({"A": "file1.pdf", "B": "file2.pdf"})
        pdf.cat([1, 3], handle="B") \\
           .cat(1, 5, "A", "odd") \\
           .cat("end", 5, "B") \\
           .cat(handle="B", rotation="east") \\
           .save_as("out.pdf")

    pdftk versions before 2.0 need ``legacy_rotation=True`` to render
    rotations as single letters.
    """

    content_type = "application/pdf"

    def __init__(
        self,
        source: PdfSource = None,
        *,
        config: Optional[PdftkConfig] = None,
        **overrides: Any,
    ) -> None:
        """
        Args:
            source: A filename, another :class:`Pdf`, or a mapping of handle to
                filename/``Pdf``/``(filename, password)``.
            config: Base configuration, read from the environment if omitted.
            **overrides: Individual :class:`PdftkConfig` fields, e.g. ``binary``.
        """

        base = config if config is not None else PdftkConfig.from_env()
        self.config = base.with_updates(**overrides)
        self.ignore_warnings = self.config.ignore_warnings

        self._command: Optional[Command] = None
        self._tmp_file: Optional[TempFile] = None
        self._form_data: Optional[XfdfFile] = None
        self._output = OutputTarget()
        self._dumps: dict[OperationKind, str] = {}
        self._error = ""
        self._failure: Optional[PdftkError] = None

        if isinstance(source, Mapping):
            for handle, item in source.items():
                if isinstance(item, (tuple, list)):
                    self.add_file(item[0], handle, item[1])
                else:
                    self.add_file(item, handle)
        elif source is not None:
            self.add_file(source)

    # Internals

    def _new_command(self, **kwargs: Any) -> Command:
        return Command(
            self.config.binary,
            legacy_rotation=self.config.legacy_rotation,
            env=self.config.env,
            cwd=self.config.cwd,
            **kwargs,
        )

    def _constrain_single_file(self) -> None:
        if len(self.command.registry) > 1:
            raise ContractViolationError("This operation can only process single files")

    def _resolve_output(self, target: Optional[OutputTarget] = None) -> Optional[str]:
        target = target if target is not None else self._output
        if target.mode is OutputMode.SUPPRESSED:
            return None
        if target.mode is OutputMode.EXPLICIT:
            return target.path
        return str(self.tmp_file)

    def _fail(self, failure: PdftkError) -> None:
        self._error = failure.message
        self._failure = failure

    def _ensure_executed(self) -> bool:
        if not self.command.executed:
            return self.execute()
        return self.command.succeeded

    def _dump(self, kind: OperationKind) -> Optional[str]:
        if kind in self._dumps:
            return self._dumps[kind]
        command = self._new_command(registry=self.command.registry)
        command.operation.select(kind)
        if not command.execute(self._resolve_output(OutputTarget.suppressed())):
            self._fail(ExecutionError(command.error, command.returncode))
            return None
        self._dumps[kind] = command.stdout.strip()
        return self._dumps[kind]

    def _select(
        self,
        kind: OperationKind,
        argument: Optional[PathLike] = None,
        argument_is_file: bool = False,
    ) -> "Pdf":
        self.command.operation.select(
            kind,
            None if argument is None else os.fspath(argument),
            argument_is_file,
        )
        return self

    # Accessors

    @property
    def command(self) -> Command:
        """The command instance that executes pdftk."""

        if self._command is None:
            self._command = self._new_command()
        return self._command

    @property
    def tmp_file(self) -> TempFile:
        """The temporary output file, created on first access."""

        if self._tmp_file is None:
            self._tmp_file = TempFile(
                suffix=".pdf",
                prefix=self.config.tmp_prefix,
                directory=self.config.tmp_dir,
            )
        return self._tmp_file

    @property
    def output_target(self) -> OutputTarget:
        return self._output

    @property
    def output_path(self) -> Optional[Path]:
        """Path of the produced file, or ``None`` if there is none."""

        if self._output.mode is OutputMode.SUPPRESSED:
            return None
        if self._output.mode is OutputMode.EXPLICIT:
            return Path(self._output.path)
        return self._tmp_file.path if self._tmp_file is not None else None

    @property
    def executed(self) -> bool:
        return self._command is not None and self._command.executed

    @property
    def succeeded(self) -> bool:
        return self._command is not None and self._command.succeeded

    @property
    def state(self) -> ExecutionState:
        if not self.executed:
            return ExecutionState.NOT_STARTED
        return ExecutionState.SUCCEEDED if self.succeeded else ExecutionState.FAILED

    @property
    def error(self) -> str:
        """The last error message or an empty string if none."""

        return self._error

    def raise_for_error(self) -> None:
        """Raise the exception for the last failed execution, copy or dump."""

        if self._failure is not None:
            raise self._failure

    # Input files

    def add_file(
        self,
        source: Source,
        handle: Optional[str] = None,
        password: Optional[str] = None,
    ) -> "Pdf":
        """Add a PDF filename or :class:`Pdf` instance for processing.

        Args:
            source: The filename or :class:`Pdf`. A :class:`Pdf` is executed
                first and kept referenced until this instance is discarded.
            handle: One or more uppercase letters to reference the file in
                page ranges. Generated (A, B, ... Z, AA, ...) if omitted.
            password: The owner or user password of the input file, if any.
        """

        try:
            self.command.registry.add(source, handle, password)
        except DependencyError as exc:
            self._fail(exc)
            raise
        return self

    # Operations

    def cat(
        self,
        start: Union[PageRef, Iterable[Union[int, str]]] = None,
        end: PageRef = None,
        handle: Optional[str] = None,
        qualifier: Union[Qualifier, str, None] = None,
        rotation: Union[Rotation, str, None] = None,
    ) -> "Pdf":
        """Assemble (catenate) pages from the input files.

        Rotation values are, in degrees: north 0, east 90, south 180, west 270,
        left -90, right +90, down +180. left, right and down make relative
        adjustments to a page's rotation.

        Args:
            start: The start page, ``"end"``, or a list of page numbers. If a
                list, *end* is ignored. *start* can be bigger than *end* for
                pages in reverse order.
            end: The end page or ``None`` for a single page.
            handle: The handle of the file to use. Can be ``None`` if only a
                single file was added.
            qualifier: ``"odd"``, ``"even"`` or ``None``.
            rotation: The rotation to apply to the pages.

        Calling ``cat()`` without arguments concatenates all input files.
        """

        self._select(OperationKind.CAT)
        if any(value is not None for value in (start, end, handle, qualifier, rotation)):
            self.command.add_page_ranges(build_page_ranges(start, end, handle, qualifier, rotation))
        return self

    def shuffle(
        self,
        start: Union[PageRef, Iterable[Union[int, str]]] = None,
        end: PageRef = None,
        handle: Optional[str] = None,
        qualifier: Union[Qualifier, str, None] = None,
        rotation: Union[Rotation, str, None] = None,
    ) -> "Pdf":
        """Shuffle pages from the input files.

        Works like :meth:`cat`, but each call creates a "stream" of pages. The
        output is assembled by taking one page from each stream at a time::

            pdf.shuffle([1, 3, 2], handle="A").shuffle([4, 5, 9], handle="A")

        gives the page order 1, 4, 3, 5, 2, 9.
        """

        self._select(OperationKind.SHUFFLE)
        if any(value is not None for value in (start, end, handle, qualifier, rotation)):
            self.command.add_page_ranges(build_page_ranges(start, end, handle, qualifier, rotation))
        return self

    def burst(self, pattern: Optional[str] = None) -> bool:
        """Split the PDF into single pages named after *pattern*.

        Args:
            pattern: Output names in printf format, ``pg_%04d.pdf`` by default.
        """

        self._constrain_single_file()
        self._select(OperationKind.BURST)
        self._output = OutputTarget.explicit(pattern or DEFAULT_BURST_PATTERN)
        return self.execute()

    def generate_fdf_file(self, path: PathLike) -> bool:
        """Write the FDF form data of a single PDF file to *path*."""

        self._constrain_single_file()
        self._select(OperationKind.GENERATE_FDF)
        self._output = OutputTarget.explicit(path)
        return self.execute()

    def fill_form(
        self,
        data: Union[PathLike, Mapping[str, Any]],
        encoding: str = "UTF-8",
        drop_xfa: bool = True,
    ) -> "Pdf":
        """Fill a PDF form.

        Args:
            data: An FDF/XFDF filename or a mapping of field name to value.
            encoding: The encoding used when *data* is a mapping.
            drop_xfa: Whether to drop XFA forms, see :meth:`drop_xfa`.
        """

        self._constrain_single_file()
        if isinstance(data, Mapping):
            if self._form_data is not None:
                self._form_data.delete()
            self._form_data = XfdfFile(
                data,
                encoding,
                prefix=self.config.tmp_prefix,
                directory=self.config.tmp_dir,
            )
            data = self._form_data.path
        self._select(OperationKind.FILL_FORM, data, True)
        if drop_xfa:
            self.drop_xfa()
        return self

    def background(self, path: PathLike) -> "Pdf":
        """Use the first page of *path* as background of a single PDF file.

        The input PDF needs a transparent background for it to be visible.
        """

        self._constrain_single_file()
        return self._select(OperationKind.BACKGROUND, path, True)

    def multi_background(self, path: PathLike) -> "Pdf":
        """Apply each page of *path* as background of the matching page.

        If *path* has fewer pages, its last page is repeated.
        """

        return self._select(OperationKind.MULTIBACKGROUND, path, True)

    def stamp(self, path: PathLike) -> "Pdf":
        """Add the first page of *path* as overlay to a single PDF file."""

        self._constrain_single_file()
        return self._select(OperationKind.STAMP, path, True)

    def multi_stamp(self, path: PathLike) -> "Pdf":
        """Overlay each page of *path* on the matching page of the input."""

        return self._select(OperationKind.MULTISTAMP, path, True)

    def get_data(self, utf8: bool = True) -> Optional[str]:
        """Return the metadata dump of the PDF, or ``None`` on failure."""

        return self._dump(OperationKind.DUMP_DATA_UTF8 if utf8 else OperationKind.DUMP_DATA)

    def get_data_fields(self, utf8: bool = True) -> Optional[str]:
        """Return the form field dump of the PDF, or ``None`` on failure."""

        return self._dump(
            OperationKind.DUMP_DATA_FIELDS_UTF8 if utf8 else OperationKind.DUMP_DATA_FIELDS
        )

    # Output options

    def allow(self, permissions: Union[str, Iterable[str], None] = None) -> "Pdf":
        """Set the permissions of the output PDF.

        Available permissions are Printing, DegradedPrinting, ModifyContents,
        Assembly, CopyContents, ScreenReaders, ModifyAnnotations, FillIn and
        AllFeatures. ``None`` allows nothing.
        """

        self.command.options.add("allow", normalize_permissions(permissions))
        return self

    def flatten(self) -> "Pdf":
        """Merge the form field values into the page content."""

        self.command.options.add("flatten")
        return self

    def compress(self, compress: bool = True) -> "Pdf":
        """Restore (default) or remove page stream compression."""

        name, other = ("compress", "uncompress") if compress else ("uncompress", "compress")
        self.command.options.discard(other).add(name)
        return self

    def keep_id(self, which: str = "first") -> "Pdf":
        """Keep the document ID of the first or last input instead of a new one."""

        if which not in ("first", "last"):
            raise ContractViolationError(f"keep_id expects 'first' or 'last', got {which!r}")
        name, other = ("keep_first_id", "keep_final_id") if which == "first" else ("keep_final_id", "keep_first_id")
        self.command.options.discard(other).add(name)
        return self

    def need_appearances(self) -> "Pdf":
        """Let the PDF reader render form field content.

        Use it when filling forms with non-ASCII values. It does not combine
        with :meth:`flatten`.
        """

        self.command.options.add("need_appearances")
        return self

    def drop_xfa(self) -> "Pdf":
        """Drop XFA form data so readers fall back to the AcroForm fields pdftk fills."""

        self.command.options.add("drop_xfa")
        return self

    def drop_xmp(self) -> "Pdf":
        """Drop XMP metadata so readers use the info dictionary pdftk updates."""

        self.command.options.add("drop_xmp")
        return self

    def set_password(self, password: str) -> "Pdf":
        """Set the owner password of the output PDF."""

        self.command.options.add("owner_pw", password, sensitive=True)
        return self

    def set_user_password(self, password: str) -> "Pdf":
        """Set the user password of the output PDF."""

        self.command.options.add("user_pw", password, sensitive=True)
        return self

    def password_encryption(self, strength: int = 128) -> "Pdf":
        """Choose 128 bit (default) or 40 bit encryption."""

        if strength not in (40, 128):
            raise ContractViolationError(f"Encryption strength must be 40 or 128, got {strength}")
        name, other = ("encrypt_128bit", "encrypt_40bit") if strength == 128 else ("encrypt_40bit", "encrypt_128bit")
        self.command.options.discard(other).add(name)
        return self

    # Execution and results

    def execute(self) -> bool:
        """Run pdftk, writing to the temporary file or the explicit output.

        You only need to call this directly if the temporary file is all you
        need. Returns ``False`` on failure and when called a second time.
        A dump selected as main operation writes to stdout only, so no
        output file is requested for it.
        """

        command = self.command
        if command.executed:
            LOGGER.warning("Pdf was already executed; not running pdftk again")
            return False

        # Errors of earlier dumps do not belong to this run.
        self._error = ""
        self._failure = None
        if command.operation.kind is not None and command.operation.kind.is_dump:
            self._output = OutputTarget.suppressed()
        output = self._resolve_output()
        success = command.execute(output, ignore_warnings=self.ignore_warnings)
        if command.error:
            self._error = command.error
        if not success:
            self._failure = ExecutionError(command.error, command.returncode)
        return success

    def save_as(self, path: PathLike) -> bool:
        """Execute if needed and copy the result to *path*."""

        if not self._ensure_executed():
            return False
        source = self.output_path
        if source is None:
            self._fail(PdftkIOError("There is no output file to save"))
            return False
        try:
            copy_file(source, path)
        except PdftkIOError as exc:
            self._fail(exc)
            return False
        LOGGER.info("Saved %s to %s", source, path)
        return True

    def headers(self, filename: Optional[str] = None, inline: bool = False) -> dict[str, str]:
        """HTTP headers for delivering the output to a client."""

        headers = {"Content-Type": self.content_type}
        if filename and not inline:
            headers["Content-Disposition"] = f'attachment; filename="{filename}"'
        elif filename:
            headers["Content-Disposition"] = f'inline; filename="{filename}"'
        else:
            headers["Content-Disposition"] = "inline"
        source = self.output_path
        if source is not None and source.is_file():
            headers["Content-Length"] = str(source.stat().st_size)
        return headers

    def send(self, stream: Optional[BinaryIO] = None, chunk_size: int = CHUNK_SIZE) -> bool:
        """Execute if needed and write the output bytes to *stream*.

        *stream* defaults to ``sys.stdout.buffer``. Pair with :meth:`headers`
        when the stream is an HTTP response body.
        """

        if not self._ensure_executed():
            return False
        source = self.output_path
        if source is None:
            self._fail(PdftkIOError("There is no output file to send"))
            return False
        target = stream if stream is not None else sys.stdout.buffer
        try:
            for chunk in iter_file_chunks(source, chunk_size):
                target.write(chunk)
        except PdftkIOError as exc:
            self._fail(exc)
            return False
        return True

    def to_bytes(self) -> bytes:
        """Execute if needed and return the output content.

        Raises:
            ExecutionError: If pdftk failed.
            PdftkIOError: If the output cannot be read.
        """

        if not self._ensure_executed():
            self.raise_for_error()
            raise ExecutionError(self._error)
        source = self.output_path
        if source is None:
            raise PdftkIOError("There is no output file to read")
        return b"".join(iter_file_chunks(source))

    # Lifetime

    def close(self) -> None:
        """Remove the temporary files owned by this instance."""

        if self._tmp_file is not None:
            self._tmp_file.delete()
        if self._form_data is not None:
            self._form_data.delete()

    def __enter__(self) -> "Pdf":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def __repr__(self) -> str:
        operation = self._command.operation.kind.value if self._command and self._command.operation.kind else None
        files = len(self._command.registry) if self._command else 0
        return f"Pdf(files={files}, operation={operation!r}, state={self.state.value!r})"


__all__ = ["DEFAULT_BURST_PATTERN", "ExecutionState", "OutputMode", "OutputTarget", "Pdf"]
