"""Assemble and run a single pdftk command line."""

from __future__ import annotations

import logging
import re
import shlex
from dataclasses import dataclass, field
from typing import Mapping, Optional, Sequence

from .exceptions import ContractViolationError
from .operations import OperationKind, OperationSelector, check_file_count
from .options import Option, OptionSet, parse_options
from .ranges import PageRange, parse_page_range
from .registry import FileRegistry
from .utils import PathLike, file_has_content, run_subprocess

LOGGER = logging.getLogger("pdftkx.command")

_HANDLE_TOKEN_RE = re.compile(r"^(?P<handle>[A-Z]+)=(?P<value>.*)$", re.DOTALL)


class Command:
    """A pdftk invocation built from files, an operation, ranges and options.

    The argument vector has the form::

        pdftk A=a.pdf B=b.pdf [input_pw A=pw] <operation> [<argument>]
              [<ranges>] [output <file>] [<options>]

    A command runs at most once. Passwords only appear in :meth:`build_args`;
    :meth:`display_args` and the log output show them masked.
    """

    def __init__(
        self,
        binary: str = "pdftk",
        *,
        legacy_rotation: bool = False,
        env: Optional[Mapping[str, str]] = None,
        cwd: Optional[PathLike] = None,
        registry: Optional[FileRegistry] = None,
        options: Optional[OptionSet] = None,
    ) -> None:
        self.binary = binary
        self.legacy_rotation = legacy_rotation
        self.env = env
        self.cwd = cwd
        self.registry = registry if registry is not None else FileRegistry()
        self.options = options if options is not None else OptionSet()
        self.operation = OperationSelector()
        self.ranges: list[PageRange] = []

        self._executed = False
        self._succeeded = False
        self._returncode: Optional[int] = None
        self._stdout = ""
        self._stderr = ""
        self._error = ""

    # Configuration

    def add_page_ranges(self, ranges: Sequence[PageRange]) -> "Command":
        self.ranges.extend(ranges)
        return self

    # Assembly

    def _resolve_ranges(self) -> list[PageRange]:
        resolved: list[PageRange] = []
        for page_range in self.ranges:
            if page_range.handle is None:
                page_range = page_range.with_handle(self.registry.only_handle())
            elif page_range.handle not in self.registry:
                raise ContractViolationError(
                    f"Page range {page_range.token()!r} refers to unknown handle {page_range.handle!r}."
                )
            resolved.append(page_range)
        return resolved

    def _assemble(self, output: Optional[PathLike], mask: bool) -> list[str]:
        operation = self.operation.current
        if operation is None:
            raise ContractViolationError("No pdftk operation has been selected.")
        check_file_count(operation.kind, len(self.registry))
        if self.ranges and not operation.kind.accepts_ranges:
            raise ContractViolationError(
                f"Page ranges cannot be used with the '{operation.kind.value}' operation."
            )

        args = [self.binary, *self.registry.to_args(), *self.registry.password_args(mask=mask)]
        args.extend(operation.to_args())
        args.extend(r.token(self.legacy_rotation) for r in self._resolve_ranges())
        if output is not None:
            args.extend(["output", str(output)])
        args.extend(self.options.to_display_args() if mask else self.options.to_args())
        return args

    def build_args(self, output: Optional[PathLike] = None) -> list[str]:
        """Return the argument vector passed to the process."""

        return self._assemble(output, mask=False)

    def display_args(self, output: Optional[PathLike] = None) -> list[str]:
        """Return the argument vector with every password replaced by a mask."""

        return self._assemble(output, mask=True)

    def display(self, output: Optional[PathLike] = None) -> str:
        return shlex.join(self.display_args(output))

    # Execution

    @property
    def executed(self) -> bool:
        return self._executed

    @property
    def succeeded(self) -> bool:
        return self._succeeded

    @property
    def returncode(self) -> Optional[int]:
        return self._returncode

    @property
    def stdout(self) -> str:
        return self._stdout

    @property
    def stderr(self) -> str:
        return self._stderr

    @property
    def error(self) -> str:
        return self._error

    def execute(self, output: Optional[PathLike] = None, *, ignore_warnings: bool = False) -> bool:
        """Run the command once and return whether it succeeded.

        A non-zero exit still counts as success when *ignore_warnings* is set
        and a non-empty file exists at *output*. Calling this method again
        returns ``False`` without running pdftk.
        """

        if self._executed:
            LOGGER.warning("Command was already executed: %s", self.display(output))
            return False

        args = self.build_args(output)
        display = self.display(output)
        self._executed = True

        try:
            completed = run_subprocess(args, env=self.env, cwd=self.cwd, display=display)
        except OSError as exc:
            self._error = f"Could not run {self.binary}: {exc}"
            LOGGER.error(self._error)
            return False

        self._returncode = completed.returncode
        self._stdout = completed.stdout or ""
        self._stderr = completed.stderr or ""

        if completed.returncode == 0:
            self._succeeded = True
            return True

        self._error = (
            self._stderr.strip()
            or self._stdout.strip()
            or f"{self.binary} exited with code {completed.returncode}"
        )
        if ignore_warnings and output is not None and file_has_content(output):
            LOGGER.warning(
                "pdftk exited with code %s but produced %s; ignoring: %s",
                completed.returncode,
                output,
                self._error,
            )
            self._succeeded = True
            return True

        LOGGER.error("pdftk failed with code %s: %s", completed.returncode, self._error)
        return False

    def __repr__(self) -> str:
        operation = self.operation.kind.value if self.operation.kind else None
        return f"Command(binary={self.binary!r}, files={len(self.registry)}, operation={operation!r})"


@dataclass
class ParsedCommand:
    """The configuration recovered from an assembled argument vector."""

    binary: str
    files: list[tuple[str, str]] = field(default_factory=list)
    password_handles: list[str] = field(default_factory=list)
    operation: Optional[OperationKind] = None
    argument: Optional[str] = None
    ranges: list[PageRange] = field(default_factory=list)
    output: Optional[str] = None
    options: list[Option] = field(default_factory=list)


def _split_handle_token(token: str) -> Optional[tuple[str, str]]:
    match = _HANDLE_TOKEN_RE.match(token)
    if match is None:
        return None
    return match.group("handle"), match.group("value")


def parse_args(argv: Sequence[str]) -> ParsedCommand:
    """Recover files, operation, ranges, output and options from *argv*.

    Works on both :meth:`Command.build_args` and :meth:`Command.display_args`
    output; masked passwords stay masked.
    """

    if not argv:
        raise ContractViolationError("Empty command line.")
    tokens = list(argv)
    parsed = ParsedCommand(binary=tokens[0])
    index = 1

    while index < len(tokens):
        pair = _split_handle_token(tokens[index])
        if pair is None:
            break
        parsed.files.append(pair)
        index += 1

    if index < len(tokens) and tokens[index] == "input_pw":
        index += 1
        while index < len(tokens):
            pair = _split_handle_token(tokens[index])
            if pair is None:
                break
            parsed.password_handles.append(pair[0])
            index += 1

    if index >= len(tokens):
        raise ContractViolationError("Command line has no operation.")
    try:
        parsed.operation = OperationKind(tokens[index])
    except ValueError as exc:
        raise ContractViolationError(f"Unknown pdftk operation {tokens[index]!r}.") from exc
    index += 1

    if parsed.operation.takes_argument:
        if index >= len(tokens):
            raise ContractViolationError(f"Operation {parsed.operation.value!r} needs an argument.")
        parsed.argument = tokens[index]
        index += 1

    if parsed.operation.accepts_ranges:
        while index < len(tokens) and tokens[index] != "output":
            parsed.ranges.append(parse_page_range(tokens[index]))
            index += 1

    if index < len(tokens) and tokens[index] == "output":
        if index + 1 >= len(tokens):
            raise ContractViolationError("'output' is missing its file name.")
        parsed.output = tokens[index + 1]
        index += 2

    parsed.options = parse_options(tokens[index:])
    return parsed


__all__ = ["Command", "ParsedCommand", "parse_args"]
