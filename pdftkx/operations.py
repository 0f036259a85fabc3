"""The single top-level pdftk operation of a command."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Optional

from .exceptions import ContractViolationError

LOGGER = logging.getLogger("pdftkx.operations")


class OperationKind(str, enum.Enum):
    CAT = "cat"
    SHUFFLE = "shuffle"
    BURST = "burst"
    FILL_FORM = "fill_form"
    BACKGROUND = "background"
    MULTIBACKGROUND = "multibackground"
    STAMP = "stamp"
    MULTISTAMP = "multistamp"
    GENERATE_FDF = "generate_fdf"
    DUMP_DATA = "dump_data"
    DUMP_DATA_UTF8 = "dump_data_utf8"
    DUMP_DATA_FIELDS = "dump_data_fields"
    DUMP_DATA_FIELDS_UTF8 = "dump_data_fields_utf8"

    @property
    def is_dump(self) -> bool:
        return self in _DUMPS

    @property
    def requires_single_file(self) -> bool:
        return self in _SINGLE_FILE

    @property
    def accepts_ranges(self) -> bool:
        return self in (OperationKind.CAT, OperationKind.SHUFFLE)

    @property
    def takes_argument(self) -> bool:
        return self in _WITH_ARGUMENT


_DUMPS = frozenset(
    {
        OperationKind.DUMP_DATA,
        OperationKind.DUMP_DATA_UTF8,
        OperationKind.DUMP_DATA_FIELDS,
        OperationKind.DUMP_DATA_FIELDS_UTF8,
    }
)

_WITH_ARGUMENT = frozenset(
    {
        OperationKind.FILL_FORM,
        OperationKind.BACKGROUND,
        OperationKind.MULTIBACKGROUND,
        OperationKind.STAMP,
        OperationKind.MULTISTAMP,
    }
)

_SINGLE_FILE = _DUMPS | {
    OperationKind.BURST,
    OperationKind.GENERATE_FDF,
    OperationKind.FILL_FORM,
    OperationKind.BACKGROUND,
    OperationKind.STAMP,
}


@dataclass(frozen=True)
class Operation:
    kind: OperationKind
    argument: Optional[str] = None
    argument_is_file: bool = False

    def to_args(self) -> list[str]:
        if self.argument is None:
            return [self.kind.value]
        return [self.kind.value, self.argument]


def check_file_count(kind: OperationKind, file_count: int) -> None:
    """Raise if *kind* only works on one input file and *file_count* differs."""

    if kind.requires_single_file and file_count != 1:
        raise ContractViolationError(
            f"The '{kind.value}' operation requires a single file, got {file_count}."
        )


class OperationSelector:
    """Holds the active operation. Selecting another one replaces it."""

    def __init__(self) -> None:
        self._operation: Optional[Operation] = None

    @property
    def current(self) -> Optional[Operation]:
        return self._operation

    @property
    def kind(self) -> Optional[OperationKind]:
        return self._operation.kind if self._operation else None

    def select(
        self,
        kind: OperationKind | str,
        argument: Optional[str] = None,
        argument_is_file: bool = False,
    ) -> Operation:
        kind = OperationKind(kind)
        if self._operation is not None and self._operation.kind is not kind:
            LOGGER.debug("Replacing operation %s with %s", self._operation.kind.value, kind.value)
        self._operation = Operation(
            kind,
            None if argument is None else str(argument),
            argument_is_file,
        )
        return self._operation


__all__ = ["Operation", "OperationKind", "OperationSelector", "check_file_count"]
