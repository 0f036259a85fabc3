"""Input file handles: ``A``, ``B``, ... ``Z``, ``AA``, ``AB``, ..."""

from __future__ import annotations

import re
import string

from .exceptions import ContractViolationError

_HANDLE_RE = re.compile(r"^[A-Z]+$")
_ALPHABET = string.ascii_uppercase


def handle_for_index(index: int) -> str:
    """Return the handle at position *index* of the handle sequence.

    The sequence is a bijective base-26 numbering like spreadsheet columns:
    ``0 -> "A"``, ``25 -> "Z"``, ``26 -> "AA"``, ``701 -> "ZZ"``,
    ``702 -> "AAA"``.
    """

    if index < 0:
        raise ValueError(f"Handle index must be >= 0, got {index}")

    letters: list[str] = []
    number = index + 1
    while number > 0:
        number, remainder = divmod(number - 1, 26)
        letters.append(_ALPHABET[remainder])
    return "".join(reversed(letters))


def validate_handle(handle: str) -> str:
    """Return *handle* if it consists of uppercase letters only."""

    if not isinstance(handle, str) or not _HANDLE_RE.match(handle):
        raise ContractViolationError(
            f"Invalid handle {handle!r}: expected one or more uppercase letters A-Z."
        )
    return handle


class HandleAllocator:
    """Iterator producing the handle sequence, one handle per ``next()``.

    Multi-letter handles need pdftk 1.45 or later.
    """

    def __init__(self) -> None:
        self._counter = 0

    @property
    def counter(self) -> int:
        return self._counter

    def __iter__(self) -> "HandleAllocator":
        return self

    def __next__(self) -> str:
        handle = handle_for_index(self._counter)
        self._counter += 1
        return handle


__all__ = ["HandleAllocator", "handle_for_index", "validate_handle"]
