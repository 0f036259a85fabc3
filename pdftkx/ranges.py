"""Page range tokens for the ``cat`` and ``shuffle`` operations.

A token has the form ``[handle][start[-end]][qualifier][rotation]``, for
example ``A1-5``, ``Bend-1odd`` or ``C3east``. Rotation values are, in
degrees: north 0, east 90, south 180, west 270, and the relative adjustments
left -90, right +90, down +180. pdftk versions before 2.0 expect the single
letters ``N E S W L R D`` instead of the words.
"""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass, replace
from typing import Iterable, Optional, Union

from .exceptions import ContractViolationError
from .handles import validate_handle

PageRef = Union[int, str, None]

END = "end"


class Rotation(enum.Enum):
    """Page rotation with its modern and legacy pdftk spelling."""

    NORTH = ("north", "N", 0, False)
    EAST = ("east", "E", 90, False)
    SOUTH = ("south", "S", 180, False)
    WEST = ("west", "W", 270, False)
    LEFT = ("left", "L", -90, True)
    RIGHT = ("right", "R", 90, True)
    DOWN = ("down", "D", 180, True)

    def __init__(self, word: str, letter: str, degrees: int, relative: bool) -> None:
        self.word = word
        self.letter = letter
        self.degrees = degrees
        self.relative = relative

    def token(self, legacy: bool = False) -> str:
        return self.letter if legacy else self.word

    @classmethod
    def coerce(cls, value: Union["Rotation", str, None]) -> Optional["Rotation"]:
        """Return the :class:`Rotation` for a word, a legacy letter or a member."""

        if value is None or isinstance(value, Rotation):
            return value
        if isinstance(value, str):
            for member in cls:
                if value.lower() == member.word or value == member.letter:
                    return member
        raise ContractViolationError(
            f"Invalid rotation {value!r}: expected one of "
            + ", ".join(member.word for member in cls)
        )


class Qualifier(str, enum.Enum):
    ODD = "odd"
    EVEN = "even"

    @classmethod
    def coerce(cls, value: Union["Qualifier", str, None]) -> Optional["Qualifier"]:
        if value is None or isinstance(value, Qualifier):
            return value
        if isinstance(value, str):
            try:
                return cls(value.lower())
            except ValueError:
                pass
        raise ContractViolationError(
            f"Invalid page qualifier {value!r}: expected 'odd', 'even' or None."
        )


_REVERSE_RE = re.compile(r"^r[1-9][0-9]*$")


def _coerce_page(value: PageRef) -> PageRef:
    if value is None:
        return None
    if isinstance(value, bool):
        raise ContractViolationError(f"Invalid page number {value!r}.")
    if isinstance(value, int):
        if value < 1:
            raise ContractViolationError(f"Invalid page number {value}: pages start at 1.")
        return value
    if isinstance(value, str):
        text = value.strip()
        if text.isdigit():
            return _coerce_page(int(text))
        if text.lower() == END:
            return END
        if _REVERSE_RE.match(text):
            return text
    raise ContractViolationError(
        f"Invalid page reference {value!r}: expected a positive integer, 'end' or 'rN'."
    )


@dataclass(frozen=True)
class PageRange:
    """A single page selection taken from one input file."""

    start: PageRef = None
    end: PageRef = None
    handle: Optional[str] = None
    qualifier: Optional[Qualifier] = None
    rotation: Optional[Rotation] = None

    def __post_init__(self) -> None:
        if self.start is None and self.end is not None:
            raise ContractViolationError(
                f"Page range end {self.end!r} needs a start page."
            )

    @property
    def is_full_document(self) -> bool:
        return self.start is None and self.end is None

    def with_handle(self, handle: str) -> "PageRange":
        return replace(self, handle=handle)

    def token(self, legacy_rotation: bool = False) -> str:
        parts: list[str] = []
        if self.handle:
            parts.append(self.handle)
        if self.start is not None:
            parts.append(str(self.start))
            if self.end is not None:
                parts.append(f"-{self.end}")
        if self.qualifier is not None:
            parts.append(self.qualifier.value)
        if self.rotation is not None:
            parts.append(self.rotation.token(legacy_rotation))
        token = "".join(parts)
        if not token:
            raise ContractViolationError("A page range needs at least a handle or a page number.")
        return token

    def __str__(self) -> str:
        return self.token()


def build_page_ranges(
    start: Union[PageRef, Iterable[Union[int, str]]] = None,
    end: PageRef = None,
    handle: Optional[str] = None,
    qualifier: Union[Qualifier, str, None] = None,
    rotation: Union[Rotation, str, None] = None,
) -> list[PageRange]:
    """Turn page selection arguments into :class:`PageRange` objects.

    If *start* is a list or tuple, every page in it becomes its own range and
    *end* is ignored. A *start* greater than *end* selects the pages in
    reverse order. An *end* without a *start* is rejected.
    """

    if handle is not None:
        validate_handle(handle)
    qualifier_value = Qualifier.coerce(qualifier)
    rotation_value = Rotation.coerce(rotation)

    if isinstance(start, (list, tuple)):
        if not start:
            raise ContractViolationError("The list of pages must not be empty.")
        return [
            PageRange(
                start=_coerce_page(page),
                handle=handle,
                qualifier=qualifier_value,
                rotation=rotation_value,
            )
            for page in start
        ]

    return [
        PageRange(
            start=_coerce_page(start),
            end=_coerce_page(end),
            handle=handle,
            qualifier=qualifier_value,
            rotation=rotation_value,
        )
    ]


_PAGE = r"(?:[0-9]+|end|r[0-9]+)"
_TOKEN_RE = re.compile(
    rf"^(?P<handle>[A-Z]*)"
    rf"(?:(?P<start>{_PAGE})(?:-(?P<end>{_PAGE}))?)?"
    r"(?P<qualifier>odd|even)?"
    r"(?P<rotation>north|south|east|west|left|right|down|[NSEWLRD])?$"
)


def parse_page_range(token: str) -> PageRange:
    """Parse a pdftk page range token back into a :class:`PageRange`.

    A legacy rotation letter directly after a bare handle (``AE``) is read as
    part of the handle, the same way pdftk reads it.
    """

    match = _TOKEN_RE.match(token.strip()) if token else None
    if match is None or not token.strip():
        raise ContractViolationError(f"Invalid page range token {token!r}.")

    start = match.group("start")
    end = match.group("end")
    return PageRange(
        start=_coerce_page(start) if start is not None else None,
        end=_coerce_page(end) if end is not None else None,
        handle=match.group("handle") or None,
        qualifier=Qualifier.coerce(match.group("qualifier")),
        rotation=Rotation.coerce(match.group("rotation")),
    )


__all__ = [
    "END",
    "PageRange",
    "PageRef",
    "Qualifier",
    "Rotation",
    "build_page_ranges",
    "parse_page_range",
]
