from __future__ import annotations

import string
from itertools import islice

import pytest

from pdftkx.exceptions import ContractViolationError
from pdftkx.handles import HandleAllocator, handle_for_index, validate_handle


def test_allocator_yields_spreadsheet_sequence() -> None:
    allocator = HandleAllocator()

    handles = [next(allocator) for _ in range(28)]

    assert handles == list(string.ascii_uppercase) + ["AA", "AB"]
    assert allocator.counter == 28


@pytest.mark.parametrize(
    ("index", "expected"),
    [(0, "A"), (25, "Z"), (26, "AA"), (27, "AB"), (51, "AZ"), (52, "BA"), (701, "ZZ"), (702, "AAA")],
)
def test_handle_for_index(index: int, expected: str) -> None:
    assert handle_for_index(index) == expected


def test_handle_for_index_rejects_negative() -> None:
    with pytest.raises(ValueError):
        handle_for_index(-1)


def test_allocator_is_iterable() -> None:
    assert list(islice(HandleAllocator(), 3)) == ["A", "B", "C"]


@pytest.mark.parametrize("handle", ["A", "ZZ", "ABC"])
def test_validate_handle_accepts_uppercase(handle: str) -> None:
    assert validate_handle(handle) == handle


@pytest.mark.parametrize("handle", ["", "a", "A1", "Ä", "A B", None])
def test_validate_handle_rejects_invalid(handle) -> None:
    with pytest.raises(ContractViolationError):
        validate_handle(handle)
