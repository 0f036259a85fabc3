from __future__ import annotations

import logging

import pytest

from pdftkx.exceptions import ContractViolationError
from pdftkx.options import MASK, Option, OptionSet, normalize_permissions, parse_options


def test_flag_and_value_options_render_in_insertion_order() -> None:
    options = OptionSet().add("flatten").add("owner_pw", "secret", sensitive=True).add("compress")

    assert options.to_args() == ["flatten", "owner_pw", "secret", "compress"]
    assert options.names() == ["flatten", "owner_pw", "compress"]
    assert len(options) == 3


def test_sensitive_values_are_masked_for_display() -> None:
    options = OptionSet().add("owner_pw", "secret", sensitive=True).add("user_pw", "userpw", sensitive=True)

    display = options.to_display_args()

    assert display == ["owner_pw", MASK, "user_pw", MASK]
    assert "secret" not in display
    assert "secret" in options.to_args()


def test_re_adding_replaces_value_in_place() -> None:
    options = OptionSet().add("owner_pw", "first").add("flatten").add("owner_pw", "second")

    assert options.to_args() == ["owner_pw", "second", "flatten"]


def test_discard_removes_options() -> None:
    options = OptionSet().add("compress").add("flatten").discard("compress", "uncompress")

    assert "compress" not in options
    assert "flatten" in options
    assert options.get("compress") is None


def test_allow_spreads_permissions_over_tokens() -> None:
    option = Option("allow", "Printing CopyContents")

    assert option.to_args() == ["allow", "Printing", "CopyContents"]


def test_flatten_with_need_appearances_logs_warning(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.WARNING, logger="pdftkx.options")

    OptionSet().add("flatten").add("need_appearances")

    assert "should not be combined" in caplog.text


@pytest.mark.parametrize(
    ("permissions", "expected"),
    [
        ("Printing", "Printing"),
        (["Printing", "FillIn"], "Printing FillIn"),
        ("Assembly  ScreenReaders", "Assembly ScreenReaders"),
        (None, None),
        ([], None),
    ],
)
def test_normalize_permissions(permissions, expected) -> None:
    assert normalize_permissions(permissions) == expected


def test_unknown_permission_is_reported() -> None:
    with pytest.raises(ContractViolationError, match="Printer"):
        normalize_permissions(["Printer"])


def test_parse_options() -> None:
    options = parse_options(["flatten", "allow", "Printing", "FillIn", "owner_pw", "pw", "encrypt_128bit"])

    assert options == [
        Option("flatten"),
        Option("allow", "Printing FillIn"),
        Option("owner_pw", "pw", sensitive=True),
        Option("encrypt_128bit"),
    ]


@pytest.mark.parametrize("tokens", [["owner_pw"], ["bogus"]])
def test_parse_options_rejects_invalid_tokens(tokens: list[str]) -> None:
    with pytest.raises(ContractViolationError):
        parse_options(tokens)
