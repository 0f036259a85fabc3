from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import pytest
from click.testing import CliRunner

from pdftkx.cli import cli

if TYPE_CHECKING:
    from conftest import FakePdftk


@pytest.fixture()
def runner() -> CliRunner:
    return CliRunner()


def test_cat_dry_run_prints_command(
    runner: CliRunner, fake_pdftk: FakePdftk, sample_pdfs: list[Path], tmp_path: Path
) -> None:
    one, two = sample_pdfs
    output = tmp_path / "out.pdf"

    result = runner.invoke(
        cli, ["--dry-run", "cat", str(one), str(two), "-r", "A1-3", "-r", "Bend-1", "-o", str(output)]
    )

    assert result.exit_code == 0, result.output
    assert f"pdftk A={one} B={two} cat A1-3 Bend-1 output {output}" in result.output
    assert fake_pdftk.calls == []
    assert not output.exists()


def test_cat_runs_pdftk_and_saves(
    runner: CliRunner, fake_pdftk: FakePdftk, sample_pdfs: list[Path], tmp_path: Path
) -> None:
    output = tmp_path / "out.pdf"

    result = runner.invoke(cli, ["cat", str(sample_pdfs[0]), "-r", "1-2", "-o", str(output)])

    assert result.exit_code == 0, result.output
    assert "Successfully created" in result.output
    assert fake_pdftk.last[2:4] == ["cat", "A1-2"]
    assert output.read_bytes() == fake_pdftk.output_bytes


def test_cat_failure_exits_with_error(
    runner: CliRunner, fake_pdftk: FakePdftk, sample_pdfs: list[Path], tmp_path: Path
) -> None:
    fake_pdftk.returncode = 1
    fake_pdftk.stderr = "Error: Unexpected text in page range"

    result = runner.invoke(cli, ["cat", str(sample_pdfs[0]), "-o", str(tmp_path / "out.pdf")])

    assert result.exit_code == 1
    assert "Unexpected text in page range" in result.output


def test_ignore_warnings_accepts_output(
    runner: CliRunner, fake_pdftk: FakePdftk, sample_pdfs: list[Path], tmp_path: Path
) -> None:
    fake_pdftk.returncode = 3
    fake_pdftk.stderr = "Warning: dropped an annotation"

    result = runner.invoke(
        cli, ["--ignore-warnings", "shuffle", str(sample_pdfs[0]), "-o", str(tmp_path / "out.pdf")]
    )

    assert result.exit_code == 0, result.output
    assert "dropped an annotation" in result.output
    assert fake_pdftk.last[2] == "shuffle"


def test_legacy_rotation_and_input_password(
    runner: CliRunner, sample_pdfs: list[Path], tmp_path: Path
) -> None:
    result = runner.invoke(
        cli,
        [
            "--dry-run",
            "--legacy-rotation",
            "cat",
            str(sample_pdfs[0]),
            "-r",
            "1-2left",
            "-p",
            "A=secret",
            "-o",
            str(tmp_path / "out.pdf"),
        ],
    )

    assert result.exit_code == 0, result.output
    assert "A1-2L" in result.output
    assert "input_pw 'A=******'" in result.output
    assert "secret" not in result.output


def test_invalid_range_is_reported(runner: CliRunner, sample_pdfs: list[Path], tmp_path: Path) -> None:
    result = runner.invoke(
        cli, ["--dry-run", "cat", str(sample_pdfs[0]), "-r", "A1-", "-o", str(tmp_path / "out.pdf")]
    )

    assert result.exit_code == 1
    assert "Invalid page range" in result.output


def test_encrypt_dry_run_masks_passwords(runner: CliRunner, sample_pdfs: list[Path], tmp_path: Path) -> None:
    result = runner.invoke(
        cli,
        [
            "--dry-run",
            "encrypt",
            str(sample_pdfs[0]),
            "--owner-password",
            "s3cret",
            "--user-password",
            "open-me",
            "--allow",
            "Printing",
            "--strength",
            "40",
            "-o",
            str(tmp_path / "secured.pdf"),
        ],
    )

    assert result.exit_code == 0, result.output
    assert "s3cret" not in result.output
    assert "open-me" not in result.output
    assert "owner_pw '******' encrypt_40bit user_pw '******' allow Printing" in result.output


def test_burst_dry_run(runner: CliRunner, fake_pdftk: FakePdftk, sample_pdfs: list[Path]) -> None:
    result = runner.invoke(cli, ["--dry-run", "burst", str(sample_pdfs[0]), "--pattern", "p_%02d.pdf"])

    assert result.exit_code == 0, result.output
    assert "burst output p_%02d.pdf" in result.output
    assert fake_pdftk.calls == []


def test_burst_runs(runner: CliRunner, fake_pdftk: FakePdftk, sample_pdfs: list[Path]) -> None:
    result = runner.invoke(cli, ["burst", str(sample_pdfs[0])])

    assert result.exit_code == 0, result.output
    assert fake_pdftk.last[-3:] == ["burst", "output", "pg_%04d.pdf"]


@pytest.mark.parametrize(
    ("command", "flag", "operation"),
    [
        ("dump-data", "--utf8", "dump_data_utf8"),
        ("dump-data", "--no-utf8", "dump_data"),
        ("dump-fields", "--utf8", "dump_data_fields_utf8"),
        ("dump-fields", "--no-utf8", "dump_data_fields"),
    ],
)
def test_dumps_print_pdftk_output(
    runner: CliRunner,
    fake_pdftk: FakePdftk,
    sample_pdfs: list[Path],
    command: str,
    flag: str,
    operation: str,
) -> None:
    fake_pdftk.stdout = "NumberOfPages: 3\n"

    result = runner.invoke(cli, [command, str(sample_pdfs[0]), flag])

    assert result.exit_code == 0, result.output
    assert result.output.strip() == "NumberOfPages: 3"
    assert fake_pdftk.last[-1] == operation


def test_fill_form_with_fields(
    runner: CliRunner, fake_pdftk: FakePdftk, sample_pdfs: list[Path], tmp_path: Path
) -> None:
    result = runner.invoke(
        cli,
        ["fill-form", str(sample_pdfs[0]), "-f", "name=Jane", "--flatten", "-o", str(tmp_path / "filled.pdf")],
    )

    assert result.exit_code == 0, result.output
    args = fake_pdftk.last
    assert args[2] == "fill_form"
    assert args[3].endswith(".xfdf")
    assert args[-2:] == ["drop_xfa", "flatten"]


def test_fill_form_needs_exactly_one_data_source(runner: CliRunner, sample_pdfs: list[Path], tmp_path: Path) -> None:
    result = runner.invoke(cli, ["fill-form", str(sample_pdfs[0]), "-o", str(tmp_path / "filled.pdf")])

    assert result.exit_code == 1
    assert "Use either --data or --field" in result.output


def test_fill_form_rejects_malformed_field(runner: CliRunner, sample_pdfs: list[Path], tmp_path: Path) -> None:
    result = runner.invoke(
        cli, ["fill-form", str(sample_pdfs[0]), "-f", "name", "-o", str(tmp_path / "filled.pdf")]
    )

    assert result.exit_code == 2
    assert "NAME=VALUE" in result.output


@pytest.mark.parametrize(
    ("command", "multi", "operation"),
    [
        ("stamp", False, "stamp"),
        ("stamp", True, "multistamp"),
        ("background", False, "background"),
        ("background", True, "multibackground"),
    ],
)
def test_overlay_commands(
    runner: CliRunner,
    fake_pdftk: FakePdftk,
    sample_pdfs: list[Path],
    tmp_path: Path,
    command: str,
    multi: bool,
    operation: str,
) -> None:
    one, two = sample_pdfs
    args = [command, str(one), str(two), "-o", str(tmp_path / "out.pdf")]
    if multi:
        args.append("--multi")

    result = runner.invoke(cli, args)

    assert result.exit_code == 0, result.output
    assert fake_pdftk.last[2:4] == [operation, str(two)]


def test_info_shows_binary_and_version(
    runner: CliRunner, fake_pdftk: FakePdftk, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setattr("pdftkx.utils.shutil.which", lambda name: None)
    fake_pdftk.stdout = "\npdftk port to java 3.3.3 a Handy Tool for Manipulating PDF Documents\n"

    result = runner.invoke(cli, ["--binary", "mypdftk", "info"])

    assert result.exit_code == 0, result.output
    assert "mypdftk" in result.output
    assert "3.3.3" in result.output
    assert fake_pdftk.last == ["mypdftk", "--version"]
