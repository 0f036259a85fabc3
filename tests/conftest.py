from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from types import SimpleNamespace
from typing import Callable, Optional
import sys

import pytest
from pypdf import PdfWriter

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))


@dataclass
class FakePdftk:
    """Stand-in for ``subprocess.run`` that records every pdftk call."""

    returncode: int = 0
    stdout: str = ""
    stderr: str = ""
    output_bytes: Optional[bytes] = b"%PDF-1.4\n% fake pdftk output\n"
    calls: list[list[str]] = field(default_factory=list)
    kwargs: list[dict] = field(default_factory=list)

    def __call__(self, command, **kwargs) -> SimpleNamespace:
        command = list(command)
        self.calls.append(command)
        self.kwargs.append(kwargs)
        if self.output_bytes is not None and "output" in command:
            target = Path(command[command.index("output") + 1])
            if "%" not in target.name:
                target.write_bytes(self.output_bytes)
        return SimpleNamespace(
            returncode=self.returncode,
            stdout=self.stdout,
            stderr=self.stderr,
        )

    @property
    def last(self) -> list[str]:
        return self.calls[-1]


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "PDFTKX_BINARY",
        "PDFTKX_LEGACY_ROTATION",
        "PDFTKX_IGNORE_WARNINGS",
        "PDFTKX_TMP_DIR",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture()
def fake_pdftk(monkeypatch: pytest.MonkeyPatch) -> FakePdftk:
    fake = FakePdftk()
    monkeypatch.setattr("pdftkx.utils.subprocess.run", fake)
    return fake


@pytest.fixture()
def pdf_factory(tmp_path: Path) -> Callable[..., Path]:
    def _create(filename: str, pages: int = 1, title: str | None = None) -> Path:
        path = tmp_path / filename
        writer = PdfWriter()
        for _ in range(pages):
            writer.add_blank_page(width=72, height=72)
        if title is not None:
            writer.add_metadata({"/Title": title})
        with path.open("wb") as handle:
            writer.write(handle)
        return path

    return _create


@pytest.fixture()
def sample_pdfs(pdf_factory: Callable[..., Path]) -> list[Path]:
    pdf1 = pdf_factory("one.pdf", pages=3, title="Document One")
    pdf2 = pdf_factory("two.pdf", pages=2)
    return [pdf1, pdf2]
