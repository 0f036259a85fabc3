from __future__ import annotations

import pytest

from pdftkx.config import PdftkConfig


def test_defaults() -> None:
    config = PdftkConfig()

    assert config.binary == "pdftk"
    assert config.legacy_rotation is False
    assert config.ignore_warnings is False
    assert config.tmp_prefix == "tmp_pdftkx_"


def test_from_env() -> None:
    config = PdftkConfig.from_env(
        {
            "PDFTKX_BINARY": "/usr/local/bin/pdftk",
            "PDFTKX_LEGACY_ROTATION": "1",
            "PDFTKX_IGNORE_WARNINGS": "off",
            "PDFTKX_TMP_DIR": "/var/tmp",
        }
    )

    assert config == PdftkConfig(
        binary="/usr/local/bin/pdftk",
        legacy_rotation=True,
        ignore_warnings=False,
        tmp_dir="/var/tmp",
    )


def test_from_env_ignores_empty_values() -> None:
    assert PdftkConfig.from_env({"PDFTKX_BINARY": ""}) == PdftkConfig()


def test_with_updates_skips_none() -> None:
    config = PdftkConfig(binary="custom").with_updates(binary=None, ignore_warnings=True)

    assert config.binary == "custom"
    assert config.ignore_warnings is True


def test_with_updates_rejects_unknown_fields() -> None:
    with pytest.raises(TypeError, match="colour"):
        PdftkConfig().with_updates(colour="red")


def test_resolve_binary(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("pdftkx.utils.shutil.which", lambda name: f"/found/{name}")
    assert PdftkConfig(binary="pdftk-java").resolve_binary() == "/found/pdftk-java"

    monkeypatch.setattr("pdftkx.utils.shutil.which", lambda name: None)
    assert PdftkConfig().resolve_binary() == "pdftk"
