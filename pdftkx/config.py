"""Runtime configuration for pdftkx."""

from __future__ import annotations

import dataclasses
import logging
import os
from typing import Any, Mapping, Optional

from .utils import which

_LOGGER = logging.getLogger("pdftkx.config")

_TRUE_VALUES = {"1", "true", "yes", "on"}


def _env_flag(value: str | None) -> bool | None:
    if value is None:
        return None
    return value.strip().lower() in _TRUE_VALUES


@dataclasses.dataclass(frozen=True)
class PdftkConfig:
    """Settings shared by every command a :class:`~pdftkx.Pdf` runs.

    Attributes:
        binary: Name or path of the pdftk executable.
        env: Extra environment variables for the pdftk process.
        cwd: Working directory for the pdftk process.
        legacy_rotation: Render rotations as ``N E S W L R D`` for pdftk < 2.0.
        ignore_warnings: Count a failed run as success if a non-empty output
            file was still written.
        tmp_dir: Directory for temporary output files.
        tmp_prefix: Filename prefix of temporary output files.
    """

    binary: str = "pdftk"
    env: Optional[Mapping[str, str]] = None
    cwd: Optional[str] = None
    legacy_rotation: bool = False
    ignore_warnings: bool = False
    tmp_dir: Optional[str] = None
    tmp_prefix: str = "tmp_pdftkx_"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "PdftkConfig":
        """Build a config from ``PDFTKX_*`` environment variables."""

        environ = os.environ if environ is None else environ
        values: dict[str, Any] = {}
        if environ.get("PDFTKX_BINARY"):
            values["binary"] = environ["PDFTKX_BINARY"]
        legacy = _env_flag(environ.get("PDFTKX_LEGACY_ROTATION"))
        if legacy is not None:
            values["legacy_rotation"] = legacy
        ignore = _env_flag(environ.get("PDFTKX_IGNORE_WARNINGS"))
        if ignore is not None:
            values["ignore_warnings"] = ignore
        if environ.get("PDFTKX_TMP_DIR"):
            values["tmp_dir"] = environ["PDFTKX_TMP_DIR"]
        _LOGGER.debug("Configuration overrides from environment: %s", values)
        return cls(**values)

    def with_updates(self, **updates: Any) -> "PdftkConfig":
        """Return a copy with every non-``None`` value in *updates* applied."""

        unknown = set(updates) - {field.name for field in dataclasses.fields(self)}
        if unknown:
            raise TypeError(f"Unknown configuration option(s): {', '.join(sorted(unknown))}")
        return dataclasses.replace(self, **{k: v for k, v in updates.items() if v is not None})

    def resolve_binary(self) -> str:
        """Return the full path of :attr:`binary` if it is on ``PATH``."""

        return which([self.binary]) or self.binary


__all__ = ["PdftkConfig"]
