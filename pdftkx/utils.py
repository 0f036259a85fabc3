"""Utility helpers for :mod:`pdftkx`."""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
from pathlib import Path
from typing import Mapping, Sequence, Union

PathLike = Union[str, os.PathLike]

_LOGGER = logging.getLogger("pdftkx")


def ensure_path(path: PathLike) -> Path:
    """Return a :class:`~pathlib.Path` for *path* with ``~`` expanded."""

    return Path(path).expanduser()


def ensure_parent_dir(path: Path) -> None:
    """Create parent directory for *path* if it does not exist."""

    path.parent.mkdir(parents=True, exist_ok=True)


def which(executables: Sequence[str]) -> str | None:
    """Return the first executable from *executables* found on ``PATH``."""

    for candidate in executables:
        found = shutil.which(candidate)
        if found:
            _LOGGER.debug("Detected external tool: %s -> %s", candidate, found)
            return found
    return None


def run_subprocess(
    command: Sequence[str],
    *,
    env: Mapping[str, str] | None = None,
    cwd: PathLike | None = None,
    display: str | None = None,
) -> subprocess.CompletedProcess[str]:
    """Run *command* capturing output, never raising on a non-zero exit.

    Parameters
    ----------
    command:
        Command and arguments to execute.
    env:
        Optional environment variables merged over ``os.environ``.
    cwd:
        Optional working directory for the process.
    display:
        Rendering of the command used for logging. Callers pass a masked
        version when the arguments carry passwords.
    """

    process_env = None
    if env:
        process_env = dict(os.environ)
        process_env.update(env)

    _LOGGER.debug("Executing command: %s", display if display is not None else " ".join(command))
    completed = subprocess.run(
        list(command),
        env=process_env,
        cwd=str(cwd) if cwd is not None else None,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        check=False,
        text=True,
    )
    _LOGGER.debug(
        "Command finished with exit code %s\nstderr: %s",
        completed.returncode,
        completed.stderr,
    )
    return completed


def file_has_content(path: PathLike | None) -> bool:
    """Return ``True`` when *path* names an existing, non-empty file."""

    if not path:
        return False
    candidate = ensure_path(path)
    try:
        return candidate.is_file() and candidate.stat().st_size > 0
    except OSError:
        return False


__all__ = [
    "PathLike",
    "ensure_path",
    "ensure_parent_dir",
    "which",
    "run_subprocess",
    "file_has_content",
]
