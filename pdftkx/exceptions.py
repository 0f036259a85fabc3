"""
Custom exceptions for pdftkx.

This module defines all custom exceptions used throughout the library.
"""

from __future__ import annotations


class PdftkError(Exception):
    """Base exception for all pdftkx errors."""

    def __init__(self, message: str = "") -> None:
        super().__init__(message or self.default_message)
        self.message = message or self.default_message

    @property
    def default_message(self) -> str:
        return "An unknown pdftk error occurred."


class ContractViolationError(PdftkError, ValueError):
    """Raised when the caller misuses the API before pdftk is invoked."""

    @property
    def default_message(self) -> str:
        return "Invalid pdftk command configuration."


class DependencyError(PdftkError):
    """Raised when a document used as input could not be produced."""

    @property
    def default_message(self) -> str:
        return "An input document failed to execute."


class ExecutionError(PdftkError):
    """Raised when pdftk exits with an error that is not tolerated."""

    def __init__(self, message: str = "", returncode: int | None = None) -> None:
        super().__init__(message)
        self.returncode = returncode

    @property
    def default_message(self) -> str:
        return "pdftk failed to process the document."


class PdftkIOError(PdftkError, OSError):
    """Raised when the produced file cannot be copied or read."""

    @property
    def default_message(self) -> str:
        return "Could not access the pdftk output file."
