"""
pdftkx - Build and run pdftk commands from Python.

This library turns chained method calls into a single pdftk command line,
runs it and reports whether it worked.

Quick Start:
    >>> from pdftkx import Pdf
    >>> pdf = Pdf({"A": "one.pdf", "B": "two.pdf"})
    >>> pdf.cat(1, 5, "A").cat("end", 1, "B", rotation="east").save_as("out.pdf")

Main Classes:
    - Pdf: Chainable wrapper owning the command and its output file
    - Command: A single pdftk invocation
    - PdftkConfig: Binary location and behavioural switches

Exceptions:
    - PdftkError: Base exception
    - ContractViolationError: Invalid use of the API
    - DependencyError: A Pdf used as input failed
    - ExecutionError: pdftk failed
    - PdftkIOError: The output could not be copied or read

For CLI usage, use the 'pdftkx' command after installation.
"""

# Core classes
from pdftkx.command import Command, ParsedCommand, parse_args
from pdftkx.config import PdftkConfig
from pdftkx.document import ExecutionState, OutputMode, OutputTarget, Pdf

# Building blocks
from pdftkx.handles import HandleAllocator, handle_for_index
from pdftkx.operations import OperationKind
from pdftkx.ranges import PageRange, Qualifier, Rotation, build_page_ranges, parse_page_range

# Exceptions
from pdftkx.exceptions import (
    PdftkError,
    ContractViolationError,
    DependencyError,
    ExecutionError,
    PdftkIOError,
)

__version__ = "0.3.0"
__license__ = "MIT"

__all__ = [
    # Main classes
    "Pdf",
    "Command",
    "ParsedCommand",
    "PdftkConfig",
    "ExecutionState",
    "OutputMode",
    "OutputTarget",
    # Building blocks
    "HandleAllocator",
    "handle_for_index",
    "OperationKind",
    "PageRange",
    "Qualifier",
    "Rotation",
    "build_page_ranges",
    "parse_page_range",
    "parse_args",
    # Exceptions
    "PdftkError",
    "ContractViolationError",
    "DependencyError",
    "ExecutionError",
    "PdftkIOError",
    # Version info
    "__version__",
]
