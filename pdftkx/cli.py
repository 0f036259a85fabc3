"""
Command-line interface for pdftkx.
"""

import logging
import sys
from dataclasses import dataclass

import click
from rich.console import Console
from rich.table import Table

from pdftkx import __version__
from pdftkx.config import PdftkConfig
from pdftkx.document import Pdf
from pdftkx.exceptions import PdftkError
from pdftkx.handles import handle_for_index
from pdftkx.operations import OperationKind
from pdftkx.options import PERMISSIONS
from pdftkx.ranges import parse_page_range
from pdftkx.utils import run_subprocess

console = Console()


@dataclass
class CliState:
    config: PdftkConfig
    dry_run: bool = False


def configure_logging(verbose: bool) -> None:
    """Configure package-wide logging."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def _error(message: str) -> None:
    console.print(f"\n[bold red]✗ Error:[/bold red] {message}")
    sys.exit(1)


def _parse_assignments(values, option_name):
    pairs = {}
    for value in values:
        key, sep, item = value.partition("=")
        if not sep or not key:
            raise click.BadParameter(f"expected NAME=VALUE, got '{value}'", param_hint=option_name)
        pairs[key] = item
    return pairs


def _open(state, inputs, passwords=None):
    passwords = passwords or {}
    sources = {}
    for index, path in enumerate(inputs):
        handle = handle_for_index(index)
        sources[handle] = (path, passwords[handle]) if handle in passwords else path
    return Pdf(sources, config=state.config)


def _apply_ranges(method, tokens):
    for token in tokens:
        page_range = parse_page_range(token)
        method(
            page_range.start,
            page_range.end,
            page_range.handle,
            page_range.qualifier,
            page_range.rotation,
        )


def _finish(state, pdf, output):
    """Run *pdf* and save it to *output*, or just print it on a dry run."""
    if state.dry_run:
        click.echo(pdf.command.display(output))
        return
    if not pdf.save_as(output):
        _error(pdf.error)
    if pdf.error:
        console.print(f"[yellow]Warning:[/yellow] {pdf.error}")
    console.print(f"\n[bold green]✓ Successfully created:[/bold green] {output}")


@click.group()
@click.version_option(version=__version__)
@click.option('--binary', help='Path of the pdftk executable', type=str)
@click.option('--legacy-rotation', is_flag=True, help='Use N/E/S/W/L/R/D rotations (pdftk < 2.0)')
@click.option('--ignore-warnings', is_flag=True, help='Accept a non-empty output despite pdftk errors')
@click.option('--dry-run', is_flag=True, help='Print the command instead of running it')
@click.option('--verbose', '-v', is_flag=True, help='Enable debug logging')
@click.pass_context
def cli(ctx, binary, legacy_rotation, ignore_warnings, dry_run, verbose):
    """
    pdftkx - Run pdftk operations on PDF files.
    """
    configure_logging(verbose)
    config = PdftkConfig.from_env().with_updates(
        binary=binary,
        legacy_rotation=True if legacy_rotation else None,
        ignore_warnings=True if ignore_warnings else None,
    )
    ctx.obj = CliState(config=config, dry_run=dry_run)


def _range_command(name, help_text):
    @cli.command(name=name, help=help_text)
    @click.argument('inputs', nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False))
    @click.option('--range', '-r', 'ranges', multiple=True, help="Page range token, e.g. 'A1-5', 'Bend-1odd', 'A3east'")
    @click.option('--input-password', '-p', 'input_passwords', multiple=True, help='Password of an input as HANDLE=PASSWORD')
    @click.option('--output', '-o', required=True, type=click.Path(dir_okay=False), help='Output PDF')
    @click.pass_obj
    def command(state, inputs, ranges, input_passwords, output):
        try:
            pdf = _open(state, inputs, _parse_assignments(input_passwords, '--input-password'))
            method = getattr(pdf, name)
            if ranges:
                _apply_ranges(method, ranges)
            else:
                method()
            _finish(state, pdf, output)
        except PdftkError as e:
            _error(e)

    return command


cat = _range_command(
    'cat',
    """
    Concatenate pages of the input files. Inputs get the handles A, B, C...

    Examples:

        pdftkx cat one.pdf two.pdf -o out.pdf

        pdftkx cat one.pdf two.pdf -r A1-3 -r Bend-1 -r A5east -o out.pdf
    """,
)

shuffle = _range_command(
    'shuffle',
    """
    Collate pages, taking one page from each range in turn.

    Example:

        pdftkx shuffle odd.pdf even.pdf -r A -r Bend-1 -o collated.pdf
    """,
)


@cli.command(name="burst")
@click.argument('input_pdf', type=click.Path(exists=True, dir_okay=False))
@click.option('--pattern', default='pg_%04d.pdf', show_default=True, help='Output name in printf format')
@click.pass_obj
def burst(state, input_pdf, pattern):
    """
    Split a PDF into single pages.

    Example:

        pdftkx burst input.pdf --pattern 'page_%02d.pdf'
    """
    try:
        pdf = Pdf(input_pdf, config=state.config)
        if state.dry_run:
            pdf.command.operation.select(OperationKind.BURST)
            click.echo(pdf.command.display(pattern))
            return
        if not pdf.burst(pattern):
            _error(pdf.error)
        console.print(f"\n[bold green]✓ Pages written as[/bold green] {pattern}")
    except PdftkError as e:
        _error(e)


def _dump(state, input_pdf, fields, utf8):
    try:
        pdf = Pdf(input_pdf, config=state.config)
        text = pdf.get_data_fields(utf8) if fields else pdf.get_data(utf8)
        if text is None:
            _error(pdf.error)
        click.echo(text)
    except PdftkError as e:
        _error(e)


@cli.command(name="dump-data")
@click.argument('input_pdf', type=click.Path(exists=True, dir_okay=False))
@click.option('--utf8/--no-utf8', default=True, help='Dump UTF-8 encoded data')
@click.pass_obj
def dump_data(state, input_pdf, utf8):
    """
    Print the metadata, bookmarks and page labels of a PDF.
    """
    _dump(state, input_pdf, False, utf8)


@cli.command(name="dump-fields")
@click.argument('input_pdf', type=click.Path(exists=True, dir_okay=False))
@click.option('--utf8/--no-utf8', default=True, help='Dump UTF-8 encoded data')
@click.pass_obj
def dump_fields(state, input_pdf, utf8):
    """
    Print the form fields of a PDF.
    """
    _dump(state, input_pdf, True, utf8)


@cli.command(name="fill-form")
@click.argument('input_pdf', type=click.Path(exists=True, dir_okay=False))
@click.option('--data', '-d', 'data_file', type=click.Path(exists=True, dir_okay=False), help='FDF or XFDF file')
@click.option('--field', '-f', 'fields', multiple=True, help='Field value as NAME=VALUE')
@click.option('--flatten', is_flag=True, help='Merge the values into the page content')
@click.option('--need-appearances', is_flag=True, help='Let the reader render the field content')
@click.option('--keep-xfa', is_flag=True, help='Keep XFA form data')
@click.option('--output', '-o', required=True, type=click.Path(dir_okay=False), help='Output PDF')
@click.pass_obj
def fill_form(state, input_pdf, data_file, fields, flatten, need_appearances, keep_xfa, output):
    """
    Fill the form of a PDF from a data file or from --field values.

    Examples:

        pdftkx fill-form form.pdf -d data.xfdf -o filled.pdf

        pdftkx fill-form form.pdf -f name=Jane -f address.city=Berlin --flatten -o filled.pdf
    """
    if bool(data_file) == bool(fields):
        _error("Use either --data or --field")
    try:
        pdf = Pdf(input_pdf, config=state.config)
        data = data_file if data_file else _parse_assignments(fields, '--field')
        pdf.fill_form(data, drop_xfa=not keep_xfa)
        if flatten:
            pdf.flatten()
        if need_appearances:
            pdf.need_appearances()
        _finish(state, pdf, output)
    except PdftkError as e:
        _error(e)


def _overlay_command(name, single_method, multi_method, help_text):
    @cli.command(name=name, help=help_text)
    @click.argument('input_pdf', type=click.Path(exists=True, dir_okay=False))
    @click.argument('overlay_pdf', type=click.Path(exists=True, dir_okay=False))
    @click.option('--multi', 'multi_pages', is_flag=True, help='Use every page of the overlay, not just the first')
    @click.option('--output', '-o', required=True, type=click.Path(dir_okay=False), help='Output PDF')
    @click.pass_obj
    def command(state, input_pdf, overlay_pdf, multi_pages, output):
        try:
            pdf = Pdf(input_pdf, config=state.config)
            getattr(pdf, multi_method if multi_pages else single_method)(overlay_pdf)
            _finish(state, pdf, output)
        except PdftkError as e:
            _error(e)

    return command


stamp = _overlay_command(
    'stamp',
    'stamp',
    'multi_stamp',
    """
    Put OVERLAY_PDF on top of the pages of INPUT_PDF.
    """,
)

background = _overlay_command(
    'background',
    'background',
    'multi_background',
    """
    Put OVERLAY_PDF behind the pages of INPUT_PDF.
    """,
)


@cli.command(name="encrypt")
@click.argument('input_pdf', type=click.Path(exists=True, dir_okay=False))
@click.option('--owner-password', prompt=True, hide_input=True, confirmation_prompt=True, help='Owner password')
@click.option('--user-password', default=None, help='User password needed to open the file')
@click.option('--allow', 'permissions', multiple=True, type=click.Choice(PERMISSIONS), help='Permission to grant')
@click.option('--strength', type=click.Choice(['40', '128']), default='128', show_default=True, help='Encryption strength in bits')
@click.option('--output', '-o', required=True, type=click.Path(dir_okay=False), help='Output PDF')
@click.pass_obj
def encrypt(state, input_pdf, owner_password, user_password, permissions, strength, output):
    """
    Encrypt a PDF with an owner and optional user password.

    Example:

        pdftkx encrypt input.pdf --allow Printing -o secured.pdf
    """
    try:
        pdf = Pdf(input_pdf, config=state.config)
        pdf.cat().set_password(owner_password).password_encryption(int(strength))
        if user_password:
            pdf.set_user_password(user_password)
        if permissions:
            pdf.allow(permissions)
        _finish(state, pdf, output)
    except PdftkError as e:
        _error(e)


@cli.command(name="info")
@click.pass_obj
def show_info(state):
    """
    Show which pdftk binary is used and its version.
    """
    binary = state.config.resolve_binary()
    table = Table(title="pdftk", show_header=False)
    table.add_column("Property", style="cyan", no_wrap=True)
    table.add_column("Value", style="green")
    table.add_row("Binary", binary)
    table.add_row("Rotation tokens", "legacy (N, E, ...)" if state.config.legacy_rotation else "words (north, east, ...)")
    table.add_row("Ignore warnings", "Yes" if state.config.ignore_warnings else "No")
    try:
        completed = run_subprocess([binary, "--version"], env=state.config.env)
        version_lines = [line for line in completed.stdout.splitlines() if line.strip()]
        table.add_row("Version", version_lines[0] if version_lines else "unknown")
    except OSError as e:
        table.add_row("Version", f"[red]not available ({e})[/red]")
    console.print()
    console.print(table)
    console.print()


if __name__ == '__main__':
    cli()
