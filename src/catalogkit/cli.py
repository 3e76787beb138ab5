"""Command-line interface for catalogkit."""

from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.table import Table

from catalogkit.api import compile_po, load_catalog
from catalogkit.config import CatalogConfig
from catalogkit.entry import split_key
from catalogkit.exceptions import CatalogError

app = typer.Typer(
    name="catalogkit",
    help="Compile and inspect Gettext translation catalogs",
    add_completion=False,
)


def _load_config(verbose: bool) -> CatalogConfig:
    try:
        config = CatalogConfig.from_env()
    except ValueError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)
    if verbose:
        config.log_level = "DEBUG"
    config.configure_logging()
    return config


@app.command(name="compile")
def compile_cmd(
    po_files: Annotated[list[Path], typer.Argument(help="PO files to compile")],
    output: Annotated[
        Path,
        typer.Option("--output", "-o", help="Output MO file path"),
    ] = Path("messages.mo"),
    use_fuzzy: Annotated[
        Optional[bool],
        typer.Option("--use-fuzzy/--no-fuzzy", help="Include fuzzy entries"),
    ] = None,
    byteorder: Annotated[
        Optional[str],
        typer.Option("--byteorder", help="Byte order of the output (little, big)"),
    ] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Debug logging")] = False,
) -> None:
    """Compile PO files into a binary MO catalog."""
    config = _load_config(verbose)
    if byteorder is not None and byteorder not in ("little", "big"):
        typer.echo(f"Error: Invalid byte order: {byteorder}", err=True)
        raise typer.Exit(1)

    try:
        count = compile_po(
            po_files,
            output,
            use_fuzzy=config.use_fuzzy if use_fuzzy is None else use_fuzzy,
            encoding=config.encoding,
            byteorder=byteorder or config.byteorder,
        )
    except CatalogError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    typer.echo(f"Catalog written to {output}")
    typer.echo(f"  Entries: {count:,}")


@app.command(name="inspect")
def inspect_cmd(
    mo_file: Annotated[Path, typer.Argument(help="MO file to inspect")],
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Debug logging")] = False,
) -> None:
    """Show the headers and entries of a binary MO catalog."""
    _load_config(verbose)
    try:
        catalog = load_catalog(mo_file)
    except CatalogError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    console = Console()
    metadata = catalog.metadata
    console.print(f"[bold]{mo_file}[/bold]")
    console.print(f"Entries: {len(catalog):,}")
    console.print(f"Plural forms: {metadata.plural_count}")
    if metadata.plural_expr is not None:
        console.print(f"Plural expression: {metadata.plural_expr.source}")
    if metadata.charset:
        console.print(f"Charset: {metadata.charset}")

    table = Table(show_header=True, header_style="bold")
    table.add_column("Context", style="dim")
    table.add_column("Original", style="cyan")
    table.add_column("Translation")
    for key, entry in catalog.table.items():
        context, original = split_key(key)
        translations = [entry.translation_singular, *entry.translation_plurals]
        table.add_row(
            context or "",
            " | ".join([original, *entry.original_plurals]),
            " | ".join(translations),
        )
    console.print(table)


@app.command(name="translate")
def translate_cmd(
    mo_file: Annotated[Path, typer.Argument(help="MO file to query")],
    message: Annotated[str, typer.Argument(help="Message id to translate")],
    plural: Annotated[
        Optional[str],
        typer.Option("--plural", "-p", help="Plural form of the message"),
    ] = None,
    count: Annotated[int, typer.Option("--count", "-n", help="Count selecting the plural form")] = 1,
    context: Annotated[
        Optional[str],
        typer.Option("--context", "-c", help="Message context"),
    ] = None,
) -> None:
    """Translate a message using a binary MO catalog."""
    try:
        catalog = load_catalog(mo_file)
    except CatalogError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    if plural is None:
        typer.echo(catalog.get_translation(message, context))
    else:
        typer.echo(catalog.get_plural_translation(message, plural, count, context))


def main() -> None:
    app()


if __name__ == "__main__":
    main()
