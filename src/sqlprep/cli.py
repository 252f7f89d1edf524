"""CLI entry point for sqlprep."""

from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.markup import escape as escape_markup
from rich.table import Table

from sqlprep.placeholders import (
    PlaceholderError,
    Substituter,
    TypeRegistry,
    get_default_registry,
)
from sqlprep.placeholders.escaping import DEFAULT_QUOTE_CHAR, escape, escape_like, quote
from sqlprep.placeholders.formatters import BUILTIN_TYPES
from sqlprep.placeholders.modifiers import KNOWN_FLAGS
from sqlprep.placeholders.tokenizer import SHORTHANDS
from sqlprep.utils.arguments import load_arguments_file, parse_cli_arguments
from sqlprep.utils.config import ConfigSettings, load_config
from sqlprep.utils.file_utils import read_pattern_file

app = typer.Typer(
    name="sqlprep",
    help="Render SQL fragments from patterns with typed, escaped placeholders.",
    invoke_without_command=False,
)
console = Console()
err_console = Console(stderr=True)


def _build_substituter(
    config: ConfigSettings,
    quote_char: Optional[str],
    utf8mb4: Optional[bool],
) -> Substituter:
    """Create a Substituter from CLI options, falling back to config then defaults."""
    quote_char = quote_char or config.quote_char or DEFAULT_QUOTE_CHAR
    if utf8mb4 is None:
        utf8mb4 = bool(config.utf8mb4)

    if config.plugins is False:
        registry = TypeRegistry()
    else:
        registry = get_default_registry()

    return Substituter(registry=registry, quote_char=quote_char, utf8mb4=utf8mb4)


@app.callback()
def main():
    """sqlprep - SQL fragment templating."""
    pass


@app.command()
def render(
    pattern: Optional[str] = typer.Argument(
        None,
        help="Pattern to render (omit when using --file)",
    ),
    args: Optional[List[str]] = typer.Argument(
        None,
        help="Positional arguments, one per placeholder",
    ),
    pattern_file: Optional[Path] = typer.Option(
        None,
        "--file",
        "-f",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
        help="Read the pattern from a file; all positional values become arguments",
    ),
    args_file: Optional[Path] = typer.Option(
        None,
        "--args-file",
        "-a",
        exists=True,
        help="Load arguments from a JSON, YAML or TOML file",
    ),
    text: bool = typer.Option(
        False,
        "--text",
        help="Treat every command line argument as text (no type inference)",
    ),
    quote_char: Optional[str] = typer.Option(
        None,
        "--quote-char",
        "-q",
        help='Quote character for text values (default: ", or from config)',
    ),
    utf8mb4: Optional[bool] = typer.Option(
        None,
        "--utf8mb4/--no-utf8mb4",
        help="Keep 4-byte UTF-8 characters (default: strip, or from config)",
    ),
) -> None:
    """
    Render a pattern with positional arguments.

    Configuration can be set in sqlprep.toml in the current directory.
    CLI arguments override configuration file values.

    Examples:

        # Quoted and escaped value
        sqlprep render "WHERE name = ?" "O'Brien"

        # Raw value
        sqlprep render "SET dated = @" "NOW()"

        # Typed value with modifiers
        sqlprep render "SET name = %varchar:trim:crop:10" "  a long name  "

        # Pattern from a file, arguments from JSON
        sqlprep render --file query.sql --args-file args.json
    """
    config = load_config()

    raw_args = list(args or [])
    if pattern_file is not None:
        if pattern is not None:
            raw_args.insert(0, pattern)
        pattern = None
    elif pattern is None:
        err_console.print("[red]Error:[/red] Provide a pattern argument or --file.")
        raise typer.Exit(1)

    try:
        if pattern_file is not None:
            pattern = read_pattern_file(pattern_file)

        values = parse_cli_arguments(raw_args, infer=not text)
        if args_file is not None:
            values = load_arguments_file(args_file) + values

        substituter = _build_substituter(config, quote_char, utf8mb4)
        # Pass the list as separate arguments, never as one wrapped list
        result = substituter.substitute(pattern, *values)
        console.print(
            result, markup=False, emoji=False, highlight=False, soft_wrap=True
        )

    except PlaceholderError as e:
        err_console.print(f"[red]Error:[/red] {escape_markup(str(e))}")
        raise typer.Exit(1)

    except (FileNotFoundError, ValueError) as e:
        err_console.print(f"[red]Error:[/red] {escape_markup(str(e))}")
        raise typer.Exit(1)

    except Exception as e:
        err_console.print(
            f"[red]Error:[/red] Unexpected error: {escape_markup(str(e))}"
        )
        raise typer.Exit(1)


@app.command("quote")
def quote_command(
    value: str = typer.Argument(..., help="Text to escape and quote"),
    quote_char: Optional[str] = typer.Option(
        None,
        "--quote-char",
        "-q",
        help='Quote character (default: ", or from config)',
    ),
) -> None:
    """Escape a text value and wrap it in quotes."""
    config = load_config()
    quote_char = quote_char or config.quote_char or DEFAULT_QUOTE_CHAR
    console.print(
        quote(value, quote_char),
        markup=False,
        emoji=False,
        highlight=False,
        soft_wrap=True,
    )


@app.command("escape")
def escape_command(
    value: str = typer.Argument(..., help="Text to escape"),
    like: bool = typer.Option(
        False,
        "--like",
        help="Also escape % and _ for use in LIKE patterns",
    ),
) -> None:
    """Escape a text value without quoting it."""
    escaped = escape_like(value) if like else escape(value)
    console.print(
        escaped, markup=False, emoji=False, highlight=False, soft_wrap=True
    )


@app.command()
def types() -> None:
    """List built-in and registered placeholder types and modifiers."""
    config = load_config()
    registry = TypeRegistry() if config.plugins is False else get_default_registry()
    registered = set(registry.list_types())

    reverse_shorthands = {}
    for short, name in SHORTHANDS.items():
        reverse_shorthands.setdefault(name, []).append(f"%{short}")

    table = Table(title="Placeholder Types")
    table.add_column("Type", style="cyan")
    table.add_column("Source", style="green")
    table.add_column("Shorthand")
    table.add_column("Handler")

    for name in sorted(set(BUILTIN_TYPES) | registered, key=str.lower):
        source = "registered" if name in registered else "built-in"
        if name in registered and name in BUILTIN_TYPES:
            source = "registered (overrides built-in)"
        handler = BUILTIN_TYPES[name].__name__ if name in BUILTIN_TYPES else ""
        shorthand = ", ".join(
            s for s in reverse_shorthands.get(name, []) if s != f"%{name}"
        )
        table.add_row(f"%{name}", source, shorthand, handler)

    console.print(table)

    modifiers = sorted(KNOWN_FLAGS | set(registry.list_modifiers()))
    console.print(f"[bold]Modifiers:[/bold] {', '.join(modifiers)}")


if __name__ == "__main__":
    app()
