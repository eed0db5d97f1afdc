"""CLI entry point for ink-lexer.

Invoked as::

    ink-lexer [OPTIONS] COMMAND [ARGS]...

or, during development::

    python -m inklex.cli.main

Commands
--------
tokenize    Tokenize a file and print tokens with their exit states
highlight   Print a file with colors derived from token labels
outline     List knots, stitches, functions and labels
diverts     List divert targets and whether they resolve
grammar     Check or dump grammar rule tables
languages   List registered languages
keywords    List keyword completions for a language
version     Show version information
"""
from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Any

import click
import yaml
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table
from rich.text import Text

if TYPE_CHECKING:
    from inklex.grammar.tokens import TokenizationResult
    from inklex.lexer.tokenizer import Tokenizer

console = Console()
err_console = Console(stderr=True)

# Longest matching label prefix wins.
_SCOPE_STYLES: dict[str, str] = {
    "comment": "dim italic",
    "todo": "bold magenta",
    "flow.knot": "bold cyan",
    "flow.stitch": "cyan",
    "choice.bullets": "bold yellow",
    "choice.label": "yellow",
    "choice.weaveBracket": "yellow",
    "gather.bullets": "bold yellow",
    "gather.label": "yellow",
    "divert.operator": "bold red",
    "divert.target": "red",
    "divert.parameter": "red",
    "divert.to-tunnel": "red",
    "var-decl.keyword": "bold blue",
    "var-decl.name": "blue",
    "list-decl": "blue",
    "include": "green",
    "external": "green",
    "logic": "magenta",
    "tag": "dim cyan",
    "escape": "bold",
}


def _style_for(label: str) -> str | None:
    best: str | None = None
    best_len = -1
    for prefix, style in _SCOPE_STYLES.items():
        if (label == prefix or label.startswith(prefix + ".")) and len(prefix) > best_len:
            best, best_len = style, len(prefix)
    return best


def _read_source(path: str) -> str:
    """Read a source file, exiting on error."""
    try:
        return Path(path).read_text(encoding="utf-8")
    except FileNotFoundError:
        err_console.print(f"[red]Error:[/red] File not found: {path}")
        sys.exit(1)
    except OSError as exc:
        err_console.print(f"[red]Error:[/red] Cannot read {path}: {exc}")
        sys.exit(1)


def _tokenizer_or_exit(language: str, grammar_path: str | None, coalesce: bool) -> "Tokenizer":
    """Build a tokenizer from a grammar file or a registered language."""
    from inklex.compiler import compile_grammar
    from inklex.grammar.errors import GrammarError
    from inklex.grammar.serializer import GrammarSerializer
    from inklex.languages import LanguageNotFoundError, get_grammar
    from inklex.lexer import Tokenizer

    try:
        if grammar_path is not None:
            grammar = compile_grammar(GrammarSerializer().load(grammar_path))
        else:
            grammar = get_grammar(language)
    except LanguageNotFoundError as exc:
        err_console.print(f"[red]Error:[/red] {exc.args[0]}")
        sys.exit(1)
    except GrammarError as exc:
        err_console.print(f"[red]Grammar error:[/red] {exc}")
        sys.exit(1)
    return Tokenizer(grammar, coalesce_default=coalesce)


def _results_as_data(results: list["TokenizationResult"]) -> list[dict[str, Any]]:
    return [
        {
            "line": line_no + 1,
            "state": list(result.state.names),
            "tokens": [
                {"label": t.label, "text": t.text, "start": t.start, "end": t.end}
                for t in result.tokens
            ],
        }
        for line_no, result in enumerate(results)
    ]


language_option = click.option(
    "--language", "-l", default="ink", show_default=True, help="Registered language name"
)


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(package_name="ink-lexer")
@click.option("--verbose", "-v", is_flag=True, default=False, help="Enable debug logging")
def cli(verbose: bool) -> None:
    """Rule-driven line tokenizer for the ink narrative scripting language."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


# ---------------------------------------------------------------------------
# version command
# ---------------------------------------------------------------------------


@cli.command(name="version")
def version_command() -> None:
    """Show detailed version information."""
    from inklex import __version__

    table = Table(show_header=False, box=None)
    table.add_row("[bold]ink-lexer[/bold]", f"v{__version__}")
    table.add_row("Python", f"{sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}")
    table.add_row("Platform", sys.platform)
    console.print(table)


# ---------------------------------------------------------------------------
# languages / keywords commands
# ---------------------------------------------------------------------------


@cli.command(name="languages")
def languages_command() -> None:
    """List registered languages, including entry-point plugins."""
    from inklex.languages import ENTRY_POINT_GROUP, registry

    registry.load_entrypoints(ENTRY_POINT_GROUP)
    table = Table(title="Registered languages")
    table.add_column("Name", style="bold")
    table.add_column("Display name")
    table.add_column("Scope")
    table.add_column("File types")
    for name in registry.list_languages():
        language = registry.get(name)
        table.add_row(
            name,
            language.display_name,
            language.scope_name,
            ", ".join(language.file_types),
        )
    console.print(table)


@cli.command(name="keywords")
@click.argument("prefix", default="")
@language_option
def keywords_command(prefix: str, language: str) -> None:
    """List keyword completions, optionally filtered by PREFIX."""
    from inklex.languages import LanguageNotFoundError, get_language

    try:
        definition = get_language(language)
    except LanguageNotFoundError as exc:
        err_console.print(f"[red]Error:[/red] {exc.args[0]}")
        sys.exit(1)
    for completion in definition.get_completions(prefix):
        console.print(f"{completion.value}  [dim]{completion.meta}[/dim]")


# ---------------------------------------------------------------------------
# tokenize command
# ---------------------------------------------------------------------------


@cli.command(name="tokenize")
@click.argument("file", type=click.Path(exists=False))
@language_option
@click.option("--grammar", "grammar_path", default=None, help="YAML or JSON rule table to use instead")
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["table", "json", "yaml"], case_sensitive=False),
    default="table",
    help="Output format",
)
@click.option("--no-coalesce", is_flag=True, default=False, help="One default token per character")
def tokenize_command(
    file: str,
    language: str,
    grammar_path: str | None,
    output_format: str,
    no_coalesce: bool,
) -> None:
    """Tokenize FILE and print every token with its line's exit state."""
    source = _read_source(file)
    tokenizer = _tokenizer_or_exit(language, grammar_path, not no_coalesce)
    results = tokenizer.tokenize(source)

    if output_format == "json":
        click.echo(json.dumps(_results_as_data(results), indent=2, ensure_ascii=False))
        return
    if output_format == "yaml":
        text = yaml.safe_dump(_results_as_data(results), sort_keys=False, allow_unicode=True)
        click.echo(text)
        return

    table = Table(title=f"Tokens: {file}")
    table.add_column("Line", justify="right", style="dim")
    table.add_column("Span")
    table.add_column("Label", style="bold")
    table.add_column("Text")
    table.add_column("Exit state", style="dim")
    for line_no, result in enumerate(results, start=1):
        state = " > ".join(result.state.names)
        for index, token in enumerate(result.tokens):
            table.add_row(
                str(line_no),
                f"{token.start}:{token.end}",
                token.label,
                repr(token.text),
                state if index == len(result.tokens) - 1 else "",
            )
        if not result.tokens:
            table.add_row(str(line_no), "", "", "", state)
    console.print(table)


# ---------------------------------------------------------------------------
# highlight command
# ---------------------------------------------------------------------------


@cli.command(name="highlight")
@click.argument("file", type=click.Path(exists=False))
@language_option
@click.option("--grammar", "grammar_path", default=None, help="YAML or JSON rule table to use instead")
@click.option("--line-numbers/--no-line-numbers", default=True, help="Show line numbers")
def highlight_command(file: str, language: str, grammar_path: str | None, line_numbers: bool) -> None:
    """Print FILE with colors chosen from its token labels."""
    source = _read_source(file)
    tokenizer = _tokenizer_or_exit(language, grammar_path, True)
    results = tokenizer.tokenize(source)
    width = len(str(len(results)))
    for line_no, result in enumerate(results, start=1):
        text = Text()
        if line_numbers:
            text.append(f"{line_no:>{width}} ", style="dim")
        for token in result.tokens:
            text.append(token.text, style=_style_for(token.label) or "")
        console.print(text, soft_wrap=True)


# ---------------------------------------------------------------------------
# outline / diverts commands
# ---------------------------------------------------------------------------


@cli.command(name="outline")
@click.argument("file", type=click.Path(exists=False))
def outline_command(file: str) -> None:
    """List the knots, stitches, functions and labels declared in FILE."""
    from inklex.document import Document

    document = Document(_read_source(file))
    symbols = document.symbols()
    if not symbols:
        console.print(f"[yellow]No declarations found in[/yellow] {file}")
        return

    table = Table(title=f"Outline: {file}")
    table.add_column("Line", justify="right", style="dim")
    table.add_column("Kind")
    table.add_column("Path", style="bold")
    for symbol in symbols:
        indent = "  " * symbol.path.count(".")
        table.add_row(
            str(symbol.line + 1),
            symbol.kind.name.lower().replace("_", " "),
            f"{indent}{symbol.path}",
        )
    console.print(table)


@cli.command(name="diverts")
@click.argument("file", type=click.Path(exists=False))
@click.option("--strict", is_flag=True, default=False, help="Exit 1 when a target is undeclared")
def diverts_command(file: str, strict: bool) -> None:
    """List the divert targets in FILE and where they lead.

    ``-> DONE`` and ``-> END`` end the flow rather than naming a target,
    so they are not listed.
    """
    from inklex.document import Document

    document = Document(_read_source(file))
    table = Table(title=f"Diverts: {file}")
    table.add_column("Location", style="dim")
    table.add_column("Target", style="bold")
    table.add_column("Resolves to")
    unresolved = 0
    for divert in document.diverts():
        symbol = document.resolve(divert)
        if symbol is not None:
            where = f"[green]{symbol.path}[/green] (line {symbol.line + 1})"
        else:
            where = "[red]undeclared[/red]"
            unresolved += 1
        table.add_row(f"{divert.line + 1}:{divert.start}", divert.target, where)
    console.print(table)
    console.print(f"\n[bold]{unresolved}[/bold] undeclared target(s)")
    if strict and unresolved:
        sys.exit(1)


# ---------------------------------------------------------------------------
# grammar commands
# ---------------------------------------------------------------------------


@cli.group(name="grammar")
def grammar_group() -> None:
    """Check or export grammar rule tables."""


@grammar_group.command(name="check")
@click.argument("path", type=click.Path(exists=False))
def grammar_check_command(path: str) -> None:
    """Compile the rule table at PATH and report problems."""
    from inklex.compiler import compile_grammar, find_include_cycles
    from inklex.grammar.errors import GrammarError
    from inklex.grammar.serializer import GrammarSerializer

    try:
        grammar = compile_grammar(GrammarSerializer().load(path))
    except GrammarError as exc:
        err_console.print(f"[red]Grammar error[/red] in {path}: {exc}")
        sys.exit(1)

    for cycle in find_include_cycles(grammar):
        err_console.print(f"[yellow]Warning:[/yellow] include cycle {' -> '.join(cycle)}")
    console.print(f"[green]OK[/green] {path}: {len(grammar)} context(s)")


@grammar_group.command(name="dump")
@language_option
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["yaml", "json"], case_sensitive=False),
    default="yaml",
    help="Output format",
)
@click.option("--output", "-o", default=None, help="Output file path (defaults to stdout)")
def grammar_dump_command(language: str, output_format: str, output: str | None) -> None:
    """Export a registered language's rule table."""
    from inklex.grammar.serializer import GrammarSerializer
    from inklex.languages import LanguageNotFoundError, get_language

    try:
        table = get_language(language).rules()
    except LanguageNotFoundError as exc:
        err_console.print(f"[red]Error:[/red] {exc.args[0]}")
        sys.exit(1)

    serializer = GrammarSerializer()
    text = serializer.to_json(table) if output_format == "json" else serializer.to_yaml(table)
    if output:
        Path(output).write_text(text, encoding="utf-8")
        console.print(f"[green]Grammar written to[/green] {output}")
    else:
        click.echo(text)


if __name__ == "__main__":
    cli()
