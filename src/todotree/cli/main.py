"""CLI entry point for todo-tree.

Invoked as::

    todo-tree [OPTIONS] COMMAND [ARGS]...

or, during development::

    python -m todotree.cli.main

Commands
--------
scan        Scan a directory tree and show its annotations
stats       Show annotation counts by tag and priority
tags        List the resolved tag set
init        Write a starter configuration file
version     Show version information
"""
from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from todotree.config.loader import CliOptions, Config, load_config
from todotree.errors import ConfigError

if TYPE_CHECKING:
    from todotree.results.models import ScanResult

console = Console()
err_console = Console(stderr=True)


def _split(values: tuple[str, ...]) -> list[str] | None:
    """Flatten repeatable, comma-separated option values."""
    items = [part.strip() for value in values for part in value.split(",") if part.strip()]
    return items or None


def _load_or_exit(path: str, config_file: str | None, cli_options: CliOptions) -> Config:
    """Load and merge configuration, exiting on error."""
    try:
        config = load_config(path, config_file)
    except ConfigError as exc:
        err_console.print(f"[red]Config error:[/red] {escape(str(exc))}")
        sys.exit(1)
    config.merge_with_cli(cli_options)
    return config


def _scan_or_exit(path: str, config: Config) -> "ScanResult":
    """Run the scan pipeline, exiting on configuration errors."""
    from todotree.pattern.compiler import compile_pattern
    from todotree.results.aggregator import aggregate
    from todotree.scanner.scanner import DirectoryScanner

    try:
        registry = config.build_registry()
        pattern = compile_pattern(registry, config.match_options())
        scanner = DirectoryScanner(pattern, registry, config.scan_options())
        return aggregate(scanner.scan(path), root=path)
    except ConfigError as exc:
        err_console.print(f"[red]Config error:[/red] {escape(str(exc))}")
        sys.exit(1)


def _scan_options(func):
    """Attach the options shared by ``scan`` and ``stats``."""
    decorators = [
        click.argument("path", type=click.Path(exists=False), default="."),
        click.option("--tags", "-t", multiple=True, help="Tags to search for (comma-separated or repeated)"),
        click.option("--include", "-i", multiple=True, help="Only scan files matching these globs"),
        click.option("--exclude", "-e", multiple=True, help="Skip paths matching these globs"),
        click.option("--ignore-case", is_flag=True, default=False, help="Match tags regardless of case"),
        click.option(
            "--case-sensitive/--no-case-sensitive",
            default=None,
            help="Force case-sensitive (or insensitive) tag matching",
        ),
        click.option("--no-require-colon", is_flag=True, default=False, help="Accept tags without a trailing colon"),
        click.option("--hidden", is_flag=True, default=False, help="Include hidden files and directories"),
        click.option("--follow-links", is_flag=True, default=False, help="Follow symbolic links"),
        click.option("--no-gitignore", is_flag=True, default=False, help="Do not honour .gitignore files"),
        click.option("--max-depth", type=click.IntRange(min=0), default=None, help="Maximum depth, 0 for unlimited"),
        click.option("--workers", "-j", type=click.IntRange(min=0), default=None, help="Worker threads, 0 for auto"),
        click.option("--config", "config_file", type=click.Path(exists=True, dir_okay=False), default=None, help="Use this config file"),
    ]
    for decorator in reversed(decorators):
        func = decorator(func)
    return func


def _cli_options(**kwargs: object) -> CliOptions:
    return CliOptions(
        tags=_split(kwargs["tags"]),  # type: ignore[arg-type]
        include=_split(kwargs["include"]),  # type: ignore[arg-type]
        exclude=_split(kwargs["exclude"]),  # type: ignore[arg-type]
        json=bool(kwargs.get("json_output", False)),
        flat=bool(kwargs.get("flat", False)),
        no_color=bool(kwargs.get("no_color", False)),
        case_sensitive=kwargs["case_sensitive"],  # type: ignore[arg-type]
        ignore_case=bool(kwargs["ignore_case"]),
        no_require_colon=bool(kwargs["no_require_colon"]),
        hidden=bool(kwargs["hidden"]),
        follow_links=bool(kwargs["follow_links"]),
        no_gitignore=bool(kwargs["no_gitignore"]),
        max_depth=kwargs["max_depth"],  # type: ignore[arg-type]
        workers=kwargs["workers"],  # type: ignore[arg-type]
    )


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(package_name="todo-tree")
@click.option("--verbose", "-v", is_flag=True, default=False, help="Log debug output to stderr")
def cli(verbose: bool) -> None:
    """Find TODO, FIXME, BUG and other annotations in a source tree."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=err_console, show_path=False)],
        )


# ---------------------------------------------------------------------------
# version command
# ---------------------------------------------------------------------------


@cli.command(name="version")
def version_command() -> None:
    """Show detailed version information."""
    from todotree import __version__

    table = Table(show_header=False, box=None)
    table.add_row("[bold]todo-tree[/bold]", f"v{__version__}")
    table.add_row("Python", f"{sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}")
    table.add_row("Platform", sys.platform)
    console.print(table)


# ---------------------------------------------------------------------------
# scan command
# ---------------------------------------------------------------------------


@cli.command(name="scan")
@_scan_options
@click.option("--json", "json_output", is_flag=True, default=False, help="Print results as JSON")
@click.option("--flat", is_flag=True, default=False, help="Print one line per annotation")
@click.option("--no-color", is_flag=True, default=False, help="Disable colored output")
@click.option(
    "--min-priority",
    type=click.Choice(["low", "medium", "high", "critical"], case_sensitive=False),
    default=None,
    help="Only show annotations at or above this priority",
)
def scan_command(path: str, config_file: str | None, min_priority: str | None, **kwargs: object) -> None:
    """Scan PATH for annotations and print them as a tree.

    PATH defaults to the current directory.

    Examples:

    \b
        todo-tree scan src --tags TODO,FIXME
        todo-tree scan . --json > todos.json
        todo-tree scan --flat --min-priority high
    """
    from todotree.cli.render import render_flat, render_tree
    from todotree.results.serializer import ResultSerializer
    from todotree.tags.defaults import Priority

    config = _load_or_exit(path, config_file, _cli_options(**kwargs))
    result = _scan_or_exit(path, config)
    if min_priority:
        result = result.filter_by_priority(Priority.parse(min_priority))

    if config.json:
        click.echo(ResultSerializer().to_json(result))
        return

    out = Console(no_color=True, highlight=False) if config.no_color else console
    if config.flat:
        render_flat(out, result)
    else:
        render_tree(out, result)


# ---------------------------------------------------------------------------
# stats command
# ---------------------------------------------------------------------------


@cli.command(name="stats")
@_scan_options
def stats_command(path: str, config_file: str | None, **kwargs: object) -> None:
    """Show annotation counts for PATH by tag and priority."""
    from todotree.cli.render import render_stats

    config = _load_or_exit(path, config_file, _cli_options(**kwargs))
    result = _scan_or_exit(path, config)
    render_stats(console, result)


# ---------------------------------------------------------------------------
# tags command
# ---------------------------------------------------------------------------


@cli.command(name="tags")
@click.argument("path", type=click.Path(exists=False), default=".")
@click.option("--config", "config_file", type=click.Path(exists=True, dir_okay=False), default=None, help="Use this config file")
@click.option("--ignore-case", is_flag=True, default=False, help="Resolve tags regardless of case")
def tags_command(path: str, config_file: str | None, ignore_case: bool) -> None:
    """List the tags that a scan of PATH would use."""
    from todotree.cli.render import render_tags

    config = _load_or_exit(path, config_file, CliOptions(ignore_case=ignore_case))
    try:
        registry = config.build_registry()
    except ConfigError as exc:
        err_console.print(f"[red]Config error:[/red] {escape(str(exc))}")
        sys.exit(1)
    render_tags(console, registry)


# ---------------------------------------------------------------------------
# init command
# ---------------------------------------------------------------------------


@cli.command(name="init")
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["json", "yaml"], case_sensitive=False),
    default="json",
    help="Config file format",
)
@click.option("--force", is_flag=True, default=False, help="Overwrite an existing file")
def init_command(output_format: str, force: bool) -> None:
    """Write a starter .todorc file in the current directory."""
    from todotree.tags.defaults import default_tag_names

    name = ".todorc.json" if output_format == "json" else ".todorc.yaml"
    target = Path.cwd() / name
    if target.exists() and not force:
        err_console.print(f"[red]Error:[/red] {name} already exists (use --force to overwrite)")
        sys.exit(1)

    config = Config(tags=default_tag_names(), exclude=["node_modules/**", "target/**"])
    try:
        config.save(target)
    except ConfigError as exc:
        err_console.print(f"[red]Error:[/red] {escape(str(exc))}")
        sys.exit(1)
    console.print(f"[green]Created[/green] {name}")


if __name__ == "__main__":
    cli()
