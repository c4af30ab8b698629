"""Rich renderers for scan results.

The renderers only read ``ScanResult`` values; grouping by directory for
the tree view is done here from the path components of each file.
"""
from __future__ import annotations

from pathlib import Path

from rich.console import Console
from rich.table import Table
from rich.text import Text
from rich.tree import Tree

from todotree.results.models import AnnotationItem, FileResult, ScanResult
from todotree.tags.defaults import Priority
from todotree.tags.registry import TagRegistry

PRIORITY_COLORS: dict[Priority, str] = {
    Priority.CRITICAL: "red",
    Priority.HIGH: "yellow",
    Priority.MEDIUM: "cyan",
    Priority.LOW: "green",
}


def _file_link(result: ScanResult, file_result: FileResult, line: int | None = None) -> str:
    root = Path(result.root) if result.root else Path.cwd()
    target = root if root.is_file() else root / file_result.file_path
    uri = target.resolve().as_uri()
    return f"{uri}#L{line}" if line else uri


def _item_text(item: AnnotationItem) -> Text:
    color = PRIORITY_COLORS[item.priority]
    text = Text()
    text.append(f"[Line {item.line_number}] ", style="dim")
    text.append(item.tag_name, style=f"bold {color}")
    if item.author:
        text.append(f"({item.author})", style=color)
    text.append(": ")
    text.append(item.raw_text)
    return text


def render_tree(console: Console, result: ScanResult) -> None:
    """Print files grouped by directory, with their annotations below."""
    root_label = result.root or "."
    tree = Tree(Text(root_label, style="bold"))
    branches: dict[tuple[str, ...], Tree] = {(): tree}

    for file_result in result.files:
        if not file_result.items and file_result.error is None:
            continue
        parts = tuple(file_result.file_path.split("/"))
        for depth in range(1, len(parts)):
            key = parts[:depth]
            if key not in branches:
                branches[key] = branches[key[:-1]].add(
                    Text(parts[depth - 1] + "/", style="bold blue")
                )
        label = Text(parts[-1], style=f"bold link {_file_link(result, file_result)}")
        if file_result.error is not None:
            label.append(f"  {file_result.error}", style="red")
        else:
            label.append(f" ({len(file_result.items)})", style="dim")
        node = branches[parts[:-1]].add(label)
        for item in file_result.items:
            node.add(_item_text(item))

    console.print(tree)
    render_footer(console, result)


def render_flat(console: Console, result: ScanResult) -> None:
    """Print one ``path:line:col`` entry per annotation."""
    for file_result in result.files:
        if file_result.error is not None:
            console.print(Text(f"{file_result.file_path}: {file_result.error}", style="red"))
        for item in file_result.items:
            location = f"{item.file_path}:{item.line_number}:{item.column}"
            line = Text(
                location,
                style=f"link {_file_link(result, file_result, item.line_number)}",
            )
            line.append(" ")
            line.append_text(_item_text(item))
            console.print(line)
    render_footer(console, result)


def render_footer(console: Console, result: ScanResult) -> None:
    summary = result.summary
    if summary.total_count == 0:
        console.print("[green]No annotations found.[/green]")
    else:
        console.print(
            f"\n[bold]{summary.total_count}[/bold] annotation(s) in "
            f"{summary.files_with_items} of {summary.files_scanned} file(s)"
        )
    if summary.error_file_count:
        console.print(f"[red]{summary.error_file_count} file(s) could not be read[/red]")


def render_stats(console: Console, result: ScanResult) -> None:
    """Print per-tag and per-priority count tables."""
    summary = result.summary

    tags = Table(title="Annotations by tag")
    tags.add_column("Tag", style="bold")
    tags.add_column("Count", justify="right")
    tags.add_column("Share", justify="right")
    for tag, count in sorted(summary.by_tag.items(), key=lambda kv: (-kv[1], kv[0])):
        share = count / summary.total_count * 100 if summary.total_count else 0.0
        tags.add_row(Text(tag), str(count), f"{share:.1f}%")
    console.print(tags)

    levels = Table(title="Annotations by priority")
    levels.add_column("Priority", style="bold")
    levels.add_column("Count", justify="right")
    for priority, count in summary.by_priority.items():
        color = PRIORITY_COLORS[priority]
        levels.add_row(f"[{color}]{priority.label}[/{color}]", str(count))
    console.print(levels)

    console.print(
        f"\n[bold]Total:[/bold] {summary.total_count}  "
        f"[bold]Files scanned:[/bold] {summary.files_scanned}  "
        f"[bold]With annotations:[/bold] {summary.files_with_items}  "
        f"[bold]Unreadable:[/bold] {summary.error_file_count}"
    )


def render_tags(console: Console, registry: TagRegistry) -> None:
    """Print the resolved tag set."""
    table = Table(title="Tags")
    table.add_column("Tag", style="bold")
    table.add_column("Priority")
    table.add_column("Aliases")
    table.add_column("Enabled")
    table.add_column("Description")
    for tag in sorted(registry, key=lambda t: (-t.priority.value, t.name)):
        color = PRIORITY_COLORS[tag.priority]
        table.add_row(
            Text(tag.name),
            f"[{color}]{tag.priority.label}[/{color}]",
            Text(", ".join(sorted(tag.aliases)) or "-"),
            "[green]yes[/green]" if tag.enabled else "[dim]no[/dim]",
            Text(tag.description),
        )
    console.print(table)
