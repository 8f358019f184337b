"""Shared output formatting with ASCII boxes. NO class - just functions.

stdout carries receipt JSON only; boxes and messages go to stderr.
"""
import json

import click

BOX_WIDTH = 60

EXIT_OK = 0
EXIT_DEGRADED = 1
EXIT_ERROR = 2


def print_json(data) -> None:
    """Print JSON data to stdout as one sorted-key line."""
    click.echo(json.dumps(data, sort_keys=True))


def _truncate(text: str, max_len: int = 50) -> str:
    """Truncate text with ellipsis if too long."""
    return text[:max_len-3] + "..." if len(text) > max_len else text


def _box_line(text: str) -> str:
    line = f"│ {text}"
    return line + " " * max(BOX_WIDTH - len(line), 1) + "│"


def _top(title: str) -> str:
    return f"╭─ {title} " + "─" * max(BOX_WIDTH - len(title) - 4, 1) + "╮"


def _bottom() -> str:
    return "╰" + "─" * (BOX_WIDTH - 1) + "╯"


def success_box(title: str, rows: list[tuple[str, str]], next_cmd: str | None = None) -> None:
    """Print bordered summary box with optional Next: suggestion."""
    click.echo(click.style(_top(title), fg="green"), err=True)
    for label, value in rows:
        click.echo(_box_line(f"{label}: {_truncate(str(value), BOX_WIDTH - len(label) - 6)}"), err=True)
    click.echo(click.style(_bottom(), fg="green"), err=True)
    if next_cmd:
        click.echo(f"Next: {next_cmd}", err=True)


def error_box(title: str, message: str, fix_cmd: str | None = None) -> None:
    """Print red-bordered error box with optional fix suggestion."""
    click.echo(click.style(_top(title), fg="red"), err=True)
    click.echo(_box_line(_truncate(message, BOX_WIDTH - 4)), err=True)
    click.echo(click.style(_bottom(), fg="red"), err=True)
    if fix_cmd:
        click.echo(f"Fix: {fix_cmd}", err=True)


def read_jsonl(path: str) -> list:
    """Parse one JSON value per non-blank line.

    Raises:
        click.BadParameter: On a line that is not valid JSON
    """
    items = []
    with open(path) as f:
        for lineno, line in enumerate(f, start=1):
            if not line.strip():
                continue
            try:
                items.append(json.loads(line))
            except json.JSONDecodeError as e:
                raise click.BadParameter(f"{path}:{lineno}: invalid JSON: {e}") from e
    return items


def read_json(path: str):
    """Parse a whole file as one JSON value."""
    with open(path) as f:
        try:
            return json.load(f)
        except json.JSONDecodeError as e:
            raise click.BadParameter(f"{path}: invalid JSON: {e}") from e
