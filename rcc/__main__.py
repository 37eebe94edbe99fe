"""CLI for rcc.

Usage:
    python -m rcc "13 + 14 * 2"                      # Evaluate an expression
    python -m rcc convert-to-timezone 0 Asia/Tokyo   # alias: ctz
    python -m rcc convert-to-readable 0              # alias: ctr
    python -m rcc current-timestamp                  # alias: ct
"""

from __future__ import annotations

import re

import click
import typer
from rich.console import Console
from typer.core import TyperCommand, TyperGroup

from rcc import __version__
from rcc.expression import NAMES, ExpressionError, evaluate, format_number
from rcc.timestamps import (
    InvalidTimestampError,
    InvalidTimezoneError,
    current_timestamp,
    to_readable,
    to_timezone,
)

I64_MIN = -(2**63)
I64_MAX = 2**63 - 1

EVALUATE = "evaluate"
NO_INPUT = "No input provided. Use '--help' for usage information."

_ALIASES = {
    "ctz": "convert-to-timezone",
    "ctr": "convert-to-readable",
    "ct": "current-timestamp",
}

# "-5 + 3", "-.5", "-(2)", "-pi", "-sqrt(4)" are expressions, not options.
_NEGATIVE_EXPR = re.compile(r"-[\d.(]")
_NEGATIVE_NAME = re.compile(r"-([A-Za-z_]\w*)")
_NEGATIVE_INT = re.compile(r"-\d+")


def _is_expression_token(arg: str) -> bool:
    if not arg.startswith("-") or _NEGATIVE_EXPR.match(arg):
        return True
    name = _NEGATIVE_NAME.match(arg)
    return name is not None and name.group(1) in NAMES


def _route(args: list[str], commands: set[str]) -> list[str]:
    """Rewrite argv so a bare expression becomes the hidden evaluate command.

    A subcommand anywhere on the line wins; free text before it is dropped.
    """
    for index, arg in enumerate(args):
        if arg == "--":
            break
        if arg in commands:
            options = [a for a in args[:index] if not _is_expression_token(a)]
            return options + args[index:]

    for index, arg in enumerate(args):
        if arg == "--":
            return args[:index] + [EVALUATE] + args[index:]
        if _is_expression_token(arg):
            separator = ["--"] if arg.startswith("-") else []
            return args[:index] + [EVALUATE] + separator + args[index:]
    return args


class RccGroup(TyperGroup):
    """Top-level group: resolves command aliases and falls back to evaluation."""

    def get_command(self, ctx: click.Context, cmd_name: str):
        return super().get_command(ctx, _ALIASES.get(cmd_name, cmd_name))

    def parse_args(self, ctx: click.Context, args: list[str]) -> list[str]:
        commands = set(self.list_commands(ctx)) | set(_ALIASES)
        return super().parse_args(ctx, _route(list(args), commands))


class TimestampCommand(TyperCommand):
    """Accepts negative timestamps without requiring a '--' separator."""

    def parse_args(self, ctx: click.Context, args: list[str]) -> list[str]:
        args = list(args)
        for index, arg in enumerate(args):
            if arg == "--":
                break
            if _NEGATIVE_INT.fullmatch(arg):
                args.insert(index, "--")
                break
        return super().parse_args(ctx, args)


app = typer.Typer(
    name="rcc",
    cls=RccGroup,
    help="A CLI tool for performing calculations and managing timestamps.",
)
out = Console(markup=False, highlight=False, emoji=False, soft_wrap=True)
console = Console(stderr=True, markup=False, highlight=False, emoji=False, soft_wrap=True)


def _emit(target: Console, message: str) -> None:
    """Print a message framed by blank lines."""
    target.print()
    target.print(message)
    target.print()


def _version_callback(value: bool) -> None:
    if value:
        out.print(f"rcc {__version__}")
        raise typer.Exit()


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version: bool = typer.Option(
        False, "--version", "-V",
        callback=_version_callback, is_eager=True,
        help="Show the version and exit.",
    ),
) -> None:
    """Evaluate an expression given as a single argument, e.g. rcc '1 + 2',
    or run one of the timestamp commands."""
    if ctx.invoked_subcommand is None:
        _emit(console, NO_INPUT)


@app.command(EVALUATE, hidden=True)
def cmd_evaluate(
    expression: str = typer.Argument(help="Mathematical expression to evaluate, e.g., '13 + 14 * 2'"),
) -> None:
    """Evaluate a mathematical expression."""
    try:
        result = evaluate(expression)
    except ExpressionError as e:
        _emit(console, f"Error: {e}")
        return
    _emit(out, format_number(result))


@app.command("convert-to-timezone", cls=TimestampCommand)
def cmd_convert_to_timezone(
    timestamp: int = typer.Argument(help="The Unix timestamp to convert", min=I64_MIN, max=I64_MAX),
    timezone: str = typer.Argument(help="The target timezone, e.g., America/New_York"),
) -> None:
    """Convert a Unix timestamp to a specific timezone (alias: ctz)."""
    try:
        rendered = to_timezone(timestamp, timezone)
    except (InvalidTimezoneError, InvalidTimestampError) as e:
        _emit(console, str(e))
        return
    _emit(out, rendered)


@app.command("convert-to-readable", cls=TimestampCommand)
def cmd_convert_to_readable(
    timestamp: int = typer.Argument(help="The Unix timestamp to convert", min=I64_MIN, max=I64_MAX),
) -> None:
    """Convert a Unix timestamp to local time, YYYY-MM-DD HH:MM:SS (alias: ctr)."""
    try:
        rendered = to_readable(timestamp)
    except InvalidTimestampError as e:
        _emit(console, str(e))
        return
    _emit(out, rendered)


@app.command("current-timestamp")
def cmd_current_timestamp() -> None:
    """Print the current Unix timestamp (alias: ct)."""
    _emit(out, str(current_timestamp()))


if __name__ == "__main__":
    app()
