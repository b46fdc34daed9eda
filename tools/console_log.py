# -*- coding: utf-8 -*-
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel

# Devvit Tools Console Output
# Level-tagged lines on a rich console. Info goes to stdout, warnings and errors to stderr.

ERROR, WARN, INFO, DEBUG = 0, 1, 2, 3
DEFAULT_LEVEL = INFO

_out = Console(highlight=False)
_err = Console(stderr=True, highlight=False)
_level = DEFAULT_LEVEL


def set_level(level):
    global _level
    _level = max(ERROR, min(DEBUG, int(level)))


def get_level():
    return _level


def debug(message):
    if _level >= DEBUG:
        _out.print(f"[dim]\\[DEBUG] {escape(str(message))}[/dim]")


def info(message):
    if _level >= INFO:
        _out.print(f"[bold blue]\\[INFO][/bold blue] {escape(str(message))}")


def warn(message):
    if _level >= WARN:
        _err.print(f"[bold yellow]\\[WARN][/bold yellow] {escape(str(message))}")


def error(message):
    _err.print(f"[bold red]\\[ERROR][/bold red] {escape(str(message))}")


def panel(body, title):
    """Prints an already-escaped block of markup inside a panel."""
    if _level >= INFO:
        _out.print(Panel.fit(body, title=title, border_style="blue"))
