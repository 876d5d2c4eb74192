"""
Shared utilities: Rich consoles, plain line output, diagnostics and logging setup.
"""

from __future__ import annotations

import logging
from typing import Iterable

from rich.console import Console
from rich.logging import RichHandler
from rich.text import Text

console = Console()
err_console = Console(stderr=True)


# ── Output ────────────────────────────────────────────────────────────────────


def print_lines(lines: Iterable[str]) -> None:
    """Write *lines* to the console's stream byte for byte.

    The text modes are consumed by scripts, so Rich rendering (which strips
    control codes) is bypassed.  Undecodable interface names are written
    back as their original bytes.
    """
    out = console.file
    buffer = getattr(out, "buffer", None)
    if buffer is None:
        for line in lines:
            out.write(f"{line}\n")
        out.flush()
        return
    out.flush()
    encoding = getattr(out, "encoding", None) or "utf-8"
    for line in lines:
        buffer.write(f"{line}\n".encode(encoding, "surrogateescape"))
    buffer.flush()


def print_error(message: str) -> None:
    """Write a one-line diagnostic to stderr."""
    line = Text()
    line.append("✘ ", style="bold red")
    line.append(message, style="red")
    err_console.print(line, soft_wrap=True, highlight=False)


# ── Logging ───────────────────────────────────────────────────────────────────


def setup_logging(verbose: bool = False, default_level: int = logging.WARNING) -> None:
    """Route the stdlib ``logging`` tree to a Rich handler on stderr."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else default_level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=verbose, rich_tracebacks=True)],
        force=True,
    )
