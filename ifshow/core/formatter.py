"""
Text rendering of an enumeration result.

The three line-oriented modes are what the CLI prints and what the agent
sends over the wire, so their layout is fixed.  ``build_table`` is a Rich
view for interactive use only.
"""

from __future__ import annotations

from typing import List

from rich import box
from rich.table import Table

from ifshow.core.collector import EnumerationResult


def render_single(result: EnumerationResult) -> List[str]:
    """One ``address/prefix`` line per address, no interface name."""
    return [record.cidr for group in result for record in group.addresses]


def render_names(result: EnumerationResult) -> List[str]:
    return [group.name for group in result]


def render_grouped(result: EnumerationResult) -> List[str]:
    """``name:`` headers with indented addresses, blank line between groups."""
    lines: list[str] = []
    for i, group in enumerate(result):
        if i:
            lines.append("")
        lines.append(f"{group.name}:")
        lines.extend(f"  {record.cidr}" for record in group.addresses)
    return lines


def build_table(result: EnumerationResult, title: str = "Network Interfaces") -> Table:
    """Render *result* as a Rich table (one row per address)."""
    table = Table(title=title, box=box.ROUNDED, title_style="bold bright_cyan", expand=False)
    table.add_column("Interface", style="bold white")
    table.add_column("Family", style="dim")
    table.add_column("Address", style="bold cyan")
    table.add_column("Prefix", justify="right", style="green")

    for group in result:
        if not group.addresses:
            table.add_row(group.name, "—", "[dim](no address)[/dim]", "")
            continue
        for i, record in enumerate(group.addresses):
            table.add_row(
                group.name if i == 0 else "",
                record.family.label,
                record.address_text,
                f"/{record.prefix_length}",
            )
    return table
