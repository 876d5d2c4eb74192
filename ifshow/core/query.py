"""
Query service — the three read-only interface queries.

Every call re-reads the current OS state; nothing is cached.
"""

from __future__ import annotations

from typing import List, Optional

from ifshow.core.collector import EnumerationResult, InterfaceCollector
from ifshow.core.formatter import render_grouped, render_names, render_single


class QueryService:
    def __init__(self, collector: Optional[InterfaceCollector] = None) -> None:
        self._collector = collector or InterfaceCollector()

    def snapshot(self, filter_name: Optional[str] = None) -> EnumerationResult:
        """Return the raw grouping, for views other than the text modes."""
        return self._collector.collect(filter_name)

    def describe_interface(self, name: str) -> List[str]:
        """Addresses of *name*; raises :class:`NotFoundError` if it has none."""
        return render_single(self._collector.collect(name))

    def list_interface_names(self) -> List[str]:
        return render_names(self._collector.collect())

    def describe_all_interfaces(self) -> List[str]:
        return render_grouped(self._collector.collect())
