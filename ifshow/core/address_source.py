"""
Address source — the host facility listing configured interface addresses.

The engine only needs a zero-argument callable returning ``RawAddress``
tuples, so tests can inject synthetic data.  ``psutil_address_source`` is
the default adapter over ``psutil.net_if_addrs()``.
"""

from __future__ import annotations

import logging
import socket
from typing import Callable, Iterable, List, NamedTuple, Optional

import psutil

from ifshow.core.errors import AddressSourceError

log = logging.getLogger(__name__)


class RawAddress(NamedTuple):
    """One (name, family, address, netmask) entry as reported by the OS."""

    name: Optional[str]
    family: int
    address: Optional[bytes]
    netmask: Optional[bytes]


AddressSource = Callable[[], Iterable[RawAddress]]


# ── Helpers ───────────────────────────────────────────────────────────────────


def _pack(family: int, text: Optional[str]) -> Optional[bytes]:
    """Convert a presentation-form address to packed bytes (``None`` if absent)."""
    if not text:
        return None
    # IPv6 link-local addresses carry a zone suffix, e.g. "fe80::1%eth0"
    text = text.split("%", 1)[0]
    try:
        return socket.inet_pton(family, text)
    except (OSError, ValueError):
        log.debug("Unparseable address %r for family %s", text, family)
        return None


# ── Public API ────────────────────────────────────────────────────────────────


def psutil_address_source() -> List[RawAddress]:
    """List every address psutil reports, in interface order.

    Non-IP entries (link-layer etc.) are kept with ``address=None`` so that
    address-less interfaces still show up in name listings.
    """
    try:
        table = psutil.net_if_addrs()
    except (OSError, psutil.Error) as exc:
        raise AddressSourceError(f"Interface enumeration failed: {exc}") from exc

    entries: list[RawAddress] = []
    for name, addrs in table.items():
        for snic in addrs:
            family = int(snic.family)
            if family in (socket.AF_INET, socket.AF_INET6):
                entries.append(
                    RawAddress(name, family, _pack(family, snic.address), _pack(family, snic.netmask))
                )
            else:
                entries.append(RawAddress(name, family, None, None))
    log.debug("psutil reported %d address entries", len(entries))
    return entries
