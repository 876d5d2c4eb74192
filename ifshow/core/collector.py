"""
Interface collector — groups raw address entries by interface name.

Names are deduplicated in first-seen order; each interface's addresses
keep the order in which the address source reported them.
"""

from __future__ import annotations

import logging
import socket
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from ifshow.core.address_source import AddressSource, RawAddress, psutil_address_source
from ifshow.core.errors import AddressSourceError, NotFoundError
from ifshow.core.prefix import prefix_length

log = logging.getLogger(__name__)


# ── Data model ────────────────────────────────────────────────────────────────


class Family(Enum):
    IPV4 = int(socket.AF_INET)
    IPV6 = int(socket.AF_INET6)

    @property
    def width(self) -> int:
        """Address length in bytes."""
        return 4 if self is Family.IPV4 else 16

    @property
    def label(self) -> str:
        return "IPv4" if self is Family.IPV4 else "IPv6"


@dataclass(frozen=True)
class AddressRecord:
    """One configured address of one interface."""

    interface_name: str
    family: Family
    address: bytes
    netmask: bytes

    @property
    def address_text(self) -> str:
        """Dotted-decimal (IPv4) or compressed colon-hex (IPv6) form."""
        return socket.inet_ntop(self.family.value, self.address)

    @property
    def prefix_length(self) -> int:
        return prefix_length(self.netmask)

    @property
    def cidr(self) -> str:
        return f"{self.address_text}/{self.prefix_length}"


@dataclass
class InterfaceGroup:
    name: str
    addresses: List[AddressRecord] = field(default_factory=list)


EnumerationResult = List[InterfaceGroup]


# ── Collector ─────────────────────────────────────────────────────────────────


def _to_record(raw: RawAddress) -> Optional[AddressRecord]:
    """Build an *AddressRecord* from an IPv4/IPv6 entry, else ``None``."""
    try:
        family = Family(raw.family)
    except ValueError:
        return None
    if raw.address is None or len(raw.address) != family.width:
        return None
    netmask = raw.netmask
    if netmask is None or len(netmask) != family.width:
        netmask = bytes(family.width)
    return AddressRecord(raw.name, family, raw.address, netmask)


class InterfaceCollector:
    """Walk the address source once per call and group its entries."""

    def __init__(self, source: AddressSource = psutil_address_source) -> None:
        self._source = source

    def collect(self, filter_name: Optional[str] = None) -> EnumerationResult:
        """Return the interfaces in first-seen order.

        With *filter_name*, only entries whose name matches exactly are kept
        and :class:`NotFoundError` is raised if none of them is an IPv4/IPv6
        address.  Without it, every named interface appears, even one with
        no IP address.
        """
        try:
            entries = list(self._source())
        except OSError as exc:
            raise AddressSourceError(f"Interface enumeration failed: {exc}") from exc

        groups: Dict[str, InterfaceGroup] = {}
        for raw in entries:
            if not raw.name:
                continue
            if filter_name is not None and raw.name != filter_name:
                continue
            record = _to_record(raw)
            if record is None and filter_name is not None:
                continue
            group = groups.get(raw.name)
            if group is None:
                group = groups[raw.name] = InterfaceGroup(raw.name)
            if record is not None:
                group.addresses.append(record)

        if filter_name is not None and not groups:
            raise NotFoundError(filter_name)

        log.debug("Collected %d interface(s) from %d entries", len(groups), len(entries))
        return list(groups.values())
