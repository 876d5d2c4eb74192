import socket
from typing import List

import pytest

from ifshow.core.address_source import RawAddress
from ifshow.core.collector import InterfaceCollector
from ifshow.core.query import QueryService


def v4(name, address, prefix):
    mask = ((0xFFFFFFFF << (32 - prefix)) & 0xFFFFFFFF).to_bytes(4, "big")
    return RawAddress(name, socket.AF_INET, socket.inet_pton(socket.AF_INET, address), mask)


def v6(name, address, prefix):
    mask = ((1 << 128) - (1 << (128 - prefix))).to_bytes(16, "big")
    return RawAddress(name, socket.AF_INET6, socket.inet_pton(socket.AF_INET6, address), mask)


def link(name):
    return RawAddress(name, 17, None, None)  # AF_PACKET


class FakeSource:
    """Synthetic address source that counts how often it is queried."""

    def __init__(self, entries: List[RawAddress]):
        self.entries = list(entries)
        self.calls = 0

    def __call__(self):
        self.calls += 1
        return list(self.entries)


HOST_ENTRIES = [
    link("lo"),
    v4("lo", "127.0.0.1", 8),
    v4("eth0", "10.0.0.1", 24),
    v6("lo", "::1", 128),
    v6("eth0", "fe80::1", 64),
    link("wlan0"),
]


@pytest.fixture
def host_source():
    return FakeSource(HOST_ENTRIES)


@pytest.fixture
def service(host_source):
    return QueryService(InterfaceCollector(host_source))
