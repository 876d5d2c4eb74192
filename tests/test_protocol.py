import io
import socket

import pytest

from conftest import FakeSource, v4
from ifshow.core.collector import InterfaceCollector
from ifshow.core.errors import AddressSourceError, MalformedRequestError
from ifshow.core.protocol import (
    ProtocolHandler,
    Request,
    State,
    format_request,
    parse_request,
    read_token,
)
from ifshow.core.query import QueryService


def _exchange(handler, payload, close_write=False):
    """Send *payload* to the handler over a socketpair and return (exchange, reply)."""
    client, server = socket.socketpair()
    with client:
        client.sendall(payload)
        if close_write:
            client.shutdown(socket.SHUT_WR)
        exchange = handler.handle(server)
        chunks = []
        while True:
            data = client.recv(4096)
            if not data:
                break
            chunks.append(data)
    assert server.fileno() == -1
    return exchange, b"".join(chunks)


# ── Tokens & requests ─────────────────────────────────────────────────────────


def test_read_token_skips_leading_whitespace():
    rfile = io.BytesIO(b"  \n\tIFNAME   eth0\n")
    assert read_token(rfile) == "IFNAME"
    assert read_token(rfile) == "eth0"
    assert read_token(rfile) is None


def test_read_token_is_bounded():
    rfile = io.BytesIO(b"A" * 300 + b"\n")
    assert read_token(rfile, max_length=255) == "A" * 255


def test_parse_request_commands():
    assert parse_request(io.BytesIO(b"ALL\n")) == Request("ALL")
    assert parse_request(io.BytesIO(b"IFNAME eth0\n")) == Request("IFNAME", "eth0")


@pytest.mark.parametrize("payload", [b"", b"   \n", b"IFNAME\n", b"all\n", b"BOGUS\n"])
def test_parse_request_rejects(payload):
    with pytest.raises(MalformedRequestError):
        parse_request(io.BytesIO(payload))


def test_unknown_command_stops_reading():
    rfile = io.BytesIO(b"BOGUS\nALL\n")
    with pytest.raises(MalformedRequestError):
        parse_request(rfile)
    assert rfile.tell() == len(b"BOGUS\n")


def test_format_request():
    assert format_request("eth0").to_line() == "IFNAME eth0\n"
    assert format_request(show_all=True).to_line() == "ALL\n"
    with pytest.raises(ValueError):
        format_request("eth0", show_all=True)
    with pytest.raises(ValueError):
        format_request()


# ── Handler ───────────────────────────────────────────────────────────────────


def test_ifname_response(service):
    exchange, reply = _exchange(ProtocolHandler(service), b"IFNAME eth0\n")
    assert reply == b"10.0.0.1/24\nfe80::1/64\n"
    assert exchange.state is State.CLOSED
    assert exchange.lines_sent == 2


def test_all_response(service):
    _, reply = _exchange(ProtocolHandler(service), b"ALL\n")
    assert reply.decode().startswith("lo:\n  127.0.0.1/8\n  ::1/128\n\neth0:\n")
    assert reply.endswith(b"wlan0:\n")


def test_unknown_interface_closes_silently(service):
    exchange, reply = _exchange(ProtocolHandler(service), b"IFNAME nonexistent\n")
    assert reply == b""
    assert exchange.request == Request("IFNAME", "nonexistent")
    assert exchange.lines_sent == 0


def test_bogus_command_closes_without_reading_further(service, host_source):
    exchange, reply = _exchange(ProtocolHandler(service), b"BOGUS\nALL\n")
    assert reply == b""
    assert exchange.request is None
    assert host_source.calls == 0


def test_ifname_without_name(service):
    _, reply = _exchange(ProtocolHandler(service), b"IFNAME\n", close_write=True)
    assert reply == b""


def test_peer_closes_before_command(service):
    exchange, reply = _exchange(ProtocolHandler(service), b"", close_write=True)
    assert reply == b""
    assert exchange.state is State.CLOSED


def test_address_source_failure_is_not_sent(mocker):
    service = mocker.MagicMock()
    service.describe_all_interfaces.side_effect = AddressSourceError("getifaddrs failed")
    _, reply = _exchange(ProtocolHandler(service), b"ALL\n")
    assert reply == b""


def test_repeated_requests_identical(service):
    handler = ProtocolHandler(service)
    _, first = _exchange(handler, b"IFNAME eth0\n")
    _, second = _exchange(handler, b"IFNAME eth0\n")
    assert first == second != b""


def test_non_utf8_interface_name_round_trips():
    source = FakeSource([v4("lo", "127.0.0.1", 8), v4("eth\udcff", "10.0.0.1", 24)])
    handler = ProtocolHandler(QueryService(InterfaceCollector(source)))

    exchange, reply = _exchange(handler, b"ALL\n")
    assert reply == b"lo:\n  127.0.0.1/8\n\neth\xff:\n  10.0.0.1/24\n"
    assert exchange.lines_sent == 5

    exchange, reply = _exchange(handler, b"IFNAME eth\xff\n")
    assert reply == b"10.0.0.1/24\n"
    assert exchange.request == Request("IFNAME", "eth\udcff")
