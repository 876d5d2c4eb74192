"""
Agent wire protocol — one plain-text request per TCP connection.

Requests are ``IFNAME <name>\\n`` or ``ALL\\n``; the reply is the
single-interface or grouped text rendering, one line per ``\\n``, and the
agent closes the connection to mark the end.  Errors and unknown commands
are never reported to the peer: the connection is simply closed.
"""

from __future__ import annotations

import logging
import socket
from dataclasses import dataclass
from enum import Enum
from typing import BinaryIO, List, Optional, Tuple

from ifshow.config import DEFAULT_AGENT_PORT, DEFAULT_CONNECT_TIMEOUT, MAX_TOKEN_LENGTH
from ifshow.core.errors import (
    AddressSourceError,
    AgentUnreachableError,
    MalformedRequestError,
    NotFoundError,
)
from ifshow.core.query import QueryService

log = logging.getLogger(__name__)

CMD_IFNAME = "IFNAME"
CMD_ALL = "ALL"
ENCODING = "utf-8"
# Interface names are raw OS bytes; undecodable ones round-trip as surrogates
ERRORS = "surrogateescape"


# ── Request parsing ───────────────────────────────────────────────────────────


class State(Enum):
    AWAIT_COMMAND = "await_command"
    DISPATCH = "dispatch"
    RESPOND = "respond"
    CLOSED = "closed"


@dataclass(frozen=True)
class Request:
    command: str
    argument: Optional[str] = None

    def to_line(self) -> str:
        if self.argument is None:
            return f"{self.command}\n"
        return f"{self.command} {self.argument}\n"


def read_token(rfile: BinaryIO, max_length: int = MAX_TOKEN_LENGTH) -> Optional[str]:
    """Read one whitespace-delimited token, ``None`` on end of stream.

    Leading whitespace (including newlines) is skipped.  A token stops at
    the next whitespace byte or after *max_length* bytes, whichever is first.
    """
    ch = rfile.read(1)
    while ch and ch.isspace():
        ch = rfile.read(1)
    if not ch:
        return None

    buf = bytearray()
    while ch and not ch.isspace():
        buf += ch
        if len(buf) >= max_length:
            break
        ch = rfile.read(1)
    return buf.decode(ENCODING, errors=ERRORS)


def parse_request(rfile: BinaryIO) -> Request:
    """Read a complete request; no token past it is read from *rfile*.

    On a buffered socket stream the underlying ``recv`` may still pull in
    bytes beyond the request, but they are never parsed or acted on.
    """
    command = read_token(rfile)
    if command is None:
        raise MalformedRequestError("no command received")

    if command == CMD_ALL:
        return Request(CMD_ALL)
    if command == CMD_IFNAME:
        name = read_token(rfile)
        if name is None:
            raise MalformedRequestError("IFNAME without an interface name")
        return Request(CMD_IFNAME, name)
    raise MalformedRequestError(f"unknown command {command[:32]!r}")


# ── Agent side ────────────────────────────────────────────────────────────────


@dataclass
class Exchange:
    """What happened on one connection (used for logging and tests)."""

    state: State = State.AWAIT_COMMAND
    request: Optional[Request] = None
    lines_sent: int = 0


def _close(conn: socket.socket) -> None:
    try:
        conn.shutdown(socket.SHUT_RDWR)
    except OSError:
        pass  # peer already gone
    conn.close()


class ProtocolHandler:
    """Serve exactly one request on an accepted connection, then close it."""

    def __init__(self, service: Optional[QueryService] = None) -> None:
        self._service = service or QueryService()

    def _respond(self, request: Request) -> List[str]:
        if request.command == CMD_IFNAME:
            return self._service.describe_interface(request.argument or "")
        return self._service.describe_all_interfaces()

    def handle(self, conn: socket.socket, peer: Optional[Tuple] = None) -> Exchange:
        """Run the AWAIT_COMMAND → DISPATCH → RESPOND → CLOSED sequence.

        The socket and its stream wrappers are released on every path.
        """
        exchange = Exchange()
        try:
            with conn.makefile("rb") as rfile, conn.makefile("wb") as wfile:
                try:
                    request = parse_request(rfile)
                except MalformedRequestError as exc:
                    log.debug("Dropping request from %s: %s", peer, exc)
                    return exchange

                exchange.state = State.DISPATCH
                exchange.request = request
                log.debug("%s requested %s", peer, request.to_line().strip())
                try:
                    lines = self._respond(request)
                except (NotFoundError, AddressSourceError) as exc:
                    log.warning("No response to %s: %s", peer, exc)
                    return exchange

                exchange.state = State.RESPOND
                wfile.write("".join(f"{line}\n" for line in lines).encode(ENCODING, ERRORS))
                exchange.lines_sent = len(lines)
        except OSError as exc:
            log.warning("Connection error with %s: %s", peer, exc)
        finally:
            _close(conn)
            exchange.state = State.CLOSED
        return exchange


# ── Client side ───────────────────────────────────────────────────────────────


def format_request(ifname: Optional[str] = None, show_all: bool = False) -> Request:
    """Build the request for ``-i ifname`` or ``-a``; exactly one must be given."""
    if bool(ifname) == show_all:
        raise ValueError("choose either an interface name or all interfaces")
    if show_all:
        return Request(CMD_ALL)
    return Request(CMD_IFNAME, ifname)


def query_agent(
    host: str,
    request: Request,
    port: int = DEFAULT_AGENT_PORT,
    timeout: Optional[float] = DEFAULT_CONNECT_TIMEOUT,
) -> List[str]:
    """Send *request* to the agent at *host:port* and return its reply lines.

    An empty list means the agent closed without answering (unknown
    interface, or a failure on the agent side).
    """
    try:
        sock = socket.create_connection((host, port), timeout=timeout)
    except OSError as exc:
        raise AgentUnreachableError(f"Unable to connect to {host}:{port}: {exc}") from exc

    with sock:
        try:
            sock.sendall(request.to_line().encode(ENCODING, ERRORS))
            with sock.makefile("rb") as rfile:
                data = rfile.read()
        except OSError as exc:
            raise AgentUnreachableError(f"Connection to {host}:{port} failed: {exc}") from exc
    lines = data.split(b"\n")
    if lines and not lines[-1]:
        lines.pop()
    return [line.decode(ENCODING, ERRORS) for line in lines]
