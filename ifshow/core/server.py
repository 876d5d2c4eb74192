"""
Agent listener and accept loop.

Accepted connections are handed to a bounded thread pool.  Each connection
is served start to finish by one worker; with ``workers=1`` the agent
behaves as a strictly sequential accept → serve → accept loop.
"""

from __future__ import annotations

import logging
import socket
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Optional

from ifshow.config import DEFAULT_AGENT_PORT, DEFAULT_BIND_ADDRESS, DEFAULT_WORKERS, PLATFORM
from ifshow.core.protocol import ProtocolHandler

log = logging.getLogger(__name__)


def open_listener(host: str = DEFAULT_BIND_ADDRESS, port: int = DEFAULT_AGENT_PORT) -> socket.socket:
    """Create a bound, listening TCP socket.

    ``"::"`` (or ``""``) listens on every IPv6 and, where supported, IPv4
    address; any other *host* picks its family from the address itself.
    """
    if host in ("", "::") and PLATFORM.has_dualstack:
        return socket.create_server(("::", port), family=socket.AF_INET6, dualstack_ipv6=True)

    family = socket.AF_INET6 if ":" in host else socket.AF_INET
    return socket.create_server((host or "0.0.0.0", port), family=family)


class ConnectionLoop:
    """Accept connections from *listener* and serve each with *handler*."""

    def __init__(
        self,
        listener: socket.socket,
        handler: Optional[ProtocolHandler] = None,
        workers: int = DEFAULT_WORKERS,
    ) -> None:
        if workers < 1:
            raise ValueError("workers must be at least 1")
        self._listener = listener
        self._handler = handler or ProtocolHandler()
        self._workers = workers
        self._slots = threading.BoundedSemaphore(workers)
        self._stopped = threading.Event()

    @property
    def workers(self) -> int:
        return self._workers

    def _serve(self, conn: socket.socket, peer) -> None:
        try:
            exchange = self._handler.handle(conn, peer)
            log.debug("Closed %s after %d line(s)", peer, exchange.lines_sent)
        except Exception:
            log.exception("Handler failed for %s", peer)
        finally:
            self._slots.release()

    def serve_forever(self) -> None:
        """Run until :meth:`stop` is called; in-flight connections are drained."""
        log.info("Serving on %s with %d worker(s)", self._listener.getsockname()[:2], self._workers)
        with ThreadPoolExecutor(max_workers=self._workers, thread_name_prefix="ifshow-conn") as pool:
            while not self._stopped.is_set():
                self._slots.acquire()
                try:
                    conn, peer = self._listener.accept()
                except OSError:
                    self._slots.release()
                    if self._stopped.is_set():
                        break
                    raise
                log.info("Connection from %s", peer[:2])
                pool.submit(self._serve, conn, peer)
        log.info("Agent stopped")

    def stop(self) -> None:
        """Stop accepting and close the listener (safe from another thread)."""
        self._stopped.set()
        try:
            self._listener.shutdown(socket.SHUT_RDWR)
        except OSError:
            pass  # not connected / already closed
        self._listener.close()
