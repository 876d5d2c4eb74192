"""
CLI entry-point for ifshow.

Three commands:
  • **local** (default) — ``ifshow``, ``ifshow local -i eth0``, ``ifshow local -a``
  • **agent** — serve the same data on TCP port 5555
  • **remote** — ``ifshow remote -n 10.0.0.2 -a`` queries an agent
"""

from __future__ import annotations

import argparse
import logging
import sys

from ifshow import __app_name__, __version__
from ifshow.config import (
    DEFAULT_AGENT_PORT,
    DEFAULT_BIND_ADDRESS,
    DEFAULT_CONNECT_TIMEOUT,
    DEFAULT_WORKERS,
)


def _add_selection(sp: argparse.ArgumentParser, required: bool) -> None:
    group = sp.add_mutually_exclusive_group(required=required)
    group.add_argument("-i", "--ifname", help="Show the IPv4/IPv6 prefixes of this interface")
    group.add_argument("-a", "--all", action="store_true", dest="show_all",
                       help="Show every interface with its IPv4/IPv6 prefixes")


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="ifshow",
        description=f"{__app_name__} — list network interfaces and their address prefixes.",
    )
    p.add_argument("-V", "--version", action="version", version=f"%(prog)s {__version__}")
    p.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging on stderr")

    sub = p.add_subparsers(dest="command", help="Command to run (default: local).")

    # ── local ─────────────────────────────────────────────────────────────
    sp = sub.add_parser("local", help="Inspect this host's interfaces (names only without options)")
    _add_selection(sp, required=False)
    sp.add_argument("--table", action="store_true", help="Render as a table instead of plain text")

    # ── agent ─────────────────────────────────────────────────────────────
    sp = sub.add_parser("agent", help="Serve interface data to remote clients")
    sp.add_argument("-b", "--bind", default=DEFAULT_BIND_ADDRESS,
                    help=f"Address to listen on (default: {DEFAULT_BIND_ADDRESS})")
    sp.add_argument("-p", "--port", type=int, default=DEFAULT_AGENT_PORT,
                    help=f"TCP port (default: {DEFAULT_AGENT_PORT})")
    sp.add_argument("-w", "--workers", type=int, default=DEFAULT_WORKERS,
                    help=f"Connections served in parallel (default: {DEFAULT_WORKERS})")

    # ── remote ────────────────────────────────────────────────────────────
    sp = sub.add_parser("remote", help="Query an ifshow agent on another host")
    sp.add_argument("-n", "--addr", required=True, help="Address or hostname of the remote agent")
    _add_selection(sp, required=True)
    sp.add_argument("-p", "--port", type=int, default=DEFAULT_AGENT_PORT,
                    help=f"Agent TCP port (default: {DEFAULT_AGENT_PORT})")
    sp.add_argument("-t", "--timeout", type=float, default=DEFAULT_CONNECT_TIMEOUT,
                    help=f"Timeout in seconds (default: {DEFAULT_CONNECT_TIMEOUT})")

    return p


def _run_local(args: argparse.Namespace) -> int:
    from ifshow.core.errors import AddressSourceError, NotFoundError
    from ifshow.core.formatter import build_table
    from ifshow.core.query import QueryService
    from ifshow.core.utils import console, print_error, print_lines

    service = QueryService()
    ifname = getattr(args, "ifname", None)
    show_all = getattr(args, "show_all", False)
    try:
        if getattr(args, "table", False):
            console.print(build_table(service.snapshot(ifname)))
        elif ifname:
            print_lines(service.describe_interface(ifname))
        elif show_all:
            print_lines(service.describe_all_interfaces())
        else:
            print_lines(service.list_interface_names())
    except (NotFoundError, AddressSourceError) as exc:
        print_error(str(exc))
        return 1
    return 0


def _run_agent(args: argparse.Namespace) -> int:
    from ifshow.core.server import ConnectionLoop, open_listener
    from ifshow.core.utils import print_error

    try:
        listener = open_listener(args.bind, args.port)
    except OSError as exc:
        print_error(f"Cannot listen on [{args.bind}]:{args.port}: {exc}")
        return 1

    loop = ConnectionLoop(listener, workers=args.workers)
    try:
        loop.serve_forever()
    finally:
        loop.stop()
    return 0


def _run_remote(args: argparse.Namespace) -> int:
    from ifshow.core.errors import AgentUnreachableError
    from ifshow.core.protocol import format_request, query_agent
    from ifshow.core.utils import print_error, print_lines

    request = format_request(args.ifname, args.show_all)
    try:
        lines = query_agent(args.addr, request, port=args.port, timeout=args.timeout)
    except AgentUnreachableError as exc:
        print_error(str(exc))
        return 1
    print_lines(lines)
    return 0


def _dispatch(args: argparse.Namespace) -> int:
    """Run the requested command and return the process exit status."""
    cmd = args.command or "local"
    if cmd == "agent":
        return _run_agent(args)
    if cmd == "remote":
        return _run_remote(args)
    return _run_local(args)


def main(argv: list[str] | None = None) -> None:
    """Main entry-point called by the ``ifshow`` console script or ``python -m ifshow``."""
    from ifshow.core.utils import setup_logging

    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command == "agent" and args.workers < 1:
        parser.error("--workers must be at least 1")

    setup_logging(args.verbose, logging.INFO if args.command == "agent" else logging.WARNING)
    try:
        status = _dispatch(args)
    except KeyboardInterrupt:
        print("\nAborted.", file=sys.stderr)
        sys.exit(130)
    sys.exit(status)


if __name__ == "__main__":
    main()
