"""
Error kinds raised by the enumeration engine, the agent protocol and the client.
"""

from __future__ import annotations


class IfShowError(Exception):
    """Base class for every ifshow failure."""


class NotFoundError(IfShowError):
    """A filtered query matched no IPv4/IPv6 address on the host."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Interface '{name}' not found")
        self.name = name


class AddressSourceError(IfShowError):
    """The OS interface enumeration call itself failed."""


class MalformedRequestError(IfShowError):
    """A peer sent a missing, unknown or incomplete command."""


class AgentUnreachableError(IfShowError):
    """The client could not resolve or connect to a remote agent."""
