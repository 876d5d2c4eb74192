"""
Centralised runtime configuration and OS-detection helpers.
"""

import os
import platform
import socket
from dataclasses import dataclass, field


@dataclass(frozen=True)
class PlatformInfo:
    """Immutable snapshot of the host OS and its socket capabilities."""

    system: str = field(default_factory=lambda: platform.system())  # Windows | Linux | Darwin
    release: str = field(default_factory=platform.release)
    is_windows: bool = field(default=False)
    is_linux: bool = field(default=False)
    is_macos: bool = field(default=False)

    # IPv6 sockets available / one "::" socket also accepting IPv4
    has_ipv6: bool = field(default=False)
    has_dualstack: bool = field(default=False)

    def __post_init__(self) -> None:  # pragma: no cover — simple wiring
        object.__setattr__(self, "is_windows", self.system == "Windows")
        object.__setattr__(self, "is_linux", self.system == "Linux")
        object.__setattr__(self, "is_macos", self.system == "Darwin")
        object.__setattr__(self, "has_ipv6", socket.has_ipv6)
        object.__setattr__(self, "has_dualstack", socket.has_dualstack_ipv6())


def _env_int(name: str, default: int) -> int:
    """Read a positive integer from the environment, falling back to *default*."""
    raw = os.environ.get(name, "").strip()
    try:
        value = int(raw)
    except ValueError:
        return default
    return value if value > 0 else default


# Singleton — instantiated once at import time.
PLATFORM = PlatformInfo()

# Agent defaults
DEFAULT_AGENT_PORT = _env_int("IFSHOW_PORT", 5555)
DEFAULT_BIND_ADDRESS = "::" if PLATFORM.has_ipv6 else "0.0.0.0"
DEFAULT_WORKERS = _env_int("IFSHOW_WORKERS", 4)

# Protocol limits
MAX_TOKEN_LENGTH = 255

# Client timeout (seconds) for connecting to a remote agent
DEFAULT_CONNECT_TIMEOUT = 10
