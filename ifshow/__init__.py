"""ifshow — report IPv4/IPv6 addresses and prefixes of network interfaces."""

__app_name__ = "ifshow"
__version__ = "1.0.0"
