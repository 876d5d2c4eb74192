"""
Network mask → prefix length.

Pure Python — works for IPv4 (4-byte) and IPv6 (16-byte) masks alike.
"""

from __future__ import annotations


def prefix_length(mask: bytes) -> int:
    """Count the leading set bits of *mask*, read as a big-endian bit string.

    Counting stops at the first clear bit.  Masks are assumed contiguous and
    are not validated, so ``11110001`` yields 4.
    """
    prefix = 0
    for byte in mask:
        if byte == 0xFF:
            prefix += 8
            continue
        for bit in range(7, -1, -1):
            if not byte & (1 << bit):
                return prefix
            prefix += 1
    return prefix
