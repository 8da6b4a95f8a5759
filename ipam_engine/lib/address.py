"""
Address arithmetic over fixed-length big-endian byte sequences.

The same routines serve 4-byte (IPv4) and 16-byte (IPv6) addresses; nothing
here depends on the address family beyond the length of the input.
"""

import ipaddress
from typing import Tuple, Union

from ipam_engine.exceptions import InvalidAddress

AddressLike = Union[bytes, bytearray, str, ipaddress.IPv4Address, ipaddress.IPv6Address]

IPV4_LENGTH = 4
IPV6_LENGTH = 16


def increment(addr: bytes) -> Tuple[bytes, bool]:
    """
    Add one to an address with carry propagation.

    Args:
        addr: Big-endian address bytes

    Returns:
        Tuple of (result, overflow). On overflow the result wraps to all zero bytes.
    """
    out = bytearray(addr)
    for i in range(len(out) - 1, -1, -1):
        if out[i] == 0xFF:
            out[i] = 0
            continue
        out[i] += 1
        return bytes(out), False
    return bytes(out), True


def decrement(addr: bytes) -> Tuple[bytes, bool]:
    """
    Subtract one from an address with borrow propagation.

    Args:
        addr: Big-endian address bytes

    Returns:
        Tuple of (result, overflow). On overflow the result wraps to all 0xFF bytes.
    """
    out = bytearray(addr)
    for i in range(len(out) - 1, -1, -1):
        if out[i] == 0:
            out[i] = 0xFF
            continue
        out[i] -= 1
        return bytes(out), False
    return bytes(out), True


def compare(a: bytes, b: bytes) -> int:
    """Return -1, 0 or 1 comparing two equal-length addresses."""
    if a < b:
        return -1
    if a > b:
        return 1
    return 0


def is_adjacent(a: bytes, b: bytes) -> bool:
    """Return True if ``b`` immediately follows ``a``."""
    nxt, overflow = increment(a)
    return not overflow and nxt == b


def distance(start: bytes, end: bytes) -> int:
    """Number of addresses in the inclusive interval [start, end]."""
    return int.from_bytes(end, "big") - int.from_bytes(start, "big") + 1


def offset(addr: bytes, count: int) -> bytes:
    """
    Advance an address by ``count`` positions.

    Raises:
        InvalidAddress: If the result does not fit in the address length
    """
    value = int.from_bytes(addr, "big") + count
    try:
        return value.to_bytes(len(addr), "big")
    except OverflowError:
        raise InvalidAddress(address=addr, details=f"offset {count} overflows address space")


def to_bytes(value: AddressLike) -> bytes:
    """
    Normalize an address to its packed big-endian form.

    Args:
        value: Raw bytes, textual address ("10.0.0.1", "fd00::1") or ipaddress object

    Returns:
        Address bytes (4 or 16 bytes for textual input)

    Raises:
        InvalidAddress: If the value is empty or cannot be parsed
    """
    if isinstance(value, (bytes, bytearray)):
        if not value:
            raise InvalidAddress(address=value, details="empty address")
        return bytes(value)
    if isinstance(value, (ipaddress.IPv4Address, ipaddress.IPv6Address)):
        return value.packed
    if isinstance(value, str):
        try:
            return ipaddress.ip_address(value.strip()).packed
        except ValueError as e:
            raise InvalidAddress(address=value, details=str(e))
    raise InvalidAddress(address=value, details=f"unsupported type {type(value).__name__}")


def to_text(addr: bytes) -> str:
    """Render address bytes for humans; non-IP lengths fall back to hex."""
    if len(addr) in (IPV4_LENGTH, IPV6_LENGTH):
        return str(ipaddress.ip_address(addr))
    return "0x" + addr.hex()
