"""
IPAM engine - free-list IP address allocator.

This package tracks which addresses of one or more IPv4/IPv6 ranges are free
and hands them out one at a time or in aligned blocks.
"""

__version__ = "0.1.0"
__all__ = ["allocator", "pools", "cli"]
