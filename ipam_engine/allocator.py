"""Free-list address allocator.

The allocator keeps the free address space as a sorted list of coalesced
ranges and hands out single addresses or aligned blocks from its low end.
"""

import threading
from typing import List, Optional

from oslo_log import log as logging

from ipam_engine.exceptions import (
    AddressFamilyMismatch,
    InvalidRange,
    PoolExhausted,
)
from ipam_engine.lib import address
from ipam_engine.lib.ip_range import IpRange

LOG = logging.getLogger(__name__)

# Block size handed out by get_ip_chunk(); remainders are kept aligned to it.
CHUNK_SIZE = 256


def _ends_before(end: bytes, start: bytes) -> bool:
    """True if an address gap separates ``end`` from a later ``start``."""
    return address.compare(end, start) < 0 and not address.is_adjacent(end, start)


def _is_chunk_aligned(addr: bytes) -> bool:
    return addr[-1] == 0


def _chunk_end(addr: bytes) -> bytes:
    """Last address of the chunk-sized block containing ``addr``."""
    return addr[:-1] + b"\xff"


class IpAllocator:
    """Thread-safe free-list IP address allocator.

    Free List Invariant:
    --------------------
    After every public call the free list is sorted ascending by start,
    pairwise non-overlapping and pairwise non-adjacent, so it is the unique
    minimal representation of the free address set.

    Thread Safety Model:
    --------------------
    A single lock is held for the full duration of every public method,
    including read-only inspection. Operations never block on anything else
    and perform no I/O.

    Address Length:
    ---------------
    One instance operates on one address length (4 bytes for IPv4, 16 for
    IPv6). The length is fixed by the constructor or by the first range
    added; addresses of any other length are rejected with
    AddressFamilyMismatch.
    """

    def __init__(self, address_length: Optional[int] = None):
        """Initialize an allocator with an empty free list.

        Args:
            address_length: Optional fixed address length in bytes
        """
        self._free_list: List[IpRange] = []
        self._address_length = address_length
        self._lock = threading.Lock()

    @property
    def address_length(self) -> Optional[int]:
        return self._address_length

    def add_range(self, start: address.AddressLike, end: address.AddressLike) -> None:
        """Add [start, end] to the free pool, coalescing with neighbours.

        Args:
            start: First address of the range
            end: Last address of the range

        Raises:
            InvalidRange: start is greater than end
            AddressFamilyMismatch: Address length differs from the allocator's
        """
        start, end = self._normalize(start, end)
        if start > end:
            LOG.warning(
                "Rejecting range %s-%s: start is greater than end",
                address.to_text(start), address.to_text(end),
            )
            raise InvalidRange(start=address.to_text(start), end=address.to_text(end))

        with self._lock:
            self._check_length(start, fix=True)
            self._add(start, end)

    def remove_range(self, start: address.AddressLike, end: address.AddressLike) -> bool:
        """Remove [start, end] from the free pool.

        Addresses in the range that are not free are ignored.

        Args:
            start: First address of the range
            end: Last address of the range

        Returns:
            True if the free list changed

        Raises:
            AddressFamilyMismatch: Address length differs from the allocator's
        """
        start, end = self._normalize(start, end)
        if start > end:
            LOG.debug(
                "Ignoring removal of empty range %s-%s",
                address.to_text(start), address.to_text(end),
            )
            return False

        with self._lock:
            self._check_length(start)
            return self._remove(start, end)

    def release_ip(self, addr: address.AddressLike) -> None:
        """Return a single address to the free pool."""
        self.add_range(addr, addr)

    def get_ip(self) -> bytes:
        """Allocate the lowest free address.

        Returns:
            The allocated address

        Raises:
            PoolExhausted: The free list is empty
        """
        with self._lock:
            if not self._free_list:
                raise PoolExhausted(details="no free addresses")

            first = self._free_list[0]
            if first.start == first.end:
                del self._free_list[0]
            else:
                nxt, _ = address.increment(first.start)
                self._free_list[0] = IpRange(nxt, first.end)

            LOG.debug("Allocated address %s", address.to_text(first.start))
            return first.start

    def get_ip_chunk(self) -> List[IpRange]:
        """Allocate one block of at least CHUNK_SIZE addresses.

        Free ranges are consumed from the lowest upward. Within the range
        that completes the block, consumption is extended to the end of its
        CHUNK_SIZE-aligned byte block so any remainder left in that range
        starts on an aligned address.

        Returns:
            Ordered list of the consumed ranges

        Raises:
            PoolExhausted: Fewer than CHUNK_SIZE addresses are free
        """
        with self._lock:
            total = sum(r.size for r in self._free_list)
            if total < CHUNK_SIZE:
                raise PoolExhausted(
                    details=f"{total} free addresses, chunk needs {CHUNK_SIZE}"
                )

            consumed = []
            needed = CHUNK_SIZE
            for r in self._free_list:
                size = r.size
                if size < needed:
                    consumed.append(r)
                    needed -= size
                    continue

                end = address.offset(r.start, needed - 1)
                if end < r.end:
                    nxt, _ = address.increment(end)
                    if not _is_chunk_aligned(nxt):
                        end = min(_chunk_end(end), r.end)
                consumed.append(IpRange(r.start, end))
                break

            for r in consumed:
                self._remove(r.start, r.end)

            LOG.debug(
                "Allocated chunk of %d addresses: %s",
                sum(r.size for r in consumed),
                ", ".join(str(r) for r in consumed),
            )
            return consumed

    def free_list(self) -> List[IpRange]:
        """Return a snapshot of the free list."""
        with self._lock:
            return list(self._free_list)

    def free_count(self) -> int:
        """Return the number of free addresses."""
        with self._lock:
            return sum(r.size for r in self._free_list)

    def contains(self, addr: address.AddressLike) -> bool:
        """Return True if the address is currently free.

        Raises:
            AddressFamilyMismatch: Address length differs from the allocator's
        """
        addr = address.to_bytes(addr)
        with self._lock:
            self._check_length(addr)
            return any(r.contains(addr) for r in self._free_list)

    def _normalize(self, start, end):
        start = address.to_bytes(start)
        end = address.to_bytes(end)
        if len(start) != len(end):
            raise AddressFamilyMismatch(got=len(end), expected=len(start))
        return start, end

    def _check_length(self, addr: bytes, fix: bool = False) -> None:
        if self._address_length is None:
            if fix:
                self._address_length = len(addr)
            return
        if len(addr) != self._address_length:
            LOG.warning(
                "Rejecting %d-byte address %s in %d-byte allocator",
                len(addr), address.to_text(addr), self._address_length,
            )
            raise AddressFamilyMismatch(got=len(addr), expected=self._address_length)

    def _add(self, start: bytes, end: bytes) -> None:
        new_start, new_end = start, end
        kept = []
        insert_at = None

        for r in self._free_list:
            if not (_ends_before(r.end, start) or _ends_before(end, r.start)):
                # Overlapping or touching: fold into the new range
                new_start = min(new_start, r.start)
                new_end = max(new_end, r.end)
                if insert_at is None:
                    insert_at = len(kept)
                continue
            if insert_at is None and r.start > start:
                insert_at = len(kept)
            kept.append(r)

        if insert_at is None:
            insert_at = len(kept)
        kept.insert(insert_at, IpRange(new_start, new_end))
        self._free_list = kept

        LOG.debug(
            "Added range %s-%s, free list has %d ranges",
            address.to_text(start), address.to_text(end), len(kept),
        )

    def _remove(self, start: bytes, end: bytes) -> bool:
        changed = False
        kept = []

        for r in self._free_list:
            if r.end < start or r.start > end:
                kept.append(r)
                continue

            changed = True
            if r.start < start:
                before, _ = address.decrement(start)
                kept.append(IpRange(r.start, before))
            if r.end > end:
                after, _ = address.increment(end)
                kept.append(IpRange(after, r.end))

        if changed:
            self._free_list = kept
            LOG.debug(
                "Removed range %s-%s, free list has %d ranges",
                address.to_text(start), address.to_text(end), len(kept),
            )
        return changed
