"""
Inclusive address interval.
"""

from dataclasses import dataclass

from ipam_engine.exceptions import AddressFamilyMismatch
from ipam_engine.lib import address


@dataclass(frozen=True)
class IpRange:
    """Inclusive address range.

    Attributes:
        start: First address of the range (big-endian bytes)
        end: Last address of the range, same length as start
    """

    start: bytes
    end: bytes

    @classmethod
    def from_text(cls, start: address.AddressLike, end: address.AddressLike) -> "IpRange":
        return cls(address.to_bytes(start), address.to_bytes(end))

    @property
    def size(self) -> int:
        return address.distance(self.start, self.end)

    def contains(self, addr: bytes) -> bool:
        """
        Raises:
            AddressFamilyMismatch: If addr is not as long as the range bounds
        """
        # bytes of unequal length compare as prefixes
        if len(addr) != len(self.start):
            raise AddressFamilyMismatch(got=len(addr), expected=len(self.start))
        return self.start <= addr <= self.end

    def __str__(self) -> str:
        return f"{address.to_text(self.start)}-{address.to_text(self.end)}"
