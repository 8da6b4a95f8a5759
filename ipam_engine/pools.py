"""Named address pools seeded from configuration.

A control plane keeps one pool per purpose (pods, services, statically
requested service addresses, node service endpoints). Each pool holds an
independent allocator per address family, since a single allocator only
operates on one address length.
"""

import json
from pathlib import Path
from typing import Any, Dict, Iterator, List, Tuple, Union

from oslo_log import log as logging
from pydantic import ValidationError

from ipam_engine.allocator import IpAllocator
from ipam_engine.configuration import CONF_GROUP
from ipam_engine.exceptions import (
    AddressFamilyMismatch,
    IpamException,
    InvalidAddress,
    PoolConfigurationError,
    UnknownPool,
)
from ipam_engine.lib import address
from ipam_engine.lib.ip_range import IpRange
from ipam_engine.models import PoolDocument

LOG = logging.getLogger(__name__)

POD_POOL = "pod"
SERVICE_POOL = "service"
STATIC_SERVICE_POOL = "static-service"
NODE_SERVICE_POOL = "node-service"

POOL_NAMES = (POD_POOL, SERVICE_POOL, STATIC_SERVICE_POOL, NODE_SERVICE_POOL)

# Pool name -> PoolDocument field / oslo option name
_POOL_FIELDS = {
    POD_POOL: "pod_ip_pool",
    SERVICE_POOL: "service_ip_pool",
    STATIC_SERVICE_POOL: "static_service_ip_pool",
    NODE_SERVICE_POOL: "node_service_ip_pool",
}

_FAMILY_LENGTHS = {
    4: address.IPV4_LENGTH,
    6: address.IPV6_LENGTH,
}


def parse_pool_range(entry: str) -> IpRange:
    """Parse a '<start_ip>-<end_ip>' pool entry.

    A bare address is accepted as a single-address range.

    Args:
        entry: Range string from configuration

    Returns:
        Parsed IpRange

    Raises:
        PoolConfigurationError: If the entry is invalid
    """
    entry = entry.strip()
    if not entry:
        raise PoolConfigurationError(details="empty pool range entry")

    start_str, _, end_str = entry.partition("-")
    end_str = end_str or start_str

    try:
        ip_range = IpRange.from_text(start_str, end_str)
    except InvalidAddress as e:
        raise PoolConfigurationError(details=f"Invalid pool range '{entry}': {e}")

    if len(ip_range.start) != len(ip_range.end):
        raise PoolConfigurationError(
            details=f"Invalid pool range '{entry}': start and end are of different address families"
        )
    if ip_range.start > ip_range.end:
        raise PoolConfigurationError(
            details=f"Invalid pool range '{entry}': start must be less than or equal to end"
        )
    return ip_range


class AddressPool:
    """A named pool with one allocator per address family."""

    def __init__(self, name: str):
        self.name = name
        self._allocators = {
            family: IpAllocator(address_length=length)
            for family, length in _FAMILY_LENGTHS.items()
        }

    def allocator(self, family: int = 4) -> IpAllocator:
        try:
            return self._allocators[family]
        except KeyError:
            raise ValueError(f"Unsupported address family {family}, must be 4 or 6")

    def _route(self, start, end) -> Tuple[IpAllocator, bytes, bytes]:
        start = address.to_bytes(start)
        end = address.to_bytes(end)
        if len(start) != len(end):
            raise AddressFamilyMismatch(got=len(end), expected=len(start))
        for family, length in _FAMILY_LENGTHS.items():
            if len(start) == length:
                return self._allocators[family], start, end
        raise InvalidAddress(address=start, details="not an IPv4 or IPv6 address")

    def add_range(self, start: address.AddressLike, end: address.AddressLike) -> None:
        allocator, start, end = self._route(start, end)
        allocator.add_range(start, end)

    def remove_range(self, start: address.AddressLike, end: address.AddressLike) -> bool:
        allocator, start, end = self._route(start, end)
        return allocator.remove_range(start, end)

    def release_ip(self, addr: address.AddressLike) -> None:
        self.add_range(addr, addr)

    def get_ip(self, family: int = 4) -> bytes:
        return self.allocator(family).get_ip()

    def get_ip_chunk(self, family: int = 4) -> List[IpRange]:
        return self.allocator(family).get_ip_chunk()

    def free_list(self, family: int = 4) -> List[IpRange]:
        return self.allocator(family).free_list()

    def free_count(self, family: int = 4) -> int:
        return self.allocator(family).free_count()


class PoolSet:
    """The set of address pools a controller allocates from."""

    def __init__(self):
        self._pools: Dict[str, AddressPool] = {name: AddressPool(name) for name in POOL_NAMES}

    def pool(self, name: str) -> AddressPool:
        """Look up a pool by name.

        Raises:
            UnknownPool: If no pool has that name
        """
        try:
            return self._pools[name]
        except KeyError:
            raise UnknownPool(name=name)

    def __iter__(self) -> Iterator[AddressPool]:
        return iter(self._pools.values())

    @classmethod
    def from_document(cls, document: Union[str, Dict[str, Any]]) -> "PoolSet":
        pools = cls()
        pools.load_document(document)
        return pools

    @classmethod
    def from_conf(cls, conf, group: str = CONF_GROUP) -> "PoolSet":
        pools = cls()
        pools.load_conf(conf, group=group)
        return pools

    def load_document(self, document: Union[str, Dict[str, Any]]) -> None:
        """Seed pools from a controller configuration document.

        Args:
            document: JSON text or an already decoded mapping

        Raises:
            PoolConfigurationError: If the document is invalid
        """
        try:
            if isinstance(document, str):
                parsed = PoolDocument.model_validate_json(document)
            else:
                parsed = PoolDocument.model_validate(document)
        except ValidationError as e:
            raise PoolConfigurationError(details=f"Invalid pool document: {e}")

        for name, field in _POOL_FIELDS.items():
            for entry in getattr(parsed, field):
                self._seed(name, IpRange.from_text(entry.start, entry.end))
        self._log_summary("document")

    def load_conf(self, conf, group: str = CONF_GROUP) -> None:
        """Seed pools from registered oslo.config options.

        Raises:
            PoolConfigurationError: If an entry or the referenced document is invalid
        """
        section = conf[group]
        for name, field in _POOL_FIELDS.items():
            for entry in section[field] or []:
                self._seed(name, parse_pool_range(entry))

        if section.pool_document:
            path = Path(section.pool_document)
            try:
                text = path.read_text(encoding="utf-8")
            except OSError as e:
                raise PoolConfigurationError(details=f"Cannot read pool document {path}: {e}")
            try:
                document = json.loads(text)
            except ValueError as e:
                raise PoolConfigurationError(details=f"Pool document {path} is not valid JSON: {e}")
            self.load_document(document)
        else:
            self._log_summary("configuration")

    def _seed(self, name: str, ip_range: IpRange) -> None:
        try:
            self._pools[name].add_range(ip_range.start, ip_range.end)
        except IpamException as e:
            raise PoolConfigurationError(details=f"Pool {name} range {ip_range}: {e}")
        LOG.debug("Seeded pool %s with %s", name, ip_range)

    def _log_summary(self, source: str) -> None:
        for pool in self:
            LOG.info(
                "Pool %s loaded from %s: %d IPv4 and %d IPv6 free addresses",
                pool.name, source, pool.free_count(4), pool.free_count(6),
            )
