"""IPAM engine exceptions."""


class IpamException(Exception):
    """Base exception for IPAM engine errors."""

    message = "An unknown exception occurred."

    def __init__(self, message=None, **kwargs):
        """Initialize exception with optional custom message."""
        self.kwargs = kwargs
        if message:
            self.message = message
        super(IpamException, self).__init__(self.message % kwargs)


class InvalidRange(IpamException):
    """Range start is greater than its end.

    Raised before any mutation; the free list is left untouched.
    """

    message = "Invalid range %(start)s-%(end)s: start is greater than end"


class PoolExhausted(IpamException):
    """Not enough free addresses to satisfy an allocation.

    The free list is left untouched and nothing is partially allocated.
    Callers decide whether to retry after the pool is replenished.
    """

    message = "Address pool exhausted: %(details)s"


class InvalidAddress(IpamException):
    """Address could not be interpreted as a byte sequence."""

    message = "Invalid address %(address)r: %(details)s"


class AddressFamilyMismatch(IpamException):
    """Address length differs from the one the allocator operates on."""

    message = "Address length %(got)d does not match allocator address length %(expected)d"


class PoolConfigurationError(IpamException):
    """Pool configuration error.

    This is a non-retryable error indicating an invalid pool definition
    (unparsable address, mixed families, start after end).
    """

    message = "Pool configuration error: %(details)s"


class UnknownPool(IpamException):
    """Pool name is not configured."""

    message = "Pool %(name)s not found"
