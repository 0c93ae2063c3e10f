"""Exception types raised by map generation."""


class RLModError(Exception):
    """Base class for all generator errors."""


class PartitionConfigurationError(RLModError, ValueError):
    """The requested partition cannot be produced from the supplied states."""


class InvalidStateGraphError(RLModError, ValueError):
    """The supplied states or provinces do not form a usable state graph."""
