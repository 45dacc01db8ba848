class UdpingError(Exception):
    """Base class for errors raised outside of a single probe."""


class AddressParseError(UdpingError, ValueError):
    """Raised when a target is not a valid ``ip:port`` address."""


class EndpointBindError(UdpingError, OSError):
    """Raised when the local UDP socket cannot be created or bound."""


class ClientClosedError(UdpingError, RuntimeError):
    """Raised when a closed client is asked to probe."""


class EndpointClosedError(UdpingError, OSError):
    """Raised when a closed endpoint is asked for its socket."""
