from ._client import DEFAULT_TIMEOUT, AsyncClient
from ._console import configure_logging, console
from ._dispatcher import POLL_INTERVAL, Dispatcher
from ._driver import DEFAULT_COUNT, run_sequence, run_sequences
from ._echo import EchoPinger
from ._endpoint import Endpoint
from ._exceptions import (
    AddressParseError,
    ClientClosedError,
    EndpointBindError,
    EndpointClosedError,
    UdpingError,
)
from ._models import PingAttempt, PingResult, SequenceResult, SequenceStats
from ._protocol import MAGIC_HEADER, format_address, is_valid_reply, parse_address
from ._requests import RequestTable

__all__ = [
    "AsyncClient",
    "Dispatcher",
    "EchoPinger",
    "Endpoint",
    "RequestTable",
    "PingAttempt",
    "PingResult",
    "SequenceResult",
    "SequenceStats",
    "run_sequence",
    "run_sequences",
    "parse_address",
    "format_address",
    "is_valid_reply",
    "configure_logging",
    "console",
    "MAGIC_HEADER",
    "DEFAULT_COUNT",
    "DEFAULT_TIMEOUT",
    "POLL_INTERVAL",
    "UdpingError",
    "AddressParseError",
    "ClientClosedError",
    "EndpointBindError",
    "EndpointClosedError",
]
