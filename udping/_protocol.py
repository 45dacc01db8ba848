"""Wire protocol and address helpers."""

from __future__ import annotations

import ipaddress
import socket
from typing import Union

from ._exceptions import AddressParseError

MAGIC_HEADER = b"j-wy"

Address = tuple[str, int]
TargetLike = Union[str, tuple[str, int]]


def is_valid_reply(payload: bytes) -> bool:
    """A reply is valid when it starts with the magic header."""
    return payload[: len(MAGIC_HEADER)] == MAGIC_HEADER


def canonical_host(host: str, scope_id: int = 0) -> str:
    """Canonical text of an IP address, IPv6 zones spelled as interface names.

    ``fe80::1%2``, ``fe80::1%eth0`` and ``fe80::1`` with ``scope_id=2`` all
    map to the same string, so a target and the source of its reply compare
    equal. Raises :class:`ValueError` for anything that is not an IP address.
    """
    addr, _, zone = host.partition("%")
    ip = ipaddress.ip_address(addr)
    if ip.version != 6:
        if zone:
            raise ValueError(f"zone index on an IPv4 address: {host!r}")
        return str(ip)
    if not zone and scope_id:
        zone = str(scope_id)
    if zone.isdigit():
        try:
            zone = socket.if_indextoname(int(zone))
        except OSError:
            pass
    return f"{ip}%{zone}" if zone else str(ip)


def normalize_address(addr: tuple) -> Address:
    """Reduce a socket address to the ``(host, port)`` correlation key.

    IPv6 sockets report ``(host, port, flowinfo, scope_id)``; the scope is
    folded into the host, the flow label is dropped.
    """
    host, port = addr[0], addr[1]
    scope_id = addr[3] if len(addr) > 3 else 0
    try:
        host = canonical_host(host, scope_id)
    except ValueError:
        pass
    return host, int(port)


def parse_address(value: TargetLike) -> Address:
    """Parse ``ip:port`` (``[ipv6]:port`` for IPv6) into a correlation key."""
    if isinstance(value, tuple):
        if len(value) < 2:
            raise AddressParseError(f"address tuple needs host and port: {value!r}")
        host, port = value[0], value[1]
        scope_id = value[3] if len(value) > 3 else 0
    else:
        scope_id = 0
        text = value.strip()
        if text.startswith("["):
            host, sep, rest = text[1:].partition("]")
            if not sep or not rest.startswith(":"):
                raise AddressParseError(f"address invalid {value!r}")
            port = rest[1:]
        else:
            host, sep, port = text.rpartition(":")
            if not sep or not host:
                raise AddressParseError(f"address invalid {value!r}")
            if ":" in host:
                raise AddressParseError(
                    f"address invalid {value!r} (wrap IPv6 hosts in brackets)"
                )

    try:
        host = canonical_host(str(host), scope_id)
    except ValueError as exc:
        raise AddressParseError(f"address invalid {value!r}: {exc}") from exc

    try:
        port_number = int(port)
    except (TypeError, ValueError) as exc:
        raise AddressParseError(f"port invalid {value!r}") from exc
    if not 0 < port_number < 65536:
        raise AddressParseError(f"port out of range {value!r}")

    return host, port_number


def address_family(addr: Address) -> int:
    if ipaddress.ip_address(addr[0]).version == 6:
        return socket.AF_INET6
    return socket.AF_INET


def format_address(addr: Address) -> str:
    host, port = addr
    if ":" in host:
        return f"[{host}]:{port}"
    return f"{host}:{port}"
