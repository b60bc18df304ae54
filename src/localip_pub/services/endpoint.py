"""Validation of published endpoint text (IP address with optional port)."""
from __future__ import annotations

import ipaddress
import re

__all__ = ["InvalidEndpointError", "validate_endpoint"]

MAX_PORT = 65_535

_BRACKETED = re.compile(r"^\[(?P<host>[^\[\]]+)\](?::(?P<port>[0-9]{1,5}))?$")
_HOST_PORT = re.compile(r"^(?P<host>[^:\[\]]+):(?P<port>[0-9]{1,5})$")


class InvalidEndpointError(ValueError):
    """Raised when endpoint text is not an IP address with an optional port."""


def _parse_port(raw: str) -> int:
    port = int(raw)
    if port > MAX_PORT:
        raise InvalidEndpointError(f"port {port} out of range")
    return port


def _format(address: ipaddress.IPv4Address | ipaddress.IPv6Address, port: int | None) -> str:
    if port is None:
        return str(address)
    if address.version == 6:
        return f"[{address}]:{port}"
    return f"{address}:{port}"


def validate_endpoint(text: str) -> str:
    """Return the canonical form of ``text`` or raise :class:`InvalidEndpointError`.

    Accepted forms: ``203.0.113.5``, ``203.0.113.5:80``, ``2001:db8::1``,
    ``[2001:db8::1]`` and ``[2001:db8::1]:8080``. IPv6 addresses are compressed
    and a port requires brackets around an IPv6 host.
    """
    if not isinstance(text, str) or not text or text != text.strip():
        raise InvalidEndpointError("endpoint must be a non-empty string without padding")

    bracketed = _BRACKETED.match(text)
    if bracketed:
        try:
            address = ipaddress.IPv6Address(bracketed["host"])
        except ValueError as err:
            raise InvalidEndpointError(str(err)) from err
        port = bracketed["port"]
        return _format(address, _parse_port(port) if port is not None else None)

    host_port = _HOST_PORT.match(text)
    if host_port:
        try:
            address = ipaddress.IPv4Address(host_port["host"])
        except ValueError as err:
            raise InvalidEndpointError(str(err)) from err
        return _format(address, _parse_port(host_port["port"]))

    try:
        return _format(ipaddress.ip_address(text), None)
    except ValueError as err:
        raise InvalidEndpointError(str(err)) from err
