"""Locate a bridge on the local network through the Hue discovery service."""

from __future__ import annotations

import logging
from typing import Optional

from .errors import DecodeError, DiscoveryError, TransportError
from .parser import decode_json
from .transport import DEFAULT_TIMEOUT, HttpTransport

_LOGGER = logging.getLogger(__name__)

DEFAULT_DISCOVERY_URL = "https://discovery.meethue.com/"


def discover_bridge(
    timeout: float = DEFAULT_TIMEOUT,
    url: str = DEFAULT_DISCOVERY_URL,
    transport: Optional[HttpTransport] = None,
) -> str:
    """
    Find the address of a bridge on the local network.

    The discovery service answers with the bridges registered from the
    caller's public address, e.g. ``[{"id": "001788fffe...", "internalipaddress": "192.168.1.2"}]``.

    Args:
        timeout: Request timeout in seconds, ignored when ``transport`` is given
        url: Discovery service URL
        transport: Optional transport to reuse

    Returns:
        The address of the first bridge found

    Raises:
        DiscoveryError: no bridge could be located
    """
    owned = transport is None
    transport = transport or HttpTransport(timeout=timeout)
    try:
        response = transport.send("GET", url)
        data = decode_json(response.content)
    except (TransportError, DecodeError) as exc:
        raise DiscoveryError(f"bridge discovery failed: {exc}") from exc
    finally:
        if owned:
            transport.close()

    if isinstance(data, list):
        for entry in data:
            address = entry.get("internalipaddress") if isinstance(entry, dict) else None
            if isinstance(address, str) and address:
                _LOGGER.info("Discovered bridge at %s", address)
                return address
    raise DiscoveryError("no bridge found")
