"""Bridge sessions.

A :class:`Bridge` only knows the address of the bridge and can register new
users. Attaching a username with :meth:`Bridge.with_user` gives an
:class:`AuthenticatedBridge`, the only type that can read and change lights.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Callable, Optional

from .discovery import discover_bridge
from .errors import DiscoveryError, ValidationError
from .models import CommandLight, IdentifiedLight, Registration, WriteResult, encode_command
from .parser import parse_lights, parse_registration, parse_state_change
from .transport import DEFAULT_TIMEOUT, HttpTransport, TransportResponse

_LOGGER = logging.getLogger(__name__)

USERNAME_MIN_LENGTH = 10
USERNAME_MAX_LENGTH = 40


class Bridge:
    """A bridge reachable at a known address, without a registered user."""

    def __init__(
        self,
        address: str,
        transport: Optional[HttpTransport] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        """
        Initialize the bridge.

        Args:
            address: Host (and optional port) of the bridge, e.g. ``192.168.1.2``
            transport: Optional transport, shared with derived bridges
            timeout: Request timeout in seconds when no transport is given
        """
        if not address:
            raise ValidationError("bridge address must not be empty")
        self._address = address
        self._transport = transport or HttpTransport(timeout=timeout)

    @property
    def address(self) -> str:
        return self._address

    @property
    def transport(self) -> HttpTransport:
        return self._transport

    def __repr__(self) -> str:
        return f"{type(self).__name__}(address={self._address!r})"

    @staticmethod
    def discover(
        timeout: float = DEFAULT_TIMEOUT,
        discover: Optional[Callable[[], str]] = None,
        transport: Optional[HttpTransport] = None,
    ) -> Bridge:
        """
        Locate a bridge on the local network.

        Args:
            timeout: Request timeout in seconds
            discover: Optional replacement for the default discovery service lookup
            transport: Optional transport for the lookup and the returned bridge

        Raises:
            DiscoveryError: no bridge was found
        """
        if discover is None:
            address = discover_bridge(timeout=timeout, transport=transport)
        else:
            address = discover()
        if not address:
            raise DiscoveryError("no bridge found")
        return Bridge(address, transport=transport, timeout=timeout)

    def with_user(self, username: str) -> AuthenticatedBridge:
        """Return an authenticated bridge for ``username``. No request is made."""
        return AuthenticatedBridge(self._address, username, transport=self._transport)

    def _url(self, path: str) -> str:
        return f"http://{self._address}{path}"

    def _send(self, method: str, path: str, body: Optional[bytes] = None, log_path: Optional[str] = None) -> TransportResponse:
        _LOGGER.debug("%s http://%s%s", method, self._address, log_path or path)
        return self._transport.send(method, self._url(path), body)

    def register_user(self, devicetype: str, username: str) -> Registration:
        """
        Register a new user on the bridge.

        The link button of the bridge must have been pressed shortly before,
        otherwise the bridge answers with error type 101.

        Args:
            devicetype: Name of the application and device, e.g. ``my_app#laptop``
            username: Requested username, between 10 and 40 characters

        Raises:
            ValidationError: the username length is out of range
            BridgeError: the bridge refused the registration
        """
        if not USERNAME_MIN_LENGTH <= len(username) <= USERNAME_MAX_LENGTH:
            raise ValidationError(
                f"username must be between {USERNAME_MIN_LENGTH} and {USERNAME_MAX_LENGTH} characters"
            )
        body = json.dumps({"devicetype": devicetype, "username": username}).encode()
        response = self._send("POST", "/api", body)
        registration = parse_registration(response.content)
        _LOGGER.info("Registered user for %s", devicetype)
        return registration

    def close(self) -> None:
        """Close the underlying transport."""
        self._transport.close()

    def __enter__(self) -> Bridge:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()


class AuthenticatedBridge(Bridge):
    """A bridge with a registered username, able to read and change lights."""

    def __init__(
        self,
        address: str,
        username: str,
        transport: Optional[HttpTransport] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        super().__init__(address, transport=transport, timeout=timeout)
        if not username:
            raise ValidationError("username must not be empty")
        self._username = username

    @property
    def username(self) -> str:
        return self._username

    def _user_path(self, suffix: str) -> tuple[str, str]:
        # The username is a credential, keep it out of the logs
        return f"/api/{self._username}{suffix}", f"/api/<username>{suffix}"

    def get_all_lights(self) -> list[IdentifiedLight]:
        """
        Fetch every light known to the bridge.

        Returns:
            Lights sorted by id

        Raises:
            DecodeError: the listing could not be decoded; no partial result is returned
        """
        path, log_path = self._user_path("/lights")
        response = self._send("GET", path, log_path=log_path)
        return parse_lights(response.content)

    def set_light_state(self, light_id: int, command: CommandLight) -> WriteResult:
        """
        Change the state of one light.

        Only the fields present in ``command`` are sent.

        Raises:
            ValidationError: ``light_id`` is not a non-negative integer
            BridgeError: the bridge rejected the change
        """
        if isinstance(light_id, bool) or not isinstance(light_id, int) or light_id < 0:
            raise ValidationError(f"light id must be a non-negative integer, got {light_id!r}")
        path, log_path = self._user_path(f"/lights/{light_id}/state")
        response = self._send("PUT", path, encode_command(command), log_path=log_path)
        return parse_state_change(response.content)
