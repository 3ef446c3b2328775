"""Parsers for the JSON answers of the bridge.

The bridge answers in two shapes. Listings are a JSON object keyed by the
string form of each resource id. Writes (registration, state changes) answer
with an array of result objects, each holding either a ``success`` or an
``error`` object::

    [{"error": {"type": 101, "address": "", "description": "link button not pressed"}}]
"""

from __future__ import annotations

import json
import logging
from typing import Any

from .errors import AppError, BridgeError, DecodeError
from .models import IdentifiedLight, Light, Registration, WriteResult

_LOGGER = logging.getLogger(__name__)


def decode_json(body: bytes) -> Any:
    """Decode a response body into a generic JSON value."""
    try:
        return json.loads(body)
    except (UnicodeDecodeError, json.JSONDecodeError, RecursionError) as exc:
        raise DecodeError(f"response is not valid JSON: {exc}") from exc


def _parse_id(key: str) -> int:
    # int() would also accept "+1", " 1" and "1_0"
    if not key.isascii() or not key.isdigit():
        raise DecodeError(f"light id {key!r} is not an unsigned integer")
    return int(key)


def parse_lights(body: bytes) -> list[IdentifiedLight]:
    """
    Parse the ``/lights`` listing.

    Returns:
        Lights sorted by their numeric id

    Raises:
        DecodeError: any key is not an unsigned integer or any light is malformed
    """
    data = decode_json(body)
    if not isinstance(data, dict):
        raise DecodeError("expected a JSON object of lights")

    lights = [IdentifiedLight(id=_parse_id(key), light=Light.from_dict(value)) for key, value in data.items()]
    lights.sort(key=lambda identified: identified.id)
    return lights


def _app_error(error: dict[str, Any]) -> AppError:
    address = error.get("address")
    description = error.get("description")
    code = error.get("type")
    return AppError(
        address=address if isinstance(address, str) else "",
        description=description if isinstance(description, str) else "",
        code=code if isinstance(code, int) and not isinstance(code, bool) else 0,
    )


def parse_write_response(body: bytes) -> Any:
    """
    Parse the answer to a write request.

    Only the first result object is inspected.

    Returns:
        The decoded JSON value, unchanged

    Raises:
        DecodeError: the answer is not a non-empty array starting with an object
        BridgeError: the first result object is an ``error``
    """
    data = decode_json(body)
    if not isinstance(data, list):
        raise DecodeError("expected a JSON array of results")
    if not data:
        raise DecodeError("expected a non-empty JSON array of results")
    first = data[0]
    if not isinstance(first, dict):
        raise DecodeError("expected the first result to be an object")

    error = first.get("error")
    if isinstance(error, dict):
        app_error = _app_error(error)
        _LOGGER.warning("Bridge rejected request: %s", app_error)
        raise BridgeError(app_error)
    return data


def parse_registration(body: bytes) -> Registration:
    """Parse the answer to a user registration."""
    data = parse_write_response(body)
    success = data[0].get("success")
    username = success.get("username") if isinstance(success, dict) else None
    if not isinstance(username, str):
        raise DecodeError("registration result does not carry a username")
    return Registration(username=username, raw=data)


def parse_state_change(body: bytes) -> WriteResult:
    """Parse the answer to a light state change."""
    data = parse_write_response(body)
    successes: dict[str, Any] = {}
    for item in data:
        success = item.get("success") if isinstance(item, dict) else None
        if isinstance(success, dict):
            successes.update(success)
    return WriteResult(successes=successes, raw=data)
