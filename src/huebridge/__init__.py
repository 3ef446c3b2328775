"""huebridge - client library for the Philips Hue bridge HTTP API.

This package discovers a bridge, registers an application user, lists the
lights connected to the bridge and changes their state.
"""

__version__ = "0.1.0"

from .bridge import AuthenticatedBridge, Bridge
from .errors import (
    AppError,
    BridgeError,
    DecodeError,
    DiscoveryError,
    HueError,
    TransportError,
    ValidationError,
)
from .models import (
    CommandLight,
    IdentifiedLight,
    Light,
    LightState,
    Registration,
    WriteResult,
    encode_command,
)

__all__ = [
    "AppError",
    "AuthenticatedBridge",
    "Bridge",
    "BridgeError",
    "CommandLight",
    "DecodeError",
    "DiscoveryError",
    "HueError",
    "IdentifiedLight",
    "Light",
    "LightState",
    "Registration",
    "TransportError",
    "ValidationError",
    "WriteResult",
    "__version__",
    "encode_command",
]
