"""Exception types raised by huebridge."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


class HueError(Exception):
    """Base error for every failure reported by huebridge."""


class DiscoveryError(HueError):
    """No bridge could be located on the network."""


class ValidationError(HueError, ValueError):
    """A caller-supplied argument was rejected before any network activity."""


class TransportError(HueError):
    """The HTTP request itself could not be completed."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class DecodeError(HueError):
    """The bridge answered with something that is not the expected JSON."""


@dataclass(frozen=True)
class AppError:
    """A single error object reported by the bridge."""

    address: str
    description: str
    code: int

    def __str__(self) -> str:
        return f"{self.description} (type {self.code}, address {self.address!r})"


class BridgeError(HueError):
    """The bridge answered but rejected the request."""

    def __init__(self, error: AppError):
        super().__init__(str(error))
        self.error = error

    @property
    def address(self) -> str:
        return self.error.address

    @property
    def description(self) -> str:
        return self.error.description

    @property
    def code(self) -> int:
        return self.error.code
