"""Configuration management for huebridge."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml

from .bridge import AuthenticatedBridge, Bridge
from .discovery import DEFAULT_DISCOVERY_URL
from .transport import DEFAULT_TIMEOUT, HttpTransport

_LOGGER = logging.getLogger(__name__)

# Default configuration directory
DEFAULT_CONFIG_DIR = Path.home() / ".huebridge"
DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "config.yaml"

DEFAULT_DEVICETYPE = "huebridge#python"
USERNAME_ENV = "HUE_BRIDGE_USERNAME"


@dataclass
class BridgeProfile:
    """A known bridge and the username registered on it."""

    name: str
    address: str
    username: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        data = {"name": self.name, "address": self.address}
        if self.username:
            data["username"] = self.username
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> BridgeProfile:
        """Create from dictionary."""
        return cls(
            name=data.get("name", "default"),
            address=data["address"],
            username=data.get("username"),
        )


@dataclass
class HueConfig:
    """Main configuration for huebridge."""

    bridges: dict[str, BridgeProfile] = field(default_factory=dict)
    active_bridge: str = "default"
    timeout: float = DEFAULT_TIMEOUT
    discovery_url: str = DEFAULT_DISCOVERY_URL
    devicetype: str = DEFAULT_DEVICETYPE

    def get_active_bridge(self) -> Optional[BridgeProfile]:
        """Get the currently active bridge profile."""
        return self.bridges.get(self.active_bridge)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "bridges": {name: profile.to_dict() for name, profile in self.bridges.items()},
            "active_bridge": self.active_bridge,
            "timeout": self.timeout,
            "discovery_url": self.discovery_url,
            "devicetype": self.devicetype,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> HueConfig:
        """Create from dictionary."""
        bridges = {
            name: BridgeProfile.from_dict(profile_data)
            for name, profile_data in (data.get("bridges") or {}).items()
        }
        return cls(
            bridges=bridges,
            active_bridge=data.get("active_bridge", "default"),
            timeout=float(data.get("timeout", DEFAULT_TIMEOUT)),
            discovery_url=data.get("discovery_url", DEFAULT_DISCOVERY_URL),
            devicetype=data.get("devicetype", DEFAULT_DEVICETYPE),
        )

    @classmethod
    def load(cls, config_file: Path = DEFAULT_CONFIG_FILE) -> HueConfig:
        """Load configuration from file."""
        if not config_file.exists():
            return cls.create_default()

        try:
            with open(config_file, "r") as f:
                data = yaml.safe_load(f) or {}
            return cls.from_dict(data)
        except (OSError, yaml.YAMLError, KeyError, TypeError, ValueError, AttributeError) as e:
            _LOGGER.warning("Failed to load config from %s: %s", config_file, e)
            return cls.create_default()

    def save(self, config_file: Path = DEFAULT_CONFIG_FILE) -> None:
        """Save configuration to file."""
        config_file.parent.mkdir(parents=True, exist_ok=True)

        with open(config_file, "w") as f:
            yaml.safe_dump(self.to_dict(), f, sort_keys=False, default_flow_style=False)

    @classmethod
    def create_default(cls) -> HueConfig:
        """Create default configuration, with no bridge known yet."""
        return cls()

    def get_username_for_bridge(self, bridge_name: str) -> Optional[str]:
        """Get the username for a bridge, checking the environment variable first."""
        env_username = os.environ.get(USERNAME_ENV)
        if env_username:
            return env_username

        bridge = self.bridges.get(bridge_name)
        return bridge.username if bridge else None

    def set_address(self, bridge_name: str, address: str) -> BridgeProfile:
        """Record the address of a bridge, keeping any username already stored."""
        profile = self.bridges.get(bridge_name)
        if profile is None:
            profile = BridgeProfile(name=bridge_name, address=address)
            self.bridges[bridge_name] = profile
        else:
            profile.address = address
        return profile

    def set_username(self, bridge_name: str, username: str) -> None:
        """Record a freshly registered username for a known bridge."""
        profile = self.bridges.get(bridge_name)
        if profile is None:
            raise KeyError(f"unknown bridge profile {bridge_name!r}")
        profile.username = username

    def build_bridge(
        self,
        bridge_name: Optional[str] = None,
        username: Optional[str] = None,
        transport: Optional[HttpTransport] = None,
    ) -> Optional[Bridge]:
        """
        Build a bridge session from a stored profile.

        Args:
            bridge_name: Profile name, defaults to the active bridge
            username: Username overriding the stored or environment one
            transport: Optional transport, a new one honouring ``timeout`` otherwise

        Returns:
            An AuthenticatedBridge when a username is known, a plain Bridge
            otherwise, or None when the profile does not exist
        """
        name = bridge_name or self.active_bridge
        profile = self.bridges.get(name)
        if profile is None:
            return None
        transport = transport or HttpTransport(timeout=self.timeout)
        username = username or self.get_username_for_bridge(name)
        if username:
            return AuthenticatedBridge(profile.address, username, transport=transport)
        return Bridge(profile.address, transport=transport)
