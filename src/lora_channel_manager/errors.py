# src/lora_channel_manager/errors.py
"""
Exceptions raised while computing and applying a channel plan.

Everything raised inside a poll cycle derives from ChannelManagerError, so the
poll loop can log it and retry on the next tick.
"""
from __future__ import annotations


class ChannelManagerError(Exception):
    pass


class FetchError(ChannelManagerError):
    """Remote configuration source unreachable or returned a malformed response."""


class ParseError(ChannelManagerError):
    """Base configuration file unreadable or not valid JSON."""


class StructuralError(ChannelManagerError):
    """A managed path in the base configuration is missing or not an object."""

    def __init__(self, path: str, found_type: str) -> None:
        self.path = path
        self.found_type = found_type
        super().__init__(
            f"expected {path} to be an object, got {found_type}"
        )


class ChannelPlanError(ChannelManagerError):
    pass


class DuplicateChannelError(ChannelPlanError):
    pass


class CapacityExceededError(ChannelPlanError):
    pass


class UnsupportedModulationError(ChannelPlanError):
    def __init__(self, modulation: object) -> None:
        self.modulation = modulation
        super().__init__(f"invalid modulation {modulation}")


class ConfigWriteError(ChannelManagerError):
    pass


class RestartCommandError(ChannelManagerError):
    pass


class InvalidGatewayMACError(ChannelManagerError, ValueError):
    pass
