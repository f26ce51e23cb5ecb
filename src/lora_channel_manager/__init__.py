# src/lora_channel_manager/__init__.py
"""
LoRa gateway channel manager.

Fetches the channel plan for a gateway, maps it onto the two radios and eight
demodulator channels of an SX1301 concentrator, and patches the result into
the packet-forwarder configuration:

    channels -> radio allocation -> channel classification -> config merge -> restart
"""

from .models import (
    Channel,
    GatewayChannelPlan,
    GatewayConfiguration,
    Modulation,
)

from .classifier import build_channel_plan
from .merge import load_base_config, merge_config
from .manager import ChannelManager
from .settings import Settings, load_settings

__all__ = [
    "Channel",
    "GatewayChannelPlan",
    "GatewayConfiguration",
    "Modulation",
    "build_channel_plan",
    "load_base_config",
    "merge_config",
    "ChannelManager",
    "Settings",
    "load_settings",
]
