# src/lora_channel_manager/bands.py
from __future__ import annotations

from typing import Dict

Hz = int

# Bandwidth a single SX1301 radio can cover, keyed by the channel bandwidth it
# has to host (both in Hz).
RADIO_BANDWIDTH_PER_CHANNEL_BANDWIDTH: Dict[Hz, Hz] = {
    500_000: 1_100_000,
    250_000: 1_000_000,
    125_000: 925_000,
}

# Used when the channel bandwidth is not in the table above.
DEFAULT_RADIO_BANDWIDTH: Hz = 925_000

RADIO_COUNT = 2
MULTI_SF_CHANNEL_COUNT = 8


def khz_to_hz(bandwidth_khz: int) -> Hz:
    return int(bandwidth_khz) * 1000


def required_radio_bandwidth(channel_bandwidth: Hz) -> Hz:
    """Radio bandwidth needed to host a channel of the given bandwidth (Hz)."""
    return RADIO_BANDWIDTH_PER_CHANNEL_BANDWIDTH.get(
        channel_bandwidth, DEFAULT_RADIO_BANDWIDTH
    )
