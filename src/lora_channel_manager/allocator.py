# src/lora_channel_manager/allocator.py
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence
import logging

import numpy as np

from .bands import Hz, RADIO_COUNT, required_radio_bandwidth
from .models import Channel, RadioConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChannelAssignment:
    """Radio hosting a channel and the channel's IF offset on that radio."""
    channel: Channel
    radio: int
    if_freq: int


@dataclass
class RadioAllocation:
    radios: List[RadioConfig]
    # one entry per input channel, in input order
    assignments: List[ChannelAssignment]


def min_radio_center_freq(channel: Channel) -> Hz:
    """
    Center frequency a radio needs when the channel sits exactly on the low
    edge of the radio's coverage.
    """
    bw = channel.bandwidth_hz
    return channel.frequency - bw // 2 + required_radio_bandwidth(bw) // 2


def sort_by_min_radio_center_freq(channels: Sequence[Channel]) -> List[Channel]:
    """Stable ascending sort on min_radio_center_freq."""
    if not channels:
        return []
    keys = np.array([min_radio_center_freq(c) for c in channels], dtype=np.int64)
    order = np.argsort(keys, kind="stable")
    return [channels[int(i)] for i in order]


def allocate_radios(channels: Sequence[Channel]) -> List[RadioConfig]:
    """
    First-fit placement of radio center frequencies.

    Channels are walked in min_radio_center_freq order. A disabled radio is
    enabled at the channel's minimum center; an enabled radio whose upper
    coverage edge still reaches the channel's upper edge absorbs the channel
    without moving. Channels that fit nowhere once all radios are enabled
    are left for the assignment pass to deal with.
    """
    radios = [RadioConfig() for _ in range(RADIO_COUNT)]

    for c in sort_by_min_radio_center_freq(channels):
        radio_bw = required_radio_bandwidth(c.bandwidth_hz)
        channel_max = c.window.stop

        for r in radios:
            if not r.enable:
                r.enable = True
                r.freq = min_radio_center_freq(c)
                break
            if channel_max <= r.freq + radio_bw // 2:
                break

    return radios


def find_radio(channel: Channel, radios: Sequence[RadioConfig]) -> int | None:
    """Index of the first enabled radio whose window covers the channel."""
    radio_bw = required_radio_bandwidth(channel.bandwidth_hz)
    window = channel.window
    for i, r in enumerate(radios):
        if r.enable and r.window(radio_bw).covers(window):
            return i
    return None


def assign_channels(
    channels: Sequence[Channel],
    radios: Sequence[RadioConfig],
) -> List[ChannelAssignment]:
    """
    Assign every channel (input order) to the radio covering it and compute
    its IF.

    A channel no radio covers falls back to radio 0, with its IF relative to
    radio 0's center.
    """
    out: List[ChannelAssignment] = []
    for c in channels:
        radio = find_radio(c, radios)
        if radio is None:
            logger.warning(
                f"channel {c.frequency} Hz ({c.bandwidth} kHz) is not covered "
                "by any radio, falling back to radio 0"
            )
            radio = 0
        out.append(
            ChannelAssignment(
                channel=c,
                radio=radio,
                if_freq=c.frequency - radios[radio].freq,
            )
        )
    return out


def allocate(channels: Sequence[Channel]) -> RadioAllocation:
    radios = allocate_radios(channels)
    return RadioAllocation(radios=radios, assignments=assign_channels(channels, radios))
