# src/lora_channel_manager/classifier.py
from __future__ import annotations

from typing import Sequence
import logging

from .allocator import ChannelAssignment, allocate
from .bands import MULTI_SF_CHANNEL_COUNT
from .errors import (
    CapacityExceededError,
    DuplicateChannelError,
    UnsupportedModulationError,
)
from .models import (
    FSKChannelConfig,
    GatewayChannelPlan,
    GatewayConfiguration,
    LoRaStdChannelConfig,
    Modulation,
    MultiSFChannelConfig,
    RadioConfig,
)

logger = logging.getLogger(__name__)


def classify_channels(
    assignments: Sequence[ChannelAssignment],
    radios: Sequence[RadioConfig],
    plan: GatewayChannelPlan | None = None,
) -> GatewayChannelPlan:
    """
    Bucket assigned channels into the FSK, LoRa-standard and multi-SF slots.

    Raises a ChannelPlanError subclass on the first violation; no partially
    filled plan is returned.
    """
    plan = plan or GatewayChannelPlan()
    plan.radios = [RadioConfig(enable=r.enable, freq=r.freq) for r in radios]
    multi_sf_count = 0

    for a in assignments:
        c = a.channel

        if c.modulation == Modulation.FSK:
            if plan.fsk_channel.enable:
                raise DuplicateChannelError("FSK channel already configured")
            plan.fsk_channel = FSKChannelConfig(
                enable=True,
                radio=a.radio,
                if_freq=a.if_freq,
                bandwidth=c.bandwidth,
                datarate=c.bit_rate,
                freq=c.frequency,
            )

        elif c.modulation == Modulation.LORA and len(c.spread_factors) == 1:
            if plan.lora_std_channel.enable:
                raise DuplicateChannelError("LoRa std channel already configured")
            plan.lora_std_channel = LoRaStdChannelConfig(
                enable=True,
                radio=a.radio,
                if_freq=a.if_freq,
                bandwidth=c.bandwidth_hz,
                spread_factor=c.spread_factors[0],
                freq=c.frequency,
            )

        elif c.modulation == Modulation.LORA and len(c.spread_factors) > 1:
            if multi_sf_count >= MULTI_SF_CHANNEL_COUNT:
                raise CapacityExceededError(
                    "exceeded maximum number of multi-SF channels "
                    f"({MULTI_SF_CHANNEL_COUNT})"
                )
            plan.multi_sf_channels[multi_sf_count] = MultiSFChannelConfig(
                enable=True,
                radio=a.radio,
                if_freq=a.if_freq,
                freq=c.frequency,
                bandwidth=c.bandwidth_hz,
            )
            multi_sf_count += 1

        else:
            raise UnsupportedModulationError(
                c.modulation.value if isinstance(c.modulation, Modulation) else c.modulation
            )

    return plan


def build_channel_plan(configuration: GatewayConfiguration) -> GatewayChannelPlan:
    """Run radio allocation and classification for a fetched configuration."""
    allocation = allocate(configuration.channels)
    plan = classify_channels(
        allocation.assignments,
        allocation.radios,
        GatewayChannelPlan(updated_at=configuration.updated_at),
    )
    logger.debug(
        f"channel plan: radios={[(r.enable, r.freq) for r in plan.radios]}, "
        f"multi_sf={multi_sf_in_use(plan)}, "
        f"lora_std={plan.lora_std_channel.enable}, fsk={plan.fsk_channel.enable}"
    )
    return plan


def multi_sf_in_use(plan: GatewayChannelPlan) -> int:
    return sum(1 for c in plan.multi_sf_channels if c.enable)
