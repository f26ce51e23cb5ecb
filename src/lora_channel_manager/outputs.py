# src/lora_channel_manager/outputs.py
from __future__ import annotations

import json
from pathlib import Path

from .bands import required_radio_bandwidth
from .classifier import multi_sf_in_use
from .merge import dump_config
from .models import GatewayChannelPlan


def write_config(path: str | Path, document: dict) -> None:
    """
    Write the merged packet-forwarder configuration, replacing the file.
    """
    path = Path(path)
    path.write_text(dump_config(document))


def write_plan_description(path: str | Path, plan: GatewayChannelPlan) -> None:
    """
    JSON description of a computed plan: every slot plus, per enabled radio,
    the coverage window for the widest channel bandwidth it hosts.
    """
    path = Path(path)
    blob = plan.to_dict()

    hosted_bw = {}
    for c in plan.multi_sf_channels:
        if c.enable:
            hosted_bw.setdefault(c.radio, set()).add(c.bandwidth)
    if plan.lora_std_channel.enable:
        hosted_bw.setdefault(plan.lora_std_channel.radio, set()).add(
            plan.lora_std_channel.bandwidth
        )
    if plan.fsk_channel.enable:
        hosted_bw.setdefault(plan.fsk_channel.radio, set()).add(
            plan.fsk_channel.bandwidth * 1000
        )

    coverage = []
    for i, r in enumerate(plan.radios):
        if not r.enable:
            continue
        radio_bw = max(
            (required_radio_bandwidth(bw) for bw in hosted_bw.get(i, ())),
            default=required_radio_bandwidth(125_000),
        )
        window = r.window(radio_bw)
        coverage.append(
            {
                "radio": i,
                "center": r.freq,
                "radio_bandwidth": radio_bw,
                "start": window.start,
                "stop": window.stop,
            }
        )

    blob["coverage"] = coverage
    blob["multi_sf_in_use"] = multi_sf_in_use(plan)
    path.write_text(json.dumps(blob, indent=2))
