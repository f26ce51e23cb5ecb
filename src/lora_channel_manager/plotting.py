# src/lora_channel_manager/plotting.py
from __future__ import annotations

from pathlib import Path
from typing import Optional

import matplotlib
import matplotlib.pyplot as plt

from .bands import required_radio_bandwidth
from .models import GatewayChannelPlan


def plot_channel_plan(
    plan: GatewayChannelPlan,
    out_path: Optional[str | Path] = None,
) -> None:
    """
    Plot radio coverage windows as translucent spans and each enabled channel
    as a bar at its absolute frequency (MHz), one row per radio.
    """
    if out_path:
        matplotlib.use("Agg")

    channels = []  # (label, radio, freq Hz, bandwidth Hz)
    for i, c in enumerate(plan.multi_sf_channels):
        if c.enable:
            channels.append((f"multiSF_{i}", c.radio, c.freq, c.bandwidth))
    std = plan.lora_std_channel
    if std.enable:
        channels.append(("Lora_std", std.radio, std.freq, std.bandwidth))
    fsk = plan.fsk_channel
    if fsk.enable:
        channels.append(("FSK", fsk.radio, fsk.freq, fsk.bandwidth * 1000))

    plt.figure()
    for i, r in enumerate(plan.radios):
        if not r.enable:
            continue
        bws = [bw for _, radio, _, bw in channels if radio == i] or [125_000]
        window = r.window(max(required_radio_bandwidth(bw) for bw in bws))
        plt.axvspan(
            window.start / 1e6,
            window.stop / 1e6,
            ymin=i / 2.0,
            ymax=(i + 1) / 2.0,
            alpha=0.15,
            color=f"C{i}",
            label=f"radio_{i} ({r.freq / 1e6:.3f} MHz)",
        )

    for label, radio, freq, bw in channels:
        plt.barh(
            radio + 0.5,
            bw / 1e6,
            left=(freq - bw / 2) / 1e6,
            height=0.3,
            color=f"C{radio}",
            edgecolor="black",
        )
        plt.text(freq / 1e6, radio + 0.7, label, ha="center", fontsize=7, rotation=45)

    plt.ylim(0, 2)
    plt.yticks([0.5, 1.5], ["radio_0", "radio_1"])
    plt.xlabel("Frequency (MHz)")
    plt.title("Gateway Channel Plan")
    plt.legend()
    plt.grid(True, axis="x")
    if out_path:
        out_path = Path(out_path)
        plt.savefig(out_path, dpi=150, bbox_inches="tight")
        plt.close()
    else:
        plt.show()
