# src/lora_channel_manager/merge.py
"""
Overlay a GatewayChannelPlan onto a packet-forwarder configuration document.

The packet-forwarder treats each of the SX1301_conf sub-objects as a complete
override, so those objects cannot be regenerated wholesale: they also carry
board-specific values (radio type, RSSI offsets, TX LUTs) that must survive.
Only the managed leaves are patched; everything else is passed through.
"""
from __future__ import annotations

import json
import re
from copy import deepcopy
from pathlib import Path
from typing import Dict, List, Tuple, Union

from .bands import MULTI_SF_CHANNEL_COUNT, RADIO_COUNT
from .errors import ParseError, StructuralError
from .models import GatewayChannelPlan

SX1301_CONF = "SX1301_conf"
GATEWAY_CONF = "gateway_conf"
GATEWAY_ID = "gateway_ID"
LORA_STD_CHANNEL = "chan_Lora_std"
FSK_CHANNEL = "chan_FSK"

_BLOCK_COMMENT_RE = re.compile(r"/\*.*?\*/", re.DOTALL)


def radio_key(i: int) -> str:
    return f"radio_{i}"


def multi_sf_key(i: int) -> str:
    return f"chan_multiSF_{i}"


def managed_paths() -> List[Tuple[str, ...]]:
    """All object paths the merge writes into, in the order they are patched."""
    paths: List[Tuple[str, ...]] = [(SX1301_CONF,)]
    paths += [(SX1301_CONF, radio_key(i)) for i in range(RADIO_COUNT)]
    paths += [(SX1301_CONF, multi_sf_key(i)) for i in range(MULTI_SF_CHANNEL_COUNT)]
    paths += [(SX1301_CONF, LORA_STD_CHANNEL), (SX1301_CONF, FSK_CHANNEL)]
    paths += [(GATEWAY_CONF,)]
    return paths


def _type_name(value) -> str:
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    if value is None:
        return "null"
    return type(value).__name__


def _locate(document: dict, path: Tuple[str, ...]) -> dict:
    node = document
    for depth, key in enumerate(path):
        dotted = ".".join(path[: depth + 1])
        if key not in node:
            raise StructuralError(dotted, "missing")
        node = node[key]
        if not isinstance(node, dict):
            raise StructuralError(dotted, _type_name(node))
    return node


def check_structure(document: dict) -> None:
    """Raise StructuralError if any managed path is missing or not an object."""
    for path in managed_paths():
        _locate(document, path)


def merge_config(
    base: dict,
    plan: GatewayChannelPlan,
    gateway_id: str,
) -> dict:
    """
    Return a copy of base with the plan's managed fields written in.

    base is left untouched. The structure is validated up front, so a
    StructuralError means nothing was patched.
    """
    if not isinstance(base, dict):
        raise StructuralError("<root>", _type_name(base))
    check_structure(base)

    out = deepcopy(base)
    sx1301 = out[SX1301_CONF]

    for i, r in enumerate(plan.radios):
        radio = sx1301[radio_key(i)]
        radio["enable"] = r.enable
        radio["freq"] = r.freq

    for i, c in enumerate(plan.multi_sf_channels):
        channel = sx1301[multi_sf_key(i)]
        channel["enable"] = c.enable
        channel["radio"] = c.radio
        channel["if"] = c.if_freq

    std = plan.lora_std_channel
    channel = sx1301[LORA_STD_CHANNEL]
    channel["enable"] = std.enable
    channel["radio"] = std.radio
    channel["if"] = std.if_freq
    channel["bandwidth"] = std.bandwidth
    channel["spread_factor"] = std.spread_factor

    fsk = plan.fsk_channel
    channel = sx1301[FSK_CHANNEL]
    channel["enable"] = fsk.enable
    channel["radio"] = fsk.radio
    channel["if"] = fsk.if_freq
    channel["bandwidth"] = fsk.bandwidth
    channel["datarate"] = fsk.datarate

    out[GATEWAY_CONF][GATEWAY_ID] = gateway_id

    return out


def strip_json_comments(text: str) -> str:
    """Remove /* ... */ block comments (single or multi-line)."""
    return _BLOCK_COMMENT_RE.sub("", text)


def load_base_config(path: Union[str, Path]) -> Dict:
    """
    Read a packet-forwarder JSON config, tolerating block comments.
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as err:
        raise ParseError(f"read file error: {path}: {err}") from err

    try:
        doc = json.loads(strip_json_comments(text))
    except json.JSONDecodeError as err:
        raise ParseError(f"unmarshal config json error: {path}: {err}") from err

    if not isinstance(doc, dict):
        raise ParseError(
            f"expected {path} to contain a JSON object, got {_type_name(doc)}"
        )
    return doc


def dump_config(document: dict) -> str:
    return json.dumps(document, indent=4) + "\n"
