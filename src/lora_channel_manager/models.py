# src/lora_channel_manager/models.py
from __future__ import annotations

import json
import re
from dataclasses import dataclass, field, asdict
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import List, Optional, Tuple, Union

import yaml

from .bands import Hz, MULTI_SF_CHANNEL_COUNT, RADIO_COUNT, khz_to_hz
from .errors import InvalidGatewayMACError


class Modulation(str, Enum):
    LORA = "LORA"
    FSK = "FSK"


def parse_modulation(value) -> Union[Modulation, str]:
    """
    Map a modulation name onto Modulation.

    Unknown names are returned unchanged so the classifier can reject them
    with a message naming the offending value.
    """
    if isinstance(value, Modulation):
        return value
    name = str(value).strip().upper()
    try:
        return Modulation(name)
    except ValueError:
        return str(value)


@dataclass(frozen=True)
class FrequencyWindow:
    """Closed interval [start, stop] in Hz."""
    start: Hz
    stop: Hz

    def covers(self, other: "FrequencyWindow") -> bool:
        return self.start <= other.start and other.stop <= self.stop

    @property
    def width(self) -> Hz:
        return self.stop - self.start


@dataclass(frozen=True)
class Channel:
    """
    A logical channel as returned by the configuration source.

    bandwidth is in kHz, frequency in Hz. An empty spread_factors tuple is
    expected for FSK; one SF marks a LoRa-standard channel, two or more a
    multi-SF channel.
    """
    modulation: Union[Modulation, str]
    frequency: Hz
    bandwidth: int
    spread_factors: Tuple[int, ...] = ()
    bit_rate: int = 0

    @property
    def bandwidth_hz(self) -> Hz:
        return khz_to_hz(self.bandwidth)

    @property
    def window(self) -> FrequencyWindow:
        half = self.bandwidth_hz // 2
        return FrequencyWindow(self.frequency - half, self.frequency + half)


@dataclass
class GatewayConfiguration:
    updated_at: datetime
    channels: List[Channel] = field(default_factory=list)


@dataclass
class RadioConfig:
    enable: bool = False
    freq: Hz = 0

    def window(self, radio_bandwidth: Hz) -> FrequencyWindow:
        half = radio_bandwidth // 2
        return FrequencyWindow(self.freq - half, self.freq + half)


@dataclass
class MultiSFChannelConfig:
    enable: bool = False
    radio: int = 0
    if_freq: int = 0
    freq: Hz = 0
    bandwidth: Hz = 0  # Hz; not written to the packet-forwarder config


@dataclass
class LoRaStdChannelConfig:
    enable: bool = False
    radio: int = 0
    if_freq: int = 0
    bandwidth: Hz = 0  # Hz
    spread_factor: int = 0
    freq: Hz = 0


@dataclass
class FSKChannelConfig:
    enable: bool = False
    radio: int = 0
    if_freq: int = 0
    bandwidth: int = 0  # kHz, as received
    datarate: int = 0
    freq: Hz = 0


def _radios() -> List[RadioConfig]:
    return [RadioConfig() for _ in range(RADIO_COUNT)]


def _multi_sf_channels() -> List[MultiSFChannelConfig]:
    return [MultiSFChannelConfig() for _ in range(MULTI_SF_CHANNEL_COUNT)]


@dataclass
class GatewayChannelPlan:
    """
    Physical channel layout for a two-radio, eight-channel concentrator.

    radios and multi_sf_channels are created at full capacity and addressed
    by position; they are never grown.
    """
    updated_at: Optional[datetime] = None
    radios: List[RadioConfig] = field(default_factory=_radios)
    multi_sf_channels: List[MultiSFChannelConfig] = field(
        default_factory=_multi_sf_channels
    )
    lora_std_channel: LoRaStdChannelConfig = field(default_factory=LoRaStdChannelConfig)
    fsk_channel: FSKChannelConfig = field(default_factory=FSKChannelConfig)

    def to_dict(self) -> dict:
        out = asdict(self)
        out["updated_at"] = (
            self.updated_at.isoformat() if self.updated_at is not None else None
        )
        return out


# ----------------------------------------------------------------------
# Parsing helpers
# ----------------------------------------------------------------------

_RFC3339_RE = re.compile(
    r"^(?P<date>\d{4}-\d{2}-\d{2})[Tt ](?P<time>\d{2}:\d{2}:\d{2})"
    r"(?:\.(?P<frac>\d+))?(?P<tz>[Zz]|[+-]\d{2}:\d{2})$"
)


def parse_timestamp(value: str) -> datetime:
    """
    Parse an RFC3339 timestamp (up to nanosecond precision).

    The fractional part is truncated to microseconds. Raises ValueError on
    anything else.
    """
    m = _RFC3339_RE.match(str(value).strip())
    if m is None:
        raise ValueError(f"invalid RFC3339 timestamp: {value!r}")
    frac = (m.group("frac") or "")[:6].ljust(6, "0")
    tz = m.group("tz")
    if tz in ("Z", "z"):
        tz = "+00:00"
    return datetime.fromisoformat(f"{m.group('date')}T{m.group('time')}.{frac}{tz}")


_MAC_SEPARATORS_RE = re.compile(r"[-:]")
_MAC_RE = re.compile(r"^[0-9a-f]{16}$")


def normalize_gateway_mac(value: str) -> str:
    """
    Validate an EUI-64 gateway MAC and return it as 16 lowercase hex digits.
    """
    if value is None:
        raise InvalidGatewayMACError("gateway MAC is not set")
    text = _MAC_SEPARATORS_RE.sub("", str(value).strip()).lower()
    if not _MAC_RE.match(text):
        raise InvalidGatewayMACError(f"invalid gateway MAC: {value!r}")
    return text


def _get(d: dict, *names, default=None):
    for name in names:
        if name in d:
            return d[name]
    return default


def channel_from_dict(d: dict) -> Channel:
    """
    Build a Channel from a camelCase (HTTP) or snake_case (plan file) mapping.
    """
    if not isinstance(d, dict):
        raise ValueError(f"channel must be an object, got {type(d).__name__}")
    frequency = _get(d, "frequency")
    bandwidth = _get(d, "bandwidth")
    if frequency is None or bandwidth is None:
        raise ValueError(f"channel is missing frequency or bandwidth: {d!r}")
    sfs = _get(d, "spreadFactors", "spread_factors", default=None) or []
    return Channel(
        modulation=parse_modulation(_get(d, "modulation", default="LORA")),
        frequency=int(frequency),
        bandwidth=int(bandwidth),
        spread_factors=tuple(int(sf) for sf in sfs),
        bit_rate=int(_get(d, "bitRate", "bit_rate", default=0) or 0),
    )


def configuration_from_dict(raw: dict) -> GatewayConfiguration:
    """
    Build a GatewayConfiguration from a decoded response or plan file.

    Raises ValueError when the document does not have the expected shape.
    """
    if not isinstance(raw, dict):
        raise ValueError(f"configuration must be an object, got {type(raw).__name__}")
    ts = _get(raw, "updatedAt", "updated_at")
    if ts is None:
        raise ValueError("configuration has no updatedAt timestamp")
    updated_at = ts if isinstance(ts, datetime) else parse_timestamp(ts)
    if updated_at.tzinfo is None:
        updated_at = updated_at.replace(tzinfo=timezone.utc)
    channels = _get(raw, "channels", default=None) or []
    if not isinstance(channels, list):
        raise ValueError("channels must be a list")
    try:
        parsed = [channel_from_dict(c) for c in channels]
    except (TypeError, KeyError) as err:
        raise ValueError(f"invalid channel: {err}") from err
    return GatewayConfiguration(updated_at=updated_at, channels=parsed)


def load_yaml_or_json(path: Path):
    text = path.read_text()
    if path.suffix.lower() in {".yaml", ".yml"}:
        return yaml.safe_load(text)
    else:
        return json.loads(text)


def load_channel_plan(path: Union[str, Path]) -> GatewayConfiguration:
    """
    Load a channel plan from a JSON or YAML file (offline use).

    When the file has no timestamp the current time is used.
    """
    path = Path(path)
    raw = load_yaml_or_json(path) or {}
    if isinstance(raw, list):
        raw = {"channels": raw}
    if isinstance(raw, dict) and _get(raw, "updatedAt", "updated_at") is None:
        raw = dict(raw, updated_at=datetime.now(timezone.utc))
    return configuration_from_dict(raw)
