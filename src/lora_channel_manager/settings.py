# src/lora_channel_manager/settings.py
from __future__ import annotations

import os
import re
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Dict, Mapping, Optional, Union

from .models import load_yaml_or_json, normalize_gateway_mac

DEFAULT_GW_SERVER = "http://127.0.0.1:8002"
DEFAULT_POLL_INTERVAL = 300.0  # seconds


@dataclass(frozen=True)
class Settings:
    """
    Process settings. Built once at startup and passed to collaborators.
    """
    gw_mac: Optional[str] = None
    gw_server: str = DEFAULT_GW_SERVER
    gw_client_ca_cert: Optional[str] = None
    gw_client_tls_cert: Optional[str] = None
    gw_client_tls_key: Optional[str] = None
    gw_client_jwt_token: Optional[str] = None
    base_config_file: Optional[str] = None
    output_config_file: Optional[str] = None
    pf_restart_command: str = ""
    config_poll_interval: float = DEFAULT_POLL_INTERVAL

    def validated(self) -> "Settings":
        """
        Return a copy with the MAC normalized; raise ValueError if unusable.
        """
        mac = normalize_gateway_mac(self.gw_mac)
        if not self.base_config_file:
            raise ValueError("base_config_file must be set")
        if not self.output_config_file:
            raise ValueError("output_config_file must be set")
        if self.config_poll_interval <= 0:
            raise ValueError(
                f"config_poll_interval must be positive, got {self.config_poll_interval}"
            )
        return replace(self, gw_mac=mac)


# Environment variable -> Settings field
ENV_VARS: Dict[str, str] = {
    "GW_MAC": "gw_mac",
    "GW_SERVER": "gw_server",
    "GW_CLIENT_CA_CERT": "gw_client_ca_cert",
    "GW_CLIENT_TLS_CERT": "gw_client_tls_cert",
    "GW_CLIENT_TLS_KEY": "gw_client_tls_key",
    "GW_CLIENT_JWT_TOKEN": "gw_client_jwt_token",
    "BASE_CONFIG_FILE": "base_config_file",
    "OUTPUT_CONFIG_FILE": "output_config_file",
    "PF_RESTART_COMMAND": "pf_restart_command",
    "CONFIG_POLL_INTERVAL": "config_poll_interval",
}

_DURATION_RE = re.compile(r"(\d+(?:\.\d+)?)(ms|s|m|h)")
_DURATION_UNITS = {"ms": 0.001, "s": 1.0, "m": 60.0, "h": 3600.0}


def parse_duration(value: Union[str, int, float]) -> float:
    """
    Seconds from a number or a Go-style duration string ("5m", "1h30m", "45s").
    """
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)
    text = str(value).strip()
    try:
        return float(text)
    except ValueError:
        pass
    pos = 0
    total = 0.0
    for m in _DURATION_RE.finditer(text):
        if m.start() != pos:
            break
        total += float(m.group(1)) * _DURATION_UNITS[m.group(2)]
        pos = m.end()
    if pos != len(text) or not text:
        raise ValueError(f"invalid duration: {value!r}")
    return total


def _coerce(values: Mapping[str, object]) -> Dict[str, object]:
    known = {f.name for f in fields(Settings)}
    out: Dict[str, object] = {}
    for key, value in values.items():
        key = key.replace("-", "_")
        if key not in known:
            raise ValueError(f"unknown setting: {key}")
        if value is None:
            continue
        if key == "config_poll_interval":
            value = parse_duration(value)
        else:
            value = str(value)
        out[key] = value
    return out


def load_settings(
    path: Union[str, Path, None] = None,
    overrides: Optional[Mapping[str, object]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Settings:
    """
    Build Settings from, in increasing precedence: defaults, a YAML/JSON
    settings file, environment variables and explicit overrides.

    None values in overrides are ignored, so argparse namespaces can be
    passed straight through.
    """
    environ = os.environ if environ is None else environ
    merged: Dict[str, object] = {}

    if path is not None:
        raw = load_yaml_or_json(Path(path)) or {}
        if not isinstance(raw, dict):
            raise ValueError(f"settings file {path} must contain a mapping")
        merged.update(_coerce(raw))

    merged.update(
        _coerce({field: environ[var] for var, field in ENV_VARS.items() if environ.get(var)})
    )

    if overrides:
        merged.update(_coerce(overrides))

    return Settings(**merged)
