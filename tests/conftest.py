# tests/conftest.py
from __future__ import annotations

import pytest

from lora_channel_manager.models import GatewayConfiguration
from lora_channel_manager.settings import Settings

from channel_plans import (
    BASE_CONFIG_TEXT,
    GATEWAY_MAC,
    UPDATED_AT,
    FakeClock,
    eu868_full,
)


@pytest.fixture
def base_config_file(tmp_path):
    p = tmp_path / "global_conf.json"
    p.write_text(BASE_CONFIG_TEXT)
    return p


@pytest.fixture
def eu868_configuration() -> GatewayConfiguration:
    return GatewayConfiguration(updated_at=UPDATED_AT, channels=eu868_full())


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def settings(tmp_path, base_config_file) -> Settings:
    return Settings(
        gw_mac=GATEWAY_MAC,
        base_config_file=str(base_config_file),
        output_config_file=str(tmp_path / "local_conf.json"),
        pf_restart_command=f"touch {tmp_path / 'restarted'}",
        config_poll_interval=30.0,
    )
