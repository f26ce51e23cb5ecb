# tests/test_models.py
from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone

import pytest

from lora_channel_manager.errors import InvalidGatewayMACError
from lora_channel_manager.models import (
    Channel,
    FrequencyWindow,
    GatewayChannelPlan,
    Modulation,
    channel_from_dict,
    configuration_from_dict,
    load_channel_plan,
    normalize_gateway_mac,
    parse_modulation,
    parse_timestamp,
)


def test_frequency_window_covers():
    outer = FrequencyWindow(868000000, 869000000)
    assert outer.covers(FrequencyWindow(868000000, 869000000))
    assert outer.covers(FrequencyWindow(868400000, 868600000))
    assert not outer.covers(FrequencyWindow(867900000, 868100000))
    assert outer.width == 1000000


def test_channel_window():
    c = Channel(modulation=Modulation.LORA, frequency=868100000, bandwidth=125)
    assert c.bandwidth_hz == 125000
    assert c.window == FrequencyWindow(868037500, 868162500)


def test_parse_modulation():
    assert parse_modulation("LORA") is Modulation.LORA
    assert parse_modulation("LoRa") is Modulation.LORA
    assert parse_modulation("fsk") is Modulation.FSK
    assert parse_modulation("OFDM") == "OFDM"


@pytest.mark.parametrize(
    "text, expected",
    [
        ("2024-03-01T12:00:00Z", datetime(2024, 3, 1, 12, tzinfo=timezone.utc)),
        (
            "2024-03-01T12:00:00.123456789Z",
            datetime(2024, 3, 1, 12, 0, 0, 123456, tzinfo=timezone.utc),
        ),
        (
            "2024-03-01T14:00:00.5+02:00",
            datetime(2024, 3, 1, 12, 0, 0, 500000, tzinfo=timezone.utc),
        ),
    ],
)
def test_parse_timestamp(text, expected):
    assert parse_timestamp(text) == expected


@pytest.mark.parametrize("text", ["yesterday", "2024-03-01", "2024-03-01T12:00:00"])
def test_parse_timestamp_rejects(text):
    with pytest.raises(ValueError):
        parse_timestamp(text)


@pytest.mark.parametrize(
    "text", ["0102030405060708", "01:02:03:04:05:06:07:08", "01-02-03-04-05-06-07-08"]
)
def test_normalize_gateway_mac(text):
    assert normalize_gateway_mac(text) == "0102030405060708"


def test_normalize_gateway_mac_lowercases():
    assert normalize_gateway_mac("AA555A0000000000") == "aa555a0000000000"


@pytest.mark.parametrize("text", [None, "", "0102", "01020304050607zz", "010203040506070809"])
def test_normalize_gateway_mac_rejects(text):
    with pytest.raises(InvalidGatewayMACError):
        normalize_gateway_mac(text)


def test_channel_from_dict_camel_case():
    c = channel_from_dict(
        {"modulation": "LORA", "frequency": 868100000, "bandwidth": 125, "spreadFactors": [7, 8]}
    )
    assert c == Channel(Modulation.LORA, 868100000, 125, (7, 8), 0)


def test_channel_from_dict_defaults_to_lora():
    # proto3 JSON omits the zero enum value
    c = channel_from_dict({"frequency": 868100000, "bandwidth": 125, "spread_factors": [7]})
    assert c.modulation is Modulation.LORA


def test_channel_from_dict_fsk():
    c = channel_from_dict(
        {"modulation": "FSK", "frequency": 868800000, "bandwidth": 125, "bitRate": 50000}
    )
    assert c.spread_factors == ()
    assert c.bit_rate == 50000


def test_channel_from_dict_requires_frequency():
    with pytest.raises(ValueError):
        channel_from_dict({"bandwidth": 125})


def test_configuration_from_dict():
    conf = configuration_from_dict(
        {
            "updatedAt": "2024-03-01T12:00:00Z",
            "channels": [{"frequency": 868100000, "bandwidth": 125, "spreadFactors": [7, 8]}],
        }
    )
    assert conf.updated_at == datetime(2024, 3, 1, 12, tzinfo=timezone.utc)
    assert len(conf.channels) == 1


def test_configuration_from_dict_requires_timestamp():
    with pytest.raises(ValueError, match="updatedAt"):
        configuration_from_dict({"channels": []})


def test_load_channel_plan_yaml(tmp_path):
    p = tmp_path / "plan.yaml"
    p.write_text(
        """
updated_at: "2024-03-01T12:00:00Z"
channels:
  - modulation: LORA
    frequency: 868100000
    bandwidth: 125
    spread_factors: [7, 8, 9, 10, 11, 12]
  - modulation: FSK
    frequency: 868800000
    bandwidth: 125
    bit_rate: 50000
"""
    )
    conf = load_channel_plan(p)
    assert conf.updated_at == datetime(2024, 3, 1, 12, tzinfo=timezone.utc)
    assert [c.modulation for c in conf.channels] == [Modulation.LORA, Modulation.FSK]


def test_load_channel_plan_json_list_without_timestamp(tmp_path):
    p = tmp_path / "plan.json"
    p.write_text(json.dumps([{"frequency": 868100000, "bandwidth": 125, "spreadFactors": [7, 8]}]))
    conf = load_channel_plan(p)
    assert len(conf.channels) == 1
    assert datetime.now(timezone.utc) - conf.updated_at < timedelta(minutes=5)


def test_plan_has_fixed_capacity():
    plan = GatewayChannelPlan()
    assert len(plan.radios) == 2
    assert len(plan.multi_sf_channels) == 8
    d = plan.to_dict()
    assert d["updated_at"] is None
    assert len(d["multi_sf_channels"]) == 8
