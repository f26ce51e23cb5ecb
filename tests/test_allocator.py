# tests/test_allocator.py
from __future__ import annotations

import pytest

from lora_channel_manager.allocator import (
    allocate,
    allocate_radios,
    assign_channels,
    min_radio_center_freq,
    sort_by_min_radio_center_freq,
)
from lora_channel_manager.bands import (
    DEFAULT_RADIO_BANDWIDTH,
    RADIO_COUNT,
    required_radio_bandwidth,
)

from channel_plans import eu868_full, eu868_minimal, fsk, lora, us915_sub_band_1


@pytest.mark.parametrize(
    "channel_bw, radio_bw",
    [
        (500_000, 1_100_000),
        (250_000, 1_000_000),
        (125_000, 925_000),
        (62_500, DEFAULT_RADIO_BANDWIDTH),
    ],
)
def test_required_radio_bandwidth(channel_bw, radio_bw):
    assert required_radio_bandwidth(channel_bw) == radio_bw


def test_min_radio_center_freq():
    # 868.1 MHz - 62.5 kHz + 462.5 kHz
    assert min_radio_center_freq(lora(868100000)) == 868500000
    # 868.3 MHz - 125 kHz + 500 kHz
    assert min_radio_center_freq(lora(868300000, bandwidth=250, sfs=(7,))) == 868675000
    # 903.0 MHz - 250 kHz + 550 kHz
    assert min_radio_center_freq(lora(903000000, bandwidth=500, sfs=(8,))) == 903300000


def test_sort_is_stable_for_ties():
    a = lora(868100000)
    b = fsk(868100000)  # same key as a
    c = lora(867100000)
    assert sort_by_min_radio_center_freq([a, b, c]) == [c, a, b]
    assert sort_by_min_radio_center_freq([b, a, c]) == [c, b, a]
    assert sort_by_min_radio_center_freq([]) == []


def test_allocate_radios_single_cluster():
    radios = allocate_radios(eu868_minimal())
    assert len(radios) == RADIO_COUNT
    assert radios[0].enable and radios[0].freq == 868500000
    assert not radios[1].enable
    assert radios[1].freq == 0


def test_allocate_radios_two_clusters():
    radios = allocate_radios(eu868_full())
    assert [(r.enable, r.freq) for r in radios] == [
        (True, 867500000),
        (True, 868500000),
    ]


def test_allocate_radios_us915():
    radios = allocate_radios(us915_sub_band_1())
    assert [r.freq for r in radios] == [902700000, 903700000]


def test_allocate_radios_no_channels():
    radios = allocate_radios([])
    assert all(not r.enable for r in radios)


def test_reused_radio_keeps_center():
    # Second channel fits under radio 0 without moving it.
    radios = allocate_radios([lora(868100000), lora(868900000)])
    assert radios[0].freq == 868500000
    assert not radios[1].enable


@pytest.mark.parametrize("channels", [eu868_minimal(), eu868_full(), us915_sub_band_1()])
def test_coverage_invariant(channels):
    allocation = allocate(channels)
    assert len(allocation.assignments) == len(channels)
    for a in allocation.assignments:
        c = a.channel
        radio = allocation.radios[a.radio]
        assert radio.enable
        assert a.if_freq == c.frequency - radio.freq
        radio_bw = required_radio_bandwidth(c.bandwidth_hz)
        assert abs(c.frequency - radio.freq) + c.bandwidth_hz // 2 <= radio_bw // 2


def test_assignments_follow_input_order():
    channels = eu868_full()
    allocation = allocate(channels)
    assert [a.channel for a in allocation.assignments] == channels
    assert [a.radio for a in allocation.assignments[:8]] == [1, 1, 1, 0, 0, 0, 0, 0]


def test_uncovered_channel_falls_back_to_radio_0(caplog):
    # Three clusters, two radios: the 916 MHz channel is not covered.
    channels = [lora(868100000), lora(902300000), lora(916000000)]
    radios = allocate_radios(channels)
    assert [r.freq for r in radios] == [868500000, 902700000]

    with caplog.at_level("WARNING"):
        assignments = assign_channels(channels, radios)

    last = assignments[-1]
    assert last.radio == 0
    assert last.if_freq == 916000000 - 868500000
    assert "not covered" in caplog.text
