from __future__ import annotations

import pytest

from pymist.ingestion.server import normalize_server_stats, summarize_config


def test_server_stats_reads_totals_memory_and_cpu() -> None:
    stats = normalize_server_stats(
        {
            "totals": {"clients": 12, "bps_out": 2_500_000, "uptime": 3725, "streams": 3},
            "memory": {"used": 512 * 1024 * 1024, "total": 2048 * 1024 * 1024},
            "cpu": {"usage": 37.3},
        }
    )

    assert stats.total_clients == 12
    assert stats.total_streams == 3
    assert stats.formatted_bandwidth == "2.5 Mbps"
    assert stats.formatted_uptime == "1:02:05"
    assert stats.formatted_memory == "512.0 MB"
    assert stats.memory_total == 2048 * 1024 * 1024
    assert stats.formatted_cpu == "37.3%"
    assert stats.raw["cpu"]["usage"] == 37.3


def test_server_stats_takes_latest_row_of_tabular_totals() -> None:
    stats = normalize_server_stats(
        {"totals": {"fields": ["clients", "upbps"], "data": [[1, 100], [4, 8000]]}},
    )

    assert stats.total_clients == 4
    assert stats.total_bandwidth == 8000


@pytest.mark.parametrize(
    "response",
    [None, {}, {"totals": None}, {"totals": {"clients": "many"}, "cpu": "hot"}, {"totals": {"fields": [], "data": []}}],
)
def test_server_stats_degrades_to_zeros(response: object) -> None:
    stats = normalize_server_stats(response)

    assert stats.total_clients == 0
    assert stats.cpu_usage == 0.0
    assert stats.formatted_cpu == "0.0%"
    assert stats.formatted_memory == "0.0 B"


def test_config_summary_counts_sections() -> None:
    summary = summarize_config(
        {
            "config": {
                "controller": {"interface": "127.0.0.1", "port": 4242},
                "protocols": [
                    {"connector": "RTMP", "port": 1935},
                    {"connector": "HLS"},
                    {"connector": "HTTP", "port": "8080"},
                ],
                "triggers": {"STREAM_BUFFER": [{"handler": "http://hook"}], "USER_NEW": []},
                "version": "3.4",
                "name": "studio",
            },
            "streams": {"vod": {}, "live": {}},
            "autopushes": [["live", "rtmp://a/live/x"]],
        }
    )

    assert summary.stream_count == 2
    assert summary.stream_names == ("live", "vod")
    assert summary.protocol_count == 3
    assert summary.enabled_protocol_count == 2
    assert summary.trigger_count == 2
    assert summary.auto_push_count == 1
    assert summary.server_name == "studio"
    assert summary.server_interface == "127.0.0.1"
    assert summary.server_port == 4242
    assert summary.version == "3.4"
    assert summary.is_valid
    assert str(summary) == "Streams: 2, Auto pushes: 1, Protocols: 2/3 enabled"


def test_config_summary_reports_missing_sections_and_defaults() -> None:
    summary = summarize_config({"config": {"triggers": None}})

    assert summary.missing_sections == ("streams", "protocols")
    assert not summary.is_valid
    assert summary.stream_count == 0
    assert summary.trigger_count == 0
    assert summary.server_name == "MistServer"
    assert summary.server_port == 4242
    assert summary.server_interface == "0.0.0.0"
    assert summary.version is None


def test_config_summary_finds_streams_inside_config_object() -> None:
    summary = summarize_config({"config": {"streams": {"live": {}}, "protocols": []}})

    assert summary.stream_names == ("live",)
    assert summary.missing_sections == ()
