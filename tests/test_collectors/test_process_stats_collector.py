"""Tests for the process and network stats collector."""

import logging

import pytest
from unittest.mock import AsyncMock

from klipper_exporter.collectors.process_stats_collector import (
    ProcessStatsCollector,
    map_network_stats,
    map_process_stats,
)
from klipper_exporter.config.models import ProbeRequest
from klipper_exporter.services.moonraker_client import MoonrakerAPIError, PROCESS_STATS_PATH
from klipper_exporter.services.responses import ProcessStatsResult

PROCESS_METRICS = {
    "klipper_moonraker_memory_kb",
    "klipper_moonraker_cpu_usage",
    "klipper_moonraker_websocket_connections",
    "klipper_system_cpu_temp",
    "klipper_system_cpu",
    "klipper_system_memory_total",
    "klipper_system_memory_available",
    "klipper_system_memory_used",
    "klipper_system_uptime",
}


def _by_name(observations):
    return {o.name: o.value for o in observations}


def _collector(result, modules, logger):
    client = AsyncMock()
    client.fetch.return_value = result
    return ProcessStatsCollector(client, ProbeRequest(target="printer.local", modules=modules), logger)


class TestMapProcessStats:

    def test_uses_latest_sample(self, proc_stats, logger):
        metrics = _by_name(map_process_stats(ProcessStatsResult.model_validate(proc_stats), logger))

        assert set(metrics) == PROCESS_METRICS
        assert metrics["klipper_moonraker_memory_kb"] == 12345
        assert metrics["klipper_moonraker_cpu_usage"] == 2.75
        assert metrics["klipper_moonraker_websocket_connections"] == 3
        assert metrics["klipper_system_cpu_temp"] == 45.3
        assert metrics["klipper_system_cpu"] == 12.5
        assert metrics["klipper_system_memory_total"] == 3919216
        assert metrics["klipper_system_memory_available"] == 3200000
        assert metrics["klipper_system_memory_used"] == 719216
        assert metrics["klipper_system_uptime"] == 12345.67

    def test_unexpected_memory_units_drop_only_memory(self, proc_stats, caplog, capture_logger):
        proc_stats["moonraker_stats"][-1]["mem_units"] = "MB"

        with caplog.at_level(logging.ERROR):
            metrics = _by_name(map_process_stats(ProcessStatsResult.model_validate(proc_stats), capture_logger))

        assert "klipper_moonraker_memory_kb" not in metrics
        assert metrics["klipper_moonraker_cpu_usage"] == 2.75
        assert set(metrics) == PROCESS_METRICS - {"klipper_moonraker_memory_kb"}
        assert "Unexpected units MB" in caplog.text

    def test_only_latest_sample_units_matter(self, proc_stats, logger):
        proc_stats["moonraker_stats"][0]["mem_units"] = "MB"

        metrics = _by_name(map_process_stats(ProcessStatsResult.model_validate(proc_stats), logger))

        assert metrics["klipper_moonraker_memory_kb"] == 12345

    def test_empty_stats_history(self, proc_stats, logger):
        proc_stats["moonraker_stats"] = []

        metrics = _by_name(map_process_stats(ProcessStatsResult.model_validate(proc_stats), logger))

        assert "klipper_moonraker_memory_kb" not in metrics
        assert "klipper_moonraker_cpu_usage" not in metrics
        assert metrics["klipper_system_uptime"] == 12345.67

    def test_missing_cpu_temp(self, proc_stats, logger):
        proc_stats["cpu_temp"] = None

        metrics = _by_name(map_process_stats(ProcessStatsResult.model_validate(proc_stats), logger))

        assert "klipper_system_cpu_temp" not in metrics
        assert len(metrics) == len(PROCESS_METRICS) - 1


class TestMapNetworkStats:

    def test_nine_metrics_per_interface(self, proc_stats):
        observations = map_network_stats(ProcessStatsResult.model_validate(proc_stats))

        eth0 = [o for o in observations if o.name.startswith("klipper_network_eth0_")]
        wlan0 = [o for o in observations if o.name.startswith("klipper_network_wlan0_")]
        assert len(eth0) == 9
        assert len(wlan0) == 9
        assert len(observations) == 18

    def test_values_follow_fields(self, proc_stats):
        metrics = _by_name(map_network_stats(ProcessStatsResult.model_validate(proc_stats)))

        assert metrics["klipper_network_eth0_rx_bytes"] == 1001
        assert metrics["klipper_network_eth0_tx_drop"] == 1008
        assert metrics["klipper_network_wlan0_bandwidth"] == 2000.5

    def test_no_interfaces(self, proc_stats):
        proc_stats["network"] = {}

        assert map_network_stats(ProcessStatsResult.model_validate(proc_stats)) == []


class TestProcessStatsCollector:

    @pytest.mark.asyncio
    async def test_process_stats_only(self, proc_stats, logger):
        collector = _collector(ProcessStatsResult.model_validate(proc_stats), ["process_stats"], logger)

        names = {o.name for o in await collector.collect()}

        assert names == PROCESS_METRICS
        collector.client.fetch.assert_awaited_once_with(PROCESS_STATS_PATH, ProcessStatsResult)

    @pytest.mark.asyncio
    async def test_network_stats_only(self, proc_stats, logger):
        collector = _collector(ProcessStatsResult.model_validate(proc_stats), ["network_stats"], logger)

        names = {o.name for o in await collector.collect()}

        assert len(names) == 18
        assert all(name.startswith("klipper_network_") for name in names)

    @pytest.mark.asyncio
    async def test_both_families_share_one_call(self, proc_stats, logger):
        collector = _collector(
            ProcessStatsResult.model_validate(proc_stats),
            ["process_stats", "network_stats"],
            logger
        )

        observations = await collector.collect()

        assert len(observations) == len(PROCESS_METRICS) + 18
        assert collector.client.fetch.await_count == 1

    @pytest.mark.asyncio
    async def test_upstream_failure_emits_nothing(self, logger):
        collector = _collector(None, ["process_stats", "network_stats"], logger)
        collector.client.fetch.side_effect = MoonrakerAPIError("connection refused", "http://printer.local")

        assert await collector.collect() == []


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
