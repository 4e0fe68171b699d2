"""Moonraker process, system and network stats collector."""

import logging
from typing import List

from ..config.models import PROCESS_STATS, NETWORK_STATS
from ..services.moonraker_client import PROCESS_STATS_PATH
from ..services.responses import ProcessStatsResult, NetworkInterfaceStats
from ..utils.metrics import MetricObservation, gauge
from .base import BaseCollector, safe_collect

MEMORY_UNITS = "kB"

# (field, help text) for every per-interface network metric
NETWORK_FIELDS = (
    ("rx_bytes", "Klipper network received bytes."),
    ("tx_bytes", "Klipper network transmitted bytes."),
    ("rx_packets", "Klipper network received packets."),
    ("tx_packets", "Klipper network transmitted packets."),
    ("rx_errs", "Klipper network received errored packets."),
    ("tx_errs", "Klipper network transmitted errored packets."),
    ("rx_drop", "Klipper network received dropped packets."),
    ("tx_drop", "Klipper network transmitted dropped packets."),
    ("bandwidth", "Klipper network bandwidth."),
)


def map_process_stats(result: ProcessStatsResult, logger: logging.Logger) -> List[MetricObservation]:
    """
    Map Moonraker process and host stats to observations.

    Only the latest Moonraker stats sample is used. Memory is reported only
    when it is expressed in kB; any other unit is logged and that single
    metric is dropped.
    """
    observations = []

    if result.moonraker_stats:
        latest = result.moonraker_stats[-1]
        if latest.mem_units != MEMORY_UNITS:
            logger.error(f"Unexpected units {latest.mem_units} for Moonraker memory usage")
        else:
            observations.append(gauge(
                "klipper_moonraker_memory_kb", "Moonraker memory usage in Kb.", latest.memory))
        observations.append(gauge(
            "klipper_moonraker_cpu_usage", "Moonraker CPU usage.", latest.cpu_usage))
    else:
        logger.warning("No Moonraker stats samples in response")

    observations.append(gauge(
        "klipper_moonraker_websocket_connections",
        "Moonraker Websocket connection count.",
        result.websocket_connections))

    if result.cpu_temp is None:
        logger.debug("CPU temperature not reported")
    else:
        observations.append(gauge(
            "klipper_system_cpu_temp", "Klipper system CPU temperature in celsius.", result.cpu_temp))

    observations.extend([
        gauge("klipper_system_cpu", "Klipper system CPU usage.", result.system_cpu_usage.cpu),
        gauge("klipper_system_memory_total", "Klipper system total memory.", result.system_memory.total),
        gauge("klipper_system_memory_available", "Klipper system available memory.",
              result.system_memory.available),
        gauge("klipper_system_memory_used", "Klipper system used memory.", result.system_memory.used),
        gauge("klipper_system_uptime", "Klipper system uptime.", result.system_uptime),
    ])
    return observations


def map_network_stats(result: ProcessStatsResult) -> List[MetricObservation]:
    """Emit one group of counters per network interface, named after the interface."""
    observations = []
    for interface, stats in result.network.items():
        observations.extend(_interface_metrics(interface, stats))
    return observations


def _interface_metrics(interface: str, stats: NetworkInterfaceStats) -> List[MetricObservation]:
    return [
        gauge(f"klipper_network_{interface}_{field}", help_text, getattr(stats, field))
        for field, help_text in NETWORK_FIELDS
    ]


class ProcessStatsCollector(BaseCollector):
    """
    Collector for /machine/proc_stats.

    Serves both the process_stats and network_stats modules from one
    upstream call; each family is emitted only when its module is requested.
    """

    modules = (PROCESS_STATS, NETWORK_STATS)

    @safe_collect
    async def collect(self) -> List[MetricObservation]:
        self.logger.info(f"Collecting process_stats for {self.request.target}")
        result = await self.client.fetch(PROCESS_STATS_PATH, ProcessStatsResult)

        observations = []
        if self.request.wants(PROCESS_STATS):
            observations.extend(map_process_stats(result, self.logger))
        if self.request.wants(NETWORK_STATS):
            observations.extend(map_network_stats(result))
        return observations
