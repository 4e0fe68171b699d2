"""Collection cycle orchestration."""

import logging
import time
from typing import List, Type

from .config.models import ExporterConfig, ProbeRequest, KNOWN_MODULES
from .services.moonraker_client import MoonrakerClient
from .utils.logger import setup_logger
from .utils.metrics import MetricSink

from .collectors.base import BaseCollector
from .collectors.process_stats_collector import ProcessStatsCollector
from .collectors.directory_collector import DirectoryCollector
from .collectors.job_queue_collector import JobQueueCollector
from .collectors.system_info_collector import SystemInfoCollector
from .collectors.temperature_collector import TemperatureCollector

# Execution order within a cycle
COLLECTORS: List[Type[BaseCollector]] = [
    ProcessStatsCollector,
    DirectoryCollector,
    JobQueueCollector,
    SystemInfoCollector,
    TemperatureCollector,
]


def select_collectors(request: ProbeRequest) -> List[Type[BaseCollector]]:
    """
    Pick the collectors needed for the requested modules.

    process_stats and network_stats map to the same collector, so the
    shared upstream call is made at most once.
    """
    return [collector for collector in COLLECTORS if collector.enabled_for(request)]


class CollectionCycle:
    """
    One scrape of one Moonraker host.

    Runs the selected collectors one after another and gathers their
    observations. A failing collector only loses its own metrics.
    """

    def __init__(
        self,
        request: ProbeRequest,
        config: ExporterConfig,
        logger: logging.Logger = None
    ):
        """
        Initialize collection cycle.

        Args:
            request: Target, modules and API key for this scrape
            config: Exporter configuration
            logger: Optional logger instance
        """
        self.request = request
        self.config = config
        self.logger = logger or setup_logger("workflow")

    async def run(self) -> MetricSink:
        """
        Execute the cycle.

        Returns:
            MetricSink: Observations produced by all selected collectors
        """
        unknown = [m for m in self.request.modules if m not in KNOWN_MODULES]
        if unknown:
            self.logger.warning(f"Ignoring unknown modules: {', '.join(unknown)}")

        self.logger.info(
            f"Starting metrics collection of {self.request.modules} for {self.request.target}"
        )
        start_time = time.time()
        sink = MetricSink(self.logger)

        async with MoonrakerClient(
            self.request.target,
            api_key=self.request.api_key,
            timeout=self.config.upstream_timeout,
            logger=self.logger
        ) as client:
            for collector_class in select_collectors(self.request):
                collector = collector_class(client, self.request, self.logger)
                sink.extend(await collector.collect())

        self.logger.debug(
            f"Collected {len(sink)} metrics for {self.request.target} "
            f"in {time.time() - start_time:.3f}s"
        )
        return sink
