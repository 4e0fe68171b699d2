"""Host system information collector."""

from typing import List

from ..config.models import SYSTEM_INFO
from ..services.moonraker_client import SYSTEM_INFO_PATH
from ..services.responses import SystemInfoResult
from ..utils.metrics import MetricObservation, gauge
from .base import BaseCollector, safe_collect


def map_system_info(result: SystemInfoResult) -> List[MetricObservation]:
    return [gauge(
        "klipper_system_cpu_count",
        "Klipper system CPU count.",
        result.system_info.cpu_info.cpu_count
    )]


class SystemInfoCollector(BaseCollector):
    """Collector for /machine/system_info."""

    modules = (SYSTEM_INFO,)

    @safe_collect
    async def collect(self) -> List[MetricObservation]:
        self.logger.info(f"Collecting system_info for {self.request.target}")
        result = await self.client.fetch(SYSTEM_INFO_PATH, SystemInfoResult)
        return map_system_info(result)
