"""Disk usage collector for the Moonraker file storage."""

from typing import List

from ..config.models import DIRECTORY_INFO
from ..services.moonraker_client import DIRECTORY_INFO_PATH
from ..services.responses import DirectoryInfoResult
from ..utils.metrics import MetricObservation, gauge
from .base import BaseCollector, safe_collect

# Listing the gcodes root is the cheapest call that reports disk usage
DIRECTORY_PARAMS = {"path": "gcodes", "extended": "false"}


def map_directory_info(result: DirectoryInfoResult) -> List[MetricObservation]:
    disk = result.disk_usage
    return [
        gauge("klipper_disk_usage_total", "Klipper total disk space.", disk.total),
        gauge("klipper_disk_usage_used", "Klipper used disk space.", disk.used),
        gauge("klipper_disk_usage_available", "Klipper available disk space.", disk.free),
    ]


class DirectoryCollector(BaseCollector):
    """Collector for /server/files/directory."""

    modules = (DIRECTORY_INFO,)

    @safe_collect
    async def collect(self) -> List[MetricObservation]:
        self.logger.info(f"Collecting directory_info for {self.request.target}")
        result = await self.client.fetch(DIRECTORY_INFO_PATH, DirectoryInfoResult, params=DIRECTORY_PARAMS)
        return map_directory_info(result)
