"""Print job queue collector."""

from typing import List

from ..config.models import JOB_QUEUE
from ..services.moonraker_client import JOB_QUEUE_PATH
from ..services.responses import JobQueueResult
from ..utils.metrics import MetricObservation, gauge
from .base import BaseCollector, safe_collect


def map_job_queue(result: JobQueueResult) -> List[MetricObservation]:
    return [gauge("klipper_job_queue_length", "Klipper job queue length.", len(result.queued_jobs))]


class JobQueueCollector(BaseCollector):
    """Collector for /server/job_queue/status."""

    modules = (JOB_QUEUE,)

    @safe_collect
    async def collect(self) -> List[MetricObservation]:
        self.logger.info(f"Collecting job_queue for {self.request.target}")
        result = await self.client.fetch(JOB_QUEUE_PATH, JobQueueResult)
        return map_job_queue(result)
