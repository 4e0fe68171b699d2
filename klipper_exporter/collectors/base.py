"""Base collector abstract class for all Moonraker collectors."""

from abc import ABC, abstractmethod
from typing import List
import logging
from functools import wraps

from ..config.models import ProbeRequest
from ..services.moonraker_client import MoonrakerClient, MoonrakerAPIError
from ..utils.metrics import MetricObservation


class BaseCollector(ABC):
    """Abstract base class for all collectors."""

    # Module names that enable this collector
    modules: tuple = ()

    def __init__(self, client: MoonrakerClient, request: ProbeRequest, logger: logging.Logger):
        """
        Initialize base collector.

        Args:
            client: Moonraker client for the probed target
            request: The probe being served
            logger: Logger instance
        """
        self.client = client
        self.request = request
        self.logger = logger.getChild(self.__class__.__name__)

    @classmethod
    def enabled_for(cls, request: ProbeRequest) -> bool:
        """Return True if any of this collector's modules was requested."""
        return any(request.wants(module) for module in cls.modules)

    @abstractmethod
    async def collect(self) -> List[MetricObservation]:
        """
        Query Moonraker and map the response to observations.

        Returns:
            List[MetricObservation]: Observations for this cycle

        Raises:
            Exception: Any collection errors (will be caught by safe_collect)

        Note:
            Implementations should use @safe_collect decorator for error handling.
        """
        pass


def safe_collect(func):
    """
    Decorator to contain collector failures.

    A failing collector is logged and yields no observations, so the
    remaining collectors of the cycle still run. Cancellation is not caught.

    Args:
        func: Collector method to wrap

    Returns:
        Wrapped function that catches exceptions
    """
    @wraps(func)
    async def wrapper(self, *args, **kwargs):
        try:
            return await func(self, *args, **kwargs)
        except MoonrakerAPIError as e:
            self.logger.error(f"Collection failed for {self.request.target}: {e}")
            return []
        except Exception as e:
            self.logger.error(f"Collection failed: {e}", exc_info=True)
            return []
    return wrapper
