"""Metric data structures for collectors."""

from dataclasses import dataclass
from enum import Enum
from typing import Iterator, List, Optional
import logging
import re

from prometheus_client.core import GaugeMetricFamily

METRIC_NAME_RE = re.compile(r'^[a-zA-Z_:][a-zA-Z0-9_:]*$')


class MetricKind(Enum):
    """Exposition type of an observation. Everything exported is a gauge."""

    GAUGE = "gauge"


@dataclass(frozen=True)
class MetricObservation:
    """A single named sample produced by a collector."""

    name: str
    help: str
    value: float
    kind: MetricKind = MetricKind.GAUGE


def gauge(name: str, help_text: str, value) -> MetricObservation:
    """Build a gauge observation, coercing the value to float."""
    return MetricObservation(name=name, help=help_text, value=float(value))


def sanitize(key: str) -> str:
    """Replace spaces in an upstream key so it can be used inside a metric name."""
    return key.replace(" ", "_")


class MetricSink:
    """
    Ordered, per-cycle collection of observations.

    Keeps the first observation for any given name; later duplicates and
    names Prometheus would reject are dropped with a warning.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)
        self._observations: List[MetricObservation] = []
        self._names = set()

    def add(self, observation: MetricObservation) -> bool:
        """
        Append an observation.

        Args:
            observation: Observation to emit

        Returns:
            bool: True if the observation was kept
        """
        if not METRIC_NAME_RE.match(observation.name):
            self.logger.warning(f"Skipping metric with invalid name {observation.name!r}")
            return False
        if observation.name in self._names:
            self.logger.warning(f"Skipping duplicate metric {observation.name}")
            return False
        self._names.add(observation.name)
        self._observations.append(observation)
        return True

    def extend(self, observations) -> int:
        """Append several observations, returning how many were kept."""
        return sum(1 for observation in observations if self.add(observation))

    @property
    def observations(self) -> List[MetricObservation]:
        return list(self._observations)

    def __len__(self) -> int:
        return len(self._observations)

    def __iter__(self) -> Iterator[MetricObservation]:
        return iter(self._observations)


class SinkCollector:
    """prometheus_client custom collector exposing the contents of a MetricSink."""

    def __init__(self, sink: MetricSink):
        self.sink = sink

    def collect(self):
        for observation in self.sink:
            yield GaugeMetricFamily(observation.name, observation.help, value=observation.value)
