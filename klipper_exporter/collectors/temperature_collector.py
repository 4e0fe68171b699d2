"""Temperature store collector."""

import logging
from typing import Any, List, Optional

from ..config.models import TEMPERATURE
from ..services.moonraker_client import TEMPERATURE_STORE_PATH
from ..utils.metrics import MetricObservation, gauge, sanitize
from .base import BaseCollector, safe_collect


def attribute_label(attribute: str) -> str:
    """
    Turn a temperature store attribute into a metric name suffix.

    Attributes are plural ("temperatures", "targets", "powers"); the
    trailing "s" is stripped and spaces become underscores.
    """
    if attribute.endswith("s"):
        attribute = attribute[:-1]
    return sanitize(attribute)


def latest_sample(samples: Any) -> Optional[float]:
    """Return the last sample of a series if it is a number, else None."""
    if not isinstance(samples, list) or not samples:
        return None
    value = samples[-1]
    # bool is an int subclass but never a valid reading
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value)


def map_temperature_store(result: Any, logger: logging.Logger) -> List[MetricObservation]:
    """
    Map the temperature store to observations.

    The store has no fixed schema: sensors map attribute names to sample
    series and the attribute set depends on the sensor type. Each sensor
    and attribute is checked before use; anything unexpected is skipped
    with a warning and the rest of the store is still mapped.

    Args:
        result: Decoded "result" of /server/temperature_store
        logger: Logger instance

    Returns:
        List[MetricObservation]: One gauge per sensor attribute
    """
    if not isinstance(result, dict):
        logger.warning(f"Unexpected temperature store of type {type(result).__name__}")
        return []

    observations = []
    for sensor, attributes in result.items():
        logger.debug(f"Sensor {sensor}")
        if not isinstance(attributes, dict):
            logger.warning(f"Skipping sensor {sensor}: expected a mapping of attributes")
            continue

        item = sanitize(sensor)
        for attribute, samples in attributes.items():
            label = attribute_label(attribute)
            value = latest_sample(samples)
            if value is None:
                logger.warning(f"Skipping {sensor} {attribute}: latest sample is missing or not numeric")
                continue
            observations.append(gauge(f"klipper_{item}_{label}", f"Klipper {sensor} {label}", value))
    return observations


class TemperatureCollector(BaseCollector):
    """Collector for /server/temperature_store."""

    modules = (TEMPERATURE,)

    @safe_collect
    async def collect(self) -> List[MetricObservation]:
        self.logger.info(f"Collecting temperature for {self.request.target}")
        result = await self.client.fetch(TEMPERATURE_STORE_PATH)
        return map_temperature_store(result, self.logger)
