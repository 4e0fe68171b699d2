"""Shared pytest configuration and fixtures."""

import copy
import logging
from types import SimpleNamespace
from unittest.mock import AsyncMock, Mock, patch

import pytest

from klipper_exporter.services.moonraker_client import (
    PROCESS_STATS_PATH,
    DIRECTORY_INFO_PATH,
    JOB_QUEUE_PATH,
    SYSTEM_INFO_PATH,
    TEMPERATURE_STORE_PATH,
)
from klipper_exporter.utils.logger import setup_logger


def _interface(base: int) -> dict:
    return {
        "rx_bytes": base + 1,
        "tx_bytes": base + 2,
        "rx_packets": base + 3,
        "tx_packets": base + 4,
        "rx_errs": base + 5,
        "tx_errs": base + 6,
        "rx_drop": base + 7,
        "tx_drop": base + 8,
        "bandwidth": base + 0.5,
    }


PROC_STATS = {
    "moonraker_stats": [
        {"time": 1700000000.0, "cpu_usage": 1.25, "memory": 11111, "mem_units": "kB"},
        {"time": 1700000001.0, "cpu_usage": 2.75, "memory": 12345, "mem_units": "kB"},
    ],
    "throttled_state": {"bits": 0, "flags": []},
    "cpu_temp": 45.3,
    "network": {
        "eth0": _interface(1000),
        "wlan0": _interface(2000),
    },
    "system_cpu_usage": {"cpu": 12.5, "cpu0": 10.0, "cpu1": 15.0},
    "system_memory": {"total": 3919216, "available": 3200000, "used": 719216},
    "system_uptime": 12345.67,
    "websocket_connections": 3,
}

DIRECTORY_INFO = {
    "dirs": [],
    "files": [{"filename": "benchy.gcode", "size": 1024}],
    "disk_usage": {"total": 31000000000, "used": 4000000000, "free": 27000000000},
    "root_info": {"name": "gcodes", "permissions": "rw"},
}

JOB_QUEUE = {
    "queued_jobs": [
        {"filename": "part1.gcode", "job_id": "0000000066D99C90"},
        {"filename": "part2.gcode", "job_id": "0000000066D99D80"},
    ],
    "queue_state": "ready",
}

SYSTEM_INFO = {
    "system_info": {
        "cpu_info": {"cpu_count": 4, "bits": "32bit", "processor": "armv7l"},
        "distribution": {"name": "Raspbian GNU/Linux 11 (bullseye)"},
    }
}

TEMPERATURE_STORE = {
    "extruder": {
        "temperatures": [21.0, 205.1],
        "targets": [0.0, 210.0],
        "powers": [0.0, 0.45],
    },
    "heater_bed": {
        "temperatures": [20.5, 60.2],
        "targets": [0.0, 60.0],
        "powers": [0.0, 0.3],
    },
    "temperature_sensor chamber": {
        "temperatures": [25.0, 31.5],
    },
}


def json_response(payload, status_code: int = 200) -> Mock:
    """Build a fake httpx response."""
    response = Mock()
    response.status_code = status_code
    response.json.return_value = payload
    return response


@pytest.fixture
def logger():
    """Create logger for tests."""
    return setup_logger("test", "debug")


@pytest.fixture
def capture_logger():
    """Propagating logger, for tests that inspect records with caplog."""
    return logging.getLogger("klipper_exporter_test")


@pytest.fixture
def proc_stats():
    return copy.deepcopy(PROC_STATS)


@pytest.fixture
def temperature_store():
    return copy.deepcopy(TEMPERATURE_STORE)


@pytest.fixture
def moonraker():
    """
    Patch httpx.AsyncClient with a fake Moonraker host.

    `routes` maps endpoint paths to responses; tests may replace an entry
    with another response or an exception to simulate failures.
    """
    routes = {
        PROCESS_STATS_PATH: json_response({"result": copy.deepcopy(PROC_STATS)}),
        DIRECTORY_INFO_PATH: json_response({"result": copy.deepcopy(DIRECTORY_INFO)}),
        JOB_QUEUE_PATH: json_response({"result": copy.deepcopy(JOB_QUEUE)}),
        SYSTEM_INFO_PATH: json_response({"result": copy.deepcopy(SYSTEM_INFO)}),
        TEMPERATURE_STORE_PATH: json_response({"result": copy.deepcopy(TEMPERATURE_STORE)}),
    }
    requested = []

    async def fake_get(url, params=None, headers=None):
        requested.append(url)
        for path, response in routes.items():
            if url.endswith(path):
                if isinstance(response, Exception):
                    raise response
                return response
        return json_response({"error": {"code": 404, "message": "Not Found"}}, 404)

    with patch('httpx.AsyncClient') as mock_client_class:
        mock_client = AsyncMock()
        mock_client.get.side_effect = fake_get
        mock_client_class.return_value = mock_client
        yield SimpleNamespace(
            routes=routes,
            requested=requested,
            client_class=mock_client_class,
            client=mock_client,
        )
