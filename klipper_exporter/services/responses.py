"""Pydantic models for the Moonraker payloads the exporter reads.

Only the fields that are turned into metrics are declared; anything else
in the upstream payload is ignored. Field names follow Moonraker's JSON
keys.
"""

from pydantic import BaseModel, Field
from typing import Dict, List, Optional


class MoonrakerStatSample(BaseModel):
    """One entry of the Moonraker process stats history."""
    time: Optional[float] = None
    cpu_usage: float = 0.0
    memory: int = 0
    mem_units: str = ""


class SystemCpuUsage(BaseModel):
    cpu: float = 0.0


class SystemMemory(BaseModel):
    total: int = 0
    available: int = 0
    used: int = 0


class NetworkInterfaceStats(BaseModel):
    rx_bytes: int = 0
    tx_bytes: int = 0
    rx_packets: int = 0
    tx_packets: int = 0
    rx_errs: int = 0
    tx_errs: int = 0
    rx_drop: int = 0
    tx_drop: int = 0
    bandwidth: float = 0.0


class ProcessStatsResult(BaseModel):
    """Result of /machine/proc_stats."""
    moonraker_stats: List[MoonrakerStatSample] = Field(default_factory=list)
    websocket_connections: int = 0
    cpu_temp: Optional[float] = None  # null when the host has no CPU sensor
    system_cpu_usage: SystemCpuUsage = Field(default_factory=SystemCpuUsage)
    system_memory: SystemMemory = Field(default_factory=SystemMemory)
    system_uptime: float = 0.0
    network: Dict[str, NetworkInterfaceStats] = Field(default_factory=dict)


class DiskUsage(BaseModel):
    total: int = 0
    used: int = 0
    free: int = 0


class DirectoryInfoResult(BaseModel):
    """Result of /server/files/directory."""
    disk_usage: DiskUsage


class JobQueueResult(BaseModel):
    """Result of /server/job_queue/status."""
    queued_jobs: List[dict] = Field(default_factory=list)


class CpuInfo(BaseModel):
    cpu_count: int = 0


class SystemInfo(BaseModel):
    cpu_info: CpuInfo


class SystemInfoResult(BaseModel):
    """Result of /machine/system_info."""
    system_info: SystemInfo
