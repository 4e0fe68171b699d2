"""Pydantic configuration and request models for the exporter."""

from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import List, Optional, Tuple

from ..utils.logger import parse_level

PROCESS_STATS = "process_stats"
NETWORK_STATS = "network_stats"
DIRECTORY_INFO = "directory_info"
JOB_QUEUE = "job_queue"
SYSTEM_INFO = "system_info"
TEMPERATURE = "temperature"

KNOWN_MODULES = (
    PROCESS_STATS,
    NETWORK_STATS,
    DIRECTORY_INFO,
    JOB_QUEUE,
    SYSTEM_INFO,
    TEMPERATURE,
)
DEFAULT_MODULES = [PROCESS_STATS, JOB_QUEUE, SYSTEM_INFO]


class ExporterConfig(BaseModel):
    """Process-wide settings, built once at startup."""
    model_config = ConfigDict(frozen=True)

    logging_level: str = "info"
    api_key: str = ""
    listen_address: str = ":9101"
    debug: bool = False  # Deprecated, use logging_level
    verbose: bool = False  # Deprecated, use logging_level
    upstream_timeout: Optional[float] = Field(default=None, gt=0)  # None waits indefinitely
    default_modules: List[str] = Field(default_factory=lambda: list(DEFAULT_MODULES))

    @field_validator('logging_level')
    @classmethod
    def validate_logging_level(cls, v: str) -> str:
        """Reject unknown logging level names."""
        parse_level(v)
        return v

    @field_validator('listen_address')
    @classmethod
    def validate_listen_address(cls, v: str) -> str:
        """Validate host:port format."""
        split_listen_address(v)
        return v

    @field_validator('default_modules')
    @classmethod
    def validate_default_modules(cls, v: List[str]) -> List[str]:
        """Default module list must not be empty."""
        if not v:
            raise ValueError('default_modules must name at least one module')
        return v

    @property
    def host(self) -> str:
        return split_listen_address(self.listen_address)[0]

    @property
    def port(self) -> int:
        return split_listen_address(self.listen_address)[1]


class ProbeRequest(BaseModel):
    """A single scrape: which host to query, which modules, and with what key."""
    target: str
    modules: List[str] = Field(default_factory=lambda: list(DEFAULT_MODULES))
    api_key: str = ""

    @field_validator('target')
    @classmethod
    def validate_target(cls, v: str) -> str:
        if not v:
            raise ValueError('target must not be empty')
        return v

    @field_validator('modules')
    @classmethod
    def validate_modules(cls, v: List[str]) -> List[str]:
        if not v:
            raise ValueError('at least one module is required')
        return v

    def wants(self, module: str) -> bool:
        """Return True if the module was requested."""
        return module in self.modules


def split_listen_address(address: str) -> Tuple[str, int]:
    """
    Split a listen address into host and port.

    An empty host (":9101") binds all interfaces.

    Raises:
        ValueError: If the address has no valid port
    """
    host, sep, port = address.rpartition(':')
    if not sep or not port.isdigit():
        raise ValueError(f"Listen address must be host:port, got '{address}'")
    port_number = int(port)
    if not 0 < port_number < 65536:
        raise ValueError(f"Listen port out of range: {port_number}")
    host = host.strip('[]') or "0.0.0.0"
    return host, port_number
