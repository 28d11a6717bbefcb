"""Configuration for the tracker servers, supplied by the host at construction."""

from dataclasses import dataclass
from typing import Optional

DEFAULT_DATA_PORT = 6969
DISCOVERY_PORT = 35903
MAX_TRACKERS = 20
HEARTBEAT_INTERVAL_TICKS = 200
CONNECTION_TIMEOUT_S = 2.0


@dataclass
class ServerConfig:
    """Ports, capacity and timing for one data server + discovery responder pair."""

    data_port: int = DEFAULT_DATA_PORT  # 0 binds an ephemeral port
    discovery_port: int = DISCOVERY_PORT
    bind_address: str = "0.0.0.0"

    max_trackers: int = MAX_TRACKERS
    heartbeat_interval_ticks: int = HEARTBEAT_INTERVAL_TICKS
    connection_timeout_s: float = CONNECTION_TIMEOUT_S

    # None advertises max_trackers
    advertised_tracker_count: Optional[int] = None

    recv_buffer_size: int = 256

    @property
    def advertised_count(self) -> int:
        if self.advertised_tracker_count is None:
            return self.max_trackers
        return self.advertised_tracker_count

    def validate(self) -> None:
        """Raise ValueError if any field is out of range."""
        for name in ("data_port", "discovery_port"):
            port = getattr(self, name)
            if not 0 <= port <= 65535:
                raise ValueError(f"{name} out of range: {port}")
        if self.data_port and self.data_port == self.discovery_port:
            raise ValueError("data_port and discovery_port must differ")
        if self.max_trackers <= 0:
            raise ValueError(f"max_trackers must be positive: {self.max_trackers}")
        if self.heartbeat_interval_ticks <= 0:
            raise ValueError(f"heartbeat_interval_ticks must be positive: {self.heartbeat_interval_ticks}")
        if self.connection_timeout_s <= 0:
            raise ValueError(f"connection_timeout_s must be positive: {self.connection_timeout_s}")
        if self.advertised_tracker_count is not None and self.advertised_tracker_count < 0:
            raise ValueError(f"advertised_tracker_count must not be negative: {self.advertised_tracker_count}")
        # Must hold the 12-byte header plus the largest payload (rotation)
        if self.recv_buffer_size < 28:
            raise ValueError(f"recv_buffer_size too small: {self.recv_buffer_size}")
