"""
DeviceQuatServer - abstract multi-tracker server contract.

Transports other than UDP (bluetooth, serial, ...) implement the same
interface so the host can drive any of them the same way.

Threading:
    None of the implementations lock. ``tick()`` and every getter are meant
    to be called from one owner thread. A host that reads getters from a
    different thread than the one ticking must synchronize around the
    server itself.
"""

from abc import ABC, abstractmethod
from typing import Optional

import numpy as np


class DeviceQuatServer(ABC):
    """Multi-tracker server driven by periodic ``tick()`` calls."""

    @abstractmethod
    def start_listening(self) -> bool:
        """Set up the server. Returns False if it could not start."""

    @abstractmethod
    def tick(self) -> None:
        """Process everything pending. Never blocks."""

    # Multi-tracker support

    @abstractmethod
    def get_active_tracker_count(self) -> int:
        """Number of tracker slots assigned so far."""

    @abstractmethod
    def is_tracker_connected(self, tracker_id: int) -> bool:
        """True if the tracker is currently connected."""

    @abstractmethod
    def is_data_available(self, tracker_id: int) -> bool:
        """True once per accepted sensor update for the tracker."""

    @abstractmethod
    def get_rotation_quaternion(self, tracker_id: int) -> Optional[np.ndarray]:
        """Rotation quaternion (x, y, z, w)."""

    @abstractmethod
    def get_gyroscope(self, tracker_id: int) -> Optional[np.ndarray]:
        """Gyroscope rate in rad/s (x, y, z)."""

    @abstractmethod
    def get_accel(self, tracker_id: int) -> Optional[np.ndarray]:
        """Accelerometer in m/s^2 (x, y, z)."""

    @abstractmethod
    def is_connection_alive(self, tracker_id: int) -> bool:
        """True if the tracker has been heard from within the timeout."""

    @abstractmethod
    def buzz(self, tracker_id: int, duration_s: float, frequency: float, amplitude: float) -> None:
        """Vibrate a specific tracker."""

    @abstractmethod
    def get_port(self) -> int:
        """Port or other unique id of this server."""
