"""
Tracker data servers.

This package provides the multi-tracker server contract and its UDP
implementation.

Example usage:
    from owotrack_server.device_server import UDPDeviceQuatServer

    server = UDPDeviceQuatServer(port=6969)
    server.start_listening()

    while running:
        server.tick()
        if server.is_data_available(0):
            x, y, z, w = server.get_rotation_quaternion(0)

Servers are not thread-safe: tick and read from the same thread.
"""

from .base import DeviceQuatServer
from .networked_server import NetworkedDeviceQuatServer
from .slots import SEQUENCE_RESTART_WINDOW, TrackerSample, TrackerSlot, TrackerSlotStore
from .udp_server import UDPDeviceQuatServer

__all__ = [
    "DeviceQuatServer",
    "NetworkedDeviceQuatServer",
    "SEQUENCE_RESTART_WINDOW",
    "TrackerSample",
    "TrackerSlot",
    "TrackerSlotStore",
    "UDPDeviceQuatServer",
]
