"""
owotrack_server - UDP ingestion server for wireless body trackers.

This package receives orientation and motion telemetry from phone or
microcontroller based trackers over a small binary UDP protocol, keeps a
per-device state for each of them, answers discovery broadcasts and sends
haptic commands back.

Main classes:
    - UDPDeviceQuatServer: Data server, one slot per tracker address
    - InfoServer: Discovery responder on the well-known port
    - TrackingHandler: Host facade owning both servers

Example usage:
    from owotrack_server import UDPDeviceQuatServer, InfoServer

    server = UDPDeviceQuatServer(port=6969)
    info = InfoServer(data_port=6969)
    server.start_listening()
    info.start_listening()

    # Main loop, driven by the host at its own rate
    while running:
        server.tick()
        info.tick()
        for tracker_id in range(server.get_active_tracker_count()):
            if server.is_data_available(tracker_id):
                x, y, z, w = server.get_rotation_quaternion(tracker_id)

    # Cleanup
    server.close()
    info.close()

Nothing here starts a thread; tick and read from the same thread.
"""

from .config import ServerConfig
from .device_server import DeviceQuatServer, TrackerSample, UDPDeviceQuatServer
from .discovery import InfoServer
from .handler import HandlerStatus, TrackerInfo, TrackingHandler
from .utils import Severity, logging_sink, prefixed_sink, print_sink

__version__ = "0.1.0"
__all__ = [
    "DeviceQuatServer",
    "HandlerStatus",
    "InfoServer",
    "ServerConfig",
    "Severity",
    "TrackerInfo",
    "TrackerSample",
    "TrackingHandler",
    "UDPDeviceQuatServer",
    "logging_sink",
    "prefixed_sink",
    "print_sink",
]
