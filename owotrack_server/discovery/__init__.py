"""
Discovery responder for tracker devices.

Example usage:
    from owotrack_server.discovery import InfoServer

    info = InfoServer(data_port=6969, tracker_count=3)
    info.start_listening()
    info.tick()  # replies "6969:Tracker 0\\n6969:Tracker 1\\n6969:Tracker 2\\n"
"""

from .info_server import DISCOVERY_REQUEST, InfoServer, is_discovery_request

__all__ = ["DISCOVERY_REQUEST", "InfoServer", "is_discovery_request"]
