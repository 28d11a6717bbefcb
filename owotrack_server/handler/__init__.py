"""
Host integration for the tracker servers.

Example usage:
    from owotrack_server.handler import TrackingHandler, HandlerStatus

    handler = TrackingHandler()
    handler.on_status_changed(lambda message, status: print(message))
    handler.initialize()

    while running:
        handler.update()

    handler.shutdown()
"""

from .tracking_handler import HandlerStatus, TrackerInfo, TrackingHandler, local_ip_addresses

__all__ = ["HandlerStatus", "TrackerInfo", "TrackingHandler", "local_ip_addresses"]
