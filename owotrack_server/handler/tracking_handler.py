"""
TrackingHandler - host-facing facade over the data and discovery servers.

The host calls ``initialize()`` once, then ``update()`` on every frame, and
reads tracker samples for its pose solver. Status transitions are reported
through status-changed callbacks.
"""

import socket
import time
from dataclasses import dataclass
from enum import IntEnum
from typing import Callable, List, Optional

from ..config import ServerConfig
from ..device_server.slots import TrackerSample
from ..device_server.udp_server import UDPDeviceQuatServer, udp_socket
from ..discovery.info_server import InfoServer
from ..utils.log_sink import LogSink, Severity, print_sink

# Identification buzz sent by signal_tracker()
SIGNAL_DURATION_S = 0.7
SIGNAL_FREQUENCY = 100.0
SIGNAL_AMPLITUDE = 0.5

# Updates without any live tracker before the status degrades (~3 s at 60 Hz)
DEAD_RETRIES = 180

StatusCallback = Callable[[str, int], None]


class HandlerStatus(IntEnum):
    SERVICE_SUCCESS = 0
    CONNECTION_DEAD = 0x00010001
    ERROR_NO_DATA = 0x00010002
    ERROR_INIT_FAILED = 0x00010003
    ERROR_PORTS_TAKEN = 0x00010004
    SERVICE_NOT_STARTED = 0x00010005


@dataclass(frozen=True)
class TrackerInfo:
    id: int
    connected: bool
    address: str


class TrackingHandler:
    """
    Owns one UDPDeviceQuatServer and one InfoServer.

    Example usage:
        handler = TrackingHandler(ServerConfig(data_port=6969))
        if handler.initialize() != HandlerStatus.SERVICE_SUCCESS:
            raise SystemExit(handler.status.name)

        while running:
            handler.update()
            for info in handler.tracker_infos():
                sample = handler.get_tracker_sample(info.id)

        handler.shutdown()
    """

    def __init__(
        self,
        config: Optional[ServerConfig] = None,
        log: Optional[LogSink] = None,
        clock: Callable[[], float] = time.time,
        socket_factory: Callable[[], socket.socket] = udp_socket,
        dead_retries: int = DEAD_RETRIES,
    ):
        self.config = config or ServerConfig()
        self.log = log or print_sink("TrackingHandler")
        self.clock = clock
        self.socket_factory = socket_factory
        self.dead_retries = dead_retries

        self.data_server: Optional[UDPDeviceQuatServer] = None
        self.info_server: Optional[InfoServer] = None
        self.status = HandlerStatus.SERVICE_NOT_STARTED
        self.e_retries = 0
        self._status_callbacks: List[StatusCallback] = []

    # ── Status ────────────────────────────────────────────────────

    def on_status_changed(self, callback: StatusCallback) -> None:
        """Register a callback receiving (message, status) on every transition."""
        self._status_callbacks.append(callback)

    def _set_status(self, status: HandlerStatus, message: str) -> None:
        if status == self.status:
            return
        self.status = status
        for callback in self._status_callbacks:
            try:
                callback(message, int(status))
            except Exception as e:
                self.log(f"Status callback failed: {e!r}", Severity.ERROR)

    @property
    def is_initialized(self) -> bool:
        return self.data_server is not None

    # ── Lifecycle ─────────────────────────────────────────────────

    def initialize(self) -> HandlerStatus:
        """
        Validate the config and bind both servers.

        Returns:
            SERVICE_SUCCESS, ERROR_INIT_FAILED for a bad config, or
            ERROR_PORTS_TAKEN if either port could not be bound
        """
        if self.is_initialized:
            return self.status

        try:
            self.config.validate()
        except ValueError as e:
            self.log(f"Invalid server configuration: {e}", Severity.ERROR)
            self._set_status(HandlerStatus.ERROR_INIT_FAILED, str(e))
            return self.status

        cfg = self.config
        data_server = UDPDeviceQuatServer(
            port=cfg.data_port,
            max_trackers=cfg.max_trackers,
            heartbeat_interval_ticks=cfg.heartbeat_interval_ticks,
            connection_timeout_s=cfg.connection_timeout_s,
            bind_address=cfg.bind_address,
            recv_buffer_size=cfg.recv_buffer_size,
            log=self.log,
            clock=self.clock,
            socket_factory=self.socket_factory,
        )
        info_server = InfoServer(
            data_port=cfg.data_port,
            tracker_count=cfg.advertised_count,
            port=cfg.discovery_port,
            bind_address=cfg.bind_address,
            log=self.log,
            socket_factory=self.socket_factory,
        )

        if not data_server.start_listening() or not info_server.start_listening():
            data_server.close()
            info_server.close()
            self._set_status(HandlerStatus.ERROR_PORTS_TAKEN, "Tracker ports are already in use")
            return self.status

        # Advertise the port actually bound (matters when data_port is 0)
        info_server.set_port_no(data_server.get_port())
        data_server.add_listener(self._on_tracker_event)

        self.data_server = data_server
        self.info_server = info_server
        self.e_retries = 0
        self._set_status(HandlerStatus.SERVICE_SUCCESS, "Tracker servers started")
        return self.status

    def shutdown(self) -> int:
        """Close both servers. Returns 0."""
        if self.data_server is not None:
            self.data_server.close()
        if self.info_server is not None:
            self.info_server.close()
        self.data_server = None
        self.info_server = None
        self._set_status(HandlerStatus.SERVICE_NOT_STARTED, "Tracker servers stopped")
        return 0

    def update(self) -> None:
        """Tick both servers and refresh the status."""
        if not self.is_initialized:
            return
        self.data_server.tick()
        self.info_server.tick()

        if any(self.data_server.is_connection_alive(i) for i in range(self.tracker_count)):
            self.e_retries = 0
            self._set_status(HandlerStatus.SERVICE_SUCCESS, "Tracker data is streaming")
            return

        self.e_retries += 1
        if self.e_retries <= self.dead_retries:
            return
        if self.tracker_count == 0:
            self._set_status(HandlerStatus.ERROR_NO_DATA, "No tracker has sent data yet")
        else:
            self._set_status(HandlerStatus.CONNECTION_DEAD, "All trackers disconnected")

    def _on_tracker_event(self, tracker_id: int, connected: bool) -> None:
        state = "connected" if connected else "disconnected"
        for callback in self._status_callbacks:
            try:
                callback(f"Tracker {tracker_id} {state}", int(self.status))
            except Exception as e:
                self.log(f"Status callback failed: {e!r}", Severity.ERROR)

    # ── Trackers ──────────────────────────────────────────────────

    @property
    def port(self) -> int:
        if self.data_server is not None:
            return self.data_server.get_port()
        return self.config.data_port

    @property
    def tracker_count(self) -> int:
        if self.data_server is None:
            return 0
        return self.data_server.get_active_tracker_count()

    def tracker_infos(self) -> List[TrackerInfo]:
        if self.data_server is None:
            return []
        return [
            TrackerInfo(
                id=slot.id,
                connected=slot.connected,
                address=f"{slot.client_address[0]}:{slot.client_address[1]}",
            )
            for slot in self.data_server.slots
        ]

    def get_tracker_sample(self, tracker_id: int) -> Optional[TrackerSample]:
        if self.data_server is None:
            return None
        return self.data_server.get_tracker_sample(tracker_id)

    def signal_tracker(self, tracker_id: int) -> None:
        """Buzz a tracker so the user can tell which one it is."""
        if self.data_server is None:
            return
        self.data_server.buzz(tracker_id, SIGNAL_DURATION_S, SIGNAL_FREQUENCY, SIGNAL_AMPLITUDE)

    def ip_addresses(self) -> List[str]:
        return local_ip_addresses()


def local_ip_addresses() -> List[str]:
    """
    IPv4 addresses devices can reach this machine on.

    Loopback is only returned if nothing else is found.
    """
    found = []
    try:
        for addr in socket.gethostbyname_ex(socket.gethostname())[2]:
            if addr not in found:
                found.append(addr)
    except OSError:
        pass

    # Address of the default route interface; connect() on UDP sends nothing
    probe = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    try:
        probe.connect(("10.255.255.255", 1))
        addr = probe.getsockname()[0]
        if addr not in found:
            found.append(addr)
    except OSError:
        pass
    finally:
        probe.close()

    external = [a for a in found if not a.startswith("127.") and a != "0.0.0.0"]
    if external:
        return external
    return ["127.0.0.1"]
