"""
UDPDeviceQuatServer - tracker data server over a non-blocking UDP socket.

All work happens inside ``tick()``, which the host calls periodically:
1. Every ``heartbeat_interval_ticks`` ticks a keep-alive goes to each live tracker
2. Pending datagrams are drained until the socket has nothing more
3. Trackers silent for longer than ``connection_timeout_s`` are marked disconnected

No threads are started and no call blocks.
"""

import socket
import struct
import time
from typing import Callable, Optional

from ..config import CONNECTION_TIMEOUT_S, DEFAULT_DATA_PORT, HEARTBEAT_INTERVAL_TICKS, MAX_TRACKERS
from ..protocol.messages import MAX_MSG_SIZE, build_haptic_command, build_heartbeat_command
from ..utils.log_sink import LogSink, Severity
from .networked_server import NetworkedDeviceQuatServer


def udp_socket() -> socket.socket:
    return socket.socket(socket.AF_INET, socket.SOCK_DGRAM)


class UDPDeviceQuatServer(NetworkedDeviceQuatServer):
    """
    Multi-tracker UDP server.

    Example usage:
        server = UDPDeviceQuatServer(port=6969)
        if not server.start_listening():
            raise SystemExit("port in use")

        while running:
            server.tick()
            for tracker_id in range(server.get_active_tracker_count()):
                if server.is_data_available(tracker_id):
                    print(server.get_rotation_quaternion(tracker_id))

        server.close()
    """

    def __init__(
        self,
        port: int = DEFAULT_DATA_PORT,
        max_trackers: int = MAX_TRACKERS,
        heartbeat_interval_ticks: int = HEARTBEAT_INTERVAL_TICKS,
        connection_timeout_s: float = CONNECTION_TIMEOUT_S,
        bind_address: str = "0.0.0.0",
        recv_buffer_size: int = MAX_MSG_SIZE,
        log: Optional[LogSink] = None,
        clock: Callable[[], float] = time.time,
        socket_factory: Callable[[], socket.socket] = udp_socket,
    ):
        """
        Initialize the server. Nothing is bound until ``start_listening``.

        Args:
            port: UDP port to listen on (0 picks a free port)
            max_trackers: Slot capacity
            heartbeat_interval_ticks: Ticks between keep-alive rounds
            connection_timeout_s: Silence after which a tracker is disconnected
            bind_address: Interface to bind
            recv_buffer_size: Largest datagram read at once
            log: Sink for (message, severity) notifications
            clock: Wall-clock source in seconds
            socket_factory: Creates the UDP socket
        """
        super().__init__(max_trackers=max_trackers, log=log, clock=clock)
        self.port = port
        self.bind_address = bind_address
        self.heartbeat_interval_ticks = heartbeat_interval_ticks
        self.connection_timeout_s = connection_timeout_s
        self.recv_buffer_size = recv_buffer_size
        self.socket_factory = socket_factory
        self.sock = None
        self.hb_accum = 0

    # ── Lifecycle ─────────────────────────────────────────────────

    def start_listening(self) -> bool:
        """
        Bind the data port.

        Returns:
            True on success, False if the socket could not be bound
        """
        if self.sock is not None:
            return True
        sock = None
        try:
            sock = self.socket_factory()
            try:
                sock.setsockopt(socket.SOL_SOCKET, socket.SO_RCVBUF, 1024 * 1024)
            except OSError:
                pass
            sock.setblocking(False)
            sock.bind((self.bind_address, self.port))
        except OSError as e:
            self.log(f"Could not bind UDP port {self.port}: {e}", Severity.ERROR)
            if sock is not None:
                sock.close()
            return False
        self.sock = sock
        self.log(f"Listening on UDP port {self.get_port()}", Severity.INFO)
        return True

    def close(self) -> None:
        """Release the socket. Tracker slots are kept."""
        if self.sock is None:
            return
        try:
            self.sock.close()
        except OSError:
            pass
        self.sock = None

    @property
    def is_listening(self) -> bool:
        return self.sock is not None

    # ── Tick ──────────────────────────────────────────────────────

    def tick(self) -> None:
        self._send_heartbeat()
        while self._read_one():
            pass
        self._sweep_timeouts(self.clock())

    def _send_heartbeat(self) -> None:
        self.hb_accum += 1
        if self.hb_accum <= self.heartbeat_interval_ticks:
            return
        self.hb_accum = 0

        payload = build_heartbeat_command()
        for slot in self.slots:
            if slot.connected:
                self._send_to(slot.client_address, payload)

    def _read_one(self) -> bool:
        """Receive and dispatch one datagram. False when nothing is queued."""
        if self.sock is None:
            return False
        try:
            data, address = self.sock.recvfrom(self.recv_buffer_size)
        except (BlockingIOError, InterruptedError):
            return False
        except OSError:
            # e.g. a reset reported for an earlier send; retried next tick
            return False
        self.handle_datagram(data, address)
        return True

    def _sweep_timeouts(self, now: float) -> None:
        for slot in self.slots:
            if slot.connected and (now - slot.last_contact_time) > self.connection_timeout_s:
                slot.connected = False
                self.log(f"Tracker device {slot.id} disconnected (timeout)", Severity.WARNING)
                self._notify(slot.id, False)

    # ── Outbound ──────────────────────────────────────────────────

    def _send_to(self, address, payload: bytes) -> None:
        if self.sock is None:
            return
        try:
            self.sock.sendto(payload, address)
        except OSError as e:
            self.log(f"Send to {address[0]}:{address[1]} failed: {e}", Severity.WARNING)

    def buzz(self, tracker_id: int, duration_s: float, frequency: float, amplitude: float) -> None:
        slot = self.slots.get(tracker_id)
        if slot is None or not slot.connected:
            return
        try:
            payload = build_haptic_command(duration_s, frequency, amplitude)
        except (OverflowError, struct.error, TypeError) as e:
            self.log(f"Invalid haptic command for tracker {tracker_id}: {e}", Severity.WARNING)
            return
        self._send_to(slot.client_address, payload)

    def get_port(self) -> int:
        """The bound port, or the configured one before binding."""
        if self.sock is not None:
            try:
                return self.sock.getsockname()[1]
            except OSError:
                pass
        return self.port
