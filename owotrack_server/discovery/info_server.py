"""
InfoServer - answers tracker discovery broadcasts.

Devices broadcast the ASCII string ``DISCOVERY`` to a well-known port and
get back one ``<data port>:Tracker <n>`` line per advertised slot, which is
enough for them to find the data server without manual setup.

The advertised count is the server capacity unless the host sets it, not
the number of trackers currently connected.
"""

import socket
from typing import Callable, Optional

from ..config import DEFAULT_DATA_PORT, DISCOVERY_PORT, MAX_TRACKERS
from ..device_server.udp_server import udp_socket
from ..utils.log_sink import LogSink, Severity, print_sink

DISCOVERY_REQUEST = b"DISCOVERY"
MAX_BUFF_SIZE = 64


class InfoServer:
    """
    Discovery responder on its own UDP port.

    Example usage:
        info = InfoServer(data_port=6969)
        info.start_listening()
        while running:
            info.tick()
    """

    def __init__(
        self,
        data_port: int = DEFAULT_DATA_PORT,
        tracker_count: int = MAX_TRACKERS,
        port: int = DISCOVERY_PORT,
        bind_address: str = "0.0.0.0",
        log: Optional[LogSink] = None,
        socket_factory: Callable[[], socket.socket] = udp_socket,
    ):
        """
        Args:
            data_port: Data server port advertised in responses
            tracker_count: Number of tracker entries advertised
            port: Discovery port to listen on
            bind_address: Interface to bind
            log: Sink for (message, severity) notifications
            socket_factory: Creates the UDP socket
        """
        self.port = port
        self.bind_address = bind_address
        self.log = log or print_sink("InfoServer")
        self.socket_factory = socket_factory
        self.sock = None
        self.port_no = data_port
        self.tracker_count = tracker_count
        self.response_info = b""
        self._update_response_info()

    def start_listening(self) -> bool:
        """Bind the discovery port. Returns False if it is taken."""
        if self.sock is not None:
            return True
        sock = None
        try:
            sock = self.socket_factory()
            sock.setblocking(False)
            sock.bind((self.bind_address, self.port))
        except OSError as e:
            self.log(f"Could not bind discovery port {self.port}: {e}", Severity.ERROR)
            if sock is not None:
                sock.close()
            return False
        self.sock = sock
        self.log(f"Answering discovery on UDP port {self.get_port()}", Severity.INFO)
        return True

    def close(self) -> None:
        if self.sock is None:
            return
        try:
            self.sock.close()
        except OSError:
            pass
        self.sock = None

    def get_port(self) -> int:
        if self.sock is not None:
            try:
                return self.sock.getsockname()[1]
            except OSError:
                pass
        return self.port

    def set_tracker_count(self, count: int) -> None:
        self.tracker_count = count
        self._update_response_info()

    def set_port_no(self, port_no: int) -> None:
        self.port_no = port_no
        self._update_response_info()

    def _update_response_info(self) -> None:
        lines = [f"{self.port_no}:Tracker {i}\n" for i in range(self.tracker_count)]
        self.response_info = "".join(lines).encode("ascii")

    def tick(self) -> None:
        while self._respond_to_request():
            pass

    def _respond_to_request(self) -> bool:
        if self.sock is None:
            return False
        try:
            data, address = self.sock.recvfrom(MAX_BUFF_SIZE)
        except (BlockingIOError, InterruptedError):
            return False
        except OSError:
            return False

        if is_discovery_request(data):
            try:
                self.sock.sendto(self.response_info, address)
            except OSError as e:
                self.log(f"Discovery reply to {address[0]}:{address[1]} failed: {e}", Severity.WARNING)
        return True


def is_discovery_request(data: bytes) -> bool:
    """Compare like a C string: anything after a NUL terminator is ignored."""
    return data.split(b"\x00", 1)[0] == DISCOVERY_REQUEST
