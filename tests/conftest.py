"""pytest configuration and shared fakes for owotrack_server tests."""

import errno
import itertools
from collections import deque

import pytest


class FakeClock:
    """Manually advanced wall clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeUdpSocket:
    """In-memory stand-in for a non-blocking UDP socket."""

    def __init__(self, network: "FakeNetwork"):
        self.network = network
        self.inbound = deque()
        self.sent = []
        self.address = None
        self.blocking = True
        self.closed = False
        self.options = {}

    # socket API used by the servers

    def setsockopt(self, level, option, value):
        self.options[(level, option)] = value

    def setblocking(self, flag):
        self.blocking = flag

    def bind(self, address):
        host, port = address
        if port in self.network.taken:
            raise OSError(errno.EADDRINUSE, "Address already in use")
        if port == 0:
            port = next(self.network.ephemeral)
        self.network.taken.add(port)
        self.address = (host, port)

    def getsockname(self):
        return self.address

    def recvfrom(self, bufsize):
        if not self.inbound:
            raise BlockingIOError(errno.EAGAIN, "Resource temporarily unavailable")
        data, address = self.inbound.popleft()
        return data[:bufsize], address

    def sendto(self, data, address):
        self.sent.append((bytes(data), address))
        return len(data)

    def close(self):
        self.closed = True
        if self.address is not None:
            self.network.taken.discard(self.address[1])

    # test helpers

    def deliver(self, data: bytes, address=("192.168.1.10", 40000)):
        self.inbound.append((data, address))

    def sent_to(self, address):
        return [data for data, addr in self.sent if addr == address]


class FakeNetwork:
    """Socket factory handing out FakeUdpSockets and tracking bound ports."""

    def __init__(self):
        self.sockets = []
        self.taken = set()
        self.ephemeral = itertools.count(50000)

    def __call__(self):
        sock = FakeUdpSocket(self)
        self.sockets.append(sock)
        return sock

    def socket_on(self, port):
        for sock in self.sockets:
            if sock.address is not None and sock.address[1] == port and not sock.closed:
                return sock
        raise LookupError(f"no socket bound on port {port}")


class LogRecorder:
    """Log sink collecting (message, severity) pairs."""

    def __init__(self):
        self.records = []

    def __call__(self, message, severity=0):
        self.records.append((message, int(severity)))

    def messages(self, severity=None):
        return [m for m, s in self.records if severity is None or s == severity]


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def network():
    return FakeNetwork()


@pytest.fixture
def log():
    return LogRecorder()
