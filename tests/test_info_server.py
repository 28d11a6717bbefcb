"""Tests for the discovery responder."""

import socket
import time

import pytest

from owotrack_server.config import DISCOVERY_PORT
from owotrack_server.discovery import InfoServer, is_discovery_request
from owotrack_server.utils import Severity

CLIENT = ("192.168.1.30", 50500)


@pytest.fixture
def info(network, log):
    srv = InfoServer(data_port=7000, tracker_count=3, log=log, socket_factory=network)
    assert srv.start_listening()
    return srv


@pytest.fixture
def sock(info, network):
    return network.socket_on(DISCOVERY_PORT)


class TestResponse:
    def test_discovery_reply(self, info, sock):
        sock.deliver(b"DISCOVERY", CLIENT)
        info.tick()
        assert sock.sent_to(CLIENT) == [b"7000:Tracker 0\n7000:Tracker 1\n7000:Tracker 2\n"]

    def test_nul_terminated_request(self, info, sock):
        sock.deliver(b"DISCOVERY\x00garbage", CLIENT)
        info.tick()
        assert len(sock.sent_to(CLIENT)) == 1

    @pytest.mark.parametrize("payload", [b"", b"discovery", b"DISCOVER", b"DISCOVERY!", b"\x00DISCOVERY"])
    def test_other_payloads_ignored(self, info, sock, payload):
        sock.deliver(payload, CLIENT)
        info.tick()
        assert sock.sent == []

    def test_drains_all_requests(self, info, sock):
        for i in range(4):
            sock.deliver(b"DISCOVERY", ("192.168.1.30", 50500 + i))
        sock.deliver(b"hello", CLIENT)
        info.tick()
        assert not sock.inbound
        assert len(sock.sent) == 4

    def test_default_advertises_capacity(self, network, log):
        srv = InfoServer(log=log, socket_factory=network)
        lines = srv.response_info.decode("ascii").splitlines()
        assert len(lines) == 20
        assert lines[0] == "6969:Tracker 0"
        assert lines[-1] == "6969:Tracker 19"

    def test_setters_rebuild_response(self, info):
        info.set_tracker_count(1)
        assert info.response_info == b"7000:Tracker 0\n"
        info.set_port_no(7100)
        assert info.response_info == b"7100:Tracker 0\n"
        info.set_tracker_count(0)
        assert info.response_info == b""


class TestLifecycle:
    def test_port_taken(self, network, log):
        network.taken.add(DISCOVERY_PORT)
        srv = InfoServer(log=log, socket_factory=network)
        assert srv.start_listening() is False
        assert log.messages(Severity.ERROR)

    def test_tick_without_socket(self, network, log):
        InfoServer(log=log, socket_factory=network).tick()

    def test_close(self, info, sock):
        info.close()
        assert sock.closed
        info.tick()


def test_is_discovery_request():
    assert is_discovery_request(b"DISCOVERY")
    assert is_discovery_request(b"DISCOVERY\x00")
    assert not is_discovery_request(b"DISCOVERY\n")


def test_loopback_discovery(log):
    srv = InfoServer(data_port=6969, tracker_count=2, port=0, bind_address="127.0.0.1", log=log)
    assert srv.start_listening()
    client = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    client.settimeout(0.05)
    try:
        client.sendto(b"DISCOVERY", ("127.0.0.1", srv.get_port()))
        reply = None
        deadline = time.time() + 2.0
        while reply is None and time.time() < deadline:
            srv.tick()
            try:
                reply = client.recvfrom(1024)[0]
            except socket.timeout:
                pass
        assert reply == b"6969:Tracker 0\n6969:Tracker 1\n"
    finally:
        client.close()
        srv.close()
