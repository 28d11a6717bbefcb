#!/usr/bin/env python3
"""
Example: Simulated tracker device.

Finds the server through discovery (or uses --host), handshakes, then
streams a slowly spinning rotation plus gyro and accel samples. Haptic and
heartbeat commands from the server are printed.

Usage:
    python simulate_tracker.py --host 127.0.0.1 --port 6969
    python simulate_tracker.py --discover
"""

import argparse
import math
import os
import socket
import sys

import numpy as np
from loop_rate_limiters import RateLimiter
from scipy.spatial.transform import Rotation as R

_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if _root not in sys.path:
    sys.path.insert(0, _root)

from owotrack_server.config import DISCOVERY_PORT
from owotrack_server.discovery import DISCOVERY_REQUEST
from owotrack_server.protocol import (
    CMD_HAPTIC,
    CMD_HEARTBEAT,
    HANDSHAKE_REPLY,
    MSG_ACCELEROMETER,
    MSG_GYRO,
    MSG_HANDSHAKE,
    MSG_ROTATION,
    PacketReader,
    build_tracker_message,
    encode_uint32,
    encode_uint64,
)


def discover(timeout_s: float) -> tuple:
    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    sock.setsockopt(socket.SOL_SOCKET, socket.SO_BROADCAST, 1)
    sock.settimeout(timeout_s)
    try:
        sock.sendto(DISCOVERY_REQUEST, ("255.255.255.255", DISCOVERY_PORT))
        data, addr = sock.recvfrom(4096)
    finally:
        sock.close()
    first = data.decode("ascii").splitlines()[0]
    port, name = first.split(":", 1)
    print(f"[Sim] Discovered {name} at {addr[0]}:{port}")
    return addr[0], int(port)


def print_command(data: bytes) -> None:
    reader = PacketReader(data)
    try:
        tag = reader.read_int32()
        if tag == CMD_HEARTBEAT:
            print("[Sim] Heartbeat from server")
        elif tag == CMD_HAPTIC:
            duration, freq, amp = reader.read_floats(3)
            print(f"[Sim] Buzz duration={duration:.2f}s freq={freq:.0f} amp={amp:.2f}")
        else:
            print(f"[Sim] Unknown command {tag}")
    except ValueError as e:
        print(f"[Sim] Bad command: {e}")


def main():
    parser = argparse.ArgumentParser(description="Simulate a tracker device")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=6969)
    parser.add_argument("--discover", action="store_true", default=False,
                        help="Locate the server with a discovery broadcast")
    parser.add_argument("--rate", type=float, default=100.0, help="Packets per second per sensor")
    parser.add_argument("--spin_hz", type=float, default=0.25, help="Yaw rotation speed in turns/s")
    args = parser.parse_args()

    host, port = discover(2.0) if args.discover else (args.host, args.port)
    server = (host, port)

    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    sock.settimeout(2.0)
    sock.sendto(encode_uint32(MSG_HANDSHAKE) + encode_uint64(0), server)
    reply, _ = sock.recvfrom(64)
    if reply != HANDSHAKE_REPLY:
        print(f"[Sim] Unexpected handshake reply: {reply!r}")
        return 1
    print(f"[Sim] Handshake ok with {host}:{port}")
    sock.setblocking(False)

    rate = RateLimiter(frequency=args.rate, warn=False)
    sequence = 1
    t = 0.0
    omega = 2.0 * math.pi * args.spin_hz
    try:
        while True:
            quat = R.from_euler("y", omega * t).as_quat()  # (x, y, z, w)
            gyro = np.array([0.0, omega, 0.0])
            accel = np.array([0.0, 0.0, 0.0])
            for msg_type, samples in ((MSG_ROTATION, quat), (MSG_GYRO, gyro), (MSG_ACCELEROMETER, accel)):
                sock.sendto(build_tracker_message(msg_type, sequence, samples), server)
                sequence += 1

            while True:
                try:
                    data, _ = sock.recvfrom(64)
                except (BlockingIOError, InterruptedError):
                    break
                print_command(data)

            t += 1.0 / args.rate
            rate.sleep()
    except KeyboardInterrupt:
        print("\n[Sim] Stopping...")
    finally:
        sock.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
