"""
Tracker wire protocol - codec and message layout.

Example usage:
    from owotrack_server.protocol import parse_datagram, MSG_ROTATION

    data, addr = sock.recvfrom(MAX_MSG_SIZE)
    msg = parse_datagram(data)
    if msg.msg_type == MSG_ROTATION:
        x, y, z, w = msg.samples
"""

from .messages import (
    CMD_HAPTIC,
    CMD_HEARTBEAT,
    HANDSHAKE_REPLY,
    MAX_MSG_SIZE,
    MSG_ACCELEROMETER,
    MSG_GYRO,
    MSG_HANDSHAKE,
    MSG_HEADER_SIZE,
    MSG_HEARTBEAT,
    MSG_ROTATION,
    TrackerMessage,
    UnknownMessageType,
    build_haptic_command,
    build_heartbeat_command,
    build_tracker_message,
    parse_datagram,
)
from .wire_codec import (
    PacketReader,
    decode_float32,
    decode_uint32,
    decode_uint64,
    encode_float32,
    encode_int32,
    encode_uint32,
    encode_uint64,
)

__all__ = [
    "CMD_HAPTIC",
    "CMD_HEARTBEAT",
    "HANDSHAKE_REPLY",
    "MAX_MSG_SIZE",
    "MSG_ACCELEROMETER",
    "MSG_GYRO",
    "MSG_HANDSHAKE",
    "MSG_HEADER_SIZE",
    "MSG_HEARTBEAT",
    "MSG_ROTATION",
    "PacketReader",
    "TrackerMessage",
    "UnknownMessageType",
    "build_haptic_command",
    "build_heartbeat_command",
    "build_tracker_message",
    "decode_float32",
    "decode_uint32",
    "decode_uint64",
    "encode_float32",
    "encode_int32",
    "encode_uint32",
    "encode_uint64",
    "parse_datagram",
]
