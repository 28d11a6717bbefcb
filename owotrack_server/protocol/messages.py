"""
Tracker protocol messages.

Inbound datagram layout:
    4 bytes  - message type (uint32, big-endian)
    8 bytes  - packet sequence id (uint64, big-endian, +1 every packet)
    payload  - depends on the message type:

    type  name           payload
    0     heartbeat      none
    1     rotation       4 x float32 (x, y, z, w)
    2     gyroscope      3 x float32 rad/s (x, y, z)
    3     handshake      none
    4     accelerometer  3 x float32 m/s^2 (x, y, z)

Outbound commands start with an int32 tag:
    1  heartbeat  followed by one int32 placeholder (0)
    2  haptic     followed by duration_s, frequency, amplitude (float32)

Bytes past the declared layout are ignored.
"""

from dataclasses import dataclass
from typing import Optional, Tuple

from .wire_codec import PacketReader, encode_float32, encode_int32, encode_uint32, encode_uint64

MSG_HEARTBEAT = 0
MSG_ROTATION = 1
MSG_GYRO = 2
MSG_HANDSHAKE = 3
MSG_ACCELEROMETER = 4

CMD_HEARTBEAT = 1
CMD_HAPTIC = 2

# message type + packet id
MSG_HEADER_SIZE = 4 + 8

# Largest datagram read from the socket
MAX_MSG_SIZE = 256

# Sample count carried by each sensor message
SAMPLE_COUNTS = {
    MSG_ROTATION: 4,
    MSG_GYRO: 3,
    MSG_ACCELEROMETER: 3,
}

_HELLO_MESSAGE = b" Hey OVR =D 5\x00"
# First byte carries the handshake type marker
HANDSHAKE_REPLY = bytes([MSG_HANDSHAKE]) + _HELLO_MESSAGE[1:]


class UnknownMessageType(ValueError):
    """Raised when a datagram carries a message type outside the protocol."""

    def __init__(self, msg_type: int):
        super().__init__(f"unknown message type: {msg_type}")
        self.msg_type = msg_type


@dataclass(frozen=True)
class TrackerMessage:
    """
    A decoded inbound datagram.

    Attributes:
        msg_type: One of the MSG_* constants
        sequence: Packet sequence id (None for handshakes)
        samples: Sensor samples for rotation/gyro/accel, empty otherwise
    """

    msg_type: int
    sequence: Optional[int] = None
    samples: Tuple[float, ...] = ()

    @property
    def is_handshake(self) -> bool:
        return self.msg_type == MSG_HANDSHAKE

    @property
    def is_sensor_data(self) -> bool:
        return self.msg_type in SAMPLE_COUNTS


def parse_datagram(data: bytes) -> TrackerMessage:
    """
    Decode a raw inbound datagram.

    Args:
        data: Datagram payload as received from the socket

    Returns:
        The decoded TrackerMessage

    Raises:
        UnknownMessageType: If the type field is not part of the protocol
        ValueError: If the datagram is shorter than its fixed layout
    """
    reader = PacketReader(data)
    msg_type = reader.read_uint32()

    # Handshakes are answered before anything else looks at the packet
    if msg_type == MSG_HANDSHAKE:
        return TrackerMessage(msg_type)

    if msg_type != MSG_HEARTBEAT and msg_type not in SAMPLE_COUNTS:
        raise UnknownMessageType(msg_type)

    sequence = reader.read_uint64()
    samples = ()
    count = SAMPLE_COUNTS.get(msg_type)
    if count:
        samples = reader.read_floats(count)
    return TrackerMessage(msg_type, sequence, samples)


def build_heartbeat_command() -> bytes:
    """Keep-alive command sent to every live tracker."""
    return encode_int32(CMD_HEARTBEAT) + encode_int32(0)


def build_haptic_command(duration_s: float, frequency: float, amplitude: float) -> bytes:
    """
    Haptic pulse command.

    Args:
        duration_s: Pulse length in seconds
        frequency: Vibration frequency
        amplitude: Vibration strength

    Returns:
        16-byte command datagram
    """
    return (
        encode_int32(CMD_HAPTIC)
        + encode_float32(duration_s)
        + encode_float32(frequency)
        + encode_float32(amplitude)
    )


def build_tracker_message(msg_type: int, sequence: int, samples=()) -> bytes:
    """
    Encode an inbound-format datagram, as a tracker device would send it.

    Used by the device simulator and tests.
    """
    payload = encode_uint32(msg_type) + encode_uint64(sequence)
    for value in samples:
        payload += encode_float32(value)
    return payload
