"""
Wire codec - fixed-width big-endian primitives for the tracker protocol.

This module provides the encode helpers used to build outbound commands and
a small cursor-based reader used to decode inbound datagrams. Every field is
exactly its declared width; a read that runs past the end of the buffer is
an error.
"""

import struct

_UINT32 = struct.Struct(">I")
_UINT64 = struct.Struct(">Q")
_INT32 = struct.Struct(">i")
_FLOAT32 = struct.Struct(">f")


def encode_uint32(value: int) -> bytes:
    """Encode an unsigned 32-bit integer, big-endian."""
    return _UINT32.pack(value)


def encode_uint64(value: int) -> bytes:
    """Encode an unsigned 64-bit integer, big-endian."""
    return _UINT64.pack(value)


def encode_int32(value: int) -> bytes:
    """Encode a signed 32-bit integer, big-endian."""
    return _INT32.pack(value)


def encode_float32(value: float) -> bytes:
    """Encode an IEEE-754 single precision float, big-endian."""
    return _FLOAT32.pack(value)


def decode_uint32(data: bytes, offset: int = 0) -> int:
    return PacketReader(data, offset).read_uint32()


def decode_uint64(data: bytes, offset: int = 0) -> int:
    return PacketReader(data, offset).read_uint64()


def decode_float32(data: bytes, offset: int = 0) -> float:
    return PacketReader(data, offset).read_float32()


class PacketReader:
    """
    Cursor over a single datagram.

    Example usage:
        data, addr = sock.recvfrom(256)
        reader = PacketReader(data)
        msg_type = reader.read_uint32()
        sequence = reader.read_uint64()
        x, y, z, w = reader.read_floats(4)
    """

    def __init__(self, data: bytes, offset: int = 0):
        """
        Initialize the reader with raw packet data.

        Args:
            data: Raw bytes from a UDP datagram
            offset: Position of the first byte to read
        """
        self.data = data
        self.i = offset
        self.n = len(data)

    @property
    def remaining(self) -> int:
        return max(0, self.n - self.i)

    def _read(self, fmt: struct.Struct, name: str):
        if self.i + fmt.size > self.n:
            raise ValueError(f"{name} truncated")
        val = fmt.unpack_from(self.data, self.i)[0]
        self.i += fmt.size
        return val

    def read_uint32(self) -> int:
        """Read a big-endian unsigned 32-bit integer."""
        return self._read(_UINT32, "uint32")

    def read_uint64(self) -> int:
        """Read a big-endian unsigned 64-bit integer."""
        return self._read(_UINT64, "uint64")

    def read_int32(self) -> int:
        """Read a big-endian signed 32-bit integer."""
        return self._read(_INT32, "int32")

    def read_float32(self) -> float:
        """Read a big-endian 32-bit float, widened to a Python float."""
        return float(self._read(_FLOAT32, "float32"))

    def read_floats(self, count: int) -> tuple:
        """
        Read ``count`` consecutive float32 samples.

        The whole run is length-checked up front so a short payload never
        yields a partial sample.
        """
        if self.i + 4 * count > self.n:
            raise ValueError(f"float32[{count}] truncated")
        return tuple(self.read_float32() for _ in range(count))
