"""
Sequential little-endian reader over an in-memory WKB buffer.

WKB primitives:
    - Byte order flag: 1 byte (0x00 big endian, 0x01 little endian)
    - Type code: uint32
    - Counts (points, rings, members): uint32
    - Coordinate: two float64 values (x, y)
"""

import struct
from enum import IntEnum

from .errors import TruncatedInputError
from .geometry import Coordinate

_UINT32 = struct.Struct("<I")
_DOUBLE = struct.Struct("<d")
_COORD = struct.Struct("<dd")


class ByteOrder(IntEnum):
    """WKB byte order flag values"""

    BIG_ENDIAN = 0
    LITTLE_ENDIAN = 1


class ByteCursor:
    """
    Forward-only reader over one WKB buffer.

    The buffer is copied to immutable bytes on construction, so the caller's
    bytearray or memoryview is never touched afterwards.

    Example:
        >>> cursor = ByteCursor(bytes([0x01, 0x02]))
        >>> cursor.read_bytes(1)
        b'\\x01'
        >>> cursor.position, cursor.remaining
        (1, 1)
    """

    __slots__ = ("_data", "_position")

    def __init__(self, buffer: bytes | bytearray | memoryview):
        self._data = bytes(buffer)
        self._position = 0

    @property
    def position(self) -> int:
        return self._position

    @property
    def remaining(self) -> int:
        return len(self._data) - self._position

    def __len__(self) -> int:
        return len(self._data)

    def read_bytes(self, n: int) -> bytes:
        """
        Read the next n bytes and advance.

        Raises:
            TruncatedInputError: If fewer than n bytes remain
        """
        if n > self.remaining:
            raise TruncatedInputError(
                f"Unexpected end of WKB: need {n} bytes, {self.remaining} left",
                offset=self._position,
            )
        start = self._position
        self._position += n
        return self._data[start : self._position]

    def require(self, n: int) -> None:
        """Fail early if fewer than n bytes remain, without advancing"""
        if n > self.remaining:
            raise TruncatedInputError(
                f"Declared size of {n} bytes exceeds the {self.remaining} bytes left",
                offset=self._position,
            )


def read_byte_order(cursor: ByteCursor) -> ByteOrder | int:
    """Read the byte order flag; unknown values are returned as plain ints"""
    flag = cursor.read_bytes(1)[0]
    try:
        return ByteOrder(flag)
    except ValueError:
        return flag


def read_type_code(cursor: ByteCursor) -> int:
    """Read a raw uint32 geometry type code"""
    return _UINT32.unpack(cursor.read_bytes(4))[0]


def read_count(cursor: ByteCursor) -> int:
    """Read a uint32 point, ring or member count"""
    return _UINT32.unpack(cursor.read_bytes(4))[0]


def read_double(cursor: ByteCursor) -> float:
    """Read one float64 value"""
    return _DOUBLE.unpack(cursor.read_bytes(8))[0]


def read_coordinate(cursor: ByteCursor) -> Coordinate:
    """Read an (x, y) pair"""
    x, y = _COORD.unpack(cursor.read_bytes(_COORD.size))
    return (x, y)
