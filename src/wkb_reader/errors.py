"""
Exception types raised while decoding WKB.

Every error derives from WKBError, itself a ValueError, so callers that only
care about "bad input" can catch ValueError as they would for the standard
library parsers.
"""


class WKBError(ValueError):
    """
    Base class for all decoding failures.

    Attributes:
        index: Position of the offending buffer within a batch, if known
        identifier: Identifier of the offending buffer within a batch, if known
        offset: Byte offset in the buffer where the failure was detected
    """

    def __init__(
        self,
        message: str,
        *,
        index: int | None = None,
        identifier: str | None = None,
        offset: int | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.index = index
        self.identifier = identifier
        self.offset = offset

    def __str__(self) -> str:
        context: list[str] = []
        if self.index is not None:
            context.append(f"index {self.index}")
        if self.identifier is not None:
            context.append(f"id {self.identifier!r}")
        if self.offset is not None:
            context.append(f"byte {self.offset}")
        if context:
            return f"{self.message} ({', '.join(context)})"
        return self.message


class InvalidInputError(WKBError):
    """Batch arguments are malformed (wrong type, empty, mismatched ids)"""


class UnsupportedByteOrderError(WKBError):
    """A header declares big-endian (or garbage) byte order"""


class UnsupportedGeometryTypeError(WKBError):
    """Recognized OGC type that this decoder does not handle (GeometryCollection)"""


class UnknownGeometryTypeError(WKBError):
    """Type code outside the OGC 2D range"""


class NestedTypeMismatchError(WKBError):
    """A multi-geometry member is not of the expected simple type"""


class TruncatedInputError(WKBError):
    """A read ran past the end of the buffer"""


class MixedGeometryTypeError(WKBError):
    """Buffers in one batch decoded to different geometry types"""


class InvalidGeometryError(WKBError):
    """A geometry failed a validity check: strict decoding, or Shapely rejecting it"""
