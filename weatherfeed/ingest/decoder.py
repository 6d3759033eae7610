"""Payload decoder: bounded intake, framing header strip, raw deflate inflate."""

import logging
import re
import zlib

from weatherfeed.ingest.errors import (
    BufferOverflow,
    DecompressionError,
    IncompleteTransfer,
)

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 8192
FRAMING_HEADER_SIZE = 10

# zlib status codes; the module only exposes them inside error messages
Z_DATA_ERROR = -3
Z_BUF_ERROR = -5

_ZLIB_CODE_RE = re.compile(r"Error (-?\d+)")


def _zlib_code(err: zlib.error) -> int:
    m = _ZLIB_CODE_RE.search(str(err))
    return int(m.group(1)) if m else Z_DATA_ERROR


class BoundedBuffer:
    """Fixed-capacity byte buffer, zeroed whenever a scope opens or closes."""

    def __init__(self, capacity: int):
        self.capacity = capacity
        self._data = bytearray(capacity)
        self.size = 0

    def __enter__(self) -> "BoundedBuffer":
        self.clear()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.clear()

    def write(self, data: bytes) -> None:
        if len(data) > self.capacity:
            raise OverflowError(
                f"{len(data)} bytes do not fit a {self.capacity} byte buffer"
            )
        self._data[: len(data)] = data
        self.size = len(data)

    def getvalue(self) -> bytes:
        return bytes(self._data[: self.size])

    def clear(self) -> None:
        self._data[: self.size] = bytes(self.size)
        self.size = 0


class PayloadDecoder:
    """Turns a framed, deflate-compressed response body into JSON bytes.

    The intake and output buffers are reused for every endpoint of a poll.
    Both are cleared before and after each decode, so one stage never sees
    another stage's bytes and a failed decode leaves nothing behind.
    """

    def __init__(
        self,
        capacity: int = DEFAULT_CAPACITY,
        header_size: int = FRAMING_HEADER_SIZE,
    ):
        self.capacity = capacity
        self.header_size = header_size
        self._intake = BoundedBuffer(capacity)
        self._output = BoundedBuffer(capacity)

    @property
    def buffers_clear(self) -> bool:
        return self._intake.size == 0 and self._output.size == 0

    def decode(self, raw: bytes, declared_length: int) -> bytes:
        if declared_length > self.capacity:
            logger.error(
                "Buffer overflow, response size %d, buffer size %d",
                declared_length, self.capacity,
            )
            raise BufferOverflow(declared_length, self.capacity)
        if len(raw) < declared_length:
            logger.error(
                "Incomplete transfer, available %d of %d bytes",
                len(raw), declared_length,
            )
            raise IncompleteTransfer(len(raw), declared_length)

        with self._intake as intake, self._output as output:
            intake.write(raw[:declared_length])
            output.write(self._inflate(intake.getvalue()))
            logger.debug("Inflated %d bytes into %d", intake.size, output.size)
            return output.getvalue()

    def _inflate(self, payload: bytes) -> bytes:
        stream = payload[self.header_size:]
        inflater = zlib.decompressobj(-zlib.MAX_WBITS)
        try:
            data = inflater.decompress(stream, self.capacity)
        except zlib.error as e:
            logger.error("Inflate failed: %s", e)
            raise DecompressionError(_zlib_code(e), str(e)) from e

        if not inflater.eof:
            if inflater.unconsumed_tail or len(data) >= self.capacity:
                reason = f"inflated data exceeds {self.capacity} bytes"
            else:
                reason = "deflate stream is truncated"
            logger.error("Inflate failed: %s", reason)
            raise DecompressionError(Z_BUF_ERROR, reason)
        return data
