"""Error taxonomy for the fetch, decode, parse and extract stages."""

from enum import StrEnum


class ErrorCode(StrEnum):
    CONNECT_ERROR = "connect_error"
    HTTP_STATUS_ERROR = "http_status_error"
    INCOMPLETE_BODY = "incomplete_body"
    BUFFER_OVERFLOW = "buffer_overflow"
    INCOMPLETE_TRANSFER = "incomplete_transfer"
    DECOMPRESSION_ERROR = "decompression_error"
    SYNTAX_ERROR = "syntax_error"
    MISSING_FIELD = "missing_field"
    TYPE_MISMATCH = "type_mismatch"
    MALFORMED_TIMESTAMP = "malformed_timestamp"


class WeatherFeedError(Exception):
    """Base class for every failure a poll stage can report."""

    code: ErrorCode


# --- Transport ---


class TransportError(WeatherFeedError):
    pass


class ConnectError(TransportError):
    code = ErrorCode.CONNECT_ERROR

    def __init__(self, path: str, reason: str):
        super().__init__(f"cannot connect for {path}: {reason}")
        self.path = path


class HttpStatusError(TransportError):
    code = ErrorCode.HTTP_STATUS_ERROR

    def __init__(self, status_code: int, path: str):
        super().__init__(f"HTTP {status_code} for {path}")
        self.status_code = status_code
        self.path = path


class IncompleteBodyError(TransportError):
    code = ErrorCode.INCOMPLETE_BODY

    def __init__(self, path: str, reason: str):
        super().__init__(f"body of {path} not fully received: {reason}")
        self.path = path


# --- Decode ---


class DecodeError(WeatherFeedError):
    pass


class BufferOverflow(DecodeError):
    code = ErrorCode.BUFFER_OVERFLOW

    def __init__(self, declared_length: int, capacity: int):
        super().__init__(
            f"response size {declared_length} exceeds buffer size {capacity}"
        )
        self.declared_length = declared_length
        self.capacity = capacity


class IncompleteTransfer(DecodeError):
    code = ErrorCode.INCOMPLETE_TRANSFER

    def __init__(self, available: int, declared_length: int):
        super().__init__(f"only {available} of {declared_length} bytes available")
        self.available = available
        self.declared_length = declared_length


class DecompressionError(DecodeError):
    code = ErrorCode.DECOMPRESSION_ERROR

    def __init__(self, codec_code: int, reason: str):
        super().__init__(f"inflate failed ({codec_code}): {reason}")
        self.codec_code = codec_code


# --- Parse ---


class ParseError(WeatherFeedError):
    pass


class DocumentSyntaxError(ParseError):
    code = ErrorCode.SYNTAX_ERROR

    def __init__(self, position: int, reason: str):
        super().__init__(f"invalid JSON at position {position}: {reason}")
        self.position = position
        self.reason = reason


# --- Extract ---


class ExtractError(WeatherFeedError):
    pass


class MissingField(ExtractError):
    code = ErrorCode.MISSING_FIELD

    def __init__(self, path: str):
        super().__init__(f"required field {path!r} is missing")
        self.path = path


class TypeMismatch(ExtractError):
    code = ErrorCode.TYPE_MISMATCH

    def __init__(self, path: str, expected: str, actual: str):
        super().__init__(f"field {path!r}: expected {expected}, got {actual}")
        self.path = path
        self.expected = expected
        self.actual = actual


class MalformedTimestamp(ExtractError):
    code = ErrorCode.MALFORMED_TIMESTAMP

    def __init__(self, token: str, reason: str):
        super().__init__(f"malformed timestamp {token!r}: {reason}")
        self.token = token
