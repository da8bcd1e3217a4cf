class CodecError(Exception):
    """Base class for codec failures."""


class DecodingError(CodecError):
    """A payload could not be decoded into the requested target."""


class EncodingError(CodecError):
    """A value could not be encoded for the requested media type."""


class DataBufferLimitError(DecodingError):
    """
    Raised when a payload exceeds the number of bytes a decoder
    is allowed to buffer in memory.
    """

    def __init__(self, limit: int) -> None:
        super().__init__(f"Exceeded limit on max bytes to buffer : {limit}")
        self.limit = limit
