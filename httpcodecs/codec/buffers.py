from typing import Any
from typing import Optional

from httpcodecs.codec.base import AbstractBufferingDecoder
from httpcodecs.codec.base import AbstractEncoder
from httpcodecs.media_type import ALL
from httpcodecs.media_type import APPLICATION_OCTET_STREAM


class BytesDecoder(AbstractBufferingDecoder):
    media_types = (ALL,)
    target_types = (bytes,)

    def _decode(
        self, data: bytes, target: Any, media_type: Optional[str]
    ) -> bytes:
        return bytes(data)


class BytearrayDecoder(AbstractBufferingDecoder):
    media_types = (ALL,)
    target_types = (bytearray,)

    def _decode(
        self, data: bytes, target: Any, media_type: Optional[str]
    ) -> bytearray:
        return bytearray(data)


class MemoryviewDecoder(AbstractBufferingDecoder):
    """
    Zero-copy view over the received payload.
    """

    media_types = (ALL,)
    target_types = (memoryview,)

    def _decode(
        self, data: bytes, target: Any, media_type: Optional[str]
    ) -> memoryview:
        return memoryview(data)


class _BufferEncoder(AbstractEncoder):
    media_types = (APPLICATION_OCTET_STREAM, ALL)

    def encode(self, value: Any, media_type: Optional[str] = None) -> bytes:
        return bytes(value)


class BytesEncoder(_BufferEncoder):
    value_types = (bytes,)


class BytearrayEncoder(_BufferEncoder):
    value_types = (bytearray,)


class MemoryviewEncoder(_BufferEncoder):
    value_types = (memoryview,)
