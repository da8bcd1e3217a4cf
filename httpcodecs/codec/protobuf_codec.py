from typing import Any
from typing import Optional

from google.protobuf.message import DecodeError
from google.protobuf.message import Message as PBMessage

from httpcodecs.codec.base import AbstractDecoder
from httpcodecs.codec.base import AbstractEncoder
from httpcodecs.config import DEFAULT_MAX_IN_MEMORY_SIZE
from httpcodecs.exceptions import DataBufferLimitError
from httpcodecs.exceptions import DecodingError
from httpcodecs.media_type import PROTOBUF_MEDIA_TYPES


class ProtobufDecoder(AbstractDecoder):
    """
    bytes → protobuf decoder for generated `Message` subclasses.
    """

    media_types = PROTOBUF_MEDIA_TYPES
    target_types = (PBMessage,)

    def __init__(self) -> None:
        self.max_message_size: int = DEFAULT_MAX_IN_MEMORY_SIZE

    # the generic size setting maps onto the protobuf message cap
    @property
    def max_in_memory_size(self) -> int:
        return self.max_message_size

    @max_in_memory_size.setter
    def max_in_memory_size(self, size: int) -> None:
        self.max_message_size = size

    def decode(
        self, data: bytes, target: Any, media_type: Optional[str] = None
    ) -> PBMessage:
        if 0 <= self.max_message_size < len(data):
            raise DataBufferLimitError(self.max_message_size)
        msg = target()
        try:
            msg.ParseFromString(data)
        except DecodeError as e:
            raise DecodingError(f"Protobuf decoding error: {e}") from e
        return msg


class ProtobufEncoder(AbstractEncoder):
    """
    protobuf → bytes encoder.
    """

    media_types = PROTOBUF_MEDIA_TYPES
    value_types = (PBMessage,)

    def encode(self, value: Any, media_type: Optional[str] = None) -> bytes:
        if not isinstance(value, PBMessage):
            raise TypeError(f"Expected {PBMessage}, got {type(value)}")
        return value.SerializeToString()
