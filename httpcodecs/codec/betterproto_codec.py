from typing import Any
from typing import Optional

import betterproto

from httpcodecs.codec.base import AbstractBufferingDecoder
from httpcodecs.codec.base import AbstractEncoder
from httpcodecs.exceptions import DecodingError
from httpcodecs.media_type import PROTOBUF_MEDIA_TYPES


class BetterprotoDecoder(AbstractBufferingDecoder):
    """
    Protobuf decoder for betterproto dataclass messages, used when the
    google protobuf runtime is not installed.
    """

    media_types = PROTOBUF_MEDIA_TYPES
    target_types = (betterproto.Message,)

    def _decode(
        self, data: bytes, target: Any, media_type: Optional[str]
    ) -> Any:
        try:
            return target().parse(data)
        except (ValueError, IndexError) as e:
            raise DecodingError(f"Protobuf decoding error: {e}") from e


class BetterprotoEncoder(AbstractEncoder):
    media_types = PROTOBUF_MEDIA_TYPES
    value_types = (betterproto.Message,)

    def encode(self, value: Any, media_type: Optional[str] = None) -> bytes:
        if not isinstance(value, betterproto.Message):
            raise TypeError(f"Expected {betterproto.Message}, got {type(value)}")
        return bytes(value)
