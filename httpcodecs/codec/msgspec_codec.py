from typing import Any
from typing import Optional

import msgspec

from httpcodecs.codec.base import AbstractBufferingDecoder
from httpcodecs.codec.base import AbstractEncoder
from httpcodecs.exceptions import DecodingError
from httpcodecs.media_type import APPLICATION_JSON
from httpcodecs.media_type import APPLICATION_JSON_SUFFIX


class MsgspecJsonDecoder(AbstractBufferingDecoder):
    """
    JSON decoder restricted to `msgspec.Struct` targets, so it only claims
    the types declared for msgspec and leaves the rest to later decoders.
    """

    media_types = (APPLICATION_JSON, APPLICATION_JSON_SUFFIX)
    target_types = (msgspec.Struct,)

    def _decode(
        self, data: bytes, target: Any, media_type: Optional[str]
    ) -> Any:
        try:
            return msgspec.json.decode(data, type=target)
        except msgspec.DecodeError as e:
            raise DecodingError(f"JSON decoding error: {e}") from e


class MsgspecJsonEncoder(AbstractEncoder):
    media_types = (APPLICATION_JSON, APPLICATION_JSON_SUFFIX)
    value_types = (msgspec.Struct,)

    def encode(self, value: Any, media_type: Optional[str] = None) -> bytes:
        return msgspec.json.encode(value)
