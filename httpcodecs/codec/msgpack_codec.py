from typing import Any
from typing import Optional

import msgpack

from httpcodecs.codec.base import AbstractBufferingDecoder
from httpcodecs.codec.base import AbstractEncoder
from httpcodecs.exceptions import DecodingError
from httpcodecs.exceptions import EncodingError
from httpcodecs.media_type import APPLICATION_MSGPACK
from httpcodecs.media_type import APPLICATION_X_MSGPACK


class MsgpackDecoder(AbstractBufferingDecoder):
    """
    MessagePack → plain Python structures (dicts, lists, scalars).
    """

    media_types = (APPLICATION_X_MSGPACK, APPLICATION_MSGPACK)

    def _decode(
        self, data: bytes, target: Any, media_type: Optional[str]
    ) -> Any:
        try:
            return msgpack.unpackb(data, raw=False)
        except (msgpack.UnpackException, ValueError) as e:
            raise DecodingError(f"MessagePack decoding error: {e}") from e


class MsgpackEncoder(AbstractEncoder):
    media_types = (APPLICATION_X_MSGPACK, APPLICATION_MSGPACK)

    def encode(self, value: Any, media_type: Optional[str] = None) -> bytes:
        try:
            return msgpack.packb(value, use_bin_type=True)
        except TypeError as e:
            raise EncodingError(f"MessagePack encoding error: {e}") from e
