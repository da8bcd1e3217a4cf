from typing import Any
from typing import Optional
from typing import Tuple

from httpcodecs.codec.base import AbstractBufferingDecoder
from httpcodecs.codec.base import AbstractEncoder
from httpcodecs.exceptions import DecodingError
from httpcodecs.media_type import ALL
from httpcodecs.media_type import TEXT_PLAIN
from httpcodecs.media_type import charset


class StringDecoder(AbstractBufferingDecoder):
    """
    Decodes text payloads into `str` using the charset of the media type.
    Build with `text_plain_only()` or `all_mime_types()`.
    """

    target_types = (str,)

    def __init__(self, media_types: Tuple[str, ...]) -> None:
        super().__init__()
        self.media_types = media_types

    @classmethod
    def text_plain_only(cls) -> "StringDecoder":
        return cls((TEXT_PLAIN,))

    @classmethod
    def all_mime_types(cls) -> "StringDecoder":
        return cls((TEXT_PLAIN, ALL))

    def _decode(
        self, data: bytes, target: Any, media_type: Optional[str]
    ) -> str:
        try:
            return data.decode(charset(media_type))
        except (LookupError, UnicodeDecodeError) as e:
            raise DecodingError(str(e)) from e


class StringEncoder(AbstractEncoder):
    """
    Encodes `str` values using the charset of the requested media type.
    """

    value_types = (str,)

    def __init__(self, media_types: Tuple[str, ...]) -> None:
        self.media_types = media_types

    @classmethod
    def text_plain_only(cls) -> "StringEncoder":
        return cls((TEXT_PLAIN,))

    @classmethod
    def all_mime_types(cls) -> "StringEncoder":
        return cls((TEXT_PLAIN, ALL))

    def encode(self, value: Any, media_type: Optional[str] = None) -> bytes:
        return str(value).encode(charset(media_type))
