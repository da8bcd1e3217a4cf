from typing import Any
from typing import Dict
from typing import List
from typing import Optional
from typing import Protocol
from typing import runtime_checkable

from httpcodecs.codec.base import Decoder
from httpcodecs.codec.base import Encoder
from httpcodecs.interfaces import EncodedBody
from httpcodecs.media_type import is_concrete


@runtime_checkable
class HttpMessageReader(Protocol):
    """Reads an HTTP message body into a value."""

    def readable_media_types(self) -> List[str]: ...

    def can_read(self, target: Any, media_type: Optional[str]) -> bool: ...

    def read(
        self, body: bytes, target: Any, media_type: Optional[str] = None
    ) -> Any: ...


@runtime_checkable
class HttpMessageWriter(Protocol):
    """Writes a value as an HTTP message body."""

    def writable_media_types(self) -> List[str]: ...

    def can_write(self, value_type: Any, media_type: Optional[str]) -> bool: ...

    def write(
        self, value: Any, media_type: Optional[str] = None
    ) -> EncodedBody: ...


def resolve_media_type(
    requested: Optional[str], supported: List[str]
) -> str:
    """
    Pick the media type to write: the requested one when concrete,
    otherwise the first concrete type the writer supports.
    """
    if requested is not None and is_concrete(requested):
        return requested
    for media_type in supported:
        if is_concrete(media_type):
            return media_type
    raise ValueError(f"No concrete media type among {supported}")


class DecoderHttpMessageReader:
    """
    Adapts a `Decoder` to the reader contract.
    """

    def __init__(self, decoder: Decoder) -> None:
        if decoder is None:
            raise ValueError("Decoder is required")
        self.decoder = decoder

    def readable_media_types(self) -> List[str]:
        return self.decoder.decodable_media_types()

    def can_read(self, target: Any, media_type: Optional[str]) -> bool:
        return self.decoder.can_decode(target, media_type)

    def read(
        self, body: bytes, target: Any, media_type: Optional[str] = None
    ) -> Any:
        return self.decoder.decode(body, target, media_type)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.decoder!r})"


class EncoderHttpMessageWriter:
    """
    Adapts an `Encoder` to the writer contract.
    """

    def __init__(self, encoder: Encoder) -> None:
        if encoder is None:
            raise ValueError("Encoder is required")
        self.encoder = encoder

    def writable_media_types(self) -> List[str]:
        return self.encoder.encodable_media_types()

    def can_write(self, value_type: Any, media_type: Optional[str]) -> bool:
        return self.encoder.can_encode(value_type, media_type)

    def write(
        self, value: Any, media_type: Optional[str] = None
    ) -> EncodedBody:
        resolved = resolve_media_type(
            media_type, self.writable_media_types()
        )
        return EncodedBody(
            content=self.encoder.encode(value, resolved),
            media_type=resolved,
            headers=self._extra_headers(value),
        )

    def _extra_headers(self, value: Any) -> Dict[str, str]:
        return {}

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.encoder!r})"


def unwrap(codec: Any) -> Any:
    """
    Return the decoder/encoder behind a reader/writer adapter,
    or `codec` itself when it is not an adapter.
    """
    if isinstance(codec, DecoderHttpMessageReader):
        return codec.decoder
    if isinstance(codec, EncoderHttpMessageWriter):
        return codec.encoder
    return codec
