import io
import mimetypes
from pathlib import Path
from typing import Any
from typing import List
from typing import Optional

from httpcodecs.codec.resource import ResourceDecoder
from httpcodecs.interfaces import EncodedBody
from httpcodecs.media_type import ALL
from httpcodecs.media_type import APPLICATION_OCTET_STREAM
from httpcodecs.media_type import is_concrete
from httpcodecs.message.base import DecoderHttpMessageReader


class ResourceHttpMessageReader(DecoderHttpMessageReader):
    def __init__(self, decoder: Optional[ResourceDecoder] = None) -> None:
        super().__init__(decoder or ResourceDecoder())


class ResourceHttpMessageWriter:
    """
    Writes files (`pathlib.Path`) and readable binary streams. The media
    type of a file is guessed from its name when none was requested.
    """

    def writable_media_types(self) -> List[str]:
        return [APPLICATION_OCTET_STREAM, ALL]

    def can_write(self, value_type: Any, media_type: Optional[str]) -> bool:
        return isinstance(value_type, type) and issubclass(
            value_type, (Path, io.BufferedIOBase)
        )

    def write(
        self, value: Any, media_type: Optional[str] = None
    ) -> EncodedBody:
        if isinstance(value, Path):
            content = value.read_bytes()
            guessed = mimetypes.guess_type(value.name)[0]
        else:
            content = value.read()
            guessed = None
        if media_type is None or not is_concrete(media_type):
            media_type = guessed or APPLICATION_OCTET_STREAM
        return EncodedBody(content=content, media_type=media_type)
