import io
from typing import Any
from typing import Optional

from httpcodecs.codec.base import AbstractBufferingDecoder
from httpcodecs.media_type import ALL


class ResourceDecoder(AbstractBufferingDecoder):
    """
    Exposes the payload as an in-memory binary stream.
    """

    media_types = (ALL,)
    target_types = (io.BufferedIOBase,)

    def _decode(
        self, data: bytes, target: Any, media_type: Optional[str]
    ) -> io.BytesIO:
        return io.BytesIO(data)
