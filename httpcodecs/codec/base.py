from abc import ABC
from abc import abstractmethod
from typing import Any
from typing import List
from typing import Optional
from typing import Protocol
from typing import Tuple
from typing import runtime_checkable

from httpcodecs.config import DEFAULT_MAX_IN_MEMORY_SIZE
from httpcodecs.exceptions import DataBufferLimitError
from httpcodecs.media_type import is_compatible


@runtime_checkable
class Decoder(Protocol):
    """
    Decoder protocol: turns a complete payload into a value of `target`.
    """

    def can_decode(self, target: Any, media_type: Optional[str]) -> bool:
        """
        Whether this decoder handles `target` for `media_type`
        (None means "any media type").
        """
        ...

    def decode(
        self, data: bytes, target: Any, media_type: Optional[str] = None
    ) -> Any:
        """
        Convert bytes into a value of `target`.
        """
        ...

    def decodable_media_types(self) -> List[str]: ...


@runtime_checkable
class Encoder(Protocol):
    """
    Encoder protocol: turns a value into bytes of a given media type.
    """

    def can_encode(self, value_type: Any, media_type: Optional[str]) -> bool:
        """
        Whether values of `value_type` can be written as `media_type`.
        """
        ...

    def encode(self, value: Any, media_type: Optional[str] = None) -> bytes:
        """
        Convert `value` into bytes.
        """
        ...

    def encodable_media_types(self) -> List[str]: ...


def _supports_type(candidate: Any, supported: Tuple[type, ...]) -> bool:
    if object in supported:
        return True
    return isinstance(candidate, type) and issubclass(candidate, supported)


def _supports_media_type(
    media_type: Optional[str], supported: Tuple[str, ...]
) -> bool:
    if media_type is None:
        return True
    return any(is_compatible(mt, media_type) for mt in supported)


class AbstractDecoder(ABC):
    """
    Base for decoders declaring the media types and targets they accept.
    A decoder whose `target_types` contains `object` is an object decoder.
    """

    media_types: Tuple[str, ...] = ()
    target_types: Tuple[type, ...] = (object,)

    def decodable_media_types(self) -> List[str]:
        return list(self.media_types)

    def can_decode(self, target: Any, media_type: Optional[str]) -> bool:
        return _supports_type(target, self.target_types) and (
            _supports_media_type(media_type, self.media_types)
        )

    @abstractmethod
    def decode(
        self, data: bytes, target: Any, media_type: Optional[str] = None
    ) -> Any:
        ...


class AbstractBufferingDecoder(AbstractDecoder):
    """
    Decoder that aggregates the whole payload in memory before decoding
    and refuses payloads larger than `max_in_memory_size` (-1: no limit).
    """

    def __init__(self) -> None:
        self.max_in_memory_size: int = DEFAULT_MAX_IN_MEMORY_SIZE

    def decode(
        self, data: bytes, target: Any, media_type: Optional[str] = None
    ) -> Any:
        limit = self.max_in_memory_size
        if limit >= 0 and len(data) > limit:
            raise DataBufferLimitError(limit)
        return self._decode(data, target, media_type)

    @abstractmethod
    def _decode(
        self, data: bytes, target: Any, media_type: Optional[str]
    ) -> Any:
        ...


class AbstractEncoder(ABC):
    """
    Base for encoders declaring the media types and value types they write.
    """

    media_types: Tuple[str, ...] = ()
    value_types: Tuple[type, ...] = (object,)

    def encodable_media_types(self) -> List[str]:
        return list(self.media_types)

    def can_encode(self, value_type: Any, media_type: Optional[str]) -> bool:
        return _supports_type(value_type, self.value_types) and (
            _supports_media_type(media_type, self.media_types)
        )

    @abstractmethod
    def encode(self, value: Any, media_type: Optional[str] = None) -> bytes:
        ...
