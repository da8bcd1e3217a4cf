from typing import Any
from typing import Callable
from typing import Dict
from typing import List
from typing import Protocol
from typing import runtime_checkable

from pydantic import BaseModel
from pydantic import Field


class EncodedBody(BaseModel):
    """Bytes produced by a writer, with the media type actually used."""

    content: bytes
    media_type: str
    headers: Dict[str, str] = Field(default_factory=dict)


# Configuration capabilities a codec may expose. The propagator only
# ever talks to codecs through these.


@runtime_checkable
class SizeLimited(Protocol):
    """Codec that buffers payloads and caps how many bytes it holds."""

    max_in_memory_size: int


@runtime_checkable
class RequestDetailsLogging(Protocol):
    """Codec that can log (potentially sensitive) request content."""

    enable_logging_request_details: bool


@runtime_checkable
class CompositeCodec(Protocol):
    """Codec delegating to nested codecs (multipart, server-sent events)."""

    def nested_codecs(self) -> List[Any]: ...


# Mutation hook applied to every default codec after scalar settings
CodecConsumer = Callable[[Any], None]
