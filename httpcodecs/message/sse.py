from typing import Any
from typing import Generic
from typing import List
from typing import Optional
from typing import TypeVar

from pydantic import BaseModel

from httpcodecs.codec.base import Decoder
from httpcodecs.codec.base import Encoder
from httpcodecs.config import DEFAULT_MAX_IN_MEMORY_SIZE
from httpcodecs.exceptions import DataBufferLimitError
from httpcodecs.exceptions import DecodingError
from httpcodecs.exceptions import EncodingError
from httpcodecs.interfaces import EncodedBody
from httpcodecs.media_type import APPLICATION_JSON
from httpcodecs.media_type import TEXT_EVENT_STREAM
from httpcodecs.media_type import is_compatible

# Type variable for the event data
T = TypeVar("T")


class ServerSentEvent(BaseModel, Generic[T]):
    id: Optional[str] = None
    event: Optional[str] = None
    retry: Optional[int] = None  # milliseconds
    comment: Optional[str] = None
    data: Optional[T] = None


def _is_event_stream(media_type: Optional[str]) -> bool:
    return media_type is not None and is_compatible(TEXT_EVENT_STREAM, media_type)


def _is_event_type(candidate: Any) -> bool:
    return isinstance(candidate, type) and issubclass(candidate, ServerSentEvent)


class ServerSentEventHttpMessageReader:
    """
    Reads a "text/event-stream" body.

    The target selects the result shape: `ServerSentEvent` gives the
    events with raw string data, `str` gives the raw data of each event,
    and any other target decodes each event's data as JSON with the
    nested decoder.
    """

    def __init__(self, decoder: Optional[Decoder] = None) -> None:
        self.decoder = decoder
        self.max_in_memory_size: int = DEFAULT_MAX_IN_MEMORY_SIZE

    def nested_codecs(self) -> List[Any]:
        return [self.decoder] if self.decoder is not None else []

    def readable_media_types(self) -> List[str]:
        return [TEXT_EVENT_STREAM]

    def can_read(self, target: Any, media_type: Optional[str]) -> bool:
        return _is_event_stream(media_type) or _is_event_type(target)

    def read(
        self, body: bytes, target: Any, media_type: Optional[str] = None
    ) -> List[Any]:
        events = [self._parse_event(chunk) for chunk in self._split(body)]
        if _is_event_type(target):
            return events
        if target is str:
            return [e.data for e in events if e.data is not None]
        return [
            self._decode_data(e.data, target) for e in events if e.data is not None
        ]

    def _split(self, body: bytes) -> List[str]:
        text = body.decode("utf-8").replace("\r\n", "\n").replace("\r", "\n")
        chunks = [c for c in text.split("\n\n") if c.strip()]
        limit = self.max_in_memory_size
        for chunk in chunks:
            if 0 <= limit < len(chunk.encode("utf-8")):
                raise DataBufferLimitError(limit)
        return chunks

    @staticmethod
    def _parse_event(chunk: str) -> ServerSentEvent[str]:
        fields: dict = {}
        data: List[str] = []
        comments: List[str] = []
        for line in chunk.split("\n"):
            if line.startswith(":"):
                comments.append(line[1:].lstrip())
                continue
            name, _, value = line.partition(":")
            value = value[1:] if value.startswith(" ") else value
            if name == "data":
                data.append(value)
            elif name in ("id", "event"):
                fields[name] = value
            elif name == "retry" and value.isdigit():
                fields["retry"] = int(value)
        return ServerSentEvent[str](
            data="\n".join(data) if data else None,
            comment="\n".join(comments) if comments else None,
            **fields,
        )

    def _decode_data(self, data: str, target: Any) -> Any:
        if self.decoder is None or not self.decoder.can_decode(
            target, APPLICATION_JSON
        ):
            raise DecodingError(f"No decoder for event data of type {target}")
        return self.decoder.decode(data.encode("utf-8"), target, APPLICATION_JSON)


class ServerSentEventHttpMessageWriter:
    """
    Writes events (or plain data items) as "text/event-stream".
    Non-string data is encoded as JSON with the nested encoder.
    """

    def __init__(self, encoder: Optional[Encoder] = None) -> None:
        self.encoder = encoder

    def nested_codecs(self) -> List[Any]:
        return [self.encoder] if self.encoder is not None else []

    def writable_media_types(self) -> List[str]:
        return [TEXT_EVENT_STREAM]

    def can_write(self, value_type: Any, media_type: Optional[str]) -> bool:
        return (
            media_type is None
            or _is_event_stream(media_type)
            or _is_event_type(value_type)
        )

    def write(
        self, value: Any, media_type: Optional[str] = None
    ) -> EncodedBody:
        items = value if isinstance(value, (list, tuple)) else [value]
        text = "".join(self._format(item) for item in items)
        return EncodedBody(content=text.encode("utf-8"), media_type=TEXT_EVENT_STREAM)

    def _format(self, item: Any) -> str:
        event = item if isinstance(item, ServerSentEvent) else ServerSentEvent(data=item)
        lines: List[str] = []
        if event.id is not None:
            lines.append(f"id:{event.id}")
        if event.event is not None:
            lines.append(f"event:{event.event}")
        if event.retry is not None:
            lines.append(f"retry:{event.retry}")
        if event.comment is not None:
            lines.extend(f":{c}" for c in event.comment.split("\n"))
        if event.data is not None:
            lines.extend(f"data:{d}" for d in self._encode_data(event.data).split("\n"))
        return "\n".join(lines) + "\n\n"

    def _encode_data(self, data: Any) -> str:
        if isinstance(data, str):
            return data
        if self.encoder is None or not self.encoder.can_encode(
            type(data), APPLICATION_JSON
        ):
            raise EncodingError(f"No encoder for event data of type {type(data)}")
        return self.encoder.encode(data, APPLICATION_JSON).decode("utf-8")
