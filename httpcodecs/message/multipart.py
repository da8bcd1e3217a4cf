import secrets
from collections.abc import Mapping
from email.message import EmailMessage
from email.parser import BytesParser
from email.policy import HTTP
from pathlib import Path
from typing import Any
from typing import Dict
from typing import List
from typing import Optional

from pydantic import BaseModel
from pydantic import Field

from httpcodecs.config import DEFAULT_MAX_IN_MEMORY_SIZE
from httpcodecs.exceptions import DataBufferLimitError
from httpcodecs.exceptions import DecodingError
from httpcodecs.exceptions import EncodingError
from httpcodecs.interfaces import EncodedBody
from httpcodecs.log_config import logger
from httpcodecs.media_type import APPLICATION_FORM_URLENCODED
from httpcodecs.media_type import MULTIPART_FORM_DATA
from httpcodecs.media_type import MULTIPART_MIXED
from httpcodecs.media_type import MULTIPART_RELATED
from httpcodecs.media_type import base_type
from httpcodecs.media_type import is_compatible
from httpcodecs.media_type import parameters
from httpcodecs.message.form import FormHttpMessageWriter

MULTIPART_MEDIA_TYPES = [MULTIPART_FORM_DATA, MULTIPART_MIXED, MULTIPART_RELATED]


class Part(BaseModel):
    """A single part of a multipart body."""

    name: str
    content: bytes
    filename: Optional[str] = None
    headers: Dict[str, str] = Field(default_factory=dict)

    @property
    def is_file(self) -> bool:
        return self.filename is not None

    def text(self, encoding: str = "utf-8") -> str:
        return self.content.decode(encoding)


class PartEvent(Part):
    """
    A part delivered as an event; `is_last` marks the final part of the body.
    """

    is_last: bool = False


def _is_multipart(media_type: Optional[str]) -> bool:
    return media_type is not None and any(
        is_compatible(mt, media_type) for mt in MULTIPART_MEDIA_TYPES
    )


class _PartParser:
    """
    Shared settings and parsing for the part-level readers.
    """

    def __init__(self) -> None:
        self.max_in_memory_size: int = DEFAULT_MAX_IN_MEMORY_SIZE
        self.max_parts: int = -1
        self.enable_logging_request_details: bool = False

    def readable_media_types(self) -> List[str]:
        return list(MULTIPART_MEDIA_TYPES)

    def _parse(self, body: bytes, media_type: Optional[str]) -> List[Part]:
        if not _is_multipart(media_type):
            raise DecodingError(f"Not a multipart media type: {media_type}")
        assert media_type is not None
        if "boundary" not in parameters(media_type):
            raise DecodingError("No multipart boundary found in Content-Type")

        preamble = f"Content-Type: {media_type}\r\n\r\n".encode("latin-1")
        message = BytesParser(policy=HTTP).parsebytes(preamble + body)
        if not isinstance(message, EmailMessage) or not message.is_multipart():
            raise DecodingError("Could not find multipart boundary in body")

        parts: List[Part] = []
        for sub in message.iter_parts():
            if 0 <= self.max_parts <= len(parts):
                raise DecodingError(f"Too many parts (max {self.max_parts})")
            content = sub.get_payload(decode=True) or b""
            limit = self.max_in_memory_size
            if 0 <= limit < len(content):
                raise DataBufferLimitError(limit)
            name = sub.get_param("name", header="content-disposition")
            parts.append(
                Part(
                    name=str(name or ""),
                    content=content,
                    filename=sub.get_filename(),
                    headers={k: str(v) for k, v in sub.items()},
                )
            )
        if self.enable_logging_request_details:
            logger.debug("Parsed parts %s", [(p.name, p.filename) for p in parts])
        else:
            logger.debug("Parsed %d parts (content masked)", len(parts))
        return parts


class DefaultPartHttpMessageReader(_PartParser):
    """
    Reads a multipart body into a list of `Part`. Every part is held in
    memory and capped at `max_in_memory_size` bytes.
    """

    def can_read(self, target: Any, media_type: Optional[str]) -> bool:
        return target is Part and (media_type is None or _is_multipart(media_type))

    def read(
        self, body: bytes, target: Any, media_type: Optional[str] = None
    ) -> List[Part]:
        return self._parse(body, media_type)


class PartEventHttpMessageReader(_PartParser):
    """
    Reads a multipart body into a list of `PartEvent`.
    """

    def can_read(self, target: Any, media_type: Optional[str]) -> bool:
        return target is PartEvent and (
            media_type is None or _is_multipart(media_type)
        )

    def read(
        self, body: bytes, target: Any, media_type: Optional[str] = None
    ) -> List[PartEvent]:
        parts = self._parse(body, media_type)
        return [
            PartEvent(**part.model_dump(), is_last=i == len(parts) - 1)
            for i, part in enumerate(parts)
        ]


class MultipartHttpMessageReader:
    """
    Reads "multipart/form-data" into a dict of part name → list of parts,
    delegating the parsing to a part reader.
    """

    def __init__(self, part_reader: DefaultPartHttpMessageReader) -> None:
        if part_reader is None:
            raise ValueError("Part reader is required")
        self.part_reader = part_reader
        self.enable_logging_request_details: bool = False

    def nested_codecs(self) -> List[Any]:
        return [self.part_reader]

    def readable_media_types(self) -> List[str]:
        return [MULTIPART_FORM_DATA]

    def can_read(self, target: Any, media_type: Optional[str]) -> bool:
        return target in (dict, Mapping) and (
            media_type is None or is_compatible(MULTIPART_FORM_DATA, media_type)
        )

    def read(
        self, body: bytes, target: Any, media_type: Optional[str] = None
    ) -> Dict[str, List[Part]]:
        result: Dict[str, List[Part]] = {}
        for part in self.part_reader.read(body, Part, media_type):
            result.setdefault(part.name, []).append(part)
        if self.enable_logging_request_details:
            logger.debug("Parsed multipart data %s", result)
        else:
            logger.debug("Parsed multipart data %s (content masked)", list(result))
        return result


class MultipartHttpMessageWriter:
    """
    Writes a mapping of name → value (or list of values) as
    "multipart/form-data". Each value is written by the first part writer
    that accepts its type. Requests for the urlencoded form media type are
    delegated to the nested form writer.
    """

    def __init__(
        self,
        part_writers: List[Any],
        form_writer: Optional[FormHttpMessageWriter] = None,
    ) -> None:
        self.part_writers = list(part_writers)
        self.form_writer = form_writer
        self.enable_logging_request_details: bool = False

    def nested_codecs(self) -> List[Any]:
        return [self.form_writer] if self.form_writer is not None else []

    def writable_media_types(self) -> List[str]:
        media_types = [MULTIPART_FORM_DATA, MULTIPART_MIXED, MULTIPART_RELATED]
        if self.form_writer is not None:
            media_types.append(APPLICATION_FORM_URLENCODED)
        return media_types

    def can_write(self, value_type: Any, media_type: Optional[str]) -> bool:
        if not (isinstance(value_type, type) and issubclass(value_type, Mapping)):
            return False
        if media_type is None or _is_multipart(media_type):
            return True
        return self.form_writer is not None and is_compatible(
            APPLICATION_FORM_URLENCODED, media_type
        )

    def write(
        self, value: Any, media_type: Optional[str] = None
    ) -> EncodedBody:
        if (
            media_type is not None
            and self.form_writer is not None
            and is_compatible(APPLICATION_FORM_URLENCODED, media_type)
        ):
            return self.form_writer.write(value, media_type)

        subtype = base_type(media_type) if _is_multipart(media_type) else None
        boundary = (
            parameters(media_type).get("boundary") if media_type else None
        ) or secrets.token_hex(16)
        chunks: List[bytes] = []
        for name, values in value.items():
            if not isinstance(values, list):
                values = [values]
            for item in values:
                chunks.append(f"--{boundary}\r\n".encode("ascii"))
                chunks.append(self._encode_part(name, item))
                chunks.append(b"\r\n")
        chunks.append(f"--{boundary}--\r\n".encode("ascii"))

        if self.enable_logging_request_details:
            logger.debug("Encoding multipart data %s", dict(value))
        else:
            logger.debug("Encoding multipart data %s (content masked)", list(value))
        return EncodedBody(
            content=b"".join(chunks),
            media_type=f"{subtype or MULTIPART_FORM_DATA};boundary={boundary}",
        )

    def _encode_part(self, name: str, item: Any) -> bytes:
        filename: Optional[str] = None
        if isinstance(item, Part):
            headers = dict(item.headers)
            content = item.content
            filename = item.filename
        else:
            if isinstance(item, Path):
                filename = item.name
            writer = next(
                (w for w in self.part_writers if w.can_write(type(item), None)),
                None,
            )
            if writer is None:
                raise EncodingError(
                    f"No part writer for {type(item).__name__} (part '{name}')"
                )
            body = writer.write(item, None)
            headers = {"Content-Type": body.media_type, **body.headers}
            content = body.content

        disposition = f'form-data; name="{name}"'
        if filename is not None:
            disposition += f'; filename="{filename}"'
        headers = {
            k: v for k, v in headers.items() if k.lower() != "content-disposition"
        }
        lines = [f"Content-Disposition: {disposition}"]
        lines.extend(f"{k}: {v}" for k, v in headers.items())
        head = "\r\n".join(lines) + "\r\n\r\n"
        return head.encode("utf-8") + content
