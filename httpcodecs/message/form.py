from collections.abc import Mapping
from typing import Any
from typing import Dict
from typing import List
from typing import Optional
from urllib.parse import parse_qs
from urllib.parse import urlencode

from httpcodecs.config import DEFAULT_MAX_IN_MEMORY_SIZE
from httpcodecs.exceptions import DataBufferLimitError
from httpcodecs.exceptions import DecodingError
from httpcodecs.interfaces import EncodedBody
from httpcodecs.log_config import logger
from httpcodecs.media_type import APPLICATION_FORM_URLENCODED
from httpcodecs.media_type import charset
from httpcodecs.media_type import is_compatible

FormData = Dict[str, List[str]]


def _is_form(media_type: Optional[str]) -> bool:
    return media_type is None or is_compatible(
        APPLICATION_FORM_URLENCODED, media_type
    )


class FormHttpMessageReader:
    """
    Reads "application/x-www-form-urlencoded" bodies into a dict of
    field name → list of values.
    """

    def __init__(self) -> None:
        self.max_in_memory_size: int = DEFAULT_MAX_IN_MEMORY_SIZE
        self.enable_logging_request_details: bool = False

    def readable_media_types(self) -> List[str]:
        return [APPLICATION_FORM_URLENCODED]

    def can_read(self, target: Any, media_type: Optional[str]) -> bool:
        return target in (dict, Mapping) and _is_form(media_type)

    def read(
        self, body: bytes, target: Any, media_type: Optional[str] = None
    ) -> FormData:
        limit = self.max_in_memory_size
        if 0 <= limit < len(body):
            raise DataBufferLimitError(limit)
        encoding = charset(media_type)
        try:
            form = parse_qs(
                body.decode(encoding),
                keep_blank_values=True,
                encoding=encoding,
            )
        except (LookupError, UnicodeDecodeError) as e:
            raise DecodingError(f"Form decoding error: {e}") from e
        if self.enable_logging_request_details:
            logger.debug("Read form fields %s", form)
        else:
            logger.debug("Read form fields %s (content masked)", list(form))
        return form


class FormHttpMessageWriter:
    """
    Writes a mapping as "application/x-www-form-urlencoded". List values
    produce repeated fields.
    """

    def __init__(self) -> None:
        self.enable_logging_request_details: bool = False

    def writable_media_types(self) -> List[str]:
        return [APPLICATION_FORM_URLENCODED]

    def can_write(self, value_type: Any, media_type: Optional[str]) -> bool:
        return (
            isinstance(value_type, type)
            and issubclass(value_type, Mapping)
            and _is_form(media_type)
        )

    def write(
        self, value: Any, media_type: Optional[str] = None
    ) -> EncodedBody:
        encoding = charset(media_type)
        if self.enable_logging_request_details:
            logger.debug("Writing form fields %s", dict(value))
        else:
            logger.debug("Writing form fields %s (content masked)", list(value))
        content = urlencode(value, doseq=True, encoding=encoding)
        return EncodedBody(
            content=content.encode(encoding),
            media_type=f"{APPLICATION_FORM_URLENCODED};charset={encoding}",
        )
