from typing import Any
from typing import Optional

from pydantic import TypeAdapter
from pydantic import ValidationError
from pydantic_core import PydanticSerializationError
from pydantic_core import to_json

from httpcodecs.codec.base import AbstractBufferingDecoder
from httpcodecs.codec.base import AbstractEncoder
from httpcodecs.exceptions import DecodingError
from httpcodecs.exceptions import EncodingError
from httpcodecs.media_type import APPLICATION_JSON
from httpcodecs.media_type import APPLICATION_JSON_SUFFIX


class PydanticJsonDecoder(AbstractBufferingDecoder):
    """
    JSON → value decoder validating against the target type with pydantic.
    Handles any target: models, dataclasses, containers or `object`.
    """

    media_types = (APPLICATION_JSON, APPLICATION_JSON_SUFFIX)

    def _decode(
        self, data: bytes, target: Any, media_type: Optional[str]
    ) -> Any:
        adapter: TypeAdapter[Any] = TypeAdapter(
            Any if target is object else target
        )
        try:
            return adapter.validate_json(data)
        except ValidationError as e:
            raise DecodingError(f"JSON decoding error: {e}") from e


class PydanticJsonEncoder(AbstractEncoder):
    """
    Value → JSON encoder using pydantic-core serialization.
    """

    media_types = (APPLICATION_JSON, APPLICATION_JSON_SUFFIX)

    def encode(self, value: Any, media_type: Optional[str] = None) -> bytes:
        try:
            return to_json(value)
        except PydanticSerializationError as e:
            raise EncodingError(f"JSON encoding error: {e}") from e
