import io
from typing import Any
from typing import Dict
from typing import Optional

from fastavro import parse_schema
from fastavro import schemaless_reader
from fastavro import schemaless_writer

from httpcodecs.codec.base import AbstractBufferingDecoder
from httpcodecs.codec.base import AbstractEncoder
from httpcodecs.exceptions import DecodingError
from httpcodecs.exceptions import EncodingError
from httpcodecs.media_type import APPLICATION_AVRO


class _AvroSchemaMixin:
    """
    Holds the parsed fastavro schema. Without a schema the codec declines
    every payload, so a default instance stays inert until configured.
    """

    _parsed_schema: Optional[Any] = None

    @property
    def schema(self) -> Optional[Any]:
        return self._parsed_schema

    @schema.setter
    def schema(self, schema_dict: Optional[Dict[str, Any]]) -> None:
        # schema_dict should be a Python dict representing your Avro schema
        # (e.g. loaded from JSON).
        self._parsed_schema = (
            parse_schema(schema_dict) if schema_dict is not None else None
        )


class AvroDecoder(_AvroSchemaMixin, AbstractBufferingDecoder):
    """
    Avro binary → dict decoder using a fastavro schema.
    """

    media_types = (APPLICATION_AVRO,)

    def __init__(self, schema_dict: Optional[Dict[str, Any]] = None) -> None:
        super().__init__()
        self.schema = schema_dict

    def can_decode(self, target: Any, media_type: Optional[str]) -> bool:
        return (
            self._parsed_schema is not None
            and target in (dict, object)
            and super().can_decode(target, media_type)
        )

    def _decode(
        self, data: bytes, target: Any, media_type: Optional[str]
    ) -> Any:
        if self._parsed_schema is None:
            raise DecodingError("No Avro schema configured")
        # directly seed the buffer with a memoryview
        buf = io.BytesIO(memoryview(data))
        try:
            # fastavro schemaless_reader wants both writer and reader schema
            return schemaless_reader(
                buf, self._parsed_schema, self._parsed_schema
            )
        except (EOFError, ValueError) as e:
            raise DecodingError(f"Avro decoding error: {e}") from e


class AvroEncoder(_AvroSchemaMixin, AbstractEncoder):
    """
    dict → Avro binary encoder using a fastavro schema.
    """

    media_types = (APPLICATION_AVRO,)

    def __init__(self, schema_dict: Optional[Dict[str, Any]] = None) -> None:
        self.schema = schema_dict

    def can_encode(self, value_type: Any, media_type: Optional[str]) -> bool:
        return (
            self._parsed_schema is not None
            and value_type in (dict, object)
            and super().can_encode(value_type, media_type)
        )

    def encode(self, value: Any, media_type: Optional[str] = None) -> bytes:
        if self._parsed_schema is None:
            raise EncodingError("No Avro schema configured")
        buf = io.BytesIO()
        try:
            schemaless_writer(buf, self._parsed_schema, value)
        except (TypeError, ValueError) as e:
            raise EncodingError(f"Avro encoding error: {e}") from e
        return buf.getvalue()
