from typing import Any
from typing import Dict
from typing import Optional

from httpcodecs.codec.protobuf_codec import ProtobufEncoder
from httpcodecs.message.base import EncoderHttpMessageWriter

X_PROTOBUF_SCHEMA_HEADER = "X-Protobuf-Schema"
X_PROTOBUF_MESSAGE_HEADER = "X-Protobuf-Message"


class ProtobufHttpMessageWriter(EncoderHttpMessageWriter):
    """
    Protobuf writer that also advertises the message descriptor
    through the X-Protobuf-* response headers.
    """

    def __init__(self, encoder: Optional[ProtobufEncoder] = None) -> None:
        super().__init__(encoder or ProtobufEncoder())

    def _extra_headers(self, value: Any) -> Dict[str, str]:
        descriptor = value.DESCRIPTOR
        return {
            X_PROTOBUF_SCHEMA_HEADER: descriptor.file.name,
            X_PROTOBUF_MESSAGE_HEADER: descriptor.full_name,
        }
