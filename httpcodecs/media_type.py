from typing import Dict
from typing import Optional

ALL = "*/*"
APPLICATION_JSON = "application/json"
APPLICATION_JSON_SUFFIX = "application/*+json"
APPLICATION_XML = "application/xml"
APPLICATION_XML_SUFFIX = "application/*+xml"
TEXT_XML = "text/xml"
APPLICATION_MSGPACK = "application/msgpack"
APPLICATION_X_MSGPACK = "application/x-msgpack"
APPLICATION_AVRO = "application/avro"
APPLICATION_PROTOBUF = "application/protobuf"
APPLICATION_X_PROTOBUF = "application/x-protobuf"
APPLICATION_OCTET_STREAM = "application/octet-stream"
APPLICATION_FORM_URLENCODED = "application/x-www-form-urlencoded"
MULTIPART_FORM_DATA = "multipart/form-data"
MULTIPART_MIXED = "multipart/mixed"
MULTIPART_RELATED = "multipart/related"
TEXT_PLAIN = "text/plain"
TEXT_EVENT_STREAM = "text/event-stream"

DEFAULT_CHARSET = "utf-8"


def base_type(media_type: str) -> str:
    # strip any charset params etc.
    return media_type.split(";", 1)[0].strip().lower()


def parameters(media_type: str) -> Dict[str, str]:
    params: Dict[str, str] = {}
    for part in media_type.split(";")[1:]:
        key, sep, value = part.partition("=")
        if sep:
            params[key.strip().lower()] = value.strip().strip('"')
    return params


def charset(media_type: Optional[str], default: str = DEFAULT_CHARSET) -> str:
    if media_type is None:
        return default
    return parameters(media_type).get("charset", default)


def is_concrete(media_type: str) -> bool:
    return "*" not in base_type(media_type)


def is_compatible(a: str, b: str) -> bool:
    """
    Symmetric match honouring "*/*", "type/*" and "type/*+suffix"
    wildcards on either side.
    """
    type_a, _, sub_a = base_type(a).partition("/")
    type_b, _, sub_b = base_type(b).partition("/")
    if type_a == "*" or type_b == "*":
        return True
    if type_a != type_b:
        return False
    if sub_a == sub_b or sub_a == "*" or sub_b == "*":
        return True
    for pattern, other in ((sub_a, sub_b), (sub_b, sub_a)):
        if pattern.startswith("*+") and other.endswith(pattern[1:]):
            return True
    return False


PROTOBUF_MEDIA_TYPES = (
    APPLICATION_PROTOBUF,
    APPLICATION_X_PROTOBUF,
    APPLICATION_OCTET_STREAM,
)
