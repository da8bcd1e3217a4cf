import pytest

from httpcodecs.capabilities import CapabilityFlags
from httpcodecs.message.base import unwrap
from httpcodecs.support.configurer import ClientCodecConfigurer
from httpcodecs.support.configurer import ServerCodecConfigurer
from httpcodecs.support.default_codecs import BaseDefaultCodecs


@pytest.fixture
def all_capabilities():
    # everything the test extra installs; betterproto stays off
    return CapabilityFlags(
        pydantic=True,
        msgspec=True,
        msgpack=True,
        fastavro=True,
        protobuf=True,
        xml=True,
    )


@pytest.fixture
def no_capabilities():
    return CapabilityFlags()


@pytest.fixture
def default_codecs(all_capabilities):
    return BaseDefaultCodecs(all_capabilities)


@pytest.fixture
def server_configurer(all_capabilities):
    return ServerCodecConfigurer.create(all_capabilities)


@pytest.fixture
def client_configurer(all_capabilities):
    return ClientCodecConfigurer.create(all_capabilities)


@pytest.fixture
def codec_names():
    def _names(handles):
        return [type(unwrap(h)).__name__ for h in handles]

    return _names


class FakeDecoder:
    """Decoder test double exposing both configurable settings."""

    def __init__(self, target=bytes, media_type="application/fake"):
        self.target = target
        self.media_type = media_type
        self.max_in_memory_size = 1
        self.enable_logging_request_details = False

    def can_decode(self, target, media_type):
        return target is self.target and media_type in (None, self.media_type)

    def decode(self, data, target, media_type=None):
        return data

    def decodable_media_types(self):
        return [self.media_type]


class FakeEncoder:
    def __init__(self, value_type=bytes, media_type="application/fake"):
        self.value_type = value_type
        self.media_type = media_type

    def can_encode(self, value_type, media_type):
        return value_type is self.value_type and media_type in (
            None,
            self.media_type,
        )

    def encode(self, value, media_type=None):
        return bytes(value)

    def encodable_media_types(self):
        return [self.media_type]


@pytest.fixture
def make_decoder():
    return FakeDecoder


@pytest.fixture
def make_encoder():
    return FakeEncoder


@pytest.fixture
def fastapi_app(server_configurer):
    from typing import Any
    from typing import Dict

    from fastapi import Depends
    from fastapi import FastAPI
    from fastapi import Header

    from httpcodecs.fastapi_utils import body_reader
    from httpcodecs.fastapi_utils import negotiated_response

    app = FastAPI()
    items: Dict[str, Any] = {}

    @app.post("/items/{key}")
    async def put_item(key: str, item: Any = Depends(body_reader(server_configurer, dict))):
        items[key] = item
        return negotiated_response(server_configurer, {"stored": key}, status_code=201)

    @app.get("/items/{key}")
    async def get_item(key: str, accept: str = Header("*/*")):
        return negotiated_response(server_configurer, items[key], accept)

    @app.post("/echo")
    async def echo(text: str = Depends(body_reader(server_configurer, str))):
        return negotiated_response(server_configurer, text.upper(), "text/plain")

    return app
