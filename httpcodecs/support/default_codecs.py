"""
Default codec registration.

`BaseDefaultCodecs` assembles the ordered reader and writer categories
from the optional libraries that are present, caller overrides and the
scalar settings, and rebuilds them from scratch whenever one of those
changes. Client and server variants extend it through the `extend_*`
hooks.
"""

import copy
from enum import Enum
from typing import Any
from typing import Callable
from typing import Dict
from typing import List
from typing import Optional

from httpcodecs.capabilities import CapabilityFlags
from httpcodecs.capabilities import default_capabilities
from httpcodecs.codec.buffers import BytearrayDecoder
from httpcodecs.codec.buffers import BytearrayEncoder
from httpcodecs.codec.buffers import BytesDecoder
from httpcodecs.codec.buffers import BytesEncoder
from httpcodecs.codec.buffers import MemoryviewDecoder
from httpcodecs.codec.buffers import MemoryviewEncoder
from httpcodecs.codec.string import StringDecoder
from httpcodecs.codec.string import StringEncoder
from httpcodecs.interfaces import CodecConsumer
from httpcodecs.log_config import logger
from httpcodecs.message.base import DecoderHttpMessageReader
from httpcodecs.message.base import EncoderHttpMessageWriter
from httpcodecs.message.form import FormHttpMessageReader
from httpcodecs.message.resource import ResourceHttpMessageReader
from httpcodecs.message.resource import ResourceHttpMessageWriter
from httpcodecs.support.overrides import CodecRole
from httpcodecs.support.overrides import OverrideStore
from httpcodecs.support.propagator import ConfigPropagator


class Category(str, Enum):
    TYPED_READERS = "typed-readers"
    OBJECT_READERS = "object-readers"
    CATCH_ALL_READERS = "catch-all-readers"
    TYPED_WRITERS = "typed-writers"
    OBJECT_WRITERS = "object-writers"
    CATCH_ALL_WRITERS = "catch-all-writers"


READER_CATEGORIES = (
    Category.TYPED_READERS,
    Category.OBJECT_READERS,
    Category.CATCH_ALL_READERS,
)
WRITER_CATEGORIES = (
    Category.TYPED_WRITERS,
    Category.OBJECT_WRITERS,
    Category.CATCH_ALL_WRITERS,
)


# Factories for codecs backed by optional libraries import lazily so the
# registry loads without them.


def _msgspec_json_decoder() -> Any:
    from httpcodecs.codec.msgspec_codec import MsgspecJsonDecoder

    return MsgspecJsonDecoder()


def _msgspec_json_encoder() -> Any:
    from httpcodecs.codec.msgspec_codec import MsgspecJsonEncoder

    return MsgspecJsonEncoder()


def _pydantic_json_decoder() -> Any:
    from httpcodecs.codec.json_codec import PydanticJsonDecoder

    return PydanticJsonDecoder()


def _pydantic_json_encoder() -> Any:
    from httpcodecs.codec.json_codec import PydanticJsonEncoder

    return PydanticJsonEncoder()


def _msgpack_decoder() -> Any:
    from httpcodecs.codec.msgpack_codec import MsgpackDecoder

    return MsgpackDecoder()


def _msgpack_encoder() -> Any:
    from httpcodecs.codec.msgpack_codec import MsgpackEncoder

    return MsgpackEncoder()


def _avro_decoder() -> Any:
    from httpcodecs.codec.avro_codec import AvroDecoder

    return AvroDecoder()


def _avro_encoder() -> Any:
    from httpcodecs.codec.avro_codec import AvroEncoder

    return AvroEncoder()


def _xml_decoder() -> Any:
    from httpcodecs.codec.xml_codec import XmlDecoder

    return XmlDecoder()


def _xml_encoder() -> Any:
    from httpcodecs.codec.xml_codec import XmlEncoder

    return XmlEncoder()


def _protobuf_decoder() -> Any:
    from httpcodecs.codec.protobuf_codec import ProtobufDecoder

    return ProtobufDecoder()


def _protobuf_encoder() -> Any:
    from httpcodecs.codec.protobuf_codec import ProtobufEncoder

    return ProtobufEncoder()


def _betterproto_decoder() -> Any:
    from httpcodecs.codec.betterproto_codec import BetterprotoDecoder

    return BetterprotoDecoder()


def _betterproto_encoder() -> Any:
    from httpcodecs.codec.betterproto_codec import BetterprotoEncoder

    return BetterprotoEncoder()


def _protobuf_writer(encoder: Any) -> Any:
    from httpcodecs.message.protobuf import ProtobufHttpMessageWriter

    return ProtobufHttpMessageWriter(encoder)


class BaseDefaultCodecs:
    """
    Default readers and writers common to clients and servers.

    Categories are rebuilt on construction and after every change to
    overrides or settings, so reads always see a complete state.
    """

    def __init__(self, capabilities: Optional[CapabilityFlags] = None) -> None:
        self.capabilities = capabilities or default_capabilities()
        self._overrides = OverrideStore(on_change=self._on_config_change)
        self._propagator = ConfigPropagator(self._overrides)
        self._categories: Dict[Category, List[Any]] = {}
        self._listeners: List[Callable[[], None]] = []
        self.rebuild()

    # ---- rebuild ----------------------------------------------------------

    def _on_config_change(self) -> None:
        self.rebuild()

    def rebuild(self) -> None:
        """
        Clear and reassemble every category, then notify listeners.
        """
        self._overrides.reset_defaults()
        self._categories = {c: self.assemble(c) for c in Category}
        logger.debug(
            "Rebuilt default codecs: %s",
            {c.value: len(v) for c, v in self._categories.items()},
        )
        for listener in list(self._listeners):
            listener()

    def add_rebuild_listener(self, listener: Callable[[], None]) -> None:
        self._listeners.append(listener)

    def assemble(self, category: Category) -> List[Any]:
        """
        Build a fresh, propagated list of codecs for `category`.
        """
        if category is Category.TYPED_READERS:
            readers = self._default_typed_readers()
            self.extend_typed_readers(readers)
            return readers
        if category is Category.OBJECT_READERS:
            readers = self._default_object_readers()
            self.extend_object_readers(readers)
            return readers
        if category is Category.CATCH_ALL_READERS:
            readers = []
            if self.register_defaults:
                self.add_codec(
                    readers, DecoderHttpMessageReader(StringDecoder.all_mime_types())
                )
            return readers
        if category is Category.TYPED_WRITERS:
            writers = self.base_typed_writers()
            self.extend_typed_writers(writers)
            return writers
        if category is Category.OBJECT_WRITERS:
            writers = self.base_object_writers()
            self.extend_object_writers(writers)
            return writers
        if category is Category.CATCH_ALL_WRITERS:
            writers = []
            if self.register_defaults:
                self.add_codec(
                    writers, EncoderHttpMessageWriter(StringEncoder.all_mime_types())
                )
            return writers
        raise ValueError(f"Unknown category: {category!r}")

    def add_codec(self, codecs: List[Any], codec: Any) -> None:
        """
        Apply the shared settings to `codec` and append it.
        """
        self._propagator.apply(codec)
        codecs.append(codec)

    @property
    def propagator(self) -> ConfigPropagator:
        return self._propagator

    def codec_for(self, role: CodecRole, factory: Callable[[], Any]) -> Any:
        return self._overrides.get_override_or_default(role, factory)

    def has_override(self, role: CodecRole) -> bool:
        return self._overrides.has_override(role)

    # ---- default categories -----------------------------------------------

    def _default_typed_readers(self) -> List[Any]:
        readers: List[Any] = []
        if not self.register_defaults:
            return readers
        caps = self.capabilities
        self.add_codec(readers, DecoderHttpMessageReader(BytesDecoder()))
        self.add_codec(readers, DecoderHttpMessageReader(BytearrayDecoder()))
        self.add_codec(readers, DecoderHttpMessageReader(MemoryviewDecoder()))
        self.add_codec(readers, ResourceHttpMessageReader())
        self.add_codec(
            readers, DecoderHttpMessageReader(StringDecoder.text_plain_only())
        )
        # native protobuf wins over the betterproto fallback
        if caps.protobuf:
            decoder = self.codec_for(CodecRole.PROTOBUF_DECODER, _protobuf_decoder)
            self.add_codec(readers, DecoderHttpMessageReader(decoder))
        elif caps.betterproto:
            decoder = self.codec_for(
                CodecRole.BETTERPROTO_DECODER, _betterproto_decoder
            )
            self.add_codec(readers, DecoderHttpMessageReader(decoder))
        self.add_codec(readers, FormHttpMessageReader())
        return readers

    def _default_object_readers(self) -> List[Any]:
        readers: List[Any] = []
        if not self.register_defaults:
            return readers
        caps = self.capabilities
        if caps.msgspec:
            decoder = self.codec_for(
                CodecRole.MSGSPEC_JSON_DECODER, _msgspec_json_decoder
            )
            self.add_codec(readers, DecoderHttpMessageReader(decoder))
        if caps.pydantic:
            self.add_codec(readers, DecoderHttpMessageReader(self.json_decoder()))
        if caps.msgpack:
            decoder = self.codec_for(CodecRole.MSGPACK_DECODER, _msgpack_decoder)
            self.add_codec(readers, DecoderHttpMessageReader(decoder))
        if caps.fastavro:
            decoder = self.codec_for(CodecRole.AVRO_DECODER, _avro_decoder)
            self.add_codec(readers, DecoderHttpMessageReader(decoder))
        if caps.xml:
            decoder = self.codec_for(CodecRole.XML_DECODER, _xml_decoder)
            self.add_codec(readers, DecoderHttpMessageReader(decoder))
        return readers

    def base_typed_writers(self) -> List[Any]:
        """
        Typed writers common to client and server, without extensions.
        """
        writers: List[Any] = []
        if not self.register_defaults:
            return writers
        caps = self.capabilities
        self.add_codec(writers, EncoderHttpMessageWriter(BytesEncoder()))
        self.add_codec(writers, EncoderHttpMessageWriter(BytearrayEncoder()))
        self.add_codec(writers, EncoderHttpMessageWriter(MemoryviewEncoder()))
        self.add_codec(writers, ResourceHttpMessageWriter())
        self.add_codec(
            writers, EncoderHttpMessageWriter(StringEncoder.text_plain_only())
        )
        if caps.protobuf:
            encoder = self.codec_for(CodecRole.PROTOBUF_ENCODER, _protobuf_encoder)
            self.add_codec(writers, _protobuf_writer(encoder))
        elif caps.betterproto:
            encoder = self.codec_for(
                CodecRole.BETTERPROTO_ENCODER, _betterproto_encoder
            )
            self.add_codec(writers, EncoderHttpMessageWriter(encoder))
        return writers

    def base_object_writers(self) -> List[Any]:
        """
        Object writers common to client and server, without extensions.
        """
        writers: List[Any] = []
        if not self.register_defaults:
            return writers
        caps = self.capabilities
        if caps.msgspec:
            encoder = self.codec_for(
                CodecRole.MSGSPEC_JSON_ENCODER, _msgspec_json_encoder
            )
            self.add_codec(writers, EncoderHttpMessageWriter(encoder))
        if caps.pydantic:
            self.add_codec(writers, EncoderHttpMessageWriter(self.json_encoder()))
        if caps.msgpack:
            encoder = self.codec_for(CodecRole.MSGPACK_ENCODER, _msgpack_encoder)
            self.add_codec(writers, EncoderHttpMessageWriter(encoder))
        if caps.fastavro:
            encoder = self.codec_for(CodecRole.AVRO_ENCODER, _avro_encoder)
            self.add_codec(writers, EncoderHttpMessageWriter(encoder))
        if caps.xml:
            encoder = self.codec_for(CodecRole.XML_ENCODER, _xml_encoder)
            self.add_codec(writers, EncoderHttpMessageWriter(encoder))
        return writers

    # ---- extension hooks --------------------------------------------------

    # Hooks run whether or not defaults are registered; implementations
    # must only add caller-supplied codecs when `register_defaults` is off.

    def extend_typed_readers(self, readers: List[Any]) -> None:
        pass

    def extend_object_readers(self, readers: List[Any]) -> None:
        pass

    def extend_typed_writers(self, writers: List[Any]) -> None:
        pass

    def extend_object_writers(self, writers: List[Any]) -> None:
        pass

    # ---- shared JSON codecs -----------------------------------------------

    def json_decoder(self) -> Any:
        return self.codec_for(CodecRole.PYDANTIC_JSON_DECODER, _pydantic_json_decoder)

    def json_encoder(self) -> Any:
        return self.codec_for(CodecRole.PYDANTIC_JSON_ENCODER, _pydantic_json_encoder)

    def default_json_decoder(self) -> Optional[Any]:
        """
        JSON decoder for nested use (e.g. event data): pydantic when
        available, else msgspec, else None.
        """
        if self.capabilities.pydantic:
            return self.json_decoder()
        if self.capabilities.msgspec:
            return self.codec_for(
                CodecRole.MSGSPEC_JSON_DECODER, _msgspec_json_decoder
            )
        return None

    def default_json_encoder(self) -> Optional[Any]:
        if self.capabilities.pydantic:
            return self.json_encoder()
        if self.capabilities.msgspec:
            return self.codec_for(
                CodecRole.MSGSPEC_JSON_ENCODER, _msgspec_json_encoder
            )
        return None

    # ---- getters ----------------------------------------------------------

    def get_category(self, category: Category) -> List[Any]:
        return list(self._categories.get(category, []))

    @property
    def typed_readers(self) -> List[Any]:
        return self.get_category(Category.TYPED_READERS)

    @property
    def object_readers(self) -> List[Any]:
        return self.get_category(Category.OBJECT_READERS)

    @property
    def catch_all_readers(self) -> List[Any]:
        return self.get_category(Category.CATCH_ALL_READERS)

    @property
    def typed_writers(self) -> List[Any]:
        return self.get_category(Category.TYPED_WRITERS)

    @property
    def object_writers(self) -> List[Any]:
        return self.get_category(Category.OBJECT_WRITERS)

    @property
    def catch_all_writers(self) -> List[Any]:
        return self.get_category(Category.CATCH_ALL_WRITERS)

    # ---- settings ---------------------------------------------------------

    @property
    def max_in_memory_size(self) -> Optional[int]:
        return self._overrides.config.max_in_memory_size

    @max_in_memory_size.setter
    def max_in_memory_size(self, size: int) -> None:
        self._overrides.set_max_in_memory_size(size)

    @property
    def enable_logging_request_details(self) -> Optional[bool]:
        return self._overrides.config.enable_logging_request_details

    @enable_logging_request_details.setter
    def enable_logging_request_details(self, enable: bool) -> None:
        self._overrides.set_enable_logging_request_details(enable)

    @property
    def register_defaults(self) -> bool:
        return self._overrides.config.register_defaults

    @register_defaults.setter
    def register_defaults(self, register: bool) -> None:
        self._overrides.set_register_defaults(register)

    def configure_default_codec(self, consumer: CodecConsumer) -> None:
        """
        Register a hook called with every default codec (unwrapped) after
        the shared settings were applied. Hooks run in registration order.
        """
        self._overrides.add_codec_consumer(consumer)

    # ---- overrides --------------------------------------------------------

    def set_override(self, role: CodecRole, codec: Any) -> None:
        self._overrides.set_override(role, codec)

    def get_override(self, role: CodecRole) -> Optional[Any]:
        return self._overrides.get_override(role)

    def msgspec_json_decoder(self, decoder: Any) -> None:
        self.set_override(CodecRole.MSGSPEC_JSON_DECODER, decoder)

    def msgspec_json_encoder(self, encoder: Any) -> None:
        self.set_override(CodecRole.MSGSPEC_JSON_ENCODER, encoder)

    def pydantic_json_decoder(self, decoder: Any) -> None:
        self.set_override(CodecRole.PYDANTIC_JSON_DECODER, decoder)

    def pydantic_json_encoder(self, encoder: Any) -> None:
        self.set_override(CodecRole.PYDANTIC_JSON_ENCODER, encoder)

    def msgpack_decoder(self, decoder: Any) -> None:
        self.set_override(CodecRole.MSGPACK_DECODER, decoder)

    def msgpack_encoder(self, encoder: Any) -> None:
        self.set_override(CodecRole.MSGPACK_ENCODER, encoder)

    def avro_decoder(self, decoder: Any) -> None:
        self.set_override(CodecRole.AVRO_DECODER, decoder)

    def avro_encoder(self, encoder: Any) -> None:
        self.set_override(CodecRole.AVRO_ENCODER, encoder)

    def xml_decoder(self, decoder: Any) -> None:
        self.set_override(CodecRole.XML_DECODER, decoder)

    def xml_encoder(self, encoder: Any) -> None:
        self.set_override(CodecRole.XML_ENCODER, encoder)

    def protobuf_decoder(self, decoder: Any) -> None:
        self.set_override(CodecRole.PROTOBUF_DECODER, decoder)

    def protobuf_encoder(self, encoder: Any) -> None:
        self.set_override(CodecRole.PROTOBUF_ENCODER, encoder)

    def betterproto_decoder(self, decoder: Any) -> None:
        self.set_override(CodecRole.BETTERPROTO_DECODER, decoder)

    def betterproto_encoder(self, encoder: Any) -> None:
        self.set_override(CodecRole.BETTERPROTO_ENCODER, encoder)

    # ---- copy -------------------------------------------------------------

    def clone(self) -> "BaseDefaultCodecs":
        """
        Independent copy with the same settings and copies of the
        overrides, its categories rebuilt from them. Rebuild listeners are
        not carried over.
        """
        other = copy.copy(self)
        other._overrides = self._overrides.copy(on_change=other._on_config_change)
        other._propagator = ConfigPropagator(other._overrides)
        other._listeners = []
        other.rebuild()
        return other
