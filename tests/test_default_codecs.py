import pytest

from httpcodecs.capabilities import CapabilityFlags
from httpcodecs.message.base import unwrap
from httpcodecs.support.default_codecs import BaseDefaultCodecs
from httpcodecs.support.default_codecs import Category

TYPED_READERS = [
    "BytesDecoder",
    "BytearrayDecoder",
    "MemoryviewDecoder",
    "ResourceDecoder",
    "StringDecoder",
    "ProtobufDecoder",
    "FormHttpMessageReader",
]
OBJECT_READERS = [
    "MsgspecJsonDecoder",
    "PydanticJsonDecoder",
    "MsgpackDecoder",
    "AvroDecoder",
    "XmlDecoder",
]
TYPED_WRITERS = [
    "BytesEncoder",
    "BytearrayEncoder",
    "MemoryviewEncoder",
    "ResourceHttpMessageWriter",
    "StringEncoder",
    "ProtobufEncoder",
]
OBJECT_WRITERS = [
    "MsgspecJsonEncoder",
    "PydanticJsonEncoder",
    "MsgpackEncoder",
    "AvroEncoder",
    "XmlEncoder",
]


def test_category_order(default_codecs, codec_names):
    assert codec_names(default_codecs.typed_readers) == TYPED_READERS
    assert codec_names(default_codecs.object_readers) == OBJECT_READERS
    assert codec_names(default_codecs.catch_all_readers) == ["StringDecoder"]
    assert codec_names(default_codecs.typed_writers) == TYPED_WRITERS
    assert codec_names(default_codecs.object_writers) == OBJECT_WRITERS
    assert codec_names(default_codecs.catch_all_writers) == ["StringEncoder"]


def test_text_plain_vs_catch_all_string_codecs(default_codecs):
    typed = unwrap(default_codecs.typed_readers[4])
    catch_all = unwrap(default_codecs.catch_all_readers[0])
    assert typed.can_decode(str, "text/plain")
    assert not typed.can_decode(str, "application/json")
    assert catch_all.can_decode(str, "application/json")


def test_same_inputs_same_order(all_capabilities, codec_names):
    first = BaseDefaultCodecs(all_capabilities)
    second = BaseDefaultCodecs(all_capabilities)
    for category in Category:
        assert codec_names(first.get_category(category)) == codec_names(
            second.get_category(category)
        )


def test_getter_returns_copy(default_codecs):
    readers = default_codecs.typed_readers
    readers.clear()
    assert default_codecs.typed_readers


def test_only_base_codecs_without_libraries(no_capabilities, codec_names):
    codecs = BaseDefaultCodecs(no_capabilities)
    assert codec_names(codecs.typed_readers) == [
        "BytesDecoder",
        "BytearrayDecoder",
        "MemoryviewDecoder",
        "ResourceDecoder",
        "StringDecoder",
        "FormHttpMessageReader",
    ]
    assert codecs.object_readers == []
    assert codecs.object_writers == []


def test_capability_gates_single_codec(codec_names):
    codecs = BaseDefaultCodecs(CapabilityFlags(pydantic=True, xml=True))
    assert codec_names(codecs.object_readers) == ["PydanticJsonDecoder", "XmlDecoder"]
    assert codec_names(codecs.object_writers) == ["PydanticJsonEncoder", "XmlEncoder"]


def test_override_replaces_default(default_codecs, make_decoder):
    custom = make_decoder(target=object, media_type="application/xml")
    default_codecs.xml_decoder(custom)

    readers = [unwrap(r) for r in default_codecs.object_readers]
    assert readers[-1] is custom
    assert "XmlDecoder" not in [type(r).__name__ for r in readers]


def test_override_ignored_without_capability(make_encoder, codec_names):
    codecs = BaseDefaultCodecs(CapabilityFlags(pydantic=True))
    codecs.msgpack_encoder(make_encoder(value_type=object))
    assert codec_names(codecs.object_writers) == ["PydanticJsonEncoder"]


def test_override_receives_settings(default_codecs, make_decoder):
    custom = make_decoder(target=object)
    default_codecs.max_in_memory_size = 4096
    default_codecs.avro_decoder(custom)
    assert custom.max_in_memory_size == 4096


def test_native_protobuf_wins_over_fallback(make_decoder, make_encoder):
    decoder = make_decoder(media_type="application/x-protobuf")
    encoder = make_encoder(media_type="application/x-protobuf")
    caps = CapabilityFlags(protobuf=True, betterproto=True)
    codecs = BaseDefaultCodecs(caps)
    codecs.betterproto_decoder(decoder)
    codecs.betterproto_encoder(encoder)

    readers = [type(unwrap(r)).__name__ for r in codecs.typed_readers]
    writers = [type(unwrap(w)).__name__ for w in codecs.typed_writers]
    assert "ProtobufDecoder" in readers
    assert "ProtobufEncoder" in writers
    assert "FakeDecoder" not in readers
    assert "FakeEncoder" not in writers


def test_fallback_protobuf_without_native(make_decoder, make_encoder):
    decoder = make_decoder(media_type="application/x-protobuf")
    encoder = make_encoder(media_type="application/x-protobuf")
    codecs = BaseDefaultCodecs(CapabilityFlags(betterproto=True))
    codecs.betterproto_decoder(decoder)
    codecs.betterproto_encoder(encoder)

    assert unwrap(codecs.typed_readers[5]) is decoder
    assert unwrap(codecs.typed_writers[5]) is encoder
    # never registered as an object codec
    assert codecs.object_readers == []
    assert codecs.object_writers == []


def test_register_defaults_off_empties_every_category(default_codecs):
    default_codecs.register_defaults = False
    for category in Category:
        assert default_codecs.get_category(category) == []


def test_register_defaults_back_on(default_codecs, codec_names):
    default_codecs.register_defaults = False
    default_codecs.register_defaults = True
    assert codec_names(default_codecs.typed_readers) == TYPED_READERS


def test_max_in_memory_size_applied(default_codecs):
    default_codecs.max_in_memory_size = 1000
    assert unwrap(default_codecs.typed_readers[0]).max_in_memory_size == 1000
    assert unwrap(default_codecs.object_readers[1]).max_in_memory_size == 1000
    # protobuf maps the setting onto its message size cap
    assert unwrap(default_codecs.typed_readers[5]).max_message_size == 1000
    assert default_codecs.catch_all_readers[0].decoder.max_in_memory_size == 1000


def test_logging_flag_applied(default_codecs):
    default_codecs.enable_logging_request_details = True
    form_reader = default_codecs.typed_readers[-1]
    assert form_reader.enable_logging_request_details is True


def test_same_setting_twice_rebuilds_once(default_codecs, monkeypatch):
    calls = []
    monkeypatch.setattr(default_codecs, "rebuild", lambda: calls.append(1))
    default_codecs.max_in_memory_size = 1024
    default_codecs.max_in_memory_size = 1024
    assert calls == [1]


def test_default_codecs_rebuilt_fresh(default_codecs):
    before = unwrap(default_codecs.object_readers[1])
    default_codecs.max_in_memory_size = 10
    after = unwrap(default_codecs.object_readers[1])
    assert before is not after
    assert after.max_in_memory_size == 10


def test_configure_default_codec_sees_every_codec(all_capabilities):
    codecs = BaseDefaultCodecs(all_capabilities)
    seen = []
    codecs.configure_default_codec(seen.append)
    expected = sum(len(codecs.get_category(c)) for c in Category)
    assert len(seen) == expected


def test_invalid_size_keeps_state(default_codecs, codec_names):
    with pytest.raises(ValueError):
        default_codecs.max_in_memory_size = -5
    assert default_codecs.max_in_memory_size is None
    assert codec_names(default_codecs.typed_readers) == TYPED_READERS


def test_none_override_rejected(default_codecs):
    with pytest.raises(ValueError):
        default_codecs.xml_encoder(None)


def test_clone_is_independent(default_codecs, codec_names):
    default_codecs.max_in_memory_size = 2048
    clone = default_codecs.clone()

    clone.register_defaults = False
    assert clone.typed_readers == []
    assert codec_names(default_codecs.typed_readers) == TYPED_READERS
    assert clone.max_in_memory_size == 2048

    default_codecs.max_in_memory_size = 4096
    assert clone.max_in_memory_size == 2048


def test_json_codecs_fall_back_to_msgspec():
    codecs = BaseDefaultCodecs(CapabilityFlags(msgspec=True))
    assert type(codecs.default_json_decoder()).__name__ == "MsgspecJsonDecoder"
    assert type(codecs.default_json_encoder()).__name__ == "MsgspecJsonEncoder"
    assert BaseDefaultCodecs(CapabilityFlags()).default_json_decoder() is None


def test_rebuild_is_repeatable(default_codecs, make_decoder, codec_names):
    custom = make_decoder(target=object, media_type="application/xml")
    default_codecs.xml_decoder(custom)
    before = {c: default_codecs.get_category(c) for c in Category}

    default_codecs.rebuild()

    for category in Category:
        after = default_codecs.get_category(category)
        assert codec_names(after) == codec_names(before[category])
    assert unwrap(default_codecs.object_readers[-1]) is custom


def test_clone_does_not_share_overrides(default_codecs, make_decoder):
    custom = make_decoder(target=object, media_type="application/xml")
    default_codecs.xml_decoder(custom)
    clone = default_codecs.clone()

    default_codecs.max_in_memory_size = 999

    assert custom.max_in_memory_size == 999
    copied = unwrap(clone.object_readers[-1])
    assert copied is not custom
    assert copied.max_in_memory_size == 1
    assert clone.max_in_memory_size is None
