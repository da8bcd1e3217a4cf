from httpcodecs.message.base import unwrap
from httpcodecs.message.multipart import DefaultPartHttpMessageReader
from httpcodecs.message.multipart import MultipartHttpMessageReader
from httpcodecs.message.sse import ServerSentEventHttpMessageReader
from httpcodecs.message.sse import ServerSentEventHttpMessageWriter
from httpcodecs.support.client import ClientDefaultCodecs
from httpcodecs.support.server import ServerDefaultCodecs


def test_server_adds_multipart_readers(all_capabilities, codec_names):
    codecs = ServerDefaultCodecs(all_capabilities)
    assert codec_names(codecs.typed_readers)[-4:] == [
        "FormHttpMessageReader",
        "DefaultPartHttpMessageReader",
        "MultipartHttpMessageReader",
        "PartEventHttpMessageReader",
    ]


def test_server_multipart_reader_shares_part_reader(all_capabilities):
    codecs = ServerDefaultCodecs(all_capabilities)
    part_reader, multipart = codecs.typed_readers[-3:-1]
    assert isinstance(multipart, MultipartHttpMessageReader)
    assert multipart.part_reader is part_reader


def test_server_sse_writer_uses_json_encoder(all_capabilities):
    codecs = ServerDefaultCodecs(all_capabilities)
    writer = codecs.object_writers[-1]
    assert isinstance(writer, ServerSentEventHttpMessageWriter)
    assert writer.encoder is unwrap(codecs.object_writers[1])


def test_server_sse_encoder_override(all_capabilities, make_encoder):
    codecs = ServerDefaultCodecs(all_capabilities)
    encoder = make_encoder(value_type=dict, media_type="application/json")
    codecs.server_sent_event_encoder(encoder)
    assert codecs.object_writers[-1].encoder is encoder


def test_server_multipart_override_kept_without_defaults(all_capabilities):
    codecs = ServerDefaultCodecs(all_capabilities)
    custom = MultipartHttpMessageReader(DefaultPartHttpMessageReader())
    codecs.multipart_reader(custom)
    codecs.register_defaults = False

    assert codecs.typed_readers == [custom]
    assert codecs.object_writers == []


def test_server_multipart_override_replaces_defaults(all_capabilities, codec_names):
    codecs = ServerDefaultCodecs(all_capabilities)
    custom = MultipartHttpMessageReader(DefaultPartHttpMessageReader())
    codecs.multipart_reader(custom)

    readers = codecs.typed_readers
    assert readers[-1] is custom
    assert "PartEventHttpMessageReader" not in codec_names(readers)


def test_server_size_limit_reaches_part_reader(all_capabilities):
    codecs = ServerDefaultCodecs(all_capabilities)
    codecs.max_in_memory_size = 333
    multipart = codecs.typed_readers[-2]
    assert multipart.part_reader.max_in_memory_size == 333


def test_client_adds_sse_reader(all_capabilities):
    codecs = ClientDefaultCodecs(all_capabilities)
    reader = codecs.object_readers[-1]
    assert isinstance(reader, ServerSentEventHttpMessageReader)
    assert reader.decoder is unwrap(codecs.object_readers[1])


def test_client_sse_decoder_override(all_capabilities, make_decoder):
    codecs = ClientDefaultCodecs(all_capabilities)
    decoder = make_decoder(target=object, media_type="application/json")
    codecs.server_sent_event_decoder(decoder)
    assert codecs.object_readers[-1].decoder is decoder


def test_client_multipart_writer(all_capabilities, codec_names):
    codecs = ClientDefaultCodecs(all_capabilities)
    writer = codecs.typed_writers[-1]
    assert type(writer).__name__ == "MultipartHttpMessageWriter"
    assert codec_names(writer.part_writers)[:6] == [
        "BytesEncoder",
        "BytearrayEncoder",
        "MemoryviewEncoder",
        "ResourceHttpMessageWriter",
        "StringEncoder",
        "ProtobufEncoder",
    ]
    assert type(writer.form_writer).__name__ == "FormHttpMessageWriter"


def test_client_logging_flag_reaches_form_writer(all_capabilities):
    codecs = ClientDefaultCodecs(all_capabilities)
    codecs.enable_logging_request_details = True
    writer = codecs.typed_writers[-1]
    assert writer.enable_logging_request_details is True
    assert writer.form_writer.enable_logging_request_details is True


def test_client_without_defaults_is_empty(all_capabilities):
    codecs = ClientDefaultCodecs(all_capabilities)
    codecs.register_defaults = False
    assert codecs.object_readers == []
    assert codecs.typed_writers == []
