import pytest

from httpcodecs.codec.json_codec import PydanticJsonDecoder
from httpcodecs.codec.json_codec import PydanticJsonEncoder
from httpcodecs.codec.string import StringEncoder
from httpcodecs.exceptions import DataBufferLimitError
from httpcodecs.exceptions import DecodingError
from httpcodecs.exceptions import EncodingError
from httpcodecs.message.base import EncoderHttpMessageWriter
from httpcodecs.message.form import FormHttpMessageReader
from httpcodecs.message.form import FormHttpMessageWriter
from httpcodecs.message.multipart import DefaultPartHttpMessageReader
from httpcodecs.message.multipart import MultipartHttpMessageReader
from httpcodecs.message.multipart import MultipartHttpMessageWriter
from httpcodecs.message.multipart import Part
from httpcodecs.message.multipart import PartEvent
from httpcodecs.message.multipart import PartEventHttpMessageReader
from httpcodecs.message.sse import ServerSentEvent
from httpcodecs.message.sse import ServerSentEventHttpMessageReader
from httpcodecs.message.sse import ServerSentEventHttpMessageWriter

FORM = "application/x-www-form-urlencoded"
MULTIPART = "multipart/form-data; boundary=xyz"
MULTIPART_BODY = (
    b"--xyz\r\n"
    b'Content-Disposition: form-data; name="field"\r\n'
    b"\r\n"
    b"value\r\n"
    b"--xyz\r\n"
    b'Content-Disposition: form-data; name="file"; filename="a.txt"\r\n'
    b"Content-Type: text/plain\r\n"
    b"\r\n"
    b"hello\r\n"
    b"--xyz--\r\n"
)


# ---- form -----------------------------------------------------------------


def test_form_reader_keeps_repeated_and_blank_fields():
    reader = FormHttpMessageReader()
    assert reader.can_read(dict, FORM)
    assert not reader.can_read(dict, "application/json")
    assert reader.read(b"a=1&a=2&b=", dict, FORM) == {"a": ["1", "2"], "b": [""]}


def test_form_reader_size_limit():
    reader = FormHttpMessageReader()
    reader.max_in_memory_size = 4
    with pytest.raises(DataBufferLimitError) as exc:
        reader.read(b"a=12345", dict, FORM)
    assert exc.value.limit == 4
    assert "Exceeded limit on max bytes to buffer : 4" in str(exc.value)


def test_form_writer():
    body = FormHttpMessageWriter().write({"a": ["1", "2"], "b": "x y"})
    assert body.content == b"a=1&a=2&b=x+y"
    assert body.media_type == "application/x-www-form-urlencoded;charset=utf-8"


# ---- multipart ------------------------------------------------------------


def test_part_reader():
    parts = DefaultPartHttpMessageReader().read(MULTIPART_BODY, Part, MULTIPART)
    assert [p.name for p in parts] == ["field", "file"]
    assert parts[0].text() == "value"
    assert not parts[0].is_file
    assert parts[1].filename == "a.txt"
    assert parts[1].content == b"hello"


def test_part_event_reader_marks_last():
    events = PartEventHttpMessageReader().read(MULTIPART_BODY, PartEvent, MULTIPART)
    assert [e.is_last for e in events] == [False, True]


def test_multipart_reader_groups_by_name():
    reader = MultipartHttpMessageReader(DefaultPartHttpMessageReader())
    assert reader.can_read(dict, MULTIPART)
    data = reader.read(MULTIPART_BODY, dict, MULTIPART)
    assert list(data) == ["field", "file"]
    assert data["file"][0].content == b"hello"


def test_part_size_limit():
    reader = DefaultPartHttpMessageReader()
    reader.max_in_memory_size = 3
    with pytest.raises(DataBufferLimitError):
        reader.read(MULTIPART_BODY, Part, MULTIPART)


def test_too_many_parts():
    reader = DefaultPartHttpMessageReader()
    reader.max_parts = 1
    with pytest.raises(DecodingError):
        reader.read(MULTIPART_BODY, Part, MULTIPART)


def test_missing_boundary():
    with pytest.raises(DecodingError):
        DefaultPartHttpMessageReader().read(MULTIPART_BODY, Part, "multipart/form-data")


def test_multipart_writer_encodes_each_value():
    part_writers = [EncoderHttpMessageWriter(StringEncoder.text_plain_only())]
    writer = MultipartHttpMessageWriter(part_writers, FormHttpMessageWriter())
    body = writer.write({"name": "x", "tags": ["a", "b"]}, "multipart/form-data;boundary=abc")

    assert body.media_type == "multipart/form-data;boundary=abc"
    assert body.content.startswith(
        b'--abc\r\nContent-Disposition: form-data; name="name"\r\n'
        b"Content-Type: text/plain\r\n\r\nx\r\n"
    )
    assert body.content.count(b'name="tags"') == 2
    assert body.content.endswith(b"--abc--\r\n")

    parts = DefaultPartHttpMessageReader().read(body.content, Part, body.media_type)
    assert [p.text() for p in parts] == ["x", "a", "b"]


def test_multipart_writer_delegates_urlencoded():
    writer = MultipartHttpMessageWriter([], FormHttpMessageWriter())
    assert writer.can_write(dict, FORM)
    body = writer.write({"a": "1"}, FORM)
    assert body.content == b"a=1"


def test_multipart_writer_without_part_writer():
    writer = MultipartHttpMessageWriter([])
    with pytest.raises(EncodingError):
        writer.write({"n": 1}, "multipart/form-data")


# ---- server-sent events ---------------------------------------------------

EVENT_STREAM = "text/event-stream"


def test_sse_reader_events():
    body = b"id:1\nevent:greet\ndata:hello\n\n: ping\ndata:line1\ndata:line2\n\n"
    events = ServerSentEventHttpMessageReader().read(body, ServerSentEvent, EVENT_STREAM)
    assert events[0].id == "1"
    assert events[0].event == "greet"
    assert events[0].data == "hello"
    assert events[1].comment == "ping"
    assert events[1].data == "line1\nline2"


def test_sse_reader_raw_data():
    body = b"data:a\n\ndata:b\n\n"
    reader = ServerSentEventHttpMessageReader()
    assert reader.read(body, str, EVENT_STREAM) == ["a", "b"]


def test_sse_reader_decodes_json_data():
    reader = ServerSentEventHttpMessageReader(PydanticJsonDecoder())
    body = b'data:{"a": 1}\n\ndata:{"a": 2}\n\n'
    assert reader.read(body, dict, EVENT_STREAM) == [{"a": 1}, {"a": 2}]


def test_sse_reader_without_decoder():
    with pytest.raises(DecodingError):
        ServerSentEventHttpMessageReader().read(b"data:{}\n\n", dict, EVENT_STREAM)


def test_sse_reader_size_limit():
    reader = ServerSentEventHttpMessageReader()
    reader.max_in_memory_size = 5
    with pytest.raises(DataBufferLimitError):
        reader.read(b"data:too long\n\n", str, EVENT_STREAM)


def test_sse_writer():
    writer = ServerSentEventHttpMessageWriter(PydanticJsonEncoder())
    body = writer.write(
        [ServerSentEvent(id="1", event="e", data={"a": 1}), "plain"],
        EVENT_STREAM,
    )
    assert body.media_type == EVENT_STREAM
    assert body.content == b'id:1\nevent:e\ndata:{"a":1}\n\ndata:plain\n\n'
