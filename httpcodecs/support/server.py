from typing import Any
from typing import List

from httpcodecs.message.multipart import DefaultPartHttpMessageReader
from httpcodecs.message.multipart import MultipartHttpMessageReader
from httpcodecs.message.multipart import PartEventHttpMessageReader
from httpcodecs.message.sse import ServerSentEventHttpMessageWriter
from httpcodecs.support.default_codecs import BaseDefaultCodecs
from httpcodecs.support.overrides import CodecRole


class ServerDefaultCodecs(BaseDefaultCodecs):
    """
    Server-side defaults: multipart readers and a server-sent event writer.
    """

    def multipart_reader(self, reader: Any) -> None:
        """
        Replace the default multipart readers. The given reader is
        registered even when defaults are turned off.
        """
        self.set_override(CodecRole.MULTIPART_READER, reader)

    def server_sent_event_encoder(self, encoder: Any) -> None:
        self.set_override(CodecRole.SSE_ENCODER, encoder)

    def extend_typed_readers(self, readers: List[Any]) -> None:
        reader = self.get_override(CodecRole.MULTIPART_READER)
        if reader is not None:
            self.add_codec(readers, reader)
            return
        if not self.register_defaults:
            return
        part_reader = DefaultPartHttpMessageReader()
        self.add_codec(readers, part_reader)
        self.add_codec(readers, MultipartHttpMessageReader(part_reader))
        self.add_codec(readers, PartEventHttpMessageReader())

    def extend_object_writers(self, writers: List[Any]) -> None:
        if not self.register_defaults:
            return
        encoder = self.get_override(CodecRole.SSE_ENCODER)
        if encoder is None:
            encoder = self.default_json_encoder()
        self.add_codec(writers, ServerSentEventHttpMessageWriter(encoder))
