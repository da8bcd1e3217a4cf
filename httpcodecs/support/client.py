from typing import Any
from typing import List

from httpcodecs.message.form import FormHttpMessageWriter
from httpcodecs.message.multipart import MultipartHttpMessageWriter
from httpcodecs.message.sse import ServerSentEventHttpMessageReader
from httpcodecs.support.default_codecs import BaseDefaultCodecs
from httpcodecs.support.overrides import CodecRole


class ClientDefaultCodecs(BaseDefaultCodecs):
    """
    Client-side defaults: a server-sent event reader and a multipart writer.
    """

    def server_sent_event_decoder(self, decoder: Any) -> None:
        self.set_override(CodecRole.SSE_DECODER, decoder)

    def extend_object_readers(self, readers: List[Any]) -> None:
        if not self.register_defaults:
            return
        decoder = self.get_override(CodecRole.SSE_DECODER)
        if decoder is None:
            decoder = self.default_json_decoder()
        self.add_codec(readers, ServerSentEventHttpMessageReader(decoder))

    def extend_typed_writers(self, writers: List[Any]) -> None:
        if not self.register_defaults:
            return
        part_writers = self.base_typed_writers() + self.base_object_writers()
        self.add_codec(
            writers, MultipartHttpMessageWriter(part_writers, FormHttpMessageWriter())
        )
