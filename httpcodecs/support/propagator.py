from typing import Any

from httpcodecs.interfaces import CompositeCodec
from httpcodecs.interfaces import RequestDetailsLogging
from httpcodecs.interfaces import SizeLimited
from httpcodecs.message.base import unwrap
from httpcodecs.support.overrides import OverrideStore


class ConfigPropagator:
    """
    Applies the configured size limit, request-details logging flag and
    codec consumers to a codec and, recursively, to the codecs it wraps.
    Settings a codec does not expose are skipped.
    """

    def __init__(self, store: OverrideStore) -> None:
        self._store = store

    def apply(self, codec: Any) -> None:
        if codec is None:
            return
        inner = unwrap(codec)
        targets = [inner] if inner is codec else [codec, inner]

        config = self._store.config
        for target in targets:
            if config.max_in_memory_size is not None and isinstance(
                target, SizeLimited
            ):
                target.max_in_memory_size = config.max_in_memory_size
            if config.enable_logging_request_details is not None and isinstance(
                target, RequestDetailsLogging
            ):
                target.enable_logging_request_details = (
                    config.enable_logging_request_details
                )

        # after the library settings, so callers get the last word
        for consumer in self._store.consumers:
            consumer(inner)

        if isinstance(inner, CompositeCodec):
            for nested in inner.nested_codecs():
                self.apply(nested)
