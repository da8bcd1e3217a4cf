import copy
from enum import Enum
from typing import Any
from typing import Callable
from typing import Dict
from typing import List
from typing import Optional

from httpcodecs.config import CodecConfig
from httpcodecs.interfaces import CodecConsumer
from httpcodecs.log_config import logger


class CodecRole(str, Enum):
    """Overridable codec slots."""

    MSGSPEC_JSON_DECODER = "msgspec-json-decoder"
    MSGSPEC_JSON_ENCODER = "msgspec-json-encoder"
    PYDANTIC_JSON_DECODER = "pydantic-json-decoder"
    PYDANTIC_JSON_ENCODER = "pydantic-json-encoder"
    MSGPACK_DECODER = "msgpack-decoder"
    MSGPACK_ENCODER = "msgpack-encoder"
    AVRO_DECODER = "avro-decoder"
    AVRO_ENCODER = "avro-encoder"
    XML_DECODER = "xml-decoder"
    XML_ENCODER = "xml-encoder"
    PROTOBUF_DECODER = "protobuf-decoder"
    PROTOBUF_ENCODER = "protobuf-encoder"
    BETTERPROTO_DECODER = "betterproto-decoder"
    BETTERPROTO_ENCODER = "betterproto-encoder"
    SSE_DECODER = "sse-decoder"
    SSE_ENCODER = "sse-encoder"
    MULTIPART_READER = "multipart-reader"


class OverrideStore:
    """
    Caller-supplied codecs by role plus the scalar codec settings.

    Every effective change calls `on_change` exactly once; setting a value
    equal to the current one does nothing. Defaults obtained through
    `get_override_or_default` are built lazily and memoized until
    `reset_defaults()`.
    """

    def __init__(self, on_change: Callable[[], None]) -> None:
        self._on_change = on_change
        self._overrides: Dict[CodecRole, Any] = {}
        self._defaults: Dict[CodecRole, Any] = {}
        self._consumers: List[CodecConsumer] = []
        self.config = CodecConfig()

    # ---- codecs by role ---------------------------------------------------

    def set_override(self, role: CodecRole, codec: Any) -> None:
        if codec is None:
            raise ValueError(f"A codec is required for role '{role.value}'")
        if role in self._overrides and self._overrides[role] == codec:
            logger.debug("Override for '%s' unchanged", role.value)
            return
        self._overrides[role] = codec
        logger.info("Override registered for '%s': %r", role.value, codec)
        self._on_change()

    def get_override(self, role: CodecRole) -> Optional[Any]:
        return self._overrides.get(role)

    def has_override(self, role: CodecRole) -> bool:
        return role in self._overrides

    def get_override_or_default(
        self, role: CodecRole, factory: Callable[[], Any]
    ) -> Any:
        if role in self._overrides:
            return self._overrides[role]
        if role not in self._defaults:
            self._defaults[role] = factory()
        return self._defaults[role]

    def reset_defaults(self) -> None:
        self._defaults.clear()

    # ---- scalar settings --------------------------------------------------

    def set_max_in_memory_size(self, size: int) -> None:
        self._update(max_in_memory_size=size)

    def set_enable_logging_request_details(self, enable: bool) -> None:
        self._update(enable_logging_request_details=enable)

    def set_register_defaults(self, register: bool) -> None:
        self._update(register_defaults=register)

    def _update(self, **changes: Any) -> None:
        # re-validate rather than model_copy so bad values are rejected here
        updated = CodecConfig(**{**self.config.model_dump(), **changes})
        if updated == self.config:
            logger.debug("Codec settings unchanged: %s", changes)
            return
        self.config = updated
        logger.info("Codec settings changed: %s", changes)
        self._on_change()

    # ---- codec consumers --------------------------------------------------

    @property
    def consumers(self) -> List[CodecConsumer]:
        return list(self._consumers)

    def add_codec_consumer(self, consumer: CodecConsumer) -> None:
        if not callable(consumer):
            raise TypeError(f"Codec consumer must be callable, got {consumer!r}")
        self._consumers.append(consumer)
        self._on_change()

    def copy(self, on_change: Callable[[], None]) -> "OverrideStore":
        """
        Independent store with the same settings and consumers. Override
        codecs are deep-copied so later configuration of either store
        does not reach the other; memoized defaults are not carried over.
        """
        clone = OverrideStore(on_change)
        clone._overrides = {
            role: copy.deepcopy(codec) for role, codec in self._overrides.items()
        }
        clone._consumers = list(self._consumers)
        clone.config = self.config
        return clone
