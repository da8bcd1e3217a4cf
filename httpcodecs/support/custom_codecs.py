import copy
from typing import Any
from typing import Callable
from typing import Dict
from typing import List
from typing import Optional

from pydantic import BaseModel

from httpcodecs.codec.base import Decoder
from httpcodecs.codec.base import Encoder
from httpcodecs.log_config import logger
from httpcodecs.message.base import DecoderHttpMessageReader
from httpcodecs.message.base import EncoderHttpMessageWriter
from httpcodecs.message.base import HttpMessageReader
from httpcodecs.message.base import HttpMessageWriter
from httpcodecs.support.default_codecs import BaseDefaultCodecs
from httpcodecs.support.default_codecs import Category
from httpcodecs.support.propagator import ConfigPropagator

DefaultConfigConsumer = Callable[[BaseDefaultCodecs], None]


class OverlayEntry(BaseModel):
    """A caller-registered codec and the category it lands in."""

    handle: Any
    category: Category
    apply_default_config: bool = False

    model_config = {"arbitrary_types_allowed": True}


def _classify(codec: Any) -> OverlayEntry:
    # readers are checked first: a codec may implement both protocols
    if isinstance(codec, HttpMessageReader):
        handle = codec
    elif isinstance(codec, HttpMessageWriter):
        handle = codec
    elif isinstance(codec, Decoder):
        handle = DecoderHttpMessageReader(codec)
    elif isinstance(codec, Encoder):
        handle = EncoderHttpMessageWriter(codec)
    else:
        raise TypeError(f"Unexpected codec type: {type(codec).__name__}")

    if isinstance(handle, HttpMessageReader):
        category = (
            Category.OBJECT_READERS
            if handle.can_read(object, None)
            else Category.TYPED_READERS
        )
    else:
        category = (
            Category.OBJECT_WRITERS
            if handle.can_write(object, None)
            else Category.TYPED_WRITERS
        )
    return OverlayEntry(handle=handle, category=category)


class CustomCodecs:
    """
    Codecs registered by the application, appended after the defaults
    of their category in registration order.
    """

    def __init__(self, on_change: Optional[Callable[[], None]] = None) -> None:
        self._on_change = on_change
        self._entries: List[OverlayEntry] = []
        self._default_config_consumers: List[DefaultConfigConsumer] = []

    def register(self, codec: Any) -> None:
        """
        Add a decoder, encoder, reader or writer as-is.
        """
        self._add(codec, apply_default_config=False)

    def register_with_default_config(self, codec: Any) -> None:
        """
        Add a codec that also receives the default codec settings.
        """
        self._add(codec, apply_default_config=True)

    def with_default_config(self, consumer: DefaultConfigConsumer) -> None:
        """
        Register a callback that receives the default codec configuration
        on every refresh, before the defaults are merged.
        """
        self._default_config_consumers.append(consumer)
        self._changed()

    def _add(self, codec: Any, apply_default_config: bool) -> None:
        if codec is None:
            raise ValueError("A codec is required")
        entry = _classify(codec)
        entry.apply_default_config = apply_default_config
        self._entries.append(entry)
        logger.info(
            "Custom codec registered in %s: %r", entry.category.value, entry.handle
        )
        self._changed()

    def _changed(self) -> None:
        if self._on_change is not None:
            self._on_change()

    def entries(self, category: Optional[Category] = None) -> List[OverlayEntry]:
        return [e for e in self._entries if category in (None, e.category)]

    def apply_default_config(self, default_config: BaseDefaultCodecs) -> None:
        """
        Call the `with_default_config` callbacks. A callback may change
        settings, which rebuilds the defaults; callers read the defaults
        only after this returns.
        """
        for consumer in self._default_config_consumers:
            consumer(default_config)

    def merge(
        self,
        categories: Dict[Category, List[Any]],
        propagator: ConfigPropagator,
    ) -> Dict[Category, List[Any]]:
        """
        Return new category lists with the custom entries appended after
        the given ones. Entries flagged for default config go through the
        propagator first.
        """
        merged = {c: list(v) for c, v in categories.items()}
        for entry in self._entries:
            if entry.apply_default_config:
                propagator.apply(entry.handle)
            merged.setdefault(entry.category, []).append(entry.handle)
        return merged

    def copy(self, on_change: Optional[Callable[[], None]] = None) -> "CustomCodecs":
        clone = CustomCodecs(on_change)
        clone._entries = [
            e.model_copy(update={"handle": copy.deepcopy(e.handle)})
            for e in self._entries
        ]
        clone._default_config_consumers = list(self._default_config_consumers)
        return clone
