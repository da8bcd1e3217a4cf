import copy
from typing import Any
from typing import Dict
from typing import List
from typing import Optional

from httpcodecs.capabilities import CapabilityFlags
from httpcodecs.log_config import logger
from httpcodecs.support.client import ClientDefaultCodecs
from httpcodecs.support.custom_codecs import CustomCodecs
from httpcodecs.support.default_codecs import BaseDefaultCodecs
from httpcodecs.support.default_codecs import Category
from httpcodecs.support.server import ServerDefaultCodecs


class CodecConfigurer:
    """
    Entry point for configuring the readers and writers used for content
    negotiation: default codecs plus application-registered custom codecs.

    Any change (override, setting, custom codec) synchronously rebuilds the
    merged categories before the mutating call returns.
    """

    def __init__(self, default_codecs: BaseDefaultCodecs) -> None:
        self._default_codecs = default_codecs
        self._custom_codecs = CustomCodecs(on_change=self._refresh)
        self._categories: Dict[Category, List[Any]] = {}
        self._default_codecs.add_rebuild_listener(self._refresh)
        self._refresh()

    @property
    def default_codecs(self) -> BaseDefaultCodecs:
        return self._default_codecs

    @property
    def custom_codecs(self) -> CustomCodecs:
        return self._custom_codecs

    def register_defaults(self, register: bool) -> None:
        """
        Turn the default codecs on or off; custom codecs are unaffected.
        """
        self._default_codecs.register_defaults = register

    def _refresh(self) -> None:
        # callbacks first: a setting they change rebuilds the defaults
        self._custom_codecs.apply_default_config(self._default_codecs)
        defaults = {c: self._default_codecs.get_category(c) for c in Category}
        self._categories = self._custom_codecs.merge(
            defaults, self._default_codecs.propagator
        )
        logger.debug(
            "Merged codec categories: %s",
            {c.value: len(v) for c, v in self._categories.items()},
        )

    def get_category(self, category: Category) -> List[Any]:
        """
        Defaults of `category` followed by the custom codecs registered for it.
        """
        return list(self._categories.get(category, []))

    @property
    def readers(self) -> List[Any]:
        return (
            self.get_category(Category.TYPED_READERS)
            + self.get_category(Category.OBJECT_READERS)
            + self.get_category(Category.CATCH_ALL_READERS)
        )

    @property
    def writers(self) -> List[Any]:
        return (
            self.get_category(Category.TYPED_WRITERS)
            + self.get_category(Category.OBJECT_WRITERS)
            + self.get_category(Category.CATCH_ALL_WRITERS)
        )

    def find_reader(self, target: Any, media_type: Optional[str]) -> Optional[Any]:
        """
        First reader able to read `media_type` into `target`, if any.
        """
        return next(
            (r for r in self.readers if r.can_read(target, media_type)), None
        )

    def find_writer(
        self, value_type: Any, media_type: Optional[str]
    ) -> Optional[Any]:
        """
        First writer able to write `value_type` as `media_type`, if any.
        """
        return next(
            (w for w in self.writers if w.can_write(value_type, media_type)), None
        )

    def clone(self) -> "CodecConfigurer":
        """
        Independent snapshot: later changes to either side do not leak.
        Custom codecs are copied along with the default codecs.
        """
        other = copy.copy(self)
        other._default_codecs = self._default_codecs.clone()
        other._custom_codecs = self._custom_codecs.copy(on_change=other._refresh)
        other._default_codecs.add_rebuild_listener(other._refresh)
        other._refresh()
        return other


class ServerCodecConfigurer(CodecConfigurer):
    @classmethod
    def create(
        cls, capabilities: Optional[CapabilityFlags] = None
    ) -> "ServerCodecConfigurer":
        return cls(ServerDefaultCodecs(capabilities))


class ClientCodecConfigurer(CodecConfigurer):
    @classmethod
    def create(
        cls, capabilities: Optional[CapabilityFlags] = None
    ) -> "ClientCodecConfigurer":
        return cls(ClientDefaultCodecs(capabilities))
