from .capabilities import CapabilityFlags
from .capabilities import Library
from .capabilities import is_available
from .config import CodecConfig
from .exceptions import CodecError
from .exceptions import DataBufferLimitError
from .exceptions import DecodingError
from .exceptions import EncodingError
from .interfaces import EncodedBody
from .support.client import ClientDefaultCodecs
from .support.configurer import ClientCodecConfigurer
from .support.configurer import CodecConfigurer
from .support.configurer import ServerCodecConfigurer
from .support.custom_codecs import CustomCodecs
from .support.default_codecs import BaseDefaultCodecs
from .support.default_codecs import Category
from .support.overrides import CodecRole
from .support.server import ServerDefaultCodecs

__all__ = [
    "CapabilityFlags",
    "Library",
    "is_available",
    "CodecConfig",
    "CodecError",
    "DecodingError",
    "EncodingError",
    "DataBufferLimitError",
    "EncodedBody",
    "Category",
    "CodecRole",
    "BaseDefaultCodecs",
    "ServerDefaultCodecs",
    "ClientDefaultCodecs",
    "CustomCodecs",
    "CodecConfigurer",
    "ServerCodecConfigurer",
    "ClientCodecConfigurer",
]
