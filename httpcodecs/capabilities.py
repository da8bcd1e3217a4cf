import importlib.util
import threading
from enum import Enum
from functools import lru_cache
from typing import Dict

from pydantic import BaseModel

from httpcodecs.config import should_ignore_xml
from httpcodecs.log_config import logger


class Library(str, Enum):
    """Optional serialization libraries, valued by importable module."""

    PYDANTIC = "pydantic"
    MSGSPEC = "msgspec"
    MSGPACK = "msgpack"
    FASTAVRO = "fastavro"
    PROTOBUF = "google.protobuf"
    BETTERPROTO = "betterproto"
    XML = "xml.etree.ElementTree"


_availability: Dict[Library, bool] = {}
_lock = threading.Lock()


def _probe(module_name: str) -> bool:
    try:
        return importlib.util.find_spec(module_name) is not None
    except (ImportError, ValueError):
        # a missing parent package raises instead of returning None
        return False


def is_available(library: Library) -> bool:
    """
    Whether `library` can be imported, probed once per process.
    Absence is an expected outcome and never raises.
    """
    cached = _availability.get(library)
    if cached is not None:
        return cached
    present = _probe(library.value)
    with _lock:
        result = _availability.setdefault(library, present)
    logger.debug(
        "Optional library '%s' %s",
        library.value,
        "available" if result else "not available",
    )
    return result


class CapabilityFlags(BaseModel):
    """
    Immutable table of which optional libraries the registry may use.
    """

    pydantic: bool = False
    msgspec: bool = False
    msgpack: bool = False
    fastavro: bool = False
    protobuf: bool = False
    betterproto: bool = False
    xml: bool = False

    model_config = {"frozen": True}

    @classmethod
    def detect(cls) -> "CapabilityFlags":
        flags = {lib.name.lower(): is_available(lib) for lib in Library}
        if should_ignore_xml():
            flags["xml"] = False
        return cls(**flags)

    def is_present(self, library: Library) -> bool:
        return bool(getattr(self, library.name.lower()))


@lru_cache(maxsize=None)
def default_capabilities() -> CapabilityFlags:
    return CapabilityFlags.detect()
