import os
from typing import Optional

from pydantic import BaseModel
from pydantic import Field

DEFAULT_MAX_IN_MEMORY_SIZE = 256 * 1024

# Set to "true" to keep XML codecs out of every registry
XML_IGNORE_ENV = "HTTPCODECS_XML_IGNORE"


class CodecConfig(BaseModel):
    """
    Scalar settings shared by every default codec.
    """

    max_in_memory_size: Optional[int] = Field(default=None, ge=-1)
    enable_logging_request_details: Optional[bool] = None
    register_defaults: bool = True

    model_config = {"frozen": True}


def should_ignore_xml() -> bool:
    return os.environ.get(XML_IGNORE_ENV, "").strip().lower() in (
        "1",
        "true",
        "yes",
    )
