from typing import Any
from typing import Awaitable
from typing import Callable
from typing import List
from typing import Optional

from fastapi import HTTPException
from fastapi import Request
from fastapi import Response

from httpcodecs.exceptions import DataBufferLimitError
from httpcodecs.exceptions import DecodingError
from httpcodecs.log_config import logger
from httpcodecs.media_type import ALL
from httpcodecs.support.configurer import CodecConfigurer


def _accepted_media_types(accept: Optional[str]) -> List[str]:
    """
    Media types of an Accept header ordered by quality, stable otherwise.
    """
    if not accept:
        return [ALL]
    ranked = []
    for index, item in enumerate(accept.split(",")):
        media_type, _, params = item.strip().partition(";")
        quality = 1.0
        for param in params.split(";"):
            key, _, value = param.strip().partition("=")
            if key == "q":
                try:
                    quality = float(value)
                except ValueError:
                    quality = 0.0
        if media_type and quality > 0:
            ranked.append((-quality, index, media_type.strip()))
    return [media_type for _, _, media_type in sorted(ranked)] or [ALL]


def body_reader(
    configurer: CodecConfigurer, target: Any
) -> Callable[[Request], Awaitable[Any]]:
    """
    Returns a FastAPI dependency that decodes the request body into
    `target` with the first matching reader:
      1) 415 when no reader handles the request content type
      2) 413 when the body exceeds the reader's in-memory limit
      3) 400 when the body cannot be decoded
    """

    async def _read(request: Request) -> Any:
        media_type = request.headers.get("content-type")
        reader = configurer.find_reader(target, media_type)
        if reader is None:
            logger.warning("No reader for %s as %s", media_type, target)
            raise HTTPException(
                status_code=415,
                detail=f"Content type '{media_type}' not supported",
            )
        body = await request.body()
        try:
            return reader.read(body, target, media_type)
        except DataBufferLimitError as e:
            raise HTTPException(status_code=413, detail=str(e)) from e
        except DecodingError as e:
            raise HTTPException(status_code=400, detail=str(e)) from e

    return _read


def negotiated_response(
    configurer: CodecConfigurer,
    value: Any,
    accept: Optional[str] = None,
    status_code: int = 200,
) -> Response:
    """
    Encode `value` with the first writer matching the Accept header,
    trying acceptable media types by preference; 406 when none match.
    """
    for media_type in _accepted_media_types(accept):
        writer = configurer.find_writer(type(value), media_type)
        if writer is None:
            continue
        body = writer.write(value, media_type)
        return Response(
            content=body.content,
            media_type=body.media_type,
            headers=body.headers,
            status_code=status_code,
        )
    logger.warning("No writer for %s accepting '%s'", type(value).__name__, accept)
    raise HTTPException(status_code=406, detail="No acceptable representation")
