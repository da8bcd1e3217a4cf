import atexit
import json
import logging
import logging.handlers
import queue
from typing import IO
from typing import Optional

# Library logger: silent until the host application opts in
logger = logging.getLogger("httpcodecs")
logger.addHandler(logging.NullHandler())

_queue_handler: Optional[logging.handlers.QueueHandler] = None
_listener: Optional[logging.handlers.QueueListener] = None


class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "time": self.formatTime(record),
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
        }
        return json.dumps(payload)


def configure_logging(
    json_logging: bool = False,
    level: int = logging.INFO,
    stream: Optional[IO[str]] = None,
) -> logging.Handler:
    """
    Call this at application startup to emit registry logs, as JSON or
    text, to `stream` (stderr by default). Records go through a queue so
    codec rebuilds never block on I/O. Calling it again replaces the
    previous setup. Returns the console handler.
    """
    global _queue_handler, _listener
    shutdown_logging()

    console_handler = logging.StreamHandler(stream)
    if json_logging:
        console_handler.setFormatter(JSONFormatter())
    else:
        console_handler.setFormatter(
            logging.Formatter(
                "%(asctime)s %(levelname)s [%(name)s] %(message)s"
            )
        )

    log_queue: queue.SimpleQueue = queue.SimpleQueue()
    _queue_handler = logging.handlers.QueueHandler(log_queue)
    _listener = logging.handlers.QueueListener(log_queue, console_handler)
    _listener.start()

    logger.addHandler(_queue_handler)
    logger.setLevel(level)
    return console_handler


def shutdown_logging() -> None:
    """
    Flush pending records and detach what `configure_logging` attached.
    """
    global _queue_handler, _listener
    if _listener is not None:
        _listener.stop()
        _listener = None
    if _queue_handler is not None:
        logger.removeHandler(_queue_handler)
        _queue_handler = None
        logger.setLevel(logging.NOTSET)


atexit.register(shutdown_logging)
