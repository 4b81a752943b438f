from ..config import CaptureConfig
from ..streams import Stream
from . import loggers
from .loggers.file_logger import file_logger
from .loggers.stream_logger import Event, StreamLogger, stderr_logger


class CaptureListener:
    logger: StreamLogger

    def __init__(self, logger: StreamLogger):
        self.logger = logger

    @classmethod
    def from_config(cls, config: CaptureConfig) -> "CaptureListener | None":
        if not config.log:
            return None
        if config.log.lower() == "stderr":
            return cls(stderr_logger())
        return cls(file_logger(config.log))

    def installed(self, stream: Stream) -> None:
        self.logger.on_event(Event("install", stream, 0))

    def started(self, stream: Stream, depth: int) -> None:
        self.logger.on_event(Event("start", stream, depth))

    def stopped(self, stream: Stream, depth: int) -> None:
        self.logger.on_event(Event("stop", stream, depth))

    def uninstalled(self, stream: Stream) -> None:
        self.logger.on_event(Event("uninstall", stream, 0))


__all__ = ["loggers", "CaptureListener", "Event", "StreamLogger", "file_logger", "stderr_logger"]
