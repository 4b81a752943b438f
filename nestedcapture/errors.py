from .streams import Stream


class CaptureError(Exception):
    """Base class for every error raised by the capture engine."""


class InvalidArgument(CaptureError, ValueError):
    """Raised when `start`/`stop` get flags outside 1..7, or a buffer is unusable."""


class ConflictingRedirection(CaptureError, RuntimeError):
    """Raised when a standard stream is already redirected by something else."""

    stream: Stream

    def __init__(self, stream: Stream, holder: object):
        self.stream = stream
        super().__init__(
            f"start() failed because sys.{stream.attr} is redirected by {type(holder).__name__}, not this engine"
        )


class NotCaptured(CaptureError, RuntimeError):
    """Raised when `stop` is asked to stop a stream that was never started."""

    stream: Stream

    def __init__(self, stream: Stream):
        self.stream = stream
        super().__init__(f"stop() asked to stop sys.{stream.attr}, but it wasn't started")
