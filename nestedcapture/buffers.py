"""
The buffer contract every capture target must meet, and the factory for the
buffers the engine creates on its own.
"""

import tempfile
from typing import IO, Any, Protocol, runtime_checkable

from .config import CaptureConfig


@runtime_checkable
class StreamBuffer(Protocol):
    """Anything seekable that can be written to and read back line by line.

    `io.StringIO`, `tempfile.TemporaryFile("w+")` and regular files opened in
    text mode all qualify.
    """

    def seek(self, offset: int, whence: int = 0, /) -> int: ...

    def read(self, size: int = -1, /) -> Any: ...

    def readline(self, size: int = -1, /) -> Any: ...

    def write(self, data: Any, /) -> int: ...

    def close(self) -> None: ...


def is_buffer(value: object) -> bool:
    return isinstance(value, StreamBuffer)


def new_buffer(config: CaptureConfig) -> IO[str]:
    """Create an engine-owned text buffer.

    Line endings are stored untranslated. With a spool size configured the
    buffer lives in memory until it grows past that size.
    """
    if config.spool_max_size > 0:
        return tempfile.SpooledTemporaryFile(  # type: ignore[return-value]
            max_size=config.spool_max_size,
            mode="w+",
            encoding=config.encoding,
            newline="",
            dir=config.temp_dir,
        )
    return tempfile.TemporaryFile(mode="w+", encoding=config.encoding, newline="", dir=config.temp_dir)
