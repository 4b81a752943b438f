"""
Defines `StreamInterceptor`, the object the engine installs as `sys.stdin`,
`sys.stdout` or `sys.stderr`.

The interceptor holds no buffer of its own. Each call looks up whichever
buffer is on top of its stream's stack at that moment, so code running between
a `start` and its `stop` always reaches the innermost capture.
"""

from typing import TYPE_CHECKING, Any, Callable, Iterable, Iterator

from .streams import Stream

if TYPE_CHECKING:
    from .engine import NestedCapture


class StreamInterceptor:
    __slots__ = ("_engine", "_stream", "_original")

    _engine: "NestedCapture"
    _stream: Stream
    # Whatever sys.<stream> was before install; used when nothing is captured
    _original: Any

    def __init__(self, engine: "NestedCapture", stream: Stream, original: Any):
        self._engine = engine
        self._stream = stream
        self._original = original

    @property
    def engine(self) -> "NestedCapture":
        return self._engine

    @property
    def stream(self) -> Stream:
        return self._stream

    @property
    def original(self) -> Any:
        return self._original

    def attach(self, original: Any) -> None:
        """Rebind to the stream found in place when the engine reinstalls us."""
        self._original = original

    def _target(self) -> Any:
        buffer = self._engine.top(self._stream)
        return self._original if buffer is None else buffer

    def _forward(self, operation: Callable[[Any], Any]) -> Any:
        # Runs under the engine lock so a concurrent stop cannot rewind mid-call
        return self._engine.forward(self._stream, self._original, operation)

    # –– Output side –– #
    def write(self, data: Any) -> int:
        return self._forward(lambda target: target.write(data))

    def writelines(self, lines: Iterable[Any]) -> None:
        def write_all(target: Any) -> None:
            for line in lines:
                target.write(line)

        self._forward(write_all)

    def flush(self) -> None:
        def flush(target: Any) -> None:
            flush = getattr(target, "flush", None)
            if flush is not None:
                flush()

        self._forward(flush)

    # –– Input side –– #
    def read(self, size: int = -1) -> Any:
        return self._forward(lambda target: target.read(size))

    def readline(self, size: int = -1) -> Any:
        return self._forward(lambda target: target.readline(size))

    def readlines(self, hint: int = -1) -> list[Any]:
        def read_all(target: Any) -> list[Any]:
            readlines = getattr(target, "readlines", None)
            if readlines is not None:
                return readlines(hint)
            lines = []
            while line := target.readline():
                lines.append(line)
            return lines

        return self._forward(read_all)

    def getc(self) -> Any:
        """Read a single character; empty at end of data."""
        return self._forward(lambda target: target.read(1))

    def __iter__(self) -> Iterator[Any]:
        return self

    def __next__(self) -> Any:
        line = self.readline()
        if not line:
            raise StopIteration
        return line

    # –– Lifecycle –– #
    def close(self) -> None:
        """Close the active buffer. The capture stays on the stack until `stop`."""
        self._forward(lambda target: target.close())

    @property
    def closed(self) -> bool:
        return bool(getattr(self._target(), "closed", False))

    def __getattr__(self, name: str) -> Any:
        # encoding, errors, fileno, isatty, buffer, seek, tell, ...
        if name in StreamInterceptor.__slots__:
            raise AttributeError(name)
        return getattr(self._target(), name)

    def __repr__(self) -> str:
        return f"<StreamInterceptor sys.{self._stream.attr} depth={self._engine.depth(self._stream)}>"
