"""
Scoped capture on top of the `NestedCapture` engine.

``capture_output(flags)`` is both a synchronous *and* an asynchronous
context-manager, so you can use either::

    with capture_output() as cap:            # inside sync or async code
        ...
    async with capture_output() as cap:      # stylistic fit for async-only code
        ...

Entering calls ``start(flags)``, leaving calls ``stop(flags)`` on every exit
path and copies what was written into ``cap.stdout`` / ``cap.stderr``.
Blocks nest: an inner block only sees what was written while it was active.

The engine is process-wide, not per-task, so concurrent tasks that overlap
their blocks share the innermost buffer.
"""

from types import TracebackType
from typing import Any, Optional, Type

from ..buffers import StreamBuffer, new_buffer
from ..engine import NestedCapture
from ..errors import InvalidArgument
from ..streams import CAPTURE_OUT_ERR, Capture, Stream


def _mark(buffer: Any) -> int | None:
    tell = getattr(buffer, "tell", None)
    if tell is None or getattr(buffer, "closed", False):
        return None
    return tell()


def _drain(buffer: Any, mark: int | None) -> str:
    """Text written since `mark`. Engine buffers start at 0 and are already rewound."""
    if buffer is None or getattr(buffer, "closed", False):
        return ""
    if mark is not None:
        buffer.seek(mark)
    return buffer.read()


class capture_output:
    """
    Capture the standard streams named by `flags` for the duration of a block.

        with capture_output(CAPTURE_ALL, stdin="Harry\\n") as cap:
            print(input().upper())
        assert cap.stdout == "HARRY\\n"

    `stdin` is either text to feed the block or a buffer to read from as-is.
    """

    def __init__(
        self,
        flags: int = CAPTURE_OUT_ERR,
        *,
        stdin: str | StreamBuffer | None = None,
        engine: NestedCapture | None = None,
    ) -> None:
        if stdin is not None and not int(flags) & Capture.STDIN:
            raise InvalidArgument("capture_output() was given stdin but flags do not capture stdin.")
        self._flags = flags
        self._stdin = stdin
        self._engine = engine
        self._marks: dict[Stream, int | None] = {}
        self.stdout: str = ""
        self.stderr: str = ""

    @property
    def engine(self) -> NestedCapture:
        if self._engine is None:
            self._engine = NestedCapture.instance()
        return self._engine

    def __enter__(self) -> "capture_output":
        engine = self.engine
        stdin = self._stdin
        if isinstance(stdin, str):
            stdin = new_buffer(engine.config)
            stdin.write(self._stdin)
            stdin.seek(0)
        if stdin is not None:
            engine.set_next_in(stdin)

        try:
            engine.start(self._flags)
        except Exception:
            # Leave nothing queued for an unrelated later start
            if stdin is not None:
                engine.discard_next(Stream.INPUT, stdin)
            if stdin is not self._stdin:
                stdin.close()
            raise

        # Caller buffers keep their position; remember where this block begins
        self._marks = {
            stream: _mark(engine.top(stream)) for stream in (Stream.OUTPUT, Stream.ERROR) if int(self._flags) & stream.flag
        }
        return self

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> bool:
        engine = self.engine
        engine.stop(self._flags)
        if int(self._flags) & Capture.STDOUT:
            self.stdout = _drain(engine.get_last_out(), self._marks.get(Stream.OUTPUT))
        if int(self._flags) & Capture.STDERR:
            self.stderr = _drain(engine.get_last_err(), self._marks.get(Stream.ERROR))
        return False  # do not swallow exceptions

    async def __aenter__(self) -> "capture_output":
        return self.__enter__()

    async def __aexit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> bool:
        return self.__exit__(exc_type, exc, tb)
