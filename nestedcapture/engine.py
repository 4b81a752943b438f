"""
Defines the `NestedCapture` engine, which keeps a stack of capture buffers for
each of the three standard streams and swaps a `StreamInterceptor` in and out
of `sys.stdin` / `sys.stdout` / `sys.stderr` as those stacks fill and drain.

The standard streams are global to the process, so the engine is normally
used as a singleton via `NestedCapture.instance()` or the module level
functions at the bottom of this file.
"""

import sys
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, ClassVar

from typeguard import TypeCheckError, check_type

from .buffers import is_buffer, new_buffer
from .config import CaptureConfig, get_config
from .errors import ConflictingRedirection, InvalidArgument, NotCaptured
from .interceptor import StreamInterceptor
from .logging import CaptureListener
from .streams import Capture, CaptureFlags, Stream


@dataclass
class _StreamState:
    current: list[Any] = field(default_factory=list)
    # True where the engine created the buffer and must rewind it on stop
    current_reset: list[bool] = field(default_factory=list)
    next: Any = None
    next_reset: bool = False
    last: Any = None
    interceptor: StreamInterceptor | None = None


class NestedCapture:
    """Nestable capture of the standard streams."""

    _instance: ClassVar["NestedCapture | None"] = None
    _instance_lock: ClassVar[threading.Lock] = threading.Lock()

    __namespace: Any
    __config: CaptureConfig
    __listener: CaptureListener | None
    __states: dict[Stream, _StreamState]
    __lock: threading.RLock

    def __init__(
        self,
        namespace: Any = sys,
        config: CaptureConfig | None = None,
        listener: CaptureListener | None = None,
    ):
        """
        Args:
            namespace: object whose `stdin`/`stdout`/`stderr` attributes are
                redirected. Defaults to the `sys` module; tests pass a
                `SimpleNamespace` to stay off the real streams.
            config: settings for auto-created buffers and event logging.
            listener: receives install/start/stop/uninstall events. When
                omitted one is built from `config.log`.
        """
        self.__namespace = namespace
        self.__config = config or get_config()
        self.__listener = listener if listener is not None else CaptureListener.from_config(self.__config)
        self.__states = {stream: _StreamState() for stream in Stream}
        self.__lock = threading.RLock()

    @classmethod
    def instance(cls) -> "NestedCapture":
        """The process-wide engine bound to `sys`, created on first use."""
        if cls._instance is None:
            with cls._instance_lock:
                if cls._instance is None:
                    cls._instance = cls()
        return cls._instance

    @property
    def config(self) -> CaptureConfig:
        return self.__config

    # –– Capture control –– #
    def start(self, flags: CaptureFlags) -> None:
        """
        Start capturing every stream named in `flags`.

        Each stream gets the buffer registered with `set_next_*` (or
        `get_next_in`), or a fresh temporary buffer when none was registered.
        The interceptor is installed on the first level only.

        Raises:
            InvalidArgument: `flags` is not an integer in 1..7.
            ConflictingRedirection: a requested stream is held by another
                redirection. No stream is touched in that case.
        """
        streams = self.__validate("start", flags)

        with self.__lock:
            for stream in streams:
                self.__ensure_redirectable(stream)

            for stream in streams:
                state = self.__states[stream]
                self.__install(stream)
                buffer, reset = self.__take_next(stream)
                state.current.append(buffer)
                state.current_reset.append(reset)
                if self.__listener:
                    self.__listener.started(stream, len(state.current))

    def stop(self, flags: CaptureFlags) -> None:
        """
        Stop the innermost capture of every stream named in `flags`.

        The popped buffer becomes the stream's "last" buffer. Engine-created
        buffers are rewound so they read back from the start. The original
        stream is restored once its last capture level is stopped.

        Raises:
            InvalidArgument: `flags` is not an integer in 1..7.
            NotCaptured: a requested stream has no capture to stop. No stream
                is touched in that case.
        """
        streams = self.__validate("stop", flags)

        with self.__lock:
            for stream in streams:
                if not self.__states[stream].current:
                    raise NotCaptured(stream)

            for stream in streams:
                state = self.__states[stream]
                buffer = state.current.pop()
                reset = state.current_reset.pop()
                state.last = buffer
                if reset and not getattr(buffer, "closed", False):
                    buffer.seek(0)
                if self.__listener:
                    self.__listener.stopped(stream, len(state.current))
                if not state.current:
                    self.__uninstall(stream)

    # –– Next / last buffers –– #
    def get_next_in(self) -> Any:
        """
        The buffer that `start(CAPTURE_STDIN)` will read from. Creates a
        temporary one on first call; write the input into it, `start` rewinds
        it before use.
        """
        with self.__lock:
            state = self.__states[Stream.INPUT]
            if state.next is None:
                state.next = new_buffer(self.__config)
                state.next_reset = True
            return state.next

    def set_next_in(self, buffer: Any) -> None:
        """Read stdin from `buffer` after the next start. It is used as-is, never rewound."""
        self.__set_next("set_next_in", Stream.INPUT, buffer)

    def set_next_out(self, buffer: Any) -> None:
        """Send stdout to `buffer` after the next start. It is used as-is, never rewound."""
        self.__set_next("set_next_out", Stream.OUTPUT, buffer)

    def set_next_err(self, buffer: Any) -> None:
        """Send stderr to `buffer` after the next start. It is used as-is, never rewound."""
        self.__set_next("set_next_err", Stream.ERROR, buffer)

    def discard_next(self, stream: Stream, buffer: Any) -> None:
        """Drop `buffer` from `stream`'s next slot if it is still registered there."""
        with self.__lock:
            state = self.__states[stream]
            if state.next is buffer:
                state.next = None
                state.next_reset = False

    def get_last_out(self) -> Any:
        """The buffer retired by the most recent `stop` of stdout, or None."""
        return self.__states[Stream.OUTPUT].last

    def get_last_err(self) -> Any:
        """The buffer retired by the most recent `stop` of stderr, or None."""
        return self.__states[Stream.ERROR].last

    # –– Introspection –– #
    def top(self, stream: Stream) -> Any:
        """The buffer currently receiving `stream`'s I/O, or None."""
        with self.__lock:
            current = self.__states[stream].current
            return current[-1] if current else None

    def forward(self, stream: Stream, fallback: Any, operation: Callable[[Any], Any]) -> Any:
        """
        Apply `operation` to `stream`'s top buffer, or to `fallback` when the
        stream is not captured. The engine lock is held for the whole call.
        """
        with self.__lock:
            current = self.__states[stream].current
            return operation(current[-1] if current else fallback)

    def depth(self, stream: Stream | int) -> int:
        return len(self.__states[Stream.of(stream)].current)

    def is_capturing(self, flags: CaptureFlags) -> bool:
        """True when every stream named in `flags` has at least one capture level."""
        streams = self.__validate("is_capturing", flags)
        return all(self.__states[stream].current for stream in streams)

    def is_installed(self, stream: Stream | int) -> bool:
        stream = Stream.of(stream)
        interceptor = self.__states[stream].interceptor
        return interceptor is not None and getattr(self.__namespace, stream.attr) is interceptor

    # –– Internals –– #
    @staticmethod
    def __validate(operation: str, flags: Any) -> list[Stream]:
        if isinstance(flags, bool):
            raise InvalidArgument(f"{operation}() called with a bool instead of capture flags.")
        try:
            check_type(flags, CaptureFlags)
        except TypeCheckError:
            raise InvalidArgument(f"{operation}() called with non-integer capture flags {flags!r}.") from None

        flags = int(flags)
        if flags <= Capture.NONE:
            raise InvalidArgument(f"{operation}() called without specifying which handles to use.")
        if flags & ~int(Capture.ALL):
            raise InvalidArgument(f"{operation}() called with unknown capture parameters {flags!r}.")

        return Stream.selected(flags)

    def __ensure_redirectable(self, stream: Stream) -> None:
        state = self.__states[stream]
        handle = getattr(self.__namespace, stream.attr)
        if state.interceptor is not None and handle is state.interceptor:
            return
        if isinstance(handle, StreamInterceptor) or state.current:
            # Another engine's interceptor, or someone replaced ours mid-capture
            raise ConflictingRedirection(stream, handle)

    def __install(self, stream: Stream) -> None:
        state = self.__states[stream]
        handle = getattr(self.__namespace, stream.attr)
        if state.interceptor is not None and handle is state.interceptor:
            return

        if state.interceptor is None:
            state.interceptor = StreamInterceptor(self, stream, handle)
        else:
            state.interceptor.attach(handle)
        setattr(self.__namespace, stream.attr, state.interceptor)
        if self.__listener:
            self.__listener.installed(stream)

    def __uninstall(self, stream: Stream) -> None:
        interceptor = self.__states[stream].interceptor
        # Leave a handle alone if something else was put in place over ours
        if interceptor is not None and getattr(self.__namespace, stream.attr) is interceptor:
            setattr(self.__namespace, stream.attr, interceptor.original)
            if self.__listener:
                self.__listener.uninstalled(stream)

    def __take_next(self, stream: Stream) -> tuple[Any, bool]:
        state = self.__states[stream]
        if state.next is None:
            return new_buffer(self.__config), True

        buffer, next_reset = state.next, state.next_reset
        state.next = None
        state.next_reset = False
        if next_reset:
            buffer.seek(0)
        return buffer, False

    def __set_next(self, operation: str, stream: Stream, buffer: Any) -> None:
        if not is_buffer(buffer):
            raise InvalidArgument(
                f"{operation}() needs a seekable, readable and writable buffer, "
                f"got {type(buffer).__name__}"
            )
        with self.__lock:
            state = self.__states[stream]
            state.next = buffer
            state.next_reset = False


def instance() -> NestedCapture:
    return NestedCapture.instance()


def start(flags: CaptureFlags) -> None:
    NestedCapture.instance().start(flags)


def stop(flags: CaptureFlags) -> None:
    NestedCapture.instance().stop(flags)


def get_next_in() -> Any:
    return NestedCapture.instance().get_next_in()


def set_next_in(buffer: Any) -> None:
    NestedCapture.instance().set_next_in(buffer)


def set_next_out(buffer: Any) -> None:
    NestedCapture.instance().set_next_out(buffer)


def set_next_err(buffer: Any) -> None:
    NestedCapture.instance().set_next_err(buffer)


def get_last_out() -> Any:
    return NestedCapture.instance().get_last_out()


def get_last_err() -> Any:
    return NestedCapture.instance().get_last_err()
