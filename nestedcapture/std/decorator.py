"""
Decorators which users can use instead of pairing `start`/`stop` calls by hand.
"""

import functools
import inspect
from dataclasses import dataclass
from typing import Any, Callable, Generic, TypeVar

from ..buffers import StreamBuffer
from ..engine import NestedCapture
from ..streams import CAPTURE_OUT_ERR
from ..utils.capture import capture_output


T = TypeVar("T")


@dataclass
class CapturedResult(Generic[T]):
    result: T
    stdout: str
    stderr: str


def captured(
    flags: int = CAPTURE_OUT_ERR,
    *,
    stdin: str | StreamBuffer | None = None,
    engine: NestedCapture | None = None,
) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """
    Decorator which runs a function with the streams in `flags` captured and
    returns a `CapturedResult` instead of the bare return value.

    Works on plain functions and on coroutine functions alike.

    Example usage:
    ```python
    @captured(CAPTURE_ALL, stdin="3\\n4\\n")
    def add() -> int:
        total = int(input()) + int(input())
        print(total)
        return total

    res = add()
    assert res.result == 7
    assert res.stdout == "7\\n"
    ```
    """

    def wrap(fn: Callable[..., Any]) -> Callable[..., Any]:
        if inspect.iscoroutinefunction(fn):

            @functools.wraps(fn)
            async def run_async(*args: Any, **kwargs: Any) -> CapturedResult[Any]:
                async with capture_output(flags, stdin=stdin, engine=engine) as cap:
                    result = await fn(*args, **kwargs)
                return CapturedResult(result, cap.stdout, cap.stderr)

            return run_async

        @functools.wraps(fn)
        def run(*args: Any, **kwargs: Any) -> CapturedResult[Any]:
            with capture_output(flags, stdin=stdin, engine=engine) as cap:
                result = fn(*args, **kwargs)
            return CapturedResult(result, cap.stdout, cap.stderr)

        return run

    return wrap
