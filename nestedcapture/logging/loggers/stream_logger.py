import sys
from dataclasses import dataclass
from typing import Callable, Literal, TypeAlias

from ...streams import Stream

Kind: TypeAlias = Literal["install", "start", "stop", "uninstall"]


@dataclass
class Event:
    kind: Kind
    stream: Stream
    depth: int

    def __str__(self) -> str:
        return f"{self.kind} sys.{self.stream.attr} depth={self.depth}"


class StreamLogger:
    on_event: Callable[[Event], None]

    def __init__(self, on_event: Callable[[Event], None]):
        self.on_event = on_event


def stderr_logger() -> StreamLogger:
    """Log to the interpreter's original stderr, which captures never touch."""

    def on_event(event: Event) -> None:
        stream = sys.__stderr__
        if stream is None:
            return
        stream.write(f"[nestedcapture] {event}\n")
        stream.flush()

    return StreamLogger(on_event)
