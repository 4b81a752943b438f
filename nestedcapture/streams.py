"""
Capture flags and the three standard streams they address.
"""

import enum


class Capture(enum.IntFlag):
    """Bit flags selecting which standard streams to capture."""

    NONE = 0
    STDIN = 1
    STDOUT = 2
    IN_OUT = 3
    STDERR = 4
    IN_ERR = 5
    OUT_ERR = 6
    ALL = 7


CAPTURE_NONE = Capture.NONE
CAPTURE_STDIN = Capture.STDIN
CAPTURE_STDOUT = Capture.STDOUT
CAPTURE_IN_OUT = Capture.IN_OUT
CAPTURE_STDERR = Capture.STDERR
CAPTURE_IN_ERR = Capture.IN_ERR
CAPTURE_OUT_ERR = Capture.OUT_ERR
CAPTURE_ALL = Capture.ALL


class Stream(enum.Enum):
    """A single standard stream. Definition order is the processing order."""

    INPUT = (Capture.STDIN, "stdin")
    OUTPUT = (Capture.STDOUT, "stdout")
    ERROR = (Capture.STDERR, "stderr")

    def __init__(self, flag: Capture, attr: str):
        self.flag = flag
        self.attr = attr

    @classmethod
    def selected(cls, flags: int) -> list["Stream"]:
        """The streams present in `flags`, in INPUT, OUTPUT, ERROR order."""
        return [stream for stream in cls if flags & stream.flag]

    @classmethod
    def of(cls, value: "Stream | int") -> "Stream":
        """Accept either a `Stream` or a single-bit capture flag."""
        if isinstance(value, Stream):
            return value
        for stream in cls:
            if stream.flag == value:
                return stream
        raise ValueError(f"{value!r} does not name exactly one standard stream")

    def __str__(self) -> str:
        return self.attr


# What start/stop accept: a Capture member or a plain int with the same bits.
CaptureFlags = Capture | int
