"""
Nested capture of stdin, stdout and stderr.

    import sys

    import nestedcapture as nc

    stdin = nc.get_next_in()
    stdin.write("Harry\\nRon\\nHermione\\n")

    nc.start(nc.CAPTURE_IN_OUT)
    for name, prof in zip(sys.stdin, ["Dumbledore", "Flitwick", "McGonagall"]):
        print(f"{name.strip()} favors {prof}")
    nc.stop(nc.CAPTURE_IN_OUT)

    print(nc.get_last_out().read())
"""

from .engine import (
    NestedCapture,
    get_last_err,
    get_last_out,
    get_next_in,
    instance,
    set_next_err,
    set_next_in,
    set_next_out,
    start,
    stop,
)
from .errors import CaptureError, ConflictingRedirection, InvalidArgument, NotCaptured
from .interceptor import StreamInterceptor
from .streams import (
    CAPTURE_ALL,
    CAPTURE_IN_ERR,
    CAPTURE_IN_OUT,
    CAPTURE_NONE,
    CAPTURE_OUT_ERR,
    CAPTURE_STDERR,
    CAPTURE_STDIN,
    CAPTURE_STDOUT,
    Capture,
    Stream,
)
from .utils.capture import capture_output

__version__ = "1.1.0"

__all__ = [
    "NestedCapture",
    "StreamInterceptor",
    "instance",
    "start",
    "stop",
    "get_next_in",
    "set_next_in",
    "set_next_out",
    "set_next_err",
    "get_last_out",
    "get_last_err",
    "capture_output",
    "Capture",
    "Stream",
    "CAPTURE_NONE",
    "CAPTURE_STDIN",
    "CAPTURE_STDOUT",
    "CAPTURE_IN_OUT",
    "CAPTURE_STDERR",
    "CAPTURE_IN_ERR",
    "CAPTURE_OUT_ERR",
    "CAPTURE_ALL",
    "CaptureError",
    "InvalidArgument",
    "ConflictingRedirection",
    "NotCaptured",
]
