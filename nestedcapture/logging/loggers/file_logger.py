import time
from pathlib import Path

from .stream_logger import Event, StreamLogger


def file_logger(path: str | Path) -> StreamLogger:
    """Append one line per event to `path`, creating parent directories."""
    log_path = Path(path)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    def on_event(event: Event) -> None:
        stamp = time.strftime("%Y-%m-%d %H:%M:%S")
        with open(log_path, "a", encoding="utf-8") as f:
            f.write(f"{stamp}\t{event}\n")

    return StreamLogger(on_event)
