"""
Environment driven settings for the capture engine.

Values are read once from the process environment, after loading a `.env`
file from the working directory if there is one.
"""

import codecs
import os
from collections.abc import Mapping
from dataclasses import dataclass
from functools import cache

from dotenv import load_dotenv

load_dotenv()

ENV_PREFIX = "NESTEDCAPTURE_"


@dataclass(frozen=True)
class CaptureConfig:
    # Bytes an auto-created buffer keeps in memory before rolling over to disk.
    # 0 writes straight to a temporary file.
    spool_max_size: int = 0
    temp_dir: str | None = None
    encoding: str = "utf-8"
    # "" disables event logging, "stderr" logs to the real stderr, anything
    # else is a file path to append to.
    log: str = ""

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "CaptureConfig":
        env = os.environ if environ is None else environ

        raw_size = env.get(f"{ENV_PREFIX}SPOOL_MAX_SIZE", "0").strip() or "0"
        try:
            spool_max_size = int(raw_size)
        except ValueError:
            raise ValueError(
                f"Invalid {ENV_PREFIX}SPOOL_MAX_SIZE value: {raw_size!r}. Must be a non-negative integer"
            ) from None
        if spool_max_size < 0:
            raise ValueError(
                f"Invalid {ENV_PREFIX}SPOOL_MAX_SIZE value: {raw_size!r}. Must be a non-negative integer"
            )

        temp_dir = env.get(f"{ENV_PREFIX}TEMP_DIR", "").strip() or None
        if temp_dir is not None and not os.path.isdir(temp_dir):
            raise ValueError(f"Invalid {ENV_PREFIX}TEMP_DIR value: {temp_dir!r} is not a directory")

        encoding = env.get(f"{ENV_PREFIX}ENCODING", "").strip() or "utf-8"
        try:
            codecs.lookup(encoding)
        except LookupError:
            raise ValueError(f"Invalid {ENV_PREFIX}ENCODING value: unknown encoding {encoding!r}") from None

        log = env.get(f"{ENV_PREFIX}LOG", "").strip()

        return cls(spool_max_size=spool_max_size, temp_dir=temp_dir, encoding=encoding, log=log)


@cache
def get_config() -> CaptureConfig:
    """The process-wide config, built from the environment on first use."""
    return CaptureConfig.from_env()
