from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path
from typing import Optional

from services.errors import LogNotFoundError, LogReadError
from settings import get_settings

logger = logging.getLogger(__name__)


class LogFile:
    """Read-only handle on the sensor log written by AIDA64.

    The file is read in full on every call and no handle is kept open, so the
    logger process can keep appending to it between reads.
    """

    def __init__(self, path: Path, encoding: str = "utf-8-sig") -> None:
        self.path = path
        self.encoding = encoding

    def exists(self) -> bool:
        return self.path.is_file()

    def read_text(self) -> str:
        if not self.path.exists():
            logger.warning(
                "Sensor log not found",
                extra={"log_path": str(self.path), "error_code": LogNotFoundError.code},
            )
            raise LogNotFoundError(f"Log file not found at: {self.path}")

        try:
            return self.path.read_text(encoding=self.encoding)
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning(
                "Failed to read sensor log",
                extra={
                    "log_path": str(self.path),
                    "error_code": LogReadError.code,
                    "reason": exc,
                },
            )
            raise LogReadError(f"Failed to read {self.path}: {exc}") from exc


@lru_cache
def build_default_log_file(path: Optional[str] = None) -> LogFile:
    settings = get_settings()
    log_path = settings.log_path if path is None else path
    return LogFile(Path(log_path))
