"""Plain-text notification log for operators without access to structured logs."""

import logging
import threading
from datetime import datetime
from pathlib import Path
from typing import Optional

from ..core.config import settings

logger = logging.getLogger(__name__)


class NotificationLog:
    """Appends ``yyyy-MM-dd HH:mm:ss message`` lines to a file."""

    def __init__(self, path: Optional[str] = None):
        self.path = Path(path if path is not None else settings.notification_log_path)
        self._lock = threading.Lock()

    def write(self, message: str, when: Optional[datetime] = None) -> None:
        """Append one line; write errors are reported through logging only."""
        stamp = (when or datetime.now()).strftime("%Y-%m-%d %H:%M:%S")
        line = f"{stamp} {message}\n"
        try:
            with self._lock:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                with self.path.open("a", encoding="utf-8") as handle:
                    handle.write(line)
        except OSError as e:
            logger.warning(
                "Could not write notification log",
                extra={"path": str(self.path), "error": str(e)}
            )

    def read_lines(self) -> list[str]:
        if not self.path.is_file():
            return []
        return self.path.read_text(encoding="utf-8").splitlines()
