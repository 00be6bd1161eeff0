"""Best-effort JSON-lines log of a single mawaku run.

One file per run under ~/.mawaku/logs. A failed write disables the log for the
rest of the run rather than interrupting image generation.
"""

import json
import logging
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

LOG_DIR_NAME = "logs"


class LogLevel(str, Enum):
    INFO = "INFO"
    ERROR = "ERROR"
    WARNING = "WARNING"


class StructuredLogger:
    """JSON logger for one mawaku run."""

    def __init__(self, log_dir: str | Path | None = None):
        if log_dir is None:
            log_dir = Path.home() / ".mawaku" / LOG_DIR_NAME
        self.log_dir = Path(log_dir)
        self.enabled = True
        self.log_dir.mkdir(parents=True, exist_ok=True)

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S_%f")
        self.log_file = self.log_dir / f"{timestamp}.log"

    def log(self, level: LogLevel, **data: Any) -> None:
        """Append one event. After the first failed write the logger goes quiet."""
        if not self.enabled:
            return

        entry = {
            "timestamp": datetime.now().isoformat(),
            "level": level.value,
            **data,
        }

        try:
            with open(self.log_file, "a") as f:
                f.write(json.dumps(entry) + "\n")
        except OSError as e:
            logger.warning(f"Disabling run log {self.log_file}: {e}")
            self.enabled = False

    def log_run_start(
        self,
        location: str,
        season: str | None,
        time_of_day: str | None,
    ) -> None:
        self.log(
            LogLevel.INFO,
            event="run_start",
            location=location,
            season=season,
            time_of_day=time_of_day,
        )

    def log_place_description(self, status: str, error_message: str | None = None) -> None:
        self.log(
            LogLevel.INFO if error_message is None else LogLevel.WARNING,
            event="place_description",
            status=status,
            error_message=error_message,
        )

    def log_image_saved(self, index: int, output_path: str, mime_type: str | None) -> None:
        self.log(
            LogLevel.INFO,
            event="image_saved",
            index=index,
            output_path=output_path,
            mime_type=mime_type,
        )

    def log_image_error(self, index: int | None, error_type: str, error_message: str) -> None:
        self.log(
            LogLevel.ERROR,
            event="image_error",
            index=index,
            status="failed",
            error_type=error_type,
            error_message=error_message,
        )

    def log_run_complete(self, saved_images: int, warnings: int, duration_s: float) -> None:
        self.log(
            LogLevel.INFO,
            event="run_complete",
            saved_images=saved_images,
            warnings=warnings,
            duration_s=duration_s,
        )
