"""
Action log
Append-only record of account changes: "<timestamp>: <action> - <subject>"
"""

import logging
from pathlib import Path

from .errors import PrerequisiteError

ACTION_FORMAT = "%(asctime)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class ActionLog:
    """
    Dedicated file logger for administrative actions.

    Uses its own logger name so records never reach the console handlers.
    """

    def __init__(self, log_file: Path, logger_name: str = "serveradmin.actions"):
        self.log_file = Path(log_file)
        self.logger = logging.getLogger(logger_name)
        self.logger.setLevel(logging.INFO)
        self.logger.propagate = False
        self._handler = None

    def open(self):
        """Create the log file if needed and attach the file handler"""
        if self._handler is not None:
            return

        created = not self.log_file.exists()
        try:
            self.log_file.parent.mkdir(parents=True, exist_ok=True)
            self._handler = logging.FileHandler(str(self.log_file), mode="a", encoding="utf-8")
        except OSError as e:
            raise PrerequisiteError(f"Cannot open action log {self.log_file}: {e}") from e

        self._handler.setFormatter(logging.Formatter(ACTION_FORMAT, datefmt=DATE_FORMAT))
        self.logger.addHandler(self._handler)

        if created:
            self.log_file.chmod(0o644)
            self.logger.info("User management log initialized")

    def record(self, action: str, subject: str):
        """Append one action line"""
        self.open()
        self.logger.info("%s - %s", action, subject)
        self._handler.flush()

    def close(self):
        if self._handler is None:
            return
        self.logger.removeHandler(self._handler)
        self._handler.close()
        self._handler = None
