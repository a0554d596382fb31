import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from typing import Optional

from mapchat.core.config import settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class LoggerConfig:
    """
    Named application logger writing to a rotating file and the console.

    When the log directory can't be created or opened (read-only container,
    bad LOG_DIRECTORY) the logger keeps running with the console handler only.
    """
    def __init__(
        self,
        env: int = logging.INFO,
        logger_name: str = "MAPCHAT-BE",
        log_directory: str = "logs",
        log_file: str = "app.log",
        max_bytes: int = 10 * 1024 * 1024,
        backup_count: int = 5,
    ):
        self.logger_name = logger_name
        self.log_directory = os.path.abspath(log_directory)
        self.log_file_path = os.path.join(self.log_directory, log_file)
        self.env = env
        self.max_bytes = max_bytes
        self.backup_count = backup_count

        self.logger = logging.getLogger(self.logger_name)
        # Keep uvicorn's root configuration from printing every line twice
        self.logger.propagate = False
        self.file_enabled = False
        self.setup_logger()

    def _file_handler(self) -> Optional[RotatingFileHandler]:
        try:
            os.makedirs(self.log_directory, exist_ok=True)
            return RotatingFileHandler(
                self.log_file_path,
                maxBytes=self.max_bytes,
                backupCount=self.backup_count,
                encoding="utf-8",
            )
        except OSError as e:
            sys.stderr.write(f"File logging disabled, cannot open {self.log_file_path}: {e}\n")
            return None

    def setup_logger(self):
        self.logger.setLevel(self.env)

        # Re-initialising the same named logger reuses its handlers
        if self.logger.handlers:
            self.file_enabled = any(isinstance(h, RotatingFileHandler) for h in self.logger.handlers)
            return

        formatter = logging.Formatter(LOG_FORMAT)

        console_handler = logging.StreamHandler()
        console_handler.setLevel(self.env)
        console_handler.setFormatter(formatter)
        self.logger.addHandler(console_handler)

        file_handler = self._file_handler()
        if file_handler is not None:
            file_handler.setLevel(self.env)
            file_handler.setFormatter(formatter)
            self.logger.addHandler(file_handler)
            self.file_enabled = True

    def log(self, level: int, message: str, extra: Optional[dict] = None):
        """Log `message`, appending non-empty `extra` fields as key=value pairs"""
        if extra:
            fields = " ".join(f"{key}={value}" for key, value in extra.items())
            message = f"{message} | {fields}"
        self.logger.log(level, message)


# Initialize Logger
logs = LoggerConfig(
    env=settings.LOGGER,
    logger_name="MAPCHAT-BE",
    log_directory=settings.LOG_DIRECTORY,
    log_file=settings.LOG_FILE,
    max_bytes=settings.LOG_MAX_BYTES,
    backup_count=settings.LOG_BACKUP_COUNT,
)
