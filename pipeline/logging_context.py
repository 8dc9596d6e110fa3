import sys
import logging
import pathlib

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class ImportLoggingContext:
    """Context manager that routes all logging of an import run to the console and, optionally, a file.

    The root logger level follows debug_mode, so the debug channel is only
    shown when it is enabled. The previous handlers and level are restored on exit.
    """

    def __init__(self, debug_mode: bool = False, log_file_path: pathlib.Path | None = None):
        """
        Args:
            debug_mode: If True, debug records are emitted as well
            log_file_path: Optional path of a log file receiving the same records
        """
        self.debug_mode = debug_mode
        self.log_file_path = log_file_path
        self.handlers: list[logging.Handler] = []
        self.original_level = logging.NOTSET

    def __enter__(self):
        """Install the handlers and set the level."""
        formatter = logging.Formatter(LOG_FORMAT)
        level = logging.DEBUG if self.debug_mode else logging.INFO

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(formatter)
        self.handlers.append(console_handler)

        if self.log_file_path is not None:
            pathlib.Path(self.log_file_path).parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(self.log_file_path, encoding="utf-8")
            file_handler.setFormatter(formatter)
            self.handlers.append(file_handler)

        root_logger = logging.getLogger()
        self.original_level = root_logger.level
        root_logger.setLevel(level)
        for handler in self.handlers:
            handler.setLevel(level)
            root_logger.addHandler(handler)

        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Remove the handlers and restore the level."""
        root_logger = logging.getLogger()

        for handler in self.handlers:
            if handler in root_logger.handlers:
                root_logger.removeHandler(handler)
            handler.close()
        self.handlers = []

        root_logger.setLevel(self.original_level)
