import logging
from typing import Optional

from rich.logging import RichHandler

ROOT = "orionbasic"

# Library use stays quiet until a front end installs handlers.
logging.getLogger(ROOT).addHandler(logging.NullHandler())


def get_logger(name: str) -> logging.Logger:
    """Return the package logger for a module (``orionbasic.lexer`` etc)."""
    if name == ROOT or name.startswith(ROOT + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT}.{name}")


class Logger:
    def __init__(self, name=ROOT, filename: Optional[str] = None, level=logging.DEBUG):
        self.logger = logging.getLogger(name)
        self.logger.setLevel(level)

        # Remove old handlers to avoid duplicates
        if self.logger.hasHandlers():
            self.logger.handlers.clear()

        console_handler = RichHandler(
            rich_tracebacks=True,
            show_time=True,
            show_level=True,
            show_path=True,
            markup=False,
        )
        console_handler.setLevel(level)
        self.logger.addHandler(console_handler)

        if filename:
            file_handler = logging.FileHandler(filename, mode="w")
            file_handler.setLevel(level)
            # RichHandler has its own layout, the file gets a plain one
            file_handler.setFormatter(logging.Formatter(
                "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
            ))
            self.logger.addHandler(file_handler)

    def get_logger(self):
        return self.logger


__all__ = ["ROOT", "Logger", "get_logger"]
