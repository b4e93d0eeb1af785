"""
FreakGEN logging.

    from freakgen.utils.logger import logger

    logger.info("Saved preset", component="PRESET", details="fat_bass.json")
    logger.gen("Generated bass (simple)")      # DEBUG, tagged [GEN]

Console output goes to stderr so `--json` stdout stays parseable. Every
record is also emitted as a Qt signal (message, level, HH:MM:SS).
"""

import logging
import sys
import time
from enum import IntEnum
from typing import Optional
from PyQt5.QtCore import QObject, pyqtSignal

CONSOLE_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"


class LogLevel(IntEnum):
    DEBUG = logging.DEBUG
    INFO = logging.INFO
    WARNING = logging.WARNING
    ERROR = logging.ERROR


class LogSignalEmitter(QObject):
    log_message = pyqtSignal(str, int, str)


class QtSignalHandler(logging.Handler):
    """Forwards formatted records to a LogSignalEmitter."""

    def __init__(self, emitter: LogSignalEmitter):
        super().__init__()
        self.emitter = emitter

    def emit(self, record: logging.LogRecord):
        try:
            stamp = time.strftime("%H:%M:%S", time.localtime(record.created))
            self.emitter.log_message.emit(self.format(record), record.levelno, stamp)
        except Exception:
            self.handleError(record)


class FreakGenLogger:
    """Wraps the "freakgen" stdlib logger with component tags."""

    def __init__(self):
        self._logger = logging.getLogger("freakgen")
        self._logger.setLevel(logging.DEBUG)
        self._logger.propagate = False

        self.signal_emitter = LogSignalEmitter()

        self._console_handler = logging.StreamHandler(sys.stderr)
        self._console_handler.setLevel(LogLevel.INFO)
        self._console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT, datefmt="%H:%M:%S"))
        self._logger.addHandler(self._console_handler)

        self._qt_handler = QtSignalHandler(self.signal_emitter)
        self._qt_handler.setLevel(LogLevel.DEBUG)
        self._logger.addHandler(self._qt_handler)

        self._file_handler: Optional[logging.FileHandler] = None

    @property
    def name(self) -> str:
        return self._logger.name

    def set_level(self, level: LogLevel):
        self._console_handler.setLevel(level)

    def set_gui_level(self, level: LogLevel):
        self._qt_handler.setLevel(level)

    def enable_file_logging(self, filepath: str):
        """Log everything, DEBUG included, to `filepath` (replaces any previous file)."""
        self.disable_file_logging()
        self._file_handler = logging.FileHandler(filepath)
        self._file_handler.setLevel(LogLevel.DEBUG)
        self._file_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
        self._logger.addHandler(self._file_handler)

    def disable_file_logging(self):
        if self._file_handler is None:
            return
        self._logger.removeHandler(self._file_handler)
        self._file_handler.close()
        self._file_handler = None

    def _log(self, level: int, msg: str, component: Optional[str], details: Optional[str]):
        text = f"[{component}] {msg}" if component else msg
        if details:
            text = f"{text} - {details}"
        self._logger.log(level, text)

    def debug(self, msg: str, component: Optional[str] = None, details: Optional[str] = None):
        self._log(LogLevel.DEBUG, msg, component, details)

    def info(self, msg: str, component: Optional[str] = None, details: Optional[str] = None):
        self._log(LogLevel.INFO, msg, component, details)

    def warning(self, msg: str, component: Optional[str] = None, details: Optional[str] = None):
        self._log(LogLevel.WARNING, msg, component, details)

    def error(self, msg: str, component: Optional[str] = None, details: Optional[str] = None):
        self._log(LogLevel.ERROR, msg, component, details)

    # Debug-level shorthands per subsystem

    def gen(self, msg: str, details: Optional[str] = None):
        self.debug(msg, "GEN", details)

    def matrix(self, msg: str, details: Optional[str] = None):
        self.debug(msg, "MATRIX", details)

    def preset(self, msg: str, details: Optional[str] = None):
        self.debug(msg, "PRESET", details)

    def midi(self, msg: str, details: Optional[str] = None):
        self.debug(msg, "MIDI", details)


logger = FreakGenLogger()


def set_log_level(level: LogLevel):
    """Console level; the CLI's --debug lowers it to DEBUG."""
    logger.set_level(level)
