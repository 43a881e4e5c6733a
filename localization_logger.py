import logging
import os
from datetime import datetime
from logging.handlers import RotatingFileHandler
from typing import List

from colorama import Fore, Style, just_fix_windows_console


LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%H:%M:%S"
LATEST_LOG = "latest.log"

LOG_COLORS = {
    "DEBUG": Fore.CYAN,
    "INFO": Fore.GREEN,
    "WARNING": Fore.YELLOW,
    "ERROR": Fore.RED,
    "CRITICAL": Fore.RED + Style.BRIGHT,
}


class ColorFormatter(logging.Formatter):
    """Colours only the [LEVEL] part of the line."""

    def format(self, record):
        log_color = LOG_COLORS.get(record.levelname, Fore.WHITE)
        s = super().format(record)
        return s.replace(f"[{record.levelname}]", f"{log_color}[{record.levelname}]{Style.RESET_ALL}")


def cleanup_old_logs(log_dir: str, keep: int) -> List[str]:
    """Deletes the oldest timestamped logs so that at most `keep` remain once a new one is created."""
    log_files = sorted(f for f in os.listdir(log_dir) if f.endswith(".log") and f != LATEST_LOG)
    removed = []
    if len(log_files) >= keep:
        for old_file in log_files[:len(log_files) - keep + 1]:
            os.remove(os.path.join(log_dir, old_file))
            removed.append(old_file)
    return removed


def init_logger(log_dir: str = "logs", level: int = logging.DEBUG, console: bool = True, keep: int = 5) -> List[logging.Handler]:
    """
    Configures the root logger: colour console output, a rotating latest.log and
    one timestamped log per run. Returns the installed handlers.
    """
    os.makedirs(log_dir, exist_ok=True)
    cleanup_old_logs(log_dir, keep)

    handlers: List[logging.Handler] = []
    if console:
        just_fix_windows_console()
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(ColorFormatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        handlers.append(console_handler)

    file_handler = RotatingFileHandler(
        os.path.join(log_dir, LATEST_LOG), maxBytes=5 * 1024 * 1024, backupCount=0, encoding="utf-8"
    )
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    handlers.append(file_handler)

    start_time = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
    timestamped_handler = logging.FileHandler(os.path.join(log_dir, f"{start_time}.log"), encoding="utf-8")
    timestamped_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    handlers.append(timestamped_handler)

    logging.basicConfig(level=level, handlers=handlers, force=True)
    return handlers
