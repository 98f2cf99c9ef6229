import logging
import copy
from pathlib import Path

from src.utils.colors import Colors
from src.utils.structured_logging import JSONFormatter


class ColoredFormatter(logging.Formatter):
    """
    Custom formatter to add colors to log levels and specific messages.
    Highlights successful loads and dims per-attachment detail lines.
    """

    LEVEL_COLORS = {
        logging.DEBUG: Colors.GREY,
        logging.INFO: Colors.BLUE,
        logging.WARNING: Colors.YELLOW,
        logging.ERROR: Colors.RED,
        logging.CRITICAL: Colors.BOLD + Colors.RED
    }

    def format(self, record):
        # Copy so file handlers never see ANSI codes
        record = copy.copy(record)

        color = self.LEVEL_COLORS.get(record.levelno, Colors.RESET)
        record.levelname = f"{color}{record.levelname}{Colors.RESET}"

        if isinstance(record.msg, str):
            if record.msg.startswith("Loaded:"):
                record.msg = f"{Colors.GREEN}{record.msg}{Colors.RESET}"
            elif record.msg.startswith("  - "):
                record.msg = f"{Colors.GREY}{record.msg}{Colors.RESET}"
            elif record.levelno >= logging.ERROR:
                record.msg = f"{Colors.RED}{record.msg}{Colors.RESET}"

        return super().format(record)


def setup_logging(level_name: str, log_file: str = "", log_format: str = "text") -> None:
    """
    Configure the root logger

    Args:
        level_name: Log level name (unknown names fall back to INFO)
        log_file: Optional file to log to in addition to stderr
        log_format: "text" (colored console) or "json"
    """
    text_format = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    level = logging.getLevelName(str(level_name).upper())
    if not isinstance(level, int):
        level = logging.INFO

    console = logging.StreamHandler()
    if log_format == "json":
        console.setFormatter(JSONFormatter())
    else:
        console.setFormatter(ColoredFormatter(text_format))
    handlers = [console]

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path)
        if log_format == "json":
            file_handler.setFormatter(JSONFormatter())
        else:
            file_handler.setFormatter(logging.Formatter(text_format))
        handlers.append(file_handler)

    logging.basicConfig(level=level, handlers=handlers, force=True)
