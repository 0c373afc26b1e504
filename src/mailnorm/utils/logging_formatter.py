import copy
import logging

from .colors import Colors


class ColoredFormatter(logging.Formatter):
    """
    Console formatter that colors level names and dims per-unit noise.

    Dropped batch sections and skipped markup are logged once per unit and
    can be numerous, so they are greyed out; fatal decode errors stand out.
    """

    LEVEL_COLORS = {
        logging.DEBUG: Colors.GREY,
        logging.INFO: Colors.BLUE,
        logging.WARNING: Colors.YELLOW,
        logging.ERROR: Colors.RED,
        logging.CRITICAL: Colors.BOLD + Colors.RED
    }

    DIMMED_PREFIXES = ("Skipping", "Dropping", "Could not")

    def format(self, record):
        # Copy so that file handlers sharing the record never see ANSI codes
        record = copy.copy(record)

        color = self.LEVEL_COLORS.get(record.levelno, Colors.RESET)
        record.levelname = f"{color}{record.levelname}{Colors.RESET}"

        if isinstance(record.msg, str):
            if record.levelno >= logging.ERROR:
                record.msg = f"{Colors.RED}{record.msg}{Colors.RESET}"
            elif record.msg.startswith(self.DIMMED_PREFIXES):
                record.msg = f"{Colors.GREY}{record.msg}{Colors.RESET}"
            elif record.msg.startswith("Parsed batch"):
                record.msg = f"{Colors.GREEN}{record.msg}{Colors.RESET}"

        return super().format(record)
