"""Functions for logging."""

import logging

from tqdm import tqdm

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# chatty at DEBUG: one record per connection / request
_NOISY_LOGGERS = ("urllib3", "requests")


class TqdmLoggingHandler(logging.StreamHandler):
    """Writes records through `tqdm.write()` so they do not tear the resolve/download progress bars."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            tqdm.write(self.format(record), file=self.stream)
            self.flush()
        except RecursionError:
            raise
        except Exception:  # noqa: BLE001
            self.handleError(record)


def setup_logger(level: str) -> None:
    """Configure the root logger so every module logs to stderr at `level` (e.g. "info", "debug")."""
    level_value = getattr(logging, level.upper(), logging.INFO)
    root_logger = logging.getLogger()
    root_logger.setLevel(level_value)
    # Remove all handlers associated with the root logger (avoid duplicate logs)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    handler = TqdmLoggingHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root_logger.addHandler(handler)
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level_value, logging.INFO))
