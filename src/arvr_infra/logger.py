import logging
import sys
import traceback

from colorlog import ColoredFormatter

LOGGER_NAME = "arvr_infra"
REDACTED = "***"

_secrets: set = set()


class SecretRedactingFilter(logging.Filter):
    """Replaces registered secret values in every formatted record."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not _secrets:
            return True
        message = record.getMessage()
        redacted = message
        for secret in _secrets:
            redacted = redacted.replace(secret, REDACTED)
        if redacted != message:
            record.msg = redacted
            record.args = None
        return True


def register_secret(value: str) -> None:
    """Never let `value` reach a log line."""
    if value:
        _secrets.add(value)


def clear_secrets() -> None:
    _secrets.clear()


def setup_logger(debug_mode=False):
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG if debug_mode else logging.INFO)
    logger.propagate = False

    # Create console handler
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(logging.DEBUG if debug_mode else logging.INFO)

    # Create colored formatter
    formatter = ColoredFormatter(
        "%(log_color)s[%(levelname)s] %(message)s",
        log_colors={
            "DEBUG":    "cyan",
            "INFO":     "green",
            "WARNING":  "yellow",
            "ERROR":    "red",
            "CRITICAL": "red,bg_white",
        }
    )
    handler.setFormatter(formatter)
    handler.addFilter(SecretRedactingFilter())

    for existing in list(logger.handlers):
        logger.removeHandler(existing)
    logger.addHandler(handler)

    return logger


def is_debug_mode() -> bool:
    return logger.isEnabledFor(logging.DEBUG)


def print_stack_trace():
    """Print the current exception's stack trace when debug logging is on."""
    if is_debug_mode():
        logger.error(traceback.format_exc())


def configure_logger(debug_mode: bool = False):
    global logger
    logger = setup_logger(debug_mode=debug_mode)
    if debug_mode:
        logger.debug("Debug mode is active.")
    return logger


# Logger defaults to INFO unless reconfigured from the CLI or DEPLOY_MODE.
logger = setup_logger(debug_mode=False)
