import logging
import sys

DEFAULT_LOG_LEVEL = logging.INFO
DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Modules that log every client round trip.
# These will be set to WARNING by default unless verbose mode is enabled
TECHNICAL_MODULES = [
    "cdc_conductor.validation",
    "cdc_conductor.environment.kubernetes",
]

NOISY_THIRD_PARTY_LOGGERS = [
    "boto3",
    "botocore",
    "urllib3",
    "kubernetes",
    "grpc",
    "pymilvus",
    "httpx",
    "httpcore",
]


def get_logger(name: str) -> logging.Logger:
    """Return a logger with the specified name.

    Args:
        name: The name for the logger, typically __name__

    Returns:
        Logger instance
    """
    logger = logging.getLogger(name)

    # Only add a handler if it doesn't have one already
    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter(DEFAULT_FORMAT)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

        # Don't propagate to root logger to avoid duplicate logging
        logger.propagate = False

    return logger


def configure_logging(
    verbose: bool = False,
    quiet: bool = False,
) -> None:
    """Configure logging settings based on command line flags.

    Args:
        verbose: Whether to enable verbose mode (shows all debug logs)
        quiet: Whether to enable quiet mode (only shows warnings and errors)
    """
    if quiet:
        root_level = logging.WARNING
    elif verbose:
        root_level = logging.DEBUG
    else:
        root_level = DEFAULT_LOG_LEVEL

    root_logger = logging.getLogger()
    root_logger.setLevel(root_level)

    # Clear existing handlers to avoid duplicate logs
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    formatter = logging.Formatter(DEFAULT_FORMAT)
    handler.setFormatter(formatter)
    root_logger.addHandler(handler)

    for module_name in TECHNICAL_MODULES:
        module_logger = logging.getLogger(module_name)
        module_logger.setLevel(logging.DEBUG if verbose else logging.WARNING)

    suppress_third_party_loggers()


def suppress_third_party_loggers():
    """Suppress noisy third-party loggers."""
    for logger_name in NOISY_THIRD_PARTY_LOGGERS:
        logging.getLogger(logger_name).setLevel(logging.WARNING)

