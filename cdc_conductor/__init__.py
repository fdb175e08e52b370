"""CDC Conductor - compile, deploy and validate change-data-capture pipelines."""

__version__ = "0.1.0"
__package_name__ = "cdc-conductor"

from cdc_conductor.logging import configure_logging

configure_logging()

from cdc_conductor.errors import (
    ConductorError,
    ConfigurationError,
    InvalidArgumentError,
    NotFoundError,
    SignalDeliveryError,
    UnsupportedConfigurationError,
)

__all__ = [
    "ConductorError",
    "ConfigurationError",
    "InvalidArgumentError",
    "NotFoundError",
    "SignalDeliveryError",
    "UnsupportedConfigurationError",
    "__version__",
]
