"""Exceptions raised by the pipeline compiler and deployment layer.

Connection validation never raises these: validators fold every failure into
a ConnectionValidationResult.
"""


class ConductorError(Exception):
    """Base exception for conductor errors."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class InvalidArgumentError(ConductorError, ValueError):
    """Bad or missing compiler input, e.g. an empty pipeline name."""


class UnsupportedConfigurationError(ConductorError):
    """Unknown storage/backend type or a value the backend cannot accept."""


class NotFoundError(ConductorError):
    """A pipeline deployment or a registered component does not exist."""


class SignalDeliveryError(ConductorError):
    """The running pipeline's control endpoint rejected or never received a signal."""

    def __init__(self, pipeline_id, message: str):
        self.pipeline_id = pipeline_id
        super().__init__(f"Signal delivery to pipeline {pipeline_id} failed: {message}")


class ConfigurationError(ConductorError):
    """The conductor configuration file is missing or malformed."""
