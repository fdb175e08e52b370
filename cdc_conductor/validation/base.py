"""Connection validation contract shared by every destination family."""

import concurrent.futures
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, ClassVar, Mapping, Optional, TypeVar, Union

from cdc_conductor.config import DEFAULT_VALIDATION_TIMEOUT_SECONDS
from cdc_conductor.domain.models import Connection
from cdc_conductor.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

NULL_CONFIGURATION_MESSAGE = "Connection configuration cannot be null"


class DestinationType(Enum):
    """Destination families that can be validated before they are saved."""

    REDIS = "REDIS"
    KINESIS = "KINESIS"
    QDRANT = "QDRANT"
    MILVUS = "MILVUS"
    HTTP = "HTTP"

    @classmethod
    def from_value(cls, value: Union[str, "DestinationType"]) -> Optional["DestinationType"]:
        """Case-insensitive lookup; returns None for unknown tags."""
        if isinstance(value, DestinationType):
            return value
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            return None


class ValidationErrorKind(Enum):
    """Failure classes every validator maps its SDK errors onto."""

    TIMEOUT = "timeout"
    AUTHENTICATION = "authentication"
    PERMISSION = "permission"
    NOT_FOUND = "not-found"
    UNAVAILABLE = "unavailable"
    GENERIC = "generic"


@dataclass(frozen=True)
class ConnectionValidationResult:
    """Outcome of a validation.

    A valid result carries an informational (possibly empty) message; an
    invalid one always carries an actionable message and its failure kind.
    """

    valid: bool
    message: str = ""
    kind: Optional[ValidationErrorKind] = None

    def __bool__(self) -> bool:
        return self.valid

    @classmethod
    def successful(cls, message: str = "") -> "ConnectionValidationResult":
        return cls(True, message, None)

    @classmethod
    def failed(
        cls, message: str, kind: ValidationErrorKind = ValidationErrorKind.GENERIC
    ) -> "ConnectionValidationResult":
        return cls(False, message or "Connection validation failed", kind)


def timeout_failure(hint: str = "please check host, port and network connectivity"):
    return ConnectionValidationResult.failed(
        f"Connection timeout - {hint}", ValidationErrorKind.TIMEOUT
    )


def authentication_failure(hint: str = "please check the credentials"):
    return ConnectionValidationResult.failed(
        f"Authentication failed - {hint}", ValidationErrorKind.AUTHENTICATION
    )


def permission_failure(hint: str = "please check the account permissions"):
    return ConnectionValidationResult.failed(
        f"Permission denied - {hint}", ValidationErrorKind.PERMISSION
    )


def not_found_failure(message: str):
    return ConnectionValidationResult.failed(message, ValidationErrorKind.NOT_FOUND)


def unavailable_failure(message: str):
    return ConnectionValidationResult.failed(message, ValidationErrorKind.UNAVAILABLE)


def generic_failure(message: str):
    return ConnectionValidationResult.failed(message, ValidationErrorKind.GENERIC)


class DeadlineExceeded(Exception):
    """A probe did not finish within the validator's timeout."""


def run_with_deadline(probe: Callable[[], T], timeout_seconds: float) -> T:
    """Run ``probe`` on a worker thread and wait at most ``timeout_seconds``.

    The worker is abandoned (not joined) when the deadline passes.

    Raises:
        DeadlineExceeded: If the probe is still running at the deadline
        Exception: Whatever the probe raised
    """
    executor = concurrent.futures.ThreadPoolExecutor(
        max_workers=1, thread_name_prefix="connection-probe"
    )
    future = executor.submit(probe)
    try:
        return future.result(timeout=timeout_seconds)
    except concurrent.futures.TimeoutError:
        future.cancel()
        raise DeadlineExceeded(f"No answer within {timeout_seconds} seconds")
    finally:
        executor.shutdown(wait=False)


class ConnectionValidator(ABC):
    """Validate a destination in two phases: parameters, then a live probe.

    ``validate`` never raises. Subclasses implement the two phases and may
    raise freely; anything unexpected is reported as a generic failure.
    """

    destination_type: ClassVar[DestinationType]

    def __init__(self, timeout_seconds: int = DEFAULT_VALIDATION_TIMEOUT_SECONDS):
        if timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be positive")
        self.timeout_seconds = timeout_seconds

    def validate(self, connection: Optional[Connection]) -> ConnectionValidationResult:
        """Validate ``connection`` and return a uniform result."""
        if connection is None:
            return ConnectionValidationResult.failed(NULL_CONFIGURATION_MESSAGE)

        name = self.__class__.__name__
        try:
            logger.debug(
                f"{name}: starting validation for connection '{connection.name or connection.id}'"
            )
            config = connection.config or {}

            result = self.validate_parameters(config)
            if not result.valid:
                logger.debug(f"{name}: parameter validation failed: {result.message}")
                return result

            result = self.validate_connection(config)
            if result.valid:
                logger.info(f"{name}: connection validated")
            else:
                logger.warning(f"{name}: {result.kind.value} - {result.message}")
            return result
        except Exception as e:
            logger.error(f"{name}: unexpected error during validation", exc_info=True)
            return generic_failure(f"Validation failed due to unexpected error: {e}")

    @abstractmethod
    def validate_parameters(self, config: Mapping[str, Any]) -> ConnectionValidationResult:
        """Check required keys and value shapes without any network access.

        Returns the first failure found, with a message naming the field.
        """

    @abstractmethod
    def validate_connection(self, config: Mapping[str, Any]) -> ConnectionValidationResult:
        """Open a client, run one cheap read-only call and close the client."""


def text_value(config: Mapping[str, Any], key: str) -> Optional[str]:
    """Stripped string value of ``key``, or None when missing or blank."""
    value = config.get(key)
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def bool_value(config: Mapping[str, Any], key: str, default: bool = False) -> bool:
    value = config.get(key)
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() == "true"


def check_port(config: Mapping[str, Any], key: str = "port") -> Optional[ConnectionValidationResult]:
    """Return a failure if ``key`` is missing, not an integer or out of range."""
    value = config.get(key)
    if value is None or (isinstance(value, str) and not value.strip()):
        return ConnectionValidationResult.failed("Port must be specified")
    port = parse_port(value)
    if port is None:
        return ConnectionValidationResult.failed("Port must be a valid integer")
    if port <= 0 or port > 65535:
        return ConnectionValidationResult.failed("Port must be between 1 and 65535")
    return None


def parse_port(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    try:
        return int(str(value).strip())
    except ValueError:
        return None
