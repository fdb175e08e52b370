"""Registry mapping destination types to connection validators."""

from typing import Callable, Dict, List, Optional, Type, TypeVar, Union

from cdc_conductor.config import ConductorConfig
from cdc_conductor.domain.models import Connection
from cdc_conductor.errors import NotFoundError
from cdc_conductor.logging import get_logger
from cdc_conductor.validation.base import (
    NULL_CONFIGURATION_MESSAGE,
    ConnectionValidationResult,
    ConnectionValidator,
    DestinationType,
)

logger = get_logger(__name__)

V = TypeVar("V", bound=ConnectionValidator)

VALIDATOR_CLASSES: Dict[DestinationType, Type[ConnectionValidator]] = {}


def register_validator(
    destination_type: DestinationType,
) -> Callable[[Type[V]], Type[V]]:
    """Register a validator class for a destination type.

    Args:
        destination_type: Destination family the class validates

    Returns:
        Decorator function
    """

    def decorator(cls: Type[V]) -> Type[V]:
        if destination_type in VALIDATOR_CLASSES:
            raise ValueError(
                f"Validator for destination type '{destination_type.value}' already registered"
            )
        cls.destination_type = destination_type
        VALIDATOR_CLASSES[destination_type] = cls
        return cls

    return decorator


class ValidatorRegistry:
    """Holds one validator instance per destination type."""

    def __init__(self):
        self._validators: Dict[DestinationType, ConnectionValidator] = {}

    def register(self, validator: ConnectionValidator) -> None:
        self._validators[validator.destination_type] = validator
        logger.debug(
            f"Registered {validator.__class__.__name__} for {validator.destination_type.value}"
        )

    def types(self) -> List[DestinationType]:
        return list(self._validators)

    def get(self, destination_type: Union[str, DestinationType]) -> ConnectionValidator:
        """Look up the validator for a destination type tag.

        Raises:
            NotFoundError: If no validator handles the type
        """
        resolved = DestinationType.from_value(destination_type)
        if resolved is None or resolved not in self._validators:
            raise NotFoundError(
                f"No connection validator registered for destination type '{destination_type}'"
            )
        return self._validators[resolved]

    def validate(self, connection: Optional[Connection]) -> ConnectionValidationResult:
        """Dispatch ``connection`` to the validator for its type.

        Raises:
            NotFoundError: If no validator handles the connection type
        """
        if connection is None:
            return ConnectionValidationResult.failed(NULL_CONFIGURATION_MESSAGE)
        return self.get(connection.type).validate(connection)


def default_registry(config: Optional[ConductorConfig] = None) -> ValidatorRegistry:
    """Registry with every known validator, timeouts taken from ``config``."""
    config = config or ConductorConfig()
    registry = ValidatorRegistry()
    for destination_type, cls in VALIDATOR_CLASSES.items():
        timeout = config.validation_timeout(destination_type.value)
        registry.register(cls(timeout_seconds=timeout))
    return registry
