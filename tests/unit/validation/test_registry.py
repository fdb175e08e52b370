import time
from unittest.mock import MagicMock

import pytest

from cdc_conductor.config import ConductorConfig
from cdc_conductor.domain import Connection
from cdc_conductor.errors import NotFoundError
from cdc_conductor.validation import (
    ConnectionValidationResult,
    DestinationType,
    RedisConnectionValidator,
    ValidatorRegistry,
    default_registry,
    register_validator,
)
from cdc_conductor.validation.registry import VALIDATOR_CLASSES


def test_default_registry_covers_every_destination_type():
    registry = default_registry()

    assert set(registry.types()) == set(DestinationType)


def test_default_registry_applies_configured_timeouts():
    config = ConductorConfig(validation_timeouts={"redis": 4})

    registry = default_registry(config)

    assert registry.get("REDIS").timeout_seconds == 4
    assert registry.get(DestinationType.HTTP).timeout_seconds == 30


def test_lookup_is_case_insensitive():
    assert isinstance(default_registry().get("redis"), RedisConnectionValidator)


def test_unknown_type():
    with pytest.raises(NotFoundError, match="KAFKA"):
        default_registry().get("KAFKA")


def test_validate_dispatches_on_connection_type():
    validator = MagicMock()
    validator.destination_type = DestinationType.MILVUS
    validator.validate.return_value = ConnectionValidationResult.successful()
    registry = ValidatorRegistry()
    registry.register(validator)
    connection = Connection(type="milvus", config={"uri": "http://milvus:19530"})

    result = registry.validate(connection)

    assert result.valid
    validator.validate.assert_called_once_with(connection)


def test_validate_null_connection():
    result = default_registry().validate(None)

    assert result.message == "Connection configuration cannot be null"


def test_duplicate_registration_is_rejected():
    with pytest.raises(ValueError, match="already registered"):

        @register_validator(DestinationType.REDIS)
        class AnotherRedisValidator(RedisConnectionValidator):
            pass

    assert VALIDATOR_CLASSES[DestinationType.REDIS] is RedisConnectionValidator


@pytest.mark.parametrize("destination_type", list(DestinationType))
def test_every_validator_rejects_null_configuration(destination_type):
    result = default_registry().get(destination_type).validate(None)

    assert not result.valid
    assert result.message == "Connection configuration cannot be null"


@pytest.mark.parametrize(
    "destination_type,config,message",
    [
        ("REDIS", {"port": "6379"}, "Host must be specified"),
        ("KINESIS", {"stream": "orders", "endpoint": "http://10.255.255.1"}, "Region must be specified"),
        ("QDRANT", {"port": "6334"}, "Hostname must be specified"),
        ("MILVUS", {"database": "10.255.255.1"}, "URI must be specified"),
        ("HTTP", {"timeout": "1"}, "URL must be specified"),
    ],
)
def test_missing_required_field_is_reported_before_any_network_call(
    destination_type, config, message
):
    started = time.monotonic()

    result = default_registry().validate(Connection(type=destination_type, config=config))

    assert result.message == message
    assert time.monotonic() - started < 0.5
