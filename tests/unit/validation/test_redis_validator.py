import time
from unittest.mock import MagicMock, patch

import pytest
import redis

from cdc_conductor.domain import Connection
from cdc_conductor.validation import RedisConnectionValidator, ValidationErrorKind

UNROUTABLE_HOST = "10.255.255.1"


def redis_connection(**config):
    return Connection(type="REDIS", config=config)


@pytest.fixture
def validator():
    return RedisConnectionValidator(timeout_seconds=1)


@pytest.fixture
def redis_client():
    with patch("cdc_conductor.validation.redis_validator.redis.Redis") as redis_cls:
        client = MagicMock()
        client.__enter__.return_value = client
        client.__exit__.return_value = False
        redis_cls.return_value = client
        client.redis_cls = redis_cls
        yield client


class TestParameters:
    def test_missing_host(self, validator):
        result = validator.validate(redis_connection(port="6379"))

        assert result.message == "Host must be specified"

    def test_missing_port(self, validator):
        result = validator.validate(redis_connection(host="localhost"))

        assert result.message == "Port must be specified"

    def test_invalid_port(self, validator):
        result = validator.validate(redis_connection(host="localhost", port="six"))

        assert result.message == "Port must be a valid integer"

    def test_invalid_use_ssl(self, validator):
        result = validator.validate(
            redis_connection(host="localhost", port="6379", useSsl="maybe")
        )

        assert result.message == "useSsl must be 'true' or 'false' if specified"

    def test_missing_field_wins_over_unreachable_host(self, validator):
        started = time.monotonic()

        result = validator.validate(redis_connection(host=UNROUTABLE_HOST))

        assert result.message == "Port must be specified"
        assert time.monotonic() - started < 0.5


class TestConnection:
    def test_successful_ping(self, validator, redis_client):
        redis_client.ping.return_value = True

        result = validator.validate(
            redis_connection(
                host="redis", port="6380", useSsl="TRUE", username="app", password="pw"
            )
        )

        assert result.valid
        options = redis_client.redis_cls.call_args[1]
        assert options["host"] == "redis"
        assert options["port"] == 6380
        assert options["ssl"] is True
        assert options["username"] == "app"
        assert options["password"] == "pw"
        assert options["socket_connect_timeout"] == 1
        assert options["socket_timeout"] == 1
        redis_client.__exit__.assert_called_once()

    def test_password_only_authentication(self, validator, redis_client):
        redis_client.ping.return_value = True

        validator.validate(redis_connection(host="redis", port=6379, password="pw"))

        options = redis_client.redis_cls.call_args[1]
        assert options["password"] == "pw"
        assert "username" not in options

    def test_unexpected_ping_answer(self, validator, redis_client):
        redis_client.ping.return_value = "PANG"

        result = validator.validate(redis_connection(host="redis", port=6379))

        assert not result.valid
        assert result.kind is ValidationErrorKind.UNAVAILABLE

    @pytest.mark.parametrize(
        "error,kind",
        [
            (redis.exceptions.AuthenticationError("invalid password"), ValidationErrorKind.AUTHENTICATION),
            (redis.exceptions.ResponseError("WRONGPASS invalid username-password pair"), ValidationErrorKind.AUTHENTICATION),
            (redis.exceptions.NoPermissionError("NOPERM"), ValidationErrorKind.PERMISSION),
            (redis.exceptions.TimeoutError("Timeout connecting to server"), ValidationErrorKind.TIMEOUT),
            (redis.exceptions.ConnectionError("Connection refused"), ValidationErrorKind.UNAVAILABLE),
            (redis.exceptions.ResponseError("ERR unknown"), ValidationErrorKind.GENERIC),
        ],
    )
    def test_error_mapping(self, validator, redis_client, error, kind):
        redis_client.ping.side_effect = error

        result = validator.validate(redis_connection(host="redis", port=6379))

        assert not result.valid
        assert result.kind is kind
        assert result.message

    def test_unreachable_host_is_bounded_by_timeout(self, validator):
        started = time.monotonic()

        result = validator.validate(redis_connection(host=UNROUTABLE_HOST, port=6379))

        assert not result.valid
        assert result.kind in (ValidationErrorKind.TIMEOUT, ValidationErrorKind.UNAVAILABLE)
        assert time.monotonic() - started < 5
