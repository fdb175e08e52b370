"""Redis destination validator."""

from typing import Any, Dict, Mapping

import redis
from redis.backoff import NoBackoff
from redis.retry import Retry

from cdc_conductor.logging import get_logger
from cdc_conductor.validation.base import (
    ConnectionValidationResult,
    ConnectionValidator,
    DestinationType,
    authentication_failure,
    bool_value,
    check_port,
    generic_failure,
    parse_port,
    permission_failure,
    text_value,
    timeout_failure,
    unavailable_failure,
)
from cdc_conductor.validation.registry import register_validator

logger = get_logger(__name__)

HOST_KEY = "host"
PORT_KEY = "port"
USERNAME_KEY = "username"
PASSWORD_KEY = "password"
USE_SSL_KEY = "useSsl"


@register_validator(DestinationType.REDIS)
class RedisConnectionValidator(ConnectionValidator):
    """Checks host/port/credentials and answers a PING with PONG."""

    def validate_parameters(self, config: Mapping[str, Any]) -> ConnectionValidationResult:
        if text_value(config, HOST_KEY) is None:
            return ConnectionValidationResult.failed("Host must be specified")

        port_failure = check_port(config, PORT_KEY)
        if port_failure is not None:
            return port_failure

        if USE_SSL_KEY in config and config[USE_SSL_KEY] is not None:
            value = str(config[USE_SSL_KEY]).strip().lower()
            if value not in ("true", "false"):
                return ConnectionValidationResult.failed(
                    "useSsl must be 'true' or 'false' if specified"
                )

        return ConnectionValidationResult.successful()

    def validate_connection(self, config: Mapping[str, Any]) -> ConnectionValidationResult:
        host = text_value(config, HOST_KEY)
        port = parse_port(config[PORT_KEY])

        try:
            with redis.Redis(**self._client_options(config)) as client:
                response = client.ping()
        except redis.exceptions.AuthenticationError:
            return authentication_failure("please check username and password")
        except redis.exceptions.NoPermissionError:
            return permission_failure("the Redis user is not allowed to run PING")
        except redis.exceptions.TimeoutError:
            return timeout_failure()
        except redis.exceptions.ConnectionError as e:
            return unavailable_failure(
                f"Redis server is unavailable at {host}:{port} - {e}"
            )
        except redis.exceptions.ResponseError as e:
            text = str(e).upper()
            if "NOAUTH" in text or "WRONGPASS" in text:
                return authentication_failure("please check username and password")
            return generic_failure(f"Redis error: {e}")
        except redis.exceptions.RedisError as e:
            return generic_failure(f"Failed to connect to Redis: {e}")

        if response is True or str(response).upper() == "PONG":
            return ConnectionValidationResult.successful(
                f"Connected to Redis at {host}:{port}"
            )
        return unavailable_failure(
            f"Redis server is unavailable - unexpected PING response: {response}"
        )

    def _client_options(self, config: Mapping[str, Any]) -> Dict[str, Any]:
        options: Dict[str, Any] = {
            "host": text_value(config, HOST_KEY),
            "port": parse_port(config[PORT_KEY]),
            "ssl": bool_value(config, USE_SSL_KEY),
            "socket_connect_timeout": self.timeout_seconds,
            "socket_timeout": self.timeout_seconds,
            "retry": Retry(NoBackoff(), 0),
        }
        password = config.get(PASSWORD_KEY)
        username = text_value(config, USERNAME_KEY)
        if password:
            options["password"] = str(password)
            if username:
                options["username"] = username
        return options
