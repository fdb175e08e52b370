"""Milvus destination validator."""

from typing import Any, Dict, Mapping, Optional

from pymilvus import MilvusClient, MilvusException

from cdc_conductor.logging import get_logger
from cdc_conductor.validation.base import (
    ConnectionValidationResult,
    ConnectionValidator,
    DestinationType,
    authentication_failure,
    generic_failure,
    not_found_failure,
    permission_failure,
    text_value,
    timeout_failure,
    unavailable_failure,
)
from cdc_conductor.validation.registry import register_validator

logger = get_logger(__name__)

URI_KEY = "uri"
DATABASE_KEY = "database"
USERNAME_KEY = "username"
PASSWORD_KEY = "password"
TOKEN_KEY = "token"


@register_validator(DestinationType.MILVUS)
class MilvusConnectionValidator(ConnectionValidator):
    """Connects to Milvus and lists databases.

    Credentials are either a token or a username/password pair.
    """

    def validate_parameters(self, config: Mapping[str, Any]) -> ConnectionValidationResult:
        uri = text_value(config, URI_KEY)
        if uri is None:
            return ConnectionValidationResult.failed("URI must be specified")
        if not (uri.startswith("http://") or uri.startswith("https://")):
            return ConnectionValidationResult.failed(
                "URI must start with http:// or https://"
            )
        return ConnectionValidationResult.successful()

    def validate_connection(self, config: Mapping[str, Any]) -> ConnectionValidationResult:
        uri = text_value(config, URI_KEY)
        client: Optional[MilvusClient] = None
        try:
            client = MilvusClient(**self._client_options(config))
            databases = client.list_databases(timeout=self.timeout_seconds)
        except MilvusException as e:
            return classify_milvus_error(str(e.message or e))
        finally:
            if client is not None:
                client.close()

        database = text_value(config, DATABASE_KEY)
        if database and databases is not None and database not in databases:
            return not_found_failure(
                "Specified database does not exist - please check database name"
            )
        return ConnectionValidationResult.successful(f"Connected to Milvus at {uri}")

    def _client_options(self, config: Mapping[str, Any]) -> Dict[str, Any]:
        options: Dict[str, Any] = {
            "uri": text_value(config, URI_KEY),
            "timeout": self.timeout_seconds,
        }
        database = text_value(config, DATABASE_KEY)
        if database:
            options["db_name"] = database

        token = text_value(config, TOKEN_KEY)
        username = text_value(config, USERNAME_KEY)
        if token:
            options["token"] = token
        elif username:
            options["user"] = username
            options["password"] = str(config.get(PASSWORD_KEY) or "")
        return options


def classify_milvus_error(message: str) -> ConnectionValidationResult:
    """Map a Milvus error message onto a failure kind.

    The Milvus SDK reports most failures with generic codes, so the message
    text is the only reliable signal.
    """
    text = (message or "").lower()
    if "timeout" in text or "deadline" in text:
        return timeout_failure("please check network connectivity and server status")
    if "permission" in text or "privilege" in text:
        return permission_failure("please check the user's privileges on the database")
    if "auth" in text or "credential" in text or "token" in text:
        return authentication_failure("please check username, password, or token")
    if "database" in text and "not found" in text:
        return not_found_failure(
            "Specified database does not exist - please check database name"
        )
    if "connect" in text or "refused" in text or "unavailable" in text:
        return unavailable_failure(
            "Cannot connect to Milvus server (unavailable) - please check host and port configuration"
        )
    return generic_failure(f"Failed to connect to Milvus: {message}")
