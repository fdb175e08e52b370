"""Qdrant destination validator (gRPC)."""

from typing import Any, Mapping

import grpc
from qdrant_client import QdrantClient
from qdrant_client.http.exceptions import ResponseHandlingException, UnexpectedResponse

from cdc_conductor.logging import get_logger
from cdc_conductor.validation.base import (
    ConnectionValidationResult,
    ConnectionValidator,
    DeadlineExceeded,
    DestinationType,
    authentication_failure,
    bool_value,
    check_port,
    generic_failure,
    parse_port,
    permission_failure,
    run_with_deadline,
    text_value,
    timeout_failure,
    unavailable_failure,
)
from cdc_conductor.validation.registry import register_validator

logger = get_logger(__name__)

HOSTNAME_KEY = "hostname"
PORT_KEY = "port"
USE_TLS_KEY = "useTls"
API_KEY_KEY = "apiKey"


@register_validator(DestinationType.QDRANT)
class QdrantConnectionValidator(ConnectionValidator):
    """Lists collections over the gRPC port (usually 6334)."""

    def validate_parameters(self, config: Mapping[str, Any]) -> ConnectionValidationResult:
        if text_value(config, HOSTNAME_KEY) is None:
            return ConnectionValidationResult.failed("Hostname must be specified")

        port_failure = check_port(config, PORT_KEY)
        if port_failure is not None:
            return port_failure

        return ConnectionValidationResult.successful()

    def validate_connection(self, config: Mapping[str, Any]) -> ConnectionValidationResult:
        hostname = text_value(config, HOSTNAME_KEY)
        port = parse_port(config[PORT_KEY])
        use_tls = bool_value(config, USE_TLS_KEY)

        client = QdrantClient(
            host=hostname,
            grpc_port=port,
            prefer_grpc=True,
            https=use_tls,
            api_key=text_value(config, API_KEY_KEY),
            timeout=self.timeout_seconds,
            check_compatibility=False,
        )
        try:
            response = run_with_deadline(client.get_collections, self.timeout_seconds)
        except DeadlineExceeded:
            return timeout_failure("please check hostname, port and network connectivity")
        except grpc.RpcError as e:
            return self._rpc_error(e, use_tls)
        except UnexpectedResponse as e:
            return self._http_error(e)
        except ResponseHandlingException as e:
            return unavailable_failure(f"Qdrant server is unavailable - {e}")
        finally:
            client.close()

        count = len(response.collections)
        return ConnectionValidationResult.successful(
            f"Connected to Qdrant at {hostname}:{port} ({count} collections)"
        )

    def _rpc_error(self, error: grpc.RpcError, use_tls: bool) -> ConnectionValidationResult:
        code = error.code() if hasattr(error, "code") else None
        if code == grpc.StatusCode.UNAVAILABLE:
            if use_tls:
                return unavailable_failure(
                    "TLS connection failed - server is unavailable, check certificates and hostname"
                )
            return unavailable_failure(
                "Qdrant server is unavailable - please check if the server is running"
            )
        if code == grpc.StatusCode.UNAUTHENTICATED:
            return authentication_failure("please check API key")
        if code == grpc.StatusCode.PERMISSION_DENIED:
            return permission_failure("please check API key permissions")
        if code == grpc.StatusCode.DEADLINE_EXCEEDED:
            return timeout_failure("please check network connectivity")
        details = error.details() if hasattr(error, "details") else str(error)
        return generic_failure(f"gRPC error: {code} - {details}")

    def _http_error(self, error: UnexpectedResponse) -> ConnectionValidationResult:
        if error.status_code == 401:
            return authentication_failure("please check API key")
        if error.status_code == 403:
            return permission_failure("please check API key permissions")
        return generic_failure(f"Unexpected response from Qdrant: {error}")
