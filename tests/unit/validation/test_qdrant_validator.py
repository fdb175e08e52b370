import time
from types import SimpleNamespace
from unittest.mock import patch

import grpc
import pytest

from cdc_conductor.domain import Connection
from cdc_conductor.validation import QdrantConnectionValidator, ValidationErrorKind


class FakeRpcError(grpc.RpcError):
    def __init__(self, code, details="rpc failed"):
        super().__init__(details)
        self._code = code
        self._details = details

    def code(self):
        return self._code

    def details(self):
        return self._details


def qdrant_connection(**config):
    return Connection(type="QDRANT", config=config)


@pytest.fixture
def validator():
    return QdrantConnectionValidator(timeout_seconds=1)


@pytest.fixture
def qdrant_client():
    with patch("cdc_conductor.validation.qdrant_validator.QdrantClient") as client_cls:
        client = client_cls.return_value
        client.client_cls = client_cls
        client.get_collections.return_value = SimpleNamespace(collections=[])
        yield client


class TestParameters:
    def test_missing_hostname(self, validator):
        result = validator.validate(qdrant_connection(port=6334))

        assert result.message == "Hostname must be specified"

    @pytest.mark.parametrize("port", [0, 65536])
    def test_port_out_of_range(self, validator, port):
        result = validator.validate(qdrant_connection(hostname="qdrant", port=port))

        assert result.message == "Port must be between 1 and 65535"

    def test_port_is_required(self, validator, qdrant_client):
        result = validator.validate(qdrant_connection(hostname="qdrant"))

        assert not result.valid
        assert result.message == "Port must be specified"
        qdrant_client.client_cls.assert_not_called()

    def test_port_must_be_an_integer(self, validator, qdrant_client):
        result = validator.validate(qdrant_connection(hostname="qdrant", port="grpc"))

        assert result.message == "Port must be a valid integer"
        qdrant_client.client_cls.assert_not_called()


class TestConnection:
    def test_lists_collections_over_grpc(self, validator, qdrant_client):
        qdrant_client.get_collections.return_value = SimpleNamespace(
            collections=["a", "b"]
        )

        result = validator.validate(
            qdrant_connection(hostname="qdrant", port="6334", useTls="true", apiKey="key")
        )

        assert result.valid
        assert "2 collections" in result.message
        kwargs = qdrant_client.client_cls.call_args[1]
        assert kwargs["host"] == "qdrant"
        assert kwargs["grpc_port"] == 6334
        assert kwargs["prefer_grpc"] is True
        assert kwargs["https"] is True
        assert kwargs["api_key"] == "key"
        qdrant_client.close.assert_called_once()

    @pytest.mark.parametrize(
        "code,use_tls,kind,fragment",
        [
            (grpc.StatusCode.UNAVAILABLE, "false", ValidationErrorKind.UNAVAILABLE, "unavailable"),
            (grpc.StatusCode.UNAVAILABLE, "true", ValidationErrorKind.UNAVAILABLE, "TLS connection failed"),
            (grpc.StatusCode.UNAUTHENTICATED, "false", ValidationErrorKind.AUTHENTICATION, "API key"),
            (grpc.StatusCode.PERMISSION_DENIED, "false", ValidationErrorKind.PERMISSION, "permissions"),
            (grpc.StatusCode.DEADLINE_EXCEEDED, "false", ValidationErrorKind.TIMEOUT, "timeout"),
            (grpc.StatusCode.INTERNAL, "false", ValidationErrorKind.GENERIC, "gRPC error"),
        ],
    )
    def test_rpc_error_mapping(self, validator, qdrant_client, code, use_tls, kind, fragment):
        qdrant_client.get_collections.side_effect = FakeRpcError(code)

        result = validator.validate(
            qdrant_connection(hostname="qdrant", port=6334, useTls=use_tls)
        )

        assert result.kind is kind
        assert fragment in result.message
        qdrant_client.close.assert_called_once()

    def test_slow_server_hits_deadline(self, validator, qdrant_client):
        qdrant_client.get_collections.side_effect = lambda: time.sleep(2)
        started = time.monotonic()

        result = validator.validate(qdrant_connection(hostname="qdrant", port=6334))

        assert result.kind is ValidationErrorKind.TIMEOUT
        assert time.monotonic() - started < 1.8
        qdrant_client.close.assert_called_once()
