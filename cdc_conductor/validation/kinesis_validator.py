"""Amazon Kinesis destination validator."""

from contextlib import closing
from typing import Any, Mapping
from urllib.parse import urlparse

import boto3
from botocore.config import Config
from botocore.exceptions import (
    BotoCoreError,
    ClientError,
    ConnectTimeoutError,
    EndpointConnectionError,
    NoCredentialsError,
    PartialCredentialsError,
    ReadTimeoutError,
)

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

REGION_KEY = "region"
STREAM_KEY = "stream"
ENDPOINT_KEY = "endpoint"

AUTHENTICATION_ERROR_CODES = {
    "UnrecognizedClientException",
    "InvalidSignatureException",
    "IncompleteSignature",
    "InvalidClientTokenId",
    "ExpiredTokenException",
    "MissingAuthenticationToken",
}
PERMISSION_ERROR_CODES = {"AccessDeniedException", "AccessDenied"}


@register_validator(DestinationType.KINESIS)
class KinesisConnectionValidator(ConnectionValidator):
    """Describes the configured stream using the default AWS credential chain."""

    def validate_parameters(self, config: Mapping[str, Any]) -> ConnectionValidationResult:
        if text_value(config, REGION_KEY) is None:
            return ConnectionValidationResult.failed("Region must be specified")
        if text_value(config, STREAM_KEY) is None:
            return ConnectionValidationResult.failed("Stream name must be specified")

        endpoint = text_value(config, ENDPOINT_KEY)
        if endpoint is not None:
            parsed = urlparse(endpoint)
            if parsed.scheme not in ("http", "https") or not parsed.netloc:
                return ConnectionValidationResult.failed(
                    "Endpoint must be a valid http:// or https:// URL"
                )

        return ConnectionValidationResult.successful()

    def validate_connection(self, config: Mapping[str, Any]) -> ConnectionValidationResult:
        region = text_value(config, REGION_KEY)
        stream = text_value(config, STREAM_KEY)
        client_config = Config(
            connect_timeout=self.timeout_seconds,
            read_timeout=self.timeout_seconds,
            retries={"max_attempts": 1, "mode": "standard"},
        )

        try:
            client = boto3.client(
                "kinesis",
                region_name=region,
                endpoint_url=text_value(config, ENDPOINT_KEY),
                config=client_config,
            )
            with closing(client):
                summary = client.describe_stream_summary(StreamName=stream)
        except ClientError as e:
            return self._client_error(e, stream)
        except (NoCredentialsError, PartialCredentialsError):
            return authentication_failure("no usable AWS credentials were found")
        except (ConnectTimeoutError, ReadTimeoutError):
            return timeout_failure("please check the region and network connectivity")
        except EndpointConnectionError as e:
            return unavailable_failure(f"Kinesis endpoint is unavailable - {e}")
        except BotoCoreError as e:
            return generic_failure(f"Client error: {e}")

        status = summary.get("StreamDescriptionSummary", {}).get("StreamStatus")
        logger.debug(f"Kinesis stream '{stream}' in {region} has status {status}")
        return ConnectionValidationResult.successful(
            f"Stream '{stream}' found in {region}"
        )

    def _client_error(self, error: ClientError, stream: str) -> ConnectionValidationResult:
        code = error.response.get("Error", {}).get("Code", "")
        if code == "ResourceNotFoundException":
            return not_found_failure(
                f"Stream '{stream}' not found - please verify the stream name and region"
            )
        if code in PERMISSION_ERROR_CODES:
            return permission_failure("check IAM permissions or credentials")
        if code in AUTHENTICATION_ERROR_CODES:
            return authentication_failure("check the AWS access key and secret")
        return generic_failure(f"Failed to validate Kinesis connection: {error}")
