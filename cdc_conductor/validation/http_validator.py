"""HTTP sink destination validator."""

from typing import Any, Mapping
from urllib.parse import urlparse

import requests

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

URL_KEY = "url"


@register_validator(DestinationType.HTTP)
class HttpConnectionValidator(ConnectionValidator):
    """Sends a HEAD request to the sink URL.

    Any answer below 500 other than 401, 403 and 404 counts as reachable:
    many webhook endpoints reject HEAD with 405 but accept POST.
    """

    def validate_parameters(self, config: Mapping[str, Any]) -> ConnectionValidationResult:
        url = text_value(config, URL_KEY)
        if url is None:
            return ConnectionValidationResult.failed("URL must be specified")
        parsed = urlparse(url)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            return ConnectionValidationResult.failed(
                "URL must start with http:// or https://"
            )
        return ConnectionValidationResult.successful()

    def validate_connection(self, config: Mapping[str, Any]) -> ConnectionValidationResult:
        url = text_value(config, URL_KEY)
        try:
            with requests.Session() as session:
                response = session.head(
                    url, timeout=self.timeout_seconds, allow_redirects=True
                )
        except requests.exceptions.Timeout:
            return timeout_failure("please check the URL and network connectivity")
        except requests.exceptions.SSLError as e:
            return unavailable_failure(
                f"TLS connection failed - endpoint unavailable, check certificates: {e}"
            )
        except requests.exceptions.ConnectionError:
            return unavailable_failure(
                f"HTTP endpoint is unavailable - cannot connect to {url}"
            )
        except requests.exceptions.RequestException as e:
            return generic_failure(f"HTTP request failed: {e}")

        status = response.status_code
        if status == 401:
            return authentication_failure("the endpoint requires credentials")
        if status == 403:
            return permission_failure("the endpoint refused the request")
        if status == 404:
            return not_found_failure(f"Endpoint not found: {url}")
        if status >= 500:
            return unavailable_failure(
                f"HTTP endpoint is unavailable - server answered {status}"
            )
        return ConnectionValidationResult.successful(
            f"Endpoint {url} answered with status {status}"
        )
