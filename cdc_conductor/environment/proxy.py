from typing import Any, Dict, Optional

import requests

from cdc_conductor.compiler.deployment import LABEL_CONDUCTOR_ID
from cdc_conductor.config import SignalSettings
from cdc_conductor.domain.signal import Signal
from cdc_conductor.errors import SignalDeliveryError
from cdc_conductor.logging import get_logger

logger = get_logger(__name__)

SIGNALS_PATH = "/api/signals"


class DebeziumServerProxy:
    """Forward signals to the control API of a running Debezium Server.

    Delivery is fire-and-forget: a 2xx answer means the server accepted the
    signal, not that the pipeline processed it.
    """

    def __init__(
        self,
        settings: Optional[SignalSettings] = None,
        namespace: str = "debezium",
        session: Optional[requests.Session] = None,
    ):
        self.settings = settings or SignalSettings()
        self.namespace = namespace
        self.session = session or requests.Session()

    def signal_url(self, resource: Dict[str, Any]) -> str:
        metadata = resource.get("metadata") or {}
        namespace = metadata.get("namespace") or self.namespace
        return (
            f"{self.settings.scheme}://{metadata['name']}.{namespace}.svc:"
            f"{self.settings.port}{SIGNALS_PATH}"
        )

    def send_signal(self, signal: Signal, resource: Dict[str, Any]) -> None:
        """POST ``signal`` to the deployment described by ``resource``.

        Raises:
            SignalDeliveryError: On transport errors or a non-2xx answer
        """
        url = self.signal_url(resource)
        pipeline_id = _pipeline_id(resource)
        logger.debug(f"Sending {signal.type} signal {signal.id} to {url}")

        try:
            response = self.session.post(
                url, json=signal.to_dict(), timeout=self.settings.timeout_seconds
            )
            response.raise_for_status()
        except requests.exceptions.HTTPError as e:
            raise SignalDeliveryError(
                pipeline_id, f"HTTP {e.response.status_code} from {url}"
            ) from e
        except requests.exceptions.RequestException as e:
            raise SignalDeliveryError(pipeline_id, str(e)) from e

        logger.info(f"Signal {signal.id} ({signal.type}) sent to pipeline {pipeline_id}")


def _pipeline_id(resource: Dict[str, Any]) -> str:
    labels = (resource.get("metadata") or {}).get("labels") or {}
    return labels.get(LABEL_CONDUCTOR_ID, "unknown")
