import unittest

import requests
import requests_mock

from cdc_conductor.config import SignalSettings
from cdc_conductor.domain import Signal
from cdc_conductor.environment import DebeziumServerProxy
from cdc_conductor.errors import SignalDeliveryError

SIGNAL_URL = "http://orders.cdc.svc:8080/api/signals"


class TestDebeziumServerProxy(unittest.TestCase):
    def setUp(self):
        """Set up a proxy and a deployed resource."""
        self.proxy = DebeziumServerProxy(SignalSettings(timeout_seconds=1.0), namespace="debezium")
        self.resource = {
            "metadata": {
                "name": "orders",
                "namespace": "cdc",
                "labels": {"debezium.io/conductor-id": "7"},
            }
        }

    def test_signal_url_uses_resource_namespace(self):
        self.assertEqual(self.proxy.signal_url(self.resource), SIGNAL_URL)

    def test_signal_url_falls_back_to_default_namespace(self):
        del self.resource["metadata"]["namespace"]

        self.assertEqual(
            self.proxy.signal_url(self.resource),
            "http://orders.debezium.svc:8080/api/signals",
        )

    def test_send_signal_posts_json(self):
        signal = Signal.execute_snapshot(["inventory.orders"], signal_id="abc")

        with requests_mock.Mocker() as m:
            m.post(SIGNAL_URL, status_code=202)
            self.proxy.send_signal(signal, self.resource)

            self.assertEqual(m.call_count, 1)
            self.assertEqual(m.last_request.json(), signal.to_dict())

    def test_http_error_raises_delivery_error(self):
        with requests_mock.Mocker() as m:
            m.post(SIGNAL_URL, status_code=503)

            with self.assertRaises(SignalDeliveryError) as context:
                self.proxy.send_signal(Signal.pause_snapshot(), self.resource)

        self.assertEqual(context.exception.pipeline_id, "7")
        self.assertIn("503", str(context.exception))

    def test_transport_error_raises_delivery_error(self):
        with requests_mock.Mocker() as m:
            m.post(SIGNAL_URL, exc=requests.exceptions.ConnectTimeout)

            with self.assertRaises(SignalDeliveryError):
                self.proxy.send_signal(Signal.resume_snapshot(), self.resource)
