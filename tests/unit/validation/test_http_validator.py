import time
import unittest

import requests
import requests_mock

from cdc_conductor.domain import Connection
from cdc_conductor.validation import HttpConnectionValidator, ValidationErrorKind

SINK_URL = "https://sink.example.com/events"


class TestHttpConnectionValidator(unittest.TestCase):
    def setUp(self):
        """Set up test fixtures."""
        self.validator = HttpConnectionValidator(timeout_seconds=1)
        self.connection = Connection(type="HTTP", config={"url": SINK_URL})

    def test_missing_url(self):
        result = self.validator.validate(Connection(type="HTTP"))

        self.assertEqual(result.message, "URL must be specified")

    def test_invalid_url(self):
        result = self.validator.validate(
            Connection(type="HTTP", config={"url": "ftp://sink.example.com"})
        )

        self.assertFalse(result.valid)
        self.assertIn("http://", result.message)

    def test_reachable_endpoint(self):
        with requests_mock.Mocker() as m:
            m.head(SINK_URL, status_code=200)
            result = self.validator.validate(self.connection)

        self.assertTrue(result.valid)

    def test_method_not_allowed_counts_as_reachable(self):
        with requests_mock.Mocker() as m:
            m.head(SINK_URL, status_code=405)
            result = self.validator.validate(self.connection)

        self.assertTrue(result.valid)
        self.assertIn("405", result.message)

    def test_status_mapping(self):
        cases = {
            401: ValidationErrorKind.AUTHENTICATION,
            403: ValidationErrorKind.PERMISSION,
            404: ValidationErrorKind.NOT_FOUND,
            503: ValidationErrorKind.UNAVAILABLE,
        }
        for status, kind in cases.items():
            with self.subTest(status=status):
                with requests_mock.Mocker() as m:
                    m.head(SINK_URL, status_code=status)
                    result = self.validator.validate(self.connection)

                self.assertFalse(result.valid)
                self.assertEqual(result.kind, kind)

    def test_timeout(self):
        with requests_mock.Mocker() as m:
            m.head(SINK_URL, exc=requests.exceptions.ConnectTimeout)
            result = self.validator.validate(self.connection)

        self.assertEqual(result.kind, ValidationErrorKind.TIMEOUT)

    def test_connection_refused(self):
        with requests_mock.Mocker() as m:
            m.head(SINK_URL, exc=requests.exceptions.ConnectionError)
            result = self.validator.validate(self.connection)

        self.assertEqual(result.kind, ValidationErrorKind.UNAVAILABLE)

    def test_unroutable_host_is_bounded_by_timeout(self):
        started = time.monotonic()

        result = self.validator.validate(
            Connection(type="HTTP", config={"url": "http://10.255.255.1:8080/"})
        )

        self.assertFalse(result.valid)
        self.assertIn(
            result.kind, (ValidationErrorKind.TIMEOUT, ValidationErrorKind.UNAVAILABLE)
        )
        self.assertLess(time.monotonic() - started, 5)
