"""Tests for the disease.sh statistics client and the HTTP helper."""

from __future__ import annotations

import unittest
from unittest import mock

import requests

from covid_report.clients.disease_sh import (
    StatisticsAPIError,
    StatisticsClient,
    StatisticsRecord,
    statistics_path,
)
from covid_report.http_utils import HTTPError, http_get, join_url


def _response(status: int = 200, payload=None, text: str = "") -> mock.Mock:
    resp = mock.Mock()
    resp.status_code = status
    resp.text = text
    if isinstance(payload, Exception):
        resp.json.side_effect = payload
    else:
        resp.json.return_value = payload
    return resp


_PAYLOAD = {
    "updated": 1588300000000,
    "country": "Japan",
    "population": 126476461,
    "active": 6000,
    "critical": 250,
    "recovered": 7000,
    "cases": 14000,
    "deaths": 450,
    "tests": 180000,
}


class TestUrlResolution(unittest.TestCase):

    def test_aggregate_path(self):
        self.assertEqual(statistics_path("all"), "all")

    def test_country_path(self):
        self.assertEqual(statistics_path("JP"), "countries/JP")

    def test_join_url_single_slash(self):
        self.assertEqual(join_url("https://x/v3/", "/all"), "https://x/v3/all")
        self.assertEqual(join_url("https://x/v3", "all"), "https://x/v3/all")

    def test_client_urls(self):
        client = StatisticsClient(base_url="https://disease.sh/v3/covid-19/")
        self.assertEqual(client.url_for("all"), "https://disease.sh/v3/covid-19/all")
        self.assertEqual(client.url_for("Japan"), "https://disease.sh/v3/covid-19/countries/Japan")


class TestStatisticsClient(unittest.TestCase):

    @mock.patch("covid_report.http_utils.requests.get")
    def test_success_builds_record(self, get):
        get.return_value = _response(payload=_PAYLOAD)
        client = StatisticsClient(base_url="http://fake/", timeout_s=5)

        record = client.fetch("Japan")

        get.assert_called_once_with(
            "http://fake/countries/Japan", params=None, headers=None, timeout=5,
        )
        self.assertEqual(record.population, 126476461)
        self.assertEqual(record.tests, 180000)
        self.assertEqual(set(record.to_dict()), {
            "population", "active", "critical", "recovered", "cases", "deaths", "tests",
        })

    @mock.patch("covid_report.http_utils.requests.get")
    def test_partial_payload_gives_none_fields(self, get):
        get.return_value = _response(payload={"population": 10, "cases": "42", "tests": None})
        record = StatisticsClient(base_url="http://fake/").fetch("all")

        self.assertEqual(record, StatisticsRecord(population=10, cases=42))

    @mock.patch("covid_report.http_utils.requests.get")
    def test_not_found_is_no_data(self, get):
        get.return_value = _response(status=404, text='{"message": "Country not found"}')
        client = StatisticsClient(base_url="http://fake/")

        self.assertIsNone(client.fetch("Atlantis"))
        with self.assertRaises(StatisticsAPIError) as cm:
            client.get_statistics("Atlantis")
        self.assertEqual(cm.exception.endpoint, "countries/Atlantis")

    @mock.patch("covid_report.http_utils.requests.get")
    def test_message_payload_is_no_data(self, get):
        get.return_value = _response(payload={"message": "Country not found or doesn't have any cases"})
        self.assertIsNone(StatisticsClient(base_url="http://fake/").fetch("Atlantis"))

    @mock.patch("covid_report.http_utils.requests.get")
    def test_non_finite_values_become_none(self, get):
        """Infinity / NaN (accepted by the JSON parser) are treated as missing."""
        get.return_value = _response(payload={
            "population": float("inf"), "active": 1, "tests": float("nan"),
        })
        record = StatisticsClient(base_url="http://fake/").fetch("JP")

        self.assertEqual(record, StatisticsRecord(active=1))

    @mock.patch("covid_report.http_utils.requests.get")
    def test_object_without_statistics_fields_is_no_data(self, get):
        get.return_value = _response(payload={"foo": 1})
        client = StatisticsClient(base_url="http://fake/")

        self.assertIsNone(client.fetch("JP"))
        with self.assertRaises(StatisticsAPIError) as cm:
            client.get_statistics("JP")
        self.assertIn("none of the statistics fields", str(cm.exception))

    @mock.patch("covid_report.http_utils.requests.get")
    def test_list_payload_is_no_data(self, get):
        get.return_value = _response(payload=[_PAYLOAD])
        self.assertIsNone(StatisticsClient(base_url="http://fake/").fetch("Japan"))

    @mock.patch("covid_report.http_utils.requests.get")
    def test_transport_error_is_no_data(self, get):
        get.side_effect = requests.ConnectionError("down")
        self.assertIsNone(StatisticsClient(base_url="http://fake/").fetch("all"))
        self.assertEqual(get.call_count, 1)


class TestHttpGet(unittest.TestCase):

    @mock.patch("covid_report.http_utils.requests.get")
    def test_invalid_json_raises(self, get):
        get.return_value = _response(payload=ValueError("Expecting value"))
        with self.assertRaises(HTTPError) as cm:
            http_get("http://fake/all")
        self.assertEqual(cm.exception.status_code, 200)

    @mock.patch("covid_report.http_utils.requests.get")
    def test_request_exception_wrapped(self, get):
        get.side_effect = requests.Timeout("slow")
        with self.assertRaises(HTTPError) as cm:
            http_get("http://fake/all", timeout_s=1)
        self.assertEqual(cm.exception.status_code, 0)
        self.assertIn("slow", str(cm.exception))


if __name__ == "__main__":
    unittest.main()
