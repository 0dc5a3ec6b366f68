"""
Unit tests for the Envirofacts / geocoder HTTP client
"""
from unittest.mock import MagicMock, Mock

import pytest
import requests

from clearwater.fetch import EnvirofactsClient
from clearwater.models import Location


def response(status=200, text="", payload=None):
    r = Mock()
    r.status_code = status
    r.ok = 200 <= status < 300
    r.text = text
    if isinstance(payload, Exception):
        r.json.side_effect = payload
    else:
        r.json.return_value = payload
    return r


@pytest.fixture
def session():
    return MagicMock()


@pytest.fixture
def client(settings, session):
    return EnvirofactsClient(settings, session=session)


class TestEnvirofactsClient:

    def test_default_session_has_headers(self, settings):
        c = EnvirofactsClient(settings)
        assert "ClearWater" in c.session.headers["User-Agent"]
        c.close()

    def test_get_json_ok(self, client, session):
        session.get.return_value = response(text='[{"pwsid": "x"}]', payload=[{"pwsid": "x"}])
        assert client.get_json("https://example.test/a", timeout=3) == [{"pwsid": "x"}]
        _, kwargs = session.get.call_args
        assert kwargs["timeout"] == 3

    def test_uses_epa_timeout_by_default(self, client, session, settings):
        session.get.return_value = response(text="[]")
        client.get_json("https://example.test/a")
        assert session.get.call_args[1]["timeout"] == settings.epa_timeout

    @pytest.mark.parametrize("body", ["", "  ", "[]"])
    def test_empty_body_is_empty_list(self, client, session, body):
        session.get.return_value = response(text=body)
        assert client.get_json("https://example.test/a") == []

    def test_http_error_is_none(self, client, session):
        session.get.return_value = response(status=500, text="oops")
        assert client.get_json("https://example.test/a") is None

    def test_timeout_is_none(self, client, session):
        session.get.side_effect = requests.Timeout("slow")
        assert client.get_json("https://example.test/a") is None

    def test_connection_error_is_none(self, client, session):
        session.get.side_effect = requests.ConnectionError("down")
        assert client.get_json("https://example.test/a") is None

    def test_bad_json_is_none(self, client, session):
        session.get.return_value = response(text="<html>", payload=ValueError("nope"))
        assert client.get_json("https://example.test/a") is None

    def test_get_rows_rejects_non_list(self, client, session):
        session.get.return_value = response(text="{}", payload={"error": "x"})
        assert client.get_rows("https://example.test/a") is None

    def test_zip_to_city(self, client, session, settings):
        payload = {"places": [{"place name": "New York", "state abbreviation": "ny"}]}
        session.get.return_value = response(text="{...}", payload=payload)
        assert client.zip_to_city("10001") == Location(city="NEW YORK", state="NY")
        args, kwargs = session.get.call_args
        assert args[0].endswith("/us/10001")
        assert kwargs["timeout"] == settings.geocode_timeout

    @pytest.mark.parametrize("payload", [{}, {"places": []}, [], {"places": [{"place name": ""}]}])
    def test_zip_not_found(self, client, session, payload):
        session.get.return_value = response(text="{}", payload=payload)
        assert client.zip_to_city("00000") is None

    def test_city_query_is_url_encoded(self, client, session):
        session.get.return_value = response(text="[]")
        client.systems_in_city("SAN JOSE", "CA")
        url = session.get.call_args[0][0]
        assert "/WATER_SYSTEM/primacy_agency_code/CA/city_name/SAN%20JOSE/pws_activity_code/A/rows/0:30/JSON" in url

    def test_facet_urls(self, client, session):
        session.get.return_value = response(text="[]")
        client.violations("NY7003493")
        client.lcr_sample_results("NY7003493")
        client.lcr_samples("NY7003493")
        client.system_detail("NY7003493")
        urls = [c[0][0] for c in session.get.call_args_list]
        assert urls[0].endswith("/VIOLATION/pwsid/NY7003493/rows/0:500/JSON")
        assert urls[1].endswith("/LCR_SAMPLE_RESULT/pwsid/NY7003493/rows/0:200/JSON")
        assert urls[2].endswith("/LCR_SAMPLE/pwsid/NY7003493/rows/0:200/JSON")
        assert urls[3].endswith("/WATER_SYSTEM/pwsid/NY7003493/JSON")
