# clearwater/fetch.py: HTTP access to the ZIP geocoder and EPA Envirofacts
#
# Every call is a single attempt bounded by a timeout.  Failures are logged and
# come back as None ("no data"), never as an exception.
import logging
from typing import Any
from urllib.parse import quote

import requests
import urllib3

from clearwater.config import Settings, get_settings
from clearwater.models import Location

logger = logging.getLogger(__name__)

# ----------------------- URL templates -----------------------

# Envirofacts caps filtered queries; larger windows tend to 500.
VIOLATION_ROWS = "0:500"
LCR_ROWS = "0:200"
CITY_ROWS = "0:30"
CITY_ONLY_ROWS = "0:50"
STATE_ROWS = "0:200"

PWSID_URL = "{base}/{table}/pwsid/{pwsid}/rows/{rows}/JSON"
SYSTEM_URL = "{base}/WATER_SYSTEM/pwsid/{pwsid}/JSON"
CITY_URL = "{base}/WATER_SYSTEM/{state_col}/{state}/city_name/{city}/pws_activity_code/A/rows/{rows}/JSON"
CITY_ONLY_URL = "{base}/WATER_SYSTEM/city_name/{city}/pws_activity_code/A/rows/{rows}/JSON"
STATE_URL = "{base}/WATER_SYSTEM/primacy_agency_code/{state}/pws_activity_code/A/pws_type_code/CWS/rows/{rows}/JSON"


class EnvirofactsClient:
    """Thin JSON client over one pooled ``requests.Session``.

    The session is safe to share across the report thread pool for plain GETs.
    """

    def __init__(self, settings: Settings | None = None, session: requests.Session | None = None):
        self.settings = settings or get_settings()
        if session is None:
            session = requests.Session()
            # max_retries=0: one attempt per fetch, the cache absorbs upstream flakiness
            adapter = requests.adapters.HTTPAdapter(pool_connections=10, pool_maxsize=10, max_retries=0)
            session.mount("https://", adapter)
            session.mount("http://", adapter)
            session.headers.update({
                "Accept": "application/json, text/plain, */*",
                "Accept-Language": "en-US,en;q=0.9",
                "User-Agent": self.settings.user_agent,
            })
        if not self.settings.verify_tls:
            urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)
        self.session = session

    def close(self) -> None:
        self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    # ----------------------- core GET -----------------------

    def get_json(self, url: str, timeout: float | None = None) -> Any:
        """GET ``url`` and decode JSON.

        Returns [] for an empty body or '[]', None on HTTP error, timeout,
        connection failure or undecodable body.
        """
        timeout = self.settings.epa_timeout if timeout is None else timeout
        try:
            r = self.session.get(url, timeout=timeout, verify=self.settings.verify_tls)
        except requests.Timeout:
            logger.warning("[fetch] timeout after %ss for %s", timeout, url)
            return None
        except requests.RequestException as e:
            logger.warning("[fetch] error for %s: %s", url, e)
            return None
        if not r.ok:
            logger.warning("[fetch] %s for %s", r.status_code, url)
            return None
        text = (r.text or "").strip()
        if not text or text == "[]":
            return []
        try:
            return r.json()
        except ValueError as e:
            logger.warning("[fetch] bad JSON from %s: %s", url, e)
            return None

    def get_rows(self, url: str, timeout: float | None = None) -> list[dict] | None:
        """Like get_json but only accepts a JSON array; anything else is a failure (None)."""
        data = self.get_json(url, timeout)
        if data is None:
            return None
        if not isinstance(data, list):
            logger.warning("[fetch] expected a list from %s, got %s", url, type(data).__name__)
            return None
        return [row for row in data if isinstance(row, dict)]

    # ----------------------- geocoder -----------------------

    def zip_to_city(self, zip_code: str) -> Location | None:
        data = self.get_json(f"{self.settings.zip_api_url}/{zip_code}", self.settings.geocode_timeout)
        if not isinstance(data, dict):
            return None
        places = data.get("places") or []
        if not places or not isinstance(places[0], dict):
            return None
        place = places[0]
        city = str(place.get("place name") or "").strip().upper()
        state = str(place.get("state abbreviation") or "").strip().upper()
        if not city or not state:
            return None
        return Location(city=city, state=state)

    # ----------------------- WATER_SYSTEM -----------------------

    def systems_in_city(self, city: str, state: str, state_col: str = "primacy_agency_code") -> list[dict] | None:
        url = CITY_URL.format(base=self.settings.epa_base_url, state_col=state_col,
                              state=state, city=quote(city, safe=""), rows=CITY_ROWS)
        return self.get_rows(url)

    def systems_named_city(self, city: str) -> list[dict] | None:
        """City-only query across all states; the caller filters by state."""
        url = CITY_ONLY_URL.format(base=self.settings.epa_base_url, city=quote(city, safe=""),
                                   rows=CITY_ONLY_ROWS)
        return self.get_rows(url)

    def systems_in_state(self, state: str) -> list[dict] | None:
        url = STATE_URL.format(base=self.settings.epa_base_url, state=state, rows=STATE_ROWS)
        return self.get_rows(url)

    def system_detail(self, pwsid: str) -> list[dict] | None:
        return self.get_rows(SYSTEM_URL.format(base=self.settings.epa_base_url, pwsid=pwsid))

    # ----------------------- per-system facets -----------------------

    def violations(self, pwsid: str) -> list[dict] | None:
        return self.get_rows(PWSID_URL.format(base=self.settings.epa_base_url, table="VIOLATION",
                                              pwsid=pwsid, rows=VIOLATION_ROWS))

    def lcr_sample_results(self, pwsid: str) -> list[dict] | None:
        return self.get_rows(PWSID_URL.format(base=self.settings.epa_base_url, table="LCR_SAMPLE_RESULT",
                                              pwsid=pwsid, rows=LCR_ROWS))

    def lcr_samples(self, pwsid: str) -> list[dict] | None:
        return self.get_rows(PWSID_URL.format(base=self.settings.epa_base_url, table="LCR_SAMPLE",
                                              pwsid=pwsid, rows=LCR_ROWS))
