"""Shared fixtures: fixed clock, fake upstream client, raw Envirofacts rows."""
from datetime import datetime

import pytest

from clearwater.cache import TTLCache
from clearwater.config import Settings
from clearwater.models import Location, Violation

NOW = datetime(2024, 6, 15, 12, 0, 0)


class FakeClock:
    def __init__(self, start: float = 1_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeClient:
    """Stands in for EnvirofactsClient; records every call."""

    def __init__(self, location=None, city_rows=None, state_code_rows=None, city_only_rows=None,
                 state_rows=None, violations=None, sample_results=None, samples=None, system=None):
        self.location = location
        self.city_rows = city_rows
        self.state_code_rows = state_code_rows
        self.city_only_rows = city_only_rows
        self.state_rows = state_rows
        self.facets = {
            "violations": violations,
            "sample_results": sample_results,
            "samples": samples,
            "system": system,
        }
        self.calls = []

    def _facet(self, name, pwsid):
        self.calls.append((name, pwsid))
        value = self.facets[name]
        if isinstance(value, Exception):
            raise value
        return value

    def zip_to_city(self, zip_code):
        self.calls.append(("zip_to_city", zip_code))
        return self.location

    def systems_in_city(self, city, state, state_col="primacy_agency_code"):
        self.calls.append(("systems_in_city", city, state, state_col))
        return self.city_rows if state_col == "primacy_agency_code" else self.state_code_rows

    def systems_named_city(self, city):
        self.calls.append(("systems_named_city", city))
        return self.city_only_rows

    def systems_in_state(self, state):
        self.calls.append(("systems_in_state", state))
        return self.state_rows

    def violations(self, pwsid):
        return self._facet("violations", pwsid)

    def lcr_sample_results(self, pwsid):
        return self._facet("sample_results", pwsid)

    def lcr_samples(self, pwsid):
        return self._facet("samples", pwsid)

    def system_detail(self, pwsid):
        return self._facet("system", pwsid)

    def count(self, name):
        return sum(1 for c in self.calls if c[0] == name)


def make_violation(**kw) -> Violation:
    kw.setdefault("id", "1")
    kw.setdefault("pwsid", "NY7003493")
    return Violation(**kw)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def settings():
    return Settings(_env_file=None)


@pytest.fixture
def cache(clock):
    return TTLCache(ttl=24 * 60 * 60, max_entries=1000, clock=clock)


@pytest.fixture
def new_york():
    return Location(city="NEW YORK", state="NY")


@pytest.fixture
def raw_system():
    return {
        "pwsid": "ny7003493",
        "pws_name": "NEW YORK CITY SYSTEM",
        "city_name": "NEW YORK",
        "state_code": "NY",
        "zip_code": "10007",
        "population_served_count": "8271000",
        "primary_source_code": "SWP",
        "pws_type_code": "CWS",
        "owner_type_code": "L",
        "primacy_agency_code": "NY",
    }


@pytest.fixture
def raw_violation():
    return {
        "violation_id": "9601",
        "pwsid": "NY7003493",
        "contaminant_code": "1010",
        "contaminant_name": None,
        "violation_code": "02",
        "violation_category_code": "MCL",
        "is_health_based_ind": "Y",
        "compl_per_begin_date": "2022-01-01",
        "compl_per_end_date": "2022-03-31",
        "compliance_status_code": "R",
        "rule_code": "332",
        "rule_group_code": "300",
        "viol_measure": "0.014",
        "unit_of_measure": "mg/L",
        "primacy_agency_code": "NY",
        "public_notification_tier": "2",
    }
