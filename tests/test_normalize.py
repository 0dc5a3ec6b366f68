"""
Unit tests for raw record normalizers
"""
import pytest

from clearwater.normalize import build_date_map, normalize_sample, normalize_system, normalize_violation


class TestNormalizeSystem:

    def test_full_record(self, raw_system):
        s = normalize_system(raw_system)
        assert s.pwsid == "NY7003493"
        assert s.name == "NEW YORK CITY SYSTEM"
        assert s.city == "NEW YORK"
        assert s.state == "NY"
        assert s.population == 8271000
        assert s.source_type == "SWP"
        assert s.pws_type == "CWS"
        assert s.primacy_agency == "NY"

    def test_uppercase_keys(self):
        s = normalize_system({"PWSID": "ca1010016", "PWS_NAME": "X", "POPULATION_SERVED_COUNT": 10})
        assert s.pwsid == "CA1010016"
        assert s.population == 10

    def test_defaults(self):
        s = normalize_system({})
        assert s.pwsid == ""
        assert s.name == "Unknown System"
        assert s.population == 0
        assert s.city == "" and s.zip == "" and s.owner_type == ""

    def test_state_and_source_fallbacks(self):
        s = normalize_system({"pwsid": "X1", "primacy_agency_code": "TX", "gw_sw_code": "GW"})
        assert s.state == "TX"
        assert s.source_type == "GW"

    def test_bad_population(self):
        assert normalize_system({"population_served_count": "unknown"}).population == 0
        assert normalize_system({"population_served_count": "-5"}).population == 0

    def test_unrecognized_source_passes_through(self):
        assert normalize_system({"primary_source_code": "GUP"}).source_type == "GUP"


class TestNormalizeViolation:

    def test_full_record(self, raw_violation):
        v = normalize_violation(raw_violation)
        assert v.id == "9601"
        assert v.contaminant_code == "1010"
        assert v.contaminant_name == "Arsenic"
        assert v.is_health_based is True
        assert v.violation_category == "MCL"
        assert v.status == "R"
        assert v.measure == pytest.approx(0.014)
        assert v.notification_tier == "2"

    def test_upstream_name_kept(self, raw_violation):
        raw_violation["contaminant_name"] = "ARSENIC"
        assert normalize_violation(raw_violation).contaminant_name == "ARSENIC"

    def test_unknown_code_gets_synthesized_name(self):
        v = normalize_violation({"pwsid": "x1", "contaminant_code": "7777"})
        assert v.contaminant_name == "Contaminant #7777"
        assert v.pwsid == "X1"

    @pytest.mark.parametrize("flag,expected", [("Y", True), ("y", True), ("N", False), ("", False), (None, False)])
    def test_health_flag(self, flag, expected):
        assert normalize_violation({"is_health_based_ind": flag}).is_health_based is expected

    def test_measure_missing_is_none(self):
        assert normalize_violation({"viol_measure": ""}).measure is None
        assert normalize_violation({"viol_measure": "abc"}).measure is None

    def test_blank_end_date_stays_blank(self):
        v = normalize_violation({"compl_per_end_date": None})
        assert v.end_date == ""


class TestSamples:

    def test_date_map_prefers_end_date(self):
        rows = [
            {"sample_id": "S1", "sampling_start_date": "2021-01-01", "sampling_end_date": "2021-06-30"},
            {"sample_id": "S2", "sampling_start_date": "2020-01-01"},
            {"sample_id": "", "sampling_end_date": "2020-01-01"},
            {"sample_id": "S3"},
        ]
        assert build_date_map(rows) == {"S1": "2021-06-30", "S2": "2020-01-01"}

    def test_date_joined_from_map(self):
        raw = {"pwsid": "ny1", "sample_id": "S1", "contaminant_code": "PB90",
               "sample_measure": "0.004", "unit_of_measure": "mg/L"}
        s = normalize_sample(raw, {"S1": "2021-06-30"})
        assert s.sample_date == "2021-06-30"
        assert s.pwsid == "NY1"
        assert s.result == pytest.approx(0.004)

    def test_missing_date_is_empty_string(self):
        s = normalize_sample({"sample_id": "S9", "sample_measure": "0.1"}, {"S1": "2021-06-30"})
        assert s.sample_date == ""

    def test_no_map_at_all(self):
        assert normalize_sample({"sample_id": "S1"}).sample_date == ""

    def test_own_date_used_when_not_mapped(self):
        assert normalize_sample({"sample_id": "S1", "sample_date": "2019-09-01"}, {}).sample_date == "2019-09-01"

    def test_sar_id_fallback(self):
        s = normalize_sample({"sar_id": "77"}, {"77": "2020-02-02"})
        assert s.sample_id == "77"
        assert s.sample_date == "2020-02-02"

    def test_bad_result_is_zero(self):
        s = normalize_sample({"sample_measure": "ND", "result_sign_code": "<"})
        assert s.result == 0.0
        assert s.result_sign == "<"
