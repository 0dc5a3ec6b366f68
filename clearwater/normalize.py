# clearwater/normalize.py: raw Envirofacts rows -> canonical entities
from typing import Iterable, Mapping

from clearwater.aliases import (
    RawRecord,
    contaminant_display_name,
    field_float,
    field_int,
    field_str,
)
from clearwater.models import Contaminant, Sample, Violation, WaterSystem


def normalize_system(raw: RawRecord) -> WaterSystem:
    return WaterSystem(
        pwsid=field_str(raw, "pwsid").upper(),
        name=field_str(raw, "pws_name") or "Unknown System",
        city=field_str(raw, "city_name"),
        state=field_str(raw, "state_code") or field_str(raw, "primacy_agency_code"),
        zip=field_str(raw, "zip_code"),
        population=max(field_int(raw, "population_served_count"), 0),
        source_type=field_str(raw, "primary_source_code") or field_str(raw, "gw_sw_code"),
        pws_type=field_str(raw, "pws_type_code"),
        owner_type=field_str(raw, "owner_type_code"),
        primacy_agency=field_str(raw, "primacy_agency_code"),
    )


def normalize_violation(raw: RawRecord,
                        contaminants: Mapping[str, Contaminant] | None = None) -> Violation:
    """One VIOLATION row.  A blank upstream contaminant name is filled from the code table."""
    code = field_str(raw, "contaminant_code")
    return Violation(
        id=field_str(raw, "violation_id"),
        pwsid=field_str(raw, "pwsid").upper(),
        contaminant_code=code,
        contaminant_name=contaminant_display_name(
            field_str(raw, "contaminant_name"), code, contaminants
        ),
        violation_code=field_str(raw, "violation_code"),
        violation_category=field_str(raw, "violation_category_code"),
        is_health_based=(field_str(raw, "is_health_based_ind") or "N").upper() == "Y",
        begin_date=field_str(raw, "compl_per_begin_date"),
        end_date=field_str(raw, "compl_per_end_date"),
        status=field_str(raw, "compliance_status_code"),
        rule_code=field_str(raw, "rule_code"),
        rule_group_code=field_str(raw, "rule_group_code"),
        measure=field_float(raw, "viol_measure", default=None),
        unit=field_str(raw, "unit_of_measure"),
        state_code=field_str(raw, "primacy_agency_code"),
        notification_tier=field_str(raw, "public_notification_tier"),
    )


def build_date_map(lcr_samples: Iterable[RawRecord]) -> dict[str, str]:
    """sample_id -> sampling date, from LCR_SAMPLE rows.

    LCR_SAMPLE_RESULT carries no date of its own; it has to be joined from
    LCR_SAMPLE on sample_id.  End date wins over start date.
    """
    dates = {}
    for row in lcr_samples:
        sample_id = field_str(row, "sample_id")
        date = field_str(row, "sampling_end_date") or field_str(row, "sampling_start_date")
        if sample_id and date:
            dates[sample_id] = date
    return dates


def normalize_sample(raw: RawRecord, date_map: Mapping[str, str] | None = None) -> Sample:
    """One LCR_SAMPLE_RESULT row; an unknown date stays '' (never "today")."""
    sample_id = field_str(raw, "sample_id") or field_str(raw, "sar_id")
    date_map = date_map or {}
    return Sample(
        pwsid=field_str(raw, "pwsid").upper(),
        contaminant_code=field_str(raw, "contaminant_code"),
        sample_date=date_map.get(sample_id) or field_str(raw, "sample_date"),
        result_sign=field_str(raw, "result_sign_code"),
        result=field_float(raw, "sample_measure", default=0.0),
        unit=field_str(raw, "unit_of_measure"),
        sample_id=sample_id,
    )
