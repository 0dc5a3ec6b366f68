# clearwater/tables.py: DataFrame views of normalized entities (UI tables, Word report)
from datetime import datetime
from typing import Iterable

import pandas as pd

from clearwater.aliases import category_info, canonical_category
from clearwater.codes import OWNER_TYPES, PWS_TYPES, SOURCE_TYPES, VIOLATION_TYPES
from clearwater.grading import format_date, parse_date, violation_is_active
from clearwater.models import Sample, Violation, WaterSystem

SYSTEM_COLUMNS = ["PWSID", "Name", "City", "State", "Population", "Source", "Type"]
VIOLATION_COLUMNS = ["Contaminant", "Category", "Type", "Health-Based", "Status", "Began", "Ended", "Code"]
SAMPLE_COLUMNS = ["Date", "Contaminant", "Result", "Unit", "Sample ID"]


def desc(mapping: dict[str, str], code: str) -> str:
    """Readable label for a code, falling back to the raw code."""
    s = (code or "").strip()
    return mapping.get(s.upper(), s)


def _ordinal(value: str) -> int:
    parsed = parse_date(value)
    return parsed.toordinal() if parsed else 0


def systems_frame(systems: Iterable[WaterSystem]) -> pd.DataFrame:
    rows = [
        {
            "PWSID": s.pwsid,
            "Name": s.name,
            "City": s.city,
            "State": s.state,
            "Population": s.population,
            "Source": desc(SOURCE_TYPES, s.source_type),
            "Type": desc(PWS_TYPES, s.pws_type),
        }
        for s in systems
    ]
    return pd.DataFrame(rows, columns=SYSTEM_COLUMNS)


def system_summary(system: WaterSystem) -> dict[str, str]:
    location = ", ".join(p for p in (system.city, system.state) if p)
    return {
        "Water System Name": system.name,
        "PWSID": system.pwsid,
        "Location": location or "N/A",
        "Population Served": f"{system.population:,}" if system.population > 0 else "N/A",
        "Primary Source": desc(SOURCE_TYPES, system.source_type) or "N/A",
        "System Type": desc(PWS_TYPES, system.pws_type) or "N/A",
        "Ownership": desc(OWNER_TYPES, system.owner_type) or "N/A",
    }


def violations_frame(violations: Iterable[Violation], now: datetime | None = None) -> pd.DataFrame:
    """One row per violation; health-based first, then active first, then most recent."""
    rows = []
    for v in violations:
        active = violation_is_active(v, now)
        rows.append({
            "Contaminant": v.contaminant_name,
            "Category": category_info(v.violation_category)["label"],
            "Type": desc(VIOLATION_TYPES, v.violation_code),
            "Health-Based": "Yes" if v.is_health_based else "No",
            "Status": "Active" if active else "Resolved",
            "Began": format_date(v.begin_date),
            "Ended": format_date(v.end_date) if v.end_date else "-",
            "Code": canonical_category(v.violation_category),
            "_health": v.is_health_based,
            "_active": active,
            "_begin": _ordinal(v.begin_date),
        })
    if not rows:
        return pd.DataFrame(columns=VIOLATION_COLUMNS)
    df = pd.DataFrame(rows)
    df = df.sort_values(["_health", "_active", "_begin"], ascending=[False, False, False],
                        kind="mergesort")
    return df[VIOLATION_COLUMNS].reset_index(drop=True)


def samples_frame(samples: Iterable[Sample], name: str = "") -> pd.DataFrame:
    rows = []
    for s in samples:
        sign = s.result_sign if s.result_sign in (">", "<") else ""
        rows.append({
            "Date": format_date(s.sample_date),
            "Contaminant": name or s.contaminant_code,
            "Result": f"{sign}{s.result:g}",
            "Unit": s.unit or "mg/L",
            "Sample ID": s.sample_id,
        })
    return pd.DataFrame(rows, columns=SAMPLE_COLUMNS)
