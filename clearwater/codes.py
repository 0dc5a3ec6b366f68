# clearwater/codes.py: SDWIS code tables
#
# Small enumerations live here as literals; the contaminant table is large and
# versioned separately in data/contaminants.csv, loaded once into a read-only
# mapping by load_contaminants().
import functools
import logging
from pathlib import Path
from types import MappingProxyType
from typing import Mapping

import pandas as pd

from clearwater.config import get_settings
from clearwater.models import Contaminant

logger = logging.getLogger(__name__)

# ----------------------- System codes -----------------------

SOURCE_TYPES = {
    "GW": "Groundwater",
    "SW": "Surface Water",
    "GU": "Groundwater Under Surface Water Influence",
    "GWP": "Groundwater Purchased",
    "SWP": "Surface Water Purchased",
}

PWS_TYPES = {
    "CWS": "Community Water System",
    "NTNCWS": "Non-Transient Non-Community",
    "TNCWS": "Transient Non-Community",
}

OWNER_TYPES = {
    "F": "Federal government",
    "L": "Local government",
    "N": "Native American",
    "P": "Private",
    "M": "Public/Private",
    "S": "State government",
}

# ----------------------- Violation codes -----------------------

# Categories keyed by canonical code. "type" drives badge/grouping downstream.
VIOLATION_CATEGORIES = {
    "MCL": {
        "label": "MCL Exceeded",
        "type": "health",
        "desc": "The level of a contaminant in your water exceeded the maximum legal limit (MCL) set by the EPA.",
    },
    "MRDL": {
        "label": "Disinfectant Level Exceeded",
        "type": "health",
        "desc": "The disinfectant used to treat water exceeded the maximum residual disinfectant level allowed.",
    },
    "TT": {
        "label": "Treatment Technique Failure",
        "type": "health",
        "desc": "A required water treatment process (like filtration or disinfection) was not properly carried out.",
    },
    "M/R": {
        "label": "Missed Testing",
        "type": "monitoring",
        "desc": "Required water quality testing was not performed or results were not reported on time. "
                "Water may or may not be safe; we simply don't know.",
    },
    "PN": {
        "label": "Public Notice",
        "type": "reporting",
        "desc": "The utility failed to notify customers about a water quality issue within the required time.",
    },
    "CCR": {
        "label": "Consumer Report Missing",
        "type": "reporting",
        "desc": "The annual water quality report (Consumer Confidence Report) was not published or delivered to customers.",
    },
    "Other": {
        "label": "Other Violation",
        "type": "other",
        "desc": "A violation of the Safe Drinking Water Act occurred.",
    },
}

# SDWIS emits both 'MR' and 'M/R' for monitoring & reporting
CATEGORY_ALIASES = {"MR": "M/R"}

VIOLATION_TYPES = {
    "01": "MCL, Single Sample",
    "02": "MCL, Average",
    "03": "Monitoring, Regular",
    "04": "Monitoring, Check/Repeat/Confirmation",
    "05": "Notification, State",
    "06": "Notification, Public",
    "07": "Treatment Techniques",
    "08": "Variance/Exemption/Other Compliance",
    "09": "Record Keeping",
    "10": "Operations Report",
    "11": "Non-Acute MRDL",
    "12": "Qualified Operator Failure",
    "13": "Acute MRDL",
    "19": "Monitoring, GWR Assessment Source Water",
    "21": "MCL, Acute (TCR)",
    "22": "MCL, Monthly (TCR)",
    "23": "Monitoring, Routine Major (TCR)",
    "24": "Monitoring, Routine Minor (TCR)",
    "25": "Monitoring, Repeat Major (TCR)",
    "26": "Monitoring, Repeat Minor (TCR)",
    "27": "Monitoring, Routine (DBP)",
    "31": "Monitoring Treatment (SWTR-Unfilt/GWR)",
    "38": "M&R Filter Turbidity Reporting",
    "41": "Failure to Maintain Microbial Treatment",
    "42": "Failure to Provide Treatment",
    "43": "Single Turbidity Exceed (Enhanced SWTR)",
    "44": "Treatment Technique Exceeds Turb 0.3 NTU",
    "45": "Failure Address a Deficiency",
    "46": "Treatment Technique Precursor Removal",
    "51": "Initial LCR Tap Sampling",
    "52": "Follow-up and Routine Tap Sampling",
    "53": "Water Quality Parameter M & R",
    "57": "OCCT/SOWT Recommendation",
    "58": "OCCT/SOWT Installation",
    "59": "Water Quality Parameter Non-Compliance",
    "63": "MPL Non-Compliance",
    "64": "Lead Service Line Replacement (LSLR)",
    "65": "Public Education",
    "66": "Lead Consumer Notice",
    "71": "CCR Complete Failure to Report",
    "72": "CCR Inadequate Reporting",
    "75": "PN Violation for an NPDWR Violation",
    "76": "PN Violation without NPDWR Violation",
    "1A": "MCL, E. coli (RTCR)",
    "2A": "TT, Level 1 Assessment (RTCR)",
    "2B": "TT, Level 2 Assessment (RTCR)",
    "2C": "TT, Corrective/Expedited Actions (RTCR)",
    "3A": "Monitoring, Routine (RTCR)",
    "3B": "Monitoring, Additional Routine (RTCR)",
    "4A": "Reporting, Assessment Forms (RTCR)",
    "4B": "Report Sample Result/Fail Monitor (RTCR)",
    "5A": "Sample Siting Plan Errors (RTCR)",
    "5B": "Recordkeeping Violations (RTCR)",
}

# ----------------------- Lead & copper -----------------------

# 90th percentile codes from LCR_SAMPLE_RESULT plus older numeric codes
LEAD_CODES = frozenset({"PB90", "0006", "6"})  # 1006 is HAA5, not lead
COPPER_CODES = frozenset({"CU90", "0300", "300", "1300"})

LEAD_ACTION_LEVEL = 0.015   # mg/L = 15 ppb
COPPER_ACTION_LEVEL = 1.3   # mg/L = 1300 ppb

# ----------------------- States -----------------------

US_STATES = {
    "AL": "Alabama", "AK": "Alaska", "AZ": "Arizona", "AR": "Arkansas", "CA": "California",
    "CO": "Colorado", "CT": "Connecticut", "DE": "Delaware", "FL": "Florida", "GA": "Georgia",
    "HI": "Hawaii", "ID": "Idaho", "IL": "Illinois", "IN": "Indiana", "IA": "Iowa",
    "KS": "Kansas", "KY": "Kentucky", "LA": "Louisiana", "ME": "Maine", "MD": "Maryland",
    "MA": "Massachusetts", "MI": "Michigan", "MN": "Minnesota", "MS": "Mississippi", "MO": "Missouri",
    "MT": "Montana", "NE": "Nebraska", "NV": "Nevada", "NH": "New Hampshire", "NJ": "New Jersey",
    "NM": "New Mexico", "NY": "New York", "NC": "North Carolina", "ND": "North Dakota", "OH": "Ohio",
    "OK": "Oklahoma", "OR": "Oregon", "PA": "Pennsylvania", "RI": "Rhode Island", "SC": "South Carolina",
    "SD": "South Dakota", "TN": "Tennessee", "TX": "Texas", "UT": "Utah", "VT": "Vermont",
    "VA": "Virginia", "WA": "Washington", "WV": "West Virginia", "WI": "Wisconsin", "WY": "Wyoming",
}

# ----------------------- Contaminants -----------------------

def _mcl(value: str) -> float | None:
    try:
        return float(value) if value.strip() else None
    except ValueError:
        return None


def load_contaminants(path: str | Path) -> Mapping[str, Contaminant]:
    """Read the contaminant CSV into a read-only code -> Contaminant mapping.

    Codes are kept as text ("0002" and "2" are different keys here; the
    resolver handles padding).
    """
    df = pd.read_csv(path, dtype=str, keep_default_na=False)
    df.columns = [c.strip().lower() for c in df.columns]
    table = {}
    for row in df.itertuples(index=False):
        code = row.code.strip()
        if not code:
            continue
        table[code] = Contaminant(
            code=code,
            name=row.name.strip(),
            mcl=_mcl(row.mcl),
            unit=row.unit.strip(),
            category=row.category.strip(),
            health=row.health.strip(),
        )
    logger.debug("Loaded %d contaminant codes from %s", len(table), path)
    return MappingProxyType(table)


@functools.lru_cache(maxsize=1)
def default_contaminants() -> Mapping[str, Contaminant]:
    return load_contaminants(get_settings().contaminants_csv)
