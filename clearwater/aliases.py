# clearwater/aliases.py: field-name and code alias resolution
#
# Envirofacts returns lower-case keys today and upper-case keys in older
# pulls/exports, and the same contaminant shows up under several codes across
# rule eras (IOC 00xx vs 10xx, Phase II/V SOC codes, Stage 1 vs Stage 2 DBP,
# LCR PB90/CU90).  This module is the only place that pokes at raw records.
import logging
from typing import Any, Mapping

from clearwater.codes import CATEGORY_ALIASES, VIOLATION_CATEGORIES, default_contaminants
from clearwater.models import Contaminant

logger = logging.getLogger(__name__)

RawRecord = Mapping[str, Any]

UNKNOWN_CONTAMINANT = "Unknown Contaminant"

# ----------------------- Field aliases -----------------------

def field(record: RawRecord, *names: str, default: Any = "") -> Any:
    """First present, non-None value among ``names`` (each tried as given, then upper-cased)."""
    for name in names:
        for key in (name, name.upper()):
            value = record.get(key)
            if value is not None:
                return value
    return default


def field_str(record: RawRecord, *names: str) -> str:
    value = field(record, *names)
    return str(value).strip() if value is not None else ""


def field_int(record: RawRecord, *names: str) -> int:
    """Integer value, 0 when missing or unparseable ("12,500" and "12500.0" are accepted)."""
    value = field(record, *names)
    try:
        return int(float(str(value).replace(",", "").strip()))
    except (TypeError, ValueError, OverflowError):
        return 0


def field_float(record: RawRecord, *names: str, default: float | None = 0.0) -> float | None:
    """Float value; ``default`` when missing, unparseable or zero."""
    value = field(record, *names)
    try:
        number = float(str(value).strip())
    except (TypeError, ValueError):
        return default
    if number != number or number == 0:  # NaN or zero
        return default
    return number

# ----------------------- Contaminant codes -----------------------

def padded_code(code: Any) -> str:
    """'2' / '02' / '0002' -> '0002'; non-numeric codes keep their shape ('PB90')."""
    return str(code or "").strip().lstrip("0").rjust(4, "0")


def resolve_contaminant(code: Any,
                        table: Mapping[str, Contaminant] | None = None) -> Contaminant | None:
    """Canonical contaminant for an upstream code, or None when unknown.

    The zero-padded form is tried first, then the raw code as given.
    """
    table = default_contaminants() if table is None else table
    raw = str(code or "").strip()
    return table.get(padded_code(raw)) or table.get(raw)


def contaminant_display_name(name: Any, code: Any,
                             table: Mapping[str, Contaminant] | None = None) -> str:
    name = str(name or "").strip()
    if name:
        return name
    info = resolve_contaminant(code, table)
    if info is not None:
        return info.name
    code = str(code or "").strip()
    logger.debug("no contaminant table entry for code %r", code)
    return f"Contaminant #{code}" if code else UNKNOWN_CONTAMINANT

# ----------------------- Violation categories -----------------------

def canonical_category(raw: Any) -> str:
    cat = str(raw or "").strip().upper()
    cat = CATEGORY_ALIASES.get(cat, cat)
    return cat if cat in VIOLATION_CATEGORIES else "Other"


def category_info(raw: Any) -> dict[str, str]:
    return VIOLATION_CATEGORIES[canonical_category(raw)]
