# clearwater/grading.py: violation activity and the A-F grade
#
# compliance_status_code:
#   R = Returned to compliance (resolved)
#   K = Resolved by state (administrative closure)
#   O = Open
#   blank / other = decide from the compliance period end date
from datetime import date, datetime, timezone
from typing import Iterable

from clearwater.models import Grade, GradeScore, Violation

RESOLVED_STATUSES = frozenset({"R", "K"})
OPEN_STATUSES = frozenset({"O"})

RECENT_YEARS = 5

GRADE_LABELS = {
    "A": "Meets all standards: no recent health-based violations",
    "B": "1 recent health-based violation, generally safe",
    "C": "Multiple violations, some concern warranted",
    "D": "Significant health-based violations: take precautions",
    "F": "Active health violation: check with your utility immediately",
}

# Formats seen from Envirofacts and SDWIS exports, after ISO-8601
_DATE_FORMATS = ("%m/%d/%Y", "%m/%d/%Y %H:%M:%S", "%d-%b-%y", "%d-%b-%Y", "%Y/%m/%d")


def parse_date(value: str | None) -> datetime | None:
    """Parse an upstream date string to a naive local datetime; None if blank or unparseable."""
    text = (value or "").strip()
    if not text:
        return None
    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        parsed = None
        for fmt in _DATE_FORMATS:
            try:
                parsed = datetime.strptime(text, fmt)
                break
            except ValueError:
                continue
        if parsed is None:
            return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def years_before(now: datetime, years: int) -> datetime:
    """Midnight on the same calendar day ``years`` earlier (Feb 29 rolls to Mar 1)."""
    try:
        return datetime(now.year - years, now.month, now.day)
    except ValueError:
        return datetime(now.year - years, 3, 1)


def is_active(status: str | None, end_date: str | None, now: datetime | None = None) -> bool:
    """Whether a violation is still open.

    Status wins over dates.  Without a decisive status, a blank or unparseable
    end date counts as active.
    """
    code = (status or "").strip().upper()
    if code in RESOLVED_STATUSES:
        return False
    if code in OPEN_STATUSES:
        return True
    end = parse_date(end_date)
    if end is None:
        return True
    return end > (now or datetime.now())


def violation_is_active(v: Violation, now: datetime | None = None) -> bool:
    return is_active(v.status, v.end_date, now)


def is_recent(v: Violation, now: datetime | None = None, years: int = RECENT_YEARS) -> bool:
    begin = parse_date(v.begin_date)
    return begin is not None and begin >= years_before(now or datetime.now(), years)


def compute_grade(violations: Iterable[Violation], now: datetime | None = None) -> Grade:
    """Reduce a system's violation history to a letter grade.

    First match wins:
      F  any active health-based violation
      D  >= 5 health-based violations begun in the last 5 years
      C  >= 2 of those
      B  exactly 1
      C  more than 3 active violations of any kind
      A  otherwise
    """
    now = now or datetime.now()
    violations = list(violations)

    active = [v for v in violations if violation_is_active(v, now)]
    active_health = [v for v in active if v.is_health_based]
    recent_health = [v for v in violations if v.is_health_based and is_recent(v, now)]

    if active_health:
        letter = "F"
    elif len(recent_health) >= 5:
        letter = "D"
    elif len(recent_health) >= 2:
        letter = "C"
    elif len(recent_health) == 1:
        letter = "B"
    elif len(active) > 3:
        letter = "C"
    else:
        letter = "A"

    score = GradeScore(
        active_health=len(active_health),
        recent_health=len(recent_health),
        active=len(active),
    )
    return Grade(letter=letter, label=GRADE_LABELS[letter], score=score)


def format_date(value: str | None) -> str:
    """'Jan 5, 2021' style for display; '-' when unknown."""
    parsed = parse_date(value)
    if parsed is None:
        return "-"
    d: date = parsed.date()
    return f"{d:%b} {d.day}, {d.year}"
