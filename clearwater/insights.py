# clearwater/insights.py: lead/copper summary, headline stats and consumer advice
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable

from clearwater.codes import COPPER_ACTION_LEVEL, COPPER_CODES, LEAD_ACTION_LEVEL, LEAD_CODES
from clearwater.grading import is_recent, parse_date, violation_is_active
from clearwater.models import Sample, Violation

RECENT_SAMPLES = 20

BACTERIA_CODES = frozenset({"2049", "2050", "2051"})
TTHM_CODE = "1005"
NITRATE_CODES = frozenset({"0008", "0009"})


def is_lead(s: Sample) -> bool:
    return s.contaminant_code.strip().upper() in LEAD_CODES


def is_copper(s: Sample) -> bool:
    return s.contaminant_code.strip().upper() in COPPER_CODES


@dataclass(frozen=True)
class MetalSummary:
    name: str
    action_level: float
    samples: tuple[Sample, ...] = ()    # most recent first, capped
    total: int = 0
    over_action_level: int = 0

    @property
    def max_result(self) -> float:
        return max((s.result for s in self.samples), default=0.0)


def _summarize(name: str, action_level: float, samples: list[Sample]) -> MetalSummary:
    # undated samples sort last
    ordered = sorted(samples, key=lambda s: parse_date(s.sample_date) or datetime.min, reverse=True)
    return MetalSummary(
        name=name,
        action_level=action_level,
        samples=tuple(ordered[:RECENT_SAMPLES]),
        total=len(samples),
        over_action_level=sum(1 for s in samples if s.result > action_level),
    )


def lead_copper_summary(samples: Iterable[Sample]) -> dict[str, MetalSummary]:
    samples = list(samples)
    return {
        "lead": _summarize("Lead", LEAD_ACTION_LEVEL, [s for s in samples if is_lead(s)]),
        "copper": _summarize("Copper", COPPER_ACTION_LEVEL, [s for s in samples if is_copper(s)]),
    }


def violation_stats(violations: Iterable[Violation], now: datetime | None = None) -> dict[str, int]:
    violations = list(violations)
    active = [v for v in violations if violation_is_active(v, now)]
    return {
        "total": len(violations),
        "active": len(active),
        "activeHealth": sum(1 for v in active if v.is_health_based),
        "totalHealth": sum(1 for v in violations if v.is_health_based),
    }

# ----------------------- Recommendations -----------------------

@dataclass(frozen=True)
class Recommendation:
    title: str
    desc: str
    priority: bool = False
    good: bool = False
    tags: tuple[str, ...] = field(default_factory=tuple)


def _plural(n: int, singular: str) -> str:
    return f"{n} {singular if n == 1 else singular + 's'}"


def recommendations(violations: Iterable[Violation], samples: Iterable[Sample],
                    now: datetime | None = None) -> list[Recommendation]:
    """Ordered advice for a system; urgent items first, CCR reminder always last."""
    now = now or datetime.now()
    violations = list(violations)
    samples = list(samples)

    active = [v for v in violations if violation_is_active(v, now)]
    active_health = [v for v in active if v.is_health_based]
    lead = [s for s in samples if is_lead(s)]
    lead_over = [s for s in lead if s.result > LEAD_ACTION_LEVEL]
    has_bacteria = any(v.contaminant_code in BACTERIA_CODES for v in active)
    has_tthm = any(v.contaminant_code == TTHM_CODE for v in active)
    has_nitrate = any(v.contaminant_code in NITRATE_CODES for v in violations)
    has_recent_health = any(v.is_health_based and is_recent(v, now) for v in violations)

    recs = []
    if active_health:
        recs.append(Recommendation(
            title="Active health violation: contact your utility",
            desc=f"Your water system has {_plural(len(active_health), 'active health-based violation')}. "
                 "Contact your utility immediately to ask what is being done and whether you should use "
                 "bottled water or a certified filter in the meantime.",
            priority=True,
            tags=("Urgent", "Call Your Utility"),
        ))
    if has_bacteria:
        recs.append(Recommendation(
            title="Boil water advisory may be needed",
            desc="Bacteria violations indicate possible microbial contamination. Boiling water for at least "
                 "1 minute kills most bacteria and viruses. Follow any boil water advisories from your utility.",
            priority=True,
            tags=("Bacteria", "Boil Water"),
        ))
    if lead_over:
        recs.append(Recommendation(
            title="Flush your tap before drinking",
            desc="Lead was detected above the action level. Run your cold water tap for 30-60 seconds before "
                 "drinking, especially after periods of non-use. Lead usually comes from your home's pipes, "
                 "not the source water.",
            priority=True,
            tags=("Lead", "Especially for Children", "Pregnant Women"),
        ))
    if has_tthm:
        recs.append(Recommendation(
            title="Consider a carbon filter for disinfection byproducts",
            desc="Trihalomethanes and haloacetic acids form when chlorine reacts with organic matter. An "
                 "NSF-certified activated carbon filter (NSF Standard 53) can reduce these compounds.",
            tags=("TTHMs", "Filter Recommendation"),
        ))
    if has_nitrate:
        recs.append(Recommendation(
            title="Do not give tap water to infants if nitrate violation exists",
            desc="High nitrate levels can cause a dangerous blood disorder in babies under 6 months. Use "
                 "certified bottled water or a reverse osmosis filter for infant formula until the violation "
                 "is resolved.",
            priority=has_recent_health,
            tags=("Nitrate", "Infants", "Reverse Osmosis"),
        ))
    if lead and not lead_over:
        recs.append(Recommendation(
            title="Check your home's plumbing for lead pipes",
            desc="Even if your water system passed lead tests, lead can enter water from pipes inside your "
                 "home. Homes built before 1986 may have lead service lines or lead solder.",
            tags=("Lead", "Home Plumbing"),
        ))
    if any(not v.is_health_based for v in active):
        recs.append(Recommendation(
            title="Ask your utility about open monitoring violations",
            desc="Monitoring violations mean required tests weren't done or reported. This doesn't "
                 "automatically mean your water is unsafe, but it's worth asking your utility what happened.",
            tags=("Monitoring", "Contact Utility"),
        ))
    if not recs:
        recs.append(Recommendation(
            title="Your water meets all federal standards: no action required",
            desc="Based on available EPA records, this water system has no recent health-based violations. "
                 "Continue using tap water normally.",
            good=True,
            tags=("No Violations Found",),
        ))
    recs.append(Recommendation(
        title="Get your free annual water quality report",
        desc="Every community water system must publish an annual Consumer Confidence Report (CCR) by "
             "July 1. Contact your utility for detailed testing results specific to your system.",
        tags=("Consumer Confidence Report", "Free"),
    ))
    return recs
