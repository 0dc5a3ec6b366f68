# clearwater/models.py: canonical entities
#
# Everything downstream of the normalizers works on these; raw upstream dicts
# never leave aliases.py / normalize.py.
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class Contaminant:
    code: str
    name: str
    mcl: float | None
    unit: str
    category: str
    health: str

    def same_identity(self, other: "Contaminant") -> bool:
        """True when two codes describe the same real-world contaminant."""
        return (self.name, self.mcl, self.unit, self.category, self.health) == (
            other.name, other.mcl, other.unit, other.category, other.health
        )


@dataclass(frozen=True)
class Location:
    city: str
    state: str

    def to_dict(self) -> dict[str, str]:
        return {"city": self.city, "state": self.state}


@dataclass(frozen=True)
class WaterSystem:
    pwsid: str
    name: str = "Unknown System"
    city: str = ""
    state: str = ""
    zip: str = ""
    population: int = 0
    source_type: str = ""
    pws_type: str = ""
    owner_type: str = ""
    primacy_agency: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "pwsid": self.pwsid,
            "name": self.name,
            "city": self.city,
            "state": self.state,
            "zip": self.zip,
            "population": self.population,
            "sourceType": self.source_type,
            "pwsType": self.pws_type,
            "ownerType": self.owner_type,
            "primacy": self.primacy_agency,
        }


@dataclass(frozen=True)
class Violation:
    id: str
    pwsid: str
    contaminant_code: str = ""
    contaminant_name: str = ""
    violation_code: str = ""
    violation_category: str = ""
    is_health_based: bool = False
    begin_date: str = ""
    end_date: str = ""
    status: str = ""
    rule_code: str = ""
    rule_group_code: str = ""
    measure: float | None = None
    unit: str = ""
    state_code: str = ""
    notification_tier: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "pwsid": self.pwsid,
            "contaminantCode": self.contaminant_code,
            "contaminantName": self.contaminant_name,
            "violationCode": self.violation_code,
            "violationCategory": self.violation_category,
            "isHealthBased": self.is_health_based,
            "beginDate": self.begin_date,
            "endDate": self.end_date,
            "status": self.status,
            "ruleCode": self.rule_code,
            "ruleGroupCode": self.rule_group_code,
            "violMeasure": self.measure,
            "unit": self.unit,
            "stateCode": self.state_code,
            "tier": self.notification_tier,
        }


@dataclass(frozen=True)
class Sample:
    pwsid: str
    contaminant_code: str = ""
    sample_date: str = ""
    result_sign: str = ""
    result: float = 0.0
    unit: str = ""
    sample_id: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "pwsid": self.pwsid,
            "contaminantCode": self.contaminant_code,
            "sampleDate": self.sample_date,
            "resultSign": self.result_sign,
            "result": self.result,
            "unit": self.unit,
            "sampleId": self.sample_id,
        }


@dataclass(frozen=True)
class GradeScore:
    active_health: int = 0
    recent_health: int = 0
    active: int = 0

    def to_dict(self) -> dict[str, int]:
        return {
            "activeHealth": self.active_health,
            "recentHealth": self.recent_health,
            "active": self.active,
        }


@dataclass(frozen=True)
class Grade:
    letter: str
    label: str
    score: GradeScore = field(default_factory=GradeScore)

    def to_dict(self) -> dict[str, Any]:
        return {"grade": self.letter, "label": self.label, "score": self.score.to_dict()}


@dataclass(frozen=True)
class Report:
    """Normalized data for one system. ``system`` is None when upstream had no detail row."""

    pwsid: str
    system: WaterSystem | None
    violations: tuple[Violation, ...] = ()
    samples: tuple[Sample, ...] = ()

    def to_dict(self, grade: Grade | None = None) -> dict[str, Any]:
        out = {
            "system": self.system.to_dict() if self.system else None,
            "violations": [v.to_dict() for v in self.violations],
            "samples": [s.to_dict() for s in self.samples],
        }
        if grade is not None:
            out["grade"] = grade.to_dict()
        return out
