"""Diabetic warning domain models."""

from dataclasses import dataclass, field
from enum import Enum


class Severity(str, Enum):
    """Warning severity; lower priority numbers are shown first."""

    CRITICAL = "critical"
    HIGH = "high"
    MODERATE = "moderate"
    LOW = "low"
    SAFE = "safe"

    @property
    def priority(self) -> int:
        return _SEVERITY_STYLES[self].priority

    @property
    def color(self) -> str:
        return _SEVERITY_STYLES[self].color

    @property
    def icon(self) -> str:
        return _SEVERITY_STYLES[self].icon


@dataclass(frozen=True)
class _SeverityStyle:
    priority: int
    color: str
    icon: str


_SEVERITY_STYLES = {
    Severity.CRITICAL: _SeverityStyle(priority=1, color="#dc2626", icon="🚫"),
    Severity.HIGH: _SeverityStyle(priority=2, color="#ea580c", icon="⚠️"),
    Severity.MODERATE: _SeverityStyle(priority=3, color="#f59e0b", icon="⚡"),
    Severity.LOW: _SeverityStyle(priority=4, color="#84cc16", icon="💡"),
    Severity.SAFE: _SeverityStyle(priority=5, color="#10b981", icon="✅"),
}


class GlycemicImpact(str, Enum):
    """Estimated glycemic impact bucket from sugar content."""

    VERY_HIGH = "very_high"
    HIGH = "high"
    MODERATE = "moderate"
    LOW = "low"
    VERY_LOW = "very_low"


class RiskLabel(str, Enum):
    """Coarse diabetic risk label."""

    CRITICAL = "critical"
    HIGH = "high"
    MODERATE = "moderate"
    LOW = "low"
    SAFE = "safe"
    NOT_APPLICABLE = "not_applicable"


@dataclass(frozen=True)
class DiabeticWarning:
    """A severity-tagged diabetic warning or positive note."""

    severity: Severity
    kind: str
    title: str
    message: str
    detail: str
    action: str
    impact: str | None = None
    glycemic_impact: GlycemicImpact | None = None
    priority: int = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "priority", self.severity.priority)


@dataclass(frozen=True)
class DiabeticRisk:
    """Single-number diabetic risk assessment."""

    risk: RiskLabel
    score: int
    recommendation: str


@dataclass(frozen=True)
class GlucoseImpact:
    """Rough blood glucose response estimate per 100g."""

    estimated_rise: int
    net_carbs: float
    absorption_speed: str
    duration: str
