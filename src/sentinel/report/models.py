"""Report data models — enums, findings, and the tagged report variants.

A completed analysis produces exactly one of three report shapes. Each
variant carries only the facets that belong to it, so an invalid mix such
as ``findings`` next to ``safeChecklist`` cannot be constructed. All
variants serialize to the same camelCase envelope the web client reads.
"""

from __future__ import annotations

import enum
import functools
from dataclasses import dataclass, field
from typing import Union


class ScanType(enum.Enum):
    """Kind of artifact submitted for analysis."""

    JAVA_CODE = "JAVA_CODE"
    OPENAPI = "OPENAPI"
    SMART_CONTRACT = "SMART_CONTRACT"
    BUG_ANALYSIS = "BUG_ANALYSIS"


class Mode(enum.Enum):
    """Analysis mode requested by the caller.

    ``WEB3`` is never accepted from callers; it is the effective mode that
    smart-contract scans always run in.
    """

    AUDIT = "AUDIT"
    FORGE = "FORGE"
    WEB3 = "WEB3"


# Modes a caller may submit
REQUEST_MODES = (Mode.AUDIT, Mode.FORGE)


@functools.total_ordering
class Severity(enum.Enum):
    """Finding severity, ordered LOW < MEDIUM < HIGH < CRITICAL."""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank < other.rank


_SEVERITY_RANK = {
    Severity.LOW: 0,
    Severity.MEDIUM: 1,
    Severity.HIGH: 2,
    Severity.CRITICAL: 3,
}


class Category(enum.Enum):
    """Finding categories for application, API, and bug-report scans."""

    AUTH = "AUTH"
    INPUT_VALIDATION = "INPUT_VALIDATION"
    DATA_EXPOSURE = "DATA_EXPOSURE"
    RATE_LIMIT = "RATE_LIMIT"
    LOGGING = "LOGGING"
    CONFIG = "CONFIG"
    WEB = "WEB"


class Web3Category(enum.Enum):
    """Finding categories for smart-contract scans."""

    ACCESS_CONTROL = "ACCESS_CONTROL"
    TOKEN_LOGIC = "TOKEN_LOGIC"
    REENTRANCY_RISK = "REENTRANCY_RISK"
    UPGRADABILITY = "UPGRADABILITY"
    ADMIN_KEYS = "ADMIN_KEYS"
    EVENTS = "EVENTS"


class RiskBand(enum.Enum):
    """Coarse banding of a risk score for dashboard emphasis."""

    LOW = "LOW"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


@dataclass(frozen=True)
class Evidence:
    """Where a finding was observed and why it matters."""

    endpoint: str
    reason: str


@dataclass(frozen=True)
class Finding:
    """A single issue reported by a non-contract scan."""

    category: Category
    severity: Severity
    title: str
    description: str
    recommendation: str
    evidence: Evidence

    def to_dict(self) -> dict:
        return {
            "category": self.category.value,
            "severity": self.severity.value,
            "title": self.title,
            "description": self.description,
            "recommendation": self.recommendation,
            "evidence": {
                "endpoint": self.evidence.endpoint,
                "reason": self.evidence.reason,
            },
        }


@dataclass(frozen=True)
class Web3Finding:
    """A single issue reported by a smart-contract scan."""

    category: Web3Category
    severity: Severity
    title: str
    description: str
    recommendation: str

    def to_dict(self) -> dict:
        return {
            "category": self.category.value,
            "severity": self.severity.value,
            "title": self.title,
            "description": self.description,
            "recommendation": self.recommendation,
        }


@dataclass(frozen=True)
class GherkinFeature:
    """A behavioural spec synthesized in forge mode."""

    name: str
    content: str

    def to_dict(self) -> dict:
        return {"name": self.name, "content": self.content}


@dataclass(frozen=True)
class ApiTestCase:
    """A negative API test case synthesized in forge mode."""

    title: str
    steps: tuple[str, ...]
    expected: str

    def to_dict(self) -> dict:
        return {
            "title": self.title,
            "steps": list(self.steps),
            "expected": self.expected,
        }


@dataclass(frozen=True)
class AuditReport:
    """Findings plus a quick-fix checklist."""

    summary: str
    risk_score: int
    findings: tuple[Finding, ...] = ()
    quick_fix_checklist: tuple[str, ...] = ()
    priority_order: tuple[str, ...] | None = None

    def to_dict(self) -> dict:
        data = _envelope(self.summary, self.risk_score)
        data["findings"] = [f.to_dict() for f in self.findings]
        data["quickFixChecklist"] = list(self.quick_fix_checklist)
        _add_priority(data, self.priority_order)
        return data


@dataclass(frozen=True)
class ForgeReport:
    """An audit report plus synthesized Gherkin features and API tests."""

    summary: str
    risk_score: int
    findings: tuple[Finding, ...] = ()
    quick_fix_checklist: tuple[str, ...] = ()
    gherkin_features: tuple[GherkinFeature, ...] = ()
    api_test_cases: tuple[ApiTestCase, ...] = ()
    priority_order: tuple[str, ...] | None = None

    def to_dict(self) -> dict:
        data = _envelope(self.summary, self.risk_score)
        data["findings"] = [f.to_dict() for f in self.findings]
        data["quickFixChecklist"] = list(self.quick_fix_checklist)
        data["gherkinFeatures"] = [g.to_dict() for g in self.gherkin_features]
        data["apiTestCases"] = [t.to_dict() for t in self.api_test_cases]
        _add_priority(data, self.priority_order)
        return data


@dataclass(frozen=True)
class Web3Report:
    """Smart-contract findings plus a safety checklist."""

    summary: str
    risk_score: int
    web3_findings: tuple[Web3Finding, ...] = ()
    safe_checklist: tuple[str, ...] = ()
    priority_order: tuple[str, ...] | None = None

    def to_dict(self) -> dict:
        data = _envelope(self.summary, self.risk_score)
        data["web3Findings"] = [f.to_dict() for f in self.web3_findings]
        data["safeChecklist"] = list(self.safe_checklist)
        _add_priority(data, self.priority_order)
        return data


Report = Union[AuditReport, ForgeReport, Web3Report]


@dataclass
class SeverityHistogram:
    """Per-severity finding counts, derived from a report on demand."""

    counts: dict[Severity, int] = field(
        default_factory=lambda: {s: 0 for s in Severity}
    )

    def __getitem__(self, severity: Severity) -> int:
        return self.counts.get(severity, 0)

    @property
    def total(self) -> int:
        return sum(self.counts.values())

    def to_dict(self) -> dict[str, int]:
        return {s.value: self.counts.get(s, 0) for s in Severity}


def _envelope(summary: str, risk_score: int) -> dict:
    return {"summary": summary, "riskScore": risk_score}


def _add_priority(data: dict, priority_order: tuple[str, ...] | None) -> None:
    if priority_order is not None:
        data["priorityOrder"] = list(priority_order)
