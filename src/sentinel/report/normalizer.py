"""Report normalizer — validates raw analysis output and builds Report values.

The analysis service is untrusted: its output is checked against the
registry contract before anything else touches it. Structural checks run
in contract order (top-level fields first, then array elements in array
order) and the first problem raises ``SchemaViolation`` naming the field.
"""

from __future__ import annotations

import logging
import math
from typing import Any

from sentinel.errors import SchemaViolation
from sentinel.report.models import (
    ApiTestCase,
    AuditReport,
    Category,
    Evidence,
    Finding,
    ForgeReport,
    GherkinFeature,
    Mode,
    Report,
    RiskBand,
    ScanType,
    Severity,
    SeverityHistogram,
    Web3Category,
    Web3Finding,
    Web3Report,
)
from sentinel.report.schema import Contract, FieldKind, FieldSpec, resolve

logger = logging.getLogger(__name__)

RISK_MIN = 0
RISK_MAX = 100

# Dashboard banding thresholds (score strictly above)
_CRITICAL_ABOVE = 70
_HIGH_ABOVE = 40


def normalize(raw: Any, scan_type: ScanType, mode: Mode) -> Report:
    """Validate ``raw`` for (scan_type, mode) and return a canonical Report.

    Pure and deterministic: identical input always yields an equal Report.
    """
    return normalize_contract(raw, resolve(scan_type, mode))


def normalize_contract(raw: Any, contract: Contract) -> Report:
    """Validate ``raw`` against an already-resolved contract."""
    if not isinstance(raw, dict):
        raise SchemaViolation("$", "document is not a JSON object")

    validate(raw, contract)

    summary = raw["summary"]
    risk_score = clamp_risk_score(raw["riskScore"])
    priority = raw.get("priorityOrder")
    priority_order = tuple(priority) if priority is not None else None

    if contract.mode == Mode.WEB3:
        return Web3Report(
            summary=summary,
            risk_score=risk_score,
            web3_findings=tuple(
                _build_web3_finding(item, i)
                for i, item in enumerate(raw["web3Findings"])
            ),
            safe_checklist=tuple(raw["safeChecklist"]),
            priority_order=priority_order,
        )

    findings = tuple(_build_finding(item, i) for i, item in enumerate(raw["findings"]))
    checklist = tuple(raw["quickFixChecklist"])

    if contract.mode == Mode.FORGE:
        return ForgeReport(
            summary=summary,
            risk_score=risk_score,
            findings=findings,
            quick_fix_checklist=checklist,
            gherkin_features=tuple(
                GherkinFeature(name=g["name"], content=g["content"])
                for g in raw["gherkinFeatures"]
            ),
            api_test_cases=tuple(
                ApiTestCase(
                    title=t["title"],
                    steps=tuple(t["steps"]),
                    expected=t["expected"],
                )
                for t in raw["apiTestCases"]
            ),
            priority_order=priority_order,
        )

    return AuditReport(
        summary=summary,
        risk_score=risk_score,
        findings=findings,
        quick_fix_checklist=checklist,
        priority_order=priority_order,
    )


def validate(raw: dict, contract: Contract) -> None:
    """Raise SchemaViolation for the first structural problem in ``raw``."""
    for spec in contract.fields:
        value = raw.get(spec.name)
        if value is None:
            if spec.required:
                raise SchemaViolation(spec.name)
            continue
        _check_kind(value, spec, spec.name)

    for spec in contract.array_fields:
        items = raw.get(spec.name)
        if items is None:
            continue
        for index, item in enumerate(items):
            _check_element(item, spec, f"{spec.name}[{index}]")


def _check_kind(value: Any, spec: FieldSpec, path: str) -> None:
    if not _is_kind(value, spec.kind):
        raise SchemaViolation(path, f"expected {spec.kind.value.lower()}")


def _check_element(item: Any, spec: FieldSpec, path: str) -> None:
    kind = spec.items or FieldKind.STRING
    if not _is_kind(item, kind):
        raise SchemaViolation(path, f"expected {kind.value.lower()}")
    if kind == FieldKind.OBJECT:
        _check_object(item, spec.fields, path)


def _check_object(obj: dict, fields: tuple[FieldSpec, ...], path: str) -> None:
    for sub in fields:
        sub_path = f"{path}.{sub.name}"
        value = obj.get(sub.name)
        if value is None:
            if sub.required:
                raise SchemaViolation(sub_path)
            continue
        _check_kind(value, sub, sub_path)
        if sub.choices is not None:
            _enum_value(sub.choices, value, sub_path)
        if sub.kind == FieldKind.OBJECT:
            _check_object(value, sub.fields, sub_path)
        elif sub.kind == FieldKind.ARRAY:
            for index, element in enumerate(value):
                _check_element(element, sub, f"{sub_path}[{index}]")


def _is_kind(value: Any, kind: FieldKind) -> bool:
    if kind == FieldKind.STRING:
        return isinstance(value, str)
    if kind == FieldKind.NUMBER:
        if isinstance(value, bool):
            return False
        if isinstance(value, (int, float)):
            return True
        return isinstance(value, str) and _parse_number(value) is not None
    if kind == FieldKind.OBJECT:
        return isinstance(value, dict)
    return isinstance(value, list)


def _parse_number(text: str) -> float | None:
    try:
        number = float(text.strip())
    except ValueError:
        return None
    return number if math.isfinite(number) else None


def clamp_risk_score(value: Any) -> int:
    """Coerce a risk score to an int in [0, 100]; out-of-range values clamp."""
    if isinstance(value, bool):
        raise SchemaViolation("riskScore", "expected number")
    if isinstance(value, str):
        number = _parse_number(value)
        if number is None:
            raise SchemaViolation("riskScore", "expected number")
    elif isinstance(value, (int, float)):
        number = value
    else:
        raise SchemaViolation("riskScore", "expected number")

    if isinstance(number, float):
        if math.isnan(number):
            raise SchemaViolation("riskScore", "expected number")
        if math.isinf(number):
            return RISK_MAX if number > 0 else RISK_MIN
        number = int(round(number))

    if number < RISK_MIN or number > RISK_MAX:
        logger.debug("Clamping out-of-range riskScore %s", number)
    return max(RISK_MIN, min(RISK_MAX, number))


def _enum_value(enum_cls, value: str, path: str):
    key = value.strip().upper().replace(" ", "_").replace("-", "_")
    try:
        return enum_cls(key)
    except ValueError:
        raise SchemaViolation(path, f"unknown value {value!r}") from None


def _build_finding(item: dict, index: int) -> Finding:
    path = f"findings[{index}]"
    evidence = item["evidence"]
    return Finding(
        category=_enum_value(Category, item["category"], f"{path}.category"),
        severity=_enum_value(Severity, item["severity"], f"{path}.severity"),
        title=item["title"],
        description=item["description"],
        recommendation=item["recommendation"],
        evidence=Evidence(endpoint=evidence["endpoint"], reason=evidence["reason"]),
    )


def _build_web3_finding(item: dict, index: int) -> Web3Finding:
    path = f"web3Findings[{index}]"
    return Web3Finding(
        category=_enum_value(Web3Category, item["category"], f"{path}.category"),
        severity=_enum_value(Severity, item["severity"], f"{path}.severity"),
        title=item["title"],
        description=item["description"],
        recommendation=item["recommendation"],
    )


def report_from_dict(data: dict) -> Report:
    """Rebuild a Report from its serialized envelope.

    The variant is inferred from which facets are present. A document
    that mixes facets of different variants, or carries only half of the
    forge pair, is rejected.
    """
    if not isinstance(data, dict):
        raise SchemaViolation("$", "document is not a JSON object")

    has = {key for key, value in data.items() if value is not None}
    forge_keys = {"gherkinFeatures", "apiTestCases"} & has

    if "web3Findings" in has or "safeChecklist" in has:
        for key in ("findings", "quickFixChecklist", "gherkinFeatures", "apiTestCases"):
            if key in has:
                raise SchemaViolation(key, "not allowed in a smart-contract report")
        mode = Mode.WEB3
    elif forge_keys:
        missing = {"gherkinFeatures", "apiTestCases"} - forge_keys
        if missing:
            raise SchemaViolation(missing.pop())
        mode = Mode.FORGE
    else:
        mode = Mode.AUDIT

    return normalize_contract(data, _contract_for(mode))


def _contract_for(mode: Mode) -> Contract:
    if mode == Mode.WEB3:
        return resolve(ScanType.SMART_CONTRACT, Mode.AUDIT)
    return resolve(ScanType.JAVA_CODE, mode)


def findings_of(report: Report) -> tuple:
    """Findings carried by any report variant."""
    if isinstance(report, Web3Report):
        return report.web3_findings
    return report.findings


def severity_histogram(report: Report) -> SeverityHistogram:
    """Count findings per severity; absent severities count as zero."""
    histogram = SeverityHistogram()
    for finding in findings_of(report):
        histogram.counts[finding.severity] += 1
    return histogram


def unified_checklist(report: Report) -> tuple[str, ...]:
    """The remediation checklist, whichever variant carries it."""
    if isinstance(report, Web3Report):
        return report.safe_checklist
    return report.quick_fix_checklist


def risk_band(score: int) -> RiskBand:
    """Band a clamped risk score for display emphasis."""
    if score > _CRITICAL_ABOVE:
        return RiskBand.CRITICAL
    if score > _HIGH_ABOVE:
        return RiskBand.HIGH
    return RiskBand.LOW
