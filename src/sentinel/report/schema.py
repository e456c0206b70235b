"""Schema registry — the result-shape contract for each scan type and mode.

Contracts are declared once per effective mode and looked up by
``resolve``. The same contract drives two things: the response schema
sent to the analysis service, and the structural validation performed by
the normalizer.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass

from sentinel.errors import ConfigurationError
from sentinel.report.models import (
    REQUEST_MODES,
    Category,
    Mode,
    ScanType,
    Severity,
    Web3Category,
)


class FieldKind(enum.Enum):
    """JSON value kind expected for a contract field."""

    STRING = "STRING"
    NUMBER = "NUMBER"
    OBJECT = "OBJECT"
    ARRAY = "ARRAY"


@dataclass(frozen=True)
class FieldSpec:
    """One field of a contract, possibly with nested element fields."""

    name: str
    kind: FieldKind
    required: bool = True
    # For ARRAY: kind of each element. For OBJECT elements: their fields.
    items: FieldKind | None = None
    fields: tuple[FieldSpec, ...] = ()
    # STRING fields restricted to the values of an enum
    choices: type[enum.Enum] | None = None

    def to_schema(self) -> dict:
        schema: dict = {"type": self.kind.value}
        if self.kind == FieldKind.ARRAY:
            if self.items == FieldKind.OBJECT:
                schema["items"] = _object_schema(self.fields)
            else:
                schema["items"] = {"type": (self.items or FieldKind.STRING).value}
        elif self.kind == FieldKind.OBJECT:
            schema.update(_object_schema(self.fields))
        return schema


@dataclass(frozen=True)
class Contract:
    """Required/optional top-level fields for one effective mode."""

    mode: Mode
    fields: tuple[FieldSpec, ...]

    @property
    def required(self) -> tuple[str, ...]:
        return tuple(f.name for f in self.fields if f.required)

    @property
    def optional(self) -> tuple[str, ...]:
        return tuple(f.name for f in self.fields if not f.required)

    @property
    def array_fields(self) -> tuple[FieldSpec, ...]:
        return tuple(f for f in self.fields if f.kind == FieldKind.ARRAY)

    def field(self, name: str) -> FieldSpec | None:
        for spec in self.fields:
            if spec.name == name:
                return spec
        return None

    def to_response_schema(self) -> dict:
        """Render as the JSON schema object the analysis service accepts."""
        return _object_schema(self.fields)


def _object_schema(fields: tuple[FieldSpec, ...]) -> dict:
    return {
        "type": FieldKind.OBJECT.value,
        "properties": {f.name: f.to_schema() for f in fields},
        "required": [f.name for f in fields if f.required],
    }


def _text(name: str, choices: type[enum.Enum] | None = None) -> FieldSpec:
    return FieldSpec(name, FieldKind.STRING, choices=choices)


def _string_list(name: str, required: bool = True) -> FieldSpec:
    return FieldSpec(name, FieldKind.ARRAY, required=required, items=FieldKind.STRING)


_EVIDENCE = FieldSpec(
    "evidence",
    FieldKind.OBJECT,
    fields=(_text("endpoint"), _text("reason")),
)

_FINDING_BODY = (
    _text("severity", Severity),
    _text("title"),
    _text("description"),
    _text("recommendation"),
)

_FINDING_FIELDS = (_text("category", Category), *_FINDING_BODY, _EVIDENCE)

_WEB3_FINDING_FIELDS = (_text("category", Web3Category), *_FINDING_BODY)

_SUMMARY = _text("summary")
_RISK_SCORE = FieldSpec("riskScore", FieldKind.NUMBER)
_PRIORITY_ORDER = _string_list("priorityOrder", required=False)

_FINDINGS = FieldSpec(
    "findings", FieldKind.ARRAY, items=FieldKind.OBJECT, fields=_FINDING_FIELDS
)
_WEB3_FINDINGS = FieldSpec(
    "web3Findings",
    FieldKind.ARRAY,
    items=FieldKind.OBJECT,
    fields=_WEB3_FINDING_FIELDS,
)
_GHERKIN_FEATURES = FieldSpec(
    "gherkinFeatures",
    FieldKind.ARRAY,
    items=FieldKind.OBJECT,
    fields=(_text("name"), _text("content")),
)
_API_TEST_CASES = FieldSpec(
    "apiTestCases",
    FieldKind.ARRAY,
    items=FieldKind.OBJECT,
    fields=(
        _text("title"),
        FieldSpec("steps", FieldKind.ARRAY, items=FieldKind.STRING),
        _text("expected"),
    ),
)

_CONTRACTS: dict[Mode, Contract] = {
    Mode.AUDIT: Contract(
        mode=Mode.AUDIT,
        fields=(
            _SUMMARY,
            _RISK_SCORE,
            _FINDINGS,
            _string_list("quickFixChecklist"),
            _PRIORITY_ORDER,
        ),
    ),
    Mode.FORGE: Contract(
        mode=Mode.FORGE,
        fields=(
            _SUMMARY,
            _RISK_SCORE,
            _FINDINGS,
            _string_list("quickFixChecklist"),
            _GHERKIN_FEATURES,
            _API_TEST_CASES,
            _PRIORITY_ORDER,
        ),
    ),
    Mode.WEB3: Contract(
        mode=Mode.WEB3,
        fields=(
            _SUMMARY,
            _RISK_SCORE,
            _WEB3_FINDINGS,
            _string_list("safeChecklist"),
            _PRIORITY_ORDER,
        ),
    ),
}


def effective_mode(scan_type: ScanType, mode: Mode) -> Mode:
    """Return the mode an analysis actually runs in.

    Smart-contract scans always run the Web3 review, whatever mode the
    caller asked for. Every other scan type runs the requested mode.
    """
    if not isinstance(scan_type, ScanType):
        raise ConfigurationError(f"Unknown scan type: {scan_type!r}")
    if mode not in REQUEST_MODES:
        raise ConfigurationError(f"Unknown analysis mode: {mode!r}")
    if scan_type == ScanType.SMART_CONTRACT:
        return Mode.WEB3
    return mode


def is_mode_overridden(scan_type: ScanType, mode: Mode) -> bool:
    """True when the caller asked for forge artifacts that will not be produced.

    AUDIT on a smart contract is also remapped to WEB3, but the result is
    still an audit, so it does not count as an override.
    """
    return scan_type == ScanType.SMART_CONTRACT and mode != Mode.AUDIT


def resolve(scan_type: ScanType, mode: Mode) -> Contract:
    """Return the result contract for a scan type and requested mode."""
    return _CONTRACTS[effective_mode(scan_type, mode)]


def parse_scan_type(value: str | ScanType) -> ScanType:
    """Parse a scan type name, raising ConfigurationError if unknown."""
    if isinstance(value, ScanType):
        return value
    try:
        return ScanType(str(value).strip().upper())
    except ValueError:
        raise ConfigurationError(f"Unknown scan type: {value!r}") from None


def parse_mode(value: str | Mode) -> Mode:
    """Parse a caller-supplied mode, raising ConfigurationError if unknown."""
    if isinstance(value, Mode):
        mode = value
    else:
        try:
            mode = Mode(str(value).strip().upper())
        except ValueError:
            raise ConfigurationError(f"Unknown analysis mode: {value!r}") from None
    if mode not in REQUEST_MODES:
        raise ConfigurationError(f"Mode {mode.value} cannot be requested directly")
    return mode
