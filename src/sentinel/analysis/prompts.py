"""System instructions and prompts sent to the analysis service."""

from __future__ import annotations

from sentinel.report.models import Mode, ScanType

WEB3_SYSTEM = (
    "Act as a Senior Smart Contract Auditor. Perform a deep defensive security "
    "review of Solidity code. Focus on fund safety and state atomicity. "
    "No exploit payloads."
)

AUDIT_SYSTEM = (
    "Act as a Senior Security Architect. Perform a deep defensive audit "
    "focusing on OWASP. No exploits."
)

FORGE_SYSTEM = (
    "Act as a Lead Security QA Engineer. Synthesize defensive Gherkin features "
    "and API negative test cases. No exploits."
)

_WEB3_PROMPT = """\
Perform a Web3 Guard defensive review.

### TARGET SOURCE CODE
{content}

### INSTRUCTIONS
1. Identify vulnerabilities like Reentrancy, Access Control flaws, and Logic Errors.
2. Calculate Risk Score (0-100).
3. Provide remediation steps based on the Checks-Effects-Interactions pattern.

Return strict JSON matching the schema.
"""

_APP_PROMPT = """\
Mode: {mode}
Target Type: {scan_type}

### TARGET CONTENT
{content}

### INSTRUCTIONS
1. Identify logic flaws and vulnerabilities.
2. Calculate Risk Score (0-100).
3. {step_three}

Return strict JSON matching the schema.
"""

_FORGE_STEP = "FORGE MODE ACTIVE: Generate Gherkin Features and API Negative Test Cases."
_AUDIT_STEP = "Provide findings and recommendations."


def system_instruction(effective: Mode) -> str:
    if effective == Mode.WEB3:
        return WEB3_SYSTEM
    if effective == Mode.FORGE:
        return FORGE_SYSTEM
    return AUDIT_SYSTEM


def build_prompt(content: str, scan_type: ScanType, effective: Mode) -> str:
    """Render the user prompt for an already-resolved effective mode."""
    if effective == Mode.WEB3:
        return _WEB3_PROMPT.format(content=content)
    step = _FORGE_STEP if effective == Mode.FORGE else _AUDIT_STEP
    return _APP_PROMPT.format(
        mode=effective.value,
        scan_type=scan_type.value,
        content=content,
        step_three=step,
    )
