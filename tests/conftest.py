"""Shared test fixtures."""

from __future__ import annotations

import copy

import pytest

SQLI_FINDING = {
    "category": "INPUT_VALIDATION",
    "severity": "HIGH",
    "title": "SQL injection in getUser",
    "description": "User input is concatenated into a SQL query.",
    "recommendation": "Use parameterized queries.",
    "evidence": {
        "endpoint": "GET /user/{id}",
        "reason": "name is appended to the query string",
    },
}

REENTRANCY_FINDING = {
    "category": "REENTRANCY_RISK",
    "severity": "CRITICAL",
    "title": "Reentrancy in withdraw",
    "description": "Balance is cleared after the external call.",
    "recommendation": "Apply checks-effects-interactions.",
}


@pytest.fixture
def audit_raw() -> dict:
    return {
        "summary": "One injection flaw.",
        "riskScore": 72,
        "findings": [copy.deepcopy(SQLI_FINDING)],
        "quickFixChecklist": ["Parameterize the users query"],
    }


@pytest.fixture
def forge_raw(audit_raw: dict) -> dict:
    raw = copy.deepcopy(audit_raw)
    raw["gherkinFeatures"] = [
        {
            "name": "Reject injected names",
            "content": "Feature: Reject injected names\n"
            "  Scenario: quote in name\n"
            "    When I request /user/1?name=a'--\n"
            "    Then the response status is 400",
        }
    ]
    raw["apiTestCases"] = [
        {
            "title": "Injected name is rejected",
            "steps": ["Send GET /user/1?name=a'--", "Inspect status"],
            "expected": "400 Bad Request",
        }
    ]
    return raw


@pytest.fixture
def web3_raw() -> dict:
    return {
        "summary": "Vault is reentrant.",
        "riskScore": 90,
        "web3Findings": [copy.deepcopy(REENTRANCY_FINDING)],
        "safeChecklist": ["Zero the balance before sending"],
    }
