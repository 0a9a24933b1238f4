"""Heuristic security scanning of source code text.

Two independent checks:

- ``SecurityScanner.scan`` matches a fixed table of vulnerability patterns
  and reports every match with its line and column.
- ``SecurityScanner.compliance_check`` evaluates the LPG8C-style framework:
  10 boolean controls and 8 boolean principles detected from characteristic
  terms in the code.

This is a pre-filter, not a security analysis. Patterns are plain regular
expressions over raw text and match inside comments and strings too.
"""

from __future__ import annotations

import logging
import re
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)


class Severity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]


_SEVERITY_RANK = {
    Severity.LOW: 0,
    Severity.MEDIUM: 1,
    Severity.HIGH: 2,
    Severity.CRITICAL: 3,
}


@dataclass(frozen=True)
class VulnerabilityClass:
    """One row of the vulnerability table."""

    name: str
    severity: Severity
    message: str
    patterns: tuple[re.Pattern[str], ...]
    recommendations: tuple[str, ...]


def _compile(*patterns: str) -> tuple[re.Pattern[str], ...]:
    return tuple(re.compile(p, re.IGNORECASE) for p in patterns)


_SECRET_VALUE = r"""\s*=\s*["'][^"']+["']"""

VULNERABILITY_CLASSES: tuple[VulnerabilityClass, ...] = (
    VulnerabilityClass(
        name="xss",
        severity=Severity.HIGH,
        message="Potential XSS vulnerability detected",
        patterns=_compile(
            r"<script[^>]*>.*?</script>",
            r"javascript:",
            r"on\w+\s*=",
            r"<iframe[^>]*>",
            r"eval\s*\(",
            r"innerHTML\s*=",
        ),
        recommendations=(
            "Use proper output encoding and Content Security Policy (CSP)",
            "Sanitize user inputs and avoid innerHTML",
        ),
    ),
    VulnerabilityClass(
        name="sqlInjection",
        severity=Severity.CRITICAL,
        message="Potential SQL injection vulnerability detected",
        patterns=_compile(
            r"'\s*(or|and)\s*'?\d",
            r"union\s+select",
            r"drop\s+table",
            r"delete\s+from",
            r"insert\s+into",
            r"update\s+\w+\s+set",
        ),
        recommendations=(
            "Use parameterized queries or prepared statements",
            "Implement input validation and sanitization",
        ),
    ),
    VulnerabilityClass(
        name="pathTraversal",
        severity=Severity.HIGH,
        message="Potential path traversal vulnerability detected",
        patterns=_compile(
            r"\.\./",
            r"\.\.\\",
            r"%2e%2e%2f",
            r"%2e%2e%5c",
        ),
        recommendations=(
            "Validate and sanitize file paths",
            "Use allowlists for permitted file operations",
        ),
    ),
    VulnerabilityClass(
        name="hardcodedSecrets",
        severity=Severity.CRITICAL,
        message="Hardcoded secrets detected",
        patterns=_compile(
            r"password" + _SECRET_VALUE,
            r"api[_-]?key" + _SECRET_VALUE,
            r"secret" + _SECRET_VALUE,
            r"token" + _SECRET_VALUE,
            r"private[_-]?key" + _SECRET_VALUE,
        ),
        recommendations=(
            "Use environment variables for sensitive data",
            "Implement proper secrets management",
        ),
    ),
    VulnerabilityClass(
        name="insecureRandom",
        severity=Severity.MEDIUM,
        message="Insecure random number generation detected",
        patterns=_compile(
            r"Math\.random\s*\(\s*\)",
            r"new\s+Date\s*\(\s*\)\.getTime\s*\(\s*\)",
        ),
        recommendations=(
            "Use cryptographically secure random number generators",
            "Consider using crypto.randomBytes() or crypto.getRandomValues()",
        ),
    ),
    VulnerabilityClass(
        name="unsafeEval",
        severity=Severity.HIGH,
        message="Unsafe code execution detected",
        patterns=_compile(
            r"eval\s*\(",
            r"Function\s*\(",
            r"""setTimeout\s*\(\s*["'][^"']*["']""",
            r"""setInterval\s*\(\s*["'][^"']*["']""",
        ),
        recommendations=(
            "Avoid dynamic code execution",
            "Use safer alternatives like JSON.parse() for data parsing",
        ),
    ),
)


@dataclass(frozen=True)
class SecurityViolation:
    type: str
    severity: Severity
    message: str
    line: int | None = None
    column: int | None = None

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["severity"] = self.severity.value
        return data


@dataclass(frozen=True)
class SecurityValidationResult:
    """
    Outcome of ``SecurityScanner.scan``.

    Attributes:
        is_valid: True when no violation was found
        violations: One entry per pattern match, in table order
        risk_level: Highest severity among violations, ``low`` when none
        recommendations: Advice per distinct violation type, deduplicated
    """

    is_valid: bool
    violations: tuple[SecurityViolation, ...] = ()
    risk_level: Severity = Severity.LOW
    recommendations: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "is_valid": self.is_valid,
            "violations": [v.to_dict() for v in self.violations],
            "risk_level": self.risk_level.value,
            "recommendations": list(self.recommendations),
        }


@dataclass(frozen=True)
class SecurityPrinciples:
    defense_in_depth: bool = False
    fail_secure: bool = False
    least_privilege: bool = False
    separation_of_duties: bool = False
    economy_of_mechanism: bool = False
    complete_mediation: bool = False
    open_design: bool = False
    psychological_acceptability: bool = False


@dataclass(frozen=True)
class ComplianceFramework:
    """10 security controls plus 8 principles, each a boolean."""

    input_validation: bool = False
    output_encoding: bool = False
    authentication: bool = False
    authorization: bool = False
    rate_limiting: bool = False
    caching: bool = False
    compression: bool = False
    logging: bool = False
    monitoring: bool = False
    audit_trail: bool = False
    principles: SecurityPrinciples = field(default_factory=SecurityPrinciples)

    def controls(self) -> dict[str, bool]:
        data = asdict(self)
        data.pop("principles")
        return data

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


CONTROL_PATTERNS: dict[str, re.Pattern[str]] = {
    "input_validation": re.compile(r"validate|sanitize|escape", re.IGNORECASE),
    "output_encoding": re.compile(r"encode|escape|sanitize", re.IGNORECASE),
    "authentication": re.compile(r"auth|login|session|jwt|token", re.IGNORECASE),
    "authorization": re.compile(r"authorize|permission|role|access", re.IGNORECASE),
    "rate_limiting": re.compile(r"rate.?limit|throttle", re.IGNORECASE),
    "caching": re.compile(r"cache|redis|memcache", re.IGNORECASE),
    "compression": re.compile(r"compress|gzip|deflate", re.IGNORECASE),
    "logging": re.compile(r"log|audit|track", re.IGNORECASE),
    "monitoring": re.compile(r"monitor|metric|alert", re.IGNORECASE),
    "audit_trail": re.compile(r"audit|trail|history", re.IGNORECASE),
}

_FAIL_SECURE = re.compile(r"try.?catch|error.?handling", re.IGNORECASE)
_SEPARATION = re.compile(r"role|permission", re.IGNORECASE)
_COMPLEXITY = re.compile(r"complex|complicated", re.IGNORECASE)
_OPEN_DESIGN = re.compile(r"/\*|//|comment", re.IGNORECASE)
_ACCEPTABILITY = re.compile(r"user.?friendly|intuitive", re.IGNORECASE)

COMPLIANCE_FLAG_COUNT = 18


def line_and_column(text: str, offset: int) -> tuple[int, int]:
    """1-based line and column of ``offset`` in ``text``."""
    line = text.count("\n", 0, offset) + 1
    column = offset - (text.rfind("\n", 0, offset) + 1) + 1
    return line, column


class SecurityScanner:
    """Pattern scanner and compliance checker over code text."""

    def __init__(self, classes: tuple[VulnerabilityClass, ...] = VULNERABILITY_CLASSES):
        self.classes = classes

    def scan(self, code: str) -> SecurityValidationResult:
        """Report every vulnerability pattern match in ``code``."""
        violations: list[SecurityViolation] = []
        for vuln in self.classes:
            for pattern in vuln.patterns:
                for match in pattern.finditer(code or ""):
                    line, column = line_and_column(code, match.start())
                    violations.append(
                        SecurityViolation(
                            type=vuln.name,
                            severity=vuln.severity,
                            message=vuln.message,
                            line=line,
                            column=column,
                        )
                    )

        risk_level = max((v.severity for v in violations), key=lambda s: s.rank, default=Severity.LOW)
        result = SecurityValidationResult(
            is_valid=not violations,
            violations=tuple(violations),
            risk_level=risk_level,
            recommendations=self._recommendations(violations),
        )
        if violations:
            logger.info(
                "Security violations found",
                extra={"count": len(violations), "risk_level": risk_level.value},
            )
        return result

    def _recommendations(self, violations: list[SecurityViolation]) -> tuple[str, ...]:
        by_name = {vuln.name: vuln for vuln in self.classes}
        advice: list[str] = []
        for name in dict.fromkeys(v.type for v in violations):
            for rec in by_name[name].recommendations:
                if rec not in advice:
                    advice.append(rec)
        return tuple(advice)

    @staticmethod
    def compliance_check(code: str) -> ComplianceFramework:
        """Evaluate each control and principle independently against ``code``."""
        code = code or ""
        controls = {name: bool(p.search(code)) for name, p in CONTROL_PATTERNS.items()}

        principles = SecurityPrinciples(
            defense_in_depth=(
                controls["input_validation"]
                and controls["output_encoding"]
                and controls["authentication"]
            ),
            fail_secure=bool(_FAIL_SECURE.search(code)),
            least_privilege=controls["authorization"],
            separation_of_duties=bool(_SEPARATION.search(code)),
            economy_of_mechanism=not _COMPLEXITY.search(code),
            complete_mediation=controls["authentication"] and controls["authorization"],
            open_design=bool(_OPEN_DESIGN.search(code)),
            psychological_acceptability=bool(_ACCEPTABILITY.search(code)),
        )
        return ComplianceFramework(**controls, principles=principles)


def compliance_score(framework: ComplianceFramework) -> int:
    """Percentage of the 18 flags that are true, as an integer in [0, 100]."""
    flags = list(framework.controls().values()) + list(asdict(framework.principles).values())
    return round(100 * sum(flags) / COMPLIANCE_FLAG_COUNT)


def _mark(flag: bool) -> str:
    return "✅" if flag else "❌"


def generate_security_report(result: SecurityValidationResult, framework: ComplianceFramework) -> str:
    """Render ``result`` and ``framework`` as a Markdown report."""
    parts = ["# Security Validation Report\n\n"]
    parts.append(f"## Overall Risk Level: {result.risk_level.value.upper()}\n\n")

    if result.violations:
        parts.append(f"## Security Violations ({len(result.violations)})\n\n")
        for index, violation in enumerate(result.violations, start=1):
            parts.append(f"### {index}. {violation.type} ({violation.severity.value})\n")
            parts.append(f"- **Message**: {violation.message}\n")
            if violation.line:
                parts.append(f"- **Location**: Line {violation.line}, Column {violation.column}\n")
            parts.append("\n")

    if result.recommendations:
        parts.append("## Recommendations\n\n")
        for index, rec in enumerate(result.recommendations, start=1):
            parts.append(f"{index}. {rec}\n")
        parts.append("\n")

    parts.append("## LPG8C Framework Compliance\n\n")
    parts.append("### Security Controls\n")
    for name, flag in framework.controls().items():
        parts.append(f"- {name.replace('_', ' ').title()}: {_mark(flag)}\n")
    parts.append("\n")

    parts.append("### Security Principles\n")
    for name, flag in asdict(framework.principles).items():
        parts.append(f"- {name.replace('_', ' ')}: {_mark(flag)}\n")

    parts.append(f"\n**Compliance Score**: {compliance_score(framework)}%\n")
    return "".join(parts)
