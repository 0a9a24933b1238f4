from __future__ import annotations

import pytest

from input_processing.stages.security_scanner import (
    ComplianceFramework,
    SecurityPrinciples,
    SecurityScanner,
    Severity,
    compliance_score,
    generate_security_report,
    line_and_column,
)


def test_clean_code_is_valid():
    result = SecurityScanner().scan("const total = items.length;")
    assert result.is_valid
    assert result.violations == ()
    assert result.risk_level is Severity.LOW
    assert result.recommendations == ()


def test_hardcoded_secret_is_critical():
    result = SecurityScanner().scan('password = "hunter2"')
    assert not result.is_valid
    assert [v.type for v in result.violations] == ["hardcodedSecrets"]
    violation = result.violations[0]
    assert violation.severity is Severity.CRITICAL
    assert (violation.line, violation.column) == (1, 1)
    assert result.risk_level is Severity.CRITICAL
    assert result.recommendations == (
        "Use environment variables for sensitive data",
        "Implement proper secrets management",
    )


def test_eval_matches_two_classes_with_location():
    result = SecurityScanner().scan("a = 1\nb = eval(x)")
    assert [v.type for v in result.violations] == ["xss", "unsafeEval"]
    assert all((v.line, v.column) == (2, 5) for v in result.violations)
    assert result.risk_level is Severity.HIGH


def test_every_occurrence_is_reported():
    result = SecurityScanner().scan("../a\n../b")
    assert [(v.type, v.line) for v in result.violations] == [("pathTraversal", 1), ("pathTraversal", 2)]
    # Advice is listed once per type
    assert len(result.recommendations) == 2


@pytest.mark.parametrize(
    "code,vuln",
    [
        ("const n = Math.random();", "insecureRandom"),
        ("const seed = new Date().getTime();", "insecureRandom"),
        ("SELECT * FROM t UNION SELECT pw FROM users", "sqlInjection"),
        ("DROP TABLE users", "sqlInjection"),
        ("<iframe src='x'>", "xss"),
        ("setTimeout('run()', 10)", "unsafeEval"),
        ("open('..\\\\secret')", "pathTraversal"),
    ],
)
def test_vulnerability_classes(code, vuln):
    result = SecurityScanner().scan(code)
    assert vuln in {v.type for v in result.violations}


def test_classic_injection_string_is_critical():
    result = SecurityScanner().scan("'; DROP TABLE users; --")
    assert not result.is_valid
    injection = [v for v in result.violations if v.type == "sqlInjection"]
    assert injection
    assert all(v.severity is Severity.CRITICAL for v in injection)
    assert result.risk_level is Severity.CRITICAL


def test_risk_level_is_highest_severity():
    result = SecurityScanner().scan("x = Math.random()\napi_key = 'abc'")
    assert result.risk_level is Severity.CRITICAL


def test_line_and_column():
    text = "ab\ncd\nef"
    assert line_and_column(text, 0) == (1, 1)
    assert line_and_column(text, 4) == (2, 2)
    assert line_and_column(text, 6) == (3, 1)


def test_compliance_of_empty_code():
    framework = SecurityScanner.compliance_check("")
    assert not any(framework.controls().values())
    # Only economy of mechanism holds for code that never mentions complexity
    assert framework.principles == SecurityPrinciples(economy_of_mechanism=True)
    assert compliance_score(framework) == 6


def test_compliance_detects_controls_and_principles():
    code = """
    // validate and escape input, then check the jwt token
    function handler(req) {
      if (!authorize(req.user, 'admin')) throw new Error('denied');
      logger.info('audit');
      return cache.get(key);
    }
    """
    framework = SecurityScanner.compliance_check(code)
    controls = framework.controls()
    assert controls["input_validation"]
    assert controls["output_encoding"]
    assert controls["authentication"]
    assert controls["authorization"]
    assert controls["caching"]
    assert controls["logging"]
    assert controls["audit_trail"]
    assert not controls["compression"]
    assert framework.principles.defense_in_depth
    assert framework.principles.complete_mediation
    assert framework.principles.open_design


def test_compliance_score_bounds():
    all_true = ComplianceFramework(
        **{name: True for name in ComplianceFramework().controls()},
        principles=SecurityPrinciples(*([True] * 8)),
    )
    assert compliance_score(all_true) == 100
    assert compliance_score(ComplianceFramework()) == 0


def test_security_report_sections():
    code = 'token = "abc"'
    scanner = SecurityScanner()
    result = scanner.scan(code)
    framework = scanner.compliance_check(code)
    report = generate_security_report(result, framework)

    assert report.startswith("# Security Validation Report\n\n## Overall Risk Level: CRITICAL")
    assert "### 1. hardcodedSecrets (critical)" in report
    assert "- **Location**: Line 1, Column 1" in report
    assert "1. Use environment variables for sensitive data" in report
    assert "- Input Validation: ❌" in report
    assert "- Authentication: ✅" in report
    assert "- economy of mechanism: ✅" in report
    assert report.rstrip().endswith(f"**Compliance Score**: {compliance_score(framework)}%")


def test_report_without_violations_skips_sections():
    scanner = SecurityScanner()
    report = generate_security_report(scanner.scan("x = 1"), scanner.compliance_check("x = 1"))
    assert "## Overall Risk Level: LOW" in report
    assert "Security Violations" not in report
    assert "## Recommendations" not in report


def test_result_to_dict():
    data = SecurityScanner().scan("eval(x)").to_dict()
    assert data["is_valid"] is False
    assert data["risk_level"] == "high"
    assert data["violations"][0]["severity"] == "high"
