"""Pattern-based security scanner."""

import re

from code_sensei.analysis.base import LineRule, StaticAnalyzer
from code_sensei.models.issue import Category, Severity

# These patterns can flag test data or example values and will miss
# encoded secrets; they are a first line of defence, not a secret scanner.
_SECRET_PATTERNS = [
    (r"(?:api[_-]?key|apikey)\s*[:=]\s*['\"][a-zA-Z0-9]{20,}['\"]", "API Key"),
    (r"(?:password|passwd|pwd)\s*[:=]\s*['\"][^'\"]+['\"]", "Password"),
    (r"(?:secret|token)\s*[:=]\s*['\"][a-zA-Z0-9]{20,}['\"]", "Secret/Token"),
    (r"-----BEGIN (?:RSA |DSA )?PRIVATE KEY-----", "Private Key"),
    (r"(?:aws_access_key_id|aws_secret_access_key)\s*[:=]", "AWS Credentials"),
]

_SQL_PATTERNS = [
    r"execute\s*\(\s*f?[\"`'].*\$\{",
    r"execute\s*\(\s*f?[\"`'].*\+",
    r"execute\s*\(\s*f[\"'].*\{",
    r"query\s*\(\s*[\"`'].*\$\{",
    r"query\s*\(\s*[\"`'].*\+",
    r"\.raw\s*\(\s*[\"`'].*\$\{",
]

_XSS_PATTERNS = [
    r"dangerouslySetInnerHTML",
    r"\.html\s*\(\s*[^)]*\$\{",
    r"innerHTML\s*=\s*[^;]*\$\{",
    r"document\.write\s*\(",
]

_CRYPTO_PATTERNS = [
    (r"\bmd5\b", "MD5"),
    (r"\bsha1\b", "SHA1"),
    (r"\bdes\b", "DES"),
    (r"\brc4\b", "RC4"),
]

_PATH_PATTERNS = [
    r"readFile\s*\(\s*[^)]*\$\{",
    r"writeFile\s*\(\s*[^)]*\$\{",
    r"\bopen\s*\(\s*[^)]*\+",
]

_COMMAND_PATTERNS = [
    r"\bexec\s*\(\s*[\"`'].*\$\{",
    r"\bspawn\s*\(\s*[\"`'].*\$\{",
    r"\bsystem\s*\(\s*[\"`'].*\+",
    r"subprocess\.\w+\(.*shell\s*=\s*True",
]


def _build_rules() -> list[LineRule]:
    rules = []
    for pattern, name in _SECRET_PATTERNS:
        rules.append(
            LineRule(
                code="hardcoded-secret",
                pattern=re.compile(pattern, re.IGNORECASE),
                severity=Severity.CRITICAL,
                category=Category.SECURITY,
                message=f"Possible hardcoded {name} detected",
                suggestion="Use environment variables or a secrets management service instead",
            )
        )
    for pattern in _SQL_PATTERNS:
        rules.append(
            LineRule(
                code="sql-injection",
                pattern=re.compile(pattern, re.IGNORECASE),
                severity=Severity.CRITICAL,
                category=Category.SECURITY,
                message="Potential SQL injection vulnerability - avoid string concatenation in queries",
                suggestion="Use parameterized queries or prepared statements",
            )
        )
    for pattern in _XSS_PATTERNS:
        rules.append(
            LineRule(
                code="xss",
                pattern=re.compile(pattern, re.IGNORECASE),
                severity=Severity.HIGH,
                category=Category.SECURITY,
                message="Potential XSS vulnerability - unsafe HTML rendering",
                suggestion="Sanitize user input before rendering or use safe APIs",
            )
        )
    for pattern, algo in _CRYPTO_PATTERNS:
        rules.append(
            LineRule(
                code="insecure-crypto",
                pattern=re.compile(pattern, re.IGNORECASE),
                severity=Severity.HIGH,
                category=Category.SECURITY,
                message=f"Insecure cryptographic algorithm: {algo}",
                suggestion="Use modern algorithms like SHA-256, SHA-3, or bcrypt for passwords",
            )
        )
    for pattern in _PATH_PATTERNS:
        rules.append(
            LineRule(
                code="path-traversal",
                pattern=re.compile(pattern, re.IGNORECASE),
                severity=Severity.HIGH,
                category=Category.SECURITY,
                message="Potential path traversal vulnerability",
                suggestion="Validate and normalise file paths before use",
            )
        )
    for pattern in _COMMAND_PATTERNS:
        rules.append(
            LineRule(
                code="command-injection",
                pattern=re.compile(pattern, re.IGNORECASE),
                severity=Severity.CRITICAL,
                category=Category.SECURITY,
                message="Potential command injection vulnerability",
                suggestion="Avoid executing shell commands with user input. Use safe APIs instead.",
            )
        )
    return rules


class SecurityScanner(StaticAnalyzer):
    """Scans every file for common vulnerability patterns."""

    NAME = "security"
    RULES = _build_rules()
