"""
hookaudit - static audit of package install hook scripts.

Package structure:
- hookaudit.core: Audit engine (parser, trust catalogs, walker, validator, cache)
- hookaudit.integrations: Front ends (configuration, archive reader, CLI, harness)

Public API:
- validate(): Strict audit, raises ParseError
- audit_script(): Front-end audit, never raises
- AuditResult: Audit outcome dataclass
- TrustLevel: Trust catalog selection enum
"""

from hookaudit.core.trust import TrustLevel
from hookaudit.core.validator import AuditResult, audit_script, validate, validate_with_trust

__version__ = "0.1.0"

__all__ = [
    "validate",
    "validate_with_trust",
    "audit_script",
    "AuditResult",
    "TrustLevel",
]
