"""Core audit engine.

This module contains the essential components for hook auditing:
- trust: Catalogs of commands run without comment
- findings: Finding ledger with deferred findings
- parser: Bashlex AST parsing
- scanner: Same-length rewrites of syntax bashlex rejects
- walker / command / redirect: Traversal and classification
- validator: Entry points
- cache: Thread-safe LRU cache
"""

from hookaudit.core.cache import AuditCache
from hookaudit.core.context import Context
from hookaudit.core.findings import Finding, FindingCondition, FindingLedger, FunctionUndeclared
from hookaudit.core.parser import ParsedScript, ShellScriptParser
from hookaudit.core.redirect import classify_redirect
from hookaudit.core.trust import REASONABLE_BINARIES, REASONABLE_BUILTINS, TrustLevel, trusted_commands_for
from hookaudit.core.validator import AuditResult, audit_script, validate, validate_with_trust

__all__ = [
    # Parser
    "ShellScriptParser",
    "ParsedScript",
    # Trust
    "REASONABLE_BINARIES",
    "REASONABLE_BUILTINS",
    "TrustLevel",
    "trusted_commands_for",
    # Findings
    "Context",
    "Finding",
    "FindingCondition",
    "FindingLedger",
    "FunctionUndeclared",
    "classify_redirect",
    # Validator
    "AuditResult",
    "audit_script",
    "validate",
    "validate_with_trust",
    # Cache
    "AuditCache",
]
