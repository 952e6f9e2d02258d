"""Install hook audit entry points.

This module ties the parser, the AST walker and the finding ledger
together. `validate()` is the strict API (raises ParseError);
`audit_script()` wraps it for front ends, never raises, and caches
successful results.
"""

import logging
import threading
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Optional

from hookaudit.exceptions import ParseError

from .cache import AuditCache, cache_key
from .context import Context
from .parser import ShellScriptParser
from .trust import TrustLevel, trusted_commands_for
from .walker import validate_ast

logger = logging.getLogger(__name__)

EXIT_CLEAN = 0
EXIT_FINDINGS = 1
EXIT_ERROR = 2

# Module-level cache (shared across all audit_script calls)
_global_cache = AuditCache(max_size=256)

_parser_lock = threading.Lock()

# ShellScriptParser is stateless, reuse it
_global_parser: Optional[ShellScriptParser] = None


def _get_parser() -> ShellScriptParser:
    """Get cached ShellScriptParser.

    Thread-safe: Uses _parser_lock to prevent race conditions.
    """
    global _global_parser  # noqa: PLW0603

    with _parser_lock:
        if _global_parser is None:
            _global_parser = ShellScriptParser()
        return _global_parser


@dataclass(frozen=True)
class AuditResult:
    """Result of auditing one install hook.

    Attributes:
        findings: Finding messages in discovery order (shared by cache hits)
        error: Error message if the audit failed (None on success)
        exit_code: 0 if clean, 1 if findings were produced, 2 on error

    Example:
        >>> result = audit_script(script)
        >>> for finding in result.findings:
        ...     print(f"[!] {finding}")
    """

    findings: tuple[str, ...] = ()
    error: Optional[str] = None
    exit_code: int = EXIT_CLEAN

    @property
    def ok(self) -> bool:
        """True when the audit completed, with or without findings."""
        return self.error is None


def validate(script: str, trusted_commands: Optional[Iterable[str]] = None) -> list[str]:
    """Audit a shell script and return its findings.

    Args:
        script: Install hook script text
        trusted_commands: Trust catalog; None means binaries and builtins,
            anything else is used as-is (an empty iterable trusts nothing)

    Returns:
        Finding messages in traversal-discovery order

    Raises:
        ParseError: If the script (or a substitution inside it) cannot be
            parsed; no partial findings are returned

    Example:
        >>> validate("post_install() {\\n  date >/tmp/x\\n}\\n")
        ['Running unrecognized command: "date >/tmp/x"', 'File write to: "/tmp/x"']
    """
    if trusted_commands is None:
        ctx = Context()
    else:
        ctx = Context(trusted_commands=frozenset(trusted_commands))

    parsed = _get_parser().parse(script)
    validate_ast(ctx, parsed, parsed.nodes)
    findings = ctx.resolve()
    logger.info(f"Audit finished with {len(findings)} finding(s)")
    return findings


def validate_with_trust(script: str, level: TrustLevel) -> list[str]:
    """Audit a script against one of the built-in trust levels.

    Raises:
        ParseError: If the script cannot be parsed
    """
    return validate(script, trusted_commands_for(level))


def audit_script(
    script: str,
    trusted_commands: Optional[Iterable[str]] = None,
    *,
    use_cache: bool = True,
) -> AuditResult:
    """Audit a script for a front end.

    IMPORTANT: This function never raises exceptions. Errors are returned in
    AuditResult.error with exit code 2, and are never cached.

    Args:
        script: Install hook script text
        trusted_commands: Trust catalog (None = default catalog)
        use_cache: Whether to consult and fill the module-level cache

    Returns:
        AuditResult with findings or error
    """
    catalog = trusted_commands_for() if trusted_commands is None else frozenset(trusted_commands)
    key = cache_key(script, catalog)

    if use_cache:
        cached = _global_cache.get(key)
        if cached is not None:
            logger.debug("Audit cache hit")
            return cached

    try:
        findings = validate(script, catalog)
    except ParseError as e:
        logger.warning(f"Parse error: {e}")
        return AuditResult(error=str(e), exit_code=EXIT_ERROR)
    except Exception as e:
        logger.exception(f"Unexpected error during audit: {e}")
        return AuditResult(error=f"Internal error: {e}", exit_code=EXIT_ERROR)

    result = AuditResult(findings=tuple(findings), exit_code=EXIT_FINDINGS if findings else EXIT_CLEAN)
    if use_cache:
        _global_cache.set(key, result)
    return result


def clear_caches() -> None:
    """Clear the module-level audit cache (used by tests)."""
    _global_cache.clear()


def cache_size() -> int:
    return _global_cache.size()
