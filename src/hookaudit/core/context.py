"""Traversal state for a single script audit."""

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Optional

from .findings import FindingCondition, FindingLedger
from .trust import TrustLevel, trusted_commands_for


@dataclass
class Context:
    """State accumulated while walking one script.

    A Context belongs to exactly one `validate` call. Command substitutions
    are walked with the same Context, so a function declared inside a
    substitution counts for the whole script.

    Attributes:
        trusted_commands: Command names run without comment (fixed at creation)
        declared_functions: Names of functions declared at top level, outside
            any compound command; only read after traversal completes
        inside_compound: Depth of enclosing compound command bodies
        findings: Ledger of findings, resolved by `resolve()`
    """

    trusted_commands: frozenset[str] = field(default_factory=trusted_commands_for)
    declared_functions: set[str] = field(default_factory=set)
    inside_compound: int = 0
    findings: FindingLedger = field(default_factory=FindingLedger)

    @classmethod
    def with_trust(cls, level: TrustLevel) -> "Context":
        return cls(trusted_commands=trusted_commands_for(level))

    @classmethod
    def empty(cls) -> "Context":
        """Context that trusts nothing."""
        return cls(trusted_commands=frozenset())

    def is_trusted(self, command: str) -> bool:
        return command in self.trusted_commands

    def finding(self, message: str) -> None:
        self.findings.record(message)

    def finding_conditional(self, message: str, conditions: Optional[list[FindingCondition]] = None) -> None:
        self.findings.record_conditional(message, conditions or [])

    @contextmanager
    def entering_compound(self) -> Iterator[None]:
        """Count the enclosed block as nested in a compound command."""
        self.inside_compound += 1
        try:
            yield
        finally:
            self.inside_compound -= 1

    def resolve(self) -> list[str]:
        """Return the final ordered list of finding messages."""
        return self.findings.resolve(self)
