"""Finding ledger with deferred, condition-gated findings.

Some judgments are only correct once the whole script has been seen: a call
to a name that is not in the trust catalog is legitimate if the script
declares a function of that name further down. Such findings are recorded
with conditions and resolved against the final Context after traversal.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .context import Context

logger = logging.getLogger(__name__)


class FindingCondition:
    """Predicate over the final Context that gates a deferred finding.

    Subclasses are small frozen dataclasses; new predicates only need to
    implement `holds()`.
    """

    def holds(self, context: Context) -> bool:
        raise NotImplementedError


@dataclass(frozen=True)
class FunctionUndeclared(FindingCondition):
    """True when `name` was never validly declared as a function."""

    name: str

    def holds(self, context: Context) -> bool:
        return self.name not in context.declared_functions


@dataclass(frozen=True)
class Finding:
    """A human-readable finding, reported only if all its conditions hold.

    Attributes:
        message: Text shown to the operator
        conditions: Predicates evaluated after traversal (empty = always reported)
    """

    message: str
    conditions: tuple[FindingCondition, ...] = ()

    def applies(self, context: Context) -> bool:
        return all(condition.holds(context) for condition in self.conditions)


@dataclass
class FindingLedger:
    """Append-only list of findings in traversal-discovery order.

    Example:
        >>> from hookaudit.core.context import Context
        >>> ledger = FindingLedger()
        >>> ledger.record('File write to: "/etc/passwd"')
        >>> ledger.record_conditional('Running unrecognized command: "foo"', [FunctionUndeclared("foo")])
        >>> ledger.resolve(Context(declared_functions={"foo"}))
        ['File write to: "/etc/passwd"']
    """

    entries: list[Finding] = field(default_factory=list)

    def record(self, message: str) -> None:
        """Append a finding that is always reported."""
        logger.debug(f"finding: {message}")
        self.entries.append(Finding(message))

    def record_conditional(self, message: str, conditions: list[FindingCondition]) -> None:
        """Append a finding that is reported only if every condition holds at the end."""
        logger.debug(f"conditional finding: {message} if {conditions}")
        self.entries.append(Finding(message, tuple(conditions)))

    def resolve(self, context: Context) -> list[str]:
        """Consume the ledger and return the messages whose conditions hold.

        Order is discovery order, not sorted.
        """
        entries, self.entries = self.entries, []
        return [finding.message for finding in entries if finding.applies(context)]

    def __len__(self) -> int:
        return len(self.entries)
