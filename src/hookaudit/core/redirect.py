"""Redirect classification.

Maps a single redirect to zero or one finding. Output redirects are file
writes unless they go to /dev/null; descriptor duplication is only expected
towards stdout/stderr; operators that are not analysed yet are reported
rather than silently passed. Here-document bodies are not inspected.
"""

import logging
from typing import Any, Optional

from . import messages
from .context import Context
from .parser import ParsedScript

logger = logging.getLogger(__name__)

DEV_NULL = "/dev/null"

FILE_INPUT = "<"
# `&>` and `&>>` are bash's stdout+stderr forms of `>` and `>>`
FILE_OUTPUT = frozenset({">", ">>", "&>", "&>>"})
FD_OUTPUT = ">&"
HERE_DOCUMENTS = frozenset({"<<", "<<-"})

# Operators accepted by the grammar but not analysed yet, with their report labels
UNCHECKED_OPERATORS: dict[str, str] = {
    "<>": "FileInOut",
    ">|": "FileClobber",
    "<&": "FdIn",
    ">>|": "Pipe",
    "<<<": "String",
}

# Descriptor duplication targets that are unremarkable: stdout, stderr, close
USUAL_FD_TARGETS = frozenset({"1", "2", "-"})


def classify_redirect(fd: Optional[int], operator: str, operand: str) -> Optional[str]:
    """Classify one redirect.

    Args:
        fd: Explicitly written file descriptor (`3<file` → 3), None if implicit
        operator: Redirect operator as written (`>`, `>>`, `>&`, `<`, ...)
        operand: Source text of the target (path, descriptor or `-`)

    Returns:
        Finding message, or None if the redirect is unremarkable

    Example:
        >>> classify_redirect(None, ">", "/tmp/pwn")
        'File write to: "/tmp/pwn"'
        >>> classify_redirect(2, ">&", "1") is None
        True
    """
    if operator == FILE_INPUT:
        if fd is not None:
            return messages.unusual_input_descriptor(fd)
        return None

    if operator in FILE_OUTPUT:
        if operand != DEV_NULL:
            return messages.file_write(operand)
        return None

    if operator == FD_OUTPUT:
        if operand not in USUAL_FD_TARGETS:
            return messages.unusual_descriptor_redirect(operand)
        return None

    if operator in HERE_DOCUMENTS:
        return None

    label = UNCHECKED_OPERATORS.get(operator, operator)
    return messages.redirect_not_checked(label, operand)


def validate_redirect(ctx: Context, script: ParsedScript, redirect: Any) -> None:
    """Classify a bashlex redirect node and record its finding, if any."""
    operand = script.redirect_operand(redirect)
    logger.debug(f"redirect fd={redirect.input!r} op={redirect.type!r} operand={operand!r}")
    finding = classify_redirect(redirect.input, redirect.type, operand)
    if finding is not None:
        ctx.finding(finding)
