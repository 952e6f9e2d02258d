"""Simple command classification.

A simple command is checked in this order: substitutions in its
assignments, substitutions in its words, the command name, then its
redirects. A command whose only word is `$(...)` or `"$(...)"` runs the
substituted script directly, so that script is walked in its place.
"""

import logging
import re
from typing import Any, Optional

from . import messages, walker
from .context import Context
from .findings import FunctionUndeclared
from .parser import DYNAMIC_WORD_KINDS, SUBSTITUTION_KINDS, CommandParts, ParsedScript, command_parts, word_units
from .redirect import validate_redirect

logger = logging.getLogger(__name__)

_ARITHMETIC = re.compile(r"\$\(\((.*?)\)\)", re.DOTALL)


def validate_simple_command(
    ctx: Context,
    script: ParsedScript,
    node: Any,
    function_stack: tuple[str, ...],
) -> None:
    """Record findings for one simple command.

    Args:
        ctx: Shared traversal state
        script: Source the command was parsed from
        node: bashlex `command` node
        function_stack: Names of the enclosing function definitions
    """
    logger.debug(f"Checking simple command: {script.text(node)!r}")
    parts = command_parts(node)

    for assignment in parts.assignments:
        validate_word(ctx, script, assignment, function_stack)
    for word in parts.words:
        validate_word(ctx, script, word, function_stack)

    subst = transparent_subshell(script, parts)
    if subst is not None:
        logger.debug(f"Command is a bare substitution, walking it: {script.text(subst)!r}")
        _validate_substitution(ctx, script, subst, function_stack)
    elif parts.words:
        _validate_command_name(ctx, script, node, parts.words[0], function_stack)

    for redirect in parts.redirects:
        validate_redirect(ctx, script, redirect)


def validate_word(ctx: Context, script: ParsedScript, word: Any, function_stack: tuple[str, ...]) -> None:
    """Walk every command and process substitution embedded in a word.

    Single-quoted text never yields substitution nodes, so it is not scanned.
    """
    for unit in word_units(word):
        if unit.kind not in SUBSTITUTION_KINDS:
            continue
        if script.is_backquote(unit):
            logger.debug(f"Walking back-quoted substitution: {script.text(unit)!r}")
        _validate_substitution(ctx, script, unit, function_stack)


def transparent_subshell(script: ParsedScript, parts: CommandParts) -> Optional[Any]:
    """Substitution node if the command is nothing but `$(...)` or `"$(...)"`."""
    if parts.assignments or len(parts.words) != 1:
        return None
    return script.sole_command_substitution(parts.words[0])


def is_dynamic_word(script: ParsedScript, word: Any) -> bool:
    """True if expanding the word can change which command runs.

    Parameters, `$(...)` and process substitutions are dynamic. Back-quoted
    substitutions are not. Arithmetic expansions count when they mention `$`.
    """
    for unit in word_units(word):
        if unit.kind not in DYNAMIC_WORD_KINDS:
            continue
        if unit.kind == "commandsubstitution" and script.is_backquote(unit):
            continue
        return True
    return any("$" in body for body in _ARITHMETIC.findall(script.text(word)))


def _validate_command_name(
    ctx: Context,
    script: ParsedScript,
    node: Any,
    name_word: Any,
    function_stack: tuple[str, ...],
) -> None:
    name = script.text(name_word)
    if not function_stack:
        ctx.finding(messages.call_outside_function(script.render_command(node)))

    if is_dynamic_word(script, name_word):
        ctx.finding(messages.command_name_variable(name))
    elif not ctx.is_trusted(name):
        # Calls to hook-local functions are fine once they are known to be declared
        ctx.finding_conditional(
            messages.unrecognized_command(script.render_command(node)),
            [FunctionUndeclared(name)],
        )


def _validate_substitution(ctx: Context, script: ParsedScript, subst: Any, function_stack: tuple[str, ...]) -> None:
    body = getattr(subst, "command", None)
    if body is None:
        return
    walker.validate_ast(ctx, script, [body], function_stack)
