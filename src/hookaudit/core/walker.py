"""Recursive traversal over parsed shell scripts.

The walker owns the function-declaration rules and the compound nesting
depth. Simple commands are handed to `command.validate_simple_command`,
which re-enters the walker for command substitutions.

Only the first pipeline of each AND-OR list is inspected: commands after
`&&` or `||` are not visited.
"""

import logging
from collections.abc import Iterator, Sequence
from typing import Any

from . import command, messages
from .context import Context
from .parser import STATEMENT_KINDS, ParsedScript
from .redirect import validate_redirect

logger = logging.getLogger(__name__)

FunctionStack = tuple[str, ...]

AND_OR_OPERATORS = frozenset({"&&", "||"})

# bashlex wraps these constructs in a `compound` node
CONSTRUCT_KINDS = frozenset({"if", "for", "while", "until"})


def validate_ast(
    ctx: Context,
    script: ParsedScript,
    nodes: Sequence[Any],
    function_stack: FunctionStack = (),
) -> None:
    """Validate a statement list.

    Args:
        ctx: Shared traversal state
        script: Source the nodes were parsed from
        nodes: Statement nodes, possibly interleaved with operator and
            reserved-word nodes
        function_stack: Names of the enclosing function definitions
    """
    skip_and_or = False
    for node in nodes:
        kind = node.kind
        if kind == "operator":
            skip_and_or = node.op in AND_OR_OPERATORS
            continue
        if kind not in STATEMENT_KINDS:
            continue
        if skip_and_or:
            logger.debug(f"Not inspecting AND-OR continuation: {script.text(node)!r}")
            skip_and_or = False
            continue

        if kind == "list":
            validate_ast(ctx, script, node.parts, function_stack)
        elif kind == "pipeline":
            for part in node.parts:
                if part.kind in STATEMENT_KINDS:
                    validate_command(ctx, script, part, function_stack)
        else:
            validate_command(ctx, script, node, function_stack)


def validate_command(ctx: Context, script: ParsedScript, node: Any, function_stack: FunctionStack) -> None:
    """Dispatch one command by kind: function definition, simple or compound."""
    if node.kind == "function":
        validate_function(ctx, script, node, function_stack)
    elif node.kind == "compound":
        validate_compound_command(ctx, script, node, function_stack)
    elif node.kind == "command":
        command.validate_simple_command(ctx, script, node, function_stack)
    else:
        validate_ast(ctx, script, [node], function_stack)


def validate_function(ctx: Context, script: ParsedScript, node: Any, function_stack: FunctionStack) -> None:
    """Apply the declaration rules to a function definition and walk its body.

    Only top-level, unconditional definitions are declared. The body is
    walked either way, so findings inside rejected definitions are kept.
    """
    name = node.name.word
    logger.info(f"Discovered function: {name!r}")

    if function_stack:
        ctx.finding(messages.nested_in_function(name, function_stack))
    elif ctx.inside_compound:
        ctx.finding(messages.nested_in_compound(name))
    else:
        ctx.declared_functions.add(name)

    body_stack = function_stack + (name,)
    if node.body.kind == "compound":
        validate_compound_command(ctx, script, node.body, body_stack)
    else:
        validate_ast(ctx, script, [node.body], body_stack)


def validate_compound_command(ctx: Context, script: ParsedScript, node: Any, function_stack: FunctionStack) -> None:
    """Walk every statement list of a compound command, then its redirects.

    Bodies are visited in document order: group and subshell bodies; loop
    conditions then bodies; if/elif conditions and bodies, then else; case
    arm bodies (patterns are not scanned).
    """
    logger.debug(f"Entering compound command at depth {ctx.inside_compound}")
    case_arms = script.case_arms(node)
    with ctx.entering_compound():
        if case_arms is None:
            validate_ast(ctx, script, list(_compound_bodies(node)), function_stack)
        else:
            for arm in case_arms:
                validate_ast(ctx, script, arm, function_stack)
    logger.debug("Exiting compound command")

    for redirect in node.redirects:
        validate_redirect(ctx, script, redirect)


def _compound_bodies(node: Any) -> Iterator[Any]:
    """Statement nodes of a compound command, in document order.

    Reserved words, loop variables and for-lists are yielded too;
    `validate_ast` skips anything that is not a statement.
    """
    for item in node.list:
        if item.kind in CONSTRUCT_KINDS:
            yield from item.parts
        else:
            yield item
