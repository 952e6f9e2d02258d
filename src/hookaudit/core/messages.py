"""Finding message templates.

The wording of these messages is consumed by downstream tooling and by the
regression harness; change it only together with tests/data/test_harness.json.
"""

import json
from collections.abc import Iterable


def quoted(value: str) -> str:
    """Double-quote a value, escaping quotes, backslashes and control characters."""
    return json.dumps(value, ensure_ascii=False)


def quoted_list(values: Iterable[str]) -> str:
    return "[" + ", ".join(quoted(value) for value in values) + "]"


def call_outside_function(command: str) -> str:
    return f"Function call outside of any function: {quoted(command)}"


def nested_in_function(name: str, function_stack: Iterable[str]) -> str:
    return f"Function {quoted(name)} is defined nested in another function: {quoted_list(function_stack)}"


def nested_in_compound(name: str) -> str:
    return f"Function {quoted(name)} is defined nested in a compound (possibly declared conditionally)"


def command_name_variable(name: str) -> str:
    return f"Command name contains variable: {quoted(name)}"


def unrecognized_command(command: str) -> str:
    return f"Running unrecognized command: {quoted(command)}"


def file_write(path: str) -> str:
    return f"File write to: {quoted(path)}"


def unusual_input_descriptor(fd: int) -> str:
    return f"File input on unusual descriptor: fd={fd}"


def unusual_descriptor_redirect(target: str) -> str:
    return f"File descriptor redirect to unusual descriptor: {quoted(target)}"


def redirect_not_checked(operator: str, operand: str) -> str:
    return f"Redirects are not being fully checked yet: operator={operator}, operand={quoted(operand)}"
