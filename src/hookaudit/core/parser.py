"""Shell script parser using bashlex AST analysis.

This module wraps bashlex for install hook auditing. It turns script text
into a list of statement nodes and renders nodes back into the source text
that findings quote.

The parser is security-critical and REQUIRES bashlex for proper AST parsing.
A script bashlex cannot parse is an error, never an empty result.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Any, NamedTuple, Optional

import bashlex
import bashlex.errors

from hookaudit.exceptions import ParseError

from . import scanner

logger = logging.getLogger(__name__)

# bashlex node kinds that can appear as a statement in a command list
STATEMENT_KINDS = frozenset({"list", "pipeline", "command", "compound", "function"})

# Kinds that make a word dynamic when they appear in a command name
DYNAMIC_WORD_KINDS = frozenset({"parameter", "commandsubstitution", "processsubstitution"})

# Kinds whose body is a nested script that runs when the word is expanded
SUBSTITUTION_KINDS = frozenset({"commandsubstitution", "processsubstitution"})

_GROUP_OPEN = "{\n"
_GROUP_CLOSE = "\n}"

_BLANK_OR_COMMENT = re.compile(r"^\s*(#.*)?$")


class CommandParts(NamedTuple):
    """Parts of a simple command, split the way the shell applies them."""

    assignments: list[Any]
    words: list[Any]
    redirects: list[Any]


def is_blank_script(script: str) -> bool:
    """True if the script has nothing but blank lines and comments."""
    return all(_BLANK_OR_COMMENT.match(line) for line in script.splitlines())


@dataclass(frozen=True)
class ParsedScript:
    """bashlex statement nodes plus the text their positions refer to.

    Nodes of nested command substitutions and case arms share the same
    source, so a single ParsedScript renders every node reached from `nodes`.

    Attributes:
        source: Text that node positions index into
        nodes: Top-level statement nodes in document order
        cases: Arm bodies of each case command, keyed by the position of
            its `case` keyword. bashlex sees a case command as an empty
            brace group starting at that position.
    """

    source: str
    nodes: list[Any]
    cases: dict[int, tuple[list[Any], ...]] = field(default_factory=dict)

    def case_arms(self, node: Any) -> Optional[tuple[list[Any], ...]]:
        """Arm bodies if the compound node stands for a case command."""
        return self.cases.get(node.pos[0])

    def text(self, node: Any) -> str:
        """Exact source text of a node, quotes included."""
        start, end = node.pos
        return self.source[start:end]

    def is_backquote(self, node: Any) -> bool:
        """True for a legacy `...` command substitution."""
        return self.source[node.pos[0]] == "`"

    def redirect_operand(self, redirect: Any) -> str:
        """Operand of a redirect: a file word, a descriptor number or '-'."""
        output = redirect.output
        if hasattr(output, "pos"):
            return self.text(output)
        return str(output)

    def render_redirect(self, redirect: Any) -> str:
        """Render a redirect as `[fd]operator operand`, e.g. `2>&1` or `>/tmp/x`."""
        fd = "" if redirect.input is None else str(redirect.input)
        return f"{fd}{redirect.type}{self.redirect_operand(redirect)}"

    def render_command(self, node: Any) -> str:
        """Render a simple command: assignments, words, then redirects."""
        parts = command_parts(node)
        rendered = [self.text(part) for part in parts.assignments]
        rendered.extend(self.text(part) for part in parts.words)
        rendered.extend(self.render_redirect(part) for part in parts.redirects)
        return " ".join(rendered)

    def sole_command_substitution(self, word: Any) -> Optional[Any]:
        """Return the substitution if the word is exactly `$(...)` or `"$(...)"`.

        Back-quoted substitutions never match.
        """
        parts = getattr(word, "parts", None) or []
        if len(parts) != 1:
            return None
        subst = parts[0]
        if subst.kind != "commandsubstitution" or self.is_backquote(subst):
            return None
        subst_text = self.text(subst)
        if self.text(word) in (subst_text, f'"{subst_text}"'):
            return subst
        return None


def command_parts(node: Any) -> CommandParts:
    """Split a bashlex `command` node into assignments, words and redirects.

    Only assignments before the command name count as assignments; an
    assignment-looking argument (`local x=1`) is a word.
    """
    assignments: list[Any] = []
    words: list[Any] = []
    redirects: list[Any] = []
    for part in node.parts:
        kind = getattr(part, "kind", None)
        if kind == "redirect":
            redirects.append(part)
        elif kind == "assignment" and not words:
            assignments.append(part)
        elif kind in ("word", "assignment"):
            words.append(part)
    return CommandParts(assignments, words, redirects)


def word_units(word: Any) -> list[Any]:
    """Expansion nodes (parameters, substitutions, tildes) inside a word."""
    return list(getattr(word, "parts", None) or [])


class ShellScriptParser:
    """Parse install hook scripts using bashlex AST analysis.

    SECURITY: This class REQUIRES bashlex. There is no regex fallback; a
    script that cannot be parsed raises ParseError.

    Example:
        >>> parser = ShellScriptParser()
        >>> script = parser.parse("post_install() {\\n  echo done\\n}\\n")
        >>> [node.kind for node in script.nodes]
        ['function']
    """

    def parse(self, script: str) -> ParsedScript:
        """Parse a whole script into its top-level statements.

        bashlex yields one tree per complete command, so the script is parsed
        as the body of a single brace group and the group is unwrapped again.
        The group is not a compound command of the script.

        Case commands and arithmetic expansions are rewritten before bashlex
        sees the text (see `scanner`). Node positions still index into the
        original script, and every case arm body is parsed separately.

        Args:
            script: Shell script text

        Returns:
            ParsedScript whose nodes are the top-level statements

        Raises:
            ParseError: If bashlex cannot parse the script
        """
        if is_blank_script(script):
            return ParsedScript(source=script, nodes=[])

        source = f"{_GROUP_OPEN}{script}{_GROUP_CLOSE}"
        scan = scanner.scan_script(source)
        chars = scanner.masked_source(source, scan)

        group = _sole_statement(self._bashlex_parse(scanner.main_text(chars, scan.cases), source))
        if not _is_brace_group(group) or tuple(group.pos) != (0, len(source)):
            raise ParseError("Failed to parse shell script (unbalanced braces)")

        cases: dict[int, tuple[list[Any], ...]] = {}
        self._parse_cases(chars, source, scan.cases, cases)

        nodes = _group_body(group)
        logger.debug(f"Parsed script into {len(nodes)} top-level node(s)")
        return ParsedScript(source=source, nodes=nodes, cases=cases)

    def _parse_cases(
        self,
        chars: list[str],
        source: str,
        commands: tuple[scanner.CaseCommand, ...],
        parsed: dict[int, tuple[list[Any], ...]],
    ) -> None:
        """Parse the arm bodies of case commands, nested ones included."""
        for case in commands:
            arms = []
            for arm in case.arms:
                if is_blank_script(source[arm.body_start : arm.body_end]):
                    arms.append([])
                    continue
                group = _sole_statement(self._bashlex_parse(scanner.arm_text(chars, arm), source))
                if not _is_brace_group(group):
                    raise ParseError(
                        "Failed to parse shell script (case arm)",
                        line=max(source.count("\n", 0, arm.start), 1),
                    )
                arms.append(_group_body(group))
                self._parse_cases(chars, source, arm.nested, parsed)
            parsed[case.start] = tuple(arms)

    def _bashlex_parse(self, text: str, source: str) -> list[Any]:
        try:
            return bashlex.parse(text)
        except bashlex.errors.ParsingError as e:
            raise ParseError("Failed to parse shell script", original_error=e, line=_error_line(e, text, source))
        except Exception as e:
            # bashlex raises NotImplementedError and friends for unsupported syntax
            logger.error(f"Unexpected error parsing script: {e!r}")
            raise ParseError("Failed to parse shell script (unsupported syntax)", original_error=e)


def _sole_statement(trees: list[Any]) -> Optional[Any]:
    statements = []
    for tree in trees:
        if tree.kind == "list":
            statements.extend(part for part in tree.parts if part.kind != "operator")
        else:
            statements.append(tree)
    return statements[0] if len(statements) == 1 else None


def _is_brace_group(group: Any) -> bool:
    if group is None or group.kind != "compound" or group.redirects:
        return False
    first, last = group.list[0], group.list[-1]
    return (
        getattr(first, "kind", None) == "reservedword"
        and first.word == "{"
        and getattr(last, "kind", None) == "reservedword"
        and last.word == "}"
    )


def _group_body(group: Any) -> list[Any]:
    return [node for node in group.list if getattr(node, "kind", None) != "reservedword"]


def _error_line(error: Exception, text: str, source: str) -> Optional[int]:
    """Line of the original script where a bashlex error happened."""
    position = getattr(error, "position", None)
    if getattr(error, "s", None) != text or not isinstance(position, int):
        return None
    # The wrapper adds one line before the script
    return max(source.count("\n", 0, position), 1)
