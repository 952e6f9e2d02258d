"""Same-length rewrites for shell syntax bashlex does not implement.

bashlex raises NotImplementedError for `case ... esac` and for arithmetic
expansion `$((...))`. Both are located with a small quote-, comment- and
here-document-aware scanner and overwritten with text of the same length
that bashlex does accept, so every node position still indexes into the
original script:

- `$((...))` becomes a run of `0` characters, a plain word
- a whole `case` command becomes an empty brace group `{  ...  :;}`
- each case arm is parsed on its own, as `{ body ;}` (or `{ body }` when
  the body already ends in a separator) laid over a blank copy of the
  script

The scanner is lenient: anything it cannot make sense of is left alone for
bashlex to reject.
"""

import logging
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger(__name__)

ARITHMETIC_FILL = "0"

_METACHARS = frozenset(" \t\n;&|()<>")

# Words after which the shell expects another command
_RESERVED_BEFORE_COMMAND = frozenset({"!", "{", "do", "elif", "else", "if", "then", "time", "until", "while"})

# Longest first
_ARM_TERMINATORS = (";;&", ";;", ";&")

_CASE_PLACEHOLDER_TAIL = ":;}"


@dataclass(frozen=True)
class CaseArm:
    """One `pattern) body ;;` arm of a case command.

    Attributes:
        start: Index of the pattern list, including an optional `(`
        body_start: Index just after the pattern's closing `)`
        body_end: Index of the terminator, or of `esac` for an open last arm
        end: Index after the terminator (equal to body_end without one)
        nested: Case commands inside the body
    """

    start: int
    body_start: int
    body_end: int
    end: int
    nested: tuple["CaseCommand", ...] = ()


@dataclass(frozen=True)
class CaseCommand:
    """A `case WORD in ... esac` command spanning source[start:end]."""

    start: int
    end: int
    arms: tuple[CaseArm, ...]


@dataclass(frozen=True)
class ScanResult:
    """Spans found in a script.

    Attributes:
        cases: Case commands that are not inside another case arm
        arithmetic: (start, end) spans of `$((...))` expansions
    """

    cases: tuple[CaseCommand, ...]
    arithmetic: tuple[tuple[int, int], ...]


def scan_script(text: str) -> ScanResult:
    """Find case commands and arithmetic expansions in shell text."""
    scanner = _Scanner(text)
    _, cases = scanner.scan_list(0, "top")
    if cases or scanner.arithmetic:
        logger.debug(f"Rewriting {len(cases)} case command(s) and {len(scanner.arithmetic)} arithmetic expansion(s)")
    return ScanResult(cases=tuple(cases), arithmetic=tuple(scanner.arithmetic))


def masked_source(text: str, scan: ScanResult) -> list[str]:
    """Characters of text with every arithmetic expansion overwritten."""
    chars = list(text)
    for start, end in scan.arithmetic:
        chars[start:end] = ARITHMETIC_FILL * (end - start)
    return chars


def main_text(chars: list[str], cases: tuple[CaseCommand, ...]) -> str:
    """Text for the script itself, with each case command reduced to a group."""
    chars = list(chars)
    _place_case_groups(chars, cases)
    return "".join(chars)


def arm_text(chars: list[str], arm: CaseArm) -> str:
    """Text holding only one arm body, wrapped as `{ body ;}`.

    Everything outside the arm is blank, so positions still match the
    original script.
    """
    arm_chars = [" "] * len(chars)
    arm_chars[arm.body_start : arm.body_end] = chars[arm.body_start : arm.body_end]
    _place_case_groups(arm_chars, arm.nested)
    arm_chars[arm.start] = "{"
    body = "".join(arm_chars[arm.body_start : arm.body_end]).rstrip(" \t")
    if arm.end > arm.body_end and not body.endswith(("\n", ";", "&")):
        arm_chars[arm.body_end : arm.body_end + 2] = [";", "}"]
    else:
        # The body already ends in a separator
        arm_chars[arm.body_end] = "}"
    return "".join(arm_chars)


def _place_case_groups(chars: list[str], cases: tuple[CaseCommand, ...]) -> None:
    for case in cases:
        chars[case.start : case.end] = " " * (case.end - case.start)
        chars[case.start] = "{"
        tail = case.end - len(_CASE_PLACEHOLDER_TAIL)
        chars[tail : case.end] = _CASE_PLACEHOLDER_TAIL


class _Scanner:
    """Recursive scanner over shell text.

    `scan_list` consumes commands until the token that closes the current
    context: end of text, `)` of a `$(`, a closing back-quote, or the end
    of a case arm.
    """

    def __init__(self, text: str):
        self.text = text
        self.arithmetic: list[tuple[int, int]] = []
        self.heredocs: list[tuple[str, bool]] = []
        self.backquote_depth = 0

    def scan_list(self, i: int, until: str) -> tuple[int, list[CaseCommand]]:
        """Scan commands from i.

        Returns:
            (index, cases). For "arm" the index is at the terminator or at
            `esac`; for ")" and "`" it is just past the closing character.
        """
        text = self.text
        n = len(text)
        cases: list[CaseCommand] = []
        command_start = True
        depth = 0
        while i < n:
            c = text[i]
            if c == "\n":
                i = self._skip_heredocs(i + 1)
                command_start = True
            elif c in " \t":
                i += 1
            elif c == "#":
                i = self._line_end(i)
            elif c == "\\":
                i += 2
                command_start = False
            elif until == "arm" and c == ";" and any(text.startswith(t, i) for t in _ARM_TERMINATORS):
                return i, cases
            elif c in ";&|":
                i += 1
                command_start = True
            elif c == "(":
                depth += 1
                i += 1
                command_start = True
            elif c == ")":
                if depth == 0 and until == ")":
                    return i + 1, cases
                depth = max(depth - 1, 0)
                i += 1
                command_start = True
            elif c == "`" and until == "`":
                return i + 1, cases
            elif c in "<>":
                if text.startswith("<<", i) and not text.startswith("<<<", i):
                    i = self._heredoc_operator(i + 2)
                else:
                    i += 1
                command_start = False
            else:
                start = i
                i, word = self.scan_word(i, cases)
                if command_start and word == "case":
                    case, i = self.scan_case(start, i)
                    if case is not None:
                        cases.append(case)
                    command_start = False
                    continue
                if command_start and word == "esac" and until == "arm":
                    return start, cases
                command_start = word in _RESERVED_BEFORE_COMMAND
        return n, cases

    def scan_word(self, i: int, cases: list[CaseCommand]) -> tuple[int, Optional[str]]:
        """Consume one word; return its text only if it is unquoted and plain."""
        text = self.text
        n = len(text)
        start = i
        plain = True
        while i < n:
            c = text[i]
            if c in _METACHARS:
                break
            if c == "`" and self.backquote_depth and i > start:
                # closes the enclosing back-quote
                break
            if c in "\\'\"`$":
                plain = False
                i = self._skip_quoting(i, cases)
            else:
                i += 1
        return i, text[start:i] if plain else None

    def scan_case(self, start: int, i: int) -> tuple[Optional[CaseCommand], int]:
        """Scan a case command whose `case` keyword spans source[start:i]."""
        text = self.text
        n = len(text)
        i = self._skip_blanks(i)
        i, _ = self.scan_word(i, [])
        i = self._skip_separators(i)
        if not self._keyword_at(i, "in"):
            return None, i
        i += 2

        arms: list[CaseArm] = []
        while True:
            i = self._skip_separators(i)
            if i >= n:
                return None, n
            if self._keyword_at(i, "esac"):
                return CaseCommand(start=start, end=i + 4, arms=tuple(arms)), i + 4
            arm_start = i
            body_start = self._pattern_end(i + 1 if text[i] == "(" else i)
            if body_start is None:
                return None, n
            body_end, nested = self.scan_list(body_start, "arm")
            if body_end >= n:
                return None, n
            terminator = next((t for t in _ARM_TERMINATORS if text.startswith(t, body_end)), "")
            end = body_end + len(terminator)
            arms.append(CaseArm(arm_start, body_start, body_end, end, tuple(nested)))
            i = end

    def _skip_quoting(self, i: int, cases: list[CaseCommand]) -> int:
        """Skip one quoted or expanded unit starting at i."""
        text = self.text
        c = text[i]
        if c == "\\":
            return i + 2
        if c == "'":
            return self._after(text.find("'", i + 1))
        if c == '"':
            return self._scan_double_quoted(i + 1, cases)
        if c == "`":
            self.backquote_depth += 1
            try:
                i, inner = self.scan_list(i + 1, "`")
            finally:
                self.backquote_depth -= 1
            cases.extend(inner)
            return i
        return self._scan_dollar(i, cases)

    def _scan_double_quoted(self, i: int, cases: list[CaseCommand]) -> int:
        text = self.text
        n = len(text)
        while i < n:
            c = text[i]
            if c == '"':
                return i + 1
            if c in "\\`$":
                i = self._skip_quoting(i, cases)
            else:
                i += 1
        return n

    def _scan_dollar(self, i: int, cases: list[CaseCommand]) -> int:
        text = self.text
        if text.startswith("$((", i):
            end = self._arithmetic_end(i + 3)
            if end is not None:
                self.arithmetic.append((i, end))
                return end
        if text.startswith("$(", i):
            i, inner = self.scan_list(i + 2, ")")
            cases.extend(inner)
            return i
        if text.startswith("${", i):
            return self._scan_braced(i + 2, cases)
        if text.startswith("$'", i):
            return self._scan_ansi_c(i + 2)
        return i + 1

    def _arithmetic_end(self, i: int) -> Optional[int]:
        """Index after the `))` closing an arithmetic expansion, if any."""
        text = self.text
        n = len(text)
        depth = 0
        while i < n:
            c = text[i]
            if c == "\\":
                i += 2
                continue
            if c == "(":
                depth += 1
            elif c == ")":
                if depth == 0:
                    # `$((cmd) )` is a command substitution of a subshell
                    return i + 2 if text.startswith("))", i) else None
                depth -= 1
            i += 1
        return None

    def _scan_braced(self, i: int, cases: list[CaseCommand]) -> int:
        text = self.text
        n = len(text)
        depth = 1
        while i < n:
            c = text[i]
            if c in "\\'\"`$":
                i = self._skip_quoting(i, cases)
                continue
            if c == "{":
                depth += 1
            elif c == "}":
                depth -= 1
                if depth == 0:
                    return i + 1
            i += 1
        return n

    def _scan_ansi_c(self, i: int) -> int:
        text = self.text
        n = len(text)
        while i < n:
            if text[i] == "\\":
                i += 2
            elif text[i] == "'":
                return i + 1
            else:
                i += 1
        return n

    def _pattern_end(self, i: int) -> Optional[int]:
        """Index after the `)` closing a case pattern list."""
        text = self.text
        n = len(text)
        while i < n:
            c = text[i]
            if c == ")":
                return i + 1
            if c in "\\'\"`$":
                i = self._skip_quoting(i, [])
            else:
                i += 1
        return None

    def _heredoc_operator(self, i: int) -> int:
        """Register the here-document whose delimiter follows `<<` at i."""
        text = self.text
        n = len(text)
        strip_tabs = i < n and text[i] == "-"
        if strip_tabs:
            i += 1
        i = self._skip_blanks(i)
        start = i
        while i < n and text[i] not in _METACHARS:
            i += 1
        delimiter = "".join(c for c in text[start:i] if c not in "\\'\"")
        if delimiter:
            self.heredocs.append((delimiter, strip_tabs))
        return i

    def _skip_heredocs(self, i: int) -> int:
        """Skip the bodies of here-documents opened on the line just ended."""
        text = self.text
        n = len(text)
        for delimiter, strip_tabs in self.heredocs:
            while i < n:
                line_end = self._line_end(i)
                line = text[i:line_end]
                i = line_end + 1
                if (line.lstrip("\t") if strip_tabs else line) == delimiter:
                    break
        self.heredocs.clear()
        return min(i, n)

    def _keyword_at(self, i: int, word: str) -> bool:
        end = i + len(word)
        return self.text.startswith(word, i) and (end >= len(self.text) or self.text[end] in _METACHARS)

    def _skip_blanks(self, i: int) -> int:
        text = self.text
        while i < len(text) and text[i] in " \t":
            i += 1
        return i

    def _skip_separators(self, i: int) -> int:
        """Skip blanks, newlines and comments."""
        text = self.text
        n = len(text)
        while i < n:
            if text[i] in " \t\n":
                i += 1
            elif text[i] == "#":
                i = self._line_end(i)
            else:
                break
        return i

    def _line_end(self, i: int) -> int:
        end = self.text.find("\n", i)
        return len(self.text) if end < 0 else end

    def _after(self, index: int) -> int:
        return len(self.text) if index < 0 else index + 1
