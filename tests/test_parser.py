"""Tests for ShellScriptParser."""

import pytest

from hookaudit.core.parser import command_parts, is_blank_script
from hookaudit.exceptions import ParseError


def statements(nodes):
    """Flatten bashlex list nodes into statements, dropping operators."""
    flat = []
    for node in nodes:
        if node.kind == "list":
            flat.extend(statements(node.parts))
        elif node.kind != "operator":
            flat.append(node)
    return flat


class TestShellScriptParser:
    """Test suite for ShellScriptParser."""

    def test_parse_function(self, parser):
        """A hook with one function parses to one function statement."""
        parsed = parser.parse("post_install() {\n  echo done\n}\n")
        assert [node.kind for node in statements(parsed.nodes)] == ["function"]

    def test_parse_top_level_statements(self, parser):
        """Blank lines between top-level statements are fine."""
        script = "pre_install() {\n  :\n}\n\n\npost_install() {\n  :\n}\n\necho done\n"
        parsed = parser.parse(script)
        kinds = [node.kind for node in statements(parsed.nodes)]
        assert kinds == ["function", "function", "command"]

    def test_wrapper_is_not_a_statement(self, parser):
        """The script's own statements are returned, not the enclosing group."""
        parsed = parser.parse("{\n  echo hi\n}\n")
        (group,) = statements(parsed.nodes)
        assert group.kind == "compound"
        assert parsed.text(group).startswith("{")
        assert "echo hi" in parsed.text(group)

    @pytest.mark.parametrize("script", ["", "\n\n", "   \n", "# just a comment\n", "#!/bin/sh\n\n# nothing\n"])
    def test_blank_scripts(self, parser, script):
        """Blank and comment-only scripts have no statements."""
        assert is_blank_script(script)
        assert parser.parse(script).nodes == []

    @pytest.mark.parametrize(
        "script",
        [
            'post_install() {\n  echo "unterminated\n}\n',
            "post_install() {\n  echo hi\n",
            "post_install() {\n  echo $(date\n}\n",
        ],
    )
    def test_parse_invalid_syntax(self, parser, script):
        """Raise ParseError on invalid syntax."""
        with pytest.raises(ParseError) as exc:
            parser.parse(script)
        assert "Failed to parse shell script" in str(exc.value)

    def test_parse_error_keeps_original(self, parser):
        """The bashlex error is preserved for debugging."""
        with pytest.raises(ParseError) as exc:
            parser.parse('post_install() {\n  echo "unterminated\n}\n')
        assert exc.value.original_error is not None
        assert "(original:" in str(exc.value)

    def test_case_arms_parsed(self, parser):
        """A case command keeps its source text and exposes one body per arm."""
        parsed = parser.parse("case $1 in\n  a) echo a ;;\n  b) ;;\nesac\n")
        (case,) = statements(parsed.nodes)
        assert case.kind == "compound"
        assert parsed.text(case) == "case $1 in\n  a) echo a ;;\n  b) ;;\nesac"
        first, second = parsed.case_arms(case)
        assert [parsed.text(node) for node in statements(first)] == ["echo a"]
        assert second == []

    def test_plain_group_has_no_arms(self, parser):
        """Ordinary brace groups are not case commands."""
        parsed = parser.parse("{ echo a; }\n")
        (group,) = statements(parsed.nodes)
        assert parsed.case_arms(group) is None

    def test_arithmetic_keeps_source_text(self, parser):
        """Words holding arithmetic render as written."""
        parsed = parser.parse("echo $((1 + 2))\n")
        (node,) = statements(parsed.nodes)
        assert [parsed.text(word) for word in command_parts(node).words] == ["echo", "$((1 + 2))"]

    def test_unbalanced_closing_brace(self, parser):
        """A stray closing brace cannot close the enclosing group silently."""
        with pytest.raises(ParseError):
            parser.parse("echo hi\n}\necho again\n")


class TestRendering:
    """Test suite for source rendering used in messages."""

    def _command(self, parser, line):
        parsed = parser.parse(f"{line}\n")
        (node,) = statements(parsed.nodes)
        assert node.kind == "command"
        return parsed, node

    @pytest.mark.parametrize(
        "line,expected",
        [
            ("date > /tmp/pwn", "date >/tmp/pwn"),
            ("FOO=1 date -u > /tmp/x 2>&1", "FOO=1 date -u >/tmp/x 2>&1"),
            ('echo "a b"   c', 'echo "a b" c'),
            ("cat 3< /etc/passwd", "cat 3</etc/passwd"),
            ("echo hi >&3", "echo hi >&3"),
        ],
    )
    def test_render_command(self, parser, line, expected):
        """Assignments, words, then redirects, joined by single spaces."""
        parsed, node = self._command(parser, line)
        assert parsed.render_command(node) == expected

    def test_command_parts(self, parser):
        """Only leading assignments count as assignments."""
        parsed, node = self._command(parser, "A=1 B=2 local C=3 > /dev/null")
        parts = command_parts(node)
        assert [parsed.text(part) for part in parts.assignments] == ["A=1", "B=2"]
        assert [parsed.text(part) for part in parts.words] == ["local", "C=3"]
        assert len(parts.redirects) == 1

    @pytest.mark.parametrize(
        "line,is_sole",
        [
            ("$(foo)", True),
            ('"$(foo)"', True),
            ("`foo`", False),
            ("x$(foo)", False),
            ('"$(foo) bar"', False),
        ],
    )
    def test_sole_command_substitution(self, parser, line, is_sole):
        """Only bare or double-quoted $(...) words are transparent."""
        parsed, node = self._command(parser, line)
        (word,) = command_parts(node).words
        assert (parsed.sole_command_substitution(word) is not None) == is_sole

    def test_backquote_detection(self, parser):
        """Back-quoted substitutions are told apart from $(...)."""
        parsed, node = self._command(parser, "echo `date` $(date)")
        words = command_parts(node).words
        back = words[1].parts[0]
        dollar = words[2].parts[0]
        assert parsed.is_backquote(back)
        assert not parsed.is_backquote(dollar)
