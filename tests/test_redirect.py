"""Tests for redirect classification."""

import pytest

from hookaudit.core.redirect import classify_redirect
from hookaudit.core.validator import validate


class TestClassifyRedirect:
    """Test suite for classify_redirect()."""

    @pytest.mark.parametrize(
        "fd,operator,operand,expected",
        [
            # Input
            (None, "<", "/etc/passwd", None),
            (3, "<", "/etc/passwd", "File input on unusual descriptor: fd=3"),
            (0, "<", "/etc/passwd", "File input on unusual descriptor: fd=0"),
            # Output and append
            (None, ">", "/tmp/pwn", 'File write to: "/tmp/pwn"'),
            (None, ">>", "/etc/hosts", 'File write to: "/etc/hosts"'),
            (2, ">", "/var/log/err", 'File write to: "/var/log/err"'),
            (None, "&>", "/tmp/all", 'File write to: "/tmp/all"'),
            (None, "&>>", "/tmp/all", 'File write to: "/tmp/all"'),
            # Descriptor duplication
            (2, ">&", "1", None),
            (1, ">&", "2", None),
            (3, ">&", "-", None),
            (None, ">&", "3", 'File descriptor redirect to unusual descriptor: "3"'),
            # Here-documents
            (None, "<<", "EOF", None),
            (None, "<<-", "EOF", None),
        ],
    )
    def test_classification(self, fd, operator, operand, expected):
        """Each operator maps to at most one finding."""
        assert classify_redirect(fd, operator, operand) == expected

    @pytest.mark.parametrize("operator", [">", ">>", "&>", "&>>"])
    def test_dev_null_exempt(self, operator):
        """Writes to /dev/null are not file writes."""
        assert classify_redirect(None, operator, "/dev/null") is None

    @pytest.mark.parametrize("operand", ["/dev/null/x", "/dev/nul", "dev/null", "/dev/zero"])
    def test_dev_null_exact_match(self, operand):
        """Only the exact path /dev/null is exempt."""
        assert classify_redirect(None, ">", operand) == f'File write to: "{operand}"'

    @pytest.mark.parametrize(
        "operator,label",
        [
            ("<>", "FileInOut"),
            (">|", "FileClobber"),
            ("<&", "FdIn"),
            (">>|", "Pipe"),
            ("<<<", "String"),
        ],
    )
    def test_unchecked_operators(self, operator, label):
        """Operators without analysis are reported, never passed."""
        assert classify_redirect(None, operator, "x") == (
            f'Redirects are not being fully checked yet: operator={label}, operand="x"'
        )

    def test_unknown_operator_reported(self):
        """Operators the table does not know are reported by their spelling."""
        assert classify_redirect(None, "<<|", "x") == (
            'Redirects are not being fully checked yet: operator=<<|, operand="x"'
        )

    def test_operand_quoted(self):
        """Quotes and backslashes in operands are escaped."""
        assert classify_redirect(None, ">", 'a"b\\c') == 'File write to: "a\\"b\\\\c"'


class TestRedirectsInScripts:
    """Redirects as seen through validate()."""

    @pytest.mark.parametrize(
        "line,expected",
        [
            ("echo hi > /dev/null", []),
            ("echo hi >> /dev/null 2>&1", []),
            ("echo hi > /etc/motd", ['File write to: "/etc/motd"']),
            ("echo hi >> /etc/hosts", ['File write to: "/etc/hosts"']),
            ("echo hi 2>/dev/null >&3", ['File descriptor redirect to unusual descriptor: "3"']),
            ("cat < /etc/passwd", []),
            ("cat 3< /etc/passwd", ["File input on unusual descriptor: fd=3"]),
            ("echo hi &> /tmp/both", ['File write to: "/tmp/both"']),
            (
                "cat <> /tmp/rw",
                ['Redirects are not being fully checked yet: operator=FileInOut, operand="/tmp/rw"'],
            ),
            (
                "echo hi >| /tmp/clobber",
                ['Redirects are not being fully checked yet: operator=FileClobber, operand="/tmp/clobber"'],
            ),
        ],
    )
    def test_simple_command_redirects(self, line, expected):
        """Redirects on trusted commands inside a function."""
        script = f"post_install() {{\n  {line}\n}}\n"
        assert validate(script) == expected

    def test_redirect_order_follows_source(self):
        """Several redirects on one command report in source order."""
        script = "post_install() {\n  echo hi > /tmp/a >> /tmp/b\n}\n"
        assert validate(script) == ['File write to: "/tmp/a"', 'File write to: "/tmp/b"']

    def test_group_redirect(self):
        """Redirects attached to a brace group are classified."""
        script = "post_install() {\n  {\n    echo one\n    echo two\n  } > /etc/motd\n}\n"
        assert validate(script) == ['File write to: "/etc/motd"']

    def test_function_body_redirect(self):
        """Redirects attached to a function body are classified."""
        script = "post_install() {\n  echo hi\n} > /tmp/install.log\n"
        assert validate(script) == ['File write to: "/tmp/install.log"']
