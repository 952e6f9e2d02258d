"""Trust catalogs for install hook commands.

Two disjoint catalogs describe what an install hook may run without comment:
recognized external binaries and recognized shell builtins. A Context is
built from one of three trust levels, so callers can reduce trust (for a
"paranoid" audit that reviews even builtins) without editing the catalogs.
"""

from collections.abc import Iterable
from enum import Enum
from typing import Optional

# External binaries that install hooks routinely use to set up files,
# users and services. Anything else run by a hook is reported.
REASONABLE_BINARIES: frozenset[str] = frozenset(
    {
        "/bin/true",
        "[",
        "true",
        "yes",
        # File utilities
        "cat",
        "grep",
        "head",
        "mkdir",
        "printf",
        "rm",
        "rmdir",
        "touch",
        "unlink",
        "sha256sum",
        # Ownership and permissions
        "chmod",
        "chown",
        "setcap",
        # Users, hosts and processes
        "getent",
        "hostname",
        "killall",
        "pgrep",
        "systemd-sysusers",
        "uname",
        "usermod",
        "uuidgen",
        # Package lifecycle helpers
        "vercmp",
    }
)

# Shell builtins that cannot reach outside the running shell.
REASONABLE_BUILTINS: frozenset[str] = frozenset(
    {
        ":",
        "break",
        "cd",
        "continue",
        "echo",
        "local",
        "popd",
        "pushd",
        "return",
        "shift",
    }
)


class TrustLevel(Enum):
    """How much of the built-in catalog a Context trusts.

    Levels:
        DEFAULT: Binaries and builtins
        BINARIES: Binaries only (builtins are reviewed like any other command)
        NONE: Nothing; every command execution is reported unless it calls
            a function declared by the script itself

    Example:
        >>> TrustLevel.from_name("binaries")
        <TrustLevel.BINARIES: 'binaries'>
    """

    DEFAULT = "default"
    BINARIES = "binaries"
    NONE = "none"

    @classmethod
    def from_name(cls, name: str) -> "TrustLevel":
        """Look up a trust level by its configuration name (case-insensitive).

        Raises:
            ValueError: If the name is not a known trust level
        """
        try:
            return cls(name.strip().lower())
        except ValueError:
            choices = ", ".join(level.value for level in cls)
            raise ValueError(f"Unknown trust level {name!r} (expected one of: {choices})") from None


def trusted_commands_for(
    level: TrustLevel = TrustLevel.DEFAULT,
    extra: Optional[Iterable[str]] = None,
    removed: Optional[Iterable[str]] = None,
) -> frozenset[str]:
    """Build a trust catalog for the given level.

    Args:
        level: Which built-in catalogs to include
        extra: Additional command names to trust
        removed: Command names to drop, applied after `extra`

    Returns:
        Frozen set of trusted command names
    """
    commands: set[str] = set()
    if level in (TrustLevel.DEFAULT, TrustLevel.BINARIES):
        commands.update(REASONABLE_BINARIES)
    if level is TrustLevel.DEFAULT:
        commands.update(REASONABLE_BUILTINS)
    if extra:
        commands.update(extra)
    if removed:
        commands.difference_update(removed)
    return frozenset(commands)
