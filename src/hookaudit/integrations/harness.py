"""Regression harness over a directory of install hooks.

The harness file maps a package name (the hook file stem) to either
`{"findings": [...]}` or `{"error": "..."}`. Clean hooks are omitted.
"""

import json
import logging
from collections.abc import Iterable, Iterator
from pathlib import Path
from typing import Any, Optional

from hookaudit.core.validator import validate
from hookaudit.exceptions import ParseError

logger = logging.getLogger(__name__)

HOOK_SUFFIX = ".install"
HARNESS_FILENAME = "test_harness.json"


def iter_hook_files(directory: Path) -> Iterator[Path]:
    """Yield `*.install` files in a directory, sorted by name."""
    yield from sorted(directory.glob(f"*{HOOK_SUFFIX}"))


def harness_entry(script: str, trusted_commands: Optional[Iterable[str]] = None) -> Optional[dict[str, Any]]:
    """Expected-outcome entry for one script, or None if it has no findings."""
    try:
        findings = validate(script, trusted_commands)
    except ParseError as e:
        return {"error": e.message}
    if not findings:
        return None
    return {"findings": findings}


def build_harness(directory: Path, trusted_commands: Optional[Iterable[str]] = None) -> dict[str, Any]:
    """Audit every hook in a directory and collect the harness mapping.

    Args:
        directory: Directory holding `*.install` files
        trusted_commands: Trust catalog (None = default catalog)

    Returns:
        Mapping of package name to expected outcome, sorted by name
    """
    harness: dict[str, Any] = {}
    for path in iter_hook_files(directory):
        script = path.read_text(encoding="utf-8", errors="replace")
        entry = harness_entry(script, trusted_commands)
        logger.debug(f"{path.name}: {entry}")
        if entry is not None:
            harness[path.stem] = entry
    return harness


def load_harness(path: Path) -> dict[str, Any]:
    with open(path, encoding="utf-8") as f:
        return json.load(f)


def render_harness(harness: dict[str, Any]) -> str:
    return json.dumps(harness, indent=2, ensure_ascii=False) + "\n"
