"""hookaudit command-line interface.

Audits install hooks from plain files, package archives or stdin.

Usage:
    hookaudit check [-v] [--json] [--trust LEVEL] [--config FILE] PATH
    hookaudit harness [--trust LEVEL] [--config FILE] DIR
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional

from hookaudit import __version__
from hookaudit.core.trust import TrustLevel
from hookaudit.core.validator import EXIT_ERROR, audit_script
from hookaudit.exceptions import HookAuditError
from hookaudit.integrations.archive import load_script
from hookaudit.integrations.config import AuditConfig, load_config
from hookaudit.integrations.harness import build_harness, render_harness

logger = logging.getLogger(__name__)

LOG_FORMAT = "[hookaudit] %(levelname)s: %(message)s"


def configure_logging(verbosity: int) -> None:
    """Configure stderr logging: 0 → WARNING, 1 → INFO, 2+ → DEBUG."""
    if verbosity >= 2:
        level = logging.DEBUG
    elif verbosity == 1:
        level = logging.INFO
    else:
        level = logging.WARNING
    logging.basicConfig(level=level, format=LOG_FORMAT, stream=sys.stderr)


def _effective_config(args: argparse.Namespace, include_user: bool = True) -> AuditConfig:
    config = load_config(args.config, include_user=include_user)
    if args.trust:
        config = config.with_trust_level(TrustLevel.from_name(args.trust))
    return config


def cmd_check(args: argparse.Namespace) -> int:
    """Audit one hook and print its findings."""
    try:
        config = _effective_config(args)
        script = load_script(args.path)
    except (HookAuditError, OSError) as e:
        print(f"error: {e}", file=sys.stderr)
        return EXIT_ERROR

    logger.debug(f"Trust level {config.trust_level.value}, config sources: {list(config.sources)}")
    result = audit_script(script, config.trusted_commands())
    if result.error is not None:
        print(f"error: {result.error}", file=sys.stderr)
        return result.exit_code

    if args.json:
        print(json.dumps(result.findings, indent=2, ensure_ascii=False))
    else:
        for finding in result.findings:
            print(f"[!] {finding}")
    return result.exit_code


def cmd_harness(args: argparse.Namespace) -> int:
    """Print the regression harness for a directory of hooks."""
    directory = Path(args.directory)
    if not directory.is_dir():
        print(f"error: not a directory: {directory}", file=sys.stderr)
        return EXIT_ERROR

    # Per-user settings never apply to harness output
    try:
        config = _effective_config(args, include_user=False)
    except HookAuditError as e:
        print(f"error: {e}", file=sys.stderr)
        return EXIT_ERROR

    sys.stdout.write(render_harness(build_harness(directory, config.trusted_commands())))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hookaudit",
        description="Statically audit package install hook scripts",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # Options shared by every sub-command
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("-v", "--verbose", action="count", default=0, help="More logging (repeatable)")
    common.add_argument(
        "--trust",
        choices=[level.value for level in TrustLevel],
        help="Commands to trust (default: from config, else binaries and builtins)",
    )
    common.add_argument("--config", help="Config file (default: $HOOKAUDIT_CONFIG)")

    # check command
    p_check = subparsers.add_parser("check", parents=[common], help="Audit one install hook")
    p_check.add_argument("path", help="Hook script, package archive, or - for stdin")
    p_check.add_argument("--json", action="store_true", help="Print findings as a JSON array")
    p_check.set_defaults(func=cmd_check)

    # harness command
    p_harness = subparsers.add_parser("harness", parents=[common], help="Print regression harness for a directory")
    p_harness.add_argument("directory", help="Directory of *.install files")
    p_harness.set_defaults(func=cmd_harness)

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
