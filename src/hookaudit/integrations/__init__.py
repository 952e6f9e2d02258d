"""Front ends around the core audit engine.

- config: Layered YAML configuration
- archive: Install hook extraction from package archives
- harness: Regression harness generation
- cli: `hookaudit` console script
"""

from hookaudit.integrations.archive import load_script, read_install_hook
from hookaudit.integrations.config import AuditConfig, load_config
from hookaudit.integrations.harness import build_harness

__all__ = [
    # Config
    "AuditConfig",
    "load_config",
    # Archive
    "load_script",
    "read_install_hook",
    # Harness
    "build_harness",
]
