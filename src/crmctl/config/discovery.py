"""Config file discovery.

Walk-up finder locates crmctl.toml, similar to how git finds .git/.
Supports CRMCTL_CONFIG env var and --config CLI flag overrides.
"""

from __future__ import annotations

import os
from pathlib import Path

CONFIG_FILENAME = "crmctl.toml"
CONFIG_ENV_VAR = "CRMCTL_CONFIG"


def find_config(start: Path | None = None) -> Path | None:
    """Walk up from *start* (default: cwd) looking for crmctl.toml.

    Returns the path to the config file, or None if not found.
    Checks CRMCTL_CONFIG env var first.
    """
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        p = Path(env_path)
        if p.is_file():
            return p
        return None

    current = (start or Path.cwd()).resolve()
    while True:
        candidate = current / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            break
        current = parent
    return None


_DEFAULT_CONFIG = """\
# crmctl configuration. Every key is optional; shown values are the defaults.

[database]
# path = ".crmctl/crmctl.db"
backup_max_count = 10
log_sql = false

[dashboard]
upcoming_window_days = 14
recent_limit = 10

[pagination]
default_page_size = 25
max_page_size = 100

[search]
default_limit = 10
max_limit = 50
"""


def write_default_config(directory: Path) -> Path:
    """Write a commented crmctl.toml into *directory* unless one exists.

    Returns the path of the (new or existing) config file.
    """
    target = directory / CONFIG_FILENAME
    if not target.exists():
        directory.mkdir(parents=True, exist_ok=True)
        target.write_text(_DEFAULT_CONFIG, encoding="utf-8")
    return target
