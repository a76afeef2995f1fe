"""
Environment file loader for .acenv files.

Reads key=value pairs from env files and populates os.environ
WITHOUT overwriting values that are already set (explicit env wins).
Supports # comments, blank lines, and optional quoting.
"""

import os
from pathlib import Path
from typing import Optional


def _parse_env_file(path: Path) -> dict[str, str]:
    """Parse a .env-style file into a dict."""
    result: dict[str, str] = {}
    if not path.is_file():
        return result
    with open(path, encoding="utf-8") as fh:
        for line in fh:
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            if "=" not in line:
                continue
            key, _, value = line.partition("=")
            key = key.strip()
            value = value.strip()
            if len(value) >= 2 and value[0] == value[-1] and value[0] in ('"', "'"):
                value = value[1:-1]
            result[key] = value
    return result


def load_env_files(base_dir: Optional[Path] = None) -> dict[str, str]:
    """
    Load .acenv and .acenv.local from ``base_dir`` into os.environ.

    - Existing env vars take precedence (never overwritten).
    - .acenv.local overrides .acenv (for site config).
    - Returns dict of all loaded key-value pairs (for debugging).
    """
    if base_dir is None:
        base_dir = Path.cwd()

    loaded: dict[str, str] = {}
    for env_file in (base_dir / ".acenv", base_dir / ".acenv.local"):
        loaded.update(_parse_env_file(env_file))

    for key, value in loaded.items():
        if key not in os.environ:
            os.environ[key] = value

    return loaded
