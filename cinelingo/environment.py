"""Load dotenv files before configuration is read."""

from __future__ import annotations

import os
from pathlib import Path
from typing import List, Optional, Tuple

from dotenv import load_dotenv

PROJECT_ROOT = Path(__file__).resolve().parents[1]

_loaded: Optional[Tuple[Path, ...]] = None


def candidate_env_files() -> List[Path]:
    """Return dotenv paths in precedence order, without duplicates.

    Files named in ``CINELINGO_ENV_FILE`` (``os.pathsep`` separated) come
    first, then ``.env``, ``.env.<CINELINGO_ENV>`` and ``.env.local`` from the
    project root. Since nothing is overridden, earlier files win.
    """

    paths = [
        Path(value).expanduser()
        for value in os.environ.get("CINELINGO_ENV_FILE", "").split(os.pathsep)
        if value.strip()
    ]
    names = [".env"]
    if os.environ.get("CINELINGO_ENV"):
        names.append(f".env.{os.environ['CINELINGO_ENV']}")
    names.append(".env.local")
    paths.extend(PROJECT_ROOT / name for name in names)

    unique: List[Path] = []
    for path in paths:
        resolved = path.resolve()
        if resolved not in unique:
            unique.append(resolved)
    return unique


def load_environment(*, force: bool = False) -> Tuple[Path, ...]:
    """Load every existing candidate file once and return the ones applied."""

    global _loaded
    if _loaded is None or force:
        _loaded = tuple(
            path
            for path in candidate_env_files()
            if path.is_file() and load_dotenv(path, override=False)
        )
    return _loaded


__all__ = ["candidate_env_files", "load_environment"]
