"""Safe I/O helpers (atomic writes and well-known paths).

 - Well-known paths under ``CC_SWITCH_HOME`` (default: ``~/.cc-switch``)
 - Atomic text writes with fsync to reduce corruption risk
 - One-shot migration from the legacy ``~/.cc_auto_switch`` directory
"""

from __future__ import annotations
import os
import shutil
import tempfile
from pathlib import Path
from typing import Optional

from .logging_utils import log_event

CC_SWITCH_HOME = Path(os.environ.get("CC_SWITCH_HOME", str(Path.home() / ".cc-switch")))
STORE_JSON = CC_SWITCH_HOME / "configurations.json"
LEGACY_HOME = Path.home() / ".cc_auto_switch"
LEGACY_STORE_JSON = LEGACY_HOME / "configurations.json"


def store_path() -> Path:
    """Return the profile store path, re-reading ``CC_SWITCH_HOME``.

    Reading the variable at call time lets tests point the store at a
    temporary directory with ``monkeypatch.setenv``.
    """
    home = os.environ.get("CC_SWITCH_HOME")
    if home:
        return Path(home) / "configurations.json"
    return STORE_JSON


def atomic_write(path: Path, text: str) -> None:
    """Atomically write UTF-8 text to ``path`` with fsync.

    Writes to a temporary file in the same directory, fsyncs it, then renames
    into place. Parent directories are created as needed. Propagates write
    errors after cleaning up the temporary file.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmppath = tempfile.mkstemp(
        prefix=path.name + ".", suffix=".tmp", dir=str(path.parent)
    )
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as f:
            f.write(text)
            f.flush()
            try:
                os.fsync(f.fileno())
            except OSError:
                pass
        os.replace(tmppath, path)
    except Exception:
        try:
            os.remove(tmppath)
        except OSError:
            pass
        raise


def migrate_legacy_store(
    legacy: Path = LEGACY_STORE_JSON, target: Optional[Path] = None
) -> Optional[Path]:
    """Move the legacy store file into the current location.

    Returns the new path when a file was migrated, ``None`` when there was
    nothing to do (no legacy file, or the new store already exists). The
    legacy directory is removed once it is empty.
    """
    target = target or store_path()
    if not legacy.exists() or target.exists():
        return None
    target.parent.mkdir(parents=True, exist_ok=True)
    shutil.move(str(legacy), str(target))
    try:
        legacy.parent.rmdir()
    except OSError:
        pass
    log_event("store_migrated", path=str(target))
    return target


__all__ = [
    "CC_SWITCH_HOME",
    "STORE_JSON",
    "LEGACY_HOME",
    "LEGACY_STORE_JSON",
    "store_path",
    "atomic_write",
    "migrate_legacy_store",
]
