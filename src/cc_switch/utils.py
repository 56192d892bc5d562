"""Version discovery for the installed package or a source checkout."""

from __future__ import annotations

import re
from importlib.metadata import PackageNotFoundError, version as pkg_version
from pathlib import Path

PACKAGE_NAME = "cc-switch"


def get_version() -> str:
    """Return the tool version string.

    Lookup order (first match wins):
    1) ``importlib.metadata.version('cc-switch')`` (installed package)
    2) ``project.version`` from ``pyproject.toml`` (source checkout)
    3) ``"0.0.0+unknown"``
    """
    try:
        return pkg_version(PACKAGE_NAME)
    except PackageNotFoundError:
        pass

    pyproj = Path(__file__).resolve().parents[2] / "pyproject.toml"
    if pyproj.exists():
        try:
            text = pyproj.read_text(encoding="utf-8")
        except OSError:
            text = ""
        m = re.search(r"(?ms)^\[project\].*?^version\s*=\s*\"([^\"]+)\"", text)
        if m:
            return m.group(1)
    return "0.0.0+unknown"


__all__ = ["get_version", "PACKAGE_NAME"]
