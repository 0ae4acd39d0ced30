"""Version and environment helpers."""

from __future__ import annotations

import importlib.metadata


def package_version() -> str:
    try:
        return importlib.metadata.version("pwlcal")
    except importlib.metadata.PackageNotFoundError:
        return "0.0.0+local"


def package_versions(packages: list[str] | None = None) -> dict[str, str]:
    names = packages or ["numpy", "pandas", "pyarrow", "matplotlib", "PyYAML"]
    out: dict[str, str] = {}
    for name in names:
        try:
            out[name] = importlib.metadata.version(name)
        except importlib.metadata.PackageNotFoundError:
            out[name] = "not-installed"
    out["pwlcal"] = package_version()
    return out
