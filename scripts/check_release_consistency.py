#!/usr/bin/env python3
"""Validate that the runtime version and the package metadata agree."""

from __future__ import annotations

import re
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
VERSION_FILE = REPO_ROOT / "backend" / "formrelay" / "version.py"
MAIN_FILE = REPO_ROOT / "backend" / "formrelay" / "main.py"
PYPROJECT_FILE = REPO_ROOT / "pyproject.toml"


def _read(path: Path) -> str:
    return path.read_text(encoding="utf-8")


def _parse_app_version(version_text: str) -> str | None:
    match = re.search(r'^APP_VERSION\s*=\s*"([^"]+)"\s*$', version_text, flags=re.MULTILINE)
    if not match:
        return None
    return match.group(1).strip()


def _parse_project_version(pyproject_text: str) -> str | None:
    section = re.search(r"^\[project\]\s*$(.*?)(?=^\[|\Z)", pyproject_text, flags=re.MULTILINE | re.DOTALL)
    if not section:
        return None
    match = re.search(r'^version\s*=\s*"([^"]+)"\s*$', section.group(1), flags=re.MULTILINE)
    if not match:
        return None
    return match.group(1).strip()


def _validate_semver(version: str) -> bool:
    return re.fullmatch(r"\d+\.\d+\.\d+", version) is not None


def main() -> int:
    errors: list[str] = []

    for path in (VERSION_FILE, MAIN_FILE, PYPROJECT_FILE):
        if not path.exists():
            errors.append(f"Missing release file: {path}")
    if errors:
        for error in errors:
            print(f"[ERROR] {error}")
        return 1

    app_version = _parse_app_version(_read(VERSION_FILE))
    if app_version is None:
        errors.append(f"Could not parse APP_VERSION from {VERSION_FILE}")
        app_version = "unknown"
    elif not _validate_semver(app_version):
        errors.append(f"APP_VERSION must follow X.Y.Z semantic versioning, found: {app_version}")

    main_text = _read(MAIN_FILE)
    if "from formrelay.version import APP_VERSION" not in main_text:
        errors.append("backend/formrelay/main.py must import APP_VERSION from formrelay.version.")
    if re.search(r"FastAPI\([^)]*version\s*=\s*APP_VERSION", main_text, flags=re.DOTALL) is None:
        errors.append("backend/formrelay/main.py must set FastAPI version=APP_VERSION.")

    project_version = _parse_project_version(_read(PYPROJECT_FILE))
    if project_version is None:
        errors.append(f"Could not parse [project] version from {PYPROJECT_FILE}")
    elif project_version != app_version:
        errors.append(f"pyproject.toml version {project_version} does not match APP_VERSION {app_version}.")

    if errors:
        for error in errors:
            print(f"[ERROR] {error}")
        return 1

    print(f"[OK] Release consistency checks passed for v{app_version}.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
