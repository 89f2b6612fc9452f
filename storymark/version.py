from __future__ import annotations

import importlib.metadata
import subprocess
from pathlib import Path
from typing import NamedTuple, Optional


class BuildInfo(NamedTuple):
    version: Optional[str]
    commit: Optional[str]
    date: Optional[str]


def _run_git(args: list[str], cwd: Path) -> Optional[str]:
    try:
        out = subprocess.check_output(["git", *args], cwd=str(cwd), stderr=subprocess.DEVNULL)
        return out.decode().strip() or None
    except (subprocess.CalledProcessError, FileNotFoundError, OSError):
        return None


def _installed_version() -> Optional[str]:
    try:
        return importlib.metadata.version("storymark")
    except importlib.metadata.PackageNotFoundError:
        return None


def _embedded_commit() -> tuple[Optional[str], Optional[str]]:
    # Written at build time by the hatch build hook
    try:
        from . import _build_info  # type: ignore
    except ImportError:
        return None, None
    return getattr(_build_info, "COMMIT", None), getattr(_build_info, "DATE", None)


def get_build_info() -> BuildInfo:
    commit, date = _embedded_commit()
    if not (commit or date):
        here = Path(__file__).resolve().parent
        commit = _run_git(["rev-parse", "HEAD"], cwd=here)
        date = _run_git(["show", "-s", "--format=%cI", "HEAD"], cwd=here)
    return BuildInfo(version=_installed_version(), commit=commit, date=date)


def get_version_string() -> str:
    info = get_build_info()
    version = info.version or "unknown"
    # Short (7-character) git hashes
    commit = info.commit[:7] if info.commit else "unknown"
    date = info.date or "unknown"
    return f"storymark {version} ({commit} {date})"
