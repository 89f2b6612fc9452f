"""Hatchling build hook that stamps the package with its git commit."""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Any

from hatchling.builders.hooks.plugin.interface import BuildHookInterface

BUILD_INFO = "storymark/_build_info.py"


class CustomBuildHook(BuildHookInterface):
    """Writes storymark/_build_info.py so installed copies know their commit."""

    def initialize(self, version: str, build_data: dict[str, Any]) -> None:
        root = Path(self.root)
        lines = ["# Auto-generated at build time."]
        for name, args in (
            ("COMMIT", ["rev-parse", "HEAD"]),
            ("DATE", ["show", "-s", "--format=%cI", "HEAD"]),
        ):
            lines.append(f"{name} = {self._git(args, root)!r}")
        (root / BUILD_INFO).write_text("\n".join(lines) + "\n", encoding="utf-8")
        build_data.setdefault("artifacts", []).append(BUILD_INFO)

    @staticmethod
    def _git(args: list[str], cwd: Path) -> str | None:
        try:
            out = subprocess.check_output(["git", *args], cwd=str(cwd), stderr=subprocess.DEVNULL)
        except (subprocess.CalledProcessError, FileNotFoundError, OSError):
            # A source tree without git still builds
            return None
        return out.decode().strip() or None
