from __future__ import annotations

import shutil

from .config import ToolConfig
from .model import PrerequisiteCheck


def check_cargo_available(config: ToolConfig) -> PrerequisiteCheck:
    if shutil.which(config.cargo) is not None:
        return PrerequisiteCheck(check_name="cargo_available", status="pass")
    return PrerequisiteCheck(
        check_name="cargo_available",
        status="fail",
        details=f"`{config.cargo}` not found. Install Rust via https://rustup.rs or set CARGO.",
    )


def check_profiler_available(config: ToolConfig) -> PrerequisiteCheck:
    """Lightweight PATH lookup only; heaptrack is not started here."""
    if shutil.which(config.heaptrack) is not None:
        return PrerequisiteCheck(check_name="heaptrack_available", status="pass")
    return PrerequisiteCheck(
        check_name="heaptrack_available",
        status="fail",
        details=f"`{config.heaptrack}` not found. Install heaptrack (e.g. `apt install heaptrack`) or set CARGO_HEAPTRACK_PROFILER.",
    )


def check_all(config: ToolConfig) -> list[PrerequisiteCheck]:
    return [check_cargo_available(config), check_profiler_available(config)]


def format_prereq_failures(checks: list[PrerequisiteCheck]) -> str:
    lines: list[str] = ["Missing prerequisites:"]
    for c in checks:
        if c.status != "fail":
            continue
        hint = f" - {c.details}" if c.details else ""
        lines.append(f"- {c.check_name}{hint}")
    return "\n".join(lines)
