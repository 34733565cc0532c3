from __future__ import annotations

import json
from collections.abc import Sequence
from pathlib import Path
from typing import Any

import pytest

from cargo_heaptrack.model import ProcessResult


class FakeRunner:
    """ProcessRunner double: records argv and replays canned results in order."""

    def __init__(self, responses: Sequence[ProcessResult | BaseException]) -> None:
        self.responses = list(responses)
        self.calls: list[list[str]] = []
        self.captured: list[bool] = []

    def run(self, argv: Sequence[str], *, capture_stdout: bool) -> ProcessResult:
        self.calls.append(list(argv))
        self.captured.append(capture_stdout)
        if not self.responses:
            raise AssertionError(f"unexpected process spawn: {list(argv)}")
        resp = self.responses.pop(0)
        if isinstance(resp, BaseException):
            raise resp
        return resp


def metadata_json(packages: list[dict[str, Any]], workspace_root: str = "/ws") -> bytes:
    return json.dumps({"packages": packages, "workspace_root": workspace_root, "version": 1}).encode()


def package_json(
    name: str, manifest_path: str, targets: list[tuple[str, list[str]]], default_run: str | None = None
) -> dict[str, Any]:
    return {
        "name": name,
        "version": "0.1.0",
        "id": f"{name} 0.1.0 (path+file://{manifest_path})",
        "manifest_path": manifest_path,
        "default_run": default_run,
        "targets": [{"name": n, "kind": k, "crate_types": k, "src_path": "/src/main.rs"} for n, k in targets],
    }


def artifact_line(
    name: str, kinds: list[str], executable: str | None, debuginfo: Any = 0, *, fresh: bool = False
) -> str:
    return json.dumps(
        {
            "reason": "compiler-artifact",
            "package_id": f"{name} 0.1.0",
            "manifest_path": "/ws/Cargo.toml",
            "target": {"name": name, "kind": kinds, "crate_types": kinds, "src_path": "/ws/src/main.rs"},
            "profile": {"opt_level": "3", "debuginfo": debuginfo, "debug_assertions": False, "test": False},
            "features": [],
            "filenames": [executable] if executable else ["/ws/target/release/libx.rlib"],
            "executable": executable,
            "fresh": fresh,
        }
    )


@pytest.fixture
def fake_runner():
    return FakeRunner


@pytest.fixture
def crate_dir(tmp_path: Path) -> Path:
    root = tmp_path / "crate"
    (root / "src").mkdir(parents=True)
    (root / "Cargo.toml").write_text('[package]\nname = "demo"\nversion = "0.1.0"\n')
    return root


@pytest.fixture
def make_metadata():
    return metadata_json


@pytest.fixture
def make_package():
    return package_json


@pytest.fixture
def make_artifact_line():
    return artifact_line
