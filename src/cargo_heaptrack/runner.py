"""Process runner capability.

Every external tool (`cargo metadata`, `cargo build`, `heaptrack`) is spawned through a
`ProcessRunner`, so resolution, build parsing and extraction can be exercised with a fake
runner returning canned output instead of real subprocesses.
"""

from __future__ import annotations

import subprocess
from collections.abc import Sequence
from typing import Protocol

from .model import ProcessResult


class ProcessRunner(Protocol):
    def run(self, argv: Sequence[str], *, capture_stdout: bool) -> ProcessResult:
        """Run argv to completion; stderr is always inherited.

        Raises OSError when the process cannot be spawned.
        """
        ...


class SubprocessRunner:
    """`ProcessRunner` backed by `subprocess.run` (blocking, no timeout)."""

    def run(self, argv: Sequence[str], *, capture_stdout: bool) -> ProcessResult:
        proc = subprocess.run(
            list(argv),
            stdout=subprocess.PIPE if capture_stdout else None,
            check=False,
        )
        return ProcessResult(returncode=proc.returncode, stdout=proc.stdout or b"")
