from __future__ import annotations

import sys
from collections.abc import Sequence
from pathlib import Path

from .errors import NoSelectionCriteria, TargetArtifactNotFound
from .model import Artifact, AssembledWorkload, BuildRequest


def selection_criteria(request: BuildRequest) -> tuple[tuple[str, ...], str]:
    """Return (kinds, target name) the built artifact must match."""
    if request.bin is not None:
        return ("bin",), request.bin
    if request.example is not None:
        return ("example",), request.example
    if request.test is not None:
        return ("test",), request.test
    if request.bench is not None:
        return ("bench",), request.bench
    if request.unit_test and request.unit_test_name is not None:
        return ("lib", "bin"), request.unit_test_name
    raise NoSelectionCriteria("no target for profiling")


def find_executable(artifacts: Sequence[Artifact], kinds: Sequence[str], name: str) -> tuple[Artifact, Path]:
    """Return the first matching artifact together with its executable path."""
    wanted = set(kinds)
    for a in artifacts:
        if a.executable is not None and a.target_name == name and not wanted.isdisjoint(a.kinds):
            return a, a.executable
    raise TargetArtifactNotFound(kinds, name, [(a.kinds, a.target_name) for a in artifacts])


def advisory_profile(request: BuildRequest) -> str:
    if request.profile is not None:
        return request.profile
    # binaries, examples and unit tests are built with the release profile;
    # tests and benches end up on the bench profile
    if request.bin is not None or request.example is not None or request.unit_test_name is not None:
        return "release"
    return "bench"


def debuginfo_advisory(request: BuildRequest, artifact: Artifact) -> str | None:
    """Warning text for a non-dev artifact built without debug info, else None."""
    if request.dev or artifact.debuginfo != "none":
        return None
    profile = advisory_profile(request)
    env_name = profile.upper().replace("-", "_")
    return "\n".join(
        [
            "",
            "WARNING: profiling without debuginfo. Enable symbol information by adding the following lines to Cargo.toml:",
            "",
            f"[profile.{profile}]",
            "debug = true",
            "",
            "Or set this environment variable:",
            "",
            f"CARGO_PROFILE_{env_name}_DEBUG=true",
            "",
        ]
    )


def extract(request: BuildRequest, artifacts: Sequence[Artifact]) -> AssembledWorkload:
    """Pick the executable for request from artifacts and append the trailing arguments."""
    kinds, name = selection_criteria(request)
    artifact, executable = find_executable(artifacts, kinds, name)

    warning = debuginfo_advisory(request, artifact)
    if warning is not None:
        print(warning, file=sys.stderr)

    return AssembledWorkload(executable=executable, args=request.trailing_args)
