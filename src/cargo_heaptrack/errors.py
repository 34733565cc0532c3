from __future__ import annotations

from collections.abc import Sequence


class CargoHeaptrackError(Exception):
    """Base error for every terminal failure of a `cargo heaptrack` invocation."""


class ConfigurationError(CargoHeaptrackError):
    """Invalid request or environment, detected before any subprocess runs."""


class ManifestNotFound(ConfigurationError):
    """No `Cargo.toml` in the working directory or any parent."""


class InvalidManifestPath(ConfigurationError):
    """Explicit `--manifest-path` does not point at a usable manifest."""


class NoSelectionCriteria(ConfigurationError):
    """Request does not name any bin/example/test/bench/unit-test target."""


class ConflictingSelection(ConfigurationError):
    """More than one exec-style target option was given."""


class MissingPrerequisite(ConfigurationError):
    """A required external tool is not available."""


class MetadataUnavailable(CargoHeaptrackError):
    """`cargo metadata` could not be run or returned malformed data."""


class NoMatchingPackage(CargoHeaptrackError):
    """No package in the workspace falls under the crate root."""


class UnknownPackage(NoMatchingPackage):
    """Explicit `--package` name matches no workspace package."""


class ResolutionError(CargoHeaptrackError):
    """The request does not identify exactly one build target."""


class NoTarget(ResolutionError):
    """No declared target matches the requested kinds and name."""


class AmbiguousTarget(ResolutionError):
    """Several targets match; candidates holds (package, kind, name) for each."""

    def __init__(self, candidates: Sequence[tuple[str, str, str]]) -> None:
        self.candidates = list(candidates)
        listing = ", ".join(f"target {name} in package {package} ({kind})" for package, kind, name in self.candidates)
        super().__init__(f"several possible targets found: [{listing}], please pass an explicit target.")


class BuildError(CargoHeaptrackError):
    """`cargo build` failed or its output could not be used."""


class BuildFailed(BuildError):
    def __init__(self, message: str, *, returncode: int | None = None) -> None:
        self.returncode = returncode
        super().__init__(message)


class BuildOutputParseError(BuildError):
    def __init__(self, line: str, reason: str) -> None:
        self.line = line
        super().__init__(f"failed to parse cargo build output: {reason}\n  line: {line}")


class NoExecutableProduced(BuildError):
    """The build finished but produced no executable artifact."""


class TargetArtifactNotFound(CargoHeaptrackError):
    def __init__(self, kinds: Sequence[str], name: str, found: Sequence[tuple[tuple[str, ...], str]]) -> None:
        self.kinds = tuple(kinds)
        self.name = name
        self.found = list(found)
        super().__init__(
            f"could not find desired target ({list(self.kinds)}, {name!r}) "
            f"in the targets for this crate: {[(list(k), n) for k, n in self.found]}"
        )


class ProfilerError(CargoHeaptrackError):
    """heaptrack could not profile the workload."""


class ProfilerLaunchFailed(ProfilerError):
    """heaptrack itself could not be started (missing, not executable, ...)."""


class ProfilerFailed(ProfilerError):
    """heaptrack ran and exited with a non-zero status."""

    def __init__(self, message: str, *, returncode: int) -> None:
        self.returncode = returncode
        super().__init__(message)
