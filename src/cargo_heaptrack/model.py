from __future__ import annotations

from pathlib import Path
from typing import Literal

import attrs

from .errors import ConflictingSelection

KindTag = str
CheckStatus = Literal["pass", "fail"]


def _to_tuple(value: object) -> tuple[str, ...]:
    return tuple(value)  # type: ignore[arg-type]


@attrs.define(frozen=True, slots=True)
class TargetDescriptor:
    name: str
    kinds: tuple[KindTag, ...] = attrs.field(converter=_to_tuple)


@attrs.define(frozen=True, slots=True)
class Package:
    name: str
    manifest_path: Path
    targets: tuple[TargetDescriptor, ...] = attrs.field(converter=tuple, factory=tuple)
    default_run: str | None = None


@attrs.define(frozen=True, slots=True)
class ProjectMetadata:
    packages: tuple[Package, ...] = attrs.field(converter=tuple)


@attrs.define(frozen=True, slots=True)
class ResolvedTarget:
    package: str
    target: str
    kinds: tuple[KindTag, ...] = attrs.field(converter=_to_tuple)

    def __str__(self) -> str:
        return f"target {self.target} in package {self.package}"


@attrs.define(frozen=True, slots=True)
class Resolution:
    target: ResolvedTarget
    # False when the only package in scope picked its target through `default-run`:
    # that is what plain `cargo run` would do, so no notice is needed.
    announce: bool


@attrs.define(frozen=True, slots=True)
class BuildRequest:
    dev: bool = False
    profile: str | None = None
    package: str | None = None
    bin: str | None = None
    example: str | None = None
    test: str | None = None
    bench: str | None = None
    unit_test: bool = False
    unit_test_name: str | None = None
    manifest_path: Path | None = None
    features: str | None = None
    no_default_features: bool = False
    # No-op, accepted for parity with `cargo run --release`.
    release: bool = False
    trailing_args: tuple[str, ...] = attrs.field(converter=_to_tuple, factory=tuple)

    def __attrs_post_init__(self) -> None:
        chosen = self.exec_options()
        if len(chosen) > 1:
            flags = ", ".join(f"--{o}" for o in chosen)
            raise ConflictingSelection(f"only one target option may be given, got: {flags}")
        if self.unit_test_name is not None and not self.unit_test:
            raise ConflictingSelection("unit_test_name requires unit_test to be set")

    def exec_options(self) -> list[str]:
        """Names of the exec-style options set on this request, in CLI order."""
        opts: list[str] = []
        if self.bin is not None:
            opts.append("bin")
        if self.example is not None:
            opts.append("example")
        if self.test is not None:
            opts.append("test")
        if self.unit_test:
            opts.append("unit-test")
        if self.bench is not None:
            opts.append("bench")
        return opts

    @property
    def has_target(self) -> bool:
        return bool(self.exec_options())


@attrs.define(frozen=True, slots=True)
class Artifact:
    target_name: str
    kinds: tuple[KindTag, ...] = attrs.field(converter=_to_tuple)
    executable: Path | None = None
    debuginfo: str = "none"


@attrs.define(frozen=True, slots=True)
class AssembledWorkload:
    executable: Path
    args: tuple[str, ...] = attrs.field(converter=_to_tuple, factory=tuple)

    @property
    def argv(self) -> list[str]:
        return [str(self.executable), *self.args]


@attrs.define(frozen=True, slots=True)
class ProfilerOptions:
    output: Path | None = None
    raw: bool = True


@attrs.define(frozen=True, slots=True)
class ProcessResult:
    returncode: int
    stdout: bytes = b""

    @property
    def ok(self) -> bool:
        return self.returncode == 0


@attrs.define(frozen=True, slots=True)
class PrerequisiteCheck:
    check_name: str
    status: CheckStatus
    details: str | None = None
