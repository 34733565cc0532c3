from __future__ import annotations

import json
from collections.abc import Iterable
from pathlib import Path
from typing import Any

import attrs
from jsonschema import Draft202012Validator
from jsonschema.exceptions import ValidationError

from .config import ToolConfig
from .errors import BuildFailed, BuildOutputParseError, NoExecutableProduced
from .model import Artifact, BuildRequest
from .runner import ProcessRunner

MESSAGE_FORMAT_FLAG = "--message-format=json-render-diagnostics"

ARTIFACT_REASON = "compiler-artifact"

COMPILER_ARTIFACT_SCHEMA: dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "type": "object",
    "required": ["reason", "target", "profile"],
    "properties": {
        "target": {
            "type": "object",
            "required": ["name", "kind"],
            "properties": {
                "name": {"type": "string"},
                "kind": {"type": "array", "items": {"type": "string"}},
            },
        },
        "profile": {
            "type": "object",
            "properties": {"debuginfo": {"type": ["integer", "string", "boolean", "null"]}},
        },
        "executable": {"type": ["string", "null"]},
    },
}

# Older cargo reports debuginfo as an integer level (or null for none).
_DEBUGINFO_LEVELS = {0: "none", 1: "limited", 2: "full"}


@attrs.define(frozen=True, slots=True)
class CompilerArtifact:
    artifact: Artifact


@attrs.define(frozen=True, slots=True)
class OtherMessage:
    reason: str


Message = CompilerArtifact | OtherMessage


def build_subcommand(request: BuildRequest) -> list[str]:
    # `cargo build --profile bench` is not an option on every toolchain; `cargo bench --no-run`
    # is the portable way to get bench-profile binaries.
    if not request.dev and request.bench is not None:
        return ["bench", "--no-run"]
    if request.unit_test:
        return ["test", "--no-run"]
    return ["build"]


def build_command(request: BuildRequest, kind_hint: Iterable[str] = (), *, cargo: str = "cargo") -> list[str]:
    """Render the cargo argv for request. Pure: no filesystem or process access."""
    argv = [cargo, *build_subcommand(request)]

    if request.profile is not None:
        argv += ["--profile", request.profile]
    elif not request.dev and request.bench is None:
        # bench mode picks its own profile; never combine it with --release
        argv.append("--release")

    if request.package is not None:
        argv += ["--package", request.package]
    if request.bin is not None:
        argv += ["--bin", request.bin]
    if request.example is not None:
        argv += ["--example", request.example]
    if request.test is not None:
        argv += ["--test", request.test]
    if request.bench is not None:
        argv += ["--bench", request.bench]
    if request.unit_test and request.unit_test_name is not None:
        if "lib" in set(kind_hint):
            argv.append("--lib")
        else:
            argv += ["--bin", request.unit_test_name]
    if request.manifest_path is not None:
        argv += ["--manifest-path", str(request.manifest_path)]
    if request.features is not None:
        argv += ["--features", request.features]
    if request.no_default_features:
        argv.append("--no-default-features")

    argv.append(MESSAGE_FORMAT_FLAG)
    return argv


def normalize_debuginfo(value: Any) -> str:
    if value is None or value is False:
        return "none"
    if value is True:
        return "full"
    if isinstance(value, int):
        return _DEBUGINFO_LEVELS.get(value, "full")
    return str(value)


def _artifact_from_json(obj: dict[str, Any]) -> Artifact:
    exe = obj.get("executable")
    return Artifact(
        target_name=obj["target"]["name"],
        kinds=obj["target"]["kind"],
        executable=Path(exe) if exe else None,
        debuginfo=normalize_debuginfo(obj["profile"].get("debuginfo")),
    )


def decode_message(line: str) -> Message:
    """Decode one line of cargo's JSON message stream.

    Unknown reasons decode to OtherMessage; a malformed line or a malformed
    compiler-artifact record raises BuildOutputParseError.
    """
    try:
        obj = json.loads(line)
    except ValueError as e:
        raise BuildOutputParseError(line, f"invalid JSON: {e}") from e
    if not isinstance(obj, dict) or not isinstance(obj.get("reason"), str):
        raise BuildOutputParseError(line, "message has no 'reason' field")

    reason = obj["reason"]
    if reason != ARTIFACT_REASON:
        return OtherMessage(reason=reason)

    try:
        Draft202012Validator(COMPILER_ARTIFACT_SCHEMA).validate(obj)
    except ValidationError as e:
        raise BuildOutputParseError(line, f"malformed {ARTIFACT_REASON} message: {e.message}") from e
    return CompilerArtifact(artifact=_artifact_from_json(obj))


def parse_messages(stream: bytes | str) -> list[Artifact]:
    text = stream.decode(errors="replace") if isinstance(stream, bytes) else stream
    artifacts: list[Artifact] = []
    for raw in text.splitlines():
        line = raw.strip()
        if not line:
            continue
        msg = decode_message(line)
        if isinstance(msg, CompilerArtifact):
            artifacts.append(msg.artifact)
    return artifacts


def build(
    request: BuildRequest,
    kind_hint: Iterable[str] = (),
    *,
    runner: ProcessRunner,
    config: ToolConfig,
) -> list[Artifact]:
    """Build the requested target and return every compiler artifact in build order.

    Cargo's rendered diagnostics go straight to our stderr; only stdout is captured.
    """
    argv = build_command(request, kind_hint, cargo=config.cargo)
    try:
        result = runner.run(argv, capture_stdout=True)
    except OSError as e:
        raise BuildFailed(f"failed to execute cargo build command: {e}") from e
    if not result.ok:
        raise BuildFailed("cargo build failed", returncode=result.returncode)

    artifacts = parse_messages(result.stdout)
    if all(a.executable is None for a in artifacts):
        raise NoExecutableProduced("build artifacts do not contain any executable to profile")
    return artifacts
