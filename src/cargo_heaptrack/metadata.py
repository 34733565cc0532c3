from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from jsonschema import Draft202012Validator
from jsonschema.exceptions import ValidationError

from .config import ToolConfig
from .errors import MetadataUnavailable, NoMatchingPackage, UnknownPackage
from .model import Package, ProjectMetadata, TargetDescriptor
from .runner import ProcessRunner

# Only the fields this tool reads are constrained; cargo adds plenty more.
METADATA_SCHEMA: dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "type": "object",
    "required": ["packages"],
    "properties": {
        "packages": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["name", "manifest_path", "targets"],
                "properties": {
                    "name": {"type": "string"},
                    "manifest_path": {"type": "string"},
                    "default_run": {"type": ["string", "null"]},
                    "targets": {
                        "type": "array",
                        "items": {
                            "type": "object",
                            "required": ["name", "kind"],
                            "properties": {
                                "name": {"type": "string"},
                                "kind": {"type": "array", "items": {"type": "string"}},
                            },
                        },
                    },
                },
            },
        },
    },
}


def metadata_command(manifest_path: Path | None, *, cargo: str = "cargo") -> list[str]:
    argv = [cargo, "metadata", "--no-deps", "--format-version", "1"]
    if manifest_path is not None:
        argv += ["--manifest-path", str(manifest_path)]
    return argv


def validate_metadata(payload: Any) -> None:
    Draft202012Validator(METADATA_SCHEMA).validate(payload)


def parse_metadata(payload: dict[str, Any]) -> ProjectMetadata:
    packages = []
    for p in payload["packages"]:
        targets = [TargetDescriptor(name=t["name"], kinds=t["kind"]) for t in p["targets"]]
        packages.append(
            Package(
                name=p["name"],
                manifest_path=Path(p["manifest_path"]),
                targets=targets,
                default_run=p.get("default_run"),
            )
        )
    return ProjectMetadata(packages=packages)


def query_metadata(manifest_path: Path | None, *, runner: ProcessRunner, config: ToolConfig) -> ProjectMetadata:
    """Run `cargo metadata --no-deps` (no compilation) and return the package/target graph."""
    argv = metadata_command(manifest_path, cargo=config.cargo)
    try:
        result = runner.run(argv, capture_stdout=True)
    except OSError as e:
        raise MetadataUnavailable(f"failed to access crate metadata: could not run {config.cargo}: {e}") from e
    if not result.ok:
        raise MetadataUnavailable(f"failed to access crate metadata: `cargo metadata` exited with {result.returncode}")

    try:
        payload = json.loads(result.stdout)
    except ValueError as e:
        raise MetadataUnavailable(f"failed to access crate metadata: invalid JSON: {e}") from e
    try:
        validate_metadata(payload)
    except ValidationError as e:
        raise MetadataUnavailable(f"failed to access crate metadata: unexpected format: {e.message}") from e
    return parse_metadata(payload)


def select_packages(metadata: ProjectMetadata, package: str | None, crate_root: Path) -> list[Package]:
    """Packages in scope: the one named explicitly, or every package under crate_root."""
    if package is not None:
        selected = [p for p in metadata.packages if p.name == package]
        if not selected:
            raise UnknownPackage(f"workspace has no package named {package}")
        return selected

    selected = [p for p in metadata.packages if p.manifest_path.is_relative_to(crate_root)]
    if not selected:
        raise NoMatchingPackage(f"failed to find any package in '{crate_root}' or below")
    return selected
