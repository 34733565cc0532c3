from __future__ import annotations

import sys
from collections.abc import Iterable, Sequence
from pathlib import Path

from . import metadata, paths
from .config import ToolConfig
from .errors import AmbiguousTarget, NoTarget
from .model import Package, Resolution, ResolvedTarget
from .runner import ProcessRunner


def _candidates(package: Package, kinds: Iterable[str], target_name: str | None) -> list[ResolvedTarget]:
    wanted = set(kinds)
    out: list[ResolvedTarget] = []
    for t in package.targets:
        if wanted.isdisjoint(t.kinds):
            continue
        # `default-run` restricts the package before any explicit name filter.
        if package.default_run is not None and t.name != package.default_run:
            continue
        if target_name is not None and t.name != target_name:
            continue
        out.append(ResolvedTarget(package=package.name, target=t.name, kinds=t.kinds))
    return out


def resolve_target(packages: Sequence[Package], kinds: Iterable[str], target_name: str | None = None) -> Resolution:
    """Narrow the in-scope packages to the single target matching kinds (and name).

    Raises NoTarget when nothing survives and AmbiguousTarget when several do.
    """
    kinds = tuple(kinds)
    found: list[ResolvedTarget] = []
    for p in packages:
        found += _candidates(p, kinds, target_name)

    if not found:
        raise NoTarget(
            "crate has no automatically selectable target:\n"
            "Hint: try passing `--example <example>` or similar to choose a binary"
        )
    if len(found) > 1:
        raise AmbiguousTarget([(t.package, t.kinds[0] if t.kinds else "", t.target) for t in found])

    via_default_run = len(packages) == 1 and packages[0].default_run is not None
    return Resolution(target=found[0], announce=not via_default_run)


def resolve(
    kinds: Iterable[str],
    package: str | None,
    manifest_path: Path | None,
    target_name: str | None,
    *,
    runner: ProcessRunner,
    config: ToolConfig,
    cwd: Path | None = None,
) -> ResolvedTarget:
    """Query metadata, scope packages and pick the unique target, printing a notice if needed."""
    crate_root = paths.find_crate_root(manifest_path, cwd=cwd, manifest_name=config.manifest_name)
    project = metadata.query_metadata(manifest_path, runner=runner, config=config)
    in_scope = metadata.select_packages(project, package, crate_root)

    resolution = resolve_target(in_scope, kinds, target_name)
    if resolution.announce:
        print(f"automatically selected {resolution.target} as it is the only valid target", file=sys.stderr)
    return resolution.target
