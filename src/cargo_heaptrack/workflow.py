from __future__ import annotations

import shlex
import sys
from pathlib import Path

import attrs

from . import build, prereqs, profiler, resolver, workload
from .config import ToolConfig
from .errors import CargoHeaptrackError, MissingPrerequisite, ProfilerLaunchFailed
from .model import BuildRequest, ProfilerOptions
from .runner import ProcessRunner, SubprocessRunner


def ensure_prerequisites(config: ToolConfig) -> None:
    checks = prereqs.check_all(config)
    failed = {c.check_name for c in checks if c.status == "fail"}
    if not failed:
        return
    message = prereqs.format_prereq_failures(checks)
    if failed == {"heaptrack_available"}:
        raise ProfilerLaunchFailed(message)
    raise MissingPrerequisite(message)


def complete_request(
    request: BuildRequest, *, runner: ProcessRunner, config: ToolConfig, cwd: Path | None = None
) -> tuple[BuildRequest, tuple[str, ...]]:
    """Fill in the target for an underspecified request.

    Returns the completed request and the resolved target's kinds (empty when the request
    already named its target).
    """
    if not request.has_target:
        target = resolver.resolve(
            ["bin"], request.package, request.manifest_path, None, runner=runner, config=config, cwd=cwd
        )
        return attrs.evolve(request, bin=target.target, package=target.package), target.kinds

    if request.unit_test:
        target = resolver.resolve(
            ["bin", "lib"],
            request.package,
            request.manifest_path,
            request.unit_test_name,
            runner=runner,
            config=config,
            cwd=cwd,
        )
        return attrs.evolve(request, unit_test_name=target.target, package=target.package), target.kinds

    return request, ()


def profile(
    request: BuildRequest,
    profiler_options: ProfilerOptions,
    *,
    runner: ProcessRunner,
    config: ToolConfig,
    cwd: Path | None = None,
) -> None:
    """Resolve, build, extract and profile; raises CargoHeaptrackError on any failure."""
    request, kind_hint = complete_request(request, runner=runner, config=config, cwd=cwd)
    artifacts = build.build(request, kind_hint, runner=runner, config=config)
    assembled = workload.extract(request, artifacts)
    print(shlex.join(assembled.argv))
    sys.stdout.flush()
    profiler.launch(assembled.executable, assembled.args, profiler_options, runner=runner, config=config)


def run(
    request: BuildRequest,
    profiler_options: ProfilerOptions,
    *,
    runner: ProcessRunner | None = None,
    config: ToolConfig | None = None,
    cwd: Path | None = None,
) -> int:
    """Run the whole `cargo heaptrack` pipeline. Returns process exit code."""
    cfg = config if config is not None else ToolConfig.from_env()
    try:
        ensure_prerequisites(cfg)
        profile(request, profiler_options, runner=runner or SubprocessRunner(), config=cfg, cwd=cwd)
    except CargoHeaptrackError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1
    return 0
