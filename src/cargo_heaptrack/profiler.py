from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

from .config import ToolConfig
from .errors import ProfilerFailed, ProfilerLaunchFailed
from .model import ProfilerOptions
from .runner import ProcessRunner


def profiler_command(
    executable: Path | str,
    args: Sequence[str],
    options: ProfilerOptions,
    *,
    heaptrack: str = "heaptrack",
) -> list[str]:
    argv = [heaptrack]
    if options.output is not None:
        argv += ["--output", str(options.output)]
    if options.raw:
        argv.append("--raw")
    argv.append(str(executable))
    argv += list(args)
    return argv


def launch(
    executable: Path | str,
    args: Sequence[str],
    options: ProfilerOptions,
    *,
    runner: ProcessRunner,
    config: ToolConfig,
) -> None:
    """Run the workload under heaptrack and wait for it; all standard streams are inherited."""
    argv = profiler_command(executable, args, options, heaptrack=config.heaptrack)
    try:
        result = runner.run(argv, capture_stdout=False)
    except OSError as e:
        raise ProfilerLaunchFailed(
            f"failed to execute heaptrack command ({config.heaptrack}): {e}\n"
            "Hint: install heaptrack and make sure it is on PATH"
        ) from e
    if not result.ok:
        raise ProfilerFailed(f"heaptrack failed with exit status {result.returncode}", returncode=result.returncode)
