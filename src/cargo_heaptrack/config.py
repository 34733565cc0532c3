from __future__ import annotations

import os
from collections.abc import Mapping

import attrs

MANIFEST_FILE_NAME = "Cargo.toml"

# Cargo exports `CARGO` to the subcommands it spawns; honour it so `cargo +nightly heaptrack`
# keeps using the same toolchain for metadata and build.
CARGO_ENV = "CARGO"
PROFILER_ENV = "CARGO_HEAPTRACK_PROFILER"

DEFAULT_CARGO = "cargo"
DEFAULT_PROFILER = "heaptrack"


@attrs.define(frozen=True, slots=True)
class ToolConfig:
    cargo: str = DEFAULT_CARGO
    heaptrack: str = DEFAULT_PROFILER
    manifest_name: str = MANIFEST_FILE_NAME

    @staticmethod
    def from_env(environ: Mapping[str, str] | None = None) -> "ToolConfig":
        """Build a config from environment overrides (empty values are ignored)."""
        env = os.environ if environ is None else environ
        return ToolConfig(
            cargo=env.get(CARGO_ENV) or DEFAULT_CARGO,
            heaptrack=env.get(PROFILER_ENV) or DEFAULT_PROFILER,
        )
