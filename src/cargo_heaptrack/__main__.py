from __future__ import annotations

import argparse
import sys
from pathlib import Path

from . import workflow
from .errors import ConflictingSelection
from .model import BuildRequest, ProfilerOptions


def build_parser() -> argparse.ArgumentParser:
    """Build CLI parser; invoked by cargo as `cargo-heaptrack heaptrack [OPTIONS] [-- ARGS...]`."""
    parser = argparse.ArgumentParser(
        prog="cargo",
        allow_abbrev=False,
        description="Cargo subcommand for profiling executables with heaptrack.",
    )
    sub = parser.add_subparsers(dest="cmd", required=True)

    ht = sub.add_parser(
        "heaptrack",
        help="Build a target and run it under heaptrack.",
        allow_abbrev=False,
        epilog="Arguments after `--` are passed to the binary being profiled.",
    )
    ht.add_argument("--dev", action="store_true", help="Build with the dev profile.")
    ht.add_argument("--profile", default=None, help="Build with the specified profile.")
    ht.add_argument("-p", "--package", default=None, help="Package with the binary to run.")

    exec_args = ht.add_mutually_exclusive_group()
    exec_args.add_argument("-b", "--bin", default=None, help="Binary to run.")
    exec_args.add_argument("--example", default=None, help="Example to run.")
    exec_args.add_argument("--test", default=None, help="Test binary to run.")
    exec_args.add_argument(
        "--unit-test",
        nargs="?",
        const="",
        default=None,
        metavar="UNIT_TEST",
        help=(
            "Crate target to unit test; may be omitted if the crate has only one target. "
            "Profiles the test harness and all tests in the binary; pass a test filter after `--`."
        ),
    )
    exec_args.add_argument("--bench", default=None, help="Benchmark to run.")

    ht.add_argument("--manifest-path", type=Path, default=None, help="Path to Cargo.toml.")
    ht.add_argument("-f", "--features", default=None, help="Build features to enable.")
    ht.add_argument("--no-default-features", action="store_true", help="Disable default features.")
    ht.add_argument("-r", "--release", action="store_true", help="No-op. For compatibility with `cargo run --release`.")

    ht.add_argument("-o", "--output", type=Path, default=None, help="heaptrack output file.")
    ht.add_argument(
        "--raw",
        action=argparse.BooleanOptionalAction,
        default=True,
        help="Only record raw data, do not interpret it (default: on).",
    )
    return parser


def split_trailing(argv: list[str]) -> tuple[list[str], list[str]]:
    """Split argv at the first `--`; everything after it is forwarded untouched."""
    if "--" in argv:
        idx = argv.index("--")
        return argv[:idx], argv[idx + 1 :]
    return argv, []


def request_from_args(ns: argparse.Namespace, trailing: list[str]) -> BuildRequest:
    return BuildRequest(
        dev=ns.dev,
        profile=ns.profile,
        package=ns.package,
        bin=ns.bin,
        example=ns.example,
        test=ns.test,
        bench=ns.bench,
        unit_test=ns.unit_test is not None,
        unit_test_name=ns.unit_test or None,
        manifest_path=ns.manifest_path,
        features=ns.features,
        no_default_features=ns.no_default_features,
        release=ns.release,
        trailing_args=trailing,
    )


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint. Returns process exit code."""
    options, trailing = split_trailing(list(sys.argv[1:] if argv is None else argv))
    parser = build_parser()
    ns = parser.parse_args(options)

    if ns.cmd == "heaptrack":
        try:
            request = request_from_args(ns, trailing)
        except ConflictingSelection as e:
            print(f"error: {e}", file=sys.stderr)
            return 1
        return workflow.run(request, ProfilerOptions(output=ns.output, raw=ns.raw))

    raise AssertionError(f"Unhandled cmd: {ns.cmd}")


if __name__ == "__main__":
    raise SystemExit(main())
