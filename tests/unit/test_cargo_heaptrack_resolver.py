from __future__ import annotations

from pathlib import Path

import pytest

from cargo_heaptrack import resolver
from cargo_heaptrack.config import ToolConfig
from cargo_heaptrack.errors import AmbiguousTarget, NoTarget, UnknownPackage
from cargo_heaptrack.model import Package, ProcessResult, TargetDescriptor


def _pkg(name: str, targets: list[tuple[str, str]], default_run: str | None = None) -> Package:
    return Package(
        name=name,
        manifest_path=Path(f"/ws/{name}/Cargo.toml"),
        targets=[TargetDescriptor(name=n, kinds=[k]) for n, k in targets],
        default_run=default_run,
    )


def test_two_bins_are_ambiguous() -> None:
    with pytest.raises(AmbiguousTarget) as exc:
        resolver.resolve_target([_pkg("p", [("a", "bin"), ("b", "bin")])], ["bin"])
    assert exc.value.candidates == [("p", "bin", "a"), ("p", "bin", "b")]
    assert "target a in package p (bin)" in str(exc.value)
    assert "target b in package p (bin)" in str(exc.value)


def test_single_bin_is_selected_with_notice() -> None:
    res = resolver.resolve_target([_pkg("p", [("a", "bin"), ("p", "lib")])], ["bin"])
    assert res.target.target == "a"
    assert res.target.package == "p"
    assert res.announce is True


def test_default_run_selects_silently() -> None:
    res = resolver.resolve_target([_pkg("p", [("a", "bin"), ("b", "bin")], default_run="a")], ["bin"])
    assert res.target.target == "a"
    assert res.announce is False


def test_default_run_applies_before_name_filter() -> None:
    with pytest.raises(NoTarget, match="--example"):
        resolver.resolve_target([_pkg("p", [("a", "bin"), ("b", "bin")], default_run="a")], ["bin"], "b")


def test_default_run_in_multi_package_scope_is_announced() -> None:
    pkgs = [_pkg("p", [("a", "bin"), ("b", "bin")], default_run="a"), _pkg("q", [("q", "lib")])]
    res = resolver.resolve_target(pkgs, ["bin"])
    assert res.target.target == "a"
    assert res.announce is True


def test_kind_filter_and_name_filter() -> None:
    pkgs = [_pkg("p", [("p", "lib"), ("cli", "bin"), ("demo", "example")])]
    res = resolver.resolve_target(pkgs, ["bin", "lib"], "p")
    assert res.target.target == "p"
    assert res.target.kinds == ("lib",)


def test_bins_across_packages_are_ambiguous() -> None:
    with pytest.raises(AmbiguousTarget) as exc:
        resolver.resolve_target([_pkg("p", [("a", "bin")]), _pkg("q", [("b", "bin")])], ["bin"])
    assert len(exc.value.candidates) == 2


def test_same_target_name_in_two_packages_names_both_packages() -> None:
    pkgs = [_pkg("alpha", [("cli", "bin")]), _pkg("beta", [("cli", "bin")])]
    with pytest.raises(AmbiguousTarget) as exc:
        resolver.resolve_target(pkgs, ["bin"])
    assert exc.value.candidates == [("alpha", "bin", "cli"), ("beta", "bin", "cli")]
    assert "target cli in package alpha (bin)" in str(exc.value)
    assert "target cli in package beta (bin)" in str(exc.value)


def test_no_matching_kind() -> None:
    with pytest.raises(NoTarget):
        resolver.resolve_target([_pkg("p", [("p", "lib")])], ["bin"])


def test_resolve_prints_notice(
    crate_dir: Path, fake_runner, make_metadata, make_package, capsys: pytest.CaptureFixture[str]
) -> None:
    manifest = str(crate_dir.resolve() / "Cargo.toml")
    payload = make_metadata([make_package("demo", manifest, [("demo", ["bin"])])])
    runner = fake_runner([ProcessResult(returncode=0, stdout=payload)])

    target = resolver.resolve(["bin"], None, None, None, runner=runner, config=ToolConfig(), cwd=crate_dir)

    assert target.target == "demo"
    err = capsys.readouterr().err
    assert "automatically selected target demo in package demo as it is the only valid target" in err


def test_resolve_default_run_is_silent(
    crate_dir: Path, fake_runner, make_metadata, make_package, capsys: pytest.CaptureFixture[str]
) -> None:
    manifest = str(crate_dir.resolve() / "Cargo.toml")
    payload = make_metadata(
        [make_package("demo", manifest, [("demo", ["bin"]), ("other", ["bin"])], default_run="demo")]
    )
    runner = fake_runner([ProcessResult(returncode=0, stdout=payload)])

    target = resolver.resolve(["bin"], None, None, None, runner=runner, config=ToolConfig(), cwd=crate_dir)

    assert target.target == "demo"
    assert capsys.readouterr().err == ""


def test_resolve_unknown_package(crate_dir: Path, fake_runner, make_metadata, make_package) -> None:
    manifest = str(crate_dir.resolve() / "Cargo.toml")
    payload = make_metadata([make_package("demo", manifest, [("demo", ["bin"])])])
    runner = fake_runner([ProcessResult(returncode=0, stdout=payload)])
    with pytest.raises(UnknownPackage):
        resolver.resolve(["bin"], "nope", None, None, runner=runner, config=ToolConfig(), cwd=crate_dir)


def test_resolve_explicit_manifest_path(crate_dir: Path, fake_runner, make_metadata, make_package) -> None:
    manifest = crate_dir.resolve() / "Cargo.toml"
    payload = make_metadata([make_package("demo", str(manifest), [("demo", ["bin"])])])
    runner = fake_runner([ProcessResult(returncode=0, stdout=payload)])

    target = resolver.resolve(["bin"], None, manifest, None, runner=runner, config=ToolConfig())

    assert target.package == "demo"
    assert runner.calls[0][-2:] == ["--manifest-path", str(manifest)]
