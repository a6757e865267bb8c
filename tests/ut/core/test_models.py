"""数据模型测试: 派生路径 / CMake 参数 / 构建条目选择"""

from __future__ import annotations

from pathlib import Path

import pytest

from samurai.core.exceptions import ConfigError, UnsupportedPlatformError
from samurai.core.models import (
    Build,
    CMake,
    OsGenerator,
    OsVars,
    Package,
    PathContext,
    Runnable,
    Source,
)
from samurai.core.platform import Platform


@pytest.fixture()
def ctx(tmp_path: Path) -> PathContext:
    return PathContext.create(tmp_path)


class TestPathContext:
    def test_default_vendor(self, tmp_path: Path) -> None:
        c = PathContext.create(tmp_path)
        assert c.install_root == tmp_path.resolve() / "vendor"

    def test_relative_install_dir(self, tmp_path: Path) -> None:
        c = PathContext.create(tmp_path, "third_party/libs")
        assert c.install_root == tmp_path.resolve() / "third_party" / "libs"

    def test_absolute_install_dir(self, tmp_path: Path) -> None:
        target = tmp_path / "abs"
        assert PathContext.create(tmp_path, str(target)).install_root == target


class TestPackagePaths:
    def test_empty_version_is_none(self, ctx) -> None:
        assert Package(name="zlib", context=ctx, version="").version is None
        assert Package(name="zlib", context=ctx, version="v1").version == "v1"

    def test_package_path_under_install_root(self, ctx) -> None:
        pkg = Package(name="zlib", context=ctx, source=Source(type="git", url="u"))
        assert pkg.base_path == ctx.install_root
        assert pkg.package_path == ctx.install_root / "zlib"

    def test_package_install_dir_overrides(self, ctx) -> None:
        pkg = Package(name="zlib", context=ctx, install_dir="ext")
        assert pkg.package_path == ctx.cwd / "ext" / "zlib"

    def test_self_project_is_cwd(self, ctx) -> None:
        own = Package(name="myapp", context=ctx, is_self=True)
        assert own.base_path == ctx.cwd
        assert own.package_path == ctx.cwd
        assert own.label == "myapp"
        assert Package(name="", context=ctx, is_self=True).label == "self"

    def test_paths_cached(self, ctx) -> None:
        pkg = Package(name="zlib", context=ctx)
        first = pkg.package_path
        pkg.name = "renamed"
        assert pkg.package_path is first

    def test_patch_relative_to_cwd(self, ctx) -> None:
        pkg = Package(name="zlib", context=ctx, patch="patches/zlib.patch")
        assert pkg.patch_path == ctx.cwd / "patches" / "zlib.patch"
        assert Package(name="x", context=ctx).patch_path is None


class TestCMake:
    def test_args_order_vars_args_generator(self) -> None:
        cmake = CMake(src_dir="..", vars={"A": "1"}, args=["--foo"], generator="Ninja")
        args = cmake.build_args(Platform.LINUX)
        assert args == '.. -DA="1" --foo -G"Ninja"'
        assert args.index('-DA="1"') < args.index("--foo") < args.index('-G"Ninja"')

    def test_command_args_one_value_per_argument(self) -> None:
        cmake = CMake(
            src_dir="..", vars={"DIR": "C:\\sdk\\", "MSG": "a b"},
            args=["-DNOTE=it's"], generator="Unix Makefiles",
        )
        assert cmake.command_args(Platform.LINUX) == [
            "..", "-DDIR=C:\\sdk\\", "-DMSG=a b", "-DNOTE=it's", "-GUnix Makefiles",
        ]

    def test_command_args_rooted_src_dir_rejected(self) -> None:
        with pytest.raises(ConfigError, match="srcDir"):
            CMake(src_dir="/abs/src").command_args(Platform.LINUX)

    def test_unknown_os_entries_never_match(self) -> None:
        cmake = CMake(
            vars={"A": "1"},
            os_specific_vars=[OsVars(os="android", vars={"B": "2"})],
            exclude_os=["amiga"],
        )
        assert cmake.merged_vars(Platform.LINUX) == {"A": "1"}
        assert not cmake.is_excluded(Platform.LINUX)
        assert not Runnable(os="android", name="x").matches(Platform.LINUX)
        with pytest.raises(UnsupportedPlatformError):
            CMake(generators=[OsGenerator("android", "Ninja")]).resolve_generator(Platform.LINUX)

    def test_no_src_dir(self) -> None:
        assert CMake(vars={"A": "1"}).build_args(Platform.LINUX) == '-DA="1"'

    def test_rooted_src_dir_rejected(self) -> None:
        with pytest.raises(ConfigError, match="srcDir"):
            CMake(src_dir="/abs/src").build_args(Platform.LINUX)

    def test_os_vars_supplement_without_override(self) -> None:
        cmake = CMake(
            vars={"A": "default"},
            os_specific_vars=[
                OsVars(os=Platform.WINDOWS, vars={"W": "1"}),
                OsVars(os=Platform.LINUX, vars={"A": "linux", "L": "1"}),
            ],
        )
        assert cmake.merged_vars(Platform.LINUX) == {"A": "default", "L": "1"}
        assert cmake.merged_vars(Platform.WINDOWS) == {"A": "default", "W": "1"}
        assert cmake.merged_vars(Platform.MACOS) == {"A": "default"}

    def test_explicit_generator_wins(self) -> None:
        cmake = CMake(generator="Ninja", generators=[OsGenerator(Platform.LINUX, "Unix Makefiles")])
        assert cmake.resolve_generator(Platform.LINUX) == "Ninja"

    def test_generator_table_first_match(self) -> None:
        cmake = CMake(generators=[
            OsGenerator(Platform.WINDOWS, "Visual Studio 17 2022"),
            OsGenerator(Platform.LINUX, "Unix Makefiles"),
            OsGenerator(Platform.LINUX, "Ninja"),
        ])
        assert cmake.resolve_generator(Platform.LINUX) == "Unix Makefiles"

    def test_generator_table_no_match(self) -> None:
        cmake = CMake(generators=[OsGenerator(Platform.WINDOWS, "NMake Makefiles")])
        with pytest.raises(UnsupportedPlatformError, match="linux"):
            cmake.resolve_generator(Platform.LINUX)

    def test_no_generator(self) -> None:
        assert CMake().resolve_generator(Platform.LINUX) is None

    def test_working_dir(self, tmp_path: Path) -> None:
        root = tmp_path / "pkg"
        assert CMake(working_dir="build").resolve_working_dir(root) == root / "build"
        assert CMake().resolve_working_dir(root) == root
        absolute = tmp_path / "elsewhere"
        assert CMake(working_dir=str(absolute)).resolve_working_dir(root) == absolute

    def test_excluded(self) -> None:
        cmake = CMake(exclude_os=[Platform.WINDOWS])
        assert cmake.is_excluded(Platform.WINDOWS)
        assert not cmake.is_excluded(Platform.LINUX)


class TestBuildSelect:
    def test_script_for_platform(self) -> None:
        build = Build(scripts=[
            Runnable(os=Platform.WINDOWS, name="build.bat"),
            Runnable(os=Platform.LINUX, name="build.sh"),
        ])
        kind, entry = build.select(Platform.LINUX)
        assert (kind, entry.name) == ("script", "build.sh")

    def test_scripts_before_commands(self) -> None:
        build = Build(
            scripts=[Runnable(os=Platform.LINUX, name="build.sh")],
            commands=[Runnable(name="make")],
        )
        assert build.select(Platform.LINUX)[0] == "script"

    def test_command_fallback(self) -> None:
        build = Build(
            scripts=[Runnable(os=Platform.WINDOWS, name="build.bat")],
            commands=[Runnable(name="make", args=["-j4"])],
        )
        kind, entry = build.select(Platform.LINUX)
        assert (kind, entry.name, entry.args) == ("command", "make", ["-j4"])

    def test_no_match(self) -> None:
        build = Build(scripts=[Runnable(os=Platform.WINDOWS, name="build.bat")])
        assert build.select(Platform.LINUX) is None


class TestNormalizePaths:
    def test_only_matching_scripts_renamed(self, ctx) -> None:
        pkg = Package(
            name="zlib", context=ctx, patch="patches\\zlib.patch",
            cmake=CMake(src_dir="..\\src", working_dir="out\\build"),
            build=Build(
                scripts=[
                    Runnable(os=Platform.WINDOWS, name="scripts\\build.bat", working_dir="out\\build"),
                    Runnable(os=Platform.LINUX, name="scripts\\build.sh", working_dir="out\\build"),
                ],
                commands=[Runnable(name="make", working_dir="out\\build")],
            ),
        )
        pkg.normalize_paths(Platform.LINUX)
        assert pkg.patch == "patches/zlib.patch"
        assert pkg.cmake.src_dir == "../src"
        assert pkg.cmake.working_dir == "out/build"
        assert pkg.build.scripts[0].name == "scripts\\build.bat"
        assert pkg.build.scripts[1].name == "scripts/build.sh"
        assert all(e.working_dir == "out/build" for e in pkg.build.scripts + pkg.build.commands)
