"""依赖清单数据模型

数据类:
- PathContext: 路径解析上下文（调用目录 + 安装根目录），构造时注入每个包
- Source: 远程来源（git / archive / file）
- CMake: 配置步骤描述
- Runnable / Build: 构建脚本与命令
- Package: 单个包；有 source 的是远程依赖，没有 source 的是 self 项目
- Manifest: 清单根

远程依赖与 self 项目共用 Package，self 只是 source 为空、基础路径固定为调用目录。
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from functools import cached_property
from pathlib import Path

from samurai.core.exceptions import ConfigError, UnsupportedPlatformError
from samurai.core.paths import is_rooted, normalize_separators
from samurai.core.platform import Platform

logger = logging.getLogger(__name__)

DEFAULT_MANIFEST_NAME = "samurai.json"
DEFAULT_VENDOR_DIR = "vendor"


@dataclass(frozen=True)
class PathContext:
    """路径解析上下文，整个运行期间不变"""

    cwd: Path
    install_root: Path

    @classmethod
    def create(
        cls, cwd: Path, install_dir: str | None = None,
        default_dir: str = DEFAULT_VENDOR_DIR,
    ) -> PathContext:
        """install_dir 为空时使用 <cwd>/<default_dir>，相对路径相对于 cwd"""
        cwd = cwd.resolve()
        root = Path(install_dir or default_dir)
        if not root.is_absolute():
            root = cwd / root
        return cls(cwd=cwd, install_root=root)


# =========================================================================
# 来源
# =========================================================================


@dataclass
class Source:
    """远程来源"""

    GIT = "git"
    ARCHIVE = "archive"
    FILE = "file"
    KINDS = (GIT, ARCHIVE, FILE)

    type: str
    url: str
    archive_has_root_dir: bool = False


# =========================================================================
# 配置步骤 (CMake)
# =========================================================================


@dataclass
class OsGenerator:
    os: Platform | str
    name: str


@dataclass
class OsVars:
    os: Platform | str
    vars: dict[str, str] = field(default_factory=dict)


@dataclass
class CMake:
    """CMake 配置描述"""

    src_dir: str = ""
    working_dir: str = ""
    args: list[str] = field(default_factory=list)
    vars: dict[str, str] = field(default_factory=dict)
    os_specific_vars: list[OsVars] = field(default_factory=list)
    generator: str | None = None
    generators: list[OsGenerator] = field(default_factory=list)
    exclude_os: list[Platform | str] = field(default_factory=list)

    def is_excluded(self, platform: Platform) -> bool:
        return platform in self.exclude_os

    def merged_vars(self, platform: Platform) -> dict[str, str]:
        """默认变量 + 当前平台变量；平台变量只补充，不覆盖默认值"""
        merged = dict(self.vars)
        for overlay in self.os_specific_vars:
            if overlay.os is not platform:
                continue
            for name, value in overlay.vars.items():
                merged.setdefault(name, value)
        return merged

    def resolve_generator(self, platform: Platform) -> str | None:
        """显式 generator 优先；否则取 generators 中第一个匹配当前平台的项"""
        if self.generator:
            return self.generator
        if not self.generators:
            return None
        for gen in self.generators:
            if gen.os is platform:
                return gen.name
        raise UnsupportedPlatformError(
            f"generators 中没有适用于 {platform.value} 的生成器"
        )

    def command_args(self, platform: Platform) -> list[str]:
        """cmake 参数列表: 源码目录、-D 变量、自由参数、-G 生成器（固定顺序）

        每个值各占一个参数，不经过 shell 引号解析。
        """
        src_dir, variables, generator = self._resolve(platform)
        parts = [src_dir] if src_dir else []
        parts.extend(f"-D{name}={value}" for name, value in variables.items())
        parts.extend(self.args)
        if generator:
            parts.append(f"-G{generator}")
        return parts

    def build_args(self, platform: Platform) -> str:
        """参数的文本形式（-D 值与生成器带引号），用于日志展示"""
        src_dir, variables, generator = self._resolve(platform)
        parts = [src_dir] if src_dir else []
        parts.extend(f'-D{name}="{value}"' for name, value in variables.items())
        parts.extend(self.args)
        if generator:
            parts.append(f'-G"{generator}"')
        return " ".join(parts)

    def _resolve(self, platform: Platform) -> tuple[str, dict[str, str], str | None]:
        if self.src_dir and is_rooted(self.src_dir):
            raise ConfigError(f"cmake.srcDir 必须是相对路径: {self.src_dir}")
        return self.src_dir, self.merged_vars(platform), self.resolve_generator(platform)

    def resolve_working_dir(self, package_path: Path) -> Path:
        """工作目录：绝对路径原样使用，否则相对包路径"""
        if self.working_dir and Path(self.working_dir).is_absolute():
            return Path(self.working_dir)
        return package_path / self.working_dir if self.working_dir else package_path


# =========================================================================
# 构建步骤
# =========================================================================


@dataclass
class Runnable:
    """构建脚本或命令；os 为空表示适用于所有平台，无法识别的 os 永不匹配"""

    name: str | None = None
    os: Platform | str | None = None
    args: list[str] = field(default_factory=list)
    working_dir: str | None = None

    def matches(self, platform: Platform) -> bool:
        return self.os is None or self.os is platform


@dataclass
class Build:
    """构建描述：scripts 优先于 commands"""

    scripts: list[Runnable] = field(default_factory=list)
    commands: list[Runnable] = field(default_factory=list)

    def select(self, platform: Platform) -> tuple[str, Runnable] | None:
        """选择当前平台要执行的条目，返回 ("script"|"command", 条目)，无匹配返回 None"""
        for script in self.scripts:
            if script.matches(platform):
                return "script", script
        for command in self.commands:
            if command.matches(platform):
                return "command", command
        return None


# =========================================================================
# 包
# =========================================================================


@dataclass
class Package:
    """单个可构建单元"""

    name: str
    context: PathContext
    version: str | None = None
    patch: str | None = None
    source: Source | None = None
    cmake: CMake | None = None
    build: Build | None = None
    install_dir: str | None = None
    is_self: bool = False

    def __post_init__(self) -> None:
        # 空字符串版本视为未设置
        if not self.version:
            self.version = None

    @property
    def label(self) -> str:
        return self.name or "self"

    @cached_property
    def base_path(self) -> Path:
        """包所在的父目录"""
        if self.install_dir:
            p = Path(self.install_dir)
            return p if p.is_absolute() else self.context.cwd / p
        if self.is_self:
            return self.context.cwd
        return self.context.install_root

    @cached_property
    def package_path(self) -> Path:
        """包根目录；self 项目即调用目录"""
        if self.is_self:
            return self.context.cwd
        return self.base_path / self.name

    @property
    def patch_path(self) -> Path | None:
        if not self.patch:
            return None
        return self.context.cwd / self.patch

    @property
    def is_fetched(self) -> bool:
        return self.package_path.exists()

    def normalize_paths(self, platform: Platform) -> None:
        """规范化本包涉及的路径分隔符（只对当前平台匹配的脚本名处理）"""
        self.patch = normalize_separators(self.patch, platform)
        if self.cmake is not None:
            self.cmake.src_dir = normalize_separators(self.cmake.src_dir, platform)
            self.cmake.working_dir = normalize_separators(self.cmake.working_dir, platform)
        if self.build is not None:
            for entry in self.build.scripts:
                entry.working_dir = normalize_separators(entry.working_dir, platform)
                if entry.matches(platform):
                    entry.name = normalize_separators(entry.name, platform)
            for entry in self.build.commands:
                entry.working_dir = normalize_separators(entry.working_dir, platform)


@dataclass
class Manifest:
    """清单根：依赖按声明顺序执行，self 项目最多一个"""

    context: PathContext
    dependencies: list[Package] = field(default_factory=list)
    self_project: Package | None = None

    def packages(self, *, include_self: bool = False) -> list[Package]:
        result = list(self.dependencies)
        if include_self and self.self_project is not None:
            result.append(self.self_project)
        return result

    def get(self, name: str) -> Package | None:
        for pkg in self.dependencies:
            if pkg.name == name:
                return pkg
        return None

    def normalize_paths(self, platform: Platform) -> None:
        for pkg in self.packages(include_self=True):
            pkg.normalize_paths(platform)
        logger.debug("路径分隔符已按 %s 规范化", platform.value)
