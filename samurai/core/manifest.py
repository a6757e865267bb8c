"""清单加载

流程（全部完成后才允许任何拉取/构建操作）:
  1. 读取清单文件（samurai.json，或 .yml/.yaml）
  2. 变量替换（--vars 与 @{ENV}），tree / text 两种方式
  3. 构造数据模型，注入 PathContext
  4. 校验：名称、来源类型、归档扩展名
  5. 按当前平台规范化路径分隔符
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml

from samurai.core.exceptions import ManifestError, UnsupportedSourceError
from samurai.core.fetch.archive import archive_extension
from samurai.core.models import (
    DEFAULT_VENDOR_DIR,
    Build,
    CMake,
    Manifest,
    OsGenerator,
    OsVars,
    Package,
    PathContext,
    Runnable,
    Source,
)
from samurai.core.platform import Platform
from samurai.core.variables import substitute, substitute_tree
from samurai.utils.net import url_filename
from samurai.utils.yaml_io import parse_yaml

logger = logging.getLogger(__name__)

_YAML_SUFFIXES = (".yml", ".yaml")


def load_manifest(
    path: str | Path,
    *,
    platform: Platform,
    cli_vars: str | None = None,
    cwd: Path | None = None,
    substitution: str = "tree",
    environ: Mapping[str, str] | None = None,
    vendor_dir: str = DEFAULT_VENDOR_DIR,
) -> Manifest:
    """读取、替换、解析、校验并规范化清单

    Raises:
        ManifestError: 文件缺失、无法解析、结构或取值非法
    """
    p = Path(path)
    if not p.is_absolute() and cwd is not None:
        p = cwd / p
    if not p.is_file():
        raise ManifestError(f"清单文件不存在: {p}")
    try:
        text = p.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ManifestError(f"读取清单失败: {p}: {e}") from e

    if substitution == "text":
        text = substitute(text, cli_vars, environ)
    data = parse_manifest_text(text, yaml_format=p.suffix.lower() in _YAML_SUFFIXES)
    if substitution != "text":
        data = substitute_tree(data, cli_vars, environ)

    manifest = build_manifest(data, cwd or Path.cwd(), vendor_dir=vendor_dir)
    validate_manifest(manifest)
    manifest.normalize_paths(platform)
    logger.info(
        "清单已加载: %s (%d 个依赖%s)", p, len(manifest.dependencies),
        ", 含 self" if manifest.self_project else "",
    )
    return manifest


def parse_manifest_text(text: str, *, yaml_format: bool = False) -> dict[str, Any]:
    """把清单文本解析为字典"""
    try:
        data = parse_yaml(text) if yaml_format else json.loads(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ManifestError(f"清单解析失败: {e}") from e
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ManifestError(f"清单顶层必须是对象，实际: {type(data).__name__}")
    return data


def build_manifest(
    data: dict[str, Any], cwd: Path, *, vendor_dir: str = DEFAULT_VENDOR_DIR,
) -> Manifest:
    """由解析后的字典构造 Manifest；清单未给 installDir 时安装到 <cwd>/<vendor_dir>"""
    context = PathContext.create(cwd, _opt_str(data.get("installDir")), vendor_dir)
    deps_raw = data.get("dependencies") or []
    if not isinstance(deps_raw, list):
        raise ManifestError("dependencies 必须是数组")

    dependencies = [
        _parse_package(_as_dict(item, f"dependencies[{i}]"), context, is_self=False)
        for i, item in enumerate(deps_raw)
    ]
    self_raw = data.get("self")
    self_project = None
    if self_raw is not None:
        self_project = _parse_package(_as_dict(self_raw, "self"), context, is_self=True)
    return Manifest(context=context, dependencies=dependencies, self_project=self_project)


def validate_manifest(manifest: Manifest) -> None:
    """进程级校验：在处理任何包之前发现致命配置错误"""
    seen: set[str] = set()
    for pkg in manifest.dependencies:
        if not pkg.name:
            raise ManifestError("依赖缺少 name")
        if pkg.name in seen:
            raise ManifestError(f"依赖名称重复: {pkg.name}")
        seen.add(pkg.name)
        if pkg.source is None:
            raise ManifestError(f"依赖 '{pkg.name}' 缺少 source")
        if pkg.source.type not in Source.KINDS:
            raise UnsupportedSourceError(
                f"依赖 '{pkg.name}' 的来源类型不支持: '{pkg.source.type}'，"
                f"可选: {', '.join(Source.KINDS)}"
            )
        if not pkg.source.url:
            raise ManifestError(f"依赖 '{pkg.name}' 缺少 source.url")
        if pkg.source.type == Source.ARCHIVE:
            archive_extension(url_filename(pkg.source.url))


# =========================================================================
# 字段解析
# =========================================================================


def _parse_package(data: dict[str, Any], context: PathContext, *, is_self: bool) -> Package:
    source = None
    if not is_self and data.get("source") is not None:
        src = _as_dict(data["source"], "source")
        source = Source(
            type=_as_str(src.get("type", "")),
            url=_as_str(src.get("url", "")),
            archive_has_root_dir=bool(src.get("archiveHasRootDir", False)),
        )
    return Package(
        name=_as_str(data.get("name", "")),
        context=context,
        version=None if is_self else _opt_str(data.get("version")),
        patch=_opt_str(data.get("patch")),
        source=source,
        cmake=_parse_cmake(data["cmake"]) if data.get("cmake") is not None else None,
        build=_parse_build(data["build"]) if data.get("build") is not None else None,
        install_dir=_opt_str(data.get("installDir")),
        is_self=is_self,
    )


def _parse_cmake(raw: Any) -> CMake:
    data = _as_dict(raw, "cmake")
    return CMake(
        src_dir=_as_str(data.get("srcDir") or ""),
        working_dir=_as_str(data.get("workingDir") or ""),
        args=_str_list(data.get("args"), "cmake.args"),
        vars=_str_map(data.get("vars"), "cmake.vars"),
        os_specific_vars=[
            OsVars(
                os=_parse_os(_as_str(entry.get("os", ""))),
                vars=_str_map(entry.get("vars"), "cmake.osSpecificVars.vars"),
            )
            for entry in _dict_list(data.get("osSpecificVars"), "cmake.osSpecificVars")
        ],
        generator=_opt_str(data.get("generator")),
        generators=[
            OsGenerator(
                os=_parse_os(_as_str(entry.get("os", ""))),
                name=_as_str(entry.get("name", "")),
            )
            for entry in _dict_list(data.get("generators"), "cmake.generators")
        ],
        exclude_os=[
            _parse_os(os_name)
            for os_name in _str_list(data.get("excludeOS"), "cmake.excludeOS")
        ],
    )


def _parse_build(raw: Any) -> Build:
    data = _as_dict(raw, "build")
    return Build(
        scripts=[_parse_runnable(e) for e in _dict_list(data.get("scripts"), "build.scripts")],
        commands=[_parse_runnable(e) for e in _dict_list(data.get("commands"), "build.commands")],
    )


def _parse_runnable(data: dict[str, Any]) -> Runnable:
    os_name = _opt_str(data.get("os"))
    return Runnable(
        name=_opt_str(data.get("name")),
        os=_parse_os(os_name) if os_name else None,
        args=_str_list(data.get("args"), "build.args"),
        working_dir=_opt_str(data.get("workingDir")),
    )


def _as_dict(value: Any, where: str) -> dict[str, Any]:
    if not isinstance(value, dict):
        raise ManifestError(f"{where} 必须是对象")
    return value


def _dict_list(value: Any, where: str) -> list[dict[str, Any]]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ManifestError(f"{where} 必须是数组")
    return [_as_dict(v, where) for v in value]


def _as_str(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return value if isinstance(value, str) else str(value)


def _opt_str(value: Any) -> str | None:
    if value is None:
        return None
    return _as_str(value)


def _str_list(value: Any, where: str) -> list[str]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ManifestError(f"{where} 必须是数组")
    return [_as_str(v) for v in value]


def _str_map(value: Any, where: str) -> dict[str, str]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ManifestError(f"{where} 必须是对象")
    return {str(k): _as_str(v) for k, v in value.items()}


def _parse_os(value: str) -> Platform | str:
    """解析 os 字段；无法识别的取值原样保留，运行时不会匹配任何平台"""
    try:
        return Platform.parse(value)
    except ManifestError:
        logger.warning("未知的 os 取值 '%s'，对应条目将被忽略", value)
        return value
