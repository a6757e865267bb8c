"""集中配置管理

工具自身的配置（不是依赖清单）：清单文件名、vendor 目录、外部程序路径等。
支持从 YAML 文件加载 + 编程式覆盖。
"""

from __future__ import annotations

import logging
import os
from dataclasses import asdict, dataclass, field
from typing import Any

import yaml

from samurai.core.exceptions import ConfigError
from samurai.utils.yaml_io import load_yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = ".samurai.yml"
SUBSTITUTION_MODES = ("tree", "text")


@dataclass
class Config:
    """工具全局配置"""

    # 目录 / 文件
    manifest: str = "samurai.json"
    vendor_dir: str = "vendor"

    # 外部程序
    git: str = "git"
    cmake: str = "cmake"

    # 变量替换方式: tree = 解析后只替换字符串叶子; text = 解析前替换原始文本
    substitution: str = "tree"

    # 网络
    download_timeout: int = 300

    extra: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.substitution not in SUBSTITUTION_MODES:
            raise ConfigError(
                f"不支持的 substitution 取值: {self.substitution}，"
                f"可选: {', '.join(SUBSTITUTION_MODES)}"
            )

    @classmethod
    def from_file(cls, path: str = DEFAULT_CONFIG_FILE) -> Config:
        """从 YAML 文件加载配置，不存在则返回默认

        Raises:
            ConfigError: 文件无法解析或取值非法
        """
        try:
            data = load_yaml(path)
        except (yaml.YAMLError, ValueError) as e:
            raise ConfigError(f"配置文件无效: {path}: {e}") from e
        if not data:
            return cls()
        known = {f for f in cls.__dataclass_fields__ if f != "extra"}
        matched = {k: v for k, v in data.items() if k in known}
        extra = {k: v for k, v in data.items() if k not in known}
        cfg = cls(**matched)
        cfg.extra = extra
        return cfg

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


# 全局单例，首次 import 时不加载文件；由 CLI 入口显式初始化
_current: Config | None = None


def get_config() -> Config:
    """获取当前配置（未初始化则返回默认值）"""
    global _current  # noqa: PLW0603
    if _current is None:
        _current = Config()
    return _current


def init_config(path: str | None = None) -> Config:
    """从文件初始化全局配置，路径缺省取 $SAMURAI_CONFIG 或 .samurai.yml"""
    global _current  # noqa: PLW0603
    path = path or os.getenv("SAMURAI_CONFIG") or DEFAULT_CONFIG_FILE
    _current = Config.from_file(path)
    logger.debug("配置已加载: %s", path)
    return _current
