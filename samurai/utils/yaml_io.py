"""YAML 文件读取工具

工具配置（.samurai.yml）和 YAML 格式清单共用，统一 utf-8、空值保护和大小限制。
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

# 防止误指向超大文件导致内存耗尽
MAX_YAML_SIZE = 10 * 1024 * 1024


def load_yaml(path: str | Path) -> dict[str, Any]:
    """安全读取 YAML 文件

    返回:
        dict: 解析后的字典。文件不存在、为空或顶层不是字典时返回空字典

    异常:
        yaml.YAMLError: YAML 格式错误
        ValueError: 文件过大（超过 MAX_YAML_SIZE）
    """
    p = Path(path)
    if not p.exists():
        return {}

    file_size = p.stat().st_size
    if file_size > MAX_YAML_SIZE:
        raise ValueError(
            f"YAML 文件过大: {p} ({file_size} 字节), "
            f"超过限制 {MAX_YAML_SIZE} 字节"
        )

    try:
        with open(p, encoding="utf-8") as f:
            result = parse_yaml(f.read())
    except yaml.YAMLError as e:
        logger.error("解析 YAML 文件失败: %s, 错误: %s", path, e)
        raise

    if not isinstance(result, dict):
        if result is not None:
            logger.warning(
                "%s 内容不是字典类型 (实际类型: %s)，返回空字典",
                path, type(result).__name__,
            )
        return {}
    return result


def parse_yaml(text: str) -> Any:
    """解析 YAML 文本（safe_load）"""
    return yaml.safe_load(text)
