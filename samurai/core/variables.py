"""清单变量替换

两个变量来源，按顺序处理:
  1. 命令行 --vars: "NAME=VALUE;NAME2=VALUE2"，替换字面量 ${NAME}
  2. 进程环境变量: 替换 @{NAME}，未设置的变量保持原样

两种应用方式:
  - substitute():      在 JSON 解析前替换原始文本，值中的反斜杠会被转义，
                       变量值可以注入任意 JSON 片段
  - substitute_tree(): 解析后只替换字符串叶子，不会改变清单结构
"""

from __future__ import annotations

import os
import re
from collections.abc import Mapping
from typing import Any

_ENV_TOKEN_RE = re.compile(r"@\{(.+?)\}", re.IGNORECASE)


def parse_cli_vars(cli_vars: str | None) -> list[tuple[str, str]]:
    """解析 "NAME=VALUE;..."，忽略没有 '=' 的片段，值中允许出现 '='"""
    if not cli_vars:
        return []
    pairs: list[tuple[str, str]] = []
    for item in cli_vars.split(";"):
        if "=" not in item:
            continue
        name, value = item.split("=", 1)
        name = name.strip()
        if name:
            pairs.append((name, value))
    return pairs


def _escape(value: str) -> str:
    return value.replace("\\", "\\\\")


def _replace_cli(text: str, pairs: list[tuple[str, str]], escape: bool) -> str:
    for name, value in pairs:
        text = text.replace("${" + name + "}", _escape(value) if escape else value)
    return text


def _replace_env(text: str, environ: Mapping[str, str], escape: bool) -> str:
    def repl(m: re.Match[str]) -> str:
        value = environ.get(m.group(1))
        if value is None:
            return m.group(0)
        return _escape(value) if escape else value

    return _ENV_TOKEN_RE.sub(repl, text)


def substitute(
    text: str, cli_vars: str | None,
    environ: Mapping[str, str] | None = None,
) -> str:
    """对原始清单文本做两轮变量替换（JSON 解析之前）"""
    env = os.environ if environ is None else environ
    text = _replace_cli(text, parse_cli_vars(cli_vars), escape=True)
    return _replace_env(text, env, escape=True)


def substitute_tree(
    data: Any, cli_vars: str | None,
    environ: Mapping[str, str] | None = None,
) -> Any:
    """对解析后的清单树逐个字符串叶子做同样的两轮替换，返回新树"""
    env = os.environ if environ is None else environ
    pairs = parse_cli_vars(cli_vars)

    def walk(node: Any) -> Any:
        if isinstance(node, str):
            return _replace_env(_replace_cli(node, pairs, escape=False), env, escape=False)
        if isinstance(node, list):
            return [walk(x) for x in node]
        if isinstance(node, dict):
            return {k: walk(v) for k, v in node.items()}
        return node

    return walk(data)
