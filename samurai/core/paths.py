"""路径分隔符规范化"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from samurai.core.platform import Platform


def normalize_separators(path: str | None, platform: Platform) -> str | None:
    """把当前平台不使用的分隔符替换为正确的分隔符

    Windows 上 '/' 视为错误分隔符，其他平台上 '\\' 视为错误分隔符。
    重复调用结果不变。
    """
    if path is None:
        return None
    correct = platform.separator
    wrong = "/" if correct == "\\" else "\\"
    return path.replace(wrong, correct)


def is_rooted(path: str) -> bool:
    """判断路径是否为根路径（任一平台写法：/x、\\x、C:\\x、C:/x）"""
    if path.startswith(("/", "\\")):
        return True
    return len(path) >= 2 and path[1] == ":" and path[0].isalpha()
