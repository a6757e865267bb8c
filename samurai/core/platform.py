"""平台识别

所有按操作系统分支的逻辑（generators / osSpecificVars / excludeOS / build 条目）
都查询这里返回的 Platform 枚举，不再散落字符串比较。
"""

from __future__ import annotations

import logging
import os
import sys
from enum import Enum

from samurai.core.exceptions import ManifestError, UnsupportedPlatformError
from samurai.utils.shell import CommandExecutor, get_executor

logger = logging.getLogger(__name__)


class Platform(str, Enum):
    """平台标识（取值即清单中 os 字段的写法）"""

    WINDOWS = "win"
    LINUX = "linux"
    MACOS = "macos"
    FREEBSD = "freebsd"
    UNIX = "unix"

    @property
    def separator(self) -> str:
        return "\\" if self is Platform.WINDOWS else "/"

    @classmethod
    def parse(cls, value: str) -> Platform:
        """解析清单中的 os 字符串"""
        key = value.strip().lower()
        if key in _ALIASES:
            return _ALIASES[key]
        try:
            return cls(key)
        except ValueError:
            raise ManifestError(
                f"未知的 os 取值: '{value}'，"
                f"可选: {', '.join(p.value for p in cls)}"
            ) from None


_ALIASES = {
    "windows": Platform.WINDOWS,
    "darwin": Platform.MACOS,
    "osx": Platform.MACOS,
}

_UNAME_MAP = {
    "linux": Platform.LINUX,
    "darwin": Platform.MACOS,
    "freebsd": Platform.FREEBSD,
}


def resolve_current_platform(executor: CommandExecutor | None = None) -> Platform:
    """识别当前平台

    Windows / macOS 直接由解释器判断；其余 POSIX 系统调用 uname 区分。
    无法识别时抛 UnsupportedPlatformError（致命）。
    """
    if os.name == "nt" or sys.platform.startswith(("win32", "cygwin")):
        return Platform.WINDOWS
    if sys.platform == "darwin":
        return Platform.MACOS
    if os.name == "posix":
        return _detect_unix_name(executor or get_executor())
    raise UnsupportedPlatformError(f"不支持的平台: {sys.platform}")


def _detect_unix_name(executor: CommandExecutor) -> Platform:
    r = executor.execute(["uname"])
    if not r.success:
        raise UnsupportedPlatformError(
            f"uname 执行失败 (rc={r.returncode}): {r.stderr[:200]}"
        )
    uname = r.stdout.strip().lower()
    platform = _UNAME_MAP.get(uname, Platform.UNIX)
    logger.debug("uname=%s -> %s", uname, platform.value)
    return platform
