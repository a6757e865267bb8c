"""统一异常体系

所有业务异常继承 SamuraiError。
CLI 层据此区分进程级致命错误（清单/平台）与单包可恢复错误（拉取/执行）。
"""

from __future__ import annotations


class SamuraiError(Exception):
    """框架基础异常"""

    code: str = "UNKNOWN"

    def __init__(self, message: str) -> None:
        super().__init__(message)


class ManifestError(SamuraiError):
    """清单文件缺失、无法解析或内容无效"""

    code = "MANIFEST_ERROR"


class UnsupportedSourceError(ManifestError):
    """source.type 不是 git / archive / file"""

    code = "UNSUPPORTED_SOURCE"


class UnsupportedArchiveError(ManifestError):
    """归档文件扩展名不在支持列表中"""

    code = "UNSUPPORTED_ARCHIVE"


class UnsupportedPlatformError(SamuraiError):
    """当前平台无法识别，或平台相关配置中没有匹配项"""

    code = "UNSUPPORTED_PLATFORM"


class ConfigError(SamuraiError):
    """配置形状错误（必填字段缺失、要求相对路径却给了绝对路径等）"""

    code = "CONFIG_ERROR"


class FetchError(SamuraiError):
    """依赖包拉取失败"""

    code = "FETCH_ERROR"


class ExecutionError(SamuraiError):
    """外部命令返回非零退出码"""

    code = "EXECUTION_ERROR"


class ValidationError(SamuraiError, ValueError):
    """输入数据校验失败"""

    code = "VALIDATION_ERROR"

    def __init__(self, message: str, details: list[str] | None = None) -> None:
        super().__init__(message)
        self.details = details or []
