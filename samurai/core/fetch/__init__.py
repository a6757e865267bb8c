"""依赖包拉取策略

- archive.py: 归档格式识别与解压
- sources.py: Git / Archive / File 三种来源适配器
"""

from samurai.core.fetch.archive import SUPPORTED_EXTENSIONS, archive_extension
from samurai.core.fetch.sources import (
    ArchiveSource,
    Fetcher,
    FileSource,
    GitSource,
    get_fetcher,
)

__all__ = [
    "SUPPORTED_EXTENSIONS",
    "archive_extension",
    "ArchiveSource",
    "Fetcher",
    "FileSource",
    "GitSource",
    "get_fetcher",
]
