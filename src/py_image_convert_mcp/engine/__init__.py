"""图像转换处理引擎模块。

包含批量流水线、打包和请求构建等处理逻辑。
"""

from .archive import ArchiveBuilder
from .batch import BatchPipeline
from .requests import RequestBuilder


__all__ = [
    "ArchiveBuilder",
    "BatchPipeline",
    "RequestBuilder",
]
