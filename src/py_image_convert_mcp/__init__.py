"""Python 图像格式转换库。

基于 Pillow 的 WebP/PNG 互转与 PNG/JPEG 目标大小压缩，全部在内存中完成。
"""

__version__ = "0.1.0"
__author__ = "crper"
__description__ = "图像格式转换与目标大小压缩库，基于 Pillow"

# 核心功能导出
from .converter import ImageConverter, convert_images
from .models.constants import ConversionMode
from .models.conversion_request import ConversionRequest
from .models.conversion_result import BatchResult, ConversionItem


__all__ = [
    "BatchResult",
    "ConversionItem",
    "ConversionMode",
    "ConversionRequest",
    "ImageConverter",
    "convert_images",
    "get_version",
]


def get_version() -> str:
    """获取版本号。"""
    return __version__
