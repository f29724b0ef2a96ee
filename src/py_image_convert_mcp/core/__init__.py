"""核心模块包。

图像解码、编码、格式转换和目标大小优化。
"""

from .conversion_engine import process_request
from .formats import FormatProcessor, decode_image, encode_image
from .optimizer import SizeOptimizer
from .transcoder import FormatConverter


__all__ = [
    "FormatConverter",
    "FormatProcessor",
    "SizeOptimizer",
    "decode_image",
    "encode_image",
    "process_request",
]
