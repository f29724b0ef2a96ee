"""数据模型包。

定义转换请求、转换结果和模式表等数据结构。
"""

from .constants import (
    MODE_SPECS,
    ConversionMode,
    ImageFormats,
    ModeSpec,
    get_extension,
    get_format_alias,
    get_mime_type,
    get_mode_spec,
    supports_transparency,
)
from .conversion_request import ConversionRequest
from .conversion_result import (
    ArchiveEntry,
    BatchResult,
    ConversionFailure,
    ConversionItem,
    ConversionOutcome,
    ConversionSuccess,
    ItemStatus,
    OptimizationResult,
)


__all__ = [
    "MODE_SPECS",
    "ArchiveEntry",
    "BatchResult",
    "ConversionFailure",
    "ConversionItem",
    "ConversionMode",
    "ConversionOutcome",
    "ConversionRequest",
    "ConversionSuccess",
    "ImageFormats",
    "ItemStatus",
    "ModeSpec",
    "OptimizationResult",
    "get_extension",
    "get_format_alias",
    "get_mime_type",
    "get_mode_spec",
    "supports_transparency",
]
