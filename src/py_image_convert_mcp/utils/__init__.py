"""工具模块包。

提供纯工具函数，不包含业务逻辑。
"""

# 从文件助手模块导入
from .file_helpers import find_image_files

# 从日志工具模块导入
from .logging_helpers import get_logger, setup_logging

# 从消息格式化模块导入
from .message_formatter import (
    MessageFormatter,
    format_file_error,
    format_validation_error,
)

# 从命名助手模块导入
from .naming_helpers import FileNamingStrategy, deduplicate_names


__all__ = [
    "FileNamingStrategy",
    "MessageFormatter",
    "deduplicate_names",
    "find_image_files",
    "format_file_error",
    "format_validation_error",
    "get_logger",
    "setup_logging",
]
