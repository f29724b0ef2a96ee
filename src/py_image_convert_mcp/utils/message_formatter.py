"""消息格式化工具模块。

提供统一的错误消息、成功消息格式化功能。
"""

from pathlib import Path
from typing import Any


class MessageFormatter:
    """统一的消息格式化器"""

    @staticmethod
    def file_not_found(file_path: str | Path) -> str:
        """文件不存在错误消息"""
        return f"文件不存在: {file_path}"

    @staticmethod
    def empty_input(filename: str) -> str:
        """空输入错误消息"""
        return f"输入数据为空: {filename}"

    @staticmethod
    def format_mismatch(filename: str, expected: str, actual: str | None) -> str:
        """格式不匹配错误消息"""
        return f"格式不匹配 [{filename}]: 期望 {expected}，实际为 {actual or '未知'}"

    @staticmethod
    def operation_failed(
        operation: str, target: str | Path, error: Exception | None = None
    ) -> str:
        """操作失败消息"""
        msg = f"{operation}失败: {target}"
        if error:
            msg += f" - {error}"
        return msg

    @staticmethod
    def validation_error(field: str, value: Any, reason: str | None = None) -> str:
        """参数验证错误消息"""
        msg = f"参数验证失败 - {field}: {value}"
        if reason:
            msg += f" ({reason})"
        return msg

    @staticmethod
    def format_error(operation: str, target: str | Path, error: Exception) -> str:
        """格式化通用错误消息"""
        return f"{operation}失败 [{target}]: {error}"

    @staticmethod
    def size_constraint_unmet(
        filename: str, actual_size: int, target_size: int, level: int
    ) -> str:
        """目标大小未达成的提示消息"""
        return (
            f"无法将 {filename} 压缩到 {target_size} 字节以内，"
            f"已使用最低质量 {level}（{actual_size} 字节）"
        )


# 便捷函数
def format_file_error(operation: str, filename: str | Path, error: Exception) -> str:
    """格式化文件操作错误消息"""
    return MessageFormatter.format_error(operation, filename, error)


def format_validation_error(field: str, value: Any, expected: str | None = None) -> str:
    """格式化验证错误消息"""
    reason = f"期望: {expected}" if expected else None
    return MessageFormatter.validation_error(field, value, reason)
