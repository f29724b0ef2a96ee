"""图像转换异常处理模块。

定义统一的异常类和错误处理机制，包含现代化的异常处理装饰器。
"""

from collections.abc import Callable
from functools import wraps
from typing import TypeVar

from PIL.Image import DecompressionBombError, UnidentifiedImageError

from .models.conversion_result import ConversionFailure
from .utils.logging_helpers import get_logger
from .utils.message_formatter import MessageFormatter


logger = get_logger()
T = TypeVar("T")


# 统一的异常类型
class ConversionError(Exception):
    """转换相关错误基类"""

    error_type = "processing"

    def __init__(self, message: str, filename: str | None = None):
        super().__init__(message)
        self.message = message
        self.filename = filename


class ValidationError(ConversionError):
    """参数验证错误 - 统一的验证错误类型"""

    error_type = "validation"


class DecodeError(ConversionError):
    """输入字节无法按指定格式解码"""

    error_type = "decode"


class EncodeError(ConversionError):
    """目标格式编码失败"""

    error_type = "encode"


class UnsupportedFormatError(ValidationError):
    """不支持的格式错误"""


class ArchiveError(ConversionError):
    """打包过程中的 I/O 或编码错误"""

    error_type = "archive"


# 现代化异常处理装饰器
def handle_image_errors(
    operation_name: str = "图像处理",
    error_cls: type[ConversionError] = ConversionError,
):
    """统一的图像处理异常处理装饰器

    将 Pillow 和 I/O 异常转换为指定的 ConversionError 子类，
    已经是 ConversionError 的异常原样抛出。

    Args:
        operation_name: 操作名称，用于日志记录
        error_cls: 转换后的异常类型
    """

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @wraps(func)
        def wrapper(*args, **kwargs) -> T:
            try:
                return func(*args, **kwargs)
            except ConversionError:
                raise
            except UnidentifiedImageError as e:
                logger.debug(f"{operation_name} - 无法识别图像格式: {e}")
                raise error_cls(f"无法识别的图像数据: {e}") from e
            except DecompressionBombError as e:
                logger.warning(f"{operation_name} - 图像过大: {e}")
                raise error_cls(f"图像尺寸过大，可能存在安全风险: {e}") from e
            except (OSError, SyntaxError) as e:
                logger.debug(f"{operation_name} - 数据损坏或编解码失败: {e}")
                raise error_cls(f"{operation_name}失败: {e}") from e
            except (ValueError, TypeError, KeyError) as e:
                logger.debug(f"{operation_name} - 参数或像素格式错误: {e}")
                raise error_cls(f"{operation_name}失败: {e}") from e

        return wrapper

    return decorator


class ErrorHandler:
    """统一错误处理器

    提供标准化的错误处理和日志记录功能。
    """

    @staticmethod
    def _log_error(
        operation: str, filename: str, error: Exception, level: str = "error"
    ) -> None:
        """标准化的错误日志记录

        Args:
            operation: 操作名称（如"格式转换"、"目标大小优化"等）
            filename: 相关文件名
            error: 异常对象
            level: 日志级别 ("error", "warning", "debug")
        """
        log_msg = MessageFormatter.format_error(operation, filename, error)
        getattr(logger, level, logger.error)(log_msg)

    @staticmethod
    def handle_with_context(
        error: Exception,
        filename: str,
        operation: str = "未知操作",
        error_type: str = "processing",
        log_level: str = "error",
    ) -> ConversionFailure:
        """记录日志并创建标准化的失败结果

        Args:
            error: 异常对象
            filename: 相关文件名
            operation: 操作名称
            error_type: 失败结果中的错误类型
            log_level: 日志级别 ("error", "warning", "debug")

        Returns:
            ConversionFailure: 标准化的失败结果
        """
        ErrorHandler._log_error(operation, filename, error, log_level)
        message = error.message if isinstance(error, ConversionError) else str(error)
        return ConversionFailure(
            message=f"{operation}: {message}", error_type=error_type
        )

    @staticmethod
    def handle_conversion_error(
        error: Exception, filename: str, operation: str = "图像转换"
    ) -> ConversionFailure:
        """统一的转换错误处理，使用 match-case 分发"""
        match error:
            case ValidationError() as ve:
                return ErrorHandler.handle_with_context(
                    ve, filename, f"{operation} - 参数验证", ve.error_type, "warning"
                )
            case DecodeError() as de:
                return ErrorHandler.handle_with_context(
                    de, filename, f"{operation} - 解码", de.error_type, "warning"
                )
            case EncodeError() as ee:
                return ErrorHandler.handle_with_context(
                    ee, filename, f"{operation} - 编码", ee.error_type, "error"
                )
            case ConversionError() as ce:
                return ErrorHandler.handle_with_context(
                    ce, filename, operation, ce.error_type, "error"
                )
            case MemoryError() as me:
                return ErrorHandler.handle_with_context(
                    me, filename, f"{operation} - 内存不足", "processing", "error"
                )
            case _:
                return ErrorHandler.handle_with_context(
                    error, filename, operation, "processing", "error"
                )
