"""图像格式转换 MCP 服务器。

提供格式转换与目标大小优化两个统一工具，以及转换模式查询。
"""

from pathlib import Path
from typing import Any

from fastmcp import FastMCP

from .converter import ImageConverter
from .exceptions import ConversionError
from .models.constants import MODE_SPECS, ConversionMode, get_mode_spec
from .models.conversion_result import BatchResult
from .utils.file_helpers import find_image_files
from .utils.logging_helpers import get_logger, setup_logging
from .utils.message_formatter import MessageFormatter


# MCP 服务器响应类型定义
MCPConversionResponse = dict[str, Any]
MCPModesResponse = dict[str, Any]


class MCPResponseBuilder:
    """MCP 服务器响应构建器，专门用于构建符合 MCP 协议的响应格式。"""

    @staticmethod
    def error(
        message: str,
        error_type: str = "general",
        details: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """构建错误结果。

        Args:
            message: 错误消息
            error_type: 错误类型
            details: 额外的错误详情

        Returns:
            dict: 标准化的错误响应
        """
        result = {
            "success": False,
            "error": message,
            "error_type": error_type,
        }

        if details:
            result["details"] = details

        return result

    @staticmethod
    def validation_error(message: str, field: str | None = None) -> dict[str, Any]:
        """构建验证错误结果。"""
        details = {"field": field} if field else None
        return MCPResponseBuilder.error(
            message=message,
            error_type="validation",
            details=details,
        )

    @staticmethod
    def file_error(message: str, file_path: str | None = None) -> dict[str, Any]:
        """构建文件相关错误结果。"""
        details = {"file_path": file_path} if file_path else None
        return MCPResponseBuilder.error(
            message=message,
            error_type="file",
            details=details,
        )

    @staticmethod
    def processing_error(message: str, operation: str | None = None) -> dict[str, Any]:
        """构建处理错误结果。"""
        details = {"operation": operation} if operation else None
        return MCPResponseBuilder.error(
            message=message,
            error_type="processing",
            details=details,
        )


logger = get_logger()

# 创建MCP应用
mcp: FastMCP[Any] = FastMCP("图像格式转换服务")

# 全局转换器实例
converter = ImageConverter()


# ============================================================================
# 转换工具
# ============================================================================


@mcp.tool()
def convert_images(
    input_paths: list[str] | str,
    mode: str,
    target_size_kb: int | None = None,
    output_path: str | None = None,
) -> MCPConversionResponse:
    """图像格式转换与目标大小优化

    Args:
        input_paths: 输入文件路径，或包含图片的目录（只取该模式接受的扩展名）
        mode: 转换模式：
            - "webp-to-png": WebP 转 PNG
            - "png-to-webp": PNG 转 WebP
            - "png-optimize": PNG 压缩到目标大小以内
            - "jpeg-optimize": JPEG 压缩到目标大小以内
        target_size_kb: 目标大小（KB），仅优化模式使用，省略时为 100
        output_path: 输出位置。只有一个输入时为输出文件或目录；
            多个输入时为 ZIP 路径或目录；省略时写入第一个输入所在目录下的
            converted 目录

    Returns:
        dict: 每个条目的结果（不含图片字节）以及输出文件路径

    使用场景:
        convert_images("photo.webp", "webp-to-png")
        convert_images(["a.png", "b.png"], "png-to-webp", output_path="out.zip")
        convert_images("photos/", "jpeg-optimize", target_size_kb=200)
    """
    try:
        spec = get_mode_spec(mode)
    except ValueError:
        available = ", ".join(m.value for m in ConversionMode)
        return MCPResponseBuilder.validation_error(
            MessageFormatter.validation_error("mode", mode, f"可用模式: {available}"),
            "mode",
        )

    paths = _expand_input_paths(input_paths, spec.accepted_extensions)
    if not paths:
        return MCPResponseBuilder.file_error(
            f"没有找到可转换的文件 ({', '.join(spec.accepted_extensions)})",
            str(input_paths),
        )

    missing = [p for p in paths if not p.exists()]
    if missing:
        return MCPResponseBuilder.file_error(
            MessageFormatter.file_not_found(missing[0]), str(missing[0])
        )

    try:
        batch = converter.convert_files(paths, mode, target_size_kb)
        saved = _save_outputs(batch, paths, output_path)
    except ConversionError as e:
        logger.error(MessageFormatter.operation_failed("图像转换", paths[0], e))
        if e.error_type == "validation":
            return MCPResponseBuilder.validation_error(e.message)
        return MCPResponseBuilder.processing_error(e.message, "图像转换")
    except Exception as e:
        logger.error(MessageFormatter.operation_failed("图像转换", paths[0], e))
        return MCPResponseBuilder.processing_error(
            MessageFormatter.operation_failed("图像转换", paths[0], e), "图像转换"
        )

    return {
        "success": batch.get_success_count() > 0,
        "mode": ConversionMode(mode).value,
        "output_path": str(saved) if saved else None,
        "total_files": batch.get_total_count(),
        "successful_files": batch.get_success_count(),
        "failed_files": batch.get_failure_count(),
        "summary": batch.get_summary(),
        "items": [item.to_dict() for item in batch.items],
    }


def _expand_input_paths(
    input_paths: list[str] | str, extensions: tuple[str, ...]
) -> list[Path]:
    """展开输入路径，目录替换为其中按名称排序的匹配文件"""
    if isinstance(input_paths, str):
        input_paths = [input_paths]

    paths: list[Path] = []
    for raw in input_paths:
        path = Path(raw)
        if path.is_dir():
            paths.extend(find_image_files(path, extensions))
        else:
            paths.append(path)
    return paths


def _save_outputs(
    batch: BatchResult, paths: list[Path], output_path: str | None
) -> Path | None:
    """单个输入写出转换后的文件，多个输入打包为 ZIP"""
    completed = batch.get_completed_items()
    if not completed:
        return None

    target = Path(output_path) if output_path else paths[0].parent / "converted"

    if len(paths) == 1:
        item = completed[0]
        if target.is_dir() or not target.suffix:
            target = target / item.output_name
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(item.output_bytes)
        logger.info(f"已保存: {target}")
        return target

    return converter.save_archive(batch, target)


# ============================================================================
# 模式查询工具
# ============================================================================


@mcp.tool()
def list_conversion_modes() -> MCPModesResponse:
    """列出支持的转换模式

    Returns:
        dict: 每种模式的源格式、目标格式、接受的扩展名以及是否需要目标大小
    """
    return {
        "success": True,
        "modes": [
            {
                "mode": mode.value,
                "source_format": spec.source_format,
                "target_format": spec.target_format,
                "accepted_extensions": list(spec.accepted_extensions),
                "requires_target_size": spec.is_optimize,
            }
            for mode, spec in MODE_SPECS.items()
        ],
    }


# ============================================================================
# 应用入口
# ============================================================================


def main() -> None:
    """启动 MCP 服务器"""
    setup_logging()
    logger.info("启动图像格式转换 MCP 服务器")
    mcp.run()


if __name__ == "__main__":
    main()
