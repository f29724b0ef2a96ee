"""转换引擎模块。

单个转换请求的统一处理入口，按模式分发到格式转换或目标大小优化。
"""

import time

from ..exceptions import ErrorHandler
from ..models.constants import get_mime_type
from ..models.conversion_request import ConversionRequest
from ..models.conversion_result import (
    ConversionItem,
    ConversionSuccess,
    ItemStatus,
)
from ..utils.logging_helpers import get_logger
from ..utils.naming_helpers import FileNamingStrategy
from .optimizer import SizeOptimizer
from .transcoder import FormatConverter


logger = get_logger()


def process_request(
    request: ConversionRequest,
    index: int = 0,
    converter: FormatConverter | None = None,
    optimizer: SizeOptimizer | None = None,
) -> ConversionItem:
    """处理单个转换请求。

    任何解码、编码或优化错误都记录在返回条目的失败结果中，不会抛出。

    Args:
        request: 转换请求
        index: 请求在批次中的序号，调用方未指定 id 时作为条目标识
        converter: 格式转换器实例
        optimizer: 目标大小优化器实例

    Returns:
        ConversionItem: 状态为 completed 或 error 的条目
    """
    item_id = request.request_id or str(index)

    try:
        outcome = _convert(
            request,
            converter or FormatConverter(),
            optimizer or SizeOptimizer(),
        )
        status = ItemStatus.COMPLETED
    except Exception as e:
        # 统一的异常处理，确保总是返回 ConversionItem
        outcome = ErrorHandler.handle_conversion_error(
            e, request.filename, "图像转换"
        )
        status = ItemStatus.ERROR

    return ConversionItem(
        id=item_id, name=request.filename, status=status, outcome=outcome
    )


def _convert(
    request: ConversionRequest,
    converter: FormatConverter,
    optimizer: SizeOptimizer,
) -> ConversionSuccess:
    """执行转换并计时，失败时抛出异常"""
    spec = request.spec
    start = time.perf_counter()

    if spec.is_optimize:
        optimized = optimizer.optimize(
            request.data,
            spec.source_format,
            request.target_size_kb,
            request.filename,
        )
        output_bytes = optimized.data
        quality_used: int | None = optimized.level
        constraint_met: bool | None = optimized.constraint_met
    else:
        output_bytes = converter.convert(
            request.data, spec.source_format, spec.target_format, request.filename
        )
        quality_used = None
        constraint_met = None

    elapsed_ms = (time.perf_counter() - start) * 1000

    logger.debug(
        f"{request.filename} [{request.mode.value}] 完成，耗时 {elapsed_ms:.1f} ms"
    )

    return ConversionSuccess(
        output_bytes=output_bytes,
        output_name=FileNamingStrategy.generate_output_name(
            request.filename, spec.target_format
        ),
        mime_type=get_mime_type(spec.target_format),
        elapsed_ms=elapsed_ms,
        output_format=spec.target_format,
        original_size=request.size,
        quality_used=quality_used,
        size_constraint_met=constraint_met,
    )
