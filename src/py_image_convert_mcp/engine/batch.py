"""批量处理器模块。

按输入顺序逐个处理转换请求，隔离单项失败并报告整数百分比进度。
"""

from collections.abc import Callable, Sequence

from ..core.conversion_engine import process_request
from ..core.optimizer import SizeOptimizer
from ..core.transcoder import FormatConverter
from ..models.conversion_request import ConversionRequest
from ..models.conversion_result import BatchResult, ConversionItem
from ..utils.logging_helpers import get_logger


logger = get_logger()

ProgressCallback = Callable[[int], None]


class BatchPipeline:
    """批量转换流水线

    严格顺序执行，同一时刻只有一张解码后的图片驻留内存。
    单项失败记录为该条目的错误结果，不影响后续条目。
    """

    def __init__(
        self,
        converter: FormatConverter | None = None,
        optimizer: SizeOptimizer | None = None,
    ):
        """初始化批量流水线

        Args:
            converter: 格式转换器实例
            optimizer: 目标大小优化器实例
        """
        self.converter = converter or FormatConverter()
        self.optimizer = optimizer or SizeOptimizer()

    def run(
        self,
        requests: Sequence[ConversionRequest],
        progress_callback: ProgressCallback | None = None,
    ) -> BatchResult:
        """处理一批转换请求

        Args:
            requests: 转换请求列表
            progress_callback: 每个条目完成后以 0-100 的整数进度调用；
                回调抛出的异常会直接向上传播

        Returns:
            BatchResult: 条目顺序与输入一致的批量结果
        """
        total = len(requests)
        if total == 0:
            logger.info("批量转换: 没有需要处理的文件")
            return BatchResult(items=[])

        logger.info(f"开始批量转换 {total} 个文件")

        items: list[ConversionItem] = []
        for index, request in enumerate(requests):
            items.append(self.process_request(request, index))

            if progress_callback is not None:
                progress_callback(_progress_percent(len(items), total))

        result = BatchResult(items=items)
        if result.get_failure_count():
            logger.warning(
                f"批量转换完成，{result.get_failure_count()} 个文件失败: "
                f"{result.get_summary()}"
            )
        else:
            logger.info(f"批量转换完成: {result.get_summary()}")
        return result

    def process_request(
        self, request: ConversionRequest, index: int = 0
    ) -> ConversionItem:
        """处理单个请求，总是返回终态条目"""
        return process_request(
            request,
            index=index,
            converter=self.converter,
            optimizer=self.optimizer,
        )


def _progress_percent(done: int, total: int) -> int:
    """四舍五入的整数进度，只有最后一个条目完成时才为 100"""
    if done >= total:
        return 100
    return min(round(done * 100 / total), 99)
