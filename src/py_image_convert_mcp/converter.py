"""图像转换器接口。

基于转换流水线的简洁用户接口，支持字节与文件路径两种入口以及结果打包。
"""

from collections.abc import Sequence
from pathlib import Path

from .config import get_config
from .engine.archive import ArchiveBuilder
from .engine.batch import BatchPipeline, ProgressCallback
from .engine.requests import RequestBuilder
from .exceptions import ConversionError, ErrorHandler, ValidationError
from .models.constants import ConversionMode
from .models.conversion_result import BatchResult, ConversionItem, ItemStatus
from .utils.logging_helpers import get_logger
from .utils.message_formatter import MessageFormatter


logger = get_logger()


class ImageConverter:
    """图像转换器

    提供单个与批量转换接口。单项转换错误记录在返回条目中；
    整批上传校验失败和打包失败以异常形式抛出。
    """

    def __init__(
        self,
        request_builder: RequestBuilder | None = None,
        pipeline: BatchPipeline | None = None,
        archive_builder: ArchiveBuilder | None = None,
    ):
        self.request_builder = request_builder or RequestBuilder()
        self.pipeline = pipeline or BatchPipeline()
        self.archive_builder = archive_builder or ArchiveBuilder()

        logger.debug("初始化图像转换器")

    def convert_bytes(
        self,
        data: bytes,
        filename: str,
        mode: ConversionMode | str,
        target_size_kb: int | None = None,
        request_id: str | None = None,
    ) -> ConversionItem:
        """转换内存中的单个图片

        Args:
            data: 原始文件字节
            filename: 原始文件名
            mode: 转换模式
            target_size_kb: 目标大小（KB），优化模式省略时使用配置默认值
            request_id: 调用方指定的标识

        Returns:
            ConversionItem: completed 或 error 状态的条目

        Examples:
            >>> converter = ImageConverter()
            >>> item = converter.convert_bytes(data, "photo.webp", "webp-to-png")
            >>> item.output_name
            'photo.png'
        """
        try:
            request = self.request_builder.build(
                data=data,
                filename=filename,
                mode=mode,
                target_size_kb=self.request_builder.resolve_target_size(
                    mode, target_size_kb
                ),
                request_id=request_id,
            )
        except ConversionError as e:
            return self._failed_item(e, filename, request_id or "0")

        return self.pipeline.process_request(request)

    def convert_file(
        self,
        input_path: str | Path,
        mode: ConversionMode | str,
        target_size_kb: int | None = None,
        output_path: str | Path | None = None,
    ) -> ConversionItem:
        """转换单个文件

        Args:
            input_path: 输入文件路径
            mode: 转换模式
            target_size_kb: 目标大小（KB）
            output_path: 输出路径；为已存在的目录时写入该目录，
                None 时只返回结果不写盘

        Returns:
            ConversionItem: 转换条目
        """
        input_path = Path(input_path)

        try:
            request = self.request_builder.build_from_path(
                input_path,
                mode,
                self.request_builder.resolve_target_size(mode, target_size_kb),
            )
        except ConversionError as e:
            return self._failed_item(e, input_path.name, "0")

        item = self.pipeline.process_request(request)
        if output_path is not None and item.status == ItemStatus.COMPLETED:
            self._write_output(item, Path(output_path))
        return item

    def convert_files(
        self,
        input_paths: Sequence[str | Path],
        mode: ConversionMode | str,
        target_size_kb: int | None = None,
        progress_callback: ProgressCallback | None = None,
    ) -> BatchResult:
        """批量转换文件

        先对整批执行上传校验（数量、扩展名、大小），通过后按顺序转换。

        Raises:
            ValidationError: 文件不存在或上传校验失败
        """
        paths = [Path(p) for p in input_paths]

        missing = [p for p in paths if not p.is_file()]
        if missing:
            raise ValidationError(
                "; ".join(MessageFormatter.file_not_found(p) for p in missing)
            )

        self.validate_files(paths, mode)
        target = self.request_builder.resolve_target_size(mode, target_size_kb)

        requests = [
            self.request_builder.build_from_path(path, mode, target, str(index))
            for index, path in enumerate(paths)
        ]
        return self.pipeline.run(requests, progress_callback)

    def validate_files(
        self, input_paths: Sequence[str | Path], mode: ConversionMode | str
    ) -> None:
        """按文件路径执行上传校验"""
        files = [(Path(p).name, Path(p).stat().st_size) for p in input_paths]
        self.request_builder.validate_files(files, mode)

    def build_archive(self, batch: BatchResult) -> bytes:
        """将批量结果中成功的输出打包为 ZIP 字节"""
        return self.archive_builder.build_from_batch(batch)

    def save_archive(
        self, batch: BatchResult, output_path: str | Path | None = None
    ) -> Path:
        """将成功的输出打包并保存

        Args:
            batch: 批量结果
            output_path: 压缩包路径；为目录、无扩展名的路径或 None 时
                视为目录，使用配置中的默认文件名

        Returns:
            Path: 保存的压缩包路径
        """
        archive_name = get_config().archive.ARCHIVE_NAME
        match output_path:
            case None:
                path = Path.cwd() / archive_name
            case p if Path(p).is_dir() or not Path(p).suffix:
                path = Path(p) / archive_name
            case p:
                path = Path(p)

        return self.archive_builder.write(batch.to_archive_entries(), path)

    def _write_output(self, item: ConversionItem, output_path: Path) -> Path:
        if output_path.is_dir():
            output_path = output_path / item.output_name

        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            output_path.write_bytes(item.output_bytes)
        except OSError as e:
            raise ConversionError(
                MessageFormatter.operation_failed("写入输出文件", output_path, e),
                item.name,
            ) from e

        logger.info(f"已保存: {output_path}")
        return output_path

    @staticmethod
    def _failed_item(
        error: ConversionError, filename: str, item_id: str
    ) -> ConversionItem:
        failure = ErrorHandler.handle_conversion_error(error, filename, "请求构建")
        return ConversionItem(
            id=item_id, name=filename, status=ItemStatus.ERROR, outcome=failure
        )


# 便捷函数


def convert_images(
    input_paths: Sequence[str | Path],
    mode: ConversionMode | str,
    target_size_kb: int | None = None,
    progress_callback: ProgressCallback | None = None,
) -> BatchResult:
    """便捷的批量转换函数

    Examples:
        >>> result = convert_images(["a.png", "b.png"], "png-optimize", 50)
        >>> print(result.get_summary())
    """
    return ImageConverter().convert_files(
        input_paths, mode, target_size_kb, progress_callback
    )
