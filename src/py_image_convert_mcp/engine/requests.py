"""请求构建器模块。

统一的转换请求构建逻辑，集成参数验证与上传校验功能。
"""

import logging
from collections.abc import Iterable
from pathlib import Path

from pydantic import ValidationError as PydanticValidationError

from ..config import get_config
from ..exceptions import ValidationError
from ..models.constants import ConversionMode, get_mode_spec
from ..models.conversion_request import ConversionRequest
from ..utils.message_formatter import MessageFormatter


logger = logging.getLogger(__name__)


class RequestBuilder:
    """转换请求构建器

    提供统一的请求构建接口和参数验证，pydantic 校验错误统一转换为
    本项目的 ValidationError。
    """

    def __init__(
        self,
        max_files: int | None = None,
        max_file_size_mb: float | None = None,
    ):
        """初始化请求构建器

        Args:
            max_files: 单批最多文件数（None时使用配置默认值）
            max_file_size_mb: 单个文件最大体积（None时使用配置默认值）
        """
        processing = get_config().processing
        self.max_files = max_files or processing.MAX_FILES
        self.max_file_size_mb = max_file_size_mb or processing.MAX_FILE_SIZE_MB

    def build(
        self,
        data: bytes,
        filename: str,
        mode: ConversionMode | str,
        target_size_kb: int | None = None,
        request_id: str | None = None,
    ) -> ConversionRequest:
        """构建转换请求

        Args:
            data: 原始文件字节
            filename: 原始文件名
            mode: 转换模式（枚举或字符串值）
            target_size_kb: 目标大小（KB），优化模式必填
            request_id: 调用方指定的标识

        Returns:
            ConversionRequest: 构建的请求对象

        Raises:
            ValidationError: 参数验证失败
        """
        try:
            return ConversionRequest(
                data=data,
                filename=filename,
                mode=mode,
                target_size_kb=target_size_kb,
                request_id=request_id,
            )
        except PydanticValidationError as e:
            raise ValidationError(self._format_validation_error(e), filename) from e

    def build_from_path(
        self,
        input_path: str | Path,
        mode: ConversionMode | str,
        target_size_kb: int | None = None,
        request_id: str | None = None,
    ) -> ConversionRequest:
        """读取文件并构建转换请求"""
        input_path = Path(input_path)
        if not input_path.is_file():
            raise ValidationError(
                MessageFormatter.file_not_found(input_path), input_path.name
            )

        try:
            data = input_path.read_bytes()
        except OSError as e:
            raise ValidationError(
                MessageFormatter.operation_failed("读取文件", input_path, e),
                input_path.name,
            ) from e

        return self.build(
            data=data,
            filename=input_path.name,
            mode=mode,
            target_size_kb=target_size_kb,
            request_id=request_id,
        )

    def validate_files(
        self,
        files: Iterable[tuple[str, int]],
        mode: ConversionMode | str,
    ) -> None:
        """上传校验：文件数量、扩展名与文件大小

        Args:
            files: (文件名, 字节数) 序列
            mode: 转换模式

        Raises:
            ValidationError: 任意一项校验失败
        """
        spec = self._get_spec(mode)
        files = list(files)

        if len(files) > self.max_files:
            raise ValidationError(
                f"一次最多处理 {self.max_files} 个文件，当前: {len(files)}"
            )

        invalid = [name for name, _ in files if not spec.accepts(name)]
        if invalid:
            raise ValidationError(
                f"{ConversionMode(mode).value} 模式只接受 "
                f"{', '.join(spec.accepted_extensions)} 文件: {', '.join(invalid)}"
            )

        max_bytes = int(self.max_file_size_mb * 1024 * 1024)
        too_large = [name for name, size in files if size > max_bytes]
        if too_large:
            raise ValidationError(
                f"文件超过 {self.max_file_size_mb:g}MB 限制: {', '.join(too_large)}"
            )

        logger.debug(
            f"上传校验通过: {len(files)} 个文件, 模式 {ConversionMode(mode).value}"
        )

    def resolve_target_size(
        self, mode: ConversionMode | str, target_size_kb: int | None
    ) -> int | None:
        """优化模式未指定目标大小时使用配置默认值"""
        spec = self._get_spec(mode)
        if not spec.is_optimize:
            return None
        if target_size_kb is None:
            return get_config().conversion.DEFAULT_TARGET_SIZE_KB
        return target_size_kb

    @staticmethod
    def _get_spec(mode: ConversionMode | str):
        try:
            return get_mode_spec(mode)
        except ValueError as e:
            available = ", ".join(m.value for m in ConversionMode)
            raise ValidationError(
                MessageFormatter.validation_error("mode", mode, f"可用模式: {available}")
            ) from e

    @staticmethod
    def _format_validation_error(error: PydanticValidationError) -> str:
        """格式化验证错误"""
        messages = []
        for err in error.errors():
            field = ".".join(str(loc) for loc in err["loc"])
            msg = err["msg"]
            if field:
                messages.append(f"{field}: {msg}")
            else:
                messages.append(msg)
        return "; ".join(messages)
