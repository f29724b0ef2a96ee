"""格式转换模块。

在两种容器格式之间转换图片，不做大小约束。
"""

from ..models.constants import get_format_alias
from ..utils.logging_helpers import get_logger
from .formats import FormatProcessor, decode_image, encode_image, get_save_parameters


logger = get_logger()


class FormatConverter:
    """格式转换器

    解码后按目标格式的默认参数重新编码，像素尺寸保持不变。
    """

    def __init__(self, format_processor: FormatProcessor | None = None) -> None:
        self.format_processor = format_processor or FormatProcessor()

    def convert(
        self,
        data: bytes,
        source_format: str,
        target_format: str,
        filename: str = "<bytes>",
    ) -> bytes:
        """转换图片格式

        Args:
            data: 源图片字节
            source_format: 源格式
            target_format: 目标格式
            filename: 文件名，仅用于日志和错误信息

        Returns:
            bytes: 目标格式的图片字节

        Raises:
            DecodeError: 输入不是有效的源格式数据
            EncodeError: 目标格式编码失败
        """
        target_format = get_format_alias(target_format)

        with decode_image(data, source_format, filename) as img:
            prepared = self.format_processor.prepare_for_format(img, target_format)
            params = get_save_parameters(target_format, img)
            output = encode_image(prepared, target_format, **params)

        logger.debug(
            f"转换 {filename}: {get_format_alias(source_format)} → {target_format}, "
            f"{len(data)} → {len(output)} 字节"
        )
        return output
