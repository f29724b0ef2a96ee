"""格式处理器模块。

图片解码、目标格式预处理与编码，所有操作都在内存中完成。
"""

from io import BytesIO
from typing import Any

from PIL import Image

from ..config import get_config
from ..exceptions import DecodeError, EncodeError, handle_image_errors
from ..models.constants import get_format_alias, supports_transparency
from ..utils.logging_helpers import get_logger
from ..utils.message_formatter import MessageFormatter


logger = get_logger()

# 不支持透明度的格式使用的合成背景色
FLATTEN_BACKGROUND = (255, 255, 255)

# 解码时视为同一格式的 Pillow 格式名
FORMAT_EQUIVALENTS = {"JPEG": {"JPEG", "MPO"}}


def has_alpha(img: Image.Image) -> bool:
    """检查图片是否携带透明信息"""
    return img.mode in ("RGBA", "LA", "PA") or (
        img.mode in ("P", "L", "RGB") and "transparency" in img.info
    )


@handle_image_errors("图像解码", DecodeError)
def decode_image(
    data: bytes, source_format: str, filename: str = "<bytes>"
) -> Image.Image:
    """按指定格式解码图片字节

    Args:
        data: 原始字节
        source_format: 期望的源格式，如 PNG / WEBP / JPEG
        filename: 文件名，仅用于错误信息

    Returns:
        Image.Image: 已完全载入像素数据的图片

    Raises:
        DecodeError: 空输入、无法识别、数据损坏或实际格式与期望不符
    """
    if not data:
        raise DecodeError(MessageFormatter.empty_input(filename), filename)

    expected = get_format_alias(source_format)
    img = Image.open(BytesIO(data))
    if img.format not in FORMAT_EQUIVALENTS.get(expected, {expected}):
        img.close()
        raise DecodeError(
            MessageFormatter.format_mismatch(filename, expected, img.format), filename
        )

    # 强制解码全部像素，截断或损坏的数据在这里暴露
    img.load()
    logger.debug(f"解码 {filename}: {img.format} {img.mode} {img.size}")
    return img


class FormatProcessor:
    """格式处理器 - 为目标格式准备像素布局"""

    def prepare_for_format(self, img: Image.Image, target_format: str) -> Image.Image:
        """为目标格式准备图片

        Args:
            img: PIL图片对象
            target_format: 目标格式

        Returns:
            Image.Image: 处理后的图片对象，尺寸与输入一致
        """
        target_format = get_format_alias(target_format)
        if has_alpha(img) and not supports_transparency(target_format):
            return self.flatten_alpha(img)

        match target_format:
            case "JPEG":
                return self._prepare_for_jpeg(img)
            case "PNG":
                return self._prepare_for_png(img)
            case "WEBP":
                return self._prepare_for_webp(img)
            case _:
                return img

    def flatten_alpha(self, img: Image.Image) -> Image.Image:
        """将透明图片合成到不透明白色背景上"""
        if img.mode != "RGBA":
            img = img.convert("RGBA")
        background = Image.new("RGB", img.size, FLATTEN_BACKGROUND)
        background.paste(img, mask=img.getchannel("A"))
        return background

    def _prepare_for_jpeg(self, img: Image.Image) -> Image.Image:
        """为JPEG格式准备图片，透明图片已在上一步合成到白色背景"""
        # JPEG 原生支持的模式保持不变
        if img.mode in ("RGB", "L", "CMYK"):
            return img

        if img.mode == "1":
            return img.convert("L")

        return img.convert("RGB")

    def _prepare_for_png(self, img: Image.Image) -> Image.Image:
        """为PNG格式准备图片，PNG支持透明度"""
        if img.mode in ("RGB", "RGBA", "L", "LA", "P", "1", "I", "I;16"):
            return img

        if img.mode == "CMYK":
            return img.convert("RGB")

        return img.convert("RGBA" if has_alpha(img) else "RGB")

    def _prepare_for_webp(self, img: Image.Image) -> Image.Image:
        """为WebP格式准备图片，WebP只支持RGB和RGBA"""
        if img.mode in ("RGB", "RGBA"):
            return img

        return img.convert("RGBA" if has_alpha(img) else "RGB")


def get_save_parameters(
    format_name: str, img: Image.Image | None = None
) -> dict[str, Any]:
    """获取无大小约束转换时的默认保存参数

    Args:
        format_name: 目标格式
        img: 源图片，用于携带 ICC 配置文件（可选）

    Returns:
        dict[str, Any]: 传给 Image.save 的参数（不含 format）
    """
    format_name = get_format_alias(format_name)
    params = dict(get_config().conversion.get_format_defaults(format_name))

    if format_name == "WEBP" and img is not None and has_alpha(img):
        # 透明通道保持无损
        params["alpha_quality"] = 100

    if img is not None and (icc := img.info.get("icc_profile")):
        params["icc_profile"] = icc

    return params


@handle_image_errors("图像编码", EncodeError)
def encode_image(img: Image.Image, format_name: str, **params: Any) -> bytes:
    """将图片编码为指定格式的字节

    JPEG 的 optimize 编码失败时，以同样的质量关闭 optimize 重新编码。

    Raises:
        EncodeError: 编码器拒绝像素布局或编码失败
    """
    format_name = get_format_alias(format_name)
    buffer = BytesIO()
    try:
        img.save(buffer, format=format_name, **params)
    except OSError as e:
        # Pillow 为 optimize 模式分配的输出缓冲区只有 w*h 字节，高细节图片会溢出
        if format_name != "JPEG" or not params.get("optimize"):
            raise
        logger.debug(f"JPEG optimize 编码失败，关闭 optimize 重试: {e}")
        buffer = BytesIO()
        img.save(buffer, format=format_name, **{**params, "optimize": False})
    return buffer.getvalue()
