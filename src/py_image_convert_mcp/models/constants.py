"""图像转换相关常量定义。

包含转换模式表以及格式到扩展名、MIME 类型的映射。
"""

from dataclasses import dataclass
from enum import Enum
from typing import Final


class ConversionMode(str, Enum):
    """转换模式枚举"""

    WEBP_TO_PNG = "webp-to-png"
    PNG_TO_WEBP = "png-to-webp"
    PNG_OPTIMIZE = "png-optimize"
    JPEG_OPTIMIZE = "jpeg-optimize"


@dataclass(frozen=True)
class ModeSpec:
    """单个转换模式的格式约定"""

    source_format: str
    target_format: str
    accepted_extensions: tuple[str, ...]
    is_optimize: bool = False

    def accepts(self, filename: str) -> bool:
        """检查文件名扩展名是否被该模式接受"""
        return filename.lower().endswith(self.accepted_extensions)


MODE_SPECS: Final[dict[ConversionMode, ModeSpec]] = {
    ConversionMode.WEBP_TO_PNG: ModeSpec("WEBP", "PNG", (".webp",)),
    ConversionMode.PNG_TO_WEBP: ModeSpec("PNG", "WEBP", (".png",)),
    ConversionMode.PNG_OPTIMIZE: ModeSpec("PNG", "PNG", (".png",), is_optimize=True),
    ConversionMode.JPEG_OPTIMIZE: ModeSpec(
        "JPEG", "JPEG", (".jpg", ".jpeg"), is_optimize=True
    ),
}


class ImageFormats:
    """本项目涉及的图像格式信息"""

    # 用户友好的别名
    ALIASES: Final[dict[str, str]] = {
        "JPG": "JPEG",
    }

    PREFERRED_EXTENSIONS: Final[dict[str, str]] = {
        "JPEG": ".jpg",
        "PNG": ".png",
        "WEBP": ".webp",
    }

    TRANSPARENCY_FORMATS: Final[set[str]] = {"PNG", "WEBP"}
    OPTIMIZABLE_FORMATS: Final[set[str]] = {"PNG", "JPEG"}

    @classmethod
    def get_mime_type(cls, format_name: str) -> str:
        """获取 MIME 类型"""
        return f"image/{format_name.lower()}"

    @classmethod
    def get_extension(cls, format_name: str) -> str:
        """获取首选扩展名"""
        return cls.PREFERRED_EXTENSIONS.get(format_name, f".{format_name.lower()}")


# 便捷访问函数
def get_mode_spec(mode: ConversionMode | str) -> ModeSpec:
    """获取转换模式对应的格式约定，支持枚举或字符串值"""
    return MODE_SPECS[ConversionMode(mode)]


def get_format_alias(format_str: str) -> str:
    """获取格式的标准名称"""
    format_upper = format_str.upper()
    return ImageFormats.ALIASES.get(format_upper, format_upper)


def get_mime_type(format_str: str) -> str:
    """获取格式的MIME类型"""
    return ImageFormats.get_mime_type(get_format_alias(format_str))


def get_extension(format_str: str) -> str:
    """获取格式的首选扩展名"""
    return ImageFormats.get_extension(get_format_alias(format_str))


def supports_transparency(format_str: str) -> bool:
    """检查格式是否支持透明度"""
    return get_format_alias(format_str) in ImageFormats.TRANSPARENCY_FORMATS
