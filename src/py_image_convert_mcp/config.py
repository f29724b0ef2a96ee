"""统一配置管理模块。

提供应用程序的全局配置管理，包括默认值、环境变量支持等。
"""

import os
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class ConversionDefaults:
    """转换与压缩相关的默认配置"""

    # 格式转换默认质量
    JPEG_QUALITY: int = 85
    WEBP_QUALITY: int = 75
    WEBP_METHOD: int = 6
    PNG_COMPRESS_LEVEL: int = 6

    # 目标大小搜索的质量阶梯
    JPEG_MAX_LEVEL: int = 95
    JPEG_MIN_LEVEL: int = 5
    PNG_MAX_LEVEL: int = 100  # 100 表示无损全彩色
    PNG_MIN_LEVEL: int = 4
    COARSE_STEP: int = 10

    # 优化模式下未指定目标时的默认值（KB）
    DEFAULT_TARGET_SIZE_KB: int = 100

    def get_format_defaults(self, format_name: str) -> dict[str, Any]:
        """获取格式特定的默认参数"""
        defaults = {
            "JPEG": {
                "quality": self.JPEG_QUALITY,
                "optimize": True,
            },
            "WEBP": {
                "quality": self.WEBP_QUALITY,
                "method": self.WEBP_METHOD,
                "lossless": False,
            },
            "PNG": {
                "compress_level": self.PNG_COMPRESS_LEVEL,
                "optimize": True,
            },
        }
        return defaults.get(format_name, {})

    def get_level_range(self, format_name: str) -> tuple[int, int]:
        """获取格式的质量阶梯范围 (最高, 最低)"""
        if format_name == "PNG":
            return self.PNG_MAX_LEVEL, self.PNG_MIN_LEVEL
        return self.JPEG_MAX_LEVEL, self.JPEG_MIN_LEVEL


@dataclass(frozen=True)
class ProcessingDefaults:
    """处理相关的默认配置"""

    # 上传限制
    MAX_FILES: int = 20
    MAX_FILE_SIZE_MB: float = 10.0


@dataclass(frozen=True)
class ArchiveDefaults:
    """打包相关的默认配置"""

    ARCHIVE_NAME: str = "converted_images.zip"
    COMPRESS_LEVEL: int = 6


@dataclass(frozen=True)
class LoggingDefaults:
    """日志相关的默认配置"""

    # 日志级别
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    # 文件日志
    ENABLE_FILE_LOGGING: bool = False
    LOG_FILE_PATH: str = "py_image_convert.log"
    LOG_FILE_MAX_SIZE: int = 10 * 1024 * 1024  # 10MB
    LOG_FILE_BACKUP_COUNT: int = 5


class AppConfig:
    """应用程序配置管理器

    支持环境变量覆盖默认配置
    """

    def __init__(self):
        self.conversion = ConversionDefaults()
        self.processing = ProcessingDefaults()
        self.archive = ArchiveDefaults()
        self.logging = LoggingDefaults()

        # 从环境变量加载配置
        self._load_from_env()

    def _load_from_env(self):
        """从环境变量加载配置"""
        # 转换配置
        if webp_quality := os.getenv("IMGCONV_WEBP_QUALITY"):
            object.__setattr__(self.conversion, "WEBP_QUALITY", int(webp_quality))

        if png_level := os.getenv("IMGCONV_PNG_COMPRESS_LEVEL"):
            object.__setattr__(self.conversion, "PNG_COMPRESS_LEVEL", int(png_level))

        if target_kb := os.getenv("IMGCONV_DEFAULT_TARGET_KB"):
            object.__setattr__(
                self.conversion, "DEFAULT_TARGET_SIZE_KB", int(target_kb)
            )

        # 处理配置
        if max_files := os.getenv("IMGCONV_MAX_FILES"):
            object.__setattr__(self.processing, "MAX_FILES", int(max_files))

        # 日志配置
        if log_level := os.getenv("IMGCONV_LOG_LEVEL"):
            object.__setattr__(self.logging, "LOG_LEVEL", log_level.upper())

        if enable_file_log := os.getenv("IMGCONV_ENABLE_FILE_LOGGING"):
            object.__setattr__(
                self.logging,
                "ENABLE_FILE_LOGGING",
                enable_file_log.lower() in ("true", "1", "yes"),
            )


# 全局配置实例
config = AppConfig()


def get_config() -> AppConfig:
    """获取全局配置实例"""
    return config


def reset_config():
    """重置配置（主要用于测试）"""
    global config
    config = AppConfig()
