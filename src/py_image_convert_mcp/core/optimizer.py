"""目标大小优化器。

在固定的质量阶梯上反复编码，找到满足字节上限的最高质量等级。

搜索分两步：先从最高等级按粗步长下降，直到第一个满足目标的等级；
再在它与上一个（不满足的）粗等级之间逐级下降细化。两步都按固定顺序
取第一个满足的等级，因此结果是确定的，目标越小选中的等级不会越高。
编码次数受阶梯长度限制，不依赖体积是否收敛。
"""

from typing import Any

from PIL import Image

from ..config import get_config
from ..exceptions import (
    EncodeError,
    UnsupportedFormatError,
    ValidationError,
    handle_image_errors,
)
from ..models.constants import ImageFormats, get_format_alias
from ..models.conversion_result import OptimizationResult
from ..utils.logging_helpers import get_logger
from ..utils.message_formatter import MessageFormatter
from .formats import FormatProcessor, decode_image, encode_image, has_alpha


logger = get_logger()


class SizeOptimizer:
    """目标大小优化器，支持 PNG 和 JPEG"""

    def __init__(
        self,
        coarse_step: int | None = None,
        level_ranges: dict[str, tuple[int, int]] | None = None,
        format_processor: FormatProcessor | None = None,
    ) -> None:
        """初始化优化器

        Args:
            coarse_step: 粗搜索步长（None时使用配置默认值）
            level_ranges: 各格式的 (最高, 最低) 等级（None时使用配置默认值）
            format_processor: 格式处理器实例
        """
        conversion = get_config().conversion
        self.coarse_step = coarse_step or conversion.COARSE_STEP
        self.level_ranges = level_ranges or {
            fmt: conversion.get_level_range(fmt)
            for fmt in ImageFormats.OPTIMIZABLE_FORMATS
        }
        self.format_processor = format_processor or FormatProcessor()

        if self.coarse_step < 1:
            raise ValidationError(
                f"coarse_step 必须大于 0，当前值: {self.coarse_step}"
            )
        for fmt, (max_level, min_level) in self.level_ranges.items():
            if not 1 <= min_level <= max_level <= 100:
                raise ValidationError(
                    f"{fmt} 等级范围无效: ({max_level}, {min_level})"
                )

    def levels_for(self, format_name: str) -> list[int]:
        """粗搜索等级序列：从最高等级按步长递减，最后一定是最低等级"""
        max_level, min_level = self._get_level_range(format_name)
        return list(range(max_level, min_level, -self.coarse_step)) + [min_level]

    def optimize(
        self,
        data: bytes,
        format_name: str,
        target_size_kb: int,
        filename: str = "<bytes>",
    ) -> OptimizationResult:
        """在同一格式内重新编码，使输出不超过目标大小

        Args:
            data: 源图片字节
            format_name: PNG 或 JPEG
            target_size_kb: 目标大小（KB）
            filename: 文件名，仅用于日志和错误信息

        Returns:
            OptimizationResult: 选中等级的编码结果；最低等级仍超出目标时
            返回最低等级的结果并将 constraint_met 置为 False

        Raises:
            ValidationError: 格式不支持或目标大小无效
            DecodeError: 输入不是有效的该格式数据
            EncodeError: 编码失败
        """
        format_name = get_format_alias(format_name)
        self._get_level_range(format_name)
        if target_size_kb is None or target_size_kb <= 0:
            raise ValidationError(
                MessageFormatter.validation_error(
                    "target_size_kb", target_size_kb, "必须为正整数"
                ),
                filename,
            )

        target_bytes = target_size_kb * 1024

        with decode_image(data, format_name, filename) as img:
            prepared = self.format_processor.prepare_for_format(img, format_name)
            extra = self._carry_metadata(img, format_name)
            result = self._search(prepared, format_name, target_bytes, extra)

        if result.constraint_met:
            logger.info(
                f"优化 {filename}: 等级 {result.level}, "
                f"{len(data)} → {result.size} 字节 "
                f"(目标 {target_bytes}, 尝试 {result.attempts} 次)"
            )
        else:
            logger.warning(
                MessageFormatter.size_constraint_unmet(
                    filename, result.size, target_bytes, result.level
                )
            )
        return result

    def encode_at_level(
        self,
        img: Image.Image,
        format_name: str,
        level: int,
        **extra: Any,
    ) -> bytes:
        """按指定等级编码已准备好的图片"""
        format_name = get_format_alias(format_name)
        match format_name:
            case "JPEG":
                return encode_image(img, "JPEG", **self._jpeg_params(level), **extra)
            case "PNG":
                return self._encode_png(img, level, **extra)
            case _:
                raise UnsupportedFormatError(f"不支持按等级编码的格式: {format_name}")

    def _search(
        self,
        img: Image.Image,
        format_name: str,
        target_bytes: int,
        extra: dict[str, Any],
    ) -> OptimizationResult:
        """粗细两步搜索，返回满足目标的最高等级"""
        attempts = 0

        def attempt(level: int) -> bytes:
            nonlocal attempts
            attempts += 1
            encoded = self.encode_at_level(img, format_name, level, **extra)
            logger.debug(f"{format_name} 等级 {level}: {len(encoded)} 字节")
            return encoded

        previous_level: int | None = None
        encoded = b""
        coarse_levels = self.levels_for(format_name)

        for level in coarse_levels:
            encoded = attempt(level)
            if len(encoded) <= target_bytes:
                break
            previous_level = level
        else:
            # 最低等级也无法满足，返回最低等级的结果
            return OptimizationResult(
                data=encoded,
                format=format_name,
                level=coarse_levels[-1],
                attempts=attempts,
                target_bytes=target_bytes,
                constraint_met=False,
            )

        best_level, best_data = level, encoded

        # 在上一个不满足的粗等级与当前等级之间逐级细化
        if previous_level is not None:
            for fine_level in range(previous_level - 1, level, -1):
                candidate = attempt(fine_level)
                if len(candidate) <= target_bytes:
                    best_level, best_data = fine_level, candidate
                    break

        return OptimizationResult(
            data=best_data,
            format=format_name,
            level=best_level,
            attempts=attempts,
            target_bytes=target_bytes,
            constraint_met=True,
        )

    def _get_level_range(self, format_name: str) -> tuple[int, int]:
        format_name = get_format_alias(format_name)
        if format_name not in self.level_ranges:
            raise UnsupportedFormatError(
                f"不支持目标大小优化的格式: {format_name}，"
                f"支持的格式: {sorted(self.level_ranges)}"
            )
        return self.level_ranges[format_name]

    @staticmethod
    def _carry_metadata(img: Image.Image, format_name: str) -> dict[str, Any]:
        """保留 ICC 配置文件和 JPEG 的 EXIF 信息"""
        extra: dict[str, Any] = {}
        if icc := img.info.get("icc_profile"):
            extra["icc_profile"] = icc
        if format_name == "JPEG" and (exif := img.info.get("exif")):
            extra["exif"] = exif
        return extra

    @staticmethod
    def _jpeg_params(level: int) -> dict[str, Any]:
        """JPEG 等级参数：等级即 quality，高质量时使用较轻的色度子采样"""
        return {
            "quality": level,
            "optimize": True,
            "subsampling": 1 if level >= 85 else 2,  # 4:2:2 / 4:2:0
        }

    @handle_image_errors("PNG 量化编码", EncodeError)
    def _encode_png(self, img: Image.Image, level: int, **extra: Any) -> bytes:
        """PNG 等级编码：最高等级为无损全彩色，其余等级量化为调色板"""
        max_level, _ = self._get_level_range("PNG")
        if level >= max_level:
            return encode_image(img, "PNG", optimize=True, **extra)

        colors = max(2, 256 * level // 100)
        return encode_image(
            self._quantize(img, colors), "PNG", optimize=True, **extra
        )

    @staticmethod
    def _quantize(img: Image.Image, colors: int) -> Image.Image:
        """量化到指定颜色数，透明图片由 Pillow 自动使用 FASTOCTREE"""
        if img.mode not in ("RGB", "RGBA"):
            img = img.convert("RGBA" if has_alpha(img) else "RGB")
        return img.quantize(colors=colors)
