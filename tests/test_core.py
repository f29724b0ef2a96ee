"""核心功能测试。

测试解码、格式转换和目标大小优化。
"""

import pytest
from PIL import Image

from py_image_convert_mcp.core.formats import (
    FLATTEN_BACKGROUND,
    FormatProcessor,
    decode_image,
    encode_image,
    get_save_parameters,
)
from py_image_convert_mcp.core.optimizer import SizeOptimizer
from py_image_convert_mcp.core.transcoder import FormatConverter
from py_image_convert_mcp.exceptions import DecodeError, EncodeError, ValidationError


class TestDecode:
    """解码测试"""

    def test_decode_matching_format(self, png_bytes: bytes):
        img = decode_image(png_bytes, "PNG", "a.png")
        assert img.format == "PNG"
        assert img.size == (64, 48)

    def test_empty_input_rejected(self):
        with pytest.raises(DecodeError) as exc_info:
            decode_image(b"", "PNG", "empty.png")
        assert "empty.png" in exc_info.value.message

    def test_wrong_format_rejected(self, png_bytes: bytes):
        """PNG 字节按 WebP 解码应失败"""
        with pytest.raises(DecodeError):
            decode_image(png_bytes, "WEBP", "fake.webp")

    def test_garbage_rejected(self):
        with pytest.raises(DecodeError):
            decode_image(b"definitely not an image", "PNG", "bad.png")

    def test_truncated_data_rejected(self, png_bytes: bytes):
        with pytest.raises(DecodeError):
            decode_image(png_bytes[: len(png_bytes) // 2], "PNG", "cut.png")

    def test_jpg_alias(self, jpeg_bytes: bytes):
        img = decode_image(jpeg_bytes, "jpg")
        assert img.format == "JPEG"


class TestFormatProcessor:
    """格式预处理测试"""

    def test_flatten_alpha_onto_white(self, rgba_png_bytes: bytes):
        img = decode_image(rgba_png_bytes, "PNG")
        prepared = FormatProcessor().prepare_for_format(img, "JPEG")

        assert prepared.mode == "RGB"
        assert prepared.size == img.size
        assert prepared.getpixel((0, 0)) == FLATTEN_BACKGROUND

    def test_alpha_kept_for_webp(self, rgba_png_bytes: bytes):
        img = decode_image(rgba_png_bytes, "PNG")
        prepared = FormatProcessor().prepare_for_format(img, "WEBP")
        assert prepared.mode == "RGBA"

    def test_palette_converted_for_webp(self):
        img = Image.new("P", (8, 8), 3)
        prepared = FormatProcessor().prepare_for_format(img, "WEBP")
        assert prepared.mode == "RGB"

    def test_jpeg_encode_falls_back_without_optimize(self, make_image, decode):
        img = decode_image(make_image("JPEG", size=(256, 256), noise=True), "JPEG")
        data = encode_image(img, "JPEG", quality=94, optimize=True)
        assert decode(data).size == (256, 256)

    def test_unencodable_mode_still_fails(self):
        with pytest.raises(EncodeError):
            encode_image(Image.new("RGBA", (4, 4)), "JPEG", optimize=True)

    def test_save_parameters_from_config(self, monkeypatch):
        from py_image_convert_mcp.config import reset_config

        monkeypatch.setenv("IMGCONV_WEBP_QUALITY", "60")
        reset_config()

        params = get_save_parameters("WEBP")
        assert params["quality"] == 60
        assert params["method"] == 6


class TestFormatConverter:
    """格式转换测试"""

    @pytest.fixture
    def converter(self):
        return FormatConverter()

    def test_webp_to_png(self, converter, webp_bytes: bytes, decode):
        output = converter.convert(webp_bytes, "WEBP", "PNG")
        img = decode(output)

        assert img.format == "PNG"
        assert img.size == (64, 48)

    def test_png_to_webp_keeps_alpha(self, converter, rgba_png_bytes: bytes, decode):
        output = converter.convert(rgba_png_bytes, "PNG", "WEBP")
        img = decode(output)

        assert img.format == "WEBP"
        assert img.mode == "RGBA"
        assert img.size == (64, 48)
        assert img.getpixel((0, 0))[3] == 0

    def test_png_to_jpeg_flattens_alpha(
        self, converter, rgba_png_bytes: bytes, decode
    ):
        output = converter.convert(rgba_png_bytes, "PNG", "JPEG")
        img = decode(output)

        assert img.format == "JPEG"
        assert img.mode == "RGB"
        # 透明区域合成为白色，JPEG 有损只允许少量偏差
        assert all(channel >= 245 for channel in img.getpixel((4, 4)))

    def test_conversion_is_deterministic(self, converter, png_bytes: bytes):
        first = converter.convert(png_bytes, "PNG", "WEBP")
        second = converter.convert(png_bytes, "PNG", "WEBP")
        assert first == second

    def test_large_dimensions_preserved(self, converter, make_image, decode):
        data = make_image("WEBP", size=(333, 127))
        img = decode(converter.convert(data, "WEBP", "PNG"))
        assert img.size == (333, 127)

    def test_wrong_source_format(self, converter, png_bytes: bytes):
        with pytest.raises(DecodeError):
            converter.convert(png_bytes, "WEBP", "PNG", "mislabeled.webp")


class TestSizeOptimizer:
    """目标大小优化测试"""

    @pytest.fixture
    def optimizer(self):
        return SizeOptimizer()

    def test_default_ladders(self, optimizer):
        assert optimizer.levels_for("JPEG") == [95, 85, 75, 65, 55, 45, 35, 25, 15, 5]
        assert optimizer.levels_for("PNG") == [
            100, 90, 80, 70, 60, 50, 40, 30, 20, 10, 4,
        ]

    def test_custom_ladder_ends_on_minimum(self):
        optimizer = SizeOptimizer(coarse_step=30, level_ranges={"JPEG": (90, 10)})
        assert optimizer.levels_for("JPEG") == [90, 60, 30, 10]

    def test_invalid_configuration(self):
        with pytest.raises(ValidationError):
            SizeOptimizer(level_ranges={"JPEG": (10, 50)})

    def test_unsupported_format(self, optimizer, webp_bytes: bytes):
        with pytest.raises(ValidationError):
            optimizer.optimize(webp_bytes, "WEBP", 10)

    @pytest.mark.parametrize("target", [0, -5])
    def test_invalid_target(self, optimizer, jpeg_bytes: bytes, target: int):
        with pytest.raises(ValidationError):
            optimizer.optimize(jpeg_bytes, "JPEG", target)

    def test_generous_target_keeps_highest_level(self, optimizer, jpeg_bytes: bytes):
        result = optimizer.optimize(jpeg_bytes, "JPEG", 10_000)

        assert result.constraint_met
        assert result.level == 95
        assert result.attempts == 1

    def test_fitting_target_respected(
        self, optimizer, photo_jpeg_bytes: bytes, decode
    ):
        result = optimizer.optimize(photo_jpeg_bytes, "JPEG", 20)

        assert result.constraint_met
        assert result.size <= 20 * 1024
        assert decode(result.data).format == "JPEG"

    def test_chosen_level_is_highest_fitting_neighbour(
        self, optimizer, photo_jpeg_bytes: bytes
    ):
        """选中等级的上一级一定超出目标"""
        target_kb = 20
        result = optimizer.optimize(photo_jpeg_bytes, "JPEG", target_kb)
        assert result.level < 95

        img = decode_image(photo_jpeg_bytes, "JPEG")
        above = optimizer.encode_at_level(img, "JPEG", result.level + 1)
        assert len(above) > target_kb * 1024

    def test_every_jpeg_level_encodes_detailed_image(
        self, optimizer, photo_jpeg_bytes: bytes, decode
    ):
        """高细节图片在每个 JPEG 等级都能编码"""
        img = decode_image(photo_jpeg_bytes, "JPEG")
        for level in range(95, 4, -1):
            data = optimizer.encode_at_level(img, "JPEG", level)
            assert decode(data).format == "JPEG"

    def test_detailed_jpeg_optimizes_without_error(
        self, optimizer, photo_jpeg_bytes: bytes
    ):
        result = optimizer.optimize(photo_jpeg_bytes, "JPEG", 60)
        assert 5 <= result.level <= 95
        assert result.size <= 60 * 1024 or not result.constraint_met

    def test_attempts_bounded(self, optimizer, photo_jpeg_bytes: bytes):
        result = optimizer.optimize(photo_jpeg_bytes, "JPEG", 20)
        levels = optimizer.levels_for("JPEG")
        assert result.attempts <= len(levels) + optimizer.coarse_step - 1

    def test_unreachable_target_returns_minimum_level(
        self, optimizer, noisy_png_bytes: bytes
    ):
        result = optimizer.optimize(noisy_png_bytes, "PNG", 1)

        assert not result.constraint_met
        assert result.level == 4
        assert result.attempts == len(optimizer.levels_for("PNG"))

        img = decode_image(noisy_png_bytes, "PNG")
        prepared = FormatProcessor().prepare_for_format(img, "PNG")
        assert result.data == optimizer.encode_at_level(prepared, "PNG", 4)

    def test_unreachable_jpeg_target(self, optimizer, make_image):
        data = make_image("JPEG", size=(512, 512), noise=True)
        result = optimizer.optimize(data, "JPEG", 1)

        assert not result.constraint_met
        assert result.level == 5

    def test_optimization_is_deterministic(self, optimizer, noisy_png_bytes: bytes):
        first = optimizer.optimize(noisy_png_bytes, "PNG", 200)
        second = optimizer.optimize(noisy_png_bytes, "PNG", 200)

        assert first.data == second.data
        assert first.level == second.level

    def test_smaller_target_never_raises_level(
        self, optimizer, photo_jpeg_bytes: bytes
    ):
        levels = [
            optimizer.optimize(photo_jpeg_bytes, "JPEG", target).level
            for target in (200, 60, 30, 20, 12, 8, 4, 1)
        ]
        assert levels == sorted(levels, reverse=True)

    def test_png_keeps_dimensions_and_alpha(self, optimizer, rgba_png_bytes, decode):
        result = optimizer.optimize(rgba_png_bytes, "PNG", 1)
        img = decode(result.data)

        assert img.format == "PNG"
        assert img.size == (64, 48)
        assert "A" in img.mode or "transparency" in img.info

    def test_png_quantized_levels_shrink_output(self, optimizer, noisy_png_bytes):
        img = decode_image(noisy_png_bytes, "PNG")
        lossless = optimizer.encode_at_level(img, "PNG", 100)
        quantized = optimizer.encode_at_level(img, "PNG", 4)
        assert len(quantized) < len(lossless)
