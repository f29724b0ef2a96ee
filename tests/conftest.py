"""测试配置文件。

提供测试所需的fixtures和配置，所有测试图片都在内存中按固定图案生成。
"""

import random
from collections.abc import Callable
from io import BytesIO
from pathlib import Path

import pytest
from PIL import Image, ImageDraw

from py_image_convert_mcp.config import reset_config


ImageFactory = Callable[..., bytes]


def _pattern_image(size: tuple[int, int], mode: str = "RGB") -> Image.Image:
    """创建带色块图案的图片，透明模式下左上角完全透明"""
    width, height = size
    background = (0, 0, 0, 0) if mode == "RGBA" else "white"
    img = Image.new(mode, size, color=background)
    draw = ImageDraw.Draw(img)

    for i in range(12):
        x, y = (i * 37) % width, (i * 23) % height
        color = (i * 20 % 256, 100 + i * 13 % 156, 255 - i * 19 % 256)
        if mode == "RGBA":
            color = (*color, 120 + i * 11 % 136)
        draw.rectangle([x, y, x + width // 4, y + height // 4], fill=color)

    if mode == "RGBA":
        draw.rectangle([0, 0, width // 2, height // 2], fill=(0, 0, 0, 0))
    return img


def _noise_image(size: tuple[int, int], seed: int = 7) -> Image.Image:
    """创建固定种子的随机噪声图片，难以压缩"""
    rng = random.Random(seed)
    width, height = size
    return Image.frombytes("RGB", size, rng.randbytes(width * height * 3))


def _encode(img: Image.Image, format_name: str, **params) -> bytes:
    buffer = BytesIO()
    img.save(buffer, format=format_name, **params)
    return buffer.getvalue()


@pytest.fixture(autouse=True)
def fresh_config():
    """每个测试使用干净的全局配置"""
    reset_config()
    yield
    reset_config()


@pytest.fixture
def make_image() -> ImageFactory:
    """图片字节工厂

    make_image("PNG", size=(64, 48), mode="RGBA", noise=False)
    """

    def factory(
        format_name: str,
        size: tuple[int, int] = (64, 48),
        mode: str = "RGB",
        noise: bool = False,
        **params,
    ) -> bytes:
        img = _noise_image(size) if noise else _pattern_image(size, mode)
        if format_name == "JPEG":
            params.setdefault("quality", 95)
        return _encode(img, format_name, **params)

    return factory


@pytest.fixture
def png_bytes(make_image: ImageFactory) -> bytes:
    return make_image("PNG")


@pytest.fixture
def rgba_png_bytes(make_image: ImageFactory) -> bytes:
    return make_image("PNG", mode="RGBA")


@pytest.fixture
def webp_bytes(make_image: ImageFactory) -> bytes:
    return make_image("WEBP", quality=90)


@pytest.fixture
def jpeg_bytes(make_image: ImageFactory) -> bytes:
    return make_image("JPEG")


@pytest.fixture
def photo_jpeg_bytes(make_image: ImageFactory) -> bytes:
    """256x256 噪声 JPEG，质量阶梯上的体积差异明显"""
    return make_image("JPEG", size=(256, 256), noise=True)


@pytest.fixture
def noisy_png_bytes(make_image: ImageFactory) -> bytes:
    """512x512 噪声 PNG，最低等级也无法压到很小的目标"""
    return make_image("PNG", size=(512, 512), noise=True)


@pytest.fixture
def write_image(tmp_path: Path, make_image: ImageFactory) -> Callable[..., Path]:
    """将生成的图片写入临时目录并返回路径"""

    def writer(name: str, format_name: str, **kwargs) -> Path:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(make_image(format_name, **kwargs))
        return path

    return writer


def open_image(data: bytes) -> Image.Image:
    """打开输出字节并完全载入"""
    img = Image.open(BytesIO(data))
    img.load()
    return img


@pytest.fixture
def decode() -> Callable[[bytes], Image.Image]:
    return open_image
